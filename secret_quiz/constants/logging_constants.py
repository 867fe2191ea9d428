"""Logging configuration constants for the secret quiz service."""

LOGGER_NAME: str = "secret_quiz"
DEFAULT_LOG_LEVEL: str = "INFO"
LOG_FORMAT: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
# Per-request access lines from uvicorn; state changes are already logged by the manager.
ACCESS_LOGGER_NAME: str = "uvicorn.access"
