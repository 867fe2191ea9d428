"""Network configuration constants for the secret quiz service."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000
ACCOUNT_HEADER: str = "X-Account"
