"""Application entry point for the SecretQuiz development server."""

from __future__ import annotations

from secret_quiz.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from secret_quiz.core.mock_fhe_runtime import MockFheRuntime
from secret_quiz.core.quiz_manager import SecretQuizManager
from secret_quiz.server.api_server import run_api_server
from secret_quiz.utils.logging_config import configure_logging


def build_manager() -> SecretQuizManager:
    """Wire the quiz facade to the in-process encryption runtime."""
    runtime = MockFheRuntime()
    return SecretQuizManager(gateway=runtime, ops=runtime)


def main() -> None:
    """Initialize logging and serve the API until interrupted."""
    logger = configure_logging()
    logger.info("Starting SecretQuiz with the mock encryption runtime")

    quiz_manager = build_manager()
    logger.info("API available at http://%s:%s/", DEFAULT_HOST, DEFAULT_PORT)
    run_api_server(quiz_manager=quiz_manager, host=DEFAULT_HOST, port=DEFAULT_PORT)


if __name__ == "__main__":
    main()
