"""Static metadata describing SecretQuiz."""

APP_NAME = "SecretQuiz"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "SecretQuiz lets creators publish quizzes whose correct answers stay encrypted. "
    "Participants submit encrypted answers, receive an encrypted score only they can "
    "decrypt, and claim reward points once their score meets the pass threshold."
)
