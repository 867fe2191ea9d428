"""Error kinds raised by the secret quiz core.

Every error carries a stable ``code`` so callers can branch on the kind of
failure without parsing messages. An error always means the whole operation
was rejected and no state was written.
"""

from __future__ import annotations


class SecretQuizError(Exception):
    """Base class for all rejections raised by the quiz core."""

    code: str = "SecretQuizError"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class ShapeMismatch(SecretQuizError):
    """Raised when parallel input sequences differ in length."""

    code = "ShapeMismatch"


class InvalidQuizDefinition(SecretQuizError):
    """Raised when quiz content is malformed (blank text, bad options, negative amounts)."""

    code = "InvalidQuizDefinition"


class InvalidProof(SecretQuizError):
    """Raised by the ciphertext gateway when a ciphertext/proof pair does not validate."""

    code = "InvalidProof"


class NotFound(SecretQuizError):
    """Raised for an unknown quiz, submission or question index."""

    code = "NotFound"


class NotCreator(SecretQuizError):
    code = "NotCreator"


class NotOwner(SecretQuizError):
    code = "NotOwner"


class QuizInactive(SecretQuizError):
    code = "QuizInactive"


class AlreadySubmitted(SecretQuizError):
    code = "AlreadySubmitted"


class MustDecryptFirst(SecretQuizError):
    code = "MustDecryptFirst"


class AlreadyClaimed(SecretQuizError):
    code = "AlreadyClaimed"


class BelowThreshold(SecretQuizError):
    code = "BelowThreshold"
