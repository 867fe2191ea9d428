"""Service that lets a participant unlock decryption of their own score."""

from __future__ import annotations

from secret_quiz.core.ciphertext import CiphertextGateway
from secret_quiz.core.errors import NotOwner
from secret_quiz.core.models import Submission


class DecryptionGate:
    """Grants a submission's owner access to its encrypted score, once."""

    def __init__(self, gateway: CiphertextGateway) -> None:
        self._gateway = gateway

    def allow(self, submission: Submission, caller: str) -> bool:
        """Grant access and mark the submission decrypted.

        Returns ``True`` when the grant was made by this call and ``False`` when
        the submission was already decrypted (the call is then a no-op).
        """
        if submission.participant != caller:
            raise NotOwner(f"Not your submission: {submission.id}")
        if submission.has_decrypted:
            return False
        self._gateway.grant_decrypt_access(submission.encrypted_score, submission.participant)
        submission.has_decrypted = True
        return True
