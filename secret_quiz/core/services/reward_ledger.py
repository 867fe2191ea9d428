"""Service for crediting reward points against decrypted scores."""

from __future__ import annotations

from secret_quiz.core.errors import AlreadyClaimed, BelowThreshold, MustDecryptFirst, NotOwner
from secret_quiz.core.models import Quiz, Submission


class RewardLedger:
    """Tracks accumulated points per account. Balances only ever grow.

    The claimed score is the participant's own decryption of their encrypted
    score. It is trusted as reported; re-deriving it here would require the
    plaintext answers this service never holds.
    """

    def __init__(self) -> None:
        self._points: dict[str, int] = {}

    def check_claim(self, submission: Submission, quiz: Quiz, caller: str, claimed_score: int) -> None:
        if submission.participant != caller:
            raise NotOwner(f"Not your submission: {submission.id}")
        if not submission.has_decrypted:
            raise MustDecryptFirst(f"Must decrypt first: submission {submission.id}")
        if submission.has_claimed_reward:
            raise AlreadyClaimed(f"Reward already claimed for submission {submission.id}")
        if claimed_score < quiz.pass_threshold:
            raise BelowThreshold(
                f"Score below threshold: {claimed_score} < {quiz.pass_threshold}"
            )

    def claim(self, submission: Submission, quiz: Quiz, caller: str, claimed_score: int) -> int:
        """Credit the quiz reward to the participant and return their new balance."""
        self.check_claim(submission, quiz, caller, claimed_score)
        submission.has_claimed_reward = True
        balance = self._points.get(submission.participant, 0) + quiz.reward_amount
        self._points[submission.participant] = balance
        return balance

    def get_points(self, account: str) -> int:
        return self._points.get(account, 0)
