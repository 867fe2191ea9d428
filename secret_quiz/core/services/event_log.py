"""Append-only journal of committed quiz state changes."""

from __future__ import annotations

from secret_quiz.core.models import QuizEvent

QUIZ_CREATED = "QuizCreated"
QUIZ_ENDED = "QuizEnded"
ANSWERS_SUBMITTED = "AnswersSubmitted"
DECRYPTION_ALLOWED = "DecryptionAllowed"
REWARD_CLAIMED = "RewardClaimed"


class EventLog:
    """Stores events in commit order; sequence numbers start at 0 and never repeat."""

    def __init__(self) -> None:
        self._events: list[QuizEvent] = []

    def record(
        self,
        name: str,
        account: str,
        quiz_id: int,
        submission_id: int | None = None,
        amount: int | None = None,
    ) -> QuizEvent:
        event = QuizEvent(
            sequence=len(self._events),
            name=name,
            account=account,
            quiz_id=quiz_id,
            submission_id=submission_id,
            amount=amount,
        )
        self._events.append(event)
        return event

    def get_events(self, since: int = 0) -> list[QuizEvent]:
        return self._events[max(since, 0):]

    def get_count(self) -> int:
        return len(self._events)
