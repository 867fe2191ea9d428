"""Domain models for the secret quiz service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum

from secret_quiz.core.ciphertext import Ciphertext


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(IntEnum):
    TECHNOLOGY = 0
    SCIENCE = 1
    BUSINESS = 2
    CUSTOM = 3


class Difficulty(IntEnum):
    EASY = 0
    MEDIUM = 1
    HARD = 2


class QuestionType(IntEnum):
    """Closed set of question kinds. Both are scored as numeric equality."""

    FILL_IN_BLANK = 0
    SINGLE_CHOICE = 1


@dataclass(frozen=True, slots=True)
class QuizQuestion:
    """Question text plus options; a SingleChoice answer is its option index."""

    text: str
    question_type: QuestionType = QuestionType.FILL_IN_BLANK
    options: tuple[str, ...] = ()


@dataclass(slots=True)
class Quiz:
    """Registered quiz. Only ``is_active`` and ``participant_count`` ever change."""

    id: int
    creator: str
    title: str
    description: str
    category: Category
    difficulty: Difficulty
    questions: tuple[QuizQuestion, ...]
    reference_answers: tuple[Ciphertext, ...]
    reward_amount: int
    pass_threshold: int
    created_at: datetime
    is_active: bool = True
    participant_count: int = 0

    @property
    def question_count(self) -> int:
        return len(self.questions)


@dataclass(slots=True)
class Submission:
    """A participant's encrypted answers and the encrypted score computed from them."""

    id: int
    quiz_id: int
    participant: str
    answers: tuple[Ciphertext, ...]
    encrypted_score: Ciphertext
    submitted_at: datetime
    has_decrypted: bool = False
    has_claimed_reward: bool = False


@dataclass(frozen=True, slots=True)
class QuizDraft:
    """Validated creation request, built before any state is written."""

    creator: str
    title: str
    description: str
    category: Category
    difficulty: Difficulty
    questions: tuple[QuizQuestion, ...]
    reward_amount: int
    pass_threshold: int


@dataclass(frozen=True, slots=True)
class QuizSummary:
    """Immutable snapshot returned to consumers. Reference answers are not exposed."""

    id: int
    creator: str
    title: str
    description: str
    category: Category
    difficulty: Difficulty
    question_count: int
    reward_amount: int
    pass_threshold: int
    is_active: bool
    created_at: datetime
    participant_count: int

    @classmethod
    def from_quiz(cls, quiz: Quiz) -> "QuizSummary":
        return cls(
            id=quiz.id,
            creator=quiz.creator,
            title=quiz.title,
            description=quiz.description,
            category=quiz.category,
            difficulty=quiz.difficulty,
            question_count=quiz.question_count,
            reward_amount=quiz.reward_amount,
            pass_threshold=quiz.pass_threshold,
            is_active=quiz.is_active,
            created_at=quiz.created_at,
            participant_count=quiz.participant_count,
        )


@dataclass(frozen=True, slots=True)
class SubmissionSummary:
    """Immutable snapshot of a submission's public state."""

    id: int
    quiz_id: int
    participant: str
    answer_count: int
    submitted_at: datetime
    has_decrypted: bool
    has_claimed_reward: bool

    @classmethod
    def from_submission(cls, submission: Submission) -> "SubmissionSummary":
        return cls(
            id=submission.id,
            quiz_id=submission.quiz_id,
            participant=submission.participant,
            answer_count=len(submission.answers),
            submitted_at=submission.submitted_at,
            has_decrypted=submission.has_decrypted,
            has_claimed_reward=submission.has_claimed_reward,
        )


@dataclass(frozen=True, slots=True)
class QuizEvent:
    """Record of one committed state change."""

    sequence: int
    name: str
    account: str
    quiz_id: int
    submission_id: int | None = None
    amount: int | None = None
    recorded_at: datetime = field(default_factory=utcnow)
