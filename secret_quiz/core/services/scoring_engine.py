"""Service that scores encrypted submissions and keeps the submission arena."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from secret_quiz.constants.quiz_constants import POINTS_PER_CORRECT_ANSWER
from secret_quiz.core.ciphertext import Ciphertext, HomomorphicOps
from secret_quiz.core.errors import AlreadySubmitted, NotFound, QuizInactive, ShapeMismatch
from secret_quiz.core.models import Quiz, Submission


class ScoringEngine:
    """Computes encrypted scores and records one submission per (quiz, participant)."""

    def __init__(self, ops: HomomorphicOps, points_per_correct: int = POINTS_PER_CORRECT_ANSWER) -> None:
        if points_per_correct <= 0:
            raise ValueError("Points per correct answer must be positive.")
        self._ops = ops
        self._points_per_correct = points_per_correct
        self._submissions: list[Submission] = []
        self._by_participant: dict[str, list[int]] = {}
        self._by_quiz_participant: dict[tuple[int, str], int] = {}
        self._weight: Ciphertext | None = None
        self._zero: Ciphertext | None = None

    @property
    def points_per_correct(self) -> int:
        return self._points_per_correct

    def check_submission(self, quiz: Quiz, participant: str, answer_count: int, proof_count: int) -> None:
        """Raise if ``participant`` may not submit ``answer_count`` answers to ``quiz``."""
        if not quiz.is_active:
            raise QuizInactive(f"Quiz {quiz.id} is not active")
        if answer_count != proof_count:
            raise ShapeMismatch(f"{answer_count} answers but {proof_count} proofs")
        if answer_count != quiz.question_count:
            raise ShapeMismatch(
                f"Answer count mismatch: quiz {quiz.id} has {quiz.question_count} questions, got {answer_count}"
            )
        if (quiz.id, participant) in self._by_quiz_participant:
            raise AlreadySubmitted(f"Already submitted to quiz {quiz.id}")

    def compute_score(self, answers: Sequence[Ciphertext], references: Sequence[Ciphertext]) -> Ciphertext:
        """Sum ``select(answer == reference, weight, 0)`` over all questions, entirely under encryption."""
        if len(answers) != len(references):
            raise ShapeMismatch("Answers and reference answers differ in length")
        weight, zero = self._constants()
        score = zero
        for answer, reference in zip(answers, references):
            is_correct = self._ops.eq(answer, reference)
            score = self._ops.add(score, self._ops.select(is_correct, weight, zero))
        return score

    def _constants(self) -> tuple[Ciphertext, Ciphertext]:
        # Encrypted once per engine and shared by every submission.
        if self._weight is None or self._zero is None:
            self._weight = self._ops.encrypt_constant(self._points_per_correct)
            self._zero = self._ops.encrypt_constant(0)
        return self._weight, self._zero

    def record(
        self,
        quiz: Quiz,
        participant: str,
        answers: Sequence[Ciphertext],
        encrypted_score: Ciphertext,
        submitted_at: datetime,
    ) -> Submission:
        """Store a scored submission and count the participant on the quiz."""
        self.check_submission(quiz, participant, len(answers), len(answers))
        submission = Submission(
            id=len(self._submissions),
            quiz_id=quiz.id,
            participant=participant,
            answers=tuple(answers),
            encrypted_score=encrypted_score,
            submitted_at=submitted_at,
        )
        self._submissions.append(submission)
        self._by_participant.setdefault(participant, []).append(submission.id)
        self._by_quiz_participant[(quiz.id, participant)] = submission.id
        quiz.participant_count += 1
        return submission

    def get(self, submission_id: int) -> Submission:
        if not 0 <= submission_id < len(self._submissions):
            raise NotFound(f"Submission {submission_id} does not exist")
        return self._submissions[submission_id]

    def get_total(self) -> int:
        return len(self._submissions)

    def get_user_submissions(self, participant: str) -> list[int]:
        return list(self._by_participant.get(participant, []))

    def find(self, quiz_id: int, participant: str) -> int | None:
        return self._by_quiz_participant.get((quiz_id, participant))
