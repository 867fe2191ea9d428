"""Business logic for encrypted quizzes shared between the API and other callers."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
import logging
from threading import Lock

from secret_quiz.constants.quiz_constants import POINTS_PER_CORRECT_ANSWER
from secret_quiz.core.ciphertext import Ciphertext, CiphertextGateway, HomomorphicOps
from secret_quiz.core.errors import SecretQuizError
from secret_quiz.core.models import (
    QuizEvent,
    QuizQuestion,
    QuizSummary,
    SubmissionSummary,
    utcnow,
)
from secret_quiz.core.services import event_log as events
from secret_quiz.core.services.decryption_gate import DecryptionGate
from secret_quiz.core.services.event_log import EventLog
from secret_quiz.core.services.quiz_registry import QuizRegistry
from secret_quiz.core.services.reward_ledger import RewardLedger
from secret_quiz.core.services.scoring_engine import ScoringEngine

logger = logging.getLogger(__name__)


def normalize_account(account: str) -> str:
    """Identities are compared case-insensitively, like hex wallet addresses."""
    return account.strip().lower()


class SecretQuizManager:
    """Facade for quiz services: Registry, Scoring, Decryption Gate, Reward Ledger.

    Every public method runs under a single lock, so each operation is one
    atomic step: all validation and ciphertext imports happen before the first
    write, and a rejected operation leaves no trace.
    """

    def __init__(
        self,
        gateway: CiphertextGateway,
        ops: HomomorphicOps,
        points_per_correct: int = POINTS_PER_CORRECT_ANSWER,
    ) -> None:
        self._lock = Lock()
        self._gateway = gateway

        # Services
        self._registry = QuizRegistry()
        self._scoring = ScoringEngine(ops, points_per_correct)
        self._gate = DecryptionGate(gateway)
        self._ledger = RewardLedger()
        self._events = EventLog()

    @property
    def points_per_correct(self) -> int:
        return self._scoring.points_per_correct

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[None]:
        with self._lock:
            try:
                yield
            except SecretQuizError as exc:
                logger.warning("%s rejected: %s (%s)", operation, exc.code, exc.message)
                raise

    def _import_all(self, handles: Sequence[bytes], proofs: Sequence[bytes], caller: str) -> list[Ciphertext]:
        return [
            self._gateway.verify_and_import(handle, proof, caller)
            for handle, proof in zip(handles, proofs)
        ]

    # --- Quiz Registry ---

    def create_quiz(
        self,
        caller: str,
        title: str,
        description: str,
        category: int,
        difficulty: int,
        question_texts: Sequence[str],
        question_types: Sequence[int],
        question_options: Sequence[Sequence[str]],
        encrypted_answers: Sequence[bytes],
        proofs: Sequence[bytes],
        reward_amount: int,
        pass_threshold: int,
    ) -> int:
        creator = normalize_account(caller)
        with self._transaction("create_quiz"):
            draft = self._registry.prepare_draft(
                creator=creator,
                title=title,
                description=description,
                category=category,
                difficulty=difficulty,
                question_texts=question_texts,
                question_types=question_types,
                question_options=question_options,
                answer_count=len(encrypted_answers),
                proof_count=len(proofs),
                reward_amount=reward_amount,
                pass_threshold=pass_threshold,
            )
            references = self._import_all(encrypted_answers, proofs, creator)
            quiz = self._registry.register(draft, references, created_at=utcnow())
            self._events.record(events.QUIZ_CREATED, creator, quiz.id, amount=quiz.reward_amount)
        logger.info("Quiz %s created by %s with %s questions", quiz.id, creator, quiz.question_count)
        return quiz.id

    def end_quiz(self, caller: str, quiz_id: int) -> None:
        creator = normalize_account(caller)
        with self._transaction("end_quiz"):
            quiz = self._registry.get(quiz_id)
            was_active = quiz.is_active
            self._registry.end(quiz_id, creator)
            if was_active:
                self._events.record(events.QUIZ_ENDED, creator, quiz_id)
        if was_active:
            logger.info("Quiz %s ended by %s", quiz_id, creator)

    def get_quiz(self, quiz_id: int) -> QuizSummary:
        with self._lock:
            return QuizSummary.from_quiz(self._registry.get(quiz_id))

    def list_quizzes(self, active_only: bool = False) -> list[QuizSummary]:
        with self._lock:
            return [
                QuizSummary.from_quiz(quiz)
                for quiz in self._registry.get_quizzes()
                if quiz.is_active or not active_only
            ]

    def get_question(self, quiz_id: int, index: int) -> QuizQuestion:
        with self._lock:
            return self._registry.get_question(quiz_id, index)

    def get_total_quizzes(self) -> int:
        with self._lock:
            return self._registry.get_total()

    def get_creator_quizzes(self, account: str) -> list[int]:
        with self._lock:
            return self._registry.get_creator_quizzes(normalize_account(account))

    # --- Scoring Engine ---

    def submit_answers(
        self,
        caller: str,
        quiz_id: int,
        encrypted_answers: Sequence[bytes],
        proofs: Sequence[bytes],
    ) -> int:
        participant = normalize_account(caller)
        with self._transaction("submit_answers"):
            quiz = self._registry.get(quiz_id)
            self._scoring.check_submission(quiz, participant, len(encrypted_answers), len(proofs))
            answers = self._import_all(encrypted_answers, proofs, participant)
            score = self._scoring.compute_score(answers, quiz.reference_answers)
            submission = self._scoring.record(quiz, participant, answers, score, submitted_at=utcnow())
            self._events.record(events.ANSWERS_SUBMITTED, participant, quiz_id, submission.id)
        logger.info("Submission %s recorded for quiz %s by %s", submission.id, quiz_id, participant)
        return submission.id

    def get_submission(self, submission_id: int) -> SubmissionSummary:
        with self._lock:
            return SubmissionSummary.from_submission(self._scoring.get(submission_id))

    def get_total_submissions(self) -> int:
        with self._lock:
            return self._scoring.get_total()

    def get_user_submissions(self, account: str) -> list[int]:
        with self._lock:
            return self._scoring.get_user_submissions(normalize_account(account))

    def get_submission_for(self, quiz_id: int, account: str) -> int | None:
        with self._lock:
            return self._scoring.find(quiz_id, normalize_account(account))

    def has_submitted(self, quiz_id: int, account: str) -> bool:
        return self.get_submission_for(quiz_id, account) is not None

    # --- Decryption Gate ---

    def allow_result_decryption(self, caller: str, submission_id: int) -> None:
        participant = normalize_account(caller)
        with self._transaction("allow_result_decryption"):
            submission = self._scoring.get(submission_id)
            granted = self._gate.allow(submission, participant)
            if granted:
                self._events.record(events.DECRYPTION_ALLOWED, participant, submission.quiz_id, submission_id)
        if granted:
            logger.info("Decryption allowed for submission %s", submission_id)

    def get_encrypted_score(self, submission_id: int) -> Ciphertext:
        with self._lock:
            return self._scoring.get(submission_id).encrypted_score

    # --- Reward Ledger ---

    def claim_reward(self, caller: str, submission_id: int, claimed_score: int) -> int:
        """Credit the quiz reward for a passing submission and return the caller's balance."""
        participant = normalize_account(caller)
        with self._transaction("claim_reward"):
            submission = self._scoring.get(submission_id)
            quiz = self._registry.get(submission.quiz_id)
            balance = self._ledger.claim(submission, quiz, participant, claimed_score)
            self._events.record(
                events.REWARD_CLAIMED, participant, quiz.id, submission_id, amount=quiz.reward_amount
            )
        logger.info(
            "Reward of %s claimed for submission %s (claimed score %s)",
            quiz.reward_amount,
            submission_id,
            claimed_score,
        )
        return balance

    def user_points(self, account: str) -> int:
        with self._lock:
            return self._ledger.get_points(normalize_account(account))

    # --- Events ---

    def get_events(self, since: int = 0) -> list[QuizEvent]:
        with self._lock:
            return self._events.get_events(since)
