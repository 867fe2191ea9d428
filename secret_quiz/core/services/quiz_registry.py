"""Service that validates, stores and looks up quizzes."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from secret_quiz.constants.quiz_constants import MIN_SINGLE_CHOICE_OPTIONS, OPTION_SEPARATOR, UINT64_MAX
from secret_quiz.core.ciphertext import Ciphertext
from secret_quiz.core.errors import InvalidQuizDefinition, NotCreator, NotFound, ShapeMismatch
from secret_quiz.core.models import Category, Difficulty, QuestionType, Quiz, QuizDraft, QuizQuestion


class QuizRegistry:
    """Owns every quiz and its encrypted reference answers. Quizzes are never deleted."""

    def __init__(self) -> None:
        self._quizzes: list[Quiz] = []
        self._by_creator: dict[str, list[int]] = {}

    def prepare_draft(
        self,
        creator: str,
        title: str,
        description: str,
        category: int,
        difficulty: int,
        question_texts: Sequence[str],
        question_types: Sequence[int],
        question_options: Sequence[Sequence[str]],
        answer_count: int,
        proof_count: int,
        reward_amount: int,
        pass_threshold: int,
    ) -> QuizDraft:
        """Validate a creation request and return it as a draft. Writes nothing."""
        question_count = len(question_texts)
        if not question_count == answer_count == proof_count:
            raise ShapeMismatch(
                f"Questions and answers length mismatch: {question_count} questions, "
                f"{answer_count} answers, {proof_count} proofs"
            )
        if len(question_types) != question_count or len(question_options) != question_count:
            raise ShapeMismatch("Question types and options must have one entry per question")
        if question_count == 0:
            raise ShapeMismatch("Quiz must contain at least one question")

        cleaned_title = title.strip()
        if not cleaned_title:
            raise InvalidQuizDefinition("Quiz title must not be empty.")

        questions = tuple(
            self._prepare_question(text, question_type, options)
            for text, question_type, options in zip(question_texts, question_types, question_options)
        )
        return QuizDraft(
            creator=creator,
            title=cleaned_title,
            description=description.strip(),
            category=self._parse_enum(Category, category, "category"),
            difficulty=self._parse_enum(Difficulty, difficulty, "difficulty"),
            questions=questions,
            reward_amount=self._validate_amount(reward_amount, "Reward amount"),
            pass_threshold=self._validate_amount(pass_threshold, "Pass threshold"),
        )

    def register(self, draft: QuizDraft, reference_answers: Sequence[Ciphertext], created_at: datetime) -> Quiz:
        if len(reference_answers) != len(draft.questions):
            raise ShapeMismatch("Questions and answers length mismatch")
        quiz = Quiz(
            id=len(self._quizzes),
            creator=draft.creator,
            title=draft.title,
            description=draft.description,
            category=draft.category,
            difficulty=draft.difficulty,
            questions=draft.questions,
            reference_answers=tuple(reference_answers),
            reward_amount=draft.reward_amount,
            pass_threshold=draft.pass_threshold,
            created_at=created_at,
        )
        self._quizzes.append(quiz)
        self._by_creator.setdefault(quiz.creator, []).append(quiz.id)
        return quiz

    def get(self, quiz_id: int) -> Quiz:
        if not 0 <= quiz_id < len(self._quizzes):
            raise NotFound(f"Quiz {quiz_id} does not exist")
        return self._quizzes[quiz_id]

    def get_question(self, quiz_id: int, index: int) -> QuizQuestion:
        quiz = self.get(quiz_id)
        if not 0 <= index < quiz.question_count:
            raise NotFound(f"Question index {index} out of range for quiz {quiz_id}")
        return quiz.questions[index]

    def end(self, quiz_id: int, caller: str) -> Quiz:
        """Deactivate a quiz. One-way; ending an ended quiz is allowed and changes nothing."""
        quiz = self.get(quiz_id)
        if quiz.creator != caller:
            raise NotCreator(f"Not quiz creator of quiz {quiz_id}")
        quiz.is_active = False
        return quiz

    def get_quizzes(self) -> list[Quiz]:
        return list(self._quizzes)

    def get_total(self) -> int:
        return len(self._quizzes)

    def get_creator_quizzes(self, creator: str) -> list[int]:
        return list(self._by_creator.get(creator, []))

    def _prepare_question(self, text: str, question_type: int, options: Sequence[str]) -> QuizQuestion:
        cleaned_text = text.strip()
        if not cleaned_text:
            raise InvalidQuizDefinition("Question text must not be empty.")
        parsed_type = self._parse_enum(QuestionType, question_type, "question type")
        cleaned_options = self._validate_options(parsed_type, options)
        return QuizQuestion(text=cleaned_text, question_type=parsed_type, options=cleaned_options)

    @staticmethod
    def _validate_options(question_type: QuestionType, options: Sequence[str]) -> tuple[str, ...]:
        cleaned = tuple(option.strip() for option in options)
        if question_type is QuestionType.FILL_IN_BLANK:
            if any(cleaned):
                raise InvalidQuizDefinition("Fill-in-blank questions take no options.")
            return ()
        if len(cleaned) < MIN_SINGLE_CHOICE_OPTIONS:
            raise InvalidQuizDefinition(
                f"Single-choice questions need at least {MIN_SINGLE_CHOICE_OPTIONS} options."
            )
        if any(not option for option in cleaned):
            raise InvalidQuizDefinition("Option text cannot be empty.")
        if any(OPTION_SEPARATOR in option for option in cleaned):
            raise InvalidQuizDefinition(f"Option text cannot contain '{OPTION_SEPARATOR}'.")
        return cleaned

    @staticmethod
    def _parse_enum(enum_type, value: int, label: str):
        try:
            return enum_type(value)
        except ValueError as exc:
            raise InvalidQuizDefinition(f"Unknown {label}: {value!r}") from exc

    @staticmethod
    def _validate_amount(value: int, label: str) -> int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidQuizDefinition(f"{label} must be an integer.")
        if not 0 <= value <= UINT64_MAX:
            raise InvalidQuizDefinition(f"{label} must be between 0 and {UINT64_MAX}.")
        return value
