"""Tests for quiz creation, lookup and ending."""

from __future__ import annotations

import pytest

from secret_quiz.core.errors import InvalidProof, InvalidQuizDefinition, NotCreator, NotFound, ShapeMismatch
from secret_quiz.core.mock_fhe_runtime import MockFheRuntime
from secret_quiz.core.models import Category, Difficulty, QuestionType
from secret_quiz.core.quiz_manager import SecretQuizManager

from conftest import ALICE, CREATOR


def _create_kwargs(runtime: MockFheRuntime, answers=(4, 5), **overrides):
    encrypted = [runtime.encrypt_uint64(value, CREATOR) for value in answers]
    kwargs = dict(
        caller=CREATOR,
        title="Math Quiz",
        description="Basic math questions",
        category=Category.TECHNOLOGY,
        difficulty=Difficulty.EASY,
        question_texts=["What is 2 + 2?", "What is 10 - 5?"],
        question_types=[QuestionType.FILL_IN_BLANK, QuestionType.FILL_IN_BLANK],
        question_options=[[], []],
        encrypted_answers=[item.handle for item in encrypted],
        proofs=[item.proof for item in encrypted],
        reward_amount=100,
        pass_threshold=150,
    )
    kwargs.update(overrides)
    return kwargs


def test_create_quiz_with_encrypted_answers(manager: SecretQuizManager, runtime: MockFheRuntime):
    quiz_id = manager.create_quiz(**_create_kwargs(runtime))

    quiz = manager.get_quiz(quiz_id)
    assert quiz_id == 0
    assert quiz.creator == CREATOR.lower()
    assert quiz.title == "Math Quiz"
    assert quiz.question_count == 2
    assert quiz.is_active
    assert quiz.reward_amount == 100
    assert quiz.pass_threshold == 150
    assert quiz.participant_count == 0
    assert manager.get_total_quizzes() == 1


def test_quiz_ids_are_sequential(manager: SecretQuizManager, runtime: MockFheRuntime):
    first = manager.create_quiz(**_create_kwargs(runtime))
    second = manager.create_quiz(**_create_kwargs(runtime))

    assert (first, second) == (0, 1)
    assert manager.get_creator_quizzes(CREATOR) == [0, 1]
    assert manager.get_creator_quizzes(ALICE) == []


def test_mismatched_answer_count_is_rejected(manager: SecretQuizManager, runtime: MockFheRuntime):
    kwargs = _create_kwargs(runtime, answers=(42,))

    with pytest.raises(ShapeMismatch):
        manager.create_quiz(**kwargs)

    assert manager.get_total_quizzes() == 0
    assert manager.get_events() == []


def test_mismatched_proof_count_is_rejected(manager: SecretQuizManager, runtime: MockFheRuntime):
    kwargs = _create_kwargs(runtime)
    kwargs["proofs"] = kwargs["proofs"][:1]

    with pytest.raises(ShapeMismatch):
        manager.create_quiz(**kwargs)

    assert manager.get_total_quizzes() == 0


def test_mismatched_question_types_are_rejected(manager: SecretQuizManager, runtime: MockFheRuntime):
    with pytest.raises(ShapeMismatch):
        manager.create_quiz(**_create_kwargs(runtime, question_types=[QuestionType.FILL_IN_BLANK]))


def test_empty_quiz_is_rejected(manager: SecretQuizManager, runtime: MockFheRuntime):
    kwargs = _create_kwargs(
        runtime,
        answers=(),
        question_texts=[],
        question_types=[],
        question_options=[],
    )

    with pytest.raises(ShapeMismatch):
        manager.create_quiz(**kwargs)


def test_invalid_proof_aborts_whole_creation(manager: SecretQuizManager, runtime: MockFheRuntime):
    kwargs = _create_kwargs(runtime)
    # The second answer was encrypted by someone other than the caller.
    foreign = runtime.encrypt_uint64(5, ALICE)
    kwargs["encrypted_answers"][1] = foreign.handle
    kwargs["proofs"][1] = foreign.proof

    with pytest.raises(InvalidProof):
        manager.create_quiz(**kwargs)

    assert manager.get_total_quizzes() == 0
    assert manager.get_creator_quizzes(CREATOR) == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "   "},
        {"question_texts": ["What is 2 + 2?", " "]},
        {"category": 9},
        {"difficulty": -1},
        {"question_types": [QuestionType.FILL_IN_BLANK, 7]},
        {"reward_amount": -1},
        {"pass_threshold": -5},
        {"question_options": [["4"], []]},
    ],
)
def test_invalid_definitions_are_rejected(manager: SecretQuizManager, runtime: MockFheRuntime, overrides):
    with pytest.raises(InvalidQuizDefinition):
        manager.create_quiz(**_create_kwargs(runtime, **overrides))

    assert manager.get_total_quizzes() == 0


def test_single_choice_question_keeps_options(manager: SecretQuizManager, runtime: MockFheRuntime):
    quiz_id = manager.create_quiz(
        **_create_kwargs(
            runtime,
            answers=(4, 1),
            question_types=[QuestionType.FILL_IN_BLANK, QuestionType.SINGLE_CHOICE],
            question_options=[[""], [" Red ", "Green", "Blue"]],
        )
    )

    fill_in = manager.get_question(quiz_id, 0)
    choice = manager.get_question(quiz_id, 1)
    assert fill_in.question_type is QuestionType.FILL_IN_BLANK
    assert fill_in.options == ()
    assert choice.question_type is QuestionType.SINGLE_CHOICE
    assert choice.options == ("Red", "Green", "Blue")
    assert choice.text == "What is 10 - 5?"


@pytest.mark.parametrize("options", [["Only one"], ["Red", ""], ["Red|Green", "Blue"]])
def test_single_choice_needs_real_options(manager: SecretQuizManager, runtime: MockFheRuntime, options):
    with pytest.raises(InvalidQuizDefinition):
        manager.create_quiz(
            **_create_kwargs(
                runtime,
                question_types=[QuestionType.FILL_IN_BLANK, QuestionType.SINGLE_CHOICE],
                question_options=[[], options],
            )
        )


def test_unknown_quiz_and_question_index(manager: SecretQuizManager, runtime: MockFheRuntime):
    quiz_id = manager.create_quiz(**_create_kwargs(runtime))

    with pytest.raises(NotFound):
        manager.get_quiz(5)
    with pytest.raises(NotFound):
        manager.get_question(quiz_id, 2)
    with pytest.raises(NotFound):
        manager.get_question(quiz_id, -1)
    with pytest.raises(NotFound):
        manager.get_question(3, 0)


def test_end_quiz_by_creator(manager: SecretQuizManager, runtime: MockFheRuntime):
    quiz_id = manager.create_quiz(**_create_kwargs(runtime))

    manager.end_quiz(CREATOR, quiz_id)

    assert not manager.get_quiz(quiz_id).is_active
    assert manager.list_quizzes(active_only=True) == []
    assert len(manager.list_quizzes()) == 1


def test_end_quiz_is_one_way(manager: SecretQuizManager, runtime: MockFheRuntime):
    quiz_id = manager.create_quiz(**_create_kwargs(runtime))

    manager.end_quiz(CREATOR, quiz_id)
    manager.end_quiz(CREATOR, quiz_id)

    assert not manager.get_quiz(quiz_id).is_active
    assert [event.name for event in manager.get_events()] == ["QuizCreated", "QuizEnded"]


def test_non_creator_cannot_end_quiz(manager: SecretQuizManager, runtime: MockFheRuntime):
    quiz_id = manager.create_quiz(**_create_kwargs(runtime))

    with pytest.raises(NotCreator):
        manager.end_quiz(ALICE, quiz_id)

    assert manager.get_quiz(quiz_id).is_active


def test_end_unknown_quiz(manager: SecretQuizManager):
    with pytest.raises(NotFound):
        manager.end_quiz(CREATOR, 0)


def test_creator_identity_is_case_insensitive(manager: SecretQuizManager, runtime: MockFheRuntime):
    quiz_id = manager.create_quiz(**_create_kwargs(runtime))

    manager.end_quiz(CREATOR.upper().replace("0X", "0x"), quiz_id)

    assert not manager.get_quiz(quiz_id).is_active
