"""Shared pytest fixtures for the secret quiz tests."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import pytest
from fastapi.testclient import TestClient

from secret_quiz.core.mock_fhe_runtime import MockFheRuntime
from secret_quiz.core.models import QuestionType
from secret_quiz.core.quiz_manager import SecretQuizManager
from secret_quiz.server.api_server import create_api_app

CREATOR = "0xC0FFEE0000000000000000000000000000000001"
ALICE = "0xa11ce00000000000000000000000000000000002"
BOB = "0xb0b0000000000000000000000000000000000003"


@pytest.fixture
def runtime() -> MockFheRuntime:
    """A fresh encryption runtime per test."""
    return MockFheRuntime()


@pytest.fixture
def manager(runtime: MockFheRuntime) -> SecretQuizManager:
    return SecretQuizManager(gateway=runtime, ops=runtime)


@pytest.fixture
def client(manager: SecretQuizManager):
    """FastAPI test client bound to the test manager."""
    with TestClient(create_api_app(manager)) as test_client:
        yield test_client


@pytest.fixture
def create_quiz(manager: SecretQuizManager, runtime: MockFheRuntime) -> Callable[..., int]:
    """Create a quiz whose plaintext answers are encrypted by the creator first."""

    def _create(
        answers: Sequence[int] = (42,),
        reward_amount: int = 100,
        pass_threshold: int = 80,
        creator: str = CREATOR,
        question_types: Sequence[int] | None = None,
        question_options: Sequence[Sequence[str]] | None = None,
    ) -> int:
        encrypted = [runtime.encrypt_uint64(value, creator) for value in answers]
        return manager.create_quiz(
            caller=creator,
            title="Math Quiz",
            description="Basic math",
            category=0,
            difficulty=0,
            question_texts=[f"Question {i + 1}" for i in range(len(answers))],
            question_types=question_types or [QuestionType.FILL_IN_BLANK] * len(answers),
            question_options=question_options or [[] for _ in answers],
            encrypted_answers=[item.handle for item in encrypted],
            proofs=[item.proof for item in encrypted],
            reward_amount=reward_amount,
            pass_threshold=pass_threshold,
        )

    return _create


@pytest.fixture
def submit(manager: SecretQuizManager, runtime: MockFheRuntime) -> Callable[..., int]:
    """Encrypt a participant's plaintext answers and submit them."""

    def _submit(quiz_id: int, answers: Sequence[int], participant: str = ALICE) -> int:
        encrypted = [runtime.encrypt_uint64(value, participant) for value in answers]
        return manager.submit_answers(
            participant,
            quiz_id,
            [item.handle for item in encrypted],
            [item.proof for item in encrypted],
        )

    return _submit


@pytest.fixture
def decrypt_score(manager: SecretQuizManager, runtime: MockFheRuntime) -> Callable[..., int]:
    """Client-side decryption of a submission's score, as its owner."""

    def _decrypt(submission_id: int, account: str = ALICE) -> int:
        return runtime.user_decrypt(manager.get_encrypted_score(submission_id), account)

    return _decrypt
