"""FastAPI server that exposes the secret quiz operations over HTTP."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, BeforeValidator, Field, field_validator
import uvicorn

from secret_quiz.constants.about import APP_NAME, APP_VERSION
from secret_quiz.constants.network_constants import ACCOUNT_HEADER, DEFAULT_HOST, DEFAULT_PORT
from secret_quiz.constants.quiz_constants import OPTION_SEPARATOR
from secret_quiz.core import errors
from secret_quiz.core.ciphertext import decode_hex
from secret_quiz.core.models import QuizEvent, QuizSummary, SubmissionSummary
from secret_quiz.core.question_renderer import renderer
from secret_quiz.core.quiz_manager import SecretQuizManager

_STATUS_BY_ERROR: dict[type[errors.SecretQuizError], int] = {
    errors.ShapeMismatch: 422,
    errors.InvalidQuizDefinition: 422,
    errors.InvalidProof: 400,
    errors.NotFound: 404,
    errors.NotCreator: 403,
    errors.NotOwner: 403,
    errors.QuizInactive: 409,
    errors.AlreadySubmitted: 409,
    errors.MustDecryptFirst: 409,
    errors.AlreadyClaimed: 409,
    errors.BelowThreshold: 409,
}


def _hex_to_bytes(value: object) -> object:
    if isinstance(value, str):
        return decode_hex(value)
    return value


HexBytes = Annotated[bytes, BeforeValidator(_hex_to_bytes)]


def _split_options(item: object) -> object:
    if isinstance(item, str):
        return item.split(OPTION_SEPARATOR) if item else []
    return item


class CreateQuizPayload(BaseModel):
    """Payload schema for quiz creation. Answers are encrypted client-side."""

    title: str
    description: str = ""
    category: int = 0
    difficulty: int = 0
    question_texts: list[str]
    question_types: list[int]
    question_options: list[list[str]]
    encrypted_answers: list[HexBytes]
    input_proofs: list[HexBytes]
    reward_amount: int
    pass_threshold: int

    @field_validator("question_options", mode="before")
    @classmethod
    def _split_joined_options(cls, value: object) -> object:
        # Options may also arrive in their joined wire form, e.g. "Red|Green|Blue".
        if isinstance(value, list):
            return [_split_options(item) for item in value]
        return value


class SubmitAnswersPayload(BaseModel):
    encrypted_answers: list[HexBytes]
    input_proofs: list[HexBytes]


class ClaimRewardPayload(BaseModel):
    claimed_score: int = Field(ge=0)


def _require_account(account: str | None = Header(default=None, alias=ACCOUNT_HEADER)) -> str:
    if account is None or not account.strip():
        raise HTTPException(
            status_code=401,
            detail={"code": "MissingAccount", "message": f"{ACCOUNT_HEADER} header is required"},
        )
    return account


def _get_quiz_manager_dependency(quiz_manager: SecretQuizManager):
    def dependency() -> SecretQuizManager:
        return quiz_manager

    return dependency


def _quiz_to_dict(quiz: QuizSummary) -> dict[str, object]:
    return {
        "id": quiz.id,
        "creator": quiz.creator,
        "title": quiz.title,
        "description": quiz.description,
        "category": quiz.category.name,
        "difficulty": quiz.difficulty.name,
        "question_count": quiz.question_count,
        "reward_amount": quiz.reward_amount,
        "pass_threshold": quiz.pass_threshold,
        "is_active": quiz.is_active,
        "created_at": quiz.created_at.isoformat(),
        "participant_count": quiz.participant_count,
    }


def _submission_to_dict(submission: SubmissionSummary) -> dict[str, object]:
    return {
        "id": submission.id,
        "quiz_id": submission.quiz_id,
        "participant": submission.participant,
        "answer_count": submission.answer_count,
        "submitted_at": submission.submitted_at.isoformat(),
        "has_decrypted": submission.has_decrypted,
        "has_claimed_reward": submission.has_claimed_reward,
    }


def _event_to_dict(event: QuizEvent) -> dict[str, object]:
    return {
        "sequence": event.sequence,
        "name": event.name,
        "account": event.account,
        "quiz_id": event.quiz_id,
        "submission_id": event.submission_id,
        "amount": event.amount,
        "recorded_at": event.recorded_at.isoformat(),
    }


def create_api_app(quiz_manager: SecretQuizManager) -> FastAPI:
    """Create a FastAPI application wired to the provided quiz manager."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    quiz_manager_dep = _get_quiz_manager_dependency(quiz_manager)

    @app.exception_handler(errors.SecretQuizError)
    async def secret_quiz_error_handler(request: Request, exc: errors.SecretQuizError) -> JSONResponse:
        return JSONResponse(
            status_code=_STATUS_BY_ERROR.get(type(exc), 400),
            content={"detail": {"code": exc.code, "message": exc.message}},
        )

    @app.get("/health")
    def health() -> dict[str, object]:
        return {"status": "ok", "app": APP_NAME, "version": APP_VERSION}

    # --- Quizzes ---

    @app.post("/quizzes", status_code=201)
    def create_quiz(
        payload: CreateQuizPayload,
        account: str = Depends(_require_account),
        manager: SecretQuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        quiz_id = manager.create_quiz(
            caller=account,
            title=payload.title,
            description=payload.description,
            category=payload.category,
            difficulty=payload.difficulty,
            question_texts=payload.question_texts,
            question_types=payload.question_types,
            question_options=payload.question_options,
            encrypted_answers=payload.encrypted_answers,
            proofs=payload.input_proofs,
            reward_amount=payload.reward_amount,
            pass_threshold=payload.pass_threshold,
        )
        return {"quiz_id": quiz_id}

    @app.get("/quizzes")
    def list_quizzes(
        active_only: bool = False,
        manager: SecretQuizManager = Depends(quiz_manager_dep),
    ) -> list[dict[str, object]]:
        return [_quiz_to_dict(quiz) for quiz in manager.list_quizzes(active_only=active_only)]

    @app.get("/quizzes/count")
    def get_total_quizzes(manager: SecretQuizManager = Depends(quiz_manager_dep)) -> dict[str, int]:
        return {"total": manager.get_total_quizzes()}

    @app.get("/quizzes/{quiz_id}")
    def get_quiz(quiz_id: int, manager: SecretQuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        return _quiz_to_dict(manager.get_quiz(quiz_id))

    @app.get("/quizzes/{quiz_id}/questions/{index}")
    def get_question(
        quiz_id: int,
        index: int,
        manager: SecretQuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        question = manager.get_question(quiz_id, index)
        return {
            "quiz_id": quiz_id,
            "index": index,
            "text": question.text,
            "question_type": question.question_type.name,
            "options": list(question.options),
            "options_joined": OPTION_SEPARATOR.join(question.options),
            "question_html": renderer.render_question(question),
        }

    @app.post("/quizzes/{quiz_id}/end")
    def end_quiz(
        quiz_id: int,
        account: str = Depends(_require_account),
        manager: SecretQuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        manager.end_quiz(account, quiz_id)
        return _quiz_to_dict(manager.get_quiz(quiz_id))

    @app.post("/quizzes/{quiz_id}/submissions", status_code=201)
    def submit_answers(
        quiz_id: int,
        payload: SubmitAnswersPayload,
        account: str = Depends(_require_account),
        manager: SecretQuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        submission_id = manager.submit_answers(
            account,
            quiz_id,
            payload.encrypted_answers,
            payload.input_proofs,
        )
        return {"submission_id": submission_id}

    # --- Submissions ---

    @app.get("/submissions/count")
    def get_total_submissions(manager: SecretQuizManager = Depends(quiz_manager_dep)) -> dict[str, int]:
        return {"total": manager.get_total_submissions()}

    @app.get("/submissions/{submission_id}")
    def get_submission(
        submission_id: int,
        manager: SecretQuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        return _submission_to_dict(manager.get_submission(submission_id))

    @app.get("/submissions/{submission_id}/encrypted-score")
    def get_encrypted_score(
        submission_id: int,
        manager: SecretQuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        ciphertext = manager.get_encrypted_score(submission_id)
        return {"submission_id": submission_id, "handle": ciphertext.hex(), "kind": ciphertext.kind.value}

    @app.post("/submissions/{submission_id}/decryption")
    def allow_result_decryption(
        submission_id: int,
        account: str = Depends(_require_account),
        manager: SecretQuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        manager.allow_result_decryption(account, submission_id)
        return _submission_to_dict(manager.get_submission(submission_id))

    @app.post("/submissions/{submission_id}/claim")
    def claim_reward(
        submission_id: int,
        payload: ClaimRewardPayload,
        account: str = Depends(_require_account),
        manager: SecretQuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        balance = manager.claim_reward(account, submission_id, payload.claimed_score)
        return {"submission_id": submission_id, "points": balance}

    # --- Accounts ---

    @app.get("/accounts/{account}/points")
    def user_points(account: str, manager: SecretQuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        return {"account": account, "points": manager.user_points(account)}

    @app.get("/accounts/{account}/submissions")
    def get_user_submissions(
        account: str,
        manager: SecretQuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        return {"account": account, "submission_ids": manager.get_user_submissions(account)}

    @app.get("/accounts/{account}/quizzes")
    def get_creator_quizzes(
        account: str,
        manager: SecretQuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        return {"account": account, "quiz_ids": manager.get_creator_quizzes(account)}

    # --- Events ---

    @app.get("/events")
    def get_events(since: int = 0, manager: SecretQuizManager = Depends(quiz_manager_dep)) -> list[dict[str, object]]:
        return [_event_to_dict(event) for event in manager.get_events(since)]

    return app


def run_api_server(
    quiz_manager: SecretQuizManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    access_log: bool = False,
) -> None:
    """Serve the API in the current thread until interrupted.

    Logging is left to :func:`configure_logging`, so uvicorn keeps no config of its own.
    """
    app = create_api_app(quiz_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_config=None, access_log=access_log)
    uvicorn.Server(config).run()


