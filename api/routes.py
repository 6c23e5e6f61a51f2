"""FastAPI routes backing the interview session and results screens."""
from __future__ import annotations

import logging
import uuid
from typing import Any, Tuple

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api.prompts import analysis_prompt, opening_messages, scripted_opening, turn_messages
from api.schemas import AnalyzeReq, ChatReq, ChatResp, ErrorEnvelope
from config.registry import ANALYSIS_KEY, CHAT_KEY, get_model
from feedback.models import FeedbackReport
from interview_setup import PRACTICE_TYPES, parse_session_config, practice_questions
from llm_gateway import LlmGatewayError, LlmOutputError, MissingApiKeyError, strip_code_fences
from observability import log_event
from transcript import new_message_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

READY_REPLY = "I'm ready to help with your interview. What would you like to discuss?"


def _envelope(status_code: int, error: str, details: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorEnvelope(error=error, details=details).model_dump())


def _missing_key(exc: MissingApiKeyError) -> JSONResponse:
    return _envelope(
        500,
        "API key is not configured",
        f"API key is not configured. Please set the {exc.env_name} environment variable",
    )


def _classify_failure(exc: Exception, default_error: str) -> Tuple[str, str]:
    """Map a generation failure to the (error, details) pair the client classifies."""

    details = str(exc)
    lowered = details.lower()
    if "quota" in lowered or "exhausted" in lowered:
        return "API quota exceeded", "The API quota has been exceeded. Please try again later."
    if "permission" in lowered:
        return "Permission denied", "The API key doesn't have permission to access this resource."
    if "api key" in lowered:
        return "API key error", "There was an issue with the API key. Please check your configuration."
    return default_error, details


@router.post("/chat", response_model=ChatResp)
def chat_turn(req: ChatReq) -> Any:
    request_id = uuid.uuid4().hex[:12]
    llm = get_model(CHAT_KEY)
    history = [message for message in req.messages if message.role != "system"]

    if not history:
        try:
            text = llm(messages=opening_messages(req.systemMessage or ""))
        except MissingApiKeyError as exc:
            return _missing_key(exc)
        except LlmGatewayError as exc:
            logger.error("Error generating initial message: %s", exc)
            log_event("chat_opening_fallback", request_id, level=logging.WARNING, error_kind=type(exc).__name__)
            text = scripted_opening(req.systemMessage)
        return ChatResp(id=new_message_id(), content=text)

    if not any(message.role == "user" for message in history):
        return ChatResp(id=new_message_id(), content=READY_REPLY)

    try:
        text = llm(messages=turn_messages(req.systemMessage, history))
    except MissingApiKeyError as exc:
        return _missing_key(exc)
    except LlmGatewayError as exc:
        logger.error("Error in chat API: %s", exc)
        error, details = _classify_failure(exc, "Failed to process the request")
        log_event("chat_failed", request_id, level=logging.ERROR, error_kind=error)
        return _envelope(500, error, details)

    log_event("chat_turn", request_id, role="assistant")
    return ChatResp(id=new_message_id(), content=text)


def _coerce_report(raw: Any) -> FeedbackReport:
    if isinstance(raw, FeedbackReport):
        return raw
    if isinstance(raw, str):
        return FeedbackReport.model_validate_json(strip_code_fences(raw))
    return FeedbackReport.model_validate(raw)


@router.post("/analyze-interview", response_model=None)
def analyze_interview(req: AnalyzeReq) -> Any:
    request_id = uuid.uuid4().hex[:12]
    try:
        config = parse_session_config(req.jobDetails)
    except ValidationError as exc:
        return _envelope(422, "Invalid job details", str(exc))

    llm = get_model(ANALYSIS_KEY)
    prompt = analysis_prompt(config, req.messages)
    try:
        report = _coerce_report(llm(messages=[{"role": "user", "content": prompt}]))
    except MissingApiKeyError as exc:
        return _missing_key(exc)
    except (LlmOutputError, ValueError) as exc:
        logger.error("Failed to parse AI response as JSON: %s", exc)
        log_event("analysis_unparseable", request_id, level=logging.WARNING, source="ai")
        return _envelope(502, "Unparseable analysis", "The analysis service returned an unexpected format.")
    except LlmGatewayError as exc:
        logger.error("Error in analyze interview API: %s", exc)
        error, details = _classify_failure(exc, "Failed to analyze the interview")
        log_event("analysis_failed", request_id, level=logging.ERROR, error_kind=error)
        return _envelope(500, error, details)

    log_event("analysis_done", request_id, source="ai", score=report.overall_score)
    return JSONResponse(status_code=200, content=report.to_wire())


@router.get("/practice/{practice_type}/questions", response_model=None)
def practice_bank(practice_type: str) -> Any:
    """Bank questions with their model answers, shown once a practice round ends."""

    if practice_type not in PRACTICE_TYPES:
        return _envelope(404, "Unknown practice type", f"Expected one of: {', '.join(PRACTICE_TYPES)}")
    questions = practice_questions(practice_type)  # type: ignore[arg-type]
    return JSONResponse(
        status_code=200,
        content={
            "practiceType": practice_type,
            "questions": [item.model_dump(by_alias=True) for item in questions],
        },
    )
