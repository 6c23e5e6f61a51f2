from __future__ import annotations  # Client for the interview analysis endpoint

import logging
from enum import Enum
from typing import Optional, Sequence

import httpx
from pydantic import ValidationError

from config import settings
from interview_setup import SessionConfig, config_to_wire
from observability import log_event
from transcript import Message, visible_messages

from .local_scoring import local_feedback
from .models import FeedbackReport

logger = logging.getLogger(__name__)

ANALYZE_PATH = "/api/analyze-interview"


class FeedbackErrorKind(str, Enum):
    ENDPOINT_FAILURE = "endpoint_failure"


class FeedbackEndpointError(RuntimeError):  # Analysis endpoint unusable; recovered locally
    def __init__(self, details: str, *, status_code: int | None = None) -> None:
        super().__init__(details)
        self.kind = FeedbackErrorKind.ENDPOINT_FAILURE
        self.status_code = status_code


class FeedbackGenerator:
    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.CHAT_BASE_URL,
            timeout=timeout_s or settings.HTTP_TIMEOUT_S,
        )

    async def generate_feedback(
        self,
        transcript: Sequence[Message],
        config: SessionConfig,
        *,
        session_id: str = "-",
    ) -> FeedbackReport:
        """Return the service's report, or the local estimate when it is unavailable."""

        try:
            report = await self._request(transcript, config)
        except FeedbackEndpointError as exc:
            logger.warning("Analysis endpoint failed, using local feedback: %s", exc)
            log_event(
                "feedback_fallback",
                session_id,
                level=logging.WARNING,
                source="local",
                error_kind=exc.kind.value,
            )
            return local_feedback(transcript)
        log_event("feedback_ready", session_id, source="ai", score=report.overall_score)
        return report

    async def _request(self, transcript: Sequence[Message], config: SessionConfig) -> FeedbackReport:
        payload = {
            "messages": [message.model_dump() for message in visible_messages(transcript)],
            "jobDetails": config_to_wire(config),
        }
        try:
            response = await self._client.post(ANALYZE_PATH, json=payload)
        except httpx.HTTPError as exc:
            raise FeedbackEndpointError(f"transport failed: {exc}") from exc
        except Exception as exc:  # noqa: BLE001
            logger.error("Analysis request failed unexpectedly: %r", exc)
            raise FeedbackEndpointError(f"request failed: {exc!r}") from exc

        if not response.is_success:
            raise FeedbackEndpointError(
                f"API responded with status: {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return FeedbackReport.model_validate_json(response.content)
        except ValidationError as exc:
            raise FeedbackEndpointError(f"invalid report: {exc.error_count()} errors", status_code=response.status_code) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
