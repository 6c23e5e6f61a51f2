from __future__ import annotations  # Client for the chat-turn endpoint

import asyncio
import logging
from typing import Any, Optional, Sequence

import httpx

from config import settings
from transcript import Message, new_message_id

from .errors import GatewayBusyError, GatewayError, GatewayErrorKind, classify_error

logger = logging.getLogger(__name__)

CHAT_PATH = "/api/chat"


class ResponseGateway:  # One outbound call per turn, no retries
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
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def request_next_turn(self, history: Sequence[Message], system_instruction: str) -> Message:
        if self._lock.locked():
            raise GatewayBusyError("a chat turn is already in flight")
        async with self._lock:
            payload = {
                "messages": [message.model_dump() for message in history if message.role != "system"],
                "systemMessage": system_instruction,
            }
            logger.info("Chat turn request history=%d", len(payload["messages"]))
            try:
                response = await self._client.post(CHAT_PATH, json=payload)
            except httpx.HTTPError as exc:
                logger.error("Chat transport failure: %s", exc)
                raise GatewayError(GatewayErrorKind.UNKNOWN, f"transport failed: {exc}") from exc
            except Exception as exc:  # noqa: BLE001
                logger.error("Chat request failed unexpectedly: %r", exc)
                raise GatewayError(GatewayErrorKind.UNKNOWN, f"request failed: {exc!r}") from exc
            return _parse_turn(response)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _parse_turn(response: httpx.Response) -> Message:
    try:
        body: Any = response.json()
    except ValueError as exc:
        if response.is_success:
            raise GatewayError(GatewayErrorKind.UNPARSEABLE, "response body was not JSON", status_code=response.status_code) from exc
        raise GatewayError(
            GatewayErrorKind.UNKNOWN,
            f"API responded with status: {response.status_code}",
            status_code=response.status_code,
        ) from exc

    if not response.is_success:
        error = body.get("error", "") if isinstance(body, dict) else ""
        details = body.get("details", "") if isinstance(body, dict) else ""
        kind = classify_error(str(details), str(error))
        logger.warning("Chat turn failed status=%s kind=%s details=%s", response.status_code, kind.value, details)
        raise GatewayError(
            kind,
            str(details or error or f"API responded with status: {response.status_code}"),
            status_code=response.status_code,
        )

    content = body.get("content") if isinstance(body, dict) else None
    if not isinstance(content, str):
        raise GatewayError(GatewayErrorKind.UNPARSEABLE, "response missing assistant content", status_code=response.status_code)
    message_id = body.get("id")
    return Message(id=str(message_id) if message_id else new_message_id(), role="assistant", content=content)
