"""Typed failures of the chat-turn gateway."""
from __future__ import annotations

from enum import Enum


class GatewayErrorKind(str, Enum):
    MISSING_CREDENTIALS = "missing_credentials"
    QUOTA_EXCEEDED = "quota_exceeded"
    PERMISSION_DENIED = "permission_denied"
    UNPARSEABLE = "unparseable"
    UNKNOWN = "unknown"


class GatewayError(RuntimeError):
    """A chat turn could not be produced. ``kind`` drives the user-facing message."""

    def __init__(self, kind: GatewayErrorKind, details: str, *, status_code: int | None = None) -> None:
        super().__init__(f"{kind.value}: {details}")
        self.kind = kind
        self.details = details
        self.status_code = status_code


class GatewayBusyError(RuntimeError):  # A second request was issued before the first resolved
    pass


def classify_error(details: str, error: str = "") -> GatewayErrorKind:
    """Classify an error envelope by substring.

    Quota and permission are tested before the credential check because the
    backend's permission message also mentions the API key.
    """

    for text in (details, error):
        lowered = (text or "").lower()
        if "quota" in lowered:
            return GatewayErrorKind.QUOTA_EXCEEDED
        if "permission" in lowered:
            return GatewayErrorKind.PERMISSION_DENIED
        if "api key" in lowered:
            return GatewayErrorKind.MISSING_CREDENTIALS
    return GatewayErrorKind.UNKNOWN
