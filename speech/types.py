"""Speech adapter state, error taxonomy and platform engine protocols."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Optional, Protocol

from pydantic import BaseModel


class SpeechInputErrorKind(str, Enum):
    UNSUPPORTED = "unsupported"
    PERMISSION_DENIED = "permission_denied"
    NO_SPEECH_DETECTED = "no_speech_detected"
    NETWORK_TRANSIENT = "network_transient"
    NETWORK_PERSISTENT = "network_persistent"
    TIMEOUT = "timeout"
    ABORTED = "aborted"


class SpeechOutputErrorKind(str, Enum):
    UNSUPPORTED = "unsupported"
    CHUNK_PLAYBACK_ERROR = "chunk_playback_error"


class SpeechInputState(BaseModel):
    is_listening: bool = False
    transcript: str = ""
    error: Optional[str] = None
    error_kind: Optional[SpeechInputErrorKind] = None
    network_error_detected: bool = False


class SpeechOutputState(BaseModel):
    is_speaking: bool = False
    error: Optional[str] = None
    error_kind: Optional[SpeechOutputErrorKind] = None


class RecognitionFailure(Exception):
    """Raised by recognition engines with the platform error code (``network``, ``no-speech``...)."""

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(message or code)
        self.code = code


@dataclass(frozen=True)
class RecognitionResult:
    text: str
    is_final: bool


class RecognitionStream(Protocol):
    def __aiter__(self) -> AsyncIterator[RecognitionResult]: ...

    def abort(self) -> None: ...


class RecognitionEngine(Protocol):
    def is_available(self) -> bool: ...

    async def open(self, *, language: str, interim_results: bool) -> RecognitionStream:
        """Start one recognition attempt; returns once the platform reports it started."""
        ...

    async def check_capability(self) -> None:
        """Lightweight start/stop used to check whether recognition works again."""
        ...


class SynthesisEngine(Protocol):
    def is_available(self) -> bool: ...

    async def speak_chunk(self, text: str) -> None:
        """Play one utterance; returns when it ends, raises when it fails."""
        ...

    def cancel(self) -> None: ...
