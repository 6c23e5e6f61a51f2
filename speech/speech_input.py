"""Speech-to-text adapter with bounded retries and a text-input fallback.

One recognition attempt runs at a time. Network-class failures are retried
with linear backoff; once the retry ceiling is exceeded the adapter disables
itself (``network_error_detected``) until ``reset_network_error_state`` is
called, and every ``start_listening`` surfaces a "use text input" error
without touching the platform engine.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional, Tuple

from config import settings

from .state_store import SpeechStateStore
from .types import (
    RecognitionEngine,
    RecognitionFailure,
    RecognitionStream,
    SpeechInputErrorKind,
    SpeechInputState,
)

logger = logging.getLogger(__name__)

Kind = SpeechInputErrorKind

DISABLED_MESSAGE = "Speech recognition is disabled due to network issues. Please use text input instead."
PERSISTENT_MESSAGE = "Network error persists. Speech recognition temporarily disabled. Please use text input."
TRANSIENT_MESSAGE = "Network error occurred with speech recognition. Retrying..."
RESTORED_DISABLED_MESSAGE = "Speech recognition is disabled due to previous network errors. Using text-only mode."
UNSUPPORTED_MESSAGE = "Speech recognition is not supported on this device. Please use text input."
TIMEOUT_MESSAGE = "Speech recognition timed out. Please use text input instead."

_FAILURES: Dict[str, Tuple[SpeechInputErrorKind, str]] = {
    "not-allowed": (Kind.PERMISSION_DENIED, "Microphone access was denied. Please allow microphone access to use speech recognition."),
    "permission-denied": (Kind.PERMISSION_DENIED, "Microphone access was denied. Please allow microphone access to use speech recognition."),
    "no-speech": (Kind.NO_SPEECH_DETECTED, "No speech was detected. Please try speaking again."),
    "aborted": (Kind.ABORTED, "Speech recognition was aborted."),
    "audio-capture": (Kind.UNSUPPORTED, "No microphone was found. Please ensure your microphone is connected."),
    "service-not-allowed": (Kind.UNSUPPORTED, "Speech recognition service is not allowed. Please try again later."),
}
_GENERIC_FAILURE = (Kind.ABORTED, "An error occurred with speech recognition.")


class SpeechInputAdapter:
    def __init__(
        self,
        engine: RecognitionEngine,
        *,
        store: Optional[SpeechStateStore] = None,
        language: Optional[str] = None,
        max_retries: Optional[int] = None,
        retry_base_s: Optional[float] = None,
        watchdog_s: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.engine = engine
        self.state = SpeechInputState()
        self.language = language or settings.SPEECH_LANGUAGE
        self.max_retries = settings.SPEECH_MAX_RETRIES if max_retries is None else max_retries
        self.retry_base_s = settings.SPEECH_RETRY_BASE_S if retry_base_s is None else retry_base_s
        self.watchdog_s = settings.SPEECH_WATCHDOG_S if watchdog_s is None else watchdog_s
        self._store = store if store is not None else SpeechStateStore(settings.SPEECH_STATE_PATH)
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._stream: Optional[RecognitionStream] = None
        self._cancelled: set[asyncio.Task] = set()
        self._retries = 0

        if self._store.load_network_error():
            self.state.network_error_detected = True
            self._fail(Kind.NETWORK_PERSISTENT, RESTORED_DISABLED_MESSAGE)

    @property
    def supported(self) -> bool:
        return self.engine.is_available()

    @property
    def usable(self) -> bool:
        return self.supported and not self.state.network_error_detected

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start_listening(self) -> Optional[str]:
        """Run one listening session and return the final transcript, if any."""

        if self.state.network_error_detected:
            self._fail(Kind.NETWORK_PERSISTENT, DISABLED_MESSAGE)
            return None
        if not self.engine.is_available():
            self._fail(Kind.UNSUPPORTED, UNSUPPORTED_MESSAGE)
            return None
        if self.busy:
            logger.warning("Recognition already running; start request ignored")
            return None

        self.state.transcript = ""
        self.state.error = None
        self.state.error_kind = None
        self.state.is_listening = True
        self._retries = 0

        task = asyncio.ensure_future(self._run_attempts())
        self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            if task in self._cancelled and task.cancelled():
                return None
            raise
        finally:
            self._cancelled.discard(task)
            if self._task is task:
                self._task = None
            self.state.is_listening = False

    def stop_listening(self) -> None:
        """Abort any in-flight recognition. Safe to call in any state."""

        stream = self._stream
        if stream is not None:
            try:
                stream.abort()
            except Exception as exc:  # noqa: BLE001
                logger.warning("Error stopping recognition: %s", exc)
        if self._task is not None and not self._task.done():
            self._cancelled.add(self._task)
            self._task.cancel()
        self.state.is_listening = False

    async def reset_network_error_state(self) -> bool:
        """Clear the disabled flag and re-check the engine; returns whether input is usable."""

        self.state.network_error_detected = False
        self.state.error = None
        self.state.error_kind = None
        self._store.save_network_error(False)

        if not self.engine.is_available():
            self._fail(Kind.UNSUPPORTED, UNSUPPORTED_MESSAGE)
            return False
        try:
            await asyncio.wait_for(self.engine.check_capability(), timeout=self.watchdog_s)
        except RecognitionFailure as exc:
            logger.error("Test recognition error: %s", exc.code)
            if exc.code == "network":
                self._disable_for_network("Speech recognition is still experiencing network issues. Try again later.")
                return False
        except asyncio.TimeoutError:
            logger.warning("Recognition capability check timed out after %.1fs", self.watchdog_s)
        else:
            logger.info("Speech recognition re-enabled")
        return not self.state.network_error_detected

    async def _run_attempts(self) -> Optional[str]:
        while True:
            try:
                return await self._attempt()
            except asyncio.TimeoutError:
                if self._retries < self.max_retries:
                    self._retries += 1
                    logger.info("Recognition timed out, retrying (%d/%d)", self._retries, self.max_retries)
                    continue
                self._fail(Kind.TIMEOUT, TIMEOUT_MESSAGE)
                return None
            except RecognitionFailure as exc:
                if exc.code == "network":
                    if self._retries >= self.max_retries:
                        self._disable_for_network(PERSISTENT_MESSAGE)
                        return None
                    self._retries += 1
                    self._fail(Kind.NETWORK_TRANSIENT, TRANSIENT_MESSAGE)
                    logger.info("Network error, retrying (%d/%d)", self._retries, self.max_retries)
                    await self._sleep(self.retry_base_s * self._retries)
                    continue
                if exc.code == "no-speech":
                    self._retries = 0
                kind, message = _FAILURES.get(exc.code, _GENERIC_FAILURE)
                logger.error("Speech recognition error %s", exc.code)
                self._fail(kind, message)
                return None

    async def _attempt(self) -> Optional[str]:
        stream = await asyncio.wait_for(
            self.engine.open(language=self.language, interim_results=True),
            timeout=self.watchdog_s,
        )
        self._stream = stream
        final = ""
        try:
            async for result in stream:
                if result.is_final:
                    final += result.text
                    self.state.transcript = final
                else:
                    self.state.transcript = final + result.text
        finally:
            self._stream = None
        self.state.error = None
        self.state.error_kind = None
        text = (final or self.state.transcript).strip()
        return text or None

    def _disable_for_network(self, message: str) -> None:
        self.state.network_error_detected = True
        self._store.save_network_error(True)
        logger.warning("Speech recognition disabled after repeated network errors")
        self._fail(Kind.NETWORK_PERSISTENT, message)

    def _fail(self, kind: SpeechInputErrorKind, message: str) -> None:
        self.state.error = message
        self.state.error_kind = kind
