"""Text-to-speech adapter that plays long text as sequential sentence chunks."""
from __future__ import annotations

import asyncio
import logging
import re
from typing import Callable, List, Optional

from config import settings

from .types import SpeechOutputErrorKind, SpeechOutputState, SynthesisEngine

logger = logging.getLogger(__name__)

_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")


def split_into_chunks(text: str, max_chars: int = 200) -> List[str]:
    """Pack whole sentences into chunks of at most ``max_chars``.

    A sentence longer than ``max_chars`` becomes its own chunk.
    """

    chunks: List[str] = []
    current = ""
    for sentence in _SENTENCE_BREAK.split(text.strip()):
        sentence = sentence.strip()
        if not sentence:
            continue
        if current and len(current) + 1 + len(sentence) > max_chars:
            chunks.append(current)
            current = sentence
        else:
            current = f"{current} {sentence}" if current else sentence
    if current:
        chunks.append(current)
    return chunks


class SpeechOutputAdapter:
    def __init__(
        self,
        engine: SynthesisEngine,
        *,
        max_chunk_chars: Optional[int] = None,
        chunk_gap_s: Optional[float] = None,
    ) -> None:
        self.engine = engine
        self.state = SpeechOutputState()
        self.max_chunk_chars = max_chunk_chars or settings.TTS_CHUNK_CHARS
        self.chunk_gap_s = settings.TTS_CHUNK_GAP_S if chunk_gap_s is None else chunk_gap_s
        self._task: Optional[asyncio.Task] = None
        self._cancelled: set[asyncio.Task] = set()

    @property
    def supported(self) -> bool:
        return self.engine.is_available()

    async def speak(self, text: str, on_done: Optional[Callable[[], None]] = None) -> bool:
        """Speak ``text``; returns True when playback reached the end.

        ``on_done`` fires once after the last chunk, or immediately when the
        engine is unavailable. A cancelled utterance does not fire it.
        """

        if not self.engine.is_available():
            self.state.error = "Speech synthesis is not supported on this device."
            self.state.error_kind = SpeechOutputErrorKind.UNSUPPORTED
            if on_done is not None:
                on_done()
            return True

        self.cancel()
        self.state.error = None
        self.state.error_kind = None
        chunks = split_into_chunks(text, self.max_chunk_chars)

        task = asyncio.ensure_future(self._play(chunks))
        self._task = task
        self.state.is_speaking = True
        try:
            await task
        except asyncio.CancelledError:
            if task in self._cancelled and task.cancelled():
                return False
            raise
        finally:
            self._cancelled.discard(task)
            if self._task is task:
                self._task = None
                self.state.is_speaking = False
        if on_done is not None:
            on_done()
        return True

    def cancel(self) -> None:
        """Stop current and queued chunks. Safe to call in any state."""

        if self._task is None or self._task.done():
            return
        self._cancelled.add(self._task)
        self._task.cancel()
        try:
            self.engine.cancel()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Error canceling speech synthesis: %s", exc)
        self.state.is_speaking = False

    async def _play(self, chunks: List[str]) -> None:
        for index, chunk in enumerate(chunks):
            if index and self.chunk_gap_s:
                await asyncio.sleep(self.chunk_gap_s)
            try:
                await self.engine.speak_chunk(chunk)
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001
                logger.error("Speech synthesis error chunk=%d/%d: %s", index + 1, len(chunks), exc)
                self.state.error = "A part of the response could not be spoken."
                self.state.error_kind = SpeechOutputErrorKind.CHUNK_PLAYBACK_ERROR
