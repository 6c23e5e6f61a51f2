"""Turn loop for one mock interview or viva session.

The controller owns the transcript and phase. Each user answer triggers exactly
one gateway call; failures never end the session, they append a scripted
assistant line instead. With speech adapters attached, assistant messages are
spoken in a background task and, in voice mode, listening resumes once
playback has finished.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import List, Optional

from config import settings
from interview_setup import SessionConfig
from observability import log_event, span
from prompt_builder import build_system_instruction, fallback_opening, question_total
from response_gateway import GatewayBusyError, GatewayError, GatewayErrorKind, ResponseGateway
from speech import SpeechInputAdapter, SpeechOutputAdapter
from transcript import Message, visible_messages

from .classifier import CompletionClassifier, PhraseClassifier
from .models import Notice, SessionPhase, SessionState

logger = logging.getLogger(__name__)

Phase = SessionPhase

APOLOGY = (
    "I apologize, but I'm having trouble processing your response right now. "
    "Could you please try again or rephrase your answer?"
)

_ERROR_DESCRIPTIONS = {
    GatewayErrorKind.MISSING_CREDENTIALS: "The AI service is not configured. Please check the API key.",
    GatewayErrorKind.QUOTA_EXCEEDED: "The AI service quota has been exceeded. Please try again later.",
    GatewayErrorKind.PERMISSION_DENIED: "The AI service denied access to the requested model.",
    GatewayErrorKind.UNPARSEABLE: "The AI service returned an unexpected response.",
}
_DEFAULT_ERROR_DESCRIPTION = "Failed to get a response. Please try again."


def _as_gateway_error(exc: Exception) -> GatewayError:
    if isinstance(exc, GatewayError):
        return exc
    if isinstance(exc, GatewayBusyError):
        return GatewayError(GatewayErrorKind.UNKNOWN, "a previous turn is still in flight")
    return GatewayError(GatewayErrorKind.UNKNOWN, f"unexpected failure: {exc!r}")


class SessionController:
    def __init__(
        self,
        config: SessionConfig,
        gateway: ResponseGateway,
        *,
        classifier: Optional[CompletionClassifier] = None,
        speech_input: Optional[SpeechInputAdapter] = None,
        speech_output: Optional[SpeechOutputAdapter] = None,
        total_questions: Optional[int] = None,
        voice_mode: bool = False,
        relisten_delay_s: Optional[float] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.config = config
        self.gateway = gateway
        self.classifier = classifier or PhraseClassifier.from_yaml(settings.CLASSIFIER_PATH)
        self.speech_input = speech_input
        self.speech_output = speech_output
        self.total_questions = total_questions or question_total(config)
        self.relisten_delay_s = settings.RELISTEN_DELAY_S if relisten_delay_s is None else relisten_delay_s
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.voice_mode = bool(voice_mode and speech_input is not None)

        self.system_instruction = build_system_instruction(config, total_questions=self.total_questions)
        self.state = SessionState(transcript=[Message.create("system", self.system_instruction)])
        self._notices: List[Notice] = []
        self._voice_task: Optional[asyncio.Task] = None
        self._started = False

    @classmethod
    async def open(cls, config: SessionConfig, gateway: ResponseGateway, **kwargs) -> "SessionController":
        controller = cls(config, gateway, **kwargs)
        await controller.start()
        return controller

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def transcript(self) -> List[Message]:
        return list(self.state.transcript)

    @property
    def visible_messages(self) -> List[Message]:
        return visible_messages(self.state.transcript)

    @property
    def question_count(self) -> int:
        return self.state.question_count

    @property
    def is_complete(self) -> bool:
        return self.state.is_complete

    @property
    def last_error(self) -> Optional[GatewayError]:
        return self.state.last_error

    @property
    def notices(self) -> List[Notice]:
        return list(self._notices)

    def dismiss_notice(self, index: int) -> None:
        if 0 <= index < len(self._notices):
            del self._notices[index]

    # ------------------------------------------------------------------
    # Turn loop
    # ------------------------------------------------------------------
    async def start(self) -> Optional[Message]:
        """Request the opening turn. Subsequent calls do nothing."""

        if self._started:
            logger.warning("Session %s already started", self.session_id)
            return None
        self._started = True

        source = "ai"
        try:
            with span(self.state, "gateway.opening"):
                opening = await self.gateway.request_next_turn([], self.system_instruction)
        except Exception as exc:  # noqa: BLE001
            logger.error("Error fetching initial message: %s", exc)
            self._record_failure(_as_gateway_error(exc))
            opening = Message.create("assistant", fallback_opening(self.config))
            source = "fallback"

        self._append(opening)
        self.state.phase = Phase.AWAITING_USER_INPUT
        log_event("session_opened", self.session_id, phase=self.phase.value, source=source)
        self._after_assistant(opening)
        return opening

    async def submit_user_response(self, text: str) -> bool:
        """Append ``text`` as the next answer and fetch the reply.

        Returns False without side effects when the text is blank or the
        session is not waiting for the user.
        """

        answer = (text or "").strip()
        if not answer or self.state.phase is not Phase.AWAITING_USER_INPUT:
            return False

        self._cancel_voice()
        self._append(Message.create("user", answer))
        self.state.phase = Phase.AWAITING_AI_RESPONSE
        log_event("user_answer", self.session_id, role="user", phase=self.phase.value)

        try:
            with span(self.state, "gateway.turn"):
                reply = await self.gateway.request_next_turn(self.visible_messages, self.system_instruction)
        except asyncio.CancelledError:
            self.state.phase = Phase.AWAITING_USER_INPUT
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error("Error in chat: %s", exc)
            self._record_failure(_as_gateway_error(exc))
            reply = Message.create("assistant", APOLOGY)
            self._append(reply)
            self.state.phase = Phase.AWAITING_USER_INPUT
            self._after_assistant(reply)
            return True

        self._append(reply)
        if self.classifier.counts_as_question(reply.content):
            self.state.question_count = min(self.state.question_count + 1, self.total_questions)
        if self.classifier.is_session_end(reply.content):
            self.state.is_complete = True

        self.state.phase = Phase.COMPLETE if self.state.is_complete else Phase.AWAITING_USER_INPUT
        log_event(
            "assistant_turn",
            self.session_id,
            role="assistant",
            question_count=self.state.question_count,
            complete=self.state.is_complete,
        )
        self._after_assistant(reply)
        return True

    def _append(self, message: Message) -> None:
        self.state.transcript.append(message)

    def _record_failure(self, exc: GatewayError) -> None:
        self.state.last_error = exc
        self._notices.append(
            Notice(
                title="Error",
                description=_ERROR_DESCRIPTIONS.get(exc.kind, _DEFAULT_ERROR_DESCRIPTION),
                variant="destructive",
            )
        )
        log_event("gateway_failed", self.session_id, level=logging.WARNING, error_kind=exc.kind.value)

    # ------------------------------------------------------------------
    # Voice coordination
    # ------------------------------------------------------------------
    def set_voice_mode(self, enabled: bool) -> bool:
        """Toggle listen-after-speak. Returns the resulting mode."""

        if not enabled:
            self.voice_mode = False
            self.stop_voice()
            return False

        if self.speech_input is None or not self.speech_input.usable:
            self._notices.append(
                Notice(
                    title="Voice Features Limited",
                    description="Speech recognition is unavailable. Please use text input.",
                    variant="warning",
                )
            )
            self.voice_mode = False
            return False

        self.voice_mode = True
        if self.state.phase is Phase.AWAITING_USER_INPUT and not self._voice_busy():
            self._voice_task = asyncio.ensure_future(self._listen_and_submit())
        return True

    def replay_last(self) -> bool:
        """Speak the latest assistant message again."""

        if self.speech_output is None:
            return False
        for message in reversed(self.state.transcript):
            if message.role == "assistant":
                self._schedule_voice(message)
                return True
        return False

    def stop_voice(self) -> None:
        self._cancel_voice()

    async def drain(self) -> None:
        """Wait until background voice work (including follow-on turns) settles."""

        while self._voice_task is not None and not self._voice_task.done():
            task = self._voice_task
            try:
                await task
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise

    async def close(self) -> None:
        self.voice_mode = False
        self._cancel_voice()
        await self.drain()

    def _after_assistant(self, message: Message) -> None:
        if self.speech_output is not None:
            self._schedule_voice(message)
        elif self.voice_mode and not self.state.is_complete:
            # Nothing to play back, so listen straight away.
            self._cancel_voice()
            self._voice_task = asyncio.ensure_future(self._listen_and_submit(delay_s=self.relisten_delay_s))

    def _schedule_voice(self, message: Message) -> None:
        self._cancel_voice()
        self._voice_task = asyncio.ensure_future(self._speak_then_listen(message.content))

    def _voice_busy(self) -> bool:
        return self._voice_task is not None and not self._voice_task.done()

    def _cancel_voice(self) -> None:
        task = self._voice_task
        # A voice task submitting its own transcript must not cancel itself.
        if task is not None and task is asyncio.current_task():
            return
        if self.speech_output is not None:
            self.speech_output.cancel()
        if self.speech_input is not None:
            self.speech_input.stop_listening()
        if task is not None and not task.done():
            task.cancel()
        self._voice_task = None

    async def _speak_then_listen(self, text: str) -> None:
        with span(self.state, "speech.playback"):
            finished = await self.speech_output.speak(text)
        if not finished:
            return
        await self._listen_and_submit(delay_s=self.relisten_delay_s)

    async def _listen_and_submit(self, delay_s: float = 0.0) -> None:
        if not self.voice_mode or self.state.is_complete or self.speech_input is None:
            return
        if not self.speech_input.usable:
            if self.speech_input.state.network_error_detected:
                self._switch_to_text_only()
            return
        if delay_s:
            await asyncio.sleep(delay_s)

        transcript = await self.speech_input.start_listening()
        if self.speech_input.state.network_error_detected:
            self._switch_to_text_only()
            return
        if transcript:
            log_event("voice_answer", self.session_id, source="speech")
            await self.submit_user_response(transcript)

    def _switch_to_text_only(self) -> None:
        if not self.voice_mode:
            return
        self.voice_mode = False
        self._notices.append(
            Notice(
                title="Switching to Text Input",
                description="Due to network issues with speech recognition, we're temporarily switching to text input mode.",
                variant="warning",
            )
        )
        log_event("text_only_mode", self.session_id, level=logging.WARNING, source="speech")
