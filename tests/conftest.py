import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.registry import ANALYSIS_KEY, CHAT_KEY, bind_model, unbind_model
from config.settings import settings
from interview_setup import JobInterviewConfig, SubjectiveVivaConfig, UserProfile
from speech import RecognitionFailure, RecognitionResult
from transcript import Message

REPORT = {
    "overallScore": 82,
    "strengths": ["Clear structure", "Concrete examples", "Good pacing"],
    "improvements": ["Quantify impact", "Discuss trade-offs", "Slow down on details"],
    "detailedFeedback": "Solid session overall.",
}


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "SPEECH_STATE_PATH", str(tmp_path / "speech_state.json"))
    monkeypatch.setattr(settings, "RELISTEN_DELAY_S", 0.0)
    monkeypatch.setattr(settings, "TTS_CHUNK_GAP_S", 0.0)
    try:
        yield
    finally:
        unbind_model(CHAT_KEY)
        unbind_model(ANALYSIS_KEY)


@pytest.fixture
def fake_models():
    """Bind scripted chat and analysis callables; returns the captured calls."""

    calls: Dict[str, List[List[Dict[str, str]]]] = {"chat": [], "analysis": []}

    def _chat(*, messages):
        calls["chat"].append(messages)
        if len(calls["chat"]) == 1:
            return "Hello, I'm Kiwi Master. Tell me about a system you designed?"
        return "Thanks. What trade-offs did you consider?"

    def _analysis(*, messages):
        calls["analysis"].append(messages)
        return dict(REPORT)

    bind_model(CHAT_KEY, _chat)
    bind_model(ANALYSIS_KEY, _analysis)
    return calls


@pytest.fixture
def job_config():
    return JobInterviewConfig(
        job_title="Backend Engineer",
        company="Acme",
        job_description="Build and operate APIs.",
        required_skills="Python, PostgreSQL",
        experience_level="senior",
        interview_type="technical",
        user_profile=UserProfile(name="Asha", gender="female"),
    )


@pytest.fixture
def viva_config():
    return SubjectiveVivaConfig(
        subject="Operating Systems",
        topic="Virtual memory",
        subject_level="undergraduate",
    )


class ScriptedGateway:
    """In-memory stand-in for ResponseGateway that replays queued outcomes."""

    def __init__(self, outcomes: Sequence[object], *, hold: Optional[asyncio.Event] = None):
        self.outcomes = list(outcomes)
        self.hold = hold
        self.calls: List[List[Message]] = []

    async def request_next_turn(self, history, system_instruction):
        self.calls.append(list(history))
        if self.hold is not None:
            await self.hold.wait()
        outcome = self.outcomes.pop(0) if self.outcomes else "Please continue?"
        if isinstance(outcome, Exception):
            raise outcome
        return Message.create("assistant", outcome)


class _Stream:
    def __init__(self, results: Sequence[RecognitionResult]):
        self._results = list(results)
        self.aborted = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for result in self._results:
            if self.aborted:
                return
            await asyncio.sleep(0)
            yield result

    def abort(self) -> None:
        self.aborted = True


class FakeRecognitionEngine:
    """Each ``open`` consumes one scripted outcome.

    An outcome is a list of results, a ``RecognitionFailure``, or ``"hang"``
    to block until the caller gives up.
    """

    def __init__(self, outcomes: Sequence[object] = (), *, available: bool = True, check_error: Optional[Exception] = None):
        self.outcomes = list(outcomes)
        self.available = available
        self.check_error = check_error
        self.opens = 0
        self.checks = 0

    def is_available(self) -> bool:
        return self.available

    async def open(self, *, language: str, interim_results: bool):
        self.opens += 1
        outcome = self.outcomes.pop(0) if self.outcomes else []
        if outcome == "hang":
            await asyncio.Event().wait()
        if isinstance(outcome, Exception):
            raise outcome
        return _Stream(outcome)

    async def check_capability(self) -> None:
        self.checks += 1
        if self.check_error is not None:
            raise self.check_error


class FakeSynthesisEngine:
    def __init__(self, *, available: bool = True, fail_on: Sequence[int] = (), hold: Optional[asyncio.Event] = None):
        self.available = available
        self.fail_on = set(fail_on)
        self.hold = hold
        self.spoken: List[str] = []
        self.cancels = 0

    def is_available(self) -> bool:
        return self.available

    async def speak_chunk(self, text: str) -> None:
        index = len(self.spoken)
        self.spoken.append(text)
        if self.hold is not None:
            await self.hold.wait()
        await asyncio.sleep(0)
        if index in self.fail_on:
            raise RuntimeError("synthesis-failed")

    def cancel(self) -> None:
        self.cancels += 1


def final(text: str) -> List[RecognitionResult]:
    return [RecognitionResult(text=text, is_final=True)]


def network() -> RecognitionFailure:
    return RecognitionFailure("network")
