import asyncio

import pytest

from conftest import FakeRecognitionEngine, final, network
from speech import RecognitionFailure, RecognitionResult, SpeechInputAdapter, SpeechInputErrorKind, SpeechStateStore


class _Sleeps:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def _adapter(engine, tmp_path, **kwargs):
    sleeps = _Sleeps()
    adapter = SpeechInputAdapter(
        engine,
        store=SpeechStateStore(tmp_path / "speech.json"),
        max_retries=2,
        retry_base_s=1.0,
        watchdog_s=0.05,
        sleep=sleeps,
        **kwargs,
    )
    return adapter, sleeps


@pytest.mark.asyncio
async def test_final_transcript_returned(tmp_path):
    engine = FakeRecognitionEngine(
        [[RecognitionResult("I built", False), RecognitionResult("I built a queue", True)]]
    )
    adapter, _ = _adapter(engine, tmp_path)
    text = await adapter.start_listening()
    assert text == "I built a queue"
    assert adapter.state.transcript == "I built a queue"
    assert adapter.state.is_listening is False
    assert adapter.state.error is None


@pytest.mark.asyncio
async def test_network_errors_back_off_then_disable(tmp_path):
    engine = FakeRecognitionEngine([network(), network(), network()])
    adapter, sleeps = _adapter(engine, tmp_path)

    assert await adapter.start_listening() is None
    assert engine.opens == 3
    assert sleeps.delays == [1.0, 2.0]
    assert adapter.state.network_error_detected is True
    assert adapter.state.error_kind is SpeechInputErrorKind.NETWORK_PERSISTENT

    # Disabled: the engine is not touched again.
    assert await adapter.start_listening() is None
    assert engine.opens == 3
    assert "text input" in adapter.state.error


@pytest.mark.asyncio
async def test_network_recovers_within_ceiling(tmp_path):
    engine = FakeRecognitionEngine([network(), final("hello there")])
    adapter, sleeps = _adapter(engine, tmp_path)
    assert await adapter.start_listening() == "hello there"
    assert sleeps.delays == [1.0]
    assert adapter.state.network_error_detected is False


@pytest.mark.asyncio
async def test_disabled_flag_persists_across_instances(tmp_path):
    engine = FakeRecognitionEngine([network(), network(), network()])
    adapter, _ = _adapter(engine, tmp_path)
    await adapter.start_listening()

    fresh_engine = FakeRecognitionEngine([final("hi")])
    restored, _ = _adapter(fresh_engine, tmp_path)
    assert restored.state.network_error_detected is True
    assert restored.usable is False
    assert await restored.start_listening() is None
    assert fresh_engine.opens == 0


@pytest.mark.asyncio
async def test_watchdog_retries_then_times_out(tmp_path):
    engine = FakeRecognitionEngine(["hang", "hang", "hang"])
    adapter, sleeps = _adapter(engine, tmp_path)
    assert await adapter.start_listening() is None
    assert engine.opens == 3
    assert sleeps.delays == []
    assert adapter.state.error_kind is SpeechInputErrorKind.TIMEOUT
    assert adapter.state.network_error_detected is False


@pytest.mark.asyncio
async def test_no_speech_resets_retry_counter(tmp_path):
    engine = FakeRecognitionEngine([network(), RecognitionFailure("no-speech"), network(), network(), final("ok")])
    adapter, sleeps = _adapter(engine, tmp_path)

    assert await adapter.start_listening() is None
    assert adapter.state.error_kind is SpeechInputErrorKind.NO_SPEECH_DETECTED

    assert await adapter.start_listening() == "ok"
    assert sleeps.delays == [1.0, 1.0, 2.0]
    assert adapter.state.network_error_detected is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "code,kind",
    [
        ("not-allowed", SpeechInputErrorKind.PERMISSION_DENIED),
        ("permission-denied", SpeechInputErrorKind.PERMISSION_DENIED),
        ("aborted", SpeechInputErrorKind.ABORTED),
        ("audio-capture", SpeechInputErrorKind.UNSUPPORTED),
        ("service-not-allowed", SpeechInputErrorKind.UNSUPPORTED),
    ],
)
async def test_platform_failures_map_to_kinds(tmp_path, code, kind):
    engine = FakeRecognitionEngine([RecognitionFailure(code)])
    adapter, _ = _adapter(engine, tmp_path)
    assert await adapter.start_listening() is None
    assert adapter.state.error_kind is kind
    assert engine.opens == 1


@pytest.mark.asyncio
async def test_unsupported_engine_never_opened(tmp_path):
    engine = FakeRecognitionEngine(available=False)
    adapter, _ = _adapter(engine, tmp_path)
    assert await adapter.start_listening() is None
    assert adapter.state.error_kind is SpeechInputErrorKind.UNSUPPORTED
    assert engine.opens == 0


@pytest.mark.asyncio
async def test_stop_listening_cancels_attempt(tmp_path):
    engine = FakeRecognitionEngine(["hang"])
    adapter = SpeechInputAdapter(engine, watchdog_s=10.0)
    pending = asyncio.ensure_future(adapter.start_listening())
    await asyncio.sleep(0.01)
    assert adapter.busy

    # Second start while busy is ignored.
    assert await adapter.start_listening() is None
    assert engine.opens == 1

    adapter.stop_listening()
    assert await pending is None
    assert adapter.state.is_listening is False
    adapter.stop_listening()


@pytest.mark.asyncio
async def test_reset_reenables_after_successful_capability_check(tmp_path):
    engine = FakeRecognitionEngine([network(), network(), network(), final("back")])
    adapter, _ = _adapter(engine, tmp_path)
    await adapter.start_listening()
    assert adapter.state.network_error_detected

    assert await adapter.reset_network_error_state() is True
    assert engine.checks == 1
    assert SpeechStateStore(tmp_path / "speech.json").load_network_error() is False
    assert await adapter.start_listening() == "back"


@pytest.mark.asyncio
async def test_reset_check_network_failure_disables_again(tmp_path):
    engine = FakeRecognitionEngine(check_error=network())
    adapter, _ = _adapter(engine, tmp_path)
    assert await adapter.reset_network_error_state() is False
    assert adapter.state.network_error_detected is True
    assert SpeechStateStore(tmp_path / "speech.json").load_network_error() is True


@pytest.mark.asyncio
async def test_default_store_uses_configured_state_path():
    from config import settings

    engine = FakeRecognitionEngine([network(), network(), network()])
    adapter = SpeechInputAdapter(engine, max_retries=2, retry_base_s=0.0, watchdog_s=0.05)
    await adapter.start_listening()

    assert SpeechStateStore(settings.SPEECH_STATE_PATH).load_network_error() is True
    restored = SpeechInputAdapter(FakeRecognitionEngine())
    assert restored.state.network_error_detected is True
    assert restored.state.error_kind is SpeechInputErrorKind.NETWORK_PERSISTENT
