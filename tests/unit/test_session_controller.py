import asyncio

import pytest

from conftest import FakeRecognitionEngine, FakeSynthesisEngine, ScriptedGateway, final, network
from response_gateway import GatewayBusyError, GatewayError, GatewayErrorKind
from session_controller import APOLOGY, SessionController, SessionPhase
from speech import SpeechInputAdapter, SpeechOutputAdapter

OPENING = "Hi Asha, I'm Kiwi Master. What drew you to backend work?"


def _controller(config, outcomes, **kwargs):
    gateway = ScriptedGateway(outcomes)
    return SessionController(config, gateway, **kwargs), gateway


@pytest.mark.asyncio
async def test_start_appends_opening_without_counting(job_config):
    controller, gateway = _controller(job_config, [OPENING])
    assert controller.phase is SessionPhase.INITIALIZING
    assert controller.transcript[0].role == "system"
    assert "Kiwi Master" in controller.transcript[0].content

    await controller.start()
    assert gateway.calls == [[]]
    assert [m.content for m in controller.visible_messages] == [OPENING]
    assert controller.question_count == 0
    assert controller.phase is SessionPhase.AWAITING_USER_INPUT
    assert controller.state.events[0]["span"] == "gateway.opening"

    assert await controller.start() is None
    assert len(gateway.calls) == 1


@pytest.mark.asyncio
async def test_opening_failure_uses_scripted_opening(viva_config):
    error = GatewayError(GatewayErrorKind.QUOTA_EXCEEDED, "quota")
    controller, _ = _controller(viva_config, [error])
    await controller.start()
    assert controller.visible_messages[0].content.startswith("Hello! I'm Professor Kiwi")
    assert controller.last_error is error
    assert controller.notices[0].variant == "destructive"
    assert controller.phase is SessionPhase.AWAITING_USER_INPUT


@pytest.mark.asyncio
async def test_submit_sends_full_history_and_counts_question(job_config):
    controller, gateway = _controller(job_config, [OPENING, "Nice. How do you handle retries?"])
    await controller.start()

    assert await controller.submit_user_response("  I like distributed systems.  ") is True
    history = gateway.calls[-1]
    assert [m.role for m in history] == ["assistant", "user"]
    assert history[1].content == "I like distributed systems."
    assert controller.question_count == 1
    assert controller.phase is SessionPhase.AWAITING_USER_INPUT


@pytest.mark.asyncio
async def test_blank_or_busy_submissions_are_ignored(job_config):
    controller, gateway = _controller(job_config, [OPENING])
    assert await controller.submit_user_response("too early") is False
    await controller.start()
    assert await controller.submit_user_response("   ") is False

    controller.state.phase = SessionPhase.AWAITING_AI_RESPONSE
    assert await controller.submit_user_response("second") is False
    assert len(gateway.calls) == 1
    assert len(controller.transcript) == 2


@pytest.mark.asyncio
async def test_clarifying_followup_does_not_count(job_config):
    controller, _ = _controller(job_config, [OPENING, "Could you give an example?"])
    await controller.start()
    await controller.submit_user_response("Sure.")
    assert controller.question_count == 0


@pytest.mark.asyncio
async def test_count_is_capped_and_completion_is_terminal(job_config):
    replies = [f"Question {n}?" for n in range(1, 8)] + ["Thank you, the interview is complete."]
    controller, gateway = _controller(job_config, [OPENING] + replies)
    await controller.start()
    for n in range(8):
        assert await controller.submit_user_response(f"answer {n}")
    assert controller.question_count == 5
    assert controller.is_complete is True
    assert controller.phase is SessionPhase.COMPLETE

    before = controller.transcript
    assert await controller.submit_user_response("one more") is False
    assert controller.transcript == before
    assert len(gateway.calls) == 9


@pytest.mark.asyncio
async def test_gateway_failure_appends_apology_and_recovers(job_config):
    error = GatewayError(GatewayErrorKind.UNKNOWN, "boom")
    controller, _ = _controller(job_config, [OPENING, error, "Next question?"])
    await controller.start()

    assert await controller.submit_user_response("My answer") is True
    assert controller.visible_messages[-1].content == APOLOGY
    assert controller.last_error is error
    assert controller.phase is SessionPhase.AWAITING_USER_INPUT
    assert controller.notices[-1].variant == "destructive"

    controller.dismiss_notice(0)
    assert controller.notices == []

    await controller.submit_user_response("Retrying my answer")
    assert controller.visible_messages[-1].content == "Next question?"
    assert controller.question_count == 1


@pytest.mark.asyncio
async def test_transcript_is_append_only(job_config):
    controller, _ = _controller(job_config, [OPENING, "Why?", "How?"])
    await controller.start()
    snapshots = [controller.transcript]
    for answer in ("a", "b"):
        await controller.submit_user_response(answer)
        snapshots.append(controller.transcript)
    for earlier, later in zip(snapshots, snapshots[1:]):
        assert later[: len(earlier)] == earlier


@pytest.mark.asyncio
async def test_voice_mode_relistens_after_playback(job_config, tmp_path):
    recognition = FakeRecognitionEngine([final("I led the migration"), final("We used queues")])
    synthesis = FakeSynthesisEngine()
    controller, gateway = _controller(
        job_config,
        [OPENING, "What was hardest?", "Thanks, the interview is complete."],
        speech_input=SpeechInputAdapter(recognition, watchdog_s=1.0),
        speech_output=SpeechOutputAdapter(synthesis, chunk_gap_s=0),
        voice_mode=True,
        relisten_delay_s=0,
    )
    await controller.start()
    await controller.drain()

    assert [m.content for m in controller.visible_messages if m.role == "user"] == [
        "I led the migration",
        "We used queues",
    ]
    assert controller.is_complete
    assert synthesis.spoken[0] == OPENING
    assert recognition.opens == 2
    await controller.close()


@pytest.mark.asyncio
async def test_persistent_network_failure_switches_to_text_only(job_config):
    recognition = FakeRecognitionEngine([network(), network(), network()])
    speech_input = SpeechInputAdapter(recognition, watchdog_s=1.0, retry_base_s=0.0)
    controller, _ = _controller(
        job_config,
        [OPENING],
        speech_input=speech_input,
        speech_output=SpeechOutputAdapter(FakeSynthesisEngine(), chunk_gap_s=0),
        voice_mode=True,
        relisten_delay_s=0,
    )
    await controller.start()
    await controller.drain()

    assert controller.voice_mode is False
    assert controller.notices[-1].title == "Switching to Text Input"
    assert controller.notices[-1].variant == "warning"
    assert controller.phase is SessionPhase.AWAITING_USER_INPUT


@pytest.mark.asyncio
async def test_text_submission_cancels_pending_voice(job_config):
    hold = asyncio.Event()
    synthesis = FakeSynthesisEngine(hold=hold)
    controller, _ = _controller(
        job_config,
        [OPENING, "Follow-up question?"],
        speech_output=SpeechOutputAdapter(synthesis, chunk_gap_s=0),
    )
    await controller.start()
    await asyncio.sleep(0.01)
    assert controller.speech_output.state.is_speaking

    await controller.submit_user_response("Typed answer")
    assert synthesis.cancels >= 1
    hold.set()
    await controller.drain()
    assert synthesis.spoken[-1] == "Follow-up question?"
    await controller.close()


@pytest.mark.asyncio
async def test_voice_mode_needs_usable_input(job_config):
    controller, _ = _controller(job_config, [OPENING])
    await controller.start()
    assert controller.set_voice_mode(True) is False
    assert controller.notices[-1].title == "Voice Features Limited"
    assert controller.replay_last() is False


@pytest.mark.asyncio
async def test_open_constructs_and_starts(job_config):
    controller = await SessionController.open(job_config, ScriptedGateway([OPENING]))
    assert controller.phase is SessionPhase.AWAITING_USER_INPUT
    assert controller.visible_messages[0].content == OPENING


@pytest.mark.asyncio
async def test_unexpected_gateway_exception_still_apologizes(job_config):
    controller, _ = _controller(job_config, [OPENING, RuntimeError("client closed")])
    await controller.start()

    assert await controller.submit_user_response("My answer") is True
    assert controller.visible_messages[-1].content == APOLOGY
    assert controller.phase is SessionPhase.AWAITING_USER_INPUT
    assert controller.last_error.kind is GatewayErrorKind.UNKNOWN
    assert await controller.submit_user_response("Trying again") is True


@pytest.mark.asyncio
async def test_unexpected_opening_exception_uses_scripted_opening(job_config):
    controller, _ = _controller(job_config, [GatewayBusyError("busy")])
    await controller.start()
    assert controller.visible_messages[0].content.startswith("Hello")
    assert controller.last_error.kind is GatewayErrorKind.UNKNOWN
    assert controller.phase is SessionPhase.AWAITING_USER_INPUT


@pytest.mark.asyncio
async def test_cancelled_turn_returns_to_awaiting_input(job_config):
    controller, gateway = _controller(job_config, [OPENING, "Next?"])
    await controller.start()
    gateway.hold = asyncio.Event()

    turn = asyncio.ensure_future(controller.submit_user_response("Answer"))
    await asyncio.sleep(0)
    turn.cancel()
    with pytest.raises(asyncio.CancelledError):
        await turn
    assert controller.phase is SessionPhase.AWAITING_USER_INPUT


@pytest.mark.asyncio
async def test_concurrent_submits_make_one_gateway_call(job_config):
    controller, gateway = _controller(job_config, [OPENING, "And then?"])
    await controller.start()
    before = len(controller.transcript)
    gateway.hold = asyncio.Event()

    both = asyncio.gather(
        controller.submit_user_response("First answer"),
        controller.submit_user_response("Second answer"),
    )
    await asyncio.sleep(0)
    assert controller.phase is SessionPhase.AWAITING_AI_RESPONSE
    gateway.hold.set()

    assert await both == [True, False]
    assert len(gateway.calls) == 2
    added = controller.transcript[before:]
    assert [(m.role, m.content) for m in added] == [("user", "First answer"), ("assistant", "And then?")]


@pytest.mark.asyncio
async def test_voice_mode_without_speech_output_listens_after_each_turn(job_config):
    recognition = FakeRecognitionEngine([final("I led the migration"), final("We used queues")])
    controller, gateway = _controller(
        job_config,
        [OPENING, "What was hardest?", "Thanks, the interview is complete."],
        speech_input=SpeechInputAdapter(recognition, watchdog_s=1.0),
        voice_mode=True,
        relisten_delay_s=0,
    )
    await controller.start()
    await controller.drain()

    assert recognition.opens == 2
    assert [m.content for m in controller.visible_messages if m.role == "user"] == [
        "I led the migration",
        "We used queues",
    ]
    assert controller.is_complete
    await controller.close()


@pytest.mark.asyncio
async def test_practice_session_uses_bank_size_and_scripted_first_question():
    from interview_setup import PracticeConfig

    config = PracticeConfig(practice_type="technical")
    controller, _ = _controller(config, [GatewayError(GatewayErrorKind.UNKNOWN, "down")])
    assert controller.total_questions == 5
    assert "use these in order" in controller.transcript[0].content

    await controller.start()
    assert controller.visible_messages[0].content.endswith(
        "Can you explain the difference between var, let, and const in JavaScript?"
    )
