import asyncio

import pytest

from app.channel import Channel
from app.orchestrator import Orchestrator
from app.state import Indicator, SetIndicator, ShowText, ToggleVisibility
from conftest import FakeAssistant, failing_capture, fake_capture, fake_encode
from hotkey.interpreter import Command


def _run(assistant, command, capture=fake_capture, outcomes=1):
    async def scenario():
        feedback = Channel(asyncio.get_running_loop(), name="feedback")
        orchestrator = Orchestrator(capture, assistant, feedback, encode=fake_encode)
        immediate = orchestrator.dispatch(command)
        await orchestrator.wait_idle()
        results = [await asyncio.wait_for(feedback.recv(), 2) for _ in range(outcomes)]
        return immediate, results, feedback.pending()

    return asyncio.run(scenario())


def test_dismiss_and_toggle_are_immediate_without_work():
    async def scenario():
        assistant = FakeAssistant()
        feedback = Channel(asyncio.get_running_loop())
        orchestrator = Orchestrator(fake_capture, assistant, feedback, encode=fake_encode)
        dismiss = orchestrator.dispatch(Command.DISMISS)
        toggle = orchestrator.dispatch(Command.TOGGLE_VISIBILITY)
        return dismiss, toggle, orchestrator.in_flight, assistant.calls

    dismiss, toggle, in_flight, calls = asyncio.run(scenario())
    assert dismiss == (ShowText(None),)
    assert toggle == (ToggleVisibility(),)
    assert in_flight == 0
    assert calls == []


def test_direct_answer_success(assistant):
    immediate, results, leftover = _run(assistant, Command.TRIGGER_DIRECT_ANSWER)
    assert immediate == (SetIndicator(Indicator.LOADING), ShowText(None))
    assert results == [(SetIndicator(Indicator.IDLE), ShowText("42"))]
    assert leftover == 0
    assert assistant.calls == [("direct", "data:raw-image")]


def test_transcribe_then_answer_uses_transcription_strategy(assistant):
    _, results, _ = _run(assistant, Command.TRIGGER_TRANSCRIBE_THEN_ANSWER)
    assert results == [(SetIndicator(Indicator.IDLE), ShowText("42"))]
    assert assistant.calls == [("transcribe", "data:raw-image")]


def test_capture_failure_reports_single_error_and_skips_inference(assistant):
    _, results, leftover = _run(assistant, Command.TRIGGER_TRANSCRIBE_THEN_ANSWER, capture=failing_capture)
    assert results == [(SetIndicator(Indicator.ERROR),)]
    assert leftover == 0
    assert assistant.calls == []


def test_inference_failure_reports_error(empty_response):
    assistant = FakeAssistant(error=empty_response)
    _, results, _ = _run(assistant, Command.TRIGGER_DIRECT_ANSWER)
    assert results == [(SetIndicator(Indicator.ERROR),)]


def test_overlapping_triggers_each_report():
    assistant = FakeAssistant(delay=0.05)

    async def scenario():
        feedback = Channel(asyncio.get_running_loop())
        orchestrator = Orchestrator(fake_capture, assistant, feedback, encode=fake_encode)
        orchestrator.dispatch(Command.TRIGGER_DIRECT_ANSWER)
        orchestrator.dispatch(Command.TRIGGER_TRANSCRIBE_THEN_ANSWER)
        assert orchestrator.in_flight == 2
        await orchestrator.wait_idle()
        return [await asyncio.wait_for(feedback.recv(), 2) for _ in range(2)], orchestrator.in_flight

    results, in_flight = asyncio.run(scenario())
    assert results == [(SetIndicator(Indicator.IDLE), ShowText("42"))] * 2
    assert in_flight == 0
    assert sorted(kind for kind, _ in assistant.calls) == ["direct", "transcribe"]


def test_unknown_command_rejected():
    async def scenario():
        orchestrator = Orchestrator(fake_capture, FakeAssistant(), Channel(asyncio.get_running_loop()))
        orchestrator.dispatch("bogus")

    with pytest.raises(ValueError):
        asyncio.run(scenario())
