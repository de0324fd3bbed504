import asyncio
import dataclasses
import logging

import pytest

from fakes import FakeModel, FakeProvider, prediction
from toxicity_checker.view import AnalysisView, Phase, can_analyze

THRESHOLD = 0.8


def ready_view(predictions=None, error=None):
    model = FakeModel(predictions=predictions, error=error)
    view = AnalysisView(FakeProvider(model), THRESHOLD)
    asyncio.run(view.mount())
    return view, model


def test_initial_state():
    view = AnalysisView(FakeProvider(), THRESHOLD)
    assert view.state.phase is Phase.INITIAL
    assert view.state.model_handle is None
    assert view.state.predictions == ()
    assert view.state.is_loading is False
    assert not view.can_analyze()


def test_mount_loads_once_with_threshold():
    provider = FakeProvider()
    view = AnalysisView(provider, THRESHOLD)

    async def scenario():
        await view.mount()
        await view.mount()

    asyncio.run(scenario())
    assert provider.calls == [THRESHOLD]
    assert view.state.model_handle is provider.model
    assert view.state.phase is Phase.READY
    assert view.state.is_loading is False


def test_mount_marks_loading_until_resolved():
    provider = FakeProvider()
    view = AnalysisView(provider, THRESHOLD)

    async def scenario():
        provider.gate = asyncio.Event()
        task = asyncio.create_task(view.mount())
        await asyncio.sleep(0)
        assert view.state.phase is Phase.LOADING
        assert view.state.is_loading is True
        # second mount while the first is in flight does not reload
        await view.mount()
        provider.gate.set()
        await task

    asyncio.run(scenario())
    assert provider.calls == [THRESHOLD]
    assert view.state.phase is Phase.READY


def test_load_failure_keeps_analysis_disabled(caplog):
    provider = FakeProvider(error=OSError("no weights"))
    view = AnalysisView(provider, THRESHOLD)
    view.set_text("you are awful")

    with caplog.at_level(logging.ERROR, logger="toxicity_checker.view"):
        asyncio.run(view.mount())

    assert view.state.phase is Phase.FAILED
    assert view.state.model_handle is None
    assert view.state.is_loading is False
    assert not view.can_analyze()
    assert "Failed to load model" in caplog.text

    before = dataclasses.replace(view.state)
    asyncio.run(view.analyze())
    asyncio.run(view.mount())
    assert view.state == before
    assert provider.calls == [THRESHOLD]
    assert provider.model.calls == []


def test_analyze_without_model_is_noop():
    provider = FakeProvider()
    view = AnalysisView(provider, THRESHOLD)
    view.set_text("hello")
    before = dataclasses.replace(view.state)

    asyncio.run(view.analyze())

    assert view.state == before
    assert provider.model.calls == []


def test_analyze_blank_text_is_noop():
    view, model = ready_view([prediction("insult", 0.9, 0.1)])
    for text in ("", "   ", "\n\t"):
        view.set_text(text)
        before = dataclasses.replace(view.state)
        asyncio.run(view.analyze())
        assert view.state == before
    assert model.calls == []


def test_analyze_while_loading_is_noop():
    view, model = ready_view([prediction("insult", 0.9, 0.1)])
    view.set_text("first")

    async def scenario():
        model.gate = asyncio.Event()
        task = asyncio.create_task(view.analyze())
        await asyncio.sleep(0)
        assert view.state.phase is Phase.ANALYZING
        assert view.state.is_loading is True

        view.set_text("second")
        before = dataclasses.replace(view.state)
        await view.analyze()
        assert view.state == before

        model.gate.set()
        await task

    asyncio.run(scenario())
    assert model.calls == ["first"]
    assert view.state.phase is Phase.COMPLETE


def test_analyze_replaces_predictions():
    view, model = ready_view([prediction("identity_attack", 0.1, 0.95)])
    view.set_text("  some text  ")

    asyncio.run(view.analyze())
    assert model.calls == ["  some text  "]
    assert [p.label for p in view.state.predictions] == ["identity_attack"]
    assert view.state.phase is Phase.COMPLETE
    assert view.state.is_loading is False

    model.predictions = [prediction("insult", 0.7, 0.3), prediction("threat", 0.99, 0.01)]
    asyncio.run(view.analyze())
    assert [p.label for p in view.state.predictions] == ["insult", "threat"]


def test_classify_failure_keeps_previous_predictions(caplog):
    view, model = ready_view([prediction("toxicity", 0.2, 0.8)])
    view.set_text("text")
    asyncio.run(view.analyze())
    previous = view.state.predictions

    model.error = RuntimeError("boom")
    with caplog.at_level(logging.ERROR, logger="toxicity_checker.view"):
        asyncio.run(view.analyze())

    assert view.state.predictions == previous
    assert view.state.is_loading is False
    assert view.state.phase is Phase.COMPLETE
    assert "Analysis failed" in caplog.text


def test_classify_failure_without_results_returns_to_ready():
    view, _ = ready_view(error=RuntimeError("boom"))
    view.set_text("text")
    asyncio.run(view.analyze())
    assert view.state.predictions == ()
    assert view.state.phase is Phase.READY
    assert view.can_analyze()


def test_repeated_analysis_is_structurally_identical():
    view, _ = ready_view([prediction("obscene", 0.6, 0.4), prediction("insult", 0.05, 0.95)])
    view.set_text("same text")
    asyncio.run(view.analyze())
    first = view.state.predictions
    asyncio.run(view.analyze())
    assert view.state.predictions == first


def test_unmount_discards_late_model():
    provider = FakeProvider()
    view = AnalysisView(provider, THRESHOLD)

    async def scenario():
        provider.gate = asyncio.Event()
        task = asyncio.create_task(view.mount())
        await asyncio.sleep(0)
        view.unmount()
        provider.gate.set()
        await task

    asyncio.run(scenario())
    assert not view.alive
    assert view.state.model_handle is None
    assert view.state.phase is Phase.LOADING


def test_unmount_discards_late_predictions():
    view, model = ready_view([prediction("threat", 0.01, 0.99)])
    view.set_text("text")

    async def scenario():
        model.gate = asyncio.Event()
        task = asyncio.create_task(view.analyze())
        await asyncio.sleep(0)
        view.unmount()
        model.gate.set()
        await task

    asyncio.run(scenario())
    assert view.state.predictions == ()


def test_can_analyze_predicate():
    view, _ = ready_view()
    view.set_text("x")
    assert can_analyze(view.state)
    view.state.is_loading = True
    assert not can_analyze(view.state)


def test_cancelled_load_releases_loading_flag():
    provider = FakeProvider()
    view = AnalysisView(provider, THRESHOLD)

    async def scenario():
        provider.gate = asyncio.Event()
        task = asyncio.create_task(view.mount())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        await view.mount()

    asyncio.run(scenario())
    assert view.state.is_loading is False
    assert view.state.phase is Phase.FAILED
    assert view.state.model_handle is None
    assert provider.calls == [THRESHOLD]
    view.set_text("text")
    assert not view.can_analyze()


def test_cancelled_analysis_releases_loading_flag():
    view, model = ready_view([prediction("threat", 0.01, 0.99)])
    view.set_text("text")

    async def scenario():
        model.gate = asyncio.Event()
        task = asyncio.create_task(view.analyze())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert view.state.is_loading is False
    assert view.state.phase is Phase.READY
    assert view.state.predictions == ()
    assert view.can_analyze()
