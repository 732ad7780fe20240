"""Tests for multi-pass orchestration."""

import asyncio

import pytest

from post_validation.models import Issue, Severity, ValidationPass
from post_validation.notifications import Notifier
from post_validation.orchestrator import MultiPassOrchestrator, PassStatus, RunPhase


def issue(message, severity=Severity.LOW):
    return Issue(type="test", message=message, severity=severity)


def static_pass(name, priority, messages, log=None):
    """Pass returning fixed issues and recording when it runs."""

    async def validate(content):
        if log is not None:
            log.append(name)
        return [issue(m) for m in messages]

    return ValidationPass(name=name, priority=priority, validate=validate)


def failing_pass(name, priority, log=None):
    async def validate(content):
        if log is not None:
            log.append(name)
        raise RuntimeError(f"{name} exploded")

    return ValidationPass(name=name, priority=priority, validate=validate)


@pytest.fixture
def notifier():
    return Notifier(echo=False)


@pytest.mark.asyncio
async def test_passes_run_by_descending_priority(notifier):
    """Test higher priority passes run first."""
    log = []
    passes = [
        static_pass("Readability", 2, [], log),
        static_pass("Technical Accuracy", 5, [], log),
        static_pass("Content Structure", 4, [], log),
    ]

    await MultiPassOrchestrator(passes, delay=0, notifier=notifier).run("content")

    assert log == ["Technical Accuracy", "Content Structure", "Readability"]


@pytest.mark.asyncio
async def test_priority_ties_keep_given_order(notifier):
    """Test passes with equal priority keep their relative order."""
    log = []
    passes = [
        static_pass("B", 1, [], log),
        static_pass("A", 3, [], log),
        static_pass("C", 1, [], log),
        static_pass("D", 1, [], log),
    ]

    await MultiPassOrchestrator(passes, delay=0, notifier=notifier).run("content")

    assert log == ["A", "B", "C", "D"]


@pytest.mark.asyncio
async def test_issues_are_tagged_with_pass_name(notifier):
    """Test aggregated issues carry their pass as source."""
    passes = [static_pass("Low", 1, ["second"]), static_pass("High", 2, ["first", "also first"])]

    state = await MultiPassOrchestrator(passes, delay=0, notifier=notifier).run("content")

    assert [(i.message, i.source) for i in state.issues] == [
        ("first", "High"),
        ("also first", "High"),
        ("second", "Low"),
    ]


@pytest.mark.asyncio
async def test_failing_pass_does_not_stop_later_passes(notifier):
    """Test a pass failure is reported and lower passes still contribute."""
    log = []
    passes = [
        static_pass("Technical Accuracy", 5, ["tech"], log),
        failing_pass("Content Structure", 4, log),
        static_pass("Readability", 2, ["read"], log),
    ]
    orchestrator = MultiPassOrchestrator(passes, delay=0, notifier=notifier)

    state = await orchestrator.run("content")

    assert log == ["Technical Accuracy", "Content Structure", "Readability"]
    assert [i.message for i in state.issues] == ["tech", "read"]
    assert state.progress == 100
    assert state.is_validating is False
    assert state.error is None
    assert orchestrator.state == state
    assert notifier.messages("error") == ["Validation failed in Content Structure pass"]
    assert orchestrator.pass_status == {
        "Technical Accuracy": PassStatus.DONE,
        "Content Structure": PassStatus.FAILED,
        "Readability": PassStatus.DONE,
    }
    assert orchestrator.phase == RunPhase.COMPLETED


@pytest.mark.asyncio
async def test_progress_is_published_after_each_pass(notifier):
    """Test progress moves forward monotonically to 100."""
    published = []
    passes = [
        static_pass("A", 4, []),
        failing_pass("B", 3),
        static_pass("C", 2, []),
        static_pass("D", 1, []),
    ]
    orchestrator = MultiPassOrchestrator(
        passes, delay=0, notifier=notifier, on_change=lambda s: published.append(s)
    )

    await orchestrator.run("content")

    progress = [s.progress for s in published]
    assert progress == [0, 25, 50, 75, 100, 100]
    assert published[0].is_validating is True
    assert published[-1].is_validating is False


@pytest.mark.asyncio
async def test_empty_content_clears_issues(notifier):
    """Test validating empty content resets state without running passes."""
    log = []
    orchestrator = MultiPassOrchestrator(
        [static_pass("A", 1, ["x"], log)], delay=0, notifier=notifier
    )
    await orchestrator.run("content")

    await orchestrator.run("")

    assert log == ["A"]
    assert orchestrator.state.issues == []
    assert orchestrator.state.progress == 0
    assert orchestrator.phase == RunPhase.IDLE


@pytest.mark.asyncio
async def test_cancel_mid_run_returns_to_idle(notifier):
    """Test a cancelled run in flight does not leave the orchestrator running."""
    gate = asyncio.Event()

    async def validate(content):
        await gate.wait()
        return [issue(content)]

    orchestrator = MultiPassOrchestrator(
        [ValidationPass("Only", 1, validate)], delay=0, notifier=notifier
    )

    task = asyncio.create_task(orchestrator.run("draft"))
    await asyncio.sleep(0)
    assert orchestrator.phase == RunPhase.RUNNING

    orchestrator.cancel()
    gate.set()
    await task

    assert orchestrator.phase == RunPhase.IDLE
    assert orchestrator.state.issues == []

    await orchestrator.run("next draft")
    assert orchestrator.phase == RunPhase.COMPLETED


@pytest.mark.asyncio
async def test_debounced_updates_run_once_with_latest_content(notifier):
    """Test rapid content changes trigger a single run on the final content."""
    seen = []

    async def validate(content):
        seen.append(content)
        return [issue(content)]

    orchestrator = MultiPassOrchestrator(
        [ValidationPass("Only", 1, validate)], delay=0.02, notifier=notifier
    )

    orchestrator.update_content("d")
    orchestrator.update_content("dr")
    orchestrator.update_content("draft")
    await orchestrator.wait()

    assert seen == ["draft"]
    assert [i.message for i in orchestrator.state.issues] == ["draft"]


@pytest.mark.asyncio
async def test_stale_run_does_not_overwrite_newer_state(notifier):
    """Test a slow run finishing after a content change is discarded."""
    gate = asyncio.Event()

    async def validate(content):
        if content == "old":
            await gate.wait()
        return [issue(content)]

    orchestrator = MultiPassOrchestrator(
        [ValidationPass("Only", 1, validate)], delay=0.01, notifier=notifier
    )

    stale = asyncio.create_task(orchestrator.run("old"))
    await asyncio.sleep(0.01)

    orchestrator.update_content("new")
    await orchestrator.wait()
    assert [i.message for i in orchestrator.state.issues] == ["new"]

    gate.set()
    stale_result = await stale

    assert [i.message for i in stale_result.issues] == ["old"]
    assert [i.message for i in orchestrator.state.issues] == ["new"]
    assert orchestrator.state.progress == 100


@pytest.mark.asyncio
async def test_clearing_content_invalidates_run_in_flight(notifier):
    """Test emptying the editor mid-run leaves the state cleared."""
    gate = asyncio.Event()

    async def validate(content):
        await gate.wait()
        return [issue(content)]

    orchestrator = MultiPassOrchestrator(
        [ValidationPass("Only", 1, validate)], delay=0, notifier=notifier
    )

    task = asyncio.create_task(orchestrator.run("draft"))
    await asyncio.sleep(0)
    orchestrator.update_content("")
    gate.set()
    await task

    assert orchestrator.state.issues == []
    assert orchestrator.state.progress == 0
    assert orchestrator.state.is_validating is False
    assert orchestrator.phase == RunPhase.IDLE


@pytest.mark.asyncio
async def test_unexpected_error_becomes_error_state(notifier):
    """Test errors outside a pass surface as structured state."""
    passes = [
        ValidationPass("A", 1, lambda c: None),
        ValidationPass("B", None, lambda c: None),  # priority cannot be compared
    ]
    orchestrator = MultiPassOrchestrator(passes, delay=0, notifier=notifier)

    state = await orchestrator.run("content")

    assert state.error is not None
    assert state.error.type == "validation"
    assert state.is_validating is False
    assert state.progress == 100
    assert "Validation failed" in notifier.messages("error")
