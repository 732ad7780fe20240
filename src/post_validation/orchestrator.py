"""Multi-pass validation runs with progress, debounce and stale-run protection."""

from collections.abc import Callable, Sequence
from dataclasses import replace
from enum import Enum
from typing import Any

from common.env import env
from common.logger import get_logger

from .debounce import Debouncer
from .errors import PassFailure, classify_error
from .models import Issue, ValidationPass, ValidationState
from .notifications import Notifier

logger = get_logger(__name__)


class RunPhase(Enum):
    """Lifecycle of one orchestration run."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


class PassStatus(Enum):
    """Outcome of one pass within a run."""

    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


class MultiPassOrchestrator:
    """Runs validation passes in priority order and publishes their issues.

    Passes run one at a time, highest priority first (ties keep their given
    order), so progress only moves forward. A failing pass is reported through
    the notifier and skipped; the remaining passes still run.

    Every run takes a fresh run id. Only the newest run may publish state, so a
    slow run that finishes after the content changed is silently discarded.
    """

    def __init__(
        self,
        passes: Sequence[ValidationPass],
        delay: float | None = None,
        notifier: Notifier | None = None,
        on_change: Callable[[ValidationState], Any] | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            passes: Validation passes to run
            delay: Debounce delay in seconds (default: VALIDATION_DEBOUNCE_DELAY)
            notifier: Side channel for pass failures
            on_change: Called with every published state
        """
        self.passes = list(passes)
        self.notifier = notifier or Notifier()
        self.on_change = on_change
        self.phase = RunPhase.IDLE
        self.pass_status: dict[str, PassStatus] = {}
        self._state = ValidationState()
        self._run_id = 0
        self._debouncer = Debouncer(env.debounce_delay() if delay is None else delay, self.run)

    @property
    def state(self) -> ValidationState:
        return self._state

    def update_content(self, content: str) -> None:
        """React to an editor change.

        Any run in flight becomes stale. Empty content clears the issues at
        once; anything else is validated after the debounce delay.
        """
        run_id = self._next_run_id()
        if not content:
            self._debouncer.cancel()
            self.phase = RunPhase.IDLE
            self._publish(run_id, issues=[], is_validating=False, progress=0.0, error=None)
            return
        self._debouncer.trigger(content)

    async def wait(self) -> None:
        """Wait for the pending debounced run (if any) to finish."""
        await self._debouncer.wait()

    def cancel(self) -> None:
        """Drop the pending debounced run and ignore any run in flight."""
        self._debouncer.cancel()
        self._next_run_id()
        self.phase = RunPhase.IDLE

    async def run(self, content: str) -> ValidationState:
        """Run every pass against content.

        Args:
            content: Document text

        Returns:
            The state this run produced. It is only published if no newer run
            or content change happened meanwhile.
        """
        run_id = self._next_run_id()
        if not content:
            self.phase = RunPhase.IDLE
            self._publish(run_id, issues=[], is_validating=False, progress=0.0, error=None)
            return ValidationState()

        self.phase = RunPhase.RUNNING
        self.pass_status = {}
        self._publish(run_id, is_validating=True, progress=0.0, error=None)

        issues: list[Issue] = []
        error = None
        try:
            ordered = sorted(self.passes, key=lambda p: p.priority, reverse=True)
            for completed, validation_pass in enumerate(ordered, start=1):
                issues.extend(await self._run_pass(validation_pass, content))
                self._publish(run_id, progress=completed / len(ordered) * 100)
        except Exception as e:
            logger.error(f"Validation failed: {e}", exc_info=True)
            error = classify_error(e)
            self.notifier.error("Validation failed")

        result = ValidationState(issues=issues, is_validating=False, progress=100.0, error=error)
        if self._publish(run_id, issues=issues, is_validating=False, progress=100.0, error=error):
            self.phase = RunPhase.COMPLETED
        else:
            logger.debug(f"Discarding stale validation run {run_id}")
        return result

    async def _run_pass(self, validation_pass: ValidationPass, content: str) -> list[Issue]:
        name = validation_pass.name
        self.pass_status[name] = PassStatus.RUNNING
        try:
            pass_issues = await validation_pass.validate(content)
        except Exception as e:
            failure = PassFailure(name, e)
            logger.error(str(failure))
            self.notifier.error(f"Validation failed in {name} pass")
            self.pass_status[name] = PassStatus.FAILED
            return []

        self.pass_status[name] = PassStatus.DONE
        return [replace(issue, source=name) for issue in pass_issues]

    def _next_run_id(self) -> int:
        self._run_id += 1
        return self._run_id

    def _publish(self, run_id: int, **changes: Any) -> bool:
        if run_id != self._run_id:
            return False
        self._state = replace(self._state, **changes)
        if self.on_change is not None:
            self.on_change(self._state)
        return True
