"""Debounced callbacks on the asyncio event loop."""

import asyncio
import inspect
from collections.abc import Callable
from typing import Any

from common.logger import get_logger

logger = get_logger(__name__)


class Debouncer:
    """Runs a callback once input has been quiet for ``delay`` seconds.

    Each ``trigger`` cancels the pending call and schedules a new one with the
    latest arguments. Coroutine callbacks are run as tasks; ``wait`` resolves
    once no call is pending and every launched task has finished.

    Example:
        >>> debouncer = Debouncer(0.5, orchestrator.run)
        >>> debouncer.trigger("# Draft")
        >>> debouncer.trigger("# Draft v2")  # only this one runs
        >>> await debouncer.wait()
    """

    def __init__(self, delay: float, callback: Callable[..., Any]):
        self.delay = delay
        self.callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[Any]] = set()
        self._idle: asyncio.Future[None] | None = None

    @property
    def pending(self) -> bool:
        """Whether a call is scheduled but has not fired yet."""
        return self._handle is not None

    def trigger(self, *args: Any) -> None:
        """Schedule the callback, replacing any call not yet fired."""
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        if self._idle is None or self._idle.done():
            self._idle = loop.create_future()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def cancel(self) -> None:
        """Drop the pending call, if any. Running tasks are left to finish."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._settle_if_idle()

    async def wait(self) -> None:
        """Wait until no call is pending and launched callbacks are done."""
        if self._idle is not None:
            await asyncio.shield(self._idle)

    def _fire(self, args: tuple[Any, ...]) -> None:
        self._handle = None
        try:
            result = self.callback(*args)
        except Exception:
            logger.error("Debounced callback failed", exc_info=True)
            self._settle_if_idle()
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)
        else:
            self._settle_if_idle()

    def _task_done(self, task: "asyncio.Task[Any]") -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Debounced task failed: {task.exception()}")
        self._settle_if_idle()

    def _settle_if_idle(self) -> None:
        if self._handle is None and not self._tasks and self._idle is not None:
            if not self._idle.done():
                self._idle.set_result(None)
