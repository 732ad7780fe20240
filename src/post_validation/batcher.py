"""Coalescing of concurrent requests into one downstream call."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from common.constants import DEFAULT_BATCH_DELAY
from common.logger import get_logger

from .errors import BatchDispatchFailure

logger = get_logger(__name__)

P = TypeVar("P")
R = TypeVar("R")


@dataclass
class BatchedRequest(Generic[P, R]):
    """A queued payload and the future its caller is waiting on."""

    payload: P
    future: "asyncio.Future[R]"


class RequestBatcher(Generic[P, R]):
    """Queue producers, one consumer that drains the queue per flush window.

    The first enqueue into an idle batcher arms a flush timer; later enqueues
    in the same window join the batch without re-arming it. On flush the queue
    is taken and cleared in one synchronous step, so a request enqueued while a
    batch is in flight starts the next window instead.

    Example:
        >>> batcher = RequestBatcher(worker.validate_batch, delay=0.1)
        >>> issues = await batcher.enqueue(ValidationRequest(content, "readability"))
    """

    def __init__(
        self,
        dispatch: Callable[[list[P]], Awaitable[Sequence[R]]],
        delay: float = DEFAULT_BATCH_DELAY,
        max_batch_size: int | None = None,
    ):
        """Initialize the batcher.

        Args:
            dispatch: Coroutine function taking the batch payloads and returning
                one result per payload, same order
            delay: Flush window in seconds
            max_batch_size: Flush early once this many requests are queued
        """
        self.dispatch = dispatch
        self.delay = delay
        self.max_batch_size = max_batch_size
        self._queue: list[BatchedRequest[P, R]] = []
        self._timer: asyncio.TimerHandle | None = None
        self._in_flight: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of requests waiting for the next flush."""
        return len(self._queue)

    def enqueue(self, payload: P) -> "asyncio.Future[R]":
        """Queue a payload for the next batch.

        Must be called from a running event loop.

        Returns:
            Future resolved with this payload's result, or failed with
            BatchDispatchFailure if the batch fails
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[R] = loop.create_future()
        self._queue.append(BatchedRequest(payload=payload, future=future))

        if self.max_batch_size is not None and len(self._queue) >= self.max_batch_size:
            self._flush_now()
        elif self._timer is None:
            self._timer = loop.call_later(self.delay, self._flush_now)

        return future

    async def submit(self, payload: P) -> R:
        """Enqueue a payload and wait for its result."""
        return await self.enqueue(payload)

    async def flush(self) -> None:
        """Dispatch whatever is queued now and wait for all in-flight batches."""
        self._flush_now()
        if self._in_flight:
            await asyncio.gather(*self._in_flight)

    def _flush_now(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        batch, self._queue = self._queue, []
        if not batch:
            return

        task = asyncio.get_running_loop().create_task(self._dispatch_batch(batch))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _dispatch_batch(self, batch: list[BatchedRequest[P, R]]) -> None:
        logger.debug(f"Dispatching batch of {len(batch)} request(s)")
        try:
            results = await self.dispatch([request.payload for request in batch])
        except asyncio.CancelledError:
            self._reject(batch, BatchDispatchFailure("Batched call was cancelled", len(batch)))
            raise
        except Exception as e:
            logger.error(f"Batch of {len(batch)} request(s) failed: {e}")
            self._reject(batch, BatchDispatchFailure(f"Batched call failed: {e}", len(batch)), e)
            return

        if len(results) != len(batch):
            message = f"Batched call returned {len(results)} result(s) for {len(batch)} request(s)"
            logger.error(message)
            self._reject(batch, BatchDispatchFailure(message, len(batch)))
            return

        for request, result in zip(batch, results):
            # A caller may have cancelled its await in the meantime
            if not request.future.done():
                request.future.set_result(result)

    @staticmethod
    def _reject(
        batch: list[BatchedRequest[Any, Any]],
        failure: BatchDispatchFailure,
        cause: BaseException | None = None,
    ) -> None:
        failure.__cause__ = cause
        for request in batch:
            if not request.future.done():
                request.future.set_exception(failure)
