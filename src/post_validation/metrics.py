"""In-process timing metrics for validation calls."""

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")

MAX_METRICS = 1000


@dataclass(frozen=True)
class Metric:
    name: str
    value: float  # Milliseconds for durations
    timestamp: float


class PerformanceTracker:
    """Keeps the most recent metric samples in memory."""

    def __init__(self, max_metrics: int = MAX_METRICS):
        self.max_metrics = max_metrics
        self.metrics: list[Metric] = []

    def track_metric(self, name: str, value: float) -> None:
        self.metrics.append(Metric(name=name, value=value, timestamp=time.time()))
        # Keep only the last max_metrics samples
        if len(self.metrics) > self.max_metrics:
            del self.metrics[: -self.max_metrics]

    async def measure_async(self, name: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Await fn() and record its duration as ``<name>_duration``, even on failure."""
        start = time.perf_counter()
        try:
            return await fn()
        finally:
            self.track_metric(f"{name}_duration", (time.perf_counter() - start) * 1000)

    def get_metrics(self, name: str | None = None) -> list[Metric]:
        return [m for m in self.metrics if name is None or m.name == name]

    def get_average(self, name: str, last_n: int | None = None) -> float:
        """Average value of a metric over its last ``last_n`` samples (all if None).

        Returns:
            The mean, or 0.0 when there are no samples
        """
        values = [m.value for m in self.metrics if m.name == name]
        if last_n:
            values = values[-last_n:]
        if not values:
            return 0.0
        return sum(values) / len(values)

    def clear(self) -> None:
        self.metrics.clear()
