"""Thread-safe metrics collection and statistics."""

import math
import threading
import time
from typing import Callable, Optional, Sequence

import numpy as np

from inference_bench.core.models import ErrorKind, InvocationResult, LatencyStats, Stats

Clock = Callable[[], float]


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Calculate a percentile of an ascending sequence.

    Uses a continuous rank ``(p / 100) * (n - 1)`` with linear interpolation
    between the two neighbouring samples.

    Args:
        sorted_values: Samples sorted in ascending order.
        p: Percentile in the range 0-100.

    Returns:
        The interpolated percentile value, or 0.0 for an empty sequence.
    """
    n = len(sorted_values)
    if n == 0:
        return 0.0
    if p <= 0:
        return float(sorted_values[0])
    if p >= 100:
        return float(sorted_values[n - 1])

    rank = (p / 100.0) * (n - 1)
    lower = math.floor(rank)
    upper = math.ceil(rank)

    if lower == upper:
        return float(sorted_values[lower])

    weight = rank - lower
    return float(sorted_values[lower]) * (1 - weight) + float(sorted_values[upper]) * weight


def calculate_latency_stats(values: Sequence[float]) -> LatencyStats:
    """Calculate latency statistics from a list of values in milliseconds."""
    if len(values) == 0:
        return LatencyStats()

    arr = np.sort(np.asarray(values, dtype=float))
    return LatencyStats(
        avg=float(np.mean(arr)),
        min=float(arr[0]),
        max=float(arr[-1]),
        p50=percentile(arr, 50),
        p95=percentile(arr, 95),
        p99=percentile(arr, 99),
    )


def calculate_rate(count: int, duration_seconds: float) -> float:
    """Calculate a per-second rate, 0.0 when the duration is not positive."""
    if duration_seconds <= 0:
        return 0.0
    return count / duration_seconds


class MetricsCollector:
    """Accumulates invocation results for one concurrency level run.

    All mutation goes through :meth:`ingest`, which holds the collector lock
    for the whole read-modify-write. :meth:`snapshot` copies the accumulator
    under the same lock, so it may run concurrently with ingestion.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock: Clock = clock or time.monotonic
        self._lock = threading.Lock()
        self._init_state()

    def _init_state(self) -> None:
        self._total_requests = 0
        self._success_count = 0
        self._failure_count = 0
        self._total_input_tokens = 0
        self._total_output_tokens = 0
        self._errors_by_type: dict[str, int] = {}
        self._latencies: list[float] = []
        self._ttfts: list[float] = []
        self._window_start = self._clock()
        self._window_end: Optional[float] = None

    @property
    def finalized(self) -> bool:
        with self._lock:
            return self._window_end is not None

    def ingest(self, result: InvocationResult) -> None:
        """Add a single result to the running totals."""
        with self._lock:
            self._total_requests += 1

            if result.success:
                self._success_count += 1
                self._total_input_tokens += result.input_tokens
                self._total_output_tokens += result.output_tokens
                self._latencies.append(result.duration_ms)

                ttft_ms = result.ttft_ms
                if ttft_ms is not None and ttft_ms > 0:
                    self._ttfts.append(ttft_ms)
            else:
                self._failure_count += 1
                kind = result.error_kind or ErrorKind.UNKNOWN.value
                self._errors_by_type[kind] = self._errors_by_type.get(kind, 0) + 1

    def finalize(self) -> None:
        """Mark the end of the measurement window."""
        with self._lock:
            self._window_end = self._clock()

    def reset(self) -> None:
        """Clear all collected metrics and start a new window."""
        with self._lock:
            self._init_state()

    def snapshot(self) -> Stats:
        """Compute statistics from the current state without mutating it."""
        with self._lock:
            total_requests = self._total_requests
            success_count = self._success_count
            failure_count = self._failure_count
            total_input = self._total_input_tokens
            total_output = self._total_output_tokens
            errors_by_type = dict(self._errors_by_type)
            latencies = list(self._latencies)
            ttfts = list(self._ttfts)
            window_end = self._window_end if self._window_end is not None else self._clock()
            duration_seconds = window_end - self._window_start

        total_tokens = total_input + total_output
        success_rate = success_count / total_requests * 100.0 if total_requests > 0 else 0.0

        return Stats(
            total_requests=total_requests,
            success_count=success_count,
            failure_count=failure_count,
            success_rate=success_rate,
            duration_seconds=duration_seconds,
            total_input_tokens=total_input,
            total_output_tokens=total_output,
            total_tokens=total_tokens,
            token_throughput=calculate_rate(total_tokens, duration_seconds),
            requests_per_second=calculate_rate(success_count, duration_seconds),
            latency=calculate_latency_stats(latencies),
            has_ttft=len(ttfts) > 0,
            ttft=calculate_latency_stats(ttfts),
            errors_by_type=errors_by_type,
        )
