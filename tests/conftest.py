"""Common test fixtures for Inference Bench tests."""

import threading
import time
from typing import Optional

import pytest
import structlog

from inference_bench.core.config import BenchmarkConfig, parse_config
from inference_bench.core.models import (
    ConcurrencyLevelStats,
    ErrorKind,
    InvocationResult,
    LatencyStats,
    Stats,
)


# ============================================================
# Helpers
# ============================================================


def make_result(
    success: bool = True,
    duration: float = 0.1,
    ttft: Optional[float] = None,
    input_tokens: int = 100,
    output_tokens: int = 50,
    error_kind: Optional[str] = None,
    start_time: float = 1000.0,
) -> InvocationResult:
    """Build an InvocationResult with sensible defaults."""
    if not success:
        input_tokens = 0
        output_tokens = 0
    return InvocationResult(
        success=success,
        start_time=start_time,
        end_time=start_time + duration,
        ttft=ttft,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        error_kind=error_kind,
    )


class FakeClock:
    """Manually advanced clock for deterministic window durations."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging configuration done by CLI tests."""
    yield
    structlog.reset_defaults()


# ============================================================
# Sample Data Fixtures
# ============================================================


@pytest.fixture
def sample_config_data() -> dict:
    """Valid configuration mapping."""
    return {
        "endpoint": {
            "url": "http://localhost:8000/v1/chat/completions",
            "api_key": "test-key",
            "timeout_seconds": 30,
        },
        "model": {"id": "deepseek-r1", "quota": 100},
        "test": {
            "prompt_size": 200,
            "prompt_template": "",
            "streaming": True,
            "non_streaming": True,
            "max_tokens": 128,
            "temperature": 0.5,
        },
        "concurrency": {
            "start": 1,
            "end": 3,
            "step": 2,
            "duration_seconds": 0.2,
            "progress_interval_seconds": 0.05,
        },
        "output": {"report_file": "report.md"},
    }


@pytest.fixture
def sample_config(sample_config_data: dict) -> BenchmarkConfig:
    """Validated configuration."""
    return parse_config(sample_config_data)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_stats() -> Stats:
    """Statistics for a level with successes, TTFT samples and failures."""
    return Stats(
        total_requests=100,
        success_count=95,
        failure_count=5,
        success_rate=95.0,
        duration_seconds=60.0,
        total_input_tokens=9500,
        total_output_tokens=4750,
        total_tokens=14250,
        token_throughput=237.5,
        requests_per_second=1.58,
        latency=LatencyStats(avg=1200.0, min=800.0, max=2500.0, p50=1100.0, p95=2000.0, p99=2400.0),
        has_ttft=True,
        ttft=LatencyStats(avg=300.0, min=150.0, max=900.0, p50=280.0, p95=600.0, p99=850.0),
        errors_by_type={ErrorKind.THROTTLING.value: 4, ErrorKind.TIMEOUT.value: 1},
    )


@pytest.fixture
def sample_level_stats(sample_stats: Stats) -> list[ConcurrencyLevelStats]:
    """Results for one streaming and one non-streaming level."""
    non_streaming = sample_stats.model_copy(
        update={"has_ttft": False, "ttft": LatencyStats(), "errors_by_type": {}, "failure_count": 0}
    )
    return [
        ConcurrencyLevelStats(concurrency_level=1, streaming=True, stats=sample_stats),
        ConcurrencyLevelStats(concurrency_level=1, streaming=False, stats=non_streaming),
    ]


# ============================================================
# Mock Classes
# ============================================================


class FakeInvocationClient:
    """Invocation client that sleeps instead of calling a server."""

    def __init__(
        self,
        latency: float = 0.005,
        ttft: Optional[float] = 0.001,
        fail_every: int = 0,
        error_kind: Optional[str] = ErrorKind.THROTTLING.value,
        raise_error: bool = False,
    ):
        self.latency = latency
        self.ttft = ttft
        self.fail_every = fail_every
        self.error_kind = error_kind
        self.raise_error = raise_error
        self.calls = 0
        self.streaming_calls = 0
        self.closed = False

    def invoke(self, prompt: str, streaming: bool) -> InvocationResult:
        self.calls += 1
        if streaming:
            self.streaming_calls += 1
        if self.raise_error:
            raise RuntimeError("client exploded")

        start = time.monotonic()
        time.sleep(self.latency)
        end = time.monotonic()

        if self.fail_every and self.calls % self.fail_every == 0:
            return InvocationResult(
                success=False,
                start_time=start,
                end_time=end,
                error_kind=self.error_kind,
            )

        return InvocationResult(
            success=True,
            start_time=start,
            end_time=end,
            ttft=self.ttft if streaming else None,
            input_tokens=10,
            output_tokens=20,
        )

    def close(self) -> None:
        self.closed = True


class FakeClientFactory:
    """Creates FakeInvocationClients and remembers them."""

    def __init__(self, **client_kwargs):
        self.client_kwargs = client_kwargs
        self.clients: list[FakeInvocationClient] = []
        self._lock = threading.Lock()

    def __call__(self) -> FakeInvocationClient:
        client = FakeInvocationClient(**self.client_kwargs)
        with self._lock:
            self.clients.append(client)
        return client

    @property
    def total_calls(self) -> int:
        return sum(c.calls for c in self.clients)


@pytest.fixture
def fake_client_factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
def result_builder():
    """Builder for InvocationResult instances."""
    return make_result


@pytest.fixture
def factory_builder():
    """Builder for FakeClientFactory instances with custom client options."""
    return FakeClientFactory
