"""Inference Bench Core - Load generation and metrics aggregation."""

from inference_bench.core.cancellation import CancellationToken
from inference_bench.core.config import BenchmarkConfig, load_config
from inference_bench.core.exceptions import BenchmarkError, ConfigError
from inference_bench.core.metrics import MetricsCollector, percentile
from inference_bench.core.models import (
    ConcurrencyLevelStats,
    ErrorKind,
    InvocationResult,
    LatencyStats,
    Stats,
)
from inference_bench.core.runner import Runner, concurrency_levels, generate_prompt
from inference_bench.core.worker_pool import WorkerPool

__all__ = [
    "BenchmarkConfig",
    "BenchmarkError",
    "CancellationToken",
    "ConcurrencyLevelStats",
    "ConfigError",
    "ErrorKind",
    "InvocationResult",
    "LatencyStats",
    "MetricsCollector",
    "Runner",
    "Stats",
    "WorkerPool",
    "concurrency_levels",
    "generate_prompt",
    "load_config",
    "percentile",
]
