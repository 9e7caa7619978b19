"""Data models for inference benchmarking."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ErrorKind(str, Enum):
    """Coarse classification labels for failed requests."""

    THROTTLING = "ThrottlingError"
    VALIDATION = "ValidationError"
    ACCESS_DENIED = "AccessDeniedError"
    MODEL_NOT_FOUND = "ModelNotFoundError"
    QUOTA_EXCEEDED = "QuotaExceededError"
    TIMEOUT = "TimeoutError"
    UNSUPPORTED_MODEL = "UnsupportedModel"
    UNSUPPORTED_OPERATION = "UnsupportedOperation"
    REQUEST_PREPARATION = "RequestPreparationError"
    RESPONSE_PARSE = "ResponseParseError"
    STREAM = "StreamError"
    UNKNOWN = "UnknownError"


class InvocationResult(BaseModel):
    """Outcome of a single inference request.

    Timestamps are seconds on a monotonic clock; only their difference is
    meaningful.
    """

    success: bool = Field(default=False, description="Request success status")
    start_time: float = Field(description="Request start timestamp (s)")
    end_time: float = Field(description="Request end timestamp (s)")
    ttft: Optional[float] = Field(
        default=None, description="Time to first token (s), streaming only"
    )
    input_tokens: int = Field(default=0, ge=0, description="Number of input tokens")
    output_tokens: int = Field(default=0, ge=0, description="Number of output tokens")
    error_kind: Optional[str] = Field(default=None, description="Error kind if failed")
    error_message: Optional[str] = Field(default=None, description="Error detail if failed")
    http_status: Optional[int] = Field(default=None, description="HTTP status code")

    @model_validator(mode="after")
    def _check_consistency(self) -> "InvocationResult":
        if self.end_time < self.start_time:
            raise ValueError("end_time must not precede start_time")
        if self.success and self.error_kind is not None:
            raise ValueError("successful results cannot carry an error kind")
        return self

    @property
    def duration(self) -> float:
        """Total request duration in seconds."""
        return self.end_time - self.start_time

    @property
    def duration_ms(self) -> float:
        return self.duration * 1000.0

    @property
    def ttft_ms(self) -> Optional[float]:
        if self.ttft is None:
            return None
        return self.ttft * 1000.0


class LatencyStats(BaseModel):
    """Latency statistics in milliseconds."""

    model_config = ConfigDict(frozen=True)

    avg: float = Field(default=0.0, description="Average latency (ms)")
    min: float = Field(default=0.0, description="Minimum latency (ms)")
    max: float = Field(default=0.0, description="Maximum latency (ms)")
    p50: float = Field(default=0.0, description="50th percentile (ms)")
    p95: float = Field(default=0.0, description="95th percentile (ms)")
    p99: float = Field(default=0.0, description="99th percentile (ms)")


class Stats(BaseModel):
    """Immutable statistics snapshot for one concurrency level run."""

    model_config = ConfigDict(frozen=True)

    total_requests: int = Field(default=0, description="Total requests")
    success_count: int = Field(default=0, description="Successful requests")
    failure_count: int = Field(default=0, description="Failed requests")
    success_rate: float = Field(default=0.0, description="Success rate percentage")
    duration_seconds: float = Field(default=0.0, description="Elapsed window (s)")

    total_input_tokens: int = Field(default=0, description="Total input tokens")
    total_output_tokens: int = Field(default=0, description="Total output tokens")
    total_tokens: int = Field(default=0, description="Input plus output tokens")
    token_throughput: float = Field(default=0.0, description="Tokens per second")
    requests_per_second: float = Field(default=0.0, description="Successful requests per second")

    latency: LatencyStats = Field(
        default_factory=LatencyStats, description="End-to-end latency statistics"
    )
    has_ttft: bool = Field(default=False, description="Whether TTFT samples exist")
    ttft: LatencyStats = Field(
        default_factory=LatencyStats, description="Time to first token statistics"
    )

    errors_by_type: dict[str, int] = Field(
        default_factory=dict, description="Failure counts per error kind"
    )


class ConcurrencyLevelStats(BaseModel):
    """Finalized statistics for a specific concurrency level."""

    concurrency_level: int = Field(description="Concurrency level")
    streaming: bool = Field(default=False, description="Streaming mode")
    stats: Stats = Field(description="Finalized statistics")

    @property
    def mode(self) -> str:
        return "streaming" if self.streaming else "non-streaming"
