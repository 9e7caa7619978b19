"""Benchmark configuration models and loader."""

import json
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from inference_bench.core.exceptions import ConfigError


class EndpointConfig(BaseModel):
    """Inference endpoint connection settings."""

    url: str = Field(description="Endpoint URL requests are POSTed to")
    api_key: Optional[str] = Field(default=None, description="API key")
    timeout_seconds: float = Field(default=120.0, gt=0, description="Request timeout (seconds)")

    @field_validator("url")
    @classmethod
    def _url_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("endpoint.url is required")
        return value


class ModelConfig(BaseModel):
    """Target model settings."""

    id: str = Field(description="Model identifier")
    quota: int = Field(description="Provisioned request quota for the model")

    @field_validator("id")
    @classmethod
    def _id_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("model.id is required")
        return value

    @field_validator("quota")
    @classmethod
    def _quota_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("model.quota must be positive")
        return value


class TestConfig(BaseModel):
    """Request shape and benchmark modes."""

    __test__ = False

    prompt_size: int = Field(description="Prompt size in characters")
    prompt_template: str = Field(default="", description="Prompt template, {size} is substituted")
    streaming: bool = Field(default=True, description="Run the streaming sweep")
    non_streaming: bool = Field(default=True, description="Run the non-streaming sweep")
    max_tokens: int = Field(description="Maximum tokens to generate")
    temperature: float = Field(default=0.7, description="Sampling temperature")
    service_tier: str = Field(default="default", description="Service tier (default, priority, flex)")

    @field_validator("prompt_size")
    @classmethod
    def _prompt_size_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("test.prompt_size must be positive")
        return value

    @field_validator("max_tokens")
    @classmethod
    def _max_tokens_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("test.max_tokens must be positive")
        return value

    @model_validator(mode="after")
    def _one_mode_enabled(self) -> "TestConfig":
        if not self.streaming and not self.non_streaming:
            raise ValueError("at least one of streaming or non_streaming must be enabled")
        return self


class ConcurrencyConfig(BaseModel):
    """Concurrency ramp definition."""

    start: int = Field(description="First concurrency level")
    end: int = Field(description="Last concurrency level (inclusive)")
    step: int = Field(default=1, description="Increment between levels")
    duration_seconds: float = Field(description="Run window per level (seconds)")
    progress_interval_seconds: float = Field(
        default=5.0, gt=0, description="Interval between live progress snapshots"
    )

    @model_validator(mode="after")
    def _check_ramp(self) -> "ConcurrencyConfig":
        if self.start <= 0:
            raise ValueError("concurrency.start must be positive")
        if self.end < self.start:
            raise ValueError("concurrency.end must be >= concurrency.start")
        if self.step <= 0:
            raise ValueError("concurrency.step must be positive")
        if self.duration_seconds <= 0:
            raise ValueError("concurrency.duration_seconds must be positive")
        return self


class OutputConfig(BaseModel):
    """Report output settings."""

    report_file: str = Field(description="Markdown report path")
    json_file: Optional[str] = Field(default=None, description="Optional JSON results path")

    @field_validator("report_file")
    @classmethod
    def _report_file_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("output.report_file is required")
        return value


class BenchmarkConfig(BaseModel):
    """Complete benchmark configuration."""

    endpoint: EndpointConfig = Field(description="Endpoint settings")
    model: ModelConfig = Field(description="Model settings")
    test: TestConfig = Field(description="Test settings")
    concurrency: ConcurrencyConfig = Field(description="Concurrency ramp")
    output: OutputConfig = Field(description="Output settings")


def _format_validation_error(error: ValidationError) -> str:
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        message = item["msg"].removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)


def parse_config(data: dict) -> BenchmarkConfig:
    """Validate a configuration mapping.

    Raises:
        ConfigError: If the configuration is invalid.
    """
    try:
        return BenchmarkConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {_format_validation_error(e)}") from e


def load_config(path: Union[str, Path]) -> BenchmarkConfig:
    """Read, parse and validate a JSON configuration file.

    Args:
        path: Path to the configuration file.

    Returns:
        Validated BenchmarkConfig.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to read config file: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"failed to parse config file: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("failed to parse config file: top-level value must be an object")

    return parse_config(data)
