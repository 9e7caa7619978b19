"""Base adapter interface for inference endpoint model families."""

import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Type

import httpx

from inference_bench.core.config import BenchmarkConfig
from inference_bench.core.models import ErrorKind, InvocationResult
from inference_bench.logging_config import get_logger

logger = get_logger(__name__)

INVOCATION_METRICS_KEY = "amazon-bedrock-invocationMetrics"

# Sentinel returned for the terminating "[DONE]" event.
_STREAM_DONE = object()

# Checked in order; the first matching keyword wins.
_ERROR_KEYWORDS: list[tuple[tuple[str, ...], ErrorKind, Optional[int]]] = [
    (("throttling", "too many"), ErrorKind.THROTTLING, 429),
    (("validation",), ErrorKind.VALIDATION, 400),
    (("access denied",), ErrorKind.ACCESS_DENIED, 403),
    (("not found",), ErrorKind.MODEL_NOT_FOUND, 404),
    (("service quota",), ErrorKind.QUOTA_EXCEEDED, 429),
    (("timeout", "timed out"), ErrorKind.TIMEOUT, 504),
    (("internal",), ErrorKind.UNKNOWN, 500),
]

_STATUS_KINDS: dict[int, ErrorKind] = {
    400: ErrorKind.VALIDATION,
    401: ErrorKind.ACCESS_DENIED,
    403: ErrorKind.ACCESS_DENIED,
    404: ErrorKind.MODEL_NOT_FOUND,
    408: ErrorKind.TIMEOUT,
    422: ErrorKind.VALIDATION,
    429: ErrorKind.THROTTLING,
    504: ErrorKind.TIMEOUT,
}


class UnsupportedModelError(Exception):
    """Raised when no adapter family understands the configured model."""


class ResponseParseError(Exception):
    """Raised when a response body cannot be decoded."""


def _response_text(response: httpx.Response) -> str:
    try:
        return response.text
    except httpx.ResponseNotRead:
        return ""


def categorize_error(error: Exception) -> ErrorKind:
    """Map an invocation failure onto an error kind."""
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status == 429 and "quota" in _response_text(error.response).lower():
            return ErrorKind.QUOTA_EXCEEDED
        if status in _STATUS_KINDS:
            return _STATUS_KINDS[status]

    if isinstance(error, httpx.TimeoutException):
        return ErrorKind.TIMEOUT

    message = str(error).lower()
    for keywords, kind, _ in _ERROR_KEYWORDS:
        if kind is not ErrorKind.UNKNOWN and any(k in message for k in keywords):
            return kind

    logger.debug("unknown_error", error=str(error), error_type=type(error).__name__)
    return ErrorKind.UNKNOWN


def extract_http_status(error: Exception) -> Optional[int]:
    """Return the HTTP status of a failure, inferring it from the message if needed."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    if isinstance(error, httpx.TimeoutException):
        return 504

    message = str(error).lower()
    for keywords, _, status in _ERROR_KEYWORDS:
        if any(k in message for k in keywords):
            return status
    return None


@dataclass
class TokenUsage:
    """Mutable token counters filled in while parsing a response."""

    input_tokens: int = 0
    output_tokens: int = 0

    def apply_invocation_metrics(self, data: dict[str, Any]) -> None:
        """Read token counts from a gateway invocation metrics object, if present."""
        metrics = data.get(INVOCATION_METRICS_KEY)
        if not isinstance(metrics, dict):
            return
        if isinstance(metrics.get("inputTokenCount"), (int, float)):
            self.input_tokens = int(metrics["inputTokenCount"])
        if isinstance(metrics.get("outputTokenCount"), (int, float)):
            self.output_tokens = int(metrics["outputTokenCount"])


class BaseAdapter(ABC):
    """Abstract base class for model family adapters.

    Each adapter owns one ``httpx.Client`` and is used by exactly one worker.
    :meth:`invoke` never raises: every failure becomes a failed
    InvocationResult carrying an error kind.
    """

    family: ClassVar[str] = ""
    keywords: ClassVar[tuple[str, ...]] = ()
    supports_streaming: ClassVar[bool] = True

    def __init__(
        self,
        endpoint_url: str,
        model: str,
        api_key: Optional[str] = None,
        timeout: float = 120.0,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        service_tier: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the adapter.

        Args:
            endpoint_url: URL requests are POSTed to.
            model: Model identifier.
            api_key: Optional API key for authentication.
            timeout: Request timeout in seconds.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
            service_tier: Optional service tier forwarded with each request.
            transport: Optional httpx transport, used by tests.
        """
        self.endpoint_url = endpoint_url
        self.model = model
        self.api_key = api_key
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.service_tier = service_tier
        self._client = httpx.Client(
            headers=self.get_headers(),
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def get_headers(self) -> dict[str, str]:
        """Get HTTP headers for requests."""
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    @abstractmethod
    def build_payload(self, prompt: str, streaming: bool) -> dict[str, Any]:
        """Build the request body for this model family."""

    @abstractmethod
    def parse_response(self, data: dict[str, Any], usage: TokenUsage) -> None:
        """Extract token usage from a complete response body."""

    @abstractmethod
    def parse_stream_event(self, event: dict[str, Any], usage: TokenUsage) -> bool:
        """Consume one streaming event.

        Returns:
            True if the event carried generated content.
        """

    def _with_service_tier(self, payload: dict[str, Any]) -> dict[str, Any]:
        if self.service_tier and self.service_tier != "default":
            payload["service_tier"] = self.service_tier
        return payload

    def invoke(self, prompt: str, streaming: bool) -> InvocationResult:
        """Perform one inference call and measure it."""
        start_time = time.monotonic()

        if streaming and not self.supports_streaming:
            return self._failure(
                start_time,
                ErrorKind.UNSUPPORTED_OPERATION,
                f"streaming is not supported for {self.family} models",
            )

        try:
            payload = self._with_service_tier(self.build_payload(prompt, streaming))
        except UnsupportedModelError as e:
            return self._failure(start_time, ErrorKind.UNSUPPORTED_MODEL, str(e))
        except Exception as e:
            return self._failure(
                start_time,
                ErrorKind.REQUEST_PREPARATION,
                f"failed to prepare request: {e}",
            )

        if streaming:
            return self._invoke_streaming(payload, start_time)
        return self._invoke_blocking(payload, start_time)

    def _invoke_blocking(self, payload: dict[str, Any], start_time: float) -> InvocationResult:
        try:
            response = self._client.post(self.endpoint_url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            return self._error_result(start_time, e)
        end_time = time.monotonic()

        usage = TokenUsage()
        try:
            data = response.json()
            if not isinstance(data, dict):
                raise ResponseParseError("response body is not a JSON object")
            self.parse_response(data, usage)
        except (ResponseParseError, AttributeError, TypeError, ValueError) as e:
            return self._failure(
                start_time,
                ErrorKind.RESPONSE_PARSE,
                f"failed to parse response: {e}",
                end_time=end_time,
                http_status=response.status_code,
            )

        return InvocationResult(
            success=True,
            start_time=start_time,
            end_time=end_time,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            http_status=response.status_code,
        )

    def _invoke_streaming(self, payload: dict[str, Any], start_time: float) -> InvocationResult:
        usage = TokenUsage()
        ttft: Optional[float] = None

        try:
            with self._client.stream("POST", self.endpoint_url, json=payload) as response:
                if response.is_error:
                    response.read()
                    response.raise_for_status()
                status = response.status_code

                try:
                    for line in response.iter_lines():
                        event = self._decode_sse_line(line)
                        if event is None:
                            continue
                        if event is _STREAM_DONE:
                            break
                        if self.parse_stream_event(event, usage) and ttft is None:
                            ttft = time.monotonic() - start_time
                except (ResponseParseError, AttributeError, TypeError, ValueError) as e:
                    return self._failure(
                        start_time,
                        ErrorKind.RESPONSE_PARSE,
                        f"failed to parse stream event: {e}",
                        http_status=status,
                    )
                except httpx.TransportError as e:
                    logger.debug("stream_error", error=str(e), error_type=type(e).__name__)
                    return self._failure(
                        start_time,
                        ErrorKind.STREAM,
                        f"stream error: {e}",
                        http_status=status,
                    )
        except httpx.HTTPError as e:
            return self._error_result(start_time, e)

        return InvocationResult(
            success=True,
            start_time=start_time,
            end_time=time.monotonic(),
            ttft=ttft,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            http_status=status,
        )

    def _decode_sse_line(self, line: str) -> Any:
        """Decode one server-sent event line into a JSON object."""
        if not line.startswith("data:"):
            return None
        data_str = line[5:].strip()
        if not data_str:
            return None
        if data_str == "[DONE]":
            return _STREAM_DONE
        try:
            event = json.loads(data_str)
        except json.JSONDecodeError:
            return self.on_malformed_event(data_str)
        return event if isinstance(event, dict) else None

    def on_malformed_event(self, data_str: str) -> Any:
        """Handle an undecodable stream event; skipped by default."""
        return None

    def _error_result(self, start_time: float, error: Exception) -> InvocationResult:
        return self._failure(
            start_time,
            categorize_error(error),
            str(error),
            http_status=extract_http_status(error),
        )

    def _failure(
        self,
        start_time: float,
        kind: ErrorKind,
        message: str,
        end_time: Optional[float] = None,
        http_status: Optional[int] = None,
    ) -> InvocationResult:
        return InvocationResult(
            success=False,
            start_time=start_time,
            end_time=end_time if end_time is not None else time.monotonic(),
            error_kind=kind.value,
            error_message=message,
            http_status=http_status,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "BaseAdapter":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class UnsupportedModelAdapter(BaseAdapter):
    """Adapter for model ids no family recognizes; every request fails."""

    family = "unsupported"

    def build_payload(self, prompt: str, streaming: bool) -> dict[str, Any]:
        raise UnsupportedModelError(f"unsupported model: {self.model}")

    def parse_response(self, data: dict[str, Any], usage: TokenUsage) -> None:
        raise ResponseParseError(f"unsupported model: {self.model}")

    def parse_stream_event(self, event: dict[str, Any], usage: TokenUsage) -> bool:
        raise ResponseParseError(f"unsupported model: {self.model}")


class AdapterFactory:
    """Factory selecting a model family adapter from the model identifier."""

    _adapters: dict[str, Type[BaseAdapter]] = {}

    @classmethod
    def register(cls, adapter_class: Type[BaseAdapter]) -> Type[BaseAdapter]:
        """Register an adapter class; usable as a class decorator."""
        cls._adapters[adapter_class.family] = adapter_class
        return adapter_class

    @classmethod
    def resolve(cls, model: str) -> Type[BaseAdapter]:
        """Return the adapter class whose keywords match ``model``."""
        model_lower = model.lower()
        for adapter_class in cls._adapters.values():
            if any(keyword in model_lower for keyword in adapter_class.keywords):
                return adapter_class
        return UnsupportedModelAdapter

    @classmethod
    def create(
        cls,
        config: BenchmarkConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> BaseAdapter:
        """Create an adapter instance for the configured model.

        Args:
            config: Benchmark configuration.
            transport: Optional httpx transport, used by tests.

        Returns:
            Configured adapter instance.
        """
        adapter_class = cls.resolve(config.model.id)
        if adapter_class is UnsupportedModelAdapter:
            logger.warning("unsupported_model", model=config.model.id)

        return adapter_class(
            endpoint_url=config.endpoint.url,
            model=config.model.id,
            api_key=config.endpoint.api_key,
            timeout=config.endpoint.timeout_seconds,
            max_tokens=config.test.max_tokens,
            temperature=config.test.temperature,
            service_tier=config.test.service_tier,
            transport=transport,
        )

    @classmethod
    def list_adapters(cls) -> list[str]:
        """List all registered adapter families."""
        return list(cls._adapters.keys())
