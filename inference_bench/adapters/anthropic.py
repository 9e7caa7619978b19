"""Anthropic Messages API adapter for Claude models."""

from typing import Any

from inference_bench.adapters.base import AdapterFactory, BaseAdapter, ResponseParseError, TokenUsage

ANTHROPIC_VERSION = "bedrock-2023-05-31"
ANTHROPIC_API_VERSION_HEADER = "2023-06-01"


def _object_field(data: dict[str, Any], key: str) -> dict[str, Any]:
    """Return ``data[key]`` as a dict; a missing key yields an empty one."""
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ResponseParseError(f"expected object for {key!r}, got {type(value).__name__}")
    return value


@AdapterFactory.register
class AnthropicAdapter(BaseAdapter):
    """Adapter for Claude models speaking the Messages API.

    Streaming responses are server-sent events of type ``message_start``,
    ``content_block_delta`` and ``message_delta``; the first
    ``content_block_delta`` marks the first token.
    """

    family = "anthropic"
    keywords = ("claude", "anthropic")

    def get_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "anthropic-version": ANTHROPIC_API_VERSION_HEADER,
        }
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    def build_payload(self, prompt: str, streaming: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "anthropic_version": ANTHROPIC_VERSION,
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
        }
        if streaming:
            payload["stream"] = True
        return payload

    def parse_response(self, data: dict[str, Any], usage: TokenUsage) -> None:
        token_usage = data.get("usage")
        if not isinstance(token_usage, dict):
            raise ResponseParseError("missing usage in response")
        usage.input_tokens = int(token_usage.get("input_tokens", 0))
        usage.output_tokens = int(token_usage.get("output_tokens", 0))

    def parse_stream_event(self, event: dict[str, Any], usage: TokenUsage) -> bool:
        event_type = event.get("type")

        if event_type == "message_start":
            message = _object_field(event, "message")
            input_tokens = _object_field(message, "usage").get("input_tokens")
            if input_tokens is not None:
                usage.input_tokens = int(input_tokens)
        elif event_type == "message_delta":
            output_tokens = _object_field(event, "usage").get("output_tokens")
            if output_tokens is not None:
                usage.output_tokens = int(output_tokens)

        return event_type == "content_block_delta"

    def on_malformed_event(self, data_str: str) -> Any:
        raise ResponseParseError(f"invalid stream event: {data_str[:80]}")
