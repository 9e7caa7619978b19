"""OpenAI-compatible chat completions adapter for DeepSeek, Qwen, GPT, etc."""

from typing import Any

from inference_bench.adapters.base import AdapterFactory, BaseAdapter, TokenUsage


def _first_choice(data: dict[str, Any]) -> dict[str, Any]:
    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        return choices[0]
    return {}


@AdapterFactory.register
class OpenAICompatibleAdapter(BaseAdapter):
    """Adapter for OpenAI chat-completions compatible servers.

    Token usage comes from the ``usage`` object or, when a gateway reports
    them, from its invocation metrics.
    """

    family = "openai"
    keywords = ("deepseek", "qwen", "gpt", "openai")

    def build_payload(self, prompt: str, streaming: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "stream": streaming,
        }
        if streaming:
            payload["stream_options"] = {"include_usage": True}
        return payload

    def _apply_usage(self, data: dict[str, Any], usage: TokenUsage) -> None:
        token_usage = data.get("usage")
        if isinstance(token_usage, dict):
            usage.input_tokens = int(token_usage.get("prompt_tokens") or 0)
            usage.output_tokens = int(token_usage.get("completion_tokens") or 0)
        usage.apply_invocation_metrics(data)

    def parse_response(self, data: dict[str, Any], usage: TokenUsage) -> None:
        self._apply_usage(data, usage)

    def parse_stream_event(self, event: dict[str, Any], usage: TokenUsage) -> bool:
        self._apply_usage(event, usage)
        delta = _first_choice(event).get("delta")
        return isinstance(delta, dict) and bool(delta.get("content"))
