"""Adapter for Mistral text-completion models."""

from typing import Any

from inference_bench.adapters.base import AdapterFactory, BaseAdapter, TokenUsage


def _first_output_text(data: dict[str, Any]) -> str:
    outputs = data.get("outputs")
    if isinstance(outputs, list) and outputs and isinstance(outputs[0], dict):
        text = outputs[0].get("text")
        if isinstance(text, str):
            return text
    return ""


@AdapterFactory.register
class MistralAdapter(BaseAdapter):
    """Adapter for Mistral/Mixtral models using the ``[INST]`` prompt format."""

    family = "mistral"
    keywords = ("mistral", "mixtral")

    def build_payload(self, prompt: str, streaming: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "prompt": f"<s>[INST] {prompt} [/INST]",
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        if streaming:
            payload["stream"] = True
        return payload

    def parse_response(self, data: dict[str, Any], usage: TokenUsage) -> None:
        usage.apply_invocation_metrics(data)

    def parse_stream_event(self, event: dict[str, Any], usage: TokenUsage) -> bool:
        usage.apply_invocation_metrics(event)
        return bool(_first_output_text(event))
