"""Adapter for Meta Llama text-generation models."""

from typing import Any

from inference_bench.adapters.base import AdapterFactory, BaseAdapter, ResponseParseError, TokenUsage


@AdapterFactory.register
class LlamaAdapter(BaseAdapter):
    """Adapter for Llama models. Only blocking invocation is supported."""

    family = "llama"
    keywords = ("llama", "meta")
    supports_streaming = False

    def build_payload(self, prompt: str, streaming: bool) -> dict[str, Any]:
        return {
            "prompt": prompt,
            "max_gen_len": self.max_tokens,
            "temperature": self.temperature,
        }

    def parse_response(self, data: dict[str, Any], usage: TokenUsage) -> None:
        if "generation" not in data:
            raise ResponseParseError("missing generation in response")
        usage.input_tokens = int(data.get("prompt_token_count") or 0)
        usage.output_tokens = int(data.get("generation_token_count") or 0)

    def parse_stream_event(self, event: dict[str, Any], usage: TokenUsage) -> bool:
        return False
