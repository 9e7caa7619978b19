"""Invocation adapters for different model families."""

from inference_bench.adapters.base import AdapterFactory, BaseAdapter, UnsupportedModelAdapter
from inference_bench.adapters.anthropic import AnthropicAdapter
from inference_bench.adapters.openai_compat import OpenAICompatibleAdapter
from inference_bench.adapters.mistral import MistralAdapter
from inference_bench.adapters.llama import LlamaAdapter

__all__ = [
    "AdapterFactory",
    "AnthropicAdapter",
    "BaseAdapter",
    "LlamaAdapter",
    "MistralAdapter",
    "OpenAICompatibleAdapter",
    "UnsupportedModelAdapter",
]
