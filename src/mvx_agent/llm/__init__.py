"""LLM provider abstraction used for intent extraction.

Anthropic and any OpenAI-compatible endpoint sit behind one small
interface; the router picks a provider per model class.
"""

from mvx_agent.llm.base import (
    BaseLLMProvider,
    LLMMessage,
    LLMResponse,
    ModelClass,
)
from mvx_agent.llm.router import LLMRouter

__all__ = [
    "BaseLLMProvider",
    "LLMMessage",
    "LLMResponse",
    "LLMRouter",
    "ModelClass",
]
