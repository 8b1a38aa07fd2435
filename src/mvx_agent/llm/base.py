"""Provider-neutral data structures for LLM calls."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class ModelClass(str, Enum):
    """How much model an extraction needs. Small is the usual choice."""

    SMALL = "small"
    LARGE = "large"


@dataclass
class LLMMessage:
    role: str  # 'system', 'user' or 'assistant'
    content: str


@dataclass
class LLMResponse:
    content: str
    usage: dict | None = None
    stop_reason: str | None = None


class BaseLLMProvider(ABC):
    """Common constructor and interface for every backend."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        max_tokens: int = 1024,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.max_tokens = max_tokens

    def _client_kwargs(self) -> dict:
        kwargs: dict = {"api_key": self.api_key}
        if self.base_url:
            kwargs["base_url"] = self.base_url
        return kwargs

    @abstractmethod
    async def complete(
        self,
        messages: list[LLMMessage],
        json_mode: bool = False,
    ) -> LLMResponse:
        """Return one completion for *messages*.

        With *json_mode* the backend is asked for a JSON object where it
        supports that natively; prompts must still ask for JSON.
        """
