"""OpenAI LLM provider using the ``openai`` SDK."""

from __future__ import annotations

import logging

from mvx_agent.llm.base import BaseLLMProvider, LLMMessage, LLMResponse

logger = logging.getLogger(__name__)


class OpenAIProvider(BaseLLMProvider):
    """Chat Completions backend.

    ``base_url`` is forwarded to the client, so any OpenAI-compatible
    endpoint (vLLM, Ollama, Groq, ...) works too.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        max_tokens: int = 1024,
    ):
        super().__init__(api_key=api_key, model=model, base_url=base_url, max_tokens=max_tokens)

        try:
            import openai
        except ImportError as exc:
            raise ImportError(
                "The 'openai' package is required for the OpenAI provider. "
                "Install it with: pip install openai"
            ) from exc

        self._client = openai.AsyncOpenAI(**self._client_kwargs())

    async def complete(
        self,
        messages: list[LLMMessage],
        json_mode: bool = False,
    ) -> LLMResponse:
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except Exception as exc:
            logger.error("OpenAI API call failed: %s", exc)
            raise

        choice = response.choices[0]
        usage = None
        if response.usage:
            usage = {
                "input_tokens": response.usage.prompt_tokens,
                "output_tokens": response.usage.completion_tokens,
            }
        return LLMResponse(
            content=choice.message.content or "",
            usage=usage,
            stop_reason=choice.finish_reason,
        )
