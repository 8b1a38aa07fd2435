"""Anthropic LLM provider using the ``anthropic`` SDK."""

from __future__ import annotations

import logging

from mvx_agent.llm.base import BaseLLMProvider, LLMMessage, LLMResponse

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseLLMProvider):
    """Messages API backend built on :class:`anthropic.AsyncAnthropic`."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        max_tokens: int = 1024,
    ):
        super().__init__(api_key=api_key, model=model, base_url=base_url, max_tokens=max_tokens)

        try:
            import anthropic
        except ImportError as exc:
            raise ImportError(
                "The 'anthropic' package is required for the Anthropic provider. "
                "Install it with: pip install anthropic"
            ) from exc

        self._client = anthropic.AsyncAnthropic(**self._client_kwargs())

    @staticmethod
    def _split_system(messages: list[LLMMessage]) -> tuple[str | None, list[dict]]:
        """Anthropic takes the system prompt as a parameter, not a message."""
        system_parts = [m.content for m in messages if m.role == "system"]
        rest = [{"role": m.role, "content": m.content} for m in messages if m.role != "system"]
        return ("\n".join(system_parts) if system_parts else None), rest

    async def complete(
        self,
        messages: list[LLMMessage],
        json_mode: bool = False,
    ) -> LLMResponse:
        # No native JSON mode; the extraction templates ask for a JSON block.
        system, converted = self._split_system(messages)
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": converted,
        }
        if system:
            kwargs["system"] = system

        try:
            response = await self._client.messages.create(**kwargs)
        except Exception as exc:
            logger.error("Anthropic API call failed: %s", exc)
            raise

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        usage = None
        if response.usage:
            usage = {
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            }
        return LLMResponse(content=text, usage=usage, stop_reason=response.stop_reason)
