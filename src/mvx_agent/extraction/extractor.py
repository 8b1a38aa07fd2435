"""Intent extraction: free-form chat in, validated payload out.

The model behind :class:`LLMIntentExtractor` is non-deterministic and may
return nothing useful, so every result goes through the payload schema and
any gap is an :class:`~mvx_agent.errors.ExtractionError`. Missing fields
are never guessed.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from mvx_agent.errors import ExtractionError
from mvx_agent.llm.base import BaseLLMProvider, LLMMessage

logger = logging.getLogger("mvx_agent.extraction")

PayloadT = TypeVar("PayloadT", bound=BaseModel)

_JSON_BLOCK_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)

_SYSTEM_PROMPT = (
    "You extract structured values from a chat conversation for a MultiversX "
    "wallet agent. Only report values the user actually stated. Never invent "
    "addresses or amounts."
)


@dataclass(frozen=True)
class ChatMessage:
    user: str
    text: str


def compose_context(template: str, messages: list[ChatMessage]) -> str:
    """Fill an extraction template with the recent conversation."""
    transcript = "\n".join(f"{m.user}: {m.text}" for m in messages)
    return template.format(recent_messages=f"# Recent messages\n{transcript}")


def parse_json_object(text: str) -> dict:
    """Pull the first JSON object out of a model reply.

    Accepts a fenced ```json block or a bare object.
    """
    match = _JSON_BLOCK_RE.search(text)
    if match:
        candidate = match.group(1)
    else:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise ExtractionError("The model reply contained no JSON object")
        candidate = text[start : end + 1]
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"The model reply was not valid JSON: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise ExtractionError("The model reply was not a JSON object")
    return data


def validate_payload(data: Mapping[str, Any], schema: type[PayloadT]) -> PayloadT:
    """Validate *data* against *schema*; ``null`` counts as missing."""
    cleaned = {k: v for k, v in data.items() if v is not None}
    try:
        return schema.model_validate(cleaned)
    except ValidationError as exc:
        fields: list[str] = []
        problems: list[str] = []
        for err in exc.errors():
            name = ".".join(str(p) for p in err["loc"]) or schema.__name__
            fields.append(name)
            if err["type"] == "missing":
                problems.append(f"{name} is missing")
            else:
                problems.append(f"{name}: {err['msg']}")
        raise ExtractionError("; ".join(problems), fields=fields) from exc


class IntentExtractor(ABC):
    """Turns a composed conversation context into a validated payload."""

    @abstractmethod
    async def extract(self, context: str, schema: type[PayloadT]) -> PayloadT:
        """Return a *schema* instance or raise :class:`ExtractionError`."""


class LLMIntentExtractor(IntentExtractor):
    """Extractor backed by a language model."""

    def __init__(self, provider: BaseLLMProvider) -> None:
        self.provider = provider

    async def extract(self, context: str, schema: type[PayloadT]) -> PayloadT:
        messages = [
            LLMMessage(role="system", content=_SYSTEM_PROMPT),
            LLMMessage(role="user", content=context),
        ]
        try:
            response = await self.provider.complete(messages, json_mode=True)
        except Exception as exc:
            logger.error(f"Extraction model call failed: {exc}")
            raise ExtractionError(f"The language model is unavailable: {exc}") from exc

        data = parse_json_object(response.content)
        payload = validate_payload(data, schema)
        logger.info(f"Extracted {schema.__name__}: {sorted(data)}")
        return payload


class StaticIntentExtractor(IntentExtractor):
    """Deterministic extractor that returns preset values.

    Used by tests and by the CLI's ``--payload`` option. The values still go
    through schema validation, and each call's context is kept in
    :attr:`contexts`.
    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self.values = dict(values or {})
        self.contexts: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.contexts)

    async def extract(self, context: str, schema: type[PayloadT]) -> PayloadT:
        self.contexts.append(context)
        return validate_payload(self.values, schema)
