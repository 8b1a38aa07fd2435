"""Intent extraction from chat into validated action payloads."""

from mvx_agent.extraction.extractor import (
    ChatMessage,
    IntentExtractor,
    LLMIntentExtractor,
    StaticIntentExtractor,
    compose_context,
)
from mvx_agent.extraction.schemas import (
    BirthdayWarpContent,
    CollateralContent,
    CreateTokenContent,
    LendContent,
    ReceiveContent,
    TransferContent,
)

__all__ = [
    "BirthdayWarpContent",
    "ChatMessage",
    "CollateralContent",
    "CreateTokenContent",
    "IntentExtractor",
    "LLMIntentExtractor",
    "LendContent",
    "ReceiveContent",
    "StaticIntentExtractor",
    "TransferContent",
    "compose_context",
]
