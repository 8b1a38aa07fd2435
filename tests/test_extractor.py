"""Tests for intent extraction and payload schemas."""

import pytest

from conftest import BOB_ADDRESS
from mvx_agent.errors import ExtractionError
from mvx_agent.extraction import (
    BirthdayWarpContent,
    ChatMessage,
    LLMIntentExtractor,
    ReceiveContent,
    StaticIntentExtractor,
    TransferContent,
    compose_context,
)
from mvx_agent.extraction.extractor import parse_json_object, validate_payload
from mvx_agent.extraction.templates import TRANSFER_TEMPLATE
from mvx_agent.llm.base import BaseLLMProvider, LLMResponse


class FakeProvider(BaseLLMProvider):
    def __init__(self, reply: str | None = None, error: Exception | None = None):
        super().__init__(api_key="test", model="fake")
        self.reply = reply
        self.error = error
        self.messages = []

    async def complete(self, messages, json_mode=False):
        self.messages.append((messages, json_mode))
        if self.error:
            raise self.error
        return LLMResponse(content=self.reply)


class TestComposeContext:
    def test_fills_recent_messages(self):
        context = compose_context(
            TRANSFER_TEMPLATE, [ChatMessage("u1", "send 1 EGLD to bob"), ChatMessage("agent", "ok")]
        )
        assert "u1: send 1 EGLD to bob" in context
        assert "agent: ok" in context
        assert '"receiver"' in context
        assert "{recent_messages}" not in context


class TestParseJson:
    def test_fenced_block(self):
        assert parse_json_object('Sure!\n```json\n{"amount": "1"}\n```') == {"amount": "1"}

    def test_bare_object(self):
        assert parse_json_object('here: {"amount": "2"} done') == {"amount": "2"}

    @pytest.mark.parametrize("text", ["no json here", "{not json}", "```json\n[1, 2]\n```"])
    def test_unusable_reply(self, text):
        with pytest.raises(ExtractionError):
            parse_json_object(text)


class TestSchemas:
    def test_transfer_defaults_to_egld(self):
        content = validate_payload({"receiver": BOB_ADDRESS, "amount": "1.5"}, TransferContent)
        assert content.token == "EGLD"
        assert content.is_native

    def test_transfer_aliases(self):
        content = validate_payload(
            {"tokenAddress": BOB_ADDRESS, "amount": 2, "tokenIdentifier": "USDC-c76f1f"},
            TransferContent,
        )
        assert content.receiver == BOB_ADDRESS
        assert content.amount == "2"
        assert content.token == "USDC-c76f1f"
        assert not content.is_native

    @pytest.mark.parametrize("token", ["egld", "xEGLD", ""])
    def test_native_token_spellings(self, token):
        content = validate_payload({"receiver": BOB_ADDRESS, "amount": "1", "token": token}, TransferContent)
        assert content.token == "EGLD"

    def test_null_counts_as_missing(self):
        with pytest.raises(ExtractionError) as exc_info:
            validate_payload({"receiver": BOB_ADDRESS, "amount": None}, TransferContent)
        assert exc_info.value.fields == ["amount"]
        assert "amount is missing" in str(exc_info.value)

    def test_invalid_address(self):
        with pytest.raises(ExtractionError) as exc_info:
            validate_payload({"receiver": "erd1notanaddress", "amount": "1"}, TransferContent)
        assert "receiver" in exc_info.value.fields

    @pytest.mark.parametrize("amount", ["0", "-3", "lots", True])
    def test_invalid_amount(self, amount):
        with pytest.raises(ExtractionError):
            validate_payload({"amount": amount}, ReceiveContent)

    def test_invalid_token(self):
        with pytest.raises(ExtractionError):
            validate_payload({"receiver": BOB_ADDRESS, "amount": "1", "token": "USDC"}, TransferContent)

    def test_birthday_warp_alias(self):
        content = validate_payload({"walletAddress": BOB_ADDRESS}, BirthdayWarpContent)
        assert content.wallet_address == BOB_ADDRESS


class TestLLMIntentExtractor:
    @pytest.mark.asyncio
    async def test_extracts_payload(self):
        provider = FakeProvider(
            reply=f'```json\n{{"receiver": "{BOB_ADDRESS}", "amount": "1", "token": null}}\n```'
        )
        content = await LLMIntentExtractor(provider).extract("context", TransferContent)
        assert content.receiver == BOB_ADDRESS
        assert content.token == "EGLD"
        messages, json_mode = provider.messages[0]
        assert json_mode is True
        assert messages[0].role == "system"
        assert messages[1].content == "context"

    @pytest.mark.asyncio
    async def test_missing_field(self):
        provider = FakeProvider(reply='{"receiver": null, "amount": "1"}')
        with pytest.raises(ExtractionError) as exc_info:
            await LLMIntentExtractor(provider).extract("context", TransferContent)
        assert exc_info.value.fields == ["receiver"]

    @pytest.mark.asyncio
    async def test_provider_failure(self):
        provider = FakeProvider(error=RuntimeError("rate limited"))
        with pytest.raises(ExtractionError, match="rate limited"):
            await LLMIntentExtractor(provider).extract("context", ReceiveContent)


class TestStaticIntentExtractor:
    @pytest.mark.asyncio
    async def test_records_contexts(self):
        extractor = StaticIntentExtractor({"amount": "0.5"})
        content = await extractor.extract("ctx", ReceiveContent)
        assert content.amount == "0.5"
        assert extractor.calls == 1
        assert extractor.contexts == ["ctx"]

    @pytest.mark.asyncio
    async def test_validates_like_the_model(self):
        with pytest.raises(ExtractionError):
            await StaticIntentExtractor({}).extract("ctx", ReceiveContent)
