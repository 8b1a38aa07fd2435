"""Tests for the MultiversX API client."""

import base64

import httpx
import pytest

from conftest import BOB_ADDRESS, DEVNET
from mvx_agent.errors import SubmissionError, SubmissionUnknown
from mvx_agent.wallet.client import MultiversXApiClient, failure_reason


def _client(handler) -> MultiversXApiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=DEVNET.api_url)
    return MultiversXApiClient(DEVNET, client=http)


class TestReads:
    @pytest.mark.asyncio
    async def test_get_account(self, api_client, network):
        account = await api_client.get_account(BOB_ADDRESS)
        assert account == {"address": BOB_ADDRESS, "nonce": 7, "balance": 10 * 10**18}

    @pytest.mark.asyncio
    async def test_unknown_transaction_is_pending(self, api_client):
        report = await api_client.get_transaction_status("ab" * 32)
        assert report.status == "pending"
        assert report.reason is None

    @pytest.mark.asyncio
    async def test_failed_transaction_carries_reason(self, api_client, network):
        network.statuses["cd" * 32] = {
            "status": "fail",
            "operations": [{"action": "signalError", "message": "insufficient funds"}],
        }
        report = await api_client.get_transaction_status("cd" * 32)
        assert report.status == "fail"
        assert report.reason == "insufficient funds"

    @pytest.mark.asyncio
    async def test_unsuccessful_transaction_carries_reason(self, api_client, network):
        network.statuses["ce" * 32] = {"status": "unsuccessful", "receipt": {"data": "out of gas"}}
        report = await api_client.get_transaction_status("ce" * 32)
        assert report.status == "unsuccessful"
        assert report.reason == "out of gas"

    @pytest.mark.asyncio
    async def test_status_is_lowercased(self, api_client, network):
        network.statuses["ef" * 32] = {"status": "Success"}
        report = await api_client.get_transaction_status("ef" * 32)
        assert report.status == "success"

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        client = _client(lambda request: httpx.Response(500, json={"message": "boom"}))
        with pytest.raises(httpx.HTTPStatusError):
            await client.get_transaction_status("ab" * 32)


class TestSendTransaction:
    @pytest.mark.asyncio
    async def test_returns_hash(self, api_client):
        tx_hash = await api_client.send_transaction({"receiver": BOB_ADDRESS, "nonce": 1})
        assert len(tx_hash) == 64

    @pytest.mark.asyncio
    async def test_rejection_message(self, api_client, network):
        network.reject_with = "insufficient funds"
        with pytest.raises(SubmissionError) as exc_info:
            await api_client.send_transaction({"receiver": BOB_ADDRESS, "nonce": 1})
        assert exc_info.value.reason == "insufficient funds"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_connection_refused_is_plain_rejection(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(SubmissionError) as exc_info:
            await _client(handler).send_transaction({"nonce": 1})
        assert not isinstance(exc_info.value, SubmissionUnknown)
        assert "could not reach" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_read_timeout_leaves_outcome_unknown(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(SubmissionUnknown) as exc_info:
            await _client(handler).send_transaction({"nonce": 1})
        assert "ReadTimeout" in exc_info.value.reason

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, json={}),
            httpx.Response(200, text="ok"),
            httpx.Response(200, json=["a"]),
            httpx.Response(504, text="Gateway Timeout"),
        ],
    )
    async def test_unusable_answers_leave_outcome_unknown(self, response):
        client = _client(lambda request: response)
        with pytest.raises(SubmissionUnknown):
            await client.send_transaction({"nonce": 1})


class TestFailureReason:
    def test_receipt_first(self):
        assert failure_reason({"receipt": {"data": "out of gas"}}) == "out of gas"

    def test_smart_contract_results(self):
        payload = {"results": [{"returnMessage": ""}, {"returnMessage": "user error"}]}
        assert failure_reason(payload) == "user error"

    def test_log_event_topic_is_decoded(self):
        topic = base64.b64encode(b"insufficient funds").decode()
        payload = {"logs": {"events": [{"identifier": "signalError", "topics": ["", topic]}]}}
        assert failure_reason(payload) == "insufficient funds"

    def test_nothing_found(self):
        assert failure_reason({"status": "fail"}) is None
