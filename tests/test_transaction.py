"""Tests for transaction building, signing serialization and amounts."""

from decimal import Decimal

import pytest

from conftest import ALICE_ADDRESS, BOB_ADDRESS, DEVNET
from mvx_agent.wallet.transaction import (
    ESDT_TRANSFER_GAS,
    TransactionRequest,
    build_transaction,
    contract_call_data,
    encode_argument,
    esdt_transfer_data,
    estimate_gas_limit,
    format_amount,
    from_atomic,
    serialize_for_signing,
    to_atomic,
)


class TestTransactionRequest:
    def test_negative_value_rejected(self):
        with pytest.raises(ValueError):
            TransactionRequest(receiver=BOB_ADDRESS, value=-1)

    def test_text_data_encoded(self):
        request = TransactionRequest(receiver=BOB_ADDRESS, data="hello")
        assert request.data == b"hello"
        assert request.nonce is None


class TestBuildTransaction:
    def test_field_order_without_data(self):
        tx = build_transaction(
            TransactionRequest(receiver=BOB_ADDRESS, value=10**18),
            sender=ALICE_ADDRESS,
            nonce=5,
            network=DEVNET,
        )
        assert list(tx) == [
            "nonce", "value", "receiver", "sender", "gasPrice", "gasLimit", "chainID", "version",
        ]
        assert tx["value"] == "1000000000000000000"
        assert tx["gasLimit"] == 50_000
        assert tx["chainID"] == "D"
        assert tx["version"] == 1

    def test_data_is_base64_and_priced(self):
        tx = build_transaction(
            TransactionRequest(receiver=BOB_ADDRESS, data=b"hello"),
            sender=ALICE_ADDRESS,
            nonce=0,
            network=DEVNET,
        )
        assert tx["data"] == "aGVsbG8="
        assert list(tx).index("data") == list(tx).index("gasLimit") + 1
        assert tx["gasLimit"] == 50_000 + 5 * 1_500

    def test_explicit_gas_limit_wins(self):
        tx = build_transaction(
            TransactionRequest(receiver=BOB_ADDRESS, gas_limit=600_000),
            sender=ALICE_ADDRESS,
            nonce=0,
            network=DEVNET,
        )
        assert tx["gasLimit"] == 600_000

    def test_serialization_is_compact(self):
        payload = serialize_for_signing({"nonce": 1, "value": "0"})
        assert payload == b'{"nonce":1,"value":"0"}'

    def test_esdt_gas(self):
        data = esdt_transfer_data("USDC-c76f1f", 1)
        assert estimate_gas_limit(DEVNET, data, ESDT_TRANSFER_GAS) == (
            50_000 + 1_500 * len(data) + 250_000
        )


class TestAmounts:
    def test_to_atomic(self):
        assert to_atomic("1.5", 18) == 1_500_000_000_000_000_000
        assert to_atomic("0.000001", 6) == 1
        assert to_atomic(2, 6) == 2_000_000

    @pytest.mark.parametrize("amount", ["0", "-1", "abc", "", "NaN"])
    def test_to_atomic_rejects(self, amount):
        with pytest.raises(ValueError):
            to_atomic(amount, 18)

    def test_to_atomic_rejects_excess_precision(self):
        with pytest.raises(ValueError):
            to_atomic("0.0000001", 6)

    def test_from_atomic_and_format(self):
        assert from_atomic(1_500_000_000_000_000_000, 18) == Decimal("1.5")
        assert format_amount(10 * 10**18, 18, "EGLD") == "10 EGLD"
        assert format_amount(250_000, 6, "USDC-c76f1f") == "0.25 USDC-c76f1f"

    def test_esdt_transfer_data(self):
        data = esdt_transfer_data("USDC-c76f1f", 1_000_000)
        assert data == b"ESDTTransfer@" + b"USDC-c76f1f".hex().encode() + b"@0f4240"

    def test_esdt_transfer_with_contract_call(self):
        data = esdt_transfer_data("HEGLD-d61095", 256, "enterMarkets")
        assert data == b"ESDTTransfer@" + b"HEGLD-d61095".hex().encode() + b"@0100@" + b"enterMarkets".hex().encode()


class TestContractCallData:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (0, ""),
            (5, "05"),
            (255, "ff"),
            (4096, "1000"),
            (True, "74727565"),
            (False, "66616c7365"),
            ("TKN", "544b4e"),
            (b"\x01\x02", "0102"),
        ],
    )
    def test_encode_argument(self, value, expected):
        assert encode_argument(value) == expected

    def test_negative_integer_rejected(self):
        with pytest.raises(ValueError):
            encode_argument(-1)

    def test_function_with_arguments(self):
        assert contract_call_data("mint") == b"mint"
        assert contract_call_data("issue", "Tok", 10) == b"issue@546f6b@0a"
