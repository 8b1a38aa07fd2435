"""Transaction requests, receipts and the MultiversX signing format."""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from mvx_agent.wallet.networks import NetworkProfile

TRANSACTION_VERSION = 1

# Extra execution gas charged on top of the move-balance cost for an
# ESDTTransfer call.
ESDT_TRANSFER_GAS = 250_000


@dataclass
class TransactionRequest:
    """What a handler wants sent. The nonce is stamped at submission."""

    receiver: str
    value: int = 0
    data: bytes = b""
    gas_limit: int | None = None
    nonce: int | None = None

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Transaction value cannot be negative")
        if isinstance(self.data, str):
            self.data = self.data.encode("utf-8")


@dataclass(frozen=True)
class TransactionReceipt:
    """Proof of submission, used as the watcher's lookup key."""

    tx_hash: str
    nonce: int
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def estimate_gas_limit(network: NetworkProfile, data: bytes, extra: int = 0) -> int:
    """Move-balance gas cost for a payload of *data*, plus *extra* execution gas."""
    return network.min_gas_limit + network.gas_per_data_byte * len(data) + extra


def build_transaction(
    request: TransactionRequest,
    *,
    sender: str,
    nonce: int,
    network: NetworkProfile,
) -> dict:
    """Return the unsigned transaction as an ordered dict.

    Key order matters: the signature covers the compact JSON of exactly
    these keys in this order.
    """
    gas_limit = request.gas_limit or estimate_gas_limit(network, request.data)
    tx: dict = {
        "nonce": nonce,
        "value": str(request.value),
        "receiver": request.receiver,
        "sender": sender,
        "gasPrice": network.min_gas_price,
        "gasLimit": gas_limit,
    }
    if request.data:
        tx["data"] = base64.b64encode(request.data).decode("ascii")
    tx["chainID"] = network.chain_id
    tx["version"] = TRANSACTION_VERSION
    return tx


def serialize_for_signing(tx: dict) -> bytes:
    return json.dumps(tx, separators=(",", ":")).encode("utf-8")


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------


def to_atomic(amount: str | Decimal | int, decimals: int) -> int:
    """Convert a human amount (``"1.5"``) to the smallest denomination.

    Raises ``ValueError`` for non-numeric, non-positive or over-precise
    amounts.
    """
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount '{amount}'") from exc
    if not value.is_finite() or value <= 0:
        raise ValueError(f"Amount must be positive, got '{amount}'")
    scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount '{amount}' has more than {decimals} decimals")
    return int(scaled)


def from_atomic(value: int, decimals: int) -> Decimal:
    """Convert an atomic amount back to a human-readable ``Decimal``."""
    return (Decimal(value).scaleb(-decimals)).normalize()


def format_amount(value: int, decimals: int, symbol: str) -> str:
    amount = from_atomic(value, decimals)
    return f"{amount:f} {symbol}"


def encode_argument(value: str | int | bool | bytes) -> str:
    """Hex-encode one smart contract argument.

    Integers are big-endian with an even number of digits (zero is the
    empty string), booleans are ``true``/``false`` text and strings are
    UTF-8.
    """
    if isinstance(value, bool):
        value = "true" if value else "false"
    if isinstance(value, int):
        if value < 0:
            raise ValueError("Negative integers cannot be encoded as arguments")
        if value == 0:
            return ""
        digits = format(value, "x")
        return digits if len(digits) % 2 == 0 else "0" + digits
    if isinstance(value, str):
        value = value.encode("utf-8")
    return value.hex()


def contract_call_data(function: str, *args: str | int | bool | bytes) -> bytes:
    """Build ``function@arg1@arg2...`` call data."""
    parts = [function, *(encode_argument(arg) for arg in args)]
    return "@".join(parts).encode("ascii")


def esdt_transfer_data(token_identifier: str, value: int, *call: str | int | bool | bytes) -> bytes:
    """Build the ``ESDTTransfer@<token>@<amount>`` call data.

    Anything in *call* is appended: the first item names the function to
    run on the receiving contract, the rest are its arguments.
    """
    if value <= 0:
        raise ValueError("ESDT transfer amount must be positive")
    return contract_call_data("ESDTTransfer", token_identifier, value, *call)
