"""Payload schemas the extractor must fill before an action may proceed."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Annotated

from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
)

from mvx_agent.wallet.credential import is_valid_address

_TOKEN_RE = re.compile(r"^[A-Z0-9]{3,10}-[a-f0-9]{6}$")
_TOKEN_NAME_RE = re.compile(r"^[A-Za-z0-9]{3,20}$")
_TICKER_RE = re.compile(r"^[A-Z0-9]{3,10}$")
_NATIVE_TOKENS = ("EGLD", "XEGLD")


def _check_address(value: str) -> str:
    if not is_valid_address(value):
        raise ValueError(f"'{value}' is not a valid MultiversX address")
    return value


def _check_amount(value: object) -> str:
    if value is None or isinstance(value, bool):
        raise ValueError("amount must be a number")
    text = str(value).strip()
    try:
        number = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"'{text}' is not a number") from None
    if not number.is_finite() or number <= 0:
        raise ValueError("amount must be positive")
    return text


Address = Annotated[str, AfterValidator(_check_address)]
Amount = Annotated[str, BeforeValidator(_check_amount)]


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, frozen=True)


class TransferContent(_Payload):
    """EGLD or ESDT transfer to another address."""

    receiver: Address = Field(validation_alias=AliasChoices("receiver", "tokenAddress", "address"))
    amount: Amount
    token: str = Field(default="EGLD", validation_alias=AliasChoices("token", "tokenIdentifier"))

    @field_validator("token", mode="before")
    @classmethod
    def normalize_token(cls, value: object) -> str:
        if value is None or str(value).strip() == "":
            return "EGLD"
        token = str(value).strip()
        if token.upper() in _NATIVE_TOKENS:
            return "EGLD"
        if not _TOKEN_RE.match(token):
            raise ValueError(f"'{token}' is not a token identifier like 'USDC-c76f1f'")
        return token

    @property
    def is_native(self) -> bool:
        return self.token == "EGLD"


class ReceiveContent(_Payload):
    """Amount of EGLD the user wants to send to the agent."""

    amount: Amount


class BirthdayWarpContent(_Payload):
    """Address that birthday gifts should be sent to."""

    wallet_address: Address = Field(
        validation_alias=AliasChoices("wallet_address", "walletAddress")
    )


class CreateTokenContent(_Payload):
    """A new fungible ESDT: display name, ticker, decimals and initial supply."""

    token_name: str = Field(validation_alias=AliasChoices("token_name", "tokenName"))
    token_ticker: str = Field(validation_alias=AliasChoices("token_ticker", "tokenTicker"))
    decimals: int = Field(default=18, ge=0, le=18)
    amount: Amount

    @field_validator("token_name")
    @classmethod
    def check_name(cls, value: str) -> str:
        if not _TOKEN_NAME_RE.match(value):
            raise ValueError("token name must be 3 to 20 letters or digits")
        return value

    @field_validator("token_ticker", mode="before")
    @classmethod
    def check_ticker(cls, value: object) -> str:
        ticker = str(value or "").strip().upper()
        if not _TICKER_RE.match(ticker):
            raise ValueError("token ticker must be 3 to 10 letters or digits")
        return ticker


class LendContent(_Payload):
    """Amount of EGLD to supply to the lending market."""

    amount: Amount


class CollateralContent(_Payload):
    """Amount of an hToken to put up as collateral. No token means hEGLD."""

    amount: Amount
    token: str | None = Field(default=None, validation_alias=AliasChoices("token", "tokenIdentifier"))

    @field_validator("token", mode="before")
    @classmethod
    def check_token(cls, value: object) -> str | None:
        if value is None or str(value).strip() == "":
            return None
        token = str(value).strip()
        if not _TOKEN_RE.match(token):
            raise ValueError(f"'{token}' is not a token identifier like 'HEGLD-d61095'")
        return token
