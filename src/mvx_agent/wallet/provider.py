"""Wallet provider: one credential on one network, and the only code that sends."""

from __future__ import annotations

import asyncio
import logging

import httpx

from mvx_agent.errors import SubmissionError, SubmissionUnknown
from mvx_agent.wallet.client import MultiversXApiClient
from mvx_agent.wallet.credential import Credential
from mvx_agent.wallet.networks import NetworkProfile, resolve
from mvx_agent.wallet.transaction import (
    TransactionReceipt,
    TransactionRequest,
    build_transaction,
    serialize_for_signing,
)

logger = logging.getLogger("mvx_agent.wallet.provider")


class WalletProvider:
    """Signs and submits transactions for a single credential.

    Address derivation is pure; :meth:`send` is the one side-effecting
    operation. Sends are serialized through a lock so that nonces are
    assigned one at a time and never collide.
    """

    def __init__(
        self,
        credential: Credential,
        network: NetworkProfile,
        client: MultiversXApiClient | None = None,
    ) -> None:
        self._credential = credential
        self.network = network
        self.client = client or MultiversXApiClient(network)
        self._send_lock = asyncio.Lock()
        self._next_nonce: int | None = None

    @classmethod
    def initialize(
        cls,
        private_key: str,
        network: str,
        client: MultiversXApiClient | None = None,
    ) -> WalletProvider:
        """Build a provider from configuration strings.

        Raises ``InvalidCredential`` or ``UnknownNetwork``; both are
        ``ConfigurationError`` and should abort startup.
        """
        profile = resolve(network)
        credential = Credential.from_string(private_key)
        logger.info(f"Wallet {credential.address} loaded on {profile.name}")
        return cls(credential, profile, client)

    @property
    def credential(self) -> Credential:
        return self._credential

    def get_address(self) -> str:
        return self._credential.address

    async def get_balance(self) -> int:
        """Native balance in the smallest denomination."""
        account = await self.client.get_account(self.get_address())
        return account["balance"]

    async def get_token_decimals(self, identifier: str) -> int:
        if identifier.upper() in ("EGLD", self.network.native_token.upper()):
            return self.network.decimals
        token = await self.client.get_token(identifier)
        return int(token.get("decimals", 0))

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def send(self, request: TransactionRequest) -> TransactionReceipt:
        """Sign and submit *request* exactly once.

        The request is stamped with the nonce it was sent under; sending
        the same request object again is refused.

        Raises
        ------
        SubmissionError
            The network rejected the transaction or its answer was lost.
        """
        if request.nonce is not None:
            raise SubmissionError(
                f"transaction request was already submitted with nonce {request.nonce}"
            )

        async with self._send_lock:
            if self._next_nonce is None:
                try:
                    account = await self.client.get_account(self.get_address())
                except httpx.HTTPError as exc:
                    raise SubmissionError(f"could not read the account nonce: {exc}") from exc
                self._next_nonce = account["nonce"]
            nonce = self._next_nonce

            tx = build_transaction(
                request,
                sender=self.get_address(),
                nonce=nonce,
                network=self.network,
            )
            signature = self._credential.sign(serialize_for_signing(tx))
            signed = {**tx, "signature": signature.hex()}
            request.nonce = nonce

            try:
                tx_hash = await self.client.send_transaction(signed)
            except SubmissionError as exc:
                # Re-read the on-chain nonce next time instead of guessing.
                self._next_nonce = None
                if isinstance(exc, SubmissionUnknown):
                    logger.error(
                        f"Transaction to {request.receiver} (nonce {nonce}) may have been "
                        f"accepted: {exc.reason}"
                    )
                else:
                    logger.error(
                        f"Transaction to {request.receiver} (nonce {nonce}) rejected: {exc.reason}"
                    )
                raise

            self._next_nonce = nonce + 1

        logger.info(
            f"Submitted {tx_hash}: {request.value} to {request.receiver} "
            f"on {self.network.name} (nonce {nonce})"
        )
        return TransactionReceipt(tx_hash=tx_hash, nonce=nonce)

    async def aclose(self) -> None:
        await self.client.aclose()
