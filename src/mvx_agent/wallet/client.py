"""Async client for the MultiversX public API.

API Docs: https://api.multiversx.com/docs
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass

import httpx

from mvx_agent.errors import SubmissionError, SubmissionUnknown
from mvx_agent.wallet.networks import NetworkProfile

logger = logging.getLogger("mvx_agent.wallet.client")

USER_AGENT = "mvx-agent-actions"

SUCCESS_STATUSES = frozenset({"success", "successful", "executed"})
FAILURE_STATUSES = frozenset({"fail", "failed", "unsuccessful", "invalid"})

# A proxy answering these may already have forwarded the transaction.
_GATEWAY_TIMEOUTS = frozenset({502, 504})


@dataclass(frozen=True)
class StatusReport:
    """One observation of a transaction's status on the network."""

    status: str
    reason: str | None = None


def _decode_b64(value: str) -> str:
    try:
        return base64.b64decode(value).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError):
        return value


def failure_reason(payload: dict) -> str | None:
    """Dig the human-readable failure reason out of a transaction payload.

    Looks, in order, at the receipt, smart-contract results, the operations
    list and the ``signalError`` log event.
    """
    receipt = payload.get("receipt") or {}
    if receipt.get("data"):
        return receipt["data"]

    for scr in payload.get("results") or payload.get("smartContractResults") or []:
        if scr.get("returnMessage"):
            return scr["returnMessage"]

    for op in payload.get("operations") or []:
        if op.get("action") == "signalError" and op.get("message"):
            return op["message"]

    for event in (payload.get("logs") or {}).get("events") or []:
        if event.get("identifier") in ("signalError", "internalVMErrors"):
            topics = event.get("topics") or []
            if len(topics) > 1 and topics[1]:
                return _decode_b64(topics[1])
            if event.get("data"):
                return _decode_b64(event["data"])
    return None


class MultiversXApiClient:
    """Thin wrapper over the endpoints the wallet needs.

    Parameters
    ----------
    network:
        Profile whose ``api_url`` is used as base URL.
    client:
        Optional pre-built ``httpx.AsyncClient`` (tests pass one backed by a
        ``MockTransport``). When omitted a client is created and owned here.
    """

    def __init__(
        self,
        network: NetworkProfile,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.network = network
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=network.api_url,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> MultiversXApiClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_account(self, address: str) -> dict:
        """Return ``{"address", "nonce", "balance"}`` for *address*."""
        resp = await self._client.get(f"/accounts/{address}")
        resp.raise_for_status()
        data = resp.json()
        return {
            "address": data.get("address", address),
            "nonce": int(data.get("nonce", 0)),
            "balance": int(data.get("balance", "0")),
        }

    async def get_token(self, identifier: str) -> dict:
        resp = await self._client.get(f"/tokens/{identifier}")
        resp.raise_for_status()
        return resp.json()

    async def get_transaction_status(self, tx_hash: str) -> StatusReport:
        """Fetch the current status of *tx_hash*.

        A transaction the API has not indexed yet (404) is reported as
        ``pending``.
        """
        resp = await self._client.get(f"/transactions/{tx_hash}")
        if resp.status_code == 404:
            return StatusReport(status="pending")
        resp.raise_for_status()
        data = resp.json()
        status = str(data.get("status", "pending")).lower()
        reason = failure_reason(data) if status in FAILURE_STATUSES else None
        return StatusReport(status=status, reason=reason)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def send_transaction(self, signed_tx: dict) -> str:
        """POST a signed transaction and return its hash.

        Raises
        ------
        SubmissionError
            If the network answers with an error, or the request never got
            out (no connection).
        SubmissionUnknown
            If the request may have reached the network but no usable
            answer came back. Acceptance is unknown either way.
        """
        try:
            resp = await self._client.post("/transactions", json=signed_tx)
        except (httpx.ConnectError, httpx.ConnectTimeout, httpx.PoolTimeout) as exc:
            raise SubmissionError(
                f"could not reach {self.network.display_name} ({exc.__class__.__name__})"
            ) from exc
        except httpx.TransportError as exc:
            raise SubmissionUnknown(
                f"no answer from {self.network.display_name} ({exc.__class__.__name__})"
            ) from exc

        if resp.status_code in _GATEWAY_TIMEOUTS:
            raise SubmissionUnknown(
                f"gateway error from {self.network.display_name} (HTTP {resp.status_code})",
                status_code=resp.status_code,
            )
        if resp.status_code >= 400:
            try:
                data = resp.json()
            except ValueError:
                data = None
            reason = resp.text
            if isinstance(data, dict):
                reason = data.get("message") or data.get("error") or resp.text
            raise SubmissionError(str(reason), status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise SubmissionUnknown(
                f"unreadable answer from {self.network.display_name} (HTTP {resp.status_code})",
                status_code=resp.status_code,
            ) from exc
        tx_hash = None
        if isinstance(data, dict):
            inner = data.get("data")
            tx_hash = data.get("txHash") or (inner.get("txHash") if isinstance(inner, dict) else None)
        if not tx_hash:
            raise SubmissionUnknown(
                f"network response carried no transaction hash: {data}",
                status_code=resp.status_code,
            )
        return tx_hash
