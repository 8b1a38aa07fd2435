"""CHECK_TRANSACTION: one status lookup for a transaction hash."""

from __future__ import annotations

import logging
import re

import httpx

from mvx_agent.actions.registry import (
    ActionDependencies,
    ActionRequest,
    ActionResponse,
    action,
)
from mvx_agent.errors import DownstreamServiceError, ExtractionError
from mvx_agent.wallet.watcher import OutcomeStatus, TransactionOutcome, classify_status

logger = logging.getLogger("mvx_agent.actions.check_transaction")

_TX_HASH_RE = re.compile(r"\b[0-9a-fA-F]{64}\b")


def find_tx_hash(request: ActionRequest) -> str:
    """Hash from ``options["tx_hash"]`` or the first 64-hex token in the text."""
    explicit = str(request.options.get("tx_hash") or "").strip()
    if explicit:
        if not _TX_HASH_RE.fullmatch(explicit):
            raise ExtractionError(f"'{explicit}' is not a transaction hash", fields=["tx_hash"])
        return explicit.lower()
    match = _TX_HASH_RE.search(request.text)
    if match is None:
        raise ExtractionError("no transaction hash found in the message", fields=["tx_hash"])
    return match.group(0).lower()


@action(
    "CHECK_TRANSACTION",
    "Look up the status of a transaction by its hash",
    purpose="check the transaction status",
    similes=["TRANSACTION_STATUS"],
    examples=[
        ("Did transaction 3f2c...e1 go through?", "Let me look it up"),
    ],
)
async def check_transaction(deps: ActionDependencies, request: ActionRequest) -> ActionResponse:
    tx_hash = find_tx_hash(request)
    network = deps.wallet.network
    try:
        report = await deps.wallet.client.get_transaction_status(tx_hash)
    except httpx.HTTPError as exc:
        raise DownstreamServiceError(network.display_name, f"status lookup failed: {exc}") from exc

    status = classify_status(report.status)
    if status is not OutcomeStatus.PENDING and deps.journal is not None:
        try:
            await deps.journal.record_outcome(
                TransactionOutcome(status=status, tx_hash=tx_hash, reason=report.reason)
            )
        except Exception:
            logger.exception(f"Could not journal outcome of {tx_hash}")

    explorer = network.explorer_tx_url(tx_hash)
    if status is OutcomeStatus.SUCCESS:
        text = f"Transaction {tx_hash} succeeded.\n{explorer}"
    elif status is OutcomeStatus.FAILED:
        text = f"Transaction {tx_hash} failed: {report.reason or report.status}.\n{explorer}"
    else:
        text = f"Transaction {tx_hash} is still pending ({report.status}).\n{explorer}"
    return ActionResponse(
        text=text,
        content={
            "tx_hash": tx_hash,
            "status": status.value,
            "network_status": report.status,
            "reason": report.reason,
            "explorer_url": explorer,
        },
    )
