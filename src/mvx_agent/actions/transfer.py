"""SEND_TOKEN: move EGLD or an ESDT token out of the agent's wallet.

Flow: allow-list, extraction, one submission, then wait for the outcome.
The response is only written once the network has settled the
transaction (or the watcher gave up).
"""

from __future__ import annotations

import logging

import httpx

from mvx_agent.actions.registry import (
    ActionDependencies,
    ActionRequest,
    ActionResponse,
    action,
)
from mvx_agent.errors import DownstreamServiceError, ExtractionError
from mvx_agent.extraction.schemas import TransferContent
from mvx_agent.extraction.templates import TRANSFER_TEMPLATE
from mvx_agent.wallet.transaction import (
    ESDT_TRANSFER_GAS,
    TransactionRequest,
    esdt_transfer_data,
    estimate_gas_limit,
    to_atomic,
)

logger = logging.getLogger("mvx_agent.actions.transfer")


def build_transfer(content: TransferContent, decimals: int, deps: ActionDependencies) -> TransactionRequest:
    """Turn a validated payload into a fresh transaction request."""
    try:
        value = to_atomic(content.amount, decimals)
    except ValueError as exc:
        raise ExtractionError(str(exc), fields=["amount"]) from exc

    if content.is_native:
        return TransactionRequest(receiver=content.receiver, value=value)

    data = esdt_transfer_data(content.token, value)
    return TransactionRequest(
        receiver=content.receiver,
        data=data,
        gas_limit=estimate_gas_limit(deps.wallet.network, data, ESDT_TRANSFER_GAS),
    )


@action(
    "SEND_TOKEN",
    "Transfer EGLD or an ESDT token from the agent's wallet to another address",
    purpose="transfer tokens",
    similes=["TRANSFER", "SEND_EGLD", "SEND_ESDT"],
    privileged=True,
    examples=[
        (
            "Send 1 EGLD to erd12r22hx2q4jjt8e0gukxt5shxqjp9ys5nwdtz0gpds25zf8qwtjdqyzfgzm",
            "I'll send 1 EGLD tokens now...",
        ),
        (
            "Send 1 TST-a8b23d to erd12r22hx2q4jjt8e0gukxt5shxqjp9ys5nwdtz0gpds25zf8qwtjdqyzfgzm",
            "I'll send 1 TST-a8b23d tokens now...",
        ),
    ],
)
async def send_token(deps: ActionDependencies, request: ActionRequest) -> ActionResponse:
    content = await deps.extract(request, TRANSFER_TEMPLATE, TransferContent)
    network = deps.wallet.network

    try:
        decimals = await deps.wallet.get_token_decimals(content.token)
    except httpx.HTTPError as exc:
        raise DownstreamServiceError(
            network.display_name, f"could not look up token {content.token}: {exc}"
        ) from exc

    tx = build_transfer(content, decimals, deps)
    symbol = network.native_token if content.is_native else content.token
    logger.info(f"Transferring {content.amount} {symbol} to {content.receiver}")

    outcome = await deps.submit_and_confirm(tx, action="SEND_TOKEN", caller_id=request.caller_id)
    outcome.raise_for_status()

    explorer = network.explorer_tx_url(outcome.tx_hash)
    return ActionResponse(
        text=(
            f"Transaction sent successfully! {content.amount} {symbol} sent to "
            f"{content.receiver}. Transaction hash: {outcome.tx_hash}\n{explorer}"
        ),
        content={
            "tx_hash": outcome.tx_hash,
            "explorer_url": explorer,
            "receiver": content.receiver,
            "amount": content.amount,
            "token": content.token,
        },
    )
