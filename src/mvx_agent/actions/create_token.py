"""CREATE_TOKEN: issue a new fungible ESDT owned by the agent's wallet."""

from __future__ import annotations

import logging

from mvx_agent.actions.registry import (
    ActionDependencies,
    ActionRequest,
    ActionResponse,
    action,
)
from mvx_agent.errors import ExtractionError
from mvx_agent.extraction.schemas import CreateTokenContent
from mvx_agent.extraction.templates import CREATE_TOKEN_TEMPLATE
from mvx_agent.wallet.transaction import (
    TransactionRequest,
    contract_call_data,
    estimate_gas_limit,
    to_atomic,
)

logger = logging.getLogger("mvx_agent.actions.create_token")

ESDT_SYSTEM_CONTRACT = "erd1qqqqqqqqqqqqqqqpqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqzllls8a5w6u"
ISSUE_COST = 50_000_000_000_000_000  # 0.05 EGLD
ISSUE_GAS = 60_000_000

# name/value pairs appended to every issue call
TOKEN_PROPERTIES = (
    ("canFreeze", False),
    ("canWipe", False),
    ("canPause", False),
    ("canChangeOwner", True),
    ("canUpgrade", True),
    ("canAddSpecialRoles", True),
)


def build_issue(content: CreateTokenContent, deps: ActionDependencies) -> TransactionRequest:
    try:
        supply = to_atomic(content.amount, content.decimals)
    except ValueError as exc:
        raise ExtractionError(str(exc), fields=["amount"]) from exc

    properties = [item for pair in TOKEN_PROPERTIES for item in pair]
    data = contract_call_data(
        "issue",
        content.token_name,
        content.token_ticker,
        supply,
        content.decimals,
        *properties,
    )
    return TransactionRequest(
        receiver=ESDT_SYSTEM_CONTRACT,
        value=ISSUE_COST,
        data=data,
        gas_limit=estimate_gas_limit(deps.wallet.network, data, ISSUE_GAS),
    )


@action(
    "CREATE_TOKEN",
    "Issue a new fungible ESDT token from the agent's wallet",
    purpose="create a token",
    similes=["ISSUE_TOKEN", "NEW_TOKEN"],
    privileged=True,
    examples=[
        (
            "Create a token XTREME with ticker XTR and an initial supply of 10000",
            "Successfully created token.",
        ),
    ],
)
async def create_token(deps: ActionDependencies, request: ActionRequest) -> ActionResponse:
    content = await deps.extract(request, CREATE_TOKEN_TEMPLATE, CreateTokenContent)
    tx = build_issue(content, deps)
    logger.info(
        f"Issuing {content.token_name} ({content.token_ticker}), supply {content.amount}, "
        f"{content.decimals} decimals"
    )

    outcome = await deps.submit_and_confirm(tx, action="CREATE_TOKEN", caller_id=request.caller_id)
    outcome.raise_for_status()

    explorer = deps.wallet.network.explorer_tx_url(outcome.tx_hash)
    return ActionResponse(
        text=(
            f"Token {content.token_name} ({content.token_ticker}) created with a supply of "
            f"{content.amount}. Transaction hash: {outcome.tx_hash}\n{explorer}"
        ),
        content={
            "tx_hash": outcome.tx_hash,
            "explorer_url": explorer,
            "token_name": content.token_name,
            "token_ticker": content.token_ticker,
            "decimals": content.decimals,
            "amount": content.amount,
        },
    )
