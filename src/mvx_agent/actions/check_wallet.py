"""CHECK_WALLET: report the agent's native balance."""

from __future__ import annotations

import httpx

from mvx_agent.actions.registry import (
    ActionDependencies,
    ActionRequest,
    ActionResponse,
    action,
)
from mvx_agent.errors import DownstreamServiceError
from mvx_agent.wallet.transaction import format_amount


@action(
    "CHECK_WALLET",
    "Check the agent's EGLD balance",
    purpose="check the wallet balance",
    similes=["CHECK_BALANCE"],
    examples=[
        ("How much EGLD do you have?", "Let me check my balance"),
    ],
)
async def check_wallet(deps: ActionDependencies, request: ActionRequest) -> ActionResponse:
    network = deps.wallet.network
    try:
        balance = await deps.wallet.get_balance()
    except httpx.HTTPError as exc:
        raise DownstreamServiceError(network.display_name, f"balance lookup failed: {exc}") from exc

    formatted = format_amount(balance, network.decimals, network.native_token)
    return ActionResponse(
        text=f"My balance on {network.display_name} is {formatted}",
        content={"address": deps.wallet.get_address(), "balance": str(balance)},
    )
