"""GET_ADDRESS: tell the user where the agent's wallet lives."""

from __future__ import annotations

from mvx_agent.actions.registry import (
    ActionDependencies,
    ActionRequest,
    ActionResponse,
    action,
)


@action(
    "GET_ADDRESS",
    "Return the agent's wallet address",
    purpose="retrieve the wallet address",
    similes=["CHECK_ADDRESS"],
    examples=[
        ("What's your address?", "One second, I'll give it to you"),
        ("Give me your wallet address please", "Ok, let me get that for you"),
    ],
)
async def get_address(deps: ActionDependencies, request: ActionRequest) -> ActionResponse:
    address = deps.wallet.get_address()
    return ActionResponse(
        text=f"My wallet address is {address}",
        content={"address": address, "network": deps.wallet.network.name},
    )
