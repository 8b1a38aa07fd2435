"""Hatom lending: supply EGLD (LEND_EGLD) and pledge hTokens (ADD_COLLATERAL).

The contract addresses come from ``integrations.hatom`` in the config; with
nothing configured both actions answer with a configuration error.
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
from mvx_agent.config import HatomConfig
from mvx_agent.errors import ConfigurationError, DownstreamServiceError, ExtractionError
from mvx_agent.extraction.schemas import CollateralContent, LendContent
from mvx_agent.extraction.templates import ADD_COLLATERAL_TEMPLATE, LEND_EGLD_TEMPLATE
from mvx_agent.wallet.transaction import (
    TransactionRequest,
    contract_call_data,
    esdt_transfer_data,
    estimate_gas_limit,
    to_atomic,
)

logger = logging.getLogger("mvx_agent.actions.hatom")


def _require(deps: ActionDependencies, setting: str) -> tuple[HatomConfig, str]:
    hatom = deps.hatom
    value = getattr(hatom, setting, "") if hatom is not None else ""
    if not value:
        raise ConfigurationError(f"Hatom is not configured: set integrations.hatom.{setting}")
    return hatom, value


def _atomic(amount: str, decimals: int) -> int:
    try:
        return to_atomic(amount, decimals)
    except ValueError as exc:
        raise ExtractionError(str(exc), fields=["amount"]) from exc


@action(
    "LEND_EGLD",
    "Supply EGLD from the agent's wallet to the Hatom lending market",
    purpose="lend EGLD",
    similes=["SUPPLY_EGLD", "HATOM_LEND"],
    privileged=True,
    examples=[
        ("Lend 1 EGLD on Hatom", "Supplying 1 EGLD to Hatom now..."),
    ],
)
async def lend_egld(deps: ActionDependencies, request: ActionRequest) -> ActionResponse:
    hatom, market = _require(deps, "money_market")
    content = await deps.extract(request, LEND_EGLD_TEMPLATE, LendContent)
    network = deps.wallet.network
    value = _atomic(content.amount, network.decimals)

    data = contract_call_data("mint")
    tx = TransactionRequest(
        receiver=market,
        value=value,
        data=data,
        gas_limit=estimate_gas_limit(network, data, hatom.gas_limit),
    )
    logger.info(f"Lending {content.amount} {network.native_token} to {market}")

    outcome = await deps.submit_and_confirm(tx, action="LEND_EGLD", caller_id=request.caller_id)
    outcome.raise_for_status()

    explorer = network.explorer_tx_url(outcome.tx_hash)
    return ActionResponse(
        text=(
            f"Lent {content.amount} {network.native_token} on Hatom. "
            f"Transaction hash: {outcome.tx_hash}\n{explorer}"
        ),
        content={"tx_hash": outcome.tx_hash, "explorer_url": explorer, "amount": content.amount},
    )


@action(
    "ADD_COLLATERAL",
    "Pledge hTokens from the agent's wallet as Hatom collateral",
    purpose="add collateral",
    similes=["ENTER_MARKET", "HATOM_COLLATERAL"],
    privileged=True,
    examples=[
        ("Add 10 HEGLD-d61095 as collateral", "Adding 10 HEGLD-d61095 as collateral now..."),
    ],
)
async def add_collateral(deps: ActionDependencies, request: ActionRequest) -> ActionResponse:
    hatom, controller = _require(deps, "controller")
    content = await deps.extract(request, ADD_COLLATERAL_TEMPLATE, CollateralContent)
    token = content.token or hatom.h_egld_token
    if not token:
        raise ExtractionError(
            "no hToken named and integrations.hatom.h_egld_token is not set", fields=["token"]
        )

    network = deps.wallet.network
    try:
        decimals = await deps.wallet.get_token_decimals(token)
    except httpx.HTTPError as exc:
        raise DownstreamServiceError(
            network.display_name, f"could not look up token {token}: {exc}"
        ) from exc

    data = esdt_transfer_data(token, _atomic(content.amount, decimals), "enterMarkets")
    tx = TransactionRequest(
        receiver=controller,
        data=data,
        gas_limit=estimate_gas_limit(network, data, hatom.gas_limit),
    )
    logger.info(f"Adding {content.amount} {token} as collateral via {controller}")

    outcome = await deps.submit_and_confirm(tx, action="ADD_COLLATERAL", caller_id=request.caller_id)
    outcome.raise_for_status()

    explorer = network.explorer_tx_url(outcome.tx_hash)
    return ActionResponse(
        text=(
            f"Added {content.amount} {token} as collateral on Hatom. "
            f"Transaction hash: {outcome.tx_hash}\n{explorer}"
        ),
        content={
            "tx_hash": outcome.tx_hash,
            "explorer_url": explorer,
            "amount": content.amount,
            "token": token,
        },
    )
