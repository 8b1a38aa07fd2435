"""CREATE_BIRTHDAY_WARP: register a "send me birthday EGLD" warp on chain.

The warp document travels as the data of a zero-value transaction to the
agent's own address; once that transaction succeeds the warp is reachable
by its hash and shared as a link plus QR code.
"""

from __future__ import annotations

import json

from mvx_agent.actions.registry import (
    ActionDependencies,
    ActionRequest,
    ActionResponse,
    action,
)
from mvx_agent.errors import DownstreamServiceError
from mvx_agent.extraction.schemas import BirthdayWarpContent
from mvx_agent.extraction.templates import BIRTHDAY_WARP_TEMPLATE
from mvx_agent.wallet.networks import NetworkProfile
from mvx_agent.wallet.transaction import TransactionRequest

WARP_PROTOCOL = "warp:0.1.0"
WARP_ACTION_GAS_LIMIT = 10_000_000


def birthday_warp_document(wallet_address: str, decimals: int = 18) -> dict:
    """Warp that lets anyone send EGLD to *wallet_address*."""
    return {
        "protocol": WARP_PROTOCOL,
        "name": "Birthday gift",
        "title": "Send birthday EGLD",
        "description": "Send me EGLD for my birthday",
        "preview": "",
        "actions": [
            {
                "type": "contract",
                "label": "Send EGLD",
                "address": wallet_address,
                "func": "transfer",
                "args": [],
                "gasLimit": WARP_ACTION_GAS_LIMIT,
                "inputs": [
                    {
                        "name": "value",
                        "description": "Amount of eGold to send.",
                        "type": "biguint",
                        "position": "value",
                        "source": "field",
                        "required": True,
                        "min": 1,
                        "modifier": f"scale:{decimals}",
                    }
                ],
            }
        ],
    }


def warp_link(network: NetworkProfile, tx_hash: str) -> str:
    # ":" is percent-encoded in the path segment
    return f"{network.warp_url}/hash%3A{tx_hash}"


@action(
    "CREATE_BIRTHDAY_WARP",
    "Create a birthday warp transaction",
    purpose="create a birthday warp",
    similes=["SEND_BIRTHDAY_EGLD"],
    privileged=True,
    examples=[
        (
            "Create a birthday warp for wallet "
            "erd1ezxnz5lywd5zpcnl7x3u74vc60tgjxdnga3s0608gmnx6rsxmwhqudsllw",
            "Successfully created birthday warp transaction.",
        ),
    ],
)
async def create_birthday_warp(deps: ActionDependencies, request: ActionRequest) -> ActionResponse:
    content = await deps.extract(request, BIRTHDAY_WARP_TEMPLATE, BirthdayWarpContent)
    network = deps.wallet.network

    document = birthday_warp_document(content.wallet_address, network.decimals)
    tx = TransactionRequest(
        receiver=deps.wallet.get_address(),
        value=0,
        data=json.dumps(document, separators=(",", ":")),
    )
    outcome = await deps.submit_and_confirm(
        tx, action="CREATE_BIRTHDAY_WARP", caller_id=request.caller_id
    )
    outcome.raise_for_status()

    link = warp_link(network, outcome.tx_hash)
    result = {"tx_hash": outcome.tx_hash, "warp_url": link}
    if deps.qrcode is None:
        return ActionResponse(text=f"Here is the birthday warp you can share: {link}", content=result)

    try:
        image_url = await deps.qrcode.generate(link)
    except DownstreamServiceError as exc:
        result["qr_error"] = exc.reason
        return ActionResponse(
            text=(
                f"The birthday warp was created (transaction {outcome.tx_hash}), "
                f"but the QR code could not be generated: {exc.reason}. "
                f"You can share this link instead: {link}"
            ),
            content=result,
        )

    result["qr_code_url"] = image_url
    return ActionResponse(text=f"Here is the QR code that you can share: {image_url}", content=result)
