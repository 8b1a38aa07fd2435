"""RECEIVE_EGLD: hand the user a signing link (and QR code) to pay the agent.

Nothing is signed by the agent here; the user's own wallet signs the
prefilled transaction behind the link.
"""

from __future__ import annotations

from urllib.parse import urlencode

from mvx_agent.actions.registry import (
    ActionDependencies,
    ActionRequest,
    ActionResponse,
    action,
)
from mvx_agent.errors import DownstreamServiceError, ExtractionError
from mvx_agent.extraction.schemas import ReceiveContent
from mvx_agent.extraction.templates import RECEIVE_TEMPLATE
from mvx_agent.wallet.networks import NetworkProfile
from mvx_agent.wallet.transaction import to_atomic


def wallet_hook_url(network: NetworkProfile, receiver: str, value: int) -> str:
    """Web wallet URL that opens a prefilled transfer of *value* to *receiver*."""
    query = urlencode({"receiver": receiver, "value": str(value)})
    return f"{network.wallet_url}/hook/transaction?{query}"


@action(
    "RECEIVE_EGLD",
    "Give the user a link and QR code to send EGLD to the agent",
    purpose="request a payment",
    similes=["REQUEST_EGLD", "RECEIVE_PAYMENT"],
    privileged=True,
    examples=[
        ("I want to send you 0.5 EGLD", "Here is a link you can use to send it"),
    ],
)
async def receive_egld(deps: ActionDependencies, request: ActionRequest) -> ActionResponse:
    content = await deps.extract(request, RECEIVE_TEMPLATE, ReceiveContent)
    network = deps.wallet.network
    try:
        value = to_atomic(content.amount, network.decimals)
    except ValueError as exc:
        raise ExtractionError(str(exc), fields=["amount"]) from exc

    link = wallet_hook_url(network, deps.wallet.get_address(), value)
    result = {"payment_url": link, "amount": content.amount}
    text = f"Use this link to send {content.amount} {network.native_token} to me: {link}"

    if deps.qrcode is not None:
        try:
            result["qr_code_url"] = await deps.qrcode.generate(link)
        except DownstreamServiceError as exc:
            result["qr_error"] = exc.reason
            text += f"\nThe QR code could not be generated ({exc.reason})."
        else:
            text += f"\nOr scan this QR code: {result['qr_code_url']}"

    return ActionResponse(text=text, content=result)
