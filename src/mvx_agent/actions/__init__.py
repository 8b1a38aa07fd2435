"""MultiversX chat actions - importing this package registers them all."""

from mvx_agent.actions import birthday_warp, check_transaction, check_wallet  # noqa: F401
from mvx_agent.actions import create_token, get_address, hatom, receive_egld, transfer  # noqa: F401
from mvx_agent.actions.registry import (  # noqa: F401
    Action,
    ActionDependencies,
    ActionRegistry,
    ActionRequest,
    ActionResponse,
    action,
)
