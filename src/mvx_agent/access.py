"""Caller allow-list for privileged actions."""

from __future__ import annotations

import logging
from typing import Iterable

from mvx_agent.errors import AuthorizationError

logger = logging.getLogger("mvx_agent.access")


class AccessPolicy:
    """Decides whether a caller may run an action that moves funds or
    creates on-chain artifacts.

    The allow-list is frozen at construction. An empty list authorizes
    nobody.
    """

    def __init__(self, allowed_users: Iterable[str] = ()) -> None:
        self._allowed = frozenset(u.strip() for u in allowed_users if u and u.strip())

    @property
    def allowed_users(self) -> frozenset[str]:
        return self._allowed

    def is_authorized(self, caller_id: str | None) -> bool:
        if not caller_id:
            return False
        return caller_id.strip() in self._allowed

    def require(self, caller_id: str | None) -> None:
        """Raise :class:`AuthorizationError` unless *caller_id* is allowed."""
        if not self.is_authorized(caller_id):
            logger.warning(f"Denied privileged action for caller {caller_id!r}")
            raise AuthorizationError(caller_id or "")
