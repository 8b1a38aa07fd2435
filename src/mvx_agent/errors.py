"""Exception hierarchy for MultiversX agent actions.

Every failure an action can hit maps to one of these types, and
:meth:`mvx_agent.actions.registry.Action.execute` turns each of them into
exactly one user-visible response.
"""

from __future__ import annotations


class MvxAgentError(Exception):
    """Base class for all errors raised by this package."""


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------


class ConfigurationError(MvxAgentError):
    """Bad credential, network or settings. Fatal at plugin build time."""


class InvalidCredential(ConfigurationError):
    """The private key material could not be parsed."""


class UnknownNetwork(ConfigurationError):
    """No network profile is registered under the requested identifier."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(f"Unknown network '{name}'. Available: {available}")


# ---------------------------------------------------------------------------
# Request-scoped
# ---------------------------------------------------------------------------


class AuthorizationError(MvxAgentError):
    """The caller is not on the allow-list for a privileged action."""

    def __init__(self, caller_id: str):
        self.caller_id = caller_id
        super().__init__(f"Caller '{caller_id}' is not authorized")


class ExtractionError(MvxAgentError):
    """The structured payload could not be extracted or failed validation."""

    def __init__(self, message: str, fields: list[str] | None = None):
        self.fields = fields or []
        super().__init__(message)


class SubmissionError(MvxAgentError):
    """The transaction was refused by the network or never left, so no funds moved."""

    def __init__(self, reason: str, status_code: int | None = None):
        self.reason = reason
        self.status_code = status_code
        super().__init__(reason)


class SubmissionUnknown(SubmissionError):
    """The submission left but no usable answer came back.

    The transaction may or may not be on chain; nothing can be assumed.
    """


class TransactionFailed(MvxAgentError):
    """The transaction was executed but ended in a failed state."""

    def __init__(self, tx_hash: str, reason: str):
        self.tx_hash = tx_hash
        self.reason = reason
        super().__init__(f"Transaction {tx_hash} failed: {reason}")


class ConfirmationTimeout(MvxAgentError):
    """Submitted, but no terminal status was seen before the deadline.

    The transaction may still land later.
    """

    def __init__(self, tx_hash: str, waited_seconds: float | None = None):
        self.tx_hash = tx_hash
        self.waited_seconds = waited_seconds
        super().__init__(f"Transaction {tx_hash} was not confirmed in time")


class DownstreamServiceError(MvxAgentError):
    """An optional post-processing service (e.g. QR code generation) failed."""

    def __init__(self, service: str, reason: str):
        self.service = service
        self.reason = reason
        super().__init__(f"{service} failed: {reason}")
