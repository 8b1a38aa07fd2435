"""Action registry: register and look up chat-invocable actions.

Handlers get their collaborators through :class:`ActionDependencies`
rather than module-level state, and :meth:`Action.execute` guarantees one
response per invocation whatever happens inside the handler.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from pydantic import BaseModel

from mvx_agent.access import AccessPolicy
from mvx_agent.config import HatomConfig
from mvx_agent.errors import (
    AuthorizationError,
    ConfigurationError,
    ConfirmationTimeout,
    DownstreamServiceError,
    ExtractionError,
    MvxAgentError,
    SubmissionError,
    SubmissionUnknown,
    TransactionFailed,
)
from mvx_agent.extraction.extractor import ChatMessage, IntentExtractor, PayloadT, compose_context
from mvx_agent.services.qrcode import QRCodeService
from mvx_agent.storage.journal import TransactionJournal
from mvx_agent.wallet.provider import WalletProvider
from mvx_agent.wallet.transaction import TransactionRequest
from mvx_agent.wallet.watcher import TransactionOutcome, TransactionWatcher

logger = logging.getLogger("mvx_agent.actions")


@dataclass
class ActionRequest:
    """One invocation as handed over by the hosting runtime."""

    caller_id: str
    text: str = ""
    recent_messages: list[ChatMessage] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)

    def conversation(self) -> list[ChatMessage]:
        """Recent messages, falling back to the triggering message alone."""
        if self.recent_messages:
            return list(self.recent_messages)
        return [ChatMessage(user=self.caller_id, text=self.text)] if self.text else []


class ActionResponse(BaseModel):
    """``{text, content?: {error?}}`` as expected by the hosting runtime."""

    text: str
    content: dict[str, Any] | None = None

    @classmethod
    def failure(cls, text: str, error: str, **extra: Any) -> ActionResponse:
        return cls(text=text, content={"error": error, **extra})

    @property
    def is_error(self) -> bool:
        return bool(self.content and self.content.get("error"))

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


@dataclass
class ActionDependencies:
    """Everything a handler may touch. Built once per process by the plugin."""

    wallet: WalletProvider
    policy: AccessPolicy
    extractor: IntentExtractor
    watcher: TransactionWatcher
    qrcode: QRCodeService | None = None
    journal: TransactionJournal | None = None
    hatom: HatomConfig | None = None

    async def extract(
        self, request: ActionRequest, template: str, schema: type[PayloadT]
    ) -> PayloadT:
        """Compose *template* with the conversation and extract a *schema* payload."""
        context = compose_context(template, request.conversation())
        return await self.extractor.extract(context, schema)

    async def submit_and_confirm(
        self,
        tx: TransactionRequest,
        *,
        action: str,
        caller_id: str,
    ) -> TransactionOutcome:
        """Send *tx* once and wait for its terminal outcome."""
        receipt = await self.wallet.send(tx)
        if self.journal is not None:
            try:
                await self.journal.record_submission(
                    receipt,
                    tx,
                    action=action,
                    caller_id=caller_id,
                    network=self.wallet.network.name,
                    sender=self.wallet.get_address(),
                )
            except Exception:
                logger.exception(f"Could not journal submission {receipt.tx_hash}")

        outcome = await self.watcher.await_terminal(receipt)

        if self.journal is not None:
            try:
                await self.journal.record_outcome(outcome)
            except Exception:
                logger.exception(f"Could not journal outcome of {receipt.tx_hash}")
        return outcome


Handler = Callable[[ActionDependencies, ActionRequest], Awaitable[ActionResponse]]
Callback = Callable[[ActionResponse], Any]


@dataclass
class Action:
    name: str
    description: str
    purpose: str  # completes "You do not have permission to ..."
    func: Handler
    similes: list[str] = field(default_factory=list)
    privileged: bool = False
    examples: list[tuple[str, str]] = field(default_factory=list)

    async def execute(
        self,
        deps: ActionDependencies,
        request: ActionRequest,
        callback: Callback | None = None,
    ) -> ActionResponse:
        """Run the handler and deliver exactly one response.

        Privileged actions check the allow-list before anything else, so a
        denied caller costs no model call and no network call.
        """
        logger.info(f"Starting {self.name} for caller {request.caller_id!r}")
        try:
            if self.privileged:
                deps.policy.require(request.caller_id)
            response = await self.func(deps, request)
        except MvxAgentError as exc:
            response = self._describe_error(exc, deps)
        except Exception as exc:
            logger.exception(f"{self.name} crashed")
            response = ActionResponse.failure(
                f"Could not {self.purpose}. Error: {exc}", str(exc)
            )

        if response.is_error:
            logger.error(f"{self.name} finished with error: {response.content['error']}")
        if callback is not None:
            result = callback(response)
            if inspect.isawaitable(result):
                await result
        return response

    def _describe_error(self, exc: MvxAgentError, deps: ActionDependencies) -> ActionResponse:
        if isinstance(exc, AuthorizationError):
            return ActionResponse.failure(
                f"You do not have permission to {self.purpose}.", "Unauthorized user"
            )
        if isinstance(exc, ExtractionError):
            return ActionResponse.failure(
                f"Unable to process the request to {self.purpose}: {exc}. "
                "Please try again and include the missing details.",
                "Invalid content",
                fields=exc.fields,
            )
        if isinstance(exc, SubmissionUnknown):
            history = deps.wallet.network.explorer_account_url(deps.wallet.get_address())
            return ActionResponse.failure(
                f"The transaction was sent but the network's answer was lost: {exc.reason}. "
                f"It may have gone through. Check the wallet history at {history} "
                "before trying again.",
                "Submission outcome unknown",
            )
        if isinstance(exc, SubmissionError):
            return ActionResponse.failure(
                f"The network rejected the transaction: {exc.reason}. No funds were moved.",
                exc.reason,
            )
        if isinstance(exc, TransactionFailed):
            return ActionResponse.failure(
                f"Transaction {exc.tx_hash} failed: {exc.reason}.",
                exc.reason,
                tx_hash=exc.tx_hash,
            )
        if isinstance(exc, ConfirmationTimeout):
            waited = f" within {exc.waited_seconds:.0f} seconds" if exc.waited_seconds else ""
            return ActionResponse.failure(
                f"Transaction {exc.tx_hash} was submitted but not confirmed{waited}. "
                "It may still go through; check its status later at "
                f"{deps.wallet.network.explorer_tx_url(exc.tx_hash)}",
                "Confirmation timeout",
                tx_hash=exc.tx_hash,
            )
        if isinstance(exc, (DownstreamServiceError, ConfigurationError)):
            return ActionResponse.failure(f"Could not {self.purpose}: {exc}", str(exc))
        return ActionResponse.failure(f"Could not {self.purpose}. Error: {exc}", str(exc))


class ActionRegistry:
    """Global registry of available actions."""

    _instance: ActionRegistry | None = None
    _actions: dict[str, Action]

    def __init__(self):
        self._actions = {}

    @classmethod
    def get(cls) -> ActionRegistry:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register(self, action: Action) -> None:
        self._actions[action.name] = action

    def get_action(self, name: str) -> Action | None:
        """Find an action by name or simile, case-insensitively."""
        key = name.strip().upper()
        if key in self._actions:
            return self._actions[key]
        for action in self._actions.values():
            if key in action.similes:
                return action
        return None

    def get_actions(self) -> list[Action]:
        return list(self._actions.values())

    def list_names(self) -> list[str]:
        return list(self._actions.keys())


def action(
    name: str,
    description: str,
    *,
    purpose: str,
    similes: list[str] | None = None,
    privileged: bool = False,
    examples: list[tuple[str, str]] | None = None,
):
    """Decorator to register a coroutine as an action handler.

    Usage:
        @action("GET_ADDRESS", "Return the agent's wallet address",
                purpose="retrieve the wallet address")
        async def get_address(deps, request) -> ActionResponse:
            ...
    """

    def decorator(func: Handler) -> Handler:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"Action handler {func.__name__} must be async")
        ActionRegistry.get().register(
            Action(
                name=name,
                description=description,
                purpose=purpose,
                func=func,
                similes=[s.upper() for s in similes or []],
                privileged=privileged,
                examples=list(examples or []),
            )
        )
        return func

    return decorator
