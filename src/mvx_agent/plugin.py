"""MultiversXPlugin - wires wallet, policy, extractor and watcher from config.

One plugin (and so one :class:`WalletProvider`) per process. Every action
invocation goes through :meth:`MultiversXPlugin.handle`.
"""

from __future__ import annotations

import inspect
import logging
from pathlib import Path

import httpx

from mvx_agent.access import AccessPolicy
from mvx_agent.actions import ActionDependencies, ActionRegistry, ActionRequest, ActionResponse
from mvx_agent.actions.registry import Callback
from mvx_agent.config import (
    AgentConfig,
    get_config_dir,
    load_config,
    resolve_storage_path,
)
from mvx_agent.errors import ConfigurationError
from mvx_agent.extraction import IntentExtractor, LLMIntentExtractor
from mvx_agent.llm import LLMRouter, ModelClass
from mvx_agent.services import QRCodeService
from mvx_agent.storage import Database, TransactionJournal
from mvx_agent.wallet.credential import is_valid_address
from mvx_agent.wallet.client import MultiversXApiClient
from mvx_agent.wallet.networks import resolve
from mvx_agent.wallet.provider import WalletProvider
from mvx_agent.wallet.watcher import StatusFeed, TransactionWatcher

logger = logging.getLogger("mvx_agent.plugin")


class MultiversXPlugin:
    """The set of MultiversX actions bound to one wallet."""

    name = "multiversx"
    description = "MultiversX wallet actions for chat agents"

    def __init__(
        self,
        config: AgentConfig,
        deps: ActionDependencies,
        db: Database | None = None,
    ):
        self.config = config
        self.deps = deps
        self.db = db
        self.registry = ActionRegistry.get()

    @classmethod
    async def build(
        cls,
        config: AgentConfig,
        config_dir: Path | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        extractor: IntentExtractor | None = None,
        status_feed: StatusFeed | None = None,
        qrcode: QRCodeService | None = None,
    ) -> MultiversXPlugin:
        """Create a plugin from configuration.

        Raises ``ConfigurationError`` (bad key, unknown network, missing
        model settings) before anything is left open.
        """
        config_dir = config_dir or get_config_dir()
        network = resolve(config.wallet.network)
        if not config.wallet.private_key:
            raise ConfigurationError("No private key configured. Set MVX_PRIVATE_KEY.")

        if extractor is None:
            router = LLMRouter(config.llm)
            extractor = LLMIntentExtractor(router.get_provider(ModelClass.SMALL))

        client = MultiversXApiClient(network, client=http_client)
        try:
            wallet = WalletProvider.initialize(config.wallet.private_key, network.name, client)
        except ConfigurationError:
            await client.aclose()
            raise

        if status_feed is not None:
            watcher = TransactionWatcher(status_feed, config.watcher.timeout_seconds)
        else:
            watcher = TransactionWatcher.polling(
                client,
                network,
                interval_seconds=config.watcher.poll_interval_seconds,
                max_attempts=config.watcher.max_attempts,
                timeout_seconds=config.watcher.timeout_seconds,
            )

        qr_cfg = config.integrations.qrcode
        if qrcode is None and qr_cfg.enabled:
            qrcode = QRCodeService(qr_cfg.api_url, timeout=qr_cfg.timeout_seconds)

        hatom = config.integrations.hatom
        for setting in ("money_market", "controller"):
            address = getattr(hatom, setting)
            if address and not is_valid_address(address):
                await client.aclose()
                raise ConfigurationError(
                    f"integrations.hatom.{setting} is not a valid address: {address}"
                )

        db: Database | None = None
        journal: TransactionJournal | None = None
        if config.storage.enabled:
            db = Database(resolve_storage_path(config, config_dir))
            await db.connect()
            journal = TransactionJournal(db)

        deps = ActionDependencies(
            wallet=wallet,
            policy=AccessPolicy(config.access.allowed_users),
            extractor=extractor,
            watcher=watcher,
            qrcode=qrcode,
            journal=journal,
            hatom=hatom,
        )
        if not deps.policy.allowed_users:
            logger.warning("Allow-list is empty: privileged actions are disabled")
        logger.info(f"MultiversX plugin ready on {network.display_name} as {wallet.get_address()}")
        return cls(config, deps, db)

    @classmethod
    async def load(cls, base_path: Path | None = None, **overrides) -> MultiversXPlugin:
        """Load ``.mvx-agent/config.yaml`` under *base_path* and build."""
        config_dir = get_config_dir(base_path)
        config_path = config_dir / "config.yaml"
        if not config_path.exists():
            raise FileNotFoundError(
                f"No configuration found at {config_path}. Run 'mvx-agent init' first."
            )
        return await cls.build(load_config(config_path), config_dir, **overrides)

    @property
    def wallet(self) -> WalletProvider:
        return self.deps.wallet

    @property
    def journal(self) -> TransactionJournal | None:
        return self.deps.journal

    def action_names(self) -> list[str]:
        return self.registry.list_names()

    async def handle(
        self,
        action_name: str,
        request: ActionRequest,
        callback: Callback | None = None,
    ) -> ActionResponse:
        """Dispatch *request* to the action registered as *action_name* (or a simile)."""
        action = self.registry.get_action(action_name)
        if action is None:
            response = ActionResponse.failure(
                f"Unknown action '{action_name}'. Available: {', '.join(self.action_names())}",
                "Unknown action",
            )
            if callback is not None:
                result = callback(response)
                if inspect.isawaitable(result):
                    await result
            return response
        return await action.execute(self.deps, request, callback)

    async def aclose(self) -> None:
        await self.deps.wallet.aclose()
        if self.db is not None:
            await self.db.close()

    async def __aenter__(self) -> MultiversXPlugin:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
