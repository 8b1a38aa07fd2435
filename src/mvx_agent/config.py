"""Configuration for the MultiversX agent actions.

Loads settings from ``.mvx-agent/config.yaml``. ``${VAR_NAME}`` placeholders
are expanded from the environment before validation, so secrets such as the
private key can stay out of the file.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Environment-variable expansion helper
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def _expand_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` / ``${VAR_NAME:-default}`` placeholders.

    Unset variables without a default expand to an empty string so that a
    missing secret is reported as missing rather than parsed as key
    material.
    """

    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), match.group(2) or "")

    return _ENV_VAR_RE.sub(_replace, value)


def _expand_env_recursive(obj: object) -> object:
    """Walk an arbitrary nested structure and expand env vars in strings."""
    if isinstance(obj, str):
        return _expand_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _expand_env_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_recursive(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# Pydantic v2 models
# ---------------------------------------------------------------------------


class WalletConfig(BaseModel):
    """Signing key and network. Process-wide, never request-scoped."""

    private_key: str = Field(default="", repr=False)  # ${MVX_PRIVATE_KEY}
    network: str = "devnet"                           # ${MVX_NETWORK}


class AccessConfig(BaseModel):
    """Callers allowed to run privileged actions."""

    allowed_users: list[str] = Field(default_factory=list)

    @field_validator("allowed_users", mode="before")
    @classmethod
    def _split_csv(cls, value: object) -> object:
        # "u1,u2" from an env var is as good as a YAML list
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value


class WatcherConfig(BaseModel):
    """Confirmation polling. ``None`` means use the network profile's value."""

    poll_interval_seconds: Optional[float] = None
    max_attempts: Optional[int] = None
    timeout_seconds: float = 180.0


class LLMProviderConfig(BaseModel):
    """Configuration for a single LLM provider (Anthropic, OpenAI, etc.)."""

    api_key: str = Field(default="", repr=False)
    model: str = ""
    small_model: Optional[str] = None  # used for ModelClass.SMALL when set
    base_url: Optional[str] = None     # For OpenAI-compatible endpoints
    max_tokens: int = 1024


class LLMConfig(BaseModel):
    """Language model used for intent extraction."""

    default_provider: str = "anthropic"
    anthropic: Optional[LLMProviderConfig] = None
    openai: Optional[LLMProviderConfig] = None


class QRCodeConfig(BaseModel):
    """Downstream QR code generator for shareable links."""

    enabled: bool = True
    api_url: str = "https://qrcode-api.elpulpo.xyz"
    timeout_seconds: float = 15.0


class HatomConfig(BaseModel):
    """Hatom lending protocol contracts. Empty means the lending actions are off."""

    money_market: str = ""   # EGLD money market, receives ``mint``
    controller: str = ""     # receives ``enterMarkets``
    h_egld_token: str = ""   # hToken identifier used as collateral by default
    gas_limit: int = 20_000_000


class IntegrationsConfig(BaseModel):
    qrcode: QRCodeConfig = Field(default_factory=QRCodeConfig)
    hatom: HatomConfig = Field(default_factory=HatomConfig)


class StorageConfig(BaseModel):
    """Transaction journal (SQLite)."""

    enabled: bool = True
    path: str = "journal.db"  # relative paths resolve against the config dir


class AgentConfig(BaseModel):
    """Root configuration object."""

    name: str = "MultiversX Agent"
    wallet: WalletConfig = Field(default_factory=WalletConfig)
    access: AccessConfig = Field(default_factory=AccessConfig)
    watcher: WatcherConfig = Field(default_factory=WatcherConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    integrations: IntegrationsConfig = Field(default_factory=IntegrationsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def get_config_dir(base: Path | None = None, *, create: bool = False) -> Path:
    """Return the ``.mvx-agent/`` directory under *base* (default: cwd)."""
    if base is None:
        base = Path.cwd()
    config_dir = base / ".mvx-agent"
    if create:
        config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def default_config() -> AgentConfig:
    """A starting configuration that reads its secrets from the environment."""
    return AgentConfig(
        wallet=WalletConfig(private_key="${MVX_PRIVATE_KEY}", network="${MVX_NETWORK:-devnet}"),
        access=AccessConfig(allowed_users=[]),
        llm=LLMConfig(
            default_provider="anthropic",
            anthropic=LLMProviderConfig(
                api_key="${ANTHROPIC_API_KEY}",
                model="claude-sonnet-4-5",
                small_model="claude-haiku-4-5",
            ),
        ),
    )


def load_config(path: Path) -> AgentConfig:
    """Load and validate a configuration from a YAML file.

    Environment variable placeholders (``${VAR}``) are expanded before
    validation.
    """
    raw_text = Path(path).read_text(encoding="utf-8")
    raw_data = yaml.safe_load(raw_text) or {}
    expanded = _expand_env_recursive(raw_data)
    return AgentConfig.model_validate(expanded)


def save_config(config: AgentConfig, path: Path) -> None:
    """Serialize an :class:`AgentConfig` to a YAML file.

    Meant for templates whose secrets are still ``${VAR}`` placeholders;
    writing an expanded config would put the key on disk.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="python", exclude_none=True)
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(data, fh, default_flow_style=False, sort_keys=False)


def resolve_storage_path(config: AgentConfig, config_dir: Path) -> Path:
    path = Path(config.storage.path)
    return path if path.is_absolute() else config_dir / path
