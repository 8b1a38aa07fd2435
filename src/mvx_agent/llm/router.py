"""Maps a model class to a configured provider instance."""

from __future__ import annotations

import importlib
import logging

from mvx_agent.config import LLMConfig, LLMProviderConfig
from mvx_agent.errors import ConfigurationError
from mvx_agent.llm.base import BaseLLMProvider, ModelClass

logger = logging.getLogger(__name__)

# Imports are deferred so an unused SDK never has to be installed.
_PROVIDER_FACTORIES: dict[str, str] = {
    "anthropic": "mvx_agent.llm.anthropic.AnthropicProvider",
    "openai": "mvx_agent.llm.openai.OpenAIProvider",
}


def _import_provider_class(dotted_path: str) -> type[BaseLLMProvider]:
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    if not (isinstance(cls, type) and issubclass(cls, BaseLLMProvider)):
        raise TypeError(f"Expected a BaseLLMProvider subclass at '{dotted_path}', got {cls!r}")
    return cls


class LLMRouter:
    """Creates providers lazily and caches one per (provider, model class).

    Parameters
    ----------
    llm_config:
        The ``llm`` section of the agent configuration.
    """

    def __init__(self, llm_config: LLMConfig):
        self._config = llm_config
        self._providers: dict[str, BaseLLMProvider] = {}

    def _provider_config(self, name: str) -> LLMProviderConfig:
        if name not in _PROVIDER_FACTORIES:
            raise ConfigurationError(
                f"Unknown provider '{name}'. Supported providers: {sorted(_PROVIDER_FACTORIES)}"
            )
        block = getattr(self._config, name, None)
        if block is None:
            raise ConfigurationError(
                f"Provider '{name}' is not configured. Add an 'llm.{name}' section."
            )
        if not block.api_key:
            raise ConfigurationError(
                f"API key for provider '{name}' is empty. Set it in the config file "
                f"or via an environment variable placeholder."
            )
        return block

    def get_provider(
        self,
        model_class: ModelClass = ModelClass.SMALL,
        provider_name: str | None = None,
    ) -> BaseLLMProvider:
        """Return the provider for *model_class*, creating it on first use.

        Raises
        ------
        ConfigurationError
            If the provider is unknown, unconfigured or has no model.
        """
        name = provider_name or self._config.default_provider
        cache_key = f"{name}:{model_class.value}"
        if cache_key in self._providers:
            return self._providers[cache_key]

        block = self._provider_config(name)
        model = block.model
        if model_class is ModelClass.SMALL and block.small_model:
            model = block.small_model
        if not model:
            raise ConfigurationError(f"No model specified for provider '{name}'.")

        provider_cls = _import_provider_class(_PROVIDER_FACTORIES[name])
        provider = provider_cls(
            api_key=block.api_key,
            model=model,
            base_url=block.base_url,
            max_tokens=block.max_tokens,
        )
        self._providers[cache_key] = provider
        logger.info(
            "Created %s provider for %s extraction (model=%s)",
            name,
            model_class.value,
            model,
        )
        return provider
