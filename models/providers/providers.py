import logging
from typing import Any, TYPE_CHECKING

from .base_model_provider import BaseModelProvider
from .ollama_provider import OllamaProvider
from .open_router_provider import OpenRouterProvider

if TYPE_CHECKING:
    from config.settings import SystemConfig

logger = logging.getLogger(__name__)


class ProviderFactory:
    """Builds provider instances from the provider name in a participant config.

    Extra keyword arguments (model, sampling settings, injected HTTP clients)
    are passed straight to the provider constructor.
    """

    _registry: dict[str, type[BaseModelProvider]] = {
        "ollama": OllamaProvider,
        "openrouter": OpenRouterProvider,
    }

    @classmethod
    def create_provider(
        cls, provider_name: str, system_config: "SystemConfig", **kwargs: Any
    ) -> BaseModelProvider:
        provider_class = cls._registry.get(provider_name)
        if provider_class is None:
            raise ValueError(
                f"Unknown provider: {provider_name}. Known providers: {', '.join(sorted(cls._registry))}"
            )
        logger.debug(f"Creating {provider_name} provider for model {kwargs.get('model')}")
        return provider_class(system_config, **kwargs)

    @classmethod
    def register(cls, provider_name: str, provider_class: type[BaseModelProvider]) -> None:
        """Make an additional provider available by name."""
        cls._registry[provider_name] = provider_class

    @classmethod
    def get_available_providers(cls) -> list[str]:
        return sorted(cls._registry)
