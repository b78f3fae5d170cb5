"""Model manager: binds each debate participant to a provider instance."""

from __future__ import annotations

import logging
from typing import Any

from config.settings import ParticipantConfig, SystemConfig

from .providers.base_model_provider import BaseModelProvider
from .providers.providers import ProviderFactory

logger = logging.getLogger(__name__)


class ModelManager:
    """Adapter registry consulted by the orchestrator for every turn.

    Each participant gets its own provider instance so that its role brief
    (system instruction) is never shared with an opponent.
    """

    def __init__(self, system_config: SystemConfig):
        self._system_config = system_config
        self._providers: dict[str, BaseModelProvider] = {}

    def register_participant(self, config: ParticipantConfig, **provider_kwargs: Any) -> BaseModelProvider:
        """Create and register the provider for a configured participant."""
        try:
            provider = ProviderFactory.create_provider(
                config.provider,
                self._system_config,
                model=config.model,
                max_tokens=config.max_tokens,
                temperature=config.temperature,
                **provider_kwargs,
            )
        except ValueError as exc:
            logger.error(f"Failed to register participant {config.id}: {exc}")
            raise

        self.register_provider(config.id, provider)
        logger.info(f"Registered participant {config.id}: {config.model} ({config.provider})")
        return provider

    def register_provider(self, participant_id: str, provider: BaseModelProvider) -> None:
        """Register an already-built provider for a participant."""
        self._providers[participant_id] = provider

    def get_provider(self, participant_id: str) -> BaseModelProvider:
        if participant_id not in self._providers:
            raise KeyError(f"No provider registered for participant {participant_id}")
        return self._providers[participant_id]

    def has_provider(self, participant_id: str) -> bool:
        return participant_id in self._providers

    @property
    def participant_ids(self) -> list[str]:
        return list(self._providers)
