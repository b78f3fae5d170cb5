"""Model providers package."""

from .providers import ProviderFactory
from .ollama_provider import OllamaProvider
from .open_router_provider import OpenRouterProvider
from .base_model_provider import BaseModelProvider, ProviderCapabilities, ProviderResponse
from .exceptions import (
    ProviderError,
    ProviderOverloadedError,
    ProviderRateLimitError,
    ProviderVerificationError,
)

__all__ = [
    "ProviderFactory",
    "OllamaProvider",
    "OpenRouterProvider",
    "BaseModelProvider",
    "ProviderCapabilities",
    "ProviderResponse",
    "ProviderError",
    "ProviderOverloadedError",
    "ProviderRateLimitError",
    "ProviderVerificationError",
]
