"""Exceptions raised by model providers."""


class ProviderError(RuntimeError):
    """Base class for provider failures."""

    def __init__(self, provider: str, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class ProviderRateLimitError(ProviderError):
    """The provider rejected the request with a rate limit (HTTP 429)."""


class ProviderOverloadedError(ProviderError):
    """The provider is temporarily overloaded or unavailable."""


class ProviderVerificationError(ProviderError):
    """The provider requires organization verification before it will stream."""
