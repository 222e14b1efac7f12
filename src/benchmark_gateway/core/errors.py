"""
Gateway error types.

Every failure raised by translators, parsers, the relay and provider
clients derives from GatewayError and propagates unmodified to the
service boundary, which maps it to a transport status.
"""

from typing import Optional


class GatewayError(Exception):
    """Base exception for gateway errors."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.message = message
        self.provider = provider
        super().__init__(message)


class ModelNotSupported(GatewayError):
    """Raised when a model is not in the provider's supported list."""

    def __init__(self, message: str, provider: Optional[str] = None, model: Optional[str] = None):
        super().__init__(message, provider)
        self.model = model


class UnsupportedProvider(GatewayError):
    """Raised when a provider name does not match any registered provider."""
    pass


class UpstreamRequestFailed(GatewayError):
    """Raised when the provider answers with a non-2xx status or cannot be reached."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message, provider)
        self.status_code = status_code
        self.body = body


class UpstreamCancelled(GatewayError):
    """Raised when the caller went away before the upstream call finished."""
    pass


class MalformedUpstreamResponse(GatewayError):
    """Raised when a provider response carries no usable completion."""
    pass


class ProviderConfigurationError(GatewayError):
    """Raised when static provider configuration is incomplete."""
    pass


class PricingNotFound(ProviderConfigurationError):
    """Raised when no cost entry exists for a provider/model pair."""

    def __init__(self, message: str, provider: Optional[str] = None, model: Optional[str] = None):
        super().__init__(message, provider)
        self.model = model


class MissingApiKey(ProviderConfigurationError):
    """Raised when a provider has no API key configured."""
    pass
