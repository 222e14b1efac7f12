"""
Core provider abstraction components.
"""

from .interface import ProviderDialect, ProviderCapability
from .config import GatewayConfig, ProviderConfig, load_config, parse_config
from .pricing import CostEntry, CostTable
from .validator import ModelValidator
from .relay import RelayState, StreamRelay
from .client import ProviderClient
from .registry import ProviderRegistry
from .compare import CompareStream, compare, open_compare_stream
from .timing import format_elapsed
from .errors import (
    GatewayError,
    MalformedUpstreamResponse,
    MissingApiKey,
    ModelNotSupported,
    PricingNotFound,
    ProviderConfigurationError,
    UnsupportedProvider,
    UpstreamCancelled,
    UpstreamRequestFailed,
)

__all__ = [
    "ProviderDialect",
    "ProviderCapability",
    "GatewayConfig",
    "ProviderConfig",
    "load_config",
    "parse_config",
    "CostEntry",
    "CostTable",
    "ModelValidator",
    "RelayState",
    "StreamRelay",
    "ProviderClient",
    "ProviderRegistry",
    "CompareStream",
    "compare",
    "open_compare_stream",
    "format_elapsed",
    "GatewayError",
    "MalformedUpstreamResponse",
    "MissingApiKey",
    "ModelNotSupported",
    "PricingNotFound",
    "ProviderConfigurationError",
    "UnsupportedProvider",
    "UpstreamCancelled",
    "UpstreamRequestFailed",
]
