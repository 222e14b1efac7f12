"""
Benchmark Gateway

A provider abstraction layer for chat completions:
- One request/response contract across heterogeneous providers
- Per-provider request translation and response parsing
- Streaming relay re-encoding provider streams as one event format
- Token and cost accounting from a static pricing table
"""

from .core.interface import ProviderDialect, ProviderCapability
from .core.registry import ProviderRegistry
from .core.client import ProviderClient
from .core.config import GatewayConfig, ProviderConfig, load_config
from .models.request import CanonicalRequest, CompareRequest, Message, RequestSettings
from .models.response import CanonicalResult, CompareResult, StreamEvent

__all__ = [
    "ProviderDialect",
    "ProviderCapability",
    "ProviderRegistry",
    "ProviderClient",
    "GatewayConfig",
    "ProviderConfig",
    "load_config",
    "CanonicalRequest",
    "CompareRequest",
    "Message",
    "RequestSettings",
    "CanonicalResult",
    "CompareResult",
    "StreamEvent",
]
