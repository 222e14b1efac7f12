"""
Provider registry for resolving provider clients by name.
"""

import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

import httpx

from .client import ProviderClient
from .config import GatewayConfig
from .errors import UnsupportedProvider
from .validator import ModelValidator
from ..adapters import PROVIDER_DIALECTS
from ..models.response import ProviderDescription

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Registry of provider clients.

    Built once at startup from configuration and read-only afterwards;
    there is no runtime registration.
    """

    def __init__(self, clients: Mapping[str, ProviderClient]):
        """
        Initialize the registry.

        Args:
            clients: Provider clients keyed by provider name
        """
        self._clients = MappingProxyType({name.lower(): client for name, client in clients.items()})

    @classmethod
    def from_config(
        cls,
        config: GatewayConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "ProviderRegistry":
        """
        Create clients for every configured provider in the static provider set.

        Args:
            config: Gateway configuration
            http_client: Shared HTTP client passed to every provider client

        Returns:
            Populated registry
        """
        validator = ModelValidator.from_providers(config.providers)
        clients: Dict[str, ProviderClient] = {}

        for name, provider_config in config.providers.items():
            dialect_class = PROVIDER_DIALECTS.get(name.lower())
            if dialect_class is None:
                logger.warning(f"Ignoring unknown provider in config: {name}")
                continue

            clients[name] = ProviderClient(
                config=provider_config,
                dialect=dialect_class(name.lower()),
                validator=validator,
                pricing=config.pricing,
                http_client=http_client,
            )
            logger.info(f"Registered provider: {name} (dialect: {dialect_class.__name__})")

        return cls(clients)

    def resolve(self, name: str) -> ProviderClient:
        """
        Get a provider client by name, case-insensitively.

        Args:
            name: Provider name

        Returns:
            Provider client

        Raises:
            UnsupportedProvider: If no provider matches
        """
        client = self._clients.get((name or "").lower())
        if client is None:
            raise UnsupportedProvider(f"Provider '{name}' is not supported.", provider=name)
        return client

    def providers(self) -> List[str]:
        return list(self._clients)

    def describe(self) -> List[ProviderDescription]:
        """Public description of every registered provider."""
        return [
            ProviderDescription(
                name=client.name,
                display_name=client.display_name,
                streaming=client.supports_streaming,
                capabilities=sorted(c.value for c in client.dialect.capabilities),
                models=list(client.config.supported_models),
            )
            for client in self._clients.values()
        ]

    async def disconnect_all(self) -> None:
        """Close HTTP clients owned by individual providers."""
        for client in self._clients.values():
            try:
                await client.disconnect()
            except Exception as e:
                logger.error(f"Failed to disconnect provider {client.name}: {e}")

    def __contains__(self, name: str) -> bool:
        return (name or "").lower() in self._clients

    def __len__(self) -> int:
        return len(self._clients)
