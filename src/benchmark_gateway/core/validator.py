"""
Supported-model validation.
"""

import logging
from typing import Dict, FrozenSet, Iterable, Mapping

from .config import ProviderConfig

logger = logging.getLogger(__name__)


class ModelValidator:
    """
    Checks whether a provider serves a given model.

    Provider and model names are compared case-insensitively. The
    supported lists are snapshotted at construction.
    """

    def __init__(self, supported_models: Mapping[str, Iterable[str]]):
        self._supported: Dict[str, FrozenSet[str]] = {
            provider.lower(): frozenset(m.strip().lower() for m in models if m.strip())
            for provider, models in supported_models.items()
        }

    @classmethod
    def from_providers(cls, providers: Mapping[str, ProviderConfig]) -> "ModelValidator":
        return cls({name: cfg.supported_models for name, cfg in providers.items()})

    def is_supported(self, provider: str, model: str) -> bool:
        models = self._supported.get((provider or "").lower())
        if models is None:
            logger.warning(f"No supported models configured for provider: {provider}")
            return False
        return (model or "").strip().lower() in models
