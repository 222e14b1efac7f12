"""
Cost table lookup and cost accounting.

Prices are per 1000 tokens and kept as Decimal so that totals are exact.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from .errors import PricingNotFound

logger = logging.getLogger(__name__)

_THOUSAND = Decimal(1000)


@dataclass(frozen=True)
class CostEntry:
    """Price of one model, per 1000 tokens."""
    input_per_1k_tokens: Decimal
    output_per_1k_tokens: Decimal

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CostEntry":
        return cls(
            input_per_1k_tokens=Decimal(str(data.get("input_per_1k_tokens", 0))),
            output_per_1k_tokens=Decimal(str(data.get("output_per_1k_tokens", 0))),
        )


class CostTable:
    """
    Read-only pricing lookup keyed by (provider, model).

    Keys are matched case-insensitively. The table is built once at
    startup and shared by every request.
    """

    def __init__(self, entries: Optional[Mapping[str, Mapping[str, CostEntry]]] = None):
        self._entries: Dict[str, Dict[str, CostEntry]] = {
            provider.lower(): {model.lower(): entry for model, entry in models.items()}
            for provider, models in (entries or {}).items()
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Mapping[str, Any]]]) -> "CostTable":
        """Build a table from ``provider -> model -> prices`` mappings."""
        return cls({
            provider: {model: CostEntry.from_dict(prices) for model, prices in (models or {}).items()}
            for provider, models in (data or {}).items()
        })

    def lookup(self, provider: str, model: str) -> CostEntry:
        """
        Get pricing for a model.

        Raises:
            PricingNotFound: If no entry exists for the pair
        """
        entry = self._entries.get(provider.lower(), {}).get(model.lower())
        if entry is None:
            raise PricingNotFound(
                f"Model pricing not found for {provider}/{model}",
                provider=provider,
                model=model,
            )
        return entry

    def calculate_cost(
        self,
        provider: str,
        model: str,
        prompt_tokens: int,
        completion_tokens: int,
    ) -> Decimal:
        """
        Cost of one completion.

        Returns exactly zero without consulting the table when no tokens
        were reported, since usage metadata is optional upstream.
        """
        if prompt_tokens == 0 and completion_tokens == 0:
            return Decimal(0)

        entry = self.lookup(provider, model)
        return (
            Decimal(prompt_tokens) / _THOUSAND * entry.input_per_1k_tokens
            + Decimal(completion_tokens) / _THOUSAND * entry.output_per_1k_tokens
        )

    def __len__(self) -> int:
        return sum(len(models) for models in self._entries.values())
