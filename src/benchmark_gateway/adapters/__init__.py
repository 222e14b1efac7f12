"""
Provider dialects and the static provider set.
"""

from typing import Dict, Type

from ..core.interface import ProviderDialect
from .openai_adapter import OpenAIDialect
from .anthropic_adapter import AnthropicDialect
from .gemini_adapter import GeminiDialect

# Every provider the gateway knows about, mapped to its wire dialect.
PROVIDER_DIALECTS: Dict[str, Type[ProviderDialect]] = {
    "openai": OpenAIDialect,
    "deepseek": OpenAIDialect,
    "qwenai": OpenAIDialect,
    "mistralai": OpenAIDialect,
    "xai": OpenAIDialect,
    "perplexity": OpenAIDialect,
    "anthropic": AnthropicDialect,
    "google": GeminiDialect,
}

__all__ = [
    "PROVIDER_DIALECTS",
    "OpenAIDialect",
    "AnthropicDialect",
    "GeminiDialect",
]
