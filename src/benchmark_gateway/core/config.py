"""
Configuration loading for the provider gateway.
"""

import os
import logging
from typing import Dict, Any, Optional, Tuple
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .pricing import CostTable

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GATEWAY_CONFIG"

# Used only when a provider creates its own HTTP client
DEFAULT_TIMEOUT = 60.0

AUTH_BEARER = "bearer"
AUTH_API_KEY_HEADER = "x-api-key"
AUTH_QUERY = "query"
AUTH_SCHEMES = (AUTH_BEARER, AUTH_API_KEY_HEADER, AUTH_QUERY)


@dataclass(frozen=True)
class ProviderConfig:
    """Static capability record for one provider."""
    name: str
    base_url: str
    endpoints: Dict[str, str] = field(default_factory=dict)
    display_name: str = ""
    auth_scheme: str = AUTH_BEARER
    api_key: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    pricing_key: str = ""
    supported_models: Tuple[str, ...] = ()
    timeout: Optional[float] = None

    def endpoint(self, purpose: str, model: str) -> str:
        """
        Full URL for an endpoint purpose ("chat", "stream").

        Falls back to the chat endpoint when no dedicated path exists for
        the purpose. Paths may contain a ``{model}`` placeholder.
        """
        path = self.endpoints.get(purpose) or self.endpoints.get("chat", "")
        return f"{self.base_url.rstrip('/')}{path.replace('{model}', model)}"


@dataclass(frozen=True)
class GatewayConfig:
    """Complete gateway configuration."""
    providers: Dict[str, ProviderConfig] = field(default_factory=dict)
    pricing: CostTable = field(default_factory=CostTable)


def load_config(config_path: Optional[str] = None) -> GatewayConfig:
    """
    Load gateway configuration from a YAML file.

    Args:
        config_path: Path to config file. If None, uses GATEWAY_CONFIG or
            the default locations.

    Returns:
        Loaded configuration
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR)

    if config_path is None:
        paths = [
            Path("config/gateway.yaml"),
            Path("/etc/benchmark-gateway/gateway.yaml"),
            Path.home() / ".config/benchmark-gateway/gateway.yaml",
        ]
        for p in paths:
            if p.exists():
                config_path = str(p)
                break

    if config_path is None or not Path(config_path).exists():
        logger.warning("No gateway config file found, using defaults")
        return _default_config()

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    config = parse_config(data)
    logger.info(f"Loaded {len(config.providers)} providers from {config_path}")
    return config


def parse_config(data: Dict[str, Any]) -> GatewayConfig:
    """Parse a configuration dictionary."""
    providers = {}

    for name, provider_data in (data.get("providers") or {}).items():
        key = name.lower()
        providers[key] = _parse_provider(key, provider_data or {})

    return GatewayConfig(
        providers=providers,
        pricing=CostTable.from_dict(data.get("pricing") or {}),
    )


def _parse_provider(name: str, data: Dict[str, Any]) -> ProviderConfig:
    auth_scheme = str(data.get("auth_scheme", AUTH_BEARER)).lower()
    if auth_scheme not in AUTH_SCHEMES:
        raise ValueError(f"Unknown auth scheme for {name}: {auth_scheme}")

    models = data.get("supported_models") or []
    if isinstance(models, str):
        models = models.split(",")

    return ProviderConfig(
        name=name,
        display_name=data.get("display_name", name),
        base_url=_expand_env(data.get("base_url", "")),
        endpoints={k: str(v) for k, v in (data.get("endpoints") or {}).items()},
        auth_scheme=auth_scheme,
        api_key=_expand_env(data.get("api_key")) or None,
        headers={k: str(_expand_env(v)) for k, v in (data.get("headers") or {}).items()},
        pricing_key=data.get("pricing_key", name),
        supported_models=tuple(m.strip() for m in models if m and m.strip()),
        timeout=float(data["timeout"]) if data.get("timeout") is not None else None,
    )


def _expand_env(value: Any) -> Any:
    """Expand ``${ENV_VAR}`` values from the environment."""
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        return os.environ.get(value[2:-1], "")
    return value


def _openai_style(name: str, display_name: str, base_url: str, path: str, models: Tuple[str, ...]) -> ProviderConfig:
    return ProviderConfig(
        name=name,
        display_name=display_name,
        base_url=base_url,
        endpoints={"chat": path},
        api_key=os.environ.get(f"{name.upper()}_API_KEY") or None,
        pricing_key=name,
        supported_models=models,
    )


def _default_config() -> GatewayConfig:
    """Return default configuration."""
    providers = [
        _openai_style("openai", "OpenAI", "https://api.openai.com", "/v1/chat/completions",
                      ("gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "gpt-3.5-turbo")),
        _openai_style("deepseek", "DeepSeek", "https://api.deepseek.com", "/chat/completions",
                      ("deepseek-chat", "deepseek-reasoner")),
        _openai_style("qwenai", "QwenAI", "https://dashscope-intl.aliyuncs.com/compatible-mode",
                      "/v1/chat/completions", ("qwen-plus", "qwen-turbo", "qwen-max")),
        _openai_style("mistralai", "MistralAI", "https://api.mistral.ai", "/v1/chat/completions",
                      ("mistral-large-latest", "mistral-small-latest")),
        _openai_style("xai", "xAI", "https://api.x.ai", "/v1/chat/completions",
                      ("grok-2-latest", "grok-3")),
        _openai_style("perplexity", "Perplexity", "https://api.perplexity.ai", "/chat/completions",
                      ("sonar", "sonar-pro")),
        ProviderConfig(
            name="anthropic",
            display_name="Anthropic",
            base_url="https://api.anthropic.com",
            endpoints={"chat": "/v1/messages"},
            auth_scheme=AUTH_API_KEY_HEADER,
            api_key=os.environ.get("ANTHROPIC_API_KEY") or None,
            headers={"anthropic-version": "2023-06-01"},
            pricing_key="anthropic",
            supported_models=("claude-3-5-sonnet-latest", "claude-3-5-haiku-latest", "claude-3-opus-latest"),
        ),
        ProviderConfig(
            name="google",
            display_name="Google",
            base_url="https://generativelanguage.googleapis.com",
            endpoints={
                "chat": "/v1beta/models/{model}:generateContent",
                "stream": "/v1beta/models/{model}:streamGenerateContent?alt=sse",
            },
            auth_scheme=AUTH_QUERY,
            api_key=os.environ.get("GOOGLE_API_KEY") or None,
            pricing_key="google",
            supported_models=("gemini-1.5-pro", "gemini-1.5-flash", "gemini-2.0-flash"),
        ),
    ]
    return GatewayConfig(providers={p.name: p for p in providers})
