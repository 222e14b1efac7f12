"""
Configuration for the gateway HTTP service.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServiceConfig:
    """Application configuration."""

    # Provider and pricing YAML; default locations are searched when unset
    gateway_config_path: Optional[str] = os.getenv("GATEWAY_CONFIG")

    # Shared upstream HTTP client
    http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "60"))
    max_connections: int = int(os.getenv("HTTP_MAX_CONNECTIONS", "100"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # OpenTelemetry; tracing export is disabled when unset
    otel_endpoint: Optional[str] = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    service_name: str = os.getenv("OTEL_SERVICE_NAME", "benchmark-gateway")

    # Seconds between client-disconnect checks during whole-response calls
    disconnect_poll_seconds: float = float(os.getenv("DISCONNECT_POLL_SECONDS", "0.5"))

    # Server
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8080"))


config = ServiceConfig()
