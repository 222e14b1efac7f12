"""
Provider client.

Composes a provider's static configuration with its wire dialect, the
model validator and the cost table, and performs the HTTP exchange.
"""

import logging
import time
from typing import List, Optional

import httpx
from opentelemetry import trace

from .config import ProviderConfig, AUTH_BEARER, AUTH_API_KEY_HEADER, DEFAULT_TIMEOUT
from .errors import (
    MalformedUpstreamResponse,
    MissingApiKey,
    ModelNotSupported,
    UpstreamRequestFailed,
)
from .interface import ProviderDialect, ProviderCapability
from .pricing import CostTable
from .relay import StreamRelay
from .timing import format_elapsed
from .validator import ModelValidator
from ..models.request import CanonicalRequest, Message, RequestSettings
from ..models.response import CanonicalResult

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class ProviderClient:
    """
    Client for one provider.

    Sends canonical requests through the provider's dialect and returns
    canonical results (sync) or a stream relay (streaming).
    """

    def __init__(
        self,
        config: ProviderConfig,
        dialect: ProviderDialect,
        validator: ModelValidator,
        pricing: CostTable,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the provider client.

        Args:
            config: Static capability record of the provider
            dialect: Wire format of the provider
            validator: Supported-model validator shared by all providers
            pricing: Cost table shared by all providers
            http_client: Shared HTTP client; one is created on connect if omitted
        """
        self._config = config
        self._dialect = dialect
        self._validator = validator
        self._pricing = pricing
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def display_name(self) -> str:
        return self._config.display_name or self._config.name

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def dialect(self) -> ProviderDialect:
        return self._dialect

    @property
    def supports_streaming(self) -> bool:
        return self._dialect.supports(ProviderCapability.STREAMING)

    async def connect(self) -> None:
        """Create an HTTP client if none was injected."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(timeout=self._config.timeout or DEFAULT_TIMEOUT)
        self._owns_client = True
        logger.info(f"Created HTTP client for {self.display_name}")

    async def disconnect(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def ensure_supported(self, model: str) -> None:
        """
        Raises:
            ModelNotSupported: If the model is not served by this provider
        """
        if not self._validator.is_supported(self.name, model):
            raise ModelNotSupported(f"Unsupported model: {model}", provider=self.name, model=model)

    async def call_sync(
        self,
        model: str,
        messages: List[Message],
        settings: RequestSettings,
    ) -> CanonicalResult:
        """
        Request a whole completion.

        Args:
            model: Provider model name
            messages: Conversation, most recent last
            settings: Generation settings

        Returns:
            Completion text with token usage, cost and elapsed time
        """
        with tracer.start_as_current_span("provider.call") as span:
            span.set_attribute("provider", self.name)
            span.set_attribute("model", model)

            request = await self._prepare(model, messages, settings, stream=False)

            started = time.perf_counter()
            response = await self._send(request, stream=False)
            elapsed = time.perf_counter() - started

            self._check_response(response)

            try:
                data = response.json()
            except ValueError:
                raise MalformedUpstreamResponse(
                    f"{self.display_name} returned a non-JSON body",
                    provider=self.name,
                )

            parsed = self._dialect.parse_response(data)
            cost = self._pricing.calculate_cost(
                self._config.pricing_key or self.name,
                model,
                parsed.prompt_tokens,
                parsed.completion_tokens,
            )

            total_tokens = parsed.prompt_tokens + parsed.completion_tokens
            span.set_attribute("total_tokens", total_tokens)
            span.set_attribute("cost_usd", float(cost))

            return CanonicalResult(
                message=parsed.text,
                prompt_tokens=parsed.prompt_tokens,
                completion_tokens=parsed.completion_tokens,
                total_tokens=total_tokens,
                cost=cost,
                elapsed_ms=round(elapsed * 1000, 3),
                time_taken=format_elapsed(elapsed),
                provider=self.name,
                model=model,
            )

    async def open_stream(
        self,
        model: str,
        messages: List[Message],
        settings: RequestSettings,
    ) -> StreamRelay:
        """
        Open a streaming completion.

        Failures before the upstream body starts (unsupported model,
        connection error, non-2xx status) are raised. Everything after is
        reported in-band by the returned relay.

        Args:
            model: Provider model name
            messages: Conversation, most recent last
            settings: Generation settings

        Returns:
            Relay owning the open upstream response
        """
        with tracer.start_as_current_span("provider.stream") as span:
            span.set_attribute("provider", self.name)
            span.set_attribute("model", model)

            request = await self._prepare(model, messages, settings, stream=True)
            response = await self._send(request, stream=True)

            if not response.is_success:
                try:
                    await response.aread()
                finally:
                    await response.aclose()
                self._check_response(response)

            return StreamRelay(self._dialect, response)

    async def _prepare(
        self,
        model: str,
        messages: List[Message],
        settings: RequestSettings,
        stream: bool,
    ) -> httpx.Request:
        self.ensure_supported(model)

        api_key = self._config.api_key
        if not api_key:
            raise MissingApiKey(f"{self.display_name} API key is missing", provider=self.name)

        if self._client is None:
            await self.connect()

        request = CanonicalRequest(
            provider=self.name,
            model=model,
            messages=messages,
            settings=settings.model_copy(update={"stream": stream}),
        )
        body = self._dialect.build_request(request)

        purpose = self._dialect.stream_purpose if stream else "chat"
        url = self._config.endpoint(purpose, model)

        headers = {"Content-Type": "application/json"}
        params = {}
        if self._config.auth_scheme == AUTH_BEARER:
            headers["Authorization"] = f"Bearer {api_key}"
        elif self._config.auth_scheme == AUTH_API_KEY_HEADER:
            headers["x-api-key"] = api_key
        else:
            params["key"] = api_key

        for key, value in self._config.headers.items():
            headers.setdefault(key, value)

        # Without a per-provider timeout the shared client's default applies
        timeout = httpx.USE_CLIENT_DEFAULT if self._config.timeout is None else self._config.timeout

        return self._client.build_request(
            "POST",
            url,
            json=body,
            headers=headers,
            params=params,
            timeout=timeout,
        )

    async def _send(self, request: httpx.Request, stream: bool) -> httpx.Response:
        try:
            return await self._client.send(request, stream=stream)
        except httpx.TimeoutException:
            logger.error(f"{self.display_name} API request timed out")
            raise UpstreamRequestFailed(f"{self.display_name} API request timed out", provider=self.name)
        except httpx.RequestError as e:
            logger.error(f"{self.display_name} API request failed: {e}")
            raise UpstreamRequestFailed(f"{self.display_name} API request failed: {e}", provider=self.name)

    def _check_response(self, response: httpx.Response) -> None:
        """Raise UpstreamRequestFailed for any non-2xx response."""
        if response.is_success:
            return

        body = response.text
        logger.error(f"{self.display_name} API request failed: {response.status_code} - {body}")
        raise UpstreamRequestFailed(
            f"{self.display_name} API request failed with status code {response.status_code}: {body}",
            provider=self.name,
            status_code=response.status_code,
            body=body,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, dialect={self._dialect.dialect_type!r})"
