"""
Benchmark Gateway Service

A FastAPI service that sends one conversation to any supported AI
provider, or to two of them side by side, and reports the completion
with token usage, cost and latency.

Features:
- Whole-response and server-sent-event streaming completions
- Concurrent two-provider comparison (sequential when streaming)
- Provider and supported-model listing
- Typed gateway errors mapped to HTTP status codes
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Type

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.resources import Resource

from ..core.compare import compare, open_compare_stream
from ..core.config import load_config
from ..core.errors import (
    GatewayError,
    MalformedUpstreamResponse,
    ModelNotSupported,
    ProviderConfigurationError,
    UnsupportedProvider,
    UpstreamCancelled,
    UpstreamRequestFailed,
)
from ..core.registry import ProviderRegistry
from ..models.request import CanonicalRequest, CompareRequest, Message, RequestSettings, truncate_history
from ..models.response import CanonicalResult, CompareResult, ErrorDetail, ErrorResponse, ProviderDescription
from .config import ServiceConfig, config

# Configure logging
logging.basicConfig(level=config.log_level.upper())
logger = logging.getLogger(__name__)

CLIENT_CLOSED_REQUEST = 499

ERROR_STATUS: Dict[Type[GatewayError], int] = {
    ModelNotSupported: 400,
    UnsupportedProvider: 400,
    UpstreamRequestFailed: 502,
    UpstreamCancelled: CLIENT_CLOSED_REQUEST,
    MalformedUpstreamResponse: 500,
    ProviderConfigurationError: 500,
}


def status_for(error: GatewayError) -> int:
    """HTTP status for a gateway error, using the closest mapped base class."""
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 500


def error_payload(error_type: str, message: str, provider: Optional[str] = None) -> Dict[str, Any]:
    return ErrorResponse(error=ErrorDetail(type=error_type, message=message, provider=provider)).model_dump()


def windowed(messages: List[Message], settings: RequestSettings) -> List[Message]:
    """Apply the remembered-history window before translation."""
    if settings.remember_history:
        return truncate_history(messages)
    return messages


async def await_or_cancel(request: Request, awaitable: Awaitable[Any], poll_seconds: float) -> Any:
    """
    Await a whole-response call, cancelling it if the client disconnects.

    Raises:
        UpstreamCancelled: If the client went away before the call finished
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_seconds)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                await asyncio.wait({task})
                raise UpstreamCancelled("The request was canceled by the client.")
    finally:
        if not task.done():
            task.cancel()


class EventStreamResponse(StreamingResponse):
    """
    Server-sent event response that owns an open upstream stream.

    ``release`` runs once the response is finished, including when the
    client disconnects before the body iterator has started.
    """

    def __init__(self, lines: AsyncIterator[str], release: Callable[[], Awaitable[None]]):
        super().__init__(
            lines,
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )
        self._release = release

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self._release()


def event_stream(lines: AsyncIterator[str], release: Callable[[], Awaitable[None]]) -> EventStreamResponse:
    return EventStreamResponse(lines, release)


def setup_tracing(service_config: ServiceConfig) -> None:
    """Export spans over OTLP when an endpoint is configured."""
    resource = Resource.create({"service.name": service_config.service_name})
    provider = TracerProvider(resource=resource)
    processor = BatchSpanProcessor(OTLPSpanExporter(endpoint=service_config.otel_endpoint))
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)


def create_app(
    registry: Optional[ProviderRegistry] = None,
    service_config: ServiceConfig = config,
) -> FastAPI:
    """
    Build the gateway application.

    Args:
        registry: Pre-built provider registry; loaded from configuration at
            startup when omitted
        service_config: Service settings

    Returns:
        FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        http_client: Optional[httpx.AsyncClient] = None

        if service_config.otel_endpoint:
            setup_tracing(service_config)

        if getattr(app.state, "registry", None) is None:
            gateway_config = load_config(service_config.gateway_config_path)
            http_client = httpx.AsyncClient(
                timeout=service_config.http_timeout_seconds,
                limits=httpx.Limits(max_connections=service_config.max_connections),
            )
            app.state.registry = ProviderRegistry.from_config(gateway_config, http_client=http_client)

        logger.info(f"Benchmark gateway started with providers: {app.state.registry.providers()}")
        yield

        # Cleanup
        await app.state.registry.disconnect_all()
        if http_client is not None:
            await http_client.aclose()
        logger.info("Benchmark gateway stopped")

    app = FastAPI(
        title="Benchmark Gateway",
        description="Compare chat completions across AI providers",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.registry = registry

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if service_config.otel_endpoint:
        FastAPIInstrumentor.instrument_app(app)

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        status_code = status_for(exc)
        if status_code == CLIENT_CLOSED_REQUEST:
            logger.warning(f"{request.url.path}: {exc.message}")
        else:
            logger.error(f"{request.url.path} failed with {type(exc).__name__}: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content=error_payload(type(exc).__name__, exc.message, exc.provider),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        )
        return JSONResponse(status_code=400, content=error_payload("ValidationError", message))

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        return {"status": "healthy", "providers": request.app.state.registry.providers()}

    @app.get("/models", response_model=List[ProviderDescription])
    async def list_models(request: Request):
        """List providers and the models each one serves."""
        return request.app.state.registry.describe()

    @app.post("/chat", response_model=CanonicalResult)
    async def chat(body: CanonicalRequest, request: Request):
        """
        Send a conversation to one provider.

        Returns the whole completion, or a text/event-stream when
        ``chatRequestSettings.stream`` is set.
        """
        client = request.app.state.registry.resolve(body.provider)
        messages = windowed(body.messages, body.settings)

        if body.settings.stream:
            relay = await client.open_stream(body.model, messages, body.settings)
            return event_stream(relay.sse(), release=relay.aclose)

        return await await_or_cancel(
            request,
            client.call_sync(body.model, messages, body.settings),
            service_config.disconnect_poll_seconds,
        )

    @app.post("/compare", response_model=CompareResult)
    async def compare_models(body: CompareRequest, request: Request):
        """
        Send one conversation to two provider/model pairs.

        Whole responses are fetched concurrently; streams are relayed one
        after the other on the same event stream.
        """
        registry = request.app.state.registry
        body = body.model_copy(update={"messages": windowed(body.messages, body.settings)})

        if body.settings.stream:
            stream = await open_compare_stream(registry, body)
            return event_stream(stream.lines(), release=stream.aclose)

        return await await_or_cancel(
            request,
            compare(registry, body),
            service_config.disconnect_poll_seconds,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.host, port=config.port)
