"""
Streaming relay.

Reads a provider's streamed body line by line and re-emits it as
canonical stream events, one event per upstream fragment, in order.
"""

import asyncio
import logging
from contextlib import aclosing
from enum import Enum
from typing import AsyncIterator, Optional

import httpx

from .errors import GatewayError, UpstreamRequestFailed
from .interface import ProviderDialect
from ..models.response import StreamEvent

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"


class RelayState(str, Enum):
    """Lifecycle of a single relayed stream."""
    CONNECTING = "connecting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    ERRORED = "errored"
    CANCELLED = "cancelled"


def data_payload(line: str) -> Optional[str]:
    """Return the payload of an SSE ``data:`` line, or None for any other line."""
    if not line or not line.strip():
        return None
    if line[:len(DATA_PREFIX)].lower() != DATA_PREFIX:
        return None
    return line[len(DATA_PREFIX):].strip()


class StreamRelay:
    """
    Relay for one upstream streaming response.

    The relay owns the open response and releases it when the stream ends,
    fails, or the consumer stops early. It can be consumed only once.
    """

    def __init__(self, dialect: ProviderDialect, response: httpx.Response):
        self._dialect = dialect
        self._response = response
        self._consumed = False
        self.state = RelayState.CONNECTING
        self.fragments = 0

    @property
    def provider(self) -> str:
        return self._dialect.provider

    async def events(self) -> AsyncIterator[StreamEvent]:
        """
        Yield canonical events until the stream completes or fails.

        A completed stream ends with exactly one done event. A failed stream
        (transport error, unparsable payload, or end of body before the
        provider's done marker) ends with exactly one error event. Client
        cancellation emits nothing further and propagates.
        """
        if self._consumed:
            raise RuntimeError("Stream relay can only be consumed once")
        self._consumed = True
        self.state = RelayState.STREAMING

        try:
            async for line in self._response.aiter_lines():
                payload = data_payload(line)
                if payload is None:
                    continue

                chunk = self._dialect.parse_stream_payload(payload)
                if chunk.text:
                    self.fragments += 1
                    yield StreamEvent.fragment(chunk.text)

                if chunk.done:
                    self.state = RelayState.COMPLETED
                    logger.info(f"Stream from {self.provider} completed after {self.fragments} fragments")
                    yield StreamEvent.done()
                    return

            raise UpstreamRequestFailed(
                "Upstream stream ended before completion",
                provider=self.provider,
            )

        except (GatewayError, ValueError, httpx.HTTPError, httpx.StreamError) as e:
            self.state = RelayState.ERRORED
            logger.error(f"Stream from {self.provider} failed after {self.fragments} fragments: {e}")
            yield StreamEvent.failure(str(e))

        except (asyncio.CancelledError, GeneratorExit):
            if self.state == RelayState.STREAMING:
                self.state = RelayState.CANCELLED
                logger.warning(f"Stream from {self.provider} cancelled by client")
            raise

        finally:
            await self._response.aclose()

    async def sse(self) -> AsyncIterator[str]:
        """Yield the relayed events encoded as server-sent event lines."""
        async with aclosing(self.events()) as events:
            async for event in events:
                yield event.to_sse()

    async def aclose(self) -> None:
        """Release the upstream response without consuming it."""
        if self.state in (RelayState.CONNECTING, RelayState.STREAMING):
            self.state = RelayState.CANCELLED
        await self._response.aclose()
