"""
Side-by-side comparison of two provider/model pairs.

The whole-response comparison fans out to both providers concurrently and
waits for both. The streaming comparison is sequential: the left stream is
drained before the right one is opened, so the two never interleave on the
shared output.
"""

import asyncio
import logging
from contextlib import aclosing
from typing import AsyncIterator, Optional

from .client import ProviderClient
from .errors import GatewayError
from .registry import ProviderRegistry
from .relay import StreamRelay
from ..models.request import CompareRequest
from ..models.response import CompareResult, StreamEvent

logger = logging.getLogger(__name__)


async def compare(registry: ProviderRegistry, request: CompareRequest) -> CompareResult:
    """
    Run both sides concurrently.

    A failure on one side does not cancel the other. Once both have
    finished, the first failure (left before right) is raised.
    """
    left = registry.resolve(request.left_provider.name)
    right = registry.resolve(request.right_provider.name)

    outcomes = await asyncio.gather(
        left.call_sync(request.left_provider.model, request.messages, request.settings),
        right.call_sync(request.right_provider.model, request.messages, request.settings),
        return_exceptions=True,
    )

    failures = [o for o in outcomes if isinstance(o, BaseException)]
    for failure in failures:
        logger.error(f"Comparison side failed: {failure!r}")
    if failures:
        raise failures[0]

    return CompareResult(left_result=outcomes[0], right_result=outcomes[1])


class CompareStream:
    """
    Left and right streams relayed one after the other on one output.

    The left relay is already open; the right one is opened once the left
    stream has ended. ``aclose`` releases whichever upstream responses are
    still open, whether or not iteration ever started.
    """

    def __init__(self, left_relay: StreamRelay, right: ProviderClient, request: CompareRequest):
        self._left_relay = left_relay
        self._right = right
        self._request = request
        self._right_relay: Optional[StreamRelay] = None

    def __aiter__(self) -> AsyncIterator[str]:
        return self.lines()

    async def lines(self) -> AsyncIterator[str]:
        """Yield the left stream's SSE lines followed by the right's."""
        try:
            async with aclosing(self._left_relay.sse()) as lines:
                async for line in lines:
                    yield line
        finally:
            await self._left_relay.aclose()

        request = self._request
        try:
            self._right_relay = await self._right.open_stream(
                request.right_provider.model, request.messages, request.settings
            )
        except GatewayError as e:
            logger.error(f"Could not open stream for {self._right.name}: {e}")
            yield StreamEvent.failure(e.message).to_sse()
            return

        async with aclosing(self._right_relay.sse()) as lines:
            async for line in lines:
                yield line

    async def aclose(self) -> None:
        await self._left_relay.aclose()
        if self._right_relay is not None:
            await self._right_relay.aclose()


async def open_compare_stream(registry: ProviderRegistry, request: CompareRequest) -> CompareStream:
    """
    Validate both sides and open the left stream.

    Errors raised here happen before any output is produced. The returned
    stream yields the left stream's events followed by the right's.
    """
    left = registry.resolve(request.left_provider.name)
    right = registry.resolve(request.right_provider.name)
    right.ensure_supported(request.right_provider.model)

    left_relay = await left.open_stream(request.left_provider.model, request.messages, request.settings)
    return CompareStream(left_relay, right, request)
