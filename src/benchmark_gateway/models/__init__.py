"""
Gateway data models.
"""

from .request import (
    HISTORY_WINDOW,
    CanonicalRequest,
    CompareRequest,
    Message,
    ProviderSelection,
    RequestSettings,
    select_history,
    truncate_history,
)
from .response import (
    CanonicalResult,
    CompareResult,
    ErrorResponse,
    ParsedCompletion,
    ProviderDescription,
    StreamChunk,
    StreamEvent,
    StreamEventType,
)

__all__ = [
    "HISTORY_WINDOW",
    "CanonicalRequest",
    "CompareRequest",
    "Message",
    "ProviderSelection",
    "RequestSettings",
    "select_history",
    "truncate_history",
    "CanonicalResult",
    "CompareResult",
    "ErrorResponse",
    "ParsedCompletion",
    "ProviderDescription",
    "StreamChunk",
    "StreamEvent",
    "StreamEventType",
]
