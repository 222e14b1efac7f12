"""
Canonical result and stream event models.
"""

import json
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_serializer

SSE_DONE = "data: [DONE]\n"


class CanonicalResult(BaseModel):
    """Whole-response completion result."""
    message: str = ""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    cost: Decimal = Decimal(0)
    elapsed_ms: float = 0.0
    time_taken: str = ""
    provider: Optional[str] = None
    model: Optional[str] = None

    @field_serializer("cost")
    def _serialize_cost(self, cost: Decimal) -> float:
        return float(cost)


class CompareResult(BaseModel):
    """Paired results of a comparison request."""
    left_result: CanonicalResult
    right_result: CanonicalResult


class ParsedCompletion(BaseModel):
    """What a dialect extracts from a provider's whole response body."""
    text: str = ""
    prompt_tokens: int = 0
    completion_tokens: int = 0


class StreamChunk(BaseModel):
    """Fields consumed from one upstream stream payload."""
    text: Optional[str] = None
    done: bool = False


class StreamEventType(str, Enum):
    """Kinds of canonical stream events."""
    TEXT = "text"
    DONE = "done"
    ERROR = "error"


class StreamEvent(BaseModel):
    """A canonical event emitted by the streaming relay."""
    type: StreamEventType
    text: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def fragment(cls, text: str) -> "StreamEvent":
        return cls(type=StreamEventType.TEXT, text=text)

    @classmethod
    def done(cls) -> "StreamEvent":
        return cls(type=StreamEventType.DONE)

    @classmethod
    def failure(cls, message: str) -> "StreamEvent":
        return cls(type=StreamEventType.ERROR, error=message)

    def to_sse(self) -> str:
        """Encode in the gateway's server-sent event format."""
        if self.type == StreamEventType.DONE:
            return SSE_DONE
        if self.type == StreamEventType.ERROR:
            return f"data: {json.dumps({'error': self.error})}\n\n"
        return f"data: {json.dumps({'v': self.text})}\n\n"


class ErrorDetail(BaseModel):
    """Structured error returned for synchronous failures."""
    type: str
    message: str
    provider: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error payload body."""
    error: ErrorDetail


class ProviderDescription(BaseModel):
    """Public description of a registered provider."""
    name: str
    display_name: str
    streaming: bool = True
    capabilities: list = Field(default_factory=list)
    models: list = Field(default_factory=list)
