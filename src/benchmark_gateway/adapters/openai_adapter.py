"""
OpenAI-compatible chat completions dialect.

Shared by every provider that exposes the ``/chat/completions`` schema:
OpenAI, DeepSeek, QwenAI, MistralAI, xAI and Perplexity.
"""

from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ValidationError

from ..core.errors import MalformedUpstreamResponse
from ..core.interface import ProviderDialect, ProviderCapability
from ..models.request import CanonicalRequest
from ..models.response import ParsedCompletion, StreamChunk

STREAM_SENTINEL = "[DONE]"


class _Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0


class _Message(BaseModel):
    content: Optional[str] = None


class _Choice(BaseModel):
    message: _Message = _Message()


class _Completion(BaseModel):
    choices: List[_Choice] = []
    usage: Optional[_Usage] = None


class _Delta(BaseModel):
    content: Optional[str] = None


class _StreamChoice(BaseModel):
    delta: _Delta = _Delta()
    finish_reason: Optional[str] = None


class _StreamChunk(BaseModel):
    choices: List[_StreamChoice] = []


class OpenAIDialect(ProviderDialect):
    """
    Chat completions dialect.

    Messages are forwarded as an array; ``temperature`` and ``max_tokens``
    are top-level fields and ``stream`` is sent only when streaming. The
    stream ends with a ``data: [DONE]`` line.
    """

    @property
    def dialect_type(self) -> str:
        return "openai"

    @property
    def capabilities(self) -> Set[ProviderCapability]:
        return {
            ProviderCapability.CHAT_COMPLETION,
            ProviderCapability.STREAMING,
            ProviderCapability.SYSTEM_PROMPT,
            ProviderCapability.MESSAGE_HISTORY,
        }

    def build_request(self, request: CanonicalRequest) -> Dict[str, Any]:
        data = {
            "model": request.model,
            "messages": [m.model_dump() for m in request.history()],
            "temperature": request.settings.temperature,
            "max_tokens": request.settings.max_tokens,
        }
        if request.settings.stream:
            data["stream"] = True
        return data

    def parse_response(self, data: Dict[str, Any]) -> ParsedCompletion:
        try:
            completion = _Completion.model_validate(data)
        except ValidationError as e:
            raise MalformedUpstreamResponse(f"Unexpected completion shape: {e}", provider=self.provider)

        if not completion.choices:
            raise MalformedUpstreamResponse(
                "Failed to parse a valid response from API.",
                provider=self.provider,
            )

        usage = completion.usage or _Usage()
        return ParsedCompletion(
            text=completion.choices[0].message.content or "",
            prompt_tokens=usage.prompt_tokens,
            completion_tokens=usage.completion_tokens,
        )

    def parse_stream_payload(self, payload: str) -> StreamChunk:
        if payload == STREAM_SENTINEL:
            return StreamChunk(done=True)

        chunk = _StreamChunk.model_validate_json(payload)
        if not chunk.choices:
            return StreamChunk()
        return StreamChunk(text=chunk.choices[0].delta.content)
