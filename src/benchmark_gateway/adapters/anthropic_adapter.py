"""
Anthropic Messages API dialect.
"""

import json
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ValidationError

from ..core.errors import MalformedUpstreamResponse, UpstreamRequestFailed
from ..core.interface import ProviderDialect, ProviderCapability
from ..models.request import CanonicalRequest
from ..models.response import ParsedCompletion, StreamChunk


class _ContentBlock(BaseModel):
    type: str = ""
    text: Optional[str] = None


class _Usage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0


class _Message(BaseModel):
    content: List[_ContentBlock] = []
    usage: Optional[_Usage] = None


class _Delta(BaseModel):
    type: str = ""
    text: Optional[str] = None


class _StreamEvent(BaseModel):
    type: str
    delta: Optional[_Delta] = None
    error: Optional[Dict[str, Any]] = None


class AnthropicDialect(ProviderDialect):
    """
    Messages API dialect.

    System messages are lifted out of the message array into the top-level
    ``system`` string, as the API requires. The stream is a sequence of
    typed events; ``message_stop`` marks successful completion.
    """

    @property
    def dialect_type(self) -> str:
        return "anthropic"

    @property
    def capabilities(self) -> Set[ProviderCapability]:
        return {
            ProviderCapability.CHAT_COMPLETION,
            ProviderCapability.STREAMING,
            ProviderCapability.SYSTEM_PROMPT,
            ProviderCapability.MESSAGE_HISTORY,
        }

    def build_request(self, request: CanonicalRequest) -> Dict[str, Any]:
        system = []
        messages = []

        for m in request.history():
            if m.role == "system":
                system.append(m.content)
            else:
                messages.append({"role": m.role, "content": m.content})

        data = {
            "model": request.model,
            "messages": messages,
            "max_tokens": request.settings.max_tokens,
            "temperature": request.settings.temperature,
        }

        if system and not messages:
            # Only system text survived the history policy; the API needs a user turn
            messages.append({"role": "user", "content": "\n\n".join(system)})
        elif system:
            data["system"] = "\n\n".join(system)

        if request.settings.stream:
            data["stream"] = True

        return data

    def parse_response(self, data: Dict[str, Any]) -> ParsedCompletion:
        try:
            message = _Message.model_validate(data)
        except ValidationError as e:
            raise MalformedUpstreamResponse(f"Unexpected message shape: {e}", provider=self.provider)

        texts = [block.text for block in message.content if block.type == "text" and block.text is not None]
        if not texts:
            raise MalformedUpstreamResponse("No text content in Anthropic response", provider=self.provider)

        usage = message.usage or _Usage()
        return ParsedCompletion(
            text="".join(texts),
            prompt_tokens=usage.input_tokens,
            completion_tokens=usage.output_tokens,
        )

    def parse_stream_payload(self, payload: str) -> StreamChunk:
        event = _StreamEvent.model_validate_json(payload)

        if event.type == "content_block_delta" and event.delta and event.delta.type == "text_delta":
            return StreamChunk(text=event.delta.text)

        if event.type == "message_stop":
            return StreamChunk(done=True)

        if event.type == "error":
            raise UpstreamRequestFailed(
                f"Anthropic stream error: {json.dumps(event.error or {})}",
                provider=self.provider,
            )

        # message_start, content_block_start/stop, message_delta, ping
        return StreamChunk()
