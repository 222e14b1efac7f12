"""
Google Gemini generateContent dialect.
"""

from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ValidationError

from ..core.errors import MalformedUpstreamResponse
from ..core.interface import ProviderDialect, ProviderCapability
from ..models.request import CanonicalRequest
from ..models.response import ParsedCompletion, StreamChunk

PROMPT_SEPARATOR = "\n\n"


class _Part(BaseModel):
    text: Optional[str] = None


class _Content(BaseModel):
    parts: List[_Part] = []


class _Candidate(BaseModel):
    content: _Content = _Content()
    finishReason: Optional[str] = None


class _UsageMetadata(BaseModel):
    promptTokenCount: int = 0
    candidatesTokenCount: int = 0


class _Response(BaseModel):
    candidates: List[_Candidate] = []
    usageMetadata: Optional[_UsageMetadata] = None


def _candidate_text(candidate: _Candidate) -> Optional[str]:
    texts = [part.text for part in candidate.content.parts if part.text is not None]
    return "".join(texts) if texts else None


class GeminiDialect(ProviderDialect):
    """
    Gemini dialect.

    The wire schema takes a single flat prompt: message contents are
    concatenated, separated by a blank line, into one text part. Sampling
    settings are nested under ``generationConfig`` (``temperature``,
    ``maxOutputTokens``). There is no stream flag in the body; streaming
    goes to the separate ``stream`` endpoint, and a candidate carrying a
    ``finishReason`` ends the stream.
    """

    stream_purpose = "stream"

    @property
    def dialect_type(self) -> str:
        return "gemini"

    @property
    def capabilities(self) -> Set[ProviderCapability]:
        return {
            ProviderCapability.CHAT_COMPLETION,
            ProviderCapability.STREAMING,
        }

    def build_request(self, request: CanonicalRequest) -> Dict[str, Any]:
        prompt = PROMPT_SEPARATOR.join(m.content for m in request.history())
        return {
            "contents": [
                {"role": "user", "parts": [{"text": prompt}]},
            ],
            "generationConfig": {
                "temperature": request.settings.temperature,
                "maxOutputTokens": request.settings.max_tokens,
            },
        }

    def parse_response(self, data: Dict[str, Any]) -> ParsedCompletion:
        try:
            response = _Response.model_validate(data)
        except ValidationError as e:
            raise MalformedUpstreamResponse(f"Unexpected Gemini response shape: {e}", provider=self.provider)

        if not response.candidates:
            raise MalformedUpstreamResponse("No candidates in Gemini response", provider=self.provider)

        text = _candidate_text(response.candidates[0])
        if text is None:
            raise MalformedUpstreamResponse("Invalid response from Gemini API", provider=self.provider)

        usage = response.usageMetadata or _UsageMetadata()
        return ParsedCompletion(
            text=text,
            prompt_tokens=usage.promptTokenCount,
            completion_tokens=usage.candidatesTokenCount,
        )

    def parse_stream_payload(self, payload: str) -> StreamChunk:
        response = _Response.model_validate_json(payload)
        if not response.candidates:
            return StreamChunk()

        candidate = response.candidates[0]
        return StreamChunk(
            text=_candidate_text(candidate),
            done=candidate.finishReason is not None,
        )
