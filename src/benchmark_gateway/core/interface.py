"""
Provider dialect interface.

A dialect bundles the three provider-specific capabilities: translating
the canonical request, parsing the whole response and decoding stream
payloads. Provider clients compose a dialect rather than subclassing.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Set

from ..models.request import CanonicalRequest
from ..models.response import ParsedCompletion, StreamChunk


class ProviderCapability(str, Enum):
    """Capabilities that a provider dialect may support."""
    CHAT_COMPLETION = "chat_completion"
    STREAMING = "streaming"
    SYSTEM_PROMPT = "system_prompt"
    MESSAGE_HISTORY = "message_history"


class ProviderDialect(ABC):
    """
    Wire format of one provider family.

    Instances are bound to a provider name so raised errors can report it.
    """

    #: Endpoint purpose used for streaming requests.
    stream_purpose: str = "chat"

    def __init__(self, provider: str):
        self.provider = provider

    @property
    @abstractmethod
    def dialect_type(self) -> str:
        """
        Wire format family (e.g. "openai", "anthropic", "gemini").

        Returns:
            Dialect identifier
        """
        pass

    @property
    @abstractmethod
    def capabilities(self) -> Set[ProviderCapability]:
        """
        Set of capabilities the wire format supports.

        Returns:
            Set of ProviderCapability values
        """
        pass

    @abstractmethod
    def build_request(self, request: CanonicalRequest) -> Dict[str, Any]:
        """
        Translate a canonical request into the provider's JSON body.

        Args:
            request: Canonical request; the history policy is applied here

        Returns:
            JSON-serializable request body
        """
        pass

    @abstractmethod
    def parse_response(self, data: Dict[str, Any]) -> ParsedCompletion:
        """
        Extract the first completion and token usage from a response body.

        Args:
            data: Decoded JSON response body

        Returns:
            Parsed completion

        Raises:
            MalformedUpstreamResponse: If no completion candidate is present
        """
        pass

    @abstractmethod
    def parse_stream_payload(self, payload: str) -> StreamChunk:
        """
        Decode the payload of one ``data:`` line of the upstream stream.

        Args:
            payload: Line content after the ``data:`` prefix

        Returns:
            Chunk with an optional text fragment and the done marker

        Raises:
            ValueError: If the payload is not valid for this dialect
        """
        pass

    def supports(self, capability: ProviderCapability) -> bool:
        return capability in self.capabilities

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(provider={self.provider!r})"
