"""
Canonical request models shared by every provider dialect.
"""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field, model_validator

# Number of most recent messages kept when history is remembered.
HISTORY_WINDOW = 5


class Message(BaseModel):
    """A single chat message. Order within a conversation is chronological."""
    role: Literal["system", "user", "assistant"]
    content: str = Field(..., min_length=1)


class RequestSettings(BaseModel):
    """
    Generation settings sent along with every request.

    Serialized under the ``chatRequestSettings`` key on the wire.
    """
    temperature: float = Field(default=0.7, ge=0, le=1)
    max_tokens: int = Field(default=1024, gt=0, le=4096, alias="maxTokens")
    remember_history: bool = Field(default=False, alias="rememberHistory")
    stream: bool = Field(default=False)

    class Config:
        populate_by_name = True


class CanonicalRequest(BaseModel):
    """Provider-agnostic chat completion request."""
    provider: str = Field(..., min_length=1, max_length=50)
    model: str = Field(..., min_length=1, max_length=50)
    messages: List[Message] = Field(..., min_length=1)
    settings: RequestSettings = Field(default_factory=RequestSettings, alias="chatRequestSettings")

    class Config:
        populate_by_name = True

    def history(self) -> List[Message]:
        """Messages forwarded upstream after the history policy is applied."""
        return select_history(self.messages, self.settings)


class ProviderSelection(BaseModel):
    """One side of a comparison."""
    name: str = Field(..., min_length=1, max_length=50)
    model: str = Field(..., min_length=1, max_length=50)


class CompareRequest(BaseModel):
    """Same conversation sent to two provider/model pairs."""
    messages: List[Message] = Field(..., min_length=1)
    left_provider: ProviderSelection = Field(..., alias="leftProvider")
    right_provider: ProviderSelection = Field(..., alias="rightProvider")
    settings: RequestSettings = Field(default_factory=RequestSettings, alias="chatRequestSettings")

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def _models_differ(self) -> "CompareRequest":
        if self.left_provider.model == self.right_provider.model:
            raise ValueError("Left and right models must be different.")
        return self


def select_history(messages: List[Message], settings: RequestSettings) -> List[Message]:
    """
    Apply the history policy used by every translator.

    With history off only the most recent message is forwarded, whatever
    the input length. With history on the sequence is forwarded as given;
    the window is applied earlier by ``truncate_history``.
    """
    if not settings.remember_history:
        return list(messages[-1:])
    return list(messages)


def truncate_history(messages: List[Message], window: Optional[int] = None) -> List[Message]:
    """Keep only the last ``window`` messages (defaults to HISTORY_WINDOW)."""
    window = window or HISTORY_WINDOW
    if len(messages) > window:
        return list(messages[-window:])
    return list(messages)
