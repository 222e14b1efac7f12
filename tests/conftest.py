"""
Shared fixtures: a small provider configuration and a mocked upstream.
"""
import copy
import json
from typing import Callable, List

import httpx
import pytest

from benchmark_gateway.core.config import GatewayConfig, parse_config
from benchmark_gateway.core.registry import ProviderRegistry
from benchmark_gateway.models.request import Message, RequestSettings


TEST_CONFIG = {
    "providers": {
        "openai": {
            "display_name": "OpenAI",
            "base_url": "https://openai.test",
            "endpoints": {"chat": "/v1/chat/completions"},
            "api_key": "sk-openai",
            "supported_models": ["gpt-4o", "GPT-4o-Mini"],
        },
        "deepseek": {
            "display_name": "DeepSeek",
            "base_url": "https://deepseek.test",
            "endpoints": {"chat": "/chat/completions"},
            "api_key": "sk-deepseek",
            "supported_models": "deepseek-chat, deepseek-reasoner",
        },
        "anthropic": {
            "display_name": "Anthropic",
            "base_url": "https://anthropic.test",
            "endpoints": {"chat": "/v1/messages"},
            "auth_scheme": "x-api-key",
            "api_key": "sk-anthropic",
            "headers": {"anthropic-version": "2023-06-01"},
            "supported_models": ["claude-3-5-haiku-latest"],
        },
        "google": {
            "display_name": "Google",
            "base_url": "https://gemini.test",
            "endpoints": {
                "chat": "/v1beta/models/{model}:generateContent",
                "stream": "/v1beta/models/{model}:streamGenerateContent?alt=sse",
            },
            "auth_scheme": "query",
            "api_key": "g-key",
            "supported_models": ["gemini-1.5-flash"],
        },
    },
    "pricing": {
        "openai": {
            "gpt-4o": {"input_per_1k_tokens": 0.002, "output_per_1k_tokens": 0.004},
            "gpt-4o-mini": {"input_per_1k_tokens": 0.00015, "output_per_1k_tokens": 0.0006},
        },
        "deepseek": {
            "deepseek-chat": {"input_per_1k_tokens": 0.00027, "output_per_1k_tokens": 0.0011},
        },
        "anthropic": {
            "claude-3-5-haiku-latest": {"input_per_1k_tokens": 0.0008, "output_per_1k_tokens": 0.004},
        },
        "google": {
            "gemini-1.5-flash": {"input_per_1k_tokens": 0.0001, "output_per_1k_tokens": 0.0004},
        },
    },
}


def openai_completion(content: str = "Hello!", prompt_tokens: int = 100, completion_tokens: int = 50) -> dict:
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"},
        ],
        "usage": {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": prompt_tokens + completion_tokens,
        },
    }


def openai_sse(*fragments: str, done: bool = True) -> bytes:
    lines = []
    for fragment in fragments:
        chunk = {"choices": [{"index": 0, "delta": {"content": fragment}, "finish_reason": None}]}
        lines.append(f"data: {json.dumps(chunk)}\n\n")
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode()


class BrokenStream(httpx.AsyncByteStream):
    """Upstream body that yields some chunks and then drops the connection."""

    def __init__(self, chunks: List[bytes]):
        self._chunks = chunks

    async def __aiter__(self):
        for chunk in self._chunks:
            yield chunk
        raise httpx.ReadError("connection reset by peer")


class Upstream:
    """Mock provider endpoint recording every request it receives."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responder: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json=openai_completion())
        )

    def respond(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self._responder = responder

    def respond_json(self, body: dict, status_code: int = 200) -> None:
        self.respond(lambda request: httpx.Response(status_code, json=body))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def gateway_config() -> GatewayConfig:
    return parse_config(copy.deepcopy(TEST_CONFIG))


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def http_client(upstream: Upstream) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture
def registry(gateway_config: GatewayConfig, http_client: httpx.AsyncClient) -> ProviderRegistry:
    return ProviderRegistry.from_config(gateway_config, http_client=http_client)


@pytest.fixture
def conversation() -> List[Message]:
    return [
        Message(role="system", content="You are helpful"),
        Message(role="user", content="Hi"),
        Message(role="assistant", content="Hello, how can I help?"),
        Message(role="user", content="Tell me a joke"),
    ]


@pytest.fixture
def settings() -> RequestSettings:
    return RequestSettings(temperature=0.5, max_tokens=200)
