"""
Integration tests for response parsing.

Tests whole-response parsing and stream payload decoding
for each provider dialect.
"""
import json

import pytest

from benchmark_gateway.adapters import AnthropicDialect, GeminiDialect, OpenAIDialect
from benchmark_gateway.core.errors import MalformedUpstreamResponse, UpstreamRequestFailed

from conftest import openai_completion


class TestOpenAIParsing:
    """Test chat completion responses."""

    def test_first_choice_and_usage(self):
        """Test text and token counts are extracted."""
        parsed = OpenAIDialect("openai").parse_response(openai_completion("Hi there", 12, 3))
        assert parsed.text == "Hi there"
        assert parsed.prompt_tokens == 12
        assert parsed.completion_tokens == 3

    def test_only_first_choice_used(self):
        """Test additional choices are ignored."""
        data = openai_completion("first")
        data["choices"].append({"index": 1, "message": {"role": "assistant", "content": "second"}})
        assert OpenAIDialect("openai").parse_response(data).text == "first"

    def test_missing_usage_defaults_to_zero(self):
        """Test a response without usage reports zero tokens."""
        data = openai_completion()
        del data["usage"]
        parsed = OpenAIDialect("deepseek").parse_response(data)
        assert parsed.prompt_tokens == 0
        assert parsed.completion_tokens == 0

    def test_no_choices(self):
        """Test an empty choice list is malformed."""
        with pytest.raises(MalformedUpstreamResponse) as exc_info:
            OpenAIDialect("xai").parse_response({"choices": []})
        assert exc_info.value.provider == "xai"

    def test_stream_fragment(self):
        """Test a delta line yields its text."""
        payload = json.dumps({"choices": [{"delta": {"content": "Hel"}}]})
        chunk = OpenAIDialect("openai").parse_stream_payload(payload)
        assert chunk.text == "Hel"
        assert not chunk.done

    def test_stream_role_only_delta(self):
        """Test a delta without content yields nothing."""
        payload = json.dumps({"choices": [{"delta": {"role": "assistant"}}]})
        chunk = OpenAIDialect("openai").parse_stream_payload(payload)
        assert chunk.text is None
        assert not chunk.done

    def test_stream_sentinel(self):
        """Test the [DONE] sentinel ends the stream."""
        chunk = OpenAIDialect("openai").parse_stream_payload("[DONE]")
        assert chunk.done
        assert chunk.text is None

    def test_stream_invalid_json(self):
        """Test an unparsable payload raises ValueError."""
        with pytest.raises(ValueError):
            OpenAIDialect("openai").parse_stream_payload("{not json")


class TestAnthropicParsing:
    """Test Messages API responses."""

    def test_text_and_usage(self):
        """Test text blocks and usage are extracted."""
        data = {
            "id": "msg_1",
            "type": "message",
            "content": [{"type": "text", "text": "Hello"}],
            "usage": {"input_tokens": 9, "output_tokens": 4},
        }
        parsed = AnthropicDialect("anthropic").parse_response(data)
        assert parsed.text == "Hello"
        assert parsed.prompt_tokens == 9
        assert parsed.completion_tokens == 4

    def test_no_text_blocks(self):
        """Test a response without text content is malformed."""
        with pytest.raises(MalformedUpstreamResponse):
            AnthropicDialect("anthropic").parse_response({"content": []})

    def test_stream_text_delta(self):
        """Test content_block_delta events yield text."""
        payload = json.dumps({
            "type": "content_block_delta",
            "index": 0,
            "delta": {"type": "text_delta", "text": "Hi"},
        })
        assert AnthropicDialect("anthropic").parse_stream_payload(payload).text == "Hi"

    def test_stream_message_stop(self):
        """Test message_stop ends the stream."""
        chunk = AnthropicDialect("anthropic").parse_stream_payload('{"type": "message_stop"}')
        assert chunk.done

    def test_stream_bookkeeping_events(self):
        """Test ping and start events yield nothing."""
        chunk = AnthropicDialect("anthropic").parse_stream_payload('{"type": "ping"}')
        assert chunk.text is None
        assert not chunk.done

    def test_stream_error_event(self):
        """Test an in-stream error event fails the stream."""
        payload = json.dumps({"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}})
        with pytest.raises(UpstreamRequestFailed) as exc_info:
            AnthropicDialect("anthropic").parse_stream_payload(payload)
        assert "overloaded_error" in exc_info.value.message


class TestGeminiParsing:
    """Test generateContent responses."""

    def test_candidate_text_and_usage(self):
        """Test the first candidate and usage metadata are extracted."""
        data = {
            "candidates": [{"content": {"parts": [{"text": "Hel"}, {"text": "lo"}], "role": "model"}}],
            "usageMetadata": {"promptTokenCount": 7, "candidatesTokenCount": 2, "totalTokenCount": 9},
        }
        parsed = GeminiDialect("google").parse_response(data)
        assert parsed.text == "Hello"
        assert parsed.prompt_tokens == 7
        assert parsed.completion_tokens == 2

    def test_missing_usage(self):
        """Test absent usage metadata reports zero tokens."""
        data = {"candidates": [{"content": {"parts": [{"text": "ok"}]}}]}
        parsed = GeminiDialect("google").parse_response(data)
        assert parsed.prompt_tokens == 0
        assert parsed.completion_tokens == 0

    def test_no_candidates(self):
        """Test a response without candidates is malformed."""
        with pytest.raises(MalformedUpstreamResponse):
            GeminiDialect("google").parse_response({"candidates": []})

    def test_candidate_without_text(self):
        """Test a candidate without text parts is malformed."""
        with pytest.raises(MalformedUpstreamResponse):
            GeminiDialect("google").parse_response({"candidates": [{"content": {"parts": []}}]})

    def test_stream_fragment(self):
        """Test a stream candidate yields its text."""
        payload = json.dumps({"candidates": [{"content": {"parts": [{"text": "Hi"}]}}]})
        chunk = GeminiDialect("google").parse_stream_payload(payload)
        assert chunk.text == "Hi"
        assert not chunk.done

    def test_stream_finish_reason_carries_text(self):
        """Test the final candidate yields its text and ends the stream."""
        payload = json.dumps({
            "candidates": [{"content": {"parts": [{"text": "!"}]}, "finishReason": "STOP"}],
        })
        chunk = GeminiDialect("google").parse_stream_payload(payload)
        assert chunk.text == "!"
        assert chunk.done
