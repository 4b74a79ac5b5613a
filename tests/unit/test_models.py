"""Unit tests for request, configuration, tool and event models."""

import json

import pytest

from llm_stream.models.events import StreamFailedEvent, TokenEvent, ToolCallRequestedEvent
from llm_stream.models.request import ConversationItem, StreamRequest
from llm_stream.models.streaming import DEBUG_OPTIONS, StreamingOptions
from llm_stream.models.tools import ToolCall, ToolExecutionStatus, ToolResult


@pytest.mark.unit
class TestStreamRequest:
    """Test the streaming request model."""

    def test_body_forces_stream(self):
        request = StreamRequest(prompt="Hi", stream=False)
        body = request.to_body()

        assert body["stream"] is True
        assert body["prompt"] == "Hi"
        assert body["provider"] == "openai"
        assert "model" not in body

    def test_conversation_history(self):
        request = StreamRequest(
            prompt="And then?",
            conversation_history=[ConversationItem(role="user", content="Tell me a story")],
        )
        assert request.to_body()["conversation_history"] == [
            {"role": "user", "content": "Tell me a story"}
        ]

    def test_extra_fields_pass_through(self):
        body = StreamRequest(prompt="Hi", temperature=0.2).to_body()
        assert body["temperature"] == 0.2

    def test_query_params(self):
        request = StreamRequest(prompt="Hi", provider="anthropic", model="claude", disable_cache=True)
        assert request.query_params() == {
            "provider": "anthropic",
            "model": "claude",
            "disable_cache": "true",
        }

    def test_query_params_minimal(self):
        assert StreamRequest(prompt="Hi").query_params() == {"provider": "openai"}


@pytest.mark.unit
class TestStreamingOptions:
    """Test streaming configuration."""

    def test_defaults(self):
        options = StreamingOptions()
        assert options.stream_url() == "http://localhost:8000/llm/stream"
        assert options.timeout == 60.0
        assert not options.capture_raw_frames

    @pytest.mark.parametrize("base,endpoint", [
        ("http://h:1", "/llm/stream"),
        ("http://h:1/", "/llm/stream"),
        ("http://h:1/", "llm/stream"),
        ("http://h:1", "llm/stream"),
    ])
    def test_stream_url_single_slash(self, base, endpoint):
        options = StreamingOptions(api_base_url=base, endpoint=endpoint)
        assert options.stream_url() == "http://h:1/llm/stream"

    def test_invalid_values_fall_back_to_defaults(self):
        options = StreamingOptions(api_base_url="", endpoint="", timeout=-1, headers=None)
        assert options.api_base_url == "http://localhost:8000"
        assert options.endpoint == "/llm/stream"
        assert options.timeout == 60.0
        assert options.headers == {}

    def test_from_dict_ignores_unknown_keys(self):
        options = StreamingOptions.from_dict({"timeout": 5, "unknown": True})
        assert options.timeout == 5

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LLM_STREAM_API_BASE_URL", "http://env:9000")
        monkeypatch.setenv("LLM_STREAM_ENDPOINT", "/v2/stream")
        monkeypatch.setenv("LLM_STREAM_TIMEOUT", "12.5")

        options = StreamingOptions.from_env()

        assert options.stream_url() == "http://env:9000/v2/stream"
        assert options.timeout == 12.5

    def test_from_env_overrides_and_bad_timeout(self, monkeypatch, caplog):
        monkeypatch.setenv("LLM_STREAM_API_BASE_URL", "http://env:9000")
        monkeypatch.setenv("LLM_STREAM_TIMEOUT", "soon")

        options = StreamingOptions.from_env(api_base_url="http://override", endpoint=None)

        assert options.api_base_url == "http://override"
        assert options.endpoint == "/llm/stream"
        assert options.timeout == 60.0
        assert "Invalid LLM_STREAM_TIMEOUT='soon'" in caplog.text

    def test_request_headers(self):
        options = StreamingOptions(headers={"Authorization": "Bearer x"})
        headers = options.request_headers({"X-Trace": "1"})

        assert headers["Content-Type"] == "application/json"
        assert headers["Accept"] == "text/event-stream"
        assert headers["Cache-Control"] == "no-cache"
        assert headers["Authorization"] == "Bearer x"
        assert headers["X-Trace"] == "1"

    def test_to_dict_round_trip(self):
        assert StreamingOptions.from_dict(DEBUG_OPTIONS.to_dict()) == DEBUG_OPTIONS


@pytest.mark.unit
class TestToolModels:
    """Test tool call and result parsing."""

    def test_tool_call_extra_fields_kept(self):
        call = ToolCall.from_payload({"id": "a", "function": {"name": "f"}, "index": 0})
        assert call.model_dump()["index"] == 0

    def test_non_string_type_is_coerced(self):
        call = ToolCall.from_payload({"id": "a", "type": 1, "function": {"name": "f"}})
        assert call.type == "1"

    def test_parsed_arguments(self):
        call = ToolCall.from_payload({"function": {"name": "f", "arguments": "{\"x\": 1}"}})
        assert call.parsed_arguments() == {"x": 1}

        broken = ToolCall.from_payload({"function": {"name": "f", "arguments": "{x"}})
        assert broken.parsed_arguments() == "{x"

    def test_tool_result_name_sources(self):
        assert ToolResult.from_payload({"name": "a"}).function_name == "a"
        assert ToolResult.from_payload({"function": {"name": "b"}}).function_name == "b"

    @pytest.mark.parametrize("payload", [
        {"success": False, "result": None},
        {"status": "error"},
        {"error": {"code": 1}},
    ])
    def test_tool_result_errors(self, payload):
        assert ToolResult.from_payload(payload).is_error

    def test_tool_result_success(self):
        result = ToolResult.from_payload({"tool_call_id": "t1", "result": {"v": 1}, "error": None})
        assert not result.is_error
        assert result.result == {"v": 1}

    def test_execution_status_terminal(self):
        assert ToolExecutionStatus.COMPLETED.is_terminal
        assert ToolExecutionStatus.ERROR.is_terminal
        assert not ToolExecutionStatus.RUNNING.is_terminal


@pytest.mark.unit
class TestEvents:
    """Test event serialization."""

    def test_token_to_dict(self):
        assert TokenEvent(text="hi", event_type="token").to_dict() == {
            "type": "token",
            "event_type": "token",
            "text": "hi",
        }

    def test_tool_call_to_dict_is_json(self, calculate_tool_call):
        data = ToolCallRequestedEvent(tool_call=calculate_tool_call).to_dict()

        assert data["type"] == "tool_call_requested"
        assert data["tool_call"]["function"]["name"] == "calculate"
        json.dumps(data)

    def test_failed_is_terminal(self):
        assert StreamFailedEvent(message="x").is_terminal
        assert not TokenEvent(text="x").is_terminal
