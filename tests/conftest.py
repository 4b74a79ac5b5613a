"""Shared pytest fixtures for llm-stream tests."""

import json

import pytest

from llm_stream.models.streaming import StreamingOptions
from llm_stream.models.tools import ToolCall
from llm_stream.session.controller import StreamSessionController
from tests.helpers.streaming_mocks import FakeTransport, RecordingCallbacks


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer environment variables out of the tests."""
    for key in ("LLM_STREAM_API_BASE_URL", "LLM_STREAM_ENDPOINT", "LLM_STREAM_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def recorder():
    """Callback recorder."""
    return RecordingCallbacks()


@pytest.fixture
def make_controller():
    """Factory for a controller over a FakeTransport."""
    def _make(chunks=None, **transport_kwargs):
        transport = FakeTransport(chunks, **transport_kwargs)
        controller = StreamSessionController(
            transport=transport,
            options=StreamingOptions(api_base_url="http://backend.test"),
        )
        return controller, transport
    return _make


@pytest.fixture
def calculate_tool_call_payload():
    """OpenAI-style tool call for a calculator tool."""
    return {
        "id": "t1",
        "type": "function",
        "function": {"name": "calculate", "arguments": json.dumps({"expression": "6*7"})},
    }


@pytest.fixture
def calculate_tool_call(calculate_tool_call_payload):
    """Parsed calculator tool call."""
    return ToolCall.from_payload(calculate_tool_call_payload)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without I/O")
    config.addinivalue_line("markers", "integration: tests against an in-process backend")
