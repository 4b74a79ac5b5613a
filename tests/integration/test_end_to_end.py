"""End-to-end tests against an in-process FastAPI streaming backend."""

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, StreamingResponse

from llm_stream import (
    HttpTransport,
    SessionStatus,
    StreamingOptions,
    StreamingStatsTracker,
    StreamRequest,
    StreamSessionController,
    ToolExecutionStatus,
)
from tests.helpers.streaming_mocks import RecordingCallbacks


def create_app() -> FastAPI:
    app = FastAPI()
    app.state.requests = []

    @app.post("/llm/stream")
    async def llm_stream(request: Request):
        body = await request.json()
        app.state.requests.append({"params": dict(request.query_params), "body": body})

        async def event_generator():
            yield "event: start\ndata: {\"provider\": \"%s\"}\n\n" % request.query_params.get("provider")
            yield "event: token\ndata: {\"choices\": [{\"delta\": {\"content\": \"Let me \"}}]}\n\n"
            yield "data: {\"content\": \"calculate.\", \"tool_calls\": [{\"id\": \"t1\", \"type\": \"function\", "
            yield "\"function\": {\"name\": \"calculate\", \"arguments\": \"{\\\"expression\\\": \\\"6*7\\\"}\"}}]}\n\n"
            yield "event: tool_result\ndata: {\"tool_call_id\": \"t1\", \"result\": {\"value\": 42}}\n\n"
            yield "data: data: {\"text\": \" The answer is 42 caf\\\\u00e9.\"}\n"
            yield "event: end\ndata: {\"done\": true, \"usage\": {\"total_tokens\": 12}}\n\n"

        return StreamingResponse(event_generator(), media_type="text/event-stream")

    @app.post("/llm/plain")
    async def llm_plain():
        async def lines():
            yield "Hello from a plain backend\n"
            yield "second line"

        return StreamingResponse(lines(), media_type="text/plain")

    @app.post("/llm/broken")
    async def llm_broken():
        return PlainTextResponse("model overloaded", status_code=503)

    return app


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def make_controller(app):
    def _make(endpoint="/llm/stream"):
        client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app))
        return StreamSessionController(
            transport=HttpTransport(client=client),
            options=StreamingOptions(api_base_url="http://backend.test", endpoint=endpoint),
        ), client
    return _make


@pytest.mark.integration
class TestEndToEnd:
    """Stream sessions over HTTP."""

    @pytest.mark.asyncio
    async def test_tool_flow(self, app, make_controller):
        recorder = RecordingCallbacks()
        controller, client = make_controller()

        async with client:
            session = await controller.stream(
                StreamRequest(prompt="What is 6*7?", provider="openai", enable_tools=True, disable_cache=True),
                recorder.as_callbacks(),
            )

        assert session.status == SessionStatus.ENDED
        assert recorder.names == ["start", "token", "token", "tool_call", "tool_result", "token", "end"]
        assert recorder.of("start") == [{"provider": "openai"}]
        assert session.accumulated_text == "Let me calculate. The answer is 42 café."

        tool_call = recorder.of("tool_call")[0]
        assert tool_call.function_name == "calculate"
        assert tool_call.parsed_arguments() == {"expression": "6*7"}

        execution = session.tracker.find_execution("t1")
        assert execution.status == ToolExecutionStatus.COMPLETED
        assert execution.result == {"value": 42}
        assert session.end_meta["usage"] == {"total_tokens": 12}

        sent = app.state.requests[0]
        assert sent["params"] == {"provider": "openai", "disable_cache": "true"}
        assert sent["body"]["stream"] is True
        assert sent["body"]["enable_tools"] is True

    @pytest.mark.asyncio
    async def test_plain_text_backend(self, make_controller):
        recorder = RecordingCallbacks()
        controller, client = make_controller("/llm/plain")

        async with client:
            session = await controller.stream(StreamRequest(prompt="hi"), recorder.as_callbacks())

        assert recorder.of("token") == ["Hello from a plain backend", "second line"]
        assert recorder.of("end") == [{}]
        assert session.status == SessionStatus.ENDED

    @pytest.mark.asyncio
    async def test_http_error(self, make_controller):
        recorder = RecordingCallbacks()
        controller, client = make_controller("/llm/broken")

        async with client:
            session = await controller.stream(StreamRequest(prompt="hi"), recorder.as_callbacks())

        assert recorder.calls == [("error", "HTTP error! status: 503, details: model overloaded")]
        assert session.status == SessionStatus.FAILED

    @pytest.mark.asyncio
    async def test_stats_over_http(self, make_controller):
        controller, client = make_controller()
        stats_tracker = StreamingStatsTracker()

        async with client:
            await controller.stream(StreamRequest(prompt="What is 6*7?"), stats_tracker.wrapped_callbacks)

        stats = stats_tracker.get_stats()
        assert stats.total_tokens == 3
        assert stats.errors == []

    @pytest.mark.asyncio
    async def test_unreachable_backend(self):
        recorder = RecordingCallbacks()

        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as client:
            controller = StreamSessionController(transport=HttpTransport(client=client))
            session = await controller.stream(StreamRequest(prompt="hi"), recorder.as_callbacks())

        assert recorder.names == ["error"]
        assert "Could not connect to server" in recorder.of("error")[0]
        assert session.status == SessionStatus.FAILED
