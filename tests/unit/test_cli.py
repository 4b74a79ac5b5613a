"""Unit tests for the command-line interface."""

import io
import json

import pytest

from llm_stream import cli
from llm_stream.session.state import SessionStatus, StreamSession


CAPTURED_BODY = (
    "event: start\ndata: {}\n\n"
    "data: {\"content\":\"Hi\"}\n\n"
    "event: end\ndata: {\"done\":true}\n\n"
)


@pytest.mark.unit
class TestDecodeCommand:
    """Test decoding captured stream bodies."""

    def test_decode_stream_prints_json_lines(self):
        out = io.StringIO()

        assert cli.decode_stream(io.StringIO(CAPTURED_BODY), out) == 0

        events = [json.loads(line) for line in out.getvalue().splitlines()]
        assert [e["type"] for e in events] == ["started", "token", "ended"]
        assert events[1]["text"] == "Hi"

    def test_decode_empty_input_fails(self):
        assert cli.decode_stream(io.StringIO(""), io.StringIO()) == 1

    def test_decode_file(self, tmp_path, capsys):
        path = tmp_path / "body.txt"
        path.write_text(CAPTURED_BODY, encoding="utf-8")

        assert cli.main(["decode", str(path)]) == 0
        assert '"type": "token"' in capsys.readouterr().out

    def test_decode_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("plain text\n"))

        assert cli.main(["decode", "-"]) == 0
        assert json.loads(capsys.readouterr().out)["text"] == "plain text"


@pytest.mark.unit
class TestStreamCommand:
    """Test the stream command wiring."""

    def test_stream_uses_options_and_request(self, monkeypatch):
        captured = {}

        async def fake_stream(self, request, callbacks=None):
            captured["url"] = self.options.stream_url()
            captured["request"] = request
            callbacks.on_token("Hello")
            return StreamSession(status=SessionStatus.ENDED)

        monkeypatch.setattr(cli.StreamSessionController, "stream", fake_stream)

        exit_code = cli.main([
            "stream", "Hi there", "--provider", "anthropic", "--model", "claude",
            "--url", "http://backend.test", "--no-cache",
        ])

        assert exit_code == 0
        assert captured["url"] == "http://backend.test/llm/stream"
        assert captured["request"].provider == "anthropic"
        assert captured["request"].model == "claude"
        assert captured["request"].disable_cache is True

    def test_stream_failure_exit_code(self, monkeypatch):
        async def fake_stream(self, request, callbacks=None):
            callbacks.on_error("HTTP error! status: 500")
            return StreamSession(status=SessionStatus.FAILED)

        monkeypatch.setattr(cli.StreamSessionController, "stream", fake_stream)

        assert cli.main(["stream", "Hi"]) == 1

    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 0
        assert "stream" in capsys.readouterr().out
