"""CLI entry point for LLM Stream."""

import argparse
import asyncio
import json
import sys
from typing import List, Optional, TextIO

from .models.request import StreamRequest
from .models.streaming import StreamingOptions
from .models.tools import ToolCall, ToolResult
from .observability.logging import configure_logging
from .session.controller import StreamSessionController
from .session.state import SessionStatus
from .streaming.assembler import FrameAssembler
from .streaming.decoder import PayloadDecoder
from .streaming.manager import StreamingCallbacks


async def stream_prompt(prompt: str, provider: str, model: Optional[str] = None,
                        url: Optional[str] = None, no_cache: bool = False,
                        verbose: bool = False) -> int:
    """Stream a prompt, writing tokens to stdout and everything else to stderr."""
    options = StreamingOptions.from_env(
        api_base_url=url,
        log_streaming_metrics=verbose,
        capture_raw_frames=verbose,
    )
    controller = StreamSessionController(options=options)
    request = StreamRequest(prompt=prompt, provider=provider, model=model, disable_cache=no_cache)

    def on_tool_call(tool_call: ToolCall):
        print(f"\n[tool call] {tool_call.function_name}({tool_call.arguments_json})", file=sys.stderr)

    def on_tool_result(result: ToolResult):
        status = "error" if result.is_error else "ok"
        print(f"\n[tool result] {result.function_name or result.tool_call_id} {status}: "
              f"{json.dumps(result.result, default=str)}", file=sys.stderr)

    def on_error(message: str):
        print(f"\nError: {message}", file=sys.stderr)

    callbacks = StreamingCallbacks(
        on_token=lambda text: print(text, end='', flush=True),
        on_tool_call=on_tool_call,
        on_tool_result=on_tool_result,
        on_error=on_error,
        on_end=lambda meta: print(),
    )

    session = await controller.stream(request, callbacks)
    return 0 if session.status == SessionStatus.ENDED else 1


def decode_stream(source: TextIO, out: TextIO) -> int:
    """Decode a captured stream body, printing one JSON line per event."""
    assembler = FrameAssembler()
    decoder = PayloadDecoder()

    frames = assembler.feed(source.read())
    frames.extend(assembler.flush())

    count = 0
    for frame in frames:
        for event in decoder.decode(frame):
            out.write(json.dumps(event.to_dict(), default=str) + "\n")
            count += 1
    return 0 if count else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function."""
    parser = argparse.ArgumentParser(description="LLM Stream CLI")
    parser.add_argument('--log-level', default='WARNING', help='Logging level (e.g. DEBUG)')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Stream command
    stream_parser = subparsers.add_parser('stream', help='Stream a prompt from the backend')
    stream_parser.add_argument('prompt', help='Text prompt')
    stream_parser.add_argument('--provider', default='openai', help='Backend provider name')
    stream_parser.add_argument('--model', help='Model identifier')
    stream_parser.add_argument('--url', help='Backend base URL (overrides LLM_STREAM_API_BASE_URL)')
    stream_parser.add_argument('--no-cache', action='store_true', help='Bypass the backend cache')
    stream_parser.add_argument('--verbose', '-v', action='store_true',
                               help='Log frames and streaming metrics')

    # Decode command
    decode_parser = subparsers.add_parser('decode', help='Decode a captured stream body')
    decode_parser.add_argument('file', help='File to decode, or - for stdin')

    args = parser.parse_args(argv)
    configure_logging('DEBUG' if getattr(args, 'verbose', False) else args.log_level)

    if args.command == 'stream':
        return asyncio.run(stream_prompt(
            args.prompt,
            args.provider,
            args.model,
            args.url,
            args.no_cache,
            args.verbose,
        ))
    elif args.command == 'decode':
        if args.file == '-':
            return decode_stream(sys.stdin, sys.stdout)
        with open(args.file, 'r', encoding='utf-8') as fh:
            return decode_stream(fh, sys.stdout)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
