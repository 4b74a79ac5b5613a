"""
Stream session controller.

Owns one logical request/response exchange per session: opens the
transport, feeds chunks through the frame assembler and payload decoder,
keeps the tool execution tracker current and invokes the caller's
callbacks in frame order.
"""

import asyncio
import time
from typing import Any, AsyncIterator, Dict, Optional, Union

from ..errors import SessionStateError
from ..models.events import (
    StreamEndedEvent,
    StreamEvent,
    StreamFailedEvent,
    StreamStartedEvent,
    TokenEvent,
    ToolCallRequestedEvent,
    ToolResultReceivedEvent,
)
from ..models.frames import Frame
from ..models.request import StreamRequest
from ..models.streaming import StreamingOptions
from ..observability.logging import StreamLogger
from ..reliability.error_classifier import ErrorClassifier
from ..streaming.manager import Callback, CallbackManager, StreamingCallbacks
from ..transport.base import Transport
from ..transport.http import HttpTransport
from .state import SessionStatus, StreamSession

CallbacksLike = Union[StreamingCallbacks, Dict[str, Callback], None]
RequestLike = Union[StreamRequest, Dict[str, Any], str]

_END_OF_STREAM = object()


class CancelHandle:
    """Cancels a running session and waits for it to finish."""

    def __init__(self, session: StreamSession, callbacks: CallbackManager):
        self.session = session
        self._callbacks = callbacks
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def cancel(self) -> None:
        """
        Abort the session.

        Suppresses every further callback, fails active tool executions and
        signals the transport to stop. A second call does nothing.
        """
        if self._cancelled:
            return
        self._cancelled = True
        self._callbacks.suppress()
        if not self.session.is_terminal:
            self.session.status = SessionStatus.ABORTED
        # The tracker's abort hook sets the session's abort signal
        self.session.tracker.abort_all()

    async def wait(self) -> StreamSession:
        """Wait for the session to reach a terminal status and return it."""
        if self._task is None:
            raise SessionStateError(f"Session {self.session.id} was never started")
        await self._task
        return self.session


class StreamSessionController:
    """Runs streaming sessions against a transport."""

    def __init__(
        self,
        transport: Optional[Transport] = None,
        options: Optional[StreamingOptions] = None,
    ):
        """
        Initialize the controller.

        Args:
            transport: Transport to open streams with (httpx by default)
            options: Streaming options (defaults when omitted)
        """
        self.options = options or StreamingOptions()
        self.transport = transport or HttpTransport(timeout=self.options.timeout)
        self.logger = StreamLogger("session")

    def start(self, request: RequestLike, callbacks: CallbacksLike = None) -> CancelHandle:
        """
        Start streaming a request in a new task.

        Must be called from within a running event loop.

        Args:
            request: The request to stream (a bare string is used as the prompt)
            callbacks: Any subset of on_start, on_token, on_tool_call,
                on_tool_result, on_error and on_end

        Returns:
            CancelHandle for the new session
        """
        request = self._coerce_request(request)
        session = self._new_session()
        manager = CallbackManager(callbacks)
        session.callback_errors = manager.errors

        handle = CancelHandle(session, manager)
        handle._task = asyncio.create_task(self._run(session, request, manager))
        return handle

    async def stream(self, request: RequestLike, callbacks: CallbacksLike = None) -> StreamSession:
        """Stream a request to completion and return the finished session."""
        return await self.start(request, callbacks).wait()

    @staticmethod
    def _coerce_request(request: RequestLike) -> StreamRequest:
        if isinstance(request, StreamRequest):
            return request
        if isinstance(request, str):
            return StreamRequest(prompt=request)
        return StreamRequest(**request)

    @staticmethod
    def _new_session() -> StreamSession:
        session = StreamSession()
        session.tracker.on_abort = session.abort_signal.set
        return session

    async def _run(self, session: StreamSession, request: StreamRequest,
                   callbacks: CallbackManager) -> None:
        url = self.options.stream_url()
        start_time = time.time()

        with self.logger.track_session(url, session_id=session.id) as metadata:
            try:
                await self._pump(session, request, callbacks, url)
            except Exception as e:
                if session.is_terminal:
                    # Aborted while the read was failing; nothing to report
                    self.logger.debug(
                        "Ignoring transport error after termination",
                        session_id=session.id,
                        status=session.status.value,
                        error_type=type(e).__name__,
                    )
                else:
                    self.logger.error("Transport failure", session_id=session.id, error=e)
                    await self._handle_event(
                        session, callbacks, StreamFailedEvent(message=ErrorClassifier.describe(e))
                    )
            metadata['status'] = session.status.value

        if self.options.log_streaming_metrics:
            self.logger.log_streaming_metrics(
                session_id=session.id,
                frames=session.frames_processed,
                tokens=session.token_count,
                total_chars=len(session.accumulated_text),
                duration=time.time() - start_time,
                tool_executions=len(session.tracker.history),
            )

    async def _pump(self, session: StreamSession, request: StreamRequest,
                    callbacks: CallbackManager, url: str) -> None:
        chunks = self.transport.open(
            url,
            method="POST",
            headers=self.options.request_headers(),
            body=request.to_body(),
            signal=session.abort_signal,
            params=request.query_params(),
        ).__aiter__()
        if not session.is_terminal:
            session.status = SessionStatus.OPEN

        try:
            while not session.is_terminal:
                chunk = await self._next_chunk(chunks, session.abort_signal)
                if chunk is _END_OF_STREAM:
                    break
                for frame in session.assembler.feed(chunk):
                    await self._process_frame(session, callbacks, frame)
                    if session.is_terminal:
                        break

            if not session.is_terminal:
                for frame in session.assembler.flush():
                    await self._process_frame(session, callbacks, frame)
                    if session.is_terminal:
                        break

            if not session.is_terminal:
                self.logger.debug("Stream closed without an end frame", session_id=session.id)
                await self._handle_event(session, callbacks, StreamEndedEvent(meta={}))
        finally:
            await self._close(chunks, session)

    async def _next_chunk(self, chunks: AsyncIterator[str], signal: asyncio.Event) -> Any:
        """Read the next chunk, giving up as soon as the abort signal is set."""
        if signal.is_set():
            return _END_OF_STREAM

        read = asyncio.ensure_future(chunks.__anext__())
        aborted = asyncio.ensure_future(signal.wait())
        try:
            done, _ = await asyncio.wait({read, aborted}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            aborted.cancel()

        if read in done:
            try:
                return read.result()
            except StopAsyncIteration:
                return _END_OF_STREAM

        read.cancel()
        try:
            await read
        except (asyncio.CancelledError, StopAsyncIteration):
            pass
        except Exception as e:
            self.logger.debug(f"Read failed during abort: {type(e).__name__}: {e}")
        return _END_OF_STREAM

    async def _close(self, chunks: AsyncIterator[str], session: StreamSession) -> None:
        aclose = getattr(chunks, "aclose", None)
        if aclose is None:
            return
        try:
            await aclose()
        except Exception as e:
            self.logger.debug(
                "Error while closing transport",
                session_id=session.id,
                error_type=type(e).__name__,
            )

    async def _process_frame(self, session: StreamSession, callbacks: CallbackManager,
                             frame: Frame) -> None:
        session.frames_processed += 1
        if self.options.capture_raw_frames:
            self.logger.log_frame(session.id, frame)

        for event in session.decoder.decode(frame):
            if session.is_terminal:
                break
            try:
                await self._handle_event(session, callbacks, event)
            except Exception:
                # One bad frame never ends the session
                self.logger.logger.exception(
                    f"Failed to handle {event.type} event in session {session.id}"
                )

    async def _handle_event(self, session: StreamSession, callbacks: CallbackManager,
                            event: StreamEvent) -> None:
        if session.is_terminal:
            return

        if isinstance(event, StreamStartedEvent):
            session.status = SessionStatus.OPEN
            await callbacks.emit_start(event.meta)

        elif isinstance(event, TokenEvent):
            session.accumulated_text += event.text
            session.token_count += 1
            await callbacks.emit_token(event.text)

        elif isinstance(event, ToolCallRequestedEvent):
            session.tracker.track_tool_call(event.tool_call)
            await callbacks.emit_tool_call(event.tool_call)

        elif isinstance(event, ToolResultReceivedEvent):
            result = event.tool_result
            known = session.tracker.find_execution(result.tool_call_id) if result.tool_call_id else None
            if known is not None and known.status.is_terminal:
                # Execution already finished; the result is still delivered
                self.logger.debug(
                    "Result for finished tool execution leaves tracker unchanged",
                    session_id=session.id,
                    tool_call_id=result.tool_call_id,
                )
            else:
                session.tracker.complete_from_result(result)
            await callbacks.emit_tool_result(result)

        elif isinstance(event, StreamEndedEvent):
            session.status = SessionStatus.ENDED
            session.end_meta = event.meta
            session.abort_signal.set()
            await callbacks.emit_end(event.meta)

        elif isinstance(event, StreamFailedEvent):
            session.status = SessionStatus.FAILED
            session.error_message = event.message
            session.abort_signal.set()
            self.logger.warning(f"Stream failed: {event.message}", session_id=session.id)
            await callbacks.emit_error(event.message)
