"""
Tool execution tracking.

A small state machine per execution id::

    pending --> running --> completed | error

Executions live in the active collection until they reach a terminal
status, then move to history exactly once. Nothing leaves a terminal
status again.
"""

from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Union
import logging

from ..config.constants import EXECUTION_ABORTED
from ..models.tools import ToolCall, ToolExecution, ToolExecutionStatus, ToolResult

logger = logging.getLogger(__name__)


class ToolExecutionTracker:
    """Tracks the lifecycle of tool executions triggered mid-stream."""

    def __init__(self, on_abort: Optional[Callable[[], None]] = None):
        """
        Initialize an empty tracker.

        Args:
            on_abort: Called by abort_all() after active executions were
                failed; the session controller uses it to abort the transport
        """
        self._active: Dict[str, ToolExecution] = {}
        self._history: List[ToolExecution] = []
        self.on_abort = on_abort

    @property
    def active_executions(self) -> List[ToolExecution]:
        return list(self._active.values())

    @property
    def history(self) -> List[ToolExecution]:
        return list(self._history)

    @property
    def has_active_executions(self) -> bool:
        return bool(self._active)

    @property
    def running_executions(self) -> List[ToolExecution]:
        return [e for e in self._active.values() if e.status == ToolExecutionStatus.RUNNING]

    @property
    def completed_executions(self) -> List[ToolExecution]:
        return [e for e in self._history if e.status == ToolExecutionStatus.COMPLETED]

    @property
    def failed_executions(self) -> List[ToolExecution]:
        return [e for e in self._history if e.status == ToolExecutionStatus.ERROR]

    def start_execution(self, tool_call: ToolCall) -> ToolExecution:
        """
        Start tracking a tool call in ``pending`` status.

        A tool call whose id is already tracked is not registered twice; the
        existing execution is returned instead.
        """
        existing = self.find_execution(tool_call.id)
        if existing is not None:
            logger.warning(f"Tool call {tool_call.id} already tracked (status={existing.status.value})")
            return existing

        execution = ToolExecution(id=tool_call.id, tool_call=tool_call)
        self._active[execution.id] = execution
        logger.debug(f"Started tool execution {execution.id} ({execution.function_name})")
        return execution

    def track_tool_call(self, tool_call: ToolCall) -> ToolExecution:
        """Register a requested tool call and move it straight to ``running``."""
        execution = self.start_execution(tool_call)
        if execution.status == ToolExecutionStatus.PENDING:
            self.update_status(execution.id, ToolExecutionStatus.RUNNING)
        return execution

    def update_status(
        self,
        execution_id: str,
        status: Union[ToolExecutionStatus, str],
        result: object = None,
        error: Optional[str] = None,
        progress: Optional[float] = None,
    ) -> Optional[ToolExecution]:
        """
        Update an active execution.

        Terminal statuses set ``ended_at`` and move the execution to history.

        Returns:
            The updated execution, or None if no active execution has this id
        """
        status = ToolExecutionStatus(status)
        execution = self._active.get(execution_id)
        if execution is None:
            if any(e.id == execution_id for e in self._history):
                logger.warning(
                    f"Ignoring {status.value} for tool execution {execution_id}: already finished"
                )
            else:
                logger.warning(f"Ignoring {status.value} for unknown tool execution {execution_id}")
            return None

        execution.status = status
        if result is not None:
            execution.result = result
        if error:
            execution.error = error
        if progress is not None:
            execution.progress = progress

        if status.is_terminal:
            execution.ended_at = datetime.now(timezone.utc)
            del self._active[execution_id]
            self._history.append(execution)

        logger.debug(f"Tool execution {execution_id} -> {status.value}")
        return execution

    def match_result(self, tool_result: ToolResult) -> Optional[ToolExecution]:
        """
        Find the active execution a result belongs to.

        Matches by tool call id when the result has one, otherwise by function
        name against active executions in the order they started.
        """
        if tool_result.tool_call_id:
            return self._active.get(tool_result.tool_call_id)
        if tool_result.function_name:
            for execution in self._active.values():
                if execution.function_name == tool_result.function_name:
                    return execution
        return None

    def complete_from_result(self, tool_result: ToolResult) -> Optional[ToolExecution]:
        """Finish the matching execution as ``completed`` (or ``error`` for failed results)."""
        execution = self.match_result(tool_result)
        if execution is None:
            logger.warning(
                f"No active tool execution for result "
                f"(tool_call_id={tool_result.tool_call_id}, function_name={tool_result.function_name})"
            )
            return None

        if tool_result.is_error:
            return self.update_status(
                execution.id, ToolExecutionStatus.ERROR,
                result=tool_result.result, error=tool_result.error,
            )
        return self.update_status(execution.id, ToolExecutionStatus.COMPLETED, result=tool_result.result)

    def abort_all(self, message: str = EXECUTION_ABORTED) -> List[ToolExecution]:
        """
        Fail every pending or running execution, then signal the abort hook.

        Returns:
            The executions that were aborted
        """
        aborted = []
        for execution in list(self._active.values()):
            if execution.status in (ToolExecutionStatus.PENDING, ToolExecutionStatus.RUNNING):
                updated = self.update_status(execution.id, ToolExecutionStatus.ERROR, error=message)
                if updated is not None:
                    aborted.append(updated)

        if aborted:
            logger.info(f"Aborted {len(aborted)} active tool execution(s)")
        if self.on_abort:
            self.on_abort()
        return aborted

    def find_execution(self, execution_id: str) -> Optional[ToolExecution]:
        """Look up an execution by id, active first, then history."""
        execution = self._active.get(execution_id)
        if execution is not None:
            return execution
        return next((e for e in self._history if e.id == execution_id), None)

    def find_by_tool_call(self, tool_call_id: str) -> Optional[ToolExecution]:
        """Look up an execution by its tool call id, active first, then history."""
        for execution in list(self._active.values()) + self._history:
            if execution.tool_call.id == tool_call_id:
                return execution
        return None

    def clear_history(self) -> None:
        """Drop all tracked executions, active and finished."""
        self._active.clear()
        self._history.clear()
