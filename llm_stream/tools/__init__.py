"""Tool execution lifecycle tracking."""

from .tracker import ToolExecutionTracker

__all__ = ["ToolExecutionTracker"]
