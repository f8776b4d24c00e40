"""Tool registry and handlers for advisor tool calls."""

from .registry import ToolRegistry, Tool
from .handlers import ToolHandlers

__all__ = ["ToolRegistry", "Tool", "ToolHandlers"]
