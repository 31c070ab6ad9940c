"""
Tools that agents can expose to tool-calling LLMs.
"""

from .base import BaseTool, FunctionTool, ToolMetadata
from .exceptions import (
    AgentError,
    RagConnectError,
    StorageError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
    ValidationError,
)
from .registry import ToolRegistry

__all__ = [
    "BaseTool",
    "FunctionTool",
    "ToolMetadata",
    "ToolRegistry",
    "RagConnectError",
    "ToolError",
    "ValidationError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "StorageError",
    "AgentError",
]
