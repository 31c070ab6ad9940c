"""
Custom exceptions for tools, storage and agents.
"""


class RagConnectError(Exception):
    """Base exception for ragconnect errors outside the LLM providers."""

    pass


class ToolError(RagConnectError):
    """Base exception for tool-related errors."""

    pass


class ValidationError(ToolError):
    """Raised when input or output validation fails."""

    pass


class ToolNotFoundError(ToolError):
    """Raised when a requested tool is not found."""

    pass


class ToolExecutionError(ToolError):
    """Raised when tool execution fails."""

    pass


class StorageError(RagConnectError):
    """Raised when storage operations fail."""

    pass


class AgentError(RagConnectError):
    """Raised when an agent cannot finish a chat turn."""

    pass
