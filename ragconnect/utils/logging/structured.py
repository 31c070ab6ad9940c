"""
Structured event logging with a human-readable development formatter.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional


class StructuredLogger:
    """
    Logger that emits named events carrying a dictionary of structured data.

    The data is attached to the log record as ``structured_data`` so that
    formatters can render it, and correlation/operation context is injected
    automatically.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def event(
        self,
        event_name: str,
        data: Optional[Dict[str, Any]] = None,
        level: int = logging.INFO,
    ):
        """
        Log a structured event with optional data.

        Args:
            event_name: Name of the event (e.g., 'gemini_session_created')
            data: Dictionary of structured data to include
            level: Log level (defaults to INFO)
        """
        if not self.logger.isEnabledFor(level):
            return

        from .context import get_correlation_id, get_operation_context

        structured_data = {
            "event": event_name,
            "correlation_id": get_correlation_id(),
        }

        operation_context = get_operation_context()
        if operation_context:
            structured_data.update(operation_context)

        if data:
            structured_data.update(data)

        record = self.logger.makeRecord(
            self.logger.name, level, "(structured)", 0, event_name, (), None
        )
        record.structured_data = structured_data

        self.logger.handle(record)


_global_logger: Optional[StructuredLogger] = None


def get_structured_logger(name: str = "ragconnect") -> StructuredLogger:
    """Get or create the package-wide structured logger."""
    global _global_logger
    if _global_logger is None:
        _global_logger = StructuredLogger(name)
    return _global_logger


def log_event(
    event_name: str, data: Optional[Dict[str, Any]] = None, level: int = logging.INFO
):
    """
    Convenience function for logging structured events.

    Example::

        log_event("gemini_chat_completed", {
            "model": "gemini-pro",
            "tool_calls": 2,
        })
    """
    get_structured_logger().event(event_name, data, level)


def create_development_formatter() -> logging.Formatter:
    """
    Create a human-readable formatter for development environments.

    Structured events are rendered as ``HH:MM:SS.mmm | LEVEL | message`` where
    the message depends on the event type; plain records fall back to their
    formatted message.
    """

    class DevelopmentFormatter(logging.Formatter):
        def format(self, record: logging.LogRecord) -> str:
            timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[
                :-3
            ]

            data: Optional[dict] = getattr(record, "structured_data", None)

            if not data:
                return f"{timestamp} | {record.levelname:5} | {record.getMessage()}"

            event = data.get("event", "")
            operation = data.get("operation", "")

            if event == "operation_started":
                message_content = f"🚀 {operation or 'operation'} started"
            elif event == "operation_completed":
                message_content = self._format_operation_success(data, operation)
            elif event == "operation_failed":
                message_content = self._format_operation_error(data, operation)
            else:
                message_content = self._format_generic_event(data, event)

            return f"{timestamp} | {record.levelname:5} | {message_content}"

        def _format_duration(self, duration_ms: int) -> str:
            if duration_ms >= 1000:
                return f"{duration_ms/1000:.1f}s"
            return f"{duration_ms}ms"

        def _format_operation_success(self, data: dict, operation: str) -> str:
            duration_ms = data.get("duration_ms", 0)

            if duration_ms < 50:
                duration_emoji = "⚡"
            elif duration_ms > 2000:
                duration_emoji = "🐌"
            else:
                duration_emoji = "⏱️"

            context_parts = []
            if "result_length" in data:
                context_parts.append(f"{data['result_length']} items")
            if "result_keys_count" in data:
                context_parts.append(f"{data['result_keys_count']} keys")
            if isinstance(data.get("result_value"), bool):
                context_parts.append("found" if data["result_value"] else "missing")

            base_message = (
                f"{duration_emoji} {self._format_duration(duration_ms)} {operation}"
            )
            if context_parts:
                return f"{base_message} ({', '.join(context_parts)})"
            return base_message

        def _format_operation_error(self, data: dict, operation: str) -> str:
            duration_ms = data.get("duration_ms", 0)
            error_type = data.get("error_type", "Error")
            error_message = data.get("error_message", "")

            duration_part = ""
            if duration_ms > 0:
                duration_part = f" {self._format_duration(duration_ms)}"

            if len(error_message) > 60:
                error_message = error_message[:57] + "..."

            return (
                f"❌{duration_part} {operation} failed ({error_type}: {error_message})"
            )

        def _format_generic_event(self, data: dict, event: str) -> str:
            if not event:
                return "📝 log_event"

            context = self._get_event_context(data, event)
            return f"📝 {event}: {context}" if context else f"📝 {event}"

        def _get_event_context(self, data: dict, event: str) -> str:
            if event.startswith("gemini_") and "model" in data:
                parts = [str(data["model"])]
                if data.get("tool_calls"):
                    parts.append(f"{data['tool_calls']} tool calls")
                if "status" in data:
                    parts.append(f"HTTP {data['status']}")
                return ", ".join(parts)
            if event == "context_injected":
                return f"{data.get('context_length', 0)} chars"
            if event.startswith("cosmos_"):
                return f"{data.get('db_name', '?')}.{data.get('collection_name', '?')}"
            if "error" in data:
                return str(data["error"])[:100]
            return ""

    return DevelopmentFormatter()
