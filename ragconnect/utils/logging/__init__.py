"""
Structured logging for ragconnect.

One decorator (``track``) for operation lifecycles and one function
(``log_event``) for ad-hoc events.
"""

from .context import (
    get_correlation_id,
    get_operation_context,
    operation_context,
    set_correlation_id,
)
from .smart_logger import track
from .structured import StructuredLogger, create_development_formatter, log_event

__all__ = [
    "track",
    "log_event",
    "get_correlation_id",
    "set_correlation_id",
    "get_operation_context",
    "operation_context",
    "StructuredLogger",
    "create_development_formatter",
]
