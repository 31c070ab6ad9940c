"""
Single-decorator operation tracking.

``@track`` emits start/completion/failure events with timing, sanitized
arguments and a summary of the result for sync functions, coroutines and
async generators alike.
"""

import asyncio
import functools
import inspect
import logging
import time
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union, cast

from .context import get_correlation_id
from .structured import log_event

F = TypeVar("F", bound=Callable[..., Any])


class LogConfig:
    """Global configuration for smart logging."""

    SENSITIVE_KEYS = {"password", "token", "secret", "key", "auth", "connection"}
    LARGE_CONTENT_KEYS = {"content", "text", "prompt", "message", "body"}
    MAX_ARG_LENGTH = 100


def track(
    operation: Optional[str] = None,
    level: int = logging.INFO,
    include_args: Union[bool, List[str]] = True,
    include_result: bool = True,
    track_performance: bool = True,
    emit_events: bool = True,
):
    """
    Decorator that logs an operation's lifecycle.

    Args:
        operation: Operation name (derived from the function if None)
        level: Log level for this operation
        include_args: True for all keyword args, a list for specific ones, False for none
        include_result: Whether to log return value info
        track_performance: Whether to track timing metrics
        emit_events: Whether to emit events at all (False only logs nothing)

    Examples:
        @track()
        @track(operation="gemini_chat", include_args=["stream"])
        @track(level=logging.DEBUG, include_result=False)
    """

    def decorator(func: F) -> F:
        op_name = operation or _get_operation_name(func)

        def _tracker(args: tuple, kwargs: dict) -> "BaseOperationTracker":
            return BaseOperationTracker(
                operation=op_name,
                level=level,
                include_args=include_args,
                include_result=include_result,
                track_performance=track_performance,
                emit_events=emit_events,
                args=args,
                kwargs=kwargs,
            )

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            tracker = _tracker(args, kwargs)
            tracker.on_enter()
            try:
                result = await func(*args, **kwargs)
                tracker.set_result(result)
                tracker.on_exit(None, None, None)
                return result
            except Exception as e:
                tracker.on_exit(type(e), e, None)
                raise

        @functools.wraps(func)
        async def async_gen_wrapper(*args, **kwargs):
            tracker = _tracker(args, kwargs)
            tracker.on_enter()
            chunks = 0
            try:
                async for item in func(*args, **kwargs):
                    chunks += 1
                    yield item
            except Exception as e:
                tracker.add_metric("chunks", chunks)
                tracker.on_exit(type(e), e, None)
                raise
            tracker.add_metric("chunks", chunks)
            tracker.on_exit(None, None, None)

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            tracker = _tracker(args, kwargs)
            tracker.on_enter()
            try:
                result = func(*args, **kwargs)
                tracker.set_result(result)
                tracker.on_exit(None, None, None)
                return result
            except Exception as e:
                tracker.on_exit(type(e), e, None)
                raise

        if inspect.isasyncgenfunction(func):
            return cast(F, async_gen_wrapper)
        if asyncio.iscoroutinefunction(func):
            return cast(F, async_wrapper)
        return cast(F, sync_wrapper)

    return decorator


class BaseOperationTracker:
    """Holds the state of one tracked operation and emits its events."""

    def __init__(
        self,
        operation: str,
        level: int,
        include_args: Union[bool, List[str]],
        include_result: bool,
        track_performance: bool,
        emit_events: bool,
        args: tuple,
        kwargs: dict,
    ):
        self.operation = operation
        self.level = level
        self.include_args = include_args
        self.include_result = include_result
        self.track_performance = track_performance
        self.emit_events = emit_events
        self.args = args
        self.kwargs = kwargs

        self.start_time: Optional[float] = None
        self.correlation_id: Optional[str] = None
        self.result: Any = None
        self.metrics: Dict[str, Any] = {}

    def on_enter(self) -> None:
        if self.track_performance:
            self.start_time = time.perf_counter()

        self.correlation_id = get_correlation_id()

        if self.emit_events and self.level <= logging.INFO:
            log_event("operation_started", self._build_start_context(), self.level)

    def on_exit(
        self, exc_type: Optional[type], exc_val: Optional[BaseException], exc_tb: Any
    ) -> None:
        if self.track_performance and self.start_time:
            duration_ms = int((time.perf_counter() - self.start_time) * 1000)
            self.metrics["duration_ms"] = duration_ms

        if self.emit_events:
            event_name = (
                "operation_completed" if exc_type is None else "operation_failed"
            )
            event_level = self.level if exc_type is None else logging.ERROR
            log_event(
                event_name, self._build_exit_context(exc_type, exc_val), event_level
            )

    def set_result(self, result: Any) -> None:
        self.result = result

    def add_metric(self, key: str, value: Any) -> None:
        self.metrics[key] = value

    def _build_start_context(self) -> Dict[str, Any]:
        context = {
            "operation": self.operation,
            "correlation_id": self.correlation_id,
        }

        if self.include_args:
            context.update(
                _extract_safe_args(self.args, self.kwargs, self.include_args)
            )

        return context

    def _build_exit_context(
        self, exc_type: Optional[type], exc_val: Optional[BaseException]
    ) -> Dict[str, Any]:
        context = {
            "operation": self.operation,
            "correlation_id": self.correlation_id,
            "success": exc_type is None,
            **self.metrics,
        }

        if self.include_result and exc_type is None and self.result is not None:
            context.update(_extract_result_info(self.result))

        if exc_type is not None:
            context.update(
                {
                    "error_type": exc_type.__name__,
                    "error_message": str(exc_val) if exc_val else "",
                }
            )

        return context


def _get_operation_name(func: Callable) -> str:
    if hasattr(func, "__qualname__"):
        return func.__qualname__.replace(".", "_").lower()
    return func.__name__.lower()


def _extract_safe_args(
    args: tuple, kwargs: dict, include_spec: Union[bool, List[str]]
) -> Dict[str, Any]:
    safe_args: Dict[str, Any] = {}

    if include_spec is True:
        include_keys = set(kwargs.keys())
    elif isinstance(include_spec, list):
        include_keys = set(include_spec)
    else:
        return safe_args

    for key, value in kwargs.items():
        if key not in include_keys:
            continue
        safe_args[f"arg_{key}"] = _sanitize_value(key, value)

    return safe_args


def _sanitize_value(key: str, value: Any) -> Any:
    if any(sensitive in key.lower() for sensitive in LogConfig.SENSITIVE_KEYS):
        return "[REDACTED]"

    if key.lower() in LogConfig.LARGE_CONTENT_KEYS and isinstance(value, str):
        if len(value) > LogConfig.MAX_ARG_LENGTH:
            return f"<{len(value)} chars>"
        return value

    if isinstance(value, (str, int, float, bool, type(None))):
        if isinstance(value, str) and len(value) > LogConfig.MAX_ARG_LENGTH:
            return f"{value[:LogConfig.MAX_ARG_LENGTH]}..."
        return value
    if isinstance(value, (list, tuple)):
        return f"<{type(value).__name__} of {len(value)}>"
    return f"<{type(value).__name__}>"


def _extract_result_info(result: Any) -> Dict[str, Any]:
    result_info: Dict[str, Any] = {"result_type": type(result).__name__}

    if isinstance(result, bool):
        result_info["result_value"] = result
    elif isinstance(result, (list, tuple, str)):
        result_info["result_length"] = len(result)
    elif isinstance(result, dict):
        result_info["result_keys_count"] = len(result.keys())

    return result_info
