"""
Structured exception hierarchy for LLM providers.

Every error carries the provider id and, where known, the model, so callers
can log or surface it without inspecting provider-specific payloads.
"""

from typing import Any, Dict, Optional


class LLMProviderError(Exception):
    """
    Base exception for all LLM provider errors.

    Attributes:
        message: Human-readable error message
        provider_id: Identifier of the provider that raised the error
        model: Model identifier (if applicable)
        error_type: Categorization of error type
        retryable: Whether the operation can be retried
        metadata: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        provider_id: str,
        model: Optional[str] = None,
        error_type: str = "unknown",
        retryable: bool = False,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider_id = provider_id
        self.model = model
        self.error_type = error_type
        self.retryable = retryable
        self.metadata = metadata or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error": self.message,
            "error_type": self.error_type,
            "provider_id": self.provider_id,
            "model": self.model,
            "retryable": self.retryable,
            "metadata": self.metadata,
        }

    def __str__(self) -> str:
        parts = [self.message]
        if self.provider_id:
            parts.append(f"(provider: {self.provider_id})")
        if self.model:
            parts.append(f"(model: {self.model})")
        return " ".join(parts)


class ProviderAPIError(LLMProviderError):
    """
    Error from provider API with HTTP context.

    Attributes:
        status_code: HTTP status code
        response_body: Raw response body from API
    """

    def __init__(
        self,
        message: str,
        provider_id: str,
        status_code: int,
        response_body: str,
        model: Optional[str] = None,
        retryable: bool = False,
    ):
        metadata = {
            "status_code": status_code,
            "response_body": response_body[:1000],
        }

        super().__init__(
            message=message,
            provider_id=provider_id,
            model=model,
            error_type=self._categorize_status_code(status_code),
            retryable=retryable,
            metadata=metadata,
        )

        self.status_code = status_code
        self.response_body = response_body

    @staticmethod
    def _categorize_status_code(status_code: int) -> str:
        if status_code == 400:
            return "invalid_request"
        elif status_code == 401:
            return "authentication_error"
        elif status_code == 403:
            return "permission_denied"
        elif status_code == 404:
            return "not_found"
        elif status_code == 429:
            return "rate_limit_exceeded"
        elif 500 <= status_code < 600:
            return "server_error"
        else:
            return "api_error"


class AuthenticationError(ProviderAPIError):
    """Invalid, expired or under-privileged API key."""

    USER_MESSAGE = "Invalid API key. Please check your provider configuration."

    def __init__(
        self,
        message: str,
        provider_id: str,
        status_code: int,
        response_body: str,
        model: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            provider_id=provider_id,
            status_code=status_code,
            response_body=response_body,
            model=model,
            retryable=False,
        )

    def get_user_message(self) -> str:
        return self.USER_MESSAGE


class RateLimitError(ProviderAPIError):
    """
    Rate limit or quota exceeded.

    Attributes:
        retry_after: Seconds to wait before retrying (if provided by API)
    """

    USER_MESSAGE = "Rate limit exceeded. Please wait a moment and try again."

    def __init__(
        self,
        message: str,
        provider_id: str,
        status_code: int,
        response_body: str,
        model: Optional[str] = None,
        retry_after: Optional[int] = None,
    ):
        super().__init__(
            message=message,
            provider_id=provider_id,
            status_code=status_code,
            response_body=response_body,
            model=model,
            retryable=True,
        )

        self.retry_after = retry_after
        if retry_after:
            self.metadata["retry_after"] = retry_after

    def get_user_message(self) -> str:
        if self.retry_after:
            return f"Rate limit exceeded. Please wait {self.retry_after} seconds and try again."
        return self.USER_MESSAGE


class InvalidRequestError(ProviderAPIError):
    """Invalid request parameters or format."""

    def __init__(
        self,
        message: str,
        provider_id: str,
        status_code: int,
        response_body: str,
        model: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            provider_id=provider_id,
            status_code=status_code,
            response_body=response_body,
            model=model,
            retryable=False,
        )


class ModelNotFoundError(ProviderAPIError):
    """Requested model not found or not available."""

    def __init__(
        self,
        message: str,
        provider_id: str,
        status_code: int,
        response_body: str,
        model: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            provider_id=provider_id,
            status_code=status_code,
            response_body=response_body,
            model=model,
            retryable=False,
        )

    def get_user_message(self) -> str:
        return (
            f"Model '{self.model}' is not available. Please select a different model."
        )


class ServerError(ProviderAPIError):
    """Provider server error (5xx status codes), usually transient."""

    USER_MESSAGE = "Provider server error. Please try again in a moment."

    def __init__(
        self,
        message: str,
        provider_id: str,
        status_code: int,
        response_body: str,
        model: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            provider_id=provider_id,
            status_code=status_code,
            response_body=response_body,
            model=model,
            retryable=True,
        )

    def get_user_message(self) -> str:
        return self.USER_MESSAGE


class ResponseBlockedError(LLMProviderError):
    """
    The provider answered but withheld the text.

    Raised when the prompt is blocked outright or the top candidate stopped
    for a safety-related reason.

    Attributes:
        reason: Block reason or finish reason reported by the provider
    """

    def __init__(
        self,
        message: str,
        provider_id: str,
        reason: str,
        model: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            provider_id=provider_id,
            model=model,
            error_type="response_blocked",
            retryable=False,
            metadata={"reason": reason},
        )
        self.reason = reason


class ConnectionError(LLMProviderError):
    """Unable to reach the provider."""

    USER_MESSAGE = "Network error. Please check your connection and try again."

    def __init__(
        self,
        message: str,
        provider_id: str,
        model: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            provider_id=provider_id,
            model=model,
            error_type="connection_error",
            retryable=True,
            metadata={"original_error": str(original_error)} if original_error else {},
        )

        self.original_error = original_error

    def get_user_message(self) -> str:
        return self.USER_MESSAGE


class TimeoutError(LLMProviderError):
    """Request exceeded the configured timeout."""

    def __init__(
        self,
        message: str,
        provider_id: str,
        timeout_seconds: int,
        model: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            provider_id=provider_id,
            model=model,
            error_type="timeout",
            retryable=True,
            metadata={"timeout_seconds": timeout_seconds},
        )

        self.timeout_seconds = timeout_seconds

    def get_user_message(self) -> str:
        return (
            f"Request timed out after {self.timeout_seconds} seconds. Please try again."
        )


class StreamingError(LLMProviderError):
    """
    Error during a streaming response.

    Attributes:
        chunks_received: Number of chunks successfully received before error
    """

    def __init__(
        self,
        message: str,
        provider_id: str,
        model: Optional[str] = None,
        chunks_received: int = 0,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            provider_id=provider_id,
            model=model,
            error_type="streaming_error",
            retryable=False,
            metadata={
                "chunks_received": chunks_received,
                "original_error": str(original_error) if original_error else None,
            },
        )

        self.chunks_received = chunks_received
        self.original_error = original_error


class ProviderConfigurationError(LLMProviderError):
    """
    Provider configuration is invalid or incomplete.

    Raised at construction time, e.g. for a missing API key or an
    unavailable session backend.
    """

    def __init__(
        self,
        message: str,
        provider_id: str,
        config_field: Optional[str] = None,
    ):
        metadata = {"config_field": config_field} if config_field else {}

        super().__init__(
            message=message,
            provider_id=provider_id,
            error_type="configuration_error",
            retryable=False,
            metadata=metadata,
        )

        self.config_field = config_field
