"""
Typed session options for the Gemini backends.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from .constants import ProtocolScheme, ProviderDefaults, ValidationMessages


class GeminiBackend(str, Enum):
    """Where Gemini requests are served from."""

    GOOGLE = "google"
    VERTEX = "vertex"


@dataclass(frozen=True)
class BaseSessionOptions:
    """
    Base options for all session backends. Instances are immutable.
    """

    def _validate_timeout(self, timeout: int) -> None:
        if timeout <= 0:
            raise ValueError(ValidationMessages.TIMEOUT_POSITIVE)

    def _validate_base_url(self, base_url: str) -> None:
        if not base_url:
            raise ValueError(ValidationMessages.BASE_URL_EMPTY)

        if not base_url.startswith(
            (ProtocolScheme.HTTP.value, ProtocolScheme.HTTPS.value)
        ):
            raise ValueError(ValidationMessages.BASE_URL_PROTOCOL)


@dataclass(frozen=True)
class GoogleGeminiSessionOptions(BaseSessionOptions):
    """
    Options for the Google AI (API key) backend.

    Attributes:
        api_key: Google AI API key; read from GOOGLE_API_KEY when omitted
        base_url: REST endpoint
        timeout_seconds: Total timeout per request
    """

    api_key: Optional[str] = None
    base_url: str = ProviderDefaults.GEMINI_BASE_URL
    timeout_seconds: int = ProviderDefaults.GEMINI_TIMEOUT
    backend: GeminiBackend = GeminiBackend.GOOGLE

    def __post_init__(self):
        self._validate_timeout(self.timeout_seconds)
        self._validate_base_url(self.base_url)

    def with_api_key(self, api_key: Optional[str]) -> "GoogleGeminiSessionOptions":
        return replace(self, api_key=api_key)


@dataclass(frozen=True)
class VertexGeminiSessionOptions(BaseSessionOptions):
    """
    Options for the Vertex AI backend.

    Vertex sessions are not built here; one must be registered with
    ``GeminiSessionStore.add`` before it can be looked up.
    """

    project: Optional[str] = None
    location: Optional[str] = None
    backend: GeminiBackend = GeminiBackend.VERTEX


GeminiSessionOptions = Union[GoogleGeminiSessionOptions, VertexGeminiSessionOptions]
