from enum import Enum
from typing import Final


class ProviderDefaults:
    GEMINI_PROVIDER_ID: Final[str] = "gemini"
    GEMINI_BASE_URL: Final[str] = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT: Final[int] = 120
    GEMINI_MAX_CONNECTIONS: Final[int] = 100
    GEMINI_MAX_CONNECTIONS_PER_HOST: Final[int] = 30


class GeminiAction(str, Enum):
    GENERATE_CONTENT = "generateContent"
    STREAM_GENERATE_CONTENT = "streamGenerateContent"


class ProtocolScheme(str, Enum):
    HTTP = "http://"
    HTTPS = "https://"


class ValidationMessages:
    TIMEOUT_POSITIVE: Final[str] = "timeout_seconds must be positive"
    BASE_URL_EMPTY: Final[str] = "base_url cannot be empty"
    BASE_URL_PROTOCOL: Final[str] = "base_url must start with http:// or https://"


class ErrorMessages:
    GOOGLE_API_KEY_MISSING: Final[str] = (
        "Set Google API Key in GOOGLE_API_KEY env variable"
    )
    NO_SESSION: Final[str] = "No Session"
    NO_MESSAGES: Final[str] = "At least one chat message is required"
    EMPTY_LAST_MESSAGE: Final[str] = "The last chat message has no content to send"
    UNSUPPORTED_IMAGE_URL: Final[str] = (
        "Only base64 data URLs are supported for image content, got: {url}"
    )
    UNKNOWN_TOOL_CALL_ID: Final[str] = (
        "Tool result references unknown tool call id '{id}'"
    )
