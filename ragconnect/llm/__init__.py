"""
LLM abstractions and the Gemini provider.
"""

from .base_provider import (
    BaseLLM,
    ChatMessage,
    ChatResponse,
    ChatResponseChunk,
    CompletionResponse,
    LLMMetadata,
    MessageContent,
    MessageRole,
    ToolCall,
    ToolCallLLM,
    ToolResult,
    message_content_to_text,
)
from .exceptions import (
    AuthenticationError,
    LLMProviderError,
    ProviderAPIError,
    ProviderConfigurationError,
    RateLimitError,
    ResponseBlockedError,
)
from .provider_config import (
    GeminiBackend,
    GeminiSessionOptions,
    GoogleGeminiSessionOptions,
    VertexGeminiSessionOptions,
)
from .providers import Gemini, GeminiModel, GeminiSession, GeminiSessionStore, gemini

__all__ = [
    "BaseLLM",
    "ChatMessage",
    "ChatResponse",
    "ChatResponseChunk",
    "CompletionResponse",
    "LLMMetadata",
    "MessageContent",
    "MessageRole",
    "ToolCall",
    "ToolCallLLM",
    "ToolResult",
    "message_content_to_text",
    "AuthenticationError",
    "LLMProviderError",
    "ProviderAPIError",
    "ProviderConfigurationError",
    "RateLimitError",
    "ResponseBlockedError",
    "GeminiBackend",
    "GeminiSessionOptions",
    "GoogleGeminiSessionOptions",
    "VertexGeminiSessionOptions",
    "Gemini",
    "GeminiModel",
    "GeminiSession",
    "GeminiSessionStore",
    "gemini",
]
