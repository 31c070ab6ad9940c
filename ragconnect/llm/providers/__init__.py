"""
Gemini provider: model catalogue, sessions and the tool-calling LLM.
"""

from .gemini_metadata import (
    DEFAULT_SAFETY_SETTINGS,
    GEMINI_MODEL_INFO_MAP,
    SUPPORT_TOOL_CALL_MODELS,
    GeminiModel,
)
from .gemini_provider import Gemini, gemini
from .gemini_session import (
    BaseGeminiSession,
    GeminiGenerativeModel,
    GeminiSession,
    GeminiSessionStore,
)
from .gemini_utils import (
    GeminiChatContext,
    GeminiHelper,
    get_chat_context,
    get_parts_text,
    map_base_tool_to_gemini_function_declaration,
)

__all__ = [
    "DEFAULT_SAFETY_SETTINGS",
    "GEMINI_MODEL_INFO_MAP",
    "SUPPORT_TOOL_CALL_MODELS",
    "GeminiModel",
    "Gemini",
    "gemini",
    "BaseGeminiSession",
    "GeminiGenerativeModel",
    "GeminiSession",
    "GeminiSessionStore",
    "GeminiChatContext",
    "GeminiHelper",
    "get_chat_context",
    "get_parts_text",
    "map_base_tool_to_gemini_function_declaration",
]
