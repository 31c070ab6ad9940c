"""
Gemini model catalogue and request defaults.
"""

from enum import Enum
from typing import Dict, FrozenSet, List


class GeminiModel(str, Enum):
    """Gemini model identifiers understood by the provider."""

    GEMINI_PRO = "gemini-pro"
    GEMINI_PRO_VISION = "gemini-pro-vision"
    GEMINI_PRO_LATEST = "gemini-1.5-pro-latest"
    GEMINI_PRO_FLASH_LATEST = "gemini-1.5-flash-latest"
    GEMINI_PRO_1_5_PRO_PREVIEW = "gemini-1.5-pro-preview-0514"
    GEMINI_PRO_1_5_FLASH_PREVIEW = "gemini-1.5-flash-preview-0514"
    GEMINI_PRO_1_5 = "gemini-1.5-pro-001"
    GEMINI_PRO_1_5_FLASH = "gemini-1.5-flash-001"
    GEMINI_PRO_1_5_LATEST = "gemini-1.5-pro-002"
    GEMINI_PRO_1_5_FLASH_LATEST = "gemini-1.5-flash-002"
    GEMINI_2_0_FLASH_EXPERIMENTAL = "gemini-2.0-flash-exp"
    GEMINI_2_0_FLASH = "gemini-2.0-flash-001"
    GEMINI_2_0_FLASH_LITE_PREVIEW = "gemini-2.0-flash-lite-preview-02-05"
    GEMINI_2_0_FLASH_LITE = "gemini-2.0-flash-lite-001"
    GEMINI_2_0_FLASH_THINKING_EXP = "gemini-2.0-flash-thinking-exp-01-21"
    GEMINI_2_0_PRO_EXPERIMENTAL = "gemini-2.0-pro-exp-02-05"


GEMINI_MODEL_INFO_MAP: Dict[GeminiModel, Dict[str, int]] = {
    GeminiModel.GEMINI_PRO: {"context_window": 30720},
    GeminiModel.GEMINI_PRO_VISION: {"context_window": 12288},
    GeminiModel.GEMINI_PRO_LATEST: {"context_window": 10**6},
    GeminiModel.GEMINI_PRO_FLASH_LATEST: {"context_window": 10**6},
    GeminiModel.GEMINI_PRO_1_5_PRO_PREVIEW: {"context_window": 10**6},
    GeminiModel.GEMINI_PRO_1_5_FLASH_PREVIEW: {"context_window": 10**6},
    GeminiModel.GEMINI_PRO_1_5: {"context_window": 2 * 10**6},
    GeminiModel.GEMINI_PRO_1_5_FLASH: {"context_window": 10**6},
    GeminiModel.GEMINI_PRO_1_5_LATEST: {"context_window": 2 * 10**6},
    GeminiModel.GEMINI_PRO_1_5_FLASH_LATEST: {"context_window": 10**6},
    GeminiModel.GEMINI_2_0_FLASH_EXPERIMENTAL: {"context_window": 10**6},
    GeminiModel.GEMINI_2_0_FLASH: {"context_window": 10**6},
    GeminiModel.GEMINI_2_0_FLASH_LITE_PREVIEW: {"context_window": 10**6},
    GeminiModel.GEMINI_2_0_FLASH_LITE: {"context_window": 10**6},
    GeminiModel.GEMINI_2_0_FLASH_THINKING_EXP: {"context_window": 32768},
    GeminiModel.GEMINI_2_0_PRO_EXPERIMENTAL: {"context_window": 2 * 10**6},
}

# Flash-lite and the thinking model reject function declarations
SUPPORT_TOOL_CALL_MODELS: FrozenSet[GeminiModel] = frozenset(
    {
        GeminiModel.GEMINI_PRO,
        GeminiModel.GEMINI_PRO_VISION,
        GeminiModel.GEMINI_PRO_1_5_PRO_PREVIEW,
        GeminiModel.GEMINI_PRO_1_5_FLASH_PREVIEW,
        GeminiModel.GEMINI_PRO_1_5,
        GeminiModel.GEMINI_PRO_1_5_FLASH,
        GeminiModel.GEMINI_PRO_LATEST,
        GeminiModel.GEMINI_PRO_FLASH_LATEST,
        GeminiModel.GEMINI_PRO_1_5_LATEST,
        GeminiModel.GEMINI_PRO_1_5_FLASH_LATEST,
        GeminiModel.GEMINI_2_0_FLASH_EXPERIMENTAL,
        GeminiModel.GEMINI_2_0_FLASH,
        GeminiModel.GEMINI_2_0_PRO_EXPERIMENTAL,
    }
)

DEFAULT_SAFETY_SETTINGS: List[Dict[str, str]] = [
    {
        "category": "HARM_CATEGORY_HARASSMENT",
        "threshold": "BLOCK_MEDIUM_AND_ABOVE",
    },
    {
        "category": "HARM_CATEGORY_HATE_SPEECH",
        "threshold": "BLOCK_MEDIUM_AND_ABOVE",
    },
    {
        "category": "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "threshold": "BLOCK_MEDIUM_AND_ABOVE",
    },
    {
        "category": "HARM_CATEGORY_DANGEROUS_CONTENT",
        "threshold": "BLOCK_MEDIUM_AND_ABOVE",
    },
]

# Finish reasons for which the candidate text is withheld
BLOCKED_FINISH_REASONS: FrozenSet[str] = frozenset(
    {"SAFETY", "RECITATION", "BLOCKLIST", "PROHIBITED_CONTENT", "SPII"}
)


def get_context_window(model: str) -> int:
    """Context window for a model id; raises ValueError for unknown models."""
    return GEMINI_MODEL_INFO_MAP[GeminiModel(model)]["context_window"]
