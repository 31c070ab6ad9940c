"""
Chat agents: the tool-calling LLMAgent and its context-aware variant.
"""

from .context_aware import ContextAwareMixin, with_context_awareness
from .llm_agent import EngineResponse, LLMAgent

ContextAwareAgent = with_context_awareness(LLMAgent)

__all__ = [
    "EngineResponse",
    "LLMAgent",
    "ContextAwareMixin",
    "ContextAwareAgent",
    "with_context_awareness",
]
