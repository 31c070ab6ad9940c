"""
RAG Connect - Gemini, Azure Cosmos DB vCore storage and context-aware agents
for llama_index pipelines.

Provides a Gemini tool-calling LLM over the Google AI REST API, llama_index
KV/index/document stores on Cosmos DB for MongoDB vCore, and an agent
wrapper that injects retrieved context into every chat turn.
"""

__version__ = "0.1.0"

from .agents import ContextAwareAgent, LLMAgent, with_context_awareness
from .llm import Gemini, GeminiModel, GeminiSessionStore, gemini
from .storage import (
    AzureCosmosVCoreDocumentStore,
    AzureCosmosVCoreIndexStore,
    AzureCosmosVCoreKVStore,
)

__all__ = [
    "Gemini",
    "GeminiModel",
    "GeminiSessionStore",
    "gemini",
    "AzureCosmosVCoreKVStore",
    "AzureCosmosVCoreIndexStore",
    "AzureCosmosVCoreDocumentStore",
    "LLMAgent",
    "ContextAwareAgent",
    "with_context_awareness",
]
