from .http import MockHTTPResponse, MockHTTPSession, sse_lines
from .llm import ScriptedLLM
from .mongo import MockAsyncMongoClient, MockMongoClient, MockMongoCollection
from .retriever import StaticRetriever

__all__ = [
    "MockHTTPResponse",
    "MockHTTPSession",
    "sse_lines",
    "ScriptedLLM",
    "MockMongoClient",
    "MockAsyncMongoClient",
    "MockMongoCollection",
    "StaticRetriever",
]
