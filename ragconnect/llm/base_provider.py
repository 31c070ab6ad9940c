"""
Base abstractions shared by LLM providers.

Defines the message, tool-call and response types the rest of the package
speaks, the abstract tool-calling LLM interface, and an HTTP mixin with
pooled sessions and server-sent-events streaming.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    AsyncGenerator,
    AsyncIterator,
    Dict,
    List,
    Optional,
    Sequence,
    Union,
)

import aiohttp

from ..utils.logging import log_event

logger = logging.getLogger(__name__)


class MessageRole(str, Enum):
    """Roles a chat message can have."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    MEMORY = "memory"
    DEVELOPER = "developer"
    TOOL = "tool"


# Either plain text or a list of content details such as
# {"type": "text", "text": "..."} or
# {"type": "image_url", "image_url": {"url": "data:image/png;base64,..."}}
MessageContentDetail = Dict[str, Any]
MessageContent = Union[str, List[MessageContentDetail]]


@dataclass
class ToolCall:
    """A function call requested by the model."""

    name: str
    input: Dict[str, Any]
    id: str


@dataclass
class ToolResult:
    """The outcome of running a tool call, sent back to the model."""

    id: str
    result: Any
    is_error: bool = False


@dataclass
class ChatMessage:
    """
    Unified message format across providers.

    Attributes:
        role: Message role (see MessageRole)
        content: Text or a list of content details
        options: Tool calls ("tool_call") or a tool result ("tool_result")
    """

    role: str
    content: MessageContent
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate message role."""
        if isinstance(self.role, MessageRole):
            self.role = self.role.value
        valid_roles = {role.value for role in MessageRole}
        if self.role not in valid_roles:
            raise ValueError(
                f"Invalid role '{self.role}'. Must be one of: {sorted(valid_roles)}"
            )

    @property
    def tool_calls(self) -> List[ToolCall]:
        return list(self.options.get("tool_call") or [])

    @property
    def tool_result(self) -> Optional[ToolResult]:
        return self.options.get("tool_result")


@dataclass
class ChatResponse:
    """Non-streaming chat result."""

    message: ChatMessage
    raw: Any = None


@dataclass
class ChatResponseChunk:
    """
    One streamed chat delta.

    Attributes:
        delta: Text added by this chunk
        raw: Provider response object for this chunk
        options: Carries "tool_call" when the chunk requested tools
    """

    delta: str
    raw: Any = None
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CompletionResponse:
    """Completion result, or one streamed completion delta."""

    text: str
    raw: Any = None


@dataclass
class LLMMetadata:
    """Static description of a configured model."""

    model: str
    temperature: float
    top_p: float
    context_window: int
    max_tokens: Optional[int] = None
    tokenizer: Any = None


def message_content_to_text(content: MessageContent) -> str:
    """Return the text portion of message content, ignoring images."""
    if isinstance(content, str):
        return content
    return "".join(
        detail.get("text", "") for detail in content if detail.get("type") == "text"
    )


class BaseLLM(ABC):
    """
    Abstract chat/completion model.

    ``chat`` and ``complete`` are coroutines; with ``stream=True`` they
    resolve to an async iterator of deltas instead of a full response.
    """

    @property
    @abstractmethod
    def metadata(self) -> LLMMetadata:
        pass

    @abstractmethod
    async def chat(
        self,
        messages: Sequence[ChatMessage],
        stream: bool = False,
        **kwargs: Any,
    ) -> Union[ChatResponse, AsyncIterator[ChatResponseChunk]]:
        pass

    @abstractmethod
    async def complete(
        self,
        prompt: MessageContent,
        stream: bool = False,
        **kwargs: Any,
    ) -> Union[CompletionResponse, AsyncIterator[CompletionResponse]]:
        pass


class ToolCallLLM(BaseLLM):
    """An LLM that can be offered tools and answer with tool calls."""

    @property
    @abstractmethod
    def supports_tool_call(self) -> bool:
        pass

    @abstractmethod
    async def chat(
        self,
        messages: Sequence[ChatMessage],
        stream: bool = False,
        tools: Optional[Sequence[Any]] = None,
        **kwargs: Any,
    ) -> Union[ChatResponse, AsyncIterator[ChatResponseChunk]]:
        pass


class BaseHTTPProvider:
    """
    Mixin class for HTTP-based providers.

    Provides connection pooling and session management for providers
    that communicate over HTTP/HTTPS.
    """

    def __init__(self):
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_loop: Optional[asyncio.AbstractEventLoop] = None

    def _create_connector(
        self,
        max_connections: int = 100,
        max_connections_per_host: int = 30,
        keepalive_timeout: int = 30,
    ) -> aiohttp.TCPConnector:
        return aiohttp.TCPConnector(
            limit=max_connections,
            limit_per_host=max_connections_per_host,
            ttl_dns_cache=300,
            use_dns_cache=True,
            keepalive_timeout=keepalive_timeout,
            enable_cleanup_closed=True,
            force_close=False,
        )

    def _create_timeout(
        self, total: int, connect: int = 10, sock_read: int = 60
    ) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(
            total=total,
            connect=connect,
            sock_read=sock_read,
        )

    def _initialize_session(
        self,
        timeout_seconds: int,
        max_connections: int = 100,
        max_connections_per_host: int = 30,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Initialize HTTP session with connection pooling.

        Must run inside an event loop. A session that is already open on the
        running loop is kept; one opened on another loop is discarded.
        """
        loop = asyncio.get_running_loop()
        if self._session is not None and not self._session.closed:
            if self._session_loop is loop:
                return
            self._discard_session()

        self._session = aiohttp.ClientSession(
            timeout=self._create_timeout(timeout_seconds),
            connector=self._create_connector(
                max_connections, max_connections_per_host
            ),
            connector_owner=True,
            headers=headers,
        )
        self._session_loop = loop

    def _discard_session(self) -> None:
        """
        Drop a session bound to an event loop other than the running one.

        Its transports cannot be closed from this loop: on a closed loop the
        session is detached, on a live one its close is scheduled there.
        """
        session, old_loop = self._session, self._session_loop
        self._session = None
        self._session_loop = None
        if session is None or session.closed:
            return

        log_event(
            "http_session_discarded",
            {"old_loop_closed": old_loop is None or old_loop.is_closed()},
            level=logging.DEBUG,
        )
        if old_loop is None or old_loop.is_closed():
            session.detach()
        else:
            asyncio.run_coroutine_threadsafe(session.close(), old_loop)

    async def _cleanup_session(self) -> None:
        """Close the HTTP session and let connections shut down."""
        if self._session_loop is not asyncio.get_running_loop():
            self._discard_session()
            return

        if self._session and not self._session.closed:
            await self._session.close()
            await asyncio.sleep(0.25)

        self._session = None
        self._session_loop = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        """
        Return the active session.

        Raises:
            RuntimeError: If session not initialized
        """
        if self._session is None or self._session.closed:
            raise RuntimeError("HTTP session not initialized. Call initialize() first.")
        return self._session

    async def _iter_sse_json(
        self,
        response: aiohttp.ClientResponse,
        error_log_event: str,
    ) -> AsyncGenerator[Dict[str, Any], None]:
        """
        Yield the JSON payload of every ``data:`` line of an SSE response.

        Comment lines and blank keep-alive lines are skipped; undecodable
        payloads are logged and skipped.
        """
        async for line in response.content:
            if not line:
                continue

            line_str = line.decode("utf-8").strip()
            if not line_str or line_str.startswith(":"):
                continue
            if not line_str.startswith("data:"):
                continue

            data_str = line_str[5:].strip()
            if data_str == "[DONE]":
                break

            try:
                yield json.loads(data_str)
            except json.JSONDecodeError as e:
                log_event(
                    f"{error_log_event}_parse_error",
                    {"error": str(e), "data": data_str[:100]},
                    level=logging.WARNING,
                )
                continue
