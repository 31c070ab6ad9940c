"""
Retrieval-augmented agents.

``with_context_awareness`` wraps an agent class so every chat turn first
retrieves context for the user message and prepends it to the system
message.
"""

import logging
from typing import Any, AsyncIterator, List, Optional, Type, TypeVar, Union

from llama_index.core.base.base_retriever import BaseRetriever
from llama_index.core.schema import MetadataMode

from ..llm.base_provider import (
    ChatMessage,
    MessageContent,
    MessageRole,
    message_content_to_text,
)
from ..utils.logging import log_event, track
from .llm_agent import EngineResponse, LLMAgent

logger = logging.getLogger(__name__)

AgentT = TypeVar("AgentT", bound=LLMAgent)


class ContextAwareMixin:
    """
    Adds retrieval and context injection to an agent's chat.

    The host class must expose a mutable ``chat_history`` list and an async
    ``chat(message, stream=False)``.
    """

    chat_history: List[ChatMessage]
    context_retriever: BaseRetriever
    retrieved_context: Optional[str]

    @track(operation="context_retrieve", include_args=False)
    async def retrieve_context(self, query: MessageContent) -> str:
        """Retrieve nodes for the query and join their content with newlines."""
        nodes = await self.context_retriever.aretrieve(message_content_to_text(query))
        log_event(
            "context_retrieved",
            {"node_count": len(nodes)},
            level=logging.DEBUG,
        )
        return "\n".join(
            node.node.get_content(metadata_mode=MetadataMode.NONE) for node in nodes
        )

    def _find_system_message(self) -> Optional[ChatMessage]:
        for message in self.chat_history:
            if message.role == MessageRole.SYSTEM.value:
                return message
        return None

    async def inject_context(self, context: str) -> None:
        """
        Prepend context to the system message, creating one if needed.

        Context is prepended on every turn, so earlier context stays in the
        system message. List content keeps its details and gains a leading
        text detail.
        """
        system_message = self._find_system_message()

        if system_message is None:
            self.chat_history.insert(
                0, ChatMessage(role=MessageRole.SYSTEM, content=context)
            )
        elif isinstance(system_message.content, str):
            system_message.content = f"{context}\n\n{system_message.content}"
        else:
            system_message.content = [
                {"type": "text", "text": f"{context}\n\n"},
                *system_message.content,
            ]

        self.retrieved_context = context
        log_event(
            "context_injected",
            {
                "context_length": len(context),
                "history_length": len(self.chat_history),
            },
            level=logging.DEBUG,
        )

    async def chat(
        self, message: MessageContent, stream: bool = False, **kwargs: Any
    ) -> Union[EngineResponse, AsyncIterator[EngineResponse]]:
        """Retrieve and inject context, then chat with the wrapped agent."""
        context = await self.retrieve_context(message)
        await self.inject_context(context)
        return await super().chat(message, stream=stream, **kwargs)  # type: ignore[misc]


def with_context_awareness(base: Type[AgentT]) -> Type[AgentT]:
    """
    Build a context-aware subclass of an agent class.

    The returned class takes an extra ``context_retriever`` keyword.

    Example:
        >>> ContextAwareAgent = with_context_awareness(LLMAgent)
        >>> agent = ContextAwareAgent(
        ...     llm=gemini(), context_retriever=index.as_retriever()
        ... )
        >>> response = await agent.chat("What did the report conclude?")
    """

    class ContextAwareAgent(ContextAwareMixin, base):  # type: ignore[valid-type,misc]
        def __init__(self, *args: Any, context_retriever: BaseRetriever, **kwargs: Any):
            super().__init__(*args, **kwargs)
            self.context_retriever = context_retriever
            self.retrieved_context = None

    ContextAwareAgent.__name__ = f"ContextAware{base.__name__}"
    ContextAwareAgent.__qualname__ = ContextAwareAgent.__name__
    return ContextAwareAgent
