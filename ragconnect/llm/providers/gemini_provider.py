"""
Gemini tool-calling LLM.

Maps ragconnect chat and completion calls onto a Gemini session.
"""

import logging
from typing import (
    Any,
    AsyncIterator,
    Dict,
    List,
    Optional,
    Sequence,
    Union,
)

from ...config import get_settings
from ...tools.base import BaseTool
from ...utils.logging import log_event, track
from ..base_provider import (
    ChatMessage,
    ChatResponse,
    ChatResponseChunk,
    CompletionResponse,
    LLMMetadata,
    MessageContent,
    ToolCallLLM,
)
from .gemini_metadata import (
    DEFAULT_SAFETY_SETTINGS,
    SUPPORT_TOOL_CALL_MODELS,
    GeminiModel,
    get_context_window,
)
from .gemini_session import BaseGeminiSession, GeminiSessionStore
from .gemini_utils import (
    GeminiHelper,
    get_chat_context,
    get_parts_text,
    map_base_tool_to_gemini_function_declaration,
)

logger = logging.getLogger(__name__)


class Gemini(ToolCallLLM):
    """
    Gemini chat/completion model with function calling.

    Args:
        model: Gemini model id (defaults to the configured model)
        temperature: Sampling temperature
        top_p: Nucleus sampling
        max_tokens: Maximum output tokens, unlimited when None
        session: Session to use; the store's default session when None

    Example:
        >>> llm = Gemini(model=GeminiModel.GEMINI_2_0_FLASH)
        >>> response = await llm.chat([ChatMessage(role="user", content="Hi")])
        >>> response.message.content
    """

    def __init__(
        self,
        model: Optional[Union[GeminiModel, str]] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        max_tokens: Optional[int] = None,
        session: Optional[BaseGeminiSession] = None,
    ):
        settings = get_settings()
        self.model = GeminiModel(model or settings.gemini_model)
        self.temperature = (
            temperature if temperature is not None else settings.gemini_temperature
        )
        self.top_p = top_p if top_p is not None else settings.gemini_top_p
        self.max_tokens = max_tokens
        self.session = session or GeminiSessionStore.get()

    @property
    def supports_tool_call(self) -> bool:
        return self.model in SUPPORT_TOOL_CALL_MODELS

    @property
    def metadata(self) -> LLMMetadata:
        return LLMMetadata(
            model=self.model.value,
            temperature=self.temperature,
            top_p=self.top_p,
            max_tokens=self.max_tokens,
            context_window=get_context_window(self.model.value),
            tokenizer=None,
        )

    def _create_start_chat_params(
        self, messages: Sequence[ChatMessage], tools: Optional[Sequence[BaseTool]]
    ) -> Dict[str, Any]:
        context = get_chat_context(messages)
        params: Dict[str, Any] = {
            "contents": context.history
            + [{"role": context.message_role, "parts": context.message}],
            "safety_settings": DEFAULT_SAFETY_SETTINGS,
        }
        # Gemini rejects an empty functionDeclarations list
        if tools:
            params["tools"] = [
                {
                    "functionDeclarations": [
                        map_base_tool_to_gemini_function_declaration(tool)
                        for tool in tools
                    ]
                }
            ]
        return params

    async def _non_stream_chat(
        self, messages: Sequence[ChatMessage], tools: Optional[Sequence[BaseTool]]
    ) -> ChatResponse:
        client = self.session.get_generative_model(self.metadata)
        response = await client.generate_content(
            **self._create_start_chat_params(messages, tools)
        )

        candidates = response.get("candidates") or []
        gemini_role = (
            (candidates[0].get("content") or {}).get("role", "model")
            if candidates
            else "model"
        )
        tool_calls = self.session.get_tools_from_response(response)
        options: Dict[str, Any] = {"tool_call": tool_calls} if tool_calls else {}

        log_event(
            "gemini_chat_completed",
            {
                "model": self.model.value,
                "tool_calls": len(tool_calls or []),
                "finish_reason": candidates[0].get("finishReason")
                if candidates
                else None,
            },
            level=logging.DEBUG,
        )

        return ChatResponse(
            message=ChatMessage(
                role=GeminiHelper.ROLES_FROM_GEMINI.get(gemini_role, "assistant"),
                content=self.session.get_response_text(response),
                options=options,
            ),
            raw=response,
        )

    async def _stream_chat(
        self, messages: Sequence[ChatMessage], tools: Optional[Sequence[BaseTool]]
    ) -> AsyncIterator[ChatResponseChunk]:
        client = self.session.get_generative_model(self.metadata)
        stream = client.stream_generate_content(
            **self._create_start_chat_params(messages, tools)
        )
        return self.session.get_chat_stream(stream)

    @track(operation="gemini_chat", include_args=["stream"])
    async def chat(
        self,
        messages: Sequence[ChatMessage],
        stream: bool = False,
        tools: Optional[Sequence[BaseTool]] = None,
        **kwargs: Any,
    ) -> Union[ChatResponse, AsyncIterator[ChatResponseChunk]]:
        """
        Chat with the model.

        Args:
            messages: Conversation so far; the last message is the one sent
            stream: Return an async iterator of deltas instead of a response
            tools: Tools the model may call

        Returns:
            ChatResponse, or an async iterator of ChatResponseChunk when streaming
        """
        if stream:
            return await self._stream_chat(messages, tools)
        return await self._non_stream_chat(messages, tools)

    @track(operation="gemini_complete", include_args=["stream"])
    async def complete(
        self,
        prompt: MessageContent,
        stream: bool = False,
        **kwargs: Any,
    ) -> Union[CompletionResponse, AsyncIterator[CompletionResponse]]:
        """
        Complete a prompt.

        Only the text of the prompt is sent.

        Returns:
            CompletionResponse, or an async iterator of them when streaming
        """
        client = self.session.get_generative_model(self.metadata)
        text = get_parts_text(GeminiHelper.message_content_to_gemini_parts(prompt))
        contents: List[Dict[str, Any]] = [{"role": "user", "parts": [{"text": text}]}]

        if stream:
            return self.session.get_completion_stream(
                client.stream_generate_content(contents)
            )

        response = await client.generate_content(contents)
        return CompletionResponse(
            text=self.session.get_response_text(response), raw=response
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model.value})"


def gemini(**kwargs: Any) -> Gemini:
    """
    Convenience function to create a new Gemini instance.

    Args:
        **kwargs: Forwarded to Gemini

    Returns:
        A new Gemini instance
    """
    return Gemini(**kwargs)
