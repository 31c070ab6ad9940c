"""
Tool-calling chat agent over any ToolCallLLM.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, List, Optional, Sequence, Union

from ..llm.base_provider import (
    ChatMessage,
    ChatResponse,
    MessageContent,
    MessageRole,
    ToolCall,
    ToolCallLLM,
    ToolResult,
)
from ..tools.base import BaseTool
from ..tools.exceptions import (
    AgentError,
    ToolExecutionError,
    ToolNotFoundError,
    ValidationError,
)
from ..tools.registry import ToolRegistry
from ..utils.logging import log_event, track

logger = logging.getLogger(__name__)


@dataclass
class EngineResponse:
    """
    Agent answer, or one streamed delta of it.

    Attributes:
        message: Assistant message (holds only the delta when is_delta)
        sources: Tool results gathered while answering
        is_delta: True for streamed chunks
    """

    message: ChatMessage
    sources: List[ToolResult] = field(default_factory=list)
    is_delta: bool = False

    @property
    def response(self) -> str:
        content = self.message.content
        return content if isinstance(content, str) else json.dumps(content)

    @property
    def delta(self) -> str:
        return self.response if self.is_delta else ""

    @classmethod
    def from_delta(
        cls, delta: str, sources: Optional[List[ToolResult]] = None
    ) -> "EngineResponse":
        return cls(
            message=ChatMessage(role=MessageRole.ASSISTANT, content=delta),
            sources=list(sources or []),
            is_delta=True,
        )

    def __str__(self) -> str:
        return self.response


class LLMAgent:
    """
    Chat agent that lets the LLM call tools until it can answer.

    Args:
        llm: Tool-calling LLM
        tools: Tools offered to the LLM
        system_prompt: Kept as the first message of the history
        chat_history: Initial history
        max_iterations: Maximum LLM calls per chat turn

    Example:
        >>> agent = LLMAgent(llm=gemini(), tools=[weather_tool])
        >>> response = await agent.chat("What's the weather in Paris?")
        >>> print(response.response)
    """

    def __init__(
        self,
        llm: ToolCallLLM,
        tools: Optional[Sequence[BaseTool]] = None,
        system_prompt: Optional[str] = None,
        chat_history: Optional[Sequence[ChatMessage]] = None,
        max_iterations: int = 10,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")

        self.llm = llm
        self.tool_registry = ToolRegistry(tools)
        self.system_prompt = system_prompt
        self.max_iterations = max_iterations
        self._chat_history: List[ChatMessage] = list(chat_history or [])
        if system_prompt:
            self._chat_history.insert(
                0, ChatMessage(role=MessageRole.SYSTEM, content=system_prompt)
            )

    @property
    def chat_history(self) -> List[ChatMessage]:
        return self._chat_history

    @property
    def tools(self) -> List[BaseTool]:
        return self.tool_registry.list_tools()

    def reset(self) -> None:
        """Clear the history, keeping the system prompt."""
        self._chat_history = []
        if self.system_prompt:
            self._chat_history.append(
                ChatMessage(role=MessageRole.SYSTEM, content=self.system_prompt)
            )

    def _tools_for_llm(self) -> Optional[List[BaseTool]]:
        if not self.llm.supports_tool_call:
            return None
        return self.tools or None

    async def _call_tool(self, call: ToolCall) -> ToolResult:
        """Run one tool call; failures become error results for the model."""
        try:
            tool = self.tool_registry.get_tool(call.name)
            params = await tool.validate_input(call.input)
            try:
                output = await tool.execute(**params)
            except Exception as e:
                raise ToolExecutionError(f"Tool execution failed: {str(e)}") from e
            output = await tool.validate_output(output)
        except (ToolNotFoundError, ValidationError, ToolExecutionError) as e:
            log_event(
                "agent_tool_failed",
                {"tool_name": call.name, "error": str(e)},
                level=logging.WARNING,
            )
            return ToolResult(id=call.id, result=str(e), is_error=True)

        log_event("agent_tool_completed", {"tool_name": call.name})
        return ToolResult(id=call.id, result=output)

    async def _run_tool_calls(
        self, calls: List[ToolCall], sources: List[ToolResult]
    ) -> None:
        for call in calls:
            result = await self._call_tool(call)
            sources.append(result)
            self._chat_history.append(
                ChatMessage(
                    role=MessageRole.TOOL,
                    content=json.dumps(result.result, default=str),
                    options={"tool_result": result},
                )
            )

    def _max_iterations_error(self) -> AgentError:
        log_event(
            "agent_max_iterations_reached",
            {"max_iterations": self.max_iterations},
            level=logging.ERROR,
        )
        return AgentError(
            f"Agent did not produce an answer within {self.max_iterations} iterations"
        )

    async def _chat(self) -> EngineResponse:
        sources: List[ToolResult] = []
        for _ in range(self.max_iterations):
            response = await self.llm.chat(
                self._chat_history, tools=self._tools_for_llm()
            )
            if not isinstance(response, ChatResponse):
                raise AgentError(
                    "Expected a ChatResponse from the LLM, "
                    f"got {type(response).__name__}"
                )
            self._chat_history.append(response.message)

            calls = response.message.tool_calls
            if not calls:
                return EngineResponse(message=response.message, sources=sources)
            await self._run_tool_calls(calls, sources)

        raise self._max_iterations_error()

    async def _stream_chat(self) -> AsyncIterator[EngineResponse]:
        sources: List[ToolResult] = []
        for _ in range(self.max_iterations):
            stream = await self.llm.chat(
                self._chat_history, stream=True, tools=self._tools_for_llm()
            )
            text = ""
            calls: List[ToolCall] = []
            async for chunk in stream:
                calls.extend(chunk.options.get("tool_call") or [])
                if chunk.delta:
                    text += chunk.delta
                    yield EngineResponse.from_delta(chunk.delta, sources)

            options: dict = {"tool_call": calls} if calls else {}
            self._chat_history.append(
                ChatMessage(role=MessageRole.ASSISTANT, content=text, options=options)
            )
            if not calls:
                return
            await self._run_tool_calls(calls, sources)

        raise self._max_iterations_error()

    @track(operation="agent_chat", include_args=["stream"])
    async def chat(
        self, message: MessageContent, stream: bool = False, **kwargs: Any
    ) -> Union[EngineResponse, AsyncIterator[EngineResponse]]:
        """
        Send a user message and run the tool loop.

        Returns:
            EngineResponse, or an async iterator of delta EngineResponses
            when streaming

        Raises:
            AgentError: If max_iterations LLM calls pass without an answer
        """
        self._chat_history.append(ChatMessage(role=MessageRole.USER, content=message))
        if stream:
            return self._stream_chat()
        return await self._chat()
