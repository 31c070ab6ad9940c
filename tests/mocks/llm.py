from typing import Any, Dict, List, Optional, Sequence, Union

from ragconnect.llm.base_provider import (
    ChatMessage,
    ChatResponse,
    ChatResponseChunk,
    CompletionResponse,
    LLMMetadata,
    ToolCallLLM,
)

ScriptedTurn = Union[ChatResponse, List[ChatResponseChunk]]


class ScriptedLLM(ToolCallLLM):
    def __init__(self, turns: List[ScriptedTurn], supports_tools: bool = True):
        self.turns = list(turns)
        self.supports_tools = supports_tools
        self.calls: List[Dict[str, Any]] = []

    @property
    def supports_tool_call(self) -> bool:
        return self.supports_tools

    @property
    def metadata(self) -> LLMMetadata:
        return LLMMetadata(
            model="scripted", temperature=0.0, top_p=1.0, context_window=4096
        )

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        stream: bool = False,
        tools: Optional[Sequence[Any]] = None,
        **kwargs: Any,
    ):
        self.calls.append(
            {
                "messages": [(m.role, m.content) for m in messages],
                "stream": stream,
                "tools": tools,
            }
        )
        turn = self.turns.pop(0)
        if stream:
            return self._stream(turn)
        return turn

    async def _stream(self, chunks):
        for chunk in chunks:
            yield chunk

    async def complete(self, prompt: Any, stream: bool = False, **kwargs: Any):
        return CompletionResponse(text="")
