import pytest

from ragconnect.agents import EngineResponse, LLMAgent
from ragconnect.llm.base_provider import (
    ChatMessage,
    ChatResponse,
    ChatResponseChunk,
    ToolCall,
)
from ragconnect.tools.base import FunctionTool
from ragconnect.tools.exceptions import AgentError
from tests.mocks import ScriptedLLM


def _answer(text):
    return ChatResponse(message=ChatMessage(role="assistant", content=text))


def _tool_request(name, args, call_id="call-1"):
    return ChatResponse(
        message=ChatMessage(
            role="assistant",
            content="",
            options={"tool_call": [ToolCall(name=name, input=args, id=call_id)]},
        )
    )


async def _add(a: int, b: int):
    return {"sum": a + b}


async def _explode():
    raise RuntimeError("boom")


@pytest.fixture
def add_tool():
    return FunctionTool(
        _add,
        name="add",
        description="Add two integers",
        input_schema={
            "type": "object",
            "properties": {"a": {"type": "integer"}, "b": {"type": "integer"}},
            "required": ["a", "b"],
        },
    )


class TestLLMAgentHistory:

    def test_system_prompt_is_first(self):
        agent = LLMAgent(llm=ScriptedLLM([]), system_prompt="You are helpful.")

        assert agent.chat_history[0].role == "system"
        assert agent.chat_history[0].content == "You are helpful."

    def test_reset_keeps_system_prompt(self):
        agent = LLMAgent(
            llm=ScriptedLLM([]),
            system_prompt="You are helpful.",
            chat_history=[ChatMessage(role="user", content="old")],
        )

        agent.reset()

        assert [m.role for m in agent.chat_history] == ["system"]

    def test_invalid_max_iterations(self):
        with pytest.raises(ValueError):
            LLMAgent(llm=ScriptedLLM([]), max_iterations=0)


class TestLLMAgentChat:

    @pytest.mark.asyncio
    async def test_answer_without_tools(self):
        llm = ScriptedLLM([_answer("Hello!")])
        agent = LLMAgent(llm=llm)

        response = await agent.chat("Hi")

        assert isinstance(response, EngineResponse)
        assert response.response == "Hello!"
        assert response.sources == []
        assert [m.role for m in agent.chat_history] == ["user", "assistant"]
        assert llm.calls[0]["tools"] is None

    @pytest.mark.asyncio
    async def test_runs_tool_and_feeds_result_back(self, add_tool):
        llm = ScriptedLLM([_tool_request("add", {"a": 2, "b": 3}), _answer("5")])
        agent = LLMAgent(llm=llm, tools=[add_tool])

        response = await agent.chat("What is 2 + 3?")

        assert response.response == "5"
        assert len(response.sources) == 1
        assert response.sources[0].result == {"sum": 5}
        assert response.sources[0].is_error is False

        tool_message = agent.chat_history[2]
        assert tool_message.role == "tool"
        assert tool_message.tool_result.id == "call-1"
        assert llm.calls[0]["tools"] == [add_tool]
        assert len(llm.calls[1]["messages"]) == 3

    @pytest.mark.asyncio
    async def test_unknown_tool_becomes_error_result(self):
        llm = ScriptedLLM([_tool_request("missing", {}), _answer("Sorry")])
        agent = LLMAgent(llm=llm)

        response = await agent.chat("Do it")

        assert response.sources[0].is_error is True
        assert "not found" in response.sources[0].result

    @pytest.mark.asyncio
    async def test_invalid_arguments_become_error_result(self, add_tool):
        llm = ScriptedLLM([_tool_request("add", {"a": "two"}), _answer("Sorry")])
        agent = LLMAgent(llm=llm, tools=[add_tool])

        response = await agent.chat("Add")

        assert response.sources[0].is_error is True
        assert "validation failed" in response.sources[0].result

    @pytest.mark.asyncio
    async def test_failing_tool_becomes_error_result(self):
        tool = FunctionTool(_explode, name="explode", description="Always fails")
        llm = ScriptedLLM([_tool_request("explode", {}), _answer("It failed")])
        agent = LLMAgent(llm=llm, tools=[tool])

        response = await agent.chat("Go")

        assert response.sources[0].is_error is True
        assert "boom" in response.sources[0].result
        assert response.response == "It failed"

    @pytest.mark.asyncio
    async def test_max_iterations(self, add_tool):
        llm = ScriptedLLM(
            [
                _tool_request("add", {"a": 1, "b": 1}, "c1"),
                _tool_request("add", {"a": 1, "b": 1}, "c2"),
            ]
        )
        agent = LLMAgent(llm=llm, tools=[add_tool], max_iterations=2)

        with pytest.raises(AgentError):
            await agent.chat("Loop forever")

    @pytest.mark.asyncio
    async def test_non_chat_response_is_rejected(self):
        llm = ScriptedLLM([[ChatResponseChunk(delta="stray")]])
        agent = LLMAgent(llm=llm)

        with pytest.raises(AgentError, match="Expected a ChatResponse"):
            await agent.chat("Hi")

    @pytest.mark.asyncio
    async def test_tools_withheld_when_llm_cannot_call_them(self, add_tool):
        llm = ScriptedLLM([_answer("ok")], supports_tools=False)
        agent = LLMAgent(llm=llm, tools=[add_tool])

        await agent.chat("Hi")

        assert llm.calls[0]["tools"] is None


class TestLLMAgentStreaming:

    @pytest.mark.asyncio
    async def test_stream_deltas(self):
        llm = ScriptedLLM(
            [[ChatResponseChunk(delta="Hel"), ChatResponseChunk(delta="lo")]]
        )
        agent = LLMAgent(llm=llm)

        stream = await agent.chat("Hi", stream=True)
        deltas = [chunk.delta async for chunk in stream]

        assert deltas == ["Hel", "lo"]
        assert agent.chat_history[-1].content == "Hello"
        assert llm.calls[0]["stream"] is True

    @pytest.mark.asyncio
    async def test_stream_with_tool_call(self, add_tool):
        call = ToolCall(name="add", input={"a": 1, "b": 2}, id="c1")
        llm = ScriptedLLM(
            [
                [ChatResponseChunk(delta="", options={"tool_call": [call]})],
                [ChatResponseChunk(delta="3")],
            ]
        )
        agent = LLMAgent(llm=llm, tools=[add_tool])

        stream = await agent.chat("1 + 2?", stream=True)
        chunks = [chunk async for chunk in stream]

        assert [chunk.delta for chunk in chunks] == ["3"]
        assert chunks[0].sources[0].result == {"sum": 3}
        assert [m.role for m in agent.chat_history] == [
            "user",
            "assistant",
            "tool",
            "assistant",
        ]
