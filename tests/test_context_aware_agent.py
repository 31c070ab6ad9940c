import pytest

from ragconnect.agents import (
    ContextAwareAgent,
    ContextAwareMixin,
    LLMAgent,
    with_context_awareness,
)
from ragconnect.llm.base_provider import ChatMessage, ChatResponse, ChatResponseChunk
from tests.mocks import ScriptedLLM, StaticRetriever


def _answer(text):
    return ChatResponse(message=ChatMessage(role="assistant", content=text))


class TestWithContextAwareness:

    def test_builds_subclass(self):
        agent_cls = with_context_awareness(LLMAgent)

        assert issubclass(agent_cls, LLMAgent)
        assert issubclass(agent_cls, ContextAwareMixin)
        assert agent_cls.__name__ == "ContextAwareLLMAgent"

    def test_requires_context_retriever(self):
        with pytest.raises(TypeError):
            ContextAwareAgent(llm=ScriptedLLM([]))

    def test_initial_state(self):
        retriever = StaticRetriever([])
        agent = ContextAwareAgent(llm=ScriptedLLM([]), context_retriever=retriever)

        assert agent.context_retriever is retriever
        assert agent.retrieved_context is None


class TestContextRetrieval:

    @pytest.mark.asyncio
    async def test_joins_node_content_without_metadata(self):
        retriever = StaticRetriever(["Paris is in France.", "Berlin is in Germany."])
        agent = ContextAwareAgent(llm=ScriptedLLM([]), context_retriever=retriever)

        context = await agent.retrieve_context("capitals")

        assert context == "Paris is in France.\nBerlin is in Germany."
        assert retriever.queries == ["capitals"]

    @pytest.mark.asyncio
    async def test_inject_into_existing_system_message(self):
        agent = ContextAwareAgent(
            llm=ScriptedLLM([]),
            context_retriever=StaticRetriever([]),
            system_prompt="Answer briefly.",
        )

        await agent.inject_context("Fact A")

        assert agent.chat_history[0].content == "Fact A\n\nAnswer briefly."
        assert len(agent.chat_history) == 1

    @pytest.mark.asyncio
    async def test_inject_creates_system_message(self):
        agent = ContextAwareAgent(
            llm=ScriptedLLM([]),
            context_retriever=StaticRetriever([]),
            chat_history=[ChatMessage(role="user", content="earlier")],
        )

        await agent.inject_context("Fact A")

        assert agent.chat_history[0].role == "system"
        assert agent.chat_history[0].content == "Fact A"
        assert agent.chat_history[1].content == "earlier"
        assert agent.retrieved_context == "Fact A"

    @pytest.mark.asyncio
    async def test_context_accumulates_across_turns(self):
        agent = ContextAwareAgent(
            llm=ScriptedLLM([]),
            context_retriever=StaticRetriever([]),
            system_prompt="Answer briefly.",
        )

        await agent.inject_context("Fact A")
        await agent.inject_context("Fact B")

        assert agent.chat_history[0].content == "Fact B\n\nFact A\n\nAnswer briefly."
        assert agent.retrieved_context == "Fact B"

    @pytest.mark.asyncio
    async def test_inject_keeps_list_content_details(self):
        image = {
            "type": "image_url",
            "image_url": {"url": "data:image/png;base64,AAAA"},
        }
        agent = ContextAwareAgent(
            llm=ScriptedLLM([]),
            context_retriever=StaticRetriever([]),
            chat_history=[
                ChatMessage(
                    role="system",
                    content=[{"type": "text", "text": "Describe images."}, image],
                )
            ],
        )

        await agent.inject_context("Fact A")

        assert agent.chat_history[0].content == [
            {"type": "text", "text": "Fact A\n\n"},
            {"type": "text", "text": "Describe images."},
            image,
        ]


class TestContextAwareChat:

    @pytest.mark.asyncio
    async def test_chat_sends_context_to_llm(self):
        llm = ScriptedLLM([_answer("Paris.")])
        agent = ContextAwareAgent(
            llm=llm,
            context_retriever=StaticRetriever(["Paris is the capital of France."]),
            system_prompt="Use the context.",
        )

        response = await agent.chat("What is the capital of France?")

        assert response.response == "Paris."
        assert agent.retrieved_context == "Paris is the capital of France."
        sent = llm.calls[0]["messages"]
        assert sent[0] == (
            "system",
            "Paris is the capital of France.\n\nUse the context.",
        )
        assert sent[1] == ("user", "What is the capital of France?")

    @pytest.mark.asyncio
    async def test_streaming_chat(self):
        llm = ScriptedLLM([[ChatResponseChunk(delta="Par"), ChatResponseChunk(delta="is")]])
        agent = ContextAwareAgent(
            llm=llm, context_retriever=StaticRetriever(["France: Paris"])
        )

        stream = await agent.chat("Capital?", stream=True)
        text = "".join([chunk.delta async for chunk in stream])

        assert text == "Paris"
        assert llm.calls[0]["messages"][0] == ("system", "France: Paris")
        assert llm.calls[0]["stream"] is True
