import pytest

from ragconnect.llm.base_provider import ChatMessage, ToolCall, ToolResult
from ragconnect.llm.providers.gemini_utils import (
    GeminiHelper,
    get_chat_context,
    get_parts_text,
    map_base_tool_to_gemini_function_declaration,
)
from ragconnect.tools.base import FunctionTool


async def _noop(**kwargs):
    return {}


class TestMessageContentToParts:

    def test_plain_text(self):
        assert GeminiHelper.message_content_to_gemini_parts("hello") == [
            {"text": "hello"}
        ]

    def test_text_and_data_url_image(self):
        parts = GeminiHelper.message_content_to_gemini_parts(
            [
                {"type": "text", "text": "describe"},
                {
                    "type": "image_url",
                    "image_url": {"url": "data:image/png;base64,iVBORw0KGgo="},
                },
            ]
        )

        assert parts == [
            {"text": "describe"},
            {"inlineData": {"mimeType": "image/png", "data": "iVBORw0KGgo="}},
        ]

    def test_remote_image_url_rejected(self):
        with pytest.raises(ValueError, match="base64 data URLs"):
            GeminiHelper.message_content_to_gemini_parts(
                [{"type": "image_url", "image_url": {"url": "https://x/y.png"}}]
            )


class TestChatMessageToGemini:

    def test_role_mapping(self):
        assistant = GeminiHelper.chat_message_to_gemini(
            ChatMessage(role="assistant", content="hi"), {}
        )
        system = GeminiHelper.chat_message_to_gemini(
            ChatMessage(role="system", content="rules"), {}
        )

        assert assistant == {"role": "model", "parts": [{"text": "hi"}]}
        assert system["role"] == "user"

    def test_tool_call_message(self):
        message = ChatMessage(
            role="assistant",
            content="Let me check.",
            options={
                "tool_call": [ToolCall(name="weather", input={"city": "Oslo"}, id="c1")]
            },
        )

        content = GeminiHelper.chat_message_to_gemini(message, {})

        assert content == {
            "role": "model",
            "parts": [
                {"text": "Let me check."},
                {"functionCall": {"name": "weather", "args": {"city": "Oslo"}}},
            ],
        }

    def test_tool_result_uses_function_name_from_map(self):
        message = ChatMessage(
            role="tool",
            content="12C",
            options={"tool_result": ToolResult(id="c1", result={"temp": 12})},
        )

        content = GeminiHelper.chat_message_to_gemini(message, {"c1": "weather"})

        assert content == {
            "role": "function",
            "parts": [
                {
                    "functionResponse": {
                        "name": "weather",
                        "response": {"result": {"temp": 12}},
                    }
                }
            ],
        }

    def test_tool_result_with_unknown_id(self):
        message = ChatMessage(
            role="tool",
            content="",
            options={"tool_result": ToolResult(id="missing", result="x")},
        )

        with pytest.raises(ValueError, match="missing"):
            GeminiHelper.chat_message_to_gemini(message, {})


class TestGetChatContext:

    def test_merges_same_role_and_splits_last_message(self):
        context = get_chat_context(
            [
                ChatMessage(role="system", content="Be brief."),
                ChatMessage(role="user", content="Hello"),
                ChatMessage(role="assistant", content="Hi!"),
                ChatMessage(role="user", content="Weather?"),
            ]
        )

        assert context.history == [
            {"role": "user", "parts": [{"text": "Be brief."}, {"text": "Hello"}]},
            {"role": "model", "parts": [{"text": "Hi!"}]},
        ]
        assert context.message == [{"text": "Weather?"}]
        assert context.message_role == "user"

    def test_drops_empty_text_parts(self):
        context = get_chat_context(
            [
                ChatMessage(role="user", content="Question"),
                ChatMessage(role="assistant", content="   "),
                ChatMessage(role="user", content="Again"),
            ]
        )

        assert context.history == []
        assert context.message == [{"text": "Question"}, {"text": "Again"}]

    def test_function_response_is_sent_as_function_role(self):
        call = ToolCall(name="weather", input={}, id="c1")
        context = get_chat_context(
            [
                ChatMessage(role="user", content="Weather?"),
                ChatMessage(role="assistant", content="", options={"tool_call": [call]}),
                ChatMessage(
                    role="tool",
                    content="sunny",
                    options={"tool_result": ToolResult(id="c1", result="sunny")},
                ),
            ]
        )

        assert context.message_role == "function"
        assert context.history[-1] == {
            "role": "model",
            "parts": [{"functionCall": {"name": "weather", "args": {}}}],
        }

    def test_empty_messages(self):
        with pytest.raises(ValueError):
            get_chat_context([])

    def test_blank_last_message_is_rejected(self):
        with pytest.raises(ValueError, match="last chat message"):
            get_chat_context(
                [
                    ChatMessage(role="user", content="hi"),
                    ChatMessage(role="assistant", content="hello"),
                    ChatMessage(role="user", content="  "),
                ]
            )


class TestFunctionDeclarations:

    def test_schema_is_cleaned_and_types_upper_cased(self):
        tool = FunctionTool(
            _noop,
            name="search",
            description="Search documents",
            input_schema={
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "query": {"type": "string", "description": "Query text"},
                    "tags": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["query"],
            },
        )

        declaration = map_base_tool_to_gemini_function_declaration(tool)

        assert declaration == {
            "name": "search",
            "description": "Search documents",
            "parameters": {
                "type": "OBJECT",
                "properties": {
                    "query": {"type": "STRING", "description": "Query text"},
                    "tags": {"type": "ARRAY", "items": {"type": "STRING"}},
                },
                "required": ["query"],
            },
        }

    def test_tool_without_parameters(self):
        tool = FunctionTool(_noop, name="ping", description="Ping")

        assert map_base_tool_to_gemini_function_declaration(tool) == {
            "name": "ping",
            "description": "Ping",
        }


def test_get_parts_text_ignores_non_text_parts():
    parts = [
        {"text": "a"},
        {"inlineData": {"mimeType": "image/png", "data": ""}},
        {"text": "b"},
    ]

    assert get_parts_text(parts) == "ab"
