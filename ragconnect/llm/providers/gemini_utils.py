"""
Translation between ragconnect chat messages and Gemini ``contents``.

Gemini rejects consecutive contents with the same role and parts with empty
text, so messages are converted, merged and filtered before a request is
built.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ...tools.base import BaseTool
from ..base_provider import ChatMessage, MessageContent, MessageRole
from ..constants import ErrorMessages

GeminiPart = Dict[str, Any]
GeminiContent = Dict[str, Any]

_DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$")

# Schema keywords the function declaration API accepts
_ALLOWED_SCHEMA_KEYS = {
    "type",
    "format",
    "description",
    "nullable",
    "enum",
    "properties",
    "required",
    "items",
}


class GeminiHelper:
    """Role tables and message converters for Gemini."""

    ROLES_TO_GEMINI: Dict[str, str] = {
        MessageRole.USER.value: "user",
        MessageRole.SYSTEM.value: "user",
        MessageRole.ASSISTANT.value: "model",
        MessageRole.MEMORY.value: "user",
        MessageRole.DEVELOPER.value: "user",
        MessageRole.TOOL.value: "function",
    }

    ROLES_FROM_GEMINI: Dict[str, str] = {
        "user": MessageRole.USER.value,
        "model": MessageRole.ASSISTANT.value,
        "function": MessageRole.TOOL.value,
    }

    @staticmethod
    def message_content_to_gemini_parts(content: MessageContent) -> List[GeminiPart]:
        """
        Convert message content into Gemini parts.

        Raises:
            ValueError: For image URLs that are not base64 data URLs
        """
        if isinstance(content, str):
            return [{"text": content}]

        parts: List[GeminiPart] = []
        for detail in content:
            detail_type = detail.get("type")
            if detail_type == "text":
                parts.append({"text": detail.get("text", "")})
            elif detail_type == "image_url":
                url = detail.get("image_url", {}).get("url", "")
                match = _DATA_URL_PATTERN.match(url)
                if match is None:
                    raise ValueError(
                        ErrorMessages.UNSUPPORTED_IMAGE_URL.format(url=url[:50])
                    )
                parts.append(
                    {
                        "inlineData": {
                            "mimeType": match.group("mime"),
                            "data": match.group("data"),
                        }
                    }
                )
            else:
                raise ValueError(f"Unsupported message content type: {detail_type}")
        return parts

    @staticmethod
    def chat_message_to_gemini(
        message: ChatMessage, fn_map: Mapping[str, str]
    ) -> GeminiContent:
        """
        Convert one chat message to a Gemini content.

        Args:
            message: Message to convert
            fn_map: Tool call id -> function name, used for tool results

        Returns:
            Dict with "role" and "parts"
        """
        tool_result = message.tool_result
        if tool_result is not None:
            name = fn_map.get(tool_result.id)
            if name is None:
                raise ValueError(
                    ErrorMessages.UNKNOWN_TOOL_CALL_ID.format(id=tool_result.id)
                )
            return {
                "role": "function",
                "parts": [
                    {
                        "functionResponse": {
                            "name": name,
                            "response": {"result": tool_result.result},
                        }
                    }
                ],
            }

        tool_calls = message.tool_calls
        if tool_calls:
            parts = [
                {"functionCall": {"name": call.name, "args": call.input}}
                for call in tool_calls
            ]
            # Keep any text the model produced alongside its calls
            text_parts = [
                part
                for part in GeminiHelper.message_content_to_gemini_parts(
                    message.content
                )
                if part.get("text")
            ]
            return {"role": "model", "parts": text_parts + parts}

        return {
            "role": GeminiHelper.ROLES_TO_GEMINI[message.role],
            "parts": GeminiHelper.message_content_to_gemini_parts(message.content),
        }

    @staticmethod
    def merge_neighboring_same_role_messages(
        contents: Sequence[GeminiContent],
    ) -> List[GeminiContent]:
        """Merge consecutive contents that share a role."""
        merged: List[GeminiContent] = []
        for content in contents:
            if merged and merged[-1]["role"] == content["role"]:
                merged[-1] = {
                    "role": content["role"],
                    "parts": merged[-1]["parts"] + content["parts"],
                }
            else:
                merged.append({"role": content["role"], "parts": list(content["parts"])})
        return merged


@dataclass
class GeminiChatContext:
    """Contents that precede the new message, plus the new message's parts."""

    history: List[GeminiContent]
    message: List[GeminiPart]
    message_role: str = "user"


def _is_empty_text_part(part: GeminiPart) -> bool:
    return "text" in part and not str(part["text"]).strip()


def get_chat_context(messages: Sequence[ChatMessage]) -> GeminiChatContext:
    """
    Split a message list into Gemini history and the message to send.

    Raises:
        ValueError: If messages is empty or the last message has no content
    """
    if not messages:
        raise ValueError(ErrorMessages.NO_MESSAGES)

    fn_map: Dict[str, str] = {}
    for message in messages:
        for call in message.tool_calls:
            fn_map[call.id] = call.name

    contents = [GeminiHelper.chat_message_to_gemini(message, fn_map) for message in messages]
    contents = [
        {
            "role": content["role"],
            "parts": [part for part in content["parts"] if not _is_empty_text_part(part)],
        }
        for content in contents
    ]
    if not contents[-1]["parts"]:
        raise ValueError(ErrorMessages.EMPTY_LAST_MESSAGE)

    contents = GeminiHelper.merge_neighboring_same_role_messages(
        [content for content in contents if content["parts"]]
    )

    last = contents[-1]
    message_role = "function" if last["role"] == "function" else "user"
    return GeminiChatContext(
        history=contents[:-1], message=last["parts"], message_role=message_role
    )


def get_parts_text(parts: Sequence[GeminiPart]) -> str:
    """Concatenate the text of text parts."""
    return "".join(part["text"] for part in parts if "text" in part)


def _clean_schema(schema: Mapping[str, Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    for key, value in schema.items():
        if key not in _ALLOWED_SCHEMA_KEYS or value is None:
            continue
        if key == "type" and isinstance(value, str):
            cleaned[key] = value.upper()
        elif key == "properties" and isinstance(value, Mapping):
            cleaned[key] = {
                name: _clean_schema(prop)
                for name, prop in value.items()
                if isinstance(prop, Mapping)
            }
        elif key == "items" and isinstance(value, Mapping):
            cleaned[key] = _clean_schema(value)
        else:
            cleaned[key] = value
    return cleaned


def map_base_tool_to_gemini_function_declaration(tool: BaseTool) -> Dict[str, Any]:
    """
    Build a Gemini function declaration from a tool's metadata.

    Returns:
        {"name", "description", "parameters"}; parameters are omitted for
        tools without input properties
    """
    declaration: Dict[str, Any] = {
        "name": tool.metadata.name,
        "description": tool.metadata.description,
    }
    parameters: Optional[Dict[str, Any]] = None
    if tool.metadata.input_schema.get("properties"):
        parameters = _clean_schema(tool.metadata.input_schema)
    if parameters:
        declaration["parameters"] = parameters
    return declaration
