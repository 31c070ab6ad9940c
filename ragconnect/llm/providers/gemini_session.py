"""
Gemini sessions and the process-wide session store.

A session owns the connection to the Gemini API and knows how to read text
and tool calls out of its responses. The store hands out one session per
API key so LLM instances share connection pools.
"""

import asyncio
import json
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import (
    Any,
    AsyncGenerator,
    AsyncIterator,
    ClassVar,
    Dict,
    List,
    Optional,
    Tuple,
    cast,
)

import aiohttp

from ...config import get_settings
from ...utils.logging import log_event, track
from ..base_provider import (
    BaseHTTPProvider,
    ChatResponseChunk,
    CompletionResponse,
    LLMMetadata,
    ToolCall,
)
from ..constants import ErrorMessages, GeminiAction, ProviderDefaults
from ..exceptions import (
    AuthenticationError,
    ConnectionError,
    InvalidRequestError,
    ModelNotFoundError,
    ProviderAPIError,
    ProviderConfigurationError,
    RateLimitError,
    ResponseBlockedError,
    ServerError,
    StreamingError,
    TimeoutError,
)
from ..provider_config import (
    GeminiBackend,
    GeminiSessionOptions,
    GoogleGeminiSessionOptions,
)
from .gemini_metadata import BLOCKED_FINISH_REASONS, DEFAULT_SAFETY_SETTINGS

logger = logging.getLogger(__name__)

PROVIDER_ID = ProviderDefaults.GEMINI_PROVIDER_ID

GeminiResponse = Dict[str, Any]


@dataclass
class GeminiGenerativeModel:
    """
    A model bound to a session with fixed generation settings.

    Attributes:
        session: Session that performs the requests
        model: Gemini model id
        generation_config: temperature / topP / maxOutputTokens
        safety_settings: Applied to every request unless overridden
    """

    session: "GeminiSession"
    model: str
    generation_config: Dict[str, Any] = field(default_factory=dict)
    safety_settings: List[Dict[str, str]] = field(
        default_factory=lambda: list(DEFAULT_SAFETY_SETTINGS)
    )

    def build_request(
        self,
        contents: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        safety_settings: Optional[List[Dict[str, str]]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "contents": contents,
            "safetySettings": safety_settings or self.safety_settings,
        }
        if self.generation_config:
            payload["generationConfig"] = dict(self.generation_config)
        if tools:
            payload["tools"] = tools
        return payload

    async def generate_content(
        self,
        contents: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        safety_settings: Optional[List[Dict[str, str]]] = None,
    ) -> GeminiResponse:
        return await self.session.post_generate_content(
            self.model, self.build_request(contents, tools, safety_settings)
        )

    def stream_generate_content(
        self,
        contents: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        safety_settings: Optional[List[Dict[str, str]]] = None,
    ) -> AsyncIterator[GeminiResponse]:
        return self.session.post_stream_generate_content(
            self.model, self.build_request(contents, tools, safety_settings)
        )


class BaseGeminiSession(ABC):
    """Interface every Gemini session backend implements."""

    @abstractmethod
    def get_generative_model(self, metadata: LLMMetadata) -> GeminiGenerativeModel:
        pass

    @abstractmethod
    def get_response_text(self, response: GeminiResponse) -> str:
        pass

    @abstractmethod
    def get_tools_from_response(
        self, response: GeminiResponse
    ) -> Optional[List[ToolCall]]:
        pass

    async def cleanup(self) -> None:
        """Release transport resources held by the session."""

    async def get_chat_stream(
        self, stream: AsyncIterator[GeminiResponse]
    ) -> AsyncGenerator[ChatResponseChunk, None]:
        """Turn raw streamed responses into chat deltas."""
        async for response in stream:
            tools = self.get_tools_from_response(response)
            options: Dict[str, Any] = {"tool_call": tools} if tools else {}
            yield ChatResponseChunk(
                delta=self.get_response_text(response),
                raw=response,
                options=options,
            )

    async def get_completion_stream(
        self, stream: AsyncIterator[GeminiResponse]
    ) -> AsyncGenerator[CompletionResponse, None]:
        """Turn raw streamed responses into completion deltas."""
        async for response in stream:
            yield CompletionResponse(
                text=self.get_response_text(response), raw=response
            )


class GeminiSession(BaseHTTPProvider, BaseGeminiSession):
    """
    Session against the Google AI Gemini API, authenticated by API key.

    Raises:
        ProviderConfigurationError: If no API key is given or found in
            GOOGLE_API_KEY
    """

    def __init__(self, options: Optional[GoogleGeminiSessionOptions] = None):
        BaseHTTPProvider.__init__(self)
        options = options or GoogleGeminiSessionOptions()
        if not options.api_key:
            options = options.with_api_key(get_settings().google_api_key)
        if not options.api_key:
            raise ProviderConfigurationError(
                message=ErrorMessages.GOOGLE_API_KEY_MISSING,
                provider_id=PROVIDER_ID,
                config_field="api_key",
            )
        self.options = options

        log_event(
            "gemini_session_created",
            {"base_url": options.base_url, "timeout_seconds": options.timeout_seconds},
        )

    async def initialize(self) -> None:
        """
        Open the pooled HTTP session. Safe to call more than once.

        A session opened under a previous event loop is replaced, so a stored
        session keeps working across separate ``asyncio.run`` calls.
        """
        self._initialize_session(
            timeout_seconds=self.options.timeout_seconds,
            max_connections=ProviderDefaults.GEMINI_MAX_CONNECTIONS,
            max_connections_per_host=ProviderDefaults.GEMINI_MAX_CONNECTIONS_PER_HOST,
            headers={"x-goog-api-key": self.options.api_key or ""},
        )

    async def cleanup(self) -> None:
        """Close the pooled HTTP session."""
        await self._cleanup_session()
        log_event("gemini_session_cleaned_up", {"base_url": self.options.base_url})

    def get_generative_model(self, metadata: LLMMetadata) -> GeminiGenerativeModel:
        generation_config: Dict[str, Any] = {
            "temperature": metadata.temperature,
            "topP": metadata.top_p,
        }
        if metadata.max_tokens is not None:
            generation_config["maxOutputTokens"] = metadata.max_tokens
        return GeminiGenerativeModel(
            session=self,
            model=metadata.model,
            generation_config=generation_config,
        )

    def get_response_text(self, response: GeminiResponse) -> str:
        """
        Text of the top candidate.

        Raises:
            ResponseBlockedError: If the prompt or the candidate was blocked
        """
        candidates = response.get("candidates") or []
        if not candidates:
            block_reason = (response.get("promptFeedback") or {}).get("blockReason")
            if block_reason:
                raise ResponseBlockedError(
                    message=f"Text not available. Response was blocked due to {block_reason}",
                    provider_id=PROVIDER_ID,
                    reason=block_reason,
                )
            return ""

        candidate = candidates[0]
        finish_reason = candidate.get("finishReason")
        if finish_reason in BLOCKED_FINISH_REASONS:
            raise ResponseBlockedError(
                message=f"Candidate was blocked due to {finish_reason}",
                provider_id=PROVIDER_ID,
                reason=finish_reason,
            )

        parts = (candidate.get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)

    def get_tools_from_response(
        self, response: GeminiResponse
    ) -> Optional[List[ToolCall]]:
        candidates = response.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        calls = [
            ToolCall(
                name=part["functionCall"]["name"],
                input=part["functionCall"].get("args") or {},
                id=str(uuid.uuid4()),
            )
            for part in parts
            if "functionCall" in part
        ]
        return calls or None

    def _build_url(self, model: str, action: GeminiAction) -> str:
        url = f"{self.options.base_url}/models/{model}:{action.value}"
        if action is GeminiAction.STREAM_GENERATE_CONTENT:
            url += "?alt=sse"
        return url

    async def _session_for_request(self) -> aiohttp.ClientSession:
        await self.initialize()
        return self._ensure_session()

    async def post_generate_content(
        self, model: str, payload: Dict[str, Any]
    ) -> GeminiResponse:
        """
        Call generateContent and return the decoded response body.

        Raises:
            ProviderAPIError: (or subclass) for non-200 responses
            ConnectionError: If the API cannot be reached
            TimeoutError: If the request exceeds the session timeout
        """
        session = await self._session_for_request()
        url = self._build_url(model, GeminiAction.GENERATE_CONTENT)

        try:
            async with session.post(url, json=payload) as response:
                response_text = await response.text()

                if response.status != 200:
                    log_event(
                        "gemini_request_failed",
                        {
                            "status": response.status,
                            "error": response_text[:500],
                            "model": model,
                        },
                        level=logging.ERROR,
                    )
                    self._raise_api_error(response.status, response_text, model)

                return json.loads(response_text)

        except asyncio.TimeoutError as e:
            raise TimeoutError(
                message="Gemini request timed out",
                provider_id=PROVIDER_ID,
                timeout_seconds=self.options.timeout_seconds,
                model=model,
            ) from e
        except aiohttp.ClientError as e:
            log_event(
                "gemini_connection_error",
                {"error": str(e), "model": model},
                level=logging.ERROR,
            )
            raise ConnectionError(
                message=f"Failed to connect to Gemini: {str(e)}",
                provider_id=PROVIDER_ID,
                model=model,
                original_error=e,
            ) from e

    async def post_stream_generate_content(
        self, model: str, payload: Dict[str, Any]
    ) -> AsyncGenerator[GeminiResponse, None]:
        """
        Call streamGenerateContent and yield each streamed response.

        Raises:
            ProviderAPIError: (or subclass) for non-200 responses or errors
                embedded in the stream
            StreamingError: If the connection fails mid-stream
            TimeoutError: If the stream exceeds the session timeout
        """
        session = await self._session_for_request()
        url = self._build_url(model, GeminiAction.STREAM_GENERATE_CONTENT)
        chunks_received = 0

        try:
            async with session.post(url, json=payload) as response:
                if response.status != 200:
                    error_text = await response.text()
                    log_event(
                        "gemini_stream_failed",
                        {
                            "status": response.status,
                            "error": error_text[:500],
                            "model": model,
                        },
                        level=logging.ERROR,
                    )
                    self._raise_api_error(response.status, error_text, model)

                async for data in self._iter_sse_json(response, "gemini_stream"):
                    if "error" in data:
                        error_obj = data["error"]
                        status_code = (
                            error_obj.get("code", 500)
                            if isinstance(error_obj, dict)
                            else 500
                        )
                        self._raise_api_error(status_code, json.dumps(data), model)
                    chunks_received += 1
                    yield data

        except asyncio.TimeoutError as e:
            log_event(
                "gemini_stream_timeout",
                {"model": model, "chunks_received": chunks_received},
                level=logging.ERROR,
            )
            raise TimeoutError(
                message="Gemini stream timed out",
                provider_id=PROVIDER_ID,
                timeout_seconds=self.options.timeout_seconds,
                model=model,
            ) from e
        except aiohttp.ClientError as e:
            log_event(
                "gemini_stream_connection_error",
                {"error": str(e), "model": model, "chunks_received": chunks_received},
                level=logging.ERROR,
            )
            raise StreamingError(
                message=f"Failed to stream from Gemini: {str(e)}",
                provider_id=PROVIDER_ID,
                model=model,
                chunks_received=chunks_received,
                original_error=e,
            ) from e

    def _raise_api_error(
        self, status_code: int, response_text: str, model: Optional[str] = None
    ) -> None:
        """
        Raise the exception matching an HTTP status code.

        Raises:
            ProviderAPIError: Always; the subclass depends on status_code
        """
        error_message = self._extract_error_message(response_text)

        if status_code in (401, 403):
            raise AuthenticationError(
                message=f"Invalid API key or insufficient permissions: {error_message}",
                provider_id=PROVIDER_ID,
                status_code=status_code,
                response_body=response_text,
                model=model,
            )
        elif status_code == 404:
            if model and "model" in error_message.lower():
                raise ModelNotFoundError(
                    message=f"Model '{model}' not found: {error_message}",
                    provider_id=PROVIDER_ID,
                    status_code=status_code,
                    response_body=response_text,
                    model=model,
                )
            raise InvalidRequestError(
                message=f"Resource not found: {error_message}",
                provider_id=PROVIDER_ID,
                status_code=status_code,
                response_body=response_text,
                model=model,
            )
        elif status_code == 429:
            raise RateLimitError(
                message=f"Rate limit exceeded: {error_message}",
                provider_id=PROVIDER_ID,
                status_code=status_code,
                response_body=response_text,
                model=model,
            )
        elif status_code == 400:
            raise InvalidRequestError(
                message=f"Invalid request: {error_message}",
                provider_id=PROVIDER_ID,
                status_code=status_code,
                response_body=response_text,
                model=model,
            )
        elif 500 <= status_code < 600:
            raise ServerError(
                message=f"Gemini server error: {error_message}",
                provider_id=PROVIDER_ID,
                status_code=status_code,
                response_body=response_text,
                model=model,
            )
        raise ProviderAPIError(
            message=f"Gemini API error: {error_message}",
            provider_id=PROVIDER_ID,
            status_code=status_code,
            response_body=response_text,
            model=model,
        )

    def _extract_error_message(self, response_text: str) -> str:
        try:
            data = json.loads(response_text)
        except json.JSONDecodeError:
            return response_text[:500]

        if isinstance(data, list) and data:
            data = data[0]
        if isinstance(data, dict):
            error = data.get("error", {})
            if isinstance(error, dict):
                return error.get("message") or response_text[:500]
            if isinstance(error, str):
                return error
            return str(data.get("message", response_text[:500]))
        return response_text[:500]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self.options.base_url})"


class GeminiSessionStore:
    """
    Process-wide cache of Gemini sessions keyed by their options.

    Sessions are matched by session id: the API key for the Google backend
    and the empty string for Vertex. Google sessions must also agree on
    base URL and timeout, since both are fixed when the HTTP session opens.
    """

    sessions: ClassVar[List[Tuple[GeminiSessionOptions, BaseGeminiSession]]] = []

    @staticmethod
    def _get_session_id(options: GeminiSessionOptions) -> str:
        if options.backend == GeminiBackend.GOOGLE:
            return getattr(options, "api_key", None) or ""
        return ""

    @staticmethod
    def _connection_key(options: GeminiSessionOptions) -> Tuple[Any, Any]:
        return (
            getattr(options, "base_url", None),
            getattr(options, "timeout_seconds", None),
        )

    @classmethod
    def _session_matched(
        cls, o1: GeminiSessionOptions, o2: GeminiSessionOptions
    ) -> bool:
        return (
            o1.backend == o2.backend
            and cls._get_session_id(o1) == cls._get_session_id(o2)
            and cls._connection_key(o1) == cls._connection_key(o2)
        )

    @staticmethod
    def _resolve_options(
        options: Optional[GeminiSessionOptions],
    ) -> GeminiSessionOptions:
        if options is None:
            settings = get_settings()
            options = GoogleGeminiSessionOptions(
                base_url=settings.gemini_base_url,
                timeout_seconds=settings.gemini_timeout_seconds,
            )
        if isinstance(options, GoogleGeminiSessionOptions) and not options.api_key:
            options = options.with_api_key(get_settings().google_api_key)
        return options

    @classmethod
    @track(operation="gemini_session_lookup", include_args=False)
    def get(cls, options: Optional[GeminiSessionOptions] = None) -> BaseGeminiSession:
        """
        Return the stored session matching options, creating it if needed.

        Raises:
            ProviderConfigurationError: For a Vertex backend with no
                registered session, or a Google backend with no API key
        """
        options = cls._resolve_options(options)

        for stored_options, session in cls.sessions:
            if cls._session_matched(stored_options, options):
                return session

        if options.backend == GeminiBackend.VERTEX:
            raise ProviderConfigurationError(
                message=ErrorMessages.NO_SESSION,
                provider_id=PROVIDER_ID,
                config_field="backend",
            )

        session = GeminiSession(cast(GoogleGeminiSessionOptions, options))
        cls.sessions.append((options, session))
        return session

    @classmethod
    def add(cls, session: BaseGeminiSession, options: GeminiSessionOptions) -> None:
        """Register a session built elsewhere, e.g. for the Vertex backend."""
        cls.sessions.append((cls._resolve_options(options), session))

    @classmethod
    async def cleanup(cls) -> None:
        """Close the transport of every stored session."""
        for _, session in cls.sessions:
            await session.cleanup()

    @classmethod
    def clear(cls) -> None:
        """Forget every stored session."""
        cls.sessions.clear()
