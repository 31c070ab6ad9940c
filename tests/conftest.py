import pytest

from ragconnect.config import reset_settings
from ragconnect.llm.providers.gemini_session import GeminiSession, GeminiSessionStore
from ragconnect.llm.provider_config import GoogleGeminiSessionOptions
from tests.mocks import MockAsyncMongoClient, MockMongoClient


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    for name in (
        "GOOGLE_API_KEY",
        "RAGCONNECT_GOOGLE_API_KEY",
        "RAGCONNECT_GEMINI_MODEL",
        "RAGCONNECT_MONGO_APP_NAME",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    GeminiSessionStore.clear()
    yield
    reset_settings()
    GeminiSessionStore.clear()


@pytest.fixture
def google_api_key(monkeypatch) -> str:
    monkeypatch.setenv("GOOGLE_API_KEY", "test-google-key")
    reset_settings()
    return "test-google-key"


@pytest.fixture
def gemini_session() -> GeminiSession:
    return GeminiSession(GoogleGeminiSessionOptions(api_key="test-google-key"))


@pytest.fixture
def mongo_client() -> MockMongoClient:
    return MockMongoClient()


@pytest.fixture
def async_mongo_client(mongo_client) -> MockAsyncMongoClient:
    return MockAsyncMongoClient(mongo_client)
