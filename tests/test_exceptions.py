from ragconnect.llm.exceptions import (
    AuthenticationError,
    ModelNotFoundError,
    RateLimitError,
    ResponseBlockedError,
)


class TestProviderErrors:

    def test_to_dict(self):
        error = RateLimitError(
            message="Rate limit exceeded: slow down",
            provider_id="gemini",
            status_code=429,
            response_body="{}",
            model="gemini-pro",
            retry_after=30,
        )

        data = error.to_dict()

        assert data["error_type"] == "rate_limit_exceeded"
        assert data["retryable"] is True
        assert data["metadata"]["retry_after"] == 30
        assert "30 seconds" in error.get_user_message()

    def test_str_includes_provider_and_model(self):
        error = ModelNotFoundError(
            message="Model 'x' not found",
            provider_id="gemini",
            status_code=404,
            response_body="",
            model="x",
        )

        assert str(error) == "Model 'x' not found (provider: gemini) (model: x)"
        assert "'x'" in error.get_user_message()

    def test_authentication_error_is_not_retryable(self):
        error = AuthenticationError(
            message="bad key", provider_id="gemini", status_code=403, response_body=""
        )

        assert error.retryable is False
        assert error.error_type == "permission_denied"

    def test_response_blocked(self):
        error = ResponseBlockedError(
            message="blocked", provider_id="gemini", reason="SAFETY"
        )

        assert error.reason == "SAFETY"
        assert error.to_dict()["error_type"] == "response_blocked"
