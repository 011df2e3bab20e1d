"""Unit tests for the LLM provider layer and error taxonomy."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from studymate.errors import (
    ConfigurationError,
    GenerationError,
    ProviderError,
    StudymateError,
    classify_provider_error,
)
from studymate.llm import (
    ChatMessage,
    GenerationSettings,
    GeminiProvider,
    LLMProvider,
    LLMResponse,
    create_llm_provider,
)


class TestLLMProvider:
    """Tests for LLMProvider interface."""

    def test_provider_is_abstract(self):
        """Test that LLMProvider cannot be instantiated directly."""
        with pytest.raises(TypeError):
            LLMProvider()  # type: ignore


class TestModels:
    """Tests for provider-facing models."""

    def test_chat_message_is_frozen(self):
        """Test that ChatMessage is immutable."""
        msg = ChatMessage(role="user", content="hi")
        with pytest.raises(ValueError):
            msg.content = "changed"  # type: ignore

    def test_response_usage_optional(self):
        """Test that usage defaults to None."""
        response = LLMResponse(content="x", model="m")
        assert response.usage is None

    def test_default_settings(self):
        """Test the shared sampling defaults."""
        settings = GenerationSettings()

        assert settings.as_kwargs() == {
            "temperature": 0.7,
            "max_tokens": 2048,
            "top_p": 0.8,
            "top_k": 40,
        }

    def test_settings_validation(self):
        """Test that out-of-range parameters are rejected."""
        with pytest.raises(ValueError):
            GenerationSettings(temperature=3.0)
        with pytest.raises(ValueError):
            GenerationSettings(max_output_tokens=0)

    @given(st.integers(min_value=1, max_value=65536))
    def test_max_tokens_passthrough(self, limit: int):
        """Property test: the token limit is forwarded unchanged."""
        assert GenerationSettings(max_output_tokens=limit).as_kwargs()["max_tokens"] == limit


class TestFactory:
    """Tests for create_llm_provider()."""

    def test_create_gemini(self):
        """Test creating the Gemini provider."""
        provider = create_llm_provider("gemini", api_key="test-key", model="gemini-2.5-pro")

        assert isinstance(provider, GeminiProvider)
        assert provider.model == "gemini-2.5-pro"

    def test_google_alias(self):
        """Test that 'google' is accepted as an alias."""
        assert isinstance(create_llm_provider("Google", api_key="test-key"), GeminiProvider)

    def test_missing_api_key(self):
        """Test that a missing key is a TypeError."""
        with pytest.raises(TypeError):
            create_llm_provider("gemini")

    def test_unknown_provider(self):
        """Test that unknown providers are rejected."""
        with pytest.raises(ValueError, match="Unsupported provider"):
            create_llm_provider("openai", api_key="test-key")


class TestGeminiProvider:
    """Tests for Gemini request construction (no network calls)."""

    @pytest.fixture
    def provider(self):
        return GeminiProvider(api_key="test-key")

    def test_convert_messages(self, provider):
        """Test role mapping and system instruction extraction."""
        system, contents = provider._convert_messages([
            ChatMessage(role="system", content="Be brief"),
            ChatMessage(role="user", content="hi"),
            ChatMessage(role="assistant", content="hello"),
        ])

        assert system == "Be brief"
        assert [c.role for c in contents] == ["user", "model"]
        assert contents[1].parts[0].text == "hello"

    def test_build_config(self, provider):
        """Test that sampling settings end up in the request config."""
        config = provider._build_config(None, 0.7, 1000, top_p=0.8, top_k=40)

        assert config.max_output_tokens == 1000
        assert config.temperature == 0.7
        assert config.top_p == 0.8
        assert config.tool_config.function_calling_config.mode == "NONE"

    def test_start_chat_seeds_history(self, provider):
        """Test that a chat session is opened with the prior turns."""
        session = provider.start_chat(
            [ChatMessage(role="user", content="hi"), ChatMessage(role="assistant", content="hello")],
            max_tokens=1000,
        )

        assert session.history_length == 2


class TestErrors:
    """Tests for the error taxonomy."""

    def test_hierarchy(self):
        """Test that provider errors are generation errors."""
        assert issubclass(ProviderError, GenerationError)
        assert issubclass(GenerationError, StudymateError)
        assert issubclass(ConfigurationError, StudymateError)

    def test_rate_limit_is_retryable(self):
        """Test rate limit classification."""
        error = classify_provider_error(RuntimeError("429 RESOURCE_EXHAUSTED"))

        assert error.is_retryable()
        assert str(error).startswith("Rate limit exceeded")

    def test_network_error_is_retryable(self):
        """Test network failure classification."""
        error = classify_provider_error(TimeoutError("Read timeout"))

        assert error.is_retryable()
        assert str(error).startswith("Network error")

    def test_other_errors_not_retryable(self):
        """Test that unknown failures are plain provider errors."""
        error = classify_provider_error(ValueError("bad request"))

        assert not error.is_retryable()
        assert str(error) == "Provider error: bad request"

    def test_provider_error_passthrough(self):
        """Test that an existing ProviderError is returned unchanged."""
        original = ProviderError("already classified", retryable=True)
        assert classify_provider_error(original) is original
