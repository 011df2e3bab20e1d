from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Represents a chat message sent to a provider."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    model: str = Field(description="Model that generated the response")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )


class GenerationSettings(BaseModel):
    """Sampling parameters shared by every request of one kind."""

    model_config = ConfigDict(frozen=True)

    max_output_tokens: int = Field(default=2048, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_p: float = Field(default=0.8, ge=0.0, le=1.0)
    top_k: int = Field(default=40, ge=1)

    def as_kwargs(self) -> dict:
        """Keyword arguments for LLMProvider.chat_completion/start_chat."""
        return {
            "temperature": self.temperature,
            "max_tokens": self.max_output_tokens,
            "top_p": self.top_p,
            "top_k": self.top_k,
        }
