from pydantic import BaseModel, Field

from ..llm import LLMResponse


class UsageSummary(BaseModel):
    """Token usage across generation calls.

    Attributes:
        total_calls: Total number of provider calls that returned
        total_input_tokens: Total input tokens across all calls
        total_output_tokens: Total output tokens across all calls
        operation_breakdown: Call counts per operation (reply, roadmap, notes)
    """

    total_calls: int = Field(default=0, description="Total API calls")
    total_input_tokens: int = Field(default=0, description="Total input tokens")
    total_output_tokens: int = Field(default=0, description="Total output tokens")
    operation_breakdown: dict[str, int] = Field(
        default_factory=dict,
        description="Calls per operation"
    )

    def add_response(self, operation: str, response: LLMResponse) -> None:
        """Record one provider response."""
        self.total_calls += 1
        self.operation_breakdown[operation] = self.operation_breakdown.get(operation, 0) + 1
        if response.usage:
            self.total_input_tokens += response.usage.get("prompt_tokens", 0)
            self.total_output_tokens += response.usage.get("completion_tokens", 0)
