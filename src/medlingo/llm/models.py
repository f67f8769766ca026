from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """A single prompt message sent to a model."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'system', 'user' or 'assistant'")
    content: str = Field(description="Content of the message")

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role="user", content=content)


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    model: str = Field(description="Model that generated the response")
    finish_reason: str | None = Field(
        default=None,
        description="Vendor stop reason, e.g. 'stop', 'length', 'SAFETY'"
    )
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )

    @property
    def truncated(self) -> bool:
        """True when the model stopped at the token limit.

        A truncated batch answer is cut-off JSON, so callers treat it as
        unusable rather than parsing it.
        """
        return (self.finish_reason or "").lower() in {"length", "max_tokens"}
