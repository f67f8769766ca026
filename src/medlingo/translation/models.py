"""Wire models for the translation service.

Field names are snake_case in Python and camelCase on the wire.
"""

from pydantic import BaseModel, ConfigDict, Field

from ..messages.models import Role


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_wire(self) -> dict:
        """Serialize with wire names, dropping unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TranslateRequest(_WireModel):
    text: str = Field(min_length=1)
    target_language: str = Field(alias="targetLanguage", min_length=2)
    role: Role | None = None


class TranslateResponse(_WireModel):
    translated: str
    error: str | None = Field(default=None, description="Set to AI_UNAVAILABLE for fallback text")

    @property
    def degraded(self) -> bool:
        return self.error is not None


class BatchInput(_WireModel):
    id: int
    text: str
    role: Role | None = None


class TranslateBatchRequest(_WireModel):
    inputs: list[BatchInput]
    target_language: str = Field(alias="targetLanguage", min_length=2)


class BatchTranslation(_WireModel):
    id: int
    translated: str


class TranslateBatchResponse(_WireModel):
    translations: list[BatchTranslation] = Field(default_factory=list)
    error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.error is not None

    def as_mapping(self) -> dict[int, str]:
        return {item.id: item.translated for item in self.translations}


class SummarizeRequest(_WireModel):
    conversation: str


class SummarizeResponse(_WireModel):
    summary: str
    error: str | None = None
