"""Data models for the conversation log.

These models define a message independently of the store that holds it.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Author of a message."""

    DOCTOR = "doctor"
    PATIENT = "patient"


class NewMessage(BaseModel):
    """A message as submitted by a client, before the store assigns id and time."""

    model_config = ConfigDict(frozen=True)

    role: Role
    text_original: str = Field(min_length=1, description="Author's text in the author's language")
    text_translated: str | None = Field(
        default=None,
        description="Send-time translation into the sender's selected language"
    )
    target_language: str = Field(description="Language code of text_translated")
    audio_url: str | None = Field(default=None)


class Message(NewMessage):
    """An immutable message owned by the message store."""

    id: int = Field(description="Store-assigned id, increasing in creation order")
    created_at: datetime = Field(description="Store-assigned creation time (UTC)")

    @classmethod
    def from_new(cls, new: NewMessage, message_id: int, created_at: datetime) -> "Message":
        """Stamp a submitted message with its store-assigned identity."""
        return cls(id=message_id, created_at=created_at, **new.model_dump())

    @property
    def sort_key(self) -> tuple[datetime, int]:
        return (self.created_at, self.id)
