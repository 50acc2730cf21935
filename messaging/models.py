"""Message value models: attachments, user references, snapshots and feed events."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Attachment(BaseModel):
    """A file attached to a message."""

    filename: str
    filesize: int = Field(ge=0)  # bytes
    id: str
    url: str

    model_config = ConfigDict(frozen=True)


class UserRef(BaseModel):
    """Opaque reference to a user, resolved elsewhere when details are needed."""

    id: str
    username: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def mention(self) -> str:
        return f"<@{self.id}>"

    def __str__(self) -> str:
        return self.mention


class MessageSnapshot(BaseModel):
    """Server view of a message as returned by the transport."""

    id: str
    channel_id: str
    author: UserRef
    content: str = ""
    timestamp: datetime
    edited_timestamp: datetime | None = None
    mentions: tuple[UserRef, ...] = ()
    mentions_everyone: bool = False
    attachments: tuple[Attachment, ...] = ()

    model_config = ConfigDict(frozen=True)


class EventKind(StrEnum):
    EDIT = "edit"
    DELETE = "delete"


class MessageUpdate(BaseModel):
    """Payload of an edit notification."""

    content: str
    mentions: tuple[UserRef, ...] = ()
    edited_timestamp: datetime | None = None

    model_config = ConfigDict(frozen=True)


class MessageEvent(BaseModel):
    """A push notification about a message delivered by the event feed."""

    kind: EventKind
    message_id: str
    channel_id: str
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @field_validator("kind", mode="before")
    @classmethod
    def parse_kind(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v

    def update(self) -> MessageUpdate:
        """Parse the payload of an edit event.

        Raises:
            pydantic.ValidationError: if the payload is not a valid update.
        """
        return MessageUpdate.model_validate(self.payload)
