"""Locally cached chat message backed by the remote service."""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING

from .errors import EntityGone
from .models import Attachment, MessageSnapshot, UserRef

if TYPE_CHECKING:
    from config.mutation import RateLimitPolicy

    from .mutator import RemoteMutator


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps from the service are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class MessageLifecycle(Enum):
    LIVE = "live"
    DELETED = "deleted"


@dataclass(frozen=True)
class MessageFields:
    """The mutable part of a message, always replaced as a whole.

    Holding content, mentions and edited timestamp in one value means a
    reader sees either the old edit or the new one, never a mix.
    """

    content: str
    mentions: tuple[UserRef, ...]
    edited_timestamp: datetime | None


class Message:
    """
    Local cache of a single message.

    Reads return the current cached snapshot and never touch the network.
    ``reply``, ``edit``, ``delete`` and ``acknowledge`` go through the
    RemoteMutator, which serialises them per message with ``mutation_lock``.
    Push notifications are applied by the Reconciler without that lock.

    Every operation takes ``on_rate_limit``: ``RateLimitPolicy.SURFACE``
    raises ``RateLimited``, ``RateLimitPolicy.RETRY_ONCE`` waits out the
    rate limit and retries once. None uses the client's configured default.
    """

    def __init__(
        self,
        *,
        message_id: str,
        channel_id: str,
        author: UserRef,
        timestamp: datetime,
        content: str = "",
        mentions: tuple[UserRef, ...] = (),
        attachments: tuple[Attachment, ...] = (),
        edited_timestamp: datetime | None = None,
        mentions_everyone: bool = False,
        mutator: RemoteMutator | None = None,
    ):
        self._id = message_id
        self._channel_id = channel_id
        self._author = author
        self._timestamp = _as_utc(timestamp)
        self._attachments = tuple(attachments)
        self._mentions_everyone = mentions_everyone
        self._fields = MessageFields(
            content=content,
            mentions=tuple(mentions),
            edited_timestamp=self._clamp(edited_timestamp),
        )
        self._acknowledged = False
        self._lifecycle = MessageLifecycle.LIVE
        self._state_lock = threading.Lock()
        self._mutator = mutator
        self.mutation_lock = asyncio.Lock()

    @classmethod
    def from_snapshot(
        cls, snapshot: MessageSnapshot, mutator: RemoteMutator | None = None
    ) -> Message:
        return cls(
            message_id=snapshot.id,
            channel_id=snapshot.channel_id,
            author=snapshot.author,
            timestamp=snapshot.timestamp,
            content=snapshot.content,
            mentions=snapshot.mentions,
            attachments=snapshot.attachments,
            edited_timestamp=snapshot.edited_timestamp,
            mentions_everyone=snapshot.mentions_everyone,
            mutator=mutator,
        )

    # --- reads ---

    @property
    def id(self) -> str:
        return self._id

    @property
    def channel_id(self) -> str:
        return self._channel_id

    @property
    def author(self) -> UserRef:
        return self._author

    @property
    def timestamp(self) -> datetime:
        return self._timestamp

    @property
    def attachments(self) -> tuple[Attachment, ...]:
        return self._attachments

    @property
    def mentions_everyone(self) -> bool:
        return self._mentions_everyone

    @property
    def fields(self) -> MessageFields:
        """Consistent view of content, mentions and edited timestamp."""
        return self._fields

    @property
    def content(self) -> str:
        return self._fields.content

    @property
    def mentions(self) -> tuple[UserRef, ...]:
        return self._fields.mentions

    @property
    def edited_timestamp(self) -> datetime | None:
        return self._fields.edited_timestamp

    @property
    def acknowledged(self) -> bool:
        return self._acknowledged

    def is_acknowledged(self) -> bool:
        return self._acknowledged

    @property
    def lifecycle(self) -> MessageLifecycle:
        return self._lifecycle

    @property
    def is_deleted(self) -> bool:
        return self._lifecycle is MessageLifecycle.DELETED

    # --- operations ---

    async def reply(
        self, text: str, *, on_rate_limit: RateLimitPolicy | None = None
    ) -> None:
        """Send ``text`` to this message's channel, prefixed with a mention of the author.

        Not idempotent: every call posts a new message.
        """
        await self._require_mutator().reply(self, text, on_rate_limit=on_rate_limit)

    async def edit(
        self, text: str, *, on_rate_limit: RateLimitPolicy | None = None
    ) -> Message:
        """Replace the content of this message and return it.

        Only the author may edit a message. Idempotent.
        """
        return await self._require_mutator().edit(
            self, text, on_rate_limit=on_rate_limit
        )

    async def delete(self, *, on_rate_limit: RateLimitPolicy | None = None) -> None:
        """Delete this message. Idempotent."""
        await self._require_mutator().delete(self, on_rate_limit=on_rate_limit)

    async def acknowledge(
        self, *, on_rate_limit: RateLimitPolicy | None = None
    ) -> None:
        """Mark this message and every earlier one in the channel as read.

        Idempotent: acknowledging an acknowledged message does nothing.
        """
        await self._require_mutator().acknowledge(self, on_rate_limit=on_rate_limit)

    # --- state transitions (mutator and reconciler only) ---

    def ensure_live(self) -> None:
        if self._lifecycle is MessageLifecycle.DELETED:
            raise EntityGone(self._id)

    def apply_update(
        self,
        content: str,
        mentions: tuple[UserRef, ...],
        edited_timestamp: datetime | None,
    ) -> bool:
        """Replace the mutable field group. Returns False if the message is deleted."""
        fields = MessageFields(
            content=content,
            mentions=tuple(mentions),
            edited_timestamp=self._clamp(edited_timestamp or datetime.now(UTC)),
        )
        with self._state_lock:
            if self._lifecycle is MessageLifecycle.DELETED:
                return False
            self._fields = fields
            return True

    def mark_deleted(self) -> bool:
        """Move to DELETED. Returns False if it already was."""
        with self._state_lock:
            if self._lifecycle is MessageLifecycle.DELETED:
                return False
            self._lifecycle = MessageLifecycle.DELETED
            return True

    def mark_acknowledged(self) -> None:
        self._acknowledged = True

    def _clamp(self, edited: datetime | None) -> datetime | None:
        if edited is None:
            return None
        return max(_as_utc(edited), self._timestamp)

    def _require_mutator(self) -> RemoteMutator:
        self.ensure_live()
        if self._mutator is None:
            raise RuntimeError(f"Message {self._id} is not bound to a client")
        return self._mutator

    def __str__(self) -> str:
        return self.content

    def __repr__(self) -> str:
        return (
            f"Message(id={self._id!r}, channel_id={self._channel_id!r}, "
            f"author={self._author.id!r}, lifecycle={self._lifecycle.value!r})"
        )
