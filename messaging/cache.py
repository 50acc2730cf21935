"""Repository of locally cached messages.

Provides lookup by message id, a per-channel index and the channel read cursor.
"""

from datetime import datetime

from loguru import logger

from .entity import Message


class MessageCache:
    """
    Repository for cached message entities.

    Only live messages are stored; a deleted message is evicted.
    """

    def __init__(self):
        self._messages: dict[str, Message] = {}  # message_id -> message
        self._channels: dict[str, set[str]] = {}  # channel_id -> message_ids
        self._read_cursors: dict[str, datetime] = {}  # channel_id -> last read

    def get(self, message_id: str) -> Message | None:
        """Get a cached message by its ID."""
        return self._messages.get(message_id)

    def has(self, message_id: str) -> bool:
        return message_id in self._messages

    def add(self, message: Message) -> None:
        """Add a message to the cache, replacing any entry with the same ID."""
        self._messages[message.id] = message
        self._channels.setdefault(message.channel_id, set()).add(message.id)
        cursor = self._read_cursors.get(message.channel_id)
        if cursor is not None and message.timestamp <= cursor:
            message.mark_acknowledged()
        logger.debug("MESSAGE_CACHE: add message_id={}", message.id)

    def remove(self, message_id: str) -> Message | None:
        """
        Evict a message from the cache.

        Returns:
            The removed message, or None if not found.
        """
        message = self._messages.pop(message_id, None)
        if not message:
            return None
        ids = self._channels.get(message.channel_id)
        if ids is not None:
            ids.discard(message_id)
            if not ids:
                del self._channels[message.channel_id]
        logger.debug("MESSAGE_CACHE: remove message_id={}", message_id)
        return message

    def count(self) -> int:
        """Get the number of cached messages."""
        return len(self._messages)

    def in_channel(self, channel_id: str) -> list[Message]:
        """Get cached messages of a channel, oldest first."""
        ids = self._channels.get(channel_id, ())
        return sorted(
            (self._messages[mid] for mid in ids), key=lambda m: m.timestamp
        )

    def read_cursor(self, channel_id: str) -> datetime | None:
        """Timestamp of the latest message acknowledged in a channel."""
        return self._read_cursors.get(channel_id)

    def mark_read_through(self, channel_id: str, timestamp: datetime) -> int:
        """
        Advance the channel read cursor and flag earlier messages as read.

        The cursor never moves backwards.

        Returns:
            Number of cached messages newly marked as acknowledged.
        """
        current = self._read_cursors.get(channel_id)
        if current is None or timestamp > current:
            self._read_cursors[channel_id] = timestamp

        marked = 0
        for message in self.in_channel(channel_id):
            if message.timestamp <= timestamp and not message.acknowledged:
                message.mark_acknowledged()
                marked += 1
        return marked
