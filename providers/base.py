"""Abstract transport interface for the remote message service."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from messaging.models import MessageSnapshot


class Transport(abc.ABC):
    """Authenticated request channel to the remote message service.

    Implementations raise ``providers.exceptions.ForbiddenError`` when a
    capability is missing, ``RateLimitError`` when the service throttles the
    caller and ``APIError`` for any other unsuccessful response. Anything
    else they raise is treated as a transport failure.
    """

    @abc.abstractmethod
    async def send_message(self, channel_id: str, content: str) -> MessageSnapshot:
        """Post a new message to a channel and return the created message."""

    @abc.abstractmethod
    async def edit_message(
        self, channel_id: str, message_id: str, content: str
    ) -> MessageSnapshot:
        """Replace a message's content and return the updated message."""

    @abc.abstractmethod
    async def delete_message(self, channel_id: str, message_id: str) -> None:
        """Delete a message."""

    @abc.abstractmethod
    async def acknowledge_message(self, channel_id: str, message_id: str) -> None:
        """Mark a message and everything before it in the channel as read."""
