"""Applies push notifications from the event feed to cached messages.

The server is authoritative: edits overwrite the cached field group
unconditionally and deletes are terminal. Events are applied one at a time
in arrival order. Events for messages that are not cached are dropped;
a bare notification never creates a message.
"""

from collections.abc import AsyncIterable

from loguru import logger
from pydantic import ValidationError

from .cache import MessageCache
from .models import EventKind, MessageEvent


class Reconciler:
    """Reconciles cached messages with server-pushed edit/delete events."""

    def __init__(self, cache: MessageCache):
        self._cache = cache

    def apply(self, event: MessageEvent) -> bool:
        """
        Apply a single event.

        Returns:
            True if a cached message changed, False if the event was ignored.

        Raises:
            pydantic.ValidationError: if an edit event carries a malformed payload.
        """
        message = self._cache.get(event.message_id)
        if message is None:
            logger.debug(
                "RECONCILE: ignoring {} for unknown message {}",
                event.kind.value,
                event.message_id,
            )
            return False

        if event.kind is EventKind.EDIT:
            update = event.update()
            applied = message.apply_update(
                update.content, update.mentions, update.edited_timestamp
            )
            if applied:
                logger.debug("RECONCILE: edit applied to {}", event.message_id)
            return applied

        # DELETE
        changed = message.mark_deleted()
        self._cache.remove(event.message_id)
        logger.debug("RECONCILE: message {} deleted remotely", event.message_id)
        return changed

    async def run(self, feed: AsyncIterable[MessageEvent]) -> int:
        """
        Consume the feed until it ends, applying events in arrival order.

        A malformed event is logged and skipped.

        Returns:
            Number of events that changed a cached message.
        """
        changed = 0
        async for event in feed:
            try:
                if self.apply(event):
                    changed += 1
            except ValidationError as e:
                logger.error(
                    "RECONCILE: malformed {} event for {}: {}",
                    event.kind.value,
                    event.message_id,
                    e,
                )
        logger.info("RECONCILE: feed ended after {} changes", changed)
        return changed
