"""Message client - facade that wires transport, cache, mutator and reconciler."""

from collections.abc import AsyncIterable

from loguru import logger

from config.settings import Settings, get_settings
from providers.base import Transport
from providers.rate_limit import RequestLimiter

from .cache import MessageCache
from .entity import Message
from .models import MessageEvent, MessageSnapshot
from .mutator import RemoteMutator
from .reconciler import Reconciler


class MessageClient:
    """
    Entry point for working with remote messages.

    Components:
        - MessageCache: cached live messages and channel read cursors
        - RemoteMutator: outbound reply/edit/delete/acknowledge
        - Reconciler: inbound edit/delete notifications
    """

    def __init__(
        self,
        transport: Transport,
        settings: Settings | None = None,
        *,
        limiter: RequestLimiter | None = None,
    ):
        settings = settings or get_settings()
        self._cache = MessageCache()
        self._limiter = limiter or RequestLimiter(
            settings.request_rate_limit, settings.request_rate_window
        )
        self._mutator = RemoteMutator(
            transport,
            self._cache,
            limiter=self._limiter,
            settings=settings.mutation,
            self_user_id=settings.self_user_id,
        )
        self._reconciler = Reconciler(self._cache)

        logger.info(
            "MessageClient initialized (rate_limit_policy={})",
            settings.mutation.rate_limit_policy.value,
        )

    @property
    def cache(self) -> MessageCache:
        return self._cache

    def observe(self, snapshot: MessageSnapshot) -> Message:
        """
        Cache a message seen through a fetch or other direct observation.

        A message that is already cached keeps its identity; its content,
        mentions and edited timestamp are refreshed from an edited snapshot.
        """
        existing = self._cache.get(snapshot.id)
        if existing is not None:
            if snapshot.edited_timestamp is None:
                return existing
            existing.apply_update(
                snapshot.content, snapshot.mentions, snapshot.edited_timestamp
            )
            return existing

        message = Message.from_snapshot(snapshot, self._mutator)
        self._cache.add(message)
        return message

    def get_message(self, message_id: str) -> Message | None:
        """Get a cached message by ID."""
        return self._cache.get(message_id)

    def cache_size(self) -> int:
        return self._cache.count()

    def reconcile(self, event: MessageEvent) -> bool:
        """Apply a single push event. See Reconciler.apply."""
        return self._reconciler.apply(event)

    async def run_feed(self, feed: AsyncIterable[MessageEvent]) -> int:
        """Apply push events until the feed ends. See Reconciler.run."""
        return await self._reconciler.run(feed)
