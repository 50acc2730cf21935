"""Remote mutations of cached messages.

Each operation issues one outbound request through the transport and applies
the result to the cached message only after the request succeeded.
Outcomes are handled the same way for every operation:

- success: the result is applied under the message's mutation lock
- ForbiddenError: ``InsufficientPermissions``; nothing applied
- RateLimitError: ``RateLimited``, or one retry after the wait under
  ``RateLimitPolicy.RETRY_ONCE``
- anything else: ``RemoteFailure``; nothing applied

``reply`` is not idempotent. ``edit``, ``delete`` and ``acknowledge`` are.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

from config.mutation import MutationSettings, RateLimitPolicy
from providers.base import Transport
from providers.exceptions import APIError, ForbiddenError, RateLimitError
from providers.rate_limit import RequestLimiter

from .cache import MessageCache
from .entity import Message
from .errors import (
    Capability,
    EntityGone,
    InsufficientPermissions,
    RateLimited,
    RemoteFailure,
)
from .models import MessageSnapshot

T = TypeVar("T")
R = TypeVar("R")


class RemoteMutator:
    """Translates message operations into transport requests."""

    def __init__(
        self,
        transport: Transport,
        cache: MessageCache,
        *,
        limiter: RequestLimiter | None = None,
        settings: MutationSettings | None = None,
        self_user_id: str | None = None,
    ):
        self._transport = transport
        self._cache = cache
        self._limiter = limiter or RequestLimiter()
        self._settings = settings or MutationSettings()
        self._self_user_id = self_user_id

    async def reply(
        self,
        message: Message,
        text: str,
        *,
        on_rate_limit: RateLimitPolicy | None = None,
    ) -> None:
        """Post ``"<@author>, text"`` to the message's channel.

        The message itself is not changed. The posted message is cached.
        """
        message.ensure_live()
        content = f"{message.author.mention}, {text}"

        def apply(snapshot: MessageSnapshot) -> None:
            if not self._cache.has(snapshot.id):
                self._cache.add(Message.from_snapshot(snapshot, self))

        await self._run(
            "reply",
            message,
            lambda: self._transport.send_message(message.channel_id, content),
            apply,
            on_rate_limit,
            serialize=False,
        )

    async def edit(
        self,
        message: Message,
        text: str,
        *,
        on_rate_limit: RateLimitPolicy | None = None,
    ) -> Message:
        """Replace the message content.

        Raises InsufficientPermissions without a request when we know we
        are not the author.
        """
        message.ensure_live()
        if self._self_user_id is not None and message.author.id != self._self_user_id:
            logger.info(
                "Refusing to edit message {} authored by {}",
                message.id,
                message.author.id,
            )
            raise InsufficientPermissions(Capability.MESSAGE_AUTHOR)

        def apply(snapshot: MessageSnapshot) -> Message:
            if not message.apply_update(
                snapshot.content, snapshot.mentions, snapshot.edited_timestamp
            ):
                raise EntityGone(message.id)
            return message

        return await self._run(
            "edit",
            message,
            lambda: self._transport.edit_message(message.channel_id, message.id, text),
            apply,
            on_rate_limit,
        )

    async def delete(
        self,
        message: Message,
        *,
        on_rate_limit: RateLimitPolicy | None = None,
    ) -> None:
        """Delete the message remotely, then mark it deleted and evict it."""
        message.ensure_live()

        async def call() -> None:
            try:
                await self._transport.delete_message(message.channel_id, message.id)
            except APIError as e:
                if e.status_code != 404:
                    raise
                logger.info("Message {} already deleted remotely", message.id)

        def apply(_: None) -> None:
            message.mark_deleted()
            self._cache.remove(message.id)

        await self._run("delete", message, call, apply, on_rate_limit)

    async def acknowledge(
        self,
        message: Message,
        *,
        on_rate_limit: RateLimitPolicy | None = None,
    ) -> None:
        """Advance the channel read cursor to this message."""
        message.ensure_live()
        if message.acknowledged:
            return

        def apply(_: None) -> None:
            self._cache.mark_read_through(message.channel_id, message.timestamp)
            message.mark_acknowledged()

        await self._run(
            "acknowledge",
            message,
            lambda: self._transport.acknowledge_message(message.channel_id, message.id),
            apply,
            on_rate_limit,
        )

    def _resolve_policy(self, on_rate_limit: RateLimitPolicy | None) -> RateLimitPolicy:
        if on_rate_limit is None:
            return self._settings.rate_limit_policy
        return RateLimitPolicy(on_rate_limit)

    async def _run(
        self,
        operation: str,
        message: Message,
        call: Callable[[], Awaitable[T]],
        apply: Callable[[T], R],
        on_rate_limit: RateLimitPolicy | None,
        *,
        serialize: bool = True,
    ) -> R:
        """
        Issue ``call`` and apply its result.

        With ``serialize`` the request and the apply run under the message's
        mutation lock. Rate-limit waits always happen outside it.
        """
        policy = self._resolve_policy(on_rate_limit)
        attempts = 2 if policy is RateLimitPolicy.RETRY_ONCE else 1

        with logger.contextualize(
            message_id=message.id, channel_id=message.channel_id, operation=operation
        ):
            for attempt in range(1, attempts + 1):
                await self._limiter.wait_if_blocked()
                try:
                    if serialize:
                        async with message.mutation_lock:
                            message.ensure_live()
                            result = await self._call(call)
                            return apply(result)
                    message.ensure_live()
                    result = await self._call(call)
                    return apply(result)
                except RateLimitError as e:
                    self._limiter.set_blocked(e.retry_after)
                    retry = (
                        attempt < attempts
                        and e.retry_after <= self._settings.max_retry_after
                    )
                    if retry:
                        logger.info(
                            "{} rate limited, retrying once after {:.3f}s",
                            operation,
                            e.retry_after,
                        )
                        continue
                    logger.warning(
                        "{} rate limited (retry_after={:.3f}s, attempt {})",
                        operation,
                        e.retry_after,
                        attempt,
                    )
                    raise RateLimited(e.retry_after) from e

        raise AssertionError("unreachable")

    async def _call(self, call: Callable[[], Awaitable[T]]) -> T:
        """Await a transport call, mapping its failures to message errors.

        RateLimitError is passed through for the retry policy.
        """
        try:
            return await call()
        except RateLimitError:
            raise
        except ForbiddenError as e:
            logger.warning("Remote refused request: missing {}", e.capability)
            raise InsufficientPermissions(e.capability) from e
        except Exception as e:
            logger.error("Remote request failed: {}: {}", type(e).__name__, e)
            raise RemoteFailure(e) from e
