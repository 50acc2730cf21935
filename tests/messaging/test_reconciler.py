"""Tests for messaging/reconciler.py."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from conftest import BASE_TIME, OTHER, make_snapshot
from messaging.cache import MessageCache
from messaging.entity import Message, MessageLifecycle
from messaging.models import EventKind, MessageEvent
from messaging.reconciler import Reconciler


def _edit(message_id="m1", content="edited", minutes=3, **payload):
    payload.setdefault("content", content)
    payload.setdefault(
        "edited_timestamp", (BASE_TIME + timedelta(minutes=minutes)).isoformat()
    )
    return MessageEvent(
        kind=EventKind.EDIT, message_id=message_id, channel_id="c1", payload=payload
    )


def _delete(message_id="m1"):
    return MessageEvent(kind=EventKind.DELETE, message_id=message_id, channel_id="c1")


async def _feed(*events):
    for event in events:
        yield event


@pytest.fixture
def cache():
    cache = MessageCache()
    cache.add(Message.from_snapshot(make_snapshot()))
    return cache


@pytest.fixture
def reconciler(cache):
    return Reconciler(cache)


class TestApply:
    def test_edit_overwrites_field_group(self, cache, reconciler):
        event = _edit(mentions=[{"id": OTHER.id, "username": OTHER.username}])

        assert reconciler.apply(event) is True

        message = cache.get("m1")
        assert message.content == "edited"
        assert message.mentions == (OTHER,)
        assert message.edited_timestamp == BASE_TIME + timedelta(minutes=3)

    def test_duplicate_edit_reapplies_idempotently(self, cache, reconciler):
        reconciler.apply(_edit())
        first = cache.get("m1").fields
        reconciler.apply(_edit())
        assert cache.get("m1").fields == first

    def test_last_arrival_wins(self, cache, reconciler):
        reconciler.apply(_edit(content="newer", minutes=9))
        reconciler.apply(_edit(content="older", minutes=4))

        message = cache.get("m1")
        assert message.content == "older"
        assert message.edited_timestamp == BASE_TIME + timedelta(minutes=4)

    def test_delete_is_terminal_and_evicts(self, cache, reconciler):
        message = cache.get("m1")

        assert reconciler.apply(_delete()) is True

        assert message.lifecycle is MessageLifecycle.DELETED
        assert cache.count() == 0
        assert reconciler.apply(_delete()) is False
        assert reconciler.apply(_edit()) is False
        assert message.content == "hello"

    def test_unknown_delete_ignored(self, cache, reconciler):
        before = cache.count()
        assert reconciler.apply(_delete("nope")) is False
        assert cache.count() == before

    def test_unknown_edit_creates_nothing(self, cache, reconciler):
        assert reconciler.apply(_edit("nope")) is False
        assert cache.get("nope") is None
        assert cache.count() == 1

    def test_malformed_edit_payload_raises(self, reconciler):
        bad = MessageEvent(
            kind=EventKind.EDIT, message_id="m1", channel_id="c1", payload={}
        )
        with pytest.raises(ValidationError):
            reconciler.apply(bad)

    def test_edit_keeps_acknowledged_flag(self, cache, reconciler):
        cache.get("m1").mark_acknowledged()
        reconciler.apply(_edit())
        assert cache.get("m1").acknowledged is True


class TestEventParsing:
    def test_kind_is_case_insensitive(self):
        event = MessageEvent.model_validate(
            {"kind": "DELETE", "message_id": "m1", "channel_id": "c1"}
        )
        assert event.kind is EventKind.DELETE


class TestRun:
    @pytest.mark.asyncio
    async def test_applies_in_arrival_order(self, cache, reconciler):
        changed = await reconciler.run(
            _feed(
                _edit(content="first", minutes=1),
                _edit(content="second", minutes=2),
                _edit("unknown"),
            )
        )

        assert changed == 2
        assert cache.get("m1").content == "second"

    @pytest.mark.asyncio
    async def test_malformed_event_skipped(self, cache, reconciler):
        bad = MessageEvent(
            kind=EventKind.EDIT,
            message_id="m1",
            channel_id="c1",
            payload={"mentions": "not-a-list"},
        )

        changed = await reconciler.run(_feed(bad, _edit(content="after"), _delete()))

        assert changed == 2
        assert cache.count() == 0

    @pytest.mark.asyncio
    async def test_client_run_feed(self, client, message):
        changed = await client.run_feed(_feed(_edit(content="pushed")))
        assert changed == 1
        assert message.content == "pushed"
