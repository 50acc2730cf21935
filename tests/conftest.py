from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from config.mutation import MutationSettings
from config.settings import Settings
from messaging.client import MessageClient
from messaging.models import MessageSnapshot, UserRef
from providers.base import Transport
from providers.rate_limit import RequestLimiter

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
ME = UserRef(id="100", username="me")
OTHER = UserRef(id="200", username="other")


def make_snapshot(**overrides) -> MessageSnapshot:
    """Build a MessageSnapshot authored by ME in channel c1 unless overridden."""
    data = {
        "id": "m1",
        "channel_id": "c1",
        "author": ME,
        "content": "hello",
        "timestamp": BASE_TIME,
    }
    data.update(overrides)
    return MessageSnapshot(**data)


def edited_snapshot(content: str, minutes: int = 5, **overrides) -> MessageSnapshot:
    return make_snapshot(
        content=content,
        edited_timestamp=BASE_TIME + timedelta(minutes=minutes),
        **overrides,
    )


def make_settings(**mutation_overrides) -> Settings:
    return Settings(
        self_user_id=ME.id,
        request_rate_limit=1000,
        request_rate_window=1.0,
        mutation=MutationSettings(**mutation_overrides),
    )


@pytest.fixture
def transport():
    return AsyncMock(spec=Transport)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def client(transport, settings):
    return MessageClient(transport, settings, limiter=RequestLimiter(1000, 1.0))


@pytest.fixture
def message(client):
    return client.observe(make_snapshot())
