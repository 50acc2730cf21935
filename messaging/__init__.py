"""Remote chat messages: cached entities, remote mutations and push reconciliation."""

from .cache import MessageCache
from .client import MessageClient
from .entity import Message, MessageFields, MessageLifecycle
from .errors import (
    Capability,
    EntityGone,
    ErrorKind,
    InsufficientPermissions,
    MessageOperationError,
    RateLimited,
    RemoteFailure,
)
from .models import (
    Attachment,
    EventKind,
    MessageEvent,
    MessageSnapshot,
    MessageUpdate,
    UserRef,
)
from .mutator import RemoteMutator
from .reconciler import Reconciler

__all__ = [
    "Attachment",
    "Capability",
    "EntityGone",
    "ErrorKind",
    "EventKind",
    "InsufficientPermissions",
    "Message",
    "MessageCache",
    "MessageClient",
    "MessageEvent",
    "MessageFields",
    "MessageLifecycle",
    "MessageOperationError",
    "MessageSnapshot",
    "MessageUpdate",
    "RateLimited",
    "Reconciler",
    "RemoteFailure",
    "RemoteMutator",
    "UserRef",
]
