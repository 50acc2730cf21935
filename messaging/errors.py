"""Errors surfaced by message operations.

Every error carries a ``kind`` so callers can catch
:class:`MessageOperationError` once and ``match`` on ``err.kind``.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    INSUFFICIENT_PERMISSIONS = "insufficient_permissions"
    RATE_LIMITED = "rate_limited"
    REMOTE_FAILURE = "remote_failure"
    ENTITY_GONE = "entity_gone"


class Capability(StrEnum):
    """Capabilities a mutation can be refused for."""

    SEND_MESSAGES = "send_messages"
    MANAGE_MESSAGES = "manage_messages"
    READ_MESSAGE_HISTORY = "read_message_history"
    MESSAGE_AUTHOR = "message_author"


class MessageOperationError(Exception):
    """Base class for failed message operations."""

    kind: ErrorKind


class InsufficientPermissions(MessageOperationError):
    kind = ErrorKind.INSUFFICIENT_PERMISSIONS

    def __init__(self, capability: str):
        super().__init__(f"Missing capability: {capability}")
        self.capability = capability


class RateLimited(MessageOperationError):
    kind = ErrorKind.RATE_LIMITED

    def __init__(self, retry_after: float):
        super().__init__(f"Rate limited, retry after {retry_after:.3f}s")
        self.retry_after = retry_after


class RemoteFailure(MessageOperationError):
    kind = ErrorKind.REMOTE_FAILURE

    def __init__(self, cause: BaseException):
        super().__init__(f"Remote request failed: {cause}")
        self.cause = cause


class EntityGone(MessageOperationError):
    """The message has been deleted; no further operations are possible."""

    kind = ErrorKind.ENTITY_GONE

    def __init__(self, message_id: str):
        super().__init__(f"Message {message_id} has been deleted")
        self.message_id = message_id
