"""
MagicBus — Errors
===================
Error types for subscription and dispatch.

Only NotFoundError is raised by the bus itself on a caller's behalf.
FatalFault is a marker: mailboxes raise subclasses of it to abort a
post instead of having the fault reported as a FailedMessage.
"""

from __future__ import annotations

from typing import Any


class MagicBusError(Exception):
    """Base error for MagicBus operations."""
    pass


class NotFoundError(MagicBusError, LookupError):
    """Message type is not registered, or mailbox is not subscribed to it."""

    def __init__(self, message_type: type, mailbox: Any):
        self.message_type = message_type
        self.mailbox = mailbox
        type_name = getattr(message_type, "__qualname__", str(message_type))
        super().__init__(
            f"Mailbox '{mailbox!r}' is not subscribed "
            f"to message type '{type_name}'."
        )


class FatalFault(MagicBusError):
    """
    Fault that is never converted into a FailedMessage.

    Raised from a mailbox, it propagates out of post() unmodified and
    aborts delivery to the remaining mailboxes.
    """
    pass


class RecursionDepthExceeded(FatalFault):
    """Nested posts on one thread went past BusConfig.max_depth."""

    def __init__(self, depth: int, limit: int, message: Any):
        self.depth = depth
        self.limit = limit
        self.message = message
        super().__init__(
            f"Post depth {depth} exceeds limit {limit} "
            f"while posting {type(message).__qualname__}."
        )
