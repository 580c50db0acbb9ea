"""
MagicBus — Control Messages
=============================
Messages the bus posts about its own deliveries.

Subscribe to FailedMessage to find out about broken mailboxes, and to
UndeliveredMessage to find out about posts nobody received. Both are
absorbed by discard mailboxes when the application has no subscriber.

FailedMessage does not capture fatal faults; those bubble out of
post() to the poster.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from magicbus.mailbox import Mailbox


class WithoutReceipt:
    """Marker base: posting an instance never produces a ReturnReceipt."""

    __slots__ = ()


@dataclass(frozen=True)
class FailedMessage(WithoutReceipt):
    """One mailbox raised a recoverable fault while receiving message."""

    bus: Any
    mailbox: Mailbox
    message: Any
    fault: Exception


@dataclass(frozen=True)
class UndeliveredMessage(WithoutReceipt):
    """A post resolved to zero mailboxes."""

    bus: Any
    message: Any


@dataclass(frozen=True)
class ReturnReceipt(WithoutReceipt):
    """
    At least one mailbox received message without faulting.

    Only posted when BusConfig.return_receipts is enabled. Listening for
    receipts couples parts of the system together; reserve it for
    logging and debugging.
    """

    bus: Any
    message: Any
