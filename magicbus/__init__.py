"""
MagicBus — Public API
=======================
In-process, type-indexed publish/subscribe.
Mailboxes subscribe to classes; posts reach every mailbox subscribed to
the message's class or one of its superclasses.
"""

import logging

from magicbus.bus import MagicBus
from magicbus.config import DEFAULT_FATAL_FAULTS, BusConfig
from magicbus.errors import (
    FatalFault,
    MagicBusError,
    NotFoundError,
    RecursionDepthExceeded,
)
from magicbus.mailbox import Mailbox, NamedMailbox, discard
from magicbus.messages import (
    FailedMessage,
    ReturnReceipt,
    UndeliveredMessage,
    WithoutReceipt,
)
from magicbus.observers import install_logging_mailboxes
from magicbus.registry import SubscriberRegistry, Subscription
from magicbus.resolver import TypeOrderResolver

# Library logging: applications decide where records go.
logging.getLogger("magicbus").addHandler(logging.NullHandler())

__all__ = [
    "MagicBus",
    "BusConfig",
    "DEFAULT_FATAL_FAULTS",
    "MagicBusError",
    "NotFoundError",
    "FatalFault",
    "RecursionDepthExceeded",
    "Mailbox",
    "NamedMailbox",
    "discard",
    "FailedMessage",
    "UndeliveredMessage",
    "ReturnReceipt",
    "WithoutReceipt",
    "install_logging_mailboxes",
    "SubscriberRegistry",
    "Subscription",
    "TypeOrderResolver",
]
