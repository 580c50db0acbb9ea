"""
MagicBus — Bus
================
The object applications hold. Owns a SubscriberRegistry and a
Dispatcher, and installs discard mailboxes for the control messages
before any application subscription can exist.

Usage:
    bus = MagicBus()

    bus.subscribe(FailedMessage, report_failure)
    bus.subscribe(OrderPlaced, reserve_stock)

    bus.post(OrderPlaced(order_id="A-1"))

Construct one bus during application startup and pass it to the
components that need it. There is no process-wide default instance.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from magicbus.config import BusConfig
from magicbus.dispatcher import Dispatcher
from magicbus.mailbox import Mailbox, discard
from magicbus.messages import FailedMessage, ReturnReceipt, UndeliveredMessage
from magicbus.registry import SubscriberRegistry

logger = logging.getLogger("magicbus.bus")


class MagicBus:
    """
    Type-indexed, synchronous publish/subscribe bus.

    - Messages go to mailboxes subscribed to their class or any
      superclass, superclass mailboxes first
    - Mailboxes of one type are called in subscription order
    - A recoverable mailbox fault becomes a FailedMessage; delivery
      continues with the next mailbox
    - A post nobody receives becomes an UndeliveredMessage
    - Fatal faults propagate out of post()
    """

    def __init__(
        self,
        config: Optional[BusConfig] = None,
        registry: Optional[SubscriberRegistry] = None,
    ):
        self._config = config or BusConfig()
        self._registry = registry if registry is not None else SubscriberRegistry()
        self._dispatcher = Dispatcher(self._registry, self._config)
        self._install_guard_mailboxes()

    def _install_guard_mailboxes(self) -> None:
        """
        Discard mailboxes for the control messages.

        Without them a FailedMessage or UndeliveredMessage nobody listens
        to would itself be undelivered, and repost forever.
        """
        control_types = [FailedMessage, UndeliveredMessage]
        if self._config.return_receipts:
            control_types.append(ReturnReceipt)

        for message_type in control_types:
            self._registry.subscribe(message_type, discard(message_type))

        logger.debug(
            f"Guard mailboxes installed for "
            f"{', '.join(t.__qualname__ for t in control_types)}"
        )

    @property
    def config(self) -> BusConfig:
        return self._config

    @property
    def registry(self) -> SubscriberRegistry:
        return self._registry

    def subscribe(self, message_type: type, mailbox: Mailbox) -> None:
        """
        Deliver messages of message_type, and its subtypes, to mailbox.

        Raises:
            TypeError: mailbox not callable, or message_type not a class
        """
        self._registry.subscribe(message_type, mailbox)

    def unsubscribe(self, message_type: type, mailbox: Mailbox) -> None:
        """
        Stop delivering messages of message_type to mailbox.

        Raises:
            NotFoundError: mailbox is not subscribed to message_type
        """
        self._registry.unsubscribe(message_type, mailbox)

    def post(self, message: Any) -> None:
        """Post message to every mailbox resolved for its type."""
        self._dispatcher.dispatch(self, message)

    def subscribers_to(self, message_type: type) -> list[Mailbox]:
        """Mailboxes a message of message_type would be delivered to, in order."""
        return self._registry.mailboxes_for(message_type)

    def __repr__(self) -> str:
        return (
            f"MagicBus(types={len(self._registry.message_types())}, "
            f"subscriptions={len(self._registry)})"
        )
