"""
MagicBus — Dispatcher
=======================
Routes a posted message to its resolved mailboxes.

Dispatch behavior:
1. Resolve mailboxes for the message's concrete type
2. None resolved → post UndeliveredMessage, stop
3. Call mailboxes sequentially, in resolved order
4. Recoverable fault → post FailedMessage, continue to next mailbox
5. Fatal fault → do not catch; it leaves post() unmodified
6. Optionally post a ReturnReceipt once delivered

Control messages go back through bus.post(), so they follow the same
algorithm. No cycle or storm detection happens unless max_depth is set:
a FailedMessage subscriber that always fails, or a mailbox reposting its
own input, recurses without limit.

This module does NOT:
- Hold the registry lock while calling mailboxes
- Retry failed mailboxes
- Run mailboxes on other threads
"""

import logging
import threading
from typing import Any, Optional

from magicbus.config import BusConfig
from magicbus.errors import RecursionDepthExceeded
from magicbus.mailbox import Mailbox, mailbox_name
from magicbus.messages import (
    FailedMessage,
    ReturnReceipt,
    UndeliveredMessage,
    WithoutReceipt,
)
from magicbus.registry import SubscriberRegistry


class Dispatcher:
    """
    Synchronous, re-entrant post algorithm for one bus.

    Holds no delivery state between posts except the per-thread nesting
    depth used by the optional depth guard.
    """

    def __init__(
        self,
        registry: SubscriberRegistry,
        config: Optional[BusConfig] = None,
    ):
        self._registry = registry
        self._config = config or BusConfig()
        self._local = threading.local()
        self.logger = logging.getLogger(f"{self._config.logger_name}.dispatch")

    @property
    def depth(self) -> int:
        """Nesting depth of post() on the current thread."""
        return getattr(self._local, "depth", 0)

    def dispatch(self, bus: Any, message: Any) -> None:
        """
        Deliver message to every resolved mailbox.

        Raises:
            Any fatal fault raised by a mailbox, unmodified.
            RecursionDepthExceeded: max_depth configured and exceeded.
        """
        limit = self._config.max_depth
        depth = self.depth + 1
        if limit is not None and depth > limit:
            raise RecursionDepthExceeded(depth, limit, message)

        self._local.depth = depth
        try:
            self._deliver(bus, message)
        finally:
            self._local.depth = depth - 1

    def _deliver(self, bus: Any, message: Any) -> None:
        message_type = type(message)
        mailboxes = self._registry.mailboxes_for(message_type)

        if not mailboxes:
            self.logger.debug(
                f"No mailboxes for {message_type.__qualname__}; "
                f"posting UndeliveredMessage"
            )
            bus.post(UndeliveredMessage(bus, message))
            return

        received = False
        for mailbox in mailboxes:
            if self._receive(bus, mailbox, message):
                received = True

        if (
            received
            and self._config.return_receipts
            and not isinstance(message, WithoutReceipt)
        ):
            bus.post(ReturnReceipt(bus, message))

    def _receive(self, bus: Any, mailbox: Mailbox, message: Any) -> bool:
        """
        Call one mailbox. Returns False when it raised a recoverable fault.

        Fatal faults are re-raised untouched; BaseExceptions outside
        Exception are never caught at all.
        """
        fault: Optional[Exception] = None
        try:
            mailbox(message)
        except Exception as exc:
            if self._config.is_fatal(exc):
                raise

            self.logger.warning(
                f"Mailbox failed: {mailbox_name(mailbox)} for "
                f"{type(message).__qualname__}: {exc}",
                exc_info=True,
            )
            fault = exc

        if fault is None:
            self.logger.debug(
                f"Delivered {type(message).__qualname__} → "
                f"{mailbox_name(mailbox)}"
            )
            return True

        # Posted outside the except block so faults raised while
        # delivering the FailedMessage are not chained onto this one.
        bus.post(FailedMessage(bus, mailbox, message, fault))
        return False
