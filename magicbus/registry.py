"""
MagicBus — Subscriber Registry
================================
Controls which mailboxes receive which message types.

Rules:
- Keyed by message type (a class), one ordered list per type
- Multiple mailboxes per type; the same mailbox may subscribe twice
- Removing the last mailbox for a type drops the type entirely
- Unsubscribing an absent mailbox raises NotFoundError
- Message types must be classes usable with issubclass(); mailboxes
  must be callable. Both are checked at subscribe time
- In-memory only
- Thread-safe; the lock is never held while a mailbox runs
"""

import itertools
import logging
from dataclasses import dataclass
from threading import Lock
from typing import Optional

from magicbus.errors import NotFoundError
from magicbus.mailbox import Mailbox, mailbox_name, same_mailbox
from magicbus.resolver import TypeOrderResolver

logger = logging.getLogger("magicbus.registry")


def _type_name(message_type: type) -> str:
    return getattr(message_type, "__qualname__", repr(message_type))


@dataclass(frozen=True)
class Subscription:
    """One (message type, mailbox) registration."""

    message_type: type
    mailbox: Mailbox
    order: int


class SubscriberRegistry:
    """
    In-memory registry of mailbox subscriptions.

    Each entry maps a message type to the list of its Subscriptions,
    in subscription order. Dict insertion order of the type keys is the
    tie-break between unrelated types during resolution.
    """

    def __init__(self, resolver: Optional[TypeOrderResolver] = None):
        self._subscriptions: dict[type, list[Subscription]] = {}
        self._lock = Lock()
        self._sequence = itertools.count()
        self._resolver = resolver or TypeOrderResolver()

    def subscribe(self, message_type: type, mailbox: Mailbox) -> Subscription:
        """
        Append mailbox to message_type's subscriptions.

        Raises:
            TypeError: mailbox not callable, or message_type not a class
                       usable with issubclass()
        """
        if not callable(mailbox):
            raise TypeError(
                f"Mailbox must be callable, got {type(mailbox).__qualname__}."
            )
        self._resolver.check_type(message_type)

        with self._lock:
            subscription = Subscription(
                message_type=message_type,
                mailbox=mailbox,
                order=next(self._sequence),
            )
            self._subscriptions.setdefault(message_type, []).append(
                subscription
            )

        logger.debug(
            f"Mailbox subscribed: {mailbox_name(mailbox)} → "
            f"{_type_name(message_type)} (order: {subscription.order})"
        )
        return subscription

    def unsubscribe(self, message_type: type, mailbox: Mailbox) -> None:
        """
        Remove the earliest subscription of mailbox to message_type.

        Raises:
            NotFoundError: type not registered, or mailbox not subscribed
        """
        with self._lock:
            subscriptions = self._subscriptions.get(message_type)
            if subscriptions is None:
                raise NotFoundError(message_type, mailbox)

            for index, subscription in enumerate(subscriptions):
                if same_mailbox(subscription.mailbox, mailbox):
                    del subscriptions[index]
                    break
            else:
                raise NotFoundError(message_type, mailbox)

            if not subscriptions:
                del self._subscriptions[message_type]

        logger.debug(
            f"Mailbox unsubscribed: {mailbox_name(mailbox)} → "
            f"{_type_name(message_type)}"
        )

    def snapshot(self) -> list[tuple[type, tuple[Mailbox, ...]]]:
        """(message type, mailboxes) pairs in type insertion order."""
        with self._lock:
            return [
                (message_type, tuple(s.mailbox for s in subscriptions))
                for message_type, subscriptions in self._subscriptions.items()
            ]

    def mailboxes_for(self, concrete_type: type) -> list[Mailbox]:
        """
        Ordered mailboxes eligible for a message of concrete_type.
        Returns empty list if none match (not an error).
        """
        return self._resolver.resolve(concrete_type, self.snapshot())

    def subscriptions_to(self, message_type: type) -> tuple[Subscription, ...]:
        """Subscriptions registered for exactly message_type."""
        with self._lock:
            return tuple(self._subscriptions.get(message_type, ()))

    def message_types(self) -> tuple[type, ...]:
        """All message types with at least one subscription."""
        with self._lock:
            return tuple(self._subscriptions)

    def __contains__(self, message_type: object) -> bool:
        with self._lock:
            return message_type in self._subscriptions

    def __len__(self) -> int:
        with self._lock:
            return sum(len(s) for s in self._subscriptions.values())
