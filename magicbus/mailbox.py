"""
MagicBus — Mailboxes
======================
A mailbox is any callable receiving one message and returning nothing.
Functions, lambdas, bound methods and objects defining __call__ all
qualify; NamedMailbox wraps one with a readable name.

Mailboxes are identity-significant: two lambdas with the same body are
different mailboxes.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Protocol


class Mailbox(Protocol):
    """Receives one message synchronously."""

    def __call__(self, message: Any) -> None:
        ...  # pragma: no cover


class NamedMailbox:
    """Mailbox wrapping a callable, shown by name in logs and reprs."""

    __slots__ = ("_name", "_receive")

    def __init__(self, name: str, receive: Callable[[Any], None]):
        self._name = name
        self._receive = receive

    @property
    def name(self) -> str:
        return self._name

    def __call__(self, message: Any) -> None:
        self._receive(message)

    def __repr__(self) -> str:
        return self._name

    __str__ = __repr__


def _ignore(message: Any) -> None:
    pass


def discard(message_type: type) -> NamedMailbox:
    """Create a mailbox which throws away messages of message_type."""
    return NamedMailbox(
        f"DISCARD-MAILBOX<{message_type.__module__}.{message_type.__qualname__}>",
        _ignore,
    )


def same_mailbox(a: Any, b: Any) -> bool:
    """
    Identity comparison for mailboxes.

    Bound methods are re-created on every attribute access, so two bound
    methods are the same mailbox when they bind the same function to the
    same object.
    """
    if a is b:
        return True
    if inspect.ismethod(a) and inspect.ismethod(b):
        return a.__self__ is b.__self__ and a.__func__ is b.__func__
    return False


def mailbox_name(mailbox: Any) -> str:
    if isinstance(mailbox, NamedMailbox):
        return mailbox.name
    return getattr(mailbox, "__qualname__", repr(mailbox))
