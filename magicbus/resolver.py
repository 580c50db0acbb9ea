"""
MagicBus — Type-Order Resolver
================================
Decides which registered message types apply to a concrete type, and
in what order their mailboxes are called.

Ordering rules:
- Supertype mailboxes before subtype mailboxes
- Mailboxes of one type in subscription order
- Unrelated types in registry insertion order of the type key

The resolver is a filter plus a stable topological sort. A comparison
sort on "is supertype of" is not used: that comparison is not a total
order once unrelated types are involved, and can leave a supertype
behind a subtype.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Callable

# is_supertype(candidate, concrete) -> candidate is concrete or one of its ancestors
SupertypePredicate = Callable[[type, type], bool]


def _is_supertype(candidate: type, concrete: type) -> bool:
    return issubclass(concrete, candidate)


class TypeOrderResolver:
    """
    Orders registered types general-before-specific.

    Works on snapshots: callers pass (message_type, mailboxes) pairs in
    registry insertion order and receive a flat mailbox list.
    """

    def __init__(self, is_supertype: SupertypePredicate = _is_supertype):
        self._is_supertype = is_supertype

    def check_type(self, message_type: type) -> None:
        """
        Reject message types the default predicate cannot test.

        Parameterized generics and protocols without @runtime_checkable
        pass as subscription keys but make issubclass() raise on every
        later post. Custom predicates define their own type identifiers
        and are not checked.

        Raises:
            TypeError: message_type is not usable with issubclass()
        """
        if self._is_supertype is not _is_supertype:
            return

        if not isinstance(message_type, type):
            raise TypeError(
                f"Message type must be a class, got {message_type!r}."
            )
        try:
            issubclass(object, message_type)
        except TypeError as exc:
            raise TypeError(
                f"Message type {message_type!r} cannot be used "
                f"with issubclass(): {exc}"
            ) from exc

    def select(
        self,
        concrete_type: type,
        entries: Sequence[tuple[type, Sequence[Any]]],
    ) -> list[tuple[type, Sequence[Any]]]:
        """Keep entries whose type is concrete_type or a supertype of it."""
        return [
            entry for entry in entries
            if self._is_supertype(entry[0], concrete_type)
        ]

    def order(
        self, entries: Sequence[tuple[type, Sequence[Any]]]
    ) -> list[tuple[type, Sequence[Any]]]:
        """
        Stable topological sort of entries by the supertype relation.

        Each round emits the earliest remaining entry with no remaining
        proper supertype. Ties therefore fall back to input order.
        """
        remaining = list(entries)
        ordered: list[tuple[type, Sequence[Any]]] = []

        while remaining:
            for index, (candidate, _) in enumerate(remaining):
                if not any(
                    other is not candidate
                    and self._is_supertype(other, candidate)
                    and not self._is_supertype(candidate, other)
                    for other, _ in remaining
                ):
                    ordered.append(remaining.pop(index))
                    break
            else:
                # Only reachable with a cyclic predicate; keep input order.
                ordered.extend(remaining)
                break

        return ordered

    def resolve(
        self,
        concrete_type: type,
        entries: Sequence[tuple[type, Sequence[Any]]],
    ) -> list[Any]:
        """Flatten the ordered mailboxes eligible for concrete_type."""
        mailboxes: list[Any] = []
        for _, type_mailboxes in self.order(self.select(concrete_type, entries)):
            mailboxes.extend(type_mailboxes)
        return mailboxes
