"""
MagicBus — Configuration
==========================
Immutable bus settings, passed explicitly at construction.
No environment lookups, no module-level mutable defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from magicbus.errors import FatalFault


# ══════════════════════════════════════════════════════════════
# FAULT CLASSIFICATION
# ══════════════════════════════════════════════════════════════

# Programmer-error faults. A mailbox raising one of these aborts the
# post; any other Exception becomes a FailedMessage.
DEFAULT_FATAL_FAULTS: tuple[type[BaseException], ...] = (
    FatalFault,
    ArithmeticError,
    AssertionError,
    AttributeError,
    LookupError,
    NameError,
    RuntimeError,
    TypeError,
    ValueError,
    MemoryError,
    SystemError,
)


# ══════════════════════════════════════════════════════════════
# BUS CONFIG
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BusConfig:
    """
    Settings for one MagicBus instance.

    fatal_faults:    exception classes never caught by the dispatcher.
                     FatalFault and BaseException subclasses outside
                     Exception (KeyboardInterrupt, SystemExit) are
                     always fatal.
    max_depth:       nested post limit per thread; None disables the
                     guard and recursion is left unbounded.
    return_receipts: post a ReturnReceipt after each delivered message.
    logger_name:     parent logger for dispatch logging.
    """

    fatal_faults: tuple[type[BaseException], ...] = DEFAULT_FATAL_FAULTS
    max_depth: Optional[int] = None
    return_receipts: bool = False
    logger_name: str = "magicbus"

    def __post_init__(self) -> None:
        for fault in self.fatal_faults:
            if not (isinstance(fault, type) and issubclass(fault, BaseException)):
                raise TypeError(
                    f"fatal_faults must contain exception classes, got {fault!r}."
                )
        if self.max_depth is not None and self.max_depth < 1:
            raise ValueError(
                f"max_depth must be at least 1, got {self.max_depth}."
            )

    def is_fatal(self, fault: BaseException) -> bool:
        """Check whether a fault raised by a mailbox must abort the post."""
        if not isinstance(fault, Exception) or isinstance(fault, FatalFault):
            return True
        return isinstance(fault, self.fatal_faults)
