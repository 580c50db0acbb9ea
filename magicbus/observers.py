"""
MagicBus — Logging Observers
==============================
Optional mailboxes that report control messages through logging.
The bus never installs these itself; applications opt in.
"""

from __future__ import annotations

import logging
from typing import Optional

from magicbus.mailbox import NamedMailbox, mailbox_name
from magicbus.messages import FailedMessage, UndeliveredMessage

_default_logger = logging.getLogger("magicbus.observers")


def install_logging_mailboxes(
    bus, logger: Optional[logging.Logger] = None
) -> tuple[NamedMailbox, NamedMailbox]:
    """
    Subscribe logging mailboxes for FailedMessage and UndeliveredMessage.

    Returns:
        (failed_mailbox, undelivered_mailbox), for later unsubscribe.
    """
    log = logger or _default_logger

    def log_failed(failed: FailedMessage) -> None:
        fault = failed.fault
        log.error(
            f"Mailbox {mailbox_name(failed.mailbox)} failed on "
            f"{type(failed.message).__qualname__}: {fault}",
            exc_info=(type(fault), fault, fault.__traceback__),
        )

    def log_undelivered(undelivered: UndeliveredMessage) -> None:
        log.warning(
            f"Undelivered {type(undelivered.message).__qualname__}: "
            f"{undelivered.message!r}"
        )

    failed_mailbox = NamedMailbox("LOG-MAILBOX<FailedMessage>", log_failed)
    undelivered_mailbox = NamedMailbox(
        "LOG-MAILBOX<UndeliveredMessage>", log_undelivered
    )
    bus.subscribe(FailedMessage, failed_mailbox)
    bus.subscribe(UndeliveredMessage, undelivered_mailbox)
    return failed_mailbox, undelivered_mailbox
