"""
MagicBus — Concurrency & Re-entrancy Tests
============================================
Covers:
- Concurrent subscribe/unsubscribe without lost updates
- Posting while other threads mutate subscriptions
- Mailboxes subscribing/unsubscribing during their own delivery
- Posting from inside a mailbox
"""

import threading

import pytest

from magicbus.bus import MagicBus
from magicbus.mailbox import NamedMailbox
from magicbus.messages import FailedMessage, UndeliveredMessage


class Dog:
    pass


class Cat:
    pass


THREADS = 8
PER_THREAD = 200


def run_threads(target, count=THREADS):
    barrier = threading.Barrier(count)
    errors = []

    def worker(index):
        barrier.wait()
        try:
            target(index)
        except Exception as exc:  # surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    assert errors == []


@pytest.fixture
def bus():
    return MagicBus()


# ══════════════════════════════════════════════════════════════
# CONCURRENT MUTATION
# ══════════════════════════════════════════════════════════════

class TestConcurrentMutation:
    def test_no_lost_subscriptions(self, bus):
        mailboxes = [
            [NamedMailbox(f"t{t}-m{i}", lambda m: None) for i in range(PER_THREAD)]
            for t in range(THREADS)
        ]

        def subscribe_all(index):
            for mailbox in mailboxes[index]:
                bus.subscribe(Dog, mailbox)

        run_threads(subscribe_all)

        assert len(bus.subscribers_to(Dog)) == THREADS * PER_THREAD
        for own in mailboxes:
            resolved = bus.subscribers_to(Dog)
            positions = [resolved.index(m) for m in own]
            assert positions == sorted(positions)

    def test_concurrent_unsubscribe_drops_type(self, bus):
        mailboxes = [
            [NamedMailbox(f"t{t}-m{i}", lambda m: None) for i in range(PER_THREAD)]
            for t in range(THREADS)
        ]
        for own in mailboxes:
            for mailbox in own:
                bus.subscribe(Dog, mailbox)

        def unsubscribe_all(index):
            for mailbox in mailboxes[index]:
                bus.unsubscribe(Dog, mailbox)

        run_threads(unsubscribe_all)

        assert bus.subscribers_to(Dog) == []
        assert Dog not in bus.registry

    def test_post_during_mutation(self, bus):
        received = []
        lock = threading.Lock()

        def record(message):
            with lock:
                received.append(message)

        bus.subscribe(Cat, record)

        def mixed(index):
            for i in range(PER_THREAD):
                if index % 2:
                    mailbox = NamedMailbox(f"t{index}-m{i}", lambda m: None)
                    bus.subscribe(Dog, mailbox)
                    bus.unsubscribe(Dog, mailbox)
                else:
                    bus.post(Cat())
                    bus.post(Dog())

        run_threads(mixed)

        assert len(received) == (THREADS // 2) * PER_THREAD
        assert Dog not in bus.registry


# ══════════════════════════════════════════════════════════════
# RE-ENTRANT MAILBOXES
# ══════════════════════════════════════════════════════════════

class TestReentrantMailboxes:
    def test_mailbox_unsubscribes_itself(self, bus):
        calls = []

        def once(message):
            calls.append(message)
            bus.unsubscribe(Dog, once)

        bus.subscribe(Dog, once)
        bus.post(Dog())
        bus.post(Dog())

        assert len(calls) == 1

    def test_new_subscription_applies_to_next_post(self, bus):
        calls = []
        late = NamedMailbox("late", lambda m: calls.append("late"))

        def recruiter(message):
            calls.append("recruiter")
            bus.subscribe(Dog, late)

        bus.subscribe(Dog, recruiter)
        bus.post(Dog())
        assert calls == ["recruiter"]

        bus.unsubscribe(Dog, recruiter)
        bus.post(Dog())
        assert calls == ["recruiter", "late"]

    def test_removed_mailbox_still_called_in_current_post(self, bus):
        calls = []
        second = NamedMailbox("second", lambda m: calls.append("second"))

        def first(message):
            calls.append("first")
            bus.unsubscribe(Dog, second)

        bus.subscribe(Dog, first)
        bus.subscribe(Dog, second)
        bus.post(Dog())

        assert calls == ["first", "second"]
        assert bus.subscribers_to(Dog) == [first]

    def test_mailbox_posts_other_message(self, bus):
        calls = []
        bus.subscribe(Dog, lambda m: bus.post(Cat()))
        bus.subscribe(Cat, lambda m: calls.append("cat"))
        bus.subscribe(Dog, lambda m: calls.append("dog"))

        bus.post(Dog())

        assert calls == ["cat", "dog"]

    def test_control_subscriber_mutates_bus(self, bus):
        undelivered = []

        def first_only(message):
            undelivered.append(message)
            bus.unsubscribe(UndeliveredMessage, first_only)

        bus.subscribe(UndeliveredMessage, first_only)
        bus.post(Dog())
        bus.post(Dog())

        assert len(undelivered) == 1
        assert len(bus.subscribers_to(UndeliveredMessage)) == 1
        assert len(bus.subscribers_to(FailedMessage)) == 1
