import threading
import time
from dataclasses import dataclass

import pytest

from shared.application.locks import KeyedLock
from shared.application.message_bus import MessageBus
from shared.application.uow import DjangoUnitOfWork, InMemoryUnitOfWork
from shared.domain.base import Aggregate, DomainEvent


@dataclass(kw_only=True)
class Happened(DomainEvent):
    name: str


@dataclass(eq=False)
class Thing(Aggregate):
    name: str = ''

    def rename(self, name):
        self.name = name
        self.add_event(Happened(aggregate_id=self.id, name=name))


@dataclass
class Ping:
    value: int


def test_command_has_exactly_one_handler():
    bus = MessageBus()
    bus.register_command_handler(Ping, lambda command: command.value + 1)

    assert bus.handle_command(Ping(1)) == 2
    with pytest.raises(ValueError):
        bus.register_command_handler(Ping, lambda command: None)


def test_unregistered_command():
    with pytest.raises(LookupError):
        MessageBus().handle_command(Ping(1))


def test_failing_event_handler_does_not_stop_others():
    bus = MessageBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    bus.register_event_handler(Happened, broken)
    bus.register_event_handler(Happened, seen.append)
    bus.register_event_handler(Happened, seen.append)

    bus.publish_events([Happened(name="x")])

    assert [e.name for e in seen] == ["x"]


def test_pulled_events_are_handed_over_once():
    thing = Thing()
    thing.rename("a")
    thing.rename("b")

    assert [e.name for e in thing.pull_events()] == ["a", "b"]
    assert thing.pull_events() == []
    assert thing == Thing(id=thing.id)


def test_in_memory_uow_publishes_on_success_only():
    bus = MessageBus()
    seen = []
    bus.register_event_handler(Happened, seen.append)
    thing = Thing()

    with InMemoryUnitOfWork(bus=bus) as uow:
        thing.rename("first")
        uow.collect_events(thing)

    with pytest.raises(RuntimeError):
        with InMemoryUnitOfWork(bus=bus) as uow:
            thing.rename("second")
            uow.collect_events(thing)
            raise RuntimeError("abort")

    assert [e.name for e in seen] == ["first"]
    assert thing.events == []


@pytest.mark.django_db(transaction=True)
def test_django_uow_publishes_after_commit():
    bus = MessageBus()
    seen = []
    bus.register_event_handler(Happened, seen.append)
    thing = Thing()

    with DjangoUnitOfWork(bus=bus) as uow:
        thing.rename("committed")
        uow.collect_events(thing)
        assert seen == []

    assert [e.name for e in seen] == ["committed"]


def test_keyed_lock_serializes_same_key_only():
    locks = KeyedLock()
    inside = []
    overlap = []

    def worker(key):
        with locks.hold(key):
            inside.append(key)
            if inside.count(key) > 1:
                overlap.append(key)
            time.sleep(0.01)
            inside.remove(key)

    threads = [threading.Thread(target=worker, args=(("venue", i % 2),)) for i in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert overlap == []
    assert len(locks) == 0
