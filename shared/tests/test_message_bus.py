from dataclasses import dataclass

import pytest

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent
from shared.domain.exceptions import DomainError


@dataclass
class Ping:
    value: int


@dataclass
class Pinged(DomainEvent):
    value: int


class Refused(DomainError):
    """Refused on purpose"""
    code = "refused"
    status_code = 409


def test_command_is_routed_to_its_single_handler():
    bus = MessageBus()
    bus.register_command_handler(Ping, lambda command: command.value * 2)

    assert bus.has_command_handler(Ping)
    assert bus.handle_command(Ping(21)) == 42


def test_second_command_handler_is_refused():
    bus = MessageBus()
    bus.register_command_handler(Ping, lambda command: None)

    with pytest.raises(ValueError):
        bus.register_command_handler(Ping, lambda command: None)


def test_unknown_command_raises():
    with pytest.raises(ValueError, match="No handler registered"):
        MessageBus().handle_command(Ping(1))


def test_domain_errors_reach_the_caller():
    bus = MessageBus()

    def refuse(command):
        raise Refused()

    bus.register_command_handler(Ping, refuse)

    with pytest.raises(Refused) as excinfo:
        bus.handle_command(Ping(1))
    assert excinfo.value.to_dict() == {"code": "refused", "detail": "Refused on purpose"}


def test_event_handlers_are_isolated_from_each_other():
    bus = MessageBus()
    received = []

    def broken(event):
        raise RuntimeError("mail server down")

    bus.register_event_handler(Pinged, broken)
    bus.register_event_handler(Pinged, lambda event: received.append(event.value))

    bus.publish_events([Pinged(7, aggregate_id=1)])

    assert received == [7]


def test_registering_the_same_event_handler_twice_is_a_noop():
    bus = MessageBus()
    received = []

    def handler(event):
        received.append(event.value)

    bus.register_event_handler(Pinged, handler)
    bus.register_event_handler(Pinged, handler)
    bus.publish_events([Pinged(1)])

    assert received == [1]


def test_event_to_dict():
    event = Pinged(3, aggregate_id=12)

    data = event.to_dict()

    assert data["event_type"] == "Pinged"
    assert data["aggregate_id"] == 12
    assert data["event_id"] == str(event.event_id)
