"""
Message Bus

Commands are the booking engine's entry points and have exactly one
handler each. Events fan out to any number of subscribers (notifier,
cache) after commit; a failing subscriber is logged and skipped.
"""

from collections import defaultdict
import logging
from typing import Any, Callable, DefaultDict, Dict, Iterable, List, Type

from shared.domain.base import DomainEvent
from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:

    def __init__(self):
        self._commands: Dict[Type, Callable[[Any], Any]] = {}
        self._subscribers: DefaultDict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)

    def register_command_handler(self, command_type: Type, handler: Callable[[Any], Any]):
        if command_type in self._commands:
            raise ValueError(f"{command_type.__name__} already has a handler")
        self._commands[command_type] = handler

    def has_command_handler(self, command_type: Type) -> bool:
        return command_type in self._commands

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        """Subscribe a handler; subscribing it twice has no effect."""
        subscribers = self._subscribers[event_type]
        if handler not in subscribers:
            subscribers.append(handler)

    def handle_command(self, command: Any) -> Any:
        """
        Run the handler registered for the command's type

        Business errors are logged at info level and re-raised unchanged;
        anything else is logged as an error and re-raised.
        """
        name = type(command).__name__
        try:
            handler = self._commands[type(command)]
        except KeyError:
            raise ValueError(f"No handler registered for command {name}") from None

        logger.info("Handling command %s", name)
        try:
            return handler(command)
        except DomainError as e:
            logger.info("Command %s refused with %s: %s", name, e.code, e)
            raise
        except Exception:
            logger.exception("Command %s failed", name)
            raise

    def publish_events(self, events: Iterable[DomainEvent]):
        for event in events:
            subscribers = self._subscribers.get(type(event), [])
            if not subscribers:
                logger.warning("Nobody listens to %s", type(event).__name__)
                continue
            for handler in subscribers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        "Handler %s failed on %s (event %s)",
                        getattr(handler, '__name__', handler),
                        type(event).__name__,
                        event.event_id,
                    )


message_bus = MessageBus()
