"""
Message Bus

Routes commands to their single handler and domain events to any number of
subscribers. Bounded contexts register their handlers from ``AppConfig.ready``.
"""

from typing import Any, Callable, Dict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent
from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


def _handler_name(handler: Callable) -> str:
    return getattr(handler, '__qualname__', None) or repr(handler)


class MessageBus:
    """
    In-process dispatcher

    A command type maps to exactly one handler, whose return value goes back
    to the caller. An event type maps to a list of subscribers that are
    called in registration order.
    """

    def __init__(self):
        self._commands: Dict[Type, Callable[[Any], Any]] = {}
        self._subscribers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def register_command_handler(self, command_type: Type, handler: Callable[[Any], Any], replace: bool = False):
        """
        Bind ``handler`` to ``command_type``

        Raises ValueError when the type already has a handler, unless
        ``replace`` is set (tests wire handlers with custom config).
        """
        if command_type in self._commands and not replace:
            raise ValueError(f"{command_type.__name__} already has a handler")
        self._commands[command_type] = handler
        logger.debug(f"{command_type.__name__} -> {_handler_name(handler)}")

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        """Subscribe ``handler`` to ``event_type``; duplicates are ignored."""
        subscribers = self._subscribers.setdefault(event_type, [])
        if handler not in subscribers:
            subscribers.append(handler)
            logger.debug(f"{_handler_name(handler)} subscribed to {event_type.__name__}")

    def handle_command(self, command: Any) -> Any:
        """Run the handler bound to ``type(command)`` and return its result."""
        name = type(command).__name__
        handler = self._commands.get(type(command))
        if handler is None:
            raise LookupError(f"No handler registered for command {name}")

        logger.info(f"Handling command: {name}")
        try:
            return handler(command)
        except DomainError as e:
            logger.info(f"Command {name} rejected: {e.code}: {e.message}")
            raise
        except Exception as e:
            logger.error(f"Command {name} failed: {e}", exc_info=True)
            raise

    def publish_events(self, events: Iterable[DomainEvent]):
        """
        Deliver each event to its subscribers

        A failing subscriber is logged; the remaining subscribers and events
        still run.
        """
        for event in events:
            subscribers = self._subscribers.get(type(event), [])
            if not subscribers:
                logger.debug(f"Nobody listens to {type(event).__name__}")
                continue
            logger.info(f"Publishing event: {type(event).__name__} (ID: {event.event_id})")
            for handler in subscribers:
                self._notify(handler, event)

    @staticmethod
    def _notify(handler: EventHandler, event: DomainEvent):
        try:
            handler(event)
        except Exception as e:
            logger.error(
                f"Subscriber {_handler_name(handler)} failed on {type(event).__name__}: {e}",
                exc_info=True,
            )


message_bus = MessageBus()
