# pylint: disable=broad-except
"""Message bus routing commands and events to the handlers of one service."""

from __future__ import annotations
import logging
from typing import Dict, Type, Callable, List, TYPE_CHECKING

from shared.domain.commands import Command, Event

if TYPE_CHECKING:
    from shared.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)


class MessageBus:
    """
    Dispatch a command to its single handler, then every event raised along
    the way to all of its handlers.

    Command failures propagate to the caller. Event handler failures are
    logged and skipped so a side effect never undoes the primary write.
    """

    def __init__(
        self,
        command_handlers: Dict[Type[Command], Callable],
        event_handlers: Dict[Type[Event], List[Callable]],
    ):
        self.command_handlers = command_handlers
        self.event_handlers = event_handlers

    def handle(self, message, uow: AbstractUnitOfWork) -> List:
        """Handle message (command or event) with the appropriate handler."""
        results = []
        queue = [message]

        while queue:
            message = queue.pop(0)

            if isinstance(message, Event):
                self.handle_event(message, queue, uow)
            elif isinstance(message, Command):
                results.append(self.handle_command(message, queue, uow))
            else:
                raise Exception(f"{message} was not an Event or Command")

        return results

    def handle_event(self, event: Event, queue: List, uow: AbstractUnitOfWork):
        """Handle event by calling all registered event handlers."""
        for handler in self.event_handlers.get(type(event), []):
            try:
                logger.info(f"calling handler {handler.__name__} for event {event.message_type}")
                handler(event, uow=uow)
                queue.extend(uow.collect_new_events())
            except Exception:
                logger.exception("Exception handling event %s", event)
                continue

    def handle_command(self, command: Command, queue: List, uow: AbstractUnitOfWork):
        """Handle command by calling the registered command handler."""
        logger.info(f"handling command {command.message_type}")
        try:
            handler = self.command_handlers[type(command)]
            result = handler(command, uow=uow)
            new_events = uow.collect_new_events()
            logger.info(f"Collected {len(new_events)} events after command: {[e.message_type for e in new_events]}")
            queue.extend(new_events)
            return result
        except Exception:
            logger.exception("Exception handling command %s", command)
            raise
