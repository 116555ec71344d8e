"""Message bus for the supplies service."""

from __future__ import annotations
from typing import Dict, Callable, Type, List, TYPE_CHECKING

from shared.domain.commands import Command, Event
from shared.service_layer.messagebus import MessageBus
from supplies.domain import commands, events
from supplies.service_layer import handlers

if TYPE_CHECKING:
    from supplies.service_layer.unit_of_work import AbstractUnitOfWork


EVENT_HANDLERS = {
    events.KitOrderPlaced: [handlers.send_order_notification],
}  # type: Dict[Type[Event], List[Callable]]

COMMAND_HANDLERS = {
    commands.PlaceKitOrder: handlers.place_kit_order,
}  # type: Dict[Type[Command], Callable]

bus = MessageBus(COMMAND_HANDLERS, EVENT_HANDLERS)


def handle(message, uow: AbstractUnitOfWork):
    """Handle message (command or event) with the appropriate handler."""
    return bus.handle(message, uow)
