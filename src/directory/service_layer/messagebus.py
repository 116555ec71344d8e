"""Message bus for the directory service."""

from __future__ import annotations
from typing import Dict, Callable, Type, List, TYPE_CHECKING

from shared.domain.commands import Command, Event
from shared.service_layer.messagebus import MessageBus
from directory.domain import commands
from directory.service_layer import handlers

if TYPE_CHECKING:
    from directory.service_layer.unit_of_work import AbstractUnitOfWork


EVENT_HANDLERS = {}  # type: Dict[Type[Event], List[Callable]]

COMMAND_HANDLERS = {
    commands.CreateClinic: handlers.create_clinic,
    commands.UpdateClinic: handlers.update_clinic,
    commands.AddProvider: handlers.add_provider,
    commands.ToggleProviderActive: handlers.toggle_provider_active,
    commands.CreateUser: handlers.create_user,
    commands.UpdateUser: handlers.update_user,
}  # type: Dict[Type[Command], Callable]

bus = MessageBus(COMMAND_HANDLERS, EVENT_HANDLERS)


def handle(message, uow: AbstractUnitOfWork):
    """Handle message (command or event) with the appropriate handler."""
    return bus.handle(message, uow)
