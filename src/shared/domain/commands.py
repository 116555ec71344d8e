"""Base messages dispatched by the portal message buses."""

from dataclasses import dataclass


@dataclass
class Message:

    @property
    def message_type(self) -> str:
        """Class name, used in logs and as ``event_type`` on published events."""
        return type(self).__name__


@dataclass
class Command(Message):
    """Request to change portal state; handled by exactly one handler."""


@dataclass
class Event(Message):
    """Something that happened; handled by zero or more handlers."""
