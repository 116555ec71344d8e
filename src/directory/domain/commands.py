"""Commands for clinic, provider and user administration."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from shared.domain.commands import Command
from shared.domain.session import Role, SessionContext


@dataclass
class CreateClinic(Command):
    session: SessionContext
    name: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class UpdateClinic(Command):
    session: SessionContext
    clinic_id: str
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AddProvider(Command):
    session: SessionContext
    clinic_id: str
    first_name: str
    last_name: str
    credentials: str = ""
    email: str = ""


@dataclass
class ToggleProviderActive(Command):
    session: SessionContext
    provider_id: str


@dataclass
class CreateUser(Command):
    """Create a portal user; ``auth_id`` is None when the auth account must be created too."""
    session: SessionContext
    email: str
    first_name: str
    last_name: str
    role: str = Role.CLINIC_USER.value
    clinic_id: Optional[str] = None
    auth_id: Optional[str] = None
    password: Optional[str] = None
    send_welcome_email: bool = True


@dataclass
class UpdateUser(Command):
    session: SessionContext
    user_id: str
    changes: Dict[str, Any] = field(default_factory=dict)
