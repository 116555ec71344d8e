"""Clinics, ordering providers and portal users."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from shared.domain.session import Role, UserIdentity


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


@dataclass(eq=False)
class Clinic:
    name: str
    address_line1: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    phone: str = ""
    email: str = ""
    is_active: bool = True
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_now)
    events: List = field(default_factory=list, repr=False)

    @property
    def address(self) -> str:
        """Single-line mailing address used as the default shipping address."""
        city_line = " ".join(part for part in (self.state, self.zip_code) if part)
        parts = [self.address_line1, self.city, city_line]
        return ", ".join(part for part in parts if part)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "address_line1": self.address_line1,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "phone": self.phone,
            "email": self.email,
            "is_active": self.is_active,
        }


@dataclass(eq=False)
class Provider:
    clinic_id: str
    first_name: str
    last_name: str
    credentials: str = ""
    email: str = ""
    is_active: bool = True
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_now)
    events: List = field(default_factory=list, repr=False)

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}"
        return f"{name}, {self.credentials}" if self.credentials else name

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "clinic_id": self.clinic_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "credentials": self.credentials,
            "email": self.email,
            "is_active": self.is_active,
        }


@dataclass(eq=False)
class User:
    auth_id: str
    email: str
    first_name: str
    last_name: str
    role: str = Role.CLINIC_USER.value
    clinic_id: Optional[str] = None
    is_active: bool = True
    must_change_password: bool = False
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_now)
    events: List = field(default_factory=list, repr=False)

    def identity(self, clinic: Optional[Clinic] = None) -> UserIdentity:
        return UserIdentity(
            user_id=self.id,
            email=self.email,
            role=Role(self.role),
            first_name=self.first_name,
            last_name=self.last_name,
            clinic_id=self.clinic_id,
            clinic_name=clinic.name if clinic else None,
            clinic_address=clinic.address if clinic else None,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "auth_id": self.auth_id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
            "clinic_id": self.clinic_id,
            "is_active": self.is_active,
            "must_change_password": self.must_change_password,
        }
