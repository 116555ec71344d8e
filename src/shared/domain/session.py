"""
Session context threaded through every command handler.

The context carries the authenticated (real) identity and, for lab staff
viewing the portal as a clinic user, an impersonated identity. The real
identity is never replaced: staff checks always look at it, while data
scoping (clinic, submitter) follows the effective identity.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from shared.domain.exceptions import PermissionDenied


class Role(str, Enum):
    CLINIC_USER = "clinic_user"
    CLINIC_ADMIN = "clinic_admin"
    LAB_STAFF = "lab_staff"
    LAB_ADMIN = "lab_admin"

    @property
    def is_lab(self) -> bool:
        return self in (Role.LAB_STAFF, Role.LAB_ADMIN)


@dataclass(frozen=True)
class UserIdentity:
    user_id: str
    email: str
    role: Role
    first_name: str = ""
    last_name: str = ""
    clinic_id: Optional[str] = None
    clinic_name: Optional[str] = None
    clinic_address: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class SessionContext:
    real_user: UserIdentity
    impersonated_user: Optional[UserIdentity] = None

    @property
    def effective_user(self) -> UserIdentity:
        return self.impersonated_user or self.real_user

    @property
    def is_lab_staff(self) -> bool:
        return self.real_user.role.is_lab

    @property
    def is_impersonating(self) -> bool:
        return self.impersonated_user is not None

    def impersonate(self, target: UserIdentity) -> SessionContext:
        """Return a context that views the portal as ``target``."""
        if not self.is_lab_staff:
            raise PermissionDenied("Only lab staff can view the portal as another user")
        if target.role.is_lab:
            raise PermissionDenied("Only clinic users can be impersonated")
        return replace(self, impersonated_user=target)

    def stop_impersonation(self) -> SessionContext:
        return replace(self, impersonated_user=None)

    def require_lab_staff(self) -> None:
        if not self.is_lab_staff:
            raise PermissionDenied("This action is restricted to lab staff")

    def require_clinic(self) -> str:
        """Return the effective clinic id or fail when the user has none."""
        clinic_id = self.effective_user.clinic_id
        if not clinic_id:
            raise PermissionDenied("Your account is not linked to a clinic")
        return clinic_id

    def can_access_clinic(self, clinic_id: str) -> bool:
        # lab staff browsing as a clinic user are scoped like that user
        if self.is_lab_staff and not self.is_impersonating:
            return True
        return self.effective_user.clinic_id == clinic_id
