"""
Read paths for the directory: session resolution, impersonation and lists.
"""
import logging
from typing import Any, Dict, List, Optional

from shared.domain.exceptions import NotFound, PermissionDenied
from shared.domain.session import SessionContext, UserIdentity
from directory.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)


def _identity_for(user, uow: AbstractUnitOfWork) -> UserIdentity:
    clinic = uow.clinics.get(user.clinic_id) if user.clinic_id else None
    return user.identity(clinic)


def load_session(auth_id: str, uow: AbstractUnitOfWork,
                 impersonate_user_id: Optional[str] = None) -> SessionContext:
    """
    Build the session context for an authenticated auth account.

    Inactive or unknown users are refused. ``impersonate_user_id`` switches
    the effective identity for lab staff only.
    """
    with uow:
        user = uow.users.get_by_auth_id(auth_id)
        if user is None or not user.is_active:
            raise PermissionDenied("No active portal user for this login")
        session = SessionContext(real_user=_identity_for(user, uow))

        if impersonate_user_id:
            target = uow.users.get(impersonate_user_id)
            if target is None:
                raise NotFound(f"User {impersonate_user_id} not found")
            session = session.impersonate(_identity_for(target, uow))
            logger.info(f"User {user.id} viewing portal as {target.id}")

    return session


def list_clinics(session: SessionContext, uow: AbstractUnitOfWork,
                 active_only: bool = False) -> List[Dict[str, Any]]:
    session.require_lab_staff()
    with uow:
        return [clinic.to_dict() for clinic in uow.clinics.list(active_only)]


def list_users(session: SessionContext, uow: AbstractUnitOfWork) -> List[Dict[str, Any]]:
    session.require_lab_staff()
    with uow:
        users = uow.users.list()
        clinic_names = {clinic.id: clinic.name for clinic in uow.clinics.list()}
        return [
            {**user.to_dict(), "clinic_name": clinic_names.get(user.clinic_id)}
            for user in users
        ]


def list_providers(clinic_id: str, session: SessionContext, uow: AbstractUnitOfWork,
                   active_only: bool = True) -> List[Dict[str, Any]]:
    """Providers of a clinic; clinic users only see their own clinic's."""
    if not session.can_access_clinic(clinic_id):
        raise PermissionDenied("You do not have access to this clinic")
    with uow:
        return [p.to_dict() for p in uow.providers.list_for_clinic(clinic_id, active_only)]
