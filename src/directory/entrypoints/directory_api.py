"""
Directory API - clinic, provider and user administration plus impersonation.
Thin endpoints dispatching commands through the directory message bus.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr

from shared.domain.exceptions import NotFound
from shared.domain.session import Role, SessionContext
from shared.entrypoints.dependencies import get_session_context
from shared.entrypoints.errors import to_http_exception
from directory import views
from directory.domain import commands
from directory.service_layer import messagebus
from directory.service_layer.unit_of_work import SqlAlchemyUnitOfWork

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["directory"])


def get_uow() -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork()


# ---------- Request models ----------

class ClinicRequest(BaseModel):
    name: str
    address_line1: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    phone: str = ""
    email: str = ""
    is_active: bool = True


class ClinicUpdateRequest(BaseModel):
    name: Optional[str] = None
    address_line1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: Optional[bool] = None


class ProviderRequest(BaseModel):
    first_name: str
    last_name: str
    credentials: str = ""
    email: str = ""


class CreateUserRequest(BaseModel):
    email: EmailStr
    first_name: str
    last_name: str
    role: Role = Role.CLINIC_USER
    clinic_id: Optional[str] = None
    password: Optional[str] = None
    send_welcome_email: bool = True


class UpdateUserRequest(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    clinic_id: Optional[str] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None


class ImpersonationRequest(BaseModel):
    user_id: str


def _dispatch(cmd, uow):
    try:
        return messagebus.handle(cmd, uow)[0]
    except Exception as e:
        raise to_http_exception(e)


# ---------- Endpoints ----------

@router.get("/clinics")
def get_clinics(active_only: bool = False,
                session: SessionContext = Depends(get_session_context),
                uow=Depends(get_uow)) -> List[Dict[str, Any]]:
    try:
        return views.list_clinics(session, uow, active_only)
    except Exception as e:
        raise to_http_exception(e)


@router.post("/clinics", status_code=201)
def create_clinic(body: ClinicRequest,
                  session: SessionContext = Depends(get_session_context),
                  uow=Depends(get_uow)):
    details = body.model_dump(exclude={"name"})
    return _dispatch(commands.CreateClinic(session=session, name=body.name, details=details), uow)


@router.patch("/clinics/{clinic_id}")
def update_clinic(clinic_id: str, body: ClinicUpdateRequest,
                  session: SessionContext = Depends(get_session_context),
                  uow=Depends(get_uow)):
    changes = body.model_dump(exclude_unset=True)
    return _dispatch(commands.UpdateClinic(session=session, clinic_id=clinic_id, changes=changes), uow)


@router.get("/clinics/{clinic_id}/providers")
def get_providers(clinic_id: str, active_only: bool = True,
                  session: SessionContext = Depends(get_session_context),
                  uow=Depends(get_uow)):
    try:
        return views.list_providers(clinic_id, session, uow, active_only)
    except Exception as e:
        raise to_http_exception(e)


@router.post("/clinics/{clinic_id}/providers", status_code=201)
def add_provider(clinic_id: str, body: ProviderRequest,
                 session: SessionContext = Depends(get_session_context),
                 uow=Depends(get_uow)):
    cmd = commands.AddProvider(session=session, clinic_id=clinic_id, **body.model_dump())
    return _dispatch(cmd, uow)


@router.post("/providers/{provider_id}/toggle-active")
def toggle_provider(provider_id: str,
                    session: SessionContext = Depends(get_session_context),
                    uow=Depends(get_uow)):
    return _dispatch(commands.ToggleProviderActive(session=session, provider_id=provider_id), uow)


@router.get("/users")
def get_users(session: SessionContext = Depends(get_session_context),
              uow=Depends(get_uow)):
    try:
        return views.list_users(session, uow)
    except Exception as e:
        raise to_http_exception(e)


@router.post("/users", status_code=201)
def create_user(body: CreateUserRequest,
                session: SessionContext = Depends(get_session_context),
                uow=Depends(get_uow)):
    cmd = commands.CreateUser(
        session=session,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        role=body.role.value,
        clinic_id=body.clinic_id,
        password=body.password,
        send_welcome_email=body.send_welcome_email,
    )
    return _dispatch(cmd, uow)


@router.patch("/users/{user_id}")
def update_user(user_id: str, body: UpdateUserRequest,
                session: SessionContext = Depends(get_session_context),
                uow=Depends(get_uow)):
    changes = body.model_dump(exclude_unset=True)
    if changes.get("role") is not None:
        changes["role"] = changes["role"].value
    return _dispatch(commands.UpdateUser(session=session, user_id=user_id, changes=changes), uow)


@router.get("/me")
def get_me(session: SessionContext = Depends(get_session_context)):
    """Effective identity plus the real one, for the portal's view switch."""
    return {
        "effective_user": _identity_dict(session.effective_user),
        "real_user": _identity_dict(session.real_user),
        "is_lab_staff": session.is_lab_staff,
        "impersonating": session.is_impersonating,
    }


@router.post("/impersonation")
def start_impersonation(body: ImpersonationRequest,
                        session: SessionContext = Depends(get_session_context),
                        uow=Depends(get_uow)):
    """
    Validate an impersonation target and return the identity to display.

    The client then sends ``X-Impersonate-User`` with subsequent requests.
    """
    try:
        session.require_lab_staff()
        with uow:
            target = uow.users.get(body.user_id)
            if target is None:
                raise NotFound(f"User {body.user_id} not found")
            clinic = uow.clinics.get(target.clinic_id) if target.clinic_id else None
            impersonated = session.stop_impersonation().impersonate(target.identity(clinic))
    except Exception as e:
        raise to_http_exception(e)

    logger.info(f"{session.real_user.user_id} started impersonating {body.user_id}")
    return {
        "effective_user": _identity_dict(impersonated.effective_user),
        "real_user": _identity_dict(impersonated.real_user),
    }


def _identity_dict(identity) -> Dict[str, Any]:
    return {
        "user_id": identity.user_id,
        "email": identity.email,
        "role": identity.role.value,
        "first_name": identity.first_name,
        "last_name": identity.last_name,
        "clinic_id": identity.clinic_id,
        "clinic_name": identity.clinic_name,
    }
