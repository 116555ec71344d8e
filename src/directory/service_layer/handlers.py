import logging
import secrets

from shared.adapters.auth_client import AuthClientError
from shared.domain.exceptions import NotFound, PortalError
from shared.domain.session import Role
from directory.domain import commands
from directory.domain.model import Clinic, Provider, User
from directory.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)

CLINIC_FIELDS = ("name", "address_line1", "city", "state", "zip_code", "phone", "email", "is_active")
USER_FIELDS = ("first_name", "last_name", "clinic_id", "role", "is_active")


def create_clinic(command: commands.CreateClinic, uow: AbstractUnitOfWork) -> dict:
    command.session.require_lab_staff()
    if not command.name or not command.name.strip():
        raise ValueError("Clinic name is required")

    details = {k: v for k, v in command.details.items() if k in CLINIC_FIELDS and k != "name"}
    with uow:
        clinic = Clinic(name=command.name.strip(), **details)
        uow.clinics.add(clinic)
        uow.commit()
        logger.info(f"Created clinic {clinic.id} ({clinic.name})")
        return clinic.to_dict()


def update_clinic(command: commands.UpdateClinic, uow: AbstractUnitOfWork) -> dict:
    command.session.require_lab_staff()
    with uow:
        clinic = uow.clinics.get(command.clinic_id)
        if clinic is None:
            raise NotFound(f"Clinic {command.clinic_id} not found")

        for key, value in command.changes.items():
            if key not in CLINIC_FIELDS:
                continue
            if key == "name" and not (value or "").strip():
                raise ValueError("Clinic name is required")
            setattr(clinic, key, value)

        uow.commit()
        logger.info(f"Updated clinic {clinic.id}")
        return clinic.to_dict()


def add_provider(command: commands.AddProvider, uow: AbstractUnitOfWork) -> dict:
    command.session.require_lab_staff()
    if not command.first_name or not command.last_name:
        raise ValueError("Provider first and last name are required")

    with uow:
        if uow.clinics.get(command.clinic_id) is None:
            raise NotFound(f"Clinic {command.clinic_id} not found")

        provider = Provider(
            clinic_id=command.clinic_id,
            first_name=command.first_name,
            last_name=command.last_name,
            credentials=command.credentials,
            email=command.email,
        )
        uow.providers.add(provider)
        uow.commit()
        logger.info(f"Added provider {provider.id} to clinic {command.clinic_id}")
        return provider.to_dict()


def toggle_provider_active(command: commands.ToggleProviderActive, uow: AbstractUnitOfWork) -> dict:
    command.session.require_lab_staff()
    with uow:
        provider = uow.providers.get(command.provider_id)
        if provider is None:
            raise NotFound(f"Provider {command.provider_id} not found")

        provider.is_active = not provider.is_active
        uow.commit()
        logger.info(f"Provider {provider.id} is_active={provider.is_active}")
        return provider.to_dict()


def create_user(command: commands.CreateUser, uow: AbstractUnitOfWork) -> dict:
    """
    Create the portal user record for a login.

    When no auth account exists yet one is created through the auth service,
    with a throwaway password if a welcome email will let the user choose
    their own. The welcome email is a password-reset request.
    """
    command.session.require_lab_staff()
    role = Role(command.role)
    if not role.is_lab and not command.clinic_id:
        raise ValueError("Clinic users must be assigned to a clinic")

    with uow:
        if uow.users.get_by_email(command.email) is not None:
            raise PortalError(f"A user with email {command.email} already exists")
        if command.clinic_id and uow.clinics.get(command.clinic_id) is None:
            raise NotFound(f"Clinic {command.clinic_id} not found")

        auth_id = command.auth_id
        if auth_id is None:
            password = secrets.token_urlsafe(12) if command.send_welcome_email else command.password
            if not password:
                raise ValueError("A password is required when no welcome email is sent")
            try:
                auth_id = uow.auth.sign_up(
                    command.email,
                    password,
                    {"first_name": command.first_name, "last_name": command.last_name},
                )
            except AuthClientError as e:
                raise PortalError(str(e)) from e

        user = User(
            auth_id=auth_id,
            email=command.email,
            first_name=command.first_name,
            last_name=command.last_name,
            role=role.value,
            clinic_id=command.clinic_id or None,
            must_change_password=command.send_welcome_email,
        )
        uow.users.add(user)
        uow.commit()
        logger.info(f"Created user {user.id} ({role.value})")
        result = user.to_dict()

    if command.send_welcome_email:
        try:
            uow.auth.send_password_reset(command.email)
        except AuthClientError as e:
            # the account exists; staff can resend the reset from the user list
            logger.error(f"Failed to send welcome email to {command.email}: {e}")

    return result


def update_user(command: commands.UpdateUser, uow: AbstractUnitOfWork) -> dict:
    command.session.require_lab_staff()
    with uow:
        user = uow.users.get(command.user_id)
        if user is None:
            raise NotFound(f"User {command.user_id} not found")

        for key, value in command.changes.items():
            if key not in USER_FIELDS:
                continue
            if key == "role":
                value = Role(value).value
            if key == "clinic_id":
                value = value or None
            setattr(user, key, value)

        uow.commit()
        logger.info(f"Updated user {user.id}")
        return user.to_dict()
