import logging
from sqlalchemy import (
    Table,
    Column,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    event,
)
from shared.adapters.orm import mapper_registry, metadata
from directory.domain import model

logger = logging.getLogger(__name__)

clinics = Table(
    "clinics",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("address_line1", String(255)),
    Column("city", String(255)),
    Column("state", String(64)),
    Column("zip_code", String(32)),
    Column("phone", String(64)),
    Column("email", String(255)),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True)),
)

providers = Table(
    "providers",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("clinic_id", String(36), ForeignKey("clinics.id"), nullable=False),
    Column("first_name", String(255), nullable=False),
    Column("last_name", String(255), nullable=False),
    Column("credentials", String(64)),
    Column("email", String(255)),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True)),
)

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("auth_id", String(255), unique=True, nullable=False),
    Column("email", String(255), unique=True, nullable=False),
    Column("first_name", String(255)),
    Column("last_name", String(255)),
    Column("role", String(32), nullable=False),
    Column("clinic_id", String(36), ForeignKey("clinics.id"), nullable=True),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("must_change_password", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True)),
)


def map_entities():
    mapper_registry.map_imperatively(model.Clinic, clinics)
    mapper_registry.map_imperatively(model.Provider, providers)
    mapper_registry.map_imperatively(model.User, users)


@event.listens_for(model.Clinic, "load")
def receive_clinic_load(clinic, _):
    clinic.events = []


@event.listens_for(model.Provider, "load")
def receive_provider_load(provider, _):
    provider.events = []


@event.listens_for(model.User, "load")
def receive_user_load(user, _):
    user.events = []
