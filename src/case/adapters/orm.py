import logging
from sqlalchemy import (
    Table,
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    Text,
    JSON,
    ForeignKey,
    UniqueConstraint,
    event,
)
from shared.adapters.orm import mapper_registry, metadata
from case.domain import model


logger = logging.getLogger(__name__)

cases = Table(
    "cases",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("case_number", String(32), unique=True, nullable=False),
    Column("clinic_id", String(36), ForeignKey("clinics.id"), nullable=False),
    Column("submitted_by_user_id", String(36), ForeignKey("users.id"), nullable=False),
    Column("ordering_provider_id", String(36), ForeignKey("providers.id"), nullable=False),
    Column("patient_first_name", String(255), nullable=False),
    Column("patient_last_name", String(255), nullable=False),
    Column("patient_dob", String(10), nullable=False),
    Column("patient_email", String(255), nullable=False),
    Column("patient_phone", String(64)),
    Column("partner_first_name", String(255)),
    Column("partner_last_name", String(255)),
    Column("partner_dob", String(10)),
    Column("partner_email", String(255)),
    Column("partner_phone", String(64)),
    Column("is_egg_donor", Boolean, nullable=False, default=False),
    Column("egg_donor_age", Integer),
    Column("is_sperm_donor", Boolean, nullable=False, default=False),
    Column("no_partner", Boolean, nullable=False, default=False),
    Column("sperm_source", String(16)),
    Column("tests_ordered", JSON, nullable=False),
    Column("indication", String(64), nullable=False),
    Column("mask_sex_results", Boolean, nullable=False, default=False),
    Column("reason_for_testing", Text),
    Column("form_completed_by", String(255)),
    Column("form_completed_date", DateTime(timezone=True)),
    Column("karyotype_file_path", String(512)),
    Column("status", String(32), nullable=False),
    Column("report_file_url", String(1024)),
    Column("report_file_name", String(255)),
    Column("report_uploaded_at", DateTime(timezone=True)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

consents = Table(
    "consents",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("case_id", String(36), ForeignKey("cases.id"), nullable=False),
    Column("signer_role", String(16), nullable=False),
    Column("recipient_name", String(255), nullable=False),
    Column("recipient_email", String(255), nullable=False),
    Column("recipient_phone", String(64)),
    Column("status", String(16), nullable=False),
    Column("signed_at", DateTime(timezone=True)),
    Column("created_at", DateTime(timezone=True)),
    UniqueConstraint("case_id", "signer_role", name="uq_consents_case_signer"),
)


def map_entities():
    mapper_registry.map_imperatively(model.Case, cases)
    mapper_registry.map_imperatively(model.Consent, consents)


@event.listens_for(model.Case, "load")
def receive_case_load(case, _):
    case.events = []


@event.listens_for(model.Consent, "load")
def receive_consent_load(consent, _):
    consent.events = []
