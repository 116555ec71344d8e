"""Case and Consent records with the case status lifecycle."""
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from case.domain import events


class CaseStatus(str, Enum):
    """
    Status of a case. Listed in their usual order, but any status may be
    set from any other; lab operators correct mistakes by hand.
    """
    REQUISITION_SUBMITTED = "requisition_submitted"
    CONSENT_PENDING = "consent_pending"
    CONSENT_COMPLETE = "consent_complete"
    SAMPLES_RECEIVED = "samples_received"
    IN_PROGRESS = "in_progress"
    REPORT_READY = "report_ready"
    COMPLETE = "complete"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS = {
    CaseStatus.REQUISITION_SUBMITTED: "Submitted",
    CaseStatus.CONSENT_PENDING: "Consent Pending",
    CaseStatus.CONSENT_COMPLETE: "Consent Complete",
    CaseStatus.SAMPLES_RECEIVED: "Samples Received",
    CaseStatus.IN_PROGRESS: "In Progress",
    CaseStatus.REPORT_READY: "Report Ready",
    CaseStatus.COMPLETE: "Complete",
    CaseStatus.CANCELLED: "Cancelled",
}


class TestType(str, Enum):
    __test__ = False  # keep pytest from collecting the enum

    PGT_A = "pgt_a"
    PGT_SR = "pgt_sr"


class Indication(str, Enum):
    ADVANCED_MATERNAL_AGE = "advanced_maternal_age"
    RECURRENT_PREGNANCY_LOSS = "recurrent_pregnancy_loss"
    PREVIOUS_FAILED_IVF = "previous_failed_ivf"
    MALE_FACTOR = "male_factor"
    UNEXPLAINED_INFERTILITY = "unexplained_infertility"
    PREVIOUS_ANEUPLOID_CONCEPTION = "previous_aneuploid_conception"
    REPETITIVE_IMPLANTATION_FAILURE = "repetitive_implantation_failure"
    ELECTIVE_PGT_A = "elective_pgt_a"
    PGT_SR = "pgt_sr"
    OTHER = "other"


class SpermSource(str, Enum):
    PARTNER = "partner"
    DONOR = "donor"


class SignerRole(str, Enum):
    PATIENT = "patient"
    PARTNER = "partner"


class ConsentStatus(str, Enum):
    PENDING = "pending"
    SIGNED = "signed"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


def generate_case_number(now: Optional[datetime] = None) -> str:
    """Human-readable case number, e.g. ``PGT-261019-3FA09C``."""
    now = now or _now()
    return f"PGT-{now:%y%m%d}-{secrets.token_hex(3).upper()}"


@dataclass(eq=False)
class Consent:
    case_id: str
    signer_role: str
    recipient_name: str
    recipient_email: str
    recipient_phone: Optional[str] = None
    status: str = ConsentStatus.PENDING.value
    signed_at: Optional[datetime] = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_now)
    events: List = field(default_factory=list, repr=False)

    @property
    def is_signed(self) -> bool:
        return self.status == ConsentStatus.SIGNED.value

    def sign(self, signed_at: Optional[datetime] = None) -> bool:
        """Mark the consent signed. Returns False when it already was."""
        if self.is_signed:
            return False
        self.status = ConsentStatus.SIGNED.value
        self.signed_at = signed_at or _now()
        self.events.append(events.ConsentSigned(
            consent_id=self.id,
            case_id=self.case_id,
            signer_role=self.signer_role,
            signed_at=self.signed_at,
        ))
        return True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "case_id": self.case_id,
            "signer_role": self.signer_role,
            "recipient_name": self.recipient_name,
            "recipient_email": self.recipient_email,
            "recipient_phone": self.recipient_phone,
            "status": self.status,
            "signed_at": self.signed_at.isoformat() if self.signed_at else None,
        }


@dataclass(eq=False)
class Case:
    clinic_id: str
    submitted_by_user_id: str
    ordering_provider_id: str
    patient_first_name: str
    patient_last_name: str
    patient_dob: str
    patient_email: str
    tests_ordered: List[str]
    indication: str
    case_number: str = field(default_factory=generate_case_number)
    patient_phone: Optional[str] = None
    partner_first_name: Optional[str] = None
    partner_last_name: Optional[str] = None
    partner_dob: Optional[str] = None
    partner_email: Optional[str] = None
    partner_phone: Optional[str] = None
    is_egg_donor: bool = False
    egg_donor_age: Optional[int] = None
    is_sperm_donor: bool = False
    no_partner: bool = False
    sperm_source: str = SpermSource.PARTNER.value
    mask_sex_results: bool = False
    reason_for_testing: Optional[str] = None
    form_completed_by: Optional[str] = None
    form_completed_date: Optional[datetime] = None
    karyotype_file_path: Optional[str] = None
    status: str = CaseStatus.CONSENT_PENDING.value
    report_file_url: Optional[str] = None
    report_file_name: Optional[str] = None
    report_uploaded_at: Optional[datetime] = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
    events: List = field(default_factory=list, repr=False)

    @property
    def patient_name(self) -> str:
        return f"{self.patient_first_name} {self.patient_last_name}"

    def submitted(self, consents: List[Consent]):
        """Record the requisition submission once the consents exist."""
        self.events.append(events.RequisitionSubmitted(
            case_id=self.id,
            case_number=self.case_number,
            clinic_id=self.clinic_id,
            consent_recipients=[c.recipient_email for c in consents],
        ))

    def change_status(self, new_status: CaseStatus):
        old_status = self.status
        self.status = new_status.value
        self.updated_at = _now()
        self.events.append(events.CaseStatusChanged(
            case_id=self.id,
            case_number=self.case_number,
            old_status=old_status,
            new_status=new_status.value,
        ))

    def attach_report(self, file_url: str, file_name: str, uploaded_at: Optional[datetime] = None):
        """Point the case at its report and mark it ready, whatever the prior status."""
        self.report_file_url = file_url
        self.report_file_name = file_name
        self.report_uploaded_at = uploaded_at or _now()
        self.status = CaseStatus.REPORT_READY.value
        self.updated_at = self.report_uploaded_at

    def report_ready(self, recipients: List[str]):
        self.events.append(events.ReportUploaded(
            case_id=self.id,
            case_number=self.case_number,
            clinic_id=self.clinic_id,
            report_file_name=self.report_file_name,
            report_file_url=self.report_file_url,
            recipients=list(recipients),
        ))

    def to_dict(self) -> dict:
        status = CaseStatus(self.status)
        return {
            "id": self.id,
            "case_number": self.case_number,
            "clinic_id": self.clinic_id,
            "submitted_by_user_id": self.submitted_by_user_id,
            "ordering_provider_id": self.ordering_provider_id,
            "patient_first_name": self.patient_first_name,
            "patient_last_name": self.patient_last_name,
            "patient_dob": self.patient_dob,
            "patient_email": self.patient_email,
            "patient_phone": self.patient_phone,
            "partner_first_name": self.partner_first_name,
            "partner_last_name": self.partner_last_name,
            "partner_dob": self.partner_dob,
            "partner_email": self.partner_email,
            "partner_phone": self.partner_phone,
            "is_egg_donor": self.is_egg_donor,
            "egg_donor_age": self.egg_donor_age,
            "is_sperm_donor": self.is_sperm_donor,
            "no_partner": self.no_partner,
            "sperm_source": self.sperm_source,
            "tests_ordered": list(self.tests_ordered),
            "indication": self.indication,
            "mask_sex_results": self.mask_sex_results,
            "reason_for_testing": self.reason_for_testing,
            "form_completed_by": self.form_completed_by,
            "form_completed_date": self.form_completed_date.isoformat() if self.form_completed_date else None,
            "karyotype_file_path": self.karyotype_file_path,
            "status": status.value,
            "status_label": status.label,
            "report_file_url": self.report_file_url,
            "report_file_name": self.report_file_name,
            "report_uploaded_at": self.report_uploaded_at.isoformat() if self.report_uploaded_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
