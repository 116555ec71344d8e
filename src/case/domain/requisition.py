"""
Requisition draft and its validation.

``validate_requisition`` is pure: it looks at the whole draft and returns
every violation, ordered by the precedence in which the portal reports
them. Callers surface only the first one.
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional

from case.domain.model import Case, Consent, Indication, SignerRole, SpermSource, TestType

MAX_KARYOTYPE_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class Violation:
    code: str
    message: str
    field: Optional[str] = None


@dataclass
class KaryotypeUpload:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename)[1].lstrip(".").lower() or "bin"


@dataclass
class RequisitionDraft:
    patient_first_name: str = ""
    patient_last_name: str = ""
    patient_dob: str = ""
    patient_email: str = ""
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
    ordering_provider_id: str = ""
    tests_ordered: List[str] = field(default_factory=list)
    indication: str = ""
    mask_sex_results: bool = False
    reason_for_testing: Optional[str] = None
    form_completed_by: Optional[str] = None

    def partner_required(self) -> bool:
        """Partner details are needed unless there is no partner and donor sperm is used."""
        return not (self.no_partner and self.sperm_source == SpermSource.DONOR.value)

    def to_case(self, clinic_id: str, submitted_by_user_id: str,
                karyotype_file_path: Optional[str] = None) -> Case:
        include_partner = self.partner_required()
        return Case(
            clinic_id=clinic_id,
            submitted_by_user_id=submitted_by_user_id,
            ordering_provider_id=self.ordering_provider_id,
            patient_first_name=self.patient_first_name.strip(),
            patient_last_name=self.patient_last_name.strip(),
            patient_dob=self.patient_dob,
            patient_email=self.patient_email.strip(),
            patient_phone=self.patient_phone or None,
            partner_first_name=self.partner_first_name if include_partner else None,
            partner_last_name=self.partner_last_name if include_partner else None,
            partner_dob=self.partner_dob if include_partner else None,
            partner_email=self.partner_email.strip() if include_partner else None,
            partner_phone=(self.partner_phone or None) if include_partner else None,
            is_egg_donor=self.is_egg_donor,
            egg_donor_age=self.egg_donor_age if self.is_egg_donor else None,
            is_sperm_donor=self.is_sperm_donor,
            no_partner=self.no_partner,
            sperm_source=self.sperm_source,
            tests_ordered=list(self.tests_ordered),
            indication=self.indication,
            mask_sex_results=self.mask_sex_results,
            reason_for_testing=self.reason_for_testing or None,
            form_completed_by=self.form_completed_by or None,
            karyotype_file_path=karyotype_file_path,
        )

    def consents_for(self, case: Case) -> List[Consent]:
        """One consent for the patient, plus one for the partner when partner details are required."""
        consents = [Consent(
            case_id=case.id,
            signer_role=SignerRole.PATIENT.value,
            recipient_name=case.patient_name,
            recipient_email=case.patient_email,
            recipient_phone=case.patient_phone,
        )]
        if self.partner_required():
            consents.append(Consent(
                case_id=case.id,
                signer_role=SignerRole.PARTNER.value,
                recipient_name=f"{case.partner_first_name} {case.partner_last_name}",
                recipient_email=case.partner_email,
                recipient_phone=case.partner_phone,
            ))
        return consents


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


REQUIRED_FIELDS = (
    ("patient_first_name", "Patient first name is required"),
    ("patient_last_name", "Patient last name is required"),
    ("patient_dob", "Patient date of birth is required"),
    ("patient_email", "Patient email is required"),
    ("ordering_provider_id", "Please select an ordering provider"),
)


def validate_requisition(draft: RequisitionDraft,
                         karyotype: Optional[KaryotypeUpload] = None) -> List[Violation]:
    violations = []

    for name, message in REQUIRED_FIELDS:
        if _blank(getattr(draft, name)):
            violations.append(Violation("required_field", message, name))

    if not draft.tests_ordered:
        violations.append(Violation("tests_required", "Please select at least one test", "tests_ordered"))
    else:
        known_tests = {t.value for t in TestType}
        for test in draft.tests_ordered:
            if test not in known_tests:
                violations.append(Violation("unknown_test", f"Unknown test type: {test}", "tests_ordered"))

    if _blank(draft.indication):
        violations.append(Violation("indication_required", "Please select an indication for PGT", "indication"))
    elif draft.indication not in {i.value for i in Indication}:
        violations.append(Violation("unknown_indication", f"Unknown indication: {draft.indication}", "indication"))

    if draft.is_egg_donor and (draft.egg_donor_age is None or draft.egg_donor_age <= 0):
        violations.append(Violation("egg_donor_age_required", "Please enter the egg donor age", "egg_donor_age"))

    if draft.partner_required():
        partner_fields = (draft.partner_first_name, draft.partner_last_name, draft.partner_dob, draft.partner_email)
        if any(_blank(value) for value in partner_fields):
            violations.append(Violation(
                "partner_incomplete",
                "Partner information is required (First Name, Last Name, Date of Birth, and Email). "
                "Phone is optional.",
                "partner",
            ))
        elif draft.partner_email.strip().lower() == (draft.patient_email or "").strip().lower():
            violations.append(Violation(
                "partner_email_duplicate",
                "Partner email must be different from patient email (used for separate consent)",
                "partner_email",
            ))

    if TestType.PGT_SR.value in draft.tests_ordered and karyotype is None:
        violations.append(Violation(
            "karyotype_required", "Please upload the karyotype document for PGT-SR", "karyotype_file"))

    if karyotype is not None and karyotype.size > MAX_KARYOTYPE_BYTES:
        violations.append(Violation("karyotype_too_large", "File size must be less than 10MB", "karyotype_file"))

    return violations
