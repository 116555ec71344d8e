"""Domain events for the case service."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from shared.domain.commands import Event


@dataclass
class RequisitionSubmitted(Event):
    """Event raised when a case and its consents have been created."""
    case_id: str
    case_number: str
    clinic_id: str
    consent_recipients: List[str]


@dataclass
class CaseStatusChanged(Event):
    case_id: str
    case_number: str
    old_status: str
    new_status: str


@dataclass
class ReportUploaded(Event):
    """Event raised when a report is attached; recipients are the clinic's active users."""
    case_id: str
    case_number: str
    clinic_id: str
    report_file_name: str
    report_file_url: str
    recipients: List[str]


@dataclass
class ConsentSigned(Event):
    consent_id: str
    case_id: str
    signer_role: str
    signed_at: Optional[datetime] = None
