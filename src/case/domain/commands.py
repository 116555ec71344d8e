"""Commands for the case service."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from shared.domain.commands import Command
from shared.domain.session import SessionContext
from case.domain.requisition import KaryotypeUpload, RequisitionDraft


@dataclass
class SubmitRequisition(Command):
    """Command to create a case and its consents from a clinic requisition."""
    session: SessionContext
    draft: RequisitionDraft
    karyotype: Optional[KaryotypeUpload] = None


@dataclass
class ChangeCaseStatus(Command):
    session: SessionContext
    case_id: str
    status: str


@dataclass
class UploadReport(Command):
    """Command to attach a report file to a case and mark it ready."""
    session: SessionContext
    case_id: str
    filename: str
    content: bytes
    content_type: str = "application/pdf"


@dataclass
class RecordConsentSigned(Command):
    """Command sent by the signing flow when a recipient has signed."""
    session: SessionContext
    consent_id: str
    signed_at: Optional[datetime] = None
