"""
Case API Entrypoint - Thin API with Command Dispatch
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, ValidationError

from shared.domain.session import SessionContext
from shared.entrypoints.dependencies import get_session_context
from shared.entrypoints.errors import to_http_exception
from case import views
from case.domain import commands
from case.domain.model import SpermSource
from case.domain.requisition import KaryotypeUpload, RequisitionDraft
from case.service_layer import messagebus
from case.service_layer.unit_of_work import SqlAlchemyUnitOfWork

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["cases"])


def get_uow() -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork()


# ---------- Request models ----------

class RequisitionRequest(BaseModel):
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
    sperm_source: SpermSource = SpermSource.PARTNER
    ordering_provider_id: str = ""
    tests_ordered: List[str] = []
    indication: str = ""
    mask_sex_results: bool = False
    reason_for_testing: Optional[str] = None
    form_completed_by: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "patient_first_name": "Jane",
                "patient_last_name": "Doe",
                "patient_dob": "1988-04-12",
                "patient_email": "jane@example.com",
                "partner_first_name": "John",
                "partner_last_name": "Doe",
                "partner_dob": "1986-09-30",
                "partner_email": "john@example.com",
                "ordering_provider_id": "6f1c7d0e-2f0b-4c36-9d9e-3a1b8c2d4e5f",
                "tests_ordered": ["pgt_a"],
                "indication": "advanced_maternal_age",
            }
        }
    }

    def to_draft(self) -> RequisitionDraft:
        data = self.model_dump()
        data["sperm_source"] = self.sperm_source.value
        return RequisitionDraft(**data)


class StatusRequest(BaseModel):
    status: str


class ConsentSignedRequest(BaseModel):
    signed_at: Optional[datetime] = None


def _dispatch(cmd, uow):
    try:
        return messagebus.handle(cmd, uow)[0]
    except Exception as e:
        raise to_http_exception(e)


# ---------- Endpoints ----------

@router.post("/requisitions", status_code=201)
def submit_requisition(requisition: str = Form(...),
                       karyotype_file: Optional[UploadFile] = File(None),
                       session: SessionContext = Depends(get_session_context),
                       uow=Depends(get_uow)) -> Dict[str, Any]:
    """
    Submit a requisition.

    Multipart form: ``requisition`` holds the form fields as JSON,
    ``karyotype_file`` the optional karyotype document.
    """
    try:
        draft = RequisitionRequest.model_validate_json(requisition).to_draft()
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid requisition: {e.errors()[0]['msg']}")

    karyotype = None
    if karyotype_file is not None and karyotype_file.filename:
        karyotype = KaryotypeUpload(
            filename=karyotype_file.filename,
            content=karyotype_file.file.read(),
            content_type=karyotype_file.content_type or "application/octet-stream",
        )

    return _dispatch(commands.SubmitRequisition(session=session, draft=draft, karyotype=karyotype), uow)


@router.get("/requisitions/providers")
def get_requisition_providers(clinic_id: Optional[str] = None,
                              session: SessionContext = Depends(get_session_context),
                              uow=Depends(get_uow)):
    """Active ordering providers for the requisition form."""
    try:
        return views.list_active_providers(clinic_id or session.require_clinic(), session, uow)
    except Exception as e:
        raise to_http_exception(e)


@router.get("/cases")
def get_cases(status: Optional[str] = None, clinic_id: Optional[str] = None,
              search: Optional[str] = None,
              session: SessionContext = Depends(get_session_context),
              uow=Depends(get_uow)):
    try:
        cases = views.list_cases(session, uow, status=status, clinic_id=clinic_id, search=search)
    except Exception as e:
        raise to_http_exception(e)
    return {"cases": cases, "total_count": len(cases)}


@router.get("/cases/{case_id}")
def get_case(case_id: str,
             session: SessionContext = Depends(get_session_context),
             uow=Depends(get_uow)):
    try:
        return views.get_case(case_id, session, uow)
    except Exception as e:
        raise to_http_exception(e)


@router.patch("/cases/{case_id}/status")
def change_status(case_id: str, body: StatusRequest,
                  session: SessionContext = Depends(get_session_context),
                  uow=Depends(get_uow)):
    cmd = commands.ChangeCaseStatus(session=session, case_id=case_id, status=body.status)
    return _dispatch(cmd, uow)


@router.post("/cases/{case_id}/report")
def upload_report(case_id: str, file: UploadFile = File(...),
                  session: SessionContext = Depends(get_session_context),
                  uow=Depends(get_uow)):
    cmd = commands.UploadReport(
        session=session,
        case_id=case_id,
        filename=file.filename or "report.pdf",
        content=file.file.read(),
        content_type=file.content_type or "application/pdf",
    )
    return _dispatch(cmd, uow)


@router.get("/cases/{case_id}/consents")
def get_consents(case_id: str,
                 session: SessionContext = Depends(get_session_context),
                 uow=Depends(get_uow)):
    try:
        return views.consent_summary(case_id, session, uow)
    except Exception as e:
        raise to_http_exception(e)


@router.post("/consents/{consent_id}/signed")
def consent_signed(consent_id: str, body: Optional[ConsentSignedRequest] = None,
                   session: SessionContext = Depends(get_session_context),
                   uow=Depends(get_uow)):
    signed_at = body.signed_at if body else None
    cmd = commands.RecordConsentSigned(session=session, consent_id=consent_id, signed_at=signed_at)
    return _dispatch(cmd, uow)
