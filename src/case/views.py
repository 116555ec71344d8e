"""
Read paths for cases: detail, lists, consent summary and the providers
offered on the requisition form.
"""
import logging
from typing import Any, Dict, List, Optional

from shared.domain.exceptions import PermissionDenied
from shared.domain.session import SessionContext
from case.domain.exceptions import CaseNotFound
from case.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)


def _get_visible_case(case_id: str, session: SessionContext, uow: AbstractUnitOfWork):
    case = uow.cases.get(case_id)
    # clinic users get the same answer for other clinics' cases as for missing ones
    if case is None or not session.can_access_clinic(case.clinic_id):
        raise CaseNotFound(f"Case {case_id} not found")
    return case


def get_case(case_id: str, session: SessionContext, uow: AbstractUnitOfWork) -> Dict[str, Any]:
    """Case with clinic name, ordering provider and consents."""
    with uow:
        case = _get_visible_case(case_id, session, uow)
        clinic = uow.clinics.get(case.clinic_id)
        provider = uow.providers.get(case.ordering_provider_id)

        result = case.to_dict()
        result["clinic_name"] = clinic.name if clinic else None
        result["ordering_provider"] = provider.to_dict() if provider else None
        result["consents"] = [c.to_dict() for c in uow.consents.list_for_case(case.id)]
        return result


def list_cases(session: SessionContext, uow: AbstractUnitOfWork, status: Optional[str] = None,
               clinic_id: Optional[str] = None, search: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Cases visible to the session, newest first.

    Lab staff see every clinic and may filter by ``clinic_id``; clinic users
    (and staff viewing as one) only ever see their own clinic.
    """
    if not (session.is_lab_staff and not session.is_impersonating):
        clinic_id = session.require_clinic()

    with uow:
        cases = uow.cases.list(clinic_id=clinic_id, status=status, search=search)
        clinic_names = {clinic.id: clinic.name for clinic in uow.clinics.list()}
        return [
            {**case.to_dict(), "clinic_name": clinic_names.get(case.clinic_id)}
            for case in cases
        ]


def consent_summary(case_id: str, session: SessionContext, uow: AbstractUnitOfWork) -> Dict[str, Any]:
    """Consents of a case and whether all of them are signed."""
    with uow:
        case = _get_visible_case(case_id, session, uow)
        consents = uow.consents.list_for_case(case.id)
        return {
            "case_id": case.id,
            "case_number": case.case_number,
            "status": case.status,
            "consents": [c.to_dict() for c in consents],
            "all_signed": bool(consents) and all(c.is_signed for c in consents),
        }


def list_active_providers(clinic_id: str, session: SessionContext,
                          uow: AbstractUnitOfWork) -> List[Dict[str, Any]]:
    if not session.can_access_clinic(clinic_id):
        raise PermissionDenied("You do not have access to this clinic")
    with uow:
        return [
            {**p.to_dict(), "display_name": p.display_name}
            for p in uow.providers.list_for_clinic(clinic_id, active_only=True)
        ]
