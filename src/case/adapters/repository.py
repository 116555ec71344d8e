import abc
import logging
from typing import List, Optional, Set

from sqlalchemy import or_

from case.domain import model

logger = logging.getLogger(__name__)


class AbstractCaseRepository(abc.ABC):
    def __init__(self):
        self.seen = set()  # type: Set[model.Case]

    def add(self, case: model.Case) -> str:
        self._add(case)
        self.seen.add(case)
        return case.id

    def get(self, case_id) -> Optional[model.Case]:
        case = self._get(case_id)
        if case:
            self.seen.add(case)
        return case

    def list(self, clinic_id: Optional[str] = None, status: Optional[str] = None,
             search: Optional[str] = None) -> List[model.Case]:
        """Cases newest first; ``search`` matches case number and patient names."""
        return self._list(clinic_id, status, search)

    @abc.abstractmethod
    def _add(self, case: model.Case):
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, case_id) -> Optional[model.Case]:
        raise NotImplementedError

    @abc.abstractmethod
    def _list(self, clinic_id, status, search) -> List[model.Case]:
        raise NotImplementedError


class AbstractConsentRepository(abc.ABC):
    def __init__(self):
        self.seen = set()  # type: Set[model.Consent]

    def add(self, consent: model.Consent) -> str:
        self._add(consent)
        self.seen.add(consent)
        return consent.id

    def get(self, consent_id) -> Optional[model.Consent]:
        consent = self._get(consent_id)
        if consent:
            self.seen.add(consent)
        return consent

    def list_for_case(self, case_id: str) -> List[model.Consent]:
        return self._list_for_case(case_id)

    @abc.abstractmethod
    def _add(self, consent: model.Consent):
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, consent_id) -> Optional[model.Consent]:
        raise NotImplementedError

    @abc.abstractmethod
    def _list_for_case(self, case_id: str) -> List[model.Consent]:
        raise NotImplementedError


class SqlAlchemyCaseRepository(AbstractCaseRepository):
    def __init__(self, session):
        super().__init__()
        self.session = session

    def _add(self, case):
        self.session.add(case)
        # no relationship() to consents, so insert the case row before theirs
        self.session.flush()

    def _get(self, case_id):
        return self.session.query(model.Case).filter_by(id=case_id).first()

    def _list(self, clinic_id, status, search):
        query = self.session.query(model.Case)
        if clinic_id:
            query = query.filter(model.Case.clinic_id == clinic_id)
        if status:
            query = query.filter(model.Case.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                model.Case.case_number.ilike(pattern),
                model.Case.patient_first_name.ilike(pattern),
                model.Case.patient_last_name.ilike(pattern),
            ))
        return query.order_by(model.Case.created_at.desc()).all()


class SqlAlchemyConsentRepository(AbstractConsentRepository):
    def __init__(self, session):
        super().__init__()
        self.session = session

    def _add(self, consent):
        self.session.add(consent)

    def _get(self, consent_id):
        return self.session.query(model.Consent).filter_by(id=consent_id).first()

    def _list_for_case(self, case_id):
        return self.session.query(model.Consent)\
            .filter_by(case_id=case_id)\
            .order_by(model.Consent.signer_role.desc())\
            .all()
