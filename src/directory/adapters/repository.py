import abc
import logging
from typing import List, Optional, Set

from directory.domain import model

logger = logging.getLogger(__name__)


class AbstractClinicRepository(abc.ABC):
    def __init__(self):
        self.seen = set()  # type: Set[model.Clinic]

    def add(self, clinic: model.Clinic) -> str:
        self._add(clinic)
        self.seen.add(clinic)
        return clinic.id

    def get(self, clinic_id) -> Optional[model.Clinic]:
        clinic = self._get(clinic_id)
        if clinic:
            self.seen.add(clinic)
        return clinic

    def list(self, active_only: bool = False) -> List[model.Clinic]:
        clinics = self._list(active_only)
        for clinic in clinics:
            self.seen.add(clinic)
        return clinics

    @abc.abstractmethod
    def _add(self, clinic: model.Clinic):
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, clinic_id) -> Optional[model.Clinic]:
        raise NotImplementedError

    @abc.abstractmethod
    def _list(self, active_only: bool) -> List[model.Clinic]:
        raise NotImplementedError


class AbstractProviderRepository(abc.ABC):
    def __init__(self):
        self.seen = set()  # type: Set[model.Provider]

    def add(self, provider: model.Provider) -> str:
        self._add(provider)
        self.seen.add(provider)
        return provider.id

    def get(self, provider_id) -> Optional[model.Provider]:
        provider = self._get(provider_id)
        if provider:
            self.seen.add(provider)
        return provider

    def list_for_clinic(self, clinic_id: str, active_only: bool = False) -> List[model.Provider]:
        providers = self._list_for_clinic(clinic_id, active_only)
        for provider in providers:
            self.seen.add(provider)
        return providers

    @abc.abstractmethod
    def _add(self, provider: model.Provider):
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, provider_id) -> Optional[model.Provider]:
        raise NotImplementedError

    @abc.abstractmethod
    def _list_for_clinic(self, clinic_id: str, active_only: bool) -> List[model.Provider]:
        raise NotImplementedError


class AbstractUserRepository(abc.ABC):
    def __init__(self):
        self.seen = set()  # type: Set[model.User]

    def add(self, user: model.User) -> str:
        self._add(user)
        self.seen.add(user)
        return user.id

    def get(self, user_id) -> Optional[model.User]:
        user = self._get(user_id)
        if user:
            self.seen.add(user)
        return user

    def get_by_auth_id(self, auth_id) -> Optional[model.User]:
        user = self._get_by_auth_id(auth_id)
        if user:
            self.seen.add(user)
        return user

    def get_by_email(self, email: str) -> Optional[model.User]:
        return self._get_by_email(email)

    def list(self) -> List[model.User]:
        users = self._list()
        for user in users:
            self.seen.add(user)
        return users

    def list_active_for_clinic(self, clinic_id: str) -> List[model.User]:
        return self._list_active_for_clinic(clinic_id)

    @abc.abstractmethod
    def _add(self, user: model.User):
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, user_id) -> Optional[model.User]:
        raise NotImplementedError

    @abc.abstractmethod
    def _get_by_auth_id(self, auth_id) -> Optional[model.User]:
        raise NotImplementedError

    @abc.abstractmethod
    def _get_by_email(self, email: str) -> Optional[model.User]:
        raise NotImplementedError

    @abc.abstractmethod
    def _list(self) -> List[model.User]:
        raise NotImplementedError

    @abc.abstractmethod
    def _list_active_for_clinic(self, clinic_id: str) -> List[model.User]:
        raise NotImplementedError


class SqlAlchemyClinicRepository(AbstractClinicRepository):
    def __init__(self, session):
        super().__init__()
        self.session = session

    def _add(self, clinic):
        self.session.add(clinic)

    def _get(self, clinic_id):
        return self.session.query(model.Clinic).filter_by(id=clinic_id).first()

    def _list(self, active_only):
        query = self.session.query(model.Clinic)
        if active_only:
            query = query.filter_by(is_active=True)
        return query.order_by(model.Clinic.name).all()


class SqlAlchemyProviderRepository(AbstractProviderRepository):
    def __init__(self, session):
        super().__init__()
        self.session = session

    def _add(self, provider):
        self.session.add(provider)

    def _get(self, provider_id):
        return self.session.query(model.Provider).filter_by(id=provider_id).first()

    def _list_for_clinic(self, clinic_id, active_only):
        query = self.session.query(model.Provider).filter_by(clinic_id=clinic_id)
        if active_only:
            query = query.filter_by(is_active=True)
        return query.order_by(model.Provider.last_name, model.Provider.first_name).all()


class SqlAlchemyUserRepository(AbstractUserRepository):
    def __init__(self, session):
        super().__init__()
        self.session = session

    def _add(self, user):
        self.session.add(user)

    def _get(self, user_id):
        return self.session.query(model.User).filter_by(id=user_id).first()

    def _get_by_auth_id(self, auth_id):
        return self.session.query(model.User).filter_by(auth_id=auth_id).first()

    def _get_by_email(self, email):
        return self.session.query(model.User)\
            .filter(model.User.email.ilike(email))\
            .first()

    def _list(self):
        return self.session.query(model.User).order_by(model.User.last_name).all()

    def _list_active_for_clinic(self, clinic_id):
        """Active users of a clinic, used to target clinic notifications."""
        return self.session.query(model.User)\
            .filter(model.User.clinic_id == clinic_id)\
            .filter(model.User.is_active.is_(True))\
            .all()
