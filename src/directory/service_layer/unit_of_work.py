# pylint: disable=attribute-defined-outside-init
from __future__ import annotations

from shared.adapters import auth_client
from shared.service_layer import unit_of_work
from directory.adapters import repository


class AbstractUnitOfWork(unit_of_work.AbstractUnitOfWork):
    clinics: repository.AbstractClinicRepository
    providers: repository.AbstractProviderRepository
    users: repository.AbstractUserRepository
    auth: auth_client.AbstractAuthClient

    def _repositories(self):
        return [getattr(self, name, None) for name in ("clinics", "providers", "users")]


class SqlAlchemyUnitOfWork(unit_of_work.SqlAlchemyUnitOfWork, AbstractUnitOfWork):
    def __init__(self, session_factory=unit_of_work.DEFAULT_SESSION_FACTORY, auth_client_impl=None):
        super().__init__(session_factory)
        self.auth = auth_client_impl or auth_client.HTTPAuthClient()

    def _open_repositories(self, session):
        self.clinics = repository.SqlAlchemyClinicRepository(session)
        self.providers = repository.SqlAlchemyProviderRepository(session)
        self.users = repository.SqlAlchemyUserRepository(session)
