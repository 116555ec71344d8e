# pylint: disable=attribute-defined-outside-init
from __future__ import annotations

from shared.adapters import notifications
from shared.service_layer import unit_of_work
from case.adapters import blob_store, repository
from directory.adapters import repository as directory_repository


class AbstractUnitOfWork(unit_of_work.AbstractUnitOfWork):
    cases: repository.AbstractCaseRepository
    consents: repository.AbstractConsentRepository
    clinics: directory_repository.AbstractClinicRepository
    providers: directory_repository.AbstractProviderRepository
    users: directory_repository.AbstractUserRepository
    blobs: blob_store.AbstractBlobStore
    notifier: notifications.AbstractNotifier

    def _repositories(self):
        return [getattr(self, name, None) for name in ("cases", "consents")]


class SqlAlchemyUnitOfWork(unit_of_work.SqlAlchemyUnitOfWork, AbstractUnitOfWork):
    def __init__(self, session_factory=unit_of_work.DEFAULT_SESSION_FACTORY,
                 blob_store_impl=None, notifier_impl=None):
        super().__init__(session_factory)
        self.blobs = blob_store_impl or blob_store.MinIOBlobStore()
        self.notifier = notifier_impl or notifications.HTTPFunctionNotifier()

    def _open_repositories(self, session):
        self.cases = repository.SqlAlchemyCaseRepository(session)
        self.consents = repository.SqlAlchemyConsentRepository(session)
        self.clinics = directory_repository.SqlAlchemyClinicRepository(session)
        self.providers = directory_repository.SqlAlchemyProviderRepository(session)
        self.users = directory_repository.SqlAlchemyUserRepository(session)
