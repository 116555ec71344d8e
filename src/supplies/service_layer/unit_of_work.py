# pylint: disable=attribute-defined-outside-init
from __future__ import annotations

from shared.adapters import notifications
from shared.service_layer import unit_of_work
from directory.adapters import repository as directory_repository
from supplies.adapters import repository


class AbstractUnitOfWork(unit_of_work.AbstractUnitOfWork):
    kit_orders: repository.AbstractKitOrderRepository
    clinics: directory_repository.AbstractClinicRepository
    notifier: notifications.AbstractNotifier

    def _repositories(self):
        return [getattr(self, "kit_orders", None)]


class SqlAlchemyUnitOfWork(unit_of_work.SqlAlchemyUnitOfWork, AbstractUnitOfWork):
    def __init__(self, session_factory=unit_of_work.DEFAULT_SESSION_FACTORY, notifier_impl=None):
        super().__init__(session_factory)
        self.notifier = notifier_impl or notifications.HTTPFunctionNotifier()

    def _open_repositories(self, session):
        self.kit_orders = repository.SqlAlchemyKitOrderRepository(session)
        self.clinics = directory_repository.SqlAlchemyClinicRepository(session)
