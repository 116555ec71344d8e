import abc
from typing import List, Optional, Set

from supplies.domain import model


class AbstractKitOrderRepository(abc.ABC):
    def __init__(self):
        self.seen = set()  # type: Set[model.KitOrder]

    def add(self, order: model.KitOrder) -> str:
        self._add(order)
        self.seen.add(order)
        return order.id

    def get(self, order_id) -> Optional[model.KitOrder]:
        order = self._get(order_id)
        if order:
            self.seen.add(order)
        return order

    def list_for_clinic(self, clinic_id: str) -> List[model.KitOrder]:
        return self._list_for_clinic(clinic_id)

    @abc.abstractmethod
    def _add(self, order: model.KitOrder):
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, order_id) -> Optional[model.KitOrder]:
        raise NotImplementedError

    @abc.abstractmethod
    def _list_for_clinic(self, clinic_id: str) -> List[model.KitOrder]:
        raise NotImplementedError


class SqlAlchemyKitOrderRepository(AbstractKitOrderRepository):
    def __init__(self, session):
        super().__init__()
        self.session = session

    def _add(self, order):
        self.session.add(order)

    def _get(self, order_id):
        return self.session.query(model.KitOrder).filter_by(id=order_id).first()

    def _list_for_clinic(self, clinic_id):
        return self.session.query(model.KitOrder)\
            .filter_by(clinic_id=clinic_id)\
            .order_by(model.KitOrder.created_at.desc())\
            .all()
