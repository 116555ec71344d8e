"""Supply (kit) orders placed by clinics."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from supplies.domain import events

ITEM_NAMES = ("biopsy_collection_kits", "shipping_containers", "collection_tubes")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


@dataclass(eq=False)
class KitOrder:
    clinic_id: str
    ordered_by_user_id: str
    items: Dict[str, int]
    shipping_address: str = ""
    notes: Optional[str] = None
    status: str = "pending"
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_now)
    events: List = field(default_factory=list, repr=False)

    def placed(self, clinic_name: str, clinic_contact: str):
        self.events.append(events.KitOrderPlaced(
            order_id=self.id,
            clinic_id=self.clinic_id,
            clinic_name=clinic_name,
            clinic_contact=clinic_contact,
            items=dict(self.items),
            shipping_address=self.shipping_address,
            notes=self.notes,
        ))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "clinic_id": self.clinic_id,
            "ordered_by_user_id": self.ordered_by_user_id,
            "status": self.status,
            "items": dict(self.items),
            "shipping_address": self.shipping_address,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
