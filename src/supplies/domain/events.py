"""Domain events for the supplies service."""

from dataclasses import dataclass
from typing import Dict, Optional

from shared.domain.commands import Event


@dataclass
class KitOrderPlaced(Event):
    """Event raised when a clinic has placed a supply order."""
    order_id: str
    clinic_id: str
    clinic_name: str
    clinic_contact: str
    items: Dict[str, int]
    shipping_address: str
    notes: Optional[str] = None
