"""Commands for the supplies service."""

from dataclasses import dataclass
from typing import Optional

from shared.domain.commands import Command
from shared.domain.session import SessionContext


@dataclass
class PlaceKitOrder(Command):
    session: SessionContext
    biopsy_collection_kits: int = 0
    shipping_containers: int = 0
    collection_tubes: int = 0
    shipping_address: Optional[str] = None
    notes: Optional[str] = None
