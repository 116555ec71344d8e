import logging
from sqlalchemy import (
    Table,
    Column,
    String,
    DateTime,
    Text,
    JSON,
    ForeignKey,
    event,
)
from shared.adapters.orm import mapper_registry, metadata
from supplies.domain import model

logger = logging.getLogger(__name__)

kit_orders = Table(
    "kit_orders",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("clinic_id", String(36), ForeignKey("clinics.id"), nullable=False),
    Column("ordered_by_user_id", String(36), ForeignKey("users.id"), nullable=False),
    Column("status", String(32), nullable=False),
    Column("items", JSON, nullable=False),
    Column("shipping_address", Text),
    Column("notes", Text),
    Column("created_at", DateTime(timezone=True)),
)


def map_entities():
    mapper_registry.map_imperatively(model.KitOrder, kit_orders)


@event.listens_for(model.KitOrder, "load")
def receive_kit_order_load(order, _):
    order.events = []
