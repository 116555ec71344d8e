import logging

import config
from shared.adapters.notifications import NotificationError
from shared.domain.exceptions import NotFound
from supplies.domain import commands, events
from supplies.domain.model import ITEM_NAMES, KitOrder
from supplies.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)

ORDER_NOTIFICATION_FUNCTION = "send-order-notification"


def place_kit_order(command: commands.PlaceKitOrder, uow: AbstractUnitOfWork) -> dict:
    """
    Record a supply order for the caller's clinic.

    The shipping address falls back to the clinic's address. The lab is
    told about the order by the ``KitOrderPlaced`` event handler.
    """
    clinic_id = command.session.require_clinic()
    items = {name: int(getattr(command, name) or 0) for name in ITEM_NAMES}
    if any(quantity < 0 for quantity in items.values()):
        raise ValueError("Item quantities cannot be negative")
    if not any(items.values()):
        raise ValueError("Please order at least one item")

    orderer = command.session.effective_user
    with uow:
        clinic = uow.clinics.get(clinic_id)
        if clinic is None:
            raise NotFound(f"Clinic {clinic_id} not found")

        order = KitOrder(
            clinic_id=clinic_id,
            ordered_by_user_id=orderer.user_id,
            items=items,
            shipping_address=(command.shipping_address or "").strip() or clinic.address,
            notes=command.notes or None,
        )
        uow.kit_orders.add(order)
        order.placed(clinic_name=clinic.name, clinic_contact=orderer.email)
        uow.commit()
        logger.info(f"Kit order {order.id} placed for clinic {clinic_id}: {items}")
        return order.to_dict()


def send_order_notification(event: events.KitOrderPlaced, uow: AbstractUnitOfWork):
    """Tell the lab about a new supply order. Failures are logged, never raised."""
    payload = {
        "to": config.get_functions_config()["lab_order_email"],
        "clinic_name": event.clinic_name or "Unknown Clinic",
        "clinic_contact": event.clinic_contact or "",
        "order_id": event.order_id,
        "items": event.items,
        "shipping_address": event.shipping_address or "Use clinic default address",
        "notes": event.notes or "None",
    }
    try:
        uow.notifier.invoke(ORDER_NOTIFICATION_FUNCTION, payload)
        logger.info(f"Order notification sent for kit order {event.order_id}")
    except NotificationError as e:
        logger.error(f"Failed to send order notification for kit order {event.order_id}: {e}")
