"""
Supplies API - clinics order collection kits and shipping material.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from shared.domain.session import SessionContext
from shared.entrypoints.dependencies import get_session_context
from shared.entrypoints.errors import to_http_exception
from supplies.domain import commands
from supplies.service_layer import messagebus
from supplies.service_layer.unit_of_work import SqlAlchemyUnitOfWork

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["supplies"])


def get_uow() -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork()


class KitOrderRequest(BaseModel):
    biopsy_collection_kits: int = 0
    shipping_containers: int = 0
    collection_tubes: int = 0
    shipping_address: Optional[str] = None
    notes: Optional[str] = None


@router.post("/kit-orders", status_code=201)
def place_kit_order(body: KitOrderRequest,
                    session: SessionContext = Depends(get_session_context),
                    uow=Depends(get_uow)):
    cmd = commands.PlaceKitOrder(session=session, **body.model_dump())
    try:
        return messagebus.handle(cmd, uow)[0]
    except Exception as e:
        raise to_http_exception(e)
