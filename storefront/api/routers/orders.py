# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import OrderOut
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session = Depends(get_db)):
    return OrderService(db)


@router.get("", response_model=List[OrderOut])
def list_orders(
    user_id: int = Query(..., gt=0),
    svc: OrderService = Depends(get_service),
):
    return svc.list_orders(user_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int = Query(..., gt=0),
    svc: OrderService = Depends(get_service),
):
    """
    Pobiera szczegóły zamówienia razem z pozycjami.
    """
    return svc.get_order(order_id, user_id)
