# storefront/api/routers/cart.py
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import (
    CartItemIn,
    CartLineOut,
    CartLineUpdateIn,
    CartSnapshotOut,
)
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session = Depends(get_db)):
    return CartService(db)


@router.get("", response_model=CartSnapshotOut)
def get_cart(
    user_id: int = Query(..., gt=0),
    svc: CartService = Depends(get_service),
):
    return svc.get_snapshot(user_id)


@router.post("/items", response_model=CartLineOut, status_code=201)
def add_item(
    payload: CartItemIn,
    user_id: int = Query(..., gt=0),
    svc: CartService = Depends(get_service),
):
    return svc.add_item(user_id, payload.product_id, payload.quantity)


@router.patch("/items/{line_id}", response_model=CartLineOut)
def update_item(
    line_id: int,
    payload: CartLineUpdateIn,
    user_id: int = Query(..., gt=0),
    svc: CartService = Depends(get_service),
):
    return svc.update_quantity(user_id, line_id, payload.quantity)


@router.delete("/items/{line_id}", status_code=204)
def remove_item(
    line_id: int,
    user_id: int = Query(..., gt=0),
    svc: CartService = Depends(get_service),
):
    svc.remove_item(user_id, line_id)
    return Response(status_code=204)
