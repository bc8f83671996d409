# storefront/api/routers/checkout.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_lock_service, get_notification_service
from storefront.data.database import get_db
from storefront.domain.schemas import CheckoutIn, CheckoutOut, CheckoutPreviewOut
from storefront.services.checkout_service import CheckoutService
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService

router = APIRouter(prefix="/checkout", tags=["checkout"])


def get_service(
    db: Session = Depends(get_db),
    lock_service: LockService | None = Depends(get_lock_service),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return CheckoutService(
        db=db,
        lock_service=lock_service,
        notification_service=notification_service,
    )


@router.get("", response_model=CheckoutPreviewOut)
def preview(
    user_id: int = Query(..., gt=0),
    svc: CheckoutService = Depends(get_service),
):
    return svc.preview(user_id)


@router.post("", response_model=CheckoutOut, status_code=201)
def checkout(
    payload: CheckoutIn,
    user_id: int = Query(..., gt=0),
    svc: CheckoutService = Depends(get_service),
):
    """
    Składa zamówienie z koszyka usera.
    Zwraca id i numer zamówienia do przekierowania na potwierdzenie.
    """
    return svc.checkout(
        user_id=user_id,
        shipping_address=payload.shipping_address,
        shipping_service=payload.shipping_service,
        payment_method=payload.payment_method,
        notes=payload.notes,
    )
