# storefront/services/order_service.py
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.errors import Forbidden, NotFound
from storefront.repos.order_repo import OrderRepo


def order_payload(order: OrderModel, items: List[OrderItemModel]) -> Dict[str, Any]:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "user_id": order.user_id,
        "subtotal": order.subtotal,
        "shipping_cost": order.shipping_cost,
        "total": order.total,
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_method": order.payment_method,
        "shipping_address": order.shipping_address,
        "shipping_service": order.shipping_service,
        "tracking_number": order.tracking_number,
        "notes": order.notes,
        "shipped_at": order.shipped_at,
        "delivered_at": order.delivered_at,
        "created_at": order.created_at,
        "items": [
            {
                "id": i.id,
                "product_id": i.product_id,
                "product_name": i.product_name,
                "price": i.price,
                "quantity": i.quantity,
                "total": i.total,
            }
            for i in items
        ],
    }


class OrderService:
    """
    Odczyt zamówień (Query). Zamówienia powstają tylko w CheckoutService.
    """

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)

    def get_order(self, order_id: int, user_id: int) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFound("order", order_id)

        if order.user_id != user_id:
            raise Forbidden("order")

        return order_payload(order, self.repo.get_items(order.id))

    def list_orders(self, user_id: int) -> List[Dict[str, Any]]:
        """Zamówienia usera, najnowsze pierwsze."""
        orders = self.repo.list_orders(user_id)
        items = self.repo.get_items_for_orders([o.id for o in orders])
        return [order_payload(o, items.get(o.id, [])) for o in orders]
