# storefront/repos/order_repo.py
from collections import defaultdict
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel, items: List[OrderItemModel]) -> OrderModel:
        # bez commita, commit robi CheckoutService dla calej grupy
        self.db.add(order)
        self.db.flush()

        for item in items:
            item.order_id = order.id
        self.db.add_all(items)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_items(self, order_id: int) -> List[OrderItemModel]:
        return list(
            self.db.execute(
                select(OrderItemModel)
                .where(OrderItemModel.order_id == order_id)
                .order_by(OrderItemModel.id)
            ).scalars()
        )

    def list_orders(self, user_id: int) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )

    def get_items_for_orders(self, order_ids: List[int]) -> Dict[int, List[OrderItemModel]]:
        grouped: Dict[int, List[OrderItemModel]] = defaultdict(list)
        if not order_ids:
            return grouped

        items = self.db.execute(
            select(OrderItemModel)
            .where(OrderItemModel.order_id.in_(order_ids))
            .order_by(OrderItemModel.id)
        ).scalars()
        for item in items:
            grouped[item.order_id].append(item)
        return grouped
