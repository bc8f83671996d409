# storefront/repos/cart_repo.py
from dataclasses import dataclass
from decimal import Decimal
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storefront.data.models.cart_line import CartLineModel
from storefront.data.models.product import ProductModel


@dataclass(frozen=True)
class SnapshotLine:
    line_id: int
    product_id: int
    product_name: str
    price: Decimal
    stock: int
    quantity: int


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_line(self, line_id: int) -> CartLineModel | None:
        return self.db.get(CartLineModel, line_id)

    def get_line_for_update(self, line_id: int) -> CartLineModel | None:
        return self.db.execute(
            select(CartLineModel)
            .where(CartLineModel.id == line_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_user_line_for_update(self, user_id: int, product_id: int) -> CartLineModel | None:
        return self.db.execute(
            select(CartLineModel)
            .where(
                CartLineModel.user_id == user_id,
                CartLineModel.product_id == product_id,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def add_line(self, line: CartLineModel) -> CartLineModel:
        self.db.add(line)
        # flush od razu, konflikt na UNIQUE(user_id, product_id) ma wyjsc tutaj
        self.db.flush()
        return line

    def delete_line(self, line: CartLineModel) -> None:
        self.db.delete(line)
        self.db.flush()

    def snapshot(self, user_id: int, for_update: bool = False) -> List[SnapshotLine]:
        # jawny join zamiast relacji, kolejnosc = kolejnosc dodania
        stmt = (
            select(
                CartLineModel.id,
                CartLineModel.product_id,
                ProductModel.name,
                ProductModel.price,
                ProductModel.stock,
                CartLineModel.quantity,
            )
            .join(ProductModel, ProductModel.id == CartLineModel.product_id)
            .where(CartLineModel.user_id == user_id)
            .order_by(CartLineModel.id)
        )
        if for_update:
            # FOR UPDATE OF cart_lines, wiersze produktow blokuje ProductRepo.lock_products
            stmt = stmt.with_for_update(of=CartLineModel)

        rows = self.db.execute(stmt).all()

        return [
            SnapshotLine(
                line_id=r[0],
                product_id=r[1],
                product_name=r[2],
                price=r[3],
                stock=r[4],
                quantity=r[5],
            )
            for r in rows
        ]

    def clear(self, user_id: int, line_ids: List[int] | None = None) -> int:
        stmt = delete(CartLineModel).where(CartLineModel.user_id == user_id)
        if line_ids is not None:
            stmt = stmt.where(CartLineModel.id.in_(line_ids))

        result = self.db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
