# storefront/repos/product_repo.py
from typing import Dict, Iterable

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        # zawsze z bazy, nie z identity map (stock mogl sie zmienic)
        return self.db.execute(
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def lock_products(self, product_ids: Iterable[int]) -> Dict[int, ProductModel]:
        """SELECT ... FOR UPDATE na wierszach produktow.

        Kolejnosc po id, zeby dwa rownolegle checkouty nie zakleszczyly sie
        na tych samych produktach. populate_existing nadpisuje stan z identity
        map, stock ma byc swiezy z bazy.
        """
        ids = sorted(set(product_ids))
        if not ids:
            return {}

        stmt = (
            select(ProductModel)
            .where(ProductModel.id.in_(ids))
            .order_by(ProductModel.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return {p.id: p for p in self.db.execute(stmt).scalars().all()}

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        # warunkowy update: UPDATE products SET stock = stock - 2 WHERE id = 1 AND stock >= 2
        # 0 rows affected => ktos inny wykupil stock
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(stock=ProductModel.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def current_stock(self, product_id: int) -> int:
        stock = self.db.execute(
            select(ProductModel.stock).where(ProductModel.id == product_id)
        ).scalar_one_or_none()
        return stock or 0
