# storefront/services/cart_service.py
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart_line import CartLineModel
from storefront.domain.errors import (
    CartConflict,
    Forbidden,
    InsufficientStock,
    NotFound,
    StorefrontError,
    ValidationFailed,
)
from storefront.domain.pricing import line_total
from storefront.repos.cart_repo import CartRepo, SnapshotLine
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger
from storefront.utils.retry import unique_conflict_retry

logger = get_logger(__name__)


def snapshot_payload(user_id: int, lines: List[SnapshotLine]) -> Dict[str, Any]:
    items = [
        {
            "line_id": l.line_id,
            "product_id": l.product_id,
            "product_name": l.product_name,
            "price": l.price,
            "stock": l.stock,
            "quantity": l.quantity,
            "line_total": line_total(l.quantity, l.price),
        }
        for l in lines
    ]
    return {
        "user_id": user_id,
        "items": items,
        "subtotal": sum((i["line_total"] for i in items), Decimal("0.00")),
        "item_count": sum(l.quantity for l in lines),
    }


class CartService:
    """
    Use case'y dla koszyka.
    commands (add, update, remove) modyfikuja linie koszyka
    query (snapshot) tylko odczyt

    Sprawdzenie stocku przy dodawaniu to tylko szybka informacja dla usera,
    wiazace sprawdzenie robi CheckoutService w tej samej transakcji co dekrementacja.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query - odczyt
    def get_snapshot(self, user_id: int) -> Dict[str, Any]:
        return snapshot_payload(user_id, self.repo.snapshot(user_id))

    #commands
    def add_item(self, user_id: int, product_id: int, quantity: int) -> CartLineModel:
        if quantity < 1:
            raise ValidationFailed("Quantity must be at least 1")

        try:
            return self._merge_line(user_id, product_id, quantity)
        except IntegrityError as e:
            logger.error(f"Giving up merging product {product_id} into cart of user {user_id}: {e}")
            raise CartConflict(user_id, product_id) from e

    @unique_conflict_retry()
    def _merge_line(self, user_id: int, product_id: int, quantity: int) -> CartLineModel:
        try:
            product = self.products.get_product(product_id)
            if product is None or not product.is_active:
                raise NotFound("product", product_id)

            if product.stock < quantity:
                raise InsufficientStock(product.id, quantity, product.stock, product.name)

            #lock na istniejacej linii, merge ilosci w tej samej transakcji
            existing = self.repo.get_user_line_for_update(user_id, product_id)

            if existing:
                new_quantity = existing.quantity + quantity
                if new_quantity > product.stock:
                    raise InsufficientStock(product.id, new_quantity, product.stock, product.name)

                logger.info(
                    f"Product {product_id} already in cart of user {user_id}, "
                    f"quantity {existing.quantity} -> {new_quantity}"
                )
                existing.quantity = new_quantity
                line = existing
            else:
                logger.info(f"Adding product {product_id} x{quantity} to cart of user {user_id}")
                line = self.repo.add_line(
                    CartLineModel(
                        user_id=user_id,
                        product_id=product_id,
                        quantity=quantity,
                    )
                )

            self.repo.commit()
            return line

        except StorefrontError:
            self.repo.rollback()
            raise
        except IntegrityError:
            # rownolegly insert tej samej linii, retry przeczyta ja i zrobi merge
            self.repo.rollback()
            logger.warning(f"Concurrent add of product {product_id} for user {user_id}, retrying merge")
            raise

    def update_quantity(self, user_id: int, line_id: int, quantity: int) -> CartLineModel:
        if quantity < 1:
            raise ValidationFailed("Quantity must be at least 1")

        try:
            line = self.repo.get_line_for_update(line_id)
            if line is None:
                raise NotFound("cart line", line_id)

            if line.user_id != user_id:
                logger.warning(f"User {user_id} tried to update cart line {line_id} of another user")
                raise Forbidden("cart line")

            product = self.products.get_product(line.product_id)
            if product.stock < quantity:
                raise InsufficientStock(product.id, quantity, product.stock, product.name)

            line.quantity = quantity
            self.repo.commit()

        except StorefrontError:
            self.repo.rollback()
            raise

        logger.info(f"Cart line {line_id} of user {user_id} set to quantity {quantity}")
        return line

    def remove_item(self, user_id: int, line_id: int) -> None:
        line = self.repo.get_line_for_update(line_id)

        if line is None:
            #juz usunieta - no-op
            self.repo.rollback()
            logger.info(f"Cart line {line_id} already removed")
            return

        if line.user_id != user_id:
            self.repo.rollback()
            logger.warning(f"User {user_id} tried to remove cart line {line_id} of another user")
            raise Forbidden("cart line")

        self.repo.delete_line(line)
        self.repo.commit()

        logger.info(f"Cart line {line_id} removed from cart of user {user_id}")
