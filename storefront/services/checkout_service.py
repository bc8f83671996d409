# storefront/services/checkout_service.py
from contextlib import nullcontext
from typing import Any, Dict, List

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.enums import PaymentMethod
from storefront.domain.errors import (
    CheckoutFault,
    EmptyCart,
    InsufficientStock,
    StorefrontError,
    ValidationFailed,
)
from storefront.domain.pricing import SHIPPING_SERVICES, quote, resolve_shipping_service
from storefront.domain.schemas import ShippingAddress
from storefront.repos.cart_repo import CartRepo, SnapshotLine
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.cart_service import snapshot_payload
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.order_assembler import OrderAssembler, parse_payment_method
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

NOTES_MAX_LENGTH = 1000


class CheckoutService:
    """
    Zamiana koszyka w zamowienie.

    1. Walidacja: koszyk niepusty, adres, kurier, metoda platnosci
    2. Ponowne sprawdzenie stocku na zablokowanych wierszach produktow
    3. Jedna transakcja: zamowienie + pozycje + dekrementacja stocku + czyszczenie koszyka
    4. Powiadomienie (async) dopiero po commicie

    Kazde odrzucenie zostawia koszyk, stock i zamowienia bez zmian.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService | None = None,
        notification_service: NotificationService | None = None,
        assembler: OrderAssembler | None = None,
    ):
        self.db = db
        self.cart_repo = CartRepo(db)
        self.product_repo = ProductRepo(db)
        self.order_repo = OrderRepo(db)
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()
        self.assembler = assembler or OrderAssembler()

    #query - dane do formularza checkoutu
    def preview(self, user_id: int) -> Dict[str, Any]:
        lines = self.cart_repo.snapshot(user_id)
        if not lines:
            raise EmptyCart(user_id)

        return {
            "cart": snapshot_payload(user_id, lines),
            "shipping_services": [
                {"code": s.code, "name": s.name, "price": s.price}
                for s in SHIPPING_SERVICES.values()
            ],
            "payment_methods": [m.value for m in PaymentMethod],
        }

    #command
    def checkout(
        self,
        user_id: int,
        shipping_address: Any,
        shipping_service: str,
        payment_method: str,
        notes: str | None = None,
    ) -> Dict[str, Any]:
        guard = self.lock_service.checkout_lock(user_id) if self.lock_service else nullcontext()

        with guard:
            summary = self._place_order(
                user_id, shipping_address, shipping_service, payment_method, notes
            )

        try:
            self.notification_service.send_order_placed(
                user_id, summary["order_id"], summary["order_number"]
            )
        except Exception as e:
            # zamowienie jest juz zapisane, brak powiadomienia nie cofa checkoutu
            logger.warning(f"Failed to enqueue notification for order {summary['order_id']}: {e}")

        return summary

    def _place_order(
        self,
        user_id: int,
        shipping_address: Any,
        shipping_service: str,
        payment_method: str,
        notes: str | None,
    ) -> Dict[str, Any]:
        try:
            # Validating - linie koszyka zablokowane do konca transakcji
            lines = self.cart_repo.snapshot(user_id, for_update=True)
            if not lines:
                raise EmptyCart(user_id)

            address = self._validate_address(shipping_address)
            service = resolve_shipping_service(shipping_service)
            method = parse_payment_method(payment_method)
            notes = self._validate_notes(notes)

            # StockChecking - stock z chwili checkoutu, nie z chwili dodania do koszyka
            products = self.product_repo.lock_products(l.product_id for l in lines)
            self._check_stock(lines, products)

            # Committing - cena i nazwa z zablokowanych wierszy
            price_quote = quote(
                ((l.quantity, products[l.product_id].price) for l in lines),
                service.code,
            )
            order, items = self.assembler.assemble(
                user_id=user_id,
                lines=lines,
                products=products,
                price_quote=price_quote,
                shipping_address=address,
                shipping_service=service.code,
                payment_method=method.value,
                notes=notes,
            )
            self.order_repo.add_order(order, items)

            for line in lines:
                if not self.product_repo.decrement_stock(line.product_id, line.quantity):
                    product = products[line.product_id]
                    raise InsufficientStock(
                        product.id,
                        line.quantity,
                        self.product_repo.current_stock(product.id),
                        product.name,
                    )

            # tylko linie z tego zamowienia, linia dodana w miedzyczasie zostaje w koszyku
            cleared = self.cart_repo.clear(user_id, [l.line_id for l in lines])
            self.db.commit()

        except StorefrontError as e:
            self.db.rollback()
            logger.warning(f"Checkout rejected for user {user_id}: {e}")
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Checkout for user {user_id} rolled back: {e}")
            raise CheckoutFault() from e
        except Exception:
            self.db.rollback()
            logger.exception(f"Checkout for user {user_id} rolled back")
            raise

        logger.info(
            f"Order {order.id} ({order.order_number}) placed by user {user_id}: "
            f"{len(items)} items, {cleared} cart lines cleared, total {order.total}"
        )

        return {
            "order_id": order.id,
            "order_number": order.order_number,
            "status": order.status,
            "payment_status": order.payment_status,
            "subtotal": order.subtotal,
            "shipping_cost": order.shipping_cost,
            "total": order.total,
            "item_count": sum(i.quantity for i in items),
        }

    @staticmethod
    def _validate_address(raw: Any) -> ShippingAddress:
        try:
            return ShippingAddress.model_validate(raw)
        except ValidationError as e:
            errors = [
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]
            raise ValidationFailed("Invalid shipping address", errors=errors) from None

    @staticmethod
    def _validate_notes(notes: str | None) -> str | None:
        if notes is None:
            return None
        if not isinstance(notes, str):
            raise ValidationFailed("Notes must be text")
        notes = notes.strip()
        if len(notes) > NOTES_MAX_LENGTH:
            raise ValidationFailed(f"Notes may not exceed {NOTES_MAX_LENGTH} characters")
        return notes or None

    @staticmethod
    def _check_stock(lines: List[SnapshotLine], products: Dict[int, ProductModel]) -> None:
        for line in lines:
            product = products.get(line.product_id)
            # produkt wycofany ze sprzedazy traktujemy jak brak stocku
            available = product.stock if product is not None and product.is_active else 0
            if line.quantity > available:
                raise InsufficientStock(line.product_id, line.quantity, available, line.product_name)
