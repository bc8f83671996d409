# storefront/services/order_assembler.py
import secrets
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Tuple

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.product import ProductModel
from storefront.domain.enums import OrderStatus, PaymentMethod, PaymentStatus
from storefront.domain.errors import InvalidPaymentMethod
from storefront.domain.pricing import PriceQuote, line_total, resolve_shipping_service, to_money
from storefront.domain.schemas import ShippingAddress
from storefront.repos.cart_repo import SnapshotLine


def parse_payment_method(code: str) -> PaymentMethod:
    try:
        return PaymentMethod(code)
    except ValueError:
        raise InvalidPaymentMethod(code) from None


def generate_order_number(today: date | None = None) -> str:
    # ORD-20240101-123456, tylko etykieta do wyswietlania
    today = today or datetime.now(timezone.utc).date()
    return f"ORD-{today:%Y%m%d}-{100000 + secrets.randbelow(900000)}"


class OrderAssembler:
    """
    Sklada niezapisane zamowienie (naglowek + pozycje) z koszyka.
    Nazwa i cena produktu sa kopiowane do pozycji, pozniejsze zmiany
    w katalogu nie zmieniaja historii zamowien.
    """

    def __init__(self, number_factory: Callable[[], str] = generate_order_number):
        self.number_factory = number_factory

    def assemble(
        self,
        user_id: int,
        lines: List[SnapshotLine],
        products: Dict[int, ProductModel],
        price_quote: PriceQuote,
        shipping_address: ShippingAddress,
        shipping_service: str,
        payment_method: str,
        notes: str | None = None,
    ) -> Tuple[OrderModel, List[OrderItemModel]]:
        method = parse_payment_method(payment_method)
        service = resolve_shipping_service(shipping_service)

        items = []
        for line in lines:
            product = products[line.product_id]
            price = to_money(product.price)
            items.append(
                OrderItemModel(
                    product_id=product.id,
                    product_name=product.name,
                    price=price,
                    quantity=line.quantity,
                    total=line_total(line.quantity, price),
                )
            )

        order = OrderModel(
            order_number=self.number_factory(),
            user_id=user_id,
            subtotal=price_quote.subtotal,
            shipping_cost=price_quote.shipping_cost,
            total=price_quote.total,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            payment_method=method.value,
            shipping_address=shipping_address.model_dump(),
            shipping_service=service.code,
            notes=notes,
        )
        return order, items
