from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, Numeric, String, Text

from storefront.data.database import Base
from storefront.domain.enums import OrderStatus, PaymentStatus


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    # etykieta do wyswietlania, tozsamosc zamowienia to id
    order_number = Column(String(32), nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)

    subtotal = Column(Numeric(12, 2), nullable=False)
    shipping_cost = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)

    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_method = Column(String(32), nullable=False)

    shipping_address = Column(JSON, nullable=False)
    shipping_service = Column(String(32), nullable=False)
    tracking_number = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)

    shipped_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
