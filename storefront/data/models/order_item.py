from sqlalchemy import Column, ForeignKey, Integer, Numeric, String

from storefront.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)

    # bez FK: produkt moze zostac zmieniony albo usuniety, historia zamowienia zostaje
    product_id = Column(Integer, nullable=False)
    product_name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    quantity = Column(Integer, nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
