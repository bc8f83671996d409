# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal, init_db
from storefront.data.models.product import ProductModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PRODUCTS = [
    {"name": "Kemeja Batik Pria", "price": Decimal("185000.00"), "stock": 25},
    {"name": "Sepatu Sneakers Canvas", "price": Decimal("249000.00"), "stock": 12},
    {"name": "Tas Ransel Laptop", "price": Decimal("320000.00"), "stock": 8},
    {"name": "Kopi Arabika Gayo 250g", "price": Decimal("65000.00"), "stock": 40},
    {"name": "Headset Bluetooth", "price": Decimal("150000.00"), "stock": 0},
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            logger.info("Products already seeded")
            return
        db.add_all(ProductModel(is_active=True, **p) for p in PRODUCTS)
        db.commit()
        logger.info(f"Seeded {len(PRODUCTS)} products")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
