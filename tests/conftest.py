"""Fixtury pytest dla testow sklepu."""

import os

# silnik aplikacji nie moze wskazywac na postgresa w testach
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")

from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event, func, select
from sqlalchemy.orm import sessionmaker

import storefront.data.models  # noqa: F401
from storefront.data.database import Base
from storefront.data.models.cart_line import CartLineModel
from storefront.data.models.order import OrderModel
from storefront.data.models.product import ProductModel

ADDRESS = {
    "name": "Budi Santoso",
    "phone": "081234567890",
    "address": "Jl. Merdeka No. 10",
    "city": "Bandung",
    "province": "Jawa Barat",
    "postal_code": "40111",
}


class FakeRedis:
    """Redis w pamieci: tylko komendy, ktorych uzywa LockService."""

    def __init__(self):
        self.store = {}

    def set(self, name, value, nx=False, ex=None):
        if nx and name in self.store:
            return None
        self.store[name] = value
        return True

    def get(self, name):
        return self.store.get(name)

    def eval(self, script, numkeys, key, token):
        if self.store.get(key) == token:
            del self.store[key]
            return 1
        return 0


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send_order_placed(self, user_id, order_id, order_number):
        self.sent.append((user_id, order_id, order_number))


@pytest.fixture
def engine(tmp_path):
    """SQLite w pliku, zeby osobne sesje widzialy swoje commity."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'storefront.db'}",
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_conn, _record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_product(session_factory):
    def _make(name="Product", price="50000.00", stock=10, is_active=True):
        with session_factory() as s:
            product = ProductModel(name=name, price=Decimal(price), stock=stock, is_active=is_active)
            s.add(product)
            s.commit()
            return product.id

    return _make


@pytest.fixture
def set_product(session_factory):
    """Zmiana produktu z zewnatrz (dostawa, zmiana ceny)."""

    def _set(product_id, **values):
        with session_factory() as s:
            product = s.get(ProductModel, product_id)
            for key, value in values.items():
                setattr(product, key, value)
            s.commit()

    return _set


@pytest.fixture
def read_stock(session_factory):
    def _read(product_id):
        with session_factory() as s:
            return s.get(ProductModel, product_id).stock

    return _read


@pytest.fixture
def cart_quantities(session_factory):
    """{product_id: quantity} koszyka uzytkownika, tak jak w bazie."""

    def _read(user_id):
        with session_factory() as s:
            lines = s.execute(
                select(CartLineModel).where(CartLineModel.user_id == user_id)
            ).scalars()
            return {l.product_id: l.quantity for l in lines}

    return _read


@pytest.fixture
def order_count(session_factory):
    def _count(user_id=None):
        with session_factory() as s:
            stmt = select(func.count(OrderModel.id))
            if user_id is not None:
                stmt = stmt.where(OrderModel.user_id == user_id)
            return s.execute(stmt).scalar_one()

    return _count


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def notifier():
    return RecordingNotifier()
