"""Testy skryptu seedujacego."""

from sqlalchemy import func, select

from storefront.data import seed as seed_module
from storefront.data.models.product import ProductModel


def test_seed_is_idempotent(session_factory, monkeypatch):
    monkeypatch.setattr(seed_module, "SessionLocal", session_factory)
    monkeypatch.setattr(seed_module, "init_db", lambda: None)

    seed_module.seed()
    seed_module.seed()

    with session_factory() as s:
        count = s.execute(select(func.count(ProductModel.id))).scalar_one()
        out_of_stock = s.execute(
            select(ProductModel.name).where(ProductModel.stock == 0)
        ).scalars().all()

    assert count == len(seed_module.PRODUCTS)
    assert out_of_stock == ["Headset Bluetooth"]
