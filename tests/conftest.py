"""
Pytest configuration and fixtures.
"""
from datetime import date, datetime

import pytest

from orderslip.config import set_config_for_test
from orderslip.data import database
from orderslip.models.order_models import Order, OrderFields, OrderItem, Product


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path):
    """Point storage at a fresh directory with no external endpoints configured."""
    config = set_config_for_test(
        data_dir=str(tmp_path),
        catalog_url=None,
        sync_url=None,
        gemini_api_key=None,
    )
    database.initialize()
    yield config
    set_config_for_test(data_dir=str(tmp_path))


@pytest.fixture
def catalog():
    return [
        Product(name="Widget", unit="pcs", unit_price=10.0),
        Product(name="Gadget", unit="box", unit_price=5.0),
    ]


@pytest.fixture
def order_fields():
    return OrderFields(
        order_date=date(2024, 5, 1),
        store_name="Main St Store",
        tax_id="12345678",
        address="1 Main St",
        email="store@example.com",
    )


def make_order(order_id="ORD-20240501001", order_date=date(2024, 5, 1), items=None, **overrides):
    items = tuple(items) if items is not None else (
        OrderItem(item_id="a1", name="Widget", quantity=2, unit="pcs", unit_price=10.0, amount=20.0),
    )
    values = dict(
        order_id=order_id,
        order_date=order_date,
        store_name="Main St Store",
        tax_id="12345678",
        address="1 Main St",
        email="store@example.com",
        remarks="",
        items=items,
        total_amount=sum(item.amount for item in items),
        created_at=datetime(2024, 5, 1, 9, 30),
    )
    values.update(overrides)
    return Order(**values)


@pytest.fixture
def order_factory():
    return make_order
