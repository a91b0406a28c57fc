import sqlite3
from datetime import date

import pytest

from orderslip.data import database, order_repository, settings_repository
from orderslip.models.order_models import OrderItem


def test_database_lives_in_configured_directory(tmp_path):
    assert database.get_database_path() == tmp_path / "orderslip.db"
    assert database.get_database_path().exists()


def test_initialize_is_repeatable_and_creates_remarks_columns():
    database.initialize()

    with database.create_connection() as connection:
        order_columns = {row["name"] for row in connection.execute("PRAGMA table_info(orders)")}
        item_columns = {row["name"] for row in connection.execute("PRAGMA table_info(order_items)")}

    assert "remarks" in order_columns
    assert {"position", "item_key", "remarks"} <= item_columns


def test_order_round_trip_preserves_item_order(order_factory):
    items = (
        OrderItem(item_id="z", name="Zeta", quantity=1.5, unit="kg", unit_price=4.0, amount=6.0, remarks="loose"),
        OrderItem(item_id="a", name="Alpha", quantity=2, unit="pcs", unit_price=10.0, amount=20.0),
    )
    order = order_factory(items=items, remarks="Leave at the back door")

    order_repository.insert_order(order)

    assert order_repository.fetch_order(order.order_id) == order
    assert order_repository.fetch_order("ORD-MISSING") is None


def test_duplicate_order_id_rejected(order_factory):
    order_repository.insert_order(order_factory())

    with pytest.raises(sqlite3.IntegrityError):
        order_repository.insert_order(order_factory())


def test_history_is_most_recent_first(order_factory):
    first = order_factory("ORD-20240501001")
    second = order_factory("ORD-20240501002")
    order_repository.insert_order(first)
    order_repository.insert_order(second)

    assert order_repository.load_history() == [second, first]
    assert order_repository.fetch_orders(limit=1) == [second]


def test_save_history_replaces_stored_orders(order_factory):
    order_repository.insert_order(order_factory("ORD-20240430001", order_date=date(2024, 4, 30)))
    history = [order_factory("ORD-20240501002"), order_factory("ORD-20240501001")]

    order_repository.save_history(history)

    assert order_repository.load_history() == history


def test_settings_defaults_and_overrides():
    settings = settings_repository.get_app_settings()
    assert settings.business_name == "OrderSlip"
    assert settings.default_unit == "pcs"
    assert (settings.invoice_min_rows, settings.invoice_compact_min_rows, settings.invoice_compact_threshold) == (
        5,
        1,
        10,
    )

    settings_repository.set_setting("default_unit", "box")
    settings_repository.set_setting("invoice_min_rows", "not a number")

    updated = settings_repository.get_app_settings()
    assert updated.default_unit == "box"
    assert updated.invoice_min_rows == 5
    assert settings_repository.get_setting("unknown_key") == ""
