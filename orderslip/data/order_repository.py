from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from ..models.order_models import Order, OrderItem
from .database import create_connection


_DATE_FORMAT = "%Y-%m-%d"

_ORDER_COLUMNS = """
    o.id,
    o.order_number,
    o.order_date,
    o.store_name,
    o.tax_id,
    o.address,
    o.email,
    o.remarks,
    o.total_amount,
    o.created_at
"""


def insert_order(order: Order) -> int:
    with create_connection() as connection:
        cursor = connection.cursor()
        try:
            order_id = _insert_order_rows(cursor, order)
            connection.commit()
            return order_id
        except sqlite3.IntegrityError as exc:
            connection.rollback()
            raise exc
        finally:
            cursor.close()


def fetch_orders(limit: Optional[int] = None) -> List[Order]:
    """Return persisted orders, most recent first."""
    sql = f"""
        SELECT {_ORDER_COLUMNS}
        FROM orders AS o
        ORDER BY o.id DESC
    """
    params: tuple = ()
    if limit is not None:
        sql += " LIMIT ?"
        params = (int(limit),)

    with create_connection() as connection:
        order_rows = connection.execute(sql, params).fetchall()
        if not order_rows:
            return []
        items_by_order = _fetch_items(connection, [int(row["id"]) for row in order_rows])

    return [_row_to_order(row, items_by_order.get(int(row["id"]), [])) for row in order_rows]


def fetch_order(order_number: str) -> Optional[Order]:
    order_number = order_number.strip()
    if not order_number:
        return None

    with create_connection() as connection:
        row = connection.execute(
            f"""
            SELECT {_ORDER_COLUMNS}
            FROM orders AS o
            WHERE o.order_number = ?
            """,
            (order_number,),
        ).fetchone()
        if row is None:
            return None
        items_by_order = _fetch_items(connection, [int(row["id"])])

    return _row_to_order(row, items_by_order.get(int(row["id"]), []))


def load_history() -> List[Order]:
    return fetch_orders()


def save_history(orders: Sequence[Order]) -> None:
    """Replace the stored history with ``orders`` (most recent first)."""
    with create_connection() as connection:
        cursor = connection.cursor()
        try:
            cursor.execute("DELETE FROM order_items")
            cursor.execute("DELETE FROM orders")
            # Insert oldest first so row ids follow history order.
            for order in reversed(list(orders)):
                _insert_order_rows(cursor, order)
            connection.commit()
        except sqlite3.IntegrityError as exc:
            connection.rollback()
            raise exc
        finally:
            cursor.close()


def _insert_order_rows(cursor: sqlite3.Cursor, order: Order) -> int:
    cursor.execute(
        """
        INSERT INTO orders (
            order_number,
            order_date,
            store_name,
            tax_id,
            address,
            email,
            remarks,
            total_amount,
            created_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            order.order_id,
            order.order_date.strftime(_DATE_FORMAT),
            order.store_name,
            order.tax_id,
            order.address,
            order.email,
            order.remarks,
            float(order.total_amount),
            order.created_at.isoformat(),
        ),
    )
    row_id = int(cursor.lastrowid)

    cursor.executemany(
        """
        INSERT INTO order_items (
            order_id,
            position,
            item_key,
            name,
            quantity,
            unit,
            unit_price,
            amount,
            remarks
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (
                row_id,
                position,
                item.item_id,
                item.name,
                float(item.quantity),
                item.unit,
                float(item.unit_price),
                float(item.amount),
                item.remarks,
            )
            for position, item in enumerate(order.items)
        ],
    )
    return row_id


def _fetch_items(connection: sqlite3.Connection, order_ids: Iterable[int]) -> Dict[int, List[OrderItem]]:
    ids = list(order_ids)
    if not ids:
        return {}

    placeholders = ", ".join("?" for _ in ids)
    rows = connection.execute(
        f"""
        SELECT
            order_id,
            item_key,
            name,
            quantity,
            unit,
            unit_price,
            amount,
            remarks
        FROM order_items
        WHERE order_id IN ({placeholders})
        ORDER BY order_id ASC, position ASC
        """,
        ids,
    ).fetchall()

    grouped: Dict[int, List[OrderItem]] = {}
    for row in rows:
        grouped.setdefault(int(row["order_id"]), []).append(
            OrderItem(
                item_id=row["item_key"],
                name=row["name"],
                quantity=float(row["quantity"]),
                unit=row["unit"],
                unit_price=float(row["unit_price"]),
                amount=float(row["amount"]),
                remarks=row["remarks"],
            )
        )
    return grouped


def _row_to_order(row: sqlite3.Row, items: List[OrderItem]) -> Order:
    return Order(
        order_id=row["order_number"],
        order_date=datetime.strptime(row["order_date"], _DATE_FORMAT).date(),
        store_name=row["store_name"],
        tax_id=row["tax_id"],
        address=row["address"],
        email=row["email"],
        remarks=row["remarks"],
        items=tuple(items),
        total_amount=float(row["total_amount"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )
