from __future__ import annotations

import os
import sqlite3
from pathlib import Path

from ..config import get_config


_DB_FILE = "orderslip.db"


def _get_storage_directory() -> Path:
    configured = get_config().data_dir
    if configured:
        target = Path(configured).expanduser()
    else:
        base = Path(os.getenv("LOCALAPPDATA", Path.home()))
        target = base / "OrderSlip"
    target.mkdir(parents=True, exist_ok=True)
    return target


def get_database_path() -> Path:
    return _get_storage_directory() / _DB_FILE


def get_storage_root() -> Path:
    """Return the application data directory used for the database and logs."""
    return _get_storage_directory()


def create_connection() -> sqlite3.Connection:
    connection = sqlite3.connect(get_database_path())
    connection.row_factory = sqlite3.Row
    _apply_pragmas(connection)
    return connection


def _apply_pragmas(connection: sqlite3.Connection) -> None:
    cursor = connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON;")
    cursor.execute("PRAGMA journal_mode = WAL;")
    cursor.close()


def initialize() -> None:
    with create_connection() as connection:
        cursor = connection.cursor()
        cursor.executescript(
            """
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS orders (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                order_number TEXT NOT NULL UNIQUE,
                order_date TEXT NOT NULL,
                store_name TEXT NOT NULL,
                tax_id TEXT NOT NULL DEFAULT '',
                address TEXT NOT NULL,
                email TEXT NOT NULL,
                remarks TEXT NOT NULL DEFAULT '',
                total_amount REAL NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS order_items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                order_id INTEGER NOT NULL,
                position INTEGER NOT NULL,
                item_key TEXT NOT NULL,
                name TEXT NOT NULL DEFAULT '',
                quantity REAL NOT NULL,
                unit TEXT NOT NULL DEFAULT '',
                unit_price REAL NOT NULL,
                amount REAL NOT NULL,
                remarks TEXT NOT NULL DEFAULT '',
                FOREIGN KEY(order_id) REFERENCES orders(id) ON DELETE CASCADE
            );

            CREATE INDEX IF NOT EXISTS idx_order_items_order_id
            ON order_items(order_id);

            CREATE INDEX IF NOT EXISTS idx_orders_order_date
            ON orders(order_date);
            """
        )
        cursor.close()
        connection.commit()
