from __future__ import annotations

from typing import Dict

from ..models.order_models import AppSettings
from .database import create_connection

_DEFAULTS: Dict[str, str] = {
    "business_name": "OrderSlip",
    "default_unit": "pcs",
    "invoice_min_rows": "5",
    "invoice_compact_min_rows": "1",
    "invoice_compact_threshold": "10",
}


def get_setting(key: str) -> str:
    key = key.strip()
    with create_connection() as connection:
        row = connection.execute(
            "SELECT value FROM settings WHERE key = ?",
            (key,),
        ).fetchone()

    if row is None:
        return _DEFAULTS.get(key, "")
    return row["value"]


def set_setting(key: str, value: str) -> None:
    key = key.strip()
    with create_connection() as connection:
        connection.execute(
            """
            INSERT INTO settings (key, value)
            VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """,
            (key, value),
        )
        connection.commit()


def get_app_settings() -> AppSettings:
    business_name = get_setting("business_name").strip() or _DEFAULTS["business_name"]
    default_unit = get_setting("default_unit").strip() or _DEFAULTS["default_unit"]

    return AppSettings(
        business_name=business_name,
        default_unit=default_unit,
        invoice_min_rows=_get_int_setting("invoice_min_rows", minimum=0),
        invoice_compact_min_rows=_get_int_setting("invoice_compact_min_rows", minimum=0),
        invoice_compact_threshold=_get_int_setting("invoice_compact_threshold", minimum=0),
    )


def _get_int_setting(key: str, *, minimum: int) -> int:
    try:
        value = int(get_setting(key) or _DEFAULTS[key])
    except ValueError:
        value = int(_DEFAULTS[key])
    return max(minimum, value)
