from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence, Union
from uuid import uuid4

from ..config import get_config
from ..data import order_repository, settings_repository
from ..logger import get_logger
from ..models.order_models import (
    AppSettings,
    EmailDraft,
    Order,
    OrderFields,
    OrderItem,
    Product,
    SubmissionResult,
)
from . import catalog_service, email_service, sync_service

logger = get_logger(__name__)

ORDER_ID_PREFIX = "ORD-"
_SEQUENCE_WIDTH = 3
_DATE_FORMAT = "%Y-%m-%d"
_EDITABLE_FIELDS = {"name", "quantity", "unit", "unit_price", "remarks"}
_AMOUNT_FIELDS = {"name", "quantity", "unit_price"}
_UNNAMED_ITEM = "unnamed item"
_REQUIRED_FIELDS = (
    ("store_name", "Store name"),
    ("address", "Delivery address"),
    ("email", "Notification email"),
)


def compute_amount(quantity: object, unit_price: object) -> float:
    return _coerce_number(quantity, "quantity") * _coerce_number(unit_price, "unit price")


def compute_total(items: Iterable[OrderItem]) -> float:
    return sum((float(item.amount) for item in items), 0.0)


def new_item(unit: Optional[str] = None) -> OrderItem:
    if unit is None:
        unit = settings_repository.get_app_settings().default_unit
    return OrderItem(
        item_id=uuid4().hex[:9],
        name="",
        quantity=1.0,
        unit=unit,
        unit_price=0.0,
        amount=0.0,
        remarks="",
    )


def update_item(
    item: OrderItem,
    field: str,
    value: object,
    catalog: Sequence[Product] = (),
) -> OrderItem:
    """Return a copy of ``item`` with one field edited and the amount kept in sync."""
    if field not in _EDITABLE_FIELDS:
        raise ValueError(f"Field '{field}' cannot be edited directly.")

    if field in ("quantity", "unit_price"):
        number = _coerce_number(value, field.replace("_", " "))
        if field == "quantity" and number <= 0:
            raise ValueError("The quantity must be greater than zero.")
        if field == "unit_price" and number < 0:
            raise ValueError("The unit price cannot be negative.")
        updated = replace(item, **{field: number})
    else:
        updated = replace(item, **{field: "" if value is None else str(value)})

    if field == "name":
        return catalog_service.autofill(updated, catalog)
    if field in _AMOUNT_FIELDS:
        return replace(updated, amount=compute_amount(updated.quantity, updated.unit_price))
    return updated


def add_item(items: Sequence[OrderItem], unit: Optional[str] = None) -> List[OrderItem]:
    return [*items, new_item(unit)]


def remove_item(items: Sequence[OrderItem], item_id: str) -> List[OrderItem]:
    """Drop the line with ``item_id``; the last remaining line is kept."""
    if len(items) <= 1:
        return list(items)
    return [item for item in items if item.item_id != item_id]


def validate_items(items: Sequence[OrderItem], catalog: Sequence[Product]) -> List[str]:
    if not catalog:
        return []

    violations: List[str] = []
    for position, item in enumerate(items, start=1):
        if not catalog_service.is_modified(item, catalog):
            continue
        if item.has_remarks:
            continue
        label = item.name or _UNNAMED_ITEM
        violations.append(
            f"Item {position} ({label}): must state the reason for the discrepancy in the item remarks."
        )
    return violations


def missing_required_fields(fields: OrderFields) -> List[str]:
    missing: List[str] = []
    if fields.order_date is None:
        missing.append("Order date is required.")
    for attribute, label in _REQUIRED_FIELDS:
        if not str(getattr(fields, attribute, "") or "").strip():
            missing.append(f"{label} is required.")
    return missing


def generate_order_id(order_date: Union[date, str], history: Iterable[Order]) -> str:
    """Build ``ORD-YYYYMMDDNNN`` where NNN counts same-day orders in ``history``.

    Not safe against concurrent submissions sharing one history snapshot.
    """
    target = _coerce_date(order_date)
    same_day = sum(1 for order in history if _coerce_date(order.order_date) == target)
    return f"{ORDER_ID_PREFIX}{target.strftime('%Y%m%d')}{same_day + 1:0{_SEQUENCE_WIDTH}d}"


def assemble_order(
    fields: OrderFields,
    items: Sequence[OrderItem],
    history: Sequence[Order],
    *,
    created_at: Optional[datetime] = None,
) -> Order:
    if not items:
        raise ValueError("At least one line item is required")
    missing = missing_required_fields(fields)
    if missing:
        raise ValueError(" ".join(missing))

    order_date = _coerce_date(fields.order_date)
    frozen_items = tuple(items)
    return Order(
        order_id=generate_order_id(order_date, history),
        order_date=order_date,
        store_name=fields.store_name.strip(),
        tax_id=(fields.tax_id or "").strip(),
        address=fields.address.strip(),
        email=fields.email.strip(),
        remarks=(fields.remarks or "").strip(),
        items=frozen_items,
        total_amount=compute_total(frozen_items),
        created_at=created_at or datetime.now(),
    )


def submit_order(
    fields: OrderFields,
    items: Sequence[OrderItem],
    catalog: Sequence[Product] = (),
) -> SubmissionResult:
    violations = missing_required_fields(fields)
    if not items:
        violations.append("Add at least one item before submitting.")
    violations.extend(
        f"Item {position}: product name is required."
        for position, item in enumerate(items, start=1)
        if not item.name.strip()
    )
    violations.extend(
        f"Item {position}: quantity must be greater than zero."
        for position, item in enumerate(items, start=1)
        if float(item.quantity) <= 0
    )
    violations.extend(
        f"Item {position}: unit price cannot be negative."
        for position, item in enumerate(items, start=1)
        if float(item.unit_price) < 0
    )
    violations.extend(validate_items(items, catalog))
    if violations:
        logger.info("Order submission rejected with {} issue(s)", len(violations))
        return SubmissionResult(order=None, violations=violations)

    history = order_repository.load_history()
    order = assemble_order(fields, items, history)
    order_repository.insert_order(order)
    logger.info(
        "Order {} saved for {} ({} items, total {})",
        order.order_id,
        order.store_name,
        order.item_count,
        order.total_amount,
    )
    return SubmissionResult(order=order)


def list_history(limit: Optional[int] = None) -> List[Order]:
    return order_repository.fetch_orders(limit)


def fetch_order(order_id: str) -> Optional[Order]:
    return order_repository.fetch_order(order_id)


def forward_order(order: Order) -> bool:
    record = sync_service.to_flat_record(order)
    return sync_service.send_order(record, url=get_config().sync_url)


def prepare_email(order: Order) -> EmailDraft:
    return email_service.draft_email(order)


def get_app_settings() -> AppSettings:
    return settings_repository.get_app_settings()


def update_app_settings(settings: AppSettings) -> AppSettings:
    settings_repository.set_setting("business_name", settings.business_name.strip())
    settings_repository.set_setting("default_unit", settings.default_unit.strip())
    settings_repository.set_setting("invoice_min_rows", str(max(0, int(settings.invoice_min_rows))))
    settings_repository.set_setting(
        "invoice_compact_min_rows",
        str(max(0, int(settings.invoice_compact_min_rows))),
    )
    settings_repository.set_setting(
        "invoice_compact_threshold",
        str(max(0, int(settings.invoice_compact_threshold))),
    )
    return settings_repository.get_app_settings()


def _coerce_date(value: Union[date, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), _DATE_FORMAT).date()
    except ValueError as exc:
        raise ValueError(f"Order date must use YYYY-MM-DD (got {value!r}).") from exc


def _coerce_number(value: object, label: str) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"The {label} must be numeric (got {value!r}).") from exc
