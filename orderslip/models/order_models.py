from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class OrderItem:
    item_id: str
    name: str = ""
    quantity: float = 1.0
    unit: str = ""
    unit_price: float = 0.0
    amount: float = 0.0
    remarks: str = ""

    @property
    def has_remarks(self) -> bool:
        return bool((self.remarks or "").strip())


@dataclass(frozen=True)
class Product:
    name: str
    unit: str
    unit_price: float


@dataclass
class OrderFields:
    order_date: date
    store_name: str = ""
    tax_id: str = ""
    address: str = ""
    email: str = ""
    remarks: str = ""


@dataclass(frozen=True)
class Order:
    order_id: str
    order_date: date
    store_name: str
    tax_id: str
    address: str
    email: str
    remarks: str
    items: Tuple[OrderItem, ...]
    total_amount: float
    created_at: datetime

    @property
    def item_count(self) -> int:
        return len(self.items)


class CopyType(Enum):
    FACTORY_COPY = "factory"
    STORE_COPY = "store"

    @property
    def label(self) -> str:
        if self is CopyType.FACTORY_COPY:
            return "Copy 1: Factory Dispatch"
        return "Copy 2: Store Signed Receipt"


@dataclass(frozen=True)
class InvoiceRow:
    position: Optional[int]
    name: str = ""
    quantity: str = ""
    unit: str = ""
    unit_price: str = ""
    amount: str = ""
    remarks: str = ""

    @property
    def is_blank(self) -> bool:
        return self.position is None


@dataclass(frozen=True)
class InvoiceLayout:
    copy_type: CopyType
    copy_label: str
    business_name: str
    order_id: str
    order_date: str
    store_name: str
    tax_id: str
    address: str
    email: str
    remarks: str
    rows: Tuple[InvoiceRow, ...]
    total: str
    signature_labels: Tuple[str, ...]

    @property
    def blank_row_count(self) -> int:
        return sum(1 for row in self.rows if row.is_blank)


@dataclass
class EmailDraft:
    subject: str
    body: str
    generated: bool = False


@dataclass
class SubmissionResult:
    order: Optional[Order] = None
    violations: List[str] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.order is not None and not self.violations


@dataclass
class AppSettings:
    business_name: str
    default_unit: str = "pcs"
    invoice_min_rows: int = 5
    invoice_compact_min_rows: int = 1
    invoice_compact_threshold: int = 10
