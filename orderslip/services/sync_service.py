from __future__ import annotations

import json
import socket
import urllib.error
import urllib.request
from typing import Dict, Optional

from ..config import get_config
from ..logger import get_logger
from ..models.order_models import Order
from .invoice_service import format_quantity

logger = get_logger(__name__)

_USER_AGENT = "OrderSlip-Sync"
_DATE_FORMAT = "%Y-%m-%d"


def to_flat_record(order: Order) -> Dict[str, object]:
    """Project an order onto the single spreadsheet row the sync endpoint expects."""
    items = ", ".join(
        f"{item.name} x {format_quantity(item.quantity)} {item.unit}".strip() for item in order.items
    )
    return {
        "order_id": order.order_id,
        "date": order.order_date.strftime(_DATE_FORMAT),
        "store_name": order.store_name,
        "tax_id": order.tax_id,
        "address": order.address,
        "total_amount": order.total_amount,
        "remarks": order.remarks,
        "items": items,
    }


def send_order(record: Dict[str, object], url: Optional[str] = None, timeout: Optional[float] = None) -> bool:
    """POST ``record`` once. The response body is never read; failures are logged."""
    config = get_config()
    target = (url or config.sync_url or "").strip()
    if not target:
        logger.debug("No sync endpoint configured; skipping order {}", record.get("order_id"))
        return False

    data = json.dumps(record, ensure_ascii=False).encode("utf-8")
    request = urllib.request.Request(
        target,
        data=data,
        method="POST",
        headers={"User-Agent": _USER_AGENT, "Content-Type": "application/json"},
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout or config.request_timeout):
            pass
    except urllib.error.HTTPError as exc:
        logger.warning("Sync of order {} failed with HTTP {}", record.get("order_id"), exc.code)
        return False
    except urllib.error.URLError as exc:
        logger.warning("Sync of order {} failed: {}", record.get("order_id"), getattr(exc, "reason", exc))
        return False
    except (TimeoutError, socket.timeout):
        logger.warning("Sync of order {} timed out", record.get("order_id"))
        return False
    except OSError as exc:
        logger.warning("Sync of order {} failed: {}", record.get("order_id"), exc)
        return False

    logger.info("Order {} forwarded to spreadsheet", record.get("order_id"))
    return True
