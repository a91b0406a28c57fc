from __future__ import annotations

import json
import socket
import urllib.error
import urllib.request
from dataclasses import replace
from typing import List, Optional, Sequence

from ..config import get_config
from ..logger import get_logger
from ..models.order_models import OrderItem, Product

logger = get_logger(__name__)

_USER_AGENT = "OrderSlip-Catalog"


def find_by_name(catalog: Sequence[Product], name: str) -> Optional[Product]:
    if not name:
        return None
    for product in catalog:
        if product.name == name:
            return product
    return None


def autofill(item: OrderItem, catalog: Sequence[Product]) -> OrderItem:
    """Copy unit and unit price from the catalog entry matching the item name."""
    product = find_by_name(catalog, item.name)
    if product is not None:
        item = replace(item, unit=product.unit, unit_price=product.unit_price)
    return replace(item, amount=float(item.quantity) * float(item.unit_price))


def is_modified(item: OrderItem, catalog: Sequence[Product]) -> bool:
    """True when a named line is not in the catalog or its price was overridden."""
    if not item.name:
        return False
    product = find_by_name(catalog, item.name)
    if product is None:
        return True
    return float(product.unit_price) != float(item.unit_price)


def parse_catalog(payload: object) -> List[Product]:
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            return []
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError:
            return []

    if not isinstance(payload, list):
        return []

    products: List[Product] = []
    for entry in payload:
        product = _parse_product(entry)
        if product is not None:
            products.append(product)
    return products


def fetch_catalog(url: Optional[str] = None, timeout: Optional[float] = None) -> List[Product]:
    config = get_config()
    target = (url or config.catalog_url or "").strip()
    if not target:
        return []

    request = urllib.request.Request(
        target,
        headers={"User-Agent": _USER_AGENT, "Accept": "application/json"},
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout or config.request_timeout) as response:
            payload = response.read()
    except urllib.error.HTTPError as exc:
        logger.warning("Catalog request failed with HTTP {}", exc.code)
        return []
    except urllib.error.URLError as exc:
        logger.warning("Catalog request failed: {}", getattr(exc, "reason", exc))
        return []
    except (TimeoutError, socket.timeout):
        logger.warning("Catalog request timed out")
        return []
    except OSError as exc:
        logger.warning("Catalog request failed: {}", exc)
        return []

    products = parse_catalog(payload)
    logger.info("Loaded {} catalog products", len(products))
    return products


def _parse_product(entry: object) -> Optional[Product]:
    if not isinstance(entry, dict):
        return None

    name = str(entry.get("name") or "").strip()
    if not name:
        return None

    raw_price = entry.get("unit_price", entry.get("price", 0))
    try:
        price = float(str(raw_price).replace(",", "")) if raw_price not in (None, "") else 0.0
    except ValueError:
        return None

    unit = str(entry.get("unit") or "").strip()
    return Product(name=name, unit=unit, unit_price=max(0.0, price))
