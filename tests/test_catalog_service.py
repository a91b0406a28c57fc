import json
import urllib.error
import urllib.request

import pytest

from orderslip.models.order_models import OrderItem, Product
from orderslip.services import catalog_service


class _FakeResponse:
    def __init__(self, body):
        self._body = body

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class TestMatcher:
    def test_exact_name_match(self, catalog):
        assert catalog_service.find_by_name(catalog, "Widget") == catalog[0]
        assert catalog_service.find_by_name(catalog, "widget") is None
        assert catalog_service.find_by_name(catalog, "") is None

    def test_autofill_copies_unit_and_price(self, catalog):
        item = OrderItem(item_id="a", name="Widget", quantity=3, unit="box", unit_price=1.0)

        filled = catalog_service.autofill(item, catalog)

        assert (filled.unit, filled.unit_price, filled.amount) == ("pcs", 10.0, 30.0)

    @pytest.mark.parametrize(
        "name, unit_price, expected",
        [
            ("", 99.0, False),
            ("Widget", 10.0, False),
            ("Widget", 12.0, True),
            ("Unknown", 10.0, True),
        ],
    )
    def test_is_modified(self, catalog, name, unit_price, expected):
        item = OrderItem(item_id="a", name=name, unit_price=unit_price)

        assert catalog_service.is_modified(item, catalog) is expected


class TestParseCatalog:
    def test_accepts_bytes_and_alternate_price_key(self):
        payload = json.dumps(
            [
                {"name": "Widget", "unit": "pcs", "unit_price": 10},
                {"name": "Gadget", "unit": "box", "price": "1,200"},
                {"unit": "pcs", "price": 3},
                "not an object",
            ]
        ).encode("utf-8")

        assert catalog_service.parse_catalog(payload) == [
            Product(name="Widget", unit="pcs", unit_price=10.0),
            Product(name="Gadget", unit="box", unit_price=1200.0),
        ]

    @pytest.mark.parametrize("payload", ["not json", '{"name": "Widget"}', None, b"\xff\xfe"])
    def test_malformed_payload_gives_empty_catalog(self, payload):
        assert catalog_service.parse_catalog(payload) == []


class TestFetchCatalog:
    def test_no_url_configured(self):
        assert catalog_service.fetch_catalog() == []

    def test_fetches_and_parses(self, monkeypatch):
        requests = []

        def fake_urlopen(request, timeout=None):
            requests.append((request, timeout))
            return _FakeResponse(b'[{"name": "Widget", "unit": "pcs", "unit_price": 10}]')

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

        products = catalog_service.fetch_catalog("https://example.test/catalog", timeout=3)

        assert products == [Product(name="Widget", unit="pcs", unit_price=10.0)]
        assert requests[0][0].full_url == "https://example.test/catalog"
        assert requests[0][1] == 3

    def test_network_failure_gives_empty_catalog(self, monkeypatch):
        def fake_urlopen(request, timeout=None):
            raise urllib.error.URLError("unreachable")

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

        assert catalog_service.fetch_catalog("https://example.test/catalog") == []
