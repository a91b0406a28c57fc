import json
import socket
import urllib.error
import urllib.request

import pytest

from orderslip.models.order_models import OrderItem
from orderslip.services import sync_service


class _FakeResponse:
    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


def test_flat_record(order_factory):
    order = order_factory(
        items=(
            OrderItem(item_id="a", name="Widget", quantity=2, unit="pcs", unit_price=10.0, amount=20.0),
            OrderItem(item_id="b", name="Gadget", quantity=1.5, unit="box", unit_price=5.0, amount=7.5),
        ),
        remarks="Fragile",
    )

    record = sync_service.to_flat_record(order)

    assert record == {
        "order_id": "ORD-20240501001",
        "date": "2024-05-01",
        "store_name": "Main St Store",
        "tax_id": "12345678",
        "address": "1 Main St",
        "total_amount": 27.5,
        "remarks": "Fragile",
        "items": "Widget x 2 pcs, Gadget x 1.5 box",
    }


def test_no_endpoint_skips_request(monkeypatch, order_factory):
    def fail_urlopen(*args, **kwargs):
        raise AssertionError("no request expected")

    monkeypatch.setattr(urllib.request, "urlopen", fail_urlopen)

    assert sync_service.send_order(sync_service.to_flat_record(order_factory())) is False


def test_posts_record_as_json(monkeypatch, order_factory):
    sent = []

    def fake_urlopen(request, timeout=None):
        sent.append(request)
        return _FakeResponse()

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
    record = sync_service.to_flat_record(order_factory())

    assert sync_service.send_order(record, url="https://example.test/sync") is True
    assert sent[0].get_method() == "POST"
    assert json.loads(sent[0].data.decode("utf-8")) == record


@pytest.mark.parametrize(
    "error",
    [
        urllib.error.URLError("unreachable"),
        urllib.error.HTTPError("https://example.test/sync", 500, "Server Error", {}, None),
        socket.timeout("timed out"),
        ConnectionResetError("reset"),
    ],
)
def test_failures_are_swallowed(monkeypatch, order_factory, error):
    def fake_urlopen(request, timeout=None):
        raise error

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

    record = sync_service.to_flat_record(order_factory())
    assert sync_service.send_order(record, url="https://example.test/sync") is False
