import pytest

from orderslip.models.order_models import AppSettings, CopyType, OrderItem
from orderslip.services import invoice_service


def _items(count):
    return [
        OrderItem(item_id=f"i{index}", name=f"Item {index}", quantity=1, unit="pcs", unit_price=2.0, amount=2.0)
        for index in range(count)
    ]


@pytest.mark.parametrize(
    "item_count, expected_rows, expected_blanks",
    [
        (0, 5, 5),
        (3, 5, 2),
        (10, 10, 0),
        (11, 11, 0),
        (12, 12, 0),
    ],
)
def test_row_padding(order_factory, item_count, expected_rows, expected_blanks):
    order = order_factory(items=_items(item_count))

    layout = invoice_service.build_layout(order, CopyType.FACTORY_COPY)

    assert len(layout.rows) == expected_rows
    assert layout.blank_row_count == expected_blanks
    assert all(row.is_blank for row in layout.rows[item_count:])


def test_rows_keep_entry_order_for_both_copies(order_factory):
    order = order_factory(items=_items(3))

    factory = invoice_service.layout_rows(order, CopyType.FACTORY_COPY)
    store = invoice_service.layout_rows(order, CopyType.STORE_COPY)

    assert factory == store
    assert [row.name for row in factory[:3]] == ["Item 0", "Item 1", "Item 2"]
    assert [row.position for row in factory[:3]] == [1, 2, 3]


def test_compact_minimum_follows_settings(order_factory):
    settings = AppSettings(
        business_name="Acme",
        invoice_min_rows=8,
        invoice_compact_min_rows=6,
        invoice_compact_threshold=2,
    )

    assert len(invoice_service.layout_rows(order_factory(items=_items(2)), CopyType.STORE_COPY, settings)) == 8
    assert len(invoice_service.layout_rows(order_factory(items=_items(3)), CopyType.STORE_COPY, settings)) == 6


def test_layout_header_fields(order_factory):
    order = order_factory(tax_id="", remarks="Back door")

    layout = invoice_service.build_layout(order, CopyType.STORE_COPY, AppSettings(business_name="Acme"))

    assert layout.copy_label == "Copy 2: Store Signed Receipt"
    assert layout.business_name == "Acme"
    assert layout.tax_id == "N/A"
    assert layout.order_date == "2024-05-01"
    assert layout.total == "$20"
    assert layout.signature_labels == invoice_service.SIGNATURE_LABELS


@pytest.mark.parametrize(
    "value, expected",
    [(25, "25"), (1234.5, "1,234.50"), (0, "0")],
)
def test_format_amount(value, expected):
    assert invoice_service.format_amount(value) == expected


def test_format_quantity():
    assert invoice_service.format_quantity(2.0) == "2"
    assert invoice_service.format_quantity(1.5) == "1.5"


def test_html_has_both_copies_and_cutting_line(order_factory):
    order = order_factory(store_name="<Corner> Shop")

    html = invoice_service.render_invoice_html(order)

    assert html.index("Copy 1: Factory Dispatch") < html.index("Cutting Line")
    assert html.index("Cutting Line") < html.index("Copy 2: Store Signed Receipt")
    assert "&lt;Corner&gt; Shop" in html
    assert "<Corner>" not in html
    assert html.count("Received by (stamp)") == 2
