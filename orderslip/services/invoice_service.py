from __future__ import annotations

import html
from typing import List, Optional

from ..models.order_models import AppSettings, CopyType, InvoiceLayout, InvoiceRow, Order

# Row padding keeps two stacked copies on one printed page.
DEFAULT_MIN_ROWS = 5
COMPACT_MIN_ROWS = 1
COMPACT_ITEM_THRESHOLD = 10

SIGNATURE_LABELS = ("Approved by", "Handled by", "Received by (stamp)")
_DATE_FORMAT = "%Y-%m-%d"
_MISSING_TAX_ID = "N/A"
_CURRENCY_PREFIX = "$"
_CUTTING_LINE = "Cutting Line"


def format_amount(value: float) -> str:
    number = float(value)
    if number.is_integer():
        return f"{number:,.0f}"
    return f"{number:,.2f}"


def format_quantity(value: float) -> str:
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:g}"


def minimum_row_target(item_count: int, settings: Optional[AppSettings] = None) -> int:
    if settings is None:
        threshold, regular, compact = COMPACT_ITEM_THRESHOLD, DEFAULT_MIN_ROWS, COMPACT_MIN_ROWS
    else:
        threshold = settings.invoice_compact_threshold
        regular = settings.invoice_min_rows
        compact = settings.invoice_compact_min_rows
    return compact if item_count > threshold else regular


def layout_rows(order: Order, copy_type: CopyType, settings: Optional[AppSettings] = None) -> List[InvoiceRow]:
    """Item rows in entry order followed by blank rows up to the row target.

    Both copy types produce the same rows; ``copy_type`` only affects labelling.
    """
    rows: List[InvoiceRow] = [
        InvoiceRow(
            position=position,
            name=item.name,
            quantity=format_quantity(item.quantity),
            unit=item.unit,
            unit_price=f"{_CURRENCY_PREFIX}{format_amount(item.unit_price)}",
            amount=f"{_CURRENCY_PREFIX}{format_amount(item.amount)}",
            remarks=item.remarks,
        )
        for position, item in enumerate(order.items, start=1)
    ]
    target = minimum_row_target(len(rows), settings)
    padding = max(0, target - len(rows))
    rows.extend(InvoiceRow(position=None) for _ in range(padding))
    return rows


def build_layout(order: Order, copy_type: CopyType, settings: Optional[AppSettings] = None) -> InvoiceLayout:
    business_name = settings.business_name if settings is not None else ""
    return InvoiceLayout(
        copy_type=copy_type,
        copy_label=copy_type.label,
        business_name=business_name,
        order_id=order.order_id,
        order_date=order.order_date.strftime(_DATE_FORMAT),
        store_name=order.store_name,
        tax_id=order.tax_id or _MISSING_TAX_ID,
        address=order.address,
        email=order.email,
        remarks=order.remarks,
        rows=tuple(layout_rows(order, copy_type, settings)),
        total=f"{_CURRENCY_PREFIX}{format_amount(order.total_amount)}",
        signature_labels=SIGNATURE_LABELS,
    )


def render_invoice_html(order: Order, settings: Optional[AppSettings] = None) -> str:
    """Both invoice copies on one page, separated by a cutting line."""
    factory = _render_copy_html(build_layout(order, CopyType.FACTORY_COPY, settings))
    store = _render_copy_html(build_layout(order, CopyType.STORE_COPY, settings))

    styles = """
        body { font-family: 'Segoe UI', Arial, sans-serif; margin: 0; padding: 12px; color: #1f2933; font-size: 9pt; }
        p { margin: 0; }
        .invoice { border: 2px solid #cbd5e1; padding: 12px 16px; margin-bottom: 8px; }
        .invoice.factory { border-color: #bfdbfe; }
        .invoice.store { border-color: #bbf7d0; }
        .title { font-size: 15pt; font-weight: 700; letter-spacing: 0.3em; margin: 0; }
        .business { font-size: 9pt; color: #4b5563; }
        .copy-tag { font-size: 8pt; font-weight: 700; color: #ffffff; padding: 1px 6px; }
        .factory .copy-tag { background-color: #2563eb; }
        .store .copy-tag { background-color: #16a34a; }
        table.header, table.items, table.signatures { width: 100%; border-collapse: collapse; }
        table.header td { padding: 2px 4px; vertical-align: top; }
        .label { color: #6b7280; }
        table.items { margin-top: 8px; border: 1px solid #9ca3af; }
        table.items th { background-color: #f3f4f6; text-align: left; padding: 4px; border: 1px solid #9ca3af; }
        table.items td { padding: 4px; border: 1px solid #9ca3af; }
        table.items tr.blank td { padding: 8px 4px; }
        .num { text-align: right; }
        .center { text-align: center; }
        .remarks { color: #6b7280; font-style: italic; }
        tr.total td { font-weight: 700; background-color: #f9fafb; }
        .total-value { color: #dc2626; }
        table.signatures td { width: 33%; text-align: center; border-top: 1px solid #9ca3af; padding-top: 4px; }
        .cutting-line { text-align: center; color: #9ca3af; border-top: 2px dashed #d1d5db; margin: 10px 0; font-size: 8pt; }
    """

    return """
        <!DOCTYPE html>
        <html lang="en">
        <head>
            <meta charset="utf-8" />
            <title>Invoice - {order_id}</title>
            <style>{styles}</style>
        </head>
        <body>
            {factory}
            <p class="cutting-line">{cutting_line}</p>
            {store}
        </body>
        </html>
    """.format(
        order_id=html.escape(order.order_id),
        styles=styles,
        factory=factory,
        cutting_line=_CUTTING_LINE,
        store=store,
    )


def _render_copy_html(layout: InvoiceLayout) -> str:
    row_markup: List[str] = []
    for row in layout.rows:
        if row.is_blank:
            row_markup.append(
                '<tr class="blank"><td>&nbsp;</td><td></td><td></td><td></td><td></td><td></td></tr>'
            )
            continue
        row_markup.append(
            """
            <tr>
                <td>{name}</td>
                <td class="center">{quantity}</td>
                <td class="center">{unit}</td>
                <td class="num">{unit_price}</td>
                <td class="num">{amount}</td>
                <td class="remarks">{remarks}</td>
            </tr>
            """.format(
                name=html.escape(row.name),
                quantity=html.escape(row.quantity),
                unit=html.escape(row.unit),
                unit_price=html.escape(row.unit_price),
                amount=html.escape(row.amount),
                remarks=html.escape(row.remarks),
            )
        )

    business_markup = ""
    if layout.business_name:
        business_markup = f'<p class="business">{html.escape(layout.business_name)}</p>'

    remarks_markup = ""
    if layout.remarks:
        remarks_markup = (
            '<tr><td colspan="2"><span class="label">Remarks: </span>'
            + html.escape(layout.remarks).replace("\n", "<br>")
            + "</td></tr>"
        )

    signatures = "".join(f"<td>{html.escape(label)}</td>" for label in layout.signature_labels)

    return """
        <div class="invoice {css_class}">
            <table class="header">
                <tr>
                    <td>
                        <p class="title">SALES ORDER</p>
                        {business}
                        <span class="copy-tag">{copy_label}</span>
                    </td>
                    <td class="num">
                        <p>Order #: {order_id}</p>
                        <p>Date: {order_date}</p>
                    </td>
                </tr>
                <tr>
                    <td><span class="label">Store: </span><b>{store_name}</b></td>
                    <td><span class="label">Delivery address: </span>{address}</td>
                </tr>
                <tr>
                    <td><span class="label">Tax ID: </span>{tax_id}</td>
                    <td><span class="label">Email: </span>{email}</td>
                </tr>
                {remarks}
            </table>
            <table class="items">
                <thead>
                    <tr>
                        <th>Product</th>
                        <th class="center">Qty</th>
                        <th class="center">Unit</th>
                        <th class="num">Unit Price</th>
                        <th class="num">Amount</th>
                        <th>Remarks</th>
                    </tr>
                </thead>
                <tbody>
                    {rows}
                </tbody>
                <tfoot>
                    <tr class="total">
                        <td colspan="4" class="num">Total:</td>
                        <td class="num total-value">{total}</td>
                        <td></td>
                    </tr>
                </tfoot>
            </table>
            <br>
            <table class="signatures"><tr>{signatures}</tr></table>
        </div>
    """.format(
        css_class=layout.copy_type.value,
        business=business_markup,
        copy_label=html.escape(layout.copy_label),
        order_id=html.escape(layout.order_id),
        order_date=html.escape(layout.order_date),
        store_name=html.escape(layout.store_name),
        address=html.escape(layout.address),
        tax_id=html.escape(layout.tax_id),
        email=html.escape(layout.email),
        remarks=remarks_markup,
        rows="".join(row_markup),
        total=html.escape(layout.total),
        signatures=signatures,
    )
