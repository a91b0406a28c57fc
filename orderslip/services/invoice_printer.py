from __future__ import annotations

from pathlib import Path
from typing import Optional

from PySide6.QtCore import QSizeF
from PySide6.QtGui import QFont, QPageSize, QPdfWriter, QTextDocument
from PySide6.QtPrintSupport import QPrinter

from ..logger import get_logger
from ..models.order_models import AppSettings, Order
from .invoice_service import render_invoice_html

logger = get_logger(__name__)


def export_invoice_pdf(order: Order, destination: str, settings: Optional[AppSettings] = None) -> Path:
    path = Path(destination).expanduser()
    if path.suffix.lower() != ".pdf":
        path = path.with_suffix(".pdf")
    if not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)

    _write_pdf_from_html(render_invoice_html(order, settings), path)
    logger.info("Invoice for {} exported to {}", order.order_id, path)
    return path


def print_invoice(order: Order, printer: QPrinter, settings: Optional[AppSettings] = None) -> None:
    document = _build_document(render_invoice_html(order, settings))
    document.print_(printer)
    logger.info("Invoice for {} sent to printer", order.order_id)


def _write_pdf_from_html(html_content: str, path: Path) -> None:
    pdf_writer = QPdfWriter(str(path))
    pdf_writer.setPageSize(QPageSize(QPageSize.PageSizeId.A4))
    pdf_writer.setResolution(144)

    document = _build_document(html_content)
    document.setPageSize(QSizeF(pdf_writer.width(), pdf_writer.height()))
    document.print_(pdf_writer)


def _build_document(html_content: str) -> QTextDocument:
    document = QTextDocument()
    document.setDocumentMargin(24)
    document.setDefaultFont(QFont("Segoe UI", 9))
    document.setHtml(html_content)
    return document
