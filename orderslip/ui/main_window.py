from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from PySide6.QtCore import QDate, QStringListModel, Qt, QThreadPool, QTimer
from PySide6.QtGui import QColor
from PySide6.QtPrintSupport import QPrintDialog, QPrinter
from PySide6.QtWidgets import (
    QAbstractItemView,
    QCompleter,
    QDateEdit,
    QDialog,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStyledItemDelegate,
    QTableView,
    QTableWidget,
    QTableWidgetItem,
    QTabWidget,
    QTextBrowser,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from ..logger import get_logger
from ..models.order_models import AppSettings, Order, OrderFields, OrderItem, Product
from ..services import catalog_service, invoice_printer, invoice_service, order_service
from ..viewmodels.table_models import ListTableModel
from .email_draft_dialog import EmailDraftDialog
from .invoice_settings_dialog import InvoiceSettingsDialog
from .sync_task import SyncTask

logger = get_logger(__name__)

APP_NAME = "OrderSlip"

# (title, OrderItem field, editable)
ITEM_COLUMNS = (
    ("Product", "name", True),
    ("Qty", "quantity", True),
    ("Unit", "unit", True),
    ("Unit Price", "unit_price", True),
    ("Amount", "amount", False),
    ("Remarks", "remarks", True),
)
_NAME_COLUMN = 0
_MODIFIED_BACKGROUND = QColor("#fff7ed")


class _ProductNameDelegate(QStyledItemDelegate):
    """Line editor with catalog name completion for the product column."""

    def __init__(self, completion_model: QStringListModel, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._completion_model = completion_model

    def createEditor(self, parent, option, index):  # noqa: N802
        editor = QLineEdit(parent)
        completer = QCompleter(self._completion_model, editor)
        completer.setCaseSensitivity(Qt.CaseSensitivity.CaseInsensitive)
        completer.setFilterMode(Qt.MatchFlag.MatchContains)
        editor.setCompleter(completer)
        return editor


class MainWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.resize(1180, 800)

        self._app_settings: AppSettings = order_service.get_app_settings()
        self._catalog: List[Product] = []
        self._items: List[OrderItem] = [order_service.new_item(self._app_settings.default_unit)]
        self._history_cache: List[Order] = []
        self._preview_order: Optional[Order] = None
        self._sync_tasks: Dict[str, SyncTask] = {}
        self._catalog_names = QStringListModel()

        self._tab_widget = QTabWidget()
        self.setCentralWidget(self._tab_widget)

        self._order_tab = QWidget()
        self._preview_tab = QWidget()
        self._history_tab = QWidget()

        self._tab_widget.addTab(self._order_tab, "New Order")
        self._tab_widget.addTab(self._preview_tab, "Invoice Preview")
        self._tab_widget.addTab(self._history_tab, "History")

        self._order_date_input: QDateEdit
        self._store_name_input: QLineEdit
        self._tax_id_input: QLineEdit
        self._address_input: QLineEdit
        self._email_input: QLineEdit
        self._order_remarks_input: QTextEdit
        self._items_table: QTableWidget
        self._total_label: QLabel
        self._catalog_status_label: QLabel
        self._order_status_label: QLabel

        self._preview_browser: QTextBrowser
        self._preview_title_label: QLabel
        self._sync_status_label: QLabel
        self._print_button: QPushButton
        self._export_button: QPushButton
        self._email_button: QPushButton

        self._history_model: ListTableModel
        self._history_table: QTableView
        self._history_status_label: QLabel

        self._build_order_tab()
        self._build_preview_tab()
        self._build_history_tab()

        self._render_items()
        self._update_preview_actions()
        self._load_history()
        QTimer.singleShot(0, self._refresh_catalog)

    # New order tab
    def _build_order_tab(self) -> None:
        layout = QVBoxLayout()
        self._order_tab.setLayout(layout)

        form_layout = QFormLayout()
        layout.addLayout(form_layout)

        self._order_date_input = QDateEdit()
        self._order_date_input.setCalendarPopup(True)
        self._order_date_input.setDisplayFormat("yyyy-MM-dd")
        self._order_date_input.setDate(QDate.currentDate())
        form_layout.addRow("Order Date", self._order_date_input)

        self._store_name_input = QLineEdit()
        self._store_name_input.setPlaceholderText("Store receiving the goods")
        form_layout.addRow("Store Name *", self._store_name_input)

        self._tax_id_input = QLineEdit()
        self._tax_id_input.setPlaceholderText("Optional")
        form_layout.addRow("Tax ID", self._tax_id_input)

        self._address_input = QLineEdit()
        form_layout.addRow("Delivery Address *", self._address_input)

        self._email_input = QLineEdit()
        self._email_input.setPlaceholderText("store@example.com")
        form_layout.addRow("Notification Email *", self._email_input)

        self._order_remarks_input = QTextEdit()
        self._order_remarks_input.setAcceptRichText(False)
        self._order_remarks_input.setPlaceholderText("Delivery instructions or other notes")
        self._order_remarks_input.setFixedHeight(60)
        form_layout.addRow("Remarks", self._order_remarks_input)

        catalog_layout = QHBoxLayout()
        layout.addLayout(catalog_layout)

        self._catalog_status_label = QLabel("Catalog not loaded.")
        self._catalog_status_label.setStyleSheet("color: #6b7280;")
        catalog_layout.addWidget(self._catalog_status_label, stretch=1)

        refresh_button = QPushButton("Refresh Catalog")
        refresh_button.clicked.connect(self._refresh_catalog)
        catalog_layout.addWidget(refresh_button)

        self._items_table = QTableWidget(0, len(ITEM_COLUMNS))
        self._items_table.setHorizontalHeaderLabels([title for title, _field, _editable in ITEM_COLUMNS])
        self._items_table.setItemDelegateForColumn(
            _NAME_COLUMN, _ProductNameDelegate(self._catalog_names, self._items_table)
        )
        header = self._items_table.horizontalHeader()
        header.setStretchLastSection(True)
        header.setSectionResizeMode(_NAME_COLUMN, QHeaderView.ResizeMode.Stretch)
        self._items_table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self._items_table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self._items_table.cellChanged.connect(self._on_item_cell_changed)
        layout.addWidget(self._items_table, stretch=1)

        item_actions = QHBoxLayout()
        layout.addLayout(item_actions)

        add_button = QPushButton("Add Line")
        add_button.clicked.connect(self._handle_add_item)
        item_actions.addWidget(add_button)

        remove_button = QPushButton("Remove Line")
        remove_button.clicked.connect(self._handle_remove_item)
        item_actions.addWidget(remove_button)

        item_actions.addStretch(1)

        self._total_label = QLabel()
        self._total_label.setStyleSheet("font-size: 14pt; font-weight: bold;")
        item_actions.addWidget(self._total_label)

        submit_layout = QHBoxLayout()
        layout.addLayout(submit_layout)

        self._order_status_label = QLabel()
        self._order_status_label.setWordWrap(True)
        submit_layout.addWidget(self._order_status_label, stretch=1)

        clear_button = QPushButton("Clear Form")
        clear_button.clicked.connect(self._handle_clear_order)
        submit_layout.addWidget(clear_button)

        submit_button = QPushButton("Submit Order")
        submit_button.setDefault(True)
        submit_button.clicked.connect(self._handle_submit_order)
        submit_layout.addWidget(submit_button)

    def _render_items(self) -> None:
        self._items_table.blockSignals(True)
        self._items_table.setRowCount(len(self._items))
        for row, item in enumerate(self._items):
            self._render_item_row(row, item)
        self._items_table.blockSignals(False)
        self._total_label.setText(
            f"Total: ${invoice_service.format_amount(order_service.compute_total(self._items))}"
        )

    def _render_item_row(self, row: int, item: OrderItem) -> None:
        modified = bool(self._catalog) and catalog_service.is_modified(item, self._catalog)
        for column, (_title, field, editable) in enumerate(ITEM_COLUMNS):
            value = getattr(item, field)
            if field == "quantity":
                text = invoice_service.format_quantity(value)
            elif field in ("unit_price", "amount"):
                text = invoice_service.format_amount(value)
            else:
                text = str(value)

            cell = QTableWidgetItem(text)
            if not editable:
                cell.setFlags(cell.flags() & ~Qt.ItemFlag.ItemIsEditable)
            if field in ("quantity", "unit_price", "amount"):
                cell.setTextAlignment(int(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter))
            if modified:
                cell.setBackground(_MODIFIED_BACKGROUND)
                if field == "remarks" and not item.has_remarks:
                    cell.setToolTip("Price or product differs from the catalog; state the reason here.")
            self._items_table.setItem(row, column, cell)

    def _on_item_cell_changed(self, row: int, column: int) -> None:
        if not (0 <= row < len(self._items)):
            return
        cell = self._items_table.item(row, column)
        value = cell.text().strip() if cell is not None else ""
        _title, field, _editable = ITEM_COLUMNS[column]

        if field in ("quantity", "unit_price"):
            value = value.replace(",", "") or "0"

        try:
            self._items[row] = order_service.update_item(self._items[row], field, value, self._catalog)
        except ValueError as exc:
            self._set_order_status(str(exc), error=True)
        self._render_items()

    def _handle_add_item(self) -> None:
        self._items = order_service.add_item(self._items, self._app_settings.default_unit)
        self._render_items()
        self._items_table.setCurrentCell(len(self._items) - 1, _NAME_COLUMN)

    def _handle_remove_item(self) -> None:
        row = self._items_table.currentRow()
        if not (0 <= row < len(self._items)):
            self._set_order_status("Select a line before removing it.", error=True)
            return
        if len(self._items) <= 1:
            self._set_order_status("An order keeps at least one line.", error=True)
            return
        self._items = order_service.remove_item(self._items, self._items[row].item_id)
        self._render_items()
        self._set_order_status("Line removed.")

    def _refresh_catalog(self) -> None:
        self._catalog_status_label.setText("Loading catalog...")
        try:
            self._catalog = catalog_service.fetch_catalog()
        finally:
            self._catalog_names.setStringList([product.name for product in self._catalog])
            if self._catalog:
                self._catalog_status_label.setText(f"{len(self._catalog)} catalog products available.")
            else:
                self._catalog_status_label.setText("Catalog unavailable; prices are not checked.")
        self._render_items()

    def _collect_fields(self) -> OrderFields:
        return OrderFields(
            order_date=self._extract_date(self._order_date_input),
            store_name=self._store_name_input.text().strip(),
            tax_id=self._tax_id_input.text().strip(),
            address=self._address_input.text().strip(),
            email=self._email_input.text().strip(),
            remarks=self._order_remarks_input.toPlainText().strip(),
        )

    def _handle_submit_order(self) -> None:
        try:
            result = order_service.submit_order(self._collect_fields(), list(self._items), self._catalog)
        except ValueError as exc:
            self._set_order_status(str(exc), error=True)
            return
        except Exception as exc:  # noqa: BLE001
            logger.exception("Order submission failed")
            self._set_order_status(f"Failed to save order: {exc}", error=True)
            return

        if not result.accepted or result.order is None:
            self._set_order_status("\n".join(result.violations), error=True)
            return

        order = result.order
        self._set_order_status(f"Order {order.order_id} saved.")
        self._clear_order_form()
        self._load_history()
        self._show_preview(order)
        self._tab_widget.setCurrentWidget(self._preview_tab)
        self._forward_order(order)

    def _forward_order(self, order: Order) -> None:
        task = SyncTask(order)
        task.signals.finished.connect(self._on_sync_finished)
        self._sync_tasks[order.order_id] = task
        self._sync_status_label.setText("Syncing to spreadsheet...")
        QThreadPool.globalInstance().start(task)

    def _on_sync_finished(self, order_id: str, forwarded: bool) -> None:
        self._sync_tasks.pop(order_id, None)
        if not self._sync_tasks:
            self._sync_status_label.setText("")

    def _handle_clear_order(self) -> None:
        self._clear_order_form()
        self._set_order_status("")

    def _clear_order_form(self) -> None:
        self._order_date_input.setDate(QDate.currentDate())
        self._store_name_input.clear()
        self._tax_id_input.clear()
        self._address_input.clear()
        self._email_input.clear()
        self._order_remarks_input.clear()
        self._items = [order_service.new_item(self._app_settings.default_unit)]
        self._render_items()

    def _set_order_status(self, message: str, *, error: bool = False) -> None:
        palette = "color: #d32f2f;" if error else "color: #2e7d32;"
        self._order_status_label.setStyleSheet(palette)
        self._order_status_label.setText(message)

    # Invoice preview tab
    def _build_preview_tab(self) -> None:
        layout = QVBoxLayout()
        self._preview_tab.setLayout(layout)

        header_layout = QHBoxLayout()
        layout.addLayout(header_layout)

        self._preview_title_label = QLabel("No order selected.")
        self._preview_title_label.setStyleSheet("font-weight: bold;")
        header_layout.addWidget(self._preview_title_label, stretch=1)

        self._sync_status_label = QLabel()
        self._sync_status_label.setStyleSheet("color: #2563eb;")
        header_layout.addWidget(self._sync_status_label)

        self._preview_browser = QTextBrowser()
        layout.addWidget(self._preview_browser, stretch=1)

        actions = QHBoxLayout()
        layout.addLayout(actions)

        settings_button = QPushButton("Invoice Settings")
        settings_button.clicked.connect(self._open_invoice_settings)
        actions.addWidget(settings_button)

        actions.addStretch(1)

        self._email_button = QPushButton("Email Draft")
        self._email_button.clicked.connect(self._handle_email_draft)
        actions.addWidget(self._email_button)

        self._export_button = QPushButton("Export PDF")
        self._export_button.clicked.connect(self._handle_export_invoice)
        actions.addWidget(self._export_button)

        self._print_button = QPushButton("Print")
        self._print_button.clicked.connect(self._handle_print_invoice)
        actions.addWidget(self._print_button)

    def _show_preview(self, order: Order) -> None:
        self._preview_order = order
        self._preview_title_label.setText(f"{order.order_id} | {order.store_name}")
        self._preview_browser.setHtml(invoice_service.render_invoice_html(order, self._app_settings))
        self._update_preview_actions()

    def _update_preview_actions(self) -> None:
        has_order = self._preview_order is not None
        self._print_button.setEnabled(has_order)
        self._export_button.setEnabled(has_order)
        self._email_button.setEnabled(has_order)

    def _handle_print_invoice(self) -> None:
        if self._preview_order is None:
            return
        printer = QPrinter(QPrinter.PrinterMode.HighResolution)
        dialog = QPrintDialog(printer, self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        invoice_printer.print_invoice(self._preview_order, printer, self._app_settings)

    def _handle_export_invoice(self) -> None:
        order = self._preview_order
        if order is None:
            return

        suggested_path = str(Path.home() / f"{order.order_id}.pdf")
        filename, _ = QFileDialog.getSaveFileName(
            self,
            "Export Invoice",
            suggested_path,
            "PDF Files (*.pdf);;All Files (*)",
        )
        if not filename:
            return

        try:
            exported_path = invoice_printer.export_invoice_pdf(order, filename, self._app_settings)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Invoice export failed")
            self._show_message(f"Invoice export failed: {exc}")
            return

        self._show_message(f"Invoice saved to {exported_path}")

    def _handle_email_draft(self) -> None:
        order = self._preview_order
        if order is None:
            return
        self._email_button.setEnabled(False)
        self._email_button.setText("Drafting...")
        try:
            draft = order_service.prepare_email(order)
        finally:
            self._email_button.setText("Email Draft")
            self._email_button.setEnabled(True)
        EmailDraftDialog(parent=self, order=order, draft=draft).exec()

    def _open_invoice_settings(self) -> None:
        dialog = InvoiceSettingsDialog(parent=self, app_settings=self._app_settings)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        updated = dialog.get_updated_settings()
        if updated is None:
            return
        self._app_settings = updated
        if self._preview_order is not None:
            self._show_preview(self._preview_order)

    # History tab
    def _build_history_tab(self) -> None:
        layout = QVBoxLayout()
        self._history_tab.setLayout(layout)

        self._history_model = ListTableModel(
            (
                ("Order #", lambda order: order.order_id),
                ("Date", lambda order: order.order_date.strftime("%Y-%m-%d")),
                ("Store", lambda order: order.store_name),
                ("Items", lambda order: order.item_count),
                ("Total", lambda order: f"${invoice_service.format_amount(order.total_amount)}"),
                ("Created", lambda order: order.created_at.strftime("%Y-%m-%d %H:%M")),
            ),
            numeric_columns=(3, 4),
        )
        self._history_table = QTableView()
        self._history_table.setModel(self._history_model)
        self._configure_table(self._history_table)
        self._history_table.doubleClicked.connect(lambda index: self._open_history_row(index.row()))
        layout.addWidget(self._history_table, stretch=1)

        footer = QHBoxLayout()
        layout.addLayout(footer)

        self._history_status_label = QLabel()
        footer.addWidget(self._history_status_label, stretch=1)

        refresh_button = QPushButton("Refresh")
        refresh_button.clicked.connect(self._load_history)
        footer.addWidget(refresh_button)

        open_button = QPushButton("Open Invoice")
        open_button.clicked.connect(lambda: self._open_history_row(self._history_table.currentIndex().row()))
        footer.addWidget(open_button)

    def _load_history(self) -> None:
        self._history_cache = order_service.list_history()
        self._history_model.update_rows(self._history_cache)
        if self._history_cache:
            self._history_status_label.setText(f"{len(self._history_cache)} orders, most recent first.")
        else:
            self._history_status_label.setText("No orders submitted yet.")

    def _open_history_row(self, row: int) -> None:
        order = self._history_model.row_at(row)
        if not isinstance(order, Order):
            self._show_message("Select an order first.")
            return
        self._show_preview(order)
        self._tab_widget.setCurrentWidget(self._preview_tab)

    def _configure_table(self, table: QTableView) -> None:
        header = table.horizontalHeader()
        header.setStretchLastSection(True)
        header.setSectionResizeMode(QHeaderView.ResizeMode.Interactive)
        table.setAlternatingRowColors(True)
        table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)

    def _show_message(self, message: str) -> None:
        QMessageBox.information(self, APP_NAME, message)

    @staticmethod
    def _extract_date(control: QDateEdit) -> date:
        value = control.date()
        return date(value.year(), value.month(), value.day())
