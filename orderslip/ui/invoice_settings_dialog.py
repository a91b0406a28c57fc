from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from ..models.order_models import AppSettings
from ..services import order_service


class InvoiceSettingsDialog(QDialog):
    def __init__(self, *, parent: Optional[QWidget] = None, app_settings: AppSettings) -> None:
        super().__init__(parent)
        self.setWindowTitle("Invoice Settings")
        self.resize(420, 300)

        self._app_settings = app_settings
        self._updated_settings: Optional[AppSettings] = None

        self._build_ui()
        self._populate_fields()

    def get_updated_settings(self) -> Optional[AppSettings]:
        return self._updated_settings

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        layout.setContentsMargins(18, 18, 18, 18)
        layout.setSpacing(12)
        self.setLayout(layout)

        form_layout = QFormLayout()
        form_layout.setLabelAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        form_layout.setFieldGrowthPolicy(QFormLayout.FieldGrowthPolicy.ExpandingFieldsGrow)
        layout.addLayout(form_layout)

        self._business_name_input = QLineEdit()
        self._business_name_input.setPlaceholderText("Printed under the invoice title")
        form_layout.addRow("Business Name", self._business_name_input)

        self._default_unit_input = QLineEdit()
        self._default_unit_input.setPlaceholderText("pcs")
        form_layout.addRow("Default Unit", self._default_unit_input)

        self._min_rows_input = QSpinBox()
        self._min_rows_input.setRange(0, 30)
        form_layout.addRow("Minimum Rows", self._min_rows_input)

        self._compact_rows_input = QSpinBox()
        self._compact_rows_input.setRange(0, 30)
        form_layout.addRow("Compact Minimum Rows", self._compact_rows_input)

        self._compact_threshold_input = QSpinBox()
        self._compact_threshold_input.setRange(0, 100)
        form_layout.addRow("Compact After Items", self._compact_threshold_input)

        hint = QLabel(
            "Orders with more items than the compact threshold use the compact minimum, "
            "so both copies still fit on one page."
        )
        hint.setWordWrap(True)
        hint.setStyleSheet("color: #6b7280;")
        layout.addWidget(hint)

        button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel)
        button_box.accepted.connect(self._handle_save)
        button_box.rejected.connect(self.reject)
        layout.addWidget(button_box)

    def _populate_fields(self) -> None:
        settings = self._app_settings
        self._business_name_input.setText(settings.business_name)
        self._default_unit_input.setText(settings.default_unit)
        self._min_rows_input.setValue(settings.invoice_min_rows)
        self._compact_rows_input.setValue(settings.invoice_compact_min_rows)
        self._compact_threshold_input.setValue(settings.invoice_compact_threshold)

    def _handle_save(self) -> None:
        updated = AppSettings(
            business_name=self._business_name_input.text().strip(),
            default_unit=self._default_unit_input.text().strip() or self._app_settings.default_unit,
            invoice_min_rows=self._min_rows_input.value(),
            invoice_compact_min_rows=self._compact_rows_input.value(),
            invoice_compact_threshold=self._compact_threshold_input.value(),
        )
        self._updated_settings = order_service.update_app_settings(updated)
        self.accept()
