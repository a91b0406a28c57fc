from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from ..logger import get_logger
from ..models.order_models import EmailDraft, Order
from ..services import email_service

logger = get_logger(__name__)


class EmailDraftDialog(QDialog):
    """Editable notification email; the PDF is attached by hand in the mail client."""

    def __init__(self, *, parent: Optional[QWidget] = None, order: Order, draft: EmailDraft) -> None:
        super().__init__(parent)
        self.setWindowTitle(f"Email Draft - {order.order_id}")
        self.resize(560, 460)

        self._order = order

        layout = QVBoxLayout()
        layout.setContentsMargins(18, 18, 18, 18)
        layout.setSpacing(12)
        self.setLayout(layout)

        source = "Generated draft" if draft.generated else "Standard template (generation unavailable)"
        source_label = QLabel(source)
        source_label.setStyleSheet("color: #6b7280;")
        layout.addWidget(source_label)

        form_layout = QFormLayout()
        form_layout.setLabelAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        layout.addLayout(form_layout)

        recipient = QLabel(order.email)
        recipient.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        form_layout.addRow("To", recipient)

        self._subject_input = QLineEdit(draft.subject)
        form_layout.addRow("Subject", self._subject_input)

        self._body_input = QTextEdit()
        self._body_input.setAcceptRichText(False)
        self._body_input.setPlainText(draft.body)
        layout.addWidget(self._body_input, 1)

        button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        open_button = QPushButton("Open in Mail Client")
        open_button.setAutoDefault(False)
        button_box.addButton(open_button, QDialogButtonBox.ButtonRole.ActionRole)
        open_button.clicked.connect(self._handle_open_mail_client)
        button_box.rejected.connect(self.reject)
        layout.addWidget(button_box)

    def current_draft(self) -> EmailDraft:
        return EmailDraft(
            subject=self._subject_input.text().strip(),
            body=self._body_input.toPlainText().strip(),
        )

    def _handle_open_mail_client(self) -> None:
        url = email_service.build_mailto_url(self._order, self.current_draft())
        if not QDesktopServices.openUrl(QUrl(url)):
            logger.warning("No mail client handled the draft for {}", self._order.order_id)
