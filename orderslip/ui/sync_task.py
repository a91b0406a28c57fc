from __future__ import annotations

from PySide6.QtCore import QObject, QRunnable, Signal

from ..logger import get_logger
from ..models.order_models import Order
from ..services import order_service

logger = get_logger(__name__)


class SyncSignals(QObject):
    finished = Signal(str, bool)


class SyncTask(QRunnable):
    """Forward one saved order off the UI thread; ``finished`` fires whatever the outcome."""

    def __init__(self, order: Order) -> None:
        super().__init__()
        self._order = order
        self.signals = SyncSignals()

    def run(self) -> None:
        forwarded = False
        try:
            forwarded = order_service.forward_order(self._order)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Sync of order {} raised: {}", self._order.order_id, exc)
        finally:
            self.signals.finished.emit(self._order.order_id, forwarded)
