from __future__ import annotations

import sys

from PySide6.QtWidgets import QApplication

from orderslip.data import database
from orderslip.logger import configure_logging, get_logger
from orderslip.ui.main_window import APP_NAME, MainWindow

APP_VERSION = "1.0.0"


def main() -> int:
    configure_logging()
    database.initialize()
    get_logger(__name__).info("{} {} starting", APP_NAME, APP_VERSION)

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)
    window = MainWindow()
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
