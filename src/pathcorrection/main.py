"""
Application Initialization
==========================
This module constructs the MVC (Model-View-Controller) architecture and starts
the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Configures logging and the persisted settings backend.
2. Instantiates the Global Data Model (PathState).
3. Instantiates the Main Window (View), passing the model into it.
4. Prevents circular import errors by being the orchestrator.
"""
import argparse
import logging
import sys
from typing import List, Optional

from PySide6.QtWidgets import QApplication
from PySide6.QtCore import QCoreApplication, QSettings

from pathcorrection.config import ORG_ID, APP_ID, VISIBLE_APP_NAME
from pathcorrection.logging_config import setup_logging
from pathcorrection.model.state import PathState
from pathcorrection.view.main_window import MainWindow

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pathcorrection", description=VISIBLE_APP_NAME)
    parser.add_argument("file", nargs="?", help="CSV point file to open at startup")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file")
    return parser.parse_args(argv)


def create_app(argv: Optional[List[str]] = None) -> QApplication:
    """Create the QApplication and point QSettings at an INI file."""
    QCoreApplication.setOrganizationName(ORG_ID)
    QCoreApplication.setApplicationName(APP_ID)
    QSettings.setDefaultFormat(QSettings.Format.IniFormat)

    app = QApplication.instance() or QApplication(argv if argv is not None else sys.argv)
    app.setApplicationDisplayName(VISIBLE_APP_NAME)
    return app


def main() -> None:
    args = parse_args(sys.argv[1:])

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, log_file=args.log_file)
    logger.info(f"Starting {VISIBLE_APP_NAME}")

    # 2. Create the Qt Application
    app = create_app(sys.argv[:1])

    # 3. Initialize the Data Model
    state = PathState()

    # 4. Initialize the Main Window, passing the model
    window = MainWindow(state, QSettings())
    window.show()

    if args.file:
        window.open_file(args.file)

    # 5. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
