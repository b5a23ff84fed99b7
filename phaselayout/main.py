#!/usr/bin/env python3
"""
PhaseLayout - Main Entry Point

Run with: python -m phaselayout.main
"""

import logging
import sys

from PyQt6.QtWidgets import QApplication
from PyQt6.QtCore import Qt

from . import __version__

logger = logging.getLogger(__name__)


def main():
    """Main entry point for the PhaseLayout editor."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    try:
        # Enable high DPI scaling
        QApplication.setHighDpiScaleFactorRoundingPolicy(
            Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
        )

        app = QApplication(sys.argv)
        app.setApplicationName("PhaseLayout")
        app.setApplicationVersion(__version__)
        app.setOrganizationName("PhaseLayout")

        # Import here so a broken Qt install fails inside the try block
        from .ui.mainwindow import MainWindow

        window = MainWindow()
        window.show()

        return app.exec()
    except Exception:
        logger.exception("Fatal error")
        return 1


if __name__ == "__main__":
    sys.exit(main())
