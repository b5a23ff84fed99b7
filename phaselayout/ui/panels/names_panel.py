"""
Names Panel - imported phase and detector names as drag sources.
"""

from typing import List

from PyQt6.QtWidgets import (
    QAbstractItemView, QGroupBox, QListWidget, QVBoxLayout, QWidget
)
from PyQt6.QtCore import QMimeData


class NameListWidget(QListWidget):
    """List whose drags carry ``<prefix>:<name>`` as plain text."""

    def __init__(self, prefix: str, parent=None):
        super().__init__(parent)
        self.prefix = prefix
        self.setDragEnabled(True)
        self.setDragDropMode(QAbstractItemView.DragDropMode.DragOnly)

    def mimeData(self, items):
        mime = QMimeData()
        if items:
            mime.setText(f"{self.prefix}:{items[0].text()}")
        return mime


class NamesPanel(QWidget):
    """Phase and detector lists; drag a name onto the canvas to place it."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._init_ui()

    def _init_ui(self):
        layout = QVBoxLayout()
        layout.setContentsMargins(5, 5, 5, 5)

        phases_group = QGroupBox("Phases")
        phases_layout = QVBoxLayout()
        self.phase_list = NameListWidget("PHASE")
        phases_layout.addWidget(self.phase_list)
        phases_group.setLayout(phases_layout)
        layout.addWidget(phases_group)

        detectors_group = QGroupBox("Detectors")
        detectors_layout = QVBoxLayout()
        self.detector_list = NameListWidget("DET")
        detectors_layout.addWidget(self.detector_list)
        detectors_group.setLayout(detectors_layout)
        layout.addWidget(detectors_group)

        self.setLayout(layout)

    def set_names(self, phase_names: List[str], detector_names: List[str]):
        self.phase_list.clear()
        self.phase_list.addItems(phase_names)
        self.detector_list.clear()
        self.detector_list.addItems(detector_names)
