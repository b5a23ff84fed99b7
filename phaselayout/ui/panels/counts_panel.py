"""
Counts Panel - how many shapes carry each imported name.
"""

from PyQt6.QtWidgets import (
    QAbstractItemView, QHeaderView, QTableWidget, QTableWidgetItem,
    QVBoxLayout, QWidget
)
from PyQt6.QtGui import QColor

from ...core.document import LayoutDocument


class CountsPanel(QWidget):
    """Table of placement counts; unplaced names are highlighted."""

    def __init__(self, document: LayoutDocument, parent=None):
        super().__init__(parent)
        self.document = document

        layout = QVBoxLayout()
        layout.setContentsMargins(5, 5, 5, 5)
        self.table = QTableWidget(0, 3)
        self.table.setHorizontalHeaderLabels(["Name", "Count", "Type"])
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.verticalHeader().setVisible(False)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        layout.addWidget(self.table)
        self.setLayout(layout)

    def refresh(self):
        rows = self.document.phase_counts() + self.document.detector_counts()
        self.table.setRowCount(len(rows))
        for row, (name, count, kind) in enumerate(rows):
            cells = [QTableWidgetItem(name), QTableWidgetItem(str(count)),
                     QTableWidgetItem(kind or "Phase")]
            for column, cell in enumerate(cells):
                if count == 0:
                    cell.setBackground(QColor(255, 230, 230))
                self.table.setItem(row, column, cell)
