"""
Name Pick Dialog for PhaseLayout

Lets the user choose one phase or detector name from the imported list.
"""

from typing import List, Optional

from PyQt6.QtWidgets import (
    QDialog, QDialogButtonBox, QLineEdit, QListWidget, QVBoxLayout
)


class PickDialog(QDialog):
    """Filterable single-choice list."""

    def __init__(self, title: str, names: List[str], parent=None):
        super().__init__(parent)

        self.setWindowTitle(title)
        self.setModal(True)
        self.resize(280, 360)

        layout = QVBoxLayout(self)

        self.filter_input = QLineEdit()
        self.filter_input.setPlaceholderText("Filter...")
        self.filter_input.textChanged.connect(self._apply_filter)
        layout.addWidget(self.filter_input)

        self.list_widget = QListWidget()
        self.list_widget.addItems(names)
        if names:
            self.list_widget.setCurrentRow(0)
        self.list_widget.itemDoubleClicked.connect(lambda _item: self.accept())
        layout.addWidget(self.list_widget)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

        self.filter_input.setFocus()

    def _apply_filter(self, text: str):
        needle = text.strip().lower()
        for row in range(self.list_widget.count()):
            item = self.list_widget.item(row)
            item.setHidden(bool(needle) and needle not in item.text().lower())

    def selected_name(self) -> Optional[str]:
        item = self.list_widget.currentItem()
        if item is None or item.isHidden():
            return None
        return item.text()
