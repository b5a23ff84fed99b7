"""
Text Label Dialog for PhaseLayout

Dialog for entering a text annotation's label, text and colour.
"""

from PyQt6.QtWidgets import (
    QColorDialog, QDialog, QDialogButtonBox, QHBoxLayout, QLabel,
    QLineEdit, QPushButton, QVBoxLayout
)
from PyQt6.QtGui import QColor

from ...core.shapes import parse_color


class TextEditDialog(QDialog):
    """Dialog for a text annotation's label, text and colour."""

    def __init__(self, parent=None, label: str = "", text: str = "",
                 color: str = "#000000"):
        super().__init__(parent)

        self.setWindowTitle("Text Label")
        self.setModal(True)
        self._color = parse_color(color)

        # Layout
        layout = QVBoxLayout(self)

        # Label input
        label_layout = QHBoxLayout()
        label_layout.addWidget(QLabel("Label:"))
        self.label_input = QLineEdit(label)
        label_layout.addWidget(self.label_input)
        layout.addLayout(label_layout)

        # Text input
        text_layout = QHBoxLayout()
        text_layout.addWidget(QLabel("Text:"))
        self.text_input = QLineEdit(text)
        self.text_input.selectAll()
        text_layout.addWidget(self.text_input)
        layout.addLayout(text_layout)

        # Colour
        color_layout = QHBoxLayout()
        color_layout.addWidget(QLabel("Colour:"))
        self.color_button = QPushButton()
        self.color_button.clicked.connect(self._choose_color)
        color_layout.addWidget(self.color_button)
        color_layout.addStretch()
        layout.addLayout(color_layout)
        self._update_color_button()

        # Buttons
        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

        # Set focus to text input
        self.text_input.setFocus()

    def _update_color_button(self):
        self.color_button.setText(self._color)
        self.color_button.setStyleSheet(f"background-color: {self._color};")

    def _choose_color(self):
        chosen = QColorDialog.getColor(QColor(self._color), self, "Text Colour")
        if chosen.isValid():
            self._color = chosen.name().upper()
            self._update_color_button()

    def get_label(self) -> str:
        return self.label_input.text()

    def get_text(self) -> str:
        """Get entered text."""
        return self.text_input.text()

    def get_color(self) -> str:
        """Get chosen colour as #RRGGBB."""
        return self._color
