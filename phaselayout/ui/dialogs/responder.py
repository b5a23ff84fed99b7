"""
Qt answers for the editor's modal requests.
"""

from typing import List, Optional

from PyQt6.QtWidgets import QColorDialog, QDialog
from PyQt6.QtGui import QColor

from ...graphics.editor import ModalResponder, TextReply, TextRequest
from .pick_dialog import PickDialog
from .text_dialog import TextEditDialog


class QtModalResponder(ModalResponder):
    """Opens a modal dialog for each request; Cancel answers None."""

    def __init__(self, parent=None):
        self.parent = parent

    def request_text(self, request: TextRequest) -> Optional[TextReply]:
        dialog = TextEditDialog(self.parent, request.label, request.text, request.color)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return None
        return TextReply(dialog.get_label(), dialog.get_text(), dialog.get_color())

    def request_color(self, current: str) -> Optional[str]:
        chosen = QColorDialog.getColor(QColor(current), self.parent, "Detector Colour")
        if not chosen.isValid():
            return None
        return chosen.name().upper()

    def request_pick(self, title: str, names: List[str]) -> Optional[str]:
        dialog = PickDialog(title, names, self.parent)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return None
        return dialog.selected_name()
