"""
Selection Handling for PhaseLayout

Manages the single selected shape and the clipboard, and the operations
built on them (copy, paste, duplicate, delete).
"""

from typing import Optional
import logging

from PyQt6.QtCore import QObject, pyqtSignal

from ..core.document import LayoutDocument
from ..core.shapes import LineShape, Shape, SquareShape, TextShape

logger = logging.getLogger(__name__)


def offset_shape(shape: Shape, dx: float, dy: float) -> None:
    """Translate any shape variant in place."""
    if isinstance(shape, LineShape):
        shape.translate(dx, dy)
    elif isinstance(shape, (SquareShape, TextShape)):
        shape.x += dx
        shape.y += dy
    else:
        raise TypeError(f"Unknown shape type: {type(shape).__name__}")


class SelectionManager(QObject):
    """
    Manages selection state and clipboard.

    The selection never outlives its shape: when the selected shape is no
    longer owned by the document it reads back as None. The clipboard
    always holds an independent clone, never a live shape.
    """

    # Signals
    selection_changed = pyqtSignal(object)  # Selected shape or None

    def __init__(self, document: LayoutDocument):
        super().__init__()
        self.document = document
        self._selected: Optional[Shape] = None
        self._clipboard: Optional[Shape] = None

    @property
    def selected(self) -> Optional[Shape]:
        if self._selected is not None and not self.document.contains(self._selected):
            self._selected = None
        return self._selected

    @property
    def clipboard(self) -> Optional[Shape]:
        return self._clipboard

    def select(self, shape: Optional[Shape]) -> None:
        """Select shape (must be owned by the document) or clear with None."""
        if shape is not None and not self.document.contains(shape):
            raise ValueError("Cannot select a shape that is not in the document")
        if shape is self._selected:
            return
        self._selected = shape
        self.selection_changed.emit(shape)

    def clear_selection(self) -> None:
        self.select(None)

    def is_selected(self, shape: Shape) -> bool:
        return shape is not None and shape is self.selected

    def copy_selected(self) -> bool:
        """Put a clone of the selection on the clipboard."""
        shape = self.selected
        if shape is None:
            return False
        self._clipboard = shape.clone()
        return True

    def insert_copy(self, copy: Shape) -> None:
        """
        Add a freshly cloned shape to the collection it belongs in.

        Lines named after a known phase go to phases, other lines to
        detectors.
        """
        if isinstance(copy, LineShape):
            if self.document.is_known_phase(copy.id):
                self.document.add_phase(copy)
            else:
                self.document.add_detector(copy)
        elif isinstance(copy, SquareShape):
            self.document.add_detector(copy)
        elif isinstance(copy, TextShape):
            self.document.add_text(copy)
        else:
            raise TypeError(f"Unknown shape type: {type(copy).__name__}")

    def paste(self, dx: float, dy: float) -> Optional[Shape]:
        """Insert an offset clone of the clipboard and select it."""
        if self._clipboard is None:
            return None
        copy = self._clipboard.clone()
        offset_shape(copy, dx, dy)
        self.insert_copy(copy)
        self.select(copy)
        return copy

    def duplicate_selected(self, dx: float, dy: float) -> Optional[Shape]:
        """Insert an offset clone of the selection and select it."""
        shape = self.selected
        if shape is None:
            return None
        copy = shape.clone()
        offset_shape(copy, dx, dy)
        self.insert_copy(copy)
        self.select(copy)
        return copy

    def delete_selected(self) -> Optional[Shape]:
        """Remove the selected shape from its collection and clear selection."""
        shape = self.selected
        if shape is None:
            return None
        self.document.remove(shape)
        self.clear_selection()
        logger.debug("Deleted %r", shape)
        return shape
