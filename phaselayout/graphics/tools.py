"""
Creation Tools for PhaseLayout

The pending creation mode chosen from the toolbar or a hotkey, and the
shape templates instantiated when the next canvas click consumes it.
"""

from enum import Enum
from typing import Optional

from ..config import EditorSettings, DEFAULT_SETTINGS
from ..core.shapes import ArrowType, LineShape, Point, SquareShape, TextShape


class NewShapeMode(Enum):
    """Shape created by the next primary click on the canvas."""
    NONE = "none"
    LINE = "line"
    SQUARE = "square"
    TEXT = "text"


def create_line(anchor: Point, settings: EditorSettings = DEFAULT_SETTINGS,
                offset: Optional[float] = None, id: str = "") -> LineShape:
    """Two-point line whose tip sits on anchor and tail up-left of it."""
    if offset is None:
        offset = settings.line_template_offset
    return LineShape(
        points=[Point(anchor.x - offset, anchor.y - offset), anchor.copy()],
        id=id,
        arrow_type=ArrowType.ARROW,
        thickness=settings.line_thickness,
        turn_length=settings.turn_length,
    )


def create_square(anchor: Point, settings: EditorSettings = DEFAULT_SETTINGS,
                  id: str = "") -> SquareShape:
    """Square detector centered on anchor."""
    return SquareShape(
        anchor.x, anchor.y,
        width=settings.square_size,
        height=settings.square_size,
        rotation=0.0,
        thickness=settings.square_thickness,
        fill=settings.square_fill,
        id=id,
    )


def create_text(anchor: Point, label: str, text: str, color: str,
                settings: EditorSettings = DEFAULT_SETTINGS) -> TextShape:
    """Text shape at anchor; a blank label falls back to the default label."""
    return TextShape(
        anchor.x, anchor.y,
        text=text,
        label=label if label and label.strip() else settings.text_label,
        font_name=settings.text_font,
        size=settings.text_size,
        bold=False,
        color=color,
    )


def square_to_line(square: SquareShape, id: str,
                   arrow_type: ArrowType = ArrowType.ARROW) -> LineShape:
    """Diagonal line from the square's top-left to bottom-right corner."""
    half_w = square.width / 2
    half_h = square.height / 2
    return LineShape(
        points=[Point(square.x - half_w, square.y - half_h),
                Point(square.x + half_w, square.y + half_h)],
        id=id,
        arrow_type=arrow_type,
        thickness=square.thickness,
    )
