"""
PhaseLayout Core Shapes Module

Defines the fundamental shape classes: Point, ArrowType and the three
shape variants (LineShape, SquareShape, TextShape).

All coordinates are image-space pixels of the background raster.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union
import math

from PIL import ImageColor


def clamp(value, minimum, maximum):
    """Clamp value into [minimum, maximum]."""
    if value < minimum:
        return minimum
    if value > maximum:
        return maximum
    return value


def parse_color(value: str) -> str:
    """
    Normalize a colour to ``#RRGGBB``.

    Accepts hex forms and CSS colour names (``Black``, ``blue``...).

    Raises:
        ValueError: if the colour cannot be understood
    """
    r, g, b = ImageColor.getrgb(value.strip())[:3]
    return f"#{r:02X}{g:02X}{b:02X}"


@dataclass
class Point:
    """A 2D point."""
    x: float
    y: float

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def distance_to(self, other: 'Point') -> float:
        """Calculate Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def copy(self) -> 'Point':
        return Point(self.x, self.y)


class ArrowType(Enum):
    """Direction symbol drawn at the tip of a line. Values are file tokens."""
    NO_ARROW = "NoArrow"
    ARROW = "Arrow"
    PED_CROSSING = "PedCrossing"
    LEFT_ARROW = "Left_Arrow"
    RIGHT_ARROW = "Right_Arrow"

    @staticmethod
    def _squash(token: str) -> str:
        return token.strip().lower().replace("-", "").replace("_", "")

    @classmethod
    def parse_strict(cls, token: Optional[str]) -> Optional['ArrowType']:
        """
        Parse an arrow token, returning None when it is not recognised.

        Matching is case-insensitive and ignores ``_`` / ``-`` separators,
        so ``Left_Arrow``, ``left-arrow`` and ``leftarrow`` are the same.
        """
        if not token:
            return None
        squashed = cls._squash(token)
        if not squashed:
            return None
        for arrow_type in cls:
            if cls._squash(arrow_type.value) == squashed:
                return arrow_type
        return None

    @classmethod
    def parse(cls, token: Optional[str]) -> 'ArrowType':
        """Tolerant parse: unknown tokens fall back to ARROW."""
        arrow_type = cls.parse_strict(token)
        return arrow_type if arrow_type is not None else cls.ARROW


class Shape(ABC):
    """
    Abstract base class for all layout shapes.

    Every shape carries an identifier (empty string means unassigned)
    and must implement clone() as a fully independent deep copy.
    """

    def __init__(self, id: str = ""):
        self.id: str = id

    @abstractmethod
    def clone(self) -> 'Shape':
        """Create a deep copy of this shape."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id!r})"


class LineShape(Shape):
    """
    A directional polyline (phase or line detector).

    points[0] is the tail, points[-1] the tip, anything between is a bend.
    """

    def __init__(self, points: Optional[List[Point]] = None, id: str = "",
                 arrow_type: ArrowType = ArrowType.ARROW, thickness: int = 10,
                 turn_length: float = 35.0, type_edited: bool = False):
        super().__init__(id)
        self.points: List[Point] = list(points) if points else []
        self.arrow_type = arrow_type
        self.thickness = thickness
        self.turn_length = turn_length
        self.type_edited = type_edited

    @property
    def tip(self) -> Point:
        return self.points[-1]

    @property
    def tail(self) -> Point:
        return self.points[0]

    def translate(self, dx: float, dy: float) -> None:
        """Move every point by (dx, dy)."""
        self.points = [Point(p.x + dx, p.y + dy) for p in self.points]

    def insert_point(self, index: int, point: Point) -> None:
        self.points.insert(index, point.copy())

    def adjust_thickness(self, delta: int, minimum: int = 2, maximum: int = 30) -> None:
        self.thickness = clamp(self.thickness + delta, minimum, maximum)

    def clone(self) -> 'LineShape':
        return LineShape(
            points=[p.copy() for p in self.points],
            id=self.id,
            arrow_type=self.arrow_type,
            thickness=self.thickness,
            turn_length=self.turn_length,
            type_edited=self.type_edited,
        )


class SquareShape(Shape):
    """A rotatable rectangle detector, positioned by its center."""

    def __init__(self, x: float, y: float, width: float = 40.0, height: float = 40.0,
                 rotation: float = 0.0, thickness: int = 6, fill: str = "#0000FF",
                 id: str = ""):
        super().__init__(id)
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.rotation = rotation
        self.thickness = thickness
        self.fill = fill

    @property
    def center(self) -> Point:
        return Point(self.x, self.y)

    @property
    def corner(self) -> Point:
        """Bottom-right resize corner (center + half extent)."""
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def resize(self, width: float, height: float, minimum: float, maximum: float) -> None:
        self.width = clamp(width, minimum, maximum)
        self.height = clamp(height, minimum, maximum)

    def rotate_by(self, degrees: float) -> None:
        self.rotation = (self.rotation + degrees) % 360.0

    def set_rotation(self, degrees: float) -> None:
        self.rotation = degrees % 360.0

    def clone(self) -> 'SquareShape':
        return SquareShape(self.x, self.y, self.width, self.height,
                           self.rotation, self.thickness, self.fill, id=self.id)


class TextShape(Shape):
    """
    A free-text annotation.

    ``label`` is an editorial name that is never drawn; ``text`` is drawn.
    """

    def __init__(self, x: float, y: float, text: str = "", label: str = "Text Label",
                 font_name: str = "Arial", size: int = 18, bold: bool = False,
                 color: str = "#000000"):
        super().__init__()
        self.x = x
        self.y = y
        self.text = text
        self.label = label
        self.font_name = font_name
        self.size = size
        self.bold = bold
        self.color = color

    def adjust_size(self, delta: int, minimum: int = 8, maximum: int = 72) -> None:
        self.size = clamp(self.size + delta, minimum, maximum)

    def clone(self) -> 'TextShape':
        # id is not carried over; texts have no meaningful identifier
        return TextShape(self.x, self.y, self.text, self.label, self.font_name,
                         self.size, self.bold, self.color)


DetectorShape = Union[LineShape, SquareShape]
