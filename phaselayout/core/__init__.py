"""
PhaseLayout Core Module

Contains the core data structures:
- Shapes: LineShape, SquareShape, TextShape
- LayoutDocument: the three owning shape collections plus side tables
- Errors: the exception hierarchy reported to the UI
"""

# Import order matters - shapes first, then document
from .shapes import (
    Point, ArrowType, Shape, LineShape, SquareShape, TextShape,
    clamp, parse_color
)
from .document import LayoutDocument, CaseInsensitiveDict
from .errors import (
    LayoutError, ImageLoadError, LayoutParseError,
    DefinitionImportError, SerializationError
)

__all__ = [
    'Point', 'ArrowType', 'Shape', 'LineShape', 'SquareShape', 'TextShape',
    'clamp', 'parse_color',
    'LayoutDocument', 'CaseInsensitiveDict',
    'LayoutError', 'ImageLoadError', 'LayoutParseError',
    'DefinitionImportError', 'SerializationError',
]
