"""
PhaseLayout Graphics Module

Contains the editing and geometry components:
- Transform: image <-> screen mapping
- Hit testing: which shape is under the pointer
- Arrows: arrowhead and turn-arrow geometry
- Tools: shape templates
- Selection: selection and clipboard
- Editor: pointer/wheel/key state machine
"""

from .transform import ViewTransform, fit_size
from .hit_test import HitResult, hit_test, nearest_segment, tolerance_for
from .arrows import ArrowDecorations, SideArrow, arrow_decorations, arrowhead_size
from .tools import NewShapeMode, create_line, create_square, create_text, square_to_line
from .selection import SelectionManager
from .editor import (
    EditController, EditorState, EditState, ModalResponder, Modifiers,
    MouseButton, TextReply, TextRequest
)

__all__ = [
    # Transform
    'ViewTransform',
    'fit_size',
    # Hit testing
    'HitResult',
    'hit_test',
    'nearest_segment',
    'tolerance_for',
    # Arrows
    'ArrowDecorations',
    'SideArrow',
    'arrow_decorations',
    'arrowhead_size',
    # Tools
    'NewShapeMode',
    'create_line',
    'create_square',
    'create_text',
    'square_to_line',
    # Selection
    'SelectionManager',
    # Editor
    'EditController',
    'EditorState',
    'EditState',
    'ModalResponder',
    'Modifiers',
    'MouseButton',
    'TextReply',
    'TextRequest',
]
