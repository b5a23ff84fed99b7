"""
Edit Controller for PhaseLayout

Turns pointer, wheel and keyboard events into shape creation, selection,
dragging, resizing, rotation, panning and zoom. All mutable editor state
lives in one EditorState object owned by the controller.

Dialogs are not opened here. When the controller needs user input (text,
colour, a name from a list) it asks its ModalResponder and waits for the
reply; ``None`` means the user cancelled and nothing changes.
"""

from dataclasses import dataclass, field
from enum import Enum, Flag, auto
from typing import List, Optional, Tuple
import logging
import math

from PyQt6.QtCore import QObject, pyqtSignal

from ..config import EditorSettings, DEFAULT_SETTINGS
from ..core.document import LayoutDocument
from ..core.shapes import (
    ArrowType, LineShape, Point, Shape, SquareShape, TextShape, clamp, parse_color
)
from ..io.layout_io import LayoutCodec, ParsedLayout, load_layout, save_layout
from .hit_test import hit_test, nearest_segment, tolerance_for
from .selection import SelectionManager
from .tools import NewShapeMode, create_line, create_square, create_text, square_to_line
from .transform import ViewTransform

logger = logging.getLogger(__name__)


class MouseButton(Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class Modifiers(Flag):
    NONE = 0
    CONTROL = auto()
    SHIFT = auto()


class EditState(Enum):
    """What the current pointer gesture is doing."""
    IDLE = "idle"
    PANNING = "panning"
    DRAGGING_VERTEX = "dragging_vertex"
    DRAGGING_WHOLE = "dragging_whole"
    PLACING_NEW = "placing_new"


# ----------------------------------------------------------------------
# Modal requests
# ----------------------------------------------------------------------

@dataclass
class TextRequest:
    """Initial values offered to the text dialog."""
    label: str = ""
    text: str = ""
    color: str = "#000000"


@dataclass
class TextReply:
    label: str
    text: str
    color: str


class ModalResponder:
    """
    Answers the controller's blocking input requests.

    The base implementation cancels everything; the Qt UI and the tests
    provide real answers.
    """

    def request_text(self, request: TextRequest) -> Optional[TextReply]:
        return None

    def request_color(self, current: str) -> Optional[str]:
        return None

    def request_pick(self, title: str, names: List[str]) -> Optional[str]:
        return None


# ----------------------------------------------------------------------
# State
# ----------------------------------------------------------------------

@dataclass
class EditorState:
    """Everything the editor remembers between events."""
    zoom: float = 1.0
    offset: Tuple[float, float] = (0.0, 0.0)
    pending_mode: NewShapeMode = NewShapeMode.NONE
    dirty: bool = False
    edit_state: EditState = EditState.IDLE
    captured: bool = False
    drag_index: int = -1
    pan_anchor: Optional[Point] = None
    last_image_point: Point = field(default_factory=lambda: Point(0.0, 0.0))
    image_size: Optional[Tuple[int, int]] = None
    client_size: Tuple[int, int] = (0, 0)
    selection: Optional[SelectionManager] = None  # Selected shape and clipboard

    def view_transform(self) -> ViewTransform:
        return ViewTransform(self.image_size, self.client_size, self.zoom, self.offset)


class EditController(QObject):
    """
    Pointer-driven editing of a LayoutDocument.

    Every change to a shape re-serializes the layout (layout_changed) and
    marks the document dirty; zoom and pan only emit view_changed.
    """

    # Signals
    layout_changed = pyqtSignal(str)   # Serialized layout text
    view_changed = pyqtSignal()        # Repaint needed (zoom, pan, selection)
    message = pyqtSignal(str)          # Notice for the user

    def __init__(self, document: Optional[LayoutDocument] = None,
                 responder: Optional[ModalResponder] = None,
                 settings: EditorSettings = DEFAULT_SETTINGS):
        super().__init__()
        self.document = document if document is not None else LayoutDocument(settings.default_image_file)
        self.responder = responder or ModalResponder()
        self.settings = settings
        self.codec = LayoutCodec(settings)
        self.state = EditorState(selection=SelectionManager(self.document))
        self.layout_text = self.codec.serialize(self.document)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def selection(self) -> SelectionManager:
        return self.state.selection

    @property
    def selected(self) -> Optional[Shape]:
        return self.selection.selected

    @property
    def clipboard(self) -> Optional[Shape]:
        return self.selection.clipboard

    @property
    def has_image(self) -> bool:
        return self.state.image_size is not None

    def view_transform(self) -> ViewTransform:
        """The one mapping used for painting and for pointer input."""
        return self.state.view_transform()

    def to_image(self, screen_pt: Point) -> Point:
        return self.view_transform().screen_to_image(screen_pt)

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def _changed(self) -> None:
        self.state.dirty = True
        self.refresh_layout()

    def refresh_layout(self) -> str:
        """Re-serialize the document and notify listeners."""
        self.layout_text = self.codec.serialize(self.document)
        self.layout_changed.emit(self.layout_text)
        self.view_changed.emit()
        return self.layout_text

    def mark_saved(self) -> None:
        self.state.dirty = False

    # ------------------------------------------------------------------
    # External setup
    # ------------------------------------------------------------------

    def set_image(self, width: int, height: int, file_name: Optional[str] = None) -> None:
        """A new background image was loaded; resets zoom and pan."""
        self.state.image_size = (int(width), int(height))
        self.state.zoom = self.settings.min_zoom
        self.state.offset = (0.0, 0.0)
        if file_name:
            self.document.image_file = file_name
        self.refresh_layout()

    def set_client_size(self, width: int, height: int) -> None:
        self.state.client_size = (int(width), int(height))

    def set_pending_mode(self, mode: NewShapeMode) -> None:
        self.state.pending_mode = mode
        logger.debug("Pending creation mode: %s", mode.value)

    def load_layout_text(self, text) -> ParsedLayout:
        """
        Replace the document content with parsed layout text.

        Raises:
            LayoutParseError: if the text is unreadable; nothing changes
        """
        parsed = self.codec.load_into(self.document, text)
        self.selection.clear_selection()
        self.state.dirty = False
        self.refresh_layout()
        return parsed

    def load_layout_file(self, filepath) -> ParsedLayout:
        """
        Read a layout file into the document.

        Raises:
            LayoutParseError: if the file is unreadable; nothing changes
        """
        parsed = load_layout(self.document, filepath, self.codec)
        self.selection.clear_selection()
        self.state.dirty = False
        self.refresh_layout()
        return parsed

    def save_layout_file(self, filepath) -> str:
        """
        Write the layout and clear the dirty flag.

        Raises:
            SerializationError: if the file cannot be written
        """
        text = save_layout(self.document, filepath, self.codec)
        self.state.dirty = False
        return text

    def apply_definitions(self, definitions) -> None:
        self.document.apply_definitions(definitions)
        self.refresh_layout()

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def pointer_down(self, screen_pt: Point, button: MouseButton = MouseButton.PRIMARY,
                     modifiers: Modifiers = Modifiers.NONE) -> None:
        if not self.has_image:
            logger.warning("Pointer press ignored: no image loaded")
            self.message.emit("Please load an image first.")
            return
        if self.state.captured:
            # Another gesture owns the pointer
            return

        image_pt = self.to_image(screen_pt)
        self.state.last_image_point = image_pt

        if button is MouseButton.PRIMARY:
            self._primary_down(screen_pt, image_pt)
        elif button is MouseButton.SECONDARY:
            hit = hit_test(self.document, image_pt, self.state.zoom, self.settings)
            if hit is not None:
                self.selection.select(hit.shape)
                self.state.drag_index = hit.point_index
            self.view_changed.emit()

    def _primary_down(self, screen_pt: Point, image_pt: Point) -> None:
        mode = self.state.pending_mode
        if mode is not NewShapeMode.NONE:
            self._create_shape(mode, image_pt)
            return

        hit = hit_test(self.document, image_pt, self.state.zoom, self.settings)
        self.state.captured = True
        if hit is None:
            self.selection.clear_selection()
            self.state.edit_state = EditState.PANNING
            self.state.pan_anchor = screen_pt
            self.state.drag_index = -1
        else:
            self.selection.select(hit.shape)
            self.state.drag_index = hit.point_index
            if isinstance(hit.shape, LineShape) and hit.point_index >= 0:
                self.state.edit_state = EditState.DRAGGING_VERTEX
            else:
                self.state.edit_state = EditState.DRAGGING_WHOLE
        logger.debug("Pointer down -> %s", self.state.edit_state.value)
        self.view_changed.emit()

    def _create_shape(self, mode: NewShapeMode, image_pt: Point) -> None:
        if mode is NewShapeMode.LINE:
            shape = create_line(image_pt, self.settings)
            self.document.add_phase(shape)
        elif mode is NewShapeMode.SQUARE:
            shape = create_square(image_pt, self.settings)
            self.document.add_detector(shape)
        elif mode is NewShapeMode.TEXT:
            reply = self.responder.request_text(TextRequest(color=self.settings.text_color))
            if reply is None:
                logger.debug("Text creation cancelled")
                return
            shape = create_text(image_pt, reply.label, reply.text,
                                parse_color(reply.color), self.settings)
            self.document.add_text(shape)
        else:
            return

        self.selection.select(shape)
        self.state.pending_mode = NewShapeMode.NONE
        self.state.edit_state = EditState.PLACING_NEW
        self.state.captured = True
        self.state.drag_index = -1
        logger.debug("Created %r", shape)
        self._changed()

    def pointer_move(self, screen_pt: Point, primary_held: bool = True,
                     modifiers: Modifiers = Modifiers.NONE) -> None:
        if not primary_held or not self.state.captured:
            return

        if self.state.edit_state is EditState.PANNING:
            anchor = self.state.pan_anchor or screen_pt
            ox, oy = self.state.offset
            self.state.offset = (ox + screen_pt.x - anchor.x, oy + screen_pt.y - anchor.y)
            self.state.pan_anchor = screen_pt
            self.view_changed.emit()
            return

        shape = self.selected
        if shape is None or self.state.edit_state is EditState.IDLE:
            return

        image_pt = self.to_image(screen_pt)
        if isinstance(shape, LineShape):
            self._drag_line(shape, image_pt)
        elif isinstance(shape, SquareShape):
            self._drag_square(shape, image_pt, modifiers)
        elif isinstance(shape, TextShape):
            shape.x = image_pt.x
            shape.y = image_pt.y
        else:
            return
        self._changed()

    def _drag_line(self, line: LineShape, image_pt: Point) -> None:
        index = self.state.drag_index
        if (self.state.edit_state is EditState.DRAGGING_VERTEX and
                0 <= index < len(line.points)):
            line.points[index] = image_pt.copy()
        else:
            # Whole-line drags always anchor on the tip
            tip = line.tip
            line.translate(image_pt.x - tip.x, image_pt.y - tip.y)

    def _drag_square(self, square: SquareShape, image_pt: Point, modifiers: Modifiers) -> None:
        dx = image_pt.x - square.x
        dy = image_pt.y - square.y
        if modifiers & Modifiers.CONTROL:
            square.set_rotation(math.degrees(math.atan2(dy, dx)))
            return
        grab = self.settings.resize_grab_radius / min(self.state.zoom, 1.0)
        if image_pt.distance_to(square.corner) < grab:
            side = 2 * max(abs(dx), abs(dy))
            square.resize(side, side, self.settings.min_square_size,
                          self.settings.max_square_drag_size)
        else:
            square.x = image_pt.x
            square.y = image_pt.y

    def pointer_up(self) -> None:
        self.state.captured = False
        self.state.edit_state = EditState.IDLE
        self.state.pan_anchor = None
        self.state.drag_index = -1

    # ------------------------------------------------------------------
    # Wheel
    # ------------------------------------------------------------------

    def wheel(self, delta: int, modifiers: Modifiers = Modifiers.NONE) -> None:
        """Adjust the selected shape, or zoom when nothing is selected."""
        if delta == 0:
            return
        up = delta > 0
        shape = self.selected
        s = self.settings

        if isinstance(shape, LineShape):
            shape.adjust_thickness(1 if up else -1, s.min_line_thickness, s.max_line_thickness)
        elif isinstance(shape, SquareShape):
            if modifiers & Modifiers.CONTROL:
                shape.rotate_by(s.rotation_wheel_step if up else -s.rotation_wheel_step)
            else:
                step = s.square_wheel_step if up else -s.square_wheel_step
                shape.resize(shape.width + step, shape.height + step,
                             s.min_square_size, s.max_square_wheel_size)
        elif isinstance(shape, TextShape):
            shape.adjust_size(s.font_size_step if up else -s.font_size_step,
                              s.min_font_size, s.max_font_size)
        else:
            step = s.zoom_step if up else -s.zoom_step
            self.state.zoom = round(clamp(self.state.zoom + step, s.min_zoom, s.max_zoom), 4)
            self.view_changed.emit()
            return
        self._changed()

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def key_press(self, key: str, modifiers: Modifiers = Modifiers.NONE) -> bool:
        """
        Handle an editing hotkey.

        Args:
            key: Key name, e.g. "L", "Delete"
            modifiers: Held modifiers

        Returns:
            True if the key was handled
        """
        key = key.upper() if len(key) == 1 else key
        if modifiers & Modifiers.CONTROL:
            if key == "C":
                self.copy_selected()
            elif key == "V":
                self.paste()
            elif key == "D":
                self.duplicate_selected()
            else:
                return False
            return True

        if key in ("Delete", "D"):
            self.delete_selected()
        elif key == "L":
            self.set_pending_mode(NewShapeMode.LINE)
        elif key == "T":
            self.set_pending_mode(NewShapeMode.TEXT)
        elif key in ("Q", "S"):
            self.set_pending_mode(NewShapeMode.SQUARE)
        elif key == "A":
            if not isinstance(self.selected, LineShape):
                return False
            self.insert_bend_point()
        else:
            return False
        return True

    # ------------------------------------------------------------------
    # Atomic operations
    # ------------------------------------------------------------------

    def copy_selected(self) -> bool:
        return self.selection.copy_selected()

    def paste(self) -> Optional[Shape]:
        offset = self.settings.paste_offset
        shape = self.selection.paste(offset, offset)
        if shape is not None:
            self._changed()
        return shape

    def duplicate_selected(self, interactive: bool = False) -> Optional[Shape]:
        """
        Clone the selection with an offset into its owning collection.

        With interactive=True a text duplicate first asks for its new
        label and text; cancelling duplicates nothing.
        """
        shape = self.selected
        if shape is None:
            return None
        reply = None
        if interactive and isinstance(shape, TextShape):
            reply = self.responder.request_text(TextRequest(shape.label, shape.text, shape.color))
            if reply is None:
                return None

        offset = self.settings.paste_offset
        copy = self.selection.duplicate_selected(offset, offset)
        if reply is not None:
            copy.label = reply.label if reply.label.strip() else self.settings.text_label
            copy.text = reply.text
        self._changed()
        return copy

    def delete_selected(self) -> Optional[Shape]:
        shape = self.selection.delete_selected()
        if shape is not None:
            self.state.drag_index = -1
            self._changed()
        return shape

    def insert_bend_point(self, image_pt: Optional[Point] = None) -> int:
        """
        Insert a vertex after the segment nearest image_pt.

        The new vertex becomes the drag target.

        Returns:
            Index of the new vertex, or -1 if nothing was inserted
        """
        line = self.selected
        if not isinstance(line, LineShape):
            return -1
        if image_pt is None:
            image_pt = self.state.last_image_point
        segment = nearest_segment(line, image_pt)
        if segment < 0:
            return -1
        index = segment + 1
        line.insert_point(index, image_pt)
        self.state.drag_index = index
        if self.state.captured:
            self.state.edit_state = EditState.DRAGGING_VERTEX
        self._changed()
        return index

    def set_arrow_type(self, arrow_type: ArrowType) -> bool:
        """Set the selected line's arrow type by hand (kept over defaults)."""
        line = self.selected
        if not isinstance(line, LineShape):
            return False
        line.arrow_type = arrow_type
        line.type_edited = True
        self._changed()
        return True

    def assign_phase(self, name: Optional[str] = None) -> bool:
        """
        Give the selection a phase identifier.

        A detector line moves to phases; a square is replaced by its
        diagonal line because phases are always lines.
        """
        shape = self.selected
        if shape is None or isinstance(shape, TextShape):
            return False
        if not self.document.phase_names:
            self.message.emit("No phases available. Import a definition file first.")
            return False
        if name is None:
            name = self.responder.request_pick("Select Phase", list(self.document.phase_names))
            if not name:
                return False

        default = self.document.default_arrow_for(name)
        if isinstance(shape, LineShape):
            shape.id = name
            if default is not None and not shape.type_edited:
                shape.arrow_type = default
            self.document.move_to_phases(shape)
        elif isinstance(shape, SquareShape):
            line = square_to_line(shape, name, default or ArrowType.ARROW)
            self.document.remove(shape)
            self.document.add_phase(line)
            self.selection.select(line)
            self.message.emit("Phases are lines. Converted square to line.")
        self._changed()
        return True

    def assign_detector(self, name: Optional[str] = None) -> bool:
        """Give the selection a detector identifier; phase lines move to detectors."""
        shape = self.selected
        if shape is None or isinstance(shape, TextShape):
            return False
        if not self.document.detector_names:
            self.message.emit("No detectors available. Import a definition file first.")
            return False
        if name is None:
            name = self.responder.request_pick("Select Detector", list(self.document.detector_names))
            if not name:
                return False

        shape.id = name
        if isinstance(shape, LineShape):
            self.document.move_to_detectors(shape)
        self._changed()
        return True

    def pick_square_color(self) -> bool:
        square = self.selected
        if not isinstance(square, SquareShape):
            return False
        color = self.responder.request_color(square.fill)
        if color is None:
            return False
        square.fill = parse_color(color)
        self._changed()
        return True

    def edit_text(self) -> bool:
        text = self.selected
        if not isinstance(text, TextShape):
            return False
        reply = self.responder.request_text(TextRequest(text.label, text.text, text.color))
        if reply is None:
            return False
        text.label = reply.label if reply.label.strip() else self.settings.text_label
        text.text = reply.text
        text.color = parse_color(reply.color)
        self._changed()
        return True

    def drop_named(self, payload: str, screen_pt: Point) -> Optional[Shape]:
        """
        Create a shape from a dragged name.

        ``PHASE:<id>`` drops a phase line with the phase's default arrow,
        ``DET:<id>`` drops a square detector.
        """
        if not self.has_image:
            return None
        image_pt = self.to_image(screen_pt)
        prefix, _, name = payload.partition(":")
        prefix = prefix.upper()
        if prefix == "PHASE" and name:
            shape = create_line(image_pt, self.settings,
                                offset=self.settings.drop_line_offset, id=name)
            default = self.document.default_arrow_for(name)
            if default is not None:
                shape.arrow_type = default
            self.document.add_phase(shape)
        elif prefix == "DET" and name:
            shape = create_square(image_pt, self.settings, id=name)
            self.document.add_detector(shape)
        else:
            return None
        self.selection.select(shape)
        self._changed()
        return shape

    def hit_tolerance(self) -> float:
        return tolerance_for(self.state.zoom, self.settings)
