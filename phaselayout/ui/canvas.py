"""
PhaseLayout Canvas - background image and layout overlay.

Paints the document through the controller's ViewTransform and forwards
pointer, wheel, key and drop events to the EditController.
"""

from typing import List, Optional

import numpy as np
from PyQt6.QtWidgets import QWidget
from PyQt6.QtCore import Qt, QPoint, QPointF, QRectF, pyqtSignal
from PyQt6.QtGui import (
    QBrush, QColor, QFont, QImage, QKeyEvent, QMouseEvent, QPainter,
    QPainterPath, QPen, QPixmap, QPolygonF, QWheelEvent
)

from ..core.shapes import LineShape, Point, SquareShape, TextShape
from ..graphics.arrows import arrow_decorations, last_segment
from ..graphics.editor import EditController, Modifiers, MouseButton
from ..graphics.transform import ViewTransform


def rgba_to_pixmap(pixels: np.ndarray) -> QPixmap:
    """Wrap an (h, w, 4) uint8 RGBA array in a QPixmap."""
    if pixels.dtype != np.uint8:
        pixels = np.clip(pixels, 0, 255).astype(np.uint8)
    height, width = pixels.shape[:2]
    bytes_per_line = 4 * width
    qimage = QImage(pixels.tobytes(), width, height, bytes_per_line,
                    QImage.Format.Format_RGBA8888)
    return QPixmap.fromImage(qimage)


def _qt_modifiers(modifiers) -> Modifiers:
    result = Modifiers.NONE
    if modifiers & Qt.KeyboardModifier.ControlModifier:
        result |= Modifiers.CONTROL
    if modifiers & Qt.KeyboardModifier.ShiftModifier:
        result |= Modifiers.SHIFT
    return result


def _qpoint(point: Point) -> QPointF:
    return QPointF(point.x, point.y)


def _polygon(points: List[Point]) -> QPolygonF:
    return QPolygonF([_qpoint(p) for p in points])


class LayoutCanvas(QWidget):
    """
    Drawing surface for the layout editor.

    Features:
    - Fit-to-client image display with zoom and pan
    - Phase/detector/text rendering with arrow decorations
    - Selection handles
    - Drop target for PHASE:/DET: names
    """

    # Signals
    context_requested = pyqtSignal(QPoint)  # Global position for the context menu
    cursor_position = pyqtSignal(float, float)  # Pointer in image pixels

    def __init__(self, controller: EditController, parent=None):
        super().__init__(parent)

        self.controller = controller
        self._pixmap: Optional[QPixmap] = None

        # Colors
        self._background_color = QColor(224, 224, 224)
        self._outline_color = QColor(0, 0, 0)
        self._selection_color = QColor(0, 0, 255)
        self._selected_fill = QColor(0, 0, 255, 170)

        self.setMouseTracking(True)
        self.setAcceptDrops(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(320, 240)

        controller.view_changed.connect(self.update)
        controller.selection.selection_changed.connect(lambda _shape: self.update())

    def set_image(self, pixels: np.ndarray):
        """Show a decoded RGBA image; the controller is told its size separately."""
        self._pixmap = rgba_to_pixmap(pixels)
        self.controller.set_client_size(self.width(), self.height())
        self.update()

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def resizeEvent(self, event):
        self.controller.set_client_size(self.width(), self.height())
        super().resizeEvent(event)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), self._background_color)

        view = self.controller.view_transform()
        if self._pixmap is None or not view.has_image:
            painter.end()
            return

        left, top, width, height = view.dest_rect()
        painter.drawPixmap(QRectF(left, top, width, height), self._pixmap,
                           QRectF(self._pixmap.rect()))

        document = self.controller.document
        for line in document.phases:
            self._draw_line(painter, view, line)
        for shape in document.detectors:
            if isinstance(shape, LineShape):
                self._draw_line(painter, view, shape)
            else:
                self._draw_square(painter, view, shape)
        for text in document.texts:
            self._draw_text(painter, view, text)
        painter.end()

    def _outline(self, shape) -> QColor:
        if self.controller.selection.is_selected(shape):
            return self._selection_color
        return self._outline_color

    def _handle_size(self, view: ViewTransform, size: float) -> float:
        return view.image_length_to_screen(size)

    def _draw_handle(self, painter: QPainter, center: Point, color: QColor, size: float):
        radius = size / 2.0
        painter.setBrush(QBrush(color))
        painter.setPen(QPen(QColor(0, 0, 0), 1))
        painter.drawEllipse(_qpoint(center), radius, radius)

    def _draw_line(self, painter: QPainter, view: ViewTransform, line: LineShape):
        if len(line.points) < 2:
            return
        color = self._outline(line)
        pen_width = max(1.0, view.image_length_to_screen(line.thickness))
        screen = [view.image_to_screen(p) for p in line.points]

        pen = QPen(color, pen_width)
        pen.setCapStyle(Qt.PenCapStyle.FlatCap)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawPolyline(_polygon(screen))

        from_pt, tip = last_segment(screen)
        decorations = arrow_decorations(line.arrow_type, from_pt, tip, pen_width)
        for curve in decorations.curves:
            path = QPainterPath(_qpoint(curve.start))
            path.cubicTo(_qpoint(curve.ctrl1), _qpoint(curve.ctrl2), _qpoint(curve.end))
            painter.setPen(QPen(color, pen_width))
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawPath(path)
        painter.setPen(QPen(color, pen_width * 0.6))
        painter.setBrush(QBrush(color))
        for wedge in decorations.wedges:
            painter.drawPolygon(_polygon(wedge))

        if self.controller.selection.is_selected(line):
            size = self._handle_size(view, self.controller.settings.center_handle_size)
            self._draw_handle(painter, screen[0], QColor(255, 0, 0), size)
            self._draw_handle(painter, screen[-1], QColor(255, 0, 0), size)
            for bend in screen[1:-1]:
                self._draw_handle(painter, bend, QColor(0, 160, 0), size)

    def _draw_square(self, painter: QPainter, view: ViewTransform, square: SquareShape):
        settings = self.controller.settings
        center = view.image_to_screen(square.center)
        sx, sy = view.scale()
        width = max(settings.min_square_size, square.width * sx)
        height = max(settings.min_square_size, square.height * sy)
        thickness = max(1.0, view.image_length_to_screen(square.thickness))
        selected = self.controller.selection.is_selected(square)

        painter.save()
        painter.translate(center.x, center.y)
        painter.rotate(square.rotation)
        rect = QRectF(-width / 2.0, -height / 2.0, width, height)
        painter.fillRect(rect, self._selected_fill if selected else QColor(square.fill))
        painter.setPen(QPen(self._outline(square), thickness))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(rect)
        painter.restore()

        self._draw_handle(painter, center, QColor(255, 0, 0),
                          self._handle_size(view, settings.center_handle_size))
        self._draw_handle(painter, Point(center.x + width / 2.0, center.y + height / 2.0),
                          QColor(255, 255, 0),
                          self._handle_size(view, settings.stretch_handle_size))

    def _draw_text(self, painter: QPainter, view: ViewTransform, text: TextShape):
        anchor = view.image_to_screen(Point(text.x, text.y))
        selected = self.controller.selection.is_selected(text)
        font = QFont(text.font_name)
        font.setPointSizeF(max(1.0, view.image_length_to_screen(text.size)))
        font.setBold(text.bold)
        painter.setFont(font)
        painter.setPen(self._selection_color if selected else QColor(text.color))
        metrics = painter.fontMetrics()
        painter.drawText(QPointF(anchor.x, anchor.y + metrics.ascent()), text.text)
        if selected:
            self._draw_handle(painter, anchor, QColor(255, 0, 0),
                              self._handle_size(view, self.controller.settings.center_handle_size))

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def mousePressEvent(self, event: QMouseEvent):
        """Handle mouse press."""
        self.setFocus()
        pos = event.position()
        point = Point(pos.x(), pos.y())
        modifiers = _qt_modifiers(event.modifiers())

        if event.button() == Qt.MouseButton.LeftButton:
            self.controller.pointer_down(point, MouseButton.PRIMARY, modifiers)
        elif event.button() == Qt.MouseButton.RightButton:
            self.controller.pointer_down(point, MouseButton.SECONDARY, modifiers)
            if self.controller.selected is not None:
                self.context_requested.emit(event.globalPosition().toPoint())
        else:
            super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent):
        """Handle mouse move."""
        pos = event.position()
        point = Point(pos.x(), pos.y())
        if self.controller.has_image:
            image_pt = self.controller.to_image(point)
            self.cursor_position.emit(image_pt.x, image_pt.y)

        held = bool(event.buttons() & Qt.MouseButton.LeftButton)
        self.controller.pointer_move(point, held, _qt_modifiers(event.modifiers()))

    def mouseReleaseEvent(self, event: QMouseEvent):
        """Handle mouse release."""
        if event.button() == Qt.MouseButton.LeftButton:
            self.controller.pointer_up()
        else:
            super().mouseReleaseEvent(event)

    def wheelEvent(self, event: QWheelEvent):
        """Wheel adjusts the selected shape, or zooms."""
        self.controller.wheel(event.angleDelta().y(), _qt_modifiers(event.modifiers()))
        event.accept()

    def keyPressEvent(self, event: QKeyEvent):
        """Handle editing hotkeys."""
        if event.key() == Qt.Key.Key_Delete:
            key = "Delete"
        elif Qt.Key.Key_A.value <= event.key() <= Qt.Key.Key_Z.value:
            key = chr(event.key())
        else:
            super().keyPressEvent(event)
            return
        if not self.controller.key_press(key, _qt_modifiers(event.modifiers())):
            super().keyPressEvent(event)

    def dragEnterEvent(self, event):
        if event.mimeData().hasText():
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragMoveEvent(self, event):
        if event.mimeData().hasText():
            event.acceptProposedAction()

    def dropEvent(self, event):
        pos = event.position()
        shape = self.controller.drop_named(event.mimeData().text(), Point(pos.x(), pos.y()))
        if shape is not None:
            event.acceptProposedAction()
        else:
            event.ignore()
