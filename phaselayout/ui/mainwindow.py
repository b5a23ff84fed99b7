"""
Main Application Window for PhaseLayout
"""

from pathlib import Path
from typing import Optional
import logging

from PyQt6.QtWidgets import (
    QDockWidget, QFileDialog, QMainWindow, QMenu, QMessageBox,
    QPlainTextEdit, QStatusBar
)
from PyQt6.QtCore import Qt, QPoint, QSettings
from PyQt6.QtGui import QAction, QActionGroup, QFont, QKeySequence

from ..config import DEFAULT_SETTINGS
from ..core.document import LayoutDocument
from ..core.errors import LayoutError
from ..core.shapes import ArrowType, LineShape, SquareShape, TextShape
from ..graphics.editor import EditController
from ..graphics.tools import NewShapeMode
from ..io.definitions import import_definitions
from ..io.image_loader import IMAGE_EXTENSIONS, load_image_info, load_image_pixels
from ..io.layout_io import resolve_image_path
from .canvas import LayoutCanvas
from .dialogs import QtModalResponder
from .panels import CountsPanel, NamesPanel

logger = logging.getLogger(__name__)

LAYOUT_FILTER = "Layout Files (*.txt *.layout);;All Files (*)"
DEFINITION_FILTER = "Definition Files (*.cpf *.xml);;All Files (*)"


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(self):
        super().__init__()

        self.document = LayoutDocument(DEFAULT_SETTINGS.default_image_file)
        self.controller = EditController(self.document, QtModalResponder(self), DEFAULT_SETTINGS)

        self.setWindowTitle("PhaseLayout - Untitled")
        self.setMinimumSize(1100, 750)

        # Track current file path for save
        self._current_filepath: Optional[str] = None

        # Setup UI components
        self._create_actions()
        self._create_menus()
        self._create_central_widget()
        self._create_dock_panels()
        self._create_status_bar()

        self._load_settings()
        self._connect_signals()
        self._on_layout_changed(self.controller.layout_text)

    def _create_actions(self):
        """Create all menu actions."""

        # File actions
        self.action_open_image = QAction("Open &Image...", self)
        self.action_open_image.setShortcut("Ctrl+I")
        self.action_open_image.setStatusTip("Load the background image")
        self.action_open_image.triggered.connect(self._on_open_image)

        self.action_open = QAction("&Open Layout...", self)
        self.action_open.setShortcut(QKeySequence.StandardKey.Open)
        self.action_open.setStatusTip("Open an existing layout file")
        self.action_open.triggered.connect(self._on_open)

        self.action_import_definitions = QAction("Import &Definitions...", self)
        self.action_import_definitions.setStatusTip("Import phase and detector names")
        self.action_import_definitions.triggered.connect(self._on_import_definitions)

        self.action_save = QAction("&Save", self)
        self.action_save.setShortcut(QKeySequence.StandardKey.Save)
        self.action_save.triggered.connect(self._on_save)

        self.action_save_as = QAction("Save &As...", self)
        self.action_save_as.setShortcut(QKeySequence.StandardKey.SaveAs)
        self.action_save_as.triggered.connect(self._on_save_as)

        self.action_exit = QAction("E&xit", self)
        self.action_exit.setShortcut(QKeySequence.StandardKey.Quit)
        self.action_exit.triggered.connect(self.close)

        # Edit actions
        self.action_duplicate = QAction("D&uplicate", self)
        self.action_duplicate.triggered.connect(
            lambda: self.controller.duplicate_selected(interactive=True))

        self.action_delete = QAction("&Delete", self)
        self.action_delete.triggered.connect(self.controller.delete_selected)

        self.action_copy = QAction("&Copy", self)
        self.action_copy.triggered.connect(self.controller.copy_selected)

        self.action_paste = QAction("&Paste", self)
        self.action_paste.triggered.connect(self.controller.paste)

        self.action_bend = QAction("Add &Bend Point", self)
        self.action_bend.triggered.connect(lambda: self.controller.insert_bend_point())

        self.action_assign_phase = QAction("Assign &Phase...", self)
        self.action_assign_phase.triggered.connect(lambda: self.controller.assign_phase())

        self.action_assign_detector = QAction("Assign De&tector...", self)
        self.action_assign_detector.triggered.connect(lambda: self.controller.assign_detector())

        self.action_square_color = QAction("Detector &Colour...", self)
        self.action_square_color.triggered.connect(self.controller.pick_square_color)

        self.action_edit_text = QAction("Edit &Text...", self)
        self.action_edit_text.triggered.connect(self.controller.edit_text)

        self.arrow_actions = QActionGroup(self)
        for arrow_type in ArrowType:
            action = QAction(arrow_type.value, self)
            action.setCheckable(True)
            action.setData(arrow_type)
            action.triggered.connect(
                lambda _checked, t=arrow_type: self.controller.set_arrow_type(t))
            self.arrow_actions.addAction(action)

        # Insert actions
        self.action_new_line = QAction("Phase &Line", self)
        self.action_new_line.triggered.connect(
            lambda: self.controller.set_pending_mode(NewShapeMode.LINE))

        self.action_new_square = QAction("Detector &Square", self)
        self.action_new_square.triggered.connect(
            lambda: self.controller.set_pending_mode(NewShapeMode.SQUARE))

        self.action_new_text = QAction("&Text Label", self)
        self.action_new_text.triggered.connect(
            lambda: self.controller.set_pending_mode(NewShapeMode.TEXT))

    def _create_menus(self):
        """Create menu bar and menus."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")
        file_menu.addAction(self.action_open_image)
        file_menu.addAction(self.action_open)
        file_menu.addAction(self.action_import_definitions)
        file_menu.addSeparator()
        file_menu.addAction(self.action_save)
        file_menu.addAction(self.action_save_as)
        file_menu.addSeparator()
        file_menu.addAction(self.action_exit)

        # Edit menu
        edit_menu = menubar.addMenu("&Edit")
        edit_menu.addAction(self.action_copy)
        edit_menu.addAction(self.action_paste)
        edit_menu.addAction(self.action_duplicate)
        edit_menu.addAction(self.action_delete)

        # Insert menu
        insert_menu = menubar.addMenu("&Insert")
        insert_menu.addAction(self.action_new_line)
        insert_menu.addAction(self.action_new_square)
        insert_menu.addAction(self.action_new_text)

    def _create_central_widget(self):
        self.canvas = LayoutCanvas(self.controller)
        self.setCentralWidget(self.canvas)

    def _create_dock_panels(self):
        """Create names, counts and live output docks."""
        self.names_panel = NamesPanel()
        names_dock = QDockWidget("Names", self)
        names_dock.setObjectName("NamesDock")
        names_dock.setWidget(self.names_panel)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, names_dock)

        self.counts_panel = CountsPanel(self.document)
        counts_dock = QDockWidget("Counts", self)
        counts_dock.setObjectName("CountsDock")
        counts_dock.setWidget(self.counts_panel)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, counts_dock)

        self.output_view = QPlainTextEdit()
        self.output_view.setReadOnly(True)
        self.output_view.setFont(QFont("Consolas", 9))
        output_dock = QDockWidget("Layout Output", self)
        output_dock.setObjectName("OutputDock")
        output_dock.setWidget(self.output_view)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, output_dock)

    def _create_status_bar(self):
        """Create status bar."""
        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage("Ready")

    def _connect_signals(self):
        self.controller.layout_changed.connect(self._on_layout_changed)
        self.controller.message.connect(self._on_controller_message)
        self.canvas.context_requested.connect(self._show_context_menu)
        self.canvas.cursor_position.connect(
            lambda x, y: self.status_bar.showMessage(f"X: {x:.0f}  Y: {y:.0f}"))

    def _load_settings(self):
        """Load window geometry."""
        settings = QSettings("PhaseLayout", "PhaseLayout")

        geometry = settings.value("geometry")
        if geometry:
            self.restoreGeometry(geometry)

        state = settings.value("windowState")
        if state:
            self.restoreState(state)

    def _save_settings(self):
        settings = QSettings("PhaseLayout", "PhaseLayout")
        settings.setValue("geometry", self.saveGeometry())
        settings.setValue("windowState", self.saveState())

    def closeEvent(self, event):
        """Offer to save unsaved edits before closing."""
        if self.controller.state.dirty:
            reply = QMessageBox.question(
                self,
                "Unsaved Changes",
                "The layout has unsaved changes. Save before closing?",
                QMessageBox.StandardButton.Save | QMessageBox.StandardButton.Discard |
                QMessageBox.StandardButton.Cancel
            )
            if reply == QMessageBox.StandardButton.Cancel:
                event.ignore()
                return
            if reply == QMessageBox.StandardButton.Save and not self._on_save():
                event.ignore()
                return

        self._save_settings()
        event.accept()

    # ------------------------------------------------------------------
    # Controller feedback
    # ------------------------------------------------------------------

    def _on_layout_changed(self, text: str):
        self.output_view.setPlainText(text)
        self.counts_panel.refresh()
        self._update_title()

    def _on_controller_message(self, message: str):
        self.status_bar.showMessage(message, 5000)
        QMessageBox.information(self, "PhaseLayout", message)

    def _update_title(self):
        name = Path(self._current_filepath).name if self._current_filepath else "Untitled"
        marker = " *" if self.controller.state.dirty else ""
        self.setWindowTitle(f"PhaseLayout - {name}{marker}")

    def _show_context_menu(self, global_pos: QPoint):
        shape = self.controller.selected
        if shape is None:
            return
        menu = QMenu(self)
        menu.addAction(self.action_duplicate)
        menu.addAction(self.action_delete)
        if isinstance(shape, LineShape):
            menu.addSeparator()
            menu.addAction(self.action_bend)
            arrow_menu = menu.addMenu("Arrow Type")
            for action in self.arrow_actions.actions():
                action.setChecked(action.data() is shape.arrow_type)
                arrow_menu.addAction(action)
        if isinstance(shape, (LineShape, SquareShape)):
            menu.addSeparator()
            menu.addAction(self.action_assign_phase)
            menu.addAction(self.action_assign_detector)
        if isinstance(shape, SquareShape):
            menu.addAction(self.action_square_color)
        if isinstance(shape, TextShape):
            menu.addAction(self.action_edit_text)
        menu.exec(global_pos)

    # ------------------------------------------------------------------
    # File actions
    # ------------------------------------------------------------------

    def _load_image(self, filepath) -> bool:
        try:
            info = load_image_info(filepath)
            pixels = load_image_pixels(filepath)
        except LayoutError as e:
            QMessageBox.warning(self, "Image Error", str(e))
            return False
        self.canvas.set_image(pixels)
        self.controller.set_image(info.width, info.height, info.file_name)
        self.status_bar.showMessage(f"Loaded {info.file_name} ({info.width}x{info.height})", 3000)
        return True

    def _on_open_image(self):
        patterns = " ".join(f"*{ext}" for ext in IMAGE_EXTENSIONS)
        filepath, _ = QFileDialog.getOpenFileName(
            self, "Open Image", "", f"Images ({patterns});;All Files (*)"
        )
        if filepath:
            self._load_image(filepath)

    def _on_open(self):
        """Open an existing layout file."""
        filepath, _ = QFileDialog.getOpenFileName(self, "Open Layout", "", LAYOUT_FILTER)
        if not filepath:
            return
        try:
            parsed = self.controller.load_layout_file(filepath)
        except LayoutError as e:
            QMessageBox.critical(self, "Open Failed", f"Failed to open layout:\n{e}")
            return

        self._current_filepath = filepath
        self.names_panel.set_names(self.document.phase_names, self.document.detector_names)
        image_path = resolve_image_path(filepath, parsed.image_file)
        if image_path is not None:
            self._load_image(image_path)
            self.controller.mark_saved()
        else:
            logger.warning("Layout image %s not found next to %s", parsed.image_file, filepath)
        self._update_title()
        if parsed.skipped:
            self.status_bar.showMessage(
                f"Opened {Path(filepath).name} ({len(parsed.skipped)} records skipped)", 5000)

    def _on_import_definitions(self):
        filepath, _ = QFileDialog.getOpenFileName(self, "Import Definitions", "", DEFINITION_FILTER)
        if not filepath:
            return
        try:
            definitions = import_definitions(Path(filepath))
        except LayoutError as e:
            QMessageBox.warning(self, "Import Error", str(e))
            return
        self.controller.apply_definitions(definitions)
        self.names_panel.set_names(self.document.phase_names, self.document.detector_names)
        self.status_bar.showMessage(
            f"Imported {len(definitions.phase_names)} phases and "
            f"{len(definitions.detector_names)} detectors", 3000)

    def _on_save(self) -> bool:
        """Save current layout."""
        if not self._current_filepath:
            return self._on_save_as()
        return self._write_layout(self._current_filepath)

    def _on_save_as(self) -> bool:
        filepath, _ = QFileDialog.getSaveFileName(self, "Save Layout As", "", LAYOUT_FILTER)
        if not filepath:
            return False
        if not Path(filepath).suffix:
            filepath += '.txt'
        if self._write_layout(filepath):
            self._current_filepath = filepath
            self._update_title()
            return True
        return False

    def _write_layout(self, filepath: str) -> bool:
        try:
            self.controller.save_layout_file(filepath)
        except LayoutError as e:
            QMessageBox.critical(self, "Save Failed", f"Failed to save layout:\n{e}")
            return False
        self._update_title()
        self.status_bar.showMessage(f"Saved {Path(filepath).name}", 3000)
        return True
