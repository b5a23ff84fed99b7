"""
Editor Settings for PhaseLayout

Limits, tolerances and template defaults shared by the editor, the hit
tester and the layout codec.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EditorSettings:
    """Tunable constants for interaction and shape templates."""
    # Zoom
    min_zoom: float = 1.0
    max_zoom: float = 3.5
    zoom_step: float = 0.1

    # Hit testing (image units, divided by min(zoom, 1))
    handle_size: float = 16.0
    square_corner_tolerance: float = 18.0
    resize_grab_radius: float = 24.0

    # Handle glyphs (image units)
    center_handle_size: float = 10.0
    stretch_handle_size: float = 18.0

    # Line limits
    min_line_thickness: int = 2
    max_line_thickness: int = 30

    # Square limits - drag resize and wheel resize use different ranges
    min_square_size: float = 8.0
    max_square_drag_size: float = 600.0
    max_square_wheel_size: float = 400.0
    square_wheel_step: float = 2.0
    rotation_wheel_step: float = 5.0

    # Text limits
    min_font_size: int = 8
    max_font_size: int = 72
    font_size_step: int = 2

    # Templates
    line_template_offset: float = 60.0
    drop_line_offset: float = 40.0
    line_thickness: int = 10
    turn_length: float = 35.0
    square_size: float = 40.0
    square_thickness: int = 6
    square_fill: str = "#0000FF"
    text_label: str = "Text Label"
    text_font: str = "Arial"
    text_size: int = 18
    text_color: str = "#000000"

    # Duplicate / paste offset
    paste_offset: float = 12.0

    # Layout file
    default_image_file: str = "layout.png"


DEFAULT_SETTINGS = EditorSettings()
