"""
PhaseLayout I/O Module

Handles the layout text format, definition import and image probing.
"""

from .layout_io import (
    LayoutCodec, ParsedLayout, save_layout, load_layout, resolve_image_path
)
from .definitions import Definitions, import_definitions, arrow_from_lamp_symbol
from .image_loader import IMAGE_EXTENSIONS, ImageInfo, load_image_info, load_image_pixels

__all__ = [
    'LayoutCodec', 'ParsedLayout', 'save_layout', 'load_layout', 'resolve_image_path',
    'Definitions', 'import_definitions', 'arrow_from_lamp_symbol',
    'IMAGE_EXTENSIONS', 'ImageInfo', 'load_image_info', 'load_image_pixels',
]
