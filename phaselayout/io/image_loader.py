"""
Image Loader for PhaseLayout

The editor only needs the intrinsic size of the background raster; the
UI decodes the pixels itself for painting.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union
import logging

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..core.errors import ImageLoadError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp")


@dataclass(frozen=True)
class ImageInfo:
    """A loaded background image."""
    path: Path
    width: int
    height: int

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def file_name(self) -> str:
        return self.path.name


def load_image_info(filepath: Union[str, Path]) -> ImageInfo:
    """
    Probe a raster image and return its size.

    Raises:
        ImageLoadError: if the file is missing, unreadable or not an image
    """
    path = Path(filepath)
    try:
        with Image.open(path) as img:
            img.verify()
        # verify() leaves the image unusable; reopen for the size
        with Image.open(path) as img:
            width, height = img.size
    except (OSError, UnidentifiedImageError, SyntaxError) as e:
        raise ImageLoadError(f"Failed to load image {path}: {e}") from e

    if width <= 0 or height <= 0:
        raise ImageLoadError(f"Image {path} has no pixels")

    logger.info("Loaded image %s (%dx%d)", path.name, width, height)
    return ImageInfo(path, width, height)


def load_image_pixels(filepath: Union[str, Path]) -> np.ndarray:
    """
    Decode an image into an RGBA array for display.

    Palette and greyscale images are expanded; transparency is preserved.

    Returns:
        uint8 array of shape (height, width, 4)

    Raises:
        ImageLoadError: if the file cannot be decoded
    """
    path = Path(filepath)
    try:
        with Image.open(path) as img:
            rgba = img.convert('RGBA')
    except (OSError, UnidentifiedImageError, SyntaxError) as e:
        raise ImageLoadError(f"Failed to decode image {path}: {e}") from e

    pixels = np.array(rgba, dtype=np.uint8)
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ImageLoadError(f"Unexpected pixel layout {pixels.shape} in {path}")
    return np.ascontiguousarray(pixels)
