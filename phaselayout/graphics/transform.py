"""
View Transform for PhaseLayout

Maps between image space (pixels of the background raster) and screen
space (widget pixels). The canvas paints with this mapping and the edit
controller interprets pointer positions with it, so both always agree.

The image is letterboxed into the client box ("fit rectangle"), scaled
by the zoom factor, centered, and finally shifted by the pan offset.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ..core.shapes import Point

# Returned by screen_to_image when there is nothing to map onto
EMPTY_POINT = Point(0.0, 0.0)


def fit_size(image_width: int, image_height: int,
             box_width: int, box_height: int) -> Tuple[int, int]:
    """
    Largest aspect-preserving size of an image inside a box.

    Sizes are truncated to whole pixels and never drop below 1.
    """
    if image_width <= 0 or image_height <= 0:
        return 1, 1
    aspect = image_height / image_width
    width = box_width
    height = int(width * aspect)
    if height > box_height:
        height = box_height
        width = int(height / aspect)
    return max(1, width), max(1, height)


@dataclass(frozen=True)
class ViewTransform:
    """
    Immutable snapshot of the image <-> screen mapping.

    Attributes:
        image_size: Intrinsic (width, height) of the raster, or None when
            no image is loaded
        client_size: (width, height) of the drawing surface
        zoom: Zoom factor in [1.0, 3.5]
        offset: Pan offset in screen pixels
    """
    image_size: Optional[Tuple[int, int]]
    client_size: Tuple[int, int]
    zoom: float = 1.0
    offset: Tuple[float, float] = (0.0, 0.0)

    @property
    def has_image(self) -> bool:
        return self.image_size is not None and self.image_size[0] > 0 and self.image_size[1] > 0

    def dest_rect(self) -> Tuple[int, int, int, int]:
        """Destination rectangle (left, top, width, height) in screen pixels."""
        if not self.has_image:
            return 0, 0, 0, 0
        client_w, client_h = self.client_size
        fit_w, fit_h = fit_size(self.image_size[0], self.image_size[1], client_w, client_h)
        view_w = int(fit_w * self.zoom)
        view_h = int(fit_h * self.zoom)
        left = (client_w - view_w) // 2 + int(self.offset[0])
        top = (client_h - view_h) // 2 + int(self.offset[1])
        return left, top, view_w, view_h

    def scale(self) -> Tuple[float, float]:
        """Screen pixels per image pixel along x and y."""
        if not self.has_image:
            return 0.0, 0.0
        _, _, view_w, view_h = self.dest_rect()
        return view_w / self.image_size[0], view_h / self.image_size[1]

    def image_to_screen(self, point: Point) -> Point:
        left, top, _, _ = self.dest_rect()
        sx, sy = self.scale()
        return Point(left + point.x * sx, top + point.y * sy)

    def screen_to_image(self, point: Point) -> Point:
        """Inverse of image_to_screen; EMPTY_POINT when nothing is shown."""
        left, top, view_w, view_h = self.dest_rect()
        if view_w == 0 or view_h == 0:
            return EMPTY_POINT.copy()
        fx = (point.x - left) / view_w
        fy = (point.y - top) / view_h
        return Point(fx * self.image_size[0], fy * self.image_size[1])

    def image_length_to_screen(self, length: float) -> float:
        """Scale a length (pen width, handle size) with the smaller axis factor."""
        sx, sy = self.scale()
        return length * min(sx, sy)
