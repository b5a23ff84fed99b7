"""
Arrow Geometry for PhaseLayout

Direction indicators drawn at the tip of a line: plain wedges, the
pedestrian crossing double wedge and curved turn arrows. Everything here
is pure geometry in whatever space the caller passes in (the canvas uses
screen space); nothing is stored on the shapes.
"""

from dataclasses import dataclass
from typing import List, Tuple
import math

from ..core.shapes import ArrowType, Point

WING_ANGLE = math.pi / 6.5
WING_RATIO = 0.6


def _angle(from_pt: Point, to_pt: Point) -> float:
    return math.atan2(to_pt.y - from_pt.y, to_pt.x - from_pt.x)


def _wedge(apex: Point, angle: float, size: float) -> List[Point]:
    """Isosceles wedge whose apex points along angle."""
    back_x = apex.x - size * math.cos(angle)
    back_y = apex.y - size * math.sin(angle)
    wing = size * WING_RATIO
    return [
        Point(back_x + wing * math.cos(angle + WING_ANGLE),
              back_y + wing * math.sin(angle + WING_ANGLE)),
        apex.copy(),
        Point(back_x + wing * math.cos(angle - WING_ANGLE),
              back_y + wing * math.sin(angle - WING_ANGLE)),
    ]


def arrowhead_size(pen_width: float) -> float:
    return max(8.0, pen_width * 3.0)


def arrowhead(from_pt: Point, tip: Point, pen_width: float) -> List[Point]:
    """
    Wedge sitting flush on tip, pointing away from from_pt.

    Returns:
        Three points; the middle one is the apex (== tip)
    """
    return _wedge(tip, _angle(from_pt, tip), arrowhead_size(pen_width))


def ped_crossing_heads(from_pt: Point, tip: Point, pen_width: float) -> List[List[Point]]:
    """
    Forward wedge at the tip plus a reverse wedge sharing the same apex.

    The two wedges overlap at the tip; there is no distinct glyph for
    crossings yet.
    """
    angle = _angle(from_pt, tip)
    size = arrowhead_size(pen_width)
    return [_wedge(tip, angle, size), _wedge(tip, angle + math.pi, size)]


@dataclass
class SideArrow:
    """Cubic curve leaving the line near its tip plus the wedge at its end."""
    start: Point
    ctrl1: Point
    ctrl2: Point
    end: Point
    head: List[Point]

    def flatten(self, tolerance: float = 0.25) -> List[Point]:
        return flatten_cubic_bezier(self.start, self.ctrl1, self.ctrl2, self.end, tolerance)


def side_arrow(from_pt: Point, tip: Point, pen_width: float, left: bool) -> SideArrow:
    """
    Turn arrow bending 90 degrees off the line direction.

    The curve starts 0.3 * extent back from the tip and ends one extent
    out along the normal (left = counter-clockwise in screen space).
    """
    angle = _angle(from_pt, tip)
    normal = angle - math.pi / 2 if left else angle + math.pi / 2
    extent = max(25.0, pen_width * 4.0)

    cos_a, sin_a = math.cos(angle), math.sin(angle)
    cos_n, sin_n = math.cos(normal), math.sin(normal)

    start = Point(tip.x - cos_a * extent * 0.3, tip.y - sin_a * extent * 0.3)
    end = Point(tip.x + cos_n * extent, tip.y + sin_n * extent)
    ctrl1 = Point(start.x + cos_a * extent * 0.7, start.y + sin_a * extent * 0.7)
    ctrl2 = Point(end.x - cos_n * extent * 0.5, end.y - sin_n * extent * 0.5)
    head = _wedge(end, normal, arrowhead_size(pen_width))
    return SideArrow(start, ctrl1, ctrl2, end, head)


def flatten_cubic_bezier(p0: Point, p1: Point, p2: Point, p3: Point,
                         tolerance: float = 0.25) -> List[Point]:
    """
    Flatten a cubic bezier curve to line segments using recursive subdivision.

    Uses the de Casteljau algorithm with a flatness test.
    """
    def is_flat(p0: Point, p1: Point, p2: Point, p3: Point) -> bool:
        ux = 3 * p1.x - 2 * p0.x - p3.x
        uy = 3 * p1.y - 2 * p0.y - p3.y
        vx = 3 * p2.x - 2 * p3.x - p0.x
        vy = 3 * p2.y - 2 * p3.y - p0.y
        return max(ux * ux, vx * vx) + max(uy * uy, vy * vy) <= 16 * tolerance * tolerance

    def midpoint(a: Point, b: Point) -> Point:
        return Point((a.x + b.x) / 2, (a.y + b.y) / 2)

    def subdivide(p0: Point, p1: Point, p2: Point, p3: Point, depth: int) -> None:
        if depth >= 16 or is_flat(p0, p1, p2, p3):
            points.append(p3)
            return
        q0, q1, q2 = midpoint(p0, p1), midpoint(p1, p2), midpoint(p2, p3)
        r0, r1 = midpoint(q0, q1), midpoint(q1, q2)
        s = midpoint(r0, r1)
        subdivide(p0, q0, r0, s, depth + 1)
        subdivide(s, r1, q2, p3, depth + 1)

    points = [p0]
    subdivide(p0, p1, p2, p3, 0)
    return points


@dataclass
class ArrowDecorations:
    """Everything drawn on top of a line's polyline for its ArrowType."""
    wedges: List[List[Point]]
    curves: List[SideArrow]


def arrow_decorations(arrow_type: ArrowType, from_pt: Point, tip: Point,
                      pen_width: float) -> ArrowDecorations:
    """Build the decorations for the last segment (from_pt -> tip)."""
    if arrow_type is ArrowType.ARROW:
        return ArrowDecorations([arrowhead(from_pt, tip, pen_width)], [])
    if arrow_type is ArrowType.PED_CROSSING:
        return ArrowDecorations(ped_crossing_heads(from_pt, tip, pen_width), [])
    if arrow_type in (ArrowType.LEFT_ARROW, ArrowType.RIGHT_ARROW):
        curve = side_arrow(from_pt, tip, pen_width, left=arrow_type is ArrowType.LEFT_ARROW)
        return ArrowDecorations([curve.head], [curve])
    return ArrowDecorations([], [])


def last_segment(points: List[Point]) -> Tuple[Point, Point]:
    """(second-to-last point, tip) of a polyline with at least two points."""
    return points[-2], points[-1]
