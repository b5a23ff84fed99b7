"""
Tests for hit testing priority and tolerances.
"""

import unittest

from phaselayout.core.document import LayoutDocument
from phaselayout.core.shapes import LineShape, Point, SquareShape, TextShape
from phaselayout.graphics.hit_test import (
    hit_test, nearest_segment, point_near_line, project_point, tolerance_for
)


class TestGeometry(unittest.TestCase):
    """Test projection helpers."""

    def test_project_clamps(self):
        a, b = Point(0, 0), Point(10, 0)
        self.assertEqual(project_point(Point(5, 5), a, b), Point(5, 0))
        self.assertEqual(project_point(Point(-5, 5), a, b), Point(0, 0))
        self.assertEqual(project_point(Point(50, 5), a, b), Point(10, 0))

    def test_degenerate_segment_projects_to_start(self):
        a = Point(3, 3)
        self.assertIs(project_point(Point(10, 10), a, Point(3, 3.01)), a)

    def test_vertices_win_over_segments(self):
        line = LineShape([Point(0, 0), Point(100, 0)])
        self.assertEqual(point_near_line(Point(98, 3), line, 16), (True, 1))
        self.assertEqual(point_near_line(Point(50, 3), line, 16), (True, -1))
        self.assertEqual(point_near_line(Point(50, 30), line, 16), (False, -1))

    def test_tolerance(self):
        self.assertEqual(tolerance_for(1.0), 16.0)
        self.assertEqual(tolerance_for(3.0), 16.0)
        self.assertEqual(tolerance_for(0.5), 32.0)

    def test_nearest_segment(self):
        line = LineShape([Point(0, 0), Point(100, 0), Point(100, 100)])
        self.assertEqual(nearest_segment(line, Point(50, 2)), 0)
        self.assertEqual(nearest_segment(line, Point(98, 60)), 1)
        self.assertEqual(nearest_segment(LineShape([Point(0, 0)]), Point(0, 0)), -1)


class TestHitTest(unittest.TestCase):
    """Test hit_test over a document."""

    def setUp(self):
        self.doc = LayoutDocument()
        self.phase = LineShape([Point(0, 100), Point(200, 100)], id="A")
        self.doc.add_phase(self.phase)

    def test_miss(self):
        self.assertIsNone(hit_test(self.doc, Point(100, 300)))

    def test_phase_segment_and_vertex(self):
        result = hit_test(self.doc, Point(100, 105))
        self.assertIs(result.shape, self.phase)
        self.assertEqual(result.point_index, -1)
        result = hit_test(self.doc, Point(198, 102))
        self.assertEqual(result.point_index, 1)

    def test_detector_beats_phase(self):
        square = SquareShape(100, 100, 40, 40)
        self.doc.add_detector(square)
        self.assertIs(hit_test(self.doc, Point(100, 100)).shape, square)

    def test_text_beats_detector(self):
        self.doc.add_detector(SquareShape(100, 100, 40, 40))
        text = TextShape(95, 95, "Hello", size=18)
        self.doc.add_text(text)
        self.assertIs(hit_test(self.doc, Point(100, 100)).shape, text)

    def test_newest_wins_within_collection(self):
        older = SquareShape(300, 300)
        newer = SquareShape(305, 305)
        self.doc.add_detector(older)
        self.doc.add_detector(newer)
        self.assertIs(hit_test(self.doc, Point(302, 302)).shape, newer)

    def test_square_corner_zone(self):
        square = SquareShape(300, 300, 40, 40)
        self.doc.add_detector(square)
        # Outside body + handle padding (36) on x but within 18 of the corner
        self.assertIs(hit_test(self.doc, Point(337, 335)).shape, square)
        self.assertIsNone(hit_test(self.doc, Point(360, 360)))

    def test_text_box_extent(self):
        text = TextShape(0, 0, "abcd", size=10)
        self.doc.add_text(text)
        # width = 4 * 10 * 0.6 = 24, plus 16 padding
        self.assertIs(hit_test(self.doc, Point(39, 25)).shape, text)
        self.assertIsNone(hit_test(self.doc, Point(41, 25)))

    def test_zoomed_out_tolerance(self):
        self.assertIsNone(hit_test(self.doc, Point(100, 125), zoom=1.0))
        self.assertIs(hit_test(self.doc, Point(100, 125), zoom=0.5).shape, self.phase)


if __name__ == '__main__':
    unittest.main()
