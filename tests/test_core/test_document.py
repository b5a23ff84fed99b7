"""
Tests for LayoutDocument and its case-insensitive tables.
"""

import unittest

from phaselayout.core.document import CaseInsensitiveDict, LayoutDocument
from phaselayout.core.shapes import ArrowType, LineShape, Point, SquareShape, TextShape
from phaselayout.io.definitions import Definitions


def make_line(id=""):
    return LineShape([Point(0, 0), Point(10, 10)], id=id)


class TestCaseInsensitiveDict(unittest.TestCase):
    """Test CaseInsensitiveDict."""

    def test_lookup_ignores_case(self):
        table = CaseInsensitiveDict()
        table["Phase_A"] = 1
        self.assertEqual(table["phase_a"], 1)
        self.assertIn("PHASE_A", table)

    def test_first_spelling_kept_last_value_wins(self):
        table = CaseInsensitiveDict()
        table["A"] = 1
        table["a"] = 2
        self.assertEqual(list(table.items()), [("A", 2)])

    def test_non_string_not_contained(self):
        self.assertNotIn(1, CaseInsensitiveDict({"a": 1}))


class TestLayoutDocument(unittest.TestCase):
    """Test LayoutDocument collections."""

    def setUp(self):
        self.doc = LayoutDocument()

    def test_default_image_file(self):
        self.assertEqual(self.doc.image_file, "layout.png")

    def test_membership_is_by_identity(self):
        a = make_line("A")
        b = make_line("A")
        self.doc.add_phase(a)
        self.assertTrue(self.doc.contains(a))
        self.assertFalse(self.doc.contains(b))
        self.assertFalse(self.doc.remove(b))
        self.assertTrue(self.doc.remove(a))
        self.assertEqual(self.doc.phases, [])

    def test_add_rejects_wrong_variant(self):
        with self.assertRaises(TypeError):
            self.doc.add_phase(SquareShape(0, 0))
        with self.assertRaises(TypeError):
            self.doc.add_detector(TextShape(0, 0))
        with self.assertRaises(TypeError):
            self.doc.add_text(make_line())

    def test_move_between_collections(self):
        line = make_line("D1")
        self.doc.add_phase(line)
        self.doc.move_to_detectors(line)
        self.assertEqual(self.doc.phases, [])
        self.assertIs(self.doc.detectors[0], line)
        self.doc.move_to_phases(line)
        self.assertIs(self.doc.phases[0], line)
        self.assertEqual(self.doc.detectors, [])

    def test_all_shapes_order(self):
        phase, square, text = make_line(), SquareShape(0, 0), TextShape(0, 0)
        self.doc.add_text(text)
        self.doc.add_detector(square)
        self.doc.add_phase(phase)
        self.assertEqual(self.doc.all_shapes(), [phase, square, text])

    def test_replace_with_merges_mappings(self):
        self.doc.id_to_position["A"] = 0
        self.doc.id_to_position["B"] = 1
        mappings = CaseInsensitiveDict({"b": 5, "C": 2})
        phases = self.doc.phases
        self.doc.replace_with("x.png", [make_line("A")], [], [], mappings)
        self.assertIs(self.doc.phases, phases)
        self.assertEqual(self.doc.image_file, "x.png")
        self.assertEqual(dict(self.doc.id_to_position.items()), {"A": 0, "B": 5, "C": 2})


class TestDefinitions(unittest.TestCase):
    """Test applying imported definitions."""

    def setUp(self):
        self.doc = LayoutDocument()
        self.definitions = Definitions(
            phase_names=["A", "B", "C"],
            detector_names=["D1", "D2"],
            default_arrow_by_phase={"A": ArrowType.PED_CROSSING, "B": ArrowType.LEFT_ARROW},
        )

    def test_positions_rebuilt(self):
        self.doc.id_to_position["Old"] = 7
        self.doc.apply_definitions(self.definitions)
        positions = dict(self.doc.id_to_position.items())
        self.assertEqual(positions, {"A": 0, "B": 1, "C": 2, "D1": 0, "D2": 1})

    def test_defaults_applied_unless_edited(self):
        plain = make_line("a")
        edited = make_line("B")
        edited.type_edited = True
        unassigned = make_line("")
        for line in (plain, edited, unassigned):
            self.doc.add_phase(line)
        self.doc.apply_definitions(self.definitions)
        self.assertIs(plain.arrow_type, ArrowType.PED_CROSSING)
        self.assertIs(edited.arrow_type, ArrowType.ARROW)
        self.assertIs(unassigned.arrow_type, ArrowType.ARROW)

    def test_known_phase_and_default_lookup(self):
        self.doc.apply_definitions(self.definitions)
        self.assertTrue(self.doc.is_known_phase("A"))
        self.assertFalse(self.doc.is_known_phase("D1"))
        self.assertFalse(self.doc.is_known_phase(""))
        self.assertIs(self.doc.default_arrow_for("b"), ArrowType.LEFT_ARROW)
        self.assertIsNone(self.doc.default_arrow_for("C"))

    def test_counts(self):
        self.doc.apply_definitions(self.definitions)
        self.doc.add_phase(make_line("A"))
        self.doc.add_phase(make_line("a"))
        self.doc.add_detector(SquareShape(0, 0, id="D2"))
        self.assertEqual(self.doc.phase_counts(),
                         [("A", 2, "PedCrossing"), ("B", 0, "Left_Arrow"), ("C", 0, "")])
        self.assertEqual(self.doc.detector_counts(),
                         [("D1", 0, "Detector"), ("D2", 1, "Detector")])


if __name__ == '__main__':
    unittest.main()
