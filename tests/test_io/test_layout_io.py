"""
Tests for the layout text codec.

Covers the record grammar, tolerant parsing of malformed records, arrow
token synonyms, quoted CSV text fields and file round-trips.
"""

import os
import tempfile
import unittest

from phaselayout.core.document import LayoutDocument
from phaselayout.core.errors import LayoutParseError, SerializationError
from phaselayout.core.shapes import ArrowType, LineShape, Point, SquareShape, TextShape
from phaselayout.io.layout_io import (
    LayoutCodec, format_number, load_layout, parse_int, quote_csv,
    resolve_image_path, save_layout, split_csv
)


SAMPLE = """\
[image]
file="my junction.png"

[phases]
A,Arrow,10,20,110,120,10
B,left_arrow,0,0,50,50,8,25,75,turn=40,edited=1
# a comment
; another comment
C,Right-Arrow,1,1,2,2,6,future=stuff

[detectors]
D1,square,100,100,40,40,-30,6
D2,line,Arrow,5,5,15,15,4
D3,left_arrow,0,0,10,0,8
D4,line,0,0,20,20,5

[text]
Text Label,"Hello, ""World""\",30,40,Arial,18,true,#FF0000

[mappings]
A=0
a=3
D1=1
"""


class TestTokenHelpers(unittest.TestCase):
    """Test number and CSV helpers."""

    def test_format_number(self):
        self.assertEqual(format_number(10), "10")
        self.assertEqual(format_number(10.5), "10.5")
        self.assertEqual(format_number(-0.0000001), "0")
        self.assertEqual(format_number(1.23456789), "1.234568")

    def test_parse_int(self):
        self.assertEqual(parse_int("10"), 10)
        self.assertEqual(parse_int("10.0"), 10)
        self.assertIsNone(parse_int("10.5"))
        self.assertIsNone(parse_int("x"))

    def test_quote_csv(self):
        self.assertEqual(quote_csv("plain"), "plain")
        self.assertEqual(quote_csv('a,b'), '"a,b"')
        self.assertEqual(quote_csv('say "hi"'), '"say ""hi"""')
        self.assertEqual(quote_csv("#1 North"), '"#1 North"')
        self.assertEqual(quote_csv(";x"), '";x"')
        self.assertEqual(quote_csv("  Hi  "), '"  Hi  "')
        self.assertEqual(quote_csv("a#b"), "a#b")

    def test_split_csv(self):
        self.assertEqual(split_csv('a,"b,c","d ""e"""'), ["a", "b,c", 'd "e"'])
        self.assertEqual(split_csv("a,,b"), ["a", "", "b"])

    def test_split_csv_whitespace(self):
        self.assertEqual(split_csv(' a , b '), ["a", "b"])
        self.assertEqual(split_csv('"  Hi  ",x'), ["  Hi  ", "x"])
        self.assertEqual(split_csv(' " pad" , "#1" '), [" pad", "#1"])


class TestParsing(unittest.TestCase):
    """Test LayoutCodec.parse."""

    def setUp(self):
        self.codec = LayoutCodec()
        self.parsed = self.codec.parse(SAMPLE)

    def test_image(self):
        self.assertEqual(self.parsed.image_file, "my junction.png")

    def test_phases(self):
        a, b, c = self.parsed.phases
        self.assertEqual(a.id, "A")
        self.assertEqual(a.points, [Point(10, 20), Point(110, 120)])
        self.assertEqual(a.thickness, 10)
        self.assertEqual(a.turn_length, 35)
        self.assertFalse(a.type_edited)

        self.assertIs(b.arrow_type, ArrowType.LEFT_ARROW)
        self.assertEqual(b.points[-1], Point(25, 75))
        self.assertEqual(b.turn_length, 40)
        self.assertTrue(b.type_edited)

        self.assertIs(c.arrow_type, ArrowType.RIGHT_ARROW)

    def test_detectors(self):
        square, marked, bare, unmarked = self.parsed.detectors
        self.assertIsInstance(square, SquareShape)
        self.assertEqual((square.x, square.width, square.thickness), (100, 40, 6))
        self.assertAlmostEqual(square.rotation, 330.0)

        self.assertIsInstance(marked, LineShape)
        self.assertEqual(marked.id, "D2")
        self.assertEqual(marked.points, [Point(5, 5), Point(15, 15)])
        self.assertEqual(marked.thickness, 4)

        self.assertIs(bare.arrow_type, ArrowType.LEFT_ARROW)
        self.assertEqual(bare.points, [Point(0, 0), Point(10, 0)])
        self.assertEqual(bare.thickness, 8)

        self.assertIs(unmarked.arrow_type, ArrowType.ARROW)
        self.assertEqual(unmarked.points, [Point(0, 0), Point(20, 20)])

    def test_text(self):
        text = self.parsed.texts[0]
        self.assertEqual(text.label, "Text Label")
        self.assertEqual(text.text, 'Hello, "World"')
        self.assertEqual((text.x, text.y, text.size), (30, 40, 18))
        self.assertTrue(text.bold)
        self.assertEqual(text.color, "#FF0000")

    def test_mappings_last_wins_case_insensitive(self):
        self.assertEqual(self.parsed.mappings["A"], 3)
        self.assertEqual(self.parsed.mappings["d1"], 1)
        self.assertEqual(len(self.parsed.mappings), 2)

    def test_minimal_layout(self):
        parsed = self.codec.parse(
            "[phases]\nA,Arrow,10,10,50,50,10,turn=35,edited=0\n"
            "[detectors]\nD1,square,100,100,40,40,0,6\n"
            "[text]\nLbl,Hi,5,5,Arial,18,False,#000000\n"
            "[mappings]\nA=0\n"
        )
        self.assertEqual(len(parsed.phases), 1)
        phase = parsed.phases[0]
        self.assertEqual(phase.id, "A")
        self.assertEqual(phase.points, [Point(10, 10), Point(50, 50)])
        self.assertEqual(phase.thickness, 10)

        self.assertEqual(len(parsed.detectors), 1)
        square = parsed.detectors[0]
        self.assertIsInstance(square, SquareShape)
        self.assertEqual(square.id, "D1")
        self.assertEqual((square.x, square.y, square.width, square.height), (100, 100, 40, 40))

        self.assertEqual(len(parsed.texts), 1)
        self.assertEqual(dict(parsed.mappings.items()), {"A": 0})

    def test_nothing_skipped(self):
        self.assertEqual(self.parsed.skipped, [])

    def test_section_names_case_insensitive(self):
        parsed = self.codec.parse("[PHASES]\nA,Arrow,0,0,1,1,5\n")
        self.assertEqual(len(parsed.phases), 1)

    def test_missing_image_section_uses_default(self):
        self.assertEqual(self.codec.parse("").image_file, "layout.png")

    def test_unassigned_id(self):
        parsed = self.codec.parse("[phases]\n-,Arrow,0,0,1,1,5\n")
        self.assertEqual(parsed.phases[0].id, "")

    def test_unknown_arrow_falls_back(self):
        parsed = self.codec.parse("[phases]\nA,Zigzag,0,0,1,1,5\n")
        self.assertIs(parsed.phases[0].arrow_type, ArrowType.ARROW)

    def test_turn_and_edited_any_order(self):
        parsed = self.codec.parse("[phases]\nA,Arrow,0,0,1,1,5,edited=true,turn=12.5\n")
        line = parsed.phases[0]
        self.assertTrue(line.type_edited)
        self.assertEqual(line.turn_length, 12.5)

    def test_bends_stop_at_first_non_pair(self):
        parsed = self.codec.parse("[phases]\nA,Arrow,0,0,1,1,5,2,2,x,3,3\n")
        self.assertEqual(len(parsed.phases[0].points), 3)

    def test_bom_and_bytes(self):
        data = "\ufeff[phases]\nA,Arrow,0,0,1,1,5\n".encode("utf-8")
        self.assertEqual(len(self.codec.parse(data).phases), 1)


class TestMalformedRecords(unittest.TestCase):
    """Malformed records are skipped, the rest of the file still loads."""

    def setUp(self):
        self.codec = LayoutCodec()

    def test_short_phase_record(self):
        parsed = self.codec.parse("[phases]\nA,Arrow,0,0\nB,Arrow,0,0,1,1,5\n")
        self.assertEqual([p.id for p in parsed.phases], ["B"])
        self.assertEqual(parsed.skipped, [(2, "A,Arrow,0,0")])

    def test_non_numeric_coordinates(self):
        parsed = self.codec.parse("[phases]\nA,Arrow,a,0,1,1,5\n")
        self.assertEqual(parsed.phases, [])
        self.assertEqual(len(parsed.skipped), 1)

    def test_short_square(self):
        parsed = self.codec.parse("[detectors]\nD1,square,1,2,3\n")
        self.assertEqual(parsed.detectors, [])

    def test_bad_text_fields(self):
        parsed = self.codec.parse(
            "[text]\n"
            "L,T,1,2,Arial,18,maybe,#000000\n"
            "L,T,1,2,Arial,18,False,notacolour\n"
            "L,T,1,2,Arial\n"
            "L,T,1,2,Arial,18,FALSE,black\n"
        )
        self.assertEqual(len(parsed.texts), 1)
        self.assertEqual(parsed.texts[0].color, "#000000")
        self.assertEqual(len(parsed.skipped), 3)

    def test_bad_mapping(self):
        parsed = self.codec.parse("[mappings]\nA=x\n=3\nB=2\n")
        self.assertEqual(dict(parsed.mappings.items()), {"B": 2})

    def test_undecodable_bytes_raise(self):
        with self.assertRaises(LayoutParseError):
            self.codec.parse(b"\xff\xfe\xfd")

    def test_binary_text_raises(self):
        with self.assertRaises(LayoutParseError):
            self.codec.parse("[phases]\x00")

    def test_failed_load_keeps_document(self):
        doc = LayoutDocument()
        line = LineShape([Point(0, 0), Point(1, 1)])
        doc.add_phase(line)
        with self.assertRaises(LayoutParseError):
            self.codec.load_into(doc, b"\xff\xfe\xfd")
        self.assertEqual(doc.phases, [line])


class TestSerialization(unittest.TestCase):
    """Test LayoutCodec.serialize."""

    def setUp(self):
        self.codec = LayoutCodec()
        self.doc = LayoutDocument("junction.png")

    def test_empty_document(self):
        text = self.codec.serialize(self.doc)
        self.assertEqual(
            text,
            "[image]\nfile=junction.png\n\n[phases]\n\n[detectors]\n\n[text]\n\n[mappings]\n"
        )

    def test_records(self):
        self.doc.add_phase(LineShape([Point(1, 2), Point(3.5, 4), Point(5, 6)], id="A",
                                     arrow_type=ArrowType.PED_CROSSING, thickness=9,
                                     type_edited=True))
        self.doc.add_phase(LineShape([Point(0, 0)], id="Degenerate"))
        self.doc.add_detector(SquareShape(10, 20, 30, 30, 45, 4, id="D1"))
        self.doc.add_detector(LineShape([Point(0, 0), Point(9, 9)], thickness=3))
        self.doc.add_text(TextShape(7, 8, "a,b", label="L", bold=True, color="#112233"))
        self.doc.id_to_position["A"] = 0

        lines = self.codec.serialize(self.doc).splitlines()
        self.assertIn("A,PedCrossing,1,2,3.5,4,9,5,6,turn=35,edited=1", lines)
        self.assertNotIn("Degenerate", "\n".join(lines))
        self.assertIn("D1,square,10,20,30,30,45,4", lines)
        self.assertIn("-,line,Arrow,0,0,9,9,3,turn=35,edited=0", lines)
        self.assertIn('L,"a,b",7,8,Arial,18,True,#112233', lines)
        self.assertIn("A=0", lines)

    def test_image_name_with_space_is_quoted(self):
        self.doc.image_file = "my junction.png"
        self.assertIn('file="my junction.png"', self.codec.serialize(self.doc))


class TestRoundTrip(unittest.TestCase):
    """Serialize then parse preserves the model."""

    def setUp(self):
        self.codec = LayoutCodec()

    def _round_trip(self, doc: LayoutDocument) -> LayoutDocument:
        again = LayoutDocument()
        self.codec.load_into(again, self.codec.serialize(doc))
        return again

    def assertLinesEqual(self, before: LineShape, after: LineShape):
        self.assertIsInstance(after, LineShape)
        self.assertEqual(after.id, before.id)
        self.assertIs(after.arrow_type, before.arrow_type)
        self.assertEqual(after.thickness, before.thickness)
        self.assertEqual(after.type_edited, before.type_edited)
        self.assertAlmostEqual(after.turn_length, before.turn_length)
        self.assertEqual(len(after.points), len(before.points))
        for p, q in zip(before.points, after.points):
            self.assertAlmostEqual(p.x, q.x, places=3)
            self.assertAlmostEqual(p.y, q.y, places=3)

    def assertSquaresEqual(self, before: SquareShape, after: SquareShape):
        self.assertIsInstance(after, SquareShape)
        self.assertEqual(after.id, before.id)
        self.assertEqual((after.x, after.y), (before.x, before.y))
        self.assertEqual((after.width, after.height), (before.width, before.height))
        self.assertEqual(after.thickness, before.thickness)
        self.assertAlmostEqual(after.rotation % 360, before.rotation % 360, places=3)

    def assertTextsEqual(self, before: TextShape, after: TextShape):
        self.assertEqual(after.label, before.label)
        self.assertEqual(after.text, before.text)
        self.assertAlmostEqual(after.x, before.x, places=3)
        self.assertAlmostEqual(after.y, before.y, places=3)
        self.assertEqual(after.font_name, before.font_name)
        self.assertEqual(after.size, before.size)
        self.assertEqual(after.bold, before.bold)
        self.assertEqual(after.color, before.color)

    def test_sample_round_trip(self):
        doc = LayoutDocument()
        self.codec.load_into(doc, SAMPLE)
        again = self._round_trip(doc)

        self.assertEqual(again.image_file, doc.image_file)
        self.assertEqual(len(again.phases), len(doc.phases))
        self.assertEqual(len(again.detectors), len(doc.detectors))
        self.assertEqual(len(again.texts), len(doc.texts))
        for before, after in zip(doc.phases, again.phases):
            self.assertLinesEqual(before, after)
        for before, after in zip(doc.detectors, again.detectors):
            if isinstance(before, SquareShape):
                self.assertSquaresEqual(before, after)
            else:
                self.assertLinesEqual(before, after)
        self.assertTextsEqual(doc.texts[0], again.texts[0])
        self.assertEqual(dict(again.id_to_position.items()), dict(doc.id_to_position.items()))

    def test_square_fields(self):
        doc = LayoutDocument()
        doc.add_detector(SquareShape(12.5, 40, 24, 36, 370, 3, id="D7"))
        doc.add_detector(SquareShape(0, 0, 600, 8, 0, 1))
        again = self._round_trip(doc)
        self.assertEqual(len(again.detectors), 2)
        for before, after in zip(doc.detectors, again.detectors):
            self.assertSquaresEqual(before, after)

    def test_text_fields(self):
        doc = LayoutDocument()
        texts = [
            TextShape(1.5, 2.25, 'Hello, "World"', label="Main", font_name="Courier New",
                      size=24, bold=True, color="#12AB34"),
            TextShape(3, 4, "#1 North", label="#1 North"),
            TextShape(5, 6, ";x", label=";x", font_name="Arial"),
            TextShape(7, 8, "  Hi  ", label=" padded ", font_name=" Consolas"),
            TextShape(9, 10, "", label=""),
        ]
        for text in texts:
            doc.add_text(text)
        again = self._round_trip(doc)
        self.assertEqual(len(again.texts), len(texts))
        for before, after in zip(texts, again.texts):
            self.assertTextsEqual(before, after)

    def test_fractional_coordinates(self):
        doc = LayoutDocument()
        doc.add_phase(LineShape([Point(1 / 3, 2 / 3), Point(100.125, 7.000001)]))
        again = self._round_trip(doc)
        for p, q in zip(doc.phases[0].points, again.phases[0].points):
            self.assertAlmostEqual(p.x, q.x, places=5)
            self.assertAlmostEqual(p.y, q.y, places=5)


class TestFiles(unittest.TestCase):
    """Test save_layout / load_layout / resolve_image_path."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def test_save_and_load(self):
        path = os.path.join(self.tmpdir.name, "layout.txt")
        doc = LayoutDocument("img.png")
        doc.add_detector(SquareShape(5, 5, id="D1"))
        text = save_layout(doc, path)
        with open(path, encoding="utf-8") as f:
            self.assertEqual(f.read(), text)

        loaded = LayoutDocument()
        parsed = load_layout(loaded, path)
        self.assertEqual(parsed.image_file, "img.png")
        self.assertEqual(loaded.detectors[0].id, "D1")

    def test_save_to_missing_directory(self):
        path = os.path.join(self.tmpdir.name, "missing", "layout.txt")
        with self.assertRaises(SerializationError):
            save_layout(LayoutDocument(), path)

    def test_load_missing_file(self):
        with self.assertRaises(LayoutParseError):
            load_layout(LayoutDocument(), os.path.join(self.tmpdir.name, "nope.txt"))

    def test_resolve_image_path(self):
        layout = os.path.join(self.tmpdir.name, "layout.txt")
        image = os.path.join(self.tmpdir.name, "img.png")
        with open(image, "wb") as f:
            f.write(b"")
        self.assertEqual(str(resolve_image_path(layout, "img.png")), image)
        self.assertIsNone(resolve_image_path(layout, "other.png"))
        self.assertIsNone(resolve_image_path(layout, ""))


if __name__ == '__main__':
    unittest.main()
