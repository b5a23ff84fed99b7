"""
Layout File I/O for PhaseLayout

Handles the line-oriented layout text format:

    [image]
    file=layout.png

    [phases]
    id,arrowType,x1,y1,x2,y2,thickness[,x,y]*[,turn=F][,edited=0|1]

    [detectors]
    id,square,x,y,w,h,rotation,thickness
    id[,line|arrowType],arrowType,x1,y1,x2,y2,thickness[,x,y]*[,turn=F][,edited=0|1]

    [text]
    label,text,x,y,fontName,size,bold,#RRGGBB      (quoted CSV)

    [mappings]
    name=integer

The parser is tolerant: blank lines and ``#`` / ``;`` comments are ignored,
malformed records are skipped one by one, unknown trailing tokens are
ignored. Only input that cannot be read as text at all aborts a parse.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union
import logging

from ..config import EditorSettings, DEFAULT_SETTINGS
from ..core.document import CaseInsensitiveDict, LayoutDocument
from ..core.errors import LayoutParseError, SerializationError
from ..core.shapes import (
    ArrowType, LineShape, Point, Shape, SquareShape, TextShape, parse_color
)

logger = logging.getLogger(__name__)

COMMENT_STARTS = ('#', ';')
UNASSIGNED_ID = '-'


# ----------------------------------------------------------------------
# Token helpers
# ----------------------------------------------------------------------

def format_number(value: float) -> str:
    """Compact decimal text: integers without a fraction, at most 6 places."""
    text = f"{float(value):.6f}".rstrip('0').rstrip('.')
    return "0" if text in ("-0", "") else text


def parse_float(token: str) -> Optional[float]:
    try:
        value = float(token.strip())
    except (ValueError, AttributeError):
        return None
    if value != value or value in (float('inf'), float('-inf')):
        return None
    return value


def parse_int(token: str) -> Optional[int]:
    """Integer token; an integral float such as ``10.0`` is accepted too."""
    try:
        return int(token.strip())
    except (ValueError, AttributeError):
        pass
    value = parse_float(token)
    if value is not None and value.is_integer():
        return int(value)
    return None


def parse_bool(token: str) -> Optional[bool]:
    lowered = token.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def is_number(token: str) -> bool:
    return parse_float(token) is not None


def quote_csv(value: Optional[str]) -> str:
    """
    Quote a field when it would not survive split_csv as-is.

    That is a field containing ``,`` or ``"``, one that starts with a
    comment character, or one with leading/trailing whitespace. Inner
    quotes are doubled.
    """
    if value is None:
        return ""
    if (',' in value or '"' in value or value.startswith(COMMENT_STARTS)
            or value != value.strip()):
        return '"' + value.replace('"', '""') + '"'
    return value


def split_csv(line: str) -> List[str]:
    """
    Split a quoted CSV line; supports doubled quotes inside quoted fields.

    Unquoted fields are stripped; quoted fields keep their whitespace.
    """
    result = []
    current = []
    quoted = False
    in_quotes = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            elif in_quotes:
                in_quotes = False
            else:
                if not quoted and not ''.join(current).strip():
                    # Opening quote; drop the padding before it
                    current = []
                in_quotes = True
                quoted = True
        elif char == ',' and not in_quotes:
            value = ''.join(current)
            result.append(value if quoted else value.strip())
            current = []
            quoted = False
        elif quoted and not in_quotes and char.isspace():
            # Padding after a closing quote
            pass
        else:
            current.append(char)
        i += 1
    value = ''.join(current)
    result.append(value if quoted else value.strip())
    return result


def _unquote(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1].replace('""', '"')
    return value


def _id_to_text(shape_id: str) -> str:
    return shape_id if shape_id and shape_id.strip() else UNASSIGNED_ID


def _id_from_text(token: str) -> str:
    return "" if token == UNASSIGNED_ID else token


# ----------------------------------------------------------------------
# Parsed result
# ----------------------------------------------------------------------

@dataclass
class ParsedLayout:
    """Everything read from one layout text, before it touches a document."""
    image_file: str
    phases: List[LineShape] = field(default_factory=list)
    detectors: List[Shape] = field(default_factory=list)
    texts: List[TextShape] = field(default_factory=list)
    mappings: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    skipped: List[Tuple[int, str]] = field(default_factory=list)  # (line number, text)


class LayoutCodec:
    """Serializes a LayoutDocument to layout text and parses it back."""

    def __init__(self, settings: EditorSettings = DEFAULT_SETTINGS):
        self.settings = settings

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def serialize(self, document: LayoutDocument) -> str:
        """Return the layout text for document."""
        out: List[str] = []

        out.append("[image]")
        image_file = document.image_file or ""
        if ' ' in image_file or '"' in image_file:
            image_file = '"' + image_file.replace('"', '""') + '"'
        out.append(f"file={image_file}")
        out.append("")

        out.append("[phases]")
        for line in document.phases:
            if len(line.points) < 2:
                continue
            out.append(self._line_record(line, detector=False))
        out.append("")

        out.append("[detectors]")
        for shape in document.detectors:
            if isinstance(shape, LineShape):
                if len(shape.points) < 2:
                    continue
                out.append(self._line_record(shape, detector=True))
            elif isinstance(shape, SquareShape):
                out.append(",".join([
                    _id_to_text(shape.id), "square",
                    format_number(shape.x), format_number(shape.y),
                    format_number(shape.width), format_number(shape.height),
                    format_number(shape.rotation), str(int(shape.thickness)),
                ]))
        out.append("")

        out.append("[text]")
        for text in document.texts:
            out.append(",".join([
                quote_csv(text.label), quote_csv(text.text),
                format_number(text.x), format_number(text.y),
                quote_csv(text.font_name), str(int(text.size)),
                "True" if text.bold else "False", text.color,
            ]))
        out.append("")

        out.append("[mappings]")
        for name, position in document.id_to_position.items():
            out.append(f"{name}={position}")

        return "\n".join(out) + "\n"

    def _line_record(self, line: LineShape, detector: bool) -> str:
        fields = [_id_to_text(line.id)]
        if detector:
            fields.append("line")
        first, second = line.points[0], line.points[1]
        fields += [
            line.arrow_type.value,
            format_number(first.x), format_number(first.y),
            format_number(second.x), format_number(second.y),
            str(int(line.thickness)),
        ]
        for point in line.points[2:]:
            fields += [format_number(point.x), format_number(point.y)]
        fields.append(f"turn={format_number(line.turn_length)}")
        fields.append(f"edited={1 if line.type_edited else 0}")
        return ",".join(fields)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def parse(self, data: Union[str, bytes]) -> ParsedLayout:
        """
        Parse layout text into a ParsedLayout.

        Raises:
            LayoutParseError: if data cannot be read as text
        """
        text = self._as_text(data)
        result = ParsedLayout(image_file=self.settings.default_image_file)

        section = None
        for number, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line or line.startswith(COMMENT_STARTS):
                continue
            if line.startswith('[') and line.endswith(']'):
                section = line[1:-1].strip().lower()
                continue

            if section == "image":
                self._parse_image_line(line, result)
                continue

            record = None
            if section == "phases":
                record = self.parse_line_record(line, is_detector=False)
                if record is not None:
                    result.phases.append(record)
            elif section == "detectors":
                record = self.parse_detector_record(line)
                if record is not None:
                    result.detectors.append(record)
            elif section == "text":
                record = self.parse_text_record(line)
                if record is not None:
                    result.texts.append(record)
            elif section == "mappings":
                record = self._parse_mapping(line, result)
            else:
                logger.debug("Ignoring line %d outside known sections: %s", number, line)
                continue

            if record is None:
                result.skipped.append((number, line))
                logger.debug("Skipped malformed %s record on line %d: %s", section, number, line)

        return result

    def _as_text(self, data: Union[str, bytes]) -> str:
        if isinstance(data, (bytes, bytearray)):
            try:
                data = bytes(data).decode('utf-8-sig')
            except UnicodeDecodeError as e:
                raise LayoutParseError(f"Layout is not valid UTF-8 text: {e}") from e
        if not isinstance(data, str):
            raise LayoutParseError(f"Layout must be text, got {type(data).__name__}")
        if '\x00' in data:
            raise LayoutParseError("Layout contains binary data")
        return data.lstrip('\ufeff')

    def _parse_image_line(self, line: str, result: ParsedLayout) -> None:
        key, sep, value = line.partition('=')
        if sep and key.strip().lower() == "file":
            result.image_file = _unquote(value.strip())

    def _parse_mapping(self, line: str, result: ParsedLayout) -> Optional[bool]:
        key, sep, value = line.partition('=')
        key = key.strip()
        position = parse_int(value) if sep else None
        if not key or position is None:
            return None
        result.mappings[key] = position
        return True

    def parse_line_record(self, line: str, is_detector: bool = False) -> Optional[LineShape]:
        """
        Parse a phase or detector line record; None when it is malformed.

        Detector records may carry a kind marker (``line`` or an arrow
        token) before the arrow field, or omit it.
        """
        parts = [part.strip() for part in line.split(',')]
        if len(parts) < 7:
            return None

        shape_id = _id_from_text(parts[0])
        idx = 1
        if is_detector and not is_number(parts[1]):
            if parts[1].lower() == "line" and is_number(parts[2]):
                # marker without arrow field
                arrow_type = ArrowType.ARROW
                idx = 2
            elif not is_number(parts[2]):
                # marker followed by the arrow field
                arrow_type = ArrowType.parse(parts[2])
                idx = 3
            else:
                arrow_type = ArrowType.parse(parts[1])
                idx = 2
        else:
            arrow_type = ArrowType.parse(parts[1])
            idx = 2

        if idx + 5 > len(parts):
            return None
        x1, y1, x2, y2 = (parse_float(parts[idx + i]) for i in range(4))
        thickness = parse_int(parts[idx + 4])
        if None in (x1, y1, x2, y2) or thickness is None:
            return None
        idx += 5

        shape = LineShape(points=[Point(x1, y1), Point(x2, y2)], id=shape_id,
                          arrow_type=arrow_type, thickness=thickness,
                          turn_length=self.settings.turn_length)

        taking_points = True
        while idx < len(parts):
            token = parts[idx]
            if taking_points and idx + 1 < len(parts):
                px, py = parse_float(token), parse_float(parts[idx + 1])
                if px is not None and py is not None:
                    shape.points.append(Point(px, py))
                    idx += 2
                    continue
            taking_points = False

            lowered = token.lower()
            if lowered.startswith("turn="):
                turn = parse_float(token[5:])
                if turn is not None:
                    shape.turn_length = turn
            elif lowered.startswith("edited="):
                shape.type_edited = token[7:].strip().lower() in ("1", "true")
            # anything else is an unknown extension
            idx += 1

        return shape

    def parse_detector_record(self, line: str) -> Optional[Shape]:
        """Square records are recognised by their kind field; all else is a line."""
        parts = [part.strip() for part in line.split(',')]
        if len(parts) < 2:
            return None
        if parts[1].lower() != "square":
            return self.parse_line_record(line, is_detector=True)

        if len(parts) < 8:
            return None
        x, y, width, height, rotation = (parse_float(parts[i]) for i in range(2, 7))
        thickness = parse_int(parts[7])
        if None in (x, y, width, height, rotation) or thickness is None:
            return None
        square = SquareShape(x, y, width, height, thickness=thickness,
                             fill=self.settings.square_fill, id=_id_from_text(parts[0]))
        square.set_rotation(rotation)
        return square

    def parse_text_record(self, line: str) -> Optional[TextShape]:
        parts = split_csv(line)
        if len(parts) < 8:
            return None
        x, y = parse_float(parts[2]), parse_float(parts[3])
        size = parse_int(parts[5])
        bold = parse_bool(parts[6])
        if None in (x, y, size, bold):
            return None
        try:
            color = parse_color(parts[7])
        except ValueError:
            return None
        return TextShape(x, y, text=parts[1], label=parts[0], font_name=parts[4],
                         size=size, bold=bold, color=color)

    def load_into(self, document: LayoutDocument, data: Union[str, bytes]) -> ParsedLayout:
        """
        Parse data and replace the document's shapes with the result.

        The document is untouched when parsing raises.
        """
        parsed = self.parse(data)
        document.replace_with(parsed.image_file, parsed.phases, parsed.detectors,
                              parsed.texts, parsed.mappings)
        return parsed


# ----------------------------------------------------------------------
# Files
# ----------------------------------------------------------------------

def save_layout(document: LayoutDocument, filepath: Union[str, Path],
                codec: Optional[LayoutCodec] = None) -> str:
    """
    Write the layout text for document to filepath.

    Returns:
        The text that was written

    Raises:
        SerializationError: if the file cannot be written
    """
    codec = codec or LayoutCodec()
    text = codec.serialize(document)
    try:
        with open(filepath, 'w', encoding='utf-8', newline='\n') as f:
            f.write(text)
    except OSError as e:
        raise SerializationError(f"Failed to save layout to {filepath}: {e}") from e
    logger.info("Saved layout to %s", filepath)
    return text


def load_layout(document: LayoutDocument, filepath: Union[str, Path],
                codec: Optional[LayoutCodec] = None) -> ParsedLayout:
    """
    Read a layout file into document.

    Raises:
        LayoutParseError: if the file cannot be read as text
    """
    codec = codec or LayoutCodec()
    try:
        data = Path(filepath).read_bytes()
    except OSError as e:
        raise LayoutParseError(f"Could not read layout file {filepath}: {e}") from e
    parsed = codec.load_into(document, data)
    logger.info("Loaded layout %s: %d phases, %d detectors, %d texts (%d records skipped)",
                filepath, len(parsed.phases), len(parsed.detectors),
                len(parsed.texts), len(parsed.skipped))
    return parsed


def resolve_image_path(layout_path: Union[str, Path], image_file: str) -> Optional[Path]:
    """
    Locate the image a layout refers to.

    Relative names are resolved next to the layout file.

    Returns:
        Existing path, or None if the image is not there
    """
    if not image_file:
        return None
    candidate = Path(image_file)
    if not candidate.is_absolute():
        candidate = Path(layout_path).parent / candidate
    return candidate if candidate.is_file() else None
