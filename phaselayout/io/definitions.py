"""
Phase/Detector Definition Import for PhaseLayout

Reads the controller configuration export (CPF/XML) and extracts the
ordered phase names, detector names and each phase's default arrow type.

The document is a set of ``Table`` elements; each has ``Column`` children
holding ``Data`` values row by row:

    <Table Name="XSG">
      <Column Name="Name"><Data>A</Data><Data>B</Data></Column>
      <Column Name="LampSymbol"><Data>Default</Data><Data>Toucan</Data></Column>
    </Table>
    <Table Name="XDET">
      <Column Name="Name"><Data>D1</Data></Column>
    </Table>
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union
from xml.etree import ElementTree as ET
import logging

from ..core.errors import DefinitionImportError
from ..core.shapes import ArrowType

logger = logging.getLogger(__name__)

PHASE_TABLE = "XSG"
DETECTOR_TABLE = "XDET"


@dataclass
class Definitions:
    """Names and defaults supplied by an external definition document."""
    phase_names: List[str] = field(default_factory=list)
    detector_names: List[str] = field(default_factory=list)
    default_arrow_by_phase: Dict[str, ArrowType] = field(default_factory=dict)
    lamp_symbol_by_phase: Dict[str, str] = field(default_factory=dict)


def arrow_from_lamp_symbol(symbol: Optional[str]) -> Optional[ArrowType]:
    """
    Map a lamp symbol to a default arrow type.

    ``Default`` is a plain arrow, ``Pedestrian`` and ``Toucan`` are
    crossings, anything else must name an ArrowType exactly
    (case-insensitive). Unknown symbols have no default.
    """
    if not symbol or not symbol.strip():
        return None
    symbol = symbol.strip()
    lowered = symbol.lower()
    if lowered == "default":
        return ArrowType.ARROW
    if lowered in ("pedestrian", "toucan"):
        return ArrowType.PED_CROSSING
    for arrow_type in ArrowType:
        if arrow_type.value.lower() == lowered:
            return arrow_type
    return None


def _tables(root: ET.Element, name: str) -> List[ET.Element]:
    return [table for table in root.iter("Table") if table.get("Name") == name]


def _column_values(table: ET.Element, column_name: str) -> List[str]:
    """Data values of the first column with the given name (blanks kept)."""
    for column in table.iter("Column"):
        if column.get("Name") == column_name:
            return [(data.text or "").strip() for data in column.iter("Data")]
    return []


def _all_names(root: ET.Element, table_name: str) -> List[str]:
    names = []
    for table in _tables(root, table_name):
        for column in table.iter("Column"):
            if column.get("Name") != "Name":
                continue
            names.extend(value for value in
                         ((data.text or "").strip() for data in column.iter("Data"))
                         if value)
    return names


def parse_definitions(root: ET.Element) -> Definitions:
    """Extract Definitions from a parsed XML tree."""
    definitions = Definitions(
        phase_names=_all_names(root, PHASE_TABLE),
        detector_names=_all_names(root, DETECTOR_TABLE),
    )

    phase_tables = _tables(root, PHASE_TABLE)
    if phase_tables:
        table = phase_tables[0]
        names = _column_values(table, "Name")
        symbols = _column_values(table, "LampSymbol")
        for name, symbol in zip(names, symbols):
            if not name:
                continue
            definitions.lamp_symbol_by_phase[name] = symbol
            arrow_type = arrow_from_lamp_symbol(symbol)
            if arrow_type is not None:
                definitions.default_arrow_by_phase[name] = arrow_type

    return definitions


def import_definitions(source: Union[str, Path]) -> Definitions:
    """
    Import definitions from a file path or an XML string.

    Raises:
        DefinitionImportError: if the source cannot be read or is not XML
    """
    try:
        if isinstance(source, Path) or not str(source).lstrip().startswith('<'):
            root = ET.parse(str(source)).getroot()
        else:
            root = ET.fromstring(source)
    except ET.ParseError as e:
        raise DefinitionImportError(f"Malformed definition document: {e}") from e
    except OSError as e:
        raise DefinitionImportError(f"Could not read definition document {source}: {e}") from e

    definitions = parse_definitions(root)
    logger.info("Imported %d phases and %d detectors",
                len(definitions.phase_names), len(definitions.detector_names))
    return definitions
