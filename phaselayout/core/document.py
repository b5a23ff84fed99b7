"""
PhaseLayout Document Model

The LayoutDocument is the root container for everything a layout file holds:
phase lines, detectors, text labels and the position mapping table, plus the
phase/detector names imported from an external definition document.
"""

from collections.abc import MutableMapping
from typing import Dict, Iterator, List, Optional, Tuple, TYPE_CHECKING
import logging

from .shapes import ArrowType, LineShape, Shape, SquareShape, TextShape

if TYPE_CHECKING:
    from ..io.definitions import Definitions

logger = logging.getLogger(__name__)


class CaseInsensitiveDict(MutableMapping):
    """
    Mapping with case-insensitive string keys.

    The spelling used when a key is first inserted is kept for iteration.
    """

    def __init__(self, data=None):
        self._store: Dict[str, Tuple[str, object]] = {}
        if data:
            self.update(data)

    def __setitem__(self, key: str, value) -> None:
        folded = key.casefold()
        original = self._store[folded][0] if folded in self._store else key
        self._store[folded] = (original, value)

    def __getitem__(self, key: str):
        return self._store[key.casefold()][1]

    def __delitem__(self, key: str) -> None:
        del self._store[key.casefold()]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key) -> bool:
        return isinstance(key, str) and key.casefold() in self._store

    def copy(self) -> 'CaseInsensitiveDict':
        return CaseInsensitiveDict(self.items())

    def __repr__(self) -> str:
        return f"CaseInsensitiveDict({dict(self.items())!r})"


class LayoutDocument:
    """
    The document containing all layout data.

    A shape lives in exactly one of ``phases``, ``detectors`` or ``texts``.
    Membership is checked by identity so two equal-looking shapes are
    never confused.
    """

    def __init__(self, image_file: str = "layout.png"):
        self.image_file: str = image_file
        self.phases: List[LineShape] = []
        self.detectors: List[Shape] = []      # LineShape or SquareShape
        self.texts: List[TextShape] = []
        self.id_to_position: CaseInsensitiveDict = CaseInsensitiveDict()

        # Imported definitions
        self.phase_names: List[str] = []
        self.detector_names: List[str] = []
        self.default_arrow_by_phase: CaseInsensitiveDict = CaseInsensitiveDict()

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def all_shapes(self) -> List[Shape]:
        """Flatten all shapes in draw order (phases, detectors, texts)."""
        return [*self.phases, *self.detectors, *self.texts]

    def collection_of(self, shape: Optional[Shape]) -> Optional[List]:
        """Return the list that owns shape, or None."""
        if shape is None:
            return None
        for collection in (self.phases, self.detectors, self.texts):
            if any(item is shape for item in collection):
                return collection
        return None

    def contains(self, shape: Optional[Shape]) -> bool:
        return self.collection_of(shape) is not None

    def is_phase(self, shape: Shape) -> bool:
        return self.collection_of(shape) is self.phases

    def add_phase(self, line: LineShape) -> None:
        if not isinstance(line, LineShape):
            raise TypeError(f"Phases must be lines, got {type(line).__name__}")
        self.phases.append(line)

    def add_detector(self, shape: Shape) -> None:
        if not isinstance(shape, (LineShape, SquareShape)):
            raise TypeError(f"Detectors must be lines or squares, got {type(shape).__name__}")
        self.detectors.append(shape)

    def add_text(self, text: TextShape) -> None:
        if not isinstance(text, TextShape):
            raise TypeError(f"Expected TextShape, got {type(text).__name__}")
        self.texts.append(text)

    def remove(self, shape: Shape) -> bool:
        """Remove shape from whichever collection holds it."""
        collection = self.collection_of(shape)
        if collection is None:
            return False
        for index, item in enumerate(collection):
            if item is shape:
                del collection[index]
                break
        return True

    def move_to_detectors(self, line: LineShape) -> None:
        """Move a phase line into the detector collection."""
        if self.is_phase(line):
            self.remove(line)
            self.detectors.append(line)

    def move_to_phases(self, line: LineShape) -> None:
        """Move a detector line into the phase collection."""
        if self.collection_of(line) is self.detectors:
            self.remove(line)
            self.phases.append(line)

    def clear_shapes(self) -> None:
        self.phases.clear()
        self.detectors.clear()
        self.texts.clear()

    def replace_with(self, image_file: str, phases: List[LineShape],
                     detectors: List[Shape], texts: List[TextShape],
                     mappings: 'CaseInsensitiveDict') -> None:
        """Swap in freshly parsed content in one step."""
        self.image_file = image_file
        self.phases[:] = phases
        self.detectors[:] = detectors
        self.texts[:] = texts
        # Mappings from the file are merged over the current table
        for key, value in mappings.items():
            self.id_to_position[key] = value

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def apply_definitions(self, definitions: 'Definitions') -> None:
        """
        Replace the imported name lists and apply default arrow types.

        Phase lines whose type was edited by hand keep their type.
        """
        self.phase_names = list(definitions.phase_names)
        self.detector_names = list(definitions.detector_names)

        self.id_to_position.clear()
        for index, name in enumerate(self.phase_names):
            self.id_to_position[name] = index
        for index, name in enumerate(self.detector_names):
            self.id_to_position[name] = index

        self.default_arrow_by_phase = CaseInsensitiveDict(definitions.default_arrow_by_phase)

        for line in self.phases:
            if not line.type_edited and line.id.strip():
                default = self.default_arrow_by_phase.get(line.id)
                if default is not None:
                    line.arrow_type = default

        logger.info("Applied definitions: %d phases, %d detectors",
                    len(self.phase_names), len(self.detector_names))

    def default_arrow_for(self, phase_id: str) -> Optional[ArrowType]:
        return self.default_arrow_by_phase.get(phase_id) if phase_id else None

    def is_known_phase(self, name: str) -> bool:
        if not name:
            return False
        folded = name.casefold()
        return any(phase.casefold() == folded for phase in self.phase_names)

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def phase_counts(self) -> List[Tuple[str, int, str]]:
        """Rows of (phase name, number of lines, default arrow token)."""
        counts: Dict[str, int] = {}
        for line in self.phases:
            key = line.id.casefold()
            counts[key] = counts.get(key, 0) + 1
        rows = []
        for name in self.phase_names:
            default = self.default_arrow_by_phase.get(name)
            rows.append((name, counts.get(name.casefold(), 0),
                         default.value if default is not None else ""))
        return rows

    def detector_counts(self) -> List[Tuple[str, int, str]]:
        """Rows of (detector name, number of shapes, "Detector")."""
        counts: Dict[str, int] = {}
        for shape in self.detectors:
            if not shape.id.strip():
                continue
            key = shape.id.casefold()
            counts[key] = counts.get(key, 0) + 1
        return [(name, counts.get(name.casefold(), 0), "Detector")
                for name in self.detector_names]
