"""
Data model for recipe text formatting.
Recognition input as produced by an OCR engine, the formatted recipe output,
and the section ranges used while recovering document structure.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from error_handling import InvalidRecognitionInputError


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle of a recognized line, in image pixels."""
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def center_y(self) -> float:
        return (self.y1 + self.y2) / 2

    @classmethod
    def from_value(cls, value: Any) -> Optional["BoundingBox"]:
        """
        Build a box from a dict or a 4-sequence.

        Accepts ``{"x1", "y1", "x2", "y2"}``, ``{"left", "top", "right", "bottom"}``
        or ``[x1, y1, x2, y2]``. ``None`` means no spatial data.
        """
        if value is None:
            return None

        if isinstance(value, Mapping):
            if all(key in value for key in ("x1", "y1", "x2", "y2")):
                coords = [value["x1"], value["y1"], value["x2"], value["y2"]]
            elif all(key in value for key in ("left", "top", "right", "bottom")):
                coords = [value["left"], value["top"], value["right"], value["bottom"]]
            else:
                raise InvalidRecognitionInputError(
                    "Bounding box needs x1/y1/x2/y2 or left/top/right/bottom",
                    details={"bounding_box": dict(value)},
                )
        elif isinstance(value, (list, tuple)) and len(value) == 4:
            coords = list(value)
        else:
            raise InvalidRecognitionInputError(
                "Bounding box must be a mapping or a sequence of four numbers",
                details={"bounding_box": repr(value)},
            )

        if not all(isinstance(c, (int, float)) and not isinstance(c, bool) for c in coords):
            raise InvalidRecognitionInputError(
                "Bounding box coordinates must be numbers",
                details={"bounding_box": repr(value)},
            )

        x1, y1, x2, y2 = coords
        if x2 < x1 or y2 < y1:
            raise InvalidRecognitionInputError(
                "Bounding box corners are inverted",
                details={"bounding_box": coords},
            )

        return cls(float(x1), float(y1), float(x2), float(y2))

    def to_dict(self) -> Dict[str, float]:
        return {"x1": self.x1, "y1": self.y1, "x2": self.x2, "y2": self.y2}


@dataclass(frozen=True)
class LineObservation:
    """A recognized text line, optionally with its position on the image."""
    text: str
    bounding_box: Optional[BoundingBox] = None


@dataclass(frozen=True)
class RawRecognitionResult:
    """OCR engine output consumed by the formatter."""
    full_text: str
    lines: Tuple[LineObservation, ...] = ()

    @property
    def has_spatial_data(self) -> bool:
        return any(line.bounding_box is not None for line in self.lines)

    @classmethod
    def from_text(cls, text: str) -> "RawRecognitionResult":
        return cls(full_text=text or "")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawRecognitionResult":
        """
        Build a recognition result from a JSON-style envelope.

        Args:
            data: ``{"full_text": str, "lines": [{"text": str, "bounding_box": ...}]}``

        Returns:
            Recognition result

        Raises:
            InvalidRecognitionInputError: if the envelope is malformed
        """
        if not isinstance(data, Mapping):
            raise InvalidRecognitionInputError("Recognition envelope must be an object")

        full_text = data.get("full_text", data.get("text"))
        if not isinstance(full_text, str):
            raise InvalidRecognitionInputError(
                "Recognition envelope needs a 'full_text' string",
                details={"keys": sorted(data.keys())},
            )

        raw_lines = data.get("lines") or []
        if not isinstance(raw_lines, list):
            raise InvalidRecognitionInputError("'lines' must be a list")

        lines = []
        for position, raw_line in enumerate(raw_lines):
            if not isinstance(raw_line, Mapping) or not isinstance(raw_line.get("text"), str):
                raise InvalidRecognitionInputError(
                    "Each line needs a 'text' string",
                    details={"line": position},
                )
            box = raw_line.get("bounding_box", raw_line.get("boundingBox"))
            lines.append(LineObservation(raw_line["text"], BoundingBox.from_value(box)))

        return cls(full_text=full_text, lines=tuple(lines))


@dataclass(frozen=True)
class Ingredient:
    """Ingredient with a free-form quantity string."""
    name: str
    quantity: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "quantity": self.quantity}


@dataclass(frozen=True)
class FormattedRecipe:
    """Structured recipe recovered from recognized text."""
    title: str = ""
    description: str = ""
    ingredients: Tuple[Ingredient, ...] = ()
    steps: Tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not (self.title or self.description or self.ingredients or self.steps)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "ingredients": [ingredient.to_dict() for ingredient in self.ingredients],
            "steps": list(self.steps),
        }


class SectionKind(Enum):
    INGREDIENTS = "ingredients"
    STEPS = "steps"
    OTHER = "other"


@dataclass(frozen=True)
class Section:
    """Half-open range [start, end) over the line sequence."""
    kind: SectionKind
    start: int
    end: int

    def __len__(self) -> int:
        return max(self.end - self.start, 0)

    def __contains__(self, index: int) -> bool:
        return self.start <= index < self.end

    def indices(self) -> range:
        return range(self.start, self.end)


@dataclass(frozen=True)
class SectionLayout:
    """Result of section identification over a line sequence."""
    line_count: int
    ingredients: Optional[Section] = None
    steps: Optional[Section] = None
    ingredients_from_header: bool = False
    steps_from_header: bool = False
    other: Tuple[int, ...] = ()
    reclassified: Tuple[int, ...] = ()

    def sections(self) -> List[Section]:
        """Tile [0, line_count) with tagged sections, in line order."""
        named = sorted(
            (section for section in (self.ingredients, self.steps) if section is not None and len(section)),
            key=lambda section: section.start,
        )
        tiles: List[Section] = []
        cursor = 0
        for section in named:
            if section.start > cursor:
                tiles.append(Section(SectionKind.OTHER, cursor, section.start))
            tiles.append(section)
            cursor = section.end
        if cursor < self.line_count:
            tiles.append(Section(SectionKind.OTHER, cursor, self.line_count))
        return tiles

    def kind_of(self, index: int) -> SectionKind:
        for section in (self.ingredients, self.steps):
            if section is not None and index in section:
                return section.kind
        return SectionKind.OTHER


@dataclass
class FormattingTrace:
    """Diagnostics collected during one formatting run."""
    line_count: int = 0
    spatial_lines: int = 0
    layout: Optional[SectionLayout] = None
    notes: List[str] = field(default_factory=list)


def normalize_key(text: str) -> str:
    """Lowercased, trimmed comparison key."""
    return (text or "").strip().lower()


def distinct_by(items, key):
    """Drop later items whose key was already seen, preserving order."""
    seen = set()
    unique = []
    for item in items:
        marker = key(item)
        if marker in seen:
            continue
        seen.add(marker)
        unique.append(item)
    return unique
