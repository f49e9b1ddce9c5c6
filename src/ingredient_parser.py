#!/usr/bin/env python3
"""
Ingredient extraction for recognized recipe text.
Parses candidate lines into (quantity, name) pairs through an ordered cascade
of patterns, reads ingredient rows from line bounding boxes when available,
and consolidates fragments that OCR split across lines.
"""

import re
import logging
from collections import OrderedDict
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from recipe_types import BoundingBox, Ingredient, distinct_by, normalize_key
from recipe_vocabulary import (
    BULLET_CHARACTERS,
    COMMON_INGREDIENTS,
    CONSOLIDATION_STEMS,
    COOKING_VERBS,
    MEASUREMENT_UNITS,
    SHORT_UNITS,
    UNICODE_FRACTIONS,
    words_pattern,
)
from text_cleaner import TextCleaner


QUANTITY = r"\d+(?:[\d.,/-]|\s+(?=[\d/-]))*"
VULGAR_FRACTIONS = "".join(UNICODE_FRACTIONS)

NUMBERED_MARKER = re.compile(
    r"^\s*(?:step\s*\d+\s*[.):]?|\d+\s*[.):](?!\d)|(?:[ivx]{1,4})[.)](?=\s))\s*",
    re.IGNORECASE,
)
BULLET_MARKER = re.compile(rf"^\s*[{re.escape(BULLET_CHARACTERS)}]+\s*")
_FRAGMENT_WORDS = re.compile(r"\b(?:granulated|purpose|flour|sugar|cups?)\b", re.IGNORECASE)
_UNIT_WORDS = words_pattern(MEASUREMENT_UNITS + tuple(unit + "s" for unit in MEASUREMENT_UNITS))
_NUMBER_THEN_UNIT = re.compile(
    r"\d\s*(?:" + "|".join(re.escape(u) for u in MEASUREMENT_UNITS) + r")s?\b", re.IGNORECASE
)
_COMMON_INGREDIENT_WORDS = re.compile(
    r"\b(?:" + "|".join(re.escape(w) for w in COMMON_INGREDIENTS) + r")", re.IGNORECASE
)
_LEADING_QUANTITY = re.compile(rf"^\s*[\d{VULGAR_FRACTIONS}]+")
_VERB_START = re.compile(
    r"^\s*(?:" + "|".join(re.escape(v) for v in COOKING_VERBS) + r")\b", re.IGNORECASE
)


def strip_bullet(line: str) -> str:
    """Remove a leading bullet marker."""
    return BULLET_MARKER.sub("", line or "", count=1).strip()


def is_numbered_step(line: str) -> bool:
    """True for lines opening with "1.", "2)", "Step 3" or a roman numeral like "iv."."""
    return bool(NUMBERED_MARKER.match(line or ""))


def has_ingredient_cues(text: str) -> bool:
    """
    Check the lexical cues of an ingredient line.

    Digits, fraction characters, a measurement unit or a common ingredient noun.
    """
    trimmed = (text or "").strip()
    if len(trimmed) < 3:
        return False

    if _FRAGMENT_WORDS.search(trimmed):
        return True

    # A lone "q" is usually a misread quantity
    if trimmed == "q" or trimmed.startswith("q "):
        return True

    if any(ch.isdigit() for ch in trimmed):
        return True

    if "/" in trimmed or any(frac in trimmed for frac in VULGAR_FRACTIONS):
        return True

    if _UNIT_WORDS.search(trimmed) or _NUMBER_THEN_UNIT.search(trimmed):
        return True

    if _COMMON_INGREDIENT_WORDS.search(trimmed):
        return True

    return bool(_LEADING_QUANTITY.match(trimmed))


def looks_like_ingredient(line: str) -> bool:
    """Determine whether a line reads like an ingredient entry."""
    if is_numbered_step(line):
        return False

    body = strip_bullet(line)
    if _VERB_START.match(body):
        return False

    return has_ingredient_cues(body)


def starts_with_cooking_verb(line: str) -> bool:
    return bool(_VERB_START.match(strip_bullet(line)))


IngredientRule = Callable[[str], Optional[Ingredient]]


class IngredientParser:
    """Parser for extracting ingredients from recipe lines."""

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 text_cleaner: Optional[TextCleaner] = None):
        """
        Initialize ingredient parser.

        Args:
            config: ``spatial`` section of the formatter configuration
            text_cleaner: Shared cleaner used for fraction normalization
        """
        self.logger = logging.getLogger(__name__)
        self.config = {"enabled": True, "row_tolerance": 0.5, "max_gap_ratio": 2.0}
        self.config.update(config or {})
        self.text_cleaner = text_cleaner or TextCleaner()

        self._compile_patterns()
        self.rules: Tuple[Tuple[str, IngredientRule], ...] = (
            ("quantity_unit", self._match_quantity_unit),
            ("leading_quantity", self._match_leading_quantity),
            ("leading_fraction", self._match_leading_fraction),
            ("unit_of_name", self._match_unit_of_name),
            ("unit_scan", self._match_unit_anywhere),
            ("whole_line", self._match_whole_line),
        )

    def _compile_patterns(self):
        """Compile regex patterns for the parsing cascade."""
        short_units = "|".join(re.escape(unit) for unit in SHORT_UNITS)
        all_units = "|".join(re.escape(unit) for unit in MEASUREMENT_UNITS)

        self.quantity_unit_pattern = re.compile(
            rf"^\s*({QUANTITY}\s*(?:{short_units})s?)\b\.?\s+(.+)$", re.IGNORECASE
        )
        self.leading_quantity_pattern = re.compile(
            rf"^\s*({QUANTITY}\s*(?:[a-zA-Z]+)?(?:\s+[a-zA-Z]+)?)\s+(.+)$"
        )
        self.leading_fraction_pattern = re.compile(
            rf"^\s*([0-9]\s*/\s*[0-9]|[{VULGAR_FRACTIONS}])\s+(.+)$"
        )
        self.unit_of_pattern = re.compile(rf"\b({all_units})s?\s+of\s+(.+)$", re.IGNORECASE)
        self.unit_scan_patterns = tuple(
            (unit, re.compile(rf"({QUANTITY})\s*({re.escape(unit)})\b\.?\s+(.+)$", re.IGNORECASE))
            for unit in MEASUREMENT_UNITS
        )

    # Cascade rules

    def _match_quantity_unit(self, line: str) -> Optional[Ingredient]:
        match = self.quantity_unit_pattern.match(line)
        if match:
            return self._build(match.group(2), match.group(1))
        return None

    def _match_leading_quantity(self, line: str) -> Optional[Ingredient]:
        match = self.leading_quantity_pattern.match(line)
        if match:
            return self._build(match.group(2), match.group(1))
        return None

    def _match_leading_fraction(self, line: str) -> Optional[Ingredient]:
        match = self.leading_fraction_pattern.match(line)
        if match:
            return self._build(match.group(2), match.group(1))
        return None

    def _match_unit_of_name(self, line: str) -> Optional[Ingredient]:
        match = self.unit_of_pattern.search(line)
        if not match:
            return None

        unit = match.group(1)
        number = re.search(rf"({QUANTITY}?)\s*{re.escape(unit)}s?\b", line, re.IGNORECASE)
        if number and number.group(1).strip():
            quantity = f"{number.group(1).strip()} {unit}"
        else:
            quantity = unit
        return self._build(match.group(2), quantity)

    def _match_unit_anywhere(self, line: str) -> Optional[Ingredient]:
        for _, pattern in self.unit_scan_patterns:
            match = pattern.search(line)
            if match:
                return self._build(match.group(3), f"{match.group(1).strip()} {match.group(2)}")
        return None

    def _match_whole_line(self, line: str) -> Optional[Ingredient]:
        if looks_like_ingredient(line):
            return self._build(line, "")
        return None

    def _build(self, name: str, quantity: str) -> Optional[Ingredient]:
        name = self._clean_name(name)
        if not name:
            return None
        return Ingredient(name=name, quantity=self._clean_quantity(quantity))

    @staticmethod
    def _clean_name(name: str) -> str:
        name = re.sub(r"\s+", " ", (name or "").strip())
        name = re.sub(r"^of\s+", "", name, flags=re.IGNORECASE)
        return re.sub(r"[,;:]+$", "", name).strip()

    @staticmethod
    def _clean_quantity(quantity: str) -> str:
        quantity = re.sub(r"\s+", " ", (quantity or "").strip())
        return quantity.rstrip(",-").strip()

    # Public API

    def prepare_line(self, line: str) -> str:
        """Normalize fractions and drop list bullets before matching."""
        return strip_bullet(self.text_cleaner.normalize_fractions(line))

    def parse_ingredient_line(self, line: str) -> Optional[Ingredient]:
        """
        Parse a single line through the pattern cascade.

        Args:
            line: Corrected line text

        Returns:
            Ingredient from the first rule that matches, or None
        """
        prepared = self.prepare_line(line)
        if not prepared:
            return None

        for rule_name, rule in self.rules:
            ingredient = rule(prepared)
            if ingredient is not None:
                self.logger.debug("Rule %s matched %r", rule_name, prepared)
                return ingredient
        return None

    def parse_ingredient_list(self, lines: Iterable[str]) -> List[Ingredient]:
        """Text-line strategy: run the cascade over every section line."""
        results = []
        for line in lines:
            ingredient = self.parse_ingredient_line(line)
            if ingredient is not None:
                results.append(ingredient)
        return results

    def extract_from_spatial_layout(self, spatial_lines: Sequence[Tuple[str, Optional[BoundingBox]]],
                                    excluded: Optional[Set[str]] = None) -> List[Ingredient]:
        """
        Spatial-layout strategy over the recognized line boxes.

        Args:
            spatial_lines: (corrected text, bounding box) pairs
            excluded: Normalized texts that must not be read as ingredients

        Returns:
            Ingredients read from rows that look like ingredients
        """
        if not self.config.get("enabled", True):
            return []

        boxed = [(text.strip(), box) for text, box in spatial_lines if box is not None and text and text.strip()]
        if not boxed:
            return []

        excluded = excluded or set()
        results = []
        for row in self.group_rows(boxed):
            if normalize_key(row) in excluded or not looks_like_ingredient(row):
                continue
            ingredient = self.parse_ingredient_line(row)
            if ingredient is not None:
                results.append(ingredient)

        self.logger.debug("Spatial layout yielded %d ingredients from %d boxed lines", len(results), len(boxed))
        return results

    def group_rows(self, boxed: Sequence[Tuple[str, BoundingBox]]) -> List[str]:
        """
        Read boxes top to bottom, joining side-by-side boxes on the same row.

        Boxes share a row when their vertical centers are within
        ``row_tolerance`` line heights and the horizontal gap between them is
        at most ``max_gap_ratio`` line heights.
        """
        ordered = sorted(boxed, key=lambda item: (item[1].y1, item[1].x1))
        tolerance = float(self.config.get("row_tolerance", 0.5))
        max_gap = float(self.config.get("max_gap_ratio", 2.0))

        rows: List[List[Tuple[str, BoundingBox]]] = []
        for text, box in ordered:
            if rows:
                row = rows[-1]
                _, last_box = max(row, key=lambda item: item[1].x2)
                height = max(box.height, last_box.height, 1.0)
                same_row = abs(box.center_y - last_box.center_y) <= tolerance * height
                gap = box.x1 - last_box.x2
                if same_row and 0 <= gap <= max_gap * height:
                    row.append((text, box))
                    continue
            rows.append([(text, box)])

        return [" ".join(text for text, _ in sorted(row, key=lambda item: item[1].x1)) for row in rows]

    def consolidate_ingredients(self, ingredients: Sequence[Ingredient]) -> List[Ingredient]:
        """
        Merge fragments that share a coarse grouping key.

        Groups keep first-appearance order; a merged entry joins the fragment
        names with spaces and takes the first non-blank quantity.
        """
        groups: "OrderedDict[str, List[Ingredient]]" = OrderedDict()
        for ingredient in ingredients:
            groups.setdefault(self.grouping_key(ingredient.name), []).append(ingredient)

        result = []
        for group in groups.values():
            if len(group) == 1:
                result.append(group[0])
                continue
            name = " ".join(item.name for item in group).strip()
            quantity = next((item.quantity for item in group if item.quantity.strip()), "")
            result.append(Ingredient(name=name, quantity=quantity))
        return result

    @staticmethod
    def grouping_key(name: str) -> str:
        lowered = (name or "").lower()
        for key, stems in CONSOLIDATION_STEMS:
            if any(stem in lowered for stem in stems):
                return key
        return lowered[:3].strip()

    def extract_ingredients(self, section_lines: Sequence[str],
                            spatial_lines: Sequence[Tuple[str, Optional[BoundingBox]]] = (),
                            excluded: Optional[Set[str]] = None) -> List[Ingredient]:
        """
        Run both strategies, drop duplicate names and consolidate fragments.

        Args:
            section_lines: Lines of the ingredient section plus reclaimed lines
            spatial_lines: Spatial line view; may be empty
            excluded: Normalized texts the spatial strategy must skip

        Returns:
            Consolidated ingredient list
        """
        spatial = self.extract_from_spatial_layout(spatial_lines, excluded) if spatial_lines else []
        textual = self.parse_ingredient_list(section_lines)

        combined = distinct_by(spatial + textual, lambda item: normalize_key(item.name))
        consolidated = self.consolidate_ingredients(combined)
        self.logger.debug(
            "Ingredients: %d spatial, %d textual, %d after consolidation",
            len(spatial), len(textual), len(consolidated),
        )
        return consolidated
