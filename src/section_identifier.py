#!/usr/bin/env python3
"""
Section identification for recognized recipe text.
Locates the ingredient block and the step block within the line sequence
using header keywords, with a consecutive-run fallback when a header is
missing, then reclaims stray ingredient lines from the leftover prose.
"""

import re
import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Sequence

from ingredient_parser import looks_like_ingredient, starts_with_cooking_verb
from recipe_types import Section, SectionKind, SectionLayout
from recipe_vocabulary import (
    INGREDIENT_SECTION_KEYWORDS,
    STEP_SECTION_KEYWORDS,
    STRONG_INGREDIENT_WORDS,
    UNICODE_FRACTIONS,
    words_pattern,
)
from step_extractor import looks_like_step


_STRONG_WORDS = words_pattern(STRONG_INGREDIENT_WORDS)
_FRACTION = re.compile(r"\d+\s*/\s*\d+|[" + "".join(UNICODE_FRACTIONS) + "]")


def find_longest_run(indices: Sequence[int]) -> List[int]:
    """
    Longest run of consecutive integers in an ascending index list.

    The earliest run wins a tie.
    """
    best: List[int] = []
    current: List[int] = []
    for index in indices:
        if current and index == current[-1] + 1:
            current.append(index)
        else:
            current = [index]
        if len(current) > len(best):
            best = list(current)
    return best


def is_step_like(line: str) -> bool:
    """Numbered, bulleted or imperative lines."""
    return looks_like_step(line) or starts_with_cooking_verb(line)


def has_strong_ingredient_signal(line: str) -> bool:
    """Measurement word, staple noun or fraction."""
    return bool(_STRONG_WORDS.search(line) or _FRACTION.search(line))


class SectionIdentifier:
    """Finds the ingredient and step sections of a recipe."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize section identifier.

        Args:
            config: ``sections`` section of the formatter configuration
        """
        self.logger = logging.getLogger(__name__)
        self.config = {
            "title_reserved_lines": 2,
            "min_ingredient_run": 3,
            "min_step_run": 2,
            "max_header_words": 6,
        }
        self.config.update(config or {})

        self.header_keywords = (
            (SectionKind.INGREDIENTS, INGREDIENT_SECTION_KEYWORDS),
            (SectionKind.STEPS, STEP_SECTION_KEYWORDS),
        )

    def header_kind(self, line: str) -> Optional[SectionKind]:
        """
        Return the section a header line introduces, or None.

        A header contains a keyword, is short (or ends in a colon) and does
        not read like a step itself, so "2. Mix the ingredients" is no header.
        """
        text = (line or "").strip()
        if not text or is_step_like(text):
            return None

        if len(text.split()) > self.config["max_header_words"] and not text.endswith(":"):
            return None

        lowered = text.lower()
        for kind, keywords in self.header_keywords:
            if any(keyword in lowered for keyword in keywords):
                return kind
        return None

    def is_section_header(self, line: str) -> bool:
        return self.header_kind(line) is not None

    def find_headers(self, lines: Sequence[str]) -> Dict[SectionKind, int]:
        """Index of the first header of each kind; later headers are ignored."""
        headers: Dict[SectionKind, int] = {}
        for index, line in enumerate(lines):
            kind = self.header_kind(line)
            if kind is not None and kind not in headers:
                headers[kind] = index
        return headers

    def identify(self, lines: Sequence[str], title_index: Optional[int] = None) -> SectionLayout:
        """
        Identify sections, then reclaim ingredient lines from Other.

        Args:
            lines: Corrected, non-blank lines
            title_index: Index of the title line, never reclassified

        Returns:
            Section layout tiling the line sequence
        """
        layout = self.classify(lines)
        layout = self.reclassify(lines, layout, title_index)

        self.logger.debug(
            "Sections: ingredients=%s (header=%s) steps=%s (header=%s) other=%d reclassified=%d",
            layout.ingredients, layout.ingredients_from_header,
            layout.steps, layout.steps_from_header,
            len(layout.other), len(layout.reclassified),
        )
        return layout

    def classify(self, lines: Sequence[str]) -> SectionLayout:
        """Primary pass: header boundaries plus the run-detection fallback."""
        count = len(lines)
        headers = self.find_headers(lines)

        sections: Dict[SectionKind, Section] = {}
        starts = sorted((index, kind) for kind, index in headers.items())
        for position, (start, kind) in enumerate(starts):
            end = starts[position + 1][0] if position + 1 < len(starts) else count
            sections[kind] = Section(kind, start, end)

        fallbacks = (
            (SectionKind.INGREDIENTS, looks_like_ingredient, self.config["min_ingredient_run"]),
            (SectionKind.STEPS, is_step_like, self.config["min_step_run"]),
        )
        for kind, predicate, min_length in fallbacks:
            if kind in headers:
                continue
            run = self._fallback_run(lines, kind, predicate, min_length, set(headers.values()))
            if run is not None:
                sections = self._place_run(sections, run)

        layout = SectionLayout(
            line_count=count,
            ingredients=sections.get(SectionKind.INGREDIENTS),
            steps=sections.get(SectionKind.STEPS),
            ingredients_from_header=SectionKind.INGREDIENTS in headers,
            steps_from_header=SectionKind.STEPS in headers,
        )
        other = tuple(index for index in range(count) if layout.kind_of(index) is SectionKind.OTHER)
        return replace(layout, other=other)

    def _fallback_run(self, lines: Sequence[str], kind: SectionKind, predicate: Callable[[str], bool],
                      min_length: int, header_indices) -> Optional[Section]:
        reserved = self.config["title_reserved_lines"]
        candidates = [
            index for index, line in enumerate(lines)
            if index >= reserved and index not in header_indices and predicate(line)
        ]
        run = find_longest_run(candidates)
        if len(run) < max(min_length, 1):
            return None

        self.logger.debug("Fallback %s run at lines %d-%d", kind.value, run[0], run[-1])
        return Section(kind, run[0], run[-1] + 1)

    def _place_run(self, sections: Dict[SectionKind, Section], run: Section) -> Dict[SectionKind, Section]:
        """
        Fit a fallback run next to the sections already placed without overlap.

        A section the run starts inside is cut at the run's first line; a run
        that reaches into a section is cut at that section's first line.
        """
        placed = dict(sections)
        for kind, section in sections.items():
            if section.start < run.start < section.end:
                placed[kind] = Section(kind, section.start, run.start)
                self.logger.debug("Cut %s section at line %d", kind.value, run.start)
            elif run.start <= section.start < run.end:
                run = Section(run.kind, run.start, section.start)
                self.logger.debug("Cut %s run at line %d", run.kind.value, section.start)
        if len(run):
            placed[run.kind] = run
        return placed

    def reclassify(self, lines: Sequence[str], layout: SectionLayout,
                   title_index: Optional[int] = None) -> SectionLayout:
        """
        Second pass: move Other lines with strong ingredient signals out of Other.

        The title, header lines and step-like lines are left in place.
        """
        moved = tuple(
            index for index in layout.other
            if index != title_index
            and not self.is_section_header(lines[index])
            and not is_step_like(lines[index])
            and has_strong_ingredient_signal(lines[index])
        )
        if not moved:
            return layout

        other = tuple(index for index in layout.other if index not in moved)
        return replace(layout, other=other, reclassified=moved)

    @staticmethod
    def content_indices(section: Optional[Section], from_header: bool) -> List[int]:
        """Line indices inside a section, without its header line."""
        if section is None:
            return []
        start = section.start + 1 if from_header else section.start
        return list(range(start, section.end))
