#!/usr/bin/env python3
"""
Step extraction for recognized recipe text.
Groups lines into discrete instructions, strips numbering and bullets, joins
continuation lines and folds short OCR fragments into the preceding step.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ingredient_parser import (
    BULLET_MARKER,
    NUMBERED_MARKER,
    has_ingredient_cues,
    looks_like_ingredient,
    starts_with_cooking_verb,
    strip_bullet,
)


def looks_like_step(line: str) -> bool:
    """
    Determine whether a line reads like an enumerated instruction.

    Numbered lines always do. Bulleted lines do unless the bullet introduces
    an ingredient (a leading quantity, a unit or a staple noun).
    """
    if NUMBERED_MARKER.match(line or ""):
        return True
    if BULLET_MARKER.match(line or ""):
        body = strip_bullet(line)
        return starts_with_cooking_verb(body) or not has_ingredient_cues(body)
    return False


@dataclass
class _StepDraft:
    text: str
    numbered: bool


class StepExtractor:
    """Extracts ordered preparation steps."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize step extractor.

        Args:
            config: ``steps`` section of the formatter configuration
        """
        self.logger = logging.getLogger(__name__)
        self.config = {"short_step_threshold": 20}
        self.config.update(config or {})

    def extract_steps(self, step_lines: Sequence[str], all_lines: Sequence[str] = (),
                      from_header: bool = True, skip_indices: Iterable[int] = ()) -> List[str]:
        """
        Extract steps from the step section, or from the whole document.

        Args:
            step_lines: Content lines of the identified step section
            all_lines: Every line, scanned when the section yields nothing
            from_header: Whether the section was introduced by a header keyword;
                cooking verbs only open new steps when it was not
            skip_indices: Line indices the whole-document scan must ignore

        Returns:
            Step texts after the short-step merge
        """
        drafts = self._extract_from_section(step_lines, verbs_start_steps=not from_header)

        if not drafts and all_lines:
            self.logger.debug("No steps in section, scanning all %d lines", len(all_lines))
            drafts = self._extract_from_document(all_lines, set(skip_indices))

        steps = self.merge_short_steps(drafts)
        self.logger.debug("Extracted %d steps (%d before merge)", len(steps), len(drafts))
        return steps

    def _extract_from_section(self, lines: Sequence[str], verbs_start_steps: bool) -> List[_StepDraft]:
        drafts: List[_StepDraft] = []
        parts: List[str] = []
        numbered = False

        def flush():
            text = " ".join(parts).strip()
            if text:
                drafts.append(_StepDraft(text, numbered))

        for raw in lines:
            line = raw.strip()
            if not line:
                continue

            marker = self.step_marker(line)
            starts_new = marker is not None or (verbs_start_steps and starts_with_cooking_verb(line))

            if starts_new:
                flush()
                body = line[len(marker):].strip() if marker else line
                parts = [body] if body else []
                numbered = bool(marker) and bool(NUMBERED_MARKER.match(line))
            else:
                parts.append(line)

        flush()
        return drafts

    def _extract_from_document(self, lines: Sequence[str], skip: set) -> List[_StepDraft]:
        drafts: List[_StepDraft] = []
        parts: List[str] = []
        numbered = False

        def flush():
            text = " ".join(parts).strip()
            if text:
                drafts.append(_StepDraft(text, numbered))

        for index, raw in enumerate(lines):
            line = raw.strip()
            if index in skip or not line:
                flush()
                parts = []
                continue

            marker = self.step_marker(line)
            if marker is not None or starts_with_cooking_verb(line):
                flush()
                body = line[len(marker):].strip() if marker else line
                parts = [body] if body else []
                numbered = bool(marker) and bool(NUMBERED_MARKER.match(line))
            elif parts and line[0].islower() and not looks_like_ingredient(line):
                # Wrapped sentence of the open step
                parts.append(line)
            else:
                flush()
                parts = []

        flush()
        return drafts

    @staticmethod
    def step_marker(line: str) -> Optional[str]:
        """Return the leading numbering or bullet of a step line, if any."""
        match = NUMBERED_MARKER.match(line)
        if match:
            return match.group(0)
        if looks_like_step(line):
            return BULLET_MARKER.match(line).group(0)
        return None

    def merge_short_steps(self, drafts: Sequence[_StepDraft]) -> List[str]:
        """
        Fold steps shorter than the threshold into the preceding step.

        Steps opened by an explicit number are kept as written.
        """
        threshold = int(self.config.get("short_step_threshold", 20))
        merged: List[_StepDraft] = []
        for draft in drafts:
            if merged and not draft.numbered and len(draft.text) < threshold:
                merged[-1] = _StepDraft(f"{merged[-1].text} {draft.text}", merged[-1].numbered)
            else:
                merged.append(draft)
        return [draft.text for draft in merged]
