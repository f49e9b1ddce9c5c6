#!/usr/bin/env python3
"""
OCR error correction for recognized recipe text.
Applies the fixed misreading table before any structural analysis, and
normalizes vulgar fractions ahead of ingredient pattern matching.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple

from recipe_vocabulary import OCR_CORRECTIONS, UNICODE_FRACTIONS


@dataclass
class CleaningResult:
    """Text cleaning result with metadata."""
    original_text: str
    cleaned_text: str
    corrections_made: List[str] = field(default_factory=list)


class TextCleaner:
    """OCR text correction using a fixed misreading table."""

    def __init__(self, corrections: Optional[Mapping[str, str]] = None):
        """
        Initialize text cleaner.

        Args:
            corrections: Misreading -> correction table; defaults to the built-in table
        """
        self.logger = logging.getLogger(__name__)
        table = OCR_CORRECTIONS if corrections is None else corrections
        self._compile_patterns(table)

    def _compile_patterns(self, table: Mapping[str, str]):
        """Compile one case-insensitive whole-word pattern per rule, in table order."""
        self.rules: Tuple[Tuple[re.Pattern, str], ...] = tuple(
            (re.compile(rf"(?<!\w){re.escape(wrong)}(?!\w)", re.IGNORECASE), correct)
            for wrong, correct in table.items()
            if wrong.lower() != correct.lower()
        )
        self.fraction_spacing_pattern = re.compile(r"(\d)\s*/\s*(\d)")
        self.glued_fraction_pattern = re.compile(
            r"(\d)([" + "".join(UNICODE_FRACTIONS) + r"])"
        )

    def correct(self, text: str) -> str:
        """
        Replace every known misreading in the text.

        Args:
            text: Recognized text

        Returns:
            Corrected text; unchanged when no rule matches
        """
        return self.clean_text(text).cleaned_text

    def clean_text(self, text: str) -> CleaningResult:
        """
        Correct text and report which rules fired.

        Args:
            text: Recognized text

        Returns:
            Cleaning result with corrections
        """
        if not text:
            return CleaningResult(original_text=text or "", cleaned_text=text or "")

        corrections_made = []
        cleaned = text
        for pattern, correct in self.rules:
            cleaned, count = pattern.subn(lambda m, c=correct: self._preserve_case(m.group(0), c), cleaned)
            if count:
                corrections_made.append(f"{pattern.pattern} -> {correct} (x{count})")

        if corrections_made:
            self.logger.debug(f"Applied {len(corrections_made)} OCR corrections")
        return CleaningResult(original_text=text, cleaned_text=cleaned, corrections_made=corrections_made)

    def normalize_fractions(self, text: str) -> str:
        """Rewrite vulgar fractions as n/n and tighten spacing around slashes."""
        if not text:
            return text or ""
        text = self.glued_fraction_pattern.sub(r"\1 \2", text)
        for unicode_frac, ascii_frac in UNICODE_FRACTIONS.items():
            text = text.replace(unicode_frac, ascii_frac)
        return self.fraction_spacing_pattern.sub(r"\1/\2", text)

    @staticmethod
    def _preserve_case(original: str, replacement: str) -> str:
        """Preserve capitalization pattern from original word."""
        if not original or not replacement:
            return replacement

        if original.isupper() and len(original) > 1:
            return replacement.upper()

        if original[0].isupper():
            return replacement[0].upper() + replacement[1:]

        return replacement
