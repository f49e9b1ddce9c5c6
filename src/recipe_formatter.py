#!/usr/bin/env python3
"""
Recipe formatter: recognized text to structured recipe.
Runs correction, line segmentation and section identification, then the
title, ingredient and step extractors, and assembles a FormattedRecipe.
"""

import re
import sys
import json
import logging
import argparse
from typing import Any, Dict, List, Optional, Sequence, Tuple

from error_handling import ConfigurationError, InvalidRecognitionInputError, RecipeProcessingError
from formatter_config import DEFAULT_CONFIG, load_config, merge_config, validate_config
from ingredient_parser import IngredientParser, looks_like_ingredient
from line_segmenter import LineSegmenter
from monitoring_logging import configure_logging
from output_formatter import SUPPORTED_FORMATS, OutputFormatter
from recipe_types import (
    FormattedRecipe,
    FormattingTrace,
    RawRecognitionResult,
    SectionLayout,
    distinct_by,
    normalize_key,
)
from section_identifier import SectionIdentifier
from step_extractor import StepExtractor
from text_cleaner import TextCleaner


_LEADING_NUMERAL = re.compile(r"^\s*\d+\.")


class RecipeFormatter:
    """Turns OCR output into a FormattedRecipe. Never raises on any input."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the formatter.

        Args:
            config: Overrides merged over DEFAULT_CONFIG
        """
        self.config = validate_config(merge_config(DEFAULT_CONFIG, config))
        self.logger = logging.getLogger(__name__)

        self.text_cleaner = TextCleaner()
        self.line_segmenter = LineSegmenter(self.text_cleaner)
        self.section_identifier = SectionIdentifier(self.config["sections"])
        self.ingredient_parser = IngredientParser(self.config["spatial"], self.text_cleaner)
        self.step_extractor = StepExtractor(self.config["steps"])

    def format_text(self, text: str) -> FormattedRecipe:
        """Format plain recognized text without spatial data."""
        return self.format_recipe(RawRecognitionResult.from_text(text))

    def format_recipe(self, result: RawRecognitionResult) -> FormattedRecipe:
        """
        Format a recognition result.

        Args:
            result: OCR output; bounding boxes are optional

        Returns:
            Best-effort structured recipe; the zero value for empty text
        """
        recipe, _ = self.analyze(result)
        return recipe

    def analyze(self, result: Optional[RawRecognitionResult]) -> Tuple[FormattedRecipe, FormattingTrace]:
        """
        Format a recognition result and report how the structure was found.

        Returns:
            (recipe, trace)
        """
        trace = FormattingTrace()
        full_text = result.full_text if result is not None and isinstance(result.full_text, str) else ""

        cleaning = self.text_cleaner.clean_text(full_text)
        trace.notes.extend(f"corrected {item}" for item in cleaning.corrections_made)

        lines = self.line_segmenter.segment(cleaning.cleaned_text)
        trace.line_count = len(lines)
        if not lines:
            self.logger.info("Formatted recipe from empty text")
            return FormattedRecipe(), trace

        spatial_lines = []
        if result.lines and self.config["spatial"]["enabled"]:
            spatial_lines = self.line_segmenter.spatial_lines(result.lines)
        trace.spatial_lines = sum(1 for _, box in spatial_lines if box is not None)

        title_index = self.find_title_index(lines)
        title = lines[title_index] if title_index is not None else ""

        layout = self.section_identifier.identify(lines, title_index)
        trace.layout = layout

        ingredients = self._extract_ingredients(lines, spatial_lines, layout, title)
        steps = self._extract_steps(lines, layout, title_index)
        if not layout.steps:
            trace.notes.append("no step section; scanned whole document")

        ingredients = distinct_by(ingredients, lambda item: normalize_key(item.name))
        steps = distinct_by([step for step in steps if step.strip()], normalize_key)
        description = self.extract_description(lines, layout, title_index, steps)

        recipe = FormattedRecipe(
            title=title,
            description=description,
            ingredients=tuple(ingredients),
            steps=tuple(steps),
        )
        self.logger.info(
            "Formatted recipe: %d lines, title=%r, %d ingredients, %d steps",
            len(lines), title, len(recipe.ingredients), len(recipe.steps),
        )
        return recipe, trace

    def find_title_index(self, lines: Sequence[str]) -> Optional[int]:
        """
        Index of the first line that can serve as a title.

        It must be long enough, not a section header, not end in a colon and
        not start like a numbered step ("1.").
        """
        min_length = self.config["title"]["min_length"]
        for index, line in enumerate(lines):
            if len(line) < min_length:
                continue
            if self.section_identifier.is_section_header(line):
                continue
            if line.endswith(":") or _LEADING_NUMERAL.match(line):
                continue
            return index
        return None

    def _extract_ingredients(self, lines: Sequence[str], spatial_lines, layout: SectionLayout, title: str):
        section_indices = self.section_identifier.content_indices(layout.ingredients, layout.ingredients_from_header)
        indices = sorted(set(section_indices) | set(layout.reclassified))

        excluded = {normalize_key(line) for line in lines if self.section_identifier.is_section_header(line)}
        if title:
            excluded.add(normalize_key(title))
        if layout.steps is not None:
            excluded.update(normalize_key(lines[index]) for index in layout.steps.indices())

        return self.ingredient_parser.extract_ingredients(
            [lines[index] for index in indices], spatial_lines, excluded
        )

    def _extract_steps(self, lines: Sequence[str], layout: SectionLayout, title_index: Optional[int]) -> List[str]:
        step_indices = self.section_identifier.content_indices(layout.steps, layout.steps_from_header)

        skip = set(layout.reclassified)
        if title_index is not None:
            skip.add(title_index)
        if layout.ingredients is not None:
            skip.update(layout.ingredients.indices())
        skip.update(index for index, line in enumerate(lines) if self.section_identifier.is_section_header(line))

        return self.step_extractor.extract_steps(
            [lines[index] for index in step_indices],
            all_lines=lines,
            from_header=layout.steps_from_header,
            skip_indices=skip,
        )

    def extract_description(self, lines: Sequence[str], layout: SectionLayout,
                            title_index: Optional[int], steps: Sequence[str]) -> str:
        """Leftover prose: Other lines that are not headers, ingredients or step text."""
        step_keys = [normalize_key(step) for step in steps]
        kept = []
        for index in layout.other:
            line = lines[index]
            key = normalize_key(line)
            if index == title_index or self.section_identifier.is_section_header(line):
                continue
            if looks_like_ingredient(line) or self.step_extractor.step_marker(line) is not None:
                continue
            if any(key in step or step in key for step in step_keys if step):
                continue
            kept.append(line)
        return "\n".join(kept)


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    with open(source, "r", encoding="utf-8") as f:
        return f.read()


def parse_recognition_input(content: str) -> RawRecognitionResult:
    """
    Build a recognition result from CLI input.

    A JSON object is read as a recognition envelope; anything else is plain text.

    Raises:
        InvalidRecognitionInputError: if the JSON is malformed
    """
    if content.lstrip().startswith("{"):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise InvalidRecognitionInputError(f"Invalid JSON input: {e}") from e
        return RawRecognitionResult.from_dict(data)
    return RawRecognitionResult.from_text(content)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line interface for the recipe formatter."""
    parser = argparse.ArgumentParser(description="Format OCR recipe text into a structured recipe")
    parser.add_argument("input", help="Text file or JSON recognition envelope ('-' for stdin)")
    parser.add_argument("--format", "-f", default="json", choices=SUPPORTED_FORMATS, help="Output format")
    parser.add_argument("--output", "-o", help="Output file path (default: stdout)")
    parser.add_argument("--config", help="Configuration file path (.json, .yaml)")
    parser.add_argument("--log-level", help="Log level (default: from config)")
    parser.add_argument("--no-spatial", action="store_true",
                        help="Ignore bounding boxes in the input")
    parser.add_argument("--debug", action="store_true",
                        help="Print section identification details to stderr")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 1

    configure_logging(args.log_level or config["logging"]["level"], config["logging"]["format"])

    if args.no_spatial:
        config["spatial"]["enabled"] = False

    try:
        recognition = parse_recognition_input(_read_input(args.input))
    except OSError as e:
        print(f"Cannot read input: {e}", file=sys.stderr)
        return 2
    except InvalidRecognitionInputError as e:
        print(f"Invalid input: {e.message}", file=sys.stderr)
        return 2

    formatter = RecipeFormatter(config)
    recipe, trace = formatter.analyze(recognition)

    if args.debug:
        layout = trace.layout
        print(f"lines: {trace.line_count}, boxed lines: {trace.spatial_lines}", file=sys.stderr)
        if layout is not None:
            for section in layout.sections():
                print(f"  {section.kind.value:<12} [{section.start}, {section.end})", file=sys.stderr)
            print(f"  reclassified: {list(layout.reclassified)}", file=sys.stderr)
        for note in trace.notes:
            print(f"  {note}", file=sys.stderr)

    try:
        output_formatter = OutputFormatter()
        formatted = output_formatter.format_recipe(recipe, args.format)
        if args.output:
            saved_path = output_formatter.save_formatted_output(formatted, args.output)
            print(f"Saved {formatted.format_type} output to {saved_path}")
        else:
            print(formatted.content)
    except RecipeProcessingError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Cannot write output: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
