#!/usr/bin/env python3
"""
Recipe Formatter - Basic Usage Examples
Demonstrates how to turn OCR output into a structured recipe.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / 'src'))

from output_formatter import OutputFormatter
from recipe_formatter import RecipeFormatter
from recipe_types import BoundingBox, LineObservation, RawRecognitionResult


SCANNED_CARD = """Fudgy Bronies
Rich, dense and very chocolatey.
Ingredients:
1 cuo granulated 5ugar
½ cup b0tter, melted
2 eqgs
3/4 cup all perpos flor
Instructions:
1. Prehet the ven to 350F.
2. Whisk the butter and sugar, then beat in
the eggs one at a time.
3. Fold in the flour and bake for 25 minutes.
"""


def example_1_plain_text():
    """Example 1: Format plain OCR text."""
    print("🔸 Example 1: Plain Text")
    print("-" * 50)

    formatter = RecipeFormatter()
    recipe = formatter.format_text(SCANNED_CARD)

    print(f"📖 {recipe.title}")
    print(f"   {recipe.description}")
    for ingredient in recipe.ingredients:
        print(f"   - {ingredient.quantity} {ingredient.name}".rstrip())
    for i, step in enumerate(recipe.steps, 1):
        print(f"   {i}. {step}")


def example_2_bounding_boxes():
    """Example 2: Use line bounding boxes to rejoin a split quantity."""
    print("\n🔸 Example 2: Spatial Layout")
    print("-" * 50)

    observations = (
        LineObservation("Shortbread", BoundingBox(20, 10, 220, 40)),
        LineObservation("Ingredients", BoundingBox(20, 60, 150, 80)),
        LineObservation("2 cups", BoundingBox(20, 100, 80, 120)),
        LineObservation("flour", BoundingBox(90, 101, 140, 121)),
        LineObservation("1 cup butter", BoundingBox(20, 140, 150, 160)),
    )
    result = RawRecognitionResult(
        full_text="\n".join(line.text for line in observations),
        lines=observations,
    )

    recipe = RecipeFormatter().format_recipe(result)
    for ingredient in recipe.ingredients:
        print(f"   - {ingredient.quantity!r:12} {ingredient.name}")


def example_3_custom_config_and_export():
    """Example 3: Tighter step merging and YAML export."""
    print("\n🔸 Example 3: Custom Configuration")
    print("-" * 50)

    formatter = RecipeFormatter({"steps": {"short_step_threshold": 10}})
    recipe = formatter.format_text(SCANNED_CARD)

    output = OutputFormatter().format_recipe(recipe, "yaml")
    print(output.content)


if __name__ == "__main__":
    example_1_plain_text()
    example_2_bounding_boxes()
    example_3_custom_config_and_export()
