"""
End-to-end tests for the recipe formatter.

Covers the documented scenarios (header sections, vulgar fractions, fallback
runs, short-step merge), spatial layout input, and properties that must hold
for every input: no exceptions, no duplicate ingredients or steps.

Run: python -m pytest tests/test_recipe_formatter.py -v
"""

import dataclasses
import time

import pytest

from error_handling import ConfigurationError
from recipe_formatter import RecipeFormatter
from recipe_types import FormattedRecipe, Ingredient, RawRecognitionResult


NOISY_INPUTS = [
    "",
    "\t\r\n",
    "::::",
    "••••",
    "1.\n2.\n3.",
    "Step 1\nStep 2",
    "½⅓¼",
    "Ingredients:\nIngredients:",
    "1 cup flour\n1 cup FLOUR\n1 cup flour ",
    "🍰 Cake 🍰\nMix\nMix\nmix",
    "Brownies\nIngredients\n1 cup sugar\n1 cup sugar\nDirections\n1. Bake\n2. bake\n3. BAKE ",
    "Bronies\nIngredints\n1 cuo flor\nv2 cup posuder\nPrehet ven\nMix",
    "Soup\nWhat you need\n2 onions\n- Chop the onions\n- Simmer\nIngredients again:",
    "x" * 3000,
]


class TestScenarios:

    def test_headers_numbered_steps(self, formatter, brownies_text):
        recipe = formatter.format_text(brownies_text)

        assert recipe.title == "Brownies"
        assert recipe.ingredients == (Ingredient("sugar", "1 cup"), Ingredient("flour", "1/2 cup"))
        assert recipe.steps == ("Preheat oven", "Mix ingredients")
        assert recipe.description == ""

    def test_vulgar_fraction_quantity(self, formatter):
        recipe = formatter.format_text("Shortbread\nIngredients:\n½ cup butter\n1 cup flour")

        assert recipe.ingredients[0] == Ingredient("butter", "1/2 cup")
        assert recipe.steps == ()

    def test_fallback_run_without_headers(self, formatter, pancakes_text):
        recipe = formatter.format_text(pancakes_text)

        assert recipe.title == "Pancakes"
        assert recipe.ingredients == (
            Ingredient("flour", "1 cup"),
            Ingredient("eggs", "2"),
            Ingredient("milk", "1 cup"),
        )
        assert recipe.steps == ("Mix everything together", "Cook on a hot griddle until golden")
        assert recipe.description == "A quick weekend breakfast"

    def test_short_step_merged_into_previous(self, formatter):
        text = "Lemonade\nDirections\n- Squeeze the lemons into a jug\n- Stir\n- Serve over plenty of ice"
        recipe = formatter.format_text(text)

        assert recipe.steps == ("Squeeze the lemons into a jug Stir", "Serve over plenty of ice")

    def test_ocr_misreadings_are_corrected_first(self, formatter):
        text = "Bronies\nIngredients:\n1 cuo 5ugar\nInstructions:\n1. Prehet ven to 350"
        recipe = formatter.format_text(text)

        assert recipe.title == "Brownies"
        assert recipe.ingredients == (Ingredient("sugar", "1 cup"),)
        assert recipe.steps == ("Preheat oven to 350",)

    def test_description_keeps_prose_only(self, formatter):
        text = (
            "Brownies\n"
            "Rich and fudgy, a family favorite.\n"
            "Ingredients:\n"
            "1 cup sugar\n"
            "Instructions:\n"
            "1. Bake for 25 minutes"
        )
        recipe = formatter.format_text(text)

        assert recipe.description == "Rich and fudgy, a family favorite."

    def test_stray_ingredient_is_reclaimed_from_prose(self, formatter):
        text = "Brownies\n1/2 cup cocoa powder\nIngredients:\n1 cup sugar\nInstructions:\n1. Bake"
        recipe = formatter.format_text(text)

        assert Ingredient("cocoa powder", "1/2 cup") in recipe.ingredients
        assert recipe.description == ""

    def test_title_skips_headers_and_numbered_lines(self, formatter):
        recipe = formatter.format_text("Ingredients:\n1. Mix\nChocolate Cake")
        assert recipe.title == "Chocolate Cake"

    def test_no_title_candidate(self, formatter):
        assert formatter.format_text("1.\nab").title == ""


class TestSpatialInput:

    def test_split_quantity_is_joined_by_layout(self, formatter, split_quantity_result):
        recipe = formatter.format_recipe(split_quantity_result)

        assert recipe.title == "Brownies"
        assert recipe.ingredients[0] == Ingredient("sugar", "1 cup")
        assert Ingredient("eggs", "2") in recipe.ingredients

    def test_spatial_strategy_can_be_disabled(self, split_quantity_result):
        formatter = RecipeFormatter({"spatial": {"enabled": False}})
        recipe = formatter.format_recipe(split_quantity_result)

        assert Ingredient("sugar", "1 cup") not in recipe.ingredients

    def test_missing_boxes_degrade_to_text(self, formatter, brownies_text):
        result = RawRecognitionResult.from_dict({
            "full_text": brownies_text,
            "lines": [{"text": line} for line in brownies_text.split("\n")],
        })
        assert formatter.format_recipe(result) == formatter.format_text(brownies_text)


class TestEmptyInput:

    @pytest.mark.parametrize("text", ["", "   ", "\n\n\t\n"])
    def test_blank_text_yields_zero_value(self, formatter, text):
        assert formatter.format_text(text) == FormattedRecipe()

    def test_none_result(self, formatter):
        assert formatter.format_recipe(None).is_empty()


class TestProperties:

    @pytest.mark.parametrize("text", NOISY_INPUTS)
    def test_never_raises_and_never_duplicates(self, formatter, text):
        recipe = formatter.format_text(text)

        assert isinstance(recipe, FormattedRecipe)
        names = [ingredient.name.strip().lower() for ingredient in recipe.ingredients]
        steps = [step.strip().lower() for step in recipe.steps]
        assert len(names) == len(set(names))
        assert len(steps) == len(set(steps))
        assert all(name for name in names)

    def test_long_blank_run_after_quantity_stays_fast(self, formatter):
        text = "Title\nIngredients:\n1" + " " * 20000 + "x"

        started = time.perf_counter()
        formatter.format_text(text)

        assert time.perf_counter() - started < 1.0

    def test_deterministic(self, formatter, pancakes_text):
        assert formatter.format_text(pancakes_text) == RecipeFormatter().format_text(pancakes_text)

    def test_result_is_immutable(self, formatter, brownies_text):
        recipe = formatter.format_text(brownies_text)
        with pytest.raises(dataclasses.FrozenInstanceError):
            recipe.title = "Blondies"


class TestAnalyze:

    def test_trace_reports_layout(self, formatter, brownies_text):
        recipe, trace = formatter.analyze(RawRecognitionResult.from_text(brownies_text))

        assert recipe.title == "Brownies"
        assert trace.line_count == 7
        assert trace.spatial_lines == 0
        assert [section.kind.value for section in trace.layout.sections()] == ["other", "ingredients", "steps"]

    def test_trace_notes_corrections(self, formatter):
        _, trace = formatter.analyze(RawRecognitionResult.from_text("1 cuo flor"))
        assert any("cup" in note for note in trace.notes)


class TestConfiguration:

    def test_invalid_override_is_rejected(self):
        with pytest.raises(ConfigurationError):
            RecipeFormatter({"steps": {"short_step_threshold": "twenty"}})

    def test_stricter_ingredient_run(self, pancakes_text):
        formatter = RecipeFormatter({"sections": {"min_ingredient_run": 4}})
        recipe = formatter.format_text(pancakes_text)

        assert Ingredient("eggs", "2") not in recipe.ingredients
