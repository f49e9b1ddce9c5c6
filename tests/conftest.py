"""Shared fixtures for the recipe formatter tests."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from recipe_formatter import RecipeFormatter
from recipe_types import BoundingBox, LineObservation, RawRecognitionResult


BROWNIES_TEXT = (
    "Brownies\n"
    "Ingredients:\n"
    "1 cup sugar\n"
    "1/2 cup flour\n"
    "Instructions:\n"
    "1. Preheat oven\n"
    "2. Mix ingredients"
)

PANCAKES_TEXT = (
    "Pancakes\n"
    "A quick weekend breakfast\n"
    "1 cup flour\n"
    "2 eggs\n"
    "1 cup milk\n"
    "Mix everything together\n"
    "Cook on a hot griddle until golden"
)


@pytest.fixture
def formatter():
    return RecipeFormatter()


@pytest.fixture
def brownies_text():
    return BROWNIES_TEXT


@pytest.fixture
def pancakes_text():
    return PANCAKES_TEXT


@pytest.fixture
def split_quantity_result():
    """Recognition result where "1 cup" and "sugar" were read as separate boxes on one row."""
    observations = (
        LineObservation("Brownies", BoundingBox(10, 10, 200, 40)),
        LineObservation("Ingredients:", BoundingBox(10, 60, 160, 80)),
        LineObservation("1 cup", BoundingBox(10, 100, 60, 120)),
        LineObservation("sugar", BoundingBox(70, 102, 130, 122)),
        LineObservation("2 eggs", BoundingBox(10, 140, 80, 160)),
    )
    full_text = "\n".join(observation.text for observation in observations)
    return RawRecognitionResult(full_text=full_text, lines=observations)
