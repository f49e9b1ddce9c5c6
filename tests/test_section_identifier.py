"""
Tests for section identification: header keywords, the consecutive-run
fallback, and the reclassification of stray ingredient lines.

Run: python -m pytest tests/test_section_identifier.py -v
"""

import pytest

from recipe_types import Section, SectionKind
from section_identifier import (
    SectionIdentifier,
    find_longest_run,
    has_strong_ingredient_signal,
)


@pytest.fixture
def identifier():
    return SectionIdentifier()


def assert_tiles(layout):
    """Sections cover [0, n) exactly once, in order."""
    cursor = 0
    for section in layout.sections():
        assert section.start == cursor
        assert section.start < section.end <= layout.line_count
        cursor = section.end
    assert cursor == layout.line_count


class TestRuns:

    def test_longest_run(self):
        assert find_longest_run([2, 3, 4, 7, 8]) == [2, 3, 4]

    def test_first_run_wins_a_tie(self):
        assert find_longest_run([1, 2, 5, 6]) == [1, 2]

    def test_empty(self):
        assert find_longest_run([]) == []


class TestHeaders:

    def test_keyword_headers(self, identifier):
        assert identifier.header_kind("Ingredients:") is SectionKind.INGREDIENTS
        assert identifier.header_kind("What you need") is SectionKind.INGREDIENTS
        assert identifier.header_kind("DIRECTIONS") is SectionKind.STEPS
        assert identifier.header_kind("How to make it") is SectionKind.STEPS

    def test_step_lines_are_not_headers(self, identifier):
        assert identifier.header_kind("2. Mix ingredients") is None
        assert identifier.header_kind("Mix the dry ingredients together") is None

    def test_long_prose_is_not_a_header(self, identifier):
        line = "These brownies use only five ingredients and no mixer"
        assert identifier.header_kind(line) is None

    def test_long_line_ending_in_colon_is_a_header(self, identifier):
        line = "Everything you need for the chocolate glaze layer:"
        assert identifier.header_kind(line) is SectionKind.INGREDIENTS


class TestHeaderSections:

    def test_both_headers(self, identifier, brownies_text):
        lines = brownies_text.split("\n")
        layout = identifier.identify(lines, title_index=0)

        assert layout.ingredients == Section(SectionKind.INGREDIENTS, 1, 4)
        assert layout.steps == Section(SectionKind.STEPS, 4, 7)
        assert layout.ingredients_from_header and layout.steps_from_header
        assert layout.other == (0,)
        assert_tiles(layout)

    def test_first_header_wins(self, identifier):
        lines = [
            "Cake", "Ingredients:", "2 cups flour", "Instructions:", "1. Mix well",
            "Additional ingredients:", "1 cup frosting",
        ]
        layout = identifier.identify(lines, title_index=0)

        assert layout.ingredients == Section(SectionKind.INGREDIENTS, 1, 3)
        assert layout.steps == Section(SectionKind.STEPS, 3, 7)

    def test_single_header_runs_to_end(self, identifier):
        lines = ["Toast", "Directions", "Toast the bread", "Butter it while warm"]
        layout = identifier.identify(lines, title_index=0)

        assert layout.steps == Section(SectionKind.STEPS, 1, 4)
        assert layout.ingredients is None

    def test_content_indices_skip_header_line(self, identifier):
        section = Section(SectionKind.STEPS, 4, 7)
        assert identifier.content_indices(section, from_header=True) == [5, 6]
        assert identifier.content_indices(section, from_header=False) == [4, 5, 6]
        assert identifier.content_indices(None, from_header=True) == []


class TestFallback:

    def test_three_ingredient_lines_without_headers(self, identifier, pancakes_text):
        lines = pancakes_text.split("\n")
        layout = identifier.identify(lines, title_index=0)

        assert layout.ingredients == Section(SectionKind.INGREDIENTS, 2, 5)
        assert not layout.ingredients_from_header
        assert layout.steps == Section(SectionKind.STEPS, 5, 7)
        assert layout.other == (0, 1)
        assert_tiles(layout)

    def test_run_below_minimum_is_rejected(self, identifier):
        lines = ["Snack", "Quick and easy", "1 cup nuts", "2 dates", "Enjoy it"]
        layout = identifier.classify(lines)
        assert layout.ingredients is None

    def test_reserved_title_lines_are_skipped(self, identifier):
        lines = ["1 cup flour", "2 eggs", "1 cup milk", "Lovely"]
        layout = identifier.classify(lines)
        assert layout.ingredients is None

    def test_run_inside_header_section_truncates_it(self, identifier):
        lines = [
            "Cookies", "Method:", "Stir the batter gently", "Bake for 10 minutes",
            "2 cups flour", "1 cup sugar", "3 eggs",
        ]
        layout = identifier.identify(lines, title_index=0)

        assert layout.steps == Section(SectionKind.STEPS, 1, 4)
        assert layout.ingredients == Section(SectionKind.INGREDIENTS, 4, 7)
        assert_tiles(layout)

    def test_roman_numbered_line_belongs_to_steps_only(self, identifier):
        lines = ["Soup", "A warm bowl", "- Whisk well", "iv. 3 eggs", "1 cup milk", "2 cups flour"]
        layout = identifier.identify(lines, title_index=0)

        assert layout.steps == Section(SectionKind.STEPS, 2, 4)
        assert layout.ingredients is None
        assert_tiles(layout)

    def test_run_reaching_into_a_section_is_cut(self, identifier):
        ingredients = Section(SectionKind.INGREDIENTS, 3, 6)
        placed = identifier._place_run({SectionKind.INGREDIENTS: ingredients}, Section(SectionKind.STEPS, 2, 5))

        assert placed[SectionKind.INGREDIENTS] == ingredients
        assert placed[SectionKind.STEPS] == Section(SectionKind.STEPS, 2, 3)

    def test_run_swallowed_by_a_section_is_dropped(self, identifier):
        ingredients = Section(SectionKind.INGREDIENTS, 3, 6)
        placed = identifier._place_run({SectionKind.INGREDIENTS: ingredients}, Section(SectionKind.STEPS, 3, 5))

        assert placed == {SectionKind.INGREDIENTS: ingredients}

    def test_no_cues_leaves_everything_other(self, identifier):
        lines = ["Just some words", "nothing useful here", "at all really"]
        layout = identifier.identify(lines)

        assert layout.ingredients is None and layout.steps is None
        assert layout.other == (0, 1, 2)


class TestReclassification:

    def test_strong_signal_moves_other_line(self, identifier):
        lines = ["Brownies", "1/2 cup cocoa powder", "Ingredients:", "1 cup sugar", "Instructions:", "1. Bake"]
        layout = identifier.identify(lines, title_index=0)

        assert layout.reclassified == (1,)
        assert layout.other == (0,)

    def test_title_is_never_moved(self, identifier):
        lines = ["Sugar cookies with 1 cup butter", "Ingredients:", "2 eggs"]
        layout = identifier.identify(lines, title_index=0)

        assert layout.reclassified == ()
        assert layout.other == (0,)

    def test_step_like_line_is_never_moved(self, identifier):
        lines = ["Brownies", "Bake 1/2 of the batch first", "Ingredients:", "2 eggs"]
        layout = identifier.identify(lines, title_index=0)

        assert layout.reclassified == ()

    def test_strong_signals(self):
        assert has_strong_ingredient_signal("some flour for dusting")
        assert has_strong_ingredient_signal("3/4 of the nuts")
        assert has_strong_ingredient_signal("¼ of the nuts")
        assert not has_strong_ingredient_signal("a pinch of love")


class TestTilingProperty:

    @pytest.mark.parametrize("text", [
        "",
        "Brownies",
        "Ingredients:\nInstructions:",
        "Instructions:\n1. Bake\n2. Cool\nIngredients:\n1 cup sugar",
        "Title\nintro\n1 cup a\n2 cups b\n3 tbsp c\nStir\nBake it",
        "Title\nDirections\nStir it\n1 cup a\n2 cups b\n3 tbsp c\n4 g d\nmore prose",
        "Soup\nWhat you need\n2 onions\n- Chop the onions\n- Simmer\nIngredients again:",
        "Soup\nA warm bowl\n- Whisk well\niv. 3 eggs\n1 cup milk\n2 cups flour",
    ])
    def test_sections_never_overlap_or_exceed_bounds(self, identifier, text):
        lines = [line for line in text.split("\n") if line]
        layout = identifier.identify(lines, title_index=0 if lines else None)

        assert_tiles(layout)
        for index in range(len(lines)):
            owners = [s for s in (layout.ingredients, layout.steps) if s is not None and index in s]
            assert len(owners) <= 1
        assert set(layout.other).isdisjoint(layout.reclassified)
