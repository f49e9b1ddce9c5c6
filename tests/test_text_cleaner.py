"""
Tests for OCR misreading correction and fraction normalization.

Run: python -m pytest tests/test_text_cleaner.py -v
"""

import pytest

from recipe_vocabulary import OCR_CORRECTIONS
from text_cleaner import TextCleaner


@pytest.fixture
def cleaner():
    return TextCleaner()


class TestCorrection:

    def test_replaces_known_misreadings(self, cleaner):
        assert cleaner.correct("2 cups of flor") == "2 cups of flour"
        assert cleaner.correct("all perpos flour") == "all purpose flour"

    def test_preserves_capitalization(self, cleaner):
        assert cleaner.correct("Prehet the ven") == "Preheat the oven"
        assert cleaner.correct("FLOR") == "FLOUR"

    def test_does_not_fire_inside_correct_words(self, cleaner):
        """"ven" must not turn "oven" into "ooven"."""
        assert cleaner.correct("Preheat oven") == "Preheat oven"
        assert cleaner.correct("1 cup flour") == "1 cup flour"

    def test_multiline_text(self, cleaner):
        assert cleaner.correct("Bronies\n1 cuo 5ugar") == "Brownies\n1 cup sugar"

    def test_empty_and_unmatched_input_unchanged(self, cleaner):
        assert cleaner.correct("") == ""
        assert cleaner.correct("Whisk the eggs") == "Whisk the eggs"

    def test_empty_table_is_a_no_op(self):
        assert TextCleaner(corrections={}).correct("flor") == "flor"

    def test_identity_rules_are_skipped(self):
        assert TextCleaner(corrections={"flour": "flour"}).rules == ()

    def test_clean_text_reports_fired_rules(self, cleaner):
        result = cleaner.clean_text("1 cuo flor")
        assert result.original_text == "1 cuo flor"
        assert result.cleaned_text == "1 cup flour"
        assert len(result.corrections_made) == 2


class TestIdempotence:
    """Running the corrector on its own output must change nothing."""

    def test_no_correction_contains_a_misreading(self, cleaner):
        for correct in OCR_CORRECTIONS.values():
            assert cleaner.correct(correct) == correct

    def test_second_pass_is_a_no_op(self, cleaner):
        noisy = "Bronies\n1 cuo flor\nPrehet ven\n2 tb5p b0tter\nv2 cup posuder sugar"
        once = cleaner.correct(noisy)
        assert cleaner.correct(once) == once


class TestFractions:

    def test_vulgar_fraction(self, cleaner):
        assert cleaner.normalize_fractions("½ cup butter") == "1/2 cup butter"

    def test_mixed_number_gets_a_space(self, cleaner):
        assert cleaner.normalize_fractions("1½ cups milk") == "1 1/2 cups milk"

    def test_slash_spacing_is_tightened(self, cleaner):
        assert cleaner.normalize_fractions("1 / 2 cup flour") == "1/2 cup flour"
        assert cleaner.normalize_fractions("3/ 4 tsp salt") == "3/4 tsp salt"

    def test_all_vulgar_fractions(self, cleaner):
        assert cleaner.normalize_fractions("¼ ¾ ⅓ ⅔") == "1/4 3/4 1/3 2/3"
