"""
Read-only vocabulary tables for recipe text formatting.
Correction table, section keywords, measurement units and cue words shared by
the formatter components. Everything here is immutable and safe to share
between threads.
"""

import re
from types import MappingProxyType


# Known OCR misreadings -> corrections, applied in order on word boundaries.
# No correction may itself contain a misreading key as a whole word.
OCR_CORRECTIONS = MappingProxyType({
    # Seen on scanned brownie recipe cards
    "bronies": "brownies",
    "brosnies": "brownies",
    "udy": "fudgy",
    "ated": "granulated",
    "posuder": "powdered",
    "cuo": "cup",
    "posder": "powdered",
    "eb": "of",
    "cocoa pouler": "cocoa powder",
    "dlive": "olive",
    "perpos": "purpose",
    "prehet": "preheat",
    "flow": "flour",
    "3ranuated": "granulated",
    "upanulated": "granulated",
    "floar": "flour",
    "peaheat": "preheat",
    "ven": "oven",
    "ranulated": "granulated",
    "porpae": "purpose",
    "flor": "flour",
    "flo": "flour",
    "flourur": "flour",
    "instrvctions": "instructions",
    "v2": "1/2",

    # Digit/letter confusions on staples and units
    "fl0ur": "flour",
    "5ugar": "sugar",
    "suqar": "sugar",
    "b0tter": "butter",
    "buiter": "butter",
    "eqgs": "eggs",
    "e99s": "eggs",
    "vanilia": "vanilla",
    "choc0late": "chocolate",
    "teasp00n": "teaspoon",
    "tablesp00n": "tablespoon",
    "t5p": "tsp",
    "tb5p": "tbsp",
    "c0p": "cup",
    "cuns": "cups",
})

# Unicode vulgar fractions -> ASCII
UNICODE_FRACTIONS = MappingProxyType({
    "½": "1/2",
    "¼": "1/4",
    "¾": "3/4",
    "⅓": "1/3",
    "⅔": "2/3",
    "⅛": "1/8",
    "⅜": "3/8",
    "⅝": "5/8",
    "⅞": "7/8",
})

INGREDIENT_SECTION_KEYWORDS = (
    "ingredients", "you'll need", "you need", "what you need",
    "shopping list", "grocery list", "items needed", "items required",
)

STEP_SECTION_KEYWORDS = (
    "directions", "instructions", "steps", "method", "preparation",
    "procedure", "how to prepare", "how to make", "how to cook",
)

# Full unit vocabulary, longest first so alternations prefer "tablespoons" over "tbsp"
MEASUREMENT_UNITS = (
    "tablespoons", "tablespoon", "milliliters", "milliliter", "kilograms",
    "kilogram", "teaspoons", "teaspoon", "handful", "ounces", "pounds", "pieces",
    "liters", "slices", "cloves", "ounce", "pound", "grams", "piece", "liter",
    "slice", "clove", "pinch", "cups", "tbsp", "gram", "dash", "cup", "tsp",
    "lbs", "lb", "oz", "kg", "ml", "g", "l",
)

# Units that may directly follow a leading quantity in the shorthand pattern
SHORT_UNITS = (
    "tablespoons", "tablespoon", "teaspoons", "teaspoon", "ounces", "ounce",
    "pounds", "pound", "grams", "gram", "cups", "cup", "tbsp", "tbs", "tsp",
    "lbs", "lb", "oz", "kg", "ml", "g",
)

COMMON_INGREDIENTS = (
    "salt", "pepper", "oil", "water", "sugar", "flour", "granulated", "purpose",
    "butter", "egg", "garlic", "onion", "vanilla", "chocolate", "milk",
    "cream", "baking", "powder", "soda", "cinnamon", "yeast", "honey",
)

# Strong signals used when reclaiming stray ingredient lines from prose
STRONG_INGREDIENT_WORDS = (
    "cup", "cups", "tbsp", "tsp", "teaspoon", "teaspoons", "tablespoon",
    "tablespoons", "sugar", "flour", "butter", "granulated", "purpose",
)

COOKING_VERBS = (
    "preheat", "mix", "stir", "add", "combine", "beat", "fold", "bake", "cook",
    "whisk", "pour", "heat", "melt", "place", "remove", "transfer", "spread",
    "sprinkle", "simmer", "boil", "drain", "season", "serve", "let", "cool",
    "chop", "slice", "cut", "roll", "knead", "grease", "sift", "whip", "bring",
)

# Coarse grouping keys for fragment consolidation, checked in order
CONSOLIDATION_STEMS = (
    ("flour", ("flour", "purpose")),
    ("sugar", ("sugar", "granulated")),
    ("butter", ("butter",)),
    ("egg", ("egg",)),
    ("chocolate", ("chocolate",)),
    ("vanilla", ("vanilla",)),
    ("baking", ("baking",)),
    ("salt", ("salt",)),
    ("oil", ("oil",)),
)

BULLET_CHARACTERS = "•·▪◦‣⁃-*–"


def words_pattern(words, flags=re.IGNORECASE):
    """Compile a whole-word alternation for the given words."""
    alternation = "|".join(re.escape(word) for word in sorted(words, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternation})\b", flags)
