"""
Line segmentation for recognized recipe text.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from recipe_types import BoundingBox, LineObservation
from text_cleaner import TextCleaner


SpatialLine = Tuple[str, Optional[BoundingBox]]


class LineSegmenter:
    """Splits corrected text into lines and builds the spatial line view."""

    def __init__(self, text_cleaner: Optional[TextCleaner] = None):
        self.logger = logging.getLogger(__name__)
        self.text_cleaner = text_cleaner or TextCleaner()

    def segment(self, corrected_text: str) -> List[str]:
        """
        Split text on newlines, trimming each line and dropping blank ones.

        Args:
            corrected_text: Full text after lexical correction

        Returns:
            Non-blank lines in original order
        """
        if not corrected_text:
            return []
        lines = [line.strip() for line in corrected_text.splitlines()]
        return [line for line in lines if line]

    def spatial_lines(self, observations: Sequence[LineObservation]) -> List[SpatialLine]:
        """
        Pair every recognized line (corrected) with its bounding box.

        Entries are kept even when blank or without a box; consumers filter.
        """
        view = [
            (self.text_cleaner.correct(observation.text), observation.bounding_box)
            for observation in observations
        ]
        self.logger.debug(
            "Built spatial view: %d lines, %d with boxes",
            len(view), sum(1 for _, box in view if box is not None),
        )
        return view
