"""
geometry - Geometric calculations and utilities

Contains IoU calculation for axis-aligned bounding boxes and the rounding rule
used when mapping between search space and image space.
"""

import math
from typing import Optional, Sequence


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negatives."""
    return int(math.floor(value + 0.5))


class BBoxOverlapCalculator:
    """Utility class for calculating IoU between axis-aligned bounding boxes."""

    @staticmethod
    def calculate_intersection_over_union(
        bbox1: Optional[Sequence[float]], bbox2: Optional[Sequence[float]]
    ) -> float:
        """Calculate IoU between two axis-aligned bounding boxes.

        Args:
            bbox1: First box as (min_x, min_y, max_x, max_y)
            bbox2: Second box as (min_x, min_y, max_x, max_y)

        Returns:
            IoU value between 0 and 1. Missing, empty or disjoint boxes give 0.
        """
        if bbox1 is None or bbox2 is None:
            return 0.0

        area1 = BBoxOverlapCalculator._box_area(bbox1)
        area2 = BBoxOverlapCalculator._box_area(bbox2)

        if area1 <= 0 or area2 <= 0:
            return 0.0

        intersection_area = BBoxOverlapCalculator._intersection_area(bbox1, bbox2)

        if intersection_area <= 0:
            return 0.0

        union_area = area1 + area2 - intersection_area
        return intersection_area / union_area

    @staticmethod
    def _box_area(bbox: Sequence[float]) -> float:
        min_x, min_y, max_x, max_y = bbox
        return max(0, max_x - min_x) * max(0, max_y - min_y)

    @staticmethod
    def _intersection_area(bbox1: Sequence[float], bbox2: Sequence[float]) -> float:
        """Area of the overlap rectangle of two boxes, 0 when they do not overlap."""
        width = min(bbox1[2], bbox2[2]) - max(bbox1[0], bbox2[0])
        height = min(bbox1[3], bbox2[3]) - max(bbox1[1], bbox2[1])
        if width <= 0 or height <= 0:
            return 0.0
        return width * height
