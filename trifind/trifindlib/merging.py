"""
merging - Detection aggregation and non-maximum suppression

Collects the matches of every template, converts them to detections and
removes lower-scoring duplicates with greedy IoU-based NMS.
"""

import logging
from typing import Iterable, List

import numpy as np

from .config import Constants, Detection, Match
from .geometry import BBoxOverlapCalculator
from .matching import CorrelationMatcher
from .templates import Template

logger = logging.getLogger(__name__)


class DetectionMerger:
    """Merges matches from all templates into a deduplicated detection list."""

    def __init__(self, iou_threshold: float = Constants.NMS_IOU_THRESHOLD):
        self.iou_threshold = iou_threshold
        self.overlap_calc = BBoxOverlapCalculator()
        self.matcher = CorrelationMatcher()

        if not (0.0 <= self.iou_threshold <= 1.0):
            raise ValueError(
                f"IoU threshold must be between 0.0 and 1.0, got: {self.iou_threshold}"
            )

    def merge(
        self,
        templates: Iterable[Template],
        frame_matrix: np.ndarray,
        stride: int,
        threshold: float,
        scale: float,
    ) -> List[Detection]:
        """Match every template against the frame and merge the results.

        Args:
            templates: Templates in bank order
            frame_matrix: Preprocessed frame
            stride: Step in pixels between probed positions
            threshold: Strict lower bound on match scores
            scale: Resize factor the frame was preprocessed with

        Returns:
            Surviving detections, highest score first
        """
        all_matches: List[Match] = []
        for template in templates:
            matches = self.matcher.find_matches(template, frame_matrix, stride, threshold, scale)
            if matches:
                logger.debug(f"Template {template.name}: {len(matches)} matches")
            all_matches.extend(matches)

        return self.merge_matches(all_matches)

    def merge_matches(self, matches: Iterable[Match]) -> List[Detection]:
        """Convert matches to detections, sort by score and apply NMS.

        Equal scores keep their input order.
        """
        detections = [self.to_detection(match) for match in matches]
        detections = sorted(detections, key=lambda d: d.score, reverse=True)
        kept = self.suppress(detections)

        if detections:
            logger.debug(
                f"NMS kept {len(kept)} of {len(detections)} detections "
                f"(IoU threshold {self.iou_threshold:.2f})"
            )
        return kept

    @staticmethod
    def to_detection(match: Match) -> Detection:
        return Detection(bbox=match.bounding_box(), score=match.score, label=Constants.LABEL)

    def suppress(self, detections: List[Detection]) -> List[Detection]:
        """Greedy non-maximum suppression over detections sorted by score.

        Args:
            detections: Detections, highest score first

        Returns:
            Kept detections in input order
        """
        kept = []
        suppressed = [False] * len(detections)

        for i, current in enumerate(detections):
            if suppressed[i]:
                continue

            kept.append(current)

            for j in range(i + 1, len(detections)):
                if suppressed[j]:
                    continue

                iou = self.overlap_calc.calculate_intersection_over_union(
                    current.bbox, detections[j].bbox
                )
                if iou > self.iou_threshold:
                    suppressed[j] = True

        return kept
