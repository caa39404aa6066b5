"""
detector - Triangle finder facade

Ties the preprocessor, the template bank and the merger together behind a
per-frame detection call.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import cv2
import numpy as np

from .config import Detection, DetectionParams, FinderSettings
from .exceptions import FrameDecodeError
from .merging import DetectionMerger
from .preprocessing import ImagePreprocessor
from .templates import TemplateBank

logger = logging.getLogger(__name__)


class TriangleFinder:
    """Detects triangles in frames using a fixed template bank.

    The bank and the parameters never change after construction, so one
    finder may serve concurrent calls for different frames.
    """

    def __init__(
        self,
        bank: TemplateBank,
        params: Optional[DetectionParams] = None,
        preprocessor: Optional[ImagePreprocessor] = None,
        merger: Optional[DetectionMerger] = None,
    ):
        """Initialize the finder.

        Args:
            bank: Templates built with the same scale as ``params.scale``
            params: Search parameters, defaults when None
            preprocessor: Frame preprocessor, default settings when None
            merger: Detection merger, default NMS threshold when None
        """
        self.bank = bank
        self.params = params or DetectionParams(scale=bank.scale)
        self.preprocessor = preprocessor or ImagePreprocessor()
        self.merger = merger or DetectionMerger()

        if self.bank.scale != self.params.scale:
            raise ValueError(
                f"Template bank scale ({self.bank.scale}) does not match "
                f"detection scale ({self.params.scale})"
            )

    @classmethod
    def from_settings(cls, settings: FinderSettings) -> "TriangleFinder":
        """Build the template bank from the settings' template directory."""
        if not settings.templates_dir:
            raise ValueError("Settings do not name a template directory")
        params = settings.detection_params()
        bank = TemplateBank.from_directory(Path(settings.templates_dir), params.scale)
        return cls(bank, params)

    def detect(self, image: np.ndarray) -> List[Detection]:
        """Detect triangles in a decoded image.

        Args:
            image: Decoded frame (H x W grayscale or H x W x C in BGR order)

        Returns:
            Detections in original image coordinates, highest score first
        """
        frame_matrix = self.preprocessor.preprocess_frame(image, self.params.scale)
        return self.detect_matrix(frame_matrix)

    def detect_matrix(self, frame_matrix: np.ndarray) -> List[Detection]:
        """Detect triangles in an already preprocessed frame."""
        return self.merger.merge(
            self.bank,
            frame_matrix,
            self.params.stride,
            self.params.threshold,
            self.params.scale,
        )

    def detect_file(self, image_path: Path) -> List[Detection]:
        """Decode an image file and detect triangles in it.

        Raises:
            FrameDecodeError: If the file cannot be decoded
        """
        image = cv2.imread(str(image_path), cv2.IMREAD_COLOR)
        if image is None:
            raise FrameDecodeError(f"Failed to decode image {image_path}")
        logger.debug(f"Decoded {image_path}: {image.shape[1]}x{image.shape[0]}")
        return self.detect(image)

    @staticmethod
    def properties() -> Dict[str, bool]:
        return {
            "detections_supported": True,
            "classifications_supported": False,
            "object_point_clouds_supported": False,
        }
