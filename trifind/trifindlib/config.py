"""
config - Configuration classes and constants for trifind

Contains the detection result types, the search parameters, the YAML settings
model, and the command-line application configuration.
"""

import argparse
import logging
import numbers
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError

from . import __version__


class Constants:
    """Constants used throughout the application."""
    LABEL = "triangle"
    ANNOTATOR_NAME = f"trifind v{__version__}"
    # IoU above which a lower-scoring detection is suppressed
    NMS_IOU_THRESHOLD = 0.3
    # Sobel magnitudes below this (8-bit grayscale scale) are treated as noise
    EDGE_NOISE_FLOOR = 50.0
    # Template border width as a fraction of the resized template width
    PADDING_RATIO = 0.3
    VALID_TEMPLATE_EXTENSIONS = (".png", ".jpg", ".jpeg")
    DEFAULT_SCALE = 0.5
    DEFAULT_STRIDE = 2
    DEFAULT_THRESHOLD = 0.75


def is_valid_stride(stride) -> bool:
    """Strides are whole pixel steps: an integral, non-boolean value >= 1."""
    return (
        isinstance(stride, numbers.Integral)
        and not isinstance(stride, bool)
        and stride >= 1
    )


@dataclass(frozen=True)
class Match:
    """Candidate hit of one template, in original image coordinates."""
    x: int
    y: int
    width: int
    height: int
    score: float  # ZNCC coefficient

    def bounding_box(self) -> Tuple[int, int, int, int]:
        """Return the match box as (min_x, min_y, max_x, max_y)."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


@dataclass(frozen=True)
class Detection:
    """Deduplicated detection handed back to the caller."""
    bbox: Tuple[int, int, int, int]  # min_x, min_y, max_x, max_y
    score: float
    label: str = Constants.LABEL

    @property
    def min_x(self) -> int:
        return self.bbox[0]

    @property
    def min_y(self) -> int:
        return self.bbox[1]

    @property
    def max_x(self) -> int:
        return self.bbox[2]

    @property
    def max_y(self) -> int:
        return self.bbox[3]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bbox": list(self.bbox),
            "score": self.score,
            "label": self.label,
        }


@dataclass(frozen=True)
class DetectionParams:
    """Search parameters shared by every preprocessing and matching call."""
    scale: float = Constants.DEFAULT_SCALE
    stride: int = Constants.DEFAULT_STRIDE
    threshold: float = Constants.DEFAULT_THRESHOLD

    def __post_init__(self):
        if not self.scale > 0:
            raise ValueError(f"Scale must be greater than 0, got: {self.scale}")
        if not is_valid_stride(self.stride):
            raise ValueError(f"Stride must be an integer >= 1, got: {self.stride}")


class FinderSettings(BaseModel):
    """Settings file contents for a triangle finder."""

    templates_dir: Optional[str] = Field(
        default=None,
        description="Directory containing the template images"
    )
    scale: float = Field(
        default=Constants.DEFAULT_SCALE, gt=0,
        description="Resize factor applied to frames and templates"
    )
    stride: int = Field(
        default=Constants.DEFAULT_STRIDE, ge=1,
        description="Step in pixels between probed window positions"
    )
    threshold: float = Field(
        default=Constants.DEFAULT_THRESHOLD,
        description="Correlation score a match must exceed"
    )

    def detection_params(self) -> DetectionParams:
        return DetectionParams(
            scale=self.scale, stride=self.stride, threshold=self.threshold
        )


def load_settings(path: Path) -> FinderSettings:
    """Load finder settings from a YAML file.

    Args:
        path: Path to the YAML settings file

    Returns:
        Validated FinderSettings

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a mapping or fails validation
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a mapping: {path}")

    try:
        return FinderSettings.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid settings in {path}: {e}") from e


class FinderConfig:
    """Configuration class for the trifind application."""

    def __init__(self, args: argparse.Namespace):
        """Initialize configuration from command line arguments.

        Values given on the command line take precedence over the settings
        file, which takes precedence over the defaults.

        Args:
            args: Parsed command line arguments
        """
        logger = logging.getLogger(__name__)

        self.settings_path = getattr(args, "config", None)
        if self.settings_path:
            settings = load_settings(self.settings_path)
            logger.info(f"Settings loaded from {self.settings_path}")
        else:
            settings = FinderSettings()

        self.templates_dir = self._pick(getattr(args, "templates", None), settings.templates_dir)
        self.input_paths = list(args.input)
        self.output_json_path = getattr(args, "output_json", None)

        self.scale = self._pick(getattr(args, "scale", None), settings.scale)
        self.stride = self._pick(getattr(args, "stride", None), settings.stride)
        self.threshold = self._pick(getattr(args, "threshold", None), settings.threshold)

        # Logging configuration
        self.verbose = getattr(args, "verbose", False)
        self.log_to_file = not getattr(args, "no_log_file", False)

        self.validate_config()
        self.detection_params = DetectionParams(
            scale=self.scale, stride=self.stride, threshold=self.threshold
        )

    @staticmethod
    def _pick(cli_value, settings_value):
        return settings_value if cli_value is None else cli_value

    def validate_config(self) -> None:
        """Validate configuration parameters."""
        if not self.templates_dir:
            raise ValueError("A template directory is required (--templates or settings file)")

        if not os.path.isdir(self.templates_dir):
            raise FileNotFoundError(f"Template directory not found: {self.templates_dir}")

        if not self.input_paths:
            raise ValueError("At least one input image is required")

        for file_path in self.input_paths:
            if not os.path.exists(file_path):
                raise FileNotFoundError(f"Required file not found: {file_path}")

        if not self.scale > 0:
            raise ValueError(f"Scale must be greater than 0, got: {self.scale}")

        if not is_valid_stride(self.stride):
            raise ValueError(f"Stride must be an integer >= 1, got: {self.stride}")
