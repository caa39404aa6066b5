"""
trifindlib - trifind triangle finder library

Internal package for the run_trifind.py tool.
Contains image preprocessing, template construction, correlation matching and
detection merging.
"""

__version__ = "1.0.0"

from .config import (
    Constants,
    Detection,
    DetectionParams,
    FinderConfig,
    FinderSettings,
    Match,
    load_settings,
)
from .exceptions import (
    DomainException,
    EmptyTemplateBankError,
    FrameDecodeError,
    TemplateConstructionError,
    TemplateDecodeError,
    TemplateDirectoryError,
    TemplatePaddingError,
)
from .geometry import BBoxOverlapCalculator
from .preprocessing import ImagePreprocessor, PreprocessedImage
from .templates import Template, TemplateBank, build_template
from .matching import CorrelationMatcher
from .merging import DetectionMerger
from .detector import TriangleFinder

__all__ = [
    "Constants",
    "Detection",
    "DetectionParams",
    "FinderConfig",
    "FinderSettings",
    "Match",
    "load_settings",
    "DomainException",
    "EmptyTemplateBankError",
    "FrameDecodeError",
    "TemplateConstructionError",
    "TemplateDecodeError",
    "TemplateDirectoryError",
    "TemplatePaddingError",
    "BBoxOverlapCalculator",
    "ImagePreprocessor",
    "PreprocessedImage",
    "Template",
    "TemplateBank",
    "build_template",
    "CorrelationMatcher",
    "DetectionMerger",
    "TriangleFinder",
    "__version__",
]
