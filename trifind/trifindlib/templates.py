"""
templates - Template construction and the template bank

A Template is an immutable, preprocessed reference kernel plus the geometry
needed to map matches back to the original image. The TemplateBank is built
once at startup and only read afterwards, so it can be shared between
concurrent detection calls.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .config import Constants
from .exceptions import (
    EmptyTemplateBankError,
    TemplateDecodeError,
    TemplateDirectoryError,
    TemplatePaddingError,
)
from .preprocessing import ImagePreprocessor

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Template:
    """Preprocessed reference kernel.

    Attributes:
        kernel: Zero-mean edge magnitudes (read-only)
        padding: Pixels added on every side before edge detection
        original_size: (width, height) of the unscaled source image
        name: Optional label, e.g. the source file name
        sum_kernel: Sum of squared kernel values (template energy)
    """
    kernel: np.ndarray
    padding: int
    original_size: Tuple[int, int]
    name: Optional[str] = None
    sum_kernel: float = field(init=False)

    def __post_init__(self):
        kernel = np.array(self.kernel, dtype=np.float64)
        if kernel.ndim != 2:
            raise ValueError(f"Template kernel must be 2-D, got shape {kernel.shape}")
        kernel.setflags(write=False)
        object.__setattr__(self, "kernel", kernel)
        object.__setattr__(self, "sum_kernel", float(np.sum(kernel * kernel)))

    @property
    def kernel_height(self) -> int:
        return self.kernel.shape[0]

    @property
    def kernel_width(self) -> int:
        return self.kernel.shape[1]

    @property
    def is_inert(self) -> bool:
        """A flat edge response can never score above 0."""
        return self.sum_kernel == 0


def build_template(
    image: Optional[np.ndarray],
    scale: float,
    name: Optional[str] = None,
    preprocessor: Optional[ImagePreprocessor] = None,
) -> Template:
    """Build a template from a decoded image.

    Pipeline: rescale, pad, grayscale, Sobel, zero-mean, then the kernel energy.

    Args:
        image: Decoded template image
        scale: Resize factor shared with the frames it will be matched against
        name: Optional label used in log and error messages
        preprocessor: Preprocessor to use, default settings when None

    Returns:
        Template

    Raises:
        TemplateDecodeError: If the image is missing or empty
        TemplatePaddingError: If the padded width is not resized width + 2 * padding
    """
    label = name or "<image>"
    if image is None or image.size == 0:
        raise TemplateDecodeError(f"Template image {label} is empty or could not be decoded")

    preprocessor = preprocessor or ImagePreprocessor()
    original_height, original_width = image.shape[:2]

    result = preprocessor.preprocess(image, scale, is_template=True)
    if result.is_empty:
        raise TemplateDecodeError(
            f"Template image {label} is empty after resizing with scale {scale}"
        )

    padded_width = result.matrix.shape[1]
    expected_width = result.resized_width + 2 * result.padding
    if padded_width != expected_width:
        raise TemplatePaddingError(
            f"Width after padding ({padded_width}) does not match expected padded width "
            f"({expected_width}) for template {label}"
        )

    template = Template(
        kernel=result.matrix,
        padding=result.padding,
        original_size=(original_width, original_height),
        name=name,
    )
    logger.debug(
        f"Template {label}: original size {original_width}x{original_height}, "
        f"kernel {template.kernel_width}x{template.kernel_height}, padding {template.padding}"
    )
    if template.is_inert:
        logger.warning(f"Template {label} has no edge response and will never match")
    return template


class TemplateBank:
    """Ordered, read-only collection of templates."""

    def __init__(self, templates: Sequence[Template], scale: float):
        self._templates = tuple(templates)
        self.scale = scale

    @classmethod
    def build(
        cls,
        images: Sequence[np.ndarray],
        scale: float,
        names: Optional[Sequence[str]] = None,
        preprocessor: Optional[ImagePreprocessor] = None,
    ) -> "TemplateBank":
        """Build a bank from already decoded template images.

        Args:
            images: Decoded template images, in bank order
            scale: Resize factor shared with the frames
            names: Optional label per image
            preprocessor: Preprocessor to use, default settings when None

        Returns:
            TemplateBank

        Raises:
            TemplateConstructionError: If any template fails or none results
        """
        if names is not None and len(names) != len(images):
            raise ValueError(
                f"Got {len(names)} template names for {len(images)} images"
            )

        preprocessor = preprocessor or ImagePreprocessor()
        templates = []
        for index, image in enumerate(images):
            name = names[index] if names is not None else f"template_{index}"
            templates.append(build_template(image, scale, name=name, preprocessor=preprocessor))

        if not templates:
            raise EmptyTemplateBankError("No valid template found")

        logger.info(f"Template bank built with {len(templates)} templates (scale {scale})")
        return cls(templates, scale)

    @classmethod
    def from_directory(
        cls,
        directory: Path,
        scale: float,
        preprocessor: Optional[ImagePreprocessor] = None,
    ) -> "TemplateBank":
        """Decode every template image in a directory and build a bank.

        Files are taken in name order; sub-directories and files without a
        template extension are skipped.

        Raises:
            TemplateDirectoryError: If the directory cannot be read
            TemplateDecodeError: If an image fails to decode
            EmptyTemplateBankError: If no template image is found
        """
        directory = Path(directory)
        try:
            entries = sorted(os.listdir(directory))
        except OSError as e:
            raise TemplateDirectoryError(
                f"Error reading template directory {directory}: {e}",
                log_message=repr(e),
            ) from e

        images: List[np.ndarray] = []
        names: List[str] = []
        for filename in entries:
            path = directory / filename
            if path.is_dir():
                continue
            if not filename.lower().endswith(Constants.VALID_TEMPLATE_EXTENSIONS):
                continue

            image = cv2.imread(str(path), cv2.IMREAD_COLOR)
            if image is None:
                raise TemplateDecodeError(f"Error decoding template image {path}")

            images.append(image)
            names.append(filename)

        if not images:
            raise EmptyTemplateBankError(f"No valid template found in {directory}")

        logger.info(f"Loaded {len(images)} template images from {directory}")
        return cls.build(images, scale, names=names, preprocessor=preprocessor)

    @property
    def templates(self) -> Tuple[Template, ...]:
        return self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[Template]:
        return iter(self._templates)

    def __getitem__(self, index: int) -> Template:
        return self._templates[index]
