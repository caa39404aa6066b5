"""
preprocessing - Image preprocessing for template matching

Turns a decoded image into an edge-magnitude matrix so that matching responds
to outline and shape rather than to brightness or color. The same pipeline
(with padding and zero-mean added) builds the template kernels.
"""

from dataclasses import dataclass

import cv2
import numpy as np

from .config import Constants
from .geometry import round_half_up


def empty_matrix() -> np.ndarray:
    return np.zeros((0, 0), dtype=np.float64)


def resize_image(image: np.ndarray, scale: float) -> np.ndarray:
    """Resize an image to round(width * scale) pixels wide, keeping aspect ratio.

    Lanczos interpolation is used for both frames and templates so their
    relative geometry stays consistent.

    Args:
        image: Decoded image (H x W or H x W x C)
        scale: Resize factor, > 0

    Returns:
        Resized image. A target of zero pixels yields an image with no pixels.
    """
    height, width = image.shape[:2]
    if scale == 1.0 or width == 0 or height == 0:
        return image

    new_width = round_half_up(width * scale)
    new_height = round_half_up(height * new_width / width)
    if new_width <= 0 or new_height <= 0:
        return image[:0, :0]

    return cv2.resize(image, (new_width, new_height), interpolation=cv2.INTER_LANCZOS4)


def add_padding(image: np.ndarray, padding: int) -> np.ndarray:
    """Pad every side with the color of the top-left pixel.

    The top-left pixel approximates the template background.
    """
    if padding <= 0:
        return image

    corner = image[0, 0]
    if np.ndim(corner) == 0:
        bg_color = float(corner)
    else:
        bg_color = tuple(float(c) for c in corner)

    return cv2.copyMakeBorder(
        image, padding, padding, padding, padding,
        cv2.BORDER_CONSTANT, value=bg_color,
    )


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert an image to a single luma channel as float64.

    2-D images are taken as luma already. 3 and 4 channel images are expected
    in OpenCV's BGR / BGRA order.
    """
    if image.ndim == 2:
        return image.astype(np.float64)

    channels = image.shape[2]
    if channels == 1:
        return image[:, :, 0].astype(np.float64)

    if image.dtype not in (np.uint8, np.uint16, np.float32):
        image = image.astype(np.float32)

    if channels == 3:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    elif channels == 4:
        gray = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    else:
        raise ValueError(f"Unsupported number of channels: {channels}")

    return gray.astype(np.float64)


def sobel_edges(gray: np.ndarray, noise_floor: float = Constants.EDGE_NOISE_FLOOR) -> np.ndarray:
    """Compute the 3x3 Sobel gradient magnitude of a grayscale matrix.

    Border pixels are left at 0 and magnitudes below ``noise_floor`` are zeroed.

    Args:
        gray: Grayscale matrix (8-bit value range)
        noise_floor: Minimum magnitude kept

    Returns:
        Edge magnitude matrix with the same shape as ``gray``
    """
    height, width = gray.shape
    edges = np.zeros((height, width), dtype=np.float64)
    if height < 3 or width < 3:
        return edges

    gray = np.ascontiguousarray(gray, dtype=np.float64)
    gx = cv2.Sobel(gray, cv2.CV_64F, 1, 0, ksize=3)
    gy = cv2.Sobel(gray, cv2.CV_64F, 0, 1, ksize=3)
    magnitude = np.sqrt(gx * gx + gy * gy)

    edges[1:-1, 1:-1] = magnitude[1:-1, 1:-1]
    edges[edges < noise_floor] = 0.0
    return edges


def zero_mean(matrix: np.ndarray) -> np.ndarray:
    """Subtract the matrix-wide mean from every cell."""
    if matrix.size == 0:
        return matrix.astype(np.float64)
    return matrix - matrix.mean()


@dataclass(frozen=True, eq=False)
class PreprocessedImage:
    """Output of the preprocessor."""
    matrix: np.ndarray
    padding: int = 0  # pixels added per side, templates only
    resized_width: int = 0  # width after rescale, before padding

    @property
    def is_empty(self) -> bool:
        return self.matrix.size == 0


class ImagePreprocessor:
    """Converts decoded images into edge-magnitude matrices."""

    def __init__(
        self,
        noise_floor: float = Constants.EDGE_NOISE_FLOOR,
        padding_ratio: float = Constants.PADDING_RATIO,
    ):
        self.noise_floor = noise_floor
        self.padding_ratio = padding_ratio

    def preprocess(
        self, image: np.ndarray, scale: float, is_template: bool = False
    ) -> PreprocessedImage:
        """Run the preprocessing pipeline on one image.

        Frames go through rescale, grayscale and Sobel. Templates are also
        padded before edge detection and made zero-mean afterwards.

        Args:
            image: Decoded image (H x W or H x W x C)
            scale: Resize factor, > 0
            is_template: Whether the image is a template

        Returns:
            PreprocessedImage; its matrix is empty for zero-size input
        """
        if not scale > 0:
            raise ValueError(f"Scale must be greater than 0, got: {scale}")

        if image is None or image.size == 0:
            return PreprocessedImage(matrix=empty_matrix())

        resized = resize_image(image, scale)
        resized_width = resized.shape[1]
        if resized.size == 0:
            return PreprocessedImage(matrix=empty_matrix(), resized_width=resized_width)

        padding = 0
        if is_template:
            padding = round_half_up(self.padding_ratio * resized_width)
            resized = add_padding(resized, padding)

        gray = to_grayscale(resized)
        edges = sobel_edges(gray, self.noise_floor)

        if is_template:
            edges = zero_mean(edges)

        return PreprocessedImage(matrix=edges, padding=padding, resized_width=resized_width)

    def preprocess_frame(self, image: np.ndarray, scale: float) -> np.ndarray:
        """Shortcut returning only the frame matrix."""
        return self.preprocess(image, scale, is_template=False).matrix
