"""
matching - Sliding-window zero-mean normalized cross-correlation

Searches a preprocessed frame for one template and maps every hit back to the
pixel space of the original, unscaled frame.
"""

from typing import List, Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .config import Match, is_valid_stride
from .geometry import round_half_up
from .templates import Template


class CorrelationMatcher:
    """Stateless brute-force ZNCC matcher."""

    # Window cells scored per batch, bounding the centered copy of the windows
    MAX_CHUNK_ELEMENTS = 1 << 20

    @staticmethod
    def find_matches(
        template: Template,
        frame_matrix: np.ndarray,
        stride: int,
        threshold: float,
        scale: float,
    ) -> List[Match]:
        """Find every window whose correlation with the template exceeds threshold.

        Windows are probed row by row from the top-left corner, every
        ``stride`` pixels in both directions, including the last position
        where the kernel still fits.

        Args:
            template: Template to search for
            frame_matrix: Preprocessed frame (edge magnitudes)
            stride: Step in pixels between probed positions, >= 1
            threshold: Strict lower bound on the reported score
            scale: Resize factor the frame was preprocessed with, > 0

        Returns:
            Matches in original image coordinates, in row-major probe order.
            Empty when the frame is empty or smaller than the kernel.
        """
        if not is_valid_stride(stride):
            raise ValueError(f"Stride must be an integer >= 1, got: {stride}")
        if not scale > 0:
            raise ValueError(f"Scale must be greater than 0, got: {scale}")

        frame_matrix = np.asarray(frame_matrix, dtype=np.float64)
        if frame_matrix.ndim != 2 or frame_matrix.size == 0:
            return []

        kernel = template.kernel
        kernel_height, kernel_width = kernel.shape
        frame_height, frame_width = frame_matrix.shape
        if frame_height < kernel_height or frame_width < kernel_width:
            return []
        if kernel.size == 0 or template.sum_kernel == 0:
            return []

        windows = sliding_window_view(frame_matrix, (kernel_height, kernel_width))
        windows = windows[::stride, ::stride]
        chunk_size = max(1, CorrelationMatcher.MAX_CHUNK_ELEMENTS // kernel.size)

        matches = []
        for row_index, row in enumerate(windows):
            i = row_index * stride

            for start in range(0, len(row), chunk_size):
                corr, valid = CorrelationMatcher._score_windows(
                    row[start:start + chunk_size], kernel, template.sum_kernel
                )

                for col_index in np.flatnonzero(valid & (corr > threshold)):
                    j = (start + int(col_index)) * stride
                    matches.append(Match(
                        x=round_half_up((j + template.padding) / scale),
                        y=round_half_up((i + template.padding) / scale),
                        width=template.original_size[0],
                        height=template.original_size[1],
                        score=float(corr[col_index]),
                    ))

        return matches

    @staticmethod
    def _score_windows(
        windows: np.ndarray, kernel: np.ndarray, sum_kernel: float
    ) -> Tuple[np.ndarray, np.ndarray]:
        """ZNCC of every window against the kernel.

        Args:
            windows: Window views, shape (positions, kernel_height, kernel_width)
            kernel: Zero-mean template kernel
            sum_kernel: Sum of squared kernel values

        Returns:
            (scores, valid) where valid marks windows with non-zero variance.
            Scores of invalid windows are 0.
        """
        crop_mean = windows.mean(axis=(1, 2))
        centered = windows - crop_mean[:, None, None]
        sum_product = np.einsum("nyx,yx->n", centered, kernel)
        sum_crop_squared = np.einsum("nyx,nyx->n", centered, centered)
        denominator = np.sqrt(sum_crop_squared * sum_kernel)

        valid = denominator > 0
        corr = np.zeros_like(sum_product)
        corr[valid] = sum_product[valid] / denominator[valid]
        return corr, valid

    @staticmethod
    def clamp_score(score: float) -> float:
        """Clamp a score to [-1, 1] for display. Never use before thresholding."""
        return max(-1.0, min(1.0, score))
