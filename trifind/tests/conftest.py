"""
Pytest configuration and shared fixtures for trifind tests.
"""

import cv2
import numpy as np
import pytest

from trifind.trifindlib import Template

WHITE = (255, 255, 255)
TRIANGLE_COLOR = (40, 60, 200)

# Where the synthetic triangle template is pasted in the synthetic frame
TRIANGLE_ORIGIN = (60, 50)


@pytest.fixture
def triangle_origin():
    """Top-left corner of the triangle template inside triangle_frame."""
    return TRIANGLE_ORIGIN


@pytest.fixture
def checkerboard_kernel():
    """4x4 zero-mean checkerboard kernel (energy 16)."""
    return np.array([
        [1.0, -1.0, 1.0, -1.0],
        [-1.0, 1.0, -1.0, 1.0],
        [1.0, -1.0, 1.0, -1.0],
        [-1.0, 1.0, -1.0, 1.0],
    ])


@pytest.fixture
def checkerboard_template(checkerboard_kernel):
    """Unpadded template built directly from the checkerboard kernel."""
    return Template(kernel=checkerboard_kernel, padding=0, original_size=(4, 4), name="checkerboard")


@pytest.fixture
def checkerboard_frame(checkerboard_kernel):
    """8x8 zero frame with the checkerboard embedded at (2, 2)."""
    frame = np.zeros((8, 8))
    frame[2:6, 2:6] = checkerboard_kernel
    return frame


@pytest.fixture
def triangle_template_image():
    """40x40 BGR template: filled triangle on a white background."""
    image = np.full((40, 40, 3), WHITE, dtype=np.uint8)
    points = np.array([[8, 32], [32, 32], [20, 8]], dtype=np.int32)
    cv2.fillPoly(image, [points], TRIANGLE_COLOR)
    return image


@pytest.fixture
def triangle_frame(triangle_template_image):
    """200x160 white BGR frame with the template pasted at TRIANGLE_ORIGIN."""
    frame = np.full((160, 200, 3), WHITE, dtype=np.uint8)
    x, y = TRIANGLE_ORIGIN
    h, w = triangle_template_image.shape[:2]
    frame[y:y + h, x:x + w] = triangle_template_image
    return frame


@pytest.fixture
def template_dir(tmp_path, triangle_template_image):
    """Directory with two template images plus files that must be ignored."""
    directory = tmp_path / "templates"
    directory.mkdir()
    cv2.imwrite(str(directory / "b_triangle.png"), triangle_template_image)
    cv2.imwrite(str(directory / "a_triangle.png"), triangle_template_image)
    (directory / "notes.txt").write_text("not a template")
    (directory / "nested").mkdir()
    return directory
