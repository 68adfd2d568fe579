"""
Geometry transforms: flips, quarter-turn rotations, resize and crop.

Every function returns a new PixelBuffer; rotations, resize and crop return
a buffer of a different size.
"""

import numpy as np

from PF_Libs.constants import MAX_RESIZE_DIMENSION
from PF_Libs.ImageEditingLib.image_models import PixelBuffer


def _array(image: PixelBuffer) -> np.ndarray:
    if not isinstance(image, PixelBuffer):
        raise TypeError(f"Expected PixelBuffer, got {type(image)}")
    return image.to_array()


def flip_horizontal(image: PixelBuffer) -> PixelBuffer:
    """Mirror left to right."""
    return PixelBuffer(_array(image)[:, ::-1])


def flip_vertical(image: PixelBuffer) -> PixelBuffer:
    """Mirror top to bottom."""
    return PixelBuffer(_array(image)[::-1, :])


def rotate_right(image: PixelBuffer) -> PixelBuffer:
    """Rotate 90 degrees clockwise; width and height swap."""
    return PixelBuffer(np.rot90(_array(image), k=-1))


def rotate_left(image: PixelBuffer) -> PixelBuffer:
    """Rotate 90 degrees counter-clockwise; width and height swap."""
    return PixelBuffer(np.rot90(_array(image), k=1))


def resize(image: PixelBuffer, width: int, height: int) -> PixelBuffer:
    """
    Nearest-neighbor resize.

    Destination pixel (y, x) samples source pixel
    ``(int(y * src_height / height), int(x * src_width / width))``.

    Args:
        image: Source image (must not be empty)
        width: New width (1-4096)
        height: New height (1-4096)

    Raises:
        ValueError: If a dimension is out of range or the source is empty
    """
    source = _array(image)

    if not (0 < width <= MAX_RESIZE_DIMENSION) or not (0 < height <= MAX_RESIZE_DIMENSION):
        raise ValueError(
            f"width and height must be 1-{MAX_RESIZE_DIMENSION}, got {width}x{height}"
        )

    src_height, src_width = source.shape[:2]
    if src_width == 0 or src_height == 0:
        raise ValueError("Cannot resize an empty image")

    cols = (np.arange(width) * (src_width / width)).astype(np.intp)
    rows = (np.arange(height) * (src_height / height)).astype(np.intp)
    cols = np.minimum(cols, src_width - 1)
    rows = np.minimum(rows, src_height - 1)
    return PixelBuffer(source[rows[:, np.newaxis], cols[np.newaxis, :]])


def crop(image: PixelBuffer, x: int, y: int, width: int, height: int) -> PixelBuffer:
    """
    Cut out a rectangle.

    A region that runs past the right or bottom edge is clipped to the image.

    Args:
        image: Source image
        x: Left column (0 to image width)
        y: Top row (0 to image height)
        width: Region width (>= 0)
        height: Region height (>= 0)

    Raises:
        ValueError: If the origin lies outside the image or the size is negative
    """
    source = _array(image)
    src_height, src_width = source.shape[:2]

    if not (0 <= x <= src_width):
        raise ValueError(f"x must be 0-{src_width}, got {x}")
    if not (0 <= y <= src_height):
        raise ValueError(f"y must be 0-{src_height}, got {y}")
    if width < 0 or height < 0:
        raise ValueError(f"Crop size must be >= 0, got {width}x{height}")

    width = min(width, src_width - x)
    height = min(height, src_height - y)
    return PixelBuffer(source[y:y + height, x:x + width])


TRANSFORMS = {
    "flip_horizontal": flip_horizontal,
    "flip_vertical": flip_vertical,
    "rotate_right": rotate_right,
    "rotate_left": rotate_left,
    "resize": resize,
    "crop": crop,
}
