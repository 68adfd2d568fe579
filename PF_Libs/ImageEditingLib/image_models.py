"""
Image editing data models for Pixel Forge.

This module defines core data structures used throughout the image editing system.

Classes:
    Pixel: Named RGBA tuple with 8-bit channels
    PixelBuffer: Width x height grid of RGBA pixels backed by a numpy array

Functions:
    to_channels: Clamp and truncate computed channel values back to bytes

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
"""

from typing import Any, NamedTuple, Sequence, Tuple

import numpy as np
from PIL import Image

from PF_Libs.constants import (
    ACCUMULATOR_DECIMALS,
    CHANNEL_MAX,
    CHANNEL_MIN,
    DEFAULT_FILL_PIXEL,
    PIXEL_CHANNELS,
)

RgbaColor = Tuple[int, int, int, int]


class Pixel(NamedTuple):
    r: int
    g: int
    b: int
    a: int


def to_channels(values: np.ndarray) -> np.ndarray:
    """
    Convert computed channel values to 8-bit channels.

    Values are clamped to [0, 255] and truncated toward zero. Float sums are
    rounded to a few decimals first so accumulation noise such as
    ``9 * (100 / 9) == 99.99999999999999`` does not lose a level.

    Args:
        values: Array of int or float channel values of any shape

    Returns:
        uint8 array of the same shape
    """
    values = np.asarray(values)
    if np.issubdtype(values.dtype, np.floating):
        values = np.round(values, ACCUMULATOR_DECIMALS)
    clipped = np.clip(values, CHANNEL_MIN, CHANNEL_MAX)
    return np.trunc(clipped).astype(np.uint8)


def _validate_pixel(pixel: Sequence[int]) -> Pixel:
    if len(pixel) != PIXEL_CHANNELS:
        raise ValueError(f"Pixel must have {PIXEL_CHANNELS} channels, got {len(pixel)}")
    for value in pixel:
        if not (CHANNEL_MIN <= int(value) <= CHANNEL_MAX):
            raise ValueError(f"Channel values must be 0-255, got {tuple(pixel)}")
    return Pixel(*(int(value) for value in pixel))


class PixelBuffer:
    """
    A width x height grid of RGBA pixels.

    Pixels are addressed by ``(row, col)``, i.e. ``(y, x)``. The grid is stored
    as a ``(height, width, 4)`` uint8 array that is never shared with another
    buffer: the constructor copies its input and every accessor that exposes
    the array hands out a copy.

    Example:
        >>> buffer = PixelBuffer.new(4, 2, fill=(255, 0, 0, 255))
        >>> buffer.size
        (4, 2)
        >>> buffer.get(1, 3)
        Pixel(r=255, g=0, b=0, a=255)
    """

    def __init__(self, pixels: Any):
        array = np.array(pixels, copy=True)
        if array.ndim != 3 or array.shape[2] != PIXEL_CHANNELS:
            raise ValueError(
                f"Pixel array must have shape (height, width, {PIXEL_CHANNELS}), "
                f"got {array.shape}"
            )
        if array.dtype != np.uint8:
            if array.size and (array.min() < CHANNEL_MIN or array.max() > CHANNEL_MAX):
                raise ValueError("Channel values must be 0-255")
            array = array.astype(np.uint8)
        self._pixels = array

    @classmethod
    def new(cls, width: int, height: int, fill: Sequence[int] = DEFAULT_FILL_PIXEL) -> "PixelBuffer":
        """
        Create a buffer filled with a single color.

        Args:
            width: Number of columns (>= 0)
            height: Number of rows (>= 0)
            fill: RGBA color for every pixel (default opaque black)

        Raises:
            ValueError: If a dimension is negative or fill is not a valid RGBA color
        """
        if width < 0 or height < 0:
            raise ValueError(f"Dimensions must be >= 0, got {width}x{height}")
        color = _validate_pixel(fill)
        array = np.empty((height, width, PIXEL_CHANNELS), dtype=np.uint8)
        array[...] = color
        return cls(array)

    @classmethod
    def from_channels(cls, rgb: np.ndarray, alpha: np.ndarray) -> "PixelBuffer":
        """Assemble a buffer from an (H, W, 3) color array and an (H, W) alpha array."""
        return cls(np.concatenate([rgb, alpha[..., np.newaxis]], axis=2).astype(np.uint8))

    @classmethod
    def from_image(cls, image: Any) -> "PixelBuffer":
        """
        Create a buffer from a PIL Image.

        Args:
            image: PIL Image in any mode (converted to RGBA)

        Raises:
            TypeError: If image is not a PIL Image
        """
        if not hasattr(image, "convert"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        array = np.asarray(rgba, dtype=np.uint8).reshape(rgba.height, rgba.width, PIXEL_CHANNELS)
        return cls(array)

    def to_image(self) -> Image.Image:
        """Return the buffer as a new RGBA PIL Image."""
        return Image.frombytes("RGBA", self.size, self._pixels.tobytes())

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height), matching PIL's ``Image.size``."""
        return self.width, self.height

    @property
    def shape(self) -> Tuple[int, int, int]:
        return tuple(self._pixels.shape)

    def _check_bounds(self, row: int, col: int) -> None:
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(
                f"Pixel ({row}, {col}) out of range for {self.width}x{self.height} image"
            )

    def get(self, row: int, col: int) -> Pixel:
        """
        Get the pixel at (row, col).

        Raises:
            IndexError: If row or col is outside the buffer
        """
        self._check_bounds(row, col)
        return Pixel(*(int(value) for value in self._pixels[row, col]))

    def set(self, row: int, col: int, pixel: Sequence[int]) -> None:
        """
        Set the pixel at (row, col).

        Raises:
            IndexError: If row or col is outside the buffer
            ValueError: If pixel is not a valid RGBA color
        """
        self._check_bounds(row, col)
        self._pixels[row, col] = _validate_pixel(pixel)

    def same_shape(self, other: "PixelBuffer") -> bool:
        return self.size == other.size

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self._pixels)

    def to_array(self) -> np.ndarray:
        """Return a copy of the backing (height, width, 4) uint8 array."""
        return self._pixels.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._pixels, other._pixels))

    __hash__ = None

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"
