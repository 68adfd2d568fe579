"""
Single-image tone and color adjustments.

All functions return a new PixelBuffer and leave the alpha channel untouched.

Functions:
    grayscale: Replace r, g, b with their luma
    threshold: Binarize on luma
    invert: Photographic negative
    brightness: Add a constant offset
    contrast: Scale channels by a factor
    tint: Mix toward a solid color
    add_noise: Add uniform random noise
"""

from typing import Optional, Sequence

import numpy as np

from PF_Libs.constants import (
    CHANNEL_MAX,
    DEFAULT_THRESHOLD,
    GRAYSCALE_WEIGHTS,
    NOISE_CENTER,
)
from PF_Libs.ImageEditingLib.image_models import PixelBuffer, to_channels


def _split(image: PixelBuffer):
    if not isinstance(image, PixelBuffer):
        raise TypeError(f"Expected PixelBuffer, got {type(image)}")
    array = image.to_array()
    return array[:, :, :3], array[:, :, 3]


def _luma(rgb: np.ndarray) -> np.ndarray:
    # float32 matches the single-precision weights the gray levels are defined with
    weights = np.array(GRAYSCALE_WEIGHTS, dtype=np.float32)
    return to_channels(rgb.astype(np.float32) @ weights)


def grayscale(image: PixelBuffer) -> PixelBuffer:
    rgb, alpha = _split(image)
    gray = _luma(rgb)
    return PixelBuffer.from_channels(np.repeat(gray[..., np.newaxis], 3, axis=2), alpha)


def threshold(image: PixelBuffer, value: int = DEFAULT_THRESHOLD) -> PixelBuffer:
    """
    Binarize an image.

    Pixels whose luma is below ``value`` become black, all others white.
    """
    rgb, alpha = _split(image)
    gray = _luma(rgb)
    binary = np.where(gray < int(value), 0, CHANNEL_MAX).astype(np.uint8)
    return PixelBuffer.from_channels(np.repeat(binary[..., np.newaxis], 3, axis=2), alpha)


def invert(image: PixelBuffer) -> PixelBuffer:
    rgb, alpha = _split(image)
    return PixelBuffer.from_channels(CHANNEL_MAX - rgb, alpha)


def brightness(image: PixelBuffer, offset: int) -> PixelBuffer:
    """Add ``offset`` to every color channel, clamped to 0-255."""
    rgb, alpha = _split(image)
    return PixelBuffer.from_channels(to_channels(rgb.astype(np.int32) + int(offset)), alpha)


def contrast(image: PixelBuffer, factor: float) -> PixelBuffer:
    """Multiply every color channel by ``factor``, clamped to 0-255."""
    if factor < 0:
        raise ValueError(f"factor must be >= 0, got {factor}")
    rgb, alpha = _split(image)
    return PixelBuffer.from_channels(to_channels(rgb * float(factor)), alpha)


def tint(image: PixelBuffer, color: Sequence[int], strength: float) -> PixelBuffer:
    """
    Mix every pixel toward a solid color.

    Args:
        image: Source image
        color: RGB or RGBA color to mix toward (alpha ignored)
        strength: 0.0 keeps the image, 1.0 gives the solid color

    Raises:
        ValueError: If strength is outside [0.0, 1.0] or color is malformed
    """
    if not (0.0 <= strength <= 1.0):
        raise ValueError(f"strength must be 0.0-1.0, got {strength}")
    if len(color) not in (3, 4):
        raise ValueError(f"color must be RGB or RGBA, got {tuple(color)}")

    rgb, alpha = _split(image)
    target = np.array(color[:3], dtype=np.float64)
    mixed = rgb * (1.0 - strength) + target * strength
    return PixelBuffer.from_channels(to_channels(mixed), alpha)


def add_noise(
    image: PixelBuffer,
    intensity: float,
    seed: Optional[int] = None,
) -> PixelBuffer:
    """
    Add uniform noise to every color channel.

    Each channel gets ``(n - 128) * intensity`` added, with ``n`` drawn
    uniformly from 0-255 independently per channel.

    Args:
        image: Source image
        intensity: Noise scale (0.0 = no change)
        seed: Optional seed for reproducible noise
    """
    if intensity < 0:
        raise ValueError(f"intensity must be >= 0, got {intensity}")

    rgb, alpha = _split(image)
    rng = np.random.default_rng(seed)
    samples = rng.integers(0, CHANNEL_MAX + 1, size=rgb.shape)
    noisy = rgb + (samples - NOISE_CENTER) * float(intensity)
    return PixelBuffer.from_channels(to_channels(noisy), alpha)


ADJUSTMENTS = {
    "grayscale": grayscale,
    "threshold": threshold,
    "invert": invert,
    "brightness": brightness,
    "contrast": contrast,
    "tint": tint,
    "noise": add_noise,
}
