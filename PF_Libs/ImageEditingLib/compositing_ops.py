"""
Pairwise compositing operations.

Every operation combines two PixelBuffers of identical size into a new
PixelBuffer. Neither input is modified. Channel math happens on the 0-255
byte scale; results are clamped and truncated back to bytes.

Unless stated otherwise the result keeps the alpha channel of the first
(left) image and only r, g, b are combined.

Functions:
    blend: Weighted mix of two images
    composite_over: Porter-Duff "over" using the left image's alpha
    apply_alpha_mask: Use the mask's red channel as alpha
    multiply, screen, overlay: Photographic blend modes
    darken, lighten, maximum, minimum: Per-channel min/max
    add, subtract, difference, average: Arithmetic modes
    composite: Dispatch any of the above by name
"""

import logging
import re
from typing import Any, Callable, Dict, Tuple

import numpy as np

from PF_Libs.constants import CHANNEL_MAX, OVERLAY_MIDPOINT
from PF_Libs.ImageEditingLib.errors import ShapeMismatchError
from PF_Libs.ImageEditingLib.image_models import PixelBuffer, to_channels

logger = logging.getLogger(__name__)


def _prepare(operation: str, image: PixelBuffer, other: PixelBuffer) -> Tuple[np.ndarray, np.ndarray]:
    """
    Validate operands and return their arrays widened to int32.

    Raises:
        TypeError: If either operand is not a PixelBuffer
        ShapeMismatchError: If the operands differ in size
    """
    for operand in (image, other):
        if not isinstance(operand, PixelBuffer):
            raise TypeError(f"Expected PixelBuffer for {operation}, got {type(operand)}")

    if not image.same_shape(other):
        raise ShapeMismatchError(operation, image.size, other.size)

    logger.debug(f"Compositing {operation} on {image.width}x{image.height} images")
    return image.to_array().astype(np.int32), other.to_array().astype(np.int32)


def _combine(base: np.ndarray, rgb: np.ndarray) -> PixelBuffer:
    return PixelBuffer.from_channels(to_channels(rgb), base[:, :, 3].astype(np.uint8))


def blend(image: PixelBuffer, other: PixelBuffer, alpha: float) -> PixelBuffer:
    """
    Mix two images: ``alpha * image + (1 - alpha) * other``.

    Args:
        image: Left image (weight ``alpha``, alpha channel kept)
        other: Right image (weight ``1 - alpha``)
        alpha: Mix factor in [0.0, 1.0]

    Raises:
        ValueError: If alpha is outside [0.0, 1.0]
        ShapeMismatchError: If the images differ in size
    """
    if not (0.0 <= alpha <= 1.0):
        raise ValueError(f"alpha must be 0.0-1.0, got {alpha}")

    left, right = _prepare("blend", image, other)
    mixed = alpha * left[:, :, :3] + (1.0 - alpha) * right[:, :, :3]
    return _combine(left, mixed)


def composite_over(image: PixelBuffer, background: PixelBuffer) -> PixelBuffer:
    """
    Draw ``image`` over ``background`` using the image's alpha as weight.

    Alpha is read on the 0-255 scale and divided by 255 before weighting:
    ``image * a / 255 + background * (1 - a / 255)``. The result keeps the
    foreground alpha.
    """
    left, right = _prepare("composite", image, background)
    weight = left[:, :, 3:4] / float(CHANNEL_MAX)
    mixed = left[:, :, :3] * weight + right[:, :, :3] * (1.0 - weight)
    return _combine(left, mixed)


def apply_alpha_mask(image: PixelBuffer, mask: PixelBuffer) -> PixelBuffer:
    """Replace the image's alpha with the mask's red channel."""
    left, right = _prepare("apply alpha mask", image, mask)
    return PixelBuffer.from_channels(left[:, :, :3].astype(np.uint8), right[:, :, 0].astype(np.uint8))


def _multiply(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    return left * right // CHANNEL_MAX


def _screen(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    return CHANNEL_MAX - (CHANNEL_MAX - left) * (CHANNEL_MAX - right) // CHANNEL_MAX


def multiply(image: PixelBuffer, other: PixelBuffer) -> PixelBuffer:
    """``image * other / 255`` (darkens)."""
    left, right = _prepare("multiply", image, other)
    return _combine(left, _multiply(left[:, :, :3], right[:, :, :3]))


def screen(image: PixelBuffer, other: PixelBuffer) -> PixelBuffer:
    """``255 - (255 - image) * (255 - other) / 255`` (lightens)."""
    left, right = _prepare("screen", image, other)
    return _combine(left, _screen(left[:, :, :3], right[:, :, :3]))


def overlay(image: PixelBuffer, other: PixelBuffer) -> PixelBuffer:
    """
    Multiply where the left channel is dark, screen where it is light.

    The branch is picked per channel from that channel's own left value
    (< 128 uses multiply, otherwise screen).
    """
    left, right = _prepare("overlay", image, other)
    base = left[:, :, :3]
    blended = np.where(
        base < OVERLAY_MIDPOINT,
        _multiply(base, right[:, :, :3]),
        _screen(base, right[:, :, :3]),
    )
    return _combine(left, blended)


def darken(image: PixelBuffer, other: PixelBuffer) -> PixelBuffer:
    left, right = _prepare("darken", image, other)
    return _combine(left, np.minimum(left[:, :, :3], right[:, :, :3]))


def lighten(image: PixelBuffer, other: PixelBuffer) -> PixelBuffer:
    left, right = _prepare("lighten", image, other)
    return _combine(left, np.maximum(left[:, :, :3], right[:, :, :3]))


def add(image: PixelBuffer, other: PixelBuffer, scale: float = 1.0) -> PixelBuffer:
    """``clamp(image + scale * other, 0, 255)``."""
    left, right = _prepare("add", image, other)
    return _combine(left, left[:, :, :3] + float(scale) * right[:, :, :3])


def subtract(image: PixelBuffer, other: PixelBuffer) -> PixelBuffer:
    """``clamp(image - other, 0, 255)``."""
    left, right = _prepare("subtract", image, other)
    return _combine(left, left[:, :, :3] - right[:, :, :3])


def difference(image: PixelBuffer, other: PixelBuffer) -> PixelBuffer:
    left, right = _prepare("find difference", image, other)
    return _combine(left, np.abs(left[:, :, :3] - right[:, :, :3]))


def average(image: PixelBuffer, other: PixelBuffer) -> PixelBuffer:
    """``(image + other) / 2`` with integer truncation."""
    left, right = _prepare("average", image, other)
    return _combine(left, (left[:, :, :3] + right[:, :, :3]) // 2)


def maximum(image: PixelBuffer, other: PixelBuffer) -> PixelBuffer:
    left, right = _prepare("find max", image, other)
    return _combine(left, np.maximum(left[:, :, :3], right[:, :, :3]))


def minimum(image: PixelBuffer, other: PixelBuffer) -> PixelBuffer:
    left, right = _prepare("find min", image, other)
    return _combine(left, np.minimum(left[:, :, :3], right[:, :, :3]))


COMPOSITE_OPERATIONS: Dict[str, Callable[..., PixelBuffer]] = {
    "blend": blend,
    "composite_over": composite_over,
    "alpha_mask": apply_alpha_mask,
    "multiply": multiply,
    "screen": screen,
    "overlay": overlay,
    "darken": darken,
    "lighten": lighten,
    "add": add,
    "subtract": subtract,
    "difference": difference,
    "average": average,
    "max": maximum,
    "min": minimum,
}

# Public function names accepted in place of their dispatch keys
_OPERATION_ALIASES = {
    "maximum": "max",
    "minimum": "min",
    "apply_alpha_mask": "alpha_mask",
}


def normalize_operation_name(operation: str) -> str:
    """
    Turn a user-supplied operation name into a COMPOSITE_OPERATIONS key.

    "Composite Over", "composite-over" and "compositeOver" all map to
    "composite_over"; the function names "maximum", "minimum" and
    "apply_alpha_mask" map to their short keys.

    Raises:
        ValueError: If the name matches no operation
    """
    name = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", str(operation).strip())
    key = re.sub(r"[\s\-]+", "_", name).lower()
    key = _OPERATION_ALIASES.get(key, key)
    if key not in COMPOSITE_OPERATIONS:
        valid = ", ".join(sorted(COMPOSITE_OPERATIONS))
        raise ValueError(f"Unknown composite operation: {operation}. Valid operations: {valid}")
    return key


def composite(operation: str, image: PixelBuffer, other: PixelBuffer, **params: Any) -> PixelBuffer:
    """
    Run a compositing operation by name.

    Args:
        operation: Key of COMPOSITE_OPERATIONS (e.g. "multiply", "blend"), in
                   any spelling ``normalize_operation_name`` accepts
        image: Left image
        other: Right image
        **params: Extra arguments for the operation (``alpha`` for blend,
                  ``scale`` for add)

    Raises:
        ValueError: If the operation name is unknown
    """
    return COMPOSITE_OPERATIONS[normalize_operation_name(operation)](image, other, **params)
