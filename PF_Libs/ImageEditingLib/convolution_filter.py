"""
Convolution Filter Operations.

Applies a weight kernel of any size to every pixel of a PixelBuffer. The same
engine serves the preset 3x3 kernels and arbitrary rectangular kernels.

Boundary handling is zero padding: taps that fall outside the image read the
opaque black pixel (0, 0, 0, 255), so they add nothing to the color sums. Edge
pixels of a blurred image therefore come out darker than the interior.

Only the r, g, b channels are filtered. Alpha is copied from the source pixel.

Example:
    >>> from PF_Libs.ImageEditingLib.image_io import load_image
    >>> image = load_image("photo.png")
    >>>
    >>> # Preset kernel
    >>> edges = apply_kernel_type(image, KernelType.SOBEL_X)
    >>>
    >>> # Blur presets need normalizing, otherwise the result clips to white
    >>> blurred = apply_kernel_type(image, KernelType.BOX_BLUR, normalize=True)
    >>>
    >>> # Custom 1x5 horizontal smear
    >>> smeared = apply_kernel(image, normalize_kernel([[1, 1, 1, 1, 1]]))
"""

import logging
from typing import Any

import numpy as np

from PF_Libs.ImageEditingLib.errors import InvalidKernelError
from PF_Libs.ImageEditingLib.image_models import PixelBuffer, to_channels
from PF_Libs.ImageEditingLib.kernels import (
    KernelType,
    get_kernel,
    kernel_name,
    normalize_kernel,
)

logger = logging.getLogger(__name__)


def _validate_kernel(kernel: Any) -> np.ndarray:
    try:
        weights = np.asarray(kernel, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidKernelError(f"Invalid kernel: {e}") from e

    if weights.ndim != 2:
        raise InvalidKernelError(f"Kernel must be 2D, got shape {weights.shape}")

    if weights.shape[0] == 0 or weights.shape[1] == 0:
        raise InvalidKernelError("Invalid kernel size")

    return weights


def apply_kernel(image: PixelBuffer, kernel: Any) -> PixelBuffer:
    """
    Filter an image with a kernel.

    Output pixel (y, x) sums ``kernel[i][j] * source[y + i - kh // 2][x + j - kw // 2]``
    over every kernel cell, where kh x kw is the kernel shape. Sums are
    clamped to 0-255 and truncated.

    Args:
        image: Source PixelBuffer (left untouched)
        kernel: 2D weights, square or rectangular

    Returns:
        New PixelBuffer with the same size

    Raises:
        InvalidKernelError: If the kernel has zero rows/columns or is not 2D
        TypeError: If image is not a PixelBuffer
    """
    if not isinstance(image, PixelBuffer):
        raise TypeError(f"Expected PixelBuffer, got {type(image)}")

    weights = _validate_kernel(kernel)
    kernel_height, kernel_width = weights.shape
    logger.debug(
        f"Applying {kernel_height}x{kernel_width} kernel to "
        f"{image.width}x{image.height} image"
    )

    source = image.to_array()
    height, width = source.shape[:2]
    rgb = source[:, :, :3].astype(np.float64)

    top = kernel_height // 2
    left = kernel_width // 2
    # Padding is zero on r, g, b: the opaque black padding pixel
    padded = np.pad(
        rgb,
        ((top, kernel_height - 1 - top), (left, kernel_width - 1 - left), (0, 0)),
        mode="constant",
        constant_values=0.0,
    )

    accumulated = np.zeros_like(rgb)
    for i in range(kernel_height):
        for j in range(kernel_width):
            weight = weights[i, j]
            if weight == 0.0:
                continue
            accumulated += weight * padded[i:i + height, j:j + width]

    return PixelBuffer.from_channels(to_channels(accumulated), source[:, :, 3])


def apply_kernel_type(
    image: PixelBuffer,
    kernel_type: KernelType,
    normalize: bool = False,
) -> PixelBuffer:
    """
    Filter an image with one of the preset 3x3 kernels.

    Args:
        image: Source PixelBuffer
        kernel_type: Preset kernel to apply
        normalize: Divide the weights by their sum first (needed for blur presets)

    Returns:
        New filtered PixelBuffer
    """
    kernel = get_kernel(kernel_type)
    if normalize:
        kernel = normalize_kernel(kernel)

    logger.debug(f"Using preset kernel: {kernel_name(kernel_type)} (normalize={normalize})")
    return apply_kernel(image, kernel)
