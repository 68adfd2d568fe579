"""
Convolution kernel construction and algebra.

Kernels are 2D float64 numpy arrays of weights. Nothing here normalizes a
kernel implicitly: the blur presets are stored unnormalized and callers pick
when to run ``normalize_kernel``.

Functions:
    get_kernel: Fresh copy of a preset 3x3 kernel
    kernel_name: Display name of a preset
    parse_kernel_type: Resolve a preset from a user-supplied name
    create_custom_kernel: Validate and copy user supplied weights
    scale_kernel: Multiply every weight by a factor
    normalize_kernel: Divide every weight by the weight sum
    convolve_kernels: Compose two square kernels into one

Example:
    >>> blur = normalize_kernel(get_kernel(KernelType.GAUSSIAN_BLUR))
    >>> blur_then_sharpen = convolve_kernels(blur, get_kernel(KernelType.SHARPEN))
    >>> blur_then_sharpen.shape
    (5, 5)
"""

from enum import Enum
from typing import Any, Dict, List

import numpy as np

from PF_Libs.ImageEditingLib.errors import InvalidKernelError


class KernelType(Enum):
    DEFAULT = "default"
    BOX_BLUR = "box_blur"
    GAUSSIAN_BLUR = "gaussian_blur"
    SOBEL_X = "sobel_x"
    SOBEL_Y = "sobel_y"
    LAPLACIAN = "laplacian"
    SHARPEN = "sharpen"
    EMBOSS = "emboss"


_PRESET_KERNELS: Dict[KernelType, List[List[float]]] = {
    KernelType.DEFAULT: [
        [0, 0, 0],
        [0, 1, 0],
        [0, 0, 0],
    ],
    KernelType.BOX_BLUR: [
        [1, 1, 1],
        [1, 1, 1],
        [1, 1, 1],
    ],
    KernelType.GAUSSIAN_BLUR: [
        [1, 2, 1],
        [2, 4, 2],
        [1, 2, 1],
    ],
    KernelType.SOBEL_X: [
        [-1, 0, 1],
        [-2, 0, 2],
        [-1, 0, 1],
    ],
    KernelType.SOBEL_Y: [
        [-1, -2, -1],
        [0, 0, 0],
        [1, 2, 1],
    ],
    KernelType.LAPLACIAN: [
        [0, -1, 0],
        [-1, 4, -1],
        [0, -1, 0],
    ],
    KernelType.SHARPEN: [
        [0, -1, 0],
        [-1, 5, -1],
        [0, -1, 0],
    ],
    KernelType.EMBOSS: [
        [-2, -1, 0],
        [-1, 1, 1],
        [0, 1, 2],
    ],
}

_KERNEL_NAMES: Dict[KernelType, str] = {
    KernelType.DEFAULT: "Default",
    KernelType.BOX_BLUR: "Box Blur",
    KernelType.GAUSSIAN_BLUR: "Gaussian Blur",
    KernelType.SOBEL_X: "Sobel X",
    KernelType.SOBEL_Y: "Sobel Y",
    KernelType.LAPLACIAN: "Laplacian",
    KernelType.SHARPEN: "Sharpen",
    KernelType.EMBOSS: "Emboss",
}


def get_kernel(kernel_type: KernelType) -> np.ndarray:
    """
    Get the 3x3 weights for a preset kernel.

    Args:
        kernel_type: Preset to look up

    Returns:
        New float64 array (callers may modify it freely)
    """
    return np.array(_PRESET_KERNELS[KernelType(kernel_type)], dtype=np.float64)


def kernel_name(kernel_type: KernelType) -> str:
    """Human-readable name of a preset, e.g. "Gaussian Blur"."""
    return _KERNEL_NAMES[KernelType(kernel_type)]


def _name_key(name: str) -> str:
    return "".join(ch for ch in str(name).lower() if ch.isalnum())


def parse_kernel_type(name: Any) -> KernelType:
    """
    Resolve a preset from its enum name, value or display name.

    Matching ignores case, spaces, dashes and underscores, so "Sobel X",
    "sobel_x" and "SOBEL-X" all resolve to ``KernelType.SOBEL_X``.

    Raises:
        ValueError: If no preset matches
    """
    if isinstance(name, KernelType):
        return name

    key = _name_key(name)
    for kernel_type in KernelType:
        candidates = (kernel_type.name, kernel_type.value, _KERNEL_NAMES[kernel_type])
        if key in (_name_key(candidate) for candidate in candidates):
            return kernel_type

    valid = ", ".join(kernel_type.value for kernel_type in KernelType)
    raise ValueError(f"Unknown kernel type: {name}. Valid types: {valid}")


def create_custom_kernel(values: Any) -> np.ndarray:
    """
    Build a kernel from user supplied weights.

    Args:
        values: Nested sequence (or array) of numbers, one inner sequence per row

    Returns:
        float64 copy of the weights with shape (rows, cols)

    Raises:
        InvalidKernelError: If the input is empty, ragged, non-numeric or not 2D
    """
    try:
        kernel = np.array(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidKernelError(f"Kernel rows must be numeric and equally sized: {e}") from e

    if kernel.ndim != 2:
        raise InvalidKernelError(f"Kernel must be 2D, got {kernel.ndim} dimension(s)")

    if kernel.shape[0] == 0 or kernel.shape[1] == 0:
        raise InvalidKernelError(f"Invalid kernel size: {kernel.shape[0]}x{kernel.shape[1]}")

    return kernel


def scale_kernel(kernel: Any, factor: float) -> np.ndarray:
    """Multiply every weight by ``factor`` (no normalization)."""
    return np.array(kernel, dtype=np.float64) * float(factor)


def normalize_kernel(kernel: Any) -> np.ndarray:
    """
    Divide every weight by the sum of all weights.

    A kernel whose weights sum to exactly zero (edge detectors such as Sobel
    and Laplacian) is returned unchanged.
    """
    result = np.array(kernel, dtype=np.float64)
    total = result.sum()
    if total != 0.0:
        result /= total
    return result


def _as_square_kernel(kernel: Any, label: str) -> np.ndarray:
    try:
        array = np.asarray(kernel, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidKernelError(f"Invalid kernel {label}: {e}") from e
    if array.ndim != 2 or array.shape[0] == 0 or array.shape[0] != array.shape[1]:
        raise InvalidKernelError(
            f"Kernels must be square and non-empty, {label} has shape {array.shape}"
        )
    return array


def convolve_kernels(k1: Any, k2: Any) -> np.ndarray:
    """
    Compose two square kernels by full 2D convolution.

    Applying the result once is equivalent (away from the image border) to
    applying ``k1`` and ``k2`` in sequence.

    Args:
        k1: N x N kernel
        k2: M x M kernel

    Returns:
        (N + M - 1) x (N + M - 1) kernel where
        ``result[i][j] = sum(k1[u][v] * k2[i - u][j - v])`` over valid indices

    Raises:
        InvalidKernelError: If either kernel is empty or not square
    """
    first = _as_square_kernel(k1, "k1")
    second = _as_square_kernel(k2, "k2")

    n = first.shape[0]
    m = second.shape[0]
    result = np.zeros((n + m - 1, n + m - 1), dtype=np.float64)

    # Each k1 weight stamps a scaled copy of k2 at offset (u, v)
    for u in range(n):
        for v in range(n):
            result[u:u + m, v:v + m] += first[u, v] * second

    return result
