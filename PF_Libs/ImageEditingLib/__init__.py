"""
ImageEditingLib - Core image editing functionality

This module provides the pixel buffer model, kernel algebra, the convolution
and compositing engines, tone and geometry operations, and image codecs
for the Pixel Forge project.
"""

from PF_Libs.ImageEditingLib.errors import (
    ShapeMismatchError,
    InvalidKernelError,
    LoadError,
    SaveError,
)
from PF_Libs.ImageEditingLib.image_models import Pixel, PixelBuffer, RgbaColor
from PF_Libs.ImageEditingLib.kernels import (
    KernelType,
    get_kernel,
    kernel_name,
    parse_kernel_type,
    create_custom_kernel,
    scale_kernel,
    normalize_kernel,
    convolve_kernels,
)
from PF_Libs.ImageEditingLib.convolution_filter import apply_kernel, apply_kernel_type
from PF_Libs.ImageEditingLib.compositing_ops import (
    COMPOSITE_OPERATIONS,
    normalize_operation_name,
    composite,
    blend,
    composite_over,
    apply_alpha_mask,
    multiply,
    screen,
    overlay,
    darken,
    lighten,
    add,
    subtract,
    difference,
    average,
    maximum,
    minimum,
)
from PF_Libs.ImageEditingLib.image_io import ImageFormat, load_image, save_image
from PF_Libs.ImageEditingLib.tone_ops import (
    ADJUSTMENTS,
    grayscale,
    threshold,
    invert,
    brightness,
    contrast,
    tint,
    add_noise,
)
from PF_Libs.ImageEditingLib.geometry_ops import (
    TRANSFORMS,
    flip_horizontal,
    flip_vertical,
    rotate_right,
    rotate_left,
    resize,
    crop,
)

__all__ = [
    "ShapeMismatchError",
    "InvalidKernelError",
    "LoadError",
    "SaveError",
    "Pixel",
    "PixelBuffer",
    "RgbaColor",
    "KernelType",
    "get_kernel",
    "kernel_name",
    "parse_kernel_type",
    "create_custom_kernel",
    "scale_kernel",
    "normalize_kernel",
    "convolve_kernels",
    "apply_kernel",
    "apply_kernel_type",
    "COMPOSITE_OPERATIONS",
    "normalize_operation_name",
    "composite",
    "blend",
    "composite_over",
    "apply_alpha_mask",
    "multiply",
    "screen",
    "overlay",
    "darken",
    "lighten",
    "add",
    "subtract",
    "difference",
    "average",
    "maximum",
    "minimum",
    "ImageFormat",
    "load_image",
    "save_image",
    "ADJUSTMENTS",
    "grayscale",
    "threshold",
    "invert",
    "brightness",
    "contrast",
    "tint",
    "add_noise",
    "TRANSFORMS",
    "flip_horizontal",
    "flip_vertical",
    "rotate_right",
    "rotate_left",
    "resize",
    "crop",
]
