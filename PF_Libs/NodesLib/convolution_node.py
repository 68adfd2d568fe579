"""
Convolution Node for Pixel Forge Pipeline.

Wraps the convolution engine for use in the node graph system. A node either
names one of the preset 3x3 kernels or carries its own weight matrix.

Example:
    Creating a convolution node:

    >>> from PF_Libs.NodesLib.convolution_node import create_convolution_node
    >>> from PF_Libs.PipelineLib.node_executors import get_default_registry
    >>>
    >>> # Normalized Gaussian blur preset
    >>> blur_node = create_convolution_node(
    ...     "blur-1",
    ...     kernel_type="gaussian_blur",
    ...     normalize=True,
    ... )
    >>>
    >>> # Custom horizontal smear
    >>> smear_node = create_convolution_node(
    ...     "smear-1",
    ...     kernel=[[1, 1, 1, 1, 1]],
    ...     normalize=True,
    ... )
    >>>
    >>> registry = get_default_registry()
    >>> result = registry.execute("Convolution", blur_node, [image])
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from PF_Libs.constants import NODE_TYPE_CONVOLUTION
from PF_Libs.ImageEditingLib.convolution_filter import apply_kernel
from PF_Libs.ImageEditingLib.image_models import PixelBuffer
from PF_Libs.ImageEditingLib.kernels import (
    create_custom_kernel,
    get_kernel,
    normalize_kernel,
    parse_kernel_type,
    scale_kernel,
)


@dataclass
class ConvolutionNodeConfig:
    """Configuration for convolution node.

    Attributes:
        kernel_type: Preset kernel name (ignored when kernel is given)
        kernel: Optional custom weights, one list per row
        normalize: Divide weights by their sum before applying
        scale: Multiply weights by this factor (after normalizing)
    """
    kernel_type: str = "default"
    kernel: Optional[List[List[float]]] = None
    normalize: bool = False
    scale: float = 1.0

    def __post_init__(self):
        """Validate the kernel selection early."""
        if self.kernel is None:
            parse_kernel_type(self.kernel_type)
        else:
            create_custom_kernel(self.kernel)

    def build_kernel(self) -> np.ndarray:
        """Resolve the configured kernel into a weight matrix."""
        if self.kernel is not None:
            weights = create_custom_kernel(self.kernel)
        else:
            weights = get_kernel(parse_kernel_type(self.kernel_type))

        if self.normalize:
            weights = normalize_kernel(weights)

        if self.scale != 1.0:
            weights = scale_kernel(weights, self.scale)

        return weights

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "kernel_type": self.kernel_type,
            "kernel": self.kernel,
            "normalize": self.normalize,
            "scale": self.scale,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConvolutionNodeConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


def execute_convolution_node(node: Dict[str, Any], inputs: List[Any]) -> PixelBuffer:
    """
    Execute convolution node in pipeline.

    Node dict may contain:
        - 'kernel_type': Preset name (e.g. 'box_blur', 'Sobel X')
        - 'kernel': Custom weight rows (takes precedence over kernel_type)
        - 'normalize': bool
        - 'scale': float

    Inputs:
        - [0]: Image to filter (PixelBuffer)

    Returns:
        Filtered PixelBuffer

    Raises:
        ValueError: If no input or unknown kernel type
        InvalidKernelError: If the custom kernel is malformed
        TypeError: If input not PixelBuffer
    """
    if not inputs or len(inputs) < 1:
        raise ValueError("Convolution node requires image input")

    image = inputs[0]
    if not isinstance(image, PixelBuffer):
        raise TypeError(f"Expected PixelBuffer, got {type(image)}")

    config = ConvolutionNodeConfig.from_dict(node)
    return apply_kernel(image, config.build_kernel())


def create_convolution_node(
    node_id: str,
    kernel_type: str = "default",
    kernel: Optional[List[List[float]]] = None,
    normalize: bool = False,
    scale: float = 1.0,
) -> Dict[str, Any]:
    """
    Create convolution node for graph.

    Args:
        node_id: Unique node identifier
        kernel_type: Preset kernel name
        kernel: Optional custom weights (overrides kernel_type)
        normalize: Normalize the kernel before applying
        scale: Weight multiplier

    Returns:
        Node dict for graph
    """
    node = {
        "id": node_id,
        "type": NODE_TYPE_CONVOLUTION,
    }
    node.update(ConvolutionNodeConfig(kernel_type, kernel, normalize, scale).to_dict())
    return node
