"""
Two-Image Composite Node.

Combines two images with one of the compositing operations (blend, over,
alpha mask, multiply, screen, overlay, darken, lighten, add, subtract,
difference, average, max, min).

The node takes two inputs in connection order: the first is the left image
(whose alpha is kept), the second the right image.

Example:
    >>> node = create_composite_node("mix-1", operation="blend", alpha=0.25)
    >>> result = execute_composite_node(node, [foreground, background])
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from PF_Libs.constants import NODE_TYPE_COMPOSITE
from PF_Libs.ImageEditingLib.compositing_ops import composite, normalize_operation_name
from PF_Libs.ImageEditingLib.image_models import PixelBuffer


@dataclass
class CompositeNodeConfig:
    """Configuration for composite node.

    Attributes:
        operation: Name of the compositing operation
        alpha: Mix factor for 'blend' (0.0-1.0, weight of the left image)
        scale: Multiplier on the right image for 'add'
    """
    operation: str = "blend"
    alpha: float = 0.5
    scale: float = 1.0

    def __post_init__(self):
        """Validate operation parameters."""
        self.operation = normalize_operation_name(self.operation)

        if not (0.0 <= self.alpha <= 1.0):
            raise ValueError(f"alpha must be 0.0-1.0, got {self.alpha}")

    def operation_params(self) -> Dict[str, Any]:
        """Extra keyword arguments the selected operation accepts."""
        if self.operation == "blend":
            return {"alpha": self.alpha}
        if self.operation == "add":
            return {"scale": self.scale}
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "operation": self.operation,
            "alpha": self.alpha,
            "scale": self.scale,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompositeNodeConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


def execute_composite_node(node: Dict[str, Any], inputs: List[Any]) -> PixelBuffer:
    """
    Execute composite node.

    Inputs:
        - [0]: Left image (PixelBuffer)
        - [1]: Right image (PixelBuffer, same size)

    Returns:
        Composited PixelBuffer

    Raises:
        ValueError: If fewer than two inputs or unknown operation
        ShapeMismatchError: If the images differ in size
        TypeError: If an input is not a PixelBuffer
    """
    if not inputs or len(inputs) < 2:
        raise ValueError("Composite node requires two image inputs")

    left, right = inputs[0], inputs[1]
    for image in (left, right):
        if not isinstance(image, PixelBuffer):
            raise TypeError(f"Expected PixelBuffer, got {type(image)}")

    config = CompositeNodeConfig.from_dict(node)
    return composite(config.operation, left, right, **config.operation_params())


def create_composite_node(
    node_id: str,
    operation: str = "blend",
    alpha: float = 0.5,
    scale: float = 1.0,
) -> Dict[str, Any]:
    """
    Create composite node for graph.

    Args:
        node_id: Unique node identifier
        operation: Compositing operation name
        alpha: Blend factor (used by 'blend')
        scale: Add multiplier (used by 'add')

    Returns:
        Node dict for graph
    """
    node = {
        "id": node_id,
        "type": NODE_TYPE_COMPOSITE,
    }
    node.update(CompositeNodeConfig(operation, alpha, scale).to_dict())
    return node
