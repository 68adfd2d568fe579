"""
Geometry Transform Node.

Applies a flip, quarter-turn rotation, resize or crop to its input.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from PF_Libs.constants import NODE_TYPE_TRANSFORM
from PF_Libs.ImageEditingLib.geometry_ops import TRANSFORMS
from PF_Libs.ImageEditingLib.image_models import PixelBuffer


@dataclass
class TransformNodeConfig:
    """Configuration for transform node.

    Attributes:
        transform: One of flip_horizontal, flip_vertical, rotate_right,
                   rotate_left, resize, crop
        width: Target width for 'resize', region width for 'crop'
        height: Target height for 'resize', region height for 'crop'
        crop_x: Left column for 'crop'
        crop_y: Top row for 'crop'
    """
    transform: str = "flip_horizontal"
    width: int = 0
    height: int = 0
    crop_x: int = 0
    crop_y: int = 0

    def __post_init__(self):
        self.transform = str(self.transform).strip().lower().replace("-", "_").replace(" ", "_")
        if self.transform not in TRANSFORMS:
            raise ValueError(
                f"Unknown transform: {self.transform}. "
                f"Valid transforms: {', '.join(sorted(TRANSFORMS))}"
            )

    def apply(self, image: PixelBuffer) -> PixelBuffer:
        operation = TRANSFORMS[self.transform]
        if self.transform == "resize":
            return operation(image, self.width, self.height)
        if self.transform == "crop":
            return operation(image, self.crop_x, self.crop_y, self.width, self.height)
        return operation(image)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "transform": self.transform,
            "width": self.width,
            "height": self.height,
            "crop_x": self.crop_x,
            "crop_y": self.crop_y,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransformNodeConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


def execute_transform_node(node: Dict[str, Any], inputs: List[Any]) -> PixelBuffer:
    """
    Execute transform node.

    Inputs:
        - [0]: Image to transform (PixelBuffer)

    Raises:
        ValueError: If no input, unknown transform or invalid dimensions
        TypeError: If input not PixelBuffer
    """
    if not inputs or len(inputs) < 1:
        raise ValueError("Transform node requires image input")

    image = inputs[0]
    if not isinstance(image, PixelBuffer):
        raise TypeError(f"Expected PixelBuffer, got {type(image)}")

    return TransformNodeConfig.from_dict(node).apply(image)


def create_transform_node(node_id: str, transform: str = "flip_horizontal", **params: Any) -> Dict[str, Any]:
    """Create transform node for graph."""
    node = {
        "id": node_id,
        "type": NODE_TYPE_TRANSFORM,
    }
    node.update(TransformNodeConfig(transform=transform, **params).to_dict())
    return node
