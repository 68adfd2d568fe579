"""
Tone Adjustment Node.

Applies one single-image tone/color adjustment (grayscale, threshold,
invert, brightness, contrast, tint, noise) to its input.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from PF_Libs.constants import DEFAULT_THRESHOLD, NODE_TYPE_ADJUSTMENT
from PF_Libs.ImageEditingLib.image_models import PixelBuffer
from PF_Libs.ImageEditingLib.tone_ops import ADJUSTMENTS


@dataclass
class AdjustmentNodeConfig:
    """Configuration for adjustment node.

    Attributes:
        adjustment: One of grayscale, threshold, invert, brightness,
                    contrast, tint, noise
        threshold: Luma cut-off for 'threshold' (0-255)
        offset: Channel offset for 'brightness'
        factor: Channel multiplier for 'contrast'
        color: RGB target for 'tint'
        strength: Mix amount for 'tint' (0.0-1.0)
        intensity: Noise scale for 'noise'
        seed: Optional RNG seed for 'noise'
    """
    adjustment: str = "grayscale"
    threshold: int = DEFAULT_THRESHOLD
    offset: int = 0
    factor: float = 1.0
    color: Tuple[int, int, int] = (255, 255, 255)
    strength: float = 0.5
    intensity: float = 0.1
    seed: Optional[int] = None

    def __post_init__(self):
        self.adjustment = str(self.adjustment).strip().lower()
        if self.adjustment not in ADJUSTMENTS:
            raise ValueError(
                f"Unknown adjustment: {self.adjustment}. "
                f"Valid adjustments: {', '.join(sorted(ADJUSTMENTS))}"
            )
        if not (0 <= self.threshold <= 255):
            raise ValueError(f"threshold must be 0-255, got {self.threshold}")
        self.color = tuple(self.color)

    def apply(self, image: PixelBuffer) -> PixelBuffer:
        """Run the configured adjustment on an image."""
        operation = ADJUSTMENTS[self.adjustment]

        if self.adjustment == "threshold":
            return operation(image, self.threshold)
        if self.adjustment == "brightness":
            return operation(image, self.offset)
        if self.adjustment == "contrast":
            return operation(image, self.factor)
        if self.adjustment == "tint":
            return operation(image, self.color, self.strength)
        if self.adjustment == "noise":
            return operation(image, self.intensity, self.seed)
        return operation(image)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "adjustment": self.adjustment,
            "threshold": self.threshold,
            "offset": self.offset,
            "factor": self.factor,
            "color": list(self.color),
            "strength": self.strength,
            "intensity": self.intensity,
            "seed": self.seed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdjustmentNodeConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


def execute_adjustment_node(node: Dict[str, Any], inputs: List[Any]) -> PixelBuffer:
    """
    Execute adjustment node.

    Inputs:
        - [0]: Image to adjust (PixelBuffer)

    Raises:
        ValueError: If no input or unknown adjustment
        TypeError: If input not PixelBuffer
    """
    if not inputs or len(inputs) < 1:
        raise ValueError("Adjustment node requires image input")

    image = inputs[0]
    if not isinstance(image, PixelBuffer):
        raise TypeError(f"Expected PixelBuffer, got {type(image)}")

    return AdjustmentNodeConfig.from_dict(node).apply(image)


def create_adjustment_node(node_id: str, adjustment: str = "grayscale", **params: Any) -> Dict[str, Any]:
    """
    Create adjustment node for graph.

    Example:
        >>> create_adjustment_node("bright-1", "brightness", offset=40)["offset"]
        40
    """
    node = {
        "id": node_id,
        "type": NODE_TYPE_ADJUSTMENT,
    }
    node.update(AdjustmentNodeConfig(adjustment=adjustment, **params).to_dict())
    return node
