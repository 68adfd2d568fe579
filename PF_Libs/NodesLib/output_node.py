"""
Output Node for Pixel Forge.

This node saves its input image to disk as PNG, JPG or BMP.

Classes:
    OutputNodeConfig: Configuration for output node
    OutputNodeHandler: Handles path validation and file writing

Functions:
    execute_output_node: Pipeline executor for output nodes
    create_output_node: Helper to create output node dictionary
"""

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from PF_Libs.constants import DEFAULT_JPEG_QUALITY, NODE_TYPE_OUTPUT
from PF_Libs.ImageEditingLib.image_io import ImageFormat, format_from_path, save_image
from PF_Libs.ImageEditingLib.image_models import PixelBuffer


@dataclass
class OutputNodeConfig:
    """Configuration for output node execution.

    Attributes:
        output_path: Output filename
        save_format: PNG, JPG or BMP (None = infer from extension)
        quality: JPEG quality 1-100 (default: 90, only for JPG)
        create_directories: Create output directories if they don't exist (default: True)
        overwrite: Overwrite existing files (default: False)
        base_directory: Optional absolute directory outputs must stay within
    """
    output_path: str = "output.png"
    save_format: Optional[str] = None
    quality: int = DEFAULT_JPEG_QUALITY
    create_directories: bool = True
    overwrite: bool = False
    base_directory: Optional[str] = None

    def __post_init__(self):
        if self.save_format is not None:
            self.save_format = ImageFormat.from_name(self.save_format).value

    def resolve_format(self) -> ImageFormat:
        if self.save_format is None:
            return format_from_path(self.output_path)
        return ImageFormat.from_name(self.save_format)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputNodeConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


class OutputNodeHandler:
    """Handles output path validation and file I/O for output nodes."""

    def __init__(self, config: OutputNodeConfig):
        """Initialize handler with configuration."""
        self.config = config
        self._base_dir = None
        if config.base_directory:
            base_path = Path(config.base_directory)
            if not base_path.is_absolute():
                raise ValueError(f"base_directory must be an absolute path: {config.base_directory}")
            self._base_dir = base_path.resolve()

    def resolve_output_path(self) -> Path:
        """
        Resolve the output path.

        Raises:
            ValueError: If the path contains '..' or leaves base_directory
        """
        path = Path(self.config.output_path)

        if ".." in path.parts:
            raise ValueError(
                f"Path traversal detected: output_path contains '..': {self.config.output_path}"
            )

        if not path.is_absolute() and self._base_dir:
            resolved_path = (self._base_dir / path).resolve()
        else:
            resolved_path = path.resolve()

        if self._base_dir:
            try:
                resolved_path.relative_to(self._base_dir)
            except ValueError:
                raise ValueError(
                    f"output_path '{self.config.output_path}' resolves to '{resolved_path}' "
                    f"which is outside the allowed base directory '{self._base_dir}'"
                ) from None

        return resolved_path

    def save_image(self, image: PixelBuffer) -> Path:
        """
        Save image to disk.

        Returns:
            Path where image was saved

        Raises:
            TypeError: If image is not a PixelBuffer
            FileExistsError: If file exists and overwrite=False
            SaveError: If file cannot be written
        """
        if not isinstance(image, PixelBuffer):
            raise TypeError(f"Expected PixelBuffer, got {type(image)}")

        output_file = self.resolve_output_path()
        image_format = self.config.resolve_format()

        if self.config.create_directories:
            output_file.parent.mkdir(parents=True, exist_ok=True)

        if output_file.exists() and not self.config.overwrite:
            raise FileExistsError(
                f"Output file already exists: {output_file}. "
                f"Set overwrite=True to replace."
            )

        return save_image(image, output_file, image_format, self.config.quality)


def execute_output_node(node: Dict[str, Any], inputs: List[Any]) -> Path:
    """
    Pipeline executor for output nodes.

    Args:
        node: Node dictionary with OutputNodeConfig fields ('output_path' required)
        inputs: Should contain exactly one element: the input PixelBuffer

    Returns:
        Path where image was saved

    Raises:
        ValueError: If inputs empty or invalid config
        TypeError: If input is not a PixelBuffer
        FileExistsError: If file already exists and overwrite is off
        SaveError: If file cannot be written
    """
    if not inputs:
        raise ValueError("Output node requires 1 input image")

    image = inputs[0]
    if not isinstance(image, PixelBuffer):
        raise TypeError(f"Expected PixelBuffer, got {type(image)}")

    config = OutputNodeConfig.from_dict(node)
    return OutputNodeHandler(config).save_image(image)


def create_output_node(
    node_id: str,
    output_path: str = "output.png",
    save_format: Optional[str] = None,
    quality: int = DEFAULT_JPEG_QUALITY,
    create_directories: bool = True,
    overwrite: bool = False,
) -> Dict[str, Any]:
    """
    Helper to create an output node dictionary for graph building.

    Examples:
        >>> create_output_node("out-1", "output.png")["type"]
        'Output'

        >>> create_output_node("out-2", "preview.jpg", quality=80)["quality"]
        80
    """
    return {
        "id": node_id,
        "type": NODE_TYPE_OUTPUT,
        "output_path": str(output_path),
        "save_format": save_format,
        "quality": quality,
        "create_directories": create_directories,
        "overwrite": overwrite,
    }
