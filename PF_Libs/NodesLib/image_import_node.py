"""
Image Import Node for Pixel Forge.

This module provides the ImageImportNode class that loads an image file from
the file system into a PixelBuffer for downstream nodes.

Classes:
    ImageImportNode: Data model for image import node

Functions:
    execute_import_image_node: Pipeline executor for image import nodes
    create_import_image_node: Helper to create an import node dictionary
    get_supported_image_formats: Get list of supported image formats
    is_supported_format: Check a path against the supported formats
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from PF_Libs.constants import NODE_TYPE_IMAGE_IMPORT, SUPPORTED_INPUT_IMAGES
from PF_Libs.ImageEditingLib.image_io import load_image
from PF_Libs.ImageEditingLib.image_models import PixelBuffer


def get_supported_image_formats() -> List[str]:
    """
    Get list of supported image formats.

    Returns:
        Sorted list of file extensions (e.g., ['.bmp', '.gif', ...])
    """
    return sorted(SUPPORTED_INPUT_IMAGES)


def is_supported_format(file_path: Path) -> bool:
    """Check if a file path has a supported image extension."""
    return Path(file_path).suffix.lower() in SUPPORTED_INPUT_IMAGES


@dataclass
class ImageImportNode:
    """Data model for an image import node.

    Attributes:
        node_id: Unique identifier for this node
        file_path: Path to the image file to import
        cache_image: Whether to keep the loaded buffer (default True)
        cached_image: Cached PixelBuffer
    """

    node_id: str
    file_path: Path
    cache_image: bool = True
    cached_image: Optional[PixelBuffer] = field(default=None, init=False)

    def __post_init__(self):
        """Validate input parameters."""
        self.file_path = Path(self.file_path)

        if not self.file_path.exists():
            raise FileNotFoundError(f"Image file not found: {self.file_path}")

        if not self.file_path.is_file():
            raise ValueError(f"Path is not a file: {self.file_path}")

        if not is_supported_format(self.file_path):
            raise ValueError(f"Unsupported image format: {self.file_path.suffix}")

    def load_image(self) -> PixelBuffer:
        """
        Load the image from disk.

        Returns:
            PixelBuffer (a copy when served from the cache)

        Raises:
            LoadError: If the image cannot be decoded
        """
        if self.cached_image is not None and self.cache_image:
            return self.cached_image.copy()

        image = load_image(self.file_path)

        if self.cache_image:
            self.cached_image = image

        return image.copy() if self.cache_image else image


def execute_import_image_node(node: Dict[str, Any], inputs: List[Any]) -> PixelBuffer:
    """
    Pipeline executor for image import nodes.

    Args:
        node: Node dictionary containing 'image_path' (required) and 'id'
        inputs: Unused (import nodes are sources)

    Returns:
        Loaded PixelBuffer

    Raises:
        ValueError: If 'image_path' is missing or the format is unsupported
        FileNotFoundError: If the file does not exist
        LoadError: If the file cannot be decoded
    """
    image_path = node.get("image_path")
    if not image_path:
        raise ValueError("Image Import node requires 'image_path'")

    import_node = ImageImportNode(
        node_id=str(node.get("id", "")),
        file_path=Path(image_path),
        cache_image=False,
    )
    return import_node.load_image()


def create_import_image_node(node_id: str, image_path: str) -> Dict[str, Any]:
    """
    Create image import node for graph.

    Example:
        >>> create_import_image_node("in-1", "photos/cat.png")
        {'id': 'in-1', 'type': 'Image Import', 'image_path': 'photos/cat.png'}
    """
    return {
        "id": node_id,
        "type": NODE_TYPE_IMAGE_IMPORT,
        "image_path": str(image_path),
    }
