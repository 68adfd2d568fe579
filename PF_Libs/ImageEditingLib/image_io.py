"""
Image decoding and encoding.

Thin layer over Pillow that turns files into PixelBuffers and back. Decoded
images are always normalized to RGBA. PNG output keeps alpha; JPG and BMP
output drop it.

Classes:
    ImageFormat: Supported output formats

Functions:
    load_image: Decode a file into a PixelBuffer
    save_image: Encode a PixelBuffer to disk
    format_from_path: Infer the output format from a file extension
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from PIL import Image, UnidentifiedImageError

from PF_Libs.constants import DEFAULT_JPEG_QUALITY, FORMAT_EXTENSIONS
from PF_Libs.ImageEditingLib.errors import LoadError, SaveError
from PF_Libs.ImageEditingLib.image_models import PixelBuffer

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ImageFormat(Enum):
    PNG = "PNG"
    JPG = "JPG"
    BMP = "BMP"

    @property
    def channel_count(self) -> int:
        """Channels written to disk: RGBA for PNG, RGB otherwise."""
        return 4 if self is ImageFormat.PNG else 3

    @property
    def pil_format(self) -> str:
        # PIL uses "JPEG" not "JPG"
        return "JPEG" if self is ImageFormat.JPG else self.value

    @classmethod
    def from_name(cls, name: Any) -> "ImageFormat":
        """
        Resolve a format from a name such as "png", "JPG" or "jpeg".

        Raises:
            ValueError: If the name is not a supported format
        """
        if isinstance(name, ImageFormat):
            return name
        key = str(name).strip().upper().lstrip(".")
        if key == "JPEG":
            key = "JPG"
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(fmt.value for fmt in cls)
            raise ValueError(f"Unsupported image format: {name}. Valid formats: {valid}") from None


def format_from_path(path: PathLike) -> ImageFormat:
    """
    Infer the output format from a file extension.

    Raises:
        ValueError: If the extension is not .png, .jpg, .jpeg or .bmp
    """
    suffix = Path(path).suffix.lower()
    if suffix not in FORMAT_EXTENSIONS:
        raise ValueError(
            f"Cannot infer image format from extension '{suffix}'. "
            f"Supported: {', '.join(sorted(FORMAT_EXTENSIONS))}"
        )
    return ImageFormat(FORMAT_EXTENSIONS[suffix])


def load_image(path: PathLike) -> PixelBuffer:
    """
    Load an image file as an RGBA PixelBuffer.

    Args:
        path: Path to any image Pillow can decode

    Returns:
        PixelBuffer with the decoded pixels

    Raises:
        LoadError: If the file is missing, unreadable or not a decodable image
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise LoadError(f"Image file not found: {file_path}")

    try:
        with Image.open(file_path) as img:
            buffer = PixelBuffer.from_image(img)
    except (OSError, UnidentifiedImageError, ValueError) as e:
        raise LoadError(f"Failed to load image from {file_path}: {e}") from e

    logger.info(f"Loaded {buffer.width}x{buffer.height} image from {file_path}")
    return buffer


def get_save_kwargs(image_format: ImageFormat, quality: int = DEFAULT_JPEG_QUALITY) -> Dict[str, Any]:
    """Get PIL ``Image.save()`` kwargs for a format."""
    kwargs: Dict[str, Any] = {"format": image_format.pil_format}
    if image_format is ImageFormat.JPG:
        kwargs["quality"] = max(1, min(100, int(quality)))
    return kwargs


def save_image(
    image: PixelBuffer,
    path: PathLike,
    image_format: Optional[Any] = None,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> Path:
    """
    Save a PixelBuffer to disk.

    Args:
        image: PixelBuffer to encode
        path: Destination file (parent directory must exist)
        image_format: ImageFormat or name; inferred from the extension when None
        quality: JPEG quality 1-100 (ignored for PNG and BMP)

    Returns:
        Path the image was written to

    Raises:
        TypeError: If image is not a PixelBuffer
        ValueError: If the format is unsupported or cannot be inferred
        SaveError: If encoding or writing fails
    """
    if not isinstance(image, PixelBuffer):
        raise TypeError(f"Expected PixelBuffer, got {type(image)}")

    output_file = Path(path)
    fmt = format_from_path(output_file) if image_format is None else ImageFormat.from_name(image_format)

    pil_image = image.to_image()
    if fmt.channel_count == 3:
        pil_image = pil_image.convert("RGB")

    logger.info(f"Saving {fmt.value} image to {output_file}")
    try:
        pil_image.save(output_file, **get_save_kwargs(fmt, quality))
    except (OSError, ValueError) as e:
        raise SaveError(f"Failed to save image to {output_file}: {e}") from e

    return output_file
