"""
Constants and configuration values for Pixel Forge.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the library.
"""

# Channel limits
CHANNEL_MIN = 0
CHANNEL_MAX = 255
PIXEL_CHANNELS = 4

DEFAULT_FILL_PIXEL = (0, 0, 0, 255)

# Decimal places kept before truncating accumulated float channels
ACCUMULATOR_DECIMALS = 6

# Tone defaults
DEFAULT_THRESHOLD = 128
OVERLAY_MIDPOINT = 128
GRAYSCALE_WEIGHTS = (0.299, 0.587, 0.114)
NOISE_CENTER = 128

# Geometry limits
MAX_RESIZE_DIMENSION = 4096

# Codec defaults
DEFAULT_JPEG_QUALITY = 90
SUPPORTED_INPUT_IMAGES = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".webp"}
FORMAT_EXTENSIONS = {
    ".png": "PNG",
    ".jpg": "JPG",
    ".jpeg": "JPG",
    ".bmp": "BMP",
}

# Recipe file constants
RECIPE_SCHEMA_VERSION = 1
FIELD_SCHEMA_VERSION = "schema_version"
FIELD_NAME = "name"
FIELD_NODES = "nodes"
FIELD_CONNECTIONS = "connections"

# Node/Connection field names
FIELD_NODE_ID = "id"
FIELD_NODE_TYPE = "type"
FIELD_FROM_NODE = "from_node"
FIELD_TO_NODE = "to_node"

# Node types
NODE_TYPE_IMAGE_IMPORT = "Image Import"
NODE_TYPE_CONVOLUTION = "Convolution"
NODE_TYPE_COMPOSITE = "Composite"
NODE_TYPE_ADJUSTMENT = "Adjustment"
NODE_TYPE_TRANSFORM = "Transform"
NODE_TYPE_OUTPUT = "Output"
