"""
Exception types raised by the image editing operations.

The kernel and shape errors derive from ValueError so callers that only
care about "bad argument" can catch the builtin, while codec errors derive
from OSError like the file operations they wrap.
"""


class ShapeMismatchError(ValueError):
    """Two images passed to a pairwise operation differ in width or height."""

    def __init__(self, operation: str, left_size, right_size):
        self.operation = operation
        self.left_size = tuple(left_size)
        self.right_size = tuple(right_size)
        super().__init__(
            f"Images must be the same dimensions to {operation}: "
            f"{self.left_size[0]}x{self.left_size[1]} vs "
            f"{self.right_size[0]}x{self.right_size[1]}"
        )


class InvalidKernelError(ValueError):
    """Kernel is empty, ragged, not 2D, or not square where required."""


class LoadError(OSError):
    """Image could not be read or decoded."""


class SaveError(OSError):
    """Image could not be encoded or written."""
