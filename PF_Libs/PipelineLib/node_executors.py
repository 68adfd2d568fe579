"""
Node Executors Registry and Manager.

This module provides a centralized registry for node type executors. It enables
easy registration, lookup, and execution of different node types in the pipeline.

Classes:
    NodeExecutorRegistry: Registry for node executors

Functions:
    get_default_registry: Get the global default registry (singleton)
    register_default_executors: Register all built-in node executors
"""

from typing import Any, Callable, Dict, List, Optional
import logging

from PF_Libs.constants import (
    NODE_TYPE_ADJUSTMENT,
    NODE_TYPE_COMPOSITE,
    NODE_TYPE_CONVOLUTION,
    NODE_TYPE_IMAGE_IMPORT,
    NODE_TYPE_OUTPUT,
    NODE_TYPE_TRANSFORM,
)

logger = logging.getLogger(__name__)

# Type alias for executor function
ExecutorFunction = Callable[[Dict[str, Any], List[Any]], Any]


class NodeExecutorRegistry:
    """
    Registry for node type executors.

    Example:
        >>> registry = NodeExecutorRegistry()
        >>> registry.register("Convolution", execute_convolution_node, input_count=1)
        >>> executor = registry.get_executor("Convolution")
        >>> result = executor(node_dict, [image])
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._executors: Dict[str, ExecutorFunction] = {}
        self._node_metadata: Dict[str, Dict[str, Any]] = {}

    def register(
        self,
        node_type: str,
        executor: ExecutorFunction,
        description: str = "",
        input_count: int = 0,
        output_count: int = 1,
        tags: Optional[List[str]] = None,
    ) -> None:
        """
        Register a node executor.

        Args:
            node_type: Unique identifier for the node type (e.g., "Composite")
            executor: Callable that executes the node. Must accept (node_dict, inputs)
            description: Human-readable description of the node
            input_count: Expected number of inputs (0 for source nodes)
            output_count: Expected number of outputs (0 for sinks)
            tags: Optional list of tags for categorization (e.g., ["filter"])

        Raises:
            ValueError: If node_type is empty or executor is not callable
            RuntimeError: If node_type is already registered
        """
        node_type = str(node_type).strip()

        if not node_type:
            raise ValueError("node_type cannot be empty")

        if not callable(executor):
            raise ValueError(f"executor must be callable, got {type(executor)}")

        if node_type in self._executors:
            raise RuntimeError(
                f"Node type '{node_type}' is already registered. "
                f"Use unregister() first to replace it."
            )

        self._executors[node_type] = executor
        self._node_metadata[node_type] = {
            "description": str(description),
            "input_count": int(input_count),
            "output_count": int(output_count),
            "tags": list(tags) if tags else [],
        }

        logger.debug(f"Registered executor for node type: {node_type}")

    def unregister(self, node_type: str) -> bool:
        """
        Unregister a node executor.

        Returns:
            True if unregistered, False if node_type was not registered
        """
        node_type = str(node_type).strip()

        if node_type in self._executors:
            del self._executors[node_type]
            del self._node_metadata[node_type]
            logger.debug(f"Unregistered executor for node type: {node_type}")
            return True

        return False

    def get_executor(self, node_type: str) -> ExecutorFunction:
        """
        Get an executor for a node type.

        Raises:
            KeyError: If node_type is not registered
        """
        node_type = str(node_type).strip()

        if node_type not in self._executors:
            available = ", ".join(self.list_node_types())
            raise KeyError(
                f"No executor registered for node type '{node_type}'. "
                f"Available types: {available}"
            )

        return self._executors[node_type]

    def has_executor(self, node_type: str) -> bool:
        return str(node_type).strip() in self._executors

    def execute(
        self,
        node_type: str,
        node_dict: Dict[str, Any],
        inputs: List[Any],
    ) -> Any:
        """
        Execute a node by looking up its executor.

        Raises:
            KeyError: If node_type is not registered
            Exception: Any exception raised by the executor
        """
        executor = self.get_executor(node_type)
        return executor(node_dict, inputs)

    def list_node_types(self) -> List[str]:
        """Sorted list of registered node type names."""
        return sorted(self._executors.keys())

    def as_executor_map(self) -> Dict[str, ExecutorFunction]:
        """Snapshot of node_type -> executor, as taken by execute_pipeline()."""
        return dict(self._executors)

    def get_metadata(self, node_type: str) -> Dict[str, Any]:
        """
        Get metadata for a node type.

        Returns:
            Dictionary with description, input_count, output_count, tags

        Raises:
            KeyError: If node_type is not registered
        """
        node_type = str(node_type).strip()

        if node_type not in self._node_metadata:
            raise KeyError(f"No metadata for node type: {node_type}")

        return dict(self._node_metadata[node_type])

    def filter_by_tag(self, tag: str) -> List[str]:
        """Sorted list of node types carrying ``tag`` (case-insensitive)."""
        tag = str(tag).strip().lower()
        return sorted([
            node_type
            for node_type, meta in self._node_metadata.items()
            if tag in [t.lower() for t in meta.get("tags", [])]
        ])

    def clear(self) -> None:
        """Clear all registered executors. Use with caution."""
        self._executors.clear()
        self._node_metadata.clear()
        logger.warning("Node executor registry cleared")


# Global singleton registry
_default_registry: Optional[NodeExecutorRegistry] = None


def get_default_registry() -> NodeExecutorRegistry:
    """
    Get the global default registry (singleton).

    Creates the registry on first call and registers default executors.
    """
    global _default_registry

    if _default_registry is None:
        _default_registry = NodeExecutorRegistry()
        register_default_executors(_default_registry)

    return _default_registry


def register_default_executors(registry: NodeExecutorRegistry) -> None:
    """
    Register all built-in node executors.

    This function registers:
    - Image Import node
    - Convolution node
    - Composite node
    - Adjustment node
    - Transform node
    - Output node

    Args:
        registry: The registry to register executors with
    """
    from PF_Libs.NodesLib.image_import_node import execute_import_image_node
    from PF_Libs.NodesLib.convolution_node import execute_convolution_node
    from PF_Libs.NodesLib.composite_node import execute_composite_node
    from PF_Libs.NodesLib.adjustment_node import execute_adjustment_node
    from PF_Libs.NodesLib.transform_node import execute_transform_node
    from PF_Libs.NodesLib.output_node import execute_output_node

    registry.register(
        node_type=NODE_TYPE_IMAGE_IMPORT,
        executor=execute_import_image_node,
        description="Import an image from disk (PNG, JPG, BMP, GIF, etc.)",
        input_count=0,
        output_count=1,
        tags=["input", "image", "source"],
    )

    registry.register(
        node_type=NODE_TYPE_CONVOLUTION,
        executor=execute_convolution_node,
        description="Filter with a preset or custom convolution kernel",
        input_count=1,
        output_count=1,
        tags=["processing", "kernel", "filter"],
    )

    registry.register(
        node_type=NODE_TYPE_COMPOSITE,
        executor=execute_composite_node,
        description="Combine two same-sized images (blend, over, multiply, screen, ...)",
        input_count=2,
        output_count=1,
        tags=["processing", "composition"],
    )

    registry.register(
        node_type=NODE_TYPE_ADJUSTMENT,
        executor=execute_adjustment_node,
        description="Tone and color adjustments (grayscale, threshold, brightness, ...)",
        input_count=1,
        output_count=1,
        tags=["processing", "color", "filter"],
    )

    registry.register(
        node_type=NODE_TYPE_TRANSFORM,
        executor=execute_transform_node,
        description="Flip, rotate, resize or crop",
        input_count=1,
        output_count=1,
        tags=["processing", "geometry"],
    )

    registry.register(
        node_type=NODE_TYPE_OUTPUT,
        executor=execute_output_node,
        description="Save image to disk as PNG, JPG or BMP",
        input_count=1,
        output_count=0,
        tags=["output", "image", "sink"],
    )

    logger.info("Registered default node executors")
