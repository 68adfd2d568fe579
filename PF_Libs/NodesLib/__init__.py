"""
Pixel Forge Nodes Library.

This module contains all node implementations for the Pixel Forge node graph system.
Nodes are components that process data in a pipeline.

Modules:
    image_import_node: Image import node for loading images
    convolution_node: Kernel filtering node
    composite_node: Two-image compositing node
    adjustment_node: Tone/color adjustment node
    transform_node: Geometry transform node
    output_node: Output node for saving images
"""

from PF_Libs.NodesLib.image_import_node import (
    ImageImportNode,
    execute_import_image_node,
    create_import_image_node,
    get_supported_image_formats,
    is_supported_format,
)
from PF_Libs.NodesLib.convolution_node import (
    ConvolutionNodeConfig,
    execute_convolution_node,
    create_convolution_node,
)
from PF_Libs.NodesLib.composite_node import (
    CompositeNodeConfig,
    execute_composite_node,
    create_composite_node,
)
from PF_Libs.NodesLib.adjustment_node import (
    AdjustmentNodeConfig,
    execute_adjustment_node,
    create_adjustment_node,
)
from PF_Libs.NodesLib.transform_node import (
    TransformNodeConfig,
    execute_transform_node,
    create_transform_node,
)
from PF_Libs.NodesLib.output_node import (
    OutputNodeConfig,
    OutputNodeHandler,
    execute_output_node,
    create_output_node,
)

__all__ = [
    "ImageImportNode",
    "execute_import_image_node",
    "create_import_image_node",
    "get_supported_image_formats",
    "is_supported_format",
    "ConvolutionNodeConfig",
    "execute_convolution_node",
    "create_convolution_node",
    "CompositeNodeConfig",
    "execute_composite_node",
    "create_composite_node",
    "AdjustmentNodeConfig",
    "execute_adjustment_node",
    "create_adjustment_node",
    "TransformNodeConfig",
    "execute_transform_node",
    "create_transform_node",
    "OutputNodeConfig",
    "OutputNodeHandler",
    "execute_output_node",
    "create_output_node",
]
