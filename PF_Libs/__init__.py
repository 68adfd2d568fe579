"""
PF_Libs - Pixel Forge Library Modules

This package contains core functionality for the Pixel Forge project,
organized into specialized sub-packages:

- ImageEditingLib: Pixel buffers, kernels, convolution, compositing and codecs
- NodesLib: Node executors wrapping the editing operations
- PipelineLib: Executor registry, pipeline builder and recipe files
"""

__version__ = "0.1.0"
