"""
Pixel Forge Pipeline Library.

Modules:
    node_executors: Registry mapping node types to executor functions
    pipeline_builder: Dependency staging and execution of node graphs
    recipe_store: JSON recipe files and their execution
"""

from PF_Libs.PipelineLib.node_executors import (
    NodeExecutorRegistry,
    get_default_registry,
    register_default_executors,
)
from PF_Libs.PipelineLib.pipeline_builder import (
    PipelineExecutionError,
    build_dependency_map,
    calculate_pipeline_stages,
    build_execution_pipeline,
    validate_pipeline,
    build_pipeline_from_graph,
    get_pipeline_summary,
    execute_pipeline,
)
from PF_Libs.PipelineLib.recipe_store import (
    create_recipe,
    load_recipe,
    save_recipe,
    run_recipe,
)

__all__ = [
    "NodeExecutorRegistry",
    "get_default_registry",
    "register_default_executors",
    "PipelineExecutionError",
    "build_dependency_map",
    "calculate_pipeline_stages",
    "build_execution_pipeline",
    "validate_pipeline",
    "build_pipeline_from_graph",
    "get_pipeline_summary",
    "execute_pipeline",
    "create_recipe",
    "load_recipe",
    "save_recipe",
    "run_recipe",
]
