"""
Pipeline Builder for Node Graph Execution

This module builds an actionable task pipeline from a connected node graph,
determining execution stages based on dependency analysis. Each node is assigned
to a pipeline stage that is one more than the highest stage of its input nodes.

Inputs are delivered to a node in the order its incoming connections are
listed, so a Composite node's first connection is its left image.
"""

import concurrent.futures
import logging
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from PF_Libs.constants import FIELD_FROM_NODE, FIELD_NODE_ID, FIELD_NODE_TYPE, FIELD_TO_NODE
from PF_Libs.PipelineLib.node_executors import NodeExecutorRegistry

logger = logging.getLogger(__name__)


class PipelineExecutionError(RuntimeError):
    """A node raised while the pipeline was executing."""

    def __init__(self, node_id: str, message: str):
        self.node_id = node_id
        super().__init__(f"Error executing node {node_id}: {message}")


def _empty_pipeline() -> Dict[str, Any]:
    return {"stages": [], "max_stage": -1, "execution_order": []}


def build_dependency_map(nodes: List[Dict[str, Any]], connections: List[Dict[str, str]]) -> Dict[str, List[str]]:
    """
    Build a mapping of each node to its input dependencies.

    Args:
        nodes: List of node dictionaries with 'id' keys
        connections: List of connection dictionaries with 'from_node' and 'to_node' keys

    Returns:
        Dictionary mapping node_id -> list of input node_ids, in connection order
        (repeated when the same node is connected more than once)

    Example:
        >>> nodes = [{"id": "n1"}, {"id": "n2"}, {"id": "n3"}]
        >>> connections = [{"from_node": "n1", "to_node": "n2"}, {"from_node": "n2", "to_node": "n3"}]
        >>> build_dependency_map(nodes, connections)
        {'n1': [], 'n2': ['n1'], 'n3': ['n2']}
    """
    dependencies: Dict[str, List[str]] = {}
    for node in nodes:
        node_id = str(node.get(FIELD_NODE_ID, ""))
        if node_id:
            dependencies[node_id] = []

    for connection in connections:
        from_node = str(connection.get(FIELD_FROM_NODE, ""))
        to_node = str(connection.get(FIELD_TO_NODE, ""))

        # One entry per connection; a node may feed the same target twice
        if from_node and to_node and to_node in dependencies:
            dependencies[to_node].append(from_node)

    return dependencies


def calculate_pipeline_stages(
    nodes: List[Dict[str, Any]],
    dependencies: Dict[str, List[str]]
) -> Dict[str, int]:
    """
    Assign pipeline stage number to each node using topological sorting.

    Source nodes (no dependencies) are assigned stage 0.
    Each subsequent node is assigned: max(input_stages) + 1

    Args:
        nodes: List of node dictionaries with 'id' keys
        dependencies: Dependency map from build_dependency_map()

    Returns:
        Dictionary mapping node_id -> stage_number

    Raises:
        ValueError: If circular dependency detected

    Example:
        >>> nodes = [{"id": "n1"}, {"id": "n2"}, {"id": "n3"}]
        >>> deps = {"n1": [], "n2": ["n1"], "n3": ["n2"]}
        >>> calculate_pipeline_stages(nodes, deps)
        {'n1': 0, 'n2': 1, 'n3': 2}
    """
    node_stages: Dict[str, int] = {}
    unassigned: Set[str] = set(dependencies.keys())

    # Node list order decides the processing order within a pass
    position = {str(node.get(FIELD_NODE_ID, "")): idx for idx, node in enumerate(nodes)}

    while unassigned:
        progress_made = False

        for node_id in sorted(unassigned, key=lambda nid: (position.get(nid, len(position)), nid)):
            node_deps = dependencies.get(node_id, [])

            if not node_deps:
                node_stages[node_id] = 0
                unassigned.remove(node_id)
                progress_made = True
                continue

            if all(dep_id in node_stages for dep_id in node_deps):
                node_stages[node_id] = max(node_stages[dep_id] for dep_id in node_deps) + 1
                unassigned.remove(node_id)
                progress_made = True

        if not progress_made:
            cycle_nodes = ", ".join(sorted(unassigned))
            raise ValueError(
                f"Circular dependency detected: cannot assign stages to nodes: {cycle_nodes}"
            )

    return node_stages


def build_execution_pipeline(
    nodes: List[Dict[str, Any]],
    node_stages: Dict[str, int],
    dependencies: Dict[str, List[str]]
) -> Dict[str, Any]:
    """
    Group nodes by stage and create execution plan.

    Returns:
        Dictionary with pipeline structure:
        {
            "stages": [
                {"stage_number": 0, "can_parallelize": bool, "nodes": [...]},
                ...
            ],
            "max_stage": int,
            "execution_order": ["node-id-1", "node-id-2", ...]
        }

        Each node copy carries an 'inputs' list of upstream node ids. A stage
        can parallelize when it holds 2+ nodes.
    """
    if not node_stages:
        return _empty_pipeline()

    max_stage = max(node_stages.values())
    stage_buckets: Dict[int, List[Dict[str, Any]]] = {stage_num: [] for stage_num in range(max_stage + 1)}

    # Walk the node list so each stage keeps graph order
    for node in nodes:
        node_id = str(node.get(FIELD_NODE_ID, ""))
        if node_id not in node_stages:
            continue
        node_data = dict(node)
        node_data["inputs"] = list(dependencies.get(node_id, []))
        stage_buckets[node_stages[node_id]].append(node_data)

    stages = []
    for stage_num in range(max_stage + 1):
        stage_nodes = stage_buckets[stage_num]
        stages.append({
            "stage_number": stage_num,
            "can_parallelize": len(stage_nodes) >= 2,
            "nodes": stage_nodes
        })

    execution_order = [
        str(node.get(FIELD_NODE_ID, ""))
        for stage in stages
        for node in stage["nodes"]
    ]

    return {
        "stages": stages,
        "max_stage": max_stage,
        "execution_order": execution_order
    }


def validate_pipeline(
    pipeline: Dict[str, Any],
    nodes: List[Dict[str, Any]],
    connections: List[Dict[str, str]]
) -> Tuple[bool, List[str]]:
    """
    Validate pipeline integrity and structure.

    Performs the following checks:
    - All nodes are included in pipeline
    - Each node appears exactly once
    - Pipeline has at least one source node (stage 0)
    - Connections reference valid nodes
    - Disconnected nodes (reported as a warning only)

    Returns:
        Tuple of (is_valid: bool, errors: List[str]); entries starting with
        "Warning:" do not make the pipeline invalid
    """
    errors: List[str] = []

    all_node_ids = {str(node.get(FIELD_NODE_ID, "")) for node in nodes if node.get(FIELD_NODE_ID)}
    execution_order = pipeline.get("execution_order", [])
    pipeline_node_ids = set(execution_order)

    missing_nodes = all_node_ids - pipeline_node_ids
    if missing_nodes:
        errors.append(f"Nodes missing from pipeline: {', '.join(sorted(missing_nodes))}")

    extra_nodes = pipeline_node_ids - all_node_ids
    if extra_nodes:
        errors.append(f"Unknown nodes in pipeline: {', '.join(sorted(extra_nodes))}")

    if len(execution_order) != len(pipeline_node_ids):
        duplicates = sorted({nid for nid in execution_order if execution_order.count(nid) > 1})
        errors.append(f"Nodes appear multiple times in pipeline: {', '.join(duplicates)}")

    stages = pipeline.get("stages", [])
    if not stages:
        errors.append("Pipeline has no stages")
    elif stages[0].get("stage_number") == 0 and not stages[0].get("nodes"):
        errors.append("Pipeline has no input nodes (stage 0 is empty)")

    connected_nodes: Set[str] = set()
    for idx, connection in enumerate(connections):
        from_node = str(connection.get(FIELD_FROM_NODE, ""))
        to_node = str(connection.get(FIELD_TO_NODE, ""))

        if from_node and from_node not in all_node_ids:
            errors.append(f"Connection {idx}: from_node '{from_node}' does not exist")

        if to_node and to_node not in all_node_ids:
            errors.append(f"Connection {idx}: to_node '{to_node}' does not exist")

        connected_nodes.update(n for n in (from_node, to_node) if n)

    # A single-node graph has nothing to connect
    disconnected = all_node_ids - connected_nodes
    if disconnected and len(all_node_ids) > 1:
        node_types = [
            f"{node.get(FIELD_NODE_TYPE, 'Unknown')} ({node.get(FIELD_NODE_ID, '')})"
            for node in nodes
            if str(node.get(FIELD_NODE_ID, "")) in disconnected
        ]
        errors.append(f"Warning: Disconnected nodes detected: {', '.join(node_types)}")

    critical_errors = [e for e in errors if not e.startswith("Warning:")]
    return len(critical_errors) == 0, errors


def build_pipeline_from_graph(
    nodes: List[Dict[str, Any]],
    connections: List[Dict[str, str]]
) -> Tuple[Dict[str, Any], bool, List[str]]:
    """
    Convenience function to build complete pipeline from node graph.

    This is the main entry point for pipeline construction.

    Returns:
        Tuple of (pipeline: Dict, is_valid: bool, errors: List[str])

    Example:
        >>> nodes = [{"id": "n1", "type": "Image Import"}]
        >>> pipeline, is_valid, errors = build_pipeline_from_graph(nodes, [])
        >>> is_valid
        True
    """
    dependencies = build_dependency_map(nodes, connections)

    try:
        node_stages = calculate_pipeline_stages(nodes, dependencies)
    except ValueError as e:
        logger.warning(f"Pipeline build failed: {e}")
        return _empty_pipeline(), False, [str(e)]

    pipeline = build_execution_pipeline(nodes, node_stages, dependencies)
    is_valid, errors = validate_pipeline(pipeline, nodes, connections)

    logger.debug(
        f"Built pipeline with {pipeline['max_stage'] + 1} stage(s) "
        f"for {len(pipeline['execution_order'])} node(s)"
    )
    return pipeline, is_valid, errors


def get_pipeline_summary(pipeline: Dict[str, Any]) -> str:
    """
    Generate human-readable summary of pipeline structure.

    Example:
        >>> print(get_pipeline_summary(pipeline))
        Pipeline Summary:
          Total Stages: 3
          Total Nodes: 4
        ...
    """
    stages = pipeline.get("stages", [])
    max_stage = pipeline.get("max_stage", -1)
    execution_order = pipeline.get("execution_order", [])

    lines = [
        "Pipeline Summary:",
        f"  Total Stages: {max_stage + 1}",
        f"  Total Nodes: {len(execution_order)}",
        ""
    ]

    for stage in stages:
        stage_num = stage.get("stage_number", 0)
        nodes = stage.get("nodes", [])
        parallel_marker = " [PARALLEL]" if stage.get("can_parallelize", False) else ""

        lines.append(f"Stage {stage_num}{parallel_marker}: ({len(nodes)} node{'s' if len(nodes) != 1 else ''})")

        for node in nodes:
            node_id = node.get(FIELD_NODE_ID, "unknown")
            node_type = node.get(FIELD_NODE_TYPE, "Unknown")
            inputs = node.get("inputs", [])
            input_str = f" <- [{', '.join(inputs)}]" if inputs else " (source)"
            lines.append(f"  - {node_type} ({node_id}){input_str}")

        lines.append("")

    lines.append(f"Execution Order: {' -> '.join(execution_order)}")

    return "\n".join(lines)


def _run_node(node: Dict[str, Any], executor_fn, inputs: List[Any]) -> Any:
    node_id = str(node.get(FIELD_NODE_ID, ""))
    try:
        return executor_fn(node, inputs)
    except Exception as e:
        raise PipelineExecutionError(node_id, str(e)) from e


def execute_pipeline(
    pipeline: Dict[str, Any],
    node_executors: Union[NodeExecutorRegistry, Dict[str, Any]],
    use_threading: bool = True,
    max_workers: Optional[int] = None
) -> Dict[str, Any]:
    """
    Execute nodes in pipeline order with optional parallel execution.

    Stages marked with can_parallelize=True will execute nodes in parallel
    using ThreadPoolExecutor when use_threading is enabled.

    Args:
        pipeline: Pipeline structure from build_execution_pipeline()
        node_executors: A NodeExecutorRegistry, or a dict mapping node types
                        to executor functions taking (node_data, inputs)
        use_threading: Enable parallel execution for parallelizable stages (default: True)
        max_workers: Maximum number of threads (default: None = CPU count)

    Returns:
        Dictionary mapping node_id -> execution result

    Raises:
        KeyError: If a node type has no registered executor
        PipelineExecutionError: If a node executor raises

    Example:
        >>> pipeline, ok, _ = build_pipeline_from_graph(nodes, connections)
        >>> results = execute_pipeline(pipeline, get_default_registry())
        >>> saved_path = results["out-1"]
    """
    if isinstance(node_executors, NodeExecutorRegistry):
        node_executors = node_executors.as_executor_map()

    results: Dict[str, Any] = {}

    for stage in pipeline.get("stages", []):
        stage_nodes = stage.get("nodes", [])
        stage_num = stage.get("stage_number", 0)

        tasks = []
        for node in stage_nodes:
            node_type = node.get(FIELD_NODE_TYPE, "")
            if node_type not in node_executors:
                raise KeyError(f"No executor registered for node type: {node_type}")
            inputs = [results[dep_id] for dep_id in node.get("inputs", [])]
            tasks.append((node, node_executors[node_type], inputs))

        parallel = stage.get("can_parallelize", False) and use_threading and len(tasks) > 1
        logger.info(
            f"Executing stage {stage_num} ({len(tasks)} node{'s' if len(tasks) != 1 else ''}"
            f"{', parallel' if parallel else ''})"
        )

        if parallel:
            with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as pool:
                futures = {
                    pool.submit(_run_node, node, executor_fn, inputs): str(node.get(FIELD_NODE_ID, ""))
                    for node, executor_fn, inputs in tasks
                }
                for future in concurrent.futures.as_completed(futures):
                    results[futures[future]] = future.result()
        else:
            for node, executor_fn, inputs in tasks:
                results[str(node.get(FIELD_NODE_ID, ""))] = _run_node(node, executor_fn, inputs)

    return results
