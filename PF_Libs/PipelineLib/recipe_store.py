"""
Recipe file storage and execution for Pixel Forge.

A recipe is a JSON document describing a node graph that can be replayed
from the command line:

    {
        "schema_version": 1,
        "name": "soft edges",
        "created_at": "2024-05-01T12:00:00",
        "nodes": [
            {"id": "in-1", "type": "Image Import", "image_path": "photo.png"},
            {"id": "blur-1", "type": "Convolution", "kernel_type": "box_blur", "normalize": true},
            {"id": "out-1", "type": "Output", "output_path": "soft.png", "overwrite": true}
        ],
        "connections": [
            {"from_node": "in-1", "to_node": "blur-1"},
            {"from_node": "blur-1", "to_node": "out-1"}
        ]
    }

Relative 'image_path' and 'output_path' values are resolved against the
directory holding the recipe file.

Functions:
    create_recipe: Build a recipe payload from nodes and connections
    load_recipe: Load and validate a recipe file
    save_recipe: Write a recipe payload to disk
    run_recipe: Build and execute the recipe pipeline
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from PF_Libs.constants import (
    FIELD_CONNECTIONS,
    FIELD_FROM_NODE,
    FIELD_NAME,
    FIELD_NODE_ID,
    FIELD_NODE_TYPE,
    FIELD_NODES,
    FIELD_SCHEMA_VERSION,
    FIELD_TO_NODE,
    RECIPE_SCHEMA_VERSION,
)
from PF_Libs.PipelineLib.node_executors import NodeExecutorRegistry, get_default_registry
from PF_Libs.PipelineLib.pipeline_builder import build_pipeline_from_graph, execute_pipeline

logger = logging.getLogger(__name__)

FIELD_CREATED_AT = "created_at"
_PATH_FIELDS = ("image_path", "output_path")


def create_recipe(
    name: str,
    nodes: List[Dict[str, Any]],
    connections: Optional[List[Dict[str, str]]] = None,
) -> Dict[str, Any]:
    """
    Build a recipe payload.

    Connections are reduced to their 'from_node'/'to_node' fields.

    Raises:
        ValueError: If the graph is structurally invalid
    """
    payload = {
        FIELD_SCHEMA_VERSION: RECIPE_SCHEMA_VERSION,
        FIELD_NAME: str(name),
        FIELD_CREATED_AT: datetime.now().isoformat(timespec="seconds"),
        FIELD_NODES: [dict(node) for node in nodes],
        FIELD_CONNECTIONS: [
            {FIELD_FROM_NODE: str(c.get(FIELD_FROM_NODE, "")), FIELD_TO_NODE: str(c.get(FIELD_TO_NODE, ""))}
            for c in (connections or [])
        ],
    }
    _validate_recipe(payload)
    return payload


def _validate_recipe(payload: Any) -> None:
    if not isinstance(payload, dict):
        raise ValueError("Recipe must be a JSON object")

    version = payload.get(FIELD_SCHEMA_VERSION, RECIPE_SCHEMA_VERSION)
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        raise ValueError(f"Invalid recipe schema_version: {version!r}")
    if version > RECIPE_SCHEMA_VERSION:
        raise ValueError(
            f"Recipe schema_version {version} is newer than supported version {RECIPE_SCHEMA_VERSION}"
        )

    nodes = payload.get(FIELD_NODES)
    if not isinstance(nodes, list) or not nodes:
        raise ValueError("Recipe must contain a non-empty 'nodes' list")

    seen_ids = set()
    for idx, node in enumerate(nodes):
        if not isinstance(node, dict):
            raise ValueError(f"Node {idx} must be an object")
        node_id = str(node.get(FIELD_NODE_ID) or "").strip()
        if not node_id:
            raise ValueError(f"Node {idx} is missing an 'id'")
        if not str(node.get(FIELD_NODE_TYPE) or "").strip():
            raise ValueError(f"Node '{node_id}' is missing a 'type'")
        if node_id in seen_ids:
            raise ValueError(f"Duplicate node id: {node_id}")
        seen_ids.add(node_id)

    connections = payload.get(FIELD_CONNECTIONS, [])
    if not isinstance(connections, list):
        raise ValueError("'connections' must be a list")

    for idx, connection in enumerate(connections):
        if not isinstance(connection, dict):
            raise ValueError(f"Connection {idx} must be an object")
        from_node = str(connection.get(FIELD_FROM_NODE) or "")
        to_node = str(connection.get(FIELD_TO_NODE) or "")
        if from_node not in seen_ids or to_node not in seen_ids:
            raise ValueError(f"Connection {idx} references an unknown node: {from_node!r} -> {to_node!r}")
        if from_node == to_node:
            raise ValueError(f"Connection {idx} connects node '{from_node}' to itself")


def load_recipe(recipe_path: Path) -> Dict[str, Any]:
    """
    Load a recipe file.

    Returns:
        Validated recipe payload (missing 'name' and 'connections' filled in)

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON or not a valid recipe
    """
    recipe_path = Path(recipe_path)
    text = recipe_path.read_text(encoding="utf-8")

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Recipe {recipe_path} is not valid JSON: {e}") from e

    _validate_recipe(payload)

    payload.setdefault(FIELD_SCHEMA_VERSION, RECIPE_SCHEMA_VERSION)
    payload.setdefault(FIELD_NAME, recipe_path.stem)
    payload.setdefault(FIELD_CONNECTIONS, [])

    logger.info(f"Loaded recipe '{payload[FIELD_NAME]}' from {recipe_path}")
    return payload


def save_recipe(recipe_path: Path, payload: Dict[str, Any]) -> Path:
    """
    Write a recipe payload as indented JSON.

    Raises:
        ValueError: If the payload is not a valid recipe
    """
    _validate_recipe(payload)

    recipe_path = Path(recipe_path)
    data = dict(payload)
    data[FIELD_SCHEMA_VERSION] = RECIPE_SCHEMA_VERSION
    recipe_path.parent.mkdir(parents=True, exist_ok=True)
    recipe_path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    logger.info(f"Saved recipe to {recipe_path}")
    return recipe_path


def _resolve_node_paths(nodes: List[Dict[str, Any]], base_dir: Path) -> List[Dict[str, Any]]:
    resolved = []
    for node in nodes:
        node = dict(node)
        for field_name in _PATH_FIELDS:
            value = node.get(field_name)
            if value and not Path(value).is_absolute():
                node[field_name] = str(base_dir / value)
        resolved.append(node)
    return resolved


def run_recipe(
    recipe: Union[Path, str, Dict[str, Any]],
    registry: Optional[NodeExecutorRegistry] = None,
    use_threading: bool = False,
    base_dir: Optional[Path] = None,
) -> Dict[str, Any]:
    """
    Build and execute a recipe's pipeline.

    Args:
        recipe: Recipe file path or an already-loaded payload
        registry: Executors to use (default: the global registry)
        use_threading: Run independent nodes of a stage in parallel
        base_dir: Directory for relative paths (default: the recipe's directory,
                  or the working directory for in-memory payloads)

    Returns:
        Dictionary mapping node_id -> node result

    Raises:
        ValueError: If the recipe or its graph is invalid
        PipelineExecutionError: If a node fails
    """
    if isinstance(recipe, dict):
        _validate_recipe(recipe)
        payload = recipe
    else:
        recipe_path = Path(recipe)
        payload = load_recipe(recipe_path)
        if base_dir is None:
            base_dir = recipe_path.parent

    nodes = payload[FIELD_NODES]
    if base_dir is not None:
        nodes = _resolve_node_paths(nodes, Path(base_dir))
    connections = payload.get(FIELD_CONNECTIONS, [])

    pipeline, is_valid, errors = build_pipeline_from_graph(nodes, connections)
    for message in errors:
        if message.startswith("Warning:"):
            logger.warning(message)
    if not is_valid:
        critical = [e for e in errors if not e.startswith("Warning:")]
        raise ValueError(f"Invalid recipe graph: {'; '.join(critical)}")

    logger.info(f"Running recipe '{payload.get(FIELD_NAME, '')}' ({len(nodes)} nodes)")
    return execute_pipeline(pipeline, registry or get_default_registry(), use_threading=use_threading)
