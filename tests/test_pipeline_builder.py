"""
Unit Tests for Pipeline Builder

Tests all core functionality of the pipeline builder module including:
- Dependency map construction
- Stage calculation with topological sorting
- Pipeline building
- Validation
- Execution, sequential and threaded
- Edge cases and error handling
"""

import tempfile
import threading
import unittest
from pathlib import Path

from PIL import Image

from PF_Libs.ImageEditingLib.image_models import PixelBuffer
from PF_Libs.NodesLib.composite_node import create_composite_node
from PF_Libs.NodesLib.convolution_node import create_convolution_node
from PF_Libs.NodesLib.image_import_node import create_import_image_node
from PF_Libs.NodesLib.output_node import create_output_node
from PF_Libs.PipelineLib.node_executors import NodeExecutorRegistry, get_default_registry
from PF_Libs.PipelineLib.pipeline_builder import (
    PipelineExecutionError,
    build_dependency_map,
    build_execution_pipeline,
    build_pipeline_from_graph,
    calculate_pipeline_stages,
    execute_pipeline,
    get_pipeline_summary,
    validate_pipeline,
)


def _diamond():
    nodes = [
        {"id": "input", "type": "Input"},
        {"id": "filter_a", "type": "Filter"},
        {"id": "filter_b", "type": "Filter"},
        {"id": "merge", "type": "Merge"},
        {"id": "output", "type": "Output"},
    ]
    connections = [
        {"from_node": "input", "to_node": "filter_a"},
        {"from_node": "input", "to_node": "filter_b"},
        {"from_node": "filter_a", "to_node": "merge"},
        {"from_node": "filter_b", "to_node": "merge"},
        {"from_node": "merge", "to_node": "output"},
    ]
    return nodes, connections


class TestBuildDependencyMap(unittest.TestCase):
    """Test dependency map construction."""

    def test_simple_linear(self):
        nodes = [{"id": "n1"}, {"id": "n2"}, {"id": "n3"}]
        connections = [
            {"from_node": "n1", "to_node": "n2"},
            {"from_node": "n2", "to_node": "n3"}
        ]

        deps = build_dependency_map(nodes, connections)

        self.assertEqual(deps, {"n1": [], "n2": ["n1"], "n3": ["n2"]})

    def test_inputs_keep_connection_order(self):
        nodes = [{"id": "a"}, {"id": "b"}, {"id": "mix"}]
        connections = [
            {"from_node": "b", "to_node": "mix"},
            {"from_node": "a", "to_node": "mix"},
        ]

        self.assertEqual(build_dependency_map(nodes, connections)["mix"], ["b", "a"])

    def test_unknown_connections_ignored(self):
        nodes = [{"id": "n1"}, {"id": "n2"}]
        connections = [
            {"from_node": "n1", "to_node": "n2"},
            {"from_node": "n1", "to_node": "ghost"},
            {"from_node": "", "to_node": "n2"},
        ]

        deps = build_dependency_map(nodes, connections)

        self.assertEqual(deps, {"n1": [], "n2": ["n1"]})

    def test_repeated_connection_kept_per_connection(self):
        nodes = [{"id": "src"}, {"id": "other"}, {"id": "mix"}]
        connections = [
            {"from_node": "src", "to_node": "mix"},
            {"from_node": "other", "to_node": "mix"},
            {"from_node": "src", "to_node": "mix"},
        ]

        deps = build_dependency_map(nodes, connections)

        self.assertEqual(deps["mix"], ["src", "other", "src"])
        self.assertEqual(calculate_pipeline_stages(nodes, deps)["mix"], 1)


class TestCalculatePipelineStages(unittest.TestCase):
    """Test stage assignment."""

    def test_diamond(self):
        nodes, connections = _diamond()
        stages = calculate_pipeline_stages(nodes, build_dependency_map(nodes, connections))

        self.assertEqual(stages, {"input": 0, "filter_a": 1, "filter_b": 1, "merge": 2, "output": 3})

    def test_uneven_branches_use_longest_path(self):
        nodes = [{"id": "a"}, {"id": "b"}, {"id": "c"}, {"id": "d"}]
        deps = {"a": [], "b": ["a"], "c": ["b"], "d": ["a", "c"]}

        self.assertEqual(calculate_pipeline_stages(nodes, deps)["d"], 3)

    def test_cycle_raises(self):
        nodes = [{"id": "a"}, {"id": "b"}, {"id": "c"}]
        deps = {"a": [], "b": ["a", "c"], "c": ["b"]}

        with self.assertRaises(ValueError) as ctx:
            calculate_pipeline_stages(nodes, deps)
        self.assertIn("Circular dependency", str(ctx.exception))
        self.assertIn("b, c", str(ctx.exception))


class TestBuildExecutionPipeline(unittest.TestCase):
    """Test pipeline structure."""

    def test_structure(self):
        nodes, connections = _diamond()
        deps = build_dependency_map(nodes, connections)
        pipeline = build_execution_pipeline(nodes, calculate_pipeline_stages(nodes, deps), deps)

        self.assertEqual(pipeline["max_stage"], 3)
        self.assertEqual(pipeline["execution_order"], ["input", "filter_a", "filter_b", "merge", "output"])
        self.assertTrue(pipeline["stages"][1]["can_parallelize"])
        self.assertFalse(pipeline["stages"][0]["can_parallelize"])
        self.assertEqual(pipeline["stages"][2]["nodes"][0]["inputs"], ["filter_a", "filter_b"])

    def test_stage_keeps_node_list_order(self):
        nodes = [{"id": "z"}, {"id": "a"}, {"id": "m"}]
        deps = build_dependency_map(nodes, [])
        pipeline = build_execution_pipeline(nodes, calculate_pipeline_stages(nodes, deps), deps)

        self.assertEqual(pipeline["execution_order"], ["z", "a", "m"])

    def test_does_not_mutate_nodes(self):
        nodes, connections = _diamond()
        deps = build_dependency_map(nodes, connections)
        build_execution_pipeline(nodes, calculate_pipeline_stages(nodes, deps), deps)

        self.assertNotIn("inputs", nodes[0])

    def test_empty(self):
        self.assertEqual(
            build_execution_pipeline([], {}, {}),
            {"stages": [], "max_stage": -1, "execution_order": []},
        )


class TestValidateAndBuild(unittest.TestCase):
    """Test validation and the convenience builder."""

    def test_valid_graph(self):
        nodes, connections = _diamond()
        pipeline, is_valid, errors = build_pipeline_from_graph(nodes, connections)

        self.assertTrue(is_valid)
        self.assertEqual(errors, [])
        self.assertEqual(len(pipeline["execution_order"]), 5)

    def test_single_node_is_valid(self):
        pipeline, is_valid, errors = build_pipeline_from_graph([{"id": "n1", "type": "Image Import"}], [])

        self.assertTrue(is_valid)
        self.assertEqual(errors, [])

    def test_disconnected_node_is_warning(self):
        nodes, connections = _diamond()
        nodes.append({"id": "lonely", "type": "Input"})

        _, is_valid, errors = build_pipeline_from_graph(nodes, connections)

        self.assertTrue(is_valid)
        self.assertTrue(any(e.startswith("Warning:") and "lonely" in e for e in errors))

    def test_unknown_connection_endpoint_is_error(self):
        nodes, connections = _diamond()
        connections.append({"from_node": "ghost", "to_node": "merge"})

        _, is_valid, errors = build_pipeline_from_graph(nodes, connections)

        self.assertFalse(is_valid)
        self.assertTrue(any("ghost" in e for e in errors))

    def test_cycle_gives_invalid_empty_pipeline(self):
        nodes = [{"id": "a"}, {"id": "b"}]
        connections = [{"from_node": "a", "to_node": "b"}, {"from_node": "b", "to_node": "a"}]

        pipeline, is_valid, errors = build_pipeline_from_graph(nodes, connections)

        self.assertFalse(is_valid)
        self.assertEqual(pipeline["execution_order"], [])
        self.assertIn("Circular dependency", errors[0])

    def test_validate_detects_missing_and_duplicate_nodes(self):
        nodes = [{"id": "n1"}, {"id": "n2"}]
        pipeline = {
            "stages": [{"stage_number": 0, "can_parallelize": False, "nodes": [{"id": "n1"}]}],
            "max_stage": 0,
            "execution_order": ["n1", "n1"],
        }

        is_valid, errors = validate_pipeline(pipeline, nodes, [])

        self.assertFalse(is_valid)
        self.assertTrue(any("missing" in e for e in errors))
        self.assertTrue(any("multiple times" in e for e in errors))

    def test_validate_empty_pipeline(self):
        is_valid, errors = validate_pipeline({"stages": [], "execution_order": []}, [], [])

        self.assertFalse(is_valid)
        self.assertIn("Pipeline has no stages", errors)

    def test_summary(self):
        nodes, connections = _diamond()
        pipeline, _, _ = build_pipeline_from_graph(nodes, connections)

        summary = get_pipeline_summary(pipeline)

        self.assertIn("Total Stages: 4", summary)
        self.assertIn("Total Nodes: 5", summary)
        self.assertIn("Stage 1 [PARALLEL]: (2 nodes)", summary)
        self.assertIn("- Input (input) (source)", summary)
        self.assertIn("- Merge (merge) <- [filter_a, filter_b]", summary)
        self.assertIn("Execution Order: input -> filter_a -> filter_b -> merge -> output", summary)


class TestExecutePipeline(unittest.TestCase):
    """Test pipeline execution with plain executor dicts and registries."""

    def setUp(self):
        nodes, connections = _diamond()
        self.pipeline, _, _ = build_pipeline_from_graph(nodes, connections)
        self.executors = {
            "Input": lambda node, inputs: "data",
            "Filter": lambda node, inputs: f"{node['id']}({inputs[0]})",
            "Merge": lambda node, inputs: "+".join(inputs),
            "Output": lambda node, inputs: inputs[0].upper(),
        }

    def test_sequential(self):
        results = execute_pipeline(self.pipeline, self.executors, use_threading=False)
        self.assertEqual(results["output"], "FILTER_A(DATA)+FILTER_B(DATA)")

    def test_threaded_matches_sequential(self):
        threads = set()

        def filter_executor(node, inputs):
            threads.add(threading.current_thread().name)
            return f"{node['id']}({inputs[0]})"

        self.executors["Filter"] = filter_executor
        results = execute_pipeline(self.pipeline, self.executors, use_threading=True, max_workers=2)

        self.assertEqual(results["merge"], "filter_a(data)+filter_b(data)")
        self.assertNotIn(threading.current_thread().name, threads)

    def test_missing_executor(self):
        del self.executors["Merge"]
        with self.assertRaises(KeyError):
            execute_pipeline(self.pipeline, self.executors, use_threading=False)

    def test_failure_names_node(self):
        def failing(node, inputs):
            raise ValueError("bad weights")

        self.executors["Filter"] = failing

        for use_threading in (False, True):
            with self.assertRaises(PipelineExecutionError) as ctx:
                execute_pipeline(self.pipeline, self.executors, use_threading=use_threading)
            self.assertIn(ctx.exception.node_id, ("filter_a", "filter_b"))
            self.assertIn("bad weights", str(ctx.exception))
            self.assertIsInstance(ctx.exception.__cause__, ValueError)

    def test_accepts_registry(self):
        registry = NodeExecutorRegistry()
        for node_type, executor in self.executors.items():
            registry.register(node_type, executor)

        results = execute_pipeline(self.pipeline, registry, use_threading=False)

        self.assertEqual(results["merge"], "filter_a(data)+filter_b(data)")

    def test_logs_stage_progress(self):
        with self.assertLogs("PF_Libs.PipelineLib.pipeline_builder", level="INFO") as logs:
            execute_pipeline(self.pipeline, self.executors, use_threading=False)

        self.assertEqual(len(logs.records), 4)


class TestImagePipeline(unittest.TestCase):
    """End-to-end graph with the default executors."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)
        Image.new("RGBA", (5, 5), (100, 100, 100, 255)).save(self.temp_path / "gray.png")

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_blur_and_difference(self):
        nodes = [
            create_import_image_node("in", str(self.temp_path / "gray.png")),
            create_convolution_node("blur", kernel_type="box_blur", normalize=True),
            create_composite_node("diff", operation="difference"),
            create_output_node("out", str(self.temp_path / "edges.png")),
        ]
        connections = [
            {"from_node": "in", "to_node": "blur"},
            {"from_node": "in", "to_node": "diff"},
            {"from_node": "blur", "to_node": "diff"},
            {"from_node": "diff", "to_node": "out"},
        ]

        pipeline, is_valid, errors = build_pipeline_from_graph(nodes, connections)
        self.assertTrue(is_valid, errors)

        results = execute_pipeline(pipeline, get_default_registry())

        diff = results["diff"]
        self.assertIsInstance(diff, PixelBuffer)
        # Interior is unchanged by the blur, borders are darkened by padding
        self.assertEqual(diff.get(2, 2), (0, 0, 0, 255))
        self.assertEqual(diff.get(0, 0), (56, 56, 56, 255))
        self.assertTrue(results["out"].exists())

    def test_composite_image_with_itself(self):
        nodes = [
            {"id": "src", "type": "Source"},
            create_composite_node("diff", operation="difference"),
            create_composite_node("sub", operation="subtract"),
        ]
        connections = [
            {"from_node": "src", "to_node": "diff"},
            {"from_node": "src", "to_node": "diff"},
            {"from_node": "src", "to_node": "sub"},
            {"from_node": "src", "to_node": "sub"},
        ]
        executors = {
            "Source": lambda node, inputs: PixelBuffer.new(4, 4, fill=(128, 128, 128, 255)),
            "Composite": get_default_registry().get_executor("Composite"),
        }

        pipeline, is_valid, errors = build_pipeline_from_graph(nodes, connections)
        self.assertTrue(is_valid, errors)
        self.assertEqual(pipeline["stages"][1]["nodes"][0]["inputs"], ["src", "src"])

        results = execute_pipeline(pipeline, executors, use_threading=False)

        expected = PixelBuffer.new(4, 4, fill=(0, 0, 0, 255))
        self.assertEqual(results["diff"], expected)
        self.assertEqual(results["sub"], expected)


if __name__ == "__main__":
    unittest.main()
