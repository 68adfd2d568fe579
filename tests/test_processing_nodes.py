"""
Tests for the Composite, Adjustment and Transform nodes.
"""

import pytest

from PF_Libs.ImageEditingLib.errors import ShapeMismatchError
from PF_Libs.NodesLib.adjustment_node import (
    AdjustmentNodeConfig,
    create_adjustment_node,
    execute_adjustment_node,
)
from PF_Libs.NodesLib.composite_node import (
    CompositeNodeConfig,
    create_composite_node,
    execute_composite_node,
)
from PF_Libs.NodesLib.transform_node import (
    TransformNodeConfig,
    create_transform_node,
    execute_transform_node,
)


class TestCompositeNode:

    def test_config_normalizes_operation(self):
        assert CompositeNodeConfig(operation="Composite Over").operation == "composite_over"

    def test_config_rejects_unknown_operation(self):
        with pytest.raises(ValueError):
            CompositeNodeConfig(operation="dissolve")

    def test_config_rejects_bad_alpha(self):
        with pytest.raises(ValueError):
            CompositeNodeConfig(alpha=2.0)

    def test_operation_params(self):
        assert CompositeNodeConfig("blend", alpha=0.3).operation_params() == {"alpha": 0.3}
        assert CompositeNodeConfig("add", scale=2.0).operation_params() == {"scale": 2.0}
        assert CompositeNodeConfig("multiply").operation_params() == {}

    def test_execute_uses_input_order(self, make_uniform):
        left = make_uniform(2, 2, (50, 0, 0, 10))
        right = make_uniform(2, 2, (100, 0, 0, 255))
        node = create_composite_node("sub-1", operation="subtract")

        assert execute_composite_node(node, [right, left]).get(0, 0) == (50, 0, 0, 255)
        assert execute_composite_node(node, [left, right]).get(0, 0) == (0, 0, 0, 10)

    def test_execute_blend(self, make_uniform):
        node = create_composite_node("mix-1", operation="blend", alpha=0.25)
        result = execute_composite_node(node, [make_uniform(1, 1, (200, 0, 0, 255)), make_uniform(1, 1, (100, 0, 0, 255))])

        assert result.get(0, 0)[0] == 125

    def test_execute_requires_two_inputs(self, make_uniform):
        node = create_composite_node("mix-1")
        with pytest.raises(ValueError):
            execute_composite_node(node, [make_uniform(1, 1)])

    def test_execute_shape_mismatch(self, make_uniform):
        node = create_composite_node("mix-1", operation="average")
        with pytest.raises(ShapeMismatchError):
            execute_composite_node(node, [make_uniform(2, 2), make_uniform(3, 3)])

    def test_execute_rejects_non_buffer(self, make_uniform):
        node = create_composite_node("mix-1")
        with pytest.raises(TypeError):
            execute_composite_node(node, [make_uniform(1, 1), "nope"])


class TestAdjustmentNode:

    def test_config_validation(self):
        with pytest.raises(ValueError):
            AdjustmentNodeConfig(adjustment="posterize")
        with pytest.raises(ValueError):
            AdjustmentNodeConfig(adjustment="threshold", threshold=300)

    def test_create_node_keeps_params(self):
        node = create_adjustment_node("bright-1", "brightness", offset=40)

        assert node["type"] == "Adjustment"
        assert node["adjustment"] == "brightness"
        assert node["offset"] == 40

    @pytest.mark.parametrize("adjustment, params, expected", [
        ("invert", {}, (155, 155, 155, 255)),
        ("brightness", {"offset": 40}, (140, 140, 140, 255)),
        ("contrast", {"factor": 2.0}, (200, 200, 200, 255)),
        ("threshold", {"threshold": 128}, (0, 0, 0, 255)),
        ("tint", {"color": (200, 0, 0), "strength": 0.5}, (150, 50, 50, 255)),
        ("noise", {"intensity": 0.0, "seed": 3}, (100, 100, 100, 255)),
    ])
    def test_execute(self, make_uniform, adjustment, params, expected):
        node = create_adjustment_node("adj-1", adjustment, **params)
        result = execute_adjustment_node(node, [make_uniform(2, 2, (100, 100, 100, 255))])

        assert result.get(1, 1) == expected

    def test_execute_requires_input(self):
        with pytest.raises(ValueError):
            execute_adjustment_node(create_adjustment_node("adj-1"), [])

    def test_round_trip_dict(self):
        config = AdjustmentNodeConfig(adjustment="tint", color=(1, 2, 3), strength=0.2)
        assert AdjustmentNodeConfig.from_dict(config.to_dict()) == config


class TestTransformNode:

    def test_config_rejects_unknown_transform(self):
        with pytest.raises(ValueError):
            TransformNodeConfig(transform="shear")

    def test_config_normalizes_name(self):
        assert TransformNodeConfig(transform="Rotate Right").transform == "rotate_right"

    def test_execute_resize(self, make_uniform):
        node = create_transform_node("rs-1", "resize", width=7, height=3)
        assert execute_transform_node(node, [make_uniform(2, 2)]).size == (7, 3)

    def test_execute_crop(self, make_uniform):
        image = make_uniform(5, 5)
        image.set(2, 3, (9, 9, 9, 9))
        node = create_transform_node("crop-1", "crop", crop_x=3, crop_y=2, width=2, height=2)

        result = execute_transform_node(node, [image])

        assert result.size == (2, 2)
        assert result.get(0, 0) == (9, 9, 9, 9)

    def test_execute_rotate(self, make_uniform):
        node = create_transform_node("rot-1", "rotate_left")
        assert execute_transform_node(node, [make_uniform(4, 2)]).size == (2, 4)

    def test_execute_bad_resize(self, make_uniform):
        node = create_transform_node("rs-1", "resize")
        with pytest.raises(ValueError):
            execute_transform_node(node, [make_uniform(2, 2)])

    def test_execute_rejects_non_buffer(self):
        with pytest.raises(TypeError):
            execute_transform_node(create_transform_node("f-1"), [42])
