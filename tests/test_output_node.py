"""
Tests for Output Node.

Tests cover:
- Output node configuration
- Path resolution and traversal protection
- File saving, format selection and directory creation
- Executor function
- Node registration
"""

import tempfile
import unittest
from pathlib import Path

from PIL import Image

from PF_Libs.ImageEditingLib.image_io import ImageFormat
from PF_Libs.ImageEditingLib.image_models import PixelBuffer
from PF_Libs.NodesLib.output_node import (
    OutputNodeConfig,
    OutputNodeHandler,
    create_output_node,
    execute_output_node,
)
from PF_Libs.PipelineLib.node_executors import get_default_registry


class TestOutputNodeConfig(unittest.TestCase):
    """Test OutputNodeConfig dataclass."""

    def test_config_creation_default(self):
        config = OutputNodeConfig()

        self.assertEqual(config.output_path, "output.png")
        self.assertIsNone(config.save_format)
        self.assertEqual(config.quality, 90)
        self.assertTrue(config.create_directories)
        self.assertFalse(config.overwrite)

    def test_save_format_is_normalized(self):
        self.assertEqual(OutputNodeConfig(save_format="jpeg").save_format, "JPG")

    def test_invalid_save_format(self):
        with self.assertRaises(ValueError):
            OutputNodeConfig(save_format="gif")

    def test_resolve_format(self):
        self.assertIs(OutputNodeConfig(output_path="a.bmp").resolve_format(), ImageFormat.BMP)
        self.assertIs(OutputNodeConfig(output_path="a.bmp", save_format="png").resolve_format(), ImageFormat.PNG)

    def test_from_dict_ignores_unknown_keys(self):
        config = OutputNodeConfig.from_dict({"id": "out-1", "type": "Output", "output_path": "x.png", "quality": 70})

        self.assertEqual(config.output_path, "x.png")
        self.assertEqual(config.quality, 70)


class TestOutputNodeHandler(unittest.TestCase):
    """Test path handling and saving."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)
        self.image = PixelBuffer.new(4, 4, fill=(10, 20, 30, 128))

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_save_png(self):
        config = OutputNodeConfig(output_path=str(self.temp_path / "out.png"))
        path = OutputNodeHandler(config).save_image(self.image)

        self.assertTrue(path.exists())
        with Image.open(path) as img:
            self.assertEqual(img.mode, "RGBA")
            self.assertEqual(img.getpixel((0, 0)), (10, 20, 30, 128))

    def test_creates_directories(self):
        config = OutputNodeConfig(output_path=str(self.temp_path / "a" / "b" / "out.bmp"))
        path = OutputNodeHandler(config).save_image(self.image)

        self.assertTrue(path.exists())

    def test_no_directory_creation(self):
        config = OutputNodeConfig(
            output_path=str(self.temp_path / "missing" / "out.png"),
            create_directories=False,
        )
        with self.assertRaises(OSError):
            OutputNodeHandler(config).save_image(self.image)

    def test_refuses_to_overwrite(self):
        target = self.temp_path / "out.png"
        target.write_bytes(b"existing")
        config = OutputNodeConfig(output_path=str(target))

        with self.assertRaises(FileExistsError):
            OutputNodeHandler(config).save_image(self.image)
        self.assertEqual(target.read_bytes(), b"existing")

    def test_overwrite(self):
        target = self.temp_path / "out.png"
        target.write_bytes(b"existing")
        config = OutputNodeConfig(output_path=str(target), overwrite=True)

        OutputNodeHandler(config).save_image(self.image)

        with Image.open(target) as img:
            self.assertEqual(img.size, (4, 4))

    def test_rejects_parent_traversal(self):
        config = OutputNodeConfig(output_path="../escape.png", base_directory=str(self.temp_path))
        with self.assertRaises(ValueError):
            OutputNodeHandler(config).resolve_output_path()

    def test_relative_path_under_base_directory(self):
        config = OutputNodeConfig(output_path="sub/out.png", base_directory=str(self.temp_path))
        resolved = OutputNodeHandler(config).resolve_output_path()

        self.assertEqual(resolved, (self.temp_path / "sub" / "out.png").resolve())

    def test_absolute_path_outside_base_directory(self):
        other = tempfile.TemporaryDirectory()
        self.addCleanup(other.cleanup)
        config = OutputNodeConfig(
            output_path=str(Path(other.name) / "out.png"),
            base_directory=str(self.temp_path),
        )
        with self.assertRaises(ValueError):
            OutputNodeHandler(config).resolve_output_path()

    def test_relative_base_directory_rejected(self):
        with self.assertRaises(ValueError):
            OutputNodeHandler(OutputNodeConfig(base_directory="relative/dir"))

    def test_rejects_non_buffer(self):
        config = OutputNodeConfig(output_path=str(self.temp_path / "out.png"))
        with self.assertRaises(TypeError):
            OutputNodeHandler(config).save_image(Image.new("RGBA", (2, 2)))


class TestOutputNodeExecutor(unittest.TestCase):
    """Test executor and registration."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_execute_output_node_jpg(self):
        node = create_output_node("out-1", str(self.temp_path / "out.jpg"), quality=80)
        path = execute_output_node(node, [PixelBuffer.new(8, 8, fill=(200, 10, 10, 0))])

        with Image.open(path) as img:
            self.assertEqual(img.format, "JPEG")
            self.assertEqual(img.mode, "RGB")

    def test_execute_requires_input(self):
        node = create_output_node("out-1", str(self.temp_path / "out.png"))
        with self.assertRaises(ValueError):
            execute_output_node(node, [])

    def test_create_output_node(self):
        node = create_output_node("out-1", "result.png")

        self.assertEqual(node["id"], "out-1")
        self.assertEqual(node["type"], "Output")
        self.assertEqual(node["output_path"], "result.png")
        self.assertFalse(node["overwrite"])

    def test_registered_in_default_registry(self):
        registry = get_default_registry()

        self.assertTrue(registry.has_executor("Output"))
        self.assertIs(registry.get_executor("Output"), execute_output_node)


if __name__ == "__main__":
    unittest.main()
