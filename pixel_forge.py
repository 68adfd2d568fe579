"""
Pixel Forge command line interface.

Examples:
    pixel-forge kernel photo.png soft.png --type gaussian_blur --normalize
    pixel-forge kernel photo.png edges.png --custom "0,-1,0;-1,4,-1;0,-1,0"
    pixel-forge composite blend a.png b.png mix.png --alpha 0.3
    pixel-forge adjust brightness photo.png bright.png --value 40
    pixel-forge transform crop photo.png head.png --x 10 --y 0 --width 64 --height 64
    pixel-forge run soften.pfrecipe.json
    pixel-forge kernels
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from PF_Libs import __version__
from PF_Libs.constants import DEFAULT_JPEG_QUALITY, DEFAULT_THRESHOLD
from PF_Libs.ImageEditingLib.compositing_ops import COMPOSITE_OPERATIONS, composite
from PF_Libs.ImageEditingLib.convolution_filter import apply_kernel
from PF_Libs.ImageEditingLib.geometry_ops import TRANSFORMS
from PF_Libs.ImageEditingLib.image_io import load_image, save_image
from PF_Libs.ImageEditingLib.kernels import KernelType, get_kernel, kernel_name
from PF_Libs.ImageEditingLib.tone_ops import ADJUSTMENTS
from PF_Libs.NodesLib.adjustment_node import AdjustmentNodeConfig
from PF_Libs.NodesLib.composite_node import CompositeNodeConfig
from PF_Libs.NodesLib.convolution_node import ConvolutionNodeConfig
from PF_Libs.NodesLib.transform_node import TransformNodeConfig
from PF_Libs.PipelineLib.pipeline_builder import PipelineExecutionError
from PF_Libs.PipelineLib.recipe_store import run_recipe

logger = logging.getLogger("pixel_forge")

# Which AdjustmentNodeConfig field --value feeds
_ADJUSTMENT_VALUE_FIELDS = {
    "threshold": ("threshold", int),
    "brightness": ("offset", int),
    "contrast": ("factor", float),
    "tint": ("strength", float),
    "noise": ("intensity", float),
}


def parse_kernel_text(text: str) -> List[List[float]]:
    """
    Parse kernel weights written as rows separated by ';' and columns by ','.

    Example:
        >>> parse_kernel_text("1,2,1; 2,4,2; 1,2,1")
        [[1.0, 2.0, 1.0], [2.0, 4.0, 2.0], [1.0, 2.0, 1.0]]

    Raises:
        ValueError: If a weight is not a number
    """
    rows = [row for row in str(text).split(";") if row.strip()]
    try:
        return [[float(value) for value in row.split(",")] for row in rows]
    except ValueError as e:
        raise ValueError(f"Invalid kernel weights '{text}': {e}") from e


def parse_color(text: str) -> List[int]:
    """Parse "R,G,B" or "R,G,B,A" into a list of ints."""
    try:
        values = [int(part) for part in str(text).split(",")]
    except ValueError as e:
        raise ValueError(f"Invalid color '{text}': {e}") from e
    if len(values) not in (3, 4):
        raise ValueError(f"Color must have 3 or 4 components, got '{text}'")
    return values


def _cmd_kernel(args: argparse.Namespace) -> int:
    kernel = parse_kernel_text(args.custom) if args.custom else None
    config = ConvolutionNodeConfig(
        kernel_type=args.type,
        kernel=kernel,
        normalize=args.normalize,
        scale=args.scale,
    )
    result = apply_kernel(load_image(args.input), config.build_kernel())
    save_image(result, args.output, quality=args.quality)
    return 0


def _cmd_composite(args: argparse.Namespace) -> int:
    config = CompositeNodeConfig(operation=args.operation, alpha=args.alpha, scale=args.scale)
    left = load_image(args.left)
    right = load_image(args.right)
    result = composite(config.operation, left, right, **config.operation_params())
    save_image(result, args.output, quality=args.quality)
    return 0


def _cmd_adjust(args: argparse.Namespace) -> int:
    params = {"adjustment": args.adjustment, "seed": args.seed}
    if args.value is not None:
        if args.adjustment not in _ADJUSTMENT_VALUE_FIELDS:
            raise ValueError(f"Adjustment '{args.adjustment}' does not take --value")
        field_name, cast = _ADJUSTMENT_VALUE_FIELDS[args.adjustment]
        params[field_name] = cast(args.value)
    if args.color is not None:
        params["color"] = parse_color(args.color)

    config = AdjustmentNodeConfig(**params)
    result = config.apply(load_image(args.input))
    save_image(result, args.output, quality=args.quality)
    return 0


def _cmd_transform(args: argparse.Namespace) -> int:
    config = TransformNodeConfig(
        transform=args.transform,
        width=args.width,
        height=args.height,
        crop_x=args.x,
        crop_y=args.y,
    )
    result = config.apply(load_image(args.input))
    save_image(result, args.output, quality=args.quality)
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    results = run_recipe(Path(args.recipe), use_threading=args.threads)
    for node_id, value in results.items():
        if isinstance(value, Path):
            print(f"{node_id}: wrote {value}")
    return 0


def _cmd_kernels(args: argparse.Namespace) -> int:
    for kernel_type in KernelType:
        print(f"{kernel_type.value} ({kernel_name(kernel_type)})")
        for row in get_kernel(kernel_type):
            print("    " + " ".join(f"{weight:>3g}" for weight in row))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixel-forge",
        description="Kernel filtering, compositing and tone/geometry edits for raster images.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--quality",
        type=int,
        default=DEFAULT_JPEG_QUALITY,
        help=f"JPEG quality 1-100 (default: {DEFAULT_JPEG_QUALITY})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    kernel = subparsers.add_parser("kernel", help="Filter an image with a convolution kernel")
    kernel.add_argument("input", help="Input image")
    kernel.add_argument("output", help="Output image (.png, .jpg, .bmp)")
    kernel.add_argument("--type", default=KernelType.DEFAULT.value, help="Preset kernel name (see 'kernels')")
    kernel.add_argument("--custom", default=None, help='Custom weights, e.g. "1,2,1;2,4,2;1,2,1"')
    kernel.add_argument("--normalize", action="store_true", help="Divide weights by their sum")
    kernel.add_argument("--scale", type=float, default=1.0, help="Multiply weights by this factor")
    kernel.set_defaults(func=_cmd_kernel)

    comp = subparsers.add_parser("composite", help="Combine two same-sized images")
    comp.add_argument("operation", choices=sorted(COMPOSITE_OPERATIONS), help="Compositing operation")
    comp.add_argument("left", help="Left image (its alpha is kept)")
    comp.add_argument("right", help="Right image")
    comp.add_argument("output", help="Output image")
    comp.add_argument("--alpha", type=float, default=0.5, help="Weight of the left image for 'blend'")
    comp.add_argument("--scale", type=float, default=1.0, help="Right image multiplier for 'add'")
    comp.set_defaults(func=_cmd_composite)

    adjust = subparsers.add_parser("adjust", help="Tone and color adjustments")
    adjust.add_argument("adjustment", choices=sorted(ADJUSTMENTS), help="Adjustment to apply")
    adjust.add_argument("input", help="Input image")
    adjust.add_argument("output", help="Output image")
    adjust.add_argument(
        "--value",
        default=None,
        help=(
            f"threshold cut-off (default {DEFAULT_THRESHOLD}), brightness offset, "
            "contrast factor, tint strength or noise intensity"
        ),
    )
    adjust.add_argument("--color", default=None, help="Tint color as R,G,B")
    adjust.add_argument("--seed", type=int, default=None, help="Noise seed")
    adjust.set_defaults(func=_cmd_adjust)

    transform = subparsers.add_parser("transform", help="Flip, rotate, resize or crop")
    transform.add_argument("transform", choices=sorted(TRANSFORMS), help="Transform to apply")
    transform.add_argument("input", help="Input image")
    transform.add_argument("output", help="Output image")
    transform.add_argument("--width", type=int, default=0, help="Target/region width")
    transform.add_argument("--height", type=int, default=0, help="Target/region height")
    transform.add_argument("--x", type=int, default=0, help="Crop left column")
    transform.add_argument("--y", type=int, default=0, help="Crop top row")
    transform.set_defaults(func=_cmd_transform)

    run = subparsers.add_parser("run", help="Execute a recipe file")
    run.add_argument("recipe", help="Recipe JSON file")
    run.add_argument("--threads", action="store_true", help="Run independent nodes in parallel")
    run.set_defaults(func=_cmd_run)

    kernels = subparsers.add_parser("kernels", help="List the preset kernels")
    kernels.set_defaults(func=_cmd_kernels)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (ValueError, OSError, KeyError, PipelineExecutionError) as e:
        logger.error(str(e))
        logger.debug("Traceback:", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
