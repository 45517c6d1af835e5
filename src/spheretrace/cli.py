"""Command-line entry point: render the demonstration scene.

Usage:
    python -m src.spheretrace [options] > image.ppm

Options:
    -w WIDTH        Image width in pixels (default: 400)
    -s SAMPLES      Samples per pixel (default: 100)
    -d DEPTH        Maximum ray bounce depth (default: 50)
    -t THREADS      Worker thread count, 0 for the system default (default: 0)
    -o OUTPUT       Write a .png or .ppm file instead of PPM to stdout
    --seed SEED     Fix the random seed for the scene and the render
    -h              Show this help message

Render parameters and timing are reported on stderr so the image can be
redirected from stdout.
"""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Sequence

import taichi as ti

DEFAULT_WIDTH = 400
DEFAULT_SAMPLES = 100
DEFAULT_DEPTH = 50
DEFAULT_THREADS = 0


class UsageArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports configuration errors with exit code 1."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> UsageArgumentParser:
    """Build the command-line parser."""
    parser = UsageArgumentParser(
        prog="spheretrace",
        description="Render the random spheres scene with Monte Carlo path tracing.",
    )
    parser.add_argument(
        "-w",
        dest="width",
        metavar="WIDTH",
        type=int,
        default=DEFAULT_WIDTH,
        help=f"Image width in pixels (default: {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "-s",
        dest="samples",
        metavar="SAMPLES",
        type=int,
        default=DEFAULT_SAMPLES,
        help=f"Samples per pixel (default: {DEFAULT_SAMPLES})",
    )
    parser.add_argument(
        "-d",
        dest="depth",
        metavar="DEPTH",
        type=int,
        default=DEFAULT_DEPTH,
        help=f"Maximum ray bounce depth (default: {DEFAULT_DEPTH})",
    )
    parser.add_argument(
        "-t",
        dest="threads",
        metavar="THREADS",
        type=int,
        default=DEFAULT_THREADS,
        help="Worker thread count, 0 uses the system default (default: 0)",
    )
    parser.add_argument(
        "-o",
        dest="output",
        metavar="OUTPUT",
        type=str,
        default=None,
        help="Output file (.png or .ppm). Writes PPM to stdout when omitted",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for scene layout and sampling (default: random)",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def init_taichi(num_threads: int) -> None:
    """Initialize Taichi on the CPU backend with the requested thread pool size."""
    if num_threads > 0:
        ti.init(arch=ti.cpu, cpu_max_num_threads=num_threads)
    else:
        ti.init(arch=ti.cpu)


def render_final_scene(args: argparse.Namespace) -> float:
    """Build the demonstration scene, render it and write the image.

    Returns:
        Render time in seconds.
    """
    # Lazy imports so Taichi fields are allocated after ti.init
    from src.spheretrace.core.renderer import Renderer
    from src.spheretrace.scene.final_scene import create_final_scene

    _, config = create_final_scene(
        image_width=args.width,
        samples_per_pixel=args.samples,
        max_depth=args.depth,
        num_threads=args.threads,
        seed=args.seed,
    )
    renderer = Renderer(config)

    print("Starting render...", file=sys.stderr)
    print(f"Image size: {renderer.width}x{renderer.height}", file=sys.stderr)
    print(f"Samples per pixel: {config.samples_per_pixel}", file=sys.stderr)
    print(f"Max ray depth: {config.max_depth}", file=sys.stderr)
    print(f"Worker threads: {renderer.num_workers}", file=sys.stderr)

    start_time = time.time()
    renderer.render(seed=args.seed)
    elapsed = time.time() - start_time

    print(f"Render completed in {int(elapsed)} seconds", file=sys.stderr)

    if args.output:
        renderer.save(args.output)
        print(f"Saved to: {args.output}", file=sys.stderr)
    else:
        renderer.write_ppm(sys.stdout)
        sys.stdout.flush()

    return elapsed


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    init_taichi(args.threads)

    try:
        render_final_scene(args)
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
