"""Command-line interface for tracevec."""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from tracevec.palette import HALFTONE_256, kmeans_palette
from tracevec.pipeline import TracePipeline
from tracevec.raster_ingest import decode
from tracevec.svg_export import save_svg
from tracevec.types import (
    BlurOptions,
    DecodeError,
    Options,
    RenderingOptions,
    TracingOptions,
    VectorizationError,
)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="tracevec",
        description="Trace raster images into SVG paths of lines and quadratic curves",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tracevec -i input.png -o output.svg
  tracevec -i input.png --ltres 0.5 --qtres 0.5 --pathomit 0
  tracevec -i photo.jpg --colors 16 --blur-radius 2 --blur-delta 64

  # Debug output
  tracevec -i input.png --lcpr 0.5 --qcpr 0.5 --save-stages stages/
        """,
    )

    parser.add_argument("-i", "--input", required=True, help="Input image file path")

    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output SVG file path (default: input name with .svg extension)",
    )

    tracing = parser.add_argument_group("tracing")
    tracing.add_argument(
        "--ltres", type=float, default=1.0,
        help="Straight line error tolerance (default: 1.0)",
    )
    tracing.add_argument(
        "--qtres", type=float, default=1.0,
        help="Quadratic curve error tolerance (default: 1.0)",
    )
    tracing.add_argument(
        "--pathomit", type=float, default=8.0,
        help="Drop paths with fewer boundary points than this (default: 8)",
    )

    palette = parser.add_argument_group("palette and preprocessing")
    palette.add_argument(
        "--colors", "-c", type=int, default=None,
        help="Derive an N-color palette with K-means instead of the 256-color halftone palette",
    )
    palette.add_argument(
        "--blur-radius", type=int, default=0,
        help="Selective gaussian blur radius 1-5 (default: 0, off)",
    )
    palette.add_argument(
        "--blur-delta", type=float, default=20.0,
        help="Keep original pixels that the blur changes by more than this (default: 20)",
    )

    rendering = parser.add_argument_group("rendering")
    rendering.add_argument("--scale", type=float, default=1.0, help="Output scale (default: 1)")
    rendering.add_argument(
        "--round-coords", type=int, default=None,
        help="Round coordinates to N decimal places (default: full precision)",
    )
    rendering.add_argument(
        "--lcpr", type=float, default=0.0,
        help="Radius of line end point markers (default: 0, hidden)",
    )
    rendering.add_argument(
        "--qcpr", type=float, default=0.0,
        help="Radius of quadratic control point markers (default: 0, hidden)",
    )
    rendering.add_argument("--viewbox", action="store_true", help="Use a viewBox instead of width/height")
    rendering.add_argument("--desc", action="store_true", help="Add desc attributes to the SVG")

    parser.add_argument(
        "--workers", type=int, default=1,
        help="Trace color layers in N worker processes (default: 1)",
    )
    parser.add_argument(
        "--save-stages", type=str, default=None,
        help="Directory to save pipeline stage debug images",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")

    return parser


def options_from_args(parsed: argparse.Namespace) -> Options:
    """Build pipeline options from parsed arguments."""
    return Options(
        tracing=TracingOptions(
            line_error_tolerance=parsed.ltres,
            curve_error_tolerance=parsed.qtres,
            min_path_size=parsed.pathomit,
        ),
        blur=BlurOptions(radius=parsed.blur_radius, delta=parsed.blur_delta),
        rendering=RenderingOptions(
            scale=parsed.scale,
            linear_control_radius=parsed.lcpr,
            quadratic_control_radius=parsed.qcpr,
            round_coords=parsed.round_coords,
            viewbox=parsed.viewbox,
            desc=parsed.desc,
        ),
        workers=parsed.workers,
    )


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.verbose:
        level = logging.DEBUG
    elif parsed.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    input_path = Path(parsed.input)
    output_path = Path(parsed.output) if parsed.output else input_path.with_suffix(".svg")

    try:
        options = options_from_args(parsed)

        print(f"Processing: {input_path}")
        pixels = decode(input_path)

        if parsed.colors is not None:
            palette = kmeans_palette(pixels, parsed.colors)
            print(f"  Palette: {len(palette)} colors (k-means)")
        else:
            palette = HALFTONE_256
            print(f"  Palette: halftone ({len(palette)} colors)")

        pipeline = TracePipeline(options, palette)
        indexed = pipeline.trace(pixels)
        svg = pipeline.render(indexed)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        save_svg(svg, str(output_path))
        print(f"  Paths: {indexed.path_count}")
        print(f"  Output saved: {output_path}")

        if parsed.save_stages:
            from tracevec.debug_visualization import save_stages

            written = save_stages(pixels, indexed, pipeline.boundaries, Path(parsed.save_stages))
            for stage_file in written:
                print(f"  Saved debug stage: {stage_file}")

        return 0

    except DecodeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except VectorizationError as e:
        print(f"Error processing image: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
