"""CLI application entry point for qyoofinder.

This module provides the main CLI interface using Typer.
"""

from pathlib import Path
from typing import Annotated

import typer

from qyoofinder import __version__
from qyoofinder.cli.output import (
    console,
    print_error,
    print_header,
    print_image_info,
    print_markers,
    print_no_markers,
    print_step,
    print_summary,
)
from qyoofinder.config import (
    EdgeConfig,
    LoggingConfig,
    QyooSettings,
    ScanConfig,
    TracerConfig,
)
from qyoofinder.core import MarkerProcessor, ScanResult
from qyoofinder.exceptions import ImageLoadError, ImageSaveError, QyooFinderError
from qyoofinder.io import ImageWriter
from qyoofinder.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="qyoofinder",
    help="Find Qyoo markers in an image and decode their dot codes.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]qyoofinder[/bold blue] v{__version__}")
        raise typer.Exit()


@app.command()
def scan(
    image: Annotated[
        Path,
        typer.Argument(
            help="Path to the image to scan (any format Pillow reads)",
            show_default=False,
        ),
    ],
    rotate: Annotated[
        list[float] | None,
        typer.Option(
            "--rotate",
            "-r",
            help="Rotation in degrees to try; repeat for several (default: 0)",
        ),
    ] = None,
    all_rotations: Annotated[
        bool,
        typer.Option(
            "--all-rotations",
            help="Try every rotation even after a verified code is found",
        ),
    ] = False,
    max_size: Annotated[
        int | None,
        typer.Option(
            "--max-size",
            "-s",
            help="Downscale so the longest side is at most this many pixels",
            min=16,
        ),
    ] = None,
    gradient_threshold: Annotated[
        int,
        typer.Option(
            "--gradient-threshold",
            help="Minimum gradient magnitude kept as an edge",
            min=0,
        ),
    ] = 60,
    low_threshold: Annotated[
        int,
        typer.Option(
            "--low-threshold",
            help="Magnitude a pixel must exceed to be followed",
            min=0,
        ),
    ] = 10,
    high_threshold: Annotated[
        int,
        typer.Option(
            "--high-threshold",
            help="Magnitude a pixel must exceed to start a contour",
            min=0,
        ),
    ] = 60,
    debug_dir: Annotated[
        Path | None,
        typer.Option(
            "--debug-dir",
            help="Write edge maps, overlays and dot cells to this directory",
        ),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print results as JSON",
        ),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose console output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Find Qyoo markers in an image and decode their dot codes.

    Example:
        qyoofinder photo.jpg -r 0 -r 90 -r 180 -r 270

    This tries the image at four rotations and stops at the first one
    that yields a verified code.
    """
    # Validate mutually exclusive options
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    if not image.exists():
        print_error(
            f"Input file not found: {image}",
            details=f"The file '{image}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    if not image.is_file():
        print_error(
            f"Input path is not a file: {image}",
            details="Please provide a path to an image file.",
        )
        raise typer.Exit(code=1)

    rotations = rotate or [0.0]
    show = not quiet and not as_json

    if show:
        print_header(__version__)

    settings = QyooSettings(
        edges=EdgeConfig(gradient_threshold=gradient_threshold),
        tracer=TracerConfig(low_threshold=low_threshold, high_threshold=high_threshold),
        scan=ScanConfig(
            rotations=rotations,
            stop_on_valid=not all_rotations,
            max_size=max_size,
        ),
        logging=LoggingConfig(
            log_file=log_file,
            log_level=log_level if not quiet else "ERROR",
        ),
    )
    configure_logging(
        log_file=settings.logging.log_file,
        console_level=settings.logging.log_level,
        file_level=settings.logging.file_log_level,
        quiet=quiet,
    )

    try:
        if show:
            print_step("Scanning")

        processor = MarkerProcessor(settings)
        result = processor.scan_file(image)

        if show:
            print_image_info(str(image), result.width, result.height, rotations)

        if debug_dir is not None:
            written = _write_debug_images(result, debug_dir, image)
            if show:
                console.print(f"  {written} debug images written to {debug_dir}")

        markers = [(p.rotation, m) for p in result.passes for m in p.markers]

        if as_json:
            console.print_json(data=_to_json(result))
        elif not quiet:
            if markers:
                print_markers(markers, verbose)
            else:
                print_no_markers()
            stats = result.stats
            print_summary(
                total_time_s=stats.duration_seconds,
                contours=stats.contours_traced,
                markers=stats.markers_found,
                verified=stats.codes_verified,
                rejections=dict(stats.rejections),
            )

    except ImageLoadError as e:
        print_error(f"Could not load image: {e.reason}")
        raise typer.Exit(code=1)
    except ImageSaveError as e:
        print_error(f"Could not save debug image: {e.reason}")
        raise typer.Exit(code=1)
    except QyooFinderError as e:
        print_error(str(e))
        raise typer.Exit(code=1)


def _write_debug_images(result: ScanResult, debug_dir: Path, image: Path) -> int:
    """Save edge maps, overlays and dot cells for every detection pass.

    Returns:
        Number of images written
    """
    writer = ImageWriter(debug_dir, image)
    written = 0
    for detection in result.passes:
        tag = f"r{detection.rotation:g}"
        if detection.edges is not None:
            writer.save_raster(detection.edges.smoothed, f"{tag}-smoothed")
            writer.save_raster(detection.edges.magnitude, f"{tag}-magnitude")
            writer.save_overlay(detection.edges.smoothed, detection.contours, f"{tag}-overlay")
            written += 3
        for contour_id, reading in detection.readings.items():
            writer.save_raster(reading.cells, f"{tag}-marker{contour_id}")
            written += 1
    return written


def _to_json(result: ScanResult) -> dict:
    return {
        "image": str(result.path),
        "width": result.width,
        "height": result.height,
        "passes": [
            {
                "rotation": detection.rotation,
                "contours": len(detection.contours),
                "markers": [m.to_dict() for m in detection.markers],
            }
            for detection in result.passes
        ],
        "duration_seconds": round(result.stats.duration_seconds, 4),
    }


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
