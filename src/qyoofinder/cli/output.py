"""Rich console output helpers for the CLI.

This module provides user-friendly console output using the Rich library
with tables and formatted messages.
"""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from qyoofinder.domain import Contour

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]qyoofinder[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_image_info(image_path: str, width: int, height: int, rotations: list[float]) -> None:
    """Print image information.

    Args:
        image_path: Path to the image file
        width: Image width in pixels
        height: Image height in pixels
        rotations: Rotations that will be tried, in degrees
    """
    # Use Text to safely handle paths with special characters
    line = Text("  ")
    line.append(image_path)
    console.print(line)
    angles = ", ".join(f"{r:g}°" for r in rotations)
    console.print(f"  {width}x{height} px {SYM_DOT} rotations {angles}")


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_markers(markers: list[tuple[float, Contour]], verbose: bool) -> None:
    """Print a table of decoded markers.

    Args:
        markers: Pairs of (rotation in degrees, marker contour)
        verbose: Also show symbols, binary rows and fit quality
    """
    table = Table(show_edge=False, pad_edge=False, box=None)
    table.add_column("Code", style="bold")
    table.add_column("Valid")
    table.add_column("Corner")
    table.add_column("Rotation", justify="right")
    if verbose:
        table.add_column("Symbols")
        table.add_column("Rows")
        table.add_column("Fit", justify="right")

    for rotation, marker in markers:
        valid = f"[green]{SYM_OK}[/green]" if marker.code_valid else f"[red]{SYM_ERR}[/red]"
        corner = f"{marker.corner[0]:.1f}, {marker.corner[1]:.1f}" if marker.corner else "-"
        row = [marker.dot_str or "-", valid, corner, f"{rotation:g}°"]
        if verbose:
            fit = f"{marker.model_fraction:.0%}" if marker.model_fraction is not None else "-"
            row += [marker.symbols, marker.dot_bin_str, fit]
        table.add_row(*row)

    console.print()
    console.print(table)


def print_summary(
    total_time_s: float,
    contours: int,
    markers: int,
    verified: int,
    rejections: dict[str, int],
) -> None:
    """Print completion message with summary.

    Args:
        total_time_s: Total scan time in seconds
        contours: Contours traced over all passes
        markers: Markers found over all passes
        verified: Codes that passed verification
        rejections: Rejected contour counts per validation gate
    """
    time_str = _format_time(total_time_s)
    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {time_str}")

    style = "green" if verified > 0 else "yellow"
    console.print(
        f"  {contours} contours {SYM_DOT} {markers} markers {SYM_DOT} "
        f"[{style}]{verified} verified[/{style}]"
    )
    if rejections:
        parts = f" {SYM_DOT} ".join(f"{count} {stage}" for stage, count in sorted(rejections.items()))
        console.print(f"  rejected: {parts}")


def print_no_markers() -> None:
    console.print(f"\n{SYM_DOT} No markers found")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")
