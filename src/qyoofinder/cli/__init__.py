"""Command-line interface for qyoofinder.

This module provides the CLI using Typer with rich output for
user-friendly feedback.

Key features:
- Rotation retry for markers that are not upright
- Verbose/quiet/JSON output modes
- Debug image output for tuning thresholds
"""

from qyoofinder.cli.app import cli, main

__all__ = ["cli", "main"]
