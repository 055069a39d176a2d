"""Utility functions for qyoofinder.

This module provides logging setup and the detection statistics logger.
"""

from qyoofinder.utils.logging import (
    DetectionLogger,
    DetectionStats,
    configure_logging,
)

__all__ = [
    "DetectionLogger",
    "DetectionStats",
    "configure_logging",
]
