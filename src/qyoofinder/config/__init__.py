"""Configuration management for qyoofinder.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- EdgeConfig: Gradient threshold for edge extraction
- TracerConfig: Contour tracing thresholds and margins
- AnalyzerConfig: Geometric validation tolerances
- DecoderConfig: Dot sampling settings
- MarkerConfig: Marker geometry and legacy codes
- ScanConfig: Rotation retry and downscaling for image files
- LoggingConfig: Logging settings
- QyooSettings: Main application settings
"""

from qyoofinder.config.settings import (
    AnalyzerConfig,
    DecoderConfig,
    EdgeConfig,
    LoggingConfig,
    MarkerConfig,
    QyooSettings,
    ScanConfig,
    TracerConfig,
    get_default_settings,
)

__all__ = [
    "AnalyzerConfig",
    "DecoderConfig",
    "EdgeConfig",
    "LoggingConfig",
    "MarkerConfig",
    "QyooSettings",
    "ScanConfig",
    "TracerConfig",
    "get_default_settings",
]
