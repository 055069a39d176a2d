"""Configuration settings for qyoofinder."""

from pathlib import Path

from pydantic import BaseModel, Field


class EdgeConfig(BaseModel):
    """Configuration for edge extraction (gradient and non-max suppression)."""

    gradient_threshold: int = Field(
        default=60,
        ge=0,
        le=2040,
        description="Minimum L1 gradient magnitude kept by non-max suppression",
    )


class TracerConfig(BaseModel):
    """Configuration for contour tracing."""

    low_threshold: int = Field(
        default=10,
        ge=0,
        description="Magnitude a pixel must exceed to be followed by a walk",
    )
    high_threshold: int = Field(
        default=60,
        ge=0,
        description="Magnitude a pixel must exceed to seed a new contour",
    )
    seed_margin: int = Field(
        default=5,
        ge=1,
        le=64,
        description="Pixels from the image border where no seed is taken",
    )
    walk_margin: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Pixels from the image border where a walk stops",
    )
    crowd_limit: int = Field(
        default=2,
        ge=1,
        le=8,
        description="Claimed neighbours at which a seed candidate is skipped",
    )


class AnalyzerConfig(BaseModel):
    """Configuration for geometric validation of traced contours.

    Distances are in pixels except ``model_tolerance``, which is measured
    in canonical marker space where the marker spans the unit square.
    """

    closed_distance: float = Field(
        default=2.0,
        ge=0.0,
        description="Maximum gap between first and last point of a closed contour",
    )
    decimate_tolerance: float = Field(
        default=0.85,
        gt=0.0,
        le=10.0,
        description="Maximum distance of a dropped point from the simplified line",
    )
    min_aspect_ratio: float = Field(
        default=0.5,
        gt=0.0,
        le=1.0,
        description="Minimum short/long side ratio of the bounding box",
    )
    min_area_fraction: float = Field(
        default=0.03,
        ge=0.0,
        le=1.0,
        description="Minimum bounding box area as a fraction of the image",
    )
    max_area_fraction: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Maximum bounding box area as a fraction of the image",
    )
    corner_search_radius: float = Field(
        default=10.0,
        gt=0.0,
        description="Radius around the corner guess searched for edge endpoints",
    )
    min_corner_angle: float = Field(
        default=65.0,
        ge=0.0,
        le=180.0,
        description="Exclusive lower bound of the angle between corner edges",
    )
    max_corner_angle: float = Field(
        default=125.0,
        ge=0.0,
        le=180.0,
        description="Exclusive upper bound of the angle between corner edges",
    )
    model_tolerance: float = Field(
        default=0.04,
        gt=0.0,
        le=1.0,
        description="Distance from the ideal outline a point may have to pass",
    )
    model_pass_fraction: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Fraction of points that must pass the model check",
    )


class DecoderConfig(BaseModel):
    """Configuration for dot grid decoding."""

    pixels_per_dot: int = Field(
        default=11,
        ge=3,
        le=64,
        description="Side of one dot cell in the resampled raster",
    )
    match_distance: int = Field(
        default=60,
        ge=0,
        le=255,
        description="Minimum intensity difference from the background",
    )
    mid_gray: int = Field(
        default=128,
        ge=0,
        le=255,
        description="Intensity separating light from dark backgrounds",
    )
    mid_gray_slack: int = Field(
        default=32,
        ge=0,
        le=127,
        description="How far past mid-gray a matching pixel may sit",
    )
    pass_ratio: float = Field(
        default=0.40,
        gt=0.0,
        le=1.0,
        description="Fraction of matching disc pixels that sets a cell",
    )


class MarkerConfig(BaseModel):
    """Geometry of the marker and its code space."""

    rows: int = Field(default=6, ge=1, le=16, description="Dot grid rows")
    cols: int = Field(default=6, ge=1, le=8, description="Dot grid columns")
    buffer: float = Field(
        default=0.0,
        ge=0.0,
        lt=0.25,
        description="Margin between the marker arc and the dot field",
    )
    legacy_codes: list[list[int]] = Field(
        default_factory=lambda: [[0, 30, 30, 30, 30, 0]],
        description="Row byte vectors (row 0 first) always accepted as valid",
    )


class ScanConfig(BaseModel):
    """Configuration for scanning image files."""

    rotations: list[float] = Field(
        default_factory=lambda: [0.0],
        description="Rotations in degrees tried in order",
    )
    stop_on_valid: bool = Field(
        default=True,
        description="Stop trying rotations once a verified code is found",
    )
    max_size: int | None = Field(
        default=None,
        ge=16,
        description="Longest side of the processing raster (None = full size)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class QyooSettings(BaseModel):
    """Main application settings."""

    edges: EdgeConfig = Field(default_factory=EdgeConfig)
    tracer: TracerConfig = Field(default_factory=TracerConfig)
    analyzer: AnalyzerConfig = Field(default_factory=AnalyzerConfig)
    decoder: DecoderConfig = Field(default_factory=DecoderConfig)
    marker: MarkerConfig = Field(default_factory=MarkerConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> QyooSettings:
    """Get default application settings."""
    return QyooSettings()
