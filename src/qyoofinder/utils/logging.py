"""Logging utilities for qyoofinder."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

import structlog

# Handlers installed by configure_logging, replaced on reconfiguration
_installed_handlers: list[logging.Handler] = []


@dataclass
class DetectionStats:
    """Statistics from a detection run."""

    contours_traced: int = 0
    markers_found: int = 0
    markers_decoded: int = 0
    codes_verified: int = 0
    decode_failures: int = 0
    rotations_tried: int = 0
    rejections: Counter = field(default_factory=Counter)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate processing duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def rejected_count(self) -> int:
        """Total number of contours rejected by any gate."""
        return sum(self.rejections.values())


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        root_logger.addHandler(file_handler)
        _installed_handlers.append(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)
    _installed_handlers.append(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("qyoofinder")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


class DetectionLogger:
    """Logger for tracking detection progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._logger = logger if logger is not None else structlog.get_logger("qyoofinder")
        self._stats = DetectionStats()

    def log_rotation(self, degrees: float, width: int, height: int) -> None:
        """Log the start of a detection pass on a (possibly rotated) raster."""
        self._logger.debug("Detection pass", rotation=degrees, width=width, height=height)
        self._stats.rotations_tried += 1

    def log_trace_complete(self, contour_count: int, duration_ms: float) -> None:
        """Log the result of contour tracing."""
        self._logger.debug(
            "Contours traced",
            contours=contour_count,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.contours_traced += contour_count

    def log_contour_rejected(self, contour_id: int, stage: str, points: int) -> None:
        """Log a contour that failed a validation gate."""
        self._logger.debug("Contour rejected", contour=contour_id, stage=stage, points=points)
        self._stats.rejections[stage] += 1

    def log_marker_found(self, contour_id: int, corner: tuple[float, float]) -> None:
        """Log a contour that passed every geometric gate."""
        self._logger.info(
            "Marker found",
            contour=contour_id,
            corner=(round(corner[0], 2), round(corner[1], 2)),
        )
        self._stats.markers_found += 1

    def log_marker_decoded(self, contour_id: int, code: str, verified: bool) -> None:
        """Log a decoded dot grid."""
        self._logger.info("Marker decoded", contour=contour_id, code=code, verified=verified)
        self._stats.markers_decoded += 1
        if verified:
            self._stats.codes_verified += 1

    def log_decode_failed(self, contour_id: int, reason: str) -> None:
        """Log a dot grid that could not be turned into a code."""
        self._logger.warning("Marker decode failed", contour=contour_id, reason=reason)
        self._stats.decode_failures += 1

    def reset(self) -> DetectionStats:
        """Start a fresh set of statistics and return it."""
        self._stats = DetectionStats()
        return self._stats

    @property
    def stats(self) -> DetectionStats:
        """Get current detection statistics."""
        return self._stats
