"""Detection pipeline orchestration.

This module wires the stages together: contrast stretch and smoothing,
gradient and non-max suppression, tracing, geometric analysis and dot
decoding. It also carries the file-level driver that retries detection on
rotated copies of an image.

Key components:
- EdgeMaps: Rasters produced by edge extraction
- DetectionResult: Contours found in one raster
- ScanResult: Detection passes over one image file
- MarkerProcessor: Main orchestrator class
"""

import time
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from qyoofinder.config import QyooSettings
from qyoofinder.core.analyzer import ContourAnalyzer
from qyoofinder.core.decoder import DotDecoder, DotReading
from qyoofinder.core.edges import gradient_and_orientation, non_max_suppress
from qyoofinder.core.imaging import contrast_stretch
from qyoofinder.core.kernels import gaussian_1_4, smooth
from qyoofinder.core.tracer import ContourTracer
from qyoofinder.domain import Contour, MarkerModel, validate_raster
from qyoofinder.io import ImageReader
from qyoofinder.utils import DetectionLogger, DetectionStats


@dataclass
class EdgeMaps:
    """Intermediate rasters of edge extraction."""

    smoothed: np.ndarray
    magnitude: np.ndarray
    orientation: np.ndarray


@dataclass
class DetectionResult:
    """Contours traced in one raster and what became of them.

    Attributes:
        width: Raster width
        height: Raster height
        contours: Every traced contour, in seed order
        ownership: Contour id per pixel (0 = unclaimed)
        edges: Edge rasters the contours were traced from
        readings: Dot readings keyed by contour id
        rotation: Rotation in degrees applied before detection
        gray: Raster the detection ran on
    """

    width: int
    height: int
    contours: list[Contour] = field(default_factory=list)
    ownership: np.ndarray | None = None
    edges: EdgeMaps | None = None
    readings: dict[int, DotReading] = field(default_factory=dict)
    rotation: float = 0.0
    gray: np.ndarray | None = None

    @property
    def markers(self) -> list[Contour]:
        """Contours that passed every geometric gate."""
        return [c for c in self.contours if c.valid]

    @property
    def verified(self) -> list[Contour]:
        """Markers whose decoded code passed verification."""
        return [c for c in self.markers if c.code_valid]


@dataclass
class ScanResult:
    """All detection passes run over one image file."""

    path: Path
    width: int
    height: int
    passes: list[DetectionResult] = field(default_factory=list)
    stats: DetectionStats = field(default_factory=DetectionStats)

    @property
    def markers(self) -> list[Contour]:
        return [c for result in self.passes for c in result.markers]

    @property
    def best(self) -> DetectionResult | None:
        """First pass with a verified code, else first pass with a marker."""
        for result in self.passes:
            if result.verified:
                return result
        for result in self.passes:
            if result.markers:
                return result
        return None


class MarkerProcessor:
    """Runs marker detection on rasters and image files.

    The processor holds the settings, the immutable marker model and one
    instance of each stage; it keeps no per-image state between calls.
    Logging is not configured here; configure it with
    ``qyoofinder.utils.configure_logging`` if output is wanted.

    Example:
        processor = MarkerProcessor()
        result = processor.detect(gray)
        for marker in result.markers:
            print(marker.dot_str, marker.code_valid)
    """

    def __init__(self, settings: QyooSettings | None = None, model: MarkerModel | None = None) -> None:
        """Initialize the processor.

        Args:
            settings: Application settings (defaults if None)
            model: Marker geometry (built from ``settings.marker`` if None)
        """
        self.settings = settings or QyooSettings()
        self.model = model or MarkerModel.from_config(self.settings.marker)
        self.tracer = ContourTracer(self.settings.tracer)
        self.analyzer = ContourAnalyzer(self.settings.analyzer)
        self.decoder = DotDecoder(self.settings.decoder, self.model)
        self.detection_logger = DetectionLogger()

    @property
    def stats(self) -> DetectionStats:
        return self.detection_logger.stats

    def prepare(self, gray: np.ndarray) -> EdgeMaps:
        """Extract thinned edges from a grayscale raster.

        Raises:
            InvalidRasterError: If the raster is not 2D or smaller than 3x3
        """
        validate_raster(gray, min_size=3)
        smoothed = smooth(contrast_stretch(gray), gaussian_1_4())
        magnitude, orientation = gradient_and_orientation(smoothed)
        non_max_suppress(magnitude, orientation, self.settings.edges.gradient_threshold)
        return EdgeMaps(smoothed=smoothed, magnitude=magnitude, orientation=orientation)

    def find_markers(self, gray: np.ndarray) -> DetectionResult:
        """Trace and validate contours without decoding them.

        Args:
            gray: 8-bit grayscale raster indexed ``[y, x]``

        Returns:
            DetectionResult holding every traced contour

        Raises:
            InvalidRasterError: If the raster is not 2D or smaller than 3x3
        """
        width, height = validate_raster(gray, min_size=3)
        edges = self.prepare(gray)

        start = time.time()
        traced = self.tracer.trace(edges.magnitude, edges.orientation)
        self.detection_logger.log_trace_complete(len(traced.contours), (time.time() - start) * 1000)

        for contour in traced.contours:
            self.analyzer.analyze(contour, width, height)
            if contour.valid:
                self.detection_logger.log_marker_found(contour.contour_id, contour.corner)
            else:
                self.detection_logger.log_contour_rejected(
                    contour.contour_id, contour.rejected_at.value, len(contour.orig_points)
                )

        return DetectionResult(
            width=width,
            height=height,
            contours=traced.contours,
            ownership=traced.ownership,
            edges=edges,
            gray=gray,
        )

    def decode(self, result: DetectionResult, source: np.ndarray | None = None) -> DetectionResult:
        """Read the dot grid of every marker in a detection result.

        Args:
            result: Output of ``find_markers``
            source: Raster to sample dots from (the detection raster if
                None); may be larger than the detection raster, in which
                case coordinates are scaled

        Returns:
            The same result with ``readings`` filled in
        """
        if source is None:
            source = result.gray
        if source is None:
            raise ValueError("No raster to decode from")
        src_height, src_width = source.shape
        scale = (src_width / result.width, src_height / result.height)
        for contour in result.markers:
            reading = self.decoder.decode(source, contour, source_scale=scale)
            result.readings[contour.contour_id] = reading
            if reading.code is None:
                self.detection_logger.log_decode_failed(
                    contour.contour_id, f"{len(reading.bits)} rows exceed the code capacity"
                )
            else:
                self.detection_logger.log_marker_decoded(contour.contour_id, reading.code, reading.valid)
        return result

    def detect(self, gray: np.ndarray, source: np.ndarray | None = None) -> DetectionResult:
        """Find and decode markers.

        Args:
            gray: Raster to detect in
            source: Full-resolution raster for decoding (``gray`` if None)

        Returns:
            DetectionResult with readings for every marker
        """
        result = self.find_markers(gray)
        return self.decode(result, source)

    def scan_file(self, image_path: Path, rotations: list[float] | None = None) -> ScanResult:
        """Detect markers in an image file, retrying on rotated copies.

        Each rotation is tried in order. With ``scan.stop_on_valid`` the scan
        ends at the first rotation that yields a verified code.

        Args:
            image_path: Image to scan
            rotations: Rotations in degrees (``scan.rotations`` if None)

        Returns:
            ScanResult with one DetectionResult per rotation tried

        Raises:
            FileNotFoundError: If the image does not exist
            ImageLoadError: If the image cannot be decoded
        """
        scan_cfg = self.settings.scan
        if rotations is None:
            rotations = scan_cfg.rotations

        stats = self.detection_logger.reset()
        stats.start_time = time.time()

        with ImageReader(image_path) as reader:
            scan = ScanResult(path=image_path, width=reader.width, height=reader.height, stats=stats)
            for degrees in rotations:
                source = reader.rotated(degrees)
                gray = ImageReader.fit(source, scan_cfg.max_size)
                self.detection_logger.log_rotation(degrees, gray.shape[1], gray.shape[0])

                result = self.detect(gray, source=source)
                result.rotation = degrees
                scan.passes.append(result)
                if scan_cfg.stop_on_valid and result.verified:
                    break

        stats.end_time = time.time()
        return scan
