"""Traced contours and their geometric attributes.

This module defines the types produced by the tracer and filled in by the
analyzer and decoder:
- Point: An integer pixel coordinate
- RejectionStage: The validation gate that rejected a contour
- Contour: An ordered chain of edge pixels plus derived geometry
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from qyoofinder.domain.transform import AffineTransform


@dataclass(frozen=True, slots=True)
class Point:
    """A pixel coordinate.

    Attributes:
        x: Column index
        y: Row index
    """

    x: int
    y: int

    def to_tuple(self) -> tuple[int, int]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def dist2(self, other: "Point") -> int:
        """Squared Euclidean distance to another point."""
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy


class RejectionStage(str, Enum):
    """Validation gate at which a contour was rejected."""

    SIZE = "size"
    CORNER = "corner"
    MODEL = "model"


@dataclass
class Contour:
    """A traced edge chain and everything derived from it.

    The tracer grows ``points`` at both ends. The analyzer then records
    closure, replaces ``points`` with the decimated chain (keeping the
    traced chain in ``orig_points``) and fits the marker transform. The
    decoder finally stores the dot reading. Attributes written by a stage
    after the gate that rejected the contour keep their defaults.

    Attributes:
        contour_id: Positive id, also stored in the ownership raster
        points: Ordered pixel chain
        closed: First and last point lie within the closure distance
        orig_points: Chain before decimation
        valid: Still passing every gate run so far
        rejected_at: Gate that rejected the contour, if any
        corner: Refined marker corner in image coordinates
        edge0: Far endpoint of the first corner edge
        edge1: Far endpoint of the second corner edge
        angle0: Direction of the first corner edge in degrees
        angle1: Direction of the second corner edge in degrees
        shear: Shear factor between the corner edges
        far0: Point farthest from the first edge line
        far1: Point farthest from the second edge line
        far_dist0: Squared distance of far0 from the first edge line
        far_dist1: Squared distance of far1 from the second edge line
        transform: Canonical marker space to image transform
        model_fraction: Fraction of points passing the model check
        dot_bits: Row bytes of the dot grid, row 0 first
        dot_str: Decimal code string, None if the code could not be encoded
        dot_bin_str: Binary rendering of the rows, last row first
        symbols: One alphabet character per row
        code_valid: Code passes the parity pattern or is a legacy code
    """

    contour_id: int
    points: deque[Point] = field(default_factory=deque)
    closed: bool = False
    orig_points: list[Point] = field(default_factory=list)
    valid: bool = True
    rejected_at: RejectionStage | None = None
    corner: tuple[float, float] | None = None
    edge0: Point | None = None
    edge1: Point | None = None
    angle0: float = 0.0
    angle1: float = 0.0
    shear: float = 0.0
    far0: Point | None = None
    far1: Point | None = None
    far_dist0: float = 0.0
    far_dist1: float = 0.0
    transform: AffineTransform | None = None
    model_fraction: float | None = None
    dot_bits: tuple[int, ...] = ()
    dot_str: str | None = None
    dot_bin_str: str = ""
    symbols: str = ""
    code_valid: bool = False

    def __len__(self) -> int:
        return len(self.points)

    def add_point_end(self, point: Point) -> None:
        self.points.append(point)

    def add_point_begin(self, point: Point) -> None:
        self.points.appendleft(point)

    def reject(self, stage: RejectionStage) -> None:
        """Mark the contour invalid at the given gate."""
        self.valid = False
        self.rejected_at = stage

    def bounding_box(self) -> tuple[int, int, int, int]:
        """Calculate bounding box of the current points.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y)

        Raises:
            ValueError: If the contour has no points
        """
        if not self.points:
            raise ValueError("Cannot calculate bounding box of empty contour")
        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]
        return (min(xs), min(ys), max(xs), max(ys))

    def reset_fit(self) -> None:
        """Clear the fitted geometry and any code read through it."""
        self.corner = None
        self.edge0 = self.edge1 = None
        self.angle0 = self.angle1 = 0.0
        self.shear = 0.0
        self.far0 = self.far1 = None
        self.far_dist0 = self.far_dist1 = 0.0
        self.transform = None
        self.model_fraction = None
        self.dot_bits = ()
        self.dot_str = None
        self.dot_bin_str = ""
        self.symbols = ""
        self.code_valid = False

    def centroid(self) -> tuple[float, float]:
        """Mean of the current points.

        Raises:
            ValueError: If the contour has no points
        """
        if not self.points:
            raise ValueError("Cannot calculate centroid of empty contour")
        n = len(self.points)
        return (
            sum(p.x for p in self.points) / n,
            sum(p.y for p in self.points) / n,
        )

    def to_dict(self) -> dict[str, Any]:
        """Summarize the contour for reporting.

        Returns:
            Dictionary with id, size, validity, geometry and code fields
        """
        return {
            "id": self.contour_id,
            "points": len(self.points),
            "traced_points": len(self.orig_points),
            "closed": self.closed,
            "valid": self.valid,
            "rejected_at": self.rejected_at.value if self.rejected_at else None,
            "corner": list(self.corner) if self.corner else None,
            "angle": self.angle0,
            "shear": self.shear,
            "transform": self.transform.to_list() if self.transform else None,
            "model_fraction": self.model_fraction,
            "code": self.dot_str,
            "binary": self.dot_bin_str,
            "symbols": self.symbols,
            "code_valid": self.code_valid,
        }
