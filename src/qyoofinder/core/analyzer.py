"""Geometric validation of traced contours.

The analyzer decides whether a contour is the outline of a marker and, if
so, fits the affine transform from canonical marker space onto the image.
Gates run in order and stop at the first failure:

1. size, aspect ratio and position of the bounding box
2. corner refinement: two roughly perpendicular edges meeting at the corner
3. model check: the traced points follow the canonical outline
"""

import math
from collections import deque
from collections.abc import Sequence

from qyoofinder.config import AnalyzerConfig
from qyoofinder.core.geometry import (
    cross,
    dist2,
    dist2_to_line,
    dist2_to_segment,
    line_intersection,
    proper_atan,
    unit_vector,
)
from qyoofinder.domain.contour import Contour, Point, RejectionStage
from qyoofinder.domain.transform import AffineTransform

# Canonical outline pieces checked by the model check
_BOTTOM_EDGE = ((0.0, 0.0), (0.5, 0.0))
_LEFT_EDGE = ((0.0, 0.0), (0.0, 0.5))
_ARC_CENTRE = (0.5, 0.5)
_ARC_RADIUS = 0.5


def decimate(points: Sequence[Point], tolerance2: float, closed: bool) -> list[Point]:
    """Simplify a pixel chain by dropping nearly collinear points.

    From an anchor, the point after it is dropped when it, and every point
    dropped since the anchor, lies within ``tolerance2`` (squared distance)
    of the line from the anchor to the point after the dropped one.
    Otherwise the anchor moves on. Passes repeat until nothing changes.

    Args:
        points: Chain to simplify
        tolerance2: Squared distance tolerance
        closed: Treat the chain as circular; when False the first and last
            points are always kept

    Returns:
        New list with at most as many points as the input
    """
    kept = list(points)
    removed = True
    while removed:
        removed = False
        anchor = 0
        dropped: list[Point] = []
        while len(kept) > 3:
            n = len(kept)
            if not closed and anchor + 1 >= n - 1:
                break
            mid = (anchor + 1) % n
            after = (mid + 1) % n
            last_pass = mid == 0
            dropped.append(kept[mid])
            start = kept[anchor].to_tuple()
            end = kept[after].to_tuple()
            if all(dist2_to_line(start, end, p.to_tuple()) <= tolerance2 for p in dropped):
                del kept[mid]
                removed = True
                if mid < anchor:
                    anchor -= 1
            else:
                anchor += 1
                dropped = []
            if last_pass:
                break
    return kept


class ContourAnalyzer:
    """Runs the validation gates and fits the marker transform.

    Example:
        analyzer = ContourAnalyzer(AnalyzerConfig())
        analyzer.analyze(contour, width=640, height=480)
        if contour.valid:
            print(contour.transform.apply(0.5, 0.5))
    """

    def __init__(self, config: AnalyzerConfig | None = None) -> None:
        self.config = config or AnalyzerConfig()

    def analyze(self, contour: Contour, width: int, height: int) -> Contour:
        """Validate a contour in place.

        Closure, decimation and the corner estimate always run; the gates
        run afterwards and stop at the first failure, recording it in
        ``rejected_at``. A contour may be analyzed again: it starts over
        from ``orig_points`` and any earlier fit is cleared.

        Args:
            contour: Contour produced by the tracer
            width: Image width in pixels
            height: Image height in pixels

        Returns:
            The same contour
        """
        contour.valid = True
        contour.rejected_at = None
        contour.reset_fit()
        if contour.orig_points:
            contour.points = deque(contour.orig_points)
        if not contour.points:
            contour.reject(RejectionStage.SIZE)
            return contour

        contour.closed = self.is_closed(contour)
        contour.orig_points = list(contour.points)
        tolerance2 = self.config.decimate_tolerance**2
        contour.points = deque(decimate(contour.orig_points, tolerance2, contour.closed))
        corner_guess = self.find_corner(contour)

        if not self.check_size(contour, width, height):
            contour.reject(RejectionStage.SIZE)
        elif not self.refine_corner(contour, corner_guess):
            contour.reject(RejectionStage.CORNER)
        elif not self.model_check(contour):
            contour.reject(RejectionStage.MODEL)
        return contour

    def is_closed(self, contour: Contour) -> bool:
        first = contour.points[0]
        last = contour.points[-1]
        return first.dist2(last) <= self.config.closed_distance**2

    @staticmethod
    def find_corner(contour: Contour) -> Point:
        """Point of the current chain farthest from its centroid; the first one wins ties."""
        centre = contour.centroid()
        best = contour.points[0]
        best_d2 = -1.0
        for p in contour.points:
            d2 = dist2(centre, p.to_tuple())
            if d2 > best_d2:
                best, best_d2 = p, d2
        return best

    def check_size(self, contour: Contour, width: int, height: int) -> bool:
        """Bounding box must be non-degenerate, near square and neither tiny nor huge."""
        min_x, min_y, max_x, max_y = contour.bounding_box()
        size_x = max_x - min_x
        size_y = max_y - min_y
        if size_x == 0 or size_y == 0:
            return False
        if min(size_x, size_y) / max(size_x, size_y) < self.config.min_aspect_ratio:
            return False
        fraction = (size_x * size_y) / float(width * height)
        return self.config.min_area_fraction <= fraction <= self.config.max_area_fraction

    def _segments(self, points: Sequence[Point], closed: bool) -> list[tuple[Point, Point]]:
        pts = list(points)
        segments = list(zip(pts, pts[1:]))
        if closed and len(pts) > 2:
            segments.append((pts[-1], pts[0]))
        return segments

    def refine_corner(self, contour: Contour, corner_guess: Point) -> bool:
        """Fit the corner from the two edges that meet near the guess.

        On success the contour's corner, edge, angle, shear, far point and
        transform attributes are set.

        Returns:
            True if two suitable edges and both far points were found
        """
        radius2 = self.config.corner_search_radius**2
        best_a: tuple[Point, Point] | None = None
        best_b: tuple[Point, Point] | None = None
        best_a_len = -1
        best_b_len = -1

        for p0, p1 in self._segments(contour.points, contour.closed):
            d0 = p0.dist2(corner_guess)
            d1 = p1.dist2(corner_guess)
            length2 = p0.dist2(p1)
            if d0 < d1 and d0 < radius2:
                if length2 > best_a_len:
                    best_a, best_a_len = (p0, p1), length2
            elif d1 < d0 and d1 < radius2:
                if length2 > best_b_len:
                    best_b, best_b_len = (p1, p0), length2

        if best_a is None or best_b is None:
            return False

        (s0, e0), (s1, e1) = best_a, best_b
        ang0 = proper_atan(e0.x - s0.x, e0.y - s0.y)
        ang1 = proper_atan(e1.x - s1.x, e1.y - s1.y)
        diff = abs(ang1 - ang0)
        if diff > 180.0:
            diff -= 180.0
        if not self.config.min_corner_angle < diff < self.config.max_corner_angle:
            return False

        corner = line_intersection(s0.to_tuple(), e0.to_tuple(), s1.to_tuple(), e1.to_tuple())
        if corner is None:
            return False

        if cross(corner, e0.to_tuple(), e1.to_tuple()) < 0:
            e0, e1 = e1, e0
            ang0, ang1 = ang1, ang0

        model_dir = unit_vector(ang0 + 90.0)
        ex, ey = e1.x - corner[0], e1.y - corner[1]
        length = math.hypot(ex, ey)
        if length == 0:
            return False
        shear = math.hypot(model_dir[0] - ex / length, model_dir[1] - ey / length)
        if (ang1 - ang0) % 360.0 > 90.0:
            shear = -shear

        far0 = self.find_far_point(contour.orig_points, corner, e0.to_tuple())
        far1 = self.find_far_point(contour.orig_points, corner, e1.to_tuple())
        if far0 is None or far1 is None:
            return False

        contour.corner = corner
        contour.edge0, contour.edge1 = e0, e1
        contour.angle0, contour.angle1 = ang0, ang1
        contour.shear = shear
        contour.far0, contour.far_dist0 = far0
        contour.far1, contour.far_dist1 = far1
        contour.transform = (
            AffineTransform.translation(corner[0], corner[1])
            @ AffineTransform.rotation(ang0)
            @ AffineTransform.scaling(math.sqrt(contour.far_dist1), math.sqrt(contour.far_dist0))
            @ AffineTransform.shear(shear, 0.0)
        )
        return True

    @staticmethod
    def find_far_point(
        points: Sequence[Point], start: tuple[float, float], end: tuple[float, float]
    ) -> tuple[Point, float] | None:
        """Point farthest from the infinite line start-end.

        Returns:
            Tuple of (point, squared distance), or None if every point
            lies on the line
        """
        best: Point | None = None
        best_d2 = 0.0
        for p in points:
            d2 = dist2_to_line(start, end, p.to_tuple())
            if d2 > best_d2:
                best, best_d2 = p, d2
        if best is None:
            return None
        return best, best_d2

    def model_fraction(self, contour: Contour, tolerance: float) -> float:
        """Fraction of traced points within ``tolerance`` of the canonical outline."""
        if contour.transform is None or not contour.orig_points:
            return 0.0
        tol2 = tolerance * tolerance
        to_model = contour.transform.inverse()
        passed = 0
        for p in contour.orig_points:
            pt = to_model.apply(p.x, p.y)
            if dist2_to_segment(*_BOTTOM_EDGE, pt) < tol2 or dist2_to_segment(*_LEFT_EDGE, pt) < tol2:
                passed += 1
                continue
            rx = pt[0] - _ARC_CENTRE[0]
            ry = pt[1] - _ARC_CENTRE[1]
            if rx > 0 or ry > 0:
                off = math.hypot(rx, ry) - _ARC_RADIUS
                if off * off < tol2:
                    passed += 1
        return passed / len(contour.orig_points)

    def model_check(self, contour: Contour) -> bool:
        contour.model_fraction = self.model_fraction(contour, self.config.model_tolerance)
        return contour.model_fraction > self.config.model_pass_fraction
