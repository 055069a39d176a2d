"""Contour tracing over thinned edge rasters.

The tracer turns the thinned orientation raster into ordered pixel chains.
Seeds are strong thin pixels taken in raster order; from each seed a walk
runs forward and then backward, claiming pixels in a shared ownership
raster so that no pixel belongs to two contours.

Directions are octants numbered clockwise from east in image coordinates
(y grows downward). A walk starts with an undecided direction and then
follows the direction of its last step.
"""

from dataclasses import dataclass, field

import numpy as np
import structlog

from qyoofinder.config import TracerConfig
from qyoofinder.domain.contour import Contour, Point
from qyoofinder.domain.raster import THIN_FLAG, Orientation, is_thin, orientation_bin

logger = structlog.get_logger(__name__)

UNDECIDED = -1

# E, SE, S, SW, W, NW, N, NE
OCTANT_OFFSETS: tuple[tuple[int, int], ...] = (
    (1, 0),
    (1, 1),
    (0, 1),
    (-1, 1),
    (-1, 0),
    (-1, -1),
    (0, -1),
    (1, -1),
)

# Direction along the edge for a walk that has not moved yet
EDGE_DIRECTION: dict[int, int] = {
    Orientation.DEG_0: 2,
    Orientation.DEG_45: 3,
    Orientation.DEG_90: 0,
    Orientation.DEG_135: 1,
}


def turn(direction: int, offset: int) -> int:
    """Octant ``offset`` steps clockwise from ``direction``.

    An undecided direction behaves like -1, so offset 0 yields 7.
    """
    return (direction + offset) % 8


def is_crowded(ownership: np.ndarray, x: int, y: int, limit: int = 2) -> bool:
    """True if at least ``limit`` pixels of the 3x3 block are claimed."""
    height, width = ownership.shape
    block = ownership[max(y - 1, 0) : min(y + 2, height), max(x - 1, 0) : min(x + 2, width)]
    return int(np.count_nonzero(block)) >= limit


@dataclass
class WalkState:
    """Position and heading of one walk."""

    x: int
    y: int
    direction: int = UNDECIDED
    stray: int = 1


@dataclass
class TraceResult:
    """Contours found in one raster and the ownership raster they claimed."""

    contours: list[Contour] = field(default_factory=list)
    ownership: np.ndarray | None = None


class ContourTracer:
    """Follows thin edges into contours.

    Example:
        tracer = ContourTracer(TracerConfig())
        result = tracer.trace(magnitude, orientation)
        for contour in result.contours:
            print(contour.contour_id, len(contour))
    """

    def __init__(self, config: TracerConfig | None = None) -> None:
        self.config = config or TracerConfig()
        self._magnitude: np.ndarray | None = None
        self._orientation: np.ndarray | None = None
        self._ownership: np.ndarray | None = None

    def trace(self, magnitude: np.ndarray, orientation: np.ndarray) -> TraceResult:
        """Trace every contour reachable from a seed.

        Args:
            magnitude: Gradient magnitude raster
            orientation: Thinned orientation raster

        Returns:
            TraceResult with contours in seed order (ids from 1)
        """
        if magnitude.shape != orientation.shape:
            raise ValueError(
                f"Raster shapes differ: {magnitude.shape} vs {orientation.shape}"
            )
        self._magnitude = magnitude
        self._orientation = orientation
        self._ownership = np.zeros(magnitude.shape, dtype=np.int32)

        result = TraceResult(ownership=self._ownership)
        try:
            for x, y in self._seed_candidates():
                if self._ownership[y, x] != 0:
                    continue
                if is_crowded(self._ownership, x, y, self.config.crowd_limit):
                    continue
                contour = Contour(contour_id=len(result.contours) + 1)
                self._follow(contour, x, y)
                result.contours.append(contour)
        finally:
            self._magnitude = None
            self._orientation = None
            self._ownership = None
        return result

    def _seed_candidates(self) -> list[tuple[int, int]]:
        height, width = self._magnitude.shape
        m = self.config.seed_margin
        strong = ((self._orientation & THIN_FLAG) != 0) & (self._magnitude > self.config.high_threshold)
        window = np.zeros_like(strong)
        window[m : height - m, m : width - m] = True
        ys, xs = np.nonzero(strong & window)
        return [(int(x), int(y)) for y, x in zip(ys, xs)]

    def _follow(self, contour: Contour, x: int, y: int) -> None:
        self._claim(contour, x, y)
        contour.add_point_end(Point(x, y))
        logger.debug("Walk started", contour=contour.contour_id, x=x, y=y)

        first_direction = self._walk(contour, WalkState(x, y), contour.add_point_end)
        logger.debug(
            "Walk finished", contour=contour.contour_id, walk="forward", points=len(contour)
        )
        backward = WalkState(x, y, direction=turn(first_direction, 4))
        self._walk(contour, backward, contour.add_point_begin)
        logger.debug(
            "Walk finished", contour=contour.contour_id, walk="backward", points=len(contour)
        )

    def _walk(self, contour: Contour, state: WalkState, grow) -> int:
        """Extend the contour until the walk closes, stalls or leaves the margin.

        Returns:
            Direction of the first step taken, or UNDECIDED
        """
        first_direction = UNDECIDED
        cid = contour.contour_id
        while True:
            if self._closes_loop(cid, state):
                break
            step = self._advance(cid, state)
            if step is None:
                break
            nx, ny, direction = step
            if not self._inside_walk_margin(nx, ny) or self._ownership[ny, nx] == cid:
                break
            self._claim(contour, nx, ny)
            grow(Point(nx, ny))
            state.x, state.y, state.direction = nx, ny, direction
            if first_direction == UNDECIDED:
                first_direction = direction
        return first_direction

    def _closes_loop(self, cid: int, state: WalkState) -> bool:
        if state.direction == UNDECIDED:
            return False
        for offset in (0, 1, -1):
            dx, dy = OCTANT_OFFSETS[turn(state.direction, offset)]
            if self._ownership[state.y + dy, state.x + dx] == cid:
                return True
        return False

    def _advance(self, cid: int, state: WalkState) -> tuple[int, int, int] | None:
        """Pick the next pixel of a walk.

        Candidates are tried in priority order: straight ahead, then one
        and two octants either side, all of which must be thin. If the
        walk is on a thin pixel or still has stray budget, thick pixels
        around the current direction are tried next. Sharper turns of
        three octants follow, and a walk that has not moved yet may also
        step straight back.

        Returns:
            Tuple of (x, y, direction), or None if the walk is stuck
        """
        sample = int(self._orientation[state.y, state.x])
        if state.direction == UNDECIDED:
            heading = EDGE_DIRECTION.get(orientation_bin(sample))
            if heading is None:
                return None
        else:
            heading = state.direction

        for offset in (0, 1, -1, 2, -2):
            step = self._try(cid, state, turn(heading, offset), thin_required=True)
            if step:
                return step

        thin = is_thin(sample)
        if thin or state.stray > 0:
            state.stray = 1 if thin else state.stray - 1
            for offset in (0, 1, -1):
                step = self._try(cid, state, turn(state.direction, offset), thin_required=False)
                if step:
                    return step

        for offset in (3, -3):
            step = self._try(cid, state, turn(heading, offset), thin_required=True)
            if step:
                return step

        if state.direction == UNDECIDED:
            return self._try(cid, state, turn(heading, 4), thin_required=True)
        return None

    def _try(
        self, cid: int, state: WalkState, direction: int, thin_required: bool
    ) -> tuple[int, int, int] | None:
        dx, dy = OCTANT_OFFSETS[direction]
        x, y = state.x + dx, state.y + dy
        if self._acceptable(cid, x, y, thin_required):
            return x, y, direction
        return None

    def _acceptable(self, cid: int, x: int, y: int, thin_required: bool) -> bool:
        owner = self._ownership[y, x]
        if owner != 0 and owner != cid:
            return False
        sample = int(self._orientation[y, x])
        if thin_required and not is_thin(sample):
            return False
        if orientation_bin(sample) is Orientation.EMPTY:
            return False
        return int(self._magnitude[y, x]) > self.config.low_threshold

    def _inside_walk_margin(self, x: int, y: int) -> bool:
        height, width = self._ownership.shape
        m = self.config.walk_margin
        return m < x < width - m and m < y < height - m

    def _claim(self, contour: Contour, x: int, y: int) -> None:
        self._ownership[y, x] = contour.contour_id
