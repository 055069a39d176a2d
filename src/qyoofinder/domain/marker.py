"""Canonical marker geometry and code space.

In canonical space the marker occupies the unit square: a square corner at
the origin with edges along +x and +y to 0.5, and a 270 degree arc of
radius 0.5 around (0.5, 0.5) closing the outline. The dot grid sits inside
the arc, between ``lower_left`` and ``upper_right``.
"""

import math
from dataclasses import dataclass, field

from qyoofinder.config import MarkerConfig
from qyoofinder.exceptions import CodeCapacityError

ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
MAX_CODE_BYTES = 8

# (top bit set, bit 0 set) per row byte, row 0 first
CHECK_PATTERN = (
    (False, False),
    (False, True),
    (True, False),
    (False, True),
    (True, False),
    (False, False),
)


@dataclass(frozen=True)
class MarkerModel:
    """Immutable marker geometry shared by the analyzer and the decoder.

    Attributes:
        rows: Dot grid rows
        cols: Dot grid columns
        buffer: Margin between the arc and the dot field
        legacy_codes: Decimal codes accepted regardless of the parity pattern
    """

    rows: int = 6
    cols: int = 6
    buffer: float = 0.0
    legacy_codes: frozenset[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"Dot grid must be non-empty, got {self.rows}x{self.cols}")
        if not 0.0 <= self.buffer < 0.25:
            raise ValueError(f"Buffer must be in [0, 0.25), got {self.buffer}")

    @classmethod
    def from_config(cls, config: MarkerConfig) -> "MarkerModel":
        legacy = frozenset(cls._encode(codes) for codes in config.legacy_codes)
        return cls(
            rows=config.rows,
            cols=config.cols,
            buffer=config.buffer,
            legacy_codes=legacy,
        )

    @property
    def lower_left(self) -> tuple[float, float]:
        rad = 0.5 - 2.0 * self.buffer
        return (0.5 - rad * math.sqrt(0.5), 0.5 - rad * math.sqrt(0.5))

    @property
    def upper_right(self) -> tuple[float, float]:
        rad = 0.5 - 2.0 * self.buffer
        return (0.5 + rad * math.sqrt(0.5), 0.5 + rad * math.sqrt(0.5))

    @property
    def dot_radius(self) -> float:
        return (self.upper_right[0] - self.lower_left[0]) / (2.0 * max(self.rows, self.cols))

    def dot_location(self, row: int, col: int) -> tuple[float, float]:
        """Canonical centre of the dot at ``(row, col)``.

        Columns run along x and rows along y, both starting at the corner.
        """
        r = self.dot_radius
        ll = self.lower_left
        return (ll[0] + r + 2.0 * r * col, ll[1] + r + 2.0 * r * row)

    def dot_bounds(self, with_border: bool = False) -> tuple[tuple[float, float], tuple[float, float]]:
        """Lower-left and upper-right corners of the dot field.

        The field starts at ``lower_left`` and spans one dot width per
        column and per row, so it fills the diagonal square only when the
        grid is square.

        Args:
            with_border: Pad the field by one dot width on every side

        Returns:
            Tuple of ((min_x, min_y), (max_x, max_y))
        """
        ll = self.lower_left
        pad = 2.0 * self.dot_radius
        ur = (ll[0] + pad * self.cols, ll[1] + pad * self.rows)
        if not with_border:
            return ll, ur
        return (ll[0] - pad, ll[1] - pad), (ur[0] + pad, ur[1] + pad)

    def bits_to_char(self, bits: int) -> str | None:
        """Alphabet character for a row value, or None when out of range."""
        if 0 <= bits < len(ALPHABET):
            return ALPHABET[bits]
        return None

    @staticmethod
    def _encode(code_bytes: list[int] | tuple[int, ...]) -> int:
        if len(code_bytes) > MAX_CODE_BYTES:
            raise CodeCapacityError(len(code_bytes), MAX_CODE_BYTES)
        return sum((b & 0xFF) << (8 * i) for i, b in enumerate(code_bytes))

    def decimal_code(self, code_bytes: list[int] | tuple[int, ...]) -> int:
        """Little-endian integer value of the row bytes (row 0 lowest).

        Raises:
            CodeCapacityError: If more than eight bytes are given
        """
        return self._encode(code_bytes)

    def decimal_code_str(self, code_bytes: list[int] | tuple[int, ...]) -> str:
        return str(self.decimal_code(code_bytes))

    def display_code(self, code_bytes: list[int] | tuple[int, ...]) -> str:
        """Row values from the last row down, each as two decimal digits."""
        if len(code_bytes) > MAX_CODE_BYTES:
            raise CodeCapacityError(len(code_bytes), MAX_CODE_BYTES)
        return "".join(f"{b:02d}" for b in reversed(code_bytes))

    def verify_code(self, code_bytes: list[int] | tuple[int, ...]) -> bool:
        """Check the parity pattern, falling back to the legacy code set."""
        top = 1 << (self.cols - 1)
        if len(code_bytes) == len(CHECK_PATTERN):
            if all(
                bool(b & top) == want_top and bool(b & 0x01) == want_low
                for b, (want_top, want_low) in zip(code_bytes, CHECK_PATTERN)
            ):
                return True
        if len(code_bytes) > MAX_CODE_BYTES:
            return False
        return self.decimal_code(code_bytes) in self.legacy_codes
