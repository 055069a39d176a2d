"""Dot grid reading for validated markers."""

from dataclasses import dataclass

import numpy as np
import structlog

from qyoofinder.config import DecoderConfig
from qyoofinder.core.imaging import contrast_stretch, resample_affine
from qyoofinder.core.kernels import radius_mask
from qyoofinder.domain.contour import Contour
from qyoofinder.domain.marker import MarkerModel
from qyoofinder.domain.transform import AffineTransform
from qyoofinder.exceptions import CodeCapacityError

logger = structlog.get_logger(__name__)


@dataclass
class DotReading:
    """Result of reading one marker's dot grid.

    Attributes:
        bits: Row bytes, row 0 first; bit ``col`` set for a dot at ``col``
        code: Decimal code string, None when the bits do not fit the encoding
        binary: Rows from last to first, ``cols`` bits each
        symbols: One alphabet character per row
        valid: Code passes the parity pattern or is a legacy code
        cells: Contrast-stretched raster the dots were sampled from
        background: Mean intensity of the marker body
    """

    bits: tuple[int, ...]
    code: str | None
    binary: str
    symbols: str
    valid: bool
    cells: np.ndarray
    background: float


class DotDecoder:
    """Samples the dot grid of a validated contour.

    The region of the source image covered by the dot field (plus one dot
    width of border) is resampled into a raster of ``pixels_per_dot``
    square cells, so every dot lands in a fixed cell regardless of how the
    marker is scaled, rotated or sheared in the image.

    Example:
        decoder = DotDecoder(DecoderConfig(), MarkerModel())
        reading = decoder.decode(gray, contour)
        print(reading.code)
    """

    def __init__(self, config: DecoderConfig | None = None, model: MarkerModel | None = None) -> None:
        self.config = config or DecoderConfig()
        self.model = model or MarkerModel()
        ppd = self.config.pixels_per_dot
        self._disc = radius_mask(ppd if ppd % 2 else ppd + 1, ppd // 2)

    @property
    def raster_size(self) -> tuple[int, int]:
        """Width and height of the cell raster."""
        ppd = self.config.pixels_per_dot
        return ppd * (self.model.cols + 2), ppd * (self.model.rows + 2)

    def cell_transform(
        self, contour: Contour, source_scale: tuple[float, float] = (1.0, 1.0)
    ) -> AffineTransform:
        """Transform from source image coordinates to cell raster coordinates.

        Args:
            contour: Validated contour with a fitted transform
            source_scale: Source pixels per processing pixel along x and y

        Raises:
            ValueError: If the contour has no transform
        """
        if contour.transform is None:
            raise ValueError(f"Contour {contour.contour_id} has no fitted transform")
        (lx, ly), (ux, uy) = self.model.dot_bounds(with_border=True)
        width, height = self.raster_size
        return (
            AffineTransform.scaling(width / (ux - lx), height / (uy - ly))
            @ AffineTransform.translation(-lx, -ly)
            @ contour.transform.inverse()
            @ AffineTransform.scaling(1.0 / source_scale[0], 1.0 / source_scale[1])
        )

    def decode(
        self,
        source: np.ndarray,
        contour: Contour,
        source_scale: tuple[float, float] = (1.0, 1.0),
    ) -> DotReading:
        """Read the dot grid and store the result on the contour.

        A grid that cannot be encoded is logged and returned with
        ``code=None``; it does not raise.

        Args:
            source: Grayscale raster the marker was found in
            contour: Validated contour
            source_scale: Source pixels per processing pixel along x and y

        Returns:
            DotReading for the contour
        """
        width, height = self.raster_size
        to_cells = self.cell_transform(contour, source_scale)
        cells = contrast_stretch(resample_affine(source, to_cells.inverse(), width, height))

        ppd = self.config.pixels_per_dot
        half = ppd // 2
        background = float(self._disc.sample(cells, half, half).mean())

        bits = []
        for row in range(self.model.rows):
            value = 0
            for col in range(self.model.cols):
                if self.is_dot(cells, ppd * (col + 1) + half, ppd * (row + 1) + half, background):
                    value |= 1 << col
            bits.append(value)

        try:
            code = self.model.decimal_code_str(bits)
        except CodeCapacityError as e:
            logger.debug("Dot grid too wide to encode", contour=contour.contour_id, error=str(e))
            code = None

        binary = "".join(format(b, f"0{self.model.cols}b") for b in reversed(bits))
        symbols = "".join(self.model.bits_to_char(b) or "0" for b in bits)
        reading = DotReading(
            bits=tuple(bits),
            code=code,
            binary=binary,
            symbols=symbols,
            valid=code is not None and self.model.verify_code(bits),
            cells=cells,
            background=background,
        )

        contour.dot_bits = reading.bits
        contour.dot_str = reading.code
        contour.dot_bin_str = reading.binary
        contour.symbols = reading.symbols
        contour.code_valid = reading.valid
        return reading

    def is_dot(self, cells: np.ndarray, px: int, py: int, background: float) -> bool:
        """True if enough of the disc at ``(px, py)`` contrasts with the background.

        A pixel matches when it differs from the background by more than
        ``match_distance`` and lies on the other side of mid-gray (with
        ``mid_gray_slack`` of tolerance).
        """
        values = self._disc.sample(cells, px, py).astype(np.float64)
        if values.size == 0:
            return False
        cfg = self.config
        if background >= cfg.mid_gray:
            opposite = values < cfg.mid_gray + cfg.mid_gray_slack
        else:
            opposite = values > cfg.mid_gray - cfg.mid_gray_slack
        matches = (np.abs(background - values) > cfg.match_distance) & opposite
        return int(np.count_nonzero(matches)) / self._disc.factor >= cfg.pass_ratio
