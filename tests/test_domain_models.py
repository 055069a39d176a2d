"""Tests for domain models to verify they work correctly."""

import math

import numpy as np
import pytest

from qyoofinder.config import MarkerConfig
from qyoofinder.domain import (
    THIN_FLAG,
    AffineTransform,
    Contour,
    MarkerModel,
    Orientation,
    Point,
    RejectionStage,
    is_thin,
    orientation_bin,
    validate_raster,
)
from qyoofinder.exceptions import CodeCapacityError, InvalidRasterError


class TestPoint:
    """Tests for Point class."""

    def test_point_creation(self) -> None:
        """Test basic point creation."""
        p = Point(10, 20)
        assert p.x == 10
        assert p.y == 20

    def test_point_to_tuple(self) -> None:
        """Test point to tuple conversion."""
        assert Point(3, 4).to_tuple() == (3, 4)

    def test_point_dist2(self) -> None:
        """Test squared distance between points."""
        assert Point(0, 0).dist2(Point(3, 4)) == 25

    def test_point_immutable(self) -> None:
        """Test that point is immutable."""
        p = Point(1, 2)
        with pytest.raises(AttributeError):
            p.x = 5  # type: ignore

    def test_point_hashable(self) -> None:
        """Test that equal points collapse in a set."""
        assert len({Point(1, 2), Point(1, 2), Point(2, 1)}) == 2


class TestContour:
    """Tests for Contour class."""

    def test_grows_at_both_ends(self) -> None:
        """Test that points can be added at the front and the back."""
        contour = Contour(contour_id=1)
        contour.add_point_end(Point(5, 5))
        contour.add_point_end(Point(6, 5))
        contour.add_point_begin(Point(4, 5))
        assert [p.x for p in contour.points] == [4, 5, 6]
        assert len(contour) == 3

    def test_bounding_box(self) -> None:
        """Test bounding box calculation."""
        contour = Contour(contour_id=1)
        for p in [Point(2, 3), Point(10, 1), Point(7, 8)]:
            contour.add_point_end(p)
        assert contour.bounding_box() == (2, 1, 10, 8)

    def test_bounding_box_empty(self) -> None:
        """Test that an empty contour has no bounding box."""
        with pytest.raises(ValueError, match="empty contour"):
            Contour(contour_id=1).bounding_box()

    def test_centroid(self) -> None:
        """Test centroid calculation."""
        contour = Contour(contour_id=1)
        for p in [Point(0, 0), Point(4, 0), Point(4, 2), Point(0, 2)]:
            contour.add_point_end(p)
        assert contour.centroid() == (2.0, 1.0)

    def test_reject(self) -> None:
        """Test that rejection records the gate."""
        contour = Contour(contour_id=3)
        assert contour.valid
        contour.reject(RejectionStage.CORNER)
        assert not contour.valid
        assert contour.rejected_at == RejectionStage.CORNER

    def test_to_dict(self) -> None:
        """Test reporting dictionary."""
        contour = Contour(contour_id=7)
        contour.add_point_end(Point(1, 1))
        contour.reject(RejectionStage.SIZE)
        data = contour.to_dict()
        assert data["id"] == 7
        assert data["points"] == 1
        assert data["valid"] is False
        assert data["rejected_at"] == "size"
        assert data["transform"] is None
        assert data["code"] is None


class TestAffineTransform:
    """Tests for AffineTransform class."""

    def test_identity(self) -> None:
        """Test identity leaves points unchanged."""
        assert AffineTransform.identity().apply(3.5, -2.0) == (3.5, -2.0)

    def test_composition_order(self) -> None:
        """Test that the right-hand transform is applied first."""
        t = AffineTransform.translation(10, 20) @ AffineTransform.scaling(2, 3)
        assert t.apply(1, 1) == pytest.approx((12, 23))

    def test_rotation(self) -> None:
        """Test rotation by 90 degrees maps x onto y."""
        x, y = AffineTransform.rotation(90).apply(1, 0)
        assert x == pytest.approx(0, abs=1e-12)
        assert y == pytest.approx(1)

    def test_shear(self) -> None:
        """Test shear along x."""
        assert AffineTransform.shear(0.5).apply(0, 2) == pytest.approx((1, 2))

    def test_inverse_round_trip(self) -> None:
        """Test that T^-1(T(p)) recovers p for a general transform."""
        t = (
            AffineTransform.translation(120.5, 33.0)
            @ AffineTransform.rotation(37.0)
            @ AffineTransform.scaling(80.0, 95.0)
            @ AffineTransform.shear(0.12)
        )
        inv = t.inverse()
        for px, py in [(0, 0), (1, 0), (0.3, 0.7), (-2.5, 4.0)]:
            x, y = inv.apply(*t.apply(px, py))
            assert x == pytest.approx(px, abs=1e-9)
            assert y == pytest.approx(py, abs=1e-9)
        assert (t @ inv).allclose(AffineTransform.identity())

    def test_apply_many_matches_apply(self) -> None:
        """Test vectorised mapping agrees with single points."""
        t = AffineTransform.translation(1, 2) @ AffineTransform.rotation(30)
        pts = np.array([[0.0, 0.0], [1.0, 2.0], [-3.0, 0.5]])
        mapped = t.apply_many(pts)
        for (px, py), (mx, my) in zip(pts, mapped):
            assert t.apply(px, py) == pytest.approx((mx, my))

    def test_matrix_read_only(self) -> None:
        """Test that the matrix cannot be modified in place."""
        t = AffineTransform.identity()
        with pytest.raises(ValueError):
            t.matrix[0, 0] = 2.0

    def test_rejects_wrong_shape(self) -> None:
        """Test that only 3x3 matrices are accepted."""
        with pytest.raises(ValueError, match="3x3"):
            AffineTransform(np.eye(2))


class TestMarkerModel:
    """Tests for MarkerModel geometry and code space."""

    def test_dot_field_bounds(self) -> None:
        """Test the dot field sits on the diagonal of the arc circle."""
        model = MarkerModel()
        ll = model.lower_left
        ur = model.upper_right
        assert ll[0] == pytest.approx(0.5 - 0.5 * math.sqrt(0.5))
        assert ur[1] == pytest.approx(0.5 + 0.5 * math.sqrt(0.5))
        assert model.dot_radius == pytest.approx((ur[0] - ll[0]) / 12)

    def test_buffer_shrinks_field(self) -> None:
        """Test that a buffer moves the field corners inward."""
        assert MarkerModel(buffer=0.05).lower_left[0] > MarkerModel().lower_left[0]

    def test_dot_location(self) -> None:
        """Test dot centres step by one dot width along columns and rows."""
        model = MarkerModel()
        r = model.dot_radius
        x0, y0 = model.dot_location(0, 0)
        assert (x0, y0) == pytest.approx((model.lower_left[0] + r, model.lower_left[1] + r))
        x, y = model.dot_location(2, 3)
        assert x == pytest.approx(x0 + 6 * r)
        assert y == pytest.approx(y0 + 4 * r)

    def test_dot_bounds_with_border(self) -> None:
        """Test the border pads one dot width on every side."""
        model = MarkerModel()
        (lx, ly), (ux, uy) = model.dot_bounds(with_border=True)
        pad = 2 * model.dot_radius
        assert lx == pytest.approx(model.lower_left[0] - pad)
        assert uy == pytest.approx(model.upper_right[1] + pad)
        (fx0, fy0), (fx1, fy1) = model.dot_bounds()
        assert (fx0, fy0) == model.lower_left
        assert (fx1, fy1) == pytest.approx(model.upper_right)

    def test_dot_bounds_follow_grid_shape(self) -> None:
        """Test a taller grid gives a taller field."""
        model = MarkerModel(rows=9, cols=6)
        (lx, ly), (ux, uy) = model.dot_bounds()
        assert (uy - ly) == pytest.approx(18 * model.dot_radius)
        assert (ux - lx) == pytest.approx(12 * model.dot_radius)

    def test_bits_to_char(self) -> None:
        """Test alphabet lookup and out-of-range values."""
        model = MarkerModel()
        assert model.bits_to_char(0) == "0"
        assert model.bits_to_char(10) == "a"
        assert model.bits_to_char(35) == "z"
        assert model.bits_to_char(36) is None
        assert model.bits_to_char(63) is None

    def test_decimal_code(self) -> None:
        """Test little-endian code value, row 0 lowest."""
        model = MarkerModel()
        assert model.decimal_code([1, 0, 0, 0, 0, 0]) == 1
        assert model.decimal_code([0, 1, 0, 0, 0, 0]) == 256
        assert model.decimal_code_str([5, 0, 0, 2, 0, 0]) == str(5 + 2 * 256**3)
        assert model.decimal_code([255] * 8) == 2**64 - 1

    def test_decimal_code_capacity(self) -> None:
        """Test that more than eight bytes is rejected."""
        with pytest.raises(CodeCapacityError) as exc:
            MarkerModel().decimal_code([0] * 9)
        assert exc.value.byte_count == 9

    def test_display_code(self) -> None:
        """Test two-digit rows from the last row down."""
        assert MarkerModel().display_code([1, 2, 0, 0, 0, 10]) == "100000000201"

    def test_verify_parity_pattern(self) -> None:
        """Test the check-bit pattern on the top bit and bit 0."""
        model = MarkerModel()
        assert model.verify_code([0, 0x01, 0x20, 0x01, 0x20, 0])
        assert model.verify_code([0x1E, 0x0F, 0x22, 0x1D, 0x3C, 0x1E])
        assert not model.verify_code([0, 0, 0, 0, 0, 0])
        assert not model.verify_code([1, 0x01, 0x20, 0x01, 0x20, 0])

    def test_verify_legacy_code(self) -> None:
        """Test that the logo code passes only with the legacy set loaded."""
        logo = [0, 30, 30, 30, 30, 0]
        assert not MarkerModel().verify_code(logo)
        assert MarkerModel.from_config(MarkerConfig()).verify_code(logo)

    def test_model_immutable(self) -> None:
        """Test that the model cannot be modified."""
        model = MarkerModel()
        with pytest.raises(AttributeError):
            model.rows = 7  # type: ignore

    def test_invalid_grid(self) -> None:
        """Test that an empty grid is rejected."""
        with pytest.raises(ValueError):
            MarkerModel(rows=0)


class TestOrientationSamples:
    """Tests for orientation sample helpers."""

    def test_thin_flag(self) -> None:
        """Test flag detection and bin extraction."""
        sample = Orientation.DEG_45 | THIN_FLAG
        assert is_thin(sample)
        assert orientation_bin(sample) == Orientation.DEG_45
        assert not is_thin(Orientation.DEG_45)

    def test_validate_raster(self) -> None:
        """Test dimension validation."""
        assert validate_raster(np.zeros((4, 7))) == (7, 4)
        with pytest.raises(InvalidRasterError):
            validate_raster(np.zeros((0, 5)))
        with pytest.raises(InvalidRasterError):
            validate_raster(np.zeros((5, 5, 3)))
        with pytest.raises(InvalidRasterError):
            validate_raster(np.zeros((2, 5)), min_size=3)
