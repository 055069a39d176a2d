"""Affine transforms in homogeneous 2D coordinates."""

import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class AffineTransform:
    """An immutable 3x3 affine transform.

    Points are column vectors ``(x, y, 1)``, so ``a @ b`` applies ``b``
    first and then ``a``.

    Attributes:
        matrix: 3x3 float array (read-only)
    """

    matrix: np.ndarray

    def __post_init__(self) -> None:
        matrix = np.array(self.matrix, dtype=float)
        if matrix.shape != (3, 3):
            raise ValueError(f"Affine matrix must be 3x3, got {matrix.shape}")
        matrix.setflags(write=False)
        object.__setattr__(self, "matrix", matrix)

    @classmethod
    def identity(cls) -> "AffineTransform":
        return cls(np.eye(3))

    @classmethod
    def translation(cls, tx: float, ty: float) -> "AffineTransform":
        return cls(np.array([[1.0, 0.0, tx], [0.0, 1.0, ty], [0.0, 0.0, 1.0]]))

    @classmethod
    def rotation(cls, degrees: float) -> "AffineTransform":
        """Rotation by ``degrees``, counter-clockwise in a y-up frame."""
        rad = math.radians(degrees)
        c, s = math.cos(rad), math.sin(rad)
        return cls(np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]]))

    @classmethod
    def scaling(cls, sx: float, sy: float) -> "AffineTransform":
        return cls(np.array([[sx, 0.0, 0.0], [0.0, sy, 0.0], [0.0, 0.0, 1.0]]))

    @classmethod
    def shear(cls, kx: float, ky: float = 0.0) -> "AffineTransform":
        """Shear mapping ``(x, y)`` to ``(x + kx*y, y + ky*x)``."""
        return cls(np.array([[1.0, kx, 0.0], [ky, 1.0, 0.0], [0.0, 0.0, 1.0]]))

    def __matmul__(self, other: "AffineTransform") -> "AffineTransform":
        if not isinstance(other, AffineTransform):
            return NotImplemented
        return AffineTransform(self.matrix @ other.matrix)

    def inverse(self) -> "AffineTransform":
        """Return the inverse transform.

        Raises:
            numpy.linalg.LinAlgError: If the transform is singular
        """
        return AffineTransform(np.linalg.inv(self.matrix))

    def apply(self, x: float, y: float) -> tuple[float, float]:
        """Map a single point."""
        m = self.matrix
        return (
            float(m[0, 0] * x + m[0, 1] * y + m[0, 2]),
            float(m[1, 0] * x + m[1, 1] * y + m[1, 2]),
        )

    def apply_many(self, points: np.ndarray) -> np.ndarray:
        """Map an ``(N, 2)`` array of points, returning an ``(N, 2)`` array."""
        pts = np.asarray(points, dtype=float).reshape(-1, 2)
        return pts @ self.matrix[:2, :2].T + self.matrix[:2, 2]

    def allclose(self, other: "AffineTransform", atol: float = 1e-9) -> bool:
        return bool(np.allclose(self.matrix, other.matrix, atol=atol))

    def to_list(self) -> list[list[float]]:
        return self.matrix.tolist()
