"""Handling 3D vectors and axis aligned bounds"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from flightpath.common import ZERO_LENGTH_EPSILON, PointLike, PointsLike


###############################################################################
# GeomMath
###############################################################################
class GeomMath:
    """Class to provide various static methods related to vector handling."""

    @staticmethod
    def as_point(point: PointLike) -> NDArray[np.float64]:
        """
        Convert the given point into a numpy array of shape (3,).

        2D points (x, y) are lifted to (x, y, 0).

        Args:
            point (PointLike): 2D or 3D point

        Returns:
            NDArray[np.float64]: the point as float64 array of shape (3,)

        Raises:
            ValueError: If the point has neither 2 nor 3 coordinates
        """
        arr = np.asarray(point, dtype=np.float64).reshape(-1)
        if arr.shape[0] == 2:
            return np.array([arr[0], arr[1], 0.0], dtype=np.float64)
        if arr.shape[0] != 3:
            raise ValueError(f"Point must have 2 or 3 coordinates, got {arr.shape[0]}")
        return arr.copy()

    @staticmethod
    def as_points(points: PointsLike) -> NDArray[np.float64]:
        """
        Convert the given points into a numpy array of shape (n, 3).

        Points with 2 columns are lifted to 3D by adding a zero z-column.

        Args:
            points (PointsLike): sequence of 2D or 3D points

        Returns:
            NDArray[np.float64]: float64 array of shape (n, 3)

        Raises:
            ValueError: If the points do not form a (n, 2) or (n, 3) array
        """
        arr = np.asarray(points, dtype=np.float64)
        if arr.size == 0:
            return np.empty((0, 3), dtype=np.float64)
        if arr.ndim != 2 or arr.shape[1] not in (2, 3):
            raise ValueError(f"Points must have shape (n, 2) or (n, 3), got {arr.shape}")
        if arr.shape[1] == 2:
            return np.column_stack([arr, np.zeros(arr.shape[0], dtype=np.float64)])
        return arr.copy()

    @staticmethod
    def distance(point_a: PointLike, point_b: PointLike) -> float:
        """Euclidean distance between two points."""
        return float(np.linalg.norm(np.asarray(point_b, dtype=np.float64) - np.asarray(point_a, dtype=np.float64)))

    @staticmethod
    def normalize(
        vector: PointLike,
        fallback: Optional[PointLike] = None,
        eps: float = ZERO_LENGTH_EPSILON,
    ) -> NDArray[np.float64]:
        """
        Normalize the given vector to unit length.

        Vectors with a magnitude not larger than _eps_ cannot be normalized.
        In this case the _fallback_ is returned (as copy), or a zero vector if no
        fallback is given.

        Args:
            vector (PointLike): vector to normalize
            fallback (PointLike, optional): returned for (near) zero vectors. Defaults to None.
            eps (float, optional): magnitude threshold. Defaults to ZERO_LENGTH_EPSILON.

        Returns:
            NDArray[np.float64]: the unit vector or the fallback
        """
        vec = np.asarray(vector, dtype=np.float64)
        magnitude = float(np.linalg.norm(vec))
        if magnitude > eps:
            return vec / magnitude
        if fallback is None:
            return np.zeros_like(vec)
        return np.array(fallback, dtype=np.float64)

    @staticmethod
    def lerp(start: float, end: float, t: float) -> float:
        """Linear interpolation between start and end (t is clamped to [0, 1])."""
        t = GeomMath.clamp01(t)
        return start + (end - start) * t

    @staticmethod
    def clamp01(value: float) -> float:
        """Clamp value to range [0, 1]."""
        return GeomMath.clamp(value, 0.0, 1.0)

    @staticmethod
    def clamp(value: float, lower: float, upper: float) -> float:
        """Clamp value to range [lower, upper]."""
        return max(lower, min(upper, value))


###############################################################################
# Bounds3D
###############################################################################
@dataclass(frozen=True)
class Bounds3D:
    """
    Axis aligned 3D box described by its center and size.

    Attributes:
        center (Tuple[float, float, float]): center of the box
        size (Tuple[float, float, float]): full extent of the box along x, y and z
    """

    center: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    size: Tuple[float, float, float] = (20.0, 8.0, 20.0)

    def __post_init__(self):
        # Normalize negative sizes so that min <= max always holds
        object.__setattr__(self, "center", tuple(float(c) for c in self.center))
        object.__setattr__(self, "size", tuple(abs(float(s)) for s in self.size))
        if len(self.center) != 3 or len(self.size) != 3:
            raise ValueError("Bounds3D center and size must have 3 components")

    @property
    def min(self) -> NDArray[np.float64]:
        """The minimum corner of the box."""
        return np.asarray(self.center, dtype=np.float64) - np.asarray(self.size, dtype=np.float64) / 2

    @property
    def max(self) -> NDArray[np.float64]:
        """The maximum corner of the box."""
        return np.asarray(self.center, dtype=np.float64) + np.asarray(self.size, dtype=np.float64) / 2

    @property
    def volume(self) -> float:
        """float: The volume of the box."""
        return float(np.prod(self.size))

    def contains(self, point: PointLike) -> bool:
        """True if the point lies inside the box (borders included)."""
        pt = GeomMath.as_point(point)
        return bool(np.all(pt >= self.min) and np.all(pt <= self.max))

    def clamp(self, point: PointLike) -> NDArray[np.float64]:
        """
        Clamp the given point into the box.

        Args:
            point (PointLike): point to clamp

        Returns:
            NDArray[np.float64]: the clamped point
        """
        return np.clip(GeomMath.as_point(point), self.min, self.max)

    @classmethod
    def from_min_max(cls, min_corner: PointLike, max_corner: PointLike) -> Bounds3D:
        """Create a Bounds3D from two opposite corners."""
        lo = GeomMath.as_point(min_corner)
        hi = GeomMath.as_point(max_corner)
        return cls(center=tuple((lo + hi) / 2), size=tuple(np.abs(hi - lo)))

    @classmethod
    def from_dict(cls, data: dict) -> Bounds3D:
        """Create a Bounds3D instance from a dictionary.

        The dictionary holds either "center" and "size" or the two corners "min" and "max".
        """
        if "min" in data and "max" in data:
            return cls.from_min_max(data["min"], data["max"])
        return cls(
            center=tuple(data.get("center", (0.0, 0.0, 0.0))),
            size=tuple(data.get("size", (20.0, 8.0, 20.0))),
        )

    def to_dict(self) -> dict:
        """Convert the Bounds3D instance to a dictionary."""
        return {
            "center": list(self.center),
            "size": list(self.size),
        }

    def __str__(self):
        """Returns a string representation of the Bounds3D instance."""
        return f"Bounds3D(center={self.center}, size={self.size}, volume={self.volume})"
