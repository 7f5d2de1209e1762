"""Immutable flight path with precomputed arc-length data for constant-speed traversal."""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from flightpath.common import (
    DEFAULT_SAMPLES_PER_SEGMENT,
    DEFAULT_TENSION,
    DEFAULT_VISUALIZATION_POINTS,
    FORWARD,
    ZERO_LENGTH_EPSILON,
    InsufficientWaypointsError,
    PointLike,
    PointsLike,
)
from flightpath.geom import GeomMath
from flightpath.spline import CatmullRom

logger = logging.getLogger(__name__)


def _read_only(array: NDArray[np.float64]) -> NDArray[np.float64]:
    array.flags.writeable = False
    return array


###############################################################################
# FlightPath
###############################################################################


class FlightPath:
    """A Catmull-Rom path through a sequence of waypoints, queryable by travelled distance.

    The path is built once (phantom points + arc-length table) and is read-only
    afterwards, so it can be queried from several places without synchronization.

    A consumer advances a "distance travelled" counter by speed * dt every frame and
    asks the path for position and direction at that distance:

        path = FlightPath([(0, 0, 0), (5, 0, 0), (5, 5, 0)])
        distance = 0.0
        while not path.is_at_end(distance):
            distance += speed * dt
            position = path.get_position_at_distance(distance)
            direction = path.get_tangent_at_distance(distance)

    Attributes:
        waypoints: The real waypoints (spawn + intermediates + target), no phantom points
        waypoints_with_phantoms: The waypoints with one phantom point at each end
        arc_length_table: Cumulative arc lengths, one entry per sample point
        total_arc_length: Total arc length of the path in world units
        tension: Spline tension used for this path
        samples_per_segment: Samples per segment used to build the arc-length table
        seed: Random seed the waypoints were generated with (for reproducibility)
    """

    def __init__(
        self,
        waypoints: PointsLike,
        tension: float = DEFAULT_TENSION,
        samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT,
        seed: int = 0,
    ):
        """Create a flight path from waypoints and build its arc-length table.

        Args:
            waypoints: Spawn point, optional intermediate points and target point (minimum 2)
            tension: Spline tension. Defaults to 0.5 (standard Catmull-Rom).
            samples_per_segment: Samples per segment for the arc-length table. Defaults to 20.
            seed: Seed the waypoints were generated with. Defaults to 0.

        Raises:
            InsufficientWaypointsError: If fewer than 2 waypoints are given
            ValueError: If the waypoints are malformed or samples_per_segment is below 2
        """
        points = GeomMath.as_points(waypoints)
        if points.shape[0] < 2:
            raise InsufficientWaypointsError(
                f"FlightPath needs at least 2 waypoints (spawn and target), got {points.shape[0]}"
            )

        self._waypoints = _read_only(points)
        self._tension = float(tension)
        self._samples_per_segment = int(samples_per_segment)
        self._seed = int(seed)

        self._waypoints_with_phantoms = _read_only(CatmullRom.add_phantom_points(self._waypoints))
        self._arc_length_table = _read_only(
            CatmullRom.build_arc_length_table(self._waypoints_with_phantoms, self._samples_per_segment, self._tension)
        )
        self._total_arc_length = float(self._arc_length_table[-1])

        self._log_degenerate_geometry()

    def _log_degenerate_geometry(self) -> None:
        step_lengths = np.linalg.norm(np.diff(self._waypoints, axis=0), axis=1)
        for index in np.flatnonzero(step_lengths <= ZERO_LENGTH_EPSILON):
            logger.warning(
                "Waypoints %d and %d coincide (distance %.6f), segment has zero length",
                index,
                index + 1,
                step_lengths[index],
            )
        if self._total_arc_length <= ZERO_LENGTH_EPSILON:
            logger.warning("FlightPath has zero total arc length: %s", self)

    ########################################################################
    # Properties
    ########################################################################

    @property
    def waypoints(self) -> NDArray[np.float64]:
        """The real waypoints, shape (n, 3), read-only."""
        return self._waypoints

    @property
    def waypoints_with_phantoms(self) -> NDArray[np.float64]:
        """The waypoints with phantom points, shape (n + 2, 3), read-only."""
        return self._waypoints_with_phantoms

    @property
    def arc_length_table(self) -> NDArray[np.float64]:
        """Cumulative arc-length lookup table, read-only."""
        return self._arc_length_table

    @property
    def total_arc_length(self) -> float:
        """Total arc length of the path in world units."""
        return self._total_arc_length

    @property
    def tension(self) -> float:
        """Spline tension used for this path."""
        return self._tension

    @property
    def samples_per_segment(self) -> int:
        """Samples per segment of the arc-length table."""
        return self._samples_per_segment

    @property
    def seed(self) -> int:
        """Random seed used to generate this path."""
        return self._seed

    @property
    def num_segments(self) -> int:
        """Number of spline segments (waypoints - 1)."""
        return self._waypoints.shape[0] - 1

    @property
    def intermediate_waypoint_count(self) -> int:
        """Number of waypoints between spawn and target."""
        return max(0, self._waypoints.shape[0] - 2)

    @property
    def spawn_point(self) -> NDArray[np.float64]:
        """The first waypoint of the path."""
        return self._waypoints[0]

    @property
    def target_point(self) -> NDArray[np.float64]:
        """The last waypoint of the path."""
        return self._waypoints[-1]

    ########################################################################
    # Distance queries
    ########################################################################

    def _locate(self, distance: float) -> Tuple[int, float]:
        """Map a distance strictly inside (0, total) to (segment index, segment parameter t).

        The arc-length table is binary searched for the bracket
        table[low] < distance <= table[high] with high = low + 1.
        """
        table = self._arc_length_table
        high = int(np.searchsorted(table, distance, side="left"))
        high = min(max(high, 1), table.shape[0] - 1)
        low = high - 1

        bracket_start = table[low]
        bracket_length = table[high] - bracket_start
        if bracket_length > ZERO_LENGTH_EPSILON:
            local_t = (distance - bracket_start) / bracket_length
        else:
            local_t = 0.0

        samples = self._samples_per_segment
        segment_index = min(low // samples, self.num_segments - 1)
        sample_in_segment = low - segment_index * samples

        t_start = sample_in_segment / samples
        t_end = (sample_in_segment + 1) / samples
        return segment_index, GeomMath.lerp(t_start, t_end, local_t)

    def _segment_controls(self, segment_index: int) -> NDArray[np.float64]:
        return self._waypoints_with_phantoms[segment_index : segment_index + 4]

    def get_position_at_distance(self, distance: float) -> NDArray[np.float64]:
        """
        Get the position on the path at a specific distance from the start.

        The distance is clamped to [0, total_arc_length], so the first and last
        waypoints are returned for distances outside the path.

        Args:
            distance: Distance along the path in world units

        Returns:
            Position on the spline, shape (3,)
        """
        distance = float(distance)
        if distance <= 0.0:
            return self._waypoints[0].copy()
        if distance >= self._total_arc_length:
            return self._waypoints[-1].copy()

        segment_index, t = self._locate(distance)
        p0, p1, p2, p3 = self._segment_controls(segment_index)
        return CatmullRom.point(p0, p1, p2, p3, t, self._tension)

    def get_tangent_at_distance(
        self, distance: float, default_direction: Optional[PointLike] = None
    ) -> NDArray[np.float64]:
        """
        Get the movement direction on the path at a specific distance from the start.

        At the ends the tangent of the first segment at t=0 and of the last segment
        at t=1 is used. A zero length tangent (duplicate waypoints) yields the
        default direction instead of a zero or NaN vector.

        Args:
            distance: Distance along the path in world units
            default_direction: Returned when no direction can be derived. Defaults to FORWARD.

        Returns:
            Unit tangent vector, shape (3,)
        """
        fallback = FORWARD if default_direction is None else default_direction
        distance = float(distance)
        if distance <= 0.0:
            segment_index, t = 0, 0.0
        elif distance >= self._total_arc_length:
            segment_index, t = self.num_segments - 1, 1.0
        else:
            segment_index, t = self._locate(distance)

        p0, p1, p2, p3 = self._segment_controls(segment_index)
        return GeomMath.normalize(CatmullRom.tangent(p0, p1, p2, p3, t, self._tension), fallback=fallback)

    def is_at_end(self, distance_traveled: float) -> bool:
        """True if the given distance is at or past the end of the path."""
        return distance_traveled >= self._total_arc_length

    ########################################################################
    # Normalized time queries
    ########################################################################

    def get_point_at_normalized_time(self, normalized_time: float) -> NDArray[np.float64]:
        """Position at normalized time u in [0, 1], i.e. at distance u * total_arc_length."""
        return self.get_position_at_distance(normalized_time * self._total_arc_length)

    def get_tangent_at_normalized_time(
        self, normalized_time: float, default_direction: Optional[PointLike] = None
    ) -> NDArray[np.float64]:
        """Unit tangent at normalized time u in [0, 1]."""
        return self.get_tangent_at_distance(normalized_time * self._total_arc_length, default_direction)

    def get_time_at_distance(self, distance: float) -> float:
        """Convert a distance along the path to a normalized time in [0, 1]."""
        if self._total_arc_length <= 0.0:
            return 0.0
        return GeomMath.clamp01(distance / self._total_arc_length)

    def get_distance_at_time(self, normalized_time: float) -> float:
        """Convert a normalized time to a distance along the path."""
        return GeomMath.clamp01(normalized_time) * self._total_arc_length

    ########################################################################
    # Helpers
    ########################################################################

    def generate_visualization_points(self, count: int = DEFAULT_VISUALIZATION_POINTS) -> NDArray[np.float64]:
        """
        Generate evenly time-spaced points along the whole path for debug drawing.

        Args:
            count: Number of points, values below 2 are raised to 2. Defaults to 50.

        Returns:
            Array of shape (count, 3), first point is the spawn point, last the target point
        """
        count = max(2, int(count))
        result = np.empty((count, 3), dtype=np.float64)
        for i in range(count):
            result[i] = self.get_point_at_normalized_time(i / (count - 1))
        return result

    def get_estimated_duration(self, speed: float) -> float:
        """
        Estimated flight duration in seconds at the given speed.

        Args:
            speed: Flight speed in world units per second

        Returns:
            total_arc_length / speed, or infinity for a non-positive speed
        """
        if speed <= 0.0:
            return math.inf
        return self._total_arc_length / speed

    def to_dict(self) -> dict:
        """Convert the construction parameters of the path to a dictionary."""
        return {
            "waypoints": self._waypoints.tolist(),
            "tension": self._tension,
            "samples_per_segment": self._samples_per_segment,
            "seed": self._seed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> FlightPath:
        """Create a FlightPath from a dictionary, the arc-length table is rebuilt."""
        return cls(
            waypoints=data["waypoints"],
            tension=data.get("tension", DEFAULT_TENSION),
            samples_per_segment=data.get("samples_per_segment", DEFAULT_SAMPLES_PER_SEGMENT),
            seed=data.get("seed", 0),
        )

    def __str__(self) -> str:
        """Returns a short summary of the path for debugging."""
        return (
            f"FlightPath[Waypoints={self._waypoints.shape[0]}, "
            f"Intermediates={self.intermediate_waypoint_count}, "
            f"ArcLength={self._total_arc_length:.2f}, Seed={self._seed}]"
        )
