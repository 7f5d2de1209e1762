"""Generation of flight paths between a spawn point and a target point."""

from __future__ import annotations

import logging
import time
from typing import List, Optional

import numpy as np
from numpy.typing import NDArray

from flightpath.common import RIGHT, UP, PointLike, PointsLike
from flightpath.config import FlightPathConfig
from flightpath.flight_path import FlightPath
from flightpath.geom import GeomMath

logger = logging.getLogger(__name__)

# Paths shorter than this factor times the direct distance are reported as nearly straight
_NEARLY_STRAIGHT_FACTOR: float = 1.2


class FlightPathGenerator:
    """Generates flight paths with intermediate waypoints depending on the difficulty.

    Intermediate waypoints are taken from a set of pre-placed candidate points when
    enough suitable ones are available, otherwise they are generated dynamically by
    offsetting points on the direct line from spawn to target. Generation is
    deterministic for a given seed.
    """

    def __init__(self, config: Optional[FlightPathConfig] = None, preplaced_points: PointsLike = ()):
        """
        Args:
            config: Generation settings. Defaults to FlightPathConfig().
            preplaced_points: Candidate intermediate points placed in the scene.
        """
        self.config = config if config is not None else FlightPathConfig()
        self._preplaced_points = GeomMath.as_points(preplaced_points)

    @property
    def preplaced_points(self) -> NDArray[np.float64]:
        """The pre-placed candidate points, shape (n, 3)."""
        return self._preplaced_points

    def refresh_preplaced_points(self, preplaced_points: PointsLike) -> None:
        """Replace the pre-placed candidate points."""
        self._preplaced_points = GeomMath.as_points(preplaced_points)
        logger.debug("Refreshed pre-placed points: %d candidates", self._preplaced_points.shape[0])

    ########################################################################
    # Public API
    ########################################################################

    def generate_path(
        self,
        spawn_point: PointLike,
        target_point: PointLike,
        difficulty_level: int,
        seed: Optional[int] = None,
    ) -> FlightPath:
        """
        Generate a flight path from spawn to target with intermediate waypoints.

        Args:
            spawn_point: Starting position of the path
            target_point: Ending position of the path
            difficulty_level: Current difficulty level (1-5)
            seed: Random seed for deterministic generation. Derived from the clock if None.

        Returns:
            The generated FlightPath
        """
        spawn = GeomMath.as_point(spawn_point)
        target = GeomMath.as_point(target_point)

        actual_seed = seed if seed is not None else time.time_ns() & 0x7FFFFFFF
        # numpy only accepts non-negative seeds, negative ones are mapped to their 32 bit pattern
        rng = np.random.default_rng(actual_seed & 0xFFFFFFFF)

        waypoint_count = self.get_waypoint_count_for_difficulty(difficulty_level, rng)
        logger.info(
            "Generating path - Seed: %d, Difficulty: %d, Waypoints: %d, PreplacedAvailable: %d",
            actual_seed,
            difficulty_level,
            waypoint_count,
            self._preplaced_points.shape[0],
        )

        intermediates = self._generate_intermediate_waypoints(spawn, target, waypoint_count, rng)
        waypoints = np.vstack([spawn, *intermediates, target])

        path = FlightPath(
            waypoints,
            tension=self.config.spline_tension,
            samples_per_segment=self.config.arc_length_samples,
            seed=actual_seed,
        )

        direct_distance = GeomMath.distance(spawn, target)
        if path.total_arc_length < direct_distance * _NEARLY_STRAIGHT_FACTOR and path.intermediate_waypoint_count < 3:
            logger.debug(
                "Path arc length (%.2f) is close to direct distance (%.2f)", path.total_arc_length, direct_distance
            )

        logger.info("Path generated: %s", path)
        return path

    def get_waypoint_count_for_difficulty(
        self, difficulty_level: int, rng: Optional[np.random.Generator] = None
    ) -> int:
        """Number of intermediate waypoints to generate for a difficulty level."""
        if self.config.waypoints_by_difficulty:
            return self.config.get_random_waypoint_count(difficulty_level, rng)

        # Fallback mapping without difficulty settings
        if difficulty_level == 3:
            lower, upper = 1, 3
        elif difficulty_level in (4, 5):
            lower, upper = 0, 3
        else:
            lower, upper = 1, 2

        rng = rng if rng is not None else np.random.default_rng()
        return int(rng.integers(lower, upper + 1))

    def generate_dynamic_waypoint(
        self,
        spawn_point: PointLike,
        target_point: PointLike,
        progress_along_path: float,
        rng: np.random.Generator,
    ) -> NDArray[np.float64]:
        """
        Generate a single waypoint near the direct line from spawn to target.

        The base position at progress_along_path is offset randomly sideways (perpendicular
        to the travel direction and up) and vertically, then clamped to the flight zone.

        Args:
            spawn_point: Starting position
            target_point: Ending position
            progress_along_path: Progress (0-1) along the direct line
            rng: Random generator for deterministic generation

        Returns:
            Generated waypoint position
        """
        spawn = GeomMath.as_point(spawn_point)
        target = GeomMath.as_point(target_point)

        direct_path = target - spawn
        base_position = spawn + direct_path * progress_along_path

        direction = GeomMath.normalize(direct_path)
        perpendicular = GeomMath.normalize(np.cross(direction, UP))
        if not np.any(perpendicular):
            # vertical path
            perpendicular = GeomMath.normalize(np.cross(direction, RIGHT), fallback=RIGHT)

        lateral_offset = (float(rng.random()) * 2.0 - 1.0) * self.config.lateral_deviation_range
        vertical_offset = (float(rng.random()) * 2.0 - 1.0) * self.config.vertical_deviation_range

        waypoint = base_position + perpendicular * lateral_offset + UP * vertical_offset
        return self.config.clamp_to_flight_zone(waypoint)

    ########################################################################
    # Intermediate waypoints
    ########################################################################

    def _generate_intermediate_waypoints(
        self,
        spawn: NDArray[np.float64],
        target: NDArray[np.float64],
        count: int,
        rng: np.random.Generator,
    ) -> List[NDArray[np.float64]]:
        if count <= 0:
            return []

        suitable: List[NDArray[np.float64]] = []
        if self.config.prefer_preplaced_waypoints and self._preplaced_points.shape[0] > 0:
            suitable = self.filter_suitable_waypoints(spawn, target, self._preplaced_points)

        if len(suitable) >= count:
            intermediates = self._select_random_waypoints(suitable, count, rng)
            source = "pre-placed"
        elif suitable:
            intermediates = suitable + self._generate_dynamic_waypoints(spawn, target, count - len(suitable), rng)
            source = "hybrid"
        else:
            intermediates = self._generate_dynamic_waypoints(spawn, target, count, rng)
            source = "dynamic"

        intermediates = self.sort_waypoints_by_progress(spawn, target, intermediates)
        logger.debug("Generated %d intermediate waypoints (source: %s)", len(intermediates), source)
        return intermediates

    def filter_suitable_waypoints(
        self, spawn_point: PointLike, target_point: PointLike, candidates: PointsLike
    ) -> List[NDArray[np.float64]]:
        """
        Select the candidates usable as intermediate waypoints between spawn and target.

        A candidate is suitable if it keeps min_distance_from_endpoints to both ends,
        projects between spawn and target (with the same margin) and lies at most twice
        the lateral deviation range away from the direct line.

        Args:
            spawn_point: Starting position
            target_point: Ending position
            candidates: Candidate points

        Returns:
            The suitable candidates in their original order
        """
        spawn = GeomMath.as_point(spawn_point)
        target = GeomMath.as_point(target_point)
        min_distance = self.config.min_distance_from_endpoints
        max_lateral_distance = self.config.lateral_deviation_range * 2.0

        path_direction = GeomMath.normalize(target - spawn)
        path_length = GeomMath.distance(spawn, target)

        suitable = []
        for point in GeomMath.as_points(candidates):
            if GeomMath.distance(point, spawn) < min_distance or GeomMath.distance(point, target) < min_distance:
                continue

            projected_distance = float(np.dot(point - spawn, path_direction))
            if projected_distance < min_distance or projected_distance > path_length - min_distance:
                continue

            lateral_distance = GeomMath.distance(point, spawn + path_direction * projected_distance)
            if lateral_distance > max_lateral_distance:
                continue

            suitable.append(point)
        return suitable

    @staticmethod
    def _select_random_waypoints(
        candidates: List[NDArray[np.float64]], count: int, rng: np.random.Generator
    ) -> List[NDArray[np.float64]]:
        if len(candidates) <= count:
            return list(candidates)
        chosen = rng.permutation(len(candidates))[:count]
        return [candidates[i] for i in chosen]

    def _generate_dynamic_waypoints(
        self,
        spawn: NDArray[np.float64],
        target: NDArray[np.float64],
        count: int,
        rng: np.random.Generator,
    ) -> List[NDArray[np.float64]]:
        # evenly distributed along the direct line, endpoints excluded
        return [self.generate_dynamic_waypoint(spawn, target, (i + 1.0) / (count + 1.0), rng) for i in range(count)]

    @staticmethod
    def sort_waypoints_by_progress(
        spawn_point: PointLike, target_point: PointLike, waypoints: List[NDArray[np.float64]]
    ) -> List[NDArray[np.float64]]:
        """Sort waypoints by their projected progress along the spawn to target direction."""
        if len(waypoints) <= 1:
            return list(waypoints)
        spawn = GeomMath.as_point(spawn_point)
        path_direction = GeomMath.normalize(GeomMath.as_point(target_point) - spawn)
        return sorted(waypoints, key=lambda point: float(np.dot(point - spawn, path_direction)))
