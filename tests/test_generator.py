"""Test module for flightpath.generator

The tests are run using pytest.
These tests ensure that generated flight paths are deterministic for a seed,
respect the difficulty settings and the flight zone, and prefer pre-placed
waypoints.
"""

import logging

import numpy as np
import pytest
from numpy.testing import assert_allclose

from flightpath.config import DifficultyWaypointSettings, FlightPathConfig
from flightpath.flight_path import FlightPath
from flightpath.generator import FlightPathGenerator
from flightpath.geom import Bounds3D

SPAWN = (-10.0, 2.0, 0.0)
TARGET = (10.0, 2.0, 0.0)

# zone above the ground, so that the height range [1.5, 6] lies inside
ZONE = Bounds3D(center=(0.0, 4.0, 0.0), size=(40.0, 8.0, 40.0))


def fixed_count_config(count: int, **kwargs) -> FlightPathConfig:
    """Config that always generates exactly count intermediate waypoints."""
    return FlightPathConfig(
        flight_zone=ZONE,
        waypoints_by_difficulty=(DifficultyWaypointSettings(1, count, count, 0.5),),
        **kwargs,
    )


###############################################################################
# generate_path Tests
###############################################################################


class TestGeneratePath:
    """Test class for FlightPathGenerator.generate_path."""

    def test_returns_flight_path(self):
        """The path runs from spawn to target and keeps the seed."""
        path = FlightPathGenerator(FlightPathConfig(flight_zone=ZONE)).generate_path(SPAWN, TARGET, 3, seed=42)

        assert isinstance(path, FlightPath)
        assert_allclose(path.spawn_point, SPAWN)
        assert_allclose(path.target_point, TARGET)
        assert path.seed == 42
        assert 1 <= path.intermediate_waypoint_count <= 3

    def test_deterministic_for_seed(self):
        """Equal seeds give equal paths."""
        generator = FlightPathGenerator(FlightPathConfig(flight_zone=ZONE))

        first = generator.generate_path(SPAWN, TARGET, 4, seed=1234)
        second = generator.generate_path(SPAWN, TARGET, 4, seed=1234)

        assert_allclose(first.waypoints, second.waypoints)
        assert first.total_arc_length == second.total_arc_length

    def test_different_seeds_differ(self):
        """Different seeds give different intermediate waypoints."""
        generator = FlightPathGenerator(fixed_count_config(2))

        first = generator.generate_path(SPAWN, TARGET, 1, seed=1)
        second = generator.generate_path(SPAWN, TARGET, 1, seed=2)

        assert not np.allclose(first.waypoints, second.waypoints)

    def test_negative_seed(self):
        """Negative seeds are accepted, kept on the path and deterministic."""
        generator = FlightPathGenerator(fixed_count_config(2))

        first = generator.generate_path(SPAWN, TARGET, 1, seed=-5)
        second = generator.generate_path(SPAWN, TARGET, 1, seed=-5)

        assert first.seed == -5
        assert_allclose(first.waypoints, second.waypoints)

    def test_seed_from_clock(self):
        """Without a seed a non-negative 31 bit seed is chosen."""
        path = FlightPathGenerator(FlightPathConfig(flight_zone=ZONE)).generate_path(SPAWN, TARGET, 1)
        assert 0 <= path.seed <= 0x7FFFFFFF

    def test_uses_config_spline_settings(self):
        """Tension and sample count come from the config."""
        config = fixed_count_config(1, spline_tension=0.4, arc_length_samples=30)
        path = FlightPathGenerator(config).generate_path(SPAWN, TARGET, 1, seed=3)

        assert path.tension == 0.4
        assert path.samples_per_segment == 30
        assert path.arc_length_table.shape == (2 * 30 + 1,)

    def test_zero_intermediates(self):
        """A count of zero gives a direct path."""
        path = FlightPathGenerator(fixed_count_config(0)).generate_path(SPAWN, TARGET, 1, seed=3)

        assert path.waypoints.shape == (2, 3)
        assert path.total_arc_length == pytest.approx(20.0)

    @pytest.mark.parametrize("seed", range(10))
    def test_dynamic_waypoints_within_flight_zone(self, seed):
        """Dynamic waypoints respect zone and height range, sorted by progress."""
        config = fixed_count_config(3)
        path = FlightPathGenerator(config).generate_path(SPAWN, TARGET, 1, seed=seed)

        intermediates = path.waypoints[1:-1]
        assert intermediates.shape == (3, 3)
        for point in intermediates:
            assert config.is_within_flight_zone(point)
        assert np.all(np.diff(intermediates[:, 0]) >= 0.0)

    def test_logging(self, caplog):
        """Seed and difficulty are logged."""
        with caplog.at_level(logging.INFO, logger="flightpath.generator"):
            FlightPathGenerator(fixed_count_config(1)).generate_path(SPAWN, TARGET, 1, seed=77)

        assert "Seed: 77" in caplog.text
        assert "Path generated" in caplog.text


###############################################################################
# Waypoint count Tests
###############################################################################


class TestWaypointCount:
    """Test class for the number of intermediate waypoints."""

    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5])
    def test_count_from_config(self, level):
        """Counts stay within the configured range of the level."""
        generator = FlightPathGenerator()
        settings = generator.config.get_waypoint_settings(level)
        rng = np.random.default_rng(level)

        for _ in range(50):
            count = generator.get_waypoint_count_for_difficulty(level, rng)
            assert settings.min_waypoints <= count <= settings.max_waypoints

    @pytest.mark.parametrize("level, lower, upper", [(1, 1, 2), (2, 1, 2), (3, 1, 3), (4, 0, 3), (5, 0, 3), (9, 1, 2)])
    def test_fallback_without_settings(self, level, lower, upper):
        """Without difficulty settings fixed ranges are used."""
        generator = FlightPathGenerator(FlightPathConfig(waypoints_by_difficulty=()))
        rng = np.random.default_rng(11)

        counts = {generator.get_waypoint_count_for_difficulty(level, rng) for _ in range(200)}

        assert counts == set(range(lower, upper + 1))


###############################################################################
# Dynamic waypoint Tests
###############################################################################


class TestDynamicWaypoint:
    """Test class for FlightPathGenerator.generate_dynamic_waypoint."""

    def test_offsets_are_bounded(self):
        """The waypoint deviates sideways (z) and vertically only within the ranges."""
        generator = FlightPathGenerator(FlightPathConfig(flight_zone=ZONE))
        rng = np.random.default_rng(0)

        for _ in range(50):
            waypoint = generator.generate_dynamic_waypoint(SPAWN, TARGET, 0.5, rng)
            assert waypoint[0] == pytest.approx(0.0)
            assert abs(waypoint[2]) <= 3.0
            assert 1.5 <= waypoint[1] <= 3.5

    def test_vertical_path(self):
        """A vertical direct line still gets a sideways direction."""
        generator = FlightPathGenerator(FlightPathConfig(flight_zone=ZONE))
        rng = np.random.default_rng(0)

        waypoint = generator.generate_dynamic_waypoint((0.0, 1.5, 0.0), (0.0, 6.0, 0.0), 0.5, rng)

        assert np.all(np.isfinite(waypoint))
        assert waypoint[0] == pytest.approx(0.0)

    def test_clamped_to_default_zone(self):
        """Far away points are clamped into the flight zone."""
        generator = FlightPathGenerator()
        waypoint = generator.generate_dynamic_waypoint((-50.0, 2.0, 0.0), (50.0, 2.0, 0.0), 0.0, np.random.default_rng(0))
        assert waypoint[0] == pytest.approx(-10.0)


###############################################################################
# Pre-placed waypoint Tests
###############################################################################


class TestPreplacedWaypoints:
    """Test class for the use of pre-placed candidate points."""

    CANDIDATES = [
        (0.0, 3.0, 0.0),  # suitable
        (-9.5, 2.0, 0.0),  # too close to spawn
        (0.0, 2.0, 20.0),  # too far from the direct line
        (25.0, 2.0, 0.0),  # beyond the target
        (5.0, 2.5, 1.0),  # suitable
    ]

    def test_filter_suitable_waypoints(self):
        """Only candidates between the endpoints and near the line are kept."""
        generator = FlightPathGenerator(FlightPathConfig(flight_zone=ZONE))
        suitable = generator.filter_suitable_waypoints(SPAWN, TARGET, self.CANDIDATES)

        assert_allclose(np.array(suitable), [[0.0, 3.0, 0.0], [5.0, 2.5, 1.0]])

    def test_preplaced_used_when_enough(self):
        """Enough suitable candidates are used without dynamic points."""
        generator = FlightPathGenerator(fixed_count_config(2), preplaced_points=self.CANDIDATES)
        path = generator.generate_path(SPAWN, TARGET, 1, seed=5)

        assert_allclose(path.waypoints[1:-1], [[0.0, 3.0, 0.0], [5.0, 2.5, 1.0]])

    def test_random_subset(self):
        """With more candidates than needed a subset is chosen."""
        generator = FlightPathGenerator(fixed_count_config(1), preplaced_points=self.CANDIDATES)
        path = generator.generate_path(SPAWN, TARGET, 1, seed=5)

        chosen = path.waypoints[1]
        assert any(np.allclose(chosen, candidate) for candidate in ([0.0, 3.0, 0.0], [5.0, 2.5, 1.0]))

    def test_hybrid(self):
        """Missing waypoints are topped up with dynamic ones."""
        generator = FlightPathGenerator(fixed_count_config(3), preplaced_points=[(0.0, 3.0, 0.0)])
        path = generator.generate_path(SPAWN, TARGET, 1, seed=5)

        intermediates = path.waypoints[1:-1]
        assert intermediates.shape == (3, 3)
        assert any(np.allclose(point, [0.0, 3.0, 0.0]) for point in intermediates)
        assert np.all(np.diff(intermediates[:, 0]) >= 0.0)

    def test_preplaced_disabled(self):
        """With prefer_preplaced_waypoints=False only dynamic points are used."""
        config = fixed_count_config(1, prefer_preplaced_waypoints=False)
        generator = FlightPathGenerator(config, preplaced_points=[(0.0, 3.0, 0.0)])
        path = generator.generate_path(SPAWN, TARGET, 1, seed=5)

        assert not np.allclose(path.waypoints[1], [0.0, 3.0, 0.0])

    def test_refresh_preplaced_points(self):
        """The candidate set can be replaced."""
        generator = FlightPathGenerator(preplaced_points=self.CANDIDATES)
        generator.refresh_preplaced_points([(1.0, 2.0)])

        assert_allclose(generator.preplaced_points, [[1.0, 2.0, 0.0]])

    def test_sort_waypoints_by_progress(self):
        """Waypoints are ordered along the spawn to target direction."""
        waypoints = [np.array([5.0, 0.0, 0.0]), np.array([-5.0, 1.0, 0.0]), np.array([0.0, 0.0, 3.0])]
        result = FlightPathGenerator.sort_waypoints_by_progress(SPAWN, TARGET, waypoints)

        assert_allclose(np.array(result)[:, 0], [-5.0, 0.0, 5.0])
