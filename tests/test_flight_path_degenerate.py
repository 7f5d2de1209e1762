"""Test module for degenerate input handling of flightpath.flight_path

The tests are run using pytest.
These tests ensure that coincident waypoints and zero length paths never produce
NaN values or exceptions at query time, and that invalid construction input fails
loudly.
"""

import logging

import numpy as np
import pytest
from numpy.testing import assert_allclose

from flightpath.common import FORWARD, FlightPathError, InsufficientWaypointsError
from flightpath.flight_path import FlightPath

###############################################################################
# Zero length paths
###############################################################################


class TestZeroLengthPath:
    """Test class for paths whose waypoints all coincide."""

    @pytest.fixture
    def zero_path(self):
        """Spawn and target at the same position."""
        return FlightPath([(1.0, 2.0, 3.0), (1.0, 2.0, 3.0)])

    def test_total_arc_length_is_zero(self, zero_path):
        """The table holds only zeros."""
        assert zero_path.total_arc_length == 0.0
        assert np.all(zero_path.arc_length_table == 0.0)

    def test_position(self, zero_path):
        """Every distance yields the single position."""
        for distance in (-1.0, 0.0, 1.0):
            assert_allclose(zero_path.get_position_at_distance(distance), [1.0, 2.0, 3.0])

    def test_tangent_falls_back_to_forward(self, zero_path):
        """No direction can be derived, FORWARD is returned."""
        assert_allclose(zero_path.get_tangent_at_distance(0.0), FORWARD)
        assert_allclose(zero_path.get_tangent_at_distance(1.0), FORWARD)

    def test_tangent_custom_default_direction(self, zero_path):
        """The caller can supply the fallback direction."""
        result = zero_path.get_tangent_at_distance(0.0, default_direction=(1.0, 0.0, 0.0))
        assert_allclose(result, [1.0, 0.0, 0.0])

    def test_tiny_distance_returns_end_point(self):
        """A zero length path ends immediately, for non-integer coordinates as well."""
        flight_path = FlightPath([(0.1, 0.7, 1.3), (0.1, 0.7, 1.3)])

        assert flight_path.total_arc_length == 0.0
        assert flight_path.is_at_end(0.0)
        assert np.array_equal(flight_path.get_position_at_distance(1.0e-15), [0.1, 0.7, 1.3])

    def test_normalized_time_helpers(self, zero_path):
        """Time conversions and estimation stay finite."""
        assert zero_path.is_at_end(0.0)
        assert zero_path.get_time_at_distance(5.0) == 0.0
        assert zero_path.get_distance_at_time(0.5) == 0.0
        assert zero_path.get_estimated_duration(1.0) == 0.0

    def test_visualization_points(self, zero_path):
        """All sampled points are the single position."""
        points = zero_path.generate_visualization_points(4)
        assert_allclose(points, np.tile([1.0, 2.0, 3.0], (4, 1)))

    def test_warnings_are_logged(self, caplog):
        """Coincident waypoints and zero length are reported."""
        with caplog.at_level(logging.WARNING, logger="flightpath.flight_path"):
            FlightPath([(0.0, 0.0, 0.0), (0.0, 0.0, 0.0)])

        messages = [record.getMessage() for record in caplog.records]
        assert any("coincide" in message for message in messages)
        assert any("zero total arc length" in message for message in messages)


###############################################################################
# Coincident intermediate waypoints
###############################################################################


class TestCoincidentWaypoints:
    """Test class for paths with duplicate consecutive waypoints."""

    WAYPOINTS = [(0.0, 0.0, 0.0), (5.0, 0.0, 0.0), (5.0, 0.0, 0.0), (10.0, 0.0, 0.0)]

    def test_queries_stay_finite(self):
        """Positions and tangents along the whole path are finite."""
        flight_path = FlightPath(self.WAYPOINTS)

        for distance in np.linspace(0.0, flight_path.total_arc_length, 101):
            position = flight_path.get_position_at_distance(distance)
            tangent = flight_path.get_tangent_at_distance(distance)
            assert np.all(np.isfinite(position))
            assert np.all(np.isfinite(tangent))
            assert np.linalg.norm(tangent) == pytest.approx(1.0)

    def test_duplicate_waypoint_is_passed(self):
        """Both segment boundaries around the duplicate map to the waypoint."""
        flight_path = FlightPath(self.WAYPOINTS, samples_per_segment=10)
        table = flight_path.arc_length_table

        assert np.all(np.diff(table) >= 0.0)
        assert flight_path.total_arc_length >= 10.0
        assert_allclose(flight_path.get_position_at_distance(table[10]), [5.0, 0.0, 0.0], atol=1e-9)
        assert_allclose(flight_path.get_position_at_distance(table[20]), [5.0, 0.0, 0.0], atol=1e-9)

    def test_warning_names_the_waypoints(self, caplog):
        """The warning names the coincident pair."""
        with caplog.at_level(logging.WARNING, logger="flightpath.flight_path"):
            FlightPath(self.WAYPOINTS)

        assert any("Waypoints 1 and 2 coincide" in record.getMessage() for record in caplog.records)


###############################################################################
# Invalid construction
###############################################################################


class TestInvalidConstruction:
    """Test class for construction errors."""

    @pytest.mark.parametrize("waypoints", [[], [(0.0, 0.0, 0.0)], np.empty((0, 3))])
    def test_insufficient_waypoints(self, waypoints):
        """Construction needs spawn and target."""
        with pytest.raises(InsufficientWaypointsError) as exc_info:
            FlightPath(waypoints)
        assert isinstance(exc_info.value, FlightPathError)

    def test_malformed_shape(self):
        """A flat list is not a waypoint sequence."""
        with pytest.raises(ValueError):
            FlightPath([0.0, 1.0, 2.0])

    @pytest.mark.parametrize("samples", [0, 1])
    def test_samples_below_two(self, samples):
        """The table needs at least two samples per segment."""
        with pytest.raises(ValueError):
            FlightPath([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)], samples_per_segment=samples)
