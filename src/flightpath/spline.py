"""Catmull-Rom spline handling utilities for interpolation and arc-length parameterization."""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np
from numpy.typing import NDArray

from flightpath.common import (
    DEFAULT_SAMPLES_PER_SEGMENT,
    DEFAULT_TENSION,
    InsufficientWaypointsError,
    PointLike,
    PointsLike,
)
from flightpath.geom import GeomMath

# Basis matrix of the position polynomial, rows are the coefficients of t^3, t^2, t, 1
# for the control points p0, p1, p2, p3 (columns)
_POINT_BASIS: NDArray[np.float64] = np.array(
    [
        [-1.0, 3.0, -3.0, 1.0],
        [2.0, -5.0, 4.0, -1.0],
        [-1.0, 0.0, 1.0, 0.0],
        [0.0, 2.0, 0.0, 0.0],
    ],
    dtype=np.float64,
)


class CatmullRom:
    """Class to handle Catmull-Rom spline operations.

    A segment interpolates between p1 and p2 and uses the neighbors p0 and p3 to shape
    its curvature. A path through n waypoints is evaluated on the phantom extended
    sequence of n + 2 points, which yields n - 1 segments.

    Provides pure Python methods for single evaluations (used per query) and NumPy
    methods for evaluating many parameter values at once (used to build lookup tables).
    """

    ########################################################################
    # Single segment evaluation
    ########################################################################

    @staticmethod
    def point(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        p0: PointLike,
        p1: PointLike,
        p2: PointLike,
        p3: PointLike,
        t: float,
        tension: float = DEFAULT_TENSION,
    ) -> NDArray[np.float64]:
        """
        Calculate a point on a Catmull-Rom spline segment.

        P(t) = tension * ((-t^3 + 2t^2 - t) * p0 +
                          (3t^3 - 5t^2 + 2) * p1 +
                          (-3t^3 + 4t^2 + t) * p2 +
                          (t^3 - t^2) * p3)

        Args:
            p0: Control point before the segment start
            p1: Segment start point
            p2: Segment end point
            p3: Control point after the segment end
            t: Parameter value, clamped to [0, 1]
            tension: Tension parameter (0.5 for standard Catmull-Rom)

        Returns:
            Interpolated position on the spline
        """
        t = GeomMath.clamp01(float(t))
        t2 = t * t
        t3 = t2 * t

        c0 = -t3 + 2.0 * t2 - t
        c2 = -3.0 * t3 + 4.0 * t2 + t
        c3 = t3 - t2

        # the weights sum to 2, so the curve is evaluated relative to p1;
        # coincident control points then give exactly p1 * 2 * tension
        base = np.asarray(p1, dtype=np.float64)
        return 2.0 * tension * base + tension * (
            c0 * (np.asarray(p0, dtype=np.float64) - base)
            + c2 * (np.asarray(p2, dtype=np.float64) - base)
            + c3 * (np.asarray(p3, dtype=np.float64) - base)
        )

    @staticmethod
    def tangent(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        p0: PointLike,
        p1: PointLike,
        p2: PointLike,
        p3: PointLike,
        t: float,
        tension: float = DEFAULT_TENSION,
    ) -> NDArray[np.float64]:
        """
        Calculate the tangent (derivative) at a point on a Catmull-Rom spline segment.

        P'(t) = tension * ((-3t^2 + 4t - 1) * p0 +
                           (9t^2 - 10t) * p1 +
                           (-9t^2 + 8t + 1) * p2 +
                           (3t^2 - 2t) * p3)

        The result is not normalized, its magnitude is the parametric speed.

        Args:
            p0: Control point before the segment start
            p1: Segment start point
            p2: Segment end point
            p3: Control point after the segment end
            t: Parameter value, clamped to [0, 1]
            tension: Tension parameter (0.5 for standard Catmull-Rom)

        Returns:
            Tangent vector at t
        """
        t = GeomMath.clamp01(float(t))
        t2 = t * t

        c0 = -3.0 * t2 + 4.0 * t - 1.0
        c2 = -9.0 * t2 + 8.0 * t + 1.0
        c3 = 3.0 * t2 - 2.0 * t

        # the weights sum to 0, so p1 drops out of the relative form
        base = np.asarray(p1, dtype=np.float64)
        return tension * (
            c0 * (np.asarray(p0, dtype=np.float64) - base)
            + c2 * (np.asarray(p2, dtype=np.float64) - base)
            + c3 * (np.asarray(p3, dtype=np.float64) - base)
        )

    @staticmethod
    def points(
        control_points: Union[Sequence[PointLike], NDArray[np.float64]],
        ts: Union[Sequence[float], NDArray[np.float64]],
        tension: float = DEFAULT_TENSION,
    ) -> NDArray[np.float64]:
        """
        Evaluate a Catmull-Rom segment at many parameter values using NumPy.

        Args:
            control_points: The four control points p0, p1, p2, p3 (shape (4, dim))
            ts: Parameter values, each clamped to [0, 1]
            tension: Tension parameter (0.5 for standard Catmull-Rom)

        Returns:
            Array of shape (len(ts), dim) with the interpolated positions
        """
        ctrl = np.asarray(control_points, dtype=np.float64)
        t = np.clip(np.asarray(ts, dtype=np.float64), 0.0, 1.0)

        # powers: shape (n, 4) -> [t^3, t^2, t, 1]
        powers = np.column_stack([t * t * t, t * t, t, np.ones_like(t)])
        coefficients = powers @ _POINT_BASIS  # shape (n, 4), one weight per control point
        base = ctrl[1]
        return 2.0 * tension * base + tension * (coefficients @ (ctrl - base))

    ########################################################################
    # Phantom points
    ########################################################################

    @staticmethod
    def add_phantom_points(waypoints: PointsLike) -> NDArray[np.float64]:
        """
        Add phantom points at start and end of the waypoints by linear extrapolation.

        The phantom points make the first and last real segments interpolatable:
            phantom_start = 2 * w[0] - w[1]
            phantom_end   = 2 * w[n-1] - w[n-2]

        Args:
            waypoints: Original waypoints (minimum 2 points)

        Returns:
            Array of n + 2 points with the phantom points at both ends

        Raises:
            InsufficientWaypointsError: If fewer than 2 waypoints are given
        """
        pts = GeomMath.as_points(waypoints)
        if pts.shape[0] < 2:
            raise InsufficientWaypointsError(f"Need at least 2 waypoints to build a path, got {pts.shape[0]}")

        phantom_start = 2.0 * pts[0] - pts[1]
        phantom_end = 2.0 * pts[-1] - pts[-2]
        return np.vstack([phantom_start, pts, phantom_end])

    ########################################################################
    # Arc length
    ########################################################################

    @classmethod
    def segment_arc_length(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        cls,
        p0: PointLike,
        p1: PointLike,
        p2: PointLike,
        p3: PointLike,
        samples: int = DEFAULT_SAMPLES_PER_SEGMENT,
        tension: float = DEFAULT_TENSION,
    ) -> float:
        """
        Approximate the arc length of a single segment by summing chord lengths.

        Args:
            p0: Control point before the segment start
            p1: Segment start point
            p2: Segment end point
            p3: Control point after the segment end
            samples: Number of chords, values below 2 are raised to 2
            tension: Tension parameter

        Returns:
            Approximate arc length of the segment
        """
        samples = max(2, int(samples))
        sampled = cls.points([p0, p1, p2, p3], np.linspace(0.0, 1.0, samples + 1), tension)
        return float(np.sum(np.linalg.norm(np.diff(sampled, axis=0), axis=1)))

    @classmethod
    def build_arc_length_table(
        cls,
        extended_points: PointsLike,
        samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT,
        tension: float = DEFAULT_TENSION,
    ) -> NDArray[np.float64]:
        """
        Build a cumulative arc-length lookup table for a whole spline path.

        Segment i uses the extended points [i, i+1, i+2, i+3]. Every segment is sampled
        at samples_per_segment uniform steps of t; entry k of the table holds the summed
        chord length up to sample k. The table has num_segments * samples_per_segment + 1
        entries, starts with 0.0 and is non-decreasing.

        Args:
            extended_points: Waypoints including phantom points (minimum 4 points)
            samples_per_segment: Samples per segment (minimum 2)
            tension: Tension parameter

        Returns:
            Cumulative arc lengths at each sample point

        Raises:
            InsufficientWaypointsError: If fewer than 4 extended points are given
            ValueError: If samples_per_segment is below 2
        """
        pts = GeomMath.as_points(extended_points)
        if pts.shape[0] < 4:
            raise InsufficientWaypointsError(
                f"Need at least 4 points (including phantom points) to build an arc-length table, got {pts.shape[0]}"
            )
        if samples_per_segment < 2:
            raise ValueError(f"samples_per_segment must be at least 2, got {samples_per_segment}")

        num_segments = pts.shape[0] - 3
        ts = np.linspace(0.0, 1.0, samples_per_segment + 1)

        chord_lengths = np.empty(num_segments * samples_per_segment, dtype=np.float64)
        for segment in range(num_segments):
            sampled = cls.points(pts[segment : segment + 4], ts, tension)
            start = segment * samples_per_segment
            chord_lengths[start : start + samples_per_segment] = np.linalg.norm(np.diff(sampled, axis=0), axis=1)

        table = np.empty(chord_lengths.shape[0] + 1, dtype=np.float64)
        table[0] = 0.0
        np.cumsum(chord_lengths, out=table[1:])
        return table
