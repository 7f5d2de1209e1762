"""Central module containing types, constants and exceptions for flight path handling."""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np
from numpy.typing import NDArray

###############################################################################
# Types
###############################################################################


# A single point or vector, either as plain sequence (x, y, z) or as numpy array of shape (3,)
PointLike = Union[Sequence[float], NDArray[np.float64]]

# A sequence of points, either as list of sequences or as numpy array of shape (n, 3)
PointsLike = Union[Sequence[Sequence[float]], NDArray[np.float64]]


###############################################################################
# Consts
###############################################################################


# 0.5 produces a standard Catmull-Rom spline
DEFAULT_TENSION: float = 0.5

# Samples per segment used to build the arc-length table
DEFAULT_SAMPLES_PER_SEGMENT: int = 20

# Number of points produced for debug visualization
DEFAULT_VISUALIZATION_POINTS: int = 50

# Bracket lengths and tangent magnitudes below this value are treated as zero
ZERO_LENGTH_EPSILON: float = 1.0e-4

# Fallback movement direction (y-up, z-forward world)
FORWARD: NDArray[np.float64] = np.array([0.0, 0.0, 1.0], dtype=np.float64)
FORWARD.flags.writeable = False

UP: NDArray[np.float64] = np.array([0.0, 1.0, 0.0], dtype=np.float64)
UP.flags.writeable = False

RIGHT: NDArray[np.float64] = np.array([1.0, 0.0, 0.0], dtype=np.float64)
RIGHT.flags.writeable = False


###############################################################################
# Exceptions
###############################################################################


class FlightPathError(Exception):
    """Base exception for flight path related errors."""


class InsufficientWaypointsError(FlightPathError, ValueError):
    """Raised when a path is requested from fewer than two waypoints."""
