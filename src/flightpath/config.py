"""Configuration of flight path generation and visualization."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from flightpath.common import DEFAULT_SAMPLES_PER_SEGMENT, DEFAULT_TENSION, DEFAULT_VISUALIZATION_POINTS, PointLike
from flightpath.geom import Bounds3D, GeomMath

logger = logging.getLogger(__name__)

###############################################################################
# DifficultyWaypointSettings
###############################################################################


@dataclass(frozen=True)
class DifficultyWaypointSettings:
    """Number of intermediate waypoints generated for one difficulty level.

    Attributes:
        difficulty_level: The difficulty level this setting applies to (1-based).
        min_waypoints: Minimum number of intermediate waypoints.
        max_waypoints: Maximum number of intermediate waypoints.
        chance_of_max_waypoints: Weight towards max_waypoints (0 = always min, 1 = mostly max).
    """

    difficulty_level: int = 1
    min_waypoints: int = 1
    max_waypoints: int = 2
    chance_of_max_waypoints: float = 0.5

    def get_random_waypoint_count(self, rng: Optional[np.random.Generator] = None) -> int:
        """Draw a waypoint count from [min_waypoints, max_waypoints].

        Args:
            rng: Random generator to use. A fresh unseeded generator is used if None.

        Returns:
            Number of intermediate waypoints to generate
        """
        if self.min_waypoints == self.max_waypoints:
            return self.min_waypoints

        rng = rng if rng is not None else np.random.default_rng()
        random_value = float(rng.random())

        # chance_of_max_waypoints shifts the distribution towards the upper end
        value_range = self.max_waypoints - self.min_waypoints
        weighted_value = random_value * (1.0 + self.chance_of_max_waypoints) - self.chance_of_max_waypoints * 0.5
        weighted_value = GeomMath.clamp01(weighted_value)

        return self.min_waypoints + int(round(weighted_value * value_range))

    def validated(self, difficulty_level: Optional[int] = None) -> DifficultyWaypointSettings:
        """Return a copy with min <= max, chance in [0, 1] and optionally a new level."""
        return dataclasses.replace(
            self,
            difficulty_level=self.difficulty_level if difficulty_level is None else difficulty_level,
            min_waypoints=min(self.min_waypoints, self.max_waypoints),
            chance_of_max_waypoints=GeomMath.clamp01(self.chance_of_max_waypoints),
        )

    def to_dict(self) -> dict:
        """Convert the settings to a dictionary for serialization."""
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> DifficultyWaypointSettings:
        """Create DifficultyWaypointSettings from a dictionary."""
        return cls(
            difficulty_level=data.get("difficulty_level", 1),
            min_waypoints=data.get("min_waypoints", 1),
            max_waypoints=data.get("max_waypoints", 2),
            chance_of_max_waypoints=data.get("chance_of_max_waypoints", 0.5),
        )


DEFAULT_WAYPOINTS_BY_DIFFICULTY: Tuple[DifficultyWaypointSettings, ...] = (
    DifficultyWaypointSettings(1, 1, 2, 0.7),  # weighted toward max
    DifficultyWaypointSettings(2, 1, 2, 0.5),
    DifficultyWaypointSettings(3, 1, 3, 0.5),
    DifficultyWaypointSettings(4, 0, 3, 0.5),
    DifficultyWaypointSettings(5, 0, 3, 0.3),  # weighted toward min
)


###############################################################################
# FlightPathConfig
###############################################################################


@dataclass(frozen=True)
class FlightPathConfig:
    """Configuration for flight path generation.

    Attributes:
        spline_tension: Spline tension, 0.5 is standard Catmull-Rom.
        arc_length_samples: Samples per segment of the arc-length table.
        min_flight_duration: Minimum flight duration in seconds.
        flight_zone: Bounds that generated waypoints are clamped into.
        min_height_above_ground: Lowest allowed waypoint height (y).
        max_height_above_ground: Highest allowed waypoint height (y).
        lateral_deviation_range: Max sideways offset of dynamic waypoints.
        vertical_deviation_range: Max vertical offset of dynamic waypoints.
        min_distance_from_endpoints: Min distance of intermediates to spawn and target.
        prefer_preplaced_waypoints: Use pre-placed candidate points before dynamic ones.
        waypoints_by_difficulty: Waypoint count settings, index = difficulty level - 1.
        spline_path_color: Colour of the path in debug drawings.
        intermediate_waypoint_color: Colour of intermediate waypoint indicators.
        spline_path_width: Stroke width of the path in debug drawings.
        waypoint_indicator_scale: Size of waypoint indicators in debug drawings.
        spline_visualization_samples: Number of points drawn per path.
    """

    # pylint: disable=too-many-instance-attributes
    spline_tension: float = DEFAULT_TENSION
    arc_length_samples: int = DEFAULT_SAMPLES_PER_SEGMENT

    min_flight_duration: float = 3.0

    flight_zone: Bounds3D = field(default_factory=Bounds3D)
    min_height_above_ground: float = 1.5
    max_height_above_ground: float = 6.0

    lateral_deviation_range: float = 3.0
    vertical_deviation_range: float = 1.5
    min_distance_from_endpoints: float = 2.0
    prefer_preplaced_waypoints: bool = True

    waypoints_by_difficulty: Tuple[DifficultyWaypointSettings, ...] = DEFAULT_WAYPOINTS_BY_DIFFICULTY

    spline_path_color: str = "cyan"
    intermediate_waypoint_color: str = "#ff9900"
    spline_path_width: float = 0.05
    waypoint_indicator_scale: float = 0.25
    spline_visualization_samples: int = DEFAULT_VISUALIZATION_POINTS

    def __post_init__(self):
        object.__setattr__(self, "waypoints_by_difficulty", tuple(self.waypoints_by_difficulty))

    def get_waypoint_settings(self, difficulty_level: int) -> DifficultyWaypointSettings:
        """Waypoint settings for a difficulty level, the level is clamped to the configured range."""
        if not self.waypoints_by_difficulty:
            logger.warning("No waypoint settings configured, returning default")
            return DifficultyWaypointSettings()

        index = int(GeomMath.clamp(difficulty_level - 1, 0, len(self.waypoints_by_difficulty) - 1))
        return self.waypoints_by_difficulty[index]

    def get_random_waypoint_count(self, difficulty_level: int, rng: Optional[np.random.Generator] = None) -> int:
        """Draw the number of intermediate waypoints for a difficulty level."""
        return self.get_waypoint_settings(difficulty_level).get_random_waypoint_count(rng)

    def clamp_to_flight_zone(self, position: PointLike) -> NDArray[np.float64]:
        """
        Clamp a position into the flight zone (x, z) and the height constraints (y).

        Args:
            position: The position to clamp

        Returns:
            The clamped position
        """
        clamped = self.flight_zone.clamp(position)
        clamped[1] = GeomMath.clamp(
            float(GeomMath.as_point(position)[1]), self.min_height_above_ground, self.max_height_above_ground
        )
        return clamped

    def is_within_flight_zone(self, position: PointLike) -> bool:
        """True if the position lies in the flight zone and within the height constraints."""
        if not self.flight_zone.contains(position):
            return False
        height = float(GeomMath.as_point(position)[1])
        return self.min_height_above_ground <= height <= self.max_height_above_ground

    def validated(self) -> FlightPathConfig:
        """Return a copy with all values clamped to their valid ranges."""
        min_height = min(self.min_height_above_ground, self.max_height_above_ground)

        difficulties = self.waypoints_by_difficulty or (DifficultyWaypointSettings(),)
        difficulties = tuple(settings.validated(difficulty_level=i + 1) for i, settings in enumerate(difficulties))

        return dataclasses.replace(
            self,
            spline_tension=GeomMath.clamp01(self.spline_tension),
            arc_length_samples=int(GeomMath.clamp(self.arc_length_samples, 10, 50)),
            min_flight_duration=GeomMath.clamp(self.min_flight_duration, 1.0, 10.0),
            min_height_above_ground=min_height,
            waypoints_by_difficulty=difficulties,
        )

    def to_dict(self) -> dict:
        """Convert the config to a dictionary for serialization."""
        data = {f.name: getattr(self, f.name) for f in dataclasses.fields(self)}
        data["flight_zone"] = self.flight_zone.to_dict()
        data["waypoints_by_difficulty"] = [settings.to_dict() for settings in self.waypoints_by_difficulty]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> FlightPathConfig:
        """Create a FlightPathConfig from a dictionary, missing keys use the defaults."""
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs = {key: value for key, value in data.items() if key in known}
        if "flight_zone" in kwargs:
            kwargs["flight_zone"] = Bounds3D.from_dict(kwargs["flight_zone"])
        if "waypoints_by_difficulty" in kwargs:
            kwargs["waypoints_by_difficulty"] = tuple(
                DifficultyWaypointSettings.from_dict(entry) for entry in kwargs["waypoints_by_difficulty"]
            )
        return cls(**kwargs)
