"""SVG debug drawings of flight paths."""

from __future__ import annotations

import dataclasses
import gzip
import io
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np
import svgwrite
import svgwrite.shapes
from numpy.typing import NDArray
from svgwrite.extensions import Inkscape

from flightpath.common import DEFAULT_VISUALIZATION_POINTS, PointsLike
from flightpath.config import FlightPathConfig
from flightpath.flight_path import FlightPath
from flightpath.geom import GeomMath

# Columns of a 3D point used as (horizontal, vertical) drawing coordinates
_PROJECTION_AXES: Dict[str, Tuple[int, int]] = {
    "xz": (0, 2),  # top view
    "xy": (0, 1),  # front view
    "zy": (2, 1),  # side view
}


###############################################################################
# VisualizationSettings
###############################################################################


@dataclass(frozen=True)
class VisualizationSettings:
    """Explicit settings for one debug drawing.

    Attributes:
        show_spline_paths: Draw the sampled spline of each path.
        show_waypoint_indicators: Draw the intermediate waypoints.
        show_spawn_point_indicators: Draw the spawn point of each path.
        show_target_point_indicators: Draw the target point of each path.
        samples: Number of points sampled per path.
        projection: Plane to project on, one of "xz", "xy", "zy".
        path_color: Stroke colour of the spline.
        waypoint_color: Fill colour of intermediate waypoints.
        spawn_color: Fill colour of spawn points.
        target_color: Fill colour of target points.
        path_width: Stroke width of the spline in world units.
        waypoint_scale: Diameter of indicators in world units.
        margin: Space around the drawing in world units.
        canvas_width_px: Width of the SVG canvas, the height follows the aspect ratio.
    """

    # pylint: disable=too-many-instance-attributes
    show_spline_paths: bool = True
    show_waypoint_indicators: bool = True
    show_spawn_point_indicators: bool = True
    show_target_point_indicators: bool = True
    samples: int = DEFAULT_VISUALIZATION_POINTS
    projection: str = "xz"
    path_color: str = "cyan"
    waypoint_color: str = "#ff9900"
    spawn_color: str = "green"
    target_color: str = "red"
    path_width: float = 0.05
    waypoint_scale: float = 0.25
    margin: float = 1.0
    canvas_width_px: int = 800

    def __post_init__(self):
        if self.projection not in _PROJECTION_AXES:
            raise ValueError(f"Unknown projection '{self.projection}', expected one of {sorted(_PROJECTION_AXES)}")

    @classmethod
    def from_config(cls, config: FlightPathConfig, **overrides) -> VisualizationSettings:
        """Create settings using the styling of a FlightPathConfig, keyword arguments take precedence."""
        kwargs = {
            "samples": config.spline_visualization_samples,
            "path_color": config.spline_path_color,
            "waypoint_color": config.intermediate_waypoint_color,
            "path_width": config.spline_path_width,
            "waypoint_scale": config.waypoint_indicator_scale,
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    def with_all(self, enabled: bool) -> VisualizationSettings:
        """Return a copy with all show_* toggles set to the given state."""
        return dataclasses.replace(
            self,
            show_spline_paths=enabled,
            show_waypoint_indicators=enabled,
            show_spawn_point_indicators=enabled,
            show_target_point_indicators=enabled,
        )


###############################################################################
# FlightPathSvgRenderer
###############################################################################


class FlightPathSvgRenderer:
    """Draws flight paths projected onto a plane as SVG.

    The drawing has its own coordinate-system left-to-right and bottom-to-top.
    Contains groups/layers:
        - root       -- (group) just contains the y-flip
            - debug  -- hidden->display="none", phantom points and control polygon
            - main   -- spline paths and waypoint indicators
    """

    def __init__(self, settings: VisualizationSettings = VisualizationSettings()):
        self.settings = settings

    def project(self, points: PointsLike) -> NDArray[np.float64]:
        """Project 3D points onto the configured plane, result has shape (n, 2)."""
        return GeomMath.as_points(points)[:, _PROJECTION_AXES[self.settings.projection]]

    def render(self, paths: Iterable[FlightPath], include_debug_layer: bool = False) -> svgwrite.Drawing:
        """
        Render the given paths into a new SVG drawing.

        Args:
            paths (Iterable[FlightPath]): paths to draw
            include_debug_layer (bool, optional): True if the drawing should contain the debug layer.
                Defaults to False.

        Returns:
            svgwrite.Drawing: the drawing
        """
        paths = list(paths)
        settings = self.settings

        sampled = [self.project(path.generate_visualization_points(settings.samples)) for path in paths]
        phantoms = [self.project(path.waypoints_with_phantoms) for path in paths]

        drawing = self._create_drawing(sampled + phantoms)
        root_group = drawing.g(id="root", transform="scale(1,-1)")
        inkscape = Inkscape(drawing)
        main_layer = inkscape.layer(label="main", locked=False)
        debug_layer = inkscape.layer(label="debug", locked=False, display="none")

        for path, path_points, phantom_points in zip(paths, sampled, phantoms):
            if settings.show_spline_paths:
                main_layer.add(self._polyline(drawing, path_points, settings.path_color, settings.path_width))

            waypoints = self.project(path.waypoints)
            if settings.show_waypoint_indicators:
                for point in waypoints[1:-1]:
                    main_layer.add(self._indicator(drawing, point, settings.waypoint_color))
            if settings.show_spawn_point_indicators:
                main_layer.add(self._indicator(drawing, waypoints[0], settings.spawn_color))
            if settings.show_target_point_indicators:
                main_layer.add(self._indicator(drawing, waypoints[-1], settings.target_color))

            # control polygon including the phantom points
            control_polygon = self._polyline(drawing, phantom_points, "gray", settings.path_width / 2)
            control_polygon.dasharray([settings.path_width * 4, settings.path_width * 2])
            debug_layer.add(control_polygon)
            for point in (phantom_points[0], phantom_points[-1]):
                debug_layer.add(self._indicator(drawing, point, "gray"))

        drawing.add(root_group)
        if include_debug_layer:
            root_group.add(debug_layer)
        root_group.add(main_layer)
        return drawing

    def save_as(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        paths: Iterable[FlightPath],
        filename: str,
        include_debug_layer: bool = False,
        pretty: bool = False,
        indent: int = 2,
        compressed: bool = False,
    ):
        """Save as SVG file

        Args:
            paths (Iterable[FlightPath]): paths to draw
            filename (str): path and filename
            include_debug_layer (bool, optional): True if file should contain debug_layer. Defaults to False.
            pretty (bool, optional): True for easy readable output. Defaults to False.
            indent (int, optional): Indention if pretty is enabled. Defaults to 2 spaces.
            compressed (bool, optional): Save as compressed svgz-file. Defaults to False.
        """
        drawing = self.render(paths, include_debug_layer)

        svg_buffer = io.StringIO()
        drawing.write(svg_buffer, pretty=pretty, indent=indent)
        output_data = svg_buffer.getvalue().encode("utf-8")
        if compressed:
            output_data = gzip.compress(output_data)

        with open(filename, "wb") as svg_file:
            svg_file.write(output_data)

    ########################################################################
    # Helpers
    ########################################################################

    def _create_drawing(self, projected: Sequence[NDArray[np.float64]]) -> svgwrite.Drawing:
        non_empty = [points for points in projected if points.shape[0] > 0]
        if non_empty:
            all_points = np.vstack(non_empty)
            xmin, ymin = all_points.min(axis=0) - self.settings.margin
            xmax, ymax = all_points.max(axis=0) + self.settings.margin
        else:
            xmin, ymin, xmax, ymax = 0.0, 0.0, 1.0, 1.0

        width = max(float(xmax - xmin), 1.0e-6)
        height = max(float(ymax - ymin), 1.0e-6)
        canvas_width = self.settings.canvas_width_px
        canvas_height = max(1, int(round(canvas_width * height / width)))

        # the root group flips y, so the visible y-range is [-ymax, -ymin]
        return svgwrite.Drawing(
            size=(f"{canvas_width}px", f"{canvas_height}px"),
            viewBox=f"{xmin} {-ymax} {width} {height}",
            profile="full",
        )

    @staticmethod
    def _polyline(
        drawing: svgwrite.Drawing, points: NDArray[np.float64], color: str, width: float
    ) -> svgwrite.shapes.Polyline:
        coords: List[Tuple[float, float]] = [(float(x), float(y)) for x, y in points]
        return drawing.polyline(points=coords, stroke=color, stroke_width=width, fill="none")

    def _indicator(self, drawing: svgwrite.Drawing, point: NDArray[np.float64], color: str) -> svgwrite.shapes.Circle:
        return drawing.circle(center=(float(point[0]), float(point[1])), r=self.settings.waypoint_scale / 2, fill=color)


def render_debug_svg(
    paths: Iterable[FlightPath], filename: str, settings: VisualizationSettings = VisualizationSettings()
) -> None:
    """Save a debug drawing of the given paths, including the debug layer."""
    FlightPathSvgRenderer(settings).save_as(paths, filename, include_debug_layer=True, pretty=True)
