"""Example to generate one flight path per difficulty level and draw them as SVG.

This script demonstrates how to:

1. Create a FlightPathGenerator with pre-placed candidate waypoints.
2. Generate reproducible paths for all difficulty levels using fixed seeds.
3. Print the estimated flight duration of each path.
4. Save the paths (top view) including the hidden debug layer.

Run with:

    PYTHONPATH=./src python3 -m examples.flightpath.paths_by_difficulty_svg
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from flightpath.config import FlightPathConfig
from flightpath.flight_path import FlightPath
from flightpath.generator import FlightPathGenerator
from flightpath.visualization import FlightPathSvgRenderer, VisualizationSettings

OUTPUT_FILE: Path = Path("data/output/example/svg/flight_paths_by_difficulty.svg")

SPAWN_POINT = (-9.0, 2.0, -6.0)
TARGET_POINT = (9.0, 3.0, 6.0)
PREPLACED_POINTS = [(-2.0, 4.0, -1.0), (3.0, 2.5, 2.0), (0.0, 5.0, 4.0)]
FLIGHT_SPEED = 4.0  # world units per second


def generate_paths(generator: FlightPathGenerator) -> List[FlightPath]:
    """Generate one path per difficulty level, the level is used as seed."""
    paths = []
    for difficulty_level in range(1, 6):
        path = generator.generate_path(SPAWN_POINT, TARGET_POINT, difficulty_level, seed=difficulty_level)
        print(f"Difficulty {difficulty_level}: {path}, duration {path.get_estimated_duration(FLIGHT_SPEED):.2f}s")
        paths.append(path)
    return paths


def main(output_file: Path = OUTPUT_FILE):
    """Generate the paths and save them as SVG file."""
    config = FlightPathConfig()
    generator = FlightPathGenerator(config, preplaced_points=PREPLACED_POINTS)
    paths = generate_paths(generator)

    output_file.parent.mkdir(parents=True, exist_ok=True)
    renderer = FlightPathSvgRenderer(VisualizationSettings.from_config(config, projection="xz"))
    renderer.save_as(paths, str(output_file), include_debug_layer=True, pretty=True)
    print(f"file saved: {output_file}")


if __name__ == "__main__":
    main()
