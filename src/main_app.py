"""Main application"""

import logging

from flightpath.config import FlightPathConfig
from flightpath.generator import FlightPathGenerator
from flightpath.visualization import FlightPathSvgRenderer, VisualizationSettings


def main():
    """Main"""
    logging.basicConfig(level=logging.INFO)

    config = FlightPathConfig()
    generator = FlightPathGenerator(config)
    path = generator.generate_path((-8.0, 2.0, -8.0), (8.0, 3.0, 8.0), difficulty_level=3, seed=42)

    renderer = FlightPathSvgRenderer(VisualizationSettings.from_config(config))
    renderer.save_as([path], "main_app.svg", include_debug_layer=True, pretty=True)

    print(f"file saved: {path}")


if __name__ == "__main__":
    main()
