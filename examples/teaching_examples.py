"""
Example: Teaching spray paths from a drawing

This example picks primitives from a small drawing, saves the taught
configuration, reloads it against a re-parsed drawing and writes the values
sent to the controller.
"""

import logging

from sprayteach import (
    Arc,
    Circle,
    Configuration,
    Drawing,
    Line,
    Polyline,
    PrimitiveRegistry,
    TeachSettings,
    reconcile,
    select,
    select_polyline,
    set_reversed,
    set_z,
)
from sprayteach.export import write_send_data
from sprayteach.plotting import plot_drawing


def build_drawing():
    """Drawing as the parser would hand it over."""
    return Drawing(
        [
            Line((0, 0), (200, 0)),
            Arc((100, 50), 40.0, 0.0, 180.0),
            Circle((160, 120), 25.0),
            Polyline([(0, 150, 0.0), (80, 150, 0.5), (80, 220, 0.0)]),
        ]
    )


def example_teach(drawing):
    """Pick every entity and put it into one spray pass."""
    registry = PrimitiveRegistry.from_drawing(drawing)
    configuration = Configuration(product_name="Demo panel")
    spray_pass = configuration.add_pass("Primer")

    for key, primitive in registry.items():
        if isinstance(primitive, Polyline):
            for trajectory in select_polyline(primitive, key=key):
                spray_pass.add(trajectory)
        else:
            spray_pass.add(select(primitive, key=key))

    # spray the arc the other way round, 5 mm above the part
    spray_pass.replace_at(1, set_z(set_reversed(spray_pass.trajectories[1], True), 5.0))
    return configuration


def example_reload(configuration_file):
    """Reload a configuration and re-link it to a freshly parsed drawing."""
    configuration = Configuration.load(configuration_file)
    settings = TeachSettings()
    registry = PrimitiveRegistry.from_drawing(build_drawing())

    for spray_pass in configuration.spray_passes:
        result = reconcile(
            spray_pass.trajectories, registry, tolerance=settings.match_tolerance
        )
        spray_pass.trajectories = result.trajectories
        print(
            f"{spray_pass.name}: {len(result.resolved)} resolved, "
            f"{len(result.rebound)} rebound, {len(result.unmatched)} unmatched"
        )
    return configuration


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    print("=" * 80)
    print("Spray Path Teaching Examples")
    print("=" * 80)

    drawing = build_drawing()

    print("\n1. Teaching:")
    print("-" * 80)
    configuration = example_teach(drawing)
    configuration.save("demo_configuration.json")
    print(f"Saved {len(configuration.all_trajectories())} trajectories")

    print("\n2. Reloading:")
    print("-" * 80)
    configuration = example_reload("demo_configuration.json")

    print("\n3. Controller values and preview:")
    print("-" * 80)
    count = write_send_data(configuration, "demo_send_data.txt")
    print(f"Wrote {count} values to demo_send_data.txt")
    plot_drawing(drawing, configuration.all_trajectories(), file_name="demo_paths.png")
    print("Preview saved to demo_paths.png")
