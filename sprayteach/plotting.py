import logging
from typing import Optional, Sequence

from sprayteach.bounding_box import BoundingBox, drawing_bounds, union_all
from sprayteach.discretize import discretize_primitive, path_points_2d
from sprayteach.primitives import Drawing, Insert
from sprayteach.settings import TeachSettings
from sprayteach.trajectory import TrajectoryPrimitive

logger = logging.getLogger(__name__)


def plot_drawing(
    drawing: Drawing,
    trajectories: Sequence[TrajectoryPrimitive] = (),
    settings: Optional[TeachSettings] = None,
    file_name: Optional[str] = None,
    width: int = 800,
    height: int = 600,
    margin: float = 0.1,
) -> None:
    """
    Render a drawing and its taught paths.

    Args:
        drawing: Parsed drawing; entities on helper layers are skipped.
        trajectories: Taught trajectories, drawn in colour with a start marker.
        settings: Resolution and ignored layers (default: TeachSettings())
        file_name: Path to save the image. If None, displays in a UI window instead.
        width: Image width in pixels (default: 800)
        height: Image height in pixels (default: 600)
        margin: Margin around the drawing as a fraction of size (default: 0.1)

    Raises:
        ImportError: If matplotlib is not installed
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError(
            "matplotlib is required for path previews. Install with: pip install matplotlib"
        )

    settings = settings or TeachSettings()
    ignored = {name.upper() for name in settings.ignore_layers}

    fig, ax = plt.subplots(figsize=(width / 100, height / 100), dpi=100)
    ax.set_aspect("equal")

    for entity in drawing.entities:
        if entity.layer.upper() in ignored:
            continue
        if isinstance(entity, Insert):
            # block contents are only used for extents
            continue
        points = discretize_primitive(entity, settings.resolution_degrees)
        if points:
            xs, ys = path_points_2d(points)
            ax.plot(xs, ys, "-", color="0.6", linewidth=1)

    path_boxes = []
    colors = plt.rcParams["axes.prop_cycle"].by_key()["color"]
    for i, trajectory in enumerate(trajectories):
        points = trajectory.path(settings.resolution_degrees)
        xs, ys = path_points_2d(points)
        color = colors[i % len(colors)]
        ax.plot(xs, ys, "-", color=color, linewidth=2)
        ax.plot(xs[0], ys[0], "o", color=color, markersize=5)
        path_boxes.append(BoundingBox.from_points(points))

    bounds = union_all([drawing_bounds(drawing, settings.ignore_layers)] + path_boxes)
    if bounds is not None:
        bounds = bounds.expanded(margin)
        ax.set_xlim(bounds.min_x, bounds.max_x)
        ax.set_ylim(bounds.min_y, bounds.max_y)
    else:
        logger.debug("Nothing to plot")

    ax.grid(True, alpha=0.3)
    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_title("Spray paths")
    plt.tight_layout()

    if file_name:
        plt.savefig(file_name, dpi=100, bbox_inches="tight")
        plt.close(fig)
    else:
        plt.show()
