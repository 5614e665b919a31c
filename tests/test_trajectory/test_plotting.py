import matplotlib

matplotlib.use("Agg")

from sprayteach.plotting import plot_drawing  # noqa: E402
from sprayteach.primitives import (  # noqa: E402
    Arc,
    Block,
    Circle,
    Drawing,
    Insert,
    Line,
    Polyline,
)
from sprayteach.trajectory import select, set_reversed  # noqa: E402


def test_plot_drawing_to_png(tmp_path):
    circle = Circle((5, 5), 2.0)
    drawing = Drawing(
        [
            Line((0, 0), (10, 0)),
            Arc((0, 0), 3.0, 0.0, 90.0),
            circle,
            Polyline([(0, 10, 0.5), (10, 10, 0.0)]),
            Insert("B", (20, 0), rotation=30.0),
            Line((-100, -100), (100, 100), layer="DEFPOINTS"),
        ]
    )
    drawing.add_block(Block("B", [Line((0, 0), (1, 1))]))
    trajectories = [select(circle), set_reversed(select(Line((0, 0), (10, 0))), True)]
    file_name = tmp_path / "preview.png"

    plot_drawing(drawing, trajectories, file_name=str(file_name))

    assert file_name.exists()
    assert file_name.stat().st_size > 0


def test_plot_empty_drawing(tmp_path):
    file_name = tmp_path / "empty.png"
    plot_drawing(Drawing(), file_name=str(file_name), width=200, height=200)
    assert file_name.exists()
