import logging

import pytest

from sprayteach.equivalence import reconcile
from sprayteach.primitives import Arc, Circle, Drawing, Line, Polyline
from sprayteach.registry import PrimitiveRegistry
from sprayteach.trajectory import (
    TrajectoryPrimitive,
    select,
    select_polyline,
    set_key,
    set_reversed,
)


def _reload(trajectory, key=None):
    """Persist and restore a trajectory, as after a restart."""
    return set_key(TrajectoryPrimitive.from_json(trajectory.to_json()), key)


class TestReconcile:
    """Re-linking saved trajectories to a reloaded drawing."""

    @pytest.fixture
    def circle(self):
        return Circle((5, 5), 2.0)

    @pytest.fixture
    def registry(self, circle):
        return PrimitiveRegistry.from_drawing(
            Drawing(
                [
                    Line((0, 0), (1, 1)),
                    Arc((5, 5), 2.0, 0.0, 90.0),
                    Circle((5, 5), 3.0),
                    circle,
                    Circle((-5, 5), 2.0),
                ]
            )
        )

    def test_rebinds_matching_circle(self, registry, circle):
        """A saved circle finds the identical circle and nothing else."""
        saved = _reload(select(Circle((5, 5), 2.0)), key="Circle:stale")

        result = reconcile([saved], registry)

        assert result.rebound == [0]
        assert result.unmatched == []
        assert registry.resolve(result.trajectories[0].primitive_key) is circle
        assert result.trajectories[0].primitive_key == registry.key_for(circle)

    def test_trajectory_without_key(self, registry, circle):
        saved = _reload(select(Circle((5, 5), 2.0)), key=None)
        result = reconcile([saved], registry)
        assert registry.resolve(result.trajectories[0].primitive_key) is circle

    def test_valid_key_is_kept(self, registry, circle):
        saved = select(Circle((5, 5), 2.0), key=registry.key_for(circle))
        result = reconcile([saved], registry)

        assert result.resolved == [0]
        assert result.trajectories[0] is saved

    def test_key_of_wrong_type_is_rebound(self, registry):
        line_key = registry.key_for(next(p for _, p in registry.items()))
        saved = _reload(select(Circle((5, 5), 2.0)), key=line_key)

        result = reconcile([saved], registry)

        assert result.rebound == [0]
        assert registry.resolve(result.trajectories[0].primitive_key).primitive_type == "Circle"

    def test_arc_matches_arc_not_circle(self, registry):
        saved = _reload(select(Arc((5, 5), 2.0, 0.0, 90.0)))
        result = reconcile([saved], registry)

        matched = registry.resolve(result.trajectories[0].primitive_key)
        assert isinstance(matched, Arc)

    def test_reversed_line_still_matches(self, registry):
        saved = _reload(set_reversed(select(Line((1, 1), (0, 0))), True))
        result = reconcile([saved], registry)
        assert result.rebound == [0]

    def test_matches_within_tolerance(self, registry, circle):
        saved = _reload(select(Circle((5.0004, 5), 2.0003)))
        result = reconcile([saved], registry)
        assert registry.resolve(result.trajectories[0].primitive_key) is circle

    def test_matches_are_not_consumed(self, registry, circle):
        first = _reload(select(Circle((5, 5), 2.0)))
        second = _reload(set_reversed(select(Circle((5, 5), 2.0)), True))

        result = reconcile([first, second], registry)

        keys = {t.primitive_key for t in result.trajectories}
        assert keys == {registry.key_for(circle)}

    def test_first_match_in_drawing_order(self):
        near = Line((0, 0), (10, 0))
        nearer = Line((0.0002, 0), (10, 0))
        registry = PrimitiveRegistry([near, nearer])
        saved = _reload(select(Line((0.0001, 0), (10, 0))))

        result = reconcile([saved], registry)

        assert registry.resolve(result.trajectories[0].primitive_key) is near

    def test_unmatched_keeps_stale_key(self, registry, caplog):
        saved = _reload(select(Circle((50, 50), 2.0)), key="Circle:stale")

        with caplog.at_level(logging.WARNING):
            result = reconcile([saved], registry)

        assert result.unmatched == [0]
        assert not result.complete
        assert result.trajectories[0].primitive_key == "Circle:stale"
        assert "keeping stale reference" in caplog.text

    def test_order_is_preserved(self, registry):
        trajectories = [
            _reload(select(Circle((50, 50), 2.0))),
            _reload(select(Circle((5, 5), 2.0))),
        ]
        result = reconcile(trajectories, registry)

        assert result.unmatched == [0]
        assert result.rebound == [1]
        assert [t.primitive_type for t in result.trajectories] == ["Circle", "Circle"]


class TestReconcilePolylineSegments:
    """Segments taught from a polyline stay linked to that polyline."""

    @pytest.fixture
    def polyline(self):
        return Polyline([(0, 0, 0.0), (2, 0, 1.0), (2, 2, 0.0)])

    @pytest.fixture
    def registry(self, polyline):
        return PrimitiveRegistry.from_drawing(Drawing([Circle((9, 9), 1.0), polyline]))

    def test_segments_keep_live_polyline_key(self, registry, polyline, caplog):
        segments = select_polyline(polyline, key=registry.key_for(polyline))

        with caplog.at_level(logging.WARNING):
            result = reconcile(segments, registry)

        assert [t.primitive_type for t in segments] == ["Line", "Arc"]
        assert result.resolved == [0, 1]
        assert result.unmatched == []
        assert result.complete
        assert "stale reference" not in caplog.text

    def test_saved_segments_rebind_to_polyline(self, registry, polyline):
        saved = [
            _reload(segment, key="Polyline:stale")
            for segment in select_polyline(Polyline([(0, 0, 0.0), (2, 0, 1.0), (2, 2, 0.0)]))
        ]

        result = reconcile(saved, registry)

        assert result.rebound == [0, 1]
        for trajectory in result.trajectories:
            assert registry.resolve(trajectory.primitive_key) is polyline

    def test_segment_prefers_polyline_over_loose_line(self, polyline):
        registry = PrimitiveRegistry([Line((0, 0), (2, 0)), polyline])
        saved = _reload(select_polyline(polyline)[0])

        result = reconcile([saved], registry)

        assert registry.resolve(result.trajectories[0].primitive_key) is polyline

    def test_segment_of_changed_polyline_is_unmatched(self, polyline):
        registry = PrimitiveRegistry([Polyline([(0, 0, 0.0), (3, 0, 1.0), (3, 3, 0.0)])])
        saved = _reload(select_polyline(polyline)[1], key="Polyline:stale")

        result = reconcile([saved], registry)

        assert result.unmatched == [0]
        assert result.trajectories[0].primitive_key == "Polyline:stale"
