import pytest

from vizengine.charting.shapes import ArcDatum, arc_from_params, arc_path
from vizengine.charting.types import GeometrySnapshot, ShapeState
from vizengine.services import SceneStateMap


def _snapshot(*shapes):
    return GeometrySnapshot("test", tuple(shapes), 200, 100)


def test_replace_reports_superseded_ids():
    scene = SceneStateMap()
    assert scene.replace(_snapshot(ShapeState("a", "rect"), ShapeState("b", "rect"))) == []
    assert scene.replace(_snapshot(ShapeState("c", "rect"))) == ["a", "b"]
    assert scene.ids() == ["c"]
    assert "a" not in scene and len(scene) == 1
    with pytest.raises(KeyError):
        scene.get("a")


def test_initial_opacity_and_base_opacity():
    scene = SceneStateMap()
    scene.replace(_snapshot(ShapeState("a", "rect", opacity=0.7)), initial_opacity=0.0)
    state = scene.get("a")
    assert (state.opacity, state.base_opacity) == (0.0, 0.7)
    scene.opacity_setter("a")(0.5)
    assert scene.frame()[0].opacity == 0.5


def test_setters_ignore_removed_elements():
    scene = SceneStateMap()
    scene.replace(_snapshot(ShapeState("a", "rect")))
    setter = scene.opacity_setter("a")
    scene.clear()
    setter(0.3)
    assert len(scene) == 0


def test_siblings_follow_groups():
    scene = SceneStateMap()
    scene.replace(
        _snapshot(
            ShapeState("a", "rect", group="s1"),
            ShapeState("b", "rect", group="s1"),
            ShapeState("c", "rect", group="s2"),
            ShapeState("d", "rect"),
        )
    )
    assert scene.siblings("a") == ["b"]
    assert scene.siblings("d") == ["a", "b", "c"]


def test_params_renderer_rebuilds_arcs():
    datum = ArcDatum(0, 50, 0.0, 1.0)
    params = {"inner_radius": 0, "outer_radius": 50, "start_angle": 0.0, "end_angle": 1.0,
              "corner_radius": 0.0, "cx": 0.0, "cy": 0.0}
    shape = ShapeState("slice:a", "arc", arc_path(datum), params=params)
    scene = SceneStateMap()
    scene.register_params_renderer("arc", arc_from_params)
    scene.replace(_snapshot(shape))
    assert scene.frame()[0].commands == shape.commands
    scene.params_setter("slice:a")({**params, "end_angle": 0.5})
    half = scene.frame()[0]
    assert half.commands == arc_path(ArcDatum(0, 50, 0.0, 0.5))
    assert set(scene.frame_paths()) == {"slice:a"}


def test_highlight_flags():
    scene = SceneStateMap()
    scene.replace(_snapshot(ShapeState("a", "rect"), ShapeState("b", "rect")))
    scene.set_highlight(["a", "zzz"], True)
    assert scene.get("a").highlighted and not scene.get("b").highlighted
