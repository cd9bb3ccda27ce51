import math

import pytest

from vizengine.charting.layouts import chord_layout, flow_layout, radar_layout
from vizengine.errors import InvalidDataError

LINKS = [("A", "X", 10), ("A", "Y", 5), {"source": "B", "target": "X", "value": 5}]


def test_flow_nodes_and_scale():
    layout = flow_layout(LINKS, width=300, height=200)
    assert [n.node_id for n in layout.nodes] == ["src:A", "src:B", "tgt:X", "tgt:Y"]
    assert layout.scale == pytest.approx(9.5)
    a = layout.node("src:A")
    assert (a.x0, a.x1, a.y0, a.y1) == pytest.approx((0, 15, 0, 142.5))
    b = layout.node("src:B")
    assert b.y0 == pytest.approx(152.5)
    assert layout.node("tgt:X").x0 == 285
    with pytest.raises(KeyError):
        layout.node("src:missing")


def test_flow_link_anchors_never_overlap():
    layout = flow_layout(LINKS, width=300, height=200)
    for node in layout.nodes:
        spans = sorted(
            link.source_span if node.column == 0 else link.target_span
            for link in layout.links
            if node.node_id in (link.source, link.target)
        )
        for (_, end), (start, _) in zip(spans, spans[1:]):
            assert start >= end - 1e-9
        assert spans[0][0] == pytest.approx(node.y0)
        assert spans[-1][1] == pytest.approx(node.y1)


def test_flow_link_thickness_matches_both_ends():
    layout = flow_layout(LINKS, width=300, height=200)
    for link in layout.links:
        assert link.width == pytest.approx(link.target_span[1] - link.target_span[0])
        assert link.width == pytest.approx(link.value * layout.scale)


def test_flow_threshold_drops_small_links():
    layout = flow_layout(LINKS, width=300, height=200, min_flow_threshold=0.3)
    assert [(link.source, link.target) for link in layout.links] == [("src:A", "tgt:X")]
    assert flow_layout([("A", "X", 0)], width=10, height=10).nodes == ()


def test_chord_groups_and_ribbons():
    layout = chord_layout([[0, 1], [3, 0]])
    g0, g1 = layout.groups
    assert (g0.start_angle, g0.end_angle) == pytest.approx((0, math.pi))
    assert (g1.start_angle, g1.end_angle) == pytest.approx((math.pi, 2 * math.pi))
    forward = next(c for c in layout.chords if (c.source, c.target) == (0, 1))
    assert forward.source_span == pytest.approx((0, math.pi / 4))
    assert forward.target_span == pytest.approx((7 * math.pi / 4, 2 * math.pi))


def test_chord_padding_and_empty():
    layout = chord_layout([[0, 2, 2], [1, 0, 1], [2, 2, 0]], pad_angle=0.1)
    arcs = sum(g.end_angle - g.start_angle for g in layout.groups)
    assert arcs == pytest.approx(2 * math.pi - 0.3)
    assert chord_layout([[0, 0], [0, 0]]).empty


def test_chord_rejects_bad_matrices():
    with pytest.raises(InvalidDataError):
        chord_layout([[0, 1, 2], [1, 0]])
    with pytest.raises(InvalidDataError):
        chord_layout([[0, -1], [1, 0]])


def test_radar_axes_and_radii():
    layout = radar_layout(["a", "b", "c", "d"], [[10, 20, 30, 87]], radius=90)
    assert [axis.angle for axis in layout.axes] == pytest.approx([0, math.pi / 2, math.pi, 3 * math.pi / 2])
    assert layout.max_value == 90
    assert [r for _, r in layout.series[0]] == pytest.approx([10, 20, 30, 87])
    assert layout.levels == pytest.approx((18, 36, 54, 72, 90))


def test_radar_clamps_negative_values():
    layout = radar_layout(["a", "b"], [[-5, 50]], radius=100, max_value=100)
    assert [r for _, r in layout.series[0]] == [0.0, 50.0]
