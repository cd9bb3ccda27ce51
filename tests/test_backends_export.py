import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402
from matplotlib.path import Path as MplPath  # noqa: E402

from vizengine.charting import MatplotlibChartBackend, chart_registry, export_snapshot, snapshot_to_svg  # noqa: E402
from vizengine.charting.backends import commands_to_mpl_path  # noqa: E402
from vizengine.charting.types import ChartRequest, GeometrySnapshot, ShapeState  # noqa: E402


@pytest.fixture
def pie_snapshot():
    return chart_registry.build(ChartRequest("pie", {"North": 3, "South": 1})).snapshot


def test_commands_to_matplotlib_codes():
    path = commands_to_mpl_path([("M", 0, 0), ("L", 10, 0), ("Q", 5, 5, 0, 10), ("Z",)])
    assert list(path.codes) == [MplPath.MOVETO, MplPath.LINETO, MplPath.CURVE3, MplPath.CURVE3, MplPath.CLOSEPOLY]
    assert tuple(path.vertices[-1]) == (0, 0)
    cubic = commands_to_mpl_path([("M", 0, 0), ("C", 1, 1, 2, 2, 3, 3)])
    assert list(cubic.codes[1:]) == [MplPath.CURVE4] * 3
    assert commands_to_mpl_path([]) is None


def test_arcs_are_sampled(pie_snapshot):
    path = commands_to_mpl_path(pie_snapshot.elements[0].commands)
    assert len(path.vertices) > 10


def test_render_adds_one_patch_per_element(pie_snapshot):
    fig = MatplotlibChartBackend().render(pie_snapshot, title="Shares")
    ax = fig.axes[0]
    assert [p.get_gid() for p in ax.patches] == pie_snapshot.ids()
    assert ax.get_ylim() == (pie_snapshot.height, 0)


def test_render_frame_shapes(pie_snapshot):
    frame = [ShapeState("only", "rect", (("M", 0, 0), ("L", 5, 5), ("Z",)), fill="#000000")]
    fig = MatplotlibChartBackend().render(pie_snapshot, shapes=frame)
    assert len(fig.axes[0].patches) == 1


def test_export_png_and_svg(tmp_path, pie_snapshot):
    png = tmp_path / "chart.png"
    export_snapshot(pie_snapshot, str(png))
    assert png.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"
    svg = tmp_path / "chart.svg"
    export_snapshot(pie_snapshot, str(svg), format="svg")
    text = svg.read_text(encoding="utf-8")
    assert "<svg" in text
    assert 'id="slice:North"' in text


def test_export_rejects_unknown_format(tmp_path, pie_snapshot):
    with pytest.raises(ValueError):
        export_snapshot(pie_snapshot, str(tmp_path / "chart.gif"), format="gif")
    with pytest.raises(ValueError):
        MatplotlibChartBackend().export_figure(MatplotlibChartBackend().render(pie_snapshot), "x.pdf", format="pdf")


def test_snapshot_to_svg():
    snap = GeometrySnapshot(
        "test",
        (
            ShapeState("a&b", "rect", (("M", 0, 0), ("L", 1, 1), ("Z",)), fill="#ff0000", opacity=0.5),
            ShapeState("empty", "rect"),
        ),
        100,
        50,
    )
    svg = snapshot_to_svg(snap)
    assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg" width="100.0" height="50.0" viewBox="0 0 100.0 50.0">')
    assert '<path id="a&amp;b" d="M0,0L1,1Z" fill="#ff0000" stroke="none" opacity="0.5"/>' in svg
    assert 'id="empty"' not in svg
    assert svg.endswith("</svg>\n")
