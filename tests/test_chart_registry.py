from datetime import date

import pytest

from vizengine.charting import SampleDataGenerator, chart_registry
from vizengine.charting.calendar_charts import EMPTY_COLOR, HIGH_COLOR, LOW_COLOR
from vizengine.charting.common import placeholder_snapshot
from vizengine.charting.registry import ChartRegistry, request_key
from vizengine.charting.types import ChartRequest, ChartResult
from vizengine.config import ChartOptions
from vizengine.design.color_mixing import interpolate_rgb
from vizengine.errors import ConfigurationError, InvalidDataError, UnknownCategoryError

gen = SampleDataGenerator(seed=3)

SAMPLES = {
    "line": gen.time_series("visits"),
    "area": gen.stacked_series(3),
    "stream": gen.stacked_series(4),
    "horizon": gen.signed_series(),
    "pie": gen.shares(),
    "donut": gen.shares(),
    "radar": gen.radar(),
    "violin": gen.violin_samples(),
    "sankey": gen.flow_links(),
    "chord": gen.chord_matrix(),
    "bar": gen.shares(),
    "calendar_heatmap": gen.daily_counts(),
}

EMPTY = {
    "line": [],
    "area": {},
    "stream": {},
    "horizon": [],
    "pie": {},
    "donut": [],
    "radar": {},
    "violin": {},
    "sankey": [],
    "chord": {"names": [], "matrix": []},
    "bar": {},
    "calendar_heatmap": [],
}


def setup_function(_):
    chart_registry.clear_cache()


def _stub_builder(req, options):
    return ChartResult(placeholder_snapshot(req.chart_type, options, "stub"), {})


def test_all_chart_types_registered():
    assert set(SAMPLES) <= set(chart_registry.list_types())


@pytest.mark.parametrize("chart_type", sorted(SAMPLES))
def test_sample_data_builds(chart_type):
    result = chart_registry.build(ChartRequest(chart_type, SAMPLES[chart_type]))
    snap = result.snapshot
    assert snap.chart_type == chart_type
    assert not snap.is_empty
    assert snap.elements
    assert len(set(snap.ids())) == len(snap.ids())
    assert all(e.commands for e in snap.elements)
    assert result.meta["elements"] == len(snap.elements)
    assert "build_ms" in result.meta


@pytest.mark.parametrize("chart_type", sorted(EMPTY))
def test_empty_input_gives_placeholder(chart_type):
    snap = chart_registry.build(ChartRequest(chart_type, EMPTY[chart_type])).snapshot
    assert snap.is_empty
    assert snap.ids() == ["placeholder"]


NO_FINITE_VALUES = [
    ("line", [{"key": 1, "value": None}, {"key": 2, "value": None}]),
    ("line", {"a": [{"key": 1, "value": float("nan")}], "b": [{"key": 2, "value": None}]}),
    ("area", {"a": [{"key": 1, "value": None}]}),
    ("horizon", [{"key": 1, "value": float("nan")}, {"key": 2, "value": None}]),
    ("violin", {"A": [], "B": [None, float("nan")]}),
    ("bar", {"a": None, "b": float("nan")}),
    ("calendar_heatmap", {date(2024, 1, 1): None, date(2024, 1, 2): float("nan")}),
]


@pytest.mark.parametrize("chart_type, data", NO_FINITE_VALUES)
def test_input_without_finite_values_gives_placeholder(chart_type, data):
    snap = chart_registry.build(ChartRequest(chart_type, data)).snapshot
    assert snap.is_empty
    assert snap.meta["empty"] is True
    assert snap.ids() == ["placeholder"]


def test_line_skips_series_without_finite_values():
    data = {"ok": [{"key": 1, "value": 2.0}, {"key": 2, "value": 3.0}], "gaps": [{"key": 1, "value": None}]}
    snap = chart_registry.build(ChartRequest("line", data)).snapshot
    assert not snap.is_empty
    assert snap.ids() == ["line:ok"]
    assert all(e.commands for e in snap.elements)


def test_builds_are_deterministic():
    req = ChartRequest("stream", SAMPLES["stream"], {"curveType": "basis"})
    assert chart_registry.build(req).snapshot.to_json() == chart_registry.build(req).snapshot.to_json()
    cached = chart_registry.build_cached(req)
    assert chart_registry.build_cached(req) is cached


def test_stream_defaults_and_explicit_strategies():
    default = chart_registry.build(ChartRequest("stream", SAMPLES["stream"])).snapshot
    assert default.meta["offset"] == "wiggle"
    explicit = chart_registry.build(
        ChartRequest("stream", SAMPLES["stream"], {"stackOffset": "none"})
    ).snapshot
    assert explicit.meta["offset"] == "none"
    via_options = chart_registry.build(
        ChartRequest("stream", SAMPLES["stream"], ChartOptions(stack_offset="silhouette"))
    ).snapshot
    assert via_options.meta["offset"] == "silhouette"
    area = chart_registry.build(ChartRequest("area", SAMPLES["area"])).snapshot
    assert area.meta["offset"] == "none"


def test_pie_slices_follow_input_order():
    snap = chart_registry.build(ChartRequest("pie", {"a": 1, "b": 3, "c": 0})).snapshot
    assert snap.ids() == ["slice:a", "slice:b", "slice:c"]
    assert snap.element("slice:b").datum["share"] == pytest.approx(0.75)
    assert snap.element("slice:a").params["end_angle"] > snap.element("slice:a").params["start_angle"]


def test_unknown_type_and_bad_options():
    with pytest.raises(KeyError):
        chart_registry.build(ChartRequest("gantt", []))
    with pytest.raises(ConfigurationError):
        chart_registry.build(ChartRequest("pie", SAMPLES["pie"], {"bogus": 1}))
    with pytest.raises(TypeError):
        chart_registry.build(ChartRequest("pie", SAMPLES["pie"], 42))


def test_category_outside_enumeration_is_rejected():
    with pytest.raises(UnknownCategoryError):
        chart_registry.build(ChartRequest("pie", {"North": 1, "Elsewhere": 2}, {"categories": ["North"]}))


def test_non_square_chord_matrix_rejected():
    with pytest.raises(InvalidDataError):
        chart_registry.build(ChartRequest("chord", {"names": ["a", "b"], "matrix": [[0, 1], [1]]}))
    with pytest.raises(InvalidDataError):
        chart_registry.build(ChartRequest("chord", {"names": ["a"], "matrix": [[0, 1], [1, 0]]}))


def test_duplicate_and_unknown_registration():
    reg = ChartRegistry()
    reg.register("stub", _stub_builder, "Stub")
    with pytest.raises(ValueError):
        reg.register("stub", _stub_builder, "Again")
    with pytest.raises(KeyError):
        reg.get("missing")
    reg.unregister("stub")
    assert "stub" not in reg
    with pytest.raises(KeyError):
        reg.unregister("stub")


def test_plugins_tag_their_types():
    class Plugin:
        id = "extra"
        version = "1.2"

        def register(self, registrar):
            registrar.register("dots", _stub_builder, "Dot plot", experimental=True)

    reg = ChartRegistry()
    reg.register_plugin(Plugin())
    assert reg.list_types_by_plugin("extra") == {"dots": "Dot plot"}
    assert reg.list_plugins() == {"extra": "1.2"}
    assert reg.get("dots").meta == {"experimental": True}
    with pytest.raises(ValueError):
        reg.register_plugin(Plugin())


def test_build_cached_reuses_results():
    reg = ChartRegistry(cache_limit=1)
    reg.register("stub", _stub_builder, "Stub")
    first = reg.build_cached(ChartRequest("stub", [1, 2]))
    assert first.meta["cache_hit"] is False
    again = reg.build_cached(ChartRequest("stub", [1, 2]))
    assert again is first and again.meta["cache_hit"] is True
    other = reg.build_cached(ChartRequest("stub", [3]))
    assert other.meta["cache_hit"] is False
    # limit 1: the first entry was evicted
    assert reg.build_cached(ChartRequest("stub", [1, 2])) is not first


def test_request_key_depends_on_options():
    a = request_key(ChartRequest("pie", {"x": 1}, ChartOptions()))
    b = request_key(ChartRequest("pie", {"x": 1}, ChartOptions(pad_angle=0.0)))
    assert a != b
    assert a == request_key(ChartRequest("pie", {"x": 1}, ChartOptions()))


def test_lazy_proxy_builds_on_access():
    reg = ChartRegistry()
    calls = []

    def builder(req, options):
        calls.append(req.chart_type)
        return _stub_builder(req, options)

    reg.register("stub", builder, "Stub")
    proxy = reg.build_lazy(ChartRequest("stub", []))
    assert not proxy.built and calls == []
    assert proxy.meta == {"lazy": True, "built": False}
    assert proxy.snapshot.chart_type == "stub"
    proxy.materialize()
    assert calls == ["stub"]
    assert proxy.meta["lazy"] is True


def test_pie_sort_order_accepts_key_callable():
    snap = chart_registry.build(
        ChartRequest("pie", {"a": 1, "b": 3, "c": 2}, ChartOptions(sort_order=lambda i, v: -i))
    ).snapshot
    # ids keep input order, angles follow the callable
    assert snap.ids() == ["slice:a", "slice:b", "slice:c"]
    assert snap.element("slice:c").params["start_angle"] < snap.element("slice:a").params["start_angle"]


def test_bar_bands_and_baseline():
    snap = chart_registry.build(ChartRequest("bar", {"a": 1, "b": 3, "c": 2})).snapshot
    assert snap.ids() == ["bar:a", "bar:b", "bar:c"]
    assert snap.meta["bandwidth"] == pytest.approx(100.0)
    a = snap.element("bar:a")
    assert a.kind == "bar"
    assert a.params["x0"] == pytest.approx(25.0)
    assert a.params["x1"] == pytest.approx(125.0)
    assert a.params["baseline"] == pytest.approx(300.0)
    assert snap.meta["baseline"] == pytest.approx(300.0)
    tops = {e.element_id: e.params["top"] for e in snap.elements}
    assert tops["bar:b"] < tops["bar:c"] < tops["bar:a"] < 300.0
    assert snap.element("bar:b").datum["share"] == pytest.approx(0.5)
    assert [t["element_id"] for t in snap.meta["hover_targets"]] == snap.ids()


@pytest.mark.parametrize(
    "sort_order, expected",
    [
        ("descending", ["b", "c", "a"]),
        ("ascending", ["a", "c", "b"]),
        (lambda i, v: -i, ["c", "b", "a"]),
    ],
)
def test_bar_sort_order(sort_order, expected):
    snap = chart_registry.build(
        ChartRequest("bar", {"a": 1, "b": 3, "c": 2}, ChartOptions(sort_order=sort_order))
    ).snapshot
    assert snap.meta["order"] == expected
    assert [e.datum["label"] for e in snap.elements] == expected
    lefts = [e.params["x0"] for e in snap.elements]
    assert lefts == sorted(lefts)


def test_bar_negative_values_hang_below_baseline():
    snap = chart_registry.build(ChartRequest("bar", [("up", 2), ("down", -1), ("up", 1)])).snapshot
    assert snap.ids() == ["bar:up", "bar:down", "bar:up#1"]
    down = snap.element("bar:down")
    assert down.params["top"] > down.params["baseline"]
    assert down.anchor[1] == pytest.approx(down.params["baseline"])
    lo, hi = snap.meta["y_domain"]
    assert lo <= -1 and hi >= 2


def test_bar_all_zero_values_sit_on_the_bottom_edge():
    snap = chart_registry.build(ChartRequest("bar", {"a": 0, "b": 0})).snapshot
    assert not snap.is_empty
    assert all(e.params["top"] == pytest.approx(300.0) for e in snap.elements)


def test_calendar_heatmap_grid_and_colors():
    # 2024-01-03 is a Wednesday; the grid starts on Sunday 2023-12-31
    data = {date(2024, 1, 3): 5, date(2024, 1, 10): 10, date(2024, 1, 4): 0}
    snap = chart_registry.build(ChartRequest("calendar_heatmap", data)).snapshot
    assert snap.ids()[0] == "cell:2024-01-03"
    assert snap.ids()[-1] == "cell:2024-01-10"
    assert len(snap.elements) == 8
    assert snap.meta["weeks"] == 2
    assert snap.meta["start"] == "2023-12-31"
    assert snap.meta["max_value"] == pytest.approx(10.0)

    cell = snap.meta["cell_size"]
    assert cell == pytest.approx(300.0 / 7)
    busiest = snap.element("cell:2024-01-10")
    assert busiest.datum["week"] == 1 and busiest.datum["weekday"] == 3
    assert busiest.anchor == pytest.approx((1.5 * cell, 3.5 * cell))
    assert busiest.fill == interpolate_rgb(LOW_COLOR, HIGH_COLOR, 1.0)
    assert snap.element("cell:2024-01-03").fill == interpolate_rgb(LOW_COLOR, HIGH_COLOR, 0.5)
    assert snap.element("cell:2024-01-04").fill == EMPTY_COLOR
    missing = snap.element("cell:2024-01-05")
    assert missing.fill == EMPTY_COLOR
    assert missing.datum["value"] is None


def test_calendar_heatmap_accepts_iso_records_and_palette_ends():
    records = [
        {"date": "2024-03-01", "value": 2},
        {"date": "2024-03-01T18:00:00", "value": 2},
        {"date": "2024-03-02", "value": 1},
    ]
    snap = chart_registry.build(
        ChartRequest("calendar_heatmap", records, {"colorPalette": ["#ffffff", "#888888", "#000000"]})
    ).snapshot
    assert snap.element("cell:2024-03-01").datum["value"] == pytest.approx(4.0)
    assert snap.element("cell:2024-03-01").fill == interpolate_rgb("#ffffff", "#000000", 1.0)
    assert snap.element("cell:2024-03-02").fill == interpolate_rgb("#ffffff", "#000000", 0.25)


def test_calendar_heatmap_rejects_non_date_keys():
    with pytest.raises(InvalidDataError):
        chart_registry.build(ChartRequest("calendar_heatmap", {"soon": 1}))
    with pytest.raises(InvalidDataError):
        chart_registry.build(ChartRequest("calendar_heatmap", {3: 1}))
