import pytest

from vizengine.config import DEFAULT_ANIMATION_DURATION_MS, ChartOptions
from vizengine.errors import ConfigurationError, UnknownCategoryError


def test_defaults_are_valid():
    opts = ChartOptions()
    opts.validate()
    assert opts.curve_type == "monotone"
    assert opts.dim_opacity == 0.2
    assert opts.hover_grace_ms == 100
    assert opts.rate_limit_ms == 50
    assert opts.animation_duration_ms == DEFAULT_ANIMATION_DURATION_MS
    assert opts.tooltip_offset == (15.0, -10.0)


def test_from_mapping_accepts_camel_and_snake_case():
    opts = ChartOptions.from_mapping({"padAngle": 0.05, "dim_opacity": 0.3, "bandCount": 3})
    assert opts.pad_angle == 0.05
    assert opts.dim_opacity == 0.3
    assert opts.band_count == 3


def test_from_mapping_rejects_unknown_option():
    with pytest.raises(ConfigurationError) as exc:
        ChartOptions.from_mapping({"bogusOption": 1})
    assert exc.value.context == {"option": "bogusOption"}


@pytest.mark.parametrize(
    "raw",
    [
        {"bandwidth": -1.0},
        {"bandwidth": 0},
        {"bandCount": 0},
        {"dimOpacity": 1.5},
        {"dimOpacity": -0.1},
        {"curveType": "cardinal"},
        {"sortOrder": "random"},
        {"easing": "wobble"},
        {"gridSize": 1},
        {"minFlowThreshold": 1.0},
        {"stackOffset": "expand"},
        {"width": 0},
        {"barPadding": 1.0},
    ],
)
def test_invalid_values_fail_at_configuration_time(raw):
    with pytest.raises(ConfigurationError):
        ChartOptions.from_mapping(raw)


def test_malformed_palette_color_rejected():
    with pytest.raises(ConfigurationError):
        ChartOptions.from_mapping({"colorPalette": ["#123456", "teal"]})


def test_mapping_palette_must_cover_enumerated_categories():
    with pytest.raises(UnknownCategoryError):
        ChartOptions.from_mapping({"categories": ["a", "b"], "colorPalette": {"a": "#ff0000"}})
    ok = ChartOptions.from_mapping({"categories": ["a"], "colorPalette": {"a": "#ff0000"}})
    assert ok.categories == ("a",)


def test_replace_revalidates():
    opts = ChartOptions()
    assert opts.replace(levels=3).levels == 3
    with pytest.raises(ConfigurationError):
        opts.replace(levels=0)


def test_cubic_bezier_easing_accepted():
    opts = ChartOptions.from_mapping({"easing": "cubic-bezier(0.4, 0, 0.2, 1)"})
    assert opts.easing_fn(0.0) == 0.0
    assert opts.easing_fn(1.0) == 1.0


def test_format_tooltip_default_and_custom():
    opts = ChartOptions()
    assert opts.format_tooltip({"label": "North", "value": 12.345}) == "North: 12.3"
    assert opts.format_tooltip({"label": "North", "value": 12345.0}) == "North: 12,345"
    custom = ChartOptions(tooltip_formatter=lambda d: f"<{d['label']}>")
    assert custom.format_tooltip({"label": "x"}) == "<x>"


def test_cache_material_is_json_friendly():
    def fmt(d):
        return str(d)

    material = ChartOptions(tooltip_formatter=fmt).cache_material()
    assert material["tooltip_formatter"].endswith("fmt")
    assert material["pad_angle"] == 0.02


def test_sort_order_accepts_key_callable():
    def by_value_desc(index, value):
        return (-value, index)

    opts = ChartOptions.from_mapping({"sortOrder": by_value_desc})
    assert opts.sort_order is by_value_desc
    assert opts.cache_material()["sort_order"].endswith("by_value_desc")
