import pytest

from vizengine.design.motion import (
    cubic_bezier_easing,
    get_easing,
    list_easings,
    parse_cubic_bezier,
    register_easing,
    resolve_easing,
)


@pytest.mark.parametrize("name", list_easings())
def test_registered_easings_hit_endpoints_and_are_monotonic(name):
    fn = get_easing(name)
    assert fn(0.0) == pytest.approx(0.0, abs=1e-9)
    assert fn(1.0) == pytest.approx(1.0, abs=1e-9)
    samples = [fn(i / 20) for i in range(21)]
    assert all(b >= a - 1e-9 for a, b in zip(samples, samples[1:]))


def test_easings_clamp_out_of_range_progress():
    fn = get_easing("cubic-out")
    assert fn(-0.5) == 0.0
    assert fn(1.5) == 1.0


def test_unknown_easing_raises_key_error():
    with pytest.raises(KeyError):
        get_easing("nonexistent-easing")


def test_duplicate_registration_rejected():
    with pytest.raises(ValueError):
        register_easing("linear", lambda t: t)


def test_parse_cubic_bezier_manual():
    assert parse_cubic_bezier("cubic-bezier(0.1, 0.2, 0.3, 0.9)") == (0.1, 0.2, 0.3, 0.9)


@pytest.mark.parametrize(
    "spec",
    ["bezier(0,0,0,0)", "cubic-bezier(0, 0, 1)", "cubic-bezier(a, 0, 1, 1)", "cubic-bezier(1.5, 0, 1, 1)"],
)
def test_parse_invalid_format(spec):
    with pytest.raises(ValueError):
        parse_cubic_bezier(spec)


def test_linear_bezier_is_identity():
    ease = cubic_bezier_easing(0.0, 0.0, 1.0, 1.0)
    for t in (0.1, 0.25, 0.5, 0.9):
        assert ease(t) == pytest.approx(t, abs=1e-5)


def test_resolve_easing_accepts_names_strings_and_callables():
    assert resolve_easing("linear")(0.3) == pytest.approx(0.3)
    assert resolve_easing(None)(0.3) == pytest.approx(0.3)
    square = lambda t: t * t  # noqa: E731
    assert resolve_easing(square) is square
    assert resolve_easing("cubic-bezier(0.4, 0, 0.2, 1)")(0.5) > 0.5
