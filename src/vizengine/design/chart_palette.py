"""Enumerated category -> color palettes for charts.

Charts never look colors up by free-form string with a silent default:
a ``CategoryPalette`` is built once per render from the known category list
and either an ordered color list or an explicit mapping, validated up front.
Lookups for a category outside that enumeration raise
``UnknownCategoryError``.

Ordered palettes shorter than the category list are cycled; every extra
pass is blended 15% further toward the first color (capped at 60%) so the
repeated hues stay distinguishable while reading as one tonal family.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple, Union

from ..errors import ConfigurationError, UnknownCategoryError
from .color_mixing import interpolate_rgb, parse_hex, ramp

__all__ = ["CategoryPalette", "build_category_palette", "cycle_colors", "band_ramps"]


def cycle_colors(seed: Iterable[str], count: int) -> List[str]:
    """Return ``count`` colors cycling through ``seed`` with tonal blending."""
    base = list(seed)
    if not base:
        return []
    primary = base[0]
    out: List[str] = []
    for i in range(count):
        round_idx, pos = divmod(i, len(base))
        color = base[pos]
        if round_idx > 0:
            color = interpolate_rgb(color, primary, min(0.15 * round_idx, 0.6))
        out.append(color)
    return out


@dataclass(frozen=True)
class CategoryPalette:
    """Immutable, validated category -> color mapping.

    Attributes
    ----------
    categories : tuple[str, ...]
        The enumerated categories in render order.
    colors : dict[str, str]
        Hex color per category.
    """

    categories: Tuple[str, ...]
    colors: Dict[str, str]

    def color_for(self, category: str) -> str:
        try:
            return self.colors[category]
        except KeyError:
            raise UnknownCategoryError(
                f"Unknown category: {category!r}", context={"known": list(self.categories)}
            ) from None

    def __contains__(self, category: object) -> bool:
        return category in self.colors

    def __len__(self) -> int:
        return len(self.categories)


def _check(color: str) -> str:
    try:
        parse_hex(color)
    except ValueError as e:
        raise ConfigurationError(f"Malformed palette color: {color!r}") from e
    return color


def build_category_palette(
    categories: Sequence[str],
    palette: Union[Sequence[str], Mapping[str, str]],
) -> CategoryPalette:
    """Build a validated palette for ``categories``.

    Duplicate categories keep their first position. With a mapping palette
    every category must be present; with a sequence palette colors are
    assigned in order and cycled when needed.

    Raises
    ------
    ConfigurationError
        Empty or malformed palette.
    UnknownCategoryError
        A mapping palette lacks one of the categories.
    """
    ordered = tuple(dict.fromkeys(categories))
    if isinstance(palette, Mapping):
        if not palette:
            raise ConfigurationError("palette must not be empty")
        missing = [c for c in ordered if c not in palette]
        if missing:
            raise UnknownCategoryError(
                f"No palette color for categories: {missing}", context={"missing": missing}
            )
        colors = {c: _check(palette[c]) for c in ordered}
    else:
        seed = [_check(c) for c in palette]
        if not seed:
            raise ConfigurationError("palette must not be empty")
        colors = dict(zip(ordered, cycle_colors(seed, len(ordered))))
    return CategoryPalette(categories=ordered, colors=colors)


def band_ramps(positive: str, negative: str, count: int) -> Tuple[List[str], List[str]]:
    """Return separate positive / negative color ramps for horizon bands."""
    if count < 1:
        raise ConfigurationError("band count must be >= 1")
    return ramp(_check(positive), count), ramp(_check(negative), count)
