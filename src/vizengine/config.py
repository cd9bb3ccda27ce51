"""Engine defaults and chart configuration.

Defaults are module level ``Final`` constants; the motion related ones can
be overridden through environment variables so demo deployments can slow
down or speed up every reveal without code changes:

 - ``VIZENGINE_ANIMATION_DURATION_MS`` (int, default 1000)
 - ``VIZENGINE_STAGGER_MS`` (int, default 100)

``ChartOptions`` is the single configuration object consumed by chart
builders, the renderer and the interaction layer. It validates eagerly:
``ChartOptions.from_mapping`` and ``validate()`` raise ``ConfigurationError``
for anything that would otherwise fail mid-animation.
"""

from __future__ import annotations

import dataclasses
import math
import os
import re
from dataclasses import dataclass
from typing import Any, Callable, Final, Mapping, Optional, Sequence, Tuple, Union

from .design.color_mixing import parse_hex
from .design.motion import resolve_easing
from .errors import ConfigurationError, UnknownCategoryError

__all__ = [
    "ChartOptions",
    "CURVE_TYPES",
    "STACK_ORDERS",
    "STACK_OFFSETS",
    "SORT_ORDERS",
    "SERIES_FALLBACK",
]


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


DEFAULT_ANIMATION_DURATION_MS: Final = _env_int("VIZENGINE_ANIMATION_DURATION_MS", 1000)
DEFAULT_STAGGER_MS: Final = _env_int("VIZENGINE_STAGGER_MS", 100)
DEFAULT_EASING: Final = "cubic-out"
DEFAULT_DIM_OPACITY: Final = 0.2
DEFAULT_HOVER_GRACE_MS: Final = 100
DEFAULT_RATE_LIMIT_MS: Final = 50
DEFAULT_HIGHLIGHT_TRANSITION_MS: Final = 200
DEFAULT_PAD_ANGLE: Final = 0.02
DEFAULT_CORNER_RADIUS: Final = 4.0
DEFAULT_INNER_RADIUS_RATIO: Final = 0.6
DEFAULT_BAND_COUNT: Final = 4
DEFAULT_GRID_SIZE: Final = 50
DEFAULT_TOOLTIP_OFFSET: Final = (15.0, -10.0)
DEFAULT_BAR_PADDING: Final = 0.2

CURVE_TYPES: Final = frozenset({"linear", "monotone", "step", "basis"})
STACK_ORDERS: Final = frozenset({"none", "reverse", "ascending", "descending", "inside-out"})
STACK_OFFSETS: Final = frozenset({"none", "silhouette", "wiggle"})
SORT_ORDERS: Final = frozenset({"none", "ascending", "descending"})

# Categorical fallback used when no palette is configured.
SERIES_FALLBACK: Final = (
    "#4E79A7",
    "#F28E2B",
    "#E15759",
    "#76B7B2",
    "#59A14F",
    "#EDC948",
    "#B07AA1",
    "#FF9DA7",
)

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

PaletteSpec = Union[Sequence[str], Mapping[str, str]]


@dataclass(frozen=True)
class ChartOptions:
    """Recognized chart options.

    Attributes mirror the external configuration object; ``from_mapping``
    also accepts the camelCase spelling (``padAngle``, ``dimOpacity``...).
    ``color_palette`` is either an ordered list of hex colors or an explicit
    ``category -> color`` mapping. ``bandwidth=None`` lets violin charts pick
    a Silverman bandwidth per group.
    """

    color_palette: Optional[PaletteSpec] = None
    categories: Optional[Tuple[str, ...]] = None
    curve_type: str = "monotone"
    band_count: int = DEFAULT_BAND_COUNT
    bandwidth: Optional[float] = None
    grid_size: int = DEFAULT_GRID_SIZE
    sort_order: Union[str, Callable[[int, float], Any], None] = None
    pad_angle: float = DEFAULT_PAD_ANGLE
    corner_radius: float = DEFAULT_CORNER_RADIUS
    inner_radius_ratio: float = DEFAULT_INNER_RADIUS_RATIO
    animation_duration_ms: int = DEFAULT_ANIMATION_DURATION_MS
    stagger_ms: int = DEFAULT_STAGGER_MS
    easing: Union[str, Callable[[float], float]] = DEFAULT_EASING
    dim_opacity: float = DEFAULT_DIM_OPACITY
    hover_grace_ms: int = DEFAULT_HOVER_GRACE_MS
    rate_limit_ms: int = DEFAULT_RATE_LIMIT_MS
    tooltip_formatter: Optional[Callable[[Any], str]] = None
    tooltip_offset: Tuple[float, float] = DEFAULT_TOOLTIP_OFFSET
    width: float = 400.0
    height: float = 300.0
    stack_order: str = "none"
    stack_offset: str = "none"
    node_width: float = 15.0
    node_gap: float = 10.0
    min_flow_threshold: float = 0.0
    levels: int = 5
    bar_padding: float = DEFAULT_BAR_PADDING

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "ChartOptions":
        """Build validated options from a plain configuration mapping.

        Raises
        ------
        ConfigurationError
            If a key is not a recognized option or a value is invalid.
        """
        if raw is None:
            raw = {}
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in raw.items():
            name = _CAMEL_RE.sub("_", key).lower()
            if name not in known:
                raise ConfigurationError(f"Unknown chart option: {key}", context={"option": key})
            if name in {"categories", "tooltip_offset"} and value is not None:
                value = tuple(value)
            elif name == "color_palette" and value is not None and not isinstance(value, Mapping):
                value = tuple(value)
            kwargs[name] = value
        opts = cls(**kwargs)
        opts.validate()
        return opts

    def replace(self, **changes: Any) -> "ChartOptions":
        opts = dataclasses.replace(self, **changes)
        opts.validate()
        return opts

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def validate(self) -> None:
        if self.curve_type not in CURVE_TYPES:
            raise ConfigurationError(f"curve_type must be one of {sorted(CURVE_TYPES)}")
        if not isinstance(self.band_count, int) or self.band_count < 1:
            raise ConfigurationError("band_count must be an integer >= 1")
        if self.bandwidth is not None and not (self.bandwidth > 0):
            raise ConfigurationError("bandwidth must be > 0")
        if not isinstance(self.grid_size, int) or self.grid_size < 2:
            raise ConfigurationError("grid_size must be an integer >= 2")
        if (
            self.sort_order is not None
            and not callable(self.sort_order)
            and self.sort_order not in SORT_ORDERS
        ):
            raise ConfigurationError(f"sort_order must be one of {sorted(SORT_ORDERS)} or a key callable")
        if not (0 <= self.pad_angle < 2 * math.pi):
            raise ConfigurationError("pad_angle must be within [0, 2pi)")
        if self.corner_radius < 0:
            raise ConfigurationError("corner_radius must be >= 0")
        if not (0 <= self.inner_radius_ratio < 1):
            raise ConfigurationError("inner_radius_ratio must be within [0, 1)")
        for name in ("animation_duration_ms", "stagger_ms", "hover_grace_ms", "rate_limit_ms"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0")
        try:
            resolve_easing(self.easing)
        except (KeyError, ValueError) as e:
            raise ConfigurationError(f"Invalid easing: {self.easing!r}") from e
        if not (0 <= self.dim_opacity <= 1):
            raise ConfigurationError("dim_opacity must be within [0, 1]")
        if self.tooltip_formatter is not None and not callable(self.tooltip_formatter):
            raise ConfigurationError("tooltip_formatter must be callable")
        if len(self.tooltip_offset) != 2:
            raise ConfigurationError("tooltip_offset must be an (x, y) pair")
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError("width and height must be > 0")
        if self.stack_order not in STACK_ORDERS:
            raise ConfigurationError(f"stack_order must be one of {sorted(STACK_ORDERS)}")
        if self.stack_offset not in STACK_OFFSETS:
            raise ConfigurationError(f"stack_offset must be one of {sorted(STACK_OFFSETS)}")
        if self.node_width < 0 or self.node_gap < 0:
            raise ConfigurationError("node_width and node_gap must be >= 0")
        if not (0 <= self.min_flow_threshold < 1):
            raise ConfigurationError("min_flow_threshold must be within [0, 1)")
        if not isinstance(self.levels, int) or self.levels < 1:
            raise ConfigurationError("levels must be an integer >= 1")
        if not (0 <= self.bar_padding < 1):
            raise ConfigurationError("bar_padding must be within [0, 1)")
        self._validate_palette()

    def _validate_palette(self) -> None:
        if self.categories is not None and len(set(self.categories)) != len(self.categories):
            raise ConfigurationError("categories must be unique")
        palette = self.color_palette
        if palette is None:
            return
        colors = list(palette.values()) if isinstance(palette, Mapping) else list(palette)
        if not colors:
            raise ConfigurationError("color_palette must not be empty")
        for color in colors:
            try:
                parse_hex(color)
            except ValueError as e:
                raise ConfigurationError(
                    f"Malformed palette color: {color!r}", context={"color": color}
                ) from e
        if isinstance(palette, Mapping) and self.categories is not None:
            missing = [c for c in self.categories if c not in palette]
            if missing:
                raise UnknownCategoryError(
                    f"No palette color for categories: {missing}", context={"missing": missing}
                )

    # ------------------------------------------------------------------
    # Derived helpers
    # ------------------------------------------------------------------
    @property
    def easing_fn(self) -> Callable[[float], float]:
        return resolve_easing(self.easing)

    def format_tooltip(self, payload: Any) -> str:
        if self.tooltip_formatter is None:
            return _default_tooltip(payload)
        return str(self.tooltip_formatter(payload))

    def cache_material(self) -> dict[str, Any]:
        """Return a JSON friendly view (callables reduced to their qualified name)."""
        out: dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if callable(value):
                value = getattr(value, "__qualname__", repr(value))
            elif isinstance(value, Mapping):
                value = dict(value)
            out[f.name] = value
        return out


def _default_tooltip(payload: Any) -> str:
    if isinstance(payload, Mapping):
        label = payload.get("label", payload.get("key", payload.get("id", "")))
        value = payload.get("value")
        if value is None:
            return str(label)
        if isinstance(value, float):
            value = f"{value:,.1f}" if abs(value) < 1000 else f"{value:,.0f}"
        return f"{label}: {value}" if label != "" else str(value)
    return str(payload)
