"""Color parsing and RGB interpolation.

Used by the sequential scale, horizon band ramps and color transitions.
Colors travel through the engine as hex strings; channel math happens on
``(r, g, b, a)`` int tuples in 0-255.

Public API:
    parse_hex(color) -> (r, g, b, a)
    to_hex(r, g, b, a=255, include_alpha=False) -> str
    mix(c1, c2, t) -> (r, g, b, a)
    interpolate_rgb(color_a, color_b, t) -> str
    ramp(color, count, base="#ffffff") -> list[str]
"""

from __future__ import annotations

from typing import List, Tuple

__all__ = [
    "parse_hex",
    "to_hex",
    "mix",
    "interpolate_rgb",
    "ramp",
]

RGBA = Tuple[int, int, int, int]


def parse_hex(color: str) -> RGBA:
    """Parse a hex color string into an (r, g, b, a) tuple.

    Supports #rgb, #rgba, #rrggbb, #rrggbbaa (case-insensitive).
    Raises ValueError for anything else.
    """
    if not isinstance(color, str):
        raise ValueError("color must be a string")
    c = color.strip()
    if not c.startswith("#"):
        raise ValueError(f"hex color must start with '#': {color!r}")
    c = c[1:]
    try:
        if len(c) in (3, 4):
            channels = [int(ch * 2, 16) for ch in c]
        elif len(c) in (6, 8):
            channels = [int(c[i : i + 2], 16) for i in range(0, len(c), 2)]
        else:
            raise ValueError(f"invalid hex color length: {color!r}")
    except ValueError as e:
        raise ValueError(f"invalid hex color: {color!r}") from e
    if len(channels) == 3:
        channels.append(255)
    r, g, b, a = channels
    return r, g, b, a


def _clamp_byte(v: float) -> int:
    v = int(round(v))
    return 0 if v < 0 else 255 if v > 255 else v


def to_hex(r: float, g: float, b: float, a: float = 255, *, include_alpha: bool = False) -> str:
    """Convert RGBA components to a lowercase hex string (values clamped to 0-255)."""
    parts = [_clamp_byte(r), _clamp_byte(g), _clamp_byte(b)]
    if include_alpha:
        parts.append(_clamp_byte(a))
    return "#" + "".join(f"{p:02x}" for p in parts)


def mix(c1: RGBA, c2: RGBA, t: float) -> RGBA:
    """Linearly mix two RGBA tuples; ``t`` is clamped to [0, 1]."""
    t = 0.0 if t < 0 else 1.0 if t > 1 else t
    return (
        _clamp_byte(c1[0] + (c2[0] - c1[0]) * t),
        _clamp_byte(c1[1] + (c2[1] - c1[1]) * t),
        _clamp_byte(c1[2] + (c2[2] - c1[2]) * t),
        _clamp_byte(c1[3] + (c2[3] - c1[3]) * t),
    )


def interpolate_rgb(color_a: str, color_b: str, t: float) -> str:
    """Interpolate two hex colors channel-wise in RGB space.

    Alpha is only emitted when either endpoint carries a non-opaque alpha.
    """
    a = parse_hex(color_a)
    b = parse_hex(color_b)
    r, g, bl, al = mix(a, b, t)
    return to_hex(r, g, bl, al, include_alpha=a[3] != 255 or b[3] != 255)


def ramp(color: str, count: int, base: str = "#ffffff") -> List[str]:
    """Return ``count`` colors stepping from near ``base`` up to ``color``.

    Step ``i`` sits at ``(i + 1) / count`` of the way, so the last entry is
    ``color`` itself and the first is never the bare base color.
    """
    if count < 1:
        raise ValueError("count must be >= 1")
    return [interpolate_rgb(base, color, (i + 1) / count) for i in range(count)]
