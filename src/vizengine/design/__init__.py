"""Design helpers: motion/easing, reduced motion, color mixing, category palettes.

Everything here is pure and headless.
"""

from .motion import get_easing, list_easings, parse_cubic_bezier, resolve_easing  # noqa: F401
from .reduced_motion import (  # noqa: F401
    is_reduced_motion,
    set_reduced_motion,
    temporarily_reduced_motion,
)
from .color_mixing import interpolate_rgb, parse_hex, to_hex  # noqa: F401
from .chart_palette import CategoryPalette, build_category_palette  # noqa: F401
