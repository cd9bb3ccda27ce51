"""Layout algorithms: pure functions from data to positions/angles.

Layouts know nothing about paths or colors; chart builders feed their
output to the shape generators.
"""

from .pie import PieLayout, PieSlice, pie  # noqa: F401
from .stack import StackLayout, stack, stack_order  # noqa: F401
from .density import (  # noqa: F401
    DensityEstimate,
    epanechnikov,
    estimate_density,
    evaluation_grid,
    kde,
    quartiles,
    silverman_bandwidth,
)
from .horizon import HorizonLayout, horizon  # noqa: F401
from .flow import FlowLayout, FlowLink, FlowNode, flow_layout  # noqa: F401
from .chord import Chord, ChordGroup, ChordLayout, chord_layout  # noqa: F401
from .radar import RadarAxis, RadarLayout, radar_layout  # noqa: F401
