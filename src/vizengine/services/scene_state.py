"""Scene state map: ``element_id -> DrawState``.

Holds the mutable, per-frame draw properties of every rendered element
(opacity, highlight flag, animated shape parameters) next to its immutable
``ShapeState`` geometry. Animations and hover effects write here through
setters; ``frame()`` derives the ShapeStates to draw purely from this map.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence

from ..charting.path import format_commands
from ..charting.types import GeometrySnapshot, ShapeState

__all__ = ["DrawState", "SceneStateMap"]

ParamsRenderer = Callable[[ShapeState, Mapping[str, float]], ShapeState]


@dataclass
class DrawState:
    shape: ShapeState
    opacity: float = 1.0
    base_opacity: float = 1.0
    highlighted: bool = False
    params: Dict[str, Any] = field(default_factory=dict)


class SceneStateMap:
    """Ordered element map; insertion order is draw order."""

    def __init__(self) -> None:
        self._states: Dict[str, DrawState] = {}
        self._param_renderers: Dict[str, ParamsRenderer] = {}

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------
    def replace(self, snapshot: GeometrySnapshot, *, initial_opacity: Optional[float] = None) -> List[str]:
        """Swap in a new snapshot; returns the ids of superseded elements."""
        superseded = list(self._states)
        self._states = {}
        for shape in snapshot.elements:
            start = shape.opacity if initial_opacity is None else initial_opacity
            self._states[shape.element_id] = DrawState(
                shape=shape, opacity=start, base_opacity=shape.opacity, params=dict(shape.params)
            )
        return superseded

    def clear(self) -> None:
        self._states.clear()

    def register_params_renderer(self, kind: str, fn: ParamsRenderer) -> None:
        """Rebuild geometry of ``kind`` elements from their animated params."""
        self._param_renderers[kind] = fn

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------
    def __contains__(self, element_id: object) -> bool:
        return element_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def get(self, element_id: str) -> DrawState:
        try:
            return self._states[element_id]
        except KeyError:
            raise KeyError(f"Unknown element: {element_id}") from None

    def ids(self) -> List[str]:
        return list(self._states)

    def siblings(self, element_id: str) -> List[str]:
        """Ids sharing ``element_id``'s group (all other elements when ungrouped)."""
        group = self.get(element_id).shape.group
        return [
            eid
            for eid, st in self._states.items()
            if eid != element_id and (group is None or st.shape.group == group)
        ]

    # ------------------------------------------------------------------
    # Setters used by transitions / interaction
    # ------------------------------------------------------------------
    def opacity_setter(self, element_id: str) -> Callable[[float], None]:
        def _set(value: float) -> None:
            state = self._states.get(element_id)
            if state is not None:
                state.opacity = float(value)

        return _set

    def params_setter(self, element_id: str) -> Callable[[Mapping[str, float]], None]:
        def _set(value: Mapping[str, float]) -> None:
            state = self._states.get(element_id)
            if state is not None:
                state.params = dict(value)

        return _set

    def set_highlight(self, element_ids: Sequence[str], highlighted: bool) -> None:
        for eid in element_ids:
            state = self._states.get(eid)
            if state is not None:
                state.highlighted = highlighted

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------
    def frame(self) -> List[ShapeState]:
        out = []
        for state in self._states.values():
            shape = state.shape
            renderer = self._param_renderers.get(shape.kind)
            if renderer is not None and state.params != dict(shape.params):
                shape = renderer(shape, state.params)
            out.append(replace(shape, opacity=state.opacity))
        return out

    def frame_paths(self) -> Dict[str, str]:
        return {s.element_id: format_commands(s.commands) for s in self.frame()}
