"""Two-column flow (sankey) layout.

Sources occupy the left column, targets the right one, both in order of
first appearance. Node heights are proportional to node value (outgoing
total for sources, incoming total for targets) with a fixed gap between
nodes; the same value-to-pixel factor is used for both columns so link
thickness matches on both ends.

Link anchors are stacked along each node edge in link input order: the
first link leaving a source takes the top of that source, the next one
starts where the previous ended, and likewise on the target side. Two
links therefore never overlap on a node edge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

__all__ = ["FlowNode", "FlowLink", "FlowLayout", "flow_layout", "normalize_links"]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlowNode:
    node_id: str
    name: str
    column: int
    value: float
    x0: float
    x1: float
    y0: float
    y1: float


@dataclass(frozen=True)
class FlowLink:
    index: int
    source: str
    target: str
    value: float
    source_span: Tuple[float, float]
    target_span: Tuple[float, float]

    @property
    def width(self) -> float:
        return self.source_span[1] - self.source_span[0]


@dataclass(frozen=True)
class FlowLayout:
    nodes: Tuple[FlowNode, ...]
    links: Tuple[FlowLink, ...]
    scale: float

    def node(self, node_id: str) -> FlowNode:
        for n in self.nodes:
            if n.node_id == node_id:
                return n
        raise KeyError(f"Unknown flow node: {node_id}")


def normalize_links(raw: Iterable[Any]) -> List[Tuple[str, str, float]]:
    """Accept ``(source, target, value)`` tuples or mappings with those keys."""
    out = []
    for item in raw:
        if isinstance(item, Mapping):
            out.append((str(item["source"]), str(item["target"]), float(item["value"])))
        else:
            s, t, v = item
            out.append((str(s), str(t), float(v)))
    return out


def _column(names: Sequence[str], totals: Dict[str, float], prefix: str, column: int,
            x0: float, node_width: float, ky: float, gap: float) -> List[FlowNode]:
    nodes = []
    y = 0.0
    for name in names:
        h = totals[name] * ky
        nodes.append(FlowNode(f"{prefix}:{name}", name, column, totals[name], x0, x0 + node_width, y, y + h))
        y += h + gap
    return nodes


def flow_layout(
    links: Iterable[Any],
    *,
    width: float,
    height: float,
    node_width: float = 15.0,
    node_gap: float = 10.0,
    min_flow_threshold: float = 0.0,
) -> FlowLayout:
    """Position nodes and link anchors.

    Links with a non-positive value are dropped; with ``min_flow_threshold``
    > 0 links carrying less than that fraction of the total flow are dropped
    as well. No remaining links gives an empty layout.
    """
    data = [(s, t, v) for s, t, v in normalize_links(links) if v > 0]
    total = sum(v for _, _, v in data)
    if min_flow_threshold > 0 and total > 0:
        kept = [link for link in data if link[2] / total >= min_flow_threshold]
        if len(kept) != len(data):
            log.debug("flow: %d links below threshold %.3f", len(data) - len(kept), min_flow_threshold)
        data = kept
    if not data:
        return FlowLayout(nodes=(), links=(), scale=0.0)

    out_totals: Dict[str, float] = {}
    in_totals: Dict[str, float] = {}
    for s, t, v in data:
        out_totals[s] = out_totals.get(s, 0.0) + v
        in_totals[t] = in_totals.get(t, 0.0) + v
    sources = list(out_totals)
    targets = list(in_totals)
    flow_total = sum(out_totals.values())

    def fit(n: int) -> float:
        return max(0.0, height - (n - 1) * node_gap) / flow_total

    ky = min(fit(len(sources)), fit(len(targets)))
    left = _column(sources, out_totals, "src", 0, 0.0, node_width, ky, node_gap)
    right = _column(targets, in_totals, "tgt", 1, width - node_width, node_width, ky, node_gap)

    src_cursor = {n.name: n.y0 for n in left}
    tgt_cursor = {n.name: n.y0 for n in right}
    placed = []
    for i, (s, t, v) in enumerate(data):
        h = v * ky
        sy, ty = src_cursor[s], tgt_cursor[t]
        placed.append(FlowLink(i, f"src:{s}", f"tgt:{t}", v, (sy, sy + h), (ty, ty + h)))
        src_cursor[s] = sy + h
        tgt_cursor[t] = ty + h
    return FlowLayout(nodes=tuple(left + right), links=tuple(placed), scale=ky)
