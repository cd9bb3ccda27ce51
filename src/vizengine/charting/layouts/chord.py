"""Chord layout over a square flow matrix.

``matrix[i][j]`` is the flow from node ``i`` to node ``j``. Node ``i`` gets
an arc proportional to its outgoing plus incoming flow (diagonal excluded)
with ``pad_angle`` between consecutive nodes. Inside a node arc the
outgoing sub-arcs come first (by target index), then the incoming ones (by
source index); ribbon ``i -> j`` joins node ``i``'s outgoing sub-arc for
``j`` to node ``j``'s incoming sub-arc for ``i``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from ...errors import InvalidDataError
from ..path import TAU

__all__ = ["ChordGroup", "Chord", "ChordLayout", "chord_layout"]

Span = Tuple[float, float]


@dataclass(frozen=True)
class ChordGroup:
    index: int
    value: float
    start_angle: float
    end_angle: float


@dataclass(frozen=True)
class Chord:
    source: int
    target: int
    value: float
    source_span: Span
    target_span: Span


@dataclass(frozen=True)
class ChordLayout:
    groups: Tuple[ChordGroup, ...]
    chords: Tuple[Chord, ...]
    total: float

    @property
    def empty(self) -> bool:
        return self.total <= 0


def _validate(matrix: Sequence[Sequence[float]]) -> List[List[float]]:
    n = len(matrix)
    rows = []
    for i, row in enumerate(matrix):
        if len(row) != n:
            raise InvalidDataError(
                "chord matrix must be square", context={"row": i, "length": len(row), "expected": n}
            )
        clean = []
        for v in row:
            v = float(v)
            if not math.isfinite(v) or v < 0:
                raise InvalidDataError("chord matrix values must be finite and >= 0", context={"row": i})
            clean.append(v)
        rows.append(clean)
    return rows


def chord_layout(matrix: Sequence[Sequence[float]], *, pad_angle: float = 0.0) -> ChordLayout:
    """Compute node arcs and ribbon spans.

    Raises
    ------
    InvalidDataError
        Non-square matrix or negative/non-finite entries.
    """
    m = _validate(matrix)
    n = len(m)
    out_sum = [sum(m[i][j] for j in range(n) if j != i) for i in range(n)]
    in_sum = [sum(m[j][i] for j in range(n) if j != i) for i in range(n)]
    node_total = [out_sum[i] + in_sum[i] for i in range(n)]
    total = sum(node_total)
    if n == 0 or total <= 0:
        return ChordLayout(groups=tuple(ChordGroup(i, 0.0, 0.0, 0.0) for i in range(n)), chords=(), total=0.0)

    pad = min(max(0.0, pad_angle), TAU / n)
    k = max(0.0, TAU - n * pad) / total
    groups = []
    outgoing: Dict[Tuple[int, int], Span] = {}
    incoming: Dict[Tuple[int, int], Span] = {}
    a = 0.0
    for i in range(n):
        a0 = a
        for j in range(n):
            if j != i:
                da = m[i][j] * k
                outgoing[(i, j)] = (a, a + da)
                a += da
        for j in range(n):
            if j != i:
                da = m[j][i] * k
                incoming[(j, i)] = (a, a + da)
                a += da
        groups.append(ChordGroup(i, node_total[i], a0, a))
        a += pad

    chords = [
        Chord(i, j, m[i][j], outgoing[(i, j)], incoming[(i, j)])
        for i in range(n)
        for j in range(n)
        if i != j and m[i][j] > 0
    ]
    return ChordLayout(groups=tuple(groups), chords=tuple(chords), total=total)
