"""Marching-squares iso-line extraction over a 2D scalar field.

Coordinates are ``(col, row)`` in grid space, fractional along the cell
edge where the threshold is crossed. A corner counts as "high" when its
value is strictly greater than the threshold.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from typing import Literal, TypeAlias

import numpy as np
from numpy.typing import ArrayLike, NDArray

logger = logging.getLogger(__name__)

GridPoint: TypeAlias = tuple[float, float]
GridPolyline: TypeAlias = list[GridPoint]

# Edge identity: ("h", row, col) runs from (row, col) to (row, col + 1);
# ("v", row, col) runs from (row, col) to (row + 1, col).
Edge: TypeAlias = tuple[str, int, int]

# Cell edges, relative to the cell's lower-left corner (row, col)
_BOTTOM, _RIGHT, _TOP, _LEFT = "B", "R", "T", "L"

# Case index bits: 1 = (r, c), 2 = (r, c+1), 4 = (r+1, c+1), 8 = (r+1, c)
_SEGMENTS: dict[int, tuple[tuple[str, str], ...]] = {
    1: ((_LEFT, _BOTTOM),),
    2: ((_BOTTOM, _RIGHT),),
    3: ((_LEFT, _RIGHT),),
    4: ((_RIGHT, _TOP),),
    6: ((_BOTTOM, _TOP),),
    7: ((_LEFT, _TOP),),
    8: ((_LEFT, _TOP),),
    9: ((_BOTTOM, _TOP),),
    11: ((_RIGHT, _TOP),),
    12: ((_LEFT, _RIGHT),),
    13: ((_BOTTOM, _RIGHT),),
    14: ((_LEFT, _BOTTOM),),
}

# Saddles: which pair of corners is joined through the cell centre
_SADDLES: dict[str, dict[int, tuple[tuple[str, str], ...]]] = {
    # Low corners joined: the two high corners are cut off separately
    "low": {
        5: ((_LEFT, _BOTTOM), (_RIGHT, _TOP)),
        10: ((_BOTTOM, _RIGHT), (_LEFT, _TOP)),
    },
    # High corners joined: the two low corners are cut off separately
    "high": {
        5: ((_BOTTOM, _RIGHT), (_LEFT, _TOP)),
        10: ((_LEFT, _BOTTOM), (_RIGHT, _TOP)),
    },
}


def _edge_id(side: str, row: int, col: int) -> Edge:
    if side == _BOTTOM:
        return ("h", row, col)
    if side == _TOP:
        return ("h", row + 1, col)
    if side == _LEFT:
        return ("v", row, col)
    return ("v", row, col + 1)


def _crossing(field: NDArray[np.float64], edge: Edge, threshold: float) -> GridPoint:
    kind, row, col = edge
    a = field[row, col]
    b = field[row, col + 1] if kind == "h" else field[row + 1, col]
    t = 0.5 if b == a else (threshold - a) / (b - a)
    if kind == "h":
        return (col + float(t), float(row))
    return (float(col), row + float(t))


def _cell_cases(field: NDArray[np.float64], threshold: float) -> NDArray[np.int_]:
    """Case index per cell, -1 where any corner is NaN."""
    high = field > threshold
    ll, lr = high[:-1, :-1], high[:-1, 1:]
    ur, ul = high[1:, 1:], high[1:, :-1]
    cases = ll.astype(np.int_) + 2 * lr + 4 * ur + 8 * ul

    finite = np.isfinite(field)
    valid = finite[:-1, :-1] & finite[:-1, 1:] & finite[1:, 1:] & finite[1:, :-1]
    return np.where(valid, cases, -1)


def _segments_for_threshold(
    field: NDArray[np.float64],
    threshold: float,
    fully_connected: str,
) -> list[tuple[Edge, Edge]]:
    saddles = _SADDLES[fully_connected]
    cases = _cell_cases(field, threshold)
    active = np.argwhere((cases > 0) & (cases < 15))

    segments: list[tuple[Edge, Edge]] = []
    for row, col in active.tolist():
        case = int(cases[row, col])
        pairs = saddles.get(case) or _SEGMENTS[case]
        for side_a, side_b in pairs:
            segments.append((_edge_id(side_a, row, col), _edge_id(side_b, row, col)))
    return segments


def _stitch(segments: list[tuple[Edge, Edge]]) -> list[list[Edge]]:
    """Join segments that share an edge crossing into chains of edges."""
    by_edge: dict[Edge, list[int]] = defaultdict(list)
    for i, (a, b) in enumerate(segments):
        by_edge[a].append(i)
        by_edge[b].append(i)

    used = [False] * len(segments)

    def _walk(chain: list[Edge]) -> None:
        while True:
            tail = chain[-1]
            nxt = next((i for i in by_edge[tail] if not used[i]), None)
            if nxt is None:
                return
            used[nxt] = True
            a, b = segments[nxt]
            chain.append(b if a == tail else a)

    chains: list[list[Edge]] = []
    for i, (a, b) in enumerate(segments):
        if used[i]:
            continue
        used[i] = True
        forward = [a, b]
        _walk(forward)
        if forward[-1] == forward[0]:
            chains.append(forward)
            continue
        backward = [a]
        _walk(backward)
        chains.append(backward[:0:-1] + forward)
    return chains


def extract_contours(
    field: ArrayLike,
    thresholds: Sequence[float],
    fully_connected: Literal["low", "high"] = "low",
) -> list[list[GridPolyline]]:
    """Trace iso-lines of ``field`` at each threshold.

    Args:
        field: 2D array indexed ``[row, col]``
        thresholds: values to contour
        fully_connected: saddle convention, which corner pair ("low" or
            "high") is joined through an ambiguous cell

    Returns:
        One list of polylines per threshold, in threshold order. Closed
        rings end with their first point repeated.
    """
    if fully_connected not in _SADDLES:
        raise ValueError(f"fully_connected must be 'low' or 'high', got {fully_connected!r}")

    values = np.asarray(field, dtype=np.float64)
    if values.ndim != 2:
        raise ValueError(f"field must be 2D, got shape {values.shape}")

    if values.shape[0] < 2 or values.shape[1] < 2:
        return [[] for _ in thresholds]

    results: list[list[GridPolyline]] = []
    for threshold in thresholds:
        segments = _segments_for_threshold(values, float(threshold), fully_connected)
        chains = _stitch(segments)
        results.append([
            [_crossing(values, edge, float(threshold)) for edge in chain]
            for chain in chains
        ])
        logger.debug("Threshold %s: %d segment(s), %d polyline(s)", threshold, len(segments), len(chains))
    return results
