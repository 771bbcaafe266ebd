"""Ramer-Douglas-Peucker polyline simplification.

Used to compress freehand strokes before they are stored. The output is an
order-preserving subset of the input that always keeps the first and last
points exactly.
"""

from __future__ import annotations

from typing import Sequence

from pcs.geom.primitives import Point, distance_to_segment


def simplify_path(points: Sequence[Point], tolerance: float) -> list[Point]:
    """Simplify `points` so no dropped point deviates more than `tolerance`.

    Iterative (explicit stack) to stay clear of the recursion limit on long
    strokes; the kept indices are exactly those of the recursive formulation.
    """
    n = len(points)
    if n < 3:
        return list(points)
    tol = max(0.0, float(tolerance))

    keep = [False] * n
    keep[0] = keep[n - 1] = True
    stack: list[tuple[int, int]] = [(0, n - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        a, b = points[first], points[last]
        max_d = -1.0
        idx = first
        for i in range(first + 1, last):
            d = distance_to_segment(points[i], a, b)
            if d > max_d:
                max_d = d
                idx = i
        if max_d > tol:
            keep[idx] = True
            stack.append((first, idx))
            stack.append((idx, last))

    return [p for p, k in zip(points, keep) if k]
