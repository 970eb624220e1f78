"""Planar helpers shared by the contour builders, the triangulator and extrusion."""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

epsilon = 1e-9

Point2D = Tuple[float, float]
Contour = List[Point2D]


def signed_area(loop: Sequence[Sequence[float]]) -> float:
    """Shoelace area of a 2D loop; positive when counterclockwise.

    A duplicated closing point contributes nothing, so open and explicitly
    closed loops give the same answer.
    """

    total = 0.0
    n = len(loop)
    for i in range(n):
        x0, y0 = loop[i][0], loop[i][1]
        x1, y1 = loop[(i + 1) % n][0], loop[(i + 1) % n][1]
        total += x0 * y1 - x1 * y0
    return total / 2.0


def is_ccw(loop: Sequence[Sequence[float]]) -> bool:
    return signed_area(loop) > 0


def polar(radius: float, angle: float, center: Point2D = (0.0, 0.0)) -> Point2D:
    return (center[0] + radius * math.cos(angle), center[1] + radius * math.sin(angle))


def dist2d(p: Sequence[float], q: Sequence[float]) -> float:
    return math.hypot(p[0] - q[0], p[1] - q[1])


def near(p: Sequence[float], q: Sequence[float], tol: float = epsilon) -> bool:
    return abs(p[0] - q[0]) <= tol and abs(p[1] - q[1]) <= tol


def open_loop(loop: Sequence[Sequence[float]], tol: float = epsilon) -> Contour:
    """Drop consecutive duplicates and the closing point of ``loop``."""

    out: Contour = []
    for pt in loop:
        xy = (float(pt[0]), float(pt[1]))
        if out and near(out[-1], xy, tol):
            continue
        out.append(xy)
    if len(out) > 1 and near(out[0], out[-1], tol):
        out.pop()
    return out


__all__ = [
    "epsilon",
    "Point2D",
    "Contour",
    "signed_area",
    "is_ccw",
    "polar",
    "dist2d",
    "near",
    "open_loop",
]
