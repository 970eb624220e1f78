"""Triangulation of cap faces.

We delegate to ``mapbox-earcut`` (the fast ear clipping implementation
used by Mapbox GL) to keep the logic compact and reliable.  The routine in
this file normalises outer and hole loops into the ring layout expected by
earcut and hands back the normalised loops together with triangle indices
into their concatenation, so callers can share vertices between the faces
and the side walls of an extrusion.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np

try:
    import mapbox_earcut as _earcut
except ImportError as exc:  # pragma: no cover - import guard
    raise ImportError(
        "mapbox-earcut must be installed to triangulate polygons with holes"
    ) from exc

from lampcap.geometry_utils import Contour, open_loop, signed_area

__all__ = ["prepare_loop", "triangulate_polygon"]


def prepare_loop(points: Sequence[Sequence[float]], *, want_ccw: bool) -> Contour:
    """Open ``points`` and reverse it if needed to get the requested winding."""

    loop = open_loop(points)
    if len(loop) < 3:
        return loop
    area = signed_area(loop)
    if want_ccw and area < 0:
        loop.reverse()
    elif not want_ccw and area > 0:
        loop.reverse()
    return loop


def triangulate_polygon(outer: Sequence[Sequence[float]],
                        holes: Iterable[Sequence[Sequence[float]]] | None = None
                        ) -> Tuple[List[Contour], np.ndarray]:
    """Triangulate ``outer`` minus ``holes``.

    Returns ``(loops, faces)``: ``loops[0]`` is the counterclockwise outer
    loop, the rest are clockwise holes (degenerate holes are dropped), and
    ``faces`` is an ``(m, 3)`` index array into the concatenated loops with
    every triangle wound counterclockwise.
    """

    if holes is None:
        holes = []

    outer_loop = prepare_loop(outer, want_ccw=True)
    if len(outer_loop) < 3:
        return [], np.zeros((0, 3), dtype=np.int64)

    loops = [outer_loop]
    for hole in holes:
        loop = prepare_loop(hole, want_ccw=False)
        if len(loop) < 3:
            continue
        loops.append(loop)

    vertices = np.asarray([pt for loop in loops for pt in loop], dtype=np.float64)
    ring_ends = np.cumsum([len(loop) for loop in loops]).astype(np.uint32)
    indices = np.asarray(_earcut.triangulate_float64(vertices, ring_ends), dtype=np.int64)
    faces = indices.reshape(-1, 3)

    if len(faces):
        tri = vertices[faces]
        cross = ((tri[:, 1, 0] - tri[:, 0, 0]) * (tri[:, 2, 1] - tri[:, 0, 1])
                 - (tri[:, 2, 0] - tri[:, 0, 0]) * (tri[:, 1, 1] - tri[:, 0, 1]))
        flip = cross < 0
        faces[flip] = faces[flip][:, [0, 2, 1]]
    return loops, faces
