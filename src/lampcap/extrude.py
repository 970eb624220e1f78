"""Linear extrusion of planar polygons with holes into closed meshes.

The bottom face, the top face and the side walls share one vertex ring per
boundary loop, so the result is watertight without any welding step.  The
outer loop is wound counterclockwise and holes clockwise; with that
convention the side-wall quads ``(i, i+1)`` face outward for every loop.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

import numpy as np
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from lampcap.geometry_utils import epsilon
from lampcap.mesh import TriangleMesh, concatenate
from lampcap.triangulator import triangulate_polygon

logger = logging.getLogger(__name__)

__all__ = ["extrude_polygon", "extrude_geometry"]


def extrude_polygon(outer: Sequence[Sequence[float]],
                    holes: Iterable[Sequence[Sequence[float]]] = (),
                    height: float = 1.0, z0: float = 0.0) -> TriangleMesh:
    """Sweep ``outer`` minus ``holes`` from ``z0`` to ``z0 + height``."""

    if height <= epsilon:
        raise ValueError('bad height passed to extrude_polygon')

    loops, faces = triangulate_polygon(outer, holes)
    if not loops:
        raise ValueError('degenerate polygon passed to extrude_polygon')

    ring = np.asarray([pt for loop in loops for pt in loop], dtype=float)
    n = len(ring)
    verts = np.empty((2 * n, 3))
    verts[:n, :2] = ring
    verts[:n, 2] = z0
    verts[n:, :2] = ring
    verts[n:, 2] = z0 + height

    bottom = faces[:, [0, 2, 1]]
    top = faces + n

    sides: List[np.ndarray] = []
    start = 0
    for loop in loops:
        count = len(loop)
        i = np.arange(count) + start
        j = (np.arange(count) + 1) % count + start
        sides.append(np.stack([i, j, j + n], axis=1))
        sides.append(np.stack([i, j + n, i + n], axis=1))
        start += count

    return TriangleMesh(verts, np.vstack([bottom, top] + sides))


def extrude_geometry(geom: BaseGeometry, height: float, z0: float = 0.0) -> TriangleMesh:
    """Extrude a shapely ``Polygon`` or ``MultiPolygon``."""

    if isinstance(geom, Polygon):
        parts = [geom]
    elif isinstance(geom, MultiPolygon):
        parts = list(geom.geoms)
    else:
        raise ValueError(f'cannot extrude {geom.geom_type}')

    meshes = []
    for part in parts:
        if part.is_empty or part.area <= epsilon:
            continue
        meshes.append(extrude_polygon(list(part.exterior.coords),
                                      [list(r.coords) for r in part.interiors],
                                      height, z0))
    if len(parts) > 1:
        logger.debug("extruded %d separate polygon parts", len(meshes))
    if not meshes:
        raise ValueError('empty geometry passed to extrude_geometry')
    return concatenate(meshes)
