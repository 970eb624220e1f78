"""The rippled revolution surface of the lamp shade.

:func:`inner_radius_at` is the boundary oracle consulted by the cap
builders: the distance from the lamp axis to the inner face of the shell
wall at a given height fraction and angle.  :func:`build_surface` emits the
shell itself as a ruled triangle mesh.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from lampcap.mesh import TriangleMesh
from lampcap.params import SurfaceParams, height_segments, radial_segments

logger = logging.getLogger(__name__)

__all__ = ["SEAM_EPSILON", "MIN_RADIUS", "base_radius", "outer_radius_at",
           "inner_radius_at", "build_surface"]

# angular perturbation keeping samples off the 0/2pi seam
SEAM_EPSILON = 1e-4
MIN_RADIUS = 1.0

BELLY = 0.18
BELLY_EXPONENT = 1.4
HORIZONTAL_ANGLE_FACTOR = 1.5


def base_radius(t: float, r0: float, r1: float) -> float:
    """Un-rippled radius at height fraction ``t``: a lerp with a soft belly."""

    belly = 1.0 + BELLY * (1.0 - abs(2.0 * t - 1.0) ** BELLY_EXPONENT)
    return (r0 + (r1 - r0) * t) * belly


def outer_radius_at(p: SurfaceParams, v: float, ang: float) -> float:
    if not (math.isfinite(v) and math.isfinite(ang)):
        raise ValueError(f"surface sampled at a non-finite position (v={v!r}, angle={ang!r})")
    r0 = p.base_radius_bottom
    r1 = r0 * p.top_scale_factor
    br = base_radius(v, r0, r1)
    if p.ripple_direction == "vertical":
        phase = math.radians(p.twist_degrees) * v
        return br * (1.0 + p.ripple_amplitude * math.sin(p.wave_count * ang + phase))
    return br * (1.0 + p.ripple_amplitude *
                 math.sin(p.wave_count * 2.0 * math.pi * v + HORIZONTAL_ANGLE_FACTOR * ang))


def inner_radius_at(p: SurfaceParams, v: float, ang: float) -> float:
    """Radius of the inner wall at height fraction ``v`` and angle ``ang``.

    Never less than :data:`MIN_RADIUS`.  Raises ``ValueError`` for
    non-finite inputs so NaN cannot leak into contours.
    """

    return max(MIN_RADIUS, outer_radius_at(p, v, ang) - p.wall_thickness)


def build_surface(p: SurfaceParams) -> TriangleMesh:
    """Triangulate the shell's outer face as an open tube along +Z."""

    radial = radial_segments(p)
    rows = height_segments(p)
    r0 = p.base_radius_bottom
    r1 = r0 * p.top_scale_factor

    ang = np.arange(radial) / radial * 2.0 * np.pi + SEAM_EPSILON
    v = np.arange(rows + 1) / rows
    br = np.array([base_radius(t, r0, r1) for t in v])

    if p.ripple_direction == "vertical":
        phase = math.radians(p.twist_degrees) * v
        r = br[:, None] * (1.0 + p.ripple_amplitude *
                           np.sin(p.wave_count * ang[None, :] + phase[:, None]))
    else:
        r = br[:, None] * (1.0 + p.ripple_amplitude *
                           np.sin(p.wave_count * 2.0 * np.pi * v[:, None]
                                  + HORIZONTAL_ANGLE_FACTOR * ang[None, :]))

    verts = np.empty((rows + 1, radial, 3))
    verts[..., 0] = r * np.cos(ang)[None, :]
    verts[..., 1] = r * np.sin(ang)[None, :]
    verts[..., 2] = (p.height_total * v)[:, None]

    i = np.arange(radial)
    i2 = (i + 1) % radial
    faces = []
    for j in range(rows):
        a = j * radial + i
        b = j * radial + i2
        c = (j + 1) * radial + i
        d = (j + 1) * radial + i2
        faces.append(np.stack([a, b, c], axis=1))
        faces.append(np.stack([b, d, c], axis=1))

    logger.debug("surface: %d x %d grid, %s ripple", radial, rows + 1, p.ripple_direction)
    return TriangleMesh(verts.reshape(-1, 3), np.vstack(faces))
