"""Conforming end caps for the lamp shade.

A cap's outer wall follows the inner wall of the shade at the top or bottom
ring; its aperture is the lamp fitting hole, merged on the bottom cap with
an optional cable slot.  Two construction strategies share one entry
point, :func:`build_cap`:

``extrude``
    the outer contour minus the hole contour, triangulated and swept
    along +Z.  Exact, fast, and the default.

``csg``
    the outer contour swept into a blank, then a fitting cylinder and a
    capsule-shaped slot cutter subtracted with mesh booleans.  Needed for
    a slot tilted out of the cap plane.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
import trimesh
from shapely.errors import GEOSException
from shapely.geometry import Polygon

from lampcap import csg
from lampcap.contours import (
    HOLE_SEGMENTS,
    Oracle,
    SlotGeometry,
    build_hole_contour,
    build_outer_contour,
    slot_geometry,
    slot_is_degenerate,
)
from lampcap.csg import CapBuildError
from lampcap.extrude import extrude_geometry, extrude_polygon
from lampcap.mesh import TriangleMesh
from lampcap.params import SlotOptions, SurfaceParams
from lampcap.surface import inner_radius_at

logger = logging.getLogger(__name__)

__all__ = ["METHODS", "CapBuildError", "cap_z_offset", "choose_method",
           "slot_cutter", "build_cap"]

METHODS = ("auto", "extrude", "csg")

CAPSULE_SEGMENTS = 24
# extra length of cutters beyond the solids they cut
CUT_MARGIN = 2.0
# lower bound on cos(tilt) when padding a tilted cutter
MIN_TILT_COS = 0.25


def cap_z_offset(params: SurfaceParams, height_fraction: float, cap_thickness: float) -> float:
    """Base height of a cap so it sits flush inside ``[0, height_total]``."""

    return height_fraction * (params.height_total - cap_thickness)


def _slot_active(slot: Optional[SlotOptions], height_fraction: float) -> bool:
    return slot is not None and slot.enabled and height_fraction == 0


def choose_method(slot: Optional[SlotOptions], height_fraction: float,
                  method: str = "auto") -> str:
    if method not in METHODS:
        raise ValueError(f"method must be one of {METHODS}, got {method!r}")
    if method != "auto":
        return method
    if _slot_active(slot, height_fraction) and slot.tilt != 0:
        return "csg"
    return "extrude"


def build_cap(params: SurfaceParams, height_fraction: float, cap_thickness: float,
              hole_radius: float, slot: Optional[SlotOptions] = None, *,
              method: str = "auto", oracle: Oracle = inner_radius_at,
              backend: str | None = None) -> TriangleMesh:
    """Build the cap at ``height_fraction`` (0 bottom, 1 top).

    The result is a closed mesh with outward winding and vertex normals.
    Slot options only apply to the bottom cap; a slot that does not fit
    degrades to the plain fitting hole.  Raises :class:`CapBuildError`
    when the CSG strategy cannot produce a solid.
    """

    if cap_thickness <= 0:
        raise ValueError("cap_thickness must be positive")
    if hole_radius <= 0:
        raise ValueError("hole_radius must be positive")
    chosen = choose_method(slot, height_fraction, method)
    z0 = cap_z_offset(params, height_fraction, cap_thickness)

    if chosen == "extrude":
        mesh = _extruded_cap(params, height_fraction, cap_thickness, hole_radius,
                             slot, oracle, z0)
    else:
        mesh = _csg_cap(params, height_fraction, cap_thickness, hole_radius,
                        slot, oracle, z0, backend)

    logger.debug("cap v=%.2f via %s: %d vertices, %d faces, z=[%.2f, %.2f]",
                 height_fraction, chosen, len(mesh.vertices), len(mesh.faces),
                 z0, z0 + cap_thickness)
    return mesh


def _extruded_cap(params, height_fraction, cap_thickness, hole_radius, slot,
                  oracle, z0) -> TriangleMesh:
    outer = build_outer_contour(params, height_fraction, oracle=oracle)
    hole = build_hole_contour(params, height_fraction, hole_radius, slot, oracle=oracle)

    # the keyhole tip runs past the rim; the difference trims it there
    try:
        shape = Polygon(outer).difference(Polygon(hole))
    except GEOSException as exc:
        raise CapBuildError(
            f"cap outline at v={height_fraction:.2f} could not be resolved: {exc}"
        ) from exc
    if not shape.is_valid:
        shape = shape.buffer(0)
    return extrude_geometry(shape, cap_thickness, z0)


def _csg_cap(params, height_fraction, cap_thickness, hole_radius, slot,
             oracle, z0, backend) -> TriangleMesh:
    outer = build_outer_contour(params, height_fraction, oracle=oracle)
    blank = extrude_polygon(outer, (), cap_thickness, z0)

    fitting = trimesh.creation.cylinder(radius=hole_radius,
                                        height=params.height_total + 2 * CUT_MARGIN,
                                        sections=HOLE_SEGMENTS)
    fitting.apply_translation([0.0, 0.0, params.height_total / 2.0])
    cutters = [fitting]

    if _slot_active(slot, height_fraction):
        geom = slot_geometry(params, hole_radius, slot, oracle)
        if slot_is_degenerate(geom):
            logger.debug("csg slot at %.3f rad dropped", geom.theta)
        else:
            cutters.append(slot_cutter(geom, slot, cap_thickness, z0, backend=backend))

    return csg.difference(blank, cutters, backend=backend).compute_vertex_normals()


def slot_cutter(geom: SlotGeometry, slot: SlotOptions, cap_thickness: float,
                z0: float = 0.0, *, backend: str | None = None) -> trimesh.Trimesh:
    """Capsule cutter for the cable slot, as a trimesh in cap coordinates.

    The capsule runs along the centerline from behind the tangency chord to
    the tip, with the in-plane width left after ``roll``.  It is stretched
    along Z to pierce the cap whatever the tilt, clipped to the part in
    front of the mouth chord, tilted about the width axis through the mouth
    and finally turned to the slot angle and lifted to the cap's mid-plane.
    """

    hw = geom.half_width
    s0 = geom.chord_radius - hw
    s1 = geom.r_tip
    length = s1 - s0

    capsule = trimesh.creation.capsule(height=length, radius=hw,
                                       count=[CAPSULE_SEGMENTS, CAPSULE_SEGMENTS])
    capsule.apply_translation(-capsule.bounds.mean(axis=0))
    # capsule axis Z -> X
    capsule.apply_transform(trimesh.transformations.rotation_matrix(math.pi / 2.0, [0, 1, 0]))

    reach = cap_thickness / 2.0 + CUT_MARGIN + length * abs(math.sin(slot.tilt))
    zscale = max(1.0, reach / max(math.cos(slot.tilt), MIN_TILT_COS) / hw)
    stretch = np.eye(4)
    stretch[2, 2] = zscale
    capsule.apply_transform(stretch)
    capsule.apply_translation([s0 + length / 2.0, 0.0, 0.0])

    # keep only what lies in front of the mouth chord
    span = s1 + hw + CUT_MARGIN - geom.chord_radius
    extent = hw * zscale + CUT_MARGIN
    box = trimesh.creation.box(extents=[span, 2.0 * extent, 2.0 * extent])
    box.apply_translation([geom.chord_radius + span / 2.0, 0.0, 0.0])
    if slot.mouth_rotation:
        box.apply_transform(trimesh.transformations.rotation_matrix(
            slot.mouth_rotation, [0, 0, 1], point=[geom.chord_radius, 0.0, 0.0]))
    cutter = csg.intersection(capsule, box, backend=backend)

    if slot.tilt:
        cutter.apply_transform(trimesh.transformations.rotation_matrix(
            slot.tilt, [0, 1, 0], point=[geom.r_inner, 0.0, 0.0]))
    cutter.apply_transform(trimesh.transformations.rotation_matrix(geom.theta, [0, 0, 1]))
    cutter.apply_translation([0.0, 0.0, z0 + cap_thickness / 2.0])
    return cutter
