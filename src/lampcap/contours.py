"""2D contours of the conforming caps.

The outer contour follows the inner wall of the shade at one height and
winds counterclockwise.  Hole contours wind clockwise: either a plain
circle for the lamp fitting, or a single "keyhole" loop that merges the
fitting circle with a cable slot running out past the rim.

Every arc goes through :func:`arc_points`, which takes an explicit
direction and normalises the sweep before stepping, so a contour's winding
never depends on how its end angles happen to compare.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional

from lampcap.geometry_utils import Contour, Point2D, polar
from lampcap.params import SlotOptions, SurfaceParams, radial_segments
from lampcap.surface import SEAM_EPSILON, inner_radius_at

logger = logging.getLogger(__name__)

Oracle = Callable[[SurfaceParams, float, float], float]

__all__ = [
    "CLEARANCE",
    "HOLE_SEGMENTS",
    "Oracle",
    "SlotGeometry",
    "sweep_angle",
    "arc_points",
    "circle_contour",
    "build_outer_contour",
    "slot_geometry",
    "slot_is_degenerate",
    "keyhole_contour",
    "build_hole_contour",
]

TWO_PI = 2.0 * math.pi

# caps sit this fraction inside the shell wall
CLEARANCE = 0.995
HOLE_SEGMENTS = 96
TIP_SEGMENTS = 24
# asin() argument ceiling for the tangency half-angle
MAX_TANGENCY_RATIO = 1.0 - 1e-6
# corridor must be at least this long (mm) or the slot is dropped
MIN_CORRIDOR = 2.0
MIN_MOUTH_RADIUS = 0.1
# tip always clears the unshrunk rim by this fraction of its radius
MIN_OVERSHOOT_FRACTION = 0.01


def sweep_angle(start: float, end: float, clockwise: bool) -> float:
    """Signed sweep from ``start`` to ``end`` in the given direction.

    Clockwise sweeps lie in ``[-2pi, 0)``, counterclockwise ones in
    ``(0, 2pi]``; coincident end angles mean a full turn.
    """

    if clockwise:
        d = (start - end) % TWO_PI
        return -(d if d > 1e-12 else TWO_PI)
    d = (end - start) % TWO_PI
    return d if d > 1e-12 else TWO_PI


def arc_points(center: Point2D, radius: float, start: float, end: float, *,
               clockwise: bool, segments: int) -> Contour:
    """Points along a circular arc, both end points included."""

    segments = max(1, int(segments))
    sweep = sweep_angle(start, end, clockwise)
    step = sweep / segments
    return [polar(radius, start + step * i, center) for i in range(segments + 1)]


def circle_contour(radius: float, segments: int = HOLE_SEGMENTS,
                   center: Point2D = (0.0, 0.0), clockwise: bool = True) -> Contour:
    """Closed circle; clockwise by default so it can serve as a hole."""

    pts = arc_points(center, radius, 0.0, 0.0, clockwise=clockwise, segments=segments)
    pts[-1] = pts[0]
    return pts


def build_outer_contour(params: SurfaceParams, height_fraction: float,
                        segments: Optional[int] = None,
                        oracle: Oracle = inner_radius_at) -> Contour:
    """Sample the inner wall at ``height_fraction`` into a closed CCW loop."""

    n = segments or radial_segments(params)
    pts: Contour = []
    for i in range(n + 1):
        ang = (i % n) / n * TWO_PI + SEAM_EPSILON
        r = oracle(params, height_fraction, ang) * CLEARANCE
        pts.append((r * math.cos(ang), r * math.sin(ang)))
    return pts


@dataclass(frozen=True)
class SlotGeometry:
    """Landmarks of a cable slot in the plane of the bottom cap.

    ``u`` points along the centerline, ``v`` across it (left of ``u``).
    Radii are measured from the lamp axis along ``u``.
    """

    theta: float
    u: Point2D
    v: Point2D
    hole_radius: float
    half_width: float
    alpha: float
    ratio: float
    r_inner: float
    r_outer: float
    r_tip: float
    rim: float

    def along(self, r: float, across: float = 0.0) -> Point2D:
        return (self.u[0] * r + self.v[0] * across, self.u[1] * r + self.v[1] * across)

    @property
    def width_angle(self) -> float:
        return math.atan2(self.v[1], self.v[0])

    @property
    def mouth(self) -> Point2D:
        return self.along(self.r_inner)

    @property
    def tip_center(self) -> Point2D:
        return self.along(self.r_tip)

    @property
    def tip_left(self) -> Point2D:
        return self.along(self.r_tip, self.half_width)

    @property
    def tip_right(self) -> Point2D:
        return self.along(self.r_tip, -self.half_width)

    @property
    def tangency_left(self) -> Point2D:
        return polar(self.hole_radius, self.theta + self.alpha)

    @property
    def tangency_right(self) -> Point2D:
        return polar(self.hole_radius, self.theta - self.alpha)

    @property
    def chord_radius(self) -> float:
        """Distance along ``u`` of the chord joining the tangency points."""

        return self.hole_radius * math.cos(self.alpha)

    @property
    def rim_point(self) -> Point2D:
        return self.along(self.rim * CLEARANCE)


def slot_geometry(params: SurfaceParams, hole_radius: float, slot: SlotOptions,
                  oracle: Oracle = inner_radius_at) -> SlotGeometry:
    """Resolve ``slot`` against the bottom rim of the surface."""

    theta = slot.centerline_angle
    hw = slot.projected_half_width
    ratio = hw / hole_radius
    alpha = math.asin(min(max(ratio, 0.0), MAX_TANGENCY_RATIO))

    rim = oracle(params, 0.0, theta)
    r_inner = max(MIN_MOUTH_RADIUS, hole_radius + slot.offset)
    if slot.length > 0:
        r_outer = r_inner + slot.length
    else:
        r_outer = rim * CLEARANCE
    overshoot = max(slot.overshoot, MIN_OVERSHOOT_FRACTION * rim)
    r_tip = r_outer + hw + overshoot

    width_dir = theta + math.pi / 2.0
    return SlotGeometry(
        theta=theta,
        u=(math.cos(theta), math.sin(theta)),
        v=(math.cos(width_dir), math.sin(width_dir)),
        hole_radius=hole_radius,
        half_width=hw,
        alpha=alpha,
        ratio=ratio,
        r_inner=r_inner,
        r_outer=r_outer,
        r_tip=r_tip,
        rim=rim,
    )


def slot_is_degenerate(geom: SlotGeometry) -> bool:
    """True when the slot cannot be traced as a clean keyhole."""

    if geom.r_outer <= geom.r_inner + MIN_CORRIDOR:
        return True
    return geom.ratio >= MAX_TANGENCY_RATIO


def keyhole_contour(geom: SlotGeometry, segments: int = HOLE_SEGMENTS,
                    tip_segments: int = TIP_SEGMENTS) -> Contour:
    """Trace fitting circle and slot as one closed clockwise loop.

    Starting at the left tangency point the path runs out along the left
    edge, clockwise around the tip, back along the right edge to the right
    tangency point and then clockwise around the remaining arc of the
    fitting circle.
    """

    hw = geom.half_width
    pts: Contour = [geom.tangency_left, geom.tip_left]

    v_ang = geom.width_angle
    tip = arc_points(geom.tip_center, hw, v_ang, v_ang - math.pi,
                     clockwise=True, segments=tip_segments)
    pts.extend(tip[1:])

    start = geom.theta - geom.alpha
    end = geom.theta + geom.alpha
    sweep = abs(sweep_angle(start, end, clockwise=True))
    n = max(8, int(math.ceil(segments * sweep / TWO_PI)))
    pts.extend(arc_points((0.0, 0.0), geom.hole_radius, start, end,
                          clockwise=True, segments=n))
    pts[-1] = pts[0]
    return pts


def build_hole_contour(params: SurfaceParams, height_fraction: float, hole_radius: float,
                       slot: Optional[SlotOptions] = None, *,
                       oracle: Oracle = inner_radius_at,
                       segments: int = HOLE_SEGMENTS) -> Contour:
    """Clockwise aperture of a cap: the fitting circle, or a keyhole.

    The slot only applies to the bottom cap.  A slot that would be
    degenerate quietly falls back to the plain circle.
    """

    if slot is None or not slot.enabled or height_fraction != 0:
        return circle_contour(hole_radius, segments)

    geom = slot_geometry(params, hole_radius, slot, oracle)
    if slot_is_degenerate(geom):
        logger.debug("slot at %.3f rad dropped: corridor %.2f..%.2f mm, width ratio %.4f",
                     geom.theta, geom.r_inner, geom.r_outer, geom.ratio)
        return circle_contour(hole_radius, segments)
    return keyhole_contour(geom, segments)
