"""Parameter records shared by the surface, contour and cap builders.

All records are frozen dataclasses.  Builders never mutate them; derived
values (clamped parameters, floored slot widths) are returned as new
instances via :func:`dataclasses.replace`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace

__all__ = [
    "RIPPLE_DIRECTIONS",
    "RESOLUTIONS",
    "MIN_SLOT_WIDTH",
    "SurfaceParams",
    "SlotOptions",
    "radial_segments",
    "height_segments",
    "clamp_for_build_volume",
]

RIPPLE_DIRECTIONS = ("vertical", "horizontal")
RESOLUTIONS = ("low", "med", "high")

# narrowest cable slot we will trace, in mm
MIN_SLOT_WIDTH = 0.5

_RADIAL_SEGMENTS = {"low": 96, "med": 180, "high": 300}
_HEIGHT_SEGMENTS = {"low": 120, "med": 220, "high": 360}

# widest belly of the base profile relative to the lerped radius
BELLY_MAX = 1.18


def _check_finite(obj) -> None:
    for f in fields(obj):
        value = getattr(obj, f.name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if not math.isfinite(value):
            raise ValueError(f"{type(obj).__name__}.{f.name} must be finite, got {value!r}")


@dataclass(frozen=True)
class SurfaceParams:
    """Shape parameters of the rippled revolution surface."""

    base_radius_bottom: float = 90.0
    top_scale_factor: float = 0.70
    wave_count: int = 18
    ripple_amplitude: float = 0.22
    twist_degrees: float = 420.0
    ripple_direction: str = "vertical"
    wall_thickness: float = 0.7
    height_total: float = 230.0
    resolution: str = "med"

    def __post_init__(self) -> None:
        _check_finite(self)
        if self.ripple_direction not in RIPPLE_DIRECTIONS:
            raise ValueError(
                f"ripple_direction must be one of {RIPPLE_DIRECTIONS}, got {self.ripple_direction!r}"
            )
        if self.resolution not in RESOLUTIONS:
            raise ValueError(f"resolution must be one of {RESOLUTIONS}, got {self.resolution!r}")
        if self.base_radius_bottom <= 0:
            raise ValueError("base_radius_bottom must be positive")
        if self.height_total <= 0:
            raise ValueError("height_total must be positive")


@dataclass(frozen=True)
class SlotOptions:
    """Cable slot cut into the bottom cap.

    Angles are in radians; ``centerline_angle`` 0 points along +X.
    ``length`` 0 means the corridor runs out to the rim at the slot's own
    angle.  ``roll`` turns the slot's cross-section about its centerline,
    so in the cap plane the slot narrows to ``width * |cos(roll)|`` (never
    below :data:`MIN_SLOT_WIDTH`).  ``tilt`` is an out-of-plane rotation and
    forces the CSG cap strategy.  ``offset`` moves the mouth radius; it only
    shifts an explicit-``length`` corridor and the pivot of a tilted cutter,
    since the traced keyhole always leaves the fitting circle at its
    tangency points.
    """

    enabled: bool = False
    centerline_angle: float = 0.0
    roll: float = 0.0
    mouth_rotation: float = 0.0
    tilt: float = 0.0
    width: float = 8.0
    length: float = 0.0
    overshoot: float = 1.0
    offset: float = 0.0

    def __post_init__(self) -> None:
        _check_finite(self)

    @property
    def effective_width(self) -> float:
        return max(MIN_SLOT_WIDTH, self.width)

    @property
    def half_width(self) -> float:
        return self.effective_width / 2.0

    @property
    def projected_half_width(self) -> float:
        """Half of the width the slot cuts in the cap plane once rolled."""

        return max(MIN_SLOT_WIDTH / 2.0, self.half_width * abs(math.cos(self.roll)))


def radial_segments(p: SurfaceParams) -> int:
    return _RADIAL_SEGMENTS[p.resolution]


def height_segments(p: SurfaceParams) -> int:
    return _HEIGHT_SEGMENTS[p.resolution]


def clamp_for_build_volume(p: SurfaceParams, bed: float = 256.0,
                           safety: float = 6.0) -> SurfaceParams:
    """Return ``p`` shrunk so the shade fits a ``bed`` mm cubic build volume.

    The radial limit accounts for the worst-case ripple peak, the belly of
    the base profile and a flaring top.
    """

    max_half = bed / 2.0 - safety
    scale_max = max(1.0, p.top_scale_factor)
    radial_limit = max_half / ((1.0 + max(0.0, p.ripple_amplitude)) * BELLY_MAX * scale_max)
    height_limit = bed - safety

    changes = {}
    if p.base_radius_bottom > radial_limit:
        changes["base_radius_bottom"] = radial_limit
    if p.height_total > height_limit:
        changes["height_total"] = height_limit
    if not changes:
        return p
    return replace(p, **changes)
