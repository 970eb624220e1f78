"""Guide geometry for tuning the cable slot interactively.

None of this is part of a cap; the guides are loose polylines a viewer can
draw over the bottom cap to show where the slot's landmarks ended up.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from lampcap.contours import Oracle, circle_contour, slot_geometry
from lampcap.geometry_utils import Contour
from lampcap.params import SlotOptions, SurfaceParams
from lampcap.surface import inner_radius_at

__all__ = ["MARKER_RADIUS", "SlotGuides", "build_slot_debug"]

MARKER_RADIUS = 1.5
MARKER_SEGMENTS = 16


@dataclass(frozen=True)
class SlotGuides:
    centerline: Contour
    edges: List[Contour]
    tip_circle: Contour
    rim_marker: Contour
    tangency_markers: List[Contour]

    def polylines(self) -> List[Contour]:
        """All guides flattened into one list of polylines."""

        return [self.centerline, *self.edges, self.tip_circle, self.rim_marker,
                *self.tangency_markers]


def build_slot_debug(params: SurfaceParams, height_fraction: float, hole_radius: float,
                     slot: Optional[SlotOptions], *,
                     oracle: Oracle = inner_radius_at) -> Optional[SlotGuides]:
    """Slot guides for the bottom cap, or ``None`` when there is no slot."""

    if slot is None or not slot.enabled or height_fraction != 0:
        return None

    geom = slot_geometry(params, hole_radius, slot, oracle)
    hw = geom.half_width
    # the corridor edges of the traced keyhole
    edges = [
        [geom.tangency_left, geom.tip_left],
        [geom.tangency_right, geom.tip_right],
    ]
    return SlotGuides(
        centerline=[geom.mouth, geom.tip_center],
        edges=edges,
        tip_circle=circle_contour(hw, 48, geom.tip_center, clockwise=False),
        rim_marker=circle_contour(MARKER_RADIUS, MARKER_SEGMENTS, geom.rim_point,
                                  clockwise=False),
        tangency_markers=[
            circle_contour(MARKER_RADIUS, MARKER_SEGMENTS, geom.tangency_left, clockwise=False),
            circle_contour(MARKER_RADIUS, MARKER_SEGMENTS, geom.tangency_right, clockwise=False),
        ],
    )
