import math

import pytest

from lampcap.contours import slot_geometry
from lampcap.debug import MARKER_RADIUS, build_slot_debug
from lampcap.params import SlotOptions, SurfaceParams

PARAMS = SurfaceParams(resolution="low")
SLOT = SlotOptions(enabled=True, centerline_angle=0.5, width=8.0)


def test_no_guides_without_slot():
    assert build_slot_debug(PARAMS, 0.0, 20.0, None) is None
    assert build_slot_debug(PARAMS, 0.0, 20.0, SlotOptions()) is None
    assert build_slot_debug(PARAMS, 1.0, 20.0, SLOT) is None


def test_guides_mark_slot_landmarks():
    guides = build_slot_debug(PARAMS, 0.0, 20.0, SLOT)
    geom = slot_geometry(PARAMS, 20.0, SLOT)

    assert guides.centerline[0] == pytest.approx(geom.mouth)
    assert guides.centerline[1] == pytest.approx(geom.tip_center)
    assert guides.edges == [[geom.tangency_left, geom.tip_left],
                            [geom.tangency_right, geom.tip_right]]

    for pt in guides.tip_circle:
        assert math.dist(pt, geom.tip_center) == pytest.approx(geom.half_width)
    for pt in guides.rim_marker:
        assert math.dist(pt, geom.rim_point) == pytest.approx(MARKER_RADIUS)
    for marker, tangency in zip(guides.tangency_markers,
                                (geom.tangency_left, geom.tangency_right)):
        assert math.dist(marker[0], tangency) == pytest.approx(MARKER_RADIUS)


def test_polylines_flatten_every_guide():
    guides = build_slot_debug(PARAMS, 0.0, 20.0, SLOT)
    assert len(guides.polylines()) == 1 + 2 + 1 + 1 + 2
