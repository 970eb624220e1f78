import math

import numpy as np
import pytest
import trimesh

from lampcap import csg
from lampcap.caps import CapBuildError, build_cap, slot_cutter
from lampcap.contours import slot_geometry
from lampcap.params import SlotOptions, SurfaceParams

PARAMS = SurfaceParams(resolution="low")

needs_backend = pytest.mark.skipif(not csg.is_available(),
                                   reason="no trimesh boolean backend installed")


@needs_backend
def test_csg_top_cap_matches_extrusion():
    extruded = build_cap(PARAMS, 1.0, 5.0, 20.0)
    carved = build_cap(PARAMS, 1.0, 5.0, 20.0, method="csg")
    assert carved.is_watertight
    assert carved.volume == pytest.approx(extruded.volume, rel=1e-3)
    np.testing.assert_allclose(carved.bounds, extruded.bounds, atol=1e-4)


@needs_backend
def test_csg_slot_removes_material():
    plain = build_cap(PARAMS, 0.0, 5.0, 20.0, method="csg")
    slotted = build_cap(PARAMS, 0.0, 5.0, 20.0, SlotOptions(enabled=True), method="csg")
    assert slotted.volume < plain.volume
    # both strategies agree on an untilted slot to within the capsule faceting
    extruded = build_cap(PARAMS, 0.0, 5.0, 20.0, SlotOptions(enabled=True))
    assert slotted.volume == pytest.approx(extruded.volume, rel=2e-2)


@needs_backend
def test_tilted_slot_uses_csg_and_cuts_through():
    slot = SlotOptions(enabled=True, tilt=math.radians(20), width=7.0)
    cap = build_cap(PARAMS, 0.0, 6.0, 20.0, slot)
    plain = build_cap(PARAMS, 0.0, 6.0, 20.0, method="csg")
    assert cap.volume < plain.volume
    zmin, zmax = cap.bounds[:, 2]
    assert zmin == pytest.approx(0.0, abs=1e-4)
    assert zmax == pytest.approx(6.0, abs=1e-4)


@needs_backend
def test_slot_cutter_is_clipped_at_chord():
    slot = SlotOptions(enabled=True, width=8.0)
    geom = slot_geometry(PARAMS, 20.0, slot, oracle=lambda p, v, a: 60.0)
    cutter = slot_cutter(geom, slot, 5.0)
    assert cutter.bounds[0, 0] == pytest.approx(geom.chord_radius, abs=1e-4)
    assert cutter.bounds[1, 0] == pytest.approx(geom.r_tip + geom.half_width, rel=1e-3)
    # stretched to pierce the cap
    assert cutter.bounds[0, 2] < 0.0
    assert cutter.bounds[1, 2] > 5.0


def test_difference_without_backend_raises(monkeypatch):
    monkeypatch.setattr(csg, "engines_available", lambda: set())
    box = trimesh.creation.box(extents=[10, 10, 10])
    with pytest.raises(CapBuildError):
        csg.difference(box, [trimesh.creation.box(extents=[2, 2, 20])])
    with pytest.raises(CapBuildError):
        build_cap(PARAMS, 1.0, 5.0, 20.0, method="csg")


def test_unknown_backend_raises():
    box = trimesh.creation.box(extents=[10, 10, 10])
    with pytest.raises(CapBuildError):
        csg.difference(box, [box], backend="no-such-engine")


def test_backend_failure_is_wrapped(monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("non-manifold input")

    monkeypatch.setattr(csg, "engines_available", lambda: {"manifold"})
    monkeypatch.setattr(trimesh.boolean, "difference", boom)
    box = trimesh.creation.box(extents=[10, 10, 10])
    with pytest.raises(CapBuildError, match="non-manifold"):
        csg.difference(box, [box])
