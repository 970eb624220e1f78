import logging

import pytest
from shapely.errors import GEOSException

from lampcap import assembly, caps
from lampcap.assembly import build_lamp, cap_positions
from lampcap.caps import CapBuildError
from lampcap.config import LampDesign
from lampcap.params import SlotOptions, SurfaceParams

LOW = SurfaceParams(resolution="low")


def test_cap_positions_follow_mount():
    assert cap_positions(LampDesign(mount="hanging")) == {"top": 1.0}
    assert cap_positions(LampDesign(mount="standing")) == {"bottom": 0.0}


def test_hanging_lamp_gets_top_cap():
    lamp = build_lamp(LampDesign(surface=LOW, mount="hanging"))
    assert lamp.status == "complete"
    assert list(lamp.caps) == ["top"]
    assert lamp.guides is None
    assert lamp.caps["top"].bounds[1, 2] == pytest.approx(LOW.height_total)
    assert len(lamp.meshes()) == 2


def test_standing_lamp_gets_slotted_bottom_cap_and_guides():
    design = LampDesign(surface=LOW, mount="standing", slot=SlotOptions(enabled=True))
    lamp = build_lamp(design)
    assert list(lamp.caps) == ["bottom"]
    assert lamp.caps["bottom"].bounds[0, 2] == pytest.approx(0.0)
    assert lamp.caps["bottom"].is_watertight
    assert lamp.guides is not None


def test_oversized_design_is_clamped(caplog):
    design = LampDesign(surface=SurfaceParams(resolution="low", height_total=400.0))
    with caplog.at_level(logging.INFO, logger="lampcap"):
        lamp = build_lamp(design)
    assert lamp.design.surface.height_total == pytest.approx(250.0)
    assert lamp.body.bounds[1, 2] == pytest.approx(250.0)
    assert "clamped" in caplog.text


def test_cap_failure_leaves_body_only(monkeypatch, caplog):
    def failing_cap(*args, **kwargs):
        raise CapBuildError("boolean engine gave up")

    monkeypatch.setattr(assembly, "build_cap", failing_cap)
    with caplog.at_level(logging.WARNING, logger="lampcap"):
        lamp = build_lamp(LampDesign(surface=LOW))
    assert lamp.status == "body-only"
    assert lamp.caps == {}
    assert "boolean engine gave up" in lamp.failures["top"]
    assert lamp.meshes() == [lamp.body]
    assert "failed to build" in caplog.text


def test_rolled_slot_builds_complete_standing_lamp():
    design = LampDesign(surface=LOW, mount="standing",
                        slot=SlotOptions(enabled=True, roll=2.5))
    lamp = build_lamp(design)
    assert lamp.status == "complete"
    assert lamp.caps["bottom"].is_watertight


def test_unresolvable_outline_leaves_body_only(monkeypatch):
    class Unresolvable:
        def __init__(self, *args):
            pass

        def difference(self, other):
            raise GEOSException("TopologyException: side location conflict")

    monkeypatch.setattr(caps, "Polygon", Unresolvable)
    design = LampDesign(surface=LOW, mount="standing", slot=SlotOptions(enabled=True))
    lamp = build_lamp(design)
    assert lamp.status == "body-only"
    assert "side location conflict" in lamp.failures["bottom"]
