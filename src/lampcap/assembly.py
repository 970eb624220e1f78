"""Whole-lamp rebuilds: shade body plus the cap its mount needs.

A hanging lamp gets a top cap (the cable drops through the fitting hole);
a standing lamp gets a bottom cap, with the cable slot when enabled.  A cap
that fails to build never takes the rebuild down with it: the failure is
logged and recorded and the assembly carries the body alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from lampcap.caps import CapBuildError, build_cap
from lampcap.config import LampDesign
from lampcap.debug import SlotGuides, build_slot_debug
from lampcap.mesh import TriangleMesh
from lampcap.params import clamp_for_build_volume
from lampcap.surface import build_surface

logger = logging.getLogger(__name__)

__all__ = ["LampAssembly", "cap_positions", "build_lamp"]


@dataclass
class LampAssembly:
    design: LampDesign
    body: TriangleMesh
    caps: Dict[str, TriangleMesh] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)
    guides: Optional[SlotGuides] = None

    @property
    def status(self) -> str:
        return "body-only" if self.failures else "complete"

    def meshes(self) -> List[TriangleMesh]:
        return [self.body] + [self.caps[k] for k in sorted(self.caps)]


def cap_positions(design: LampDesign) -> Dict[str, float]:
    """Cap name to height fraction for ``design``'s mount."""

    if design.mount == "standing":
        return {"bottom": 0.0}
    return {"top": 1.0}


def build_lamp(design: LampDesign, *, backend: str | None = None) -> LampAssembly:
    """Rebuild body, caps and slot guides for ``design``."""

    surface = clamp_for_build_volume(design.surface)
    if surface != design.surface:
        logger.info("clamped %s to the build volume: radius %.1f mm, height %.1f mm",
                    design.name, surface.base_radius_bottom, surface.height_total)
        design = replace(design, surface=surface)

    assembly = LampAssembly(design=design, body=build_surface(surface))

    for name, v in cap_positions(design).items():
        try:
            assembly.caps[name] = build_cap(surface, v, design.cap_thickness,
                                            design.hole_radius, design.slot,
                                            method=design.method, backend=backend)
        except (CapBuildError, ValueError) as exc:
            logger.warning("%s cap failed to build, showing body only: %s", name, exc)
            assembly.failures[name] = str(exc)

    if design.mount == "standing":
        assembly.guides = build_slot_debug(surface, 0.0, design.hole_radius, design.slot)

    logger.info("rebuilt %s (%s mount): %s", design.name, design.mount, assembly.status)
    return assembly
