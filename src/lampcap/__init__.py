# -*- coding: utf-8 -*-
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("lampcap")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from lampcap.params import SlotOptions, SurfaceParams  # noqa: E402
from lampcap.caps import CapBuildError, build_cap  # noqa: E402
from lampcap.contours import build_hole_contour, build_outer_contour  # noqa: E402
from lampcap.debug import build_slot_debug  # noqa: E402
from lampcap.surface import build_surface, inner_radius_at  # noqa: E402

__all__ = [
    "__version__",
    "SurfaceParams",
    "SlotOptions",
    "CapBuildError",
    "build_cap",
    "build_outer_contour",
    "build_hole_contour",
    "build_slot_debug",
    "build_surface",
    "inner_radius_at",
]
