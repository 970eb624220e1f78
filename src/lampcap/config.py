"""Lamp designs stored as YAML, with bundled presets and override paths.

A design file looks like::

    surface:
      base_radius_bottom: 90
      ripple_direction: vertical
      resolution: med
    mount: standing
    cap_thickness: 5
    hole_radius: 20
    slot:
      enabled: true
      centerline_angle: 0     # degrees
      width: 8

Slot angles (``centerline_angle``, ``roll``, ``mouth_rotation``, ``tilt``)
are written in degrees and converted to radians on load.  Omitted keys take
the dataclass defaults.

Presets are looked up by name in, highest priority first:

1. directories listed in ``LAMPCAP_DESIGN_PATH`` (``os.pathsep`` separated)
2. the user config directory (``~/.config/lampcap/designs``)
3. the designs bundled with the package
"""

from __future__ import annotations

import logging
import math
import os
import sys
from dataclasses import asdict, dataclass, field, fields
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

import yaml

from lampcap.caps import METHODS
from lampcap.params import SlotOptions, SurfaceParams

logger = logging.getLogger(__name__)

__all__ = [
    "LAMPCAP_DESIGN_PATH",
    "MOUNTS",
    "ConfigError",
    "LampDesign",
    "design_from_dict",
    "design_to_dict",
    "load_design",
    "load_preset",
    "list_presets",
    "clear_cache",
]

LAMPCAP_DESIGN_PATH = "LAMPCAP_DESIGN_PATH"
MOUNTS = ("hanging", "standing")

_BUNDLED_DATA_DIR = Path(__file__).parent / "data" / "designs"
_ANGLE_FIELDS = ("centerline_angle", "roll", "mouth_rotation", "tilt")


class ConfigError(ValueError):
    """A design file or preset is missing or malformed."""


@dataclass(frozen=True)
class LampDesign:
    """Everything needed to rebuild one lamp."""

    surface: SurfaceParams = field(default_factory=SurfaceParams)
    mount: str = "hanging"
    cap_thickness: float = 5.0
    hole_radius: float = 20.0
    slot: SlotOptions = field(default_factory=SlotOptions)
    finish: str = "opaque_white"
    method: str = "auto"
    name: str = "custom"

    def __post_init__(self) -> None:
        if self.mount not in MOUNTS:
            raise ValueError(f"mount must be one of {MOUNTS}, got {self.mount!r}")
        if self.method not in METHODS:
            raise ValueError(f"method must be one of {METHODS}, got {self.method!r}")


def clear_cache() -> None:
    """Forget cached search paths and presets (e.g. after editing a file)."""

    _get_data_dirs.cache_clear()
    _load_preset_cached.cache_clear()


@lru_cache(maxsize=None)
def _get_data_dirs() -> Tuple[Path, ...]:
    dirs: List[Path] = []

    env_path = os.environ.get(LAMPCAP_DESIGN_PATH)
    if env_path:
        for p in env_path.split(os.pathsep):
            p = p.strip()
            if p:
                path = Path(p).expanduser().resolve()
                if path.is_dir():
                    dirs.append(path)

    if sys.platform == "win32":
        config_base = Path(os.environ.get("APPDATA", "~")).expanduser()
    else:
        config_base = Path.home() / ".config"
    user_config = config_base / "lampcap" / "designs"
    if user_config.is_dir():
        dirs.append(user_config)

    if _BUNDLED_DATA_DIR.is_dir():
        dirs.append(_BUNDLED_DATA_DIR)

    return tuple(dirs)


def _build(cls, data: Any, where: str):
    if data is None:
        return cls()
    if not isinstance(data, Mapping):
        raise ConfigError(f"{where}: expected a mapping, got {type(data).__name__}")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"{where}: unknown keys {unknown}")
    try:
        return cls(**data)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{where}: {exc}") from exc


def design_from_dict(data: Mapping[str, Any], where: str = "design") -> LampDesign:
    """Build a :class:`LampDesign` from parsed YAML."""

    if not isinstance(data, Mapping):
        raise ConfigError(f"{where}: expected a mapping at the root")
    data = dict(data)
    surface = _build(SurfaceParams, data.pop("surface", None), f"{where}.surface")

    slot_data = data.pop("slot", None)
    if isinstance(slot_data, Mapping):
        slot_data = dict(slot_data)
        for key in _ANGLE_FIELDS:
            if key in slot_data:
                try:
                    slot_data[key] = math.radians(float(slot_data[key]))
                except (TypeError, ValueError) as exc:
                    raise ConfigError(f"{where}.slot.{key}: {exc}") from exc
    slot = _build(SlotOptions, slot_data, f"{where}.slot")

    data.setdefault("name", where)
    return _build(LampDesign, dict(data, surface=surface, slot=slot), where)


def design_to_dict(design: LampDesign) -> Dict[str, Any]:
    """Inverse of :func:`design_from_dict`, suitable for ``yaml.safe_dump``."""

    out = asdict(design)
    for key in _ANGLE_FIELDS:
        out["slot"][key] = math.degrees(out["slot"][key])
    return out


def load_design(path: Path | str) -> LampDesign:
    """Load a design file."""

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"design file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    logger.debug("loaded design %s", path)
    return design_from_dict(data or {}, where=path.stem)


@lru_cache(maxsize=32)
def _load_preset_cached(name: str) -> LampDesign:
    filename = f"{name}.yaml"
    for data_dir in _get_data_dirs():
        path = data_dir / filename
        if path.exists():
            return load_design(path)

    searched = [str(d) for d in _get_data_dirs()]
    raise ConfigError(
        f"No design preset named '{name}'.\n"
        f"Searched directories: {searched}\n"
        f"Available presets: {list_presets()}"
    )


def load_preset(name: str) -> LampDesign:
    """Load a named preset from the search path."""

    return _load_preset_cached(name)


def list_presets() -> List[str]:
    names = set()
    for data_dir in _get_data_dirs():
        names.update(p.stem for p in data_dir.glob("*.yaml"))
    return sorted(names)