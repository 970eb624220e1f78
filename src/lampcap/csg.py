"""Trimesh-backed boolean subtraction for CSG caps.

Cap blanks and cutters are converted to ``trimesh.Trimesh`` instances and
dispatched through :mod:`trimesh.boolean`.  Availability depends on at least
one boolean backend supported by ``trimesh``; ``manifold3d`` is installed
with this package and is preferred when present.
"""

from __future__ import annotations

import logging
from typing import Sequence

import trimesh

from lampcap.mesh import TriangleMesh

logger = logging.getLogger(__name__)

ENGINE_NAME = "trimesh"
PREFERRED_BACKEND = "manifold"

__all__ = ["ENGINE_NAME", "CapBuildError", "engines_available", "is_available",
           "default_backend", "difference", "intersection"]


class CapBuildError(RuntimeError):
    """A cap could not be built; the caller should fall back to body only."""


def engines_available() -> set[str]:
    """Return the set of trimesh boolean backends that are operational."""

    return set(trimesh.boolean.engines_available)


def is_available(backend: str | None = None) -> bool:
    """Check whether a boolean backend can run."""

    available = engines_available()
    if not available:
        return False
    if backend is None:
        return True
    return backend in available


def default_backend() -> str | None:
    available = engines_available()
    if PREFERRED_BACKEND in available:
        return PREFERRED_BACKEND
    return None


def _as_trimesh(obj) -> trimesh.Trimesh:
    if isinstance(obj, trimesh.Trimesh):
        return obj
    return obj.to_trimesh()


def _resolve_backend(backend: str | None) -> str | None:
    available = engines_available()
    if backend is None:
        backend = default_backend()
    if backend is not None and backend not in available:
        raise CapBuildError(
            f"trimesh backend '{backend}' is not available (available: {available})"
        )
    if backend is None and not available:
        raise CapBuildError(
            "no trimesh boolean backends are available; install manifold3d"
        )
    return backend


def _run(operation: str, meshes: Sequence, backend: str | None) -> trimesh.Trimesh:
    backend = _resolve_backend(backend)
    meshes = [_as_trimesh(m) for m in meshes]
    try:
        if operation == 'difference':
            result = trimesh.boolean.difference(meshes, engine=backend, check_volume=False)
        elif operation == 'intersection':
            result = trimesh.boolean.intersection(meshes, engine=backend, check_volume=False)
        else:
            raise CapBuildError(f"unsupported boolean operation '{operation}'")
    except CapBuildError:
        raise
    except Exception as exc:
        raise CapBuildError(f"trimesh boolean {operation} failed: {exc}") from exc

    if result is None or len(result.faces) == 0:
        raise CapBuildError(f"boolean {operation} produced an empty mesh")

    logger.debug("%s:%s %s of %d meshes -> %d faces",
                 ENGINE_NAME, backend or "auto", operation, len(meshes), len(result.faces))
    return result


def difference(blank, cutters: Sequence, *, backend: str | None = None) -> TriangleMesh:
    """Subtract every cutter from ``blank`` and return the result.

    Raises :class:`CapBuildError` if no backend is available, the backend
    fails, or the result is empty.
    """

    return TriangleMesh.from_trimesh(_run('difference', [blank] + list(cutters), backend))


def intersection(a, b, *, backend: str | None = None) -> trimesh.Trimesh:
    """Common volume of ``a`` and ``b``, kept as a trimesh for further cuts."""

    return _run('intersection', [a, b], backend)
