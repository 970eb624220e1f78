"""Indexed triangle meshes as produced by the surface and cap builders.

A :class:`TriangleMesh` is a flat vertex array, a triangle index array and
per-vertex normals, which is what renderers and STL exporters consume.
Conversion helpers to and from :class:`trimesh.Trimesh` are provided for
the boolean engine and for watertightness checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, Tuple

import numpy as np
import trimesh

from lampcap.geometry_utils import epsilon

__all__ = ["TriangleMesh", "concatenate"]


def _empty_vertices() -> np.ndarray:
    return np.zeros((0, 3), dtype=float)


def _empty_faces() -> np.ndarray:
    return np.zeros((0, 3), dtype=np.int64)


@dataclass
class TriangleMesh:
    vertices: np.ndarray = field(default_factory=_empty_vertices)
    faces: np.ndarray = field(default_factory=_empty_faces)
    normals: np.ndarray = field(default_factory=_empty_vertices)

    def __post_init__(self) -> None:
        self.vertices = np.asarray(self.vertices, dtype=float).reshape(-1, 3)
        self.faces = np.asarray(self.faces, dtype=np.int64).reshape(-1, 3)
        normals = np.asarray(self.normals, dtype=float).reshape(-1, 3)
        if len(normals) != len(self.vertices):
            self.normals = np.zeros_like(self.vertices)
            self.compute_vertex_normals()
        else:
            self.normals = normals

    @property
    def is_empty(self) -> bool:
        return len(self.faces) == 0

    @property
    def bounds(self) -> np.ndarray:
        """``[[xmin, ymin, zmin], [xmax, ymax, zmax]]`` of the vertices."""

        if len(self.vertices) == 0:
            return np.zeros((2, 3))
        return np.vstack([self.vertices.min(axis=0), self.vertices.max(axis=0)])

    def compute_vertex_normals(self) -> "TriangleMesh":
        """Recompute per-vertex normals as area-weighted face normals."""

        normals = np.zeros_like(self.vertices)
        if len(self.faces):
            tri = self.vertices[self.faces]
            face_n = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
            for k in range(3):
                np.add.at(normals, self.faces[:, k], face_n)
        length = np.linalg.norm(normals, axis=1)
        nz = length > 0
        normals[nz] /= length[nz, None]
        self.normals = normals
        return self

    def translated(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> "TriangleMesh":
        return TriangleMesh(self.vertices + np.array([dx, dy, dz]), self.faces.copy(),
                            self.normals.copy())

    def facets(self) -> Tuple[np.ndarray, np.ndarray]:
        """Unit facet normals ``(m, 3)`` and corners ``(m, 3, 3)``.

        Normals follow the triangle winding.  Zero-area faces are left out.
        """

        tri = self.vertices[self.faces]
        normals = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
        length = np.linalg.norm(normals, axis=1)
        keep = length > epsilon
        return normals[keep] / length[keep, None], tri[keep]

    def to_trimesh(self) -> trimesh.Trimesh:
        return trimesh.Trimesh(vertices=self.vertices.copy(), faces=self.faces.copy(),
                               process=False)

    @classmethod
    def from_trimesh(cls, mesh: trimesh.Trimesh) -> "TriangleMesh":
        return cls(np.asarray(mesh.vertices, dtype=float),
                   np.asarray(mesh.faces, dtype=np.int64))

    @property
    def is_watertight(self) -> bool:
        if self.is_empty:
            return False
        return bool(self.to_trimesh().is_watertight)

    @property
    def volume(self) -> float:
        """Signed volume; positive for closed meshes wound outward."""

        if self.is_empty:
            return 0.0
        tri = self.vertices[self.faces]
        return float(np.einsum("ij,ij->i", tri[:, 0], np.cross(tri[:, 1], tri[:, 2])).sum() / 6.0)


def concatenate(meshes: Sequence[TriangleMesh]) -> TriangleMesh:
    """Merge several meshes into one without welding vertices."""

    verts = []
    faces = []
    normals = []
    offset = 0
    for m in meshes:
        verts.append(m.vertices)
        faces.append(m.faces + offset)
        normals.append(m.normals)
        offset += len(m.vertices)
    if not verts:
        return TriangleMesh()
    return TriangleMesh(np.vstack(verts), np.vstack(faces), np.vstack(normals))

