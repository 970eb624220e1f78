"""STL export for caps, shade bodies and whole lamp assemblies.

Facets are gathered from every mesh as numpy arrays and written in one go:
binary files as a single structured-array dump, ASCII files one facet
block at a time.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Sequence, Tuple, Union

import numpy as np

from lampcap.mesh import TriangleMesh

_HEADER_SIZE = 80

# little-endian facet record: normal, three corners, attribute byte count
_FACET_DTYPE = np.dtype([
    ('normal', '<f4', (3,)),
    ('corners', '<f4', (3, 3)),
    ('attributes', '<u2'),
])


def _meshes(obj) -> List[TriangleMesh]:
    if isinstance(obj, TriangleMesh):
        return [obj]
    meshes = getattr(obj, 'meshes', None)
    if callable(meshes):
        return list(meshes())
    out = list(obj)
    if not all(isinstance(m, TriangleMesh) for m in out):
        raise ValueError('write_stl expects a TriangleMesh, a sequence of them, or an assembly')
    return out


def _gather(meshes: Sequence[TriangleMesh]) -> Tuple[np.ndarray, np.ndarray]:
    normals = [np.zeros((0, 3))]
    corners = [np.zeros((0, 3, 3))]
    for mesh in meshes:
        n, c = mesh.facets()
        normals.append(n)
        corners.append(c)
    return np.concatenate(normals), np.concatenate(corners)


@contextmanager
def _open(path_or_file, mode: str) -> Iterator:
    if hasattr(path_or_file, 'write'):
        yield path_or_file
        return
    kwargs = {} if 'b' in mode else {'encoding': 'ascii'}
    with open(path_or_file, mode, **kwargs) as stream:
        yield stream


def write_stl(obj: Union[TriangleMesh, Sequence[TriangleMesh], object], path_or_file, *,
              binary: bool = True, name: str = 'lampcap') -> None:
    """Write ``obj`` to STL.

    ``obj`` is a mesh, a sequence of meshes, or anything with a
    ``meshes()`` method such as a lamp assembly.  ``path_or_file`` can be a
    filesystem path or an open binary/text stream.  Facet normals follow
    the triangle winding; degenerate faces are skipped.
    """

    normals, corners = _gather(_meshes(obj))
    if binary:
        _write_binary(normals, corners, path_or_file, name)
    else:
        _write_ascii(normals, corners, path_or_file, name)


def _write_binary(normals: np.ndarray, corners: np.ndarray, path_or_file, name: str) -> None:
    records = np.zeros(len(normals), dtype=_FACET_DTYPE)
    records['normal'] = normals
    records['corners'] = corners

    header = name.encode('ascii', errors='replace')[:_HEADER_SIZE].ljust(_HEADER_SIZE, b'\0')
    with _open(path_or_file, 'wb') as stream:
        stream.write(header)
        stream.write(np.uint32(len(records)).astype('<u4').tobytes())
        stream.write(records.tobytes())


def _write_ascii(normals: np.ndarray, corners: np.ndarray, path_or_file, name: str) -> None:
    lines = [f'solid {name}']
    for n, (a, b, c) in zip(normals, corners):
        lines.append('  facet normal {:.6e} {:.6e} {:.6e}'.format(*n))
        lines.append('    outer loop')
        for corner in (a, b, c):
            lines.append('      vertex {:.6e} {:.6e} {:.6e}'.format(*corner))
        lines.append('    endloop')
        lines.append('  endfacet')
    lines.append(f'endsolid {name}')

    with _open(path_or_file, 'w') as stream:
        stream.write('\n'.join(lines) + '\n')


__all__ = ['write_stl']
