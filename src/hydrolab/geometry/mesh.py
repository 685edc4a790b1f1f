"""
Triangle meshes used as physics geometry for fluid force integration.

Meshes are closed surfaces with counter-clockwise (outward) winding.
Builders produce meshes in the solid's origin frame.
"""
from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from hydrolab.geometry.transform import Transform

AREA_EPSILON = 1e-14  # Faces below this area [m²] are ignored


def triangle_geometry(
    triangles: NDArray[np.float64],
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """
    Centres (M, 3), unit outward normals (M, 3) and areas (M,) of triangles.

    Parameters
    ----------
    triangles : NDArray[np.float64]
        Triangle vertex coordinates (M, 3, 3), CCW winding
    """
    tri = np.asarray(triangles, dtype=np.float64).reshape(-1, 3, 3)
    centers = tri.mean(axis=1)
    cross = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
    norm = np.linalg.norm(cross, axis=1)
    areas = 0.5 * norm
    normals = np.zeros_like(cross)
    ok = areas > AREA_EPSILON
    normals[ok] = cross[ok] / norm[ok, None]
    areas[~ok] = 0.0
    return centers, normals, areas


class TriangleMesh:
    """
    Indexed triangle mesh.

    Parameters
    ----------
    vertices : NDArray[np.float64]
        Vertex positions [m] (N, 3)
    faces : NDArray[np.int64]
        Vertex indices of each triangle (M, 3), outward CCW winding
    """
    __slots__ = ("vertices", "faces")

    def __init__(self, vertices: NDArray[np.float64], faces: NDArray[np.int64]) -> None:
        V = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        F = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
        if F.size and (F.min() < 0 or F.max() >= len(V)):
            raise ValueError("Face indices out of range")
        self.vertices = V
        self.faces = F

    @property
    def is_empty(self) -> bool:
        return len(self.faces) == 0

    def transformed(self, T: Transform) -> TriangleMesh:
        """Return a copy with vertices mapped through ``T``."""
        return TriangleMesh(T.apply(self.vertices), self.faces.copy())

    @staticmethod
    def merge(meshes: list[TriangleMesh]) -> TriangleMesh:
        """Concatenate meshes into one (indices are re-based)."""
        vertices = []
        faces = []
        offset = 0
        for m in meshes:
            vertices.append(m.vertices)
            faces.append(m.faces + offset)
            offset += len(m.vertices)
        if not vertices:
            return TriangleMesh(np.zeros((0, 3)), np.zeros((0, 3), dtype=np.int64))
        return TriangleMesh(np.vstack(vertices), np.vstack(faces))

    def triangles(self) -> NDArray[np.float64]:
        """Triangle vertex coordinates (M, 3, 3)."""
        return self.vertices[self.faces]

    def face_centers(self) -> NDArray[np.float64]:
        return self.triangles().mean(axis=1)

    def face_normals_areas(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """
        Unit outward normals (M, 3) and face areas (M,).

        Degenerate faces get a zero normal and zero area.
        """
        _, normals, areas = triangle_geometry(self.triangles())
        return normals, areas

    def bounds(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Axis-aligned bounding box (min, max)."""
        if len(self.vertices) == 0:
            zero = np.zeros(3)
            return zero, zero.copy()
        return self.vertices.min(axis=0), self.vertices.max(axis=0)

    def corners(self) -> NDArray[np.float64]:
        """Eight corners of the axis-aligned bounding box (8, 3)."""
        lo, hi = self.bounds()
        return np.array([
            [x, y, z]
            for x in (lo[0], hi[0])
            for y in (lo[1], hi[1])
            for z in (lo[2], hi[2])
        ], dtype=np.float64)

    def __repr__(self) -> str:
        return f"TriangleMesh(vertices={len(self.vertices)}, faces={len(self.faces)})"


# =============================================================================
# Primitive builders
# =============================================================================

def box_mesh(size: NDArray[np.float64]) -> TriangleMesh:
    """Box centred at the origin with edge lengths ``size`` [m]."""
    hx, hy, hz = 0.5 * np.asarray(size, dtype=np.float64)
    vertices = np.array([
        [-hx, -hy, -hz], [hx, -hy, -hz], [hx, hy, -hz], [-hx, hy, -hz],
        [-hx, -hy, hz], [hx, -hy, hz], [hx, hy, hz], [-hx, hy, hz],
    ])
    faces = np.array([
        [0, 2, 1], [0, 3, 2],  # -z
        [4, 5, 6], [4, 6, 7],  # +z
        [0, 1, 5], [0, 5, 4],  # -y
        [3, 7, 6], [3, 6, 2],  # +y
        [0, 4, 7], [0, 7, 3],  # -x
        [1, 2, 6], [1, 6, 5],  # +x
    ])
    return TriangleMesh(vertices, faces)


def sphere_mesh(radius: float, n_lat: int = 12, n_lon: int = 24) -> TriangleMesh:
    """UV sphere centred at the origin."""
    vertices = [[0.0, 0.0, radius]]
    for i in range(1, n_lat):
        theta = np.pi * i / n_lat
        for j in range(n_lon):
            phi = 2.0 * np.pi * j / n_lon
            vertices.append([
                radius * np.sin(theta) * np.cos(phi),
                radius * np.sin(theta) * np.sin(phi),
                radius * np.cos(theta),
            ])
    vertices.append([0.0, 0.0, -radius])
    bottom = len(vertices) - 1

    def ring(i: int, j: int) -> int:
        return 1 + (i - 1) * n_lon + (j % n_lon)

    faces = []
    for j in range(n_lon):
        faces.append([0, ring(1, j), ring(1, j + 1)])
    for i in range(1, n_lat - 1):
        for j in range(n_lon):
            a, b = ring(i, j), ring(i, j + 1)
            c, d = ring(i + 1, j), ring(i + 1, j + 1)
            faces.append([a, c, d])
            faces.append([a, d, b])
    for j in range(n_lon):
        faces.append([bottom, ring(n_lat - 1, j + 1), ring(n_lat - 1, j)])
    return TriangleMesh(np.array(vertices), np.array(faces))


def cylinder_mesh(radius: float, length: float, segments: int = 24) -> TriangleMesh:
    """Closed cylinder centred at the origin, axis along local z."""
    h = 0.5 * length
    angles = 2.0 * np.pi * np.arange(segments) / segments
    ring = np.column_stack([radius * np.cos(angles), radius * np.sin(angles)])
    bottom = np.column_stack([ring, np.full(segments, -h)])
    top = np.column_stack([ring, np.full(segments, h)])
    vertices = np.vstack([bottom, top, [[0.0, 0.0, -h], [0.0, 0.0, h]]])
    cb, ct = 2 * segments, 2 * segments + 1

    faces = []
    for j in range(segments):
        k = (j + 1) % segments
        faces.append([j, k, segments + k])
        faces.append([j, segments + k, segments + j])
        faces.append([cb, k, j])
        faces.append([ct, segments + j, segments + k])
    return TriangleMesh(vertices, np.array(faces))


# =============================================================================
# Plane clipping
# =============================================================================

def clip_below_plane(
    triangle: NDArray[np.float64],
    depths: NDArray[np.float64],
) -> list[NDArray[np.float64]]:
    """
    Clip a triangle to its submerged part.

    Parameters
    ----------
    triangle : NDArray[np.float64]
        Vertex coordinates (3, 3), CCW
    depths : NDArray[np.float64]
        Signed depth of each vertex below the fluid surface (3,).
        Positive means submerged.

    Returns
    -------
    list[NDArray[np.float64]]
        Zero, one or two sub-triangles (3, 3) with the original winding.
    """
    below = depths >= 0.0
    n_below = int(below.sum())
    if n_below == 3:
        return [triangle]
    if n_below == 0:
        return []

    # Walk the polygon edges, keeping submerged vertices and crossing points
    polygon = []
    for i in range(3):
        j = (i + 1) % 3
        if below[i]:
            polygon.append(triangle[i])
        if below[i] != below[j]:
            s = depths[i] / (depths[i] - depths[j])
            polygon.append(triangle[i] + s * (triangle[j] - triangle[i]))

    return [
        np.array([polygon[0], polygon[k], polygon[k + 1]])
        for k in range(1, len(polygon) - 1)
    ]
