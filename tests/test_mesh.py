import numpy as np
import pytest
from hydrolab.geometry.mesh import (
    TriangleMesh,
    box_mesh,
    clip_below_plane,
    cylinder_mesh,
    sphere_mesh,
)
from hydrolab.geometry.transform import Transform


def enclosed_volume(mesh):
    """Divergence theorem: V = 1/3 Σ (c · n) A."""
    normals, areas = mesh.face_normals_areas()
    return float(np.sum(np.einsum("ij,ij->i", mesh.face_centers(), normals) * areas) / 3.0)


@pytest.mark.parametrize("mesh", [
    box_mesh([1.0, 2.0, 3.0]),
    sphere_mesh(0.5),
    cylinder_mesh(0.2, 1.0),
])
def test_meshes_are_closed(mesh):
    normals, areas = mesh.face_normals_areas()
    assert np.allclose((normals * areas[:, None]).sum(axis=0), 0.0, atol=1e-12)


def test_box_area_and_volume():
    mesh = box_mesh([1.0, 2.0, 3.0])
    _, areas = mesh.face_normals_areas()
    assert np.isclose(areas.sum(), 22.0)
    # Positive volume means outward winding
    assert np.isclose(enclosed_volume(mesh), 6.0)


def test_cylinder_volume_is_inscribed_prism():
    r, L, n = 0.2, 1.0, 24
    mesh = cylinder_mesh(r, L, segments=n)
    prism = 0.5 * n * r * r * np.sin(2.0 * np.pi / n) * L
    assert np.isclose(enclosed_volume(mesh), prism, rtol=1e-9)


def test_sphere_volume_is_close_to_exact():
    r = 0.5
    exact = 4.0 / 3.0 * np.pi * r**3
    volume = enclosed_volume(sphere_mesh(r, n_lat=24, n_lon=48))
    assert 0.0 < volume < exact
    assert volume == pytest.approx(exact, rel=0.02)


def test_transformed_and_corners():
    mesh = box_mesh([2.0, 2.0, 2.0]).transformed(Transform.from_translation([0.0, 0.0, 5.0]))
    lo, hi = mesh.bounds()
    assert np.allclose(lo, [-1.0, -1.0, 4.0])
    assert np.allclose(hi, [1.0, 1.0, 6.0])
    corners = mesh.corners()
    assert corners.shape == (8, 3)
    assert {tuple(c) for c in corners} == {
        (x, y, z) for x in (-1.0, 1.0) for y in (-1.0, 1.0) for z in (4.0, 6.0)
    }


def test_merge_rebases_indices():
    a = box_mesh([1.0, 1.0, 1.0])
    b = box_mesh([1.0, 1.0, 1.0]).transformed(Transform.from_translation([3.0, 0.0, 0.0]))
    merged = TriangleMesh.merge([a, b])
    assert len(merged.vertices) == 16
    assert len(merged.faces) == 24
    assert np.allclose(merged.triangles()[12:], b.triangles())
    assert TriangleMesh.merge([]).is_empty


def test_face_index_out_of_range_raises():
    with pytest.raises(ValueError):
        TriangleMesh(np.zeros((3, 3)), [[0, 1, 3]])


class TestClipBelowPlane:
    tri = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])

    def test_fully_submerged(self):
        pieces = clip_below_plane(self.tri, np.array([1.0, 1.0, 1.0]))
        assert len(pieces) == 1
        assert np.allclose(pieces[0], self.tri)

    def test_fully_dry(self):
        assert clip_below_plane(self.tri, np.array([-1.0, -1.0, -1.0])) == []

    def test_one_vertex_dry_gives_quad(self):
        pieces = clip_below_plane(self.tri, np.array([1.0, 1.0, -1.0]))
        assert len(pieces) == 2
        areas = [0.5 * np.linalg.norm(np.cross(p[1] - p[0], p[2] - p[0])) for p in pieces]
        assert np.isclose(sum(areas), 0.375)
        # Winding preserved: normals still along +z
        for p in pieces:
            assert np.cross(p[1] - p[0], p[2] - p[0])[2] > 0.0

    def test_two_vertices_dry_gives_triangle(self):
        pieces = clip_below_plane(self.tri, np.array([1.0, -1.0, -1.0]))
        assert len(pieces) == 1
        p = pieces[0]
        assert np.isclose(0.5 * np.linalg.norm(np.cross(p[1] - p[0], p[2] - p[0])), 0.125)
