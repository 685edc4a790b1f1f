from dataclasses import dataclass

import numpy as np
import pytest
from conftest import HULL_LENGTH, HULL_RADIUS
from hydrolab.errors import DegenerateBodyError
from hydrolab.geometry.transform import Transform
from hydrolab.hydrodynamics.fluid import HydrodynamicsSettings
from hydrolab.solids.base import CollisionShape, CompoundShape, Material, owner_of
from hydrolab.solids.compound import CompositeBody
from hydrolab.solids.primitives import Box, Cylinder, PointMass, Sphere

RHO, G = 1000.0, 9.81
DEEP = Transform.from_translation([0.0, 0.0, -10.0])


class AntiMass:
    """Minimal sub-body with a negative mass."""
    name = "anti"
    mass = -50.0
    volume = 0.0
    is_buoyant = False
    principal_inertia = np.zeros(3)
    cg_to_origin = Transform.identity()
    center_of_buoyancy = np.zeros(3)
    physics_mesh = None
    material = Material()

    def build_collision_shape(self):
        return CollisionShape("point")


class LeakyHousing(AntiMass):
    """Sub-body whose inertia cannot be evaluated."""
    name = "leaky"
    mass = 2.0

    @property
    def principal_inertia(self):
        raise ValueError("corrupt inertia record")


class ThrusterGeometry:
    volume = 0.0
    is_buoyant = False
    physics_mesh = None

    @property
    def cg_to_origin(self):
        return Transform.identity()

    @property
    def center_of_buoyancy(self):
        return np.zeros(3)

    @property
    def material(self):
        return Material()

    def build_collision_shape(self):
        return CollisionShape("point")


@dataclass
class Thruster(ThrusterGeometry):
    name: str
    mass: float = 1.5
    principal_inertia: tuple = (0.002, 0.002, 0.001)


@dataclass(frozen=True)
class SealedThruster(ThrusterGeometry):
    name: str
    mass: float = 1.5
    principal_inertia: tuple = (0.002, 0.002, 0.001)


# --- Mass properties ---

def test_hull_with_battery_mass_properties(auv, hull, battery):
    assert auv.mass == pytest.approx(15.0)
    # Battery is sealed: it adds mass but no displacement
    assert auv.volume == pytest.approx(0.01)
    assert auv.is_buoyant

    cg_z = 5.0 * 0.2 / 15.0
    props = auv.mass_properties
    assert np.allclose(props.center_of_gravity, [0.0, 0.0, cg_z])
    assert np.allclose(auv.cg_to_origin.translation, [0.0, 0.0, -cg_z])
    assert np.allclose(auv.center_of_buoyancy, [0.0, 0.0, -cg_z])
    assert np.allclose(auv.cg_to_buoyancy.translation, [0.0, 0.0, -cg_z])

    shift = 10.0 * cg_z**2 + 5.0 * (0.2 - cg_z)**2
    expected = hull.principal_inertia + battery.principal_inertia + shift * np.array([1.0, 1.0, 0.0])
    assert np.allclose(auv.principal_inertia, expected)


def test_attach_order_independence(hull, battery):
    fin = Box("fin", size=[0.02, 0.2, 0.1], mass=0.3)
    fin_at = Transform.from_euler(yaw=20.0, translation=[0.0, 0.06, -0.5])
    bat_at = Transform.from_translation([0.0, 0.0, 0.2])

    a = CompositeBody("a", hull)
    a.attach_internal_part(battery, bat_at)
    a.attach_external_part(fin, fin_at)

    b = CompositeBody("b", Cylinder("hull", HULL_RADIUS, HULL_LENGTH, mass=10.0))
    b.attach_external_part(Box("fin", size=[0.02, 0.2, 0.1], mass=0.3), fin_at)
    b.attach_internal_part(Box("battery", size=[0.05, 0.05, 0.2], mass=5.0, buoyant=False), bat_at)

    assert a.mass == pytest.approx(b.mass)
    assert a.volume == pytest.approx(b.volume)
    assert np.allclose(a.mass_properties.center_of_gravity, b.mass_properties.center_of_gravity)
    assert np.allclose(sorted(a.principal_inertia), sorted(b.principal_inertia))


def test_origin_pose_survives_attach(hull):
    body = CompositeBody("auv", hull)
    pose = Transform.from_euler(10.0, 0.0, 45.0, translation=[1.0, 2.0, -3.0])
    body.set_origin_pose(pose)
    body.attach_external_part(Sphere("dome", radius=0.05, mass=1.0),
                              Transform.from_translation([0.0, 0.0, 0.7]))
    assert body.origin_frame().allclose(pose)
    # CG moved towards the dome, expressed in world through the pose
    assert np.allclose(body.cg_frame.translation, pose.apply(body.mass_properties.center_of_gravity))


# --- Attachment rules ---

def test_attach_none_raises(auv):
    with pytest.raises(ValueError):
        auv.attach_internal_part(None)
    with pytest.raises(ValueError):
        auv.attach_external_part(None)


def test_malformed_placement_raises(auv):
    with pytest.raises(ValueError):
        auv.attach_external_part(Sphere("s", radius=0.1), np.eye(4))


def test_exclusive_ownership(auv, battery):
    with pytest.raises(ValueError):
        auv.attach_internal_part(battery)
    other = CompositeBody("other", Sphere("s", radius=0.1))
    with pytest.raises(ValueError):
        other.attach_internal_part(battery)
    with pytest.raises(ValueError):
        auv.attach_external_part(auv)
    assert owner_of(battery) is auv


def test_degenerate_attach_is_rolled_back(auv):
    anti = AntiMass()
    with pytest.raises(DegenerateBodyError):
        auv.attach_internal_part(anti)
    assert len(auv) == 2
    assert auv.mass == pytest.approx(15.0)
    assert owner_of(anti) is None


def test_failed_attach_leaves_composite_usable(auv):
    leaky = LeakyHousing()
    with pytest.raises(ValueError, match="corrupt"):
        auv.attach_internal_part(leaky)
    assert len(auv) == 2
    assert auv.mass == pytest.approx(15.0)
    assert owner_of(leaky) is None

    index = auv.attach_internal_part(Sphere("float", radius=0.05, mass=0.5))
    assert index == 2
    assert auv.mass == pytest.approx(15.5)


def test_unhashable_sub_body_can_be_attached():
    thruster = Thruster("t0")
    rov = CompositeBody("rov", thruster)
    assert rov.mass == pytest.approx(1.5)
    assert owner_of(thruster) is rov


def test_equal_sub_bodies_are_owned_separately(hull):
    port, starboard = SealedThruster("thruster"), SealedThruster("thruster")
    assert port == starboard
    rov = CompositeBody("rov", hull)
    rov.attach_external_part(port, Transform.from_translation([0.0, 0.1, 0.0]))
    rov.attach_external_part(starboard, Transform.from_translation([0.0, -0.1, 0.0]))
    assert len(rov) == 3
    assert owner_of(port) is rov and owner_of(starboard) is rov
    with pytest.raises(ValueError):
        rov.attach_external_part(port)


def test_zero_mass_first_part_raises():
    with pytest.raises(DegenerateBodyError):
        CompositeBody("ghost", PointMass("nothing", 0.0))


# --- Lookups ---

def test_collision_indices_and_materials(hull):
    steel = Material("steel", density=7800.0)
    body = CompositeBody("auv", hull)
    body.attach_internal_part(PointMass("ballast", 2.0, material=steel))
    fin = Box("fin", size=[0.02, 0.2, 0.1], mass=0.3)
    fin_at = Transform.from_translation([0.0, 0.1, -0.5])
    body.attach_external_part(fin, fin_at)

    assert body.get_part_index_for_collision_index(0) == 0
    assert body.get_part_index_for_collision_index(1) == 2
    # Out of range falls back to the first part
    assert body.get_part_index_for_collision_index(2) == 0
    assert body.get_part_index_for_collision_index(-1) == 0

    assert body.get_material(1) == steel
    assert body.get_material(7) == Material()
    assert body.get_material(-1) == Material()
    assert body.material == Material()

    shape = body.build_collision_shape()
    assert isinstance(shape, CompoundShape)
    assert shape.part_ids == (0, 2)
    assert [child.kind for _, child in shape.children] == ["cylinder", "box"]
    assert shape.children[1][0].allclose(fin_at)


def test_physics_mesh_merges_external_parts(auv):
    hull_vertices = len(auv.parts[0].body.physics_mesh.vertices)
    # Internal battery is not part of the wetted surface
    assert auv.mesh_vertices().shape == (hull_vertices, 3)
    auv.attach_external_part(Box("fin", size=[0.02, 0.2, 0.1], mass=0.3),
                             Transform.from_translation([0.0, 0.1, -0.5]))
    assert auv.mesh_vertices().shape == (hull_vertices + 8, 3)
    assert len(auv.physics_mesh.faces) == len(auv.parts[0].body.physics_mesh.faces) + 12


def test_nested_composite(auv):
    pod = CompositeBody("pod", Sphere("float", radius=0.05, mass=0.2))
    pod.attach_internal_part(PointMass("sensor", 0.1))
    auv.attach_external_part(pod, Transform.from_translation([0.0, 0.08, 0.0]))
    assert auv.mass == pytest.approx(15.3)
    assert auv.volume == pytest.approx(0.01 + 4.0 / 3.0 * np.pi * 0.05**3)
    assert isinstance(auv.build_collision_shape().children[1][1], CompoundShape)


# --- Fluid forces ---

def test_submerged_at_rest(auv, ocean, settings):
    auv.set_origin_pose(DEEP)
    acc = auv.compute_fluid_forces(settings, ocean)
    assert acc is auv.fluid_forces
    assert np.allclose(acc.buoyancy_force, [0.0, 0.0, RHO * 0.01 * G])
    assert np.linalg.norm(acc.buoyancy_force) == pytest.approx(98.1)
    # CB is right below the CG on the vertical: no righting moment
    assert np.allclose(acc.buoyancy_torque, 0.0)
    for vec in (acc.linear_drag_force, acc.quadratic_drag_force,
                acc.linear_drag_torque, acc.quadratic_drag_torque):
        assert np.allclose(vec, 0.0)


def test_tilted_body_gets_righting_moment(auv, ocean, settings):
    auv.set_origin_pose(Transform.from_euler(roll=30.0, translation=[0.0, 0.0, -10.0]))
    acc = auv.compute_fluid_forces(settings, ocean)
    cb_world = auv.cg_frame.apply(auv.center_of_buoyancy)
    expected = np.cross(cb_world - auv.cg_frame.translation, acc.buoyancy_force)
    assert np.allclose(acc.buoyancy_torque, expected)
    assert np.linalg.norm(acc.buoyancy_torque) > 0.0


def test_outside_is_zero(auv, ocean, settings):
    auv.set_origin_pose(Transform.from_translation([0.0, 0.0, 5.0]))
    auv.set_state(auv.cg_frame, [1.0, 0.0, 0.0], [0.0, 0.3, 0.0])
    assert auv.compute_fluid_forces(settings, ocean).is_zero()


def test_internal_parts_never_add_drag(hull, battery, ocean, settings):
    v = np.array([0.7, 0.0, 0.2])
    bare = CompositeBody("bare", Cylinder("hull", HULL_RADIUS, HULL_LENGTH, mass=10.0))
    loaded = CompositeBody("loaded", hull)
    loaded.attach_internal_part(battery, Transform.from_translation([0.0, 0.0, 0.2]))
    for body in (bare, loaded):
        body.set_origin_pose(DEEP)
        body.set_state(body.cg_frame, v)
    a = bare.compute_fluid_forces(settings, ocean)
    b = loaded.compute_fluid_forces(settings, ocean)
    assert np.linalg.norm(a.quadratic_drag_force) > 0.0
    assert np.allclose(a.linear_drag_force, b.linear_drag_force)
    assert np.allclose(a.quadratic_drag_force, b.quadratic_drag_force)


def test_crossing_hydrostatic_buoyancy(auv, ocean, settings):
    # Hull axis vertical, half out of the water
    auv.set_origin_pose(Transform.identity())
    acc = auv.compute_fluid_forces(settings, ocean)
    n = 24
    polygon = 0.5 * n * HULL_RADIUS**2 * np.sin(2.0 * np.pi / n)
    assert acc.buoyancy_force[2] == pytest.approx(RHO * G * polygon * 0.5 * HULL_LENGTH, rel=1e-9)
    assert np.allclose(acc.buoyancy_force[:2], 0.0, atol=1e-9)


def test_crossing_without_realistic_buoyancy_is_zero(auv, ocean):
    auv.set_origin_pose(Transform.identity())
    acc = auv.compute_fluid_forces(HydrodynamicsSettings(realistic_buoyancy=False), ocean)
    assert np.allclose(acc.buoyancy_force, 0.0)
    assert np.allclose(acc.buoyancy_torque, 0.0)


def test_disabled_hydrodynamics(hull, ocean, settings):
    body = CompositeBody("dry", hull, enable_hydrodynamics=False)
    body.set_origin_pose(DEEP)
    assert body.compute_fluid_forces(settings, ocean).is_zero()


def test_idempotent(auv, ocean, settings):
    auv.set_origin_pose(Transform.from_euler(5.0, 20.0, 0.0, translation=[0.0, 0.0, -0.3]))
    auv.set_state(auv.cg_frame, [0.5, -0.2, 0.1], [0.1, 0.0, 0.4])
    first = auv.compute_fluid_forces(settings, ocean).copy()
    second = auv.compute_fluid_forces(settings, ocean)
    assert first == second


# --- Rigid body hand-off ---

def test_to_rigid_body(auv):
    body = auv.to_rigid_body(DEEP)
    assert body.name == "auv"
    assert body.mass == pytest.approx(15.0)
    assert np.allclose(np.diag(body.I_body), auv.principal_inertia)
    assert np.allclose(body.p, [0.0, 0.0, -10.0 + 1.0 / 15.0])
    assert auv.origin_frame().allclose(DEEP)


def test_sync_from_body(auv):
    body = auv.to_rigid_body()
    body.p += [1.0, 0.0, 0.0]
    body.v[:] = [0.0, 2.0, 0.0]
    auv.sync_from_body(body)
    assert np.allclose(auv.cg_frame.translation, body.p)
    assert np.allclose(auv.linear_velocity, [0.0, 2.0, 0.0])


def test_summary_and_repr(auv):
    text = auv.summary()
    assert "hull (external" in text
    assert "battery (internal" in text
    assert "CompositeBody(name='auv'" in repr(auv)
