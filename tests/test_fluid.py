import numpy as np
import pytest
from hydrolab.hydrodynamics.fluid import (
    HYDRODYNAMICS_PRESETS,
    BodyFluidPosition,
    HydrodynamicsSettings,
    Ocean,
    settings_from_preset,
)


def test_depth_sign_convention(ocean):
    depths = ocean.depth(np.array([[0.0, 0.0, -2.0], [0.0, 0.0, 1.5]]))
    assert np.allclose(depths, [2.0, -1.5])


def test_classify_position(ocean):
    assert ocean.classify_position(np.array([0.0, 0.0, -1.0])) is BodyFluidPosition.INSIDE
    assert ocean.classify_position(np.array([0.0, 0.0, 1.0])) is BodyFluidPosition.OUTSIDE
    assert ocean.classify_position(np.array([5.0, 5.0, 0.0])) is BodyFluidPosition.CROSSING


def test_tilted_offset_surface():
    sea = Ocean(surface_normal=[0.0, 0.0, 2.0], surface_offset=-10.0)
    n, offset = sea.surface_plane()
    assert np.allclose(n, [0.0, 0.0, 1.0])
    assert offset == -10.0
    assert sea.classify_position(np.array([0.0, 0.0, -5.0])) is BodyFluidPosition.OUTSIDE
    assert sea.classify_position(np.array([0.0, 0.0, -11.0])) is BodyFluidPosition.INSIDE


def test_uniform_current():
    sea = Ocean(current=[0.5, 0.0, 0.0])
    v = sea.velocity_at(np.zeros((4, 3)))
    assert v.shape == (4, 3)
    assert np.allclose(v, [0.5, 0.0, 0.0])


@pytest.mark.parametrize("kwargs", [
    {"density": 0.0},
    {"viscosity": -1.0},
    {"surface_normal": [0.0, 0.0, 0.0]},
    {"current": [1.0, 0.0]},
])
def test_invalid_ocean_raises(kwargs):
    with pytest.raises(ValueError):
        Ocean(**kwargs)


def test_settings_defaults():
    s = HydrodynamicsSettings()
    assert s.damping_forces and s.realistic_buoyancy
    assert np.allclose(s.gravity_vector, [0.0, 0.0, -9.81])


def test_settings_are_frozen():
    s = HydrodynamicsSettings()
    with pytest.raises(AttributeError):
        s.damping_forces = False
    t = s.with_overrides(damping_forces=False)
    assert not t.damping_forces and s.damping_forces


def test_settings_invalid_gravity():
    with pytest.raises(ValueError):
        HydrodynamicsSettings(gravity=(0.0, -9.81))


@pytest.mark.parametrize("preset", sorted(HYDRODYNAMICS_PRESETS))
def test_presets(preset):
    s = settings_from_preset(preset)
    expected = HYDRODYNAMICS_PRESETS[preset]
    assert s.damping_forces == expected["damping_forces"]
    assert s.realistic_buoyancy == expected["realistic_buoyancy"]


def test_preset_overrides():
    s = settings_from_preset("buoyancy_only", gravity=(0.0, 0.0, -1.62))
    assert not s.damping_forces
    assert np.allclose(s.gravity_vector, [0.0, 0.0, -1.62])


def test_unknown_preset_or_key_raises():
    with pytest.raises(ValueError):
        settings_from_preset("turbulent")
    with pytest.raises(ValueError):
        settings_from_preset("default", added_mass=True)
