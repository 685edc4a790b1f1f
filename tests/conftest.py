import os
import sys

import numpy as np
import pytest

# Get the path to the project root (one level up from 'tests')
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
src_path = os.path.join(project_root, 'src')

# Add 'src' to sys.path
sys.path.insert(0, src_path)

from hydrolab.geometry.transform import Transform  # noqa: E402
from hydrolab.hydrodynamics.fluid import HydrodynamicsSettings, Ocean  # noqa: E402
from hydrolab.solids.compound import CompositeBody  # noqa: E402
from hydrolab.solids.primitives import Box, Cylinder  # noqa: E402

# Hull sized so that its volume is exactly 0.01 m³
HULL_RADIUS = 0.05
HULL_LENGTH = 0.01 / (np.pi * HULL_RADIUS**2)


@pytest.fixture
def ocean():
    """Fresh water with the free surface at z = 0."""
    return Ocean(density=1000.0)


@pytest.fixture
def settings():
    return HydrodynamicsSettings()


@pytest.fixture
def hull():
    return Cylinder("hull", radius=HULL_RADIUS, length=HULL_LENGTH, mass=10.0)


@pytest.fixture
def battery():
    """Dense, sealed equipment block carried inside the hull."""
    return Box("battery", size=[0.05, 0.05, 0.2], mass=5.0, buoyant=False)


@pytest.fixture
def auv(hull, battery):
    """Hull with an internal battery 0.2 m forward along the hull axis."""
    body = CompositeBody("auv", hull)
    body.attach_internal_part(battery, Transform.from_translation([0.0, 0.0, 0.2]))
    return body
