"""
AUV dive: composite hull with internal equipment released at the surface.

Demonstrates:
- Assembling a composite from external and internal parts
- Surface crossing (CROSSING) and full submersion (INSIDE)
- Fixed-step integration of the composite rigid body
- CSV force logging
"""
import time
from pathlib import Path
import sys

import numpy as np

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hydrolab.dynamics.forces import FluidForces, Gravity
from hydrolab.geometry.transform import Transform
from hydrolab.hydrodynamics.fluid import Ocean, settings_from_preset
from hydrolab.logger import ForceLogger
from hydrolab.solids.base import Material
from hydrolab.solids.compound import CompositeBody
from hydrolab.solids.primitives import Box, Cylinder, PointMass, Sphere


def build_vehicle() -> CompositeBody:
    """Torpedo-shaped hull lying along world x with a battery and ballast inside."""
    aluminium = Material("aluminium", density=2700.0, friction=0.3)
    horizontal = Transform.from_euler(pitch=90.0)

    hull = Cylinder("hull", radius=0.1, length=1.6, material=aluminium, mass=28.0)
    auv = CompositeBody("auv", hull, horizontal)
    auv.attach_external_part(Sphere("nose", radius=0.1, mass=1.5),
                             Transform.from_translation([0.8, 0.0, 0.0]))
    for side in (-1.0, 1.0):
        auv.attach_external_part(
            Box(f"fin_{'port' if side > 0 else 'starboard'}", size=[0.12, 0.15, 0.01], mass=0.2),
            Transform.from_translation([-0.7, side * 0.17, 0.0]),
        )
    auv.attach_internal_part(Box("battery", size=[0.4, 0.1, 0.1], mass=12.0, buoyant=False),
                             Transform.from_translation([0.1, 0.0, -0.03]))
    auv.attach_internal_part(PointMass("ballast", 15.0),
                             Transform.from_translation([0.0, 0.0, -0.06]))
    return auv


def main():
    """Run the dive simulation."""
    print("=" * 60)
    print("AUV Dive")
    print("=" * 60)

    auv = build_vehicle()
    print(auv.summary())

    ocean = Ocean(density=1025.0)
    settings = settings_from_preset("default")
    body = auv.to_rigid_body(Transform.from_translation([0.0, 0.0, 0.05]))
    forces = [Gravity(settings.gravity_vector), FluidForces(auv, ocean, settings)]

    output = Path(__file__).parent / "output" / "auv_dive_forces.csv"
    dt, duration = 0.005, 20.0

    print(f"\nRunning simulation...")
    start = time.time()
    t = 0.0
    with ForceLogger(output, buffer_size=500) as logger:
        while t < duration:
            body.clear_forces()
            for force in forces:
                force.apply(body, t)
            logger.log(t, [auv])
            a_lin, a_ang = body.accelerations()
            body.integrate_semi_implicit(dt, a_lin, a_ang)
            t += dt
    elapsed = time.time() - start

    print(f"\nResults:")
    print(f"  Simulation time: {t:.3f} s")
    print(f"  Wall clock time: {elapsed:.3f} s")
    print(f"  Final depth: {-body.p[2]:.2f} m")
    print(f"  Final sink rate: {-body.v[2]:.3f} m/s")
    print(f"  Last buoyancy: {auv.fluid_forces.buoyancy_force.round(2)} N")
    print(f"\nForces saved to: {output}")
    print("=" * 60)


if __name__ == "__main__":
    main()
