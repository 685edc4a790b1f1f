from .base import CollisionShape, CompoundShape, Material, Part, SubBody
from .primitives import Box, Cylinder, PointMass, Solid, Sphere
