from .transform import Transform
from .mesh import TriangleMesh, box_mesh, clip_below_plane, cylinder_mesh, sphere_mesh
