"""
Geometry module - Ray queries and face orientation.

Provides ray/triangle and ray/mesh intersection, normal flipping,
dihedral angles and point containment for closed meshes.
"""

from meshtopo.geometry.normals import (
    dihedral_angles,
    faces_flipped_inside,
    flip_faces,
    flip_normals,
    is_point_inside,
)
from meshtopo.geometry.ray import (
    Intersection,
    Ray,
    does_intersect,
    ray_face_intersect,
    ray_mesh_intersect,
    ray_mesh_intersections,
    ray_triangle_intersect,
)

__all__ = [
    "Intersection",
    "Ray",
    "ray_triangle_intersect",
    "ray_face_intersect",
    "ray_mesh_intersect",
    "ray_mesh_intersections",
    "does_intersect",
    "flip_normals",
    "flip_faces",
    "dihedral_angles",
    "is_point_inside",
    "faces_flipped_inside",
]
