"""
meshtopo - Mesh Topology & Geometric Query Engine

Robust, deterministic cleanup and inspection of triangle meshes: welding,
edge classification, connectivity, ray queries, normal flipping, angle-based
splitting, planar simplification and deduplication.
"""

__version__ = "0.1.0"
__author__ = "meshtopo Contributors"

from meshtopo.core.exceptions import MeshtopoError
from meshtopo.core.mesh import Mesh
from meshtopo.core.vector import Point3, Vector3

__all__ = [
    "__version__",
    "Mesh",
    "Point3",
    "Vector3",
    "MeshtopoError",
]
