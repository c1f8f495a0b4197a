"""
Editing module - Welding, deduplication, splitting and planar simplification.

Every editor takes a validated Mesh and returns a new one; inputs are never
modified.
"""

from meshtopo.editing.dedupe import (
    deduplicate,
    remove_duplicate_faces,
    remove_unreferenced_vertices,
)
from meshtopo.editing.simplify import planar_regions, simplify_planar
from meshtopo.editing.split import smooth_shells, split_by_angle
from meshtopo.editing.triangulation import Triangulator, triangulate_polygon
from meshtopo.editing.weld import WeldResult, weld

__all__ = [
    "weld",
    "WeldResult",
    "deduplicate",
    "remove_duplicate_faces",
    "remove_unreferenced_vertices",
    "split_by_angle",
    "smooth_shells",
    "simplify_planar",
    "planar_regions",
    "triangulate_polygon",
    "Triangulator",
]
