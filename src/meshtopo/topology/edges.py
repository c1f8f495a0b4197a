"""
Undirected mesh edges and their classification by face multiplicity.
"""

from enum import Enum
from typing import NamedTuple

import numpy as np


class Edge(NamedTuple):
    """Undirected vertex pair, always stored with ``low < high``."""

    low: int
    high: int

    @classmethod
    def of(cls, a: int, b: int) -> "Edge":
        a, b = int(a), int(b)
        return cls(a, b) if a <= b else cls(b, a)


class EdgeKind(str, Enum):
    """Classification of an edge by how many faces share it."""

    BOUNDARY = "boundary"  # 1 face
    MANIFOLD = "manifold"  # 2 faces
    NON_MANIFOLD = "non_manifold"  # 3+ faces

    @classmethod
    def from_multiplicity(cls, count: int) -> "EdgeKind":
        if count <= 1:
            return cls.BOUNDARY
        if count == 2:
            return cls.MANIFOLD
        return cls.NON_MANIFOLD


def face_edge_table(faces: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Sorted undirected edges of every face.

    Self-edges of faces with repeated indices are dropped, as are repeats of
    the same edge within one face.

    Returns:
        Tuple of (unique_edges ``(e, 2)``, face_of_entry ``(k,)``,
        edge_of_entry ``(k,)``) where each entry is one distinct
        (face, edge) incidence.
    """
    if not len(faces):
        empty = np.empty(0, dtype=np.int64)
        return np.empty((0, 2), dtype=np.int64), empty, empty

    pairs = faces[:, [0, 1, 1, 2, 2, 0]].reshape(-1, 2)
    pairs = np.sort(pairs, axis=1)
    owners = np.repeat(np.arange(len(faces), dtype=np.int64), 3)

    keep = pairs[:, 0] != pairs[:, 1]
    pairs, owners = pairs[keep], owners[keep]
    if not len(pairs):
        empty = np.empty(0, dtype=np.int64)
        return np.empty((0, 2), dtype=np.int64), empty, empty

    unique_edges, inverse = np.unique(pairs, axis=0, return_inverse=True)
    inverse = inverse.reshape(-1)

    # One incidence per (face, edge)
    incidences = np.unique(np.stack([owners, inverse], axis=1), axis=0)
    return unique_edges, incidences[:, 0], incidences[:, 1]
