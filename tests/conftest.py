"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import numpy as np
import pytest

from meshtopo.core.mesh import Mesh

CUBE_VERTICES = [
    [0.0, 0.0, 0.0],
    [1.0, 0.0, 0.0],
    [1.0, 1.0, 0.0],
    [0.0, 1.0, 0.0],
    [0.0, 0.0, 1.0],
    [1.0, 0.0, 1.0],
    [1.0, 1.0, 1.0],
    [0.0, 1.0, 1.0],
]

# Outward facing quads (counter-clockwise seen from outside)
CUBE_QUADS = [
    [0, 3, 2, 1],  # bottom
    [4, 5, 6, 7],  # top
    [0, 1, 5, 4],  # front
    [3, 7, 6, 2],  # back
    [0, 4, 7, 3],  # left
    [1, 2, 6, 5],  # right
]


def quads_to_triangles(quads):
    faces = []
    for a, b, c, d in quads:
        faces.append([a, b, c])
        faces.append([a, c, d])
    return faces


def grid_mesh(nx, ny, skip=()):
    """Planar z=0 grid of unit cells, two +z facing triangles per cell."""
    vertices = [[float(i), float(j), 0.0] for j in range(ny + 1) for i in range(nx + 1)]
    faces = []
    for j in range(ny):
        for i in range(nx):
            if (i, j) in skip:
                continue
            a = j * (nx + 1) + i
            b = a + 1
            c = b + nx + 1
            d = a + nx + 1
            faces.append([a, b, c])
            faces.append([a, c, d])
    return Mesh(vertices, faces)


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def cube_mesh():
    """Closed unit cube: 8 shared vertices, 12 outward facing triangles."""
    return Mesh(CUBE_VERTICES, quads_to_triangles(CUBE_QUADS))


@pytest.fixture
def unwelded_cube_mesh():
    """Unit cube with every corner duplicated per side: 24 vertices, 12 faces."""
    vertices = []
    quads = []
    for quad in CUBE_QUADS:
        start = len(vertices)
        vertices.extend(CUBE_VERTICES[i] for i in quad)
        quads.append([start, start + 1, start + 2, start + 3])
    return Mesh(vertices, quads_to_triangles(quads))


@pytest.fixture
def triangle_mesh():
    """Single right triangle in the z=0 plane facing +z."""
    return Mesh([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]], [[0, 1, 2]])


@pytest.fixture
def fin_mesh():
    """Three triangles sharing the edge (0, 1): one non-manifold edge."""
    vertices = [
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.5, 1.0, 0.0],
        [0.5, -1.0, 0.0],
        [0.5, 0.0, 1.0],
    ]
    return Mesh(vertices, [[0, 1, 2], [1, 0, 3], [0, 1, 4]])


@pytest.fixture
def square_grid():
    """2 x 2 planar grid: 9 vertices (one interior), 8 faces."""
    return grid_mesh(2, 2)


@pytest.fixture
def framed_grid():
    """5 x 5 planar grid with the centre cell missing: a plate with a hole."""
    return grid_mesh(5, 5, skip={(2, 2)})


@pytest.fixture
def sample_config_file(temp_dir):
    """Write a sample YAML configuration."""
    config = """
tolerances:
  weld: 0.001
  coplanar_angle: 0.5
  split_angle: 45.0

cleanup:
  validate: true
  simplify: true
"""
    path = temp_dir / "meshtopo.yaml"
    path.write_text(config)
    return path


def face_set(mesh):
    """Rotation-normalized oriented faces as a set of tuples."""
    out = set()
    for face in np.asarray(mesh.faces).tolist():
        out.add(min(tuple(face[k:] + face[:k]) for k in range(3)))
    return out
