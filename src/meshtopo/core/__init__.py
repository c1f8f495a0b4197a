"""
Core module - Mesh representation, vector kernel, configuration and errors.
"""

from meshtopo.core.config import CleanupConfig, ConfigManager, EngineConfig, ToleranceConfig
from meshtopo.core.exceptions import (
    ConfigurationError,
    GeometryError,
    InvalidGeometryError,
    InvalidReferenceError,
    MeshShapeError,
    MeshtopoError,
    MeshValidationError,
    ParameterError,
    TriangulationError,
)
from meshtopo.core.mesh import Mesh
from meshtopo.core.vector import Point3, Vector3

__all__ = [
    # Config
    "ConfigManager",
    "EngineConfig",
    "ToleranceConfig",
    "CleanupConfig",
    # Exceptions
    "MeshtopoError",
    "ConfigurationError",
    "MeshValidationError",
    "MeshShapeError",
    "InvalidReferenceError",
    "InvalidGeometryError",
    "ParameterError",
    "GeometryError",
    "TriangulationError",
    # Geometry
    "Mesh",
    "Point3",
    "Vector3",
]
