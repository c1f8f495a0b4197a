"""
Custom exceptions for meshtopo.

All meshtopo exceptions inherit from MeshtopoError for easy catching.
Degenerate geometry (zero-area faces, parallel rays) is never reported
through exceptions; those cases return well-defined empty results.
"""

from typing import Any


class MeshtopoError(Exception):
    """Base exception for all meshtopo errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(MeshtopoError):
    """Raised when configuration is invalid or missing."""

    pass


class MeshValidationError(MeshtopoError):
    """Raised when a mesh fails validation."""

    pass


class MeshShapeError(MeshValidationError):
    """Raised when vertex or face buffers have the wrong shape."""

    pass


class InvalidReferenceError(MeshValidationError):
    """Raised when a face references a vertex index outside the vertex buffer."""

    def __init__(
        self,
        message: str,
        face_ids: list[int] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.face_ids = face_ids or []


class InvalidGeometryError(MeshValidationError):
    """Raised when vertex coordinates are not finite."""

    pass


class ParameterError(MeshtopoError, ValueError):
    """Raised when an operation receives an out-of-range parameter."""

    pass


class GeometryError(MeshtopoError):
    """Raised when conversion or file exchange of geometry fails."""

    pass


class TriangulationError(MeshtopoError):
    """Raised when the polygon triangulation collaborator fails."""

    pass
