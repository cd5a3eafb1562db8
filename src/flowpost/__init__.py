"""
flowpost
========
Post-processing engine for CFD meshes: surfaces, cross-sections, streamlines,
probes, integrals, gradients, color mapping and glTF scene export.
"""
from flowpost.engine import DistanceClassifier, MeshEngine
from flowpost.errors import (
    DecodeError,
    DegenerateGeometryError,
    FlowPostError,
    InvalidArgumentError,
    MissingFieldError,
    MissingRepresentationError,
)
from flowpost.model.state import SessionState
from flowpost.model.types import Plane, RenderResult, SeedSphere, StreamlineSettings

__version__ = "0.1.0"

__all__ = [
    "MeshEngine",
    "DistanceClassifier",
    "SessionState",
    "Plane",
    "SeedSphere",
    "StreamlineSettings",
    "RenderResult",
    "FlowPostError",
    "DecodeError",
    "MissingFieldError",
    "InvalidArgumentError",
    "DegenerateGeometryError",
    "MissingRepresentationError",
]
