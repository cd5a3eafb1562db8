"""
Value Types
===========
Small immutable records exchanged between the engine components.

Classes:
    Plane: Origin + normal of a cross-section.
    SeedSphere: Sphere used to seed streamlines.
    StreamlineSettings: Full parameter set of a streamline trace.
    RenderState: What the last render call colorized.
    RenderResult: Colors plus the range they were mapped with.
    IntegrationResult: Extent plus normalized integrated values.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
import numpy.typing as npt

from flowpost import config
from flowpost.errors import InvalidArgumentError

Vec3 = Tuple[float, float, float]


def as_vec3(values) -> Vec3:
    arr = np.asarray(values, dtype=np.float64).ravel()
    if arr.shape != (3,):
        raise InvalidArgumentError("Expected 3 coordinates.", {"shape": arr.shape})
    return float(arr[0]), float(arr[1]), float(arr[2])


@dataclass(frozen=True)
class Plane:
    origin: Vec3
    normal: Vec3

    @classmethod
    def from_values(cls, origin, normal) -> Plane:
        return cls(origin=as_vec3(origin), normal=as_vec3(normal))

    @property
    def unit_normal(self) -> npt.NDArray[np.float64]:
        n = np.asarray(self.normal, dtype=np.float64)
        return n / np.linalg.norm(n)


@dataclass(frozen=True)
class SeedSphere:
    center: Vec3
    radius: float
    resolution: int


@dataclass(frozen=True)
class StreamlineSettings:
    """
    Parameters of a streamline trace, grouped the way the host passes them.

    Attributes:
        field: Point-data vector field to integrate.
        sphere: Seed sphere.
        max_length: Maximum arclength of each trace.
        tube_radius: Base tube radius (scaled by vector magnitude).
        tube_sides: Number of facets of the tube cross-section.
    """
    field: str = config.VELOCITY_FIELD
    sphere: SeedSphere = SeedSphere(center=(0.0, 0.0, 0.0), radius=1.0, resolution=8)
    max_length: float = 300.0
    tube_radius: float = 0.1
    tube_sides: int = 30


@dataclass
class RenderState:
    """What the last render colorized; `values` are the mapped point values."""
    component: str
    field: str
    component_index: int
    scalar_range: Tuple[float, float]
    colors: npt.NDArray[np.float32] = field(repr=False)
    values: npt.NDArray[np.float64] = field(default_factory=lambda: np.zeros(0), repr=False)


@dataclass
class RenderResult:
    colors: npt.NDArray[np.float32] = field(repr=False)
    range: Tuple[float, float] = (0.0, 0.0)


@dataclass
class IntegrationResult:
    """Extent (volume or area) and the field integral divided by it."""
    extent: float
    values: npt.NDArray[np.float64]

    @property
    def magnitude(self) -> float:
        return float(np.linalg.norm(self.values))

    def as_array(self) -> npt.NDArray[np.float64]:
        """Flat layout: [extent, value] or [extent, v0, ..., vn, |v|]."""
        if self.values.size == 1:
            return np.array([self.extent, self.values[0]], dtype=np.float64)
        return np.concatenate(([self.extent], self.values, [self.magnitude])).astype(np.float64)
