"""
Streamline Tracer
=================
Integrates particle paths through a point-data vector field and thickens them
into tube geometry.

Why is this file needed?
------------------------
1. Seeding: Start points are the vertices of a sphere of given center, radius
   and angular resolution.
2. Integration: Paths follow the flow forward with an embedded Runge-Kutta
   4(5) scheme and adaptive steps (cell-length units) until the maximum
   arclength is reached or the path leaves the grid. Seeds outside the grid
   simply produce no path.
3. Tubing: Every path becomes a tube whose radius scales with the local vector
   magnitude, ready for colorization and export.
"""
from __future__ import annotations

import logging

import pyvista as pv
from vtkmodules.vtkCommonDataModel import vtkDataObject
from vtkmodules.vtkFiltersCore import vtkTubeFilter
from vtkmodules.vtkFiltersFlowPaths import vtkStreamTracer

from flowpost import config
from flowpost.errors import InvalidArgumentError
from flowpost.model import io
from flowpost.model.state import SessionState
from flowpost.model.types import SeedSphere, StreamlineSettings
from flowpost.utils import as_columns, point_array

logger = logging.getLogger(__name__)


def seed_points(sphere: SeedSphere) -> pv.PolyData:
    """Sphere surface whose vertices are the streamline seeds."""
    if sphere.radius <= 0.0:
        raise InvalidArgumentError("Seed sphere radius must be positive.", {"radius": sphere.radius})
    resolution = max(int(sphere.resolution), 3)
    return pv.Sphere(
        radius=sphere.radius,
        center=sphere.center,
        theta_resolution=resolution,
        phi_resolution=resolution,
    )


def integrate_paths(
    grid: pv.UnstructuredGrid,
    seeds: pv.DataSet,
    field: str,
    max_length: float,
) -> pv.PolyData:
    """Forward streamlines of `field` from every seed point, as polylines."""
    tracer = vtkStreamTracer()
    tracer.SetInputData(grid)
    tracer.SetSourceData(seeds)
    tracer.SetInputArrayToProcess(0, 0, 0, vtkDataObject.FIELD_ASSOCIATION_POINTS, field)
    tracer.SetIntegratorTypeToRungeKutta45()
    tracer.SetIntegrationDirectionToForward()
    tracer.SetIntegrationStepUnit(vtkStreamTracer.CELL_LENGTH_UNIT)
    tracer.SetInitialIntegrationStep(config.INITIAL_INTEGRATION_STEP)
    tracer.SetMinimumIntegrationStep(config.MINIMUM_INTEGRATION_STEP)
    tracer.SetMaximumPropagation(max_length)
    tracer.Update()
    return pv.wrap(tracer.GetOutput())


def build_tubes(paths: pv.PolyData, field: str, radius: float, sides: int) -> pv.PolyData:
    """Tubes around `paths` with radius varying by the magnitude of `field`."""
    if paths.n_cells == 0:
        return pv.PolyData()

    tube = vtkTubeFilter()
    tube.SetInputData(paths)
    tube.SetInputArrayToProcess(1, 0, 0, vtkDataObject.FIELD_ASSOCIATION_POINTS, field)
    tube.SetRadius(radius)
    tube.SetNumberOfSides(sides)
    tube.SetVaryRadiusToVaryRadiusByVector()
    tube.Update()
    return pv.wrap(tube.GetOutput())


def trace(session: SessionState, settings: StreamlineSettings) -> str:
    """
    Traces streamlines, stores the tubes as the current streamline
    representation and returns them serialized as .vtp.

    Raises:
        MissingFieldError: If `settings.field` is not point data.
        InvalidArgumentError: If a radius is non-positive, the field is not a
            3-vector, or the tubes have fewer than 3 sides.
    """
    grid = session.grid
    values = as_columns(point_array(grid, settings.field))
    if values.shape[1] != 3:
        raise InvalidArgumentError(
            "Streamlines need a 3-component vector field.",
            {"field": settings.field, "components": values.shape[1]},
        )
    if settings.tube_radius <= 0.0:
        raise InvalidArgumentError("Tube radius must be positive.", {"tube_radius": settings.tube_radius})
    if int(settings.tube_sides) < 3:
        raise InvalidArgumentError("Tubes need at least 3 sides.", {"tube_sides": settings.tube_sides})

    logger.info(
        f"Tracing '{settings.field}' streamlines from sphere at {settings.sphere.center} "
        f"(r={settings.sphere.radius}, resolution={settings.sphere.resolution})."
    )
    seeds = seed_points(settings.sphere)
    paths = integrate_paths(grid, seeds, settings.field, settings.max_length)
    tubes = build_tubes(paths, settings.field, settings.tube_radius, int(settings.tube_sides))
    buffer = io.encode_polydata(tubes)

    session.set_representation("streamlines", tubes)
    logger.debug(f"Traced {paths.n_cells} paths from {seeds.n_points} seeds; tubes have {tubes.n_points} points.")
    return buffer
