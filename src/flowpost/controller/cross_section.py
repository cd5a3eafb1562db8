"""
Cross-Section Engine
====================
Cuts the grid with an implicit plane. The cut inherits the grid's point data
interpolated onto the intersection polygons.
"""
from __future__ import annotations

import logging

import numpy as np
import pyvista as pv

from flowpost.errors import DegenerateGeometryError
from flowpost.model import io
from flowpost.model.state import SessionState
from flowpost.model.types import Plane

logger = logging.getLogger(__name__)


def slice_grid(grid: pv.UnstructuredGrid, plane: Plane) -> pv.PolyData:
    """
    Intersection of `grid` with `plane`.

    A plane missing the grid, or an empty grid, gives an empty PolyData.

    Raises:
        DegenerateGeometryError: If the plane normal has zero length.
    """
    if np.linalg.norm(plane.normal) == 0.0:
        raise DegenerateGeometryError("Plane normal must be non-zero.", {"normal": plane.normal})

    if grid.n_cells == 0:
        return pv.PolyData()

    return grid.slice(normal=plane.unit_normal, origin=plane.origin)


def cut(session: SessionState, plane: Plane) -> str:
    """
    Cuts the grid, stores the result as the current plane representation and
    returns it serialized as .vtp.
    """
    logger.info(f"Cutting grid with plane origin={plane.origin}, normal={plane.normal}.")
    poly = slice_grid(session.grid, plane)
    buffer = io.encode_polydata(poly)

    session.plane = plane
    session.set_representation("plane", poly)
    logger.debug(f"Plane cut: {poly.n_points} points, {poly.n_cells} cells.")
    return buffer

