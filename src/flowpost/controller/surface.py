"""Boundary surface extraction of the volumetric grid."""
from __future__ import annotations

import logging

import pyvista as pv

from flowpost import config
from flowpost.model.state import SessionState

logger = logging.getLogger(__name__)


def boundary_surface(grid: pv.UnstructuredGrid) -> pv.PolyData:
    """Outer polygon surface of `grid`, carrying its point and cell data."""
    return grid.extract_surface(pass_pointid=False, pass_cellid=False, algorithm=config.SURFACE_ALGORITHM)


def extract_surface(session: SessionState) -> pv.PolyData:
    """Computes the boundary surface and makes it the current surface representation."""
    surface = boundary_surface(session.grid)
    session.set_representation("surface", surface)
    logger.debug(f"Surface extracted: {surface.n_points} points, {surface.n_cells} faces.")
    return surface
