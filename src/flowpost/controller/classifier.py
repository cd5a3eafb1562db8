"""
Signed-Distance Classifier
==========================
Measures how far each cell center lies from an externally supplied triangulated
surface and masks the flow-region labels of the cells found inside it.

Why is this file needed?
------------------------
1. Geometry input: ML surrogate models take the distance to the obstacle walls
   (``sdf1``) as an input channel next to the pre-computed ``flowRegion`` and
   ``sdf2`` (distance to the top/bottom boundaries) fields of the grid.
2. Masking: Cells with a negative signed distance are inside the obstacle and
   get flow region 0 in the returned channel. A distance of exactly zero is
   not masked.

Sign convention: negative values lie on the side opposite to the surface
normals (inside for a closed, outward-oriented surface).
"""
from __future__ import annotations

import logging

import numpy as np
import numpy.typing as npt
import pyvista as pv

from flowpost import config
from flowpost.model import io
from flowpost.model.state import SessionState
from flowpost.utils import cell_array

logger = logging.getLogger(__name__)


def cell_center_distances(grid: pv.UnstructuredGrid, surface: pv.PolyData) -> npt.NDArray[np.float64]:
    """Signed distance from every cell center of `grid` to `surface`."""
    centers = grid.cell_centers()
    measured = centers.compute_implicit_distance(surface.triangulate())
    return np.asarray(measured.point_data["implicit_distance"], dtype=np.float64)


def mask_flow_region(
    signed_distance: npt.NDArray[np.float64],
    flow_region: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    """Copy of `flow_region` with 0 wherever the signed distance is negative."""
    masked = np.array(flow_region, dtype=np.float64, copy=True)
    masked[signed_distance < 0.0] = 0.0
    return masked


def compute_distance_and_region(session: SessionState, surface_buffer: io.Buffer) -> npt.NDArray[np.float64]:
    """
    Classifies the cells of the grid against a .vtp surface.

    The raw signed distances become the active cell scalars of the grid under
    the name ``sdf1``; the grid's own flow-region array is left untouched.

    Returns:
        Flat array of length 3N: ``[sdf1(N), flowRegion(N), sdf2(N)]`` with the
        flow-region channel masked.

    Raises:
        DecodeError: If `surface_buffer` is not a valid polygon surface.
        MissingFieldError: If the grid lacks 'flowRegion' or 'sdf2' cell data.
    """
    grid = session.grid
    flow_region = np.asarray(cell_array(grid, config.FLOW_REGION_FIELD), dtype=np.float64).ravel()
    secondary = np.asarray(cell_array(grid, config.SECONDARY_SDF_FIELD), dtype=np.float64).ravel()
    surface = io.decode_polydata(surface_buffer)

    logger.info(f"Computing signed distance of {grid.n_cells} cells to a surface of {surface.n_cells} faces.")
    signed_distance = cell_center_distances(grid, surface)
    region = mask_flow_region(signed_distance, flow_region)

    grid.cell_data[config.SIGNED_DISTANCE_FIELD] = signed_distance
    grid.set_active_scalars(config.SIGNED_DISTANCE_FIELD, preference="cell")

    logger.debug(f"{int(np.count_nonzero(signed_distance < 0.0))} cells masked out of the flow region.")
    return np.concatenate((signed_distance, region, secondary))


def classify_stl(session: SessionState, stl_buffer: io.Buffer) -> npt.NDArray[np.float64]:
    """Same as :func:`compute_distance_and_region` for an STL surface."""
    return compute_distance_and_region(session, io.stl_to_vtp(stl_buffer))
