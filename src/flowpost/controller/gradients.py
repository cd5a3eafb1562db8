"""
Gradient Engine
===============
Computes spatial derivatives of a point-data vector field and appends the
results to the grid.
"""
from __future__ import annotations

import logging
from typing import Sequence

import pyvista as pv

from flowpost import config
from flowpost.model.state import SessionState
from flowpost.utils import point_array

logger = logging.getLogger(__name__)


def derive(
    grid: pv.UnstructuredGrid,
    include_vorticity: bool,
    include_gradients: bool,
    field: str = config.VELOCITY_FIELD,
) -> pv.UnstructuredGrid:
    """
    Returns a new grid with 'gradients' and/or 'vorticity' point arrays.

    Uses the fast approximate scheme of the VTK gradient filter. With both
    flags off the input grid is returned as is.

    Raises:
        MissingFieldError: If `field` is not point data on the grid.
    """
    if not include_vorticity and not include_gradients:
        logger.debug("No derivative requested, grid left unchanged.")
        return grid

    point_array(grid, field)
    logger.info(
        f"Computing derivatives of '{field}' "
        f"(gradients={include_gradients}, vorticity={include_vorticity})."
    )

    return grid.compute_derivative(
        scalars=field,
        gradient=config.GRADIENTS_FIELD if include_gradients else False,
        vorticity=config.VORTICITY_FIELD if include_vorticity else None,
        faster=True,
        preference="point",
    )


def compute_gradients(
    session: SessionState,
    include_vorticity: bool,
    include_gradients: bool,
    field: str = config.VELOCITY_FIELD,
) -> None:
    """
    Replaces the session grid with one carrying the requested derivatives.

    References to the previous grid object do not see the new arrays.
    """
    session.grid = derive(session.grid, include_vorticity, include_gradients, field)


def apply_operations(grid: pv.UnstructuredGrid, operations: Sequence[str]) -> pv.UnstructuredGrid:
    """Runs the registered post-update operations as a single derivative pass."""
    return derive(
        grid,
        include_vorticity="vorticity" in operations,
        include_gradients="gradients" in operations,
    )
