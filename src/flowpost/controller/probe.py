"""Point probing: interpolates a field of the grid at an arbitrary location."""
from __future__ import annotations

import logging

import numpy as np
import numpy.typing as npt
import pyvista as pv

from flowpost import config
from flowpost.errors import MissingFieldError
from flowpost.model.state import SessionState
from flowpost.model.types import as_vec3
from flowpost.utils import as_columns, find_association

logger = logging.getLogger(__name__)


def probe(session: SessionState, field: str, point) -> npt.NDArray[np.float64]:
    """
    Interpolated value of `field` at `point`.

    Returns:
        ``[vx, vy, vz, magnitude]``. Scalar and 2-component fields fill the
        leading slots and leave the rest at zero. A point outside the grid
        gives four NaN values; this is the "no data" signal, not an error.

    Raises:
        MissingFieldError: If `field` is not on the grid.
    """
    grid = session.grid
    if find_association(grid, field) is None:
        raise MissingFieldError(f"Cannot probe unknown field '{field}'.", {"field": field})

    output = np.full(4, np.nan, dtype=np.float64)
    if grid.n_cells == 0:
        return output

    location = pv.PolyData(np.array([as_vec3(point)], dtype=np.float64))
    sampled = location.sample(grid)

    valid = np.asarray(sampled.point_data[config.VALID_POINT_MASK])
    if valid[0] == 0:
        logger.debug(f"Probe point {point} is outside the grid.")
        return output

    values = as_columns(sampled.point_data[field])[0]
    n = min(values.size, 3)
    output[:3] = 0.0
    output[:n] = values[:n]
    output[3] = float(np.linalg.norm(values))
    return output
