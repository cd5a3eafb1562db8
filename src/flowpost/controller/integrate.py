"""
Spatial Integrator
==================
Integrates a field over the volume of the grid or over the area of the active
derived component, and reports it normalized by that extent.

Output layout (flat buffer):
    scalar field:        [extent, value]
    n-component field:   [extent, v0, ..., v(n-1), |v|]
"""
from __future__ import annotations

import logging

import numpy as np
import numpy.typing as npt
import pyvista as pv

from flowpost import config
from flowpost.errors import DegenerateGeometryError, MissingFieldError, MissingRepresentationError
from flowpost.model.state import SessionState
from flowpost.model.types import IntegrationResult
from flowpost.utils import require_choice

logger = logging.getLogger(__name__)

# Name of the extent array written by vtkIntegrateAttributes per target
EXTENT_ARRAYS = {"grid": "Volume", "component": "Area"}


def _integration_domain(session: SessionState, target: str) -> pv.DataSet:
    if target == "grid":
        return session.grid
    if session.active is None:
        raise MissingRepresentationError(
            "No active component to integrate over. Extract a surface, cut or trace first."
        )
    return session.active


def integrate_field(dataset: pv.DataSet, field: str, extent_name: str) -> IntegrationResult:
    """
    Integral of `field` over `dataset`, divided by the integrated extent.

    Raises:
        MissingFieldError: If `field` is neither point nor cell data.
        DegenerateGeometryError: If the extent is (numerically) zero.
    """
    if dataset.n_cells == 0:
        raise DegenerateGeometryError("Cannot integrate over an empty dataset.", {"field": field})

    if field not in dataset.point_data and field not in dataset.cell_data:
        raise MissingFieldError(f"Cannot integrate unknown field '{field}'.", {"field": field})

    integrated = dataset.integrate_data()

    if extent_name not in integrated.cell_data:
        raise DegenerateGeometryError(
            f"Dataset has no {extent_name.lower()} to integrate over.",
            {"available": list(integrated.cell_data.keys())},
        )
    extent = float(np.asarray(integrated.cell_data[extent_name]).ravel()[0])
    if abs(extent) <= config.EXTENT_TOLERANCE:
        logger.error(f"Degenerate {extent_name.lower()} extent: {extent}")
        raise DegenerateGeometryError(
            f"{extent_name} is zero, cannot normalize the integral.", {"extent": extent}
        )

    data = integrated.point_data if field in integrated.point_data else integrated.cell_data
    values = np.asarray(data[field], dtype=np.float64).ravel()
    return IntegrationResult(extent=extent, values=values / extent)


def integrate(session: SessionState, field: str, target: str) -> npt.NDArray[np.float64]:
    """
    Integrates `field` over the grid ("grid") or the active component ("component").

    Raises:
        InvalidArgumentError: For any other target.
        MissingRepresentationError: If target is "component" and none exists.
    """
    require_choice(target, config.INTEGRATION_TARGETS, "target")
    dataset = _integration_domain(session, target)
    result = integrate_field(dataset, field, EXTENT_ARRAYS[target])
    logger.debug(f"Integrated '{field}' over {target}: extent={result.extent:.6g}")
    return result.as_array()
