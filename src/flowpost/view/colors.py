"""
Color Mapper / Renderer
=======================
Maps a point-data field of one derived representation through a hue-ramp
lookup table and returns the per-point RGBA colors normalized to [0, 1].

Why is this file needed?
------------------------
1. Representation selection: "surface" and "plane" are recomputed from the
   current grid on every call; "streamlines" reuses the last traced tubes.
2. Range: An explicit [min, max] always wins. When both bounds are exactly
   zero the domain is the actual range of the field (magnitude range for
   component index -1, otherwise the range of that component).
3. Legend: `scalar_bar_range` reports the range of the last rendered field
   for the viewer's color bar.
"""
from __future__ import annotations

import logging
from typing import Tuple

import numpy as np
import numpy.typing as npt
import pyvista as pv
from vtkmodules.util.numpy_support import vtk_to_numpy
from vtkmodules.vtkCommonCore import vtkLookupTable

from flowpost import config
from flowpost.controller.cross_section import slice_grid
from flowpost.controller.surface import boundary_surface
from flowpost.errors import InvalidArgumentError, MissingRepresentationError
from flowpost.model.state import SessionState
from flowpost.model.types import RenderState
from flowpost.utils import as_columns, magnitude, point_array, require_choice

logger = logging.getLogger(__name__)

# vtkSystemIncludes.h
VTK_COLOR_MODE_MAP_SCALARS = 1
VTK_RGBA = 4


def auto_range(values: npt.NDArray, component_index: int = -1) -> Tuple[float, float]:
    """Range of the magnitude (index -1) or of one component of `values`."""
    if np.size(values) == 0:
        return 0.0, 0.0
    if component_index == -1:
        data = magnitude(values)
    else:
        data = as_columns(values)[:, component_index]
    return float(np.min(data)), float(np.max(data))


def build_lookup_table(domain: Tuple[float, float], component_index: int = -1) -> vtkLookupTable:
    """Hue ramp (blue to red) over `domain`, by magnitude or by one component."""
    lut = vtkLookupTable()
    lut.SetNumberOfTableValues(config.TABLE_VALUES)
    lut.SetHueRange(*config.HUE_RANGE)
    if component_index == -1:
        lut.SetVectorModeToMagnitude()
    else:
        lut.SetVectorModeToComponent()
        lut.SetVectorComponent(component_index)
    lut.SetRange(float(domain[0]), float(domain[1]))
    lut.Build()
    return lut


def map_colors(poly: pv.PolyData, field: str, lut: vtkLookupTable, component_index: int = -1) -> npt.NDArray[np.float32]:
    """Flat RGBA buffer (4 values per point) in [0, 1]."""
    array = poly.GetPointData().GetArray(field)
    rgba = lut.MapScalars(array, VTK_COLOR_MODE_MAP_SCALARS, component_index, VTK_RGBA)
    return (vtk_to_numpy(rgba).astype(np.float32) / 255.0).ravel()


def representation(session: SessionState, component: str) -> pv.PolyData:
    """
    Polygon representation to colorize; surface and plane are recomputed.

    Nothing is stored on the session here, `render` commits on success.
    """
    require_choice(component, config.COMPONENTS, "component")
    if component == "surface":
        return boundary_surface(session.grid)
    if component == "plane":
        if session.plane is None:
            raise MissingRepresentationError("No cutting plane has been defined yet.")
        return slice_grid(session.grid, session.plane)
    if session.streamlines is None:
        raise MissingRepresentationError("No streamlines have been traced yet.")
    return session.streamlines


def _check_component_index(values: npt.NDArray, field: str, component_index: int) -> None:
    n_components = as_columns(values).shape[1] if values.size else 1
    if not -1 <= component_index < n_components:
        raise InvalidArgumentError(
            "Component index out of range.",
            {"field": field, "index": component_index, "components": n_components},
        )


def render(
    session: SessionState,
    component: str,
    field: str,
    component_index: int = -1,
    min_value: float = 0.0,
    max_value: float = 0.0,
) -> npt.NDArray[np.float32]:
    """
    Colorizes `field` on the requested representation.

    An empty representation (e.g. a plane missing the grid) gives an empty
    color buffer.

    Args:
        session: Session holding the grid and derived representations.
        component: "surface", "plane" or "streamlines".
        field: Point-data field to map.
        component_index: -1 for magnitude, else the component to map.
        min_value: Lower bound of the color domain.
        max_value: Upper bound; both bounds at 0 selects the field's range.

    Raises:
        InvalidArgumentError: Unknown component or component index.
        MissingRepresentationError: Plane/streamlines requested before any cut/trace.
        MissingFieldError: `field` is not point data of the representation.
    """
    logger.info(f"Rendering '{field}' on {component} (index={component_index}).")
    poly = representation(session, component)
    if poly.n_points == 0:
        values = np.zeros(0, dtype=np.float64)
    else:
        values = np.array(point_array(poly, field), dtype=np.float64)
        _check_component_index(values, field, component_index)

    if min_value == 0 and max_value == 0:
        domain = auto_range(values, component_index)
    else:
        domain = (float(min_value), float(max_value))

    if values.size:
        lut = build_lookup_table(domain, component_index)
        colors = map_colors(poly, field, lut, component_index)
    else:
        colors = np.zeros(0, dtype=np.float32)

    session.set_representation(component, poly)
    session.render = RenderState(
        component=component,
        field=field,
        component_index=component_index,
        scalar_range=domain,
        colors=colors,
        values=values,
    )
    logger.debug(f"Mapped {poly.n_points} points over domain {domain}.")
    return colors


def scalar_bar_range(session: SessionState, component_index: int = -1) -> Tuple[float, float]:
    """Range of the field values mapped by the last render call."""
    state = session.render
    if state is None:
        raise MissingRepresentationError("Nothing has been rendered yet.")
    if state.values.size:
        _check_component_index(state.values, state.field, component_index)
    return auto_range(state.values, component_index)
