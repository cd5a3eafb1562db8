"""Array lookup and argument helpers shared by the controllers and views."""
from __future__ import annotations

from typing import Iterable, Optional

import numpy as np
import numpy.typing as npt
import pyvista as pv

from flowpost.errors import InvalidArgumentError, MissingFieldError


def require_choice(value: str, choices: Iterable[str], argument: str) -> str:
    """Raise InvalidArgumentError unless `value` is one of `choices`."""
    choices = tuple(choices)
    if value not in choices:
        raise InvalidArgumentError(
            f"Invalid {argument} '{value}'. Must be one of: {', '.join(choices)}.",
            {argument: value},
        )
    return value


def point_array(dataset: pv.DataSet, name: str) -> npt.NDArray:
    """Point-data array `name` as numpy, or MissingFieldError."""
    if name not in dataset.point_data:
        raise MissingFieldError(
            f"Point data has no array '{name}'.",
            {"available": list(dataset.point_data.keys())},
        )
    return np.asarray(dataset.point_data[name])


def cell_array(dataset: pv.DataSet, name: str) -> npt.NDArray:
    """Cell-data array `name` as numpy, or MissingFieldError."""
    if name not in dataset.cell_data:
        raise MissingFieldError(
            f"Cell data has no array '{name}'.",
            {"available": list(dataset.cell_data.keys())},
        )
    return np.asarray(dataset.cell_data[name])


def find_association(dataset: pv.DataSet, name: str) -> Optional[str]:
    """'point' or 'cell' depending on where `name` lives (point data first)."""
    if name in dataset.point_data:
        return "point"
    if name in dataset.cell_data:
        return "cell"
    return None


def as_columns(values: npt.NDArray) -> npt.NDArray[np.float64]:
    """Reshape a flat or (N, k) array to (N, k) float64."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim == 0:
        return arr.reshape(1, 1)
    if arr.ndim == 1:
        return arr[:, None]
    return arr.reshape(arr.shape[0], int(np.prod(arr.shape[1:])))


def magnitude(values: npt.NDArray) -> npt.NDArray[np.float64]:
    """Per-tuple value for single-component arrays, Euclidean norm otherwise."""
    cols = as_columns(values)
    if cols.shape[1] == 1:
        return cols[:, 0]
    return np.linalg.norm(cols, axis=1)
