"""
Mesh Store
==========
Owns the loading, export and field updates of the session's active grid.

Why is this file needed?
------------------------
1. Loading: It decodes a serialized grid and installs a deep copy as the
   single active grid, resizing the scratch buffers to the new cell count.
2. Field updates: Solvers hand back per-cell results as flat channel-major
   buffers; this module reshapes them into named arrays and interpolates them
   to the points so every other component can use them.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np
import numpy.typing as npt

from flowpost import config
from flowpost.controller.gradients import apply_operations
from flowpost.errors import InvalidArgumentError
from flowpost.model import io
from flowpost.model.state import SessionState
from flowpost.utils import require_choice

logger = logging.getLogger(__name__)


class MeshStore:
    def __init__(self, session: SessionState) -> None:
        self.session = session

    @property
    def cell_count(self) -> int:
        return self.session.n_cells

    @property
    def point_count(self) -> int:
        return self.session.n_points

    def load(self, buffer: io.Buffer) -> int:
        """
        Replaces the active grid with the decoded `buffer`.

        Returns:
            The number of cells of the new grid.

        Raises:
            DecodeError: If the buffer is not a valid grid; the session is
                left untouched in that case.
        """
        logger.info("Loading unstructured grid.")
        grid = io.decode_grid(buffer)
        self.session.replace_grid(grid)
        logger.info(f"Grid loaded: {grid.n_cells} cells, {grid.n_points} points.")
        return grid.n_cells

    def export_current(self) -> str:
        return io.encode_grid(self.session.grid)

    def field_names(self, association: str = "point") -> list[str]:
        require_choice(association, ("point", "cell"), "association")
        data = self.session.grid.point_data if association == "point" else self.session.grid.cell_data
        return list(data.keys())

    def set_operations(self, operations: Iterable[str]) -> None:
        """Registers the derivative operations run after every field update."""
        validated = [require_choice(op, config.OPERATIONS, "operation") for op in operations]
        self.session.operations = validated
        logger.debug(f"Operations set to {validated}.")

    def update_field(
        self,
        name: str,
        data: Optional[npt.ArrayLike] = None,
        components: int = 3,
    ) -> int:
        """
        Attaches a per-cell field given as a channel-major flat buffer.

        The buffer holds ``[c0(N), c1(N), ...]`` and its component count is
        inferred from its length. Without `data`, the scratch buffer is used:
        the vector buffer for ``components=3``, the scalar one for
        ``components=1``.

        After the cell array is attached, all cell data is interpolated to the
        points (cell data is kept) and the registered operations are applied.

        Returns:
            The number of components of the new field.

        Raises:
            InvalidArgumentError: If the length is not a positive multiple of
                the cell count.
        """
        n_cells = self.cell_count
        if n_cells == 0:
            raise InvalidArgumentError("Cannot update a field before a grid is loaded.", {"field": name})

        if data is None:
            if components == 3:
                flat = self.session.vector_buffer
            elif components == 1:
                flat = self.session.scalar_buffer
            else:
                raise InvalidArgumentError(
                    "Scratch buffers only hold 1 or 3 components.", {"components": components}
                )
        else:
            flat = np.asarray(data, dtype=np.float64).ravel()

        if flat.size == 0 or flat.size % n_cells != 0:
            raise InvalidArgumentError(
                "Invalid field data, length is not a multiple of the cell count.",
                {"field": name, "length": int(flat.size), "cells": n_cells},
            )
        n_components = flat.size // n_cells

        # channel-major -> (N, k)
        values = flat.reshape(n_components, n_cells).T.copy()
        if n_components == 1:
            values = values[:, 0]

        grid = self.session.grid.copy()
        grid.cell_data[name] = values
        grid = grid.cell_data_to_point_data(pass_cell_data=True)
        grid = apply_operations(grid, self.session.operations)

        self.session.grid = grid
        logger.info(f"Field '{name}' updated with {n_components} component(s).")
        return n_components
