"""
Session State (Data Model)
==========================
This module defines the central data structure of one post-processing session.

Why is this file needed?
------------------------
1. State Management: It holds the active grid, its scratch buffers and every
   derived polygon representation in one place.
2. Ownership: Derived representations live only here, so replacing a slot
   releases the previous geometry and replacing the grid drops all of them.
3. Decoupling: Controllers and views receive the session explicitly; there is
   no module-level state, so several sessions can coexist.

Classes:
    SessionState: The main container class.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional, List

import numpy as np
import numpy.typing as npt
import pyvista as pv

from flowpost.model.types import Plane, RenderState

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """
    Holds the entire state of an open session.
    Pass this instance to the controllers and views.
    """
    grid: pv.UnstructuredGrid = field(default_factory=pv.UnstructuredGrid)

    # Host-writable scratch buffers (channel-major: [x(N), y(N), z(N)])
    vector_buffer: npt.NDArray[np.float64] = field(default_factory=lambda: np.zeros(0))
    scalar_buffer: npt.NDArray[np.float64] = field(default_factory=lambda: np.zeros(0))

    # Derived representations, one slot per kind
    surface: Optional[pv.PolyData] = None
    plane: Optional[Plane] = None
    plane_cut: Optional[pv.PolyData] = None
    streamlines: Optional[pv.PolyData] = None

    # The representation most recently produced or selected
    active_kind: Optional[str] = None
    active: Optional[pv.PolyData] = None

    render: Optional[RenderState] = None
    operations: List[str] = field(default_factory=list)

    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def n_cells(self) -> int:
        return int(self.grid.n_cells)

    @property
    def n_points(self) -> int:
        return int(self.grid.n_points)

    def set_representation(self, kind: str, poly: pv.PolyData) -> None:
        """Store `poly` in the slot for `kind` and make it the active one."""
        if kind == "surface":
            self.surface = poly
        elif kind == "plane":
            self.plane_cut = poly
        elif kind == "streamlines":
            self.streamlines = poly
        self.active_kind = kind
        self.active = poly

    def replace_grid(self, grid: pv.UnstructuredGrid) -> None:
        """Install a new grid and resize the scratch buffers to match it."""
        self.grid = grid
        self.vector_buffer = np.zeros(3 * grid.n_cells, dtype=np.float64)
        self.scalar_buffer = np.zeros(grid.n_cells, dtype=np.float64)
        self.invalidate_derived()

    def invalidate_derived(self) -> None:
        """Drop all representations computed from the previous grid."""
        self.surface = None
        self.plane_cut = None
        self.streamlines = None
        self.active_kind = None
        self.active = None
        self.render = None
        logger.debug("Derived representations invalidated.")

    def reset(self) -> None:
        """Clear all data for a new session."""
        self.grid = pv.UnstructuredGrid()
        self.vector_buffer = np.zeros(0)
        self.scalar_buffer = np.zeros(0)
        self.plane = None
        self.operations = []
        self.invalidate_derived()
        logger.info("Session state has been reset.")
