"""Pytest configuration and fixtures for the post-processing engine tests."""

import logging

import numpy as np
import pytest
import pyvista as pv

from flowpost.engine import MeshEngine
from flowpost.model import io
from flowpost.model.state import SessionState


def make_grid(dimensions=(4, 3, 3)) -> pv.UnstructuredGrid:
    """
    Unit-spaced block of voxels, [0, 3] x [0, 2] x [0, 2] by default.

    Point data:
        U: linear field (x, 2y, 3z), exact under trilinear interpolation.
        V: uniform flow (1, 0, 0).
        p: scalar x.
        C: constant 2.
    Cell data:
        flowRegion: 1 everywhere.
        sdf2: cell index.
    """
    grid = pv.ImageData(dimensions=dimensions, spacing=(1.0, 1.0, 1.0)).cast_to_unstructured_grid()
    pts = np.asarray(grid.points)
    grid.point_data["U"] = np.column_stack((pts[:, 0], 2.0 * pts[:, 1], 3.0 * pts[:, 2]))
    grid.point_data["V"] = np.tile([1.0, 0.0, 0.0], (grid.n_points, 1))
    grid.point_data["p"] = pts[:, 0].copy()
    grid.point_data["C"] = np.full(grid.n_points, 2.0)
    grid.cell_data["flowRegion"] = np.ones(grid.n_cells)
    grid.cell_data["sdf2"] = np.arange(grid.n_cells, dtype=np.float64)
    return grid


@pytest.fixture
def grid():
    """Small 3 x 2 x 2 voxel grid (12 cells, 36 points)."""
    return make_grid()


@pytest.fixture
def grid_buffer(grid):
    """The small grid serialized as .vtu text."""
    return io.encode_grid(grid)


@pytest.fixture
def session(grid_buffer):
    """Session with the small grid loaded."""
    from flowpost.controller.store import MeshStore

    state = SessionState()
    MeshStore(state).load(grid_buffer)
    return state


@pytest.fixture
def engine(grid_buffer):
    """Engine with the small grid loaded."""
    eng = MeshEngine()
    eng.load_mesh(grid_buffer)
    return eng


@pytest.fixture
def wall_surface():
    """Large plane at x = 1, normal +x; cell centers sit at x = 0.5, 1.5, 2.5."""
    return pv.Plane(center=(1.0, 1.0, 1.0), direction=(1.0, 0.0, 0.0), i_size=20.0, j_size=20.0).triangulate()


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logging (e.g. by the command line)."""
    yield
    logger = logging.getLogger("flowpost")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
