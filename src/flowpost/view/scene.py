"""
Scene Exporter
Serializes the active representation, colorized as in the last render call,
to an inline glTF scene.
"""
from __future__ import annotations

import logging

import pyvista as pv
import vtkmodules.vtkRenderingOpenGL2  # noqa: F401  (registers the renderer/mapper factories)
from vtkmodules.vtkIOExport import vtkGLTFExporter
from vtkmodules.vtkRenderingCore import vtkActor, vtkPolyDataMapper, vtkRenderer, vtkRenderWindow

from flowpost.controller.surface import boundary_surface
from flowpost.model.state import SessionState
from flowpost.view.colors import build_lookup_table

logger = logging.getLogger(__name__)


def _mapper(session: SessionState, poly: pv.PolyData) -> vtkPolyDataMapper:
    mapper = vtkPolyDataMapper()
    mapper.SetInputData(poly)

    state = session.render
    if state is None or state.component != session.active_kind or state.field not in poly.point_data:
        mapper.ScalarVisibilityOff()
        return mapper

    mapper.SetLookupTable(build_lookup_table(state.scalar_range, state.component_index))
    mapper.SetScalarModeToUsePointFieldData()
    mapper.SelectColorArray(state.field)
    mapper.SetColorModeToMapScalars()
    mapper.SetScalarRange(*state.scalar_range)
    mapper.ScalarVisibilityOn()
    return mapper


def export_scene(session: SessionState) -> str:
    """
    Returns a self-contained glTF (JSON, buffers inlined) of the current scene.

    Before any representation exists the boundary surface is exported
    uncolored. The session is not modified.
    """
    poly = session.active if session.active is not None else boundary_surface(session.grid)
    logger.info(f"Exporting scene ({session.active_kind or 'surface'}, {poly.n_points} points).")

    actor = vtkActor()
    actor.SetMapper(_mapper(session, poly))

    renderer = vtkRenderer()
    renderer.AddActor(actor)
    renderer.ResetCamera()

    window = vtkRenderWindow()
    window.SetOffScreenRendering(True)
    window.AddRenderer(renderer)

    exporter = vtkGLTFExporter()
    exporter.InlineDataOn()
    exporter.SetRenderWindow(window)
    return exporter.WriteToString()
