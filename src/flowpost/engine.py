"""
Mesh Engine (Facade)
====================
Exposes every query and processing operation over one SessionState.

Why is this file needed?
------------------------
1. Single entry point: The host binding layer talks to one object instead of
   wiring the controllers and views together itself.
2. Serialization: Every call holds the session lock, so a multi-threaded host
   cannot interleave a mutation with another call on the same session.
3. Composition: The signed-distance classification is a separate capability
   (`DistanceClassifier`) built on top of an engine, not a subclass of it.

Classes:
    MeshEngine: The core capability set.
    DistanceClassifier: Signed-distance / flow-region capability.
"""
from __future__ import annotations

import functools
import logging
from typing import Iterable, Optional, Sequence

import numpy as np
import numpy.typing as npt

from flowpost import config
from flowpost.controller import classifier, cross_section, gradients, integrate, probe, streamlines, surface
from flowpost.controller.store import MeshStore
from flowpost.errors import InvalidArgumentError
from flowpost.model import io
from flowpost.model.state import SessionState
from flowpost.model.types import Plane, RenderResult, SeedSphere, StreamlineSettings, as_vec3
from flowpost.utils import require_choice
from flowpost.view import colors, scene

logger = logging.getLogger(__name__)


def _locked(method):
    """Runs `method` while holding the session lock."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.session.lock:
            return method(self, *args, **kwargs)
    return wrapper


class MeshEngine:
    def __init__(self, session: Optional[SessionState] = None) -> None:
        self.session = session or SessionState()
        self.store = MeshStore(self.session)
        # Representation colorized by `render_colors`
        self.component: str = "surface"

    # ------------------------------------------------------------------------------
    # Mesh store
    # ------------------------------------------------------------------------------

    @_locked
    def load_mesh(self, buffer: io.Buffer) -> int:
        n_cells = self.store.load(buffer)
        self.component = "surface"
        return n_cells

    @_locked
    def export_grid(self) -> str:
        return self.store.export_current()

    @_locked
    def surface_polydata(self) -> str:
        """Boundary surface of the grid serialized as .vtp (no state change)."""
        return io.grid_to_polydata(self.session.grid)

    @property
    def n_cells(self) -> int:
        return self.session.n_cells

    @property
    def vector_buffer(self) -> npt.NDArray[np.float64]:
        """Writable 3N scratch buffer, consumed by ``update(name)``."""
        return self.session.vector_buffer

    @property
    def scalar_buffer(self) -> npt.NDArray[np.float64]:
        """Writable N scratch buffer, consumed by ``update(name, components=1)``."""
        return self.session.scalar_buffer

    @_locked
    def update(self, field: str, data: Optional[npt.ArrayLike] = None, components: int = 3) -> int:
        return self.store.update_field(field, data, components)

    @_locked
    def set_operations(self, operations: Iterable[str]) -> None:
        self.store.set_operations(operations)

    # ------------------------------------------------------------------------------
    # Derived representations
    # ------------------------------------------------------------------------------

    @_locked
    def extract_surface(self) -> None:
        surface.extract_surface(self.session)
        self.component = "surface"

    @_locked
    def cut(self, origin: Sequence[float], normal: Sequence[float]) -> str:
        buffer = cross_section.cut(self.session, Plane.from_values(origin, normal))
        self.component = "plane"
        return buffer

    @_locked
    def trace(
        self,
        center: Sequence[float],
        radius: float,
        max_length: float,
        tube_radius: float,
        tube_sides: int,
        resolution: int,
        field: str = config.VELOCITY_FIELD,
    ) -> str:
        settings = StreamlineSettings(
            field=field,
            sphere=SeedSphere(center=as_vec3(center), radius=float(radius), resolution=int(resolution)),
            max_length=float(max_length),
            tube_radius=float(tube_radius),
            tube_sides=int(tube_sides),
        )
        buffer = streamlines.trace(self.session, settings)
        self.component = "streamlines"
        return buffer

    @_locked
    def set_component(
        self,
        component: str,
        plane: Optional[Plane] = None,
        streamline_settings: Optional[StreamlineSettings] = None,
    ) -> str:
        """
        Builds the named representation and returns the glTF scene of it.

        Args:
            component: "surface", "plane" or "streamlines".
            plane: Required for "plane".
            streamline_settings: Required for "streamlines".
        """
        require_choice(component, config.COMPONENTS, "component")
        if component == "surface":
            surface.extract_surface(self.session)
        elif component == "plane":
            if plane is None:
                raise InvalidArgumentError("A plane is required for the 'plane' component.")
            cross_section.cut(self.session, plane)
        else:
            if streamline_settings is None:
                raise InvalidArgumentError("Streamline settings are required for the 'streamlines' component.")
            streamlines.trace(self.session, streamline_settings)

        self.component = component
        return scene.export_scene(self.session)

    # ------------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------------

    @_locked
    def probe(self, field: str, point: Sequence[float]) -> npt.NDArray[np.float64]:
        return probe.probe(self.session, field, point)

    @_locked
    def integrate(self, field: str, target: str) -> npt.NDArray[np.float64]:
        return integrate.integrate(self.session, field, target)

    @_locked
    def compute_gradients(self, include_vorticity: bool, include_gradients: bool) -> None:
        gradients.compute_gradients(self.session, include_vorticity, include_gradients)

    # ------------------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------------------

    @_locked
    def render(
        self,
        component: str,
        field: str,
        component_index: int = -1,
        min_value: float = 0.0,
        max_value: float = 0.0,
    ) -> npt.NDArray[np.float32]:
        rgba = colors.render(self.session, component, field, component_index, min_value, max_value)
        self.component = component
        return rgba

    @_locked
    def render_colors(
        self,
        field: str,
        index: int = -1,
        value_range: Optional[Sequence[float]] = None,
    ) -> RenderResult:
        """
        Colors of the current component plus the range they were mapped with:
        `value_range` when given, the field's own range otherwise.
        """
        low, high = (0.0, 0.0) if value_range is None else (float(value_range[0]), float(value_range[1]))
        rgba = colors.render(self.session, self.component, field, index, low, high)
        return RenderResult(colors=rgba, range=self.session.render.scalar_range)

    @_locked
    def scalar_bar_range(self, component_index: int = -1) -> tuple[float, float]:
        return colors.scalar_bar_range(self.session, component_index)

    @_locked
    def export_scene(self) -> str:
        return scene.export_scene(self.session)

    @_locked
    def reset(self) -> None:
        self.session.reset()
        self.component = "surface"


class DistanceClassifier:
    """Signed-distance based flow-region classification for an engine's grid."""

    def __init__(self, engine: MeshEngine) -> None:
        self.engine = engine

    @property
    def session(self) -> SessionState:
        return self.engine.session

    @_locked
    def compute_distance_and_region(self, surface_buffer: io.Buffer) -> npt.NDArray[np.float64]:
        return classifier.compute_distance_and_region(self.session, surface_buffer)

    @_locked
    def classify_stl(self, stl_buffer: io.Buffer) -> npt.NDArray[np.float64]:
        return classifier.classify_stl(self.session, stl_buffer)
