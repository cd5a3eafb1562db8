"""Tests for the engine facade, scene export, command line and ambient helpers."""

import json
import logging
import threading

import numpy as np
import pytest

from flowpost import DistanceClassifier, MeshEngine
from flowpost.errors import (
    DecodeError,
    DegenerateGeometryError,
    FlowPostError,
    InvalidArgumentError,
    MissingFieldError,
    MissingRepresentationError,
)
from flowpost.logging_config import setup_logging
from flowpost.main import main
from flowpost.model import io
from flowpost.model.types import Plane, SeedSphere, StreamlineSettings


class TestMeshEngine:
    """End-to-end use through the facade."""

    def test_load_and_buffers(self, engine):
        assert engine.n_cells == 12
        assert engine.vector_buffer.shape == (36,)
        assert engine.scalar_buffer.shape == (12,)

    def test_scratch_buffer_update(self, engine):
        engine.scalar_buffer[:] = 7.0
        assert engine.update("s", components=1) == 1
        assert engine.integrate("s", "grid")[1] == pytest.approx(7.0)

    def test_export_grid_round_trip(self, engine):
        assert io.decode_grid(engine.export_grid()).n_cells == 12

    def test_surface_polydata_leaves_state_alone(self, engine):
        assert io.decode_polydata(engine.surface_polydata()).n_cells == 32
        assert engine.session.active is None

    def test_probe_and_integrate(self, engine):
        assert np.allclose(engine.probe("U", (1.25, 0.75, 0.5))[:3], [1.25, 1.5, 1.5])
        assert np.allclose(engine.integrate("C", "grid"), [12.0, 2.0])

    def test_cut_then_render_colors(self, engine):
        """render_colors works on the most recently built component."""
        engine.cut((1.5, 1.0, 1.0), (1.0, 0.0, 0.0))
        result = engine.render_colors("U", 1)

        assert engine.component == "plane"
        assert result.colors.size == 4 * engine.session.active.n_points
        assert result.range == (0.0, 4.0)

    def test_render_colors_explicit_range(self, engine):
        engine.extract_surface()
        result = engine.render_colors("p", value_range=(-1.0, 1.0))
        assert result.range == (-1.0, 1.0)

    def test_trace(self, engine):
        buffer = engine.trace((0.5, 1.0, 1.0), 0.25, 10.0, 0.05, 8, 4, field="V")
        assert io.decode_polydata(buffer).n_points > 0
        assert engine.component == "streamlines"

    def test_operations_and_gradients(self, engine):
        engine.set_operations(["gradients"])
        engine.update("s", np.zeros(12))
        assert "gradients" in engine.session.grid.point_data

        engine.compute_gradients(include_vorticity=True, include_gradients=False)
        assert "vorticity" in engine.session.grid.point_data

    def test_reset(self, engine):
        engine.reset()
        assert engine.n_cells == 0

    def test_concurrent_calls(self, engine):
        """Calls from several threads are serialized on the session lock."""
        errors = []

        def work():
            try:
                for _ in range(5):
                    engine.extract_surface()
                    engine.render("surface", "p")
            except FlowPostError as e:
                errors.append(e)

        threads = [threading.Thread(target=work) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert engine.scalar_bar_range() == (0.0, 3.0)


class TestScene:
    """glTF export of the active representation."""

    def test_default_scene_is_gltf(self, engine):
        gltf = json.loads(engine.export_scene())
        assert gltf["asset"]["version"] == "2.0"
        assert gltf["meshes"]

    def test_rendered_surface_scene(self, engine):
        engine.extract_surface()
        engine.render("surface", "p")
        gltf = json.loads(engine.export_scene())
        assert gltf["buffers"][0]["uri"].startswith("data:")

    def test_set_component_plane(self, engine):
        plane = Plane.from_values((1.5, 1.0, 1.0), (1.0, 0.0, 0.0))
        gltf = json.loads(engine.set_component("plane", plane=plane))

        assert "asset" in gltf
        assert engine.session.active_kind == "plane"

    def test_set_component_streamlines(self, engine):
        settings = StreamlineSettings(
            field="V",
            sphere=SeedSphere(center=(0.5, 1.0, 1.0), radius=0.25, resolution=4),
            max_length=10.0,
            tube_radius=0.05,
            tube_sides=8,
        )
        json.loads(engine.set_component("streamlines", streamline_settings=settings))
        assert engine.component == "streamlines"

    def test_set_component_requires_parameters(self, engine):
        with pytest.raises(InvalidArgumentError):
            engine.set_component("plane")
        with pytest.raises(InvalidArgumentError):
            engine.set_component("points")


class TestDistanceClassifier:

    def test_composes_engine(self, engine, wall_surface):
        classifier = DistanceClassifier(engine)
        result = classifier.compute_distance_and_region(io.encode_polydata(wall_surface))
        assert result.shape == (36,)
        assert "sdf1" in engine.session.grid.cell_data


class TestErrors:
    """Error hierarchy and message context."""

    @pytest.mark.parametrize(
        "error, builtin",
        [
            (DecodeError, ValueError),
            (MissingFieldError, LookupError),
            (InvalidArgumentError, ValueError),
            (DegenerateGeometryError, ArithmeticError),
            (MissingRepresentationError, RuntimeError),
        ],
    )
    def test_hierarchy(self, error, builtin):
        assert issubclass(error, FlowPostError)
        assert issubclass(error, builtin)

    def test_context_suffix(self):
        assert str(InvalidArgumentError("Bad target.", {"target": "x"})) == "Bad target. | target='x'"
        assert str(FlowPostError("Plain.")) == "Plain."

    def test_long_context_values_are_truncated(self):
        message = str(FlowPostError("Long.", {"data": "a" * 500}))
        assert message.endswith("...")
        assert len(message) < 200


class TestCommandLine:

    def test_run(self, tmp_path, grid_buffer, capsys):
        mesh = tmp_path / "mesh.vtu"
        mesh.write_text(grid_buffer, encoding="utf-8")
        scene = tmp_path / "scene.gltf"

        code = main([str(mesh), "--integrate", "C", "--cut", "1.5", "1", "1", "1", "0", "0", "--scene", str(scene)])

        out = capsys.readouterr().out
        assert code == 0
        assert "cells: 12" in out
        assert "integral of C: 12 2" in out
        assert "asset" in json.loads(scene.read_text(encoding="utf-8"))

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / "missing.vtu")]) == 1

    def test_unknown_field(self, tmp_path, grid_buffer):
        mesh = tmp_path / "mesh.vtu"
        mesh.write_text(grid_buffer, encoding="utf-8")
        assert main([str(mesh), "--integrate", "nope"]) == 1


class TestLogging:

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path):
        log_file = tmp_path / "run.log"
        setup_logging(level=logging.DEBUG)
        logger = setup_logging(level=logging.DEBUG, log_file=str(log_file))
        try:
            assert logger.name == "flowpost"
            assert len(logger.handlers) == 2
            logger.debug("hello")
            for handler in logger.handlers:
                handler.flush()
            assert "hello" in log_file.read_text(encoding="utf-8")
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
