"""Tests for color mapping and the scalar bar range."""

import numpy as np
import pytest

from flowpost.controller.cross_section import cut
from flowpost.errors import InvalidArgumentError, MissingFieldError, MissingRepresentationError
from flowpost.model.types import Plane
from flowpost.view.colors import auto_range, render, scalar_bar_range


class TestAutoRange:

    def test_magnitude_and_component(self):
        values = np.array([[3.0, 4.0, 0.0], [0.0, 0.0, 1.0]])
        assert auto_range(values, -1) == (1.0, 5.0)
        assert auto_range(values, 0) == (0.0, 3.0)

    def test_empty(self):
        assert auto_range(np.zeros((0, 3)), -1) == (0.0, 0.0)


class TestRender:
    """Hue-ramp coloring of the surface, plane and streamline representations."""

    def test_rgba_per_point(self, session):
        """Four normalized values per surface point."""
        colors = render(session, "surface", "U")
        n_points = session.active.n_points

        assert colors.shape == (4 * n_points,)
        assert colors.min() >= 0.0
        assert colors.max() <= 1.0

    def test_low_values_are_blue_and_high_values_red(self, session):
        colors = render(session, "surface", "p").reshape(-1, 4)
        x = session.active.points[:, 0]

        low, high = colors[np.argmin(x)], colors[np.argmax(x)]
        assert low[2] > low[0]
        assert high[0] > high[2]

    def test_auto_range_matches_scalar_bar(self, session):
        """Both bounds at zero select the range of the field itself."""
        render(session, "surface", "p")
        assert session.render.scalar_range == (0.0, 3.0)
        assert scalar_bar_range(session) == (0.0, 3.0)

    def test_explicit_range_wins(self, session):
        """An explicit domain changes the colors but not the scalar bar."""
        auto = render(session, "surface", "p")
        explicit = render(session, "surface", "p", -1, 0.0, 30.0)

        assert session.render.scalar_range == (0.0, 30.0)
        assert not np.allclose(auto, explicit)
        assert scalar_bar_range(session) == (0.0, 3.0)

    def test_component_index(self, session):
        """Index 1 maps U_y = 2y, whose range on the surface is [0, 4]."""
        render(session, "surface", "U", 1)
        assert session.render.scalar_range == (0.0, 4.0)

    def test_plane_is_recut_from_current_grid(self, session):
        cut(session, Plane.from_values((1.5, 1.0, 1.0), (1.0, 0.0, 0.0)))
        render(session, "plane", "p")
        assert session.render.scalar_range == pytest.approx((1.5, 1.5))

    def test_plane_before_cut_raises(self, session):
        with pytest.raises(MissingRepresentationError):
            render(session, "plane", "p")

    def test_streamlines_before_trace_raise(self, session):
        with pytest.raises(MissingRepresentationError):
            render(session, "streamlines", "V")

    def test_unknown_component_raises(self, session):
        with pytest.raises(InvalidArgumentError):
            render(session, "volume", "p")

    def test_unknown_field_raises(self, session):
        with pytest.raises(MissingFieldError):
            render(session, "surface", "nope")
        assert session.render is None

    def test_component_index_out_of_range(self, session):
        with pytest.raises(InvalidArgumentError):
            render(session, "surface", "U", 3)

    def test_scalar_bar_before_render_raises(self, session):
        with pytest.raises(MissingRepresentationError):
            scalar_bar_range(session)


class TestScalarBarRange:
    """The legend follows the last render, not the last built representation."""

    def test_range_survives_a_later_cut(self, session):
        render(session, "surface", "p")
        cut(session, Plane.from_values((1.5, 1.0, 1.0), (1.0, 0.0, 0.0)))

        assert session.active_kind == "plane"
        assert scalar_bar_range(session) == (0.0, 3.0)

    def test_component_index_out_of_range(self, session):
        render(session, "surface", "U")
        with pytest.raises(InvalidArgumentError):
            scalar_bar_range(session, 7)

    def test_component_range(self, session):
        render(session, "surface", "U")
        assert scalar_bar_range(session, 2) == (0.0, 6.0)


class TestEmptyRepresentation:

    def test_plane_missing_grid_gives_empty_colors(self, session):
        """A cut that misses the grid renders to an empty buffer, not an error."""
        cut(session, Plane.from_values((100.0, 0.0, 0.0), (1.0, 0.0, 0.0)))

        colors = render(session, "plane", "p")

        assert colors.size == 0
        assert session.render.scalar_range == (0.0, 0.0)
        assert scalar_bar_range(session) == (0.0, 0.0)
