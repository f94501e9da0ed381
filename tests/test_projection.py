import math

import pytest

from doomview.framebuffer import FrameBuffer32
from doomview.mapdef import Line, Segment, Side, Thing, Vertex
from doomview.projection import (
    Projection,
    angle_dist,
    distance,
    normalize_angle,
    normalize_view_angle_span,
)

WIDTH, HEIGHT = 320, 200


@pytest.fixture
def player():
    return Thing(0.0, 0.0, 0.0, 0.0)


@pytest.fixture
def projection(player):
    return Projection(player, FrameBuffer32(WIDTH, HEIGHT, []))


def _segment(s, e):
    return Segment(s, e, False, Side(), Side(), 0, False, False)


@pytest.mark.parametrize("angle", [-10.0, -4.0, -0.5, 0.0, 2.0, 7.5, 100.0])
def test_normalize_angle_range_and_equivalence(angle):
    result = normalize_angle(angle)
    assert -math.pi <= result <= math.pi
    assert math.cos(result) == pytest.approx(math.cos(angle), abs=1e-9)
    assert math.sin(result) == pytest.approx(math.sin(angle), abs=1e-9)


def test_angle_dist_symmetric():
    assert angle_dist(0.3, -2.0) == pytest.approx(angle_dist(-2.0, 0.3))
    assert angle_dist(1.0, 1.0) == 0


def test_distance():
    assert distance(Vertex(0, 0), Vertex(3, 4)) == pytest.approx(5.0)


def test_view_angle_span_visible():
    assert normalize_view_angle_span(-0.1, 0.1) == (-0.1, 0.1)


@pytest.mark.parametrize("span", [(-1.0, -0.9), (0.9, 1.0)])
def test_view_angle_span_hidden(span):
    assert normalize_view_angle_span(*span) is None


def test_view_angle_span_wraps_behind():
    start, end = normalize_view_angle_span(3.0, -0.5)
    assert start == pytest.approx(-math.pi / 2)
    assert end == -0.5


def test_view_x_limits(projection):
    assert projection.view_x(0.0) == WIDTH // 2
    assert projection.view_x(math.pi / 4) == WIDTH
    assert projection.view_x(-math.pi / 4) == -1


@pytest.mark.parametrize("x", [10, 80, 160, 200, 300])
def test_view_angle_round_trip(projection, x):
    assert abs(projection.view_x(projection.view_angle(x)) - x) <= 1


def test_view_y_horizon_and_direction(projection):
    assert projection.view_y(100.0, 0.0) == HEIGHT // 2
    assert projection.view_y(100.0, 20.0) < HEIGHT // 2
    assert projection.view_y(100.0, -20.0) > HEIGHT // 2
    assert projection.view_y(100.0, 20.0) <= projection.view_y(200.0, 20.0)


def test_plane_distance(projection):
    assert projection.plane_distance(HEIGHT // 2, 40.0) == math.inf
    assert projection.plane_distance(HEIGHT // 2 + 10, 40.0) > projection.plane_distance(HEIGHT // 2 + 20, 40.0)


def test_texture_scale_proportional(projection):
    assert projection.texture_scale(200.0) == pytest.approx(2 * projection.texture_scale(100.0))


def test_lightness_shading(projection):
    base = projection.lightness(100.0)
    assert projection.lightness(200.0) < base
    vertical = _segment(Vertex(0, 0), Vertex(0, 10))
    horizontal = _segment(Vertex(0, 0), Vertex(10, 0))
    assert projection.lightness(100.0, vertical) == pytest.approx(base * 1.1)
    assert projection.lightness(100.0, horizontal) == pytest.approx(base * 0.9)


def test_normal_vector_and_distance(projection):
    line = Line(Vertex(100, -50), Vertex(100, 50))
    normal = projection.normal_vector(line)
    assert normal.a == pytest.approx(math.pi)
    assert normal.d == pytest.approx(100.0, rel=1e-2)
    assert projection.distance_at(normal, 0.0) == pytest.approx(100.0, rel=1e-2)
    assert projection.offset(normal, 0.0) == pytest.approx(0.0, abs=1.0)


def test_normal_offset_sign_flips_with_side(projection):
    ahead = projection.normal_offset(Line(Vertex(100, -50), Vertex(100, 50)))
    behind = projection.normal_offset(Line(Vertex(100, 50), Vertex(100, 150)))
    assert abs(ahead) == pytest.approx(50.0, rel=1e-2)
    assert ahead * behind < 0


def test_absolute_and_projection_angle(player, projection):
    assert projection.absolute_angle(Vertex(0, 10)) == pytest.approx(math.pi / 2)
    player.a = math.pi / 2
    assert projection.projection_angle(Vertex(0, 10)) == pytest.approx(0.0)