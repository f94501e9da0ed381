"""Projection of map geometry onto the screen."""

from __future__ import annotations

import math
from typing import Any, Optional

from .mapdef import Line, Point, Segment, Thing, Vector
from .mathcache import PI, PI2, PI4, MathCache

LIGHTNESS_FACTOR = 3000.0
_FULL_TURN = 2 * PI


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b.x - a.x, b.y - a.y)


def normalize_angle(angle: float) -> float:
    """Bring an angle into the range -pi..pi."""
    if not math.isfinite(angle):
        return angle
    if angle < -PI:
        angle += math.floor((-PI - angle) / _FULL_TURN) * _FULL_TURN
    elif angle > PI:
        angle -= math.floor((angle - PI) / _FULL_TURN) * _FULL_TURN
    while angle < -PI:
        angle += _FULL_TURN
    while angle > PI:
        angle -= _FULL_TURN
    return angle


def angle_dist(a1: float, a2: float) -> float:
    """Absolute difference between two normalized angles."""
    return abs(normalize_angle(a2) - normalize_angle(a1))


def normalize_view_angle_span(start_angle: float, end_angle: float) -> Optional[tuple[float, float]]:
    """Trim a span of view angles; return None when it is entirely out of view."""
    if angle_dist(start_angle, end_angle) > PI:
        # the span crosses behind the viewer: wrap over the back edge
        if start_angle < -PI2:
            start_angle = PI2
        elif start_angle > PI2:
            start_angle = -PI2
        elif end_angle < -PI2:
            end_angle = PI2
        elif end_angle > PI2:
            end_angle = -PI2

    if start_angle < -PI4 and end_angle < -PI4:
        return None
    if end_angle > PI4 and start_angle > PI4:
        return None
    return start_angle, end_angle


class Projection:
    """Screen projection for a viewer looking at the map."""

    def __init__(self, player: Thing, frame_buffer: Any, lightness_factor: float = LIGHTNESS_FACTOR) -> None:
        self._player = player
        self._view_width: int = frame_buffer.width
        self._view_height: int = frame_buffer.height
        self._mid_x = self._view_width // 2
        self._mid_y = self._view_height // 2
        self._lightness_factor = lightness_factor

    @staticmethod
    def _math() -> MathCache:
        return MathCache.instance()

    def _normal_and_start(self, line: Line) -> tuple[float, float, float]:
        mc = self._math()
        line_angle = mc.arctan2(line.e.y - line.s.y, line.e.x - line.s.x)
        normal_angle = line_angle + PI2
        start_distance = distance(line.s, self._player)
        start_angle = mc.arctan2(line.s.y - self._player.y, line.s.x - self._player.x)
        return normal_angle, start_distance, start_angle

    def normal_vector(self, line: Line) -> Vector:
        """Normal from a map line towards the viewer."""
        normal_angle, start_distance, start_angle = self._normal_and_start(line)
        normal_distance = start_distance * self._math().cos(normal_angle - start_angle)
        return Vector(normal_angle, abs(normal_distance))

    def normal_offset(self, line: Line) -> float:
        """Distance from the line's start to the foot of its normal."""
        normal_angle, start_distance, start_angle = self._normal_and_start(line)
        offset = abs(start_distance * self._math().sin(normal_angle - start_angle))
        if normalize_angle(normal_angle - start_angle) > 0:
            offset = -offset
        return offset

    def absolute_angle(self, point: Point) -> float:
        """Map angle from the viewer to a point."""
        return self._math().arctan2(point.y - self._player.y, point.x - self._player.x)

    def projection_angle(self, point: Point) -> float:
        """Angle to a point relative to the viewing direction."""
        return normalize_angle(self.absolute_angle(point) - self._player.a)

    def _view_relative(self, normal_vector: Vector, view_angle: float) -> tuple[float, float]:
        inverse_normal_angle = normal_vector.a - PI
        relative = normalize_angle(inverse_normal_angle - (self._player.a + view_angle))
        intercept = normal_vector.d / self._math().cos(relative)
        return relative, intercept

    def distance_at(self, normal_vector: Vector, view_angle: float) -> float:
        """Perpendicular view distance to a line along a view angle."""
        _, intercept = self._view_relative(normal_vector, view_angle)
        return abs(self._math().cos(view_angle) * intercept)

    def offset(self, normal_vector: Vector, view_angle: float) -> float:
        """Texture offset of the intercept along the line from its normal."""
        relative, intercept = self._view_relative(normal_vector, view_angle)
        result = abs(intercept * self._math().sin(relative))
        if relative > 0:
            result = -result
        return result

    def plane_distance(self, y: int, height: float) -> float:
        """Distance to a floor or ceiling seen at screen row ``y``."""
        dy = abs(y - self._mid_y)
        numerator = (self._view_height * 30.0) * abs(height / 23.0)
        if dy == 0:
            return math.inf if numerator else math.nan
        return numerator / dy

    def view_x(self, view_angle: float) -> int:
        """Screen column for a view angle in -pi/4..pi/4."""
        view_angle = normalize_angle(view_angle)
        if view_angle <= -PI4:
            return -1
        if view_angle >= PI4:
            return self._view_width
        mid_distance = self._math().tan(view_angle) / PI4
        if mid_distance <= -1:
            return -1
        if mid_distance >= 1:
            return self._view_width
        return int(self._mid_x * (1 + mid_distance))

    def view_angle(self, view_x: int) -> float:
        """View angle for a screen column."""
        fraction = (view_x - self._mid_x) / self._mid_x
        return self._math().arctan(fraction * PI4)

    def view_y(self, distance: float, height: float) -> int:
        """Screen row for a height difference seen at a distance."""
        dc = (self._view_height * 30.0) / distance
        dy = int(dc * abs(height / 23.0))
        if height > 0:
            return self._mid_y - dy
        return self._mid_y + dy

    def texture_scale(self, distance: float) -> float:
        """Texture scaling factor at a distance."""
        return distance / (self._view_height * 1.30434782)

    def lightness(self, distance: float, segment: Optional[Segment] = None) -> float:
        """Lightness at a distance, shading axis-aligned walls."""
        value = 0.9 - distance / self._lightness_factor
        if segment is not None:
            if segment.is_vertical:
                value *= 1.1
            elif segment.is_horizontal:
                value *= 0.9
        return value