"""Working structures used while drawing a single frame."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Optional

from .mapdef import Thing


@dataclass(order=True)
class Span:
    """A horizontal or vertical run of screen positions."""

    s: int = 0
    e: int = 0

    def is_visible(self) -> bool:
        """Tell whether the span was set (the empty 0..0 span is not)."""
        return self.s != 0 or self.e != 0

    def length(self) -> int:
        """Number of positions between start and end."""
        return self.e - self.s


class Plane:
    """Screen area covered by one floor or ceiling surface."""

    def __init__(self, h: float, texture_name: str, light_level: float, height: int) -> None:
        self.h = h
        self.texture_name = texture_name
        self.light_level = light_level
        self.spans: list[list[Span]] = [[] for _ in range(height)]

    def is_sky(self) -> bool:
        """Tell whether the plane shows the sky."""
        return math.isnan(self.h)

    def add_span(self, x: int, sy: int, ey: int) -> None:
        """Extend the plane by column ``x`` over rows ``sy..ey``."""
        if sy > ey:
            return
        if sy < 0 or ey >= len(self.spans):
            raise IndexError("rows outside the plane")
        for row in self.spans[sy : ey + 1]:
            # the most recently added span is last, so it is found first
            if row and row[-1].e == x - 1:
                row[-1].e = x
            else:
                row.append(Span(x, x))


@dataclass
class PainterContext:
    """Texturing information for a wall column."""

    texture_name: str = ""
    y_scale: float = 0.0
    texel_x: float = 0.0
    y_pegging: int = 0
    y_offset: int = 0
    is_edge: bool = False
    lightness: float = 0.0


@dataclass
class Clip:
    """Silhouette of a drawn wall that clips anything behind it."""

    x_span: Span
    y_scale_start: float = 0.0
    y_scale_end: float = 0.0
    top_clips: list[int] = field(default_factory=list)
    bottom_clips: list[int] = field(default_factory=list)
    texel_xs: list[int] = field(default_factory=list)
    y_scales: list[float] = field(default_factory=list)

    def add(self, x: int, painter_context: PainterContext, top_clip: int, bottom_clip: int) -> None:
        """Record the silhouette of one column."""
        if x == self.x_span.s:
            self.y_scale_start = painter_context.y_scale
        elif x == self.x_span.e:
            self.y_scale_end = painter_context.y_scale
        self.top_clips.append(top_clip)
        self.bottom_clips.append(bottom_clip)
        self.texel_xs.append(int(painter_context.texel_x))
        self.y_scales.append(painter_context.y_scale)


@dataclass
class Sprite:
    """An overlay drawn in the last phase, ordered by distance."""

    distance: float

    @property
    def is_thing(self) -> bool:
        return False

    @property
    def is_wall(self) -> bool:
        return False


@dataclass
class SpriteThing(Sprite):
    """A map object drawn as a sprite."""

    thing: Thing

    @property
    def is_thing(self) -> bool:
        return True


@dataclass
class SpriteWall(Sprite):
    """A column of a semi-transparent wall."""

    x: int
    span: Span
    texture_context: PainterContext

    @property
    def is_wall(self) -> bool:
        return True


def _same_height(a: float, b: float) -> bool:
    return a == b or (not math.isfinite(a) and not math.isfinite(b))


class Frame:
    """Occlusion and surface bookkeeping for one rendered frame."""

    def __init__(self, frame_buffer: Any) -> None:
        self.width: int = frame_buffer.width
        self.height: int = frame_buffer.height
        self.occlusion: list[Span] = []
        self.clips: list[Clip] = []
        self.sprites: list[Sprite] = []
        self.floor_clip: list[int] = [self.height] * (self.width + 1)
        self.ceil_clip: list[int] = [-1] * (self.width + 1)
        self.num_segments = 0
        self.num_floor_planes = 0
        self.num_ceiling_planes = 0
        self.num_vertically_occluded = 0
        self.floor_planes: deque[Plane] = deque()
        self.ceiling_planes: deque[Plane] = deque()
        self.sectors: set[int] = set()

    def clip_horizontal_segment(self, start_x: int, end_x: int, is_solid: bool) -> list[Span]:
        """Return the visible parts of ``start_x..end_x``; solid spans occlude."""
        start_x = min(max(start_x, 0), self.width)
        end_x = min(max(end_x, 0), self.width)
        if start_x == end_x:
            return []

        visible: list[Span] = []
        occlusion = self.occlusion
        if not occlusion:
            visible.append(Span(start_x, end_x))
            if is_solid:
                occlusion.insert(0, Span(start_x, end_x))
            return visible

        i = 0
        while i < len(occlusion):
            eo = occlusion[i]
            if eo.s >= end_x:
                # lies entirely before this occluded span
                visible.append(Span(start_x, end_x))
                if is_solid:
                    occlusion.insert(i, Span(start_x, end_x))
                start_x = end_x
                break
            if eo.e >= start_x:
                if eo.s <= start_x and eo.e >= end_x:
                    start_x = end_x
                    break
                if eo.s < start_x:
                    start_x = min(end_x, eo.e)
                elif eo.s > start_x:
                    visible.append(Span(start_x, eo.s))
                    if is_solid:
                        eo.s = start_x
                    start_x = min(end_x, eo.e)
                if eo.e >= end_x:
                    start_x = end_x
                    break
                start_x = eo.e
            i += 1
            if start_x == end_x:
                break

        if end_x > start_x:
            visible.append(Span(start_x, end_x))
            if is_solid:
                occlusion.append(Span(start_x, end_x))

        if is_solid and occlusion:
            merged: list[Span] = []
            for span in occlusion:
                if merged and merged[-1].e == span.s:
                    span.s = merged[-1].s
                    merged[-1] = span
                else:
                    merged.append(span)
            occlusion[:] = merged

        return visible

    def is_occluded(self) -> bool:
        """Tell whether the whole screen is already covered."""
        fully_covered = len(self.occlusion) == 1 and self.occlusion[0] == Span(0, self.width)
        return fully_covered or self.num_vertically_occluded >= self.width

    def is_vertically_occluded(self, x: int) -> bool:
        """Tell whether column ``x`` is already fully drawn."""
        return self.floor_clip[x] <= self.ceil_clip[x]

    def is_span_visible(self, x: int, sy: int, ey: int) -> bool:
        """Tell whether a vertical span at column ``x`` touches the screen."""
        return (
            not (sy < 0 and ey < 0)
            and not (sy >= self.height and ey >= self.height)
            and 0 <= x < self.width
        )

    def merge_into_plane(
        self,
        planes: deque[Plane],
        height: float,
        texture_name: str,
        light_level: float,
        x: int,
        sy: int,
        ey: int,
    ) -> None:
        """Add a vertical span to the matching plane, creating it if needed."""
        if not self.is_span_visible(x, sy, ey):
            return
        plane = next(
            (
                p
                for p in planes
                if _same_height(p.h, height)
                and p.light_level == light_level
                and p.texture_name == texture_name
            ),
            None,
        )
        if plane is None:
            plane = Plane(height, texture_name, light_level, self.height)
            planes.appendleft(plane)
        plane.add_span(x, max(sy, 0), min(ey, self.height - 1))

    def clip_vertical_segment(
        self,
        x: int,
        ceiling_projection: int,
        floor_projection: int,
        is_solid: bool,
        ceiling_height: Optional[float],
        floor_height: Optional[float],
        ceiling_texture: str,
        floor_texture: str,
        light_level: float,
    ) -> Span:
        """Return the visible part of column ``x`` and update the clip tables."""
        span = Span()
        if self.is_vertically_occluded(x):
            return span

        ceil_clip = self.ceil_clip[x]
        floor_clip = self.floor_clip[x]

        if ceiling_projection > ceil_clip:
            span.s = min(ceiling_projection, floor_clip)
            if ceiling_height is not None:
                self.merge_into_plane(
                    self.ceiling_planes, ceiling_height, ceiling_texture, light_level, x, ceil_clip, span.s
                )
        else:
            span.s = ceil_clip

        if floor_projection < floor_clip:
            span.e = max(floor_projection, ceil_clip)
            if floor_height is not None:
                self.merge_into_plane(
                    self.floor_planes, floor_height, floor_texture, light_level, x, span.e, floor_clip
                )
        else:
            span.e = floor_clip

        if is_solid:
            self.floor_clip[x] = self.ceil_clip[x] = 0
        else:
            if ceiling_projection > ceil_clip:
                self.ceil_clip[x] = ceiling_projection
            if floor_projection < floor_clip:
                self.floor_clip[x] = floor_projection

        if self.is_vertically_occluded(x):
            self.num_vertically_occluded += 1

        return span