"""Scene building for hardware rendering: map mesh, draw ranges and matrices."""

from __future__ import annotations

import math
from typing import Sequence

from .mapdef import MapDef, Point, Segment, Sector, Thing
from .mesh import NO_TEXTURE, MeshBuilder
from .projection import distance

EYE_SCALE = 0.001
FIELD_OF_VIEW = math.radians(53.75) / 1.27
ASPECT_STRETCH = 1.27
NEAR_PLANE = 0.01
FAR_PLANE = 100.0

Matrix = tuple[float, ...]


def _edge_lightness(segment: Segment, base: float) -> float:
    # auto-shade 90-degree edges
    if segment.is_vertical:
        return base * 1.1
    if segment.is_horizontal:
        return base * 0.9
    return base


def _add_wall(
    builder: MeshBuilder,
    segment: Segment,
    texture_name: str,
    bottom: float,
    top: float,
    seg_height: float,
    extra_y_offset: float,
    lightness: float,
) -> None:
    texture, unit, layer = builder.allocate_texture(texture_name)
    if texture is None:
        return
    side = segment.front_side
    tex_x = (segment.x_offset + side.x_offset) / texture.width
    tex_y = side.y_offset / texture.height + extra_y_offset / texture.height
    seg_w = distance(segment.s, segment.e) / texture.width
    seg_h = seg_height / texture.height
    builder.add_wall_segment(
        segment.s,
        bottom,
        segment.e,
        top,
        tex_x,
        tex_y + seg_h,
        tex_x + seg_w,
        tex_y,
        unit,
        layer,
        lightness,
    )


def _add_segment_walls(builder: MeshBuilder, segment: Segment) -> None:
    front = segment.front_side.sector
    if front is None:
        return
    lightness = _edge_lightness(segment, front.light_level)
    side = segment.front_side

    if segment.is_solid:
        _add_wall(
            builder,
            segment,
            side.middle_texture,
            front.floor_height,
            front.ceiling_height,
            front.ceiling_height - front.floor_height,
            0.0,
            lightness,
        )
        return

    back = segment.back_side.sector
    if back is None:
        return

    if side.lower_texture not in (NO_TEXTURE, ""):
        _add_wall(
            builder,
            segment,
            side.lower_texture,
            front.floor_height,
            back.floor_height,
            abs(front.floor_height - back.floor_height),
            front.ceiling_height - back.floor_height if segment.lower_unpegged else 0.0,
            lightness,
        )

    if (
        side.upper_texture not in (NO_TEXTURE, "")
        and side.lower_texture != ""
        and not back.is_sky
    ):
        _add_wall(
            builder,
            segment,
            side.upper_texture,
            back.ceiling_height,
            front.ceiling_height,
            abs(back.ceiling_height - front.ceiling_height),
            front.ceiling_height - back.floor_height if segment.upper_unpegged else 0.0,
            lightness,
        )


def _add_flats(builder: MeshBuilder, sector: Sector, segments: Sequence[Segment]) -> None:
    if not segments:
        return
    # triangle fan over the convex subsector
    fan_start = segments[0].s
    for fan_line in segments[1:]:
        if sector.floor_texture != NO_TEXTURE:
            texture, unit, layer = builder.allocate_texture(sector.floor_texture)
            if texture is not None:
                builder.add_floor_ceiling(
                    fan_line.e,
                    fan_line.s,
                    fan_start,
                    sector.floor_height,
                    texture.width,
                    texture.height,
                    unit,
                    layer,
                    sector.light_level,
                )
        if sector.ceiling_texture != NO_TEXTURE and not sector.is_sky:
            texture, unit, layer = builder.allocate_texture(sector.ceiling_texture)
            if texture is not None:
                builder.add_floor_ceiling(
                    fan_start,
                    fan_line.s,
                    fan_line.e,
                    sector.ceiling_height,
                    texture.width,
                    texture.height,
                    unit,
                    layer,
                    sector.light_level,
                )


def load_map(map_def: MapDef, builder: MeshBuilder) -> None:
    """Build the mesh of every subsector and record its index range."""
    if not map_def.has_gl():
        raise ValueError(
            "No GL data found! Provide a matching .gwa file with GL nodes alongside the .wad."
        )

    for sub_sector in map_def.sub_sectors:
        start_index = len(builder.indices)
        for segment in sub_sector.segments:
            _add_segment_walls(builder, segment)
        if sub_sector.sector_id >= 0:
            _add_flats(builder, map_def.sectors[sub_sector.sector_id], sub_sector.segments)
        builder.sub_sector_offsets[sub_sector.sub_sector_id] = (
            start_index,
            len(builder.indices) - start_index,
        )


def draw_ranges(map_def: MapDef, builder: MeshBuilder, pov: Point) -> list[tuple[int, int]]:
    """Index ranges ``(first, count)`` to draw, in front-to-back order."""
    return [
        builder.sub_sector_offsets[sub_sector.sub_sector_id]
        for sub_sector in map_def.subsectors_to_draw(pov)
    ]


def _identity() -> list[list[float]]:
    return [[1.0 if r == c else 0.0 for c in range(4)] for r in range(4)]


def _mul(a: list[list[float]], b: list[list[float]]) -> list[list[float]]:
    return [[sum(a[r][k] * b[k][c] for k in range(4)) for c in range(4)] for r in range(4)]


def _rotate_x(angle: float) -> list[list[float]]:
    m = _identity()
    c, s = math.cos(angle), math.sin(angle)
    m[1][1], m[1][2], m[2][1], m[2][2] = c, -s, s, c
    return m


def _rotate_z(angle: float) -> list[list[float]]:
    m = _identity()
    c, s = math.cos(angle), math.sin(angle)
    m[0][0], m[0][1], m[1][0], m[1][1] = c, -s, s, c
    return m


def _scale(factor: float) -> list[list[float]]:
    m = _identity()
    for i in range(3):
        m[i][i] = factor
    return m


def _translate(x: float, y: float, z: float) -> list[list[float]]:
    m = _identity()
    m[0][3], m[1][3], m[2][3] = x, y, z
    return m


def _column_major(m: list[list[float]]) -> Matrix:
    return tuple(m[r][c] for c in range(4) for r in range(4))


def view_matrix(player: Thing) -> Matrix:
    """View matrix for the player's eye, as 16 floats in column-major order."""
    m = _rotate_x(math.radians(-90.0))
    m = _mul(m, _scale(EYE_SCALE))
    m = _mul(m, _rotate_z(-player.a + math.radians(90.0)))
    m = _mul(m, _translate(-player.x, -player.y, -player.z))
    return _column_major(m)


def projection_matrix(width: int, height: int) -> Matrix:
    """Perspective projection for a viewport, as 16 floats in column-major order."""
    if width <= 0 or height <= 0:
        raise ValueError("viewport size must be positive")
    aspect = ASPECT_STRETCH * width / float(height)
    tan_half = math.tan(FIELD_OF_VIEW / 2)
    near, far = NEAR_PLANE, FAR_PLANE
    m = [[0.0] * 4 for _ in range(4)]
    m[0][0] = 1.0 / (aspect * tan_half)
    m[1][1] = 1.0 / tan_half
    m[2][2] = -(far + near) / (far - near)
    m[3][2] = -1.0
    m[2][3] = -(2.0 * far * near) / (far - near)
    return _column_major(m)