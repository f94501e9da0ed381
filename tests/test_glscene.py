import math
from dataclasses import dataclass, field

import pytest

from doomview.glscene import draw_ranges, load_map, projection_matrix, view_matrix
from doomview.mapdef import MapDef, Thing
from doomview.mapstore import (
    GLSegRecord,
    LineDefRecord,
    MapStore,
    NodeRecord,
    SectorRecord,
    SideDefRecord,
    SubSectorRecord,
    VertexRecord,
)
from doomview.mesh import MeshBuilder


@dataclass
class _Texture:
    name: str
    width: int
    height: int
    pixels: list = field(default_factory=list)


def _name(text):
    return text.encode("latin-1").ljust(8, b"\0")


def _store(with_gl=True, ceiling="CEIL"):
    vertexes = [VertexRecord(0, 0), VertexRecord(0, 128), VertexRecord(128, 128), VertexRecord(128, 0)]
    line_defs = [LineDefRecord(i, (i + 1) % 4, 0, 0, 0, i, 0xFFFF) for i in range(4)]
    side_defs = [SideDefRecord(0, 0, _name("-"), _name("-"), _name("WALL"), 0) for _ in range(4)]
    sectors = [SectorRecord(0, 128, _name("FLOOR"), _name(ceiling), 255, 0, 0)]
    nodes = [NodeRecord(64, 0, 0, 128, 0, 0, 0, 0, 0, 0, 0, 0, 0x8000, 0x8000)]
    gl_segs = [GLSegRecord(i, (i + 1) % 4, i, 0, 0xFFFF) for i in range(4)] if with_gl else []
    return MapStore(
        sub_sectors=[SubSectorRecord(4, 0)],
        vertexes=vertexes,
        line_defs=line_defs,
        side_defs=side_defs,
        sectors=sectors,
        nodes=nodes,
        gl_segments=gl_segs,
    )


def _textures():
    return {
        "WALL": _Texture("WALL", 64, 128),
        "FLOOR": _Texture("FLOOR", 64, 64),
        "CEIL": _Texture("CEIL", 64, 64),
    }


def _apply(matrix, vector):
    return [sum(matrix[c * 4 + r] * vector[c] for c in range(4)) for r in range(4)]


def test_load_map_requires_gl_nodes():
    map_def = MapDef(_store(with_gl=False))
    with pytest.raises(ValueError):
        load_map(map_def, MeshBuilder(_textures()))


def test_load_map_records_whole_subsector_range():
    map_def = MapDef(_store())
    builder = MeshBuilder(_textures())
    load_map(map_def, builder)
    first, count = builder.sub_sector_offsets[0]
    assert first == 0
    assert count == len(builder.indices)
    assert count % 3 == 0
    assert max(builder.indices) < len(builder.vertices)


def test_walls_and_flats_are_emitted():
    map_def = MapDef(_store())
    builder = MeshBuilder(_textures())
    load_map(map_def, builder)
    # four wall quads and three fan triangles each for floor and ceiling
    assert len(builder.indices) == 4 * 6 + 3 * 2 * 3
    assert len(builder.texture_units) == 2


def test_wall_texture_coordinates_follow_segment_length():
    map_def = MapDef(_store())
    builder = MeshBuilder(_textures())
    load_map(map_def, builder)
    first, second = builder.vertices[0], builder.vertices[1]
    assert second.tx - first.tx == pytest.approx(128 / 64)
    assert first.z == 0.0
    assert builder.vertices[2].z == 128.0


def test_axis_aligned_walls_are_shaded():
    map_def = MapDef(_store())
    builder = MeshBuilder(_textures())
    load_map(map_def, builder)
    wall_lights = {round(v.l, 6) for v in builder.vertices[:16]}
    assert wall_lights == {round(1.1, 6), round(0.9, 6)}
    flat_lights = {v.l for v in builder.vertices[16:]}
    assert flat_lights == {1.0}


def test_floor_texture_coordinates_in_map_space():
    map_def = MapDef(_store())
    builder = MeshBuilder(_textures())
    load_map(map_def, builder)
    for vertex in builder.vertices[16:]:
        assert vertex.tx * 64 == pytest.approx(vertex.x)
        assert vertex.ty * 64 == pytest.approx(vertex.y)


def test_sky_ceiling_is_not_meshed():
    map_def = MapDef(_store(ceiling="F_SKY1"))
    builder = MeshBuilder(_textures())
    load_map(map_def, builder)
    assert all(v.z == 0.0 for v in builder.vertices[16:])
    assert len(builder.texture_units) == 2
    assert len(builder.texture_units[1].textures) == 1


def test_draw_ranges_use_recorded_offsets():
    map_def = MapDef(_store())
    builder = MeshBuilder(_textures())
    load_map(map_def, builder)
    ranges = draw_ranges(map_def, builder, Thing(10.0, 10.0))
    assert ranges == [builder.sub_sector_offsets[0]] * 2


def test_draw_ranges_without_mesh_raises():
    map_def = MapDef(_store())
    with pytest.raises(KeyError):
        draw_ranges(map_def, MeshBuilder(_textures()), Thing(10.0, 10.0))


def test_view_matrix_puts_player_at_origin():
    player = Thing(100.0, -50.0, 41.0, 0.7)
    m = view_matrix(player)
    result = _apply(m, [player.x, player.y, player.z, 1.0])
    assert result == pytest.approx([0.0, 0.0, 0.0, 1.0], abs=1e-9)


def test_view_matrix_looks_down_negative_z():
    player = Thing(0.0, 0.0, 0.0, 1.2)
    m = view_matrix(player)
    ahead = _apply(m, [math.cos(1.2), math.sin(1.2), 0.0, 1.0])
    assert ahead[0] == pytest.approx(0.0, abs=1e-12)
    assert ahead[1] == pytest.approx(0.0, abs=1e-12)
    assert ahead[2] < 0
    up = _apply(m, [0.0, 0.0, 1.0, 1.0])
    assert up[1] > 0
    assert up[2] == pytest.approx(0.0, abs=1e-12)


def test_projection_maps_near_and_far_planes():
    m = projection_matrix(320, 200)
    near = _apply(m, [0.0, 0.0, -0.01, 1.0])
    far = _apply(m, [0.0, 0.0, -100.0, 1.0])
    assert near[2] / near[3] == pytest.approx(-1.0)
    assert far[2] / far[3] == pytest.approx(1.0)
    assert m[11] == -1.0


def test_projection_aspect_ratio():
    m = projection_matrix(320, 200)
    assert m[0] * (1.27 * 320 / 200) == pytest.approx(m[5])


def test_projection_rejects_empty_viewport():
    with pytest.raises(ValueError):
        projection_matrix(320, 0)