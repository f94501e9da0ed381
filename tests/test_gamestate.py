import math

import pytest

from doomview.gamestate import GameState
from doomview.mapstore import (
    LineDefRecord,
    MapStore,
    NodeRecord,
    SectorRecord,
    SegRecord,
    SideDefRecord,
    SubSectorRecord,
    ThingRecord,
    VertexRecord,
)


def _name(text):
    return text.encode().ljust(8, b"\0")


def _room_store(floor=0, ceiling=128):
    vertexes = [VertexRecord(0, 0), VertexRecord(0, 128), VertexRecord(128, 128), VertexRecord(128, 0)]
    loop = [(1, 0), (0, 3), (3, 2), (2, 1)]
    line_defs = [LineDefRecord(s, e, 1, 0, 0, 0, 0xFFFF) for s, e in loop]
    segs = [SegRecord(s, e, 0, i, 0, 0) for i, (s, e) in enumerate(loop)]
    side_defs = [SideDefRecord(0, 0, _name("-"), _name("-"), _name("STARTAN3"), 0)]
    sectors = [SectorRecord(floor, ceiling, _name("FLOOR4_8"), _name("CEIL3_5"), 160, 0, 0)]
    nodes = [NodeRecord(0, 0, 128, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0x8000, 0x8000)]
    return MapStore(
        segments=segs,
        sub_sectors=[SubSectorRecord(4, 0)],
        vertexes=vertexes,
        line_defs=line_defs,
        side_defs=side_defs,
        sectors=sectors,
        nodes=nodes,
        things=[ThingRecord(64, 64, 90, 1, 7)],
    )


@pytest.fixture
def state():
    game = GameState()
    game.new_game(_room_store())
    return game


def test_new_game_places_player_at_start(state):
    assert state.player.x == 64.0
    assert state.player.y == 64.0
    assert state.player.a == pytest.approx(math.pi / 2)
    assert state.step == 0.0
    assert state.map_def is not None


def test_fresh_state_has_no_map():
    game = GameState()
    assert game.map_def is None
    with pytest.raises(RuntimeError):
        game.clip_player()


def test_move_without_direction_only_counts_time(state):
    state.move(0, 0, 0.5)
    state.move(0, 0, 0.25)
    assert state.step == pytest.approx(0.75)
    assert (state.player.x, state.player.y) == (64.0, 64.0)


def test_move_forward_follows_facing(state):
    state.move(1, 0, 0.1)
    assert state.player.x == pytest.approx(64.0, abs=1e-9)
    assert state.player.y > 64.0
    moved = math.hypot(state.player.x - 64.0, state.player.y - 64.0)
    state.move(-1, 0, 0.1)
    assert state.player.x == pytest.approx(64.0, abs=1e-9)
    assert state.player.y == pytest.approx(64.0)
    assert moved > 0


def test_rotation_keeps_angle_normalized(state):
    for _ in range(20):
        state.move(0, 1, 1.0)
        assert -math.pi <= state.player.a <= math.pi
    for _ in range(20):
        state.move(0, -1, 1.0)
    assert state.player.a == pytest.approx(math.pi / 2)


def test_clip_player_uses_sector_floor():
    game = GameState()
    game.new_game(_room_store(floor=24))
    game.clip_player()
    assert game.player.z == 24 + 45


def test_tick_moves_and_clips(state):
    state.tick(1, 0, 0.05)
    assert state.player.y > 64.0
    assert state.player.z == 45
    assert state.step == pytest.approx(0.05)