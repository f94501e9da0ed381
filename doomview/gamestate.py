"""The state of a running game: the map and the player."""

from __future__ import annotations

import math
from typing import Mapping, Optional

from .mapdef import MapDef, Thing
from .mapstore import MapStore
from .projection import normalize_angle

EYE_HEIGHT = 45
TURN_SPEED = 16 * -0.15
MOVE_SPEED = 32 * 10.0


class GameState:
    """The loaded map and the player's position on it."""

    def __init__(self) -> None:
        self.map_def: Optional[MapDef] = None
        self.step = 0.0
        self.player = Thing(0.0, 0.0, 0.0, 0.0)

    def new_game(self, store: MapStore, thing_types: Optional[Mapping[int, str]] = None) -> None:
        """Start a game on a map, placing the player at its start."""
        self.map_def = MapDef(store, thing_types)
        self.player = self.map_def.starting_position()
        self.step = 0.0

    def move(self, m: int, r: int, step: float) -> None:
        """Move by ``m`` and turn by ``r`` (each -1, 0 or 1) for ``step`` seconds."""
        self.step += step
        player = self.player
        player.a += step * TURN_SPEED * r
        player.x += step * MOVE_SPEED * m * math.cos(player.a)
        player.y += step * MOVE_SPEED * m * math.sin(player.a)
        player.a = normalize_angle(player.a)

    def clip_player(self) -> None:
        """Put the player's eyes above the floor of the sector it stands in."""
        if self.map_def is None:
            raise RuntimeError("no game in progress")
        sector = self.map_def.sector_at(self.player)
        if sector is not None:
            self.player.z = sector.floor_height + EYE_HEIGHT

    def tick(self, move_direction: int, rotate_direction: int, seconds: float) -> None:
        """Advance the game by ``seconds``."""
        self.move(move_direction, rotate_direction, seconds)
        self.clip_player()