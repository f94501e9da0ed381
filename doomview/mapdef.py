"""Map geometry built from raw lump records, with BSP traversal."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Mapping, Optional, Protocol

from .helpers import make_string
from .mapstore import MapStore, NodeRecord, SectorRecord, SideDefRecord
from .mathcache import PI

NO_SIDE = 32000
NO_LINE_DEF = 0xFFFF
SUBSECTOR_FLAG = 0x8000
GL_VERTEX_FLAG = 0x8000
UPPER_UNPEGGED = 0x0008
LOWER_UNPEGGED = 0x0010
DOOR_LINE_TYPES = frozenset({1, 31})
DOOR_OPEN_HEIGHT = 72


class Point(Protocol):
    """Anything with map coordinates."""

    x: float
    y: float


@dataclass(frozen=True)
class Vertex:
    """A point on the map."""

    x: float
    y: float


@dataclass
class Line:
    """A line between two map vertices."""

    s: Vertex
    e: Vertex


@dataclass(frozen=True)
class Vector:
    """A direction (angle) and a length."""

    a: float
    d: float


@dataclass
class Thing:
    """An object placed on the map, including the player."""

    x: float
    y: float
    z: float = 0.0
    a: float = 0.0
    sector_id: int = -1
    thing_id: int = -1
    type: int = 0
    texture_name: str = ""


@dataclass(frozen=True)
class Sector:
    """A map area with its floor, ceiling and lighting."""

    sector_id: int
    floor_height: float
    ceiling_height: float
    floor_texture: str
    ceiling_texture: str
    light_level: float
    special: int = 0
    tag: int = 0

    @classmethod
    def from_record(cls, sector_id: int, record: SectorRecord) -> "Sector":
        return cls(
            sector_id,
            float(record.floor_height),
            float(record.ceiling_height),
            make_string(record.floor_texture),
            make_string(record.ceiling_texture),
            record.light_level / 255.0,
            record.sector_special,
            record.sector_tag,
        )

    @property
    def is_sky(self) -> bool:
        return self.ceiling_texture.startswith("F_SKY")


@dataclass(frozen=True)
class Side:
    """One side of a wall; a side without a sector is absent."""

    sector: Optional[Sector] = None
    lower_texture: str = ""
    middle_texture: str = ""
    upper_texture: str = ""
    x_offset: int = 0
    y_offset: int = 0

    @property
    def sideless(self) -> bool:
        return self.sector is None


@dataclass(eq=False)
class Segment(Line):
    """A piece of a wall as split by the BSP builder."""

    is_solid: bool
    front_side: Side
    back_side: Side
    x_offset: int
    lower_unpegged: bool
    upper_unpegged: bool

    @property
    def is_vertical(self) -> bool:
        return self.s.x == self.e.x

    @property
    def is_horizontal(self) -> bool:
        return self.s.y == self.e.y


@dataclass(eq=False)
class SubSector:
    """A convex BSP leaf made of segments."""

    sub_sector_id: int
    sector_id: int
    segments: list[Segment] = field(default_factory=list)


def is_in_front_of(pov: Point, line: Line) -> bool:
    """Tell whether a point lies on the front (right) side of a line."""
    delta_x = line.e.x - line.s.x
    delta_y = line.e.y - line.s.y
    if delta_x == 0:
        if pov.x <= line.s.x:
            return delta_y < 0
        return delta_y > 0
    if delta_y == 0:
        if pov.y <= line.s.y:
            return delta_x > 0
        return delta_x < 0
    dx = pov.x - line.s.x
    dy = pov.y - line.s.y
    return dy * delta_x < delta_y * dx


def _is_in_front_of_node(pov: Point, node: NodeRecord) -> bool:
    start = Vertex(node.partition_x, node.partition_y)
    end = Vertex(node.partition_x + node.delta_x, node.partition_y + node.delta_y)
    return is_in_front_of(pov, Line(start, end))


class MapDef:
    """A playable map: sectors, segments, subsectors and things."""

    def __init__(self, store: MapStore, thing_types: Optional[Mapping[int, str]] = None) -> None:
        self._store = dataclasses.replace(store, sectors=list(store.sectors))
        self._thing_types = dict(thing_types or {})
        self.wireframe: list[Line] = []
        self.sectors: list[Sector] = []
        self.things: list[list[Thing]] = []
        self.segments: list[Segment] = []
        self.sub_sectors: list[SubSector] = []

        self._open_doors()
        self._build_wireframe()
        self._build_sectors()
        self._build_segments()
        self._build_sub_sectors()
        self._build_things()

    @classmethod
    def from_folder(
        cls, folder: str | Path, thing_types: Optional[Mapping[int, str]] = None
    ) -> "MapDef":
        """Build a map from a folder of ``.lmp`` lump files."""
        store = MapStore()
        store.load_folder(folder)
        return cls(store, thing_types)

    def _open_doors(self) -> None:
        store = self._store
        door_sectors = {
            store.side_defs[line_def.left_side_def].sector
            for line_def in store.line_defs
            if line_def.line_type in DOOR_LINE_TYPES and line_def.left_side_def < NO_SIDE
        }
        for sector_no in door_sectors:
            record = store.sectors[sector_no]
            store.sectors[sector_no] = dataclasses.replace(
                record, ceiling_height=record.floor_height + DOOR_OPEN_HEIGHT
            )

    def _build_wireframe(self) -> None:
        vertexes = self._store.vertexes
        for line_def in self._store.line_defs:
            sv = vertexes[line_def.start_vertex]
            ev = vertexes[line_def.end_vertex]
            self.wireframe.append(Line(Vertex(sv.x, sv.y), Vertex(ev.x, ev.y)))

    def _build_sectors(self) -> None:
        self.sectors = [Sector.from_record(i, record) for i, record in enumerate(self._store.sectors)]

    def _lookup_vertex(self, vertex_no: int) -> Vertex:
        if vertex_no & GL_VERTEX_FLAG:
            gl_vertex = self._store.gl_vertexes[vertex_no ^ GL_VERTEX_FLAG]
            return Vertex(gl_vertex.x, gl_vertex.y)
        vertex = self._store.vertexes[vertex_no]
        return Vertex(vertex.x, vertex.y)

    def _make_side(self, side_def: SideDefRecord, sector: Optional[Sector], x_offset: int, y_offset: int) -> Side:
        return Side(
            sector,
            make_string(side_def.lower_texture),
            make_string(side_def.middle_texture),
            make_string(side_def.upper_texture),
            x_offset,
            y_offset,
        )

    def _process_segment(self, start: Vertex, end: Vertex, line_def_no: int, direction: int, offset: int) -> None:
        if line_def_no == NO_LINE_DEF:
            self.segments.append(Segment(start, end, False, Side(), Side(), offset, False, False))
            return

        store = self._store
        line_def = store.line_defs[line_def_no]
        is_solid = line_def.left_side_def > NO_SIDE or line_def.right_side_def > NO_SIDE
        front_def = back_def = SideDefRecord()
        front_sector: Optional[Sector] = None
        back_sector: Optional[Sector] = None

        if direction == 1 and line_def.left_side_def < NO_SIDE:
            front_no, back_no = line_def.left_side_def, line_def.right_side_def
        elif direction == 0 and line_def.right_side_def < NO_SIDE:
            front_no, back_no = line_def.right_side_def, line_def.left_side_def
        else:
            front_no = back_no = None

        if front_no is not None:
            front_def = store.side_defs[front_no]
            front_sector = self.sectors[front_def.sector]
            if back_no is not None and back_no < NO_SIDE:
                back_def = store.side_defs[back_no]
                back_sector = self.sectors[back_def.sector]

        # both sides carry the front side's texture offsets
        front = self._make_side(front_def, front_sector, front_def.x_offset, front_def.y_offset)
        back = self._make_side(back_def, back_sector, front_def.x_offset, front_def.y_offset)
        self.segments.append(
            Segment(
                start,
                end,
                is_solid,
                front,
                back,
                offset,
                bool(line_def.flags & LOWER_UNPEGGED),
                bool(line_def.flags & UPPER_UNPEGGED),
            )
        )

    def _build_segments(self) -> None:
        store = self._store
        if store.gl_segments:
            for gl_seg in store.gl_segments:
                self._process_segment(
                    self._lookup_vertex(gl_seg.start_vertex),
                    self._lookup_vertex(gl_seg.end_vertex),
                    gl_seg.line_def,
                    gl_seg.side,
                    0,
                )
            return
        vertex_count = len(store.vertexes)
        for seg in store.segments:
            if seg.start_vertex < vertex_count and seg.end_vertex < vertex_count:
                sv = store.vertexes[seg.start_vertex]
                ev = store.vertexes[seg.end_vertex]
                self._process_segment(Vertex(sv.x, sv.y), Vertex(ev.x, ev.y), seg.line_def, seg.direction, seg.offset)

    def _build_sub_sectors(self) -> None:
        for sub_sector_id, record in enumerate(self._store.sub_sectors):
            segments = self.segments[record.first_segment : record.first_segment + record.num_segments]
            sector_id = -1
            for segment in segments:
                if segment.front_side.sector is not None:
                    sector_id = segment.front_side.sector.sector_id
            self.sub_sectors.append(SubSector(sub_sector_id, sector_id, segments))

    def _build_things(self) -> None:
        self.things = [[] for _ in self.sectors]
        next_id = 0
        for record in self._store.things:
            thing = Thing(float(record.x), float(record.y), 0.0, record.a / 180.0 * PI)
            sector = self.sector_at(thing)
            if sector is None:
                continue
            thing.sector_id = sector.sector_id
            thing.thing_id = next_id
            next_id += 1
            thing.type = record.type
            thing.texture_name = self._thing_types.get(record.type, "")
            thing.z = float(self._store.sectors[thing.sector_id].floor_height)
            self.things[thing.sector_id].append(thing)

    def has_gl(self) -> bool:
        """Tell whether glBSP segments were loaded."""
        return bool(self._store.gl_segments)

    def starting_position(self) -> Thing:
        """Return the player one start as a thing."""
        x, y, a = self._store.starting_position()
        return Thing(float(x), float(y), 0.0, a / 180.0 * PI)

    def _root(self) -> NodeRecord:
        if not self._store.nodes:
            raise LookupError("map has no BSP nodes")
        return self._store.nodes[-1]

    def sector_at(self, pov: Point) -> Optional[Sector]:
        """Find the sector containing a point, or None."""
        node = self._root()
        while True:
            child = node.right_child if _is_in_front_of_node(pov, node) else node.left_child
            if not child & SUBSECTOR_FLAG:
                node = self._store.nodes[child]
                continue
            sub_sector = self.sub_sectors[child & 0x7FFF]
            for segment in sub_sector.segments:
                in_front = is_in_front_of(pov, segment)
                if (not segment.front_side.sideless and not in_front) or (
                    not segment.back_side.sideless and in_front
                ):
                    if sub_sector.sector_id < 0:
                        return None
                    return self.sectors[sub_sector.sector_id]
            return None

    def _walk(self, pov: Point, node: NodeRecord) -> Iterator[SubSector]:
        if _is_in_front_of_node(pov, node):
            children = (node.right_child, node.left_child)
        else:
            children = (node.left_child, node.right_child)
        for child in children:
            if child & SUBSECTOR_FLAG:
                yield self.sub_sectors[child & 0x7FFF]
            else:
                yield from self._walk(pov, self._store.nodes[child])

    def subsectors_to_draw(self, pov: Point) -> list[SubSector]:
        """Subsectors in front-to-back order from the point of view."""
        return list(self._walk(pov, self._root()))

    def segments_to_draw(self, pov: Point) -> list[Segment]:
        """Segments in front-to-back order from the point of view."""
        return [segment for sub_sector in self.subsectors_to_draw(pov) for segment in sub_sector.segments]