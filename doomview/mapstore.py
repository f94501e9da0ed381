"""Binary map lump records and the store that holds them."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar, Mapping

from .helpers import load_records, load_records_from_file


class MapFormatError(ValueError):
    """Raised when map data is in an unsupported format."""


@dataclass(frozen=True)
class SegRecord:
    STRUCT: ClassVar[struct.Struct] = struct.Struct("<HHhHhh")
    start_vertex: int
    end_vertex: int
    angle: int
    line_def: int
    direction: int
    offset: int


@dataclass(frozen=True)
class GLSegRecord:
    STRUCT: ClassVar[struct.Struct] = struct.Struct("<HHHHH")
    start_vertex: int
    end_vertex: int
    line_def: int
    side: int
    partner_seg: int


@dataclass(frozen=True)
class SubSectorRecord:
    STRUCT: ClassVar[struct.Struct] = struct.Struct("<HH")
    num_segments: int
    first_segment: int


@dataclass(frozen=True)
class VertexRecord:
    STRUCT: ClassVar[struct.Struct] = struct.Struct("<hh")
    x: int
    y: int


@dataclass(frozen=True)
class GLVertexRecord:
    STRUCT: ClassVar[struct.Struct] = struct.Struct("<hhhh")
    xf: int
    x: int
    yf: int
    y: int


@dataclass(frozen=True)
class LineDefRecord:
    STRUCT: ClassVar[struct.Struct] = struct.Struct("<7H")
    start_vertex: int
    end_vertex: int
    flags: int
    line_type: int
    sector_tag: int
    right_side_def: int
    left_side_def: int


@dataclass(frozen=True)
class SideDefRecord:
    STRUCT: ClassVar[struct.Struct] = struct.Struct("<hh8s8s8sH")
    x_offset: int = 0
    y_offset: int = 0
    upper_texture: bytes = bytes(8)
    lower_texture: bytes = bytes(8)
    middle_texture: bytes = bytes(8)
    sector: int = 0


@dataclass(frozen=True)
class SectorRecord:
    STRUCT: ClassVar[struct.Struct] = struct.Struct("<hh8s8shHH")
    floor_height: int
    ceiling_height: int
    floor_texture: bytes
    ceiling_texture: bytes
    light_level: int
    sector_special: int
    sector_tag: int


@dataclass(frozen=True)
class NodeRecord:
    STRUCT: ClassVar[struct.Struct] = struct.Struct("<12h2H")
    partition_x: int
    partition_y: int
    delta_x: int
    delta_y: int
    right_box_top: int
    right_box_bottom: int
    right_box_left: int
    right_box_right: int
    left_box_top: int
    left_box_bottom: int
    left_box_left: int
    left_box_right: int
    right_child: int
    left_child: int


@dataclass(frozen=True)
class ThingRecord:
    STRUCT: ClassVar[struct.Struct] = struct.Struct("<hhHHH")
    x: int
    y: int
    a: int
    type: int
    flags: int


# attribute, lump name, file name, record type
_MAP_LUMPS = (
    ("vertexes", "VERTEXES", "vertexes.lmp", VertexRecord),
    ("line_defs", "LINEDEFS", "linedefs.lmp", LineDefRecord),
    ("side_defs", "SIDEDEFS", "sidedefs.lmp", SideDefRecord),
    ("sectors", "SECTORS", "sectors.lmp", SectorRecord),
    ("sub_sectors", "SSECTORS", "ssectors.lmp", SubSectorRecord),
    ("nodes", "NODES", "nodes.lmp", NodeRecord),
    ("segments", "SEGS", "segs.lmp", SegRecord),
    ("things", "THINGS", "things.lmp", ThingRecord),
)

_GL_MAGIC = b"gNd2"


@dataclass
class MapStore:
    """Raw map records as read from a WAD or a folder of lump files."""

    segments: list[SegRecord] = field(default_factory=list)
    sub_sectors: list[SubSectorRecord] = field(default_factory=list)
    vertexes: list[VertexRecord] = field(default_factory=list)
    line_defs: list[LineDefRecord] = field(default_factory=list)
    side_defs: list[SideDefRecord] = field(default_factory=list)
    sectors: list[SectorRecord] = field(default_factory=list)
    nodes: list[NodeRecord] = field(default_factory=list)
    things: list[ThingRecord] = field(default_factory=list)
    gl_vertexes: list[GLVertexRecord] = field(default_factory=list)
    gl_segments: list[GLSegRecord] = field(default_factory=list)

    def load_folder(self, folder: str | Path) -> None:
        """Load every map lump from ``<folder>/<name>.lmp`` files."""
        base = Path(folder)
        for attribute, _, file_name, record_type in _MAP_LUMPS:
            setattr(self, attribute, load_records_from_file(base / file_name, record_type))

    def load_lumps(self, lumps: Mapping[str, bytes]) -> None:
        """Load every map lump from a name-to-bytes mapping."""
        for attribute, lump_name, _, record_type in _MAP_LUMPS:
            setattr(self, attribute, load_records(lumps[lump_name], record_type))

    def load_gl(self, gl_lumps: Mapping[str, bytes]) -> None:
        """Load glBSP V2 nodes, replacing the regular subsectors and nodes."""
        gl_vertexes = gl_lumps["GL_VERT"]
        if bytes(gl_vertexes[:4]) != _GL_MAGIC:
            raise MapFormatError("Only V2 glBSP format is supported.")
        self.gl_vertexes = load_records(gl_vertexes, GLVertexRecord, 4)
        self.gl_segments = load_records(gl_lumps["GL_SEGS"], GLSegRecord)
        self.sub_sectors = load_records(gl_lumps["GL_SSECT"], SubSectorRecord)
        self.nodes = load_records(gl_lumps["GL_NODES"], NodeRecord)

    def starting_position(self) -> tuple[int, int, int]:
        """Return ``(x, y, angle)`` of the player one start."""
        for thing in self.things:
            if thing.type == 1:
                return thing.x, thing.y, thing.a
        raise LookupError("No player starting location on map")