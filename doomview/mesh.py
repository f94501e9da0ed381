"""Triangle mesh and texture atlas layout for hardware rendering of a map."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

from .mapdef import Vertex

MAX_TEXTURE_UNITS = 16
NO_TEXTURE = "-"


class Texture(Protocol):
    """A palette-indexed texture image."""

    name: str
    width: int
    height: int
    pixels: Sequence[int]


@dataclass(frozen=True)
class VertexInfo:
    """One mesh vertex: position, texture coordinates, texture unit and lightness.

    ``tz`` is the layer of the texture within its unit and ``tn`` the unit.
    """

    x: float
    y: float
    z: float
    tx: float
    ty: float
    tz: float
    tn: float
    l: float


@dataclass
class TextureUnit:
    """A stack of equally sized textures bound together."""

    n: int
    w: int
    h: int
    textures: list[Texture] = field(default_factory=list)


def texture_rgb(texture: Texture, palette: Sequence[tuple[int, int, int]]) -> bytes:
    """Expand a palette-indexed texture into packed RGB bytes, row by row."""
    count = texture.width * texture.height
    pixels = texture.pixels
    if len(pixels) < count:
        raise ValueError("texture has fewer pixels than its size requires")
    out = bytearray()
    for index in pixels[:count]:
        out.extend(palette[index])
    return bytes(out)


class MeshBuilder:
    """Collects wall and flat triangles and assigns textures to units."""

    def __init__(self, textures: dict[str, Texture], max_texture_units: int = MAX_TEXTURE_UNITS) -> None:
        self._textures = textures
        self.max_texture_units = min(max_texture_units, MAX_TEXTURE_UNITS)
        self.vertices: list[VertexInfo] = []
        self.indices: list[int] = []
        self.texture_units: list[TextureUnit] = []
        self.sub_sector_offsets: dict[int, tuple[int, int]] = {}

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    def reset(self) -> None:
        """Drop all geometry and texture assignments."""
        self.vertices.clear()
        self.indices.clear()
        self.texture_units.clear()
        self.sub_sector_offsets.clear()

    def _add_vertex(
        self, x: float, y: float, z: float, tx: float, ty: float, tn: int, tz: int, lightness: float
    ) -> None:
        self.vertices.append(VertexInfo(x, y, z, tx, ty, float(tz), float(tn), lightness))

    def _link_triangle(self, a: int, b: int, c: int) -> None:
        self.indices.extend((a, b, c))

    def add_wall_segment(
        self,
        v0: Vertex,
        z0: float,
        v1: Vertex,
        z1: float,
        tx0: float,
        ty0: float,
        tx1: float,
        ty1: float,
        tn: int,
        ti: int,
        lightness: float,
    ) -> None:
        """Add a vertical quad from ``v0`` to ``v1`` between heights ``z0`` and ``z1``."""
        base = self.vertex_count
        self._add_vertex(v0.x, v0.y, z0, tx0, ty0, tn, ti, lightness)
        self._add_vertex(v1.x, v1.y, z0, tx1, ty0, tn, ti, lightness)
        self._add_vertex(v1.x, v1.y, z1, tx1, ty1, tn, ti, lightness)
        self._add_vertex(v0.x, v0.y, z1, tx0, ty1, tn, ti, lightness)
        self._link_triangle(base, base + 1, base + 2)
        self._link_triangle(base, base + 2, base + 3)

    def add_floor_ceiling(
        self,
        v0: Vertex,
        v1: Vertex,
        v2: Vertex,
        z: float,
        tw: float,
        th: float,
        tn: int,
        ti: int,
        lightness: float,
    ) -> None:
        """Add a horizontal triangle at height ``z``, textured in map space."""
        base = self.vertex_count
        for v in (v0, v1, v2):
            self._add_vertex(v.x, v.y, z, v.x / tw, v.y / th, tn, ti, lightness)
        self._link_triangle(base, base + 1, base + 2)

    def allocate_texture(self, name: str) -> tuple[Optional[Texture], int, int]:
        """Place a texture in a unit of its size.

        Returns ``(texture, unit, layer)``. The empty texture ``-`` gives
        ``(None, 0, 0)``; when every unit is taken the texture falls back to
        unit 0, layer 0.
        """
        if name == NO_TEXTURE:
            return None, 0, 0
        try:
            texture = self._textures[name]
        except KeyError:
            raise KeyError(f"unknown texture {name!r}") from None

        while True:
            for unit_no, unit in enumerate(self.texture_units):
                if unit.w == texture.width and unit.h == texture.height:
                    for layer, existing in enumerate(unit.textures):
                        if existing.name == name:
                            return texture, unit_no, layer
                    unit.textures.append(texture)
                    return texture, unit_no, len(unit.textures) - 1

            if len(self.texture_units) >= self.max_texture_units:
                return texture, 0, 0
            self.texture_units.append(
                TextureUnit(len(self.texture_units), texture.width, texture.height)
            )