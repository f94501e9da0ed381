# doomview

doomview is a pure-Python library that reads classic Doom-format level data and gets it ready for drawing. It has no dependencies outside the standard library.

## Modules

- `doomview.helpers` provides helpers for lump data:
  - `make_string` decodes 8-byte, NUL-padded names in upper case.
  - `wrap_int` and `wrap_float` wrap a value into a range.
  - `load_records` and `load_records_from_file` unpack fixed-size records.
- `doomview.mathcache` provides `MathCache.instance()`. This is a shared set of precalculated tables for `sin`, `cos`, `tan` and `arctan`, plus a fast `arctan2`.
- `doomview.mapstore` holds the binary record types and the `MapStore` class:
  - The record types are `VertexRecord`, `LineDefRecord`, `SideDefRecord`, `SectorRecord`, `SubSectorRecord`, `NodeRecord`, `SegRecord` and `ThingRecord`, plus the glBSP `GLVertexRecord` and `GLSegRecord`.
  - `MapStore.load_lumps(mapping)` loads the lumps from a mapping of names to bytes.
  - `MapStore.load_folder(path)` loads them from a folder of `.lmp` files.
  - `MapStore.load_gl(mapping)` loads glBSP V2 nodes. Any other format raises `MapFormatError`.
  - `MapStore.starting_position()` returns the player one start as `(x, y, angle)`. It raises `LookupError` when the map has none.
- `doomview.mapdef` builds a usable map from a store with `MapDef(store, thing_types)` or `MapDef.from_folder(...)`:
  - Building the map opens doors.
  - It creates `Sector`, `Segment`, `SubSector` and `Thing` objects.
  - `subsectors_to_draw(pov)` and `segments_to_draw(pov)` walk the BSP tree and return results in front-to-back order.
  - `sector_at(pov)` finds the sector under a point.
  - `is_in_front_of(pov, line)` tells which side of a line a point is on.
- `doomview.projection` projects map points onto the screen as seen from a viewer:
  - Module functions: `distance`, `normalize_angle`, `angle_dist` and `normalize_view_angle_span`.
  - `Projection` gives view angles and screen columns and rows (`view_x`, `view_angle`, `view_y`).
  - It also gives distances and offsets (`normal_vector`, `normal_offset`, `distance_at`, `offset`, `plane_distance`), plus `texture_scale` and `lightness`.
- `doomview.frame` keeps the occlusion state for one frame:
  - `Frame.clip_horizontal_segment` returns the visible parts of a span and records solid spans.
  - `Frame.clip_vertical_segment` clips a column against the floor and ceiling tables and gathers floor and ceiling `Plane`s.
  - Support types are `Span`, `Clip`, `PainterContext`, `Sprite`, `SpriteThing` and `SpriteWall`.
- `doomview.framebuffer` draws into memory:
  - `FrameBuffer` is the abstract drawing surface.
  - `FrameBuffer32` draws into a sequence of 32-bit ARGB integers through a palette. Columns are mirrored horizontally.
  - It draws pixels, solid lines and texel runs, with light levels from `gamma`.
- `doomview.gamestate` handles play on a loaded map with `GameState`:
  - `new_game` loads the map and places the player at its start.
  - `move`, `tick` and `clip_player` move the player and set eye height above the floor.
- `doomview.mesh` lays out geometry and textures for a hardware renderer:
  - `MeshBuilder` collects wall quads and floor and ceiling triangles as `VertexInfo` plus indices.
  - It packs textures into `TextureUnit`s of equal size.
  - `texture_rgb` expands a palette texture to RGB bytes.
- `doomview.glscene` builds that mesh for a whole map:
  - `load_map` needs glBSP data, which you load with `MapStore.load_gl`.
  - `draw_ranges(map_def, builder, pov)` returns index ranges in front-to-back order.
  - `view_matrix(player)` and `projection_matrix(width, height)` return column-major 4×4 matrices.

## Example

```python
from doomview.mapstore import MapStore
from doomview.gamestate import GameState

store = MapStore()
store.load_lumps(lumps)  # dict of lump name -> bytes: "VERTEXES", "LINEDEFS", ...

state = GameState()
state.new_game(store, thing_types={})
state.tick(1, 0, 0.1)  # move forward for a tenth of a second
print(state.player.x, state.player.y, state.player.z)
```

Drawing into a frame buffer:

```python
from doomview.framebuffer import FrameBuffer32

palette = [(i, i, i) for i in range(256)]
fb = FrameBuffer32(320, 200, palette)
fb.attach([0] * (320 * 200))
fb.vertical_line(10, 0, 50, 1, 1.0)
print(hex(fb.pixel(10, 20)))
```

## What it does not do

doomview covers only data preparation. It provides no command, no window, no input handling and no game loop. It does not read WAD files: you must supply the lumps yourself as a mapping of bytes or as `.lmp` files. It does not render a textured 3D view or a top-down map view into a frame buffer. It does not talk to any graphics API. `doomview.mesh` and `doomview.glscene` produce vertex data, index ranges and matrices, and it is up to you to hand them to a graphics library.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```