"""Small utilities for decoding map lump data."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, TypeVar

_R = TypeVar("_R")


def make_string(data: bytes) -> str:
    """Decode an 8-byte, NUL-padded lump or texture name as upper case."""
    raw = bytes(data[:8]).split(b"\0", 1)[0]
    return raw.upper().decode("latin-1")


def wrap_int(value: int, maximum: int) -> int:
    """Wrap an integer into the range ``0 <= value < maximum``."""
    if maximum <= 0:
        raise ValueError("maximum must be positive")
    return value % maximum


def wrap_float(value: float, maximum: float) -> float:
    """Wrap a float into ``0 <= value <= maximum``; non-finite values pass through."""
    if not math.isfinite(value):
        return value
    if maximum <= 0:
        raise ValueError("maximum must be positive")
    if value < 0:
        value += math.ceil(-value / maximum) * maximum
    elif value > maximum:
        value -= (math.ceil(value / maximum) - 1) * maximum
    while value < 0:
        value += maximum
    while value > maximum:
        value -= maximum
    return value


def load_records(data: bytes, record_type: type[_R], skip: int = 0) -> list[_R]:
    """Unpack consecutive fixed-size records from a buffer.

    ``record_type`` must expose a ``STRUCT`` attribute (a ``struct.Struct``)
    and accept the unpacked fields positionally. A trailing partial record
    is ignored.
    """
    layout: Any = getattr(record_type, "STRUCT")
    view = memoryview(bytes(data))[skip:]
    usable = len(view) - len(view) % layout.size
    return [record_type(*fields) for fields in layout.iter_unpack(view[:usable])]


def load_records_from_file(path: str | Path, record_type: type[_R]) -> list[_R]:
    """Read a whole file and unpack it into records."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise OSError(f"Unable to open file {path}") from exc
    return load_records(data, record_type)