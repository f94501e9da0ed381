"""Frame buffers that the renderers draw into."""

from __future__ import annotations

from abc import ABC, abstractmethod
from array import array
from typing import Callable, MutableSequence, Optional, Sequence

Palette = Sequence[tuple[int, int, int]]
StepCallback = Optional[Callable[[], None]]

# Fixed ARGB colours used for untextured drawing.
COLORS = (0x00FF000, 0x0000FF00, 0x000000FF, 0x00FF00FF, 0x0000FFFF, 0x003F7F0F)
TRANSPARENT_TEXEL = 247
_ALPHA_MASK = 0xFF000000


def gamma(lightness: float) -> int:
    """Map a lightness in 0..1 to a light level in 38..255."""
    if lightness >= 1:
        return 255
    if lightness <= 0:
        return 38
    return int(255.0 * (0.2 + lightness * 0.8))


def _scale(value: int, level: int) -> int:
    return value * level // 256


def _lit_rgb(r: int, g: int, b: int, level: int) -> int:
    return (_scale(r, level) << 16) | (_scale(g, level) << 8) | _scale(b, level)


class FrameBuffer(ABC):
    """A drawing surface of fixed size using a colour palette."""

    def __init__(self, width: int, height: int, palette: Palette) -> None:
        self.width = width
        self.height = height
        self.palette = palette
        self.step_callback: StepCallback = None

    @abstractmethod
    def attach(self, pixels: MutableSequence[int], step_callback: StepCallback = None) -> None:
        """Attach the pixel storage to draw into."""

    @abstractmethod
    def clear(self) -> None:
        """Clear the whole surface."""

    @abstractmethod
    def set_pixel(self, x: int, y: int, color_index: int, lightness: float) -> None:
        """Draw one palette colour at a screen position."""

    @abstractmethod
    def vertical_line(self, x: int, sy: int, ey: int, color_index: int, lightness: float) -> None:
        """Draw a solid vertical line in a fixed colour."""

    @abstractmethod
    def vertical_texels(self, x: int, sy: int, texels: Sequence[int], lightness: float) -> None:
        """Draw a column of palette texels downwards from ``sy``."""

    @abstractmethod
    def vertical_texels_lit(
        self, x: int, sy: int, texels: Sequence[int], lightnesses: Sequence[float]
    ) -> None:
        """Draw a column of texels, each with its own lightness."""

    @abstractmethod
    def horizontal_texels(self, sx: int, y: int, texels: Sequence[int], lightness: float) -> None:
        """Draw a row of palette texels rightwards from ``sx``."""

    @abstractmethod
    def horizontal_line(self, sx: int, ex: int, y: int, color_index: int, lightness: float) -> None:
        """Draw a solid horizontal line in a fixed colour."""


class FrameBuffer32(FrameBuffer):
    """A frame buffer over 32-bit ARGB pixels, mirrored horizontally."""

    def __init__(self, width: int, height: int, palette: Palette) -> None:
        super().__init__(width, height, palette)
        self._pixels: Optional[MutableSequence[int]] = None

    def attach(self, pixels: MutableSequence[int], step_callback: StepCallback = None) -> None:
        if len(pixels) < self.width * self.height:
            raise ValueError("pixel buffer is smaller than the frame")
        self._pixels = pixels
        self.step_callback = step_callback

    def _step(self) -> None:
        if self.step_callback is not None:
            self.step_callback()

    def _offset(self, x: int, y: int) -> int:
        return self.width * y + (self.width - x - 1)

    def _paint(self, pixels: MutableSequence[int], offset: int, texel: int, level: int) -> None:
        if 0 <= offset < len(pixels):
            r, g, b = self.palette[texel]
            pixels[offset] = (pixels[offset] & _ALPHA_MASK) | _lit_rgb(r, g, b, level)

    @staticmethod
    def _solid(color: int, level: int) -> int:
        r, g, b = (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF
        return (color & _ALPHA_MASK) | _lit_rgb(r, g, b, level)

    def clear(self) -> None:
        if self._pixels is None:
            raise RuntimeError("no pixel buffer attached")
        count = len(self._pixels)
        if isinstance(self._pixels, array):
            self._pixels[:] = array(self._pixels.typecode, [0]) * count
        else:
            self._pixels[:] = [0] * count
        self._step()

    def set_pixel(self, x: int, y: int, color_index: int, lightness: float) -> None:
        pixels = self._pixels
        if pixels is not None and 0 <= x < self.width and 0 <= y < self.height:
            self._paint(pixels, self._offset(x, y), color_index, gamma(lightness))

    def vertical_line(self, x: int, sy: int, ey: int, color_index: int, lightness: float) -> None:
        pixels = self._pixels
        if pixels is None or not 0 <= x < self.width:
            return
        bottom = self.height - 1
        sy = max(0, min(sy, bottom))
        ey = max(0, min(ey, bottom))
        if sy > ey:
            sy, ey = ey, sy
        value = self._solid(COLORS[color_index % len(COLORS)], gamma(lightness))
        for y in range(sy, ey + 1):
            pixels[self._offset(x, y)] = value
        self._step()

    def vertical_texels(self, x: int, sy: int, texels: Sequence[int], lightness: float) -> None:
        pixels = self._pixels
        if pixels is None or not 0 <= x < self.width or not texels or sy >= self.height:
            return
        level = gamma(lightness)
        y = sy
        for texel in texels:
            if texel != TRANSPARENT_TEXEL and y >= 0:
                self._paint(pixels, self._offset(x, y), texel, level)
            y += 1
            if y == self.height:
                break
        self._step()

    def vertical_texels_lit(
        self, x: int, sy: int, texels: Sequence[int], lightnesses: Sequence[float]
    ) -> None:
        pixels = self._pixels
        if pixels is None or not 0 <= x < self.width or not texels:
            return
        offset = self._offset(x, sy)
        for texel, lightness in zip(texels, lightnesses):
            self._paint(pixels, offset, texel, gamma(lightness))
            offset += self.width
        self._step()

    def horizontal_texels(self, sx: int, y: int, texels: Sequence[int], lightness: float) -> None:
        pixels = self._pixels
        if pixels is None or not 0 <= y < self.height or not texels:
            return
        level = gamma(lightness)
        offset = self._offset(sx, y)
        for texel in texels:
            self._paint(pixels, offset, texel, level)
            offset -= 1
        self._step()

    def horizontal_line(self, sx: int, ex: int, y: int, color_index: int, lightness: float) -> None:
        pixels = self._pixels
        if pixels is None or not 0 <= y < self.height or sx < 0 or ex >= self.width:
            return
        value = self._solid(COLORS[color_index], gamma(lightness))
        for x in range(sx, ex + 1):
            pixels[self._offset(x, y)] = value
        self._step()

    def pixel(self, x: int, y: int) -> int:
        """Return the ARGB value shown at a screen position."""
        if self._pixels is None:
            raise RuntimeError("no pixel buffer attached")
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError("pixel position outside the frame")
        return self._pixels[self._offset(x, y)]