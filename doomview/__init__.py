"""Doom-format map loading, BSP traversal, projection, frame clipping, software frame buffers and mesh building."""

__version__ = "0.1.0"