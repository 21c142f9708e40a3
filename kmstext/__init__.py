"""Console text rendering with pluggable backends, an in-memory 2D framebuffer, logging and container helpers."""

__version__ = "0.1.0"
__all__ = ["log", "dlist", "hook", "ring", "text", "drm2d", "bblit", "bbulk"]