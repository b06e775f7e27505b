"""Trail rendering and drawing hosts."""

from .trail import TrailRenderer, TrailStyle

__all__ = ["TrailRenderer", "TrailStyle"]
