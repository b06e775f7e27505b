"""Review of stored tracking sessions alongside video playback."""

from .playback import SessionPlayback, path_until, positions_near

__all__ = [
    "SessionPlayback",
    "path_until",
    "positions_near",
]
