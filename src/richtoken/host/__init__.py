"""Host editing surface contract and the in-memory reference surface."""

from richtoken.host.base import EditingSurface, EmbedFormat, InlineFormat, SurfaceError
from richtoken.host.memory import MemorySurface

__all__ = [
    "EditingSurface",
    "EmbedFormat",
    "InlineFormat",
    "SurfaceError",
    "MemorySurface",
]
