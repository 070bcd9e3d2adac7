"""Property reflection: tagged property graphs, path resolution, writes and type synthesis."""

from .engine import PropertyEngine
from .errors import PartialSetError, PropertyError

__all__ = ["PartialSetError", "PropertyEngine", "PropertyError"]
