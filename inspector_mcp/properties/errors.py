"""Error taxonomy for the property engine.

Every failure names the property path and the instance it happened on, so a
caller driving a batch of writes can tell which path to fix.
"""

from __future__ import annotations

from typing import Optional


class PropertyError(Exception):
    """Base class for every engine failure."""

    def __init__(self, message: str, *, path: Optional[str] = None, instance: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.instance = instance

    def with_context(self, *, path: Optional[str] = None, instance: Optional[str] = None) -> "PropertyError":
        """Fill in path/instance if the raiser did not know them."""
        if self.path is None:
            self.path = path
        if self.instance is None:
            self.instance = instance
        return self

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"(path '{self.path}')")
        if self.instance:
            parts.append(f"(instance {self.instance})")
        return " ".join(parts)


class NotFound(PropertyError):
    """No dump, key or asset could be found for the given id or path."""


class SchemaMissing(PropertyError):
    """Array extension attempted on an array with no element schema."""


class IndexOutOfBounds(PropertyError):
    """Array index past the extension point."""


class InvalidSegment(PropertyError):
    """Path segment does not fit the container it is applied to."""


class ReferenceTypeMismatch(PropertyError):
    """Reference points at an asset of an incompatible kind."""


class ImporterNotHandled(PropertyError):
    """An asset category capability declined the path."""


class ParseError(PropertyError):
    """An asset category capability could not read its storage shape."""


class CommitFailed(PropertyError):
    """The editor host rejected or could not receive a mutation."""


class CountMismatch(PropertyError):
    """Property paths and values differ in length."""


class PartialSetError(PropertyError):
    """Some paths of a multi-field set failed; the rest were committed."""

    def __init__(self, failures: list[PropertyError], *, instance: Optional[str] = None):
        paths = ", ".join(f"'{f.path}'" for f in failures)
        super().__init__(f"Failed to set {len(failures)} propert{'y' if len(failures) == 1 else 'ies'}: {paths}",
                         instance=instance)
        self.failures = failures

    def to_dict(self) -> dict:
        return {
            "success": False,
            "error": str(self),
            "failed": [{"path": f.path, "error": f.message} for f in self.failures],
        }
