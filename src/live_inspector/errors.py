"""Exception hierarchy and the PathNotFound condition.

Nothing in the engine is fatal: the data being inspected is live and changes
out-of-band, so a path that no longer resolves is an expected condition.
The mutator raises it as ``PathNotFoundError``; the API and session layers
catch it and return the ``PathNotFound`` condition to the caller instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from live_inspector.tree.path import Path

__all__ = ["EditCoercionError", "InspectorError", "PathNotFound", "PathNotFoundError"]


@dataclass(frozen=True, slots=True)
class PathNotFound:
    """A path that does not resolve against the current root.

    Attributes:
        path:   The full path that was requested.
        index:  Position of the segment that failed to resolve.
        reason: Short human-readable cause (missing key, index out of range,
                non-container reached, ...).
    """

    path: Path
    index: int
    reason: str

    def describe(self) -> str:
        segment = self.path.segments[self.index] if self.path.segments else None
        return (
            f"path {self.path.display()!r} does not resolve at segment "
            f"{self.index} ({segment!r}): {self.reason}"
        )


class InspectorError(Exception):
    """Base class for all live_inspector errors."""


class PathNotFoundError(InspectorError, LookupError):
    """Raised by the mutator when a path does not resolve or cannot be written."""

    def __init__(self, condition: PathNotFound) -> None:
        self.condition = condition
        super().__init__(condition.describe())


class EditCoercionError(InspectorError, ValueError):
    """Raised when raw edit text cannot be coerced to the target category."""
