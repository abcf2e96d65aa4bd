"""Result types returned by incremental toggles and edits.

Both are frozen: the caller decides whether and how to apply them (swap in
the new flat sequence, update the expansion store, write the new root to the
inspected cache).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from live_inspector.errors import PathNotFound
    from live_inspector.tree.nodes import NodeDescriptor
    from live_inspector.tree.path import Path

__all__ = ["EditResult", "ToggleAction", "ToggleDelta"]


class ToggleAction(StrEnum):
    """Direction of an incremental toggle."""

    EXPAND = auto()
    COLLAPSE = auto()


@dataclass(frozen=True, slots=True)
class ToggleDelta:
    """Outcome of an incremental expand/collapse.

    Attributes:
        nodes:         The new flat sequence (the input list is never modified).
        node_id:       Id of the toggled node.
        action:        EXPAND or COLLAPSE; None when nothing happened.
        expanded_ids:  Ids the caller should add to its expansion store.
        collapsed_ids: Ids the caller should remove from its expansion store
                       (the node plus every expanded descendant).
        inserted:      Number of descriptors spliced in.
        removed:       Number of descriptors removed.
        stale:         The target was not found or no longer resolves; the
                       sequence is returned unchanged.
    """

    nodes: list[NodeDescriptor]
    node_id: str
    action: ToggleAction | None = None
    expanded_ids: frozenset[str] = field(default_factory=frozenset)
    collapsed_ids: frozenset[str] = field(default_factory=frozenset)
    inserted: int = 0
    removed: int = 0
    stale: bool = False

    @property
    def changed(self) -> bool:
        return self.action is not None


@dataclass(frozen=True, slots=True)
class EditResult:
    """Outcome of an edit or deletion.

    Attributes:
        root:  The new root when the edit applied, else the original root.
        path:  The addressed path.
        error: The PathNotFound condition when the path did not resolve.
    """

    root: Any
    path: Path
    error: PathNotFound | None = None

    @property
    def applied(self) -> bool:
        return self.error is None
