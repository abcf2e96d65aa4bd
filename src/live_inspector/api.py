"""Public API functions for live-inspector.

``flatten`` and ``toggle_expand`` create a fresh TreeFlattener per call so no
state survives between calls. ``set_at_path``, ``delete_at_path`` and
``get_at_path`` are the mutation engine functions and raise
``PathNotFoundError``; ``apply_edit`` and ``apply_delete`` wrap them and
return the PathNotFound condition inside an EditResult instead.
"""

from __future__ import annotations

from collections.abc import Collection, Hashable, Iterable, Sequence
from typing import Any

from live_inspector.config import FlattenLimits
from live_inspector.errors import PathNotFoundError
from live_inspector.result import EditResult, ToggleDelta
from live_inspector.tree.flattener import TreeFlattener
from live_inspector.tree.mutator import delete_at_path, get_at_path, set_at_path
from live_inspector.tree.nodes import NodeDescriptor
from live_inspector.tree.path import Path

__all__ = [
    "apply_delete",
    "apply_edit",
    "delete_at_path",
    "flatten",
    "get_at_path",
    "set_at_path",
    "toggle_expand",
]


def flatten(
    root: Any,
    expanded_ids: Collection[str] = frozenset(),
    limits: FlattenLimits | None = None,
) -> list[NodeDescriptor]:
    """Flatten ``root`` into a pre-order list of node descriptors.

    Args:
        root:         Any value. Never modified.
        expanded_ids: Ids whose children are shown. ``"root"`` must be in it
                      for anything below the root to appear.
        limits:       Depth and width ceilings. Defaults to ``FlattenLimits()``.

    Returns:
        A new list whose first entry is the root node.
    """
    return TreeFlattener(limits).flatten(root, expanded_ids)


def toggle_expand(
    node: NodeDescriptor | str,
    nodes: Sequence[NodeDescriptor],
    root: Any,
    limits: FlattenLimits | None = None,
) -> ToggleDelta:
    """Expand or collapse one node without re-flattening the whole value.

    Args:
        node:   Target descriptor or id.
        nodes:  The current flat sequence. Never modified.
        root:   The current root value; expansion reads children from it.
        limits: Must match the limits ``nodes`` was produced with.

    Returns:
        A ToggleDelta carrying the new sequence and the expansion ids to add
        or remove. ``stale`` is True when the target could not be resolved.
    """
    return TreeFlattener(limits).toggle_expand(node, nodes, root)


def apply_edit(
    root: Any, path: Path | Iterable[Hashable], new_value: Any
) -> EditResult:
    """Replace the value at ``path``; a missing path is reported, not raised.

    Returns:
        EditResult with the new root, or the original root and the
        PathNotFound condition in ``error``.
    """
    path = Path.of(path)
    try:
        return EditResult(root=set_at_path(root, path, new_value), path=path)
    except PathNotFoundError as exc:
        return EditResult(root=root, path=path, error=exc.condition)


def apply_delete(root: Any, path: Path | Iterable[Hashable]) -> EditResult:
    """Remove the value at ``path``; a missing path is reported, not raised."""
    path = Path.of(path)
    try:
        return EditResult(root=delete_at_path(root, path), path=path)
    except PathNotFoundError as exc:
        return EditResult(root=root, path=path, error=exc.condition)
