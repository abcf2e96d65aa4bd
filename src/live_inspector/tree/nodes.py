"""NodeDescriptor: one row of the flattened tree.

The flattener emits a list of these in pre-order. A descriptor holds a
reference to the live value at its position, never a copy, and is frozen:
incremental toggles produce modified copies via ``dataclasses.replace``.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import Any

from live_inspector.tree.classifier import Category
from live_inspector.tree.path import Path

__all__ = ["NodeDescriptor"]


@dataclass(frozen=True, slots=True)
class NodeDescriptor:
    """A single value at a specific path in the flat tree.

    Attributes:
        id:             Canonical node id (``Path.node_id``), unique per sequence.
        key:            Local key/index under the parent; ``"root"`` for the root.
        value:          The raw value at this node (a reference into the root).
        category:       Classifier output, or CIRCULAR for the sentinel node.
        depth:          0 for the root; children are always ``depth + 1``.
        path:           Structured address of the node, used for edits.
        is_expandable:  Container, not None, and above the depth ceiling.
        is_expanded:    The node's id was in the expansion snapshot.
        child_count:    Direct children emitted when expanded (capped).
        total_children: Direct children in the source value (uncapped).
        parent_id:      Id of the parent node; None for the root.
        sibling_index:  Position among the parent's emitted children.
        total_siblings: Number of children the parent emits.
        is_last_child:  ``sibling_index == total_siblings - 1``.
        parent_has_more_siblings: For each ancestor level below the root,
                        whether that ancestor has later siblings. Render
                        guides only; flattening and editing never read it.
    """

    id: str
    key: Hashable
    value: Any = field(hash=False)
    category: Category
    depth: int
    path: Path
    is_expandable: bool = False
    is_expanded: bool = False
    child_count: int = 0
    total_children: int = 0
    parent_id: str | None = None
    sibling_index: int = 0
    total_siblings: int = 1
    is_last_child: bool = True
    parent_has_more_siblings: tuple[bool, ...] = ()

    @property
    def is_circular(self) -> bool:
        """True for the sentinel emitted in place of a repeated container."""
        return self.category is Category.CIRCULAR

    @property
    def is_truncated(self) -> bool:
        """True when the per-level ceiling hid some of this node's children."""
        return self.total_children > self.child_count
