"""TreeFlattener: projects a live value onto a flat, pre-order node sequence.

Two entry points share one recursive emitter:

- ``flatten``: full pass from the synthetic root node. Children of a node are
  emitted only when its id is in the expansion snapshot.
- ``toggle_expand`` / ``expand`` / ``collapse``: incremental delta for a
  single node. Expanding computes one level of children (all collapsed) and
  splices them in after the node; collapsing removes the contiguous run of
  descendants that follows it. Work is proportional to the toggled node's
  child count plus the number of removed descendants, never to the size of
  the whole value.

Safety valves (both always on):
- Depth: a container at ``max_depth`` is emitted but not expandable.
- Width: a container emits at most ``max_items_per_level`` children; the
  rest are silently dropped. ``total_children`` keeps the uncapped count.

Cycles: before a container is emitted it is entered into the traversal's
CircularGuard. A container already on the stack is emitted as a childless
CIRCULAR sentinel instead. Each full pass and each incremental expansion uses
a fresh guard; an incremental expansion seeds its guard with the expanded
node's own value only, so a cycle through a higher ancestor is not flagged
until the next full pass.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Collection, Hashable, Sequence
from typing import Any

from live_inspector.config import FlattenLimits
from live_inspector.errors import PathNotFoundError
from live_inspector.result import ToggleAction, ToggleDelta
from live_inspector.tree.classifier import (
    Category,
    child_count,
    classify,
    is_container,
    iter_children,
)
from live_inspector.tree.guard import CircularGuard
from live_inspector.tree.mutator import get_at_path
from live_inspector.tree.nodes import NodeDescriptor
from live_inspector.tree.path import ROOT_ID, Path, child_id, is_descendant_id

__all__ = ["TreeFlattener"]

logger = logging.getLogger(__name__)


class TreeFlattener:
    """Full and incremental flattening under fixed FlattenLimits.

    Instances hold no state besides their limits, so one flattener may be
    shared by any number of roots and calls.

    Example::

        flattener = TreeFlattener(FlattenLimits(max_depth=5))
        nodes = flattener.flatten({"a": {"b": [1, 2, 3]}}, {"root", "root.a"})
        [n.id for n in nodes]
        # ["root", "root.a", "root.a.b"]

        delta = flattener.toggle_expand("root.a.b", nodes, root)
        [n.id for n in delta.nodes]
        # ["root", "root.a", "root.a.b", "root.a.b.0", "root.a.b.1", "root.a.b.2"]
    """

    def __init__(self, limits: FlattenLimits | None = None) -> None:
        self._limits = limits if limits is not None else FlattenLimits()

    @property
    def limits(self) -> FlattenLimits:
        return self._limits

    # ------------------------------------------------------------------
    # Full pass
    # ------------------------------------------------------------------

    def flatten(
        self, root: Any, expanded_ids: Collection[str] = frozenset()
    ) -> list[NodeDescriptor]:
        """Flatten ``root`` into a pre-order list of node descriptors.

        Args:
            root:         The value to inspect. Never modified.
            expanded_ids: Snapshot of the ids whose children should be shown.

        Returns:
            A new list; the first entry is always the root node.
        """
        out: list[NodeDescriptor] = []
        self._emit(
            value=root,
            key=ROOT_ID,
            path=Path.root(),
            node_id=ROOT_ID,
            depth=0,
            parent_id=None,
            sibling_index=0,
            total_siblings=1,
            ancestors_more=(),
            expanded_ids=expanded_ids,
            guard=CircularGuard(),
            out=out,
        )
        return out

    # ------------------------------------------------------------------
    # Incremental toggles
    # ------------------------------------------------------------------

    def toggle_expand(
        self, node: NodeDescriptor | str, nodes: Sequence[NodeDescriptor], root: Any
    ) -> ToggleDelta:
        """Expand a collapsed node or collapse an expanded one.

        Args:
            node:  The target descriptor or its id. Only the id is used; the
                   node is looked up in ``nodes``.
            nodes: The current flat sequence.
            root:  The current root value. Expansion re-resolves the node's
                   path against it so children come from the live value.

        Returns:
            A ToggleDelta. ``stale`` is set (and the sequence is unchanged)
            when the id is absent or its path no longer resolves.
        """
        node_id = node if isinstance(node, str) else node.id
        index = _find(nodes, node_id)
        if index is None:
            logger.debug("Toggle target %s is not in the flat sequence", node_id)
            return ToggleDelta(nodes=list(nodes), node_id=node_id, stale=True)
        if nodes[index].is_expanded:
            return self._collapse_at(nodes, index)
        return self._expand_at(nodes, index, root)

    def expand(
        self, node: NodeDescriptor | str, nodes: Sequence[NodeDescriptor], root: Any
    ) -> ToggleDelta:
        """Expand ``node``; a no-op when it is already expanded."""
        node_id = node if isinstance(node, str) else node.id
        index = _find(nodes, node_id)
        if index is None:
            logger.debug("Expand target %s is not in the flat sequence", node_id)
            return ToggleDelta(nodes=list(nodes), node_id=node_id, stale=True)
        if nodes[index].is_expanded:
            return ToggleDelta(nodes=list(nodes), node_id=node_id)
        return self._expand_at(nodes, index, root)

    def collapse(
        self, node: NodeDescriptor | str, nodes: Sequence[NodeDescriptor]
    ) -> ToggleDelta:
        """Collapse ``node``; a no-op when it is already collapsed."""
        node_id = node if isinstance(node, str) else node.id
        index = _find(nodes, node_id)
        if index is None:
            logger.debug("Collapse target %s is not in the flat sequence", node_id)
            return ToggleDelta(nodes=list(nodes), node_id=node_id, stale=True)
        if not nodes[index].is_expanded:
            return ToggleDelta(nodes=list(nodes), node_id=node_id)
        return self._collapse_at(nodes, index)

    def _expand_at(
        self, nodes: Sequence[NodeDescriptor], index: int, root: Any
    ) -> ToggleDelta:
        node = nodes[index]
        if not node.is_expandable:
            logger.debug("Expand target %s is not expandable", node.id)
            return ToggleDelta(nodes=list(nodes), node_id=node.id, stale=True)

        try:
            value = get_at_path(root, node.path)
        except PathNotFoundError as exc:
            logger.debug("Expand target %s no longer resolves: %s", node.id, exc)
            return ToggleDelta(nodes=list(nodes), node_id=node.id, stale=True)

        category = classify(value)
        if not is_container(category):
            logger.debug(
                "Expand target %s is now a %s, not a container", node.id, category
            )
            return ToggleDelta(nodes=list(nodes), node_id=node.id, stale=True)

        total = child_count(value, category)
        count = min(total, self._limits.max_items_per_level)
        if total > count:
            logger.debug("Truncated %s to %d of %d children", node.id, count, total)

        children: list[NodeDescriptor] = []
        guard = CircularGuard(seed=(value,))
        ancestors_more = _child_ancestors_more(node)
        for position, (key, child) in enumerate(iter_children(value, category, count)):
            self._emit(
                value=child,
                key=key,
                path=node.path.child(key),
                node_id=child_id(node.id, key),
                depth=node.depth + 1,
                parent_id=node.id,
                sibling_index=position,
                total_siblings=count,
                ancestors_more=ancestors_more,
                expanded_ids=frozenset(),
                guard=guard,
                out=children,
            )

        updated = dataclasses.replace(
            node,
            value=value,
            category=category,
            is_expanded=True,
            child_count=count,
            total_children=total,
        )
        return ToggleDelta(
            nodes=[*nodes[:index], updated, *children, *nodes[index + 1 :]],
            node_id=node.id,
            action=ToggleAction.EXPAND,
            expanded_ids=frozenset({node.id}),
            inserted=len(children),
        )

    def _collapse_at(self, nodes: Sequence[NodeDescriptor], index: int) -> ToggleDelta:
        node = nodes[index]
        end = index + 1
        # Pre-order: every descendant sits in one contiguous run after the node.
        while end < len(nodes) and is_descendant_id(nodes[end].id, node.id):
            end += 1
        removed = nodes[index + 1 : end]
        collapsed = {node.id}
        collapsed.update(n.id for n in removed if n.is_expanded)
        return ToggleDelta(
            nodes=[
                *nodes[:index],
                dataclasses.replace(node, is_expanded=False),
                *nodes[end:],
            ],
            node_id=node.id,
            action=ToggleAction.COLLAPSE,
            collapsed_ids=frozenset(collapsed),
            removed=len(removed),
        )

    # ------------------------------------------------------------------
    # Recursive emitter
    # ------------------------------------------------------------------

    def _emit(
        self,
        *,
        value: Any,
        key: Hashable,
        path: Path,
        node_id: str,
        depth: int,
        parent_id: str | None,
        sibling_index: int,
        total_siblings: int,
        ancestors_more: tuple[bool, ...],
        expanded_ids: Collection[str],
        guard: CircularGuard,
        out: list[NodeDescriptor],
    ) -> None:
        """Append the node for ``value`` and, if expanded, its subtree to ``out``."""
        category = classify(value)
        is_last = sibling_index == total_siblings - 1
        container = is_container(category)

        if container and guard.enter(value):
            out.append(
                NodeDescriptor(
                    id=node_id,
                    key=key,
                    value=value,
                    category=Category.CIRCULAR,
                    depth=depth,
                    path=path,
                    parent_id=parent_id,
                    sibling_index=sibling_index,
                    total_siblings=total_siblings,
                    is_last_child=is_last,
                    parent_has_more_siblings=ancestors_more,
                )
            )
            return

        try:
            total = child_count(value, category) if container else 0
            count = min(total, self._limits.max_items_per_level)
            expandable = container and depth < self._limits.max_depth
            expanded = expandable and node_id in expanded_ids
            if container and not expandable and node_id in expanded_ids:
                logger.debug("Depth ceiling reached at %s (depth %d)", node_id, depth)

            node = NodeDescriptor(
                id=node_id,
                key=key,
                value=value,
                category=category,
                depth=depth,
                path=path,
                is_expandable=expandable,
                is_expanded=expanded,
                child_count=count,
                total_children=total,
                parent_id=parent_id,
                sibling_index=sibling_index,
                total_siblings=total_siblings,
                is_last_child=is_last,
                parent_has_more_siblings=ancestors_more,
            )
            out.append(node)
            if not expanded:
                return

            if total > count:
                logger.debug("Truncated %s to %d of %d children", node_id, count, total)
            child_more = _child_ancestors_more(node)
            for position, (child_key, child) in enumerate(
                iter_children(value, category, count)
            ):
                self._emit(
                    value=child,
                    key=child_key,
                    path=path.child(child_key),
                    node_id=child_id(node_id, child_key),
                    depth=depth + 1,
                    parent_id=node_id,
                    sibling_index=position,
                    total_siblings=count,
                    ancestors_more=child_more,
                    expanded_ids=expanded_ids,
                    guard=guard,
                    out=out,
                )
        finally:
            if container:
                guard.exit(value)


def _find(nodes: Sequence[NodeDescriptor], node_id: str) -> int | None:
    for index, node in enumerate(nodes):
        if node.id == node_id:
            return index
    return None


def _child_ancestors_more(node: NodeDescriptor) -> tuple[bool, ...]:
    """Guide flags handed to ``node``'s children (the root contributes none)."""
    if node.depth == 0:
        return node.parent_has_more_siblings
    return (*node.parent_has_more_siblings, not node.is_last_child)
