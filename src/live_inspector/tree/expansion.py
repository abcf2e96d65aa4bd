"""ExpansionState: the caller-owned set of expanded node ids.

The flattener never reads this store directly. A full pass receives a
``snapshot()``; incremental toggles return a ToggleDelta whose id sets are
folded back in with ``apply``. Collapsing an id always prunes every
descendant id as well, so a later full pass reproduces exactly the sequence
the incremental collapse produced.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from live_inspector.tree.classifier import classify, is_container, iter_children
from live_inspector.tree.path import ROOT_ID, child_id, is_descendant_id

if TYPE_CHECKING:
    from live_inspector.result import ToggleDelta

__all__ = ["ExpansionState"]

logger = logging.getLogger(__name__)


class ExpansionState:
    """Mutable set of expanded ids with a change counter.

    ``version`` increases on every effective change; a full flatten started
    under one version is stale once the version moves on.

    Example::

        state = ExpansionState.initial(root)
        nodes = flattener.flatten(root, state.snapshot())
        delta = flattener.toggle_expand("root.a", nodes, root)
        state.apply(delta)
    """

    __slots__ = ("_ids", "_version")

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._ids: set[str] = set(ids)
        self._version = 0

    @classmethod
    def initial(
        cls, root: Any, auto_expand_first_level: bool = False
    ) -> ExpansionState:
        """Starting state: the root, plus its direct children when requested."""
        ids = {ROOT_ID}
        if auto_expand_first_level:
            category = classify(root)
            if is_container(category):
                children = iter_children(root, category)
                ids.update(child_id(ROOT_ID, key) for key, _ in children)
        return cls(ids)

    @property
    def version(self) -> int:
        return self._version

    def snapshot(self) -> frozenset[str]:
        """Immutable copy handed to a full flatten."""
        return frozenset(self._ids)

    def expand(self, node_id: str) -> None:
        if node_id not in self._ids:
            self._ids.add(node_id)
            self._version += 1

    def collapse(self, node_id: str) -> None:
        """Remove ``node_id`` and every expanded descendant."""
        pruned = {i for i in self._ids if i == node_id or is_descendant_id(i, node_id)}
        if pruned:
            self._ids -= pruned
            self._version += 1

    def request_toggle(self, node_id: str) -> bool:
        """Flip ``node_id`` without a flat sequence at hand.

        Returns:
            True if the id is now expanded.
        """
        if node_id in self._ids:
            self.collapse(node_id)
            return False
        self.expand(node_id)
        return True

    def apply(self, delta: ToggleDelta) -> None:
        """Fold an incremental toggle result into the store."""
        if delta.stale:
            logger.debug("Ignoring stale toggle of %s", delta.node_id)
            return
        for node_id in delta.collapsed_ids:
            self.collapse(node_id)
        for node_id in delta.expanded_ids:
            self.expand(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"ExpansionState(ids={sorted(self._ids)!r}, version={self._version})"
