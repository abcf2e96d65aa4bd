"""InspectorSession: the caller side of the engine for one inspected root.

The engine functions are pure and synchronous. Everything stateful lives
here:

- the current root and a generation counter bumped on every root change,
- the ExpansionState,
- the committed flat sequence, tagged with the (generation, expansion
  version) it was produced under,
- a ProjectionCache of full-flatten results,
- an optional ``writer`` callback standing in for the external store the
  inspected value lives in.

Full flattens go through tickets. ``begin_refresh`` captures the root and
an expansion snapshot; ``run`` flattens them (safe to call off the event
loop thread); ``commit`` installs the result only if neither the root nor the
expansion changed in the meantime. A stale result is dropped, never applied.

Example::

    session = InspectorSession({"a": {"b": [1, 2, 3]}})
    session.refresh()
    session.toggle("root.a")
    session.toggle("root.a.b")
    session.set_value(["a", "b", 1], 20)
    session.root  # {"a": {"b": [1, 20, 3]}}
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass, field
from typing import Any

from live_inspector.api import apply_delete, apply_edit
from live_inspector.cache import ProjectionCache
from live_inspector.config import InspectorConfig
from live_inspector.edits import coerce_text_edit
from live_inspector.errors import PathNotFoundError
from live_inspector.format import format_value, safe_stringify
from live_inspector.result import EditResult, ToggleDelta
from live_inspector.tree.expansion import ExpansionState
from live_inspector.tree.flattener import TreeFlattener
from live_inspector.tree.mutator import get_at_path
from live_inspector.tree.nodes import NodeDescriptor
from live_inspector.tree.path import Path

__all__ = ["FlattenTicket", "InspectorSession"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FlattenTicket:
    """Inputs of one full flatten, captured when it was requested.

    Attributes:
        generation: Root generation at request time.
        version:    Expansion version at request time.
        snapshot:   Expanded ids at request time.
        root:       The root value at request time.
    """

    generation: int
    version: int
    snapshot: frozenset[str]
    root: Any = field(compare=False, repr=False)


class InspectorSession:
    """Owns the root, expansion state and flat sequence of one inspector view.

    Args:
        root:   The value to inspect.
        config: Session settings. Defaults to ``InspectorConfig()``.
        writer: Called with the new root after every applied edit, before
                the session switches to it. An exception from the writer
                leaves the session on the old root.
    """

    def __init__(
        self,
        root: Any,
        config: InspectorConfig | None = None,
        writer: Callable[[Any], None] | None = None,
    ) -> None:
        self._config = config if config is not None else InspectorConfig()
        self._flattener = TreeFlattener(self._config.limits)
        self._cache = ProjectionCache(max_size=self._config.projection_cache_size)
        self._writer = writer
        self._root = root
        self._generation = 0
        self._expansion = ExpansionState.initial(
            root, self._config.auto_expand_first_level
        )
        self._nodes: list[NodeDescriptor] = []
        self._committed: tuple[int, int] | None = None
        self._pending: asyncio.Task[bool] | None = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def root(self) -> Any:
        return self._root

    @property
    def config(self) -> InspectorConfig:
        return self._config

    @property
    def expansion(self) -> ExpansionState:
        return self._expansion

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def nodes(self) -> list[NodeDescriptor]:
        """The committed flat sequence (a copy); empty before the first refresh."""
        return list(self._nodes)

    @property
    def is_current(self) -> bool:
        """True when the committed sequence matches the root and expansion."""
        return self._committed == (self._generation, self._expansion.version)

    # ------------------------------------------------------------------
    # Root changes
    # ------------------------------------------------------------------

    def set_root(self, value: Any) -> None:
        """Switch to a new root; the next refresh recomputes the projection."""
        self._cache.invalidate(self._generation)
        self._root = value
        self._generation += 1

    # ------------------------------------------------------------------
    # Full flattens
    # ------------------------------------------------------------------

    def begin_refresh(self) -> FlattenTicket:
        return FlattenTicket(
            generation=self._generation,
            version=self._expansion.version,
            snapshot=self._expansion.snapshot(),
            root=self._root,
        )

    def run(self, ticket: FlattenTicket) -> list[NodeDescriptor]:
        """Flatten the ticket's inputs. Touches no session state."""
        return self._flattener.flatten(ticket.root, ticket.snapshot)

    def is_stale(self, ticket: FlattenTicket) -> bool:
        return (
            ticket.generation != self._generation
            or ticket.version != self._expansion.version
        )

    def commit(self, ticket: FlattenTicket, nodes: list[NodeDescriptor]) -> bool:
        """Install ``nodes`` as the current sequence unless ``ticket`` is stale.

        Returns:
            True if the result was applied.
        """
        if self.is_stale(ticket):
            logger.debug(
                "Discarding stale flatten (generation %d/%d, version %d/%d)",
                ticket.generation,
                self._generation,
                ticket.version,
                self._expansion.version,
            )
            return False
        self._cache.put(ticket.generation, ticket.snapshot, nodes)
        self._nodes = list(nodes)
        self._committed = (ticket.generation, ticket.version)
        return True

    def refresh(self) -> list[NodeDescriptor]:
        """Synchronously bring the flat sequence up to date and return it."""
        ticket = self.begin_refresh()
        nodes = self._cache.get(ticket.generation, ticket.snapshot)
        if nodes is None:
            nodes = self.run(ticket)
        self.commit(ticket, nodes)
        return self.nodes

    async def refresh_debounced(self) -> bool:
        """Refresh after ``config.debounce_seconds``, coalescing bursts.

        A call made while an earlier one is still waiting cancels the earlier
        one. The flatten runs in a worker thread and is committed only if the
        session did not change while it ran.

        Returns:
            True if this call committed a new sequence.
        """
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        task = asyncio.create_task(self._debounced_refresh())
        self._pending = task
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.debug("Debounced refresh superseded by a newer request")
            return False

    async def _debounced_refresh(self) -> bool:
        await asyncio.sleep(self._config.debounce_seconds)
        ticket = self.begin_refresh()
        nodes = self._cache.get(ticket.generation, ticket.snapshot)
        if nodes is None:
            nodes = await asyncio.to_thread(self.run, ticket)
        return self.commit(ticket, nodes)

    # ------------------------------------------------------------------
    # Toggles
    # ------------------------------------------------------------------

    def toggle(self, node_id: str) -> ToggleDelta:
        """Expand or collapse ``node_id`` incrementally.

        The committed sequence is refreshed first when it is out of date.
        """
        if not self.is_current:
            self.refresh()
        delta = self._flattener.toggle_expand(node_id, self._nodes, self._root)
        if delta.stale or not delta.changed:
            return delta
        self._expansion.apply(delta)
        self._nodes = list(delta.nodes)
        self._committed = (self._generation, self._expansion.version)
        return delta

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def edit(self, path: Path | Iterable[Hashable], raw_text: str) -> EditResult:
        """Coerce ``raw_text`` to the current value's type and write it.

        Raises:
            EditCoercionError: If the text does not parse for that type.
        """
        path = Path.of(path)
        try:
            previous = get_at_path(self._root, path)
        except PathNotFoundError as exc:
            return EditResult(root=self._root, path=path, error=exc.condition)
        return self.set_value(path, coerce_text_edit(raw_text, previous))

    def set_value(self, path: Path | Iterable[Hashable], value: Any) -> EditResult:
        result = apply_edit(self._root, path, value)
        if result.applied:
            self._write(result.root)
        return result

    def delete(self, path: Path | Iterable[Hashable]) -> EditResult:
        result = apply_delete(self._root, path)
        if result.applied:
            self._write(result.root)
        return result

    def _write(self, new_root: Any) -> None:
        if self._writer is not None:
            self._writer(new_root)
        self.set_root(new_root)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def summary(self, node: NodeDescriptor) -> str:
        """One-line text for ``node``, truncated to ``config.max_display_length``."""
        return format_value(node.value, node.category, self._config.max_display_length)

    def export(self, indent: int | None = 2) -> str:
        """The current root as JSON (never raises)."""
        return safe_stringify(self._root, indent=indent)
