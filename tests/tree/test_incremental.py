"""Tests for incremental toggles: TreeFlattener.toggle_expand / expand / collapse.

The central property: any sequence of incremental toggles, with each delta
folded into an ExpansionState, yields the same flat sequence as a full
flatten under the resulting expansion snapshot.
"""

from __future__ import annotations

from typing import Any

import pytest

from live_inspector.config import FlattenLimits
from live_inspector.result import ToggleAction
from live_inspector.tree.expansion import ExpansionState
from live_inspector.tree.flattener import TreeFlattener
from live_inspector.tree.nodes import NodeDescriptor

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def flattener() -> TreeFlattener:
    return TreeFlattener()


@pytest.fixture
def sample() -> dict[str, Any]:
    return {"a": {"b": [1, 2, 3]}, "c": "leaf", "d": {"e": {"f": None}}}


def _ids(nodes: list[NodeDescriptor]) -> list[str]:
    return [n.id for n in nodes]


# ---------------------------------------------------------------------------
# Expand
# ---------------------------------------------------------------------------


class TestExpand:
    def test_splices_children_after_node(
        self, flattener: TreeFlattener, sample: dict[str, Any]
    ) -> None:
        nodes = flattener.flatten(sample, {"root"})
        delta = flattener.toggle_expand("root.a", nodes, sample)
        assert _ids(delta.nodes) == ["root", "root.a", "root.a.b", "root.c", "root.d"]

    def test_delta_bookkeeping(
        self, flattener: TreeFlattener, sample: dict[str, Any]
    ) -> None:
        nodes = flattener.flatten(sample, {"root"})
        delta = flattener.toggle_expand("root.a", nodes, sample)
        assert delta.action is ToggleAction.EXPAND
        assert delta.changed
        assert not delta.stale
        assert delta.node_id == "root.a"
        assert delta.expanded_ids == frozenset({"root.a"})
        assert delta.collapsed_ids == frozenset()
        assert delta.inserted == 1
        assert delta.removed == 0

    def test_node_is_marked_expanded(
        self, flattener: TreeFlattener, sample: dict[str, Any]
    ) -> None:
        nodes = flattener.flatten(sample, {"root"})
        delta = flattener.toggle_expand("root.a", nodes, sample)
        assert delta.nodes[1].is_expanded
        assert not nodes[1].is_expanded

    def test_new_children_are_collapsed(
        self, flattener: TreeFlattener, sample: dict[str, Any]
    ) -> None:
        nodes = flattener.flatten(sample, {"root"})
        delta = flattener.toggle_expand("root.a", nodes, sample)
        child = delta.nodes[2]
        assert child.is_expandable
        assert not child.is_expanded

    def test_accepts_a_descriptor(
        self, flattener: TreeFlattener, sample: dict[str, Any]
    ) -> None:
        nodes = flattener.flatten(sample, {"root"})
        delta = flattener.toggle_expand(nodes[1], nodes, sample)
        assert delta.action is ToggleAction.EXPAND

    def test_input_sequence_is_not_modified(
        self, flattener: TreeFlattener, sample: dict[str, Any]
    ) -> None:
        nodes = flattener.flatten(sample, {"root"})
        before = list(nodes)
        flattener.toggle_expand("root.a", nodes, sample)
        assert nodes == before

    def test_reads_children_from_the_live_root(self, flattener: TreeFlattener) -> None:
        old_root = {"a": [1]}
        nodes = flattener.flatten(old_root, {"root"})
        new_root = {"a": [1, 2, 3]}
        delta = flattener.toggle_expand("root.a", nodes, new_root)
        assert _ids(delta.nodes) == [
            "root",
            "root.a",
            "root.a.0",
            "root.a.1",
            "root.a.2",
        ]
        assert delta.nodes[1].value is new_root["a"]
        assert delta.nodes[1].child_count == 3

    def test_width_ceiling_applies(self) -> None:
        flattener = TreeFlattener(FlattenLimits(max_items_per_level=2))
        root = {"items": list(range(5))}
        nodes = flattener.flatten(root, {"root"})
        delta = flattener.toggle_expand("root.items", nodes, root)
        assert _ids(delta.nodes) == [
            "root",
            "root.items",
            "root.items.0",
            "root.items.1",
        ]
        assert delta.nodes[1].child_count == 2
        assert delta.nodes[1].total_children == 5

    def test_expand_is_noop_when_already_expanded(
        self, flattener: TreeFlattener, sample: dict[str, Any]
    ) -> None:
        nodes = flattener.flatten(sample, {"root", "root.a"})
        delta = flattener.expand("root.a", nodes, sample)
        assert not delta.changed
        assert not delta.stale
        assert delta.nodes == nodes


# ---------------------------------------------------------------------------
# Collapse
# ---------------------------------------------------------------------------


class TestCollapse:
    def test_removes_every_descendant(
        self, flattener: TreeFlattener, sample: dict[str, Any]
    ) -> None:
        nodes = flattener.flatten(sample, {"root", "root.a", "root.a.b"})
        delta = flattener.toggle_expand("root.a", nodes, sample)
        assert _ids(delta.nodes) == ["root", "root.a", "root.c", "root.d"]
        assert delta.action is ToggleAction.COLLAPSE
        assert delta.removed == 4
        assert not delta.nodes[1].is_expanded

    def test_reports_expanded_descendants(
        self, flattener: TreeFlattener, sample: dict[str, Any]
    ) -> None:
        nodes = flattener.flatten(sample, {"root", "root.a", "root.a.b"})
        delta = flattener.toggle_expand("root.a", nodes, sample)
        assert delta.collapsed_ids == frozenset({"root.a", "root.a.b"})
        assert delta.expanded_ids == frozenset()

    def test_collapse_root(
        self, flattener: TreeFlattener, sample: dict[str, Any]
    ) -> None:
        nodes = flattener.flatten(sample, {"root", "root.a"})
        delta = flattener.collapse("root", nodes)
        assert _ids(delta.nodes) == ["root"]

    def test_collapse_is_noop_when_collapsed(
        self, flattener: TreeFlattener, sample: dict[str, Any]
    ) -> None:
        nodes = flattener.flatten(sample, {"root"})
        delta = flattener.collapse("root.a", nodes)
        assert not delta.changed
        assert delta.nodes == nodes

    def test_keeps_sibling_with_shared_prefix(self, flattener: TreeFlattener) -> None:
        root = {"a": [1], "ab": [2]}
        nodes = flattener.flatten(root, {"root", "root.a", "root.ab"})
        delta = flattener.toggle_expand("root.a", nodes, root)
        assert _ids(delta.nodes) == ["root", "root.a", "root.ab", "root.ab.0"]


# ---------------------------------------------------------------------------
# Stale targets
# ---------------------------------------------------------------------------


class TestStaleTargets:
    def test_unknown_id(self, flattener: TreeFlattener, sample: dict[str, Any]) -> None:
        nodes = flattener.flatten(sample, {"root"})
        delta = flattener.toggle_expand("root.missing", nodes, sample)
        assert delta.stale
        assert not delta.changed
        assert delta.nodes == nodes

    def test_path_no_longer_resolves(self, flattener: TreeFlattener) -> None:
        nodes = flattener.flatten({"a": {"b": 1}}, {"root"})
        delta = flattener.toggle_expand("root.a", nodes, {"x": 1})
        assert delta.stale
        assert delta.nodes == nodes

    def test_value_is_no_longer_a_container(self, flattener: TreeFlattener) -> None:
        nodes = flattener.flatten({"a": {"b": 1}}, {"root"})
        delta = flattener.toggle_expand("root.a", nodes, {"a": 5})
        assert delta.stale

    def test_leaf_is_not_expandable(self, flattener: TreeFlattener) -> None:
        root = {"a": 1}
        nodes = flattener.flatten(root, {"root"})
        assert flattener.toggle_expand("root.a", nodes, root).stale

    def test_node_at_depth_ceiling(self) -> None:
        flattener = TreeFlattener(FlattenLimits(max_depth=1))
        root = {"a": {"b": 1}}
        nodes = flattener.flatten(root, {"root"})
        assert flattener.toggle_expand("root.a", nodes, root).stale


# ---------------------------------------------------------------------------
# Cycles
# ---------------------------------------------------------------------------


class TestIncrementalCycles:
    def test_self_cycle_of_expanded_node(self, flattener: TreeFlattener) -> None:
        inner: dict[str, Any] = {}
        inner["me"] = inner
        root = {"c": inner}
        nodes = flattener.flatten(root, {"root"})
        delta = flattener.toggle_expand("root.c", nodes, root)
        assert _ids(delta.nodes) == ["root", "root.c", "root.c.me"]
        assert delta.nodes[2].is_circular

    def test_cycle_through_higher_ancestor_flagged_on_full_pass(
        self, flattener: TreeFlattener
    ) -> None:
        root: dict[str, Any] = {}
        root["kid"] = {"up": root}
        nodes = flattener.flatten(root, {"root"})
        delta = flattener.toggle_expand("root.kid", nodes, root)
        # The incremental guard only knows the expanded node itself.
        assert not delta.nodes[2].is_circular
        full = flattener.flatten(root, {"root", "root.kid"})
        assert full[2].is_circular


# ---------------------------------------------------------------------------
# Equivalence with full passes
# ---------------------------------------------------------------------------


class TestIncrementalEquivalence:
    @pytest.mark.parametrize(
        "sequence",
        [
            ["root.a"],
            ["root.a", "root.a.b"],
            ["root.a", "root.a.b", "root.a"],
            ["root.a", "root.a.b", "root.a", "root.a"],
            ["root.d", "root.d.e", "root.a", "root.d"],
            ["root.d", "root.d.e", "root.d.e.f", "root.a.b", "root"],
            ["root", "root", "root.a"],
        ],
    )
    def test_matches_full_flatten(
        self, flattener: TreeFlattener, sample: dict[str, Any], sequence: list[str]
    ) -> None:
        state = ExpansionState.initial(sample)
        nodes = flattener.flatten(sample, state.snapshot())
        for node_id in sequence:
            delta = flattener.toggle_expand(node_id, nodes, sample)
            state.apply(delta)
            nodes = delta.nodes
            assert nodes == flattener.flatten(sample, state.snapshot())

    def test_collapse_then_expand_does_not_restore_grandchildren(
        self, flattener: TreeFlattener, sample: dict[str, Any]
    ) -> None:
        state = ExpansionState({"root", "root.a", "root.a.b"})
        nodes = flattener.flatten(sample, state.snapshot())
        for node_id in ("root.a", "root.a"):
            delta = flattener.toggle_expand(node_id, nodes, sample)
            state.apply(delta)
            nodes = delta.nodes
        assert "root.a.b" not in state
        assert _ids(nodes) == ["root", "root.a", "root.a.b", "root.c", "root.d"]
