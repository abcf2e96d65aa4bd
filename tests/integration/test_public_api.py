"""Integration tests for the public API surface.

All imports are from the top-level ``live_inspector`` package, never from
internal submodules. Covers the worked edit example, the self-reference
example, and the flat-sequence properties (pre-order, depth and width
bounds, circular safety, incremental equivalence, mutation round-trip and
non-mutation) over a shared set of inputs.
"""

from __future__ import annotations

import copy
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any

import pytest

from live_inspector import (
    Category,
    ExpansionState,
    FlattenLimits,
    InspectorSession,
    NodeDescriptor,
    delete_at_path,
    flatten,
    get_at_path,
    safe_stringify,
    set_at_path,
    toggle_expand,
)
from live_inspector.integrations._pytest_plugin import flat_tree_problems


@dataclass
class Service:
    name: str
    ports: list[int] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)


def _cyclic() -> dict[str, Any]:
    root: dict[str, Any] = {"name": "root", "items": [1, 2]}
    root["self"] = root
    root["items"].append(root)
    return root


INPUTS: dict[str, Any] = {
    "nested": {"a": {"b": [1, 2, 3]}, "c": {"d": {"e": None}}},
    "wide": {f"k{i}": list(range(i)) for i in range(12)},
    "mixed": [
        Service("api", [80, 443], {"tier": "web"}),
        OrderedDict(x=1, y={2, 3}),
        (None, "s", 2**70),
    ],
    "cyclic": _cyclic(),
}


def _all_container_ids(root: Any, limits: FlattenLimits) -> set[str]:
    """Expand everything reachable, one level at a time."""
    expanded = {"root"}
    while True:
        nodes = flatten(root, expanded, limits)
        more = {n.id for n in nodes if n.is_expandable} - expanded
        if not more:
            return expanded
        expanded |= more


def _subtree(nodes: list[NodeDescriptor], node_id: str) -> list[NodeDescriptor]:
    start = next(i for i, n in enumerate(nodes) if n.id == node_id)
    end = start + 1
    while end < len(nodes) and nodes[end].depth > nodes[start].depth:
        end += 1
    return nodes[start:end]


# ---------------------------------------------------------------------------
# Worked examples
# ---------------------------------------------------------------------------


class TestWorkedExamples:
    def test_set_and_delete_in_nested_sequence(self) -> None:
        root = {"a": {"b": [1, 2, 3]}}
        assert set_at_path(root, ["a", "b", 1], 20) == {"a": {"b": [1, 20, 3]}}
        assert delete_at_path(root, ["a", "b", 1]) == {"a": {"b": [1, 3]}}
        assert root == {"a": {"b": [1, 2, 3]}}

    def test_self_reference_emits_one_sentinel(self) -> None:
        root: dict[str, Any] = {}
        root["self"] = root
        limits = FlattenLimits(max_depth=10)
        nodes = flatten(root, _all_container_ids(root, limits), limits)
        assert [n.id for n in nodes] == ["root", "root.self"]
        assert nodes[1].category is Category.CIRCULAR
        assert not nodes[1].is_expandable

    def test_cyclic_value_exports(self) -> None:
        text = safe_stringify(INPUTS["cyclic"])
        assert text.count('"[Circular]"') == 2


# ---------------------------------------------------------------------------
# Flat-sequence properties
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("name", sorted(INPUTS))
class TestFlattenProperties:
    @pytest.mark.parametrize(
        "limits",
        [
            FlattenLimits(),
            FlattenLimits(max_depth=1),
            FlattenLimits(max_depth=2, max_items_per_level=3),
            FlattenLimits(max_items_per_level=1),
        ],
    )
    def test_sequence_is_well_formed(self, name: str, limits: FlattenLimits) -> None:
        root = INPUTS[name]
        nodes = flatten(root, _all_container_ids(root, limits), limits)
        assert flat_tree_problems(nodes, limits) == []

    @pytest.mark.parametrize("max_depth", [1, 2, 5, 10])
    def test_terminates_for_every_depth(self, name: str, max_depth: int) -> None:
        limits = FlattenLimits(max_depth=max_depth)
        nodes = flatten(INPUTS[name], _all_container_ids(INPUTS[name], limits), limits)
        assert max(n.depth for n in nodes) <= max_depth

    def test_flatten_does_not_mutate(self, name: str) -> None:
        root = INPUTS[name]
        before = safe_stringify(root)
        flatten(root, _all_container_ids(root, FlattenLimits()))
        assert safe_stringify(root) == before


# The incremental guard only sees the expanded subtree, so cyclic inputs are
# covered by the full-pass tests above.
@pytest.mark.parametrize("name", ["mixed", "nested", "wide"])
class TestIncrementalProperties:
    def test_collapse_then_expand_matches_full_flatten(self, name: str) -> None:
        root = INPUTS[name]
        limits = FlattenLimits()
        expanded = _all_container_ids(root, limits)
        nodes = flatten(root, expanded, limits)
        for node in nodes:
            if not node.is_expanded or node.id == "root":
                continue
            collapsed = toggle_expand(node.id, nodes, root, limits)
            reopened = toggle_expand(node.id, collapsed.nodes, root, limits)
            state = ExpansionState(expanded)
            state.apply(collapsed)
            state.apply(reopened)
            full = flatten(root, state.snapshot(), limits)
            assert reopened.nodes == full
            assert _subtree(reopened.nodes, node.id) == _subtree(full, node.id)


# ---------------------------------------------------------------------------
# Mutation properties
# ---------------------------------------------------------------------------


MUTATION_CASES = [
    ({"a": {"b": [1, 2, 3]}}, ["a", "b", 1]),
    ({"a": {"b": [1, 2, 3]}}, ["a", "b", 2]),
    ({"svc": Service("api", [80])}, ["svc", "name"]),
    ({"svc": Service("api", [80])}, ["svc", "ports", 0]),
    ([{"x": 1}, {"y": 2}], [1, "y"]),
    (OrderedDict(k=(1, 2)), ["k", 1]),
    ({"tags": {"x", "y"}}, ["tags", "x"]),
    ({"s": frozenset({1, 2, 3})}, ["s", 2]),
]


def _rewritten_path(root: Any, path: list[Any], value: Any) -> list[Any]:
    """Where the node written at ``path`` lives afterwards.

    Members of a distinct-element collection are addressed by their own
    value, so overwriting one moves it to the new value's address.
    """
    if isinstance(get_at_path(root, path[:-1]), (set, frozenset)):
        return [*path[:-1], value]
    return path


class TestMutationProperties:
    @pytest.mark.parametrize(("root", "path"), MUTATION_CASES)
    def test_overwrite_is_idempotent(self, root: Any, path: list[Any]) -> None:
        once = set_at_path(root, path, "a")
        twice = set_at_path(once, _rewritten_path(root, path, "a"), "b")
        assert twice == set_at_path(root, path, "b")

    @pytest.mark.parametrize(("root", "path"), MUTATION_CASES)
    def test_inputs_are_unchanged(self, root: Any, path: list[Any]) -> None:
        before = copy.deepcopy(root)
        set_at_path(root, path, "new")
        delete_at_path(root, path)
        assert root == before

    @pytest.mark.parametrize(
        ("root", "path", "value"),
        [
            ({"a": {"b": [1, 2, 3]}}, ["a", "b", 2], 3),
            ({"a": {"b": 1}, "c": 2}, ["c"], 2),
            ({"svc": {"labels": {"tier": "web"}}}, ["svc", "labels", "tier"], "web"),
            ({"s": {1, 2, 3}}, ["s", 2], 2),
            ({"tags": frozenset({"x"})}, ["tags", "x"], "x"),
        ],
    )
    def test_delete_then_set_restores(
        self, root: Any, path: list[Any], value: Any
    ) -> None:
        assert set_at_path(delete_at_path(root, path), path, value) == root


# ---------------------------------------------------------------------------
# Session round trip
# ---------------------------------------------------------------------------


class TestSessionRoundTrip:
    def test_edit_and_view(self) -> None:
        store: list[Any] = []
        session = InspectorSession({"a": {"b": [1, 2, 3]}}, writer=store.append)
        session.toggle("root.a")
        session.toggle("root.a.b")
        assert session.edit(["a", "b", 1], "20").applied
        values = [n.value for n in session.refresh() if n.parent_id == "root.a.b"]
        assert values == [1, 20, 3]
        assert store == [{"a": {"b": [1, 20, 3]}}]

    def test_edit_set_member_from_its_node(self) -> None:
        session = InspectorSession({"tags": {"x", "y"}})
        session.toggle("root.tags")
        node = next(n for n in session.refresh() if n.value == "x")
        assert node.id == "root.tags.x"
        assert session.edit(node.path, "z").applied
        assert session.root == {"tags": {"y", "z"}}
