"""pytest plugin for live-inspector.

Auto-discovered by pytest via the pytest11 entry point declared in pyproject.toml.
When the package is installed (even in editable mode), pytest discovers this plugin
automatically -- no conftest.py changes are needed.

Source: https://docs.pytest.org/en/stable/how-to/writing_plugins.html
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pytest

from live_inspector import FlattenLimits, NodeDescriptor, format_value


def flat_tree_problems(
    nodes: Sequence[NodeDescriptor], limits: FlattenLimits | None = None
) -> list[str]:
    """Return every flat-sequence invariant that ``nodes`` violates.

    Checked: the root comes first; ids are unique and match their paths; each
    node directly follows its parent's earlier children in pre-order; depths
    step by one; sibling bookkeeping is consistent; expanded nodes emit
    exactly ``child_count`` children; circular sentinels are leaves; and,
    when ``limits`` is given, no node is deeper than ``max_depth`` and no
    container emits more than ``max_items_per_level`` children.
    """
    problems: list[str] = []
    if not nodes:
        return ["sequence is empty"]
    first = nodes[0]
    if first.id != "root" or first.depth != 0 or first.parent_id is not None:
        problems.append(f"first node is not the root: {first.id!r}")

    seen: dict[str, NodeDescriptor] = {}
    emitted: dict[str, int] = {}
    # Ancestors of the current position, root first.
    stack: list[NodeDescriptor] = []
    for node in nodes:
        if node.id in seen:
            problems.append(f"duplicate id {node.id!r}")
        seen[node.id] = node
        if node.id != node.path.node_id:
            problems.append(f"{node.id!r} does not match its path {node.path}")
        if limits is not None and node.depth > limits.max_depth:
            problems.append(f"{node.id!r} is deeper than max_depth")
        if node.is_circular and (node.is_expandable or node.is_expanded):
            problems.append(f"circular sentinel {node.id!r} is expandable")
        if node.is_expanded and not node.is_expandable:
            problems.append(f"{node.id!r} is expanded but not expandable")
        if node.is_last_child != (node.sibling_index == node.total_siblings - 1):
            problems.append(f"{node.id!r} has inconsistent is_last_child")

        while stack and stack[-1].depth >= node.depth:
            stack.pop()
        if node.parent_id is not None:
            parent = stack[-1] if stack else None
            if parent is None or parent.id != node.parent_id:
                problems.append(f"{node.id!r} does not follow its parent in pre-order")
            elif not parent.is_expanded:
                problems.append(f"{node.id!r} is shown under collapsed {parent.id!r}")
            elif node.depth != parent.depth + 1:
                problems.append(f"{node.id!r} depth does not step from its parent")
            position = emitted.get(node.parent_id, 0)
            if node.sibling_index != position:
                problems.append(f"{node.id!r} has sibling_index {node.sibling_index}")
            emitted[node.parent_id] = position + 1
        stack.append(node)

    for node in nodes:
        if not node.is_expanded:
            continue
        count = emitted.get(node.id, 0)
        if count != node.child_count:
            problems.append(
                f"{node.id!r} emitted {count} children, expected {node.child_count}"
            )
        if limits is not None and count > limits.max_items_per_level:
            problems.append(f"{node.id!r} emitted more than max_items_per_level")
    return problems


def render_outline(nodes: Sequence[NodeDescriptor]) -> str:
    """Render ``nodes`` as indented text, one line per node.

    Expanded nodes are marked ``-``, collapsed expandable nodes ``+``.
    """
    lines = []
    for node in nodes:
        if node.is_expanded:
            marker = "- "
        elif node.is_expandable:
            marker = "+ "
        else:
            marker = ""
        summary = format_value(node.value, node.category)
        lines.append(f"{'  ' * node.depth}{marker}{node.key}: {summary}")
    return "\n".join(lines)


@pytest.fixture(scope="session")
def assert_flat_tree_valid() -> Any:
    """Fixture that returns a callable flat-sequence invariant checker.

    Usage in tests::

        def test_flatten(assert_flat_tree_valid):
            assert_flat_tree_valid(flatten({"a": [1, 2]}, {"root", "root.a"}))

    Returns:
        A callable ``_assert(nodes, limits=None) -> None`` that raises
        ``AssertionError`` listing every violated invariant.
    """

    def _assert(
        nodes: Sequence[NodeDescriptor], limits: FlattenLimits | None = None
    ) -> None:
        problems = flat_tree_problems(nodes, limits)
        if problems:
            raise AssertionError(
                "Flat tree is invalid:\n" + "\n".join(f"  {p}" for p in problems)
            )

    return _assert


@pytest.fixture(scope="session")
def tree_outline() -> Any:
    """Fixture that returns ``render_outline`` for readable tree assertions.

    Usage in tests::

        def test_outline(tree_outline):
            nodes = flatten({"a": 1}, {"root"})
            assert tree_outline(nodes) == "- root: record (1 item)\\n  a: 1"
    """
    return render_outline
