"""Deterministic object generators for performance benchmarks.

All generators produce fixed, reproducible objects. No random values.
Three tiers: 10-key flat, 100-key nested, 500-key deeply nested.
Each tier provides the value plus the expansion set that opens every
container in it, so a benchmark flattens the whole document.
"""

from __future__ import annotations

from typing import Any

import pytest

from live_inspector import flatten


def generate_flat_object(num_keys: int, prefix: str = "key") -> dict[str, Any]:
    """Generate a flat dict with deterministic string values."""
    return {f"{prefix}_{i}": f"value_{i}" for i in range(num_keys)}


def _make_nested_100() -> dict[str, Any]:
    """Generate a 100-key nested object.

    Structure: 10 sections x (9 leaf keys each) + section keys = 100 keys.
    """
    return {
        f"section_{i}": {f"field_{i}_{j}": f"value_{i}_{j}" for j in range(9)}
        for i in range(10)
    }


def _make_nested_500() -> dict[str, Any]:
    """Generate a ~500-key deeply nested object.

    Structure: 5 sections x 5 groups x (8 leaf keys + a 6-key detail list)
    across 4 levels.
    """
    root: dict[str, Any] = {}
    for i in range(5):
        mid: dict[str, Any] = {}
        for j in range(5):
            group: dict[str, Any] = {
                f"field_{i}_{j}_{k}": f"value_{i}_{j}_{k}" for k in range(8)
            }
            group["details"] = [f"d_{i}_{j}_{k}" for k in range(6)]
            mid[f"group_{j}"] = group
        root[f"section_{i}"] = mid
    return root


def expand_everything(root: Any) -> frozenset[str]:
    """Return the expansion set that opens every container in ``root``."""
    expanded = {"root"}
    while True:
        more = {n.id for n in flatten(root, expanded) if n.is_expandable} - expanded
        if not more:
            return frozenset(expanded)
        expanded |= more


# --- Fixtures for each size tier ---


@pytest.fixture
def doc_10key() -> tuple[dict[str, Any], frozenset[str]]:
    """10-key flat object, fully expanded."""
    root = generate_flat_object(10)
    return root, expand_everything(root)


@pytest.fixture
def doc_100key() -> tuple[dict[str, Any], frozenset[str]]:
    """100-key nested object (10 sections x 9 leaf keys), fully expanded."""
    root = _make_nested_100()
    return root, expand_everything(root)


@pytest.fixture
def doc_500key() -> tuple[dict[str, Any], frozenset[str]]:
    """~500-key deeply nested object (5 sections x 5 groups), fully expanded."""
    root = _make_nested_500()
    return root, expand_everything(root)
