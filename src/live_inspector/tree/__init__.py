"""Tree subpackage: classification, addressing, flattening and editing.

Re-exports the public API for the tree module:
- Category: StrEnum of value categories (four of them are containers)
- Path: structured node address with the canonical node id and display form
- CircularGuard: identity-keyed record of the containers on a traversal stack
- NodeDescriptor: one row of the flat tree
- TreeFlattener: full and incremental projection onto a flat sequence
- ExpansionState: caller-owned set of expanded ids
- get_at_path / set_at_path / delete_at_path: copy-on-write path edits
"""

from live_inspector.tree.classifier import UNDEFINED, Category, classify
from live_inspector.tree.expansion import ExpansionState
from live_inspector.tree.flattener import TreeFlattener
from live_inspector.tree.guard import CircularGuard
from live_inspector.tree.mutator import delete_at_path, get_at_path, set_at_path
from live_inspector.tree.nodes import NodeDescriptor
from live_inspector.tree.path import ROOT_ID, Path

__all__ = [
    "ROOT_ID",
    "UNDEFINED",
    "Category",
    "CircularGuard",
    "ExpansionState",
    "NodeDescriptor",
    "Path",
    "TreeFlattener",
    "classify",
    "delete_at_path",
    "get_at_path",
    "set_at_path",
]
