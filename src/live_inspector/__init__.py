"""Live inspector - flat, virtualizable views and path edits of live values."""

from __future__ import annotations

from live_inspector.api import (
    apply_delete,
    apply_edit,
    delete_at_path,
    flatten,
    get_at_path,
    set_at_path,
    toggle_expand,
)
from live_inspector.config import FlattenLimits, InspectorConfig
from live_inspector.edits import coerce_text_edit
from live_inspector.errors import (
    EditCoercionError,
    InspectorError,
    PathNotFound,
    PathNotFoundError,
)
from live_inspector.format import describe_size, format_value, safe_stringify
from live_inspector.result import EditResult, ToggleAction, ToggleDelta
from live_inspector.session import FlattenTicket, InspectorSession
from live_inspector.tree import (
    UNDEFINED,
    Category,
    ExpansionState,
    NodeDescriptor,
    Path,
    TreeFlattener,
    classify,
)

__version__: str = "0.1.0"
__all__: list[str] = [
    "UNDEFINED",
    "Category",
    "EditCoercionError",
    "EditResult",
    "ExpansionState",
    "FlattenLimits",
    "FlattenTicket",
    "InspectorConfig",
    "InspectorError",
    "InspectorSession",
    "NodeDescriptor",
    "Path",
    "PathNotFound",
    "PathNotFoundError",
    "ToggleAction",
    "ToggleDelta",
    "TreeFlattener",
    "apply_delete",
    "apply_edit",
    "classify",
    "coerce_text_edit",
    "delete_at_path",
    "describe_size",
    "flatten",
    "format_value",
    "get_at_path",
    "safe_stringify",
    "set_at_path",
    "toggle_expand",
]
