"""FlattenLimits and InspectorConfig: explicit, immutable engine configuration.

FlattenLimits bounds the work a single flatten can do. Inspected values are
developer-supplied and otherwise unbounded, so both limits are always in
force and are themselves capped by hard ceilings.

InspectorConfig groups the caller-side settings used by InspectorSession.
Anything that would otherwise be process-wide state (debounce delay,
first-level auto-expansion, memoization size) lives here and is passed in.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_MAX_ITEMS_PER_LEVEL",
    "MAX_DEPTH_LIMIT",
    "MAX_ITEMS_PER_LEVEL_LIMIT",
    "FlattenLimits",
    "InspectorConfig",
]

MAX_DEPTH_LIMIT = 15
MAX_ITEMS_PER_LEVEL_LIMIT = 500
DEFAULT_MAX_DEPTH = 10
DEFAULT_MAX_ITEMS_PER_LEVEL = 500


@dataclass(frozen=True, slots=True)
class FlattenLimits:
    """Depth and width ceilings for one flatten.

    Attributes:
        max_depth: Deepest level whose nodes are emitted. A container at this
            depth is emitted but marked non-expandable. Must be in
            [0, MAX_DEPTH_LIMIT].
        max_items_per_level: Most children a single container emits; the rest
            are silently dropped. Must be in [0, MAX_ITEMS_PER_LEVEL_LIMIT].
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    max_items_per_level: int = DEFAULT_MAX_ITEMS_PER_LEVEL

    def __post_init__(self) -> None:
        if not 0 <= self.max_depth <= MAX_DEPTH_LIMIT:
            msg = f"max_depth must be in [0, {MAX_DEPTH_LIMIT}], got {self.max_depth}"
            raise ValueError(msg)
        if not 0 <= self.max_items_per_level <= MAX_ITEMS_PER_LEVEL_LIMIT:
            msg = (
                f"max_items_per_level must be in [0, {MAX_ITEMS_PER_LEVEL_LIMIT}], "
                f"got {self.max_items_per_level}"
            )
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class InspectorConfig:
    """Caller-side settings for an InspectorSession.

    Attributes:
        limits: Flatten ceilings.
        auto_expand_first_level: Start with every first-level child expanded
            as well as the root.
        debounce_seconds: Delay used by ``refresh_debounced`` to coalesce
            bursts of root changes (>= 0).
        projection_cache_size: Number of full-flatten results memoized per
            session (>= 1).
        max_display_length: Longest single-line value summary produced by
            ``format_value`` before truncation (>= 4).
    """

    limits: FlattenLimits = field(default_factory=FlattenLimits)
    auto_expand_first_level: bool = False
    debounce_seconds: float = 0.01
    projection_cache_size: int = 8
    max_display_length: int = 120

    def __post_init__(self) -> None:
        if self.debounce_seconds < 0.0:
            msg = f"debounce_seconds must be >= 0.0, got {self.debounce_seconds}"
            raise ValueError(msg)
        if self.projection_cache_size < 1:
            msg = (
                "projection_cache_size must be >= 1, "
                f"got {self.projection_cache_size}"
            )
            raise ValueError(msg)
        if self.max_display_length < 4:
            msg = f"max_display_length must be >= 4, got {self.max_display_length}"
            raise ValueError(msg)
