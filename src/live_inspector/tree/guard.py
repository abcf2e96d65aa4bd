"""CircularGuard: identity-keyed record of the containers on the traversal stack.

A guard answers one question during a descent: "is this container already
one of my ancestors?". It is keyed by ``id()`` so unhashable containers
(dicts, lists) are tracked without being hashed, and it holds a strong
reference to every entered value so an id cannot be recycled while the value
is on the stack.

Scope is one traversal call. The flattener creates a fresh guard for every
full pass and for every incremental expansion; nothing is remembered between
calls.
"""

from __future__ import annotations

from typing import Any

__all__ = ["CircularGuard"]


class CircularGuard:
    """Tracks the containers currently on the traversal stack.

    Example::

        guard = CircularGuard()
        guard.enter(root)   # False: first visit, root is now on the stack
        guard.enter(root)   # True: root is already an ancestor
        guard.exit(root)    # backtrack
    """

    __slots__ = ("_active",)

    def __init__(self, seed: tuple[Any, ...] = ()) -> None:
        """Create a guard, optionally pre-seeded with values already on the stack.

        Args:
            seed: Values that count as ancestors from the start (e.g. the
                node being expanded by an incremental toggle).
        """
        self._active: dict[int, Any] = {id(value): value for value in seed}

    def enter(self, value: Any) -> bool:
        """Push ``value`` onto the stack.

        Returns:
            True if ``value`` was already on the stack (a cycle); the stack is
            left unchanged. False if it was not; it is now marked as seen.
        """
        key = id(value)
        if key in self._active:
            return True
        self._active[key] = value
        return False

    def exit(self, value: Any) -> None:
        """Pop ``value`` off the stack on backtrack. Unknown values are ignored."""
        self._active.pop(id(value), None)

    def __contains__(self, value: Any) -> bool:
        return id(value) in self._active

    def __len__(self) -> int:
        return len(self._active)
