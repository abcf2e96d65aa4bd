"""Path addressing shared by the flattener and the mutator.

A ``Path`` is the single in-memory representation of a node address: an
ordered tuple of key tokens from the root to the node. Two string forms are
derived from it:

- ``node_id``: the canonical node id, ``"root"`` followed by one escaped token
  per segment, joined by ``"."``. Used as the expansion-state key.
- ``display()``: a human-readable form (``a.b[1]``), never parsed back.

Escaping rules for ``node_id`` tokens (applied per segment):
- ``\\`` -> ``\\\\`` and ``.`` -> ``\\.`` so a key containing the separator
  can never look like two segments.
- int tokens render as decimal; bool keys fall under the last rule.
- a str token that reads like an int (``"12"``) or starts with ``<`` gets a
  leading ``\\`` so it cannot collide with an int token or a repr token.
- any other hashable renders as ``<repr>`` (escaped the same way).

Under these rules an escaped token never ends in an odd run of backslashes,
so ``is_descendant_id`` can use a plain prefix test.
"""

from __future__ import annotations

import re
from collections.abc import Hashable, Iterable, Iterator
from dataclasses import dataclass

__all__ = [
    "ROOT_ID",
    "SEPARATOR",
    "Path",
    "child_id",
    "escape_token",
    "is_descendant_id",
]

ROOT_ID = "root"
SEPARATOR = "."

_INT_LIKE = re.compile(r"-?[0-9]+\Z")


def _escape_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace(SEPARATOR, "\\" + SEPARATOR)


def escape_token(token: Hashable) -> str:
    """Render one path segment as an id token (see module docstring)."""
    if isinstance(token, int) and not isinstance(token, bool):
        return str(token)
    if isinstance(token, str):
        escaped = _escape_text(token)
        if _INT_LIKE.match(token) or token.startswith("<"):
            return "\\" + escaped
        return escaped
    return "<" + _escape_text(repr(token)) + ">"


def child_id(parent_id: str, key: Hashable) -> str:
    """Return the id of the child ``key`` under the node ``parent_id``."""
    return parent_id + SEPARATOR + escape_token(key)


def is_descendant_id(node_id: str, ancestor_id: str) -> bool:
    """Return True if ``node_id`` lies strictly below ``ancestor_id``."""
    return node_id.startswith(ancestor_id + SEPARATOR)


@dataclass(frozen=True, slots=True)
class Path:
    """Ordered key tokens from the root to a node.

    Attributes:
        segments: Keys/indices, outermost first. Empty for the root.

    Example::

        path = Path.root().child("a").child("b").child(1)
        path.node_id    # "root.a.b.1"
        path.display()  # "a.b[1]"
    """

    segments: tuple[Hashable, ...] = ()

    @classmethod
    def root(cls) -> Path:
        """The empty path, addressing the root value itself."""
        return cls()

    @classmethod
    def of(cls, value: Path | Iterable[Hashable]) -> Path:
        """Coerce a Path or any iterable of keys into a Path."""
        if isinstance(value, Path):
            return value
        if isinstance(value, (str, bytes)):
            msg = f"Path segments must be an iterable of keys, got {value!r}"
            raise TypeError(msg)
        return cls(tuple(value))

    def child(self, key: Hashable) -> Path:
        return Path((*self.segments, key))

    @property
    def parent(self) -> Path | None:
        """The enclosing path, or None for the root."""
        if not self.segments:
            return None
        return Path(self.segments[:-1])

    @property
    def last(self) -> Hashable | None:
        """The final segment, or None for the root."""
        return self.segments[-1] if self.segments else None

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def node_id(self) -> str:
        """Canonical node id (``"root"`` for the empty path)."""
        return SEPARATOR.join([ROOT_ID, *(escape_token(s) for s in self.segments)])

    def is_prefix_of(self, other: Path) -> bool:
        """Return True if ``other`` equals this path or lies below it."""
        n = len(self.segments)
        return other.segments[:n] == self.segments

    def display(self) -> str:
        """Human-readable path: ``"root"`` for the root, else ``a.b[1]``."""
        if not self.segments:
            return ROOT_ID
        parts: list[str] = []
        for index, segment in enumerate(self.segments):
            if isinstance(segment, int) and not isinstance(segment, bool):
                parts.append(f"[{segment}]")
            elif isinstance(segment, str):
                parts.append(segment if index == 0 else f"{SEPARATOR}{segment}")
            else:
                parts.append(f"[{segment!r}]")
        return "".join(parts)

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self.segments)

    def __str__(self) -> str:
        return self.display()
