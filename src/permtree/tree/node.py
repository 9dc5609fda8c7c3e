"""Recursive permission nodes.

A permission structure is a tree whose inner nodes are :class:`Branch`
instances (named groups of actions) and whose terminal nodes are
:class:`Leaf` instances carrying a boolean: ``True`` for a granted action,
``False`` for an explicitly denied one.

Nested plain mappings are the serialized form of a tree::

    {
        "post": {
            "create": True,
            "comment": {"delete": False},
        },
    }

:func:`parse_structure` turns such a mapping into a :class:`Branch`,
rejecting anything that is not a well-formed boolean tree.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from permtree.errors import InvalidSchemaError

# Divider between segment names in a dotted action path.
SEPARATOR: str = "."

# Maximum number of nested mapping levels, root included.
MAX_DEPTH: int = 20


# ---------------------------------------------------------------------------
# Node variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Leaf:
    """A terminal action: granted when ``granted`` is True, denied otherwise."""

    granted: bool

    def to_structure(self) -> bool:
        return self.granted


@dataclass(frozen=True)
class Branch:
    """A named group of child nodes.

    Children are stored in a read-only mapping sorted by name, so two
    branches with the same children compare and serialize identically
    regardless of the order in which they were supplied.
    """

    children: Mapping[str, PermissionNode] = field(default_factory=dict)

    def __post_init__(self) -> None:
        ordered = {name: self.children[name] for name in sorted(self.children)}
        object.__setattr__(self, "children", MappingProxyType(ordered))

    def __hash__(self) -> int:
        return hash(tuple(self.children.items()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Branch):
            return NotImplemented
        return dict(self.children) == dict(other.children)

    def __len__(self) -> int:
        return len(self.children)

    def __iter__(self) -> Iterator[str]:
        return iter(self.children)

    def child(self, name: str) -> PermissionNode | None:
        """Return the child called *name*, or ``None`` when absent."""
        return self.children.get(name)

    def to_structure(self) -> dict[str, object]:
        return {name: node.to_structure() for name, node in self.children.items()}


PermissionNode = Leaf | Branch


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def join_path(prefix: str, name: str) -> str:
    """Append *name* to a dotted *prefix* (which may be empty)."""
    return f"{prefix}{SEPARATOR}{name}" if prefix else name


def validate_name(name: object, path: str) -> str:
    """Check that *name* is usable as a segment and return it.

    Raises
    ------
    InvalidSchemaError
        If the name is not a string, is empty, or contains the separator.
    """
    if not isinstance(name, str):
        raise InvalidSchemaError(
            f"keys must be strings; got {type(name).__name__} {name!r}.", path
        )
    if not name:
        raise InvalidSchemaError("keys must not be empty.", path)
    if SEPARATOR in name:
        raise InvalidSchemaError(
            f"key {name!r} contains the reserved separator {SEPARATOR!r}.", path
        )
    return name


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_structure(data: object, max_depth: int = MAX_DEPTH) -> Branch:
    """Parse a nested mapping of booleans into a :class:`Branch`.

    Parameters
    ----------
    data:
        The root mapping. Values must be booleans (leaves) or mappings
        (branches).
    max_depth:
        Maximum number of nested mapping levels, root included.

    Returns
    -------
    Branch
        The root node of the parsed tree.

    Raises
    ------
    InvalidSchemaError
        If the root is not a mapping, a value is null or a non-boolean
        scalar, a key is invalid, or nesting exceeds *max_depth*.
    """
    if not isinstance(data, Mapping):
        raise InvalidSchemaError(
            f"the root must be a mapping; got {type(data).__name__}."
        )
    return _parse_branch(data, "", 1, max_depth)


def _parse_branch(
    data: Mapping[object, object], path: str, depth: int, max_depth: int
) -> Branch:
    if depth > max_depth:
        raise InvalidSchemaError(
            f"nesting exceeds the maximum depth of {max_depth}.", path
        )
    children: dict[str, PermissionNode] = {}
    for raw_name, value in data.items():
        name = validate_name(raw_name, path)
        child_path = join_path(path, name)
        children[name] = _parse_value(value, child_path, depth, max_depth)
    return Branch(children)


def _parse_value(
    value: object, path: str, depth: int, max_depth: int
) -> PermissionNode:
    # bool must be tested before anything numeric: 1 and 0 are not leaves.
    if isinstance(value, bool):
        return Leaf(value)
    if isinstance(value, Mapping):
        return _parse_branch(value, path, depth + 1, max_depth)
    if value is None:
        raise InvalidSchemaError("null values are not allowed.", path)
    if isinstance(value, (list, tuple, set, frozenset)):
        raise InvalidSchemaError("arrays are not allowed.", path)
    raise InvalidSchemaError(
        f"expected a boolean or a mapping; got {type(value).__name__} {value!r}.",
        path,
    )
