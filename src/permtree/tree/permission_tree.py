"""PermissionTree: a rooted permission structure and its traversal primitives.

Everything the public algebra does is built from the operations here:

- :meth:`PermissionTree.lookup`: descend a path, absent means not granted
- :meth:`PermissionTree.flatten`: lazily emit dotted paths of granted leaves
- :meth:`PermissionTree.from_actions`: rebuild a tree from dotted paths
- :meth:`PermissionTree.merge`: three-way structural zip under a MergePolicy
- :meth:`PermissionTree.contains_structurally`: granted-action containment
- :meth:`PermissionTree.conform_to`: shape check against a reference tree

Example
-------
::

    tree = PermissionTree.from_structure({"post": {"create": True, "edit": False}})
    assert tree.lookup("post.create") is True
    assert list(tree.flatten()) == ["post.create"]
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum

from permtree.errors import ShapeMismatchError, UnknownActionError
from permtree.tree.node import (
    MAX_DEPTH,
    SEPARATOR,
    Branch,
    Leaf,
    PermissionNode,
    join_path,
    parse_structure,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# MergePolicy
# ---------------------------------------------------------------------------


class MergePolicy(str, Enum):
    """How :meth:`PermissionTree.merge` treats keys and leaves.

    ============  ===========  ============  ==================
    Policy        Left only    Right only    Both leaves
    ============  ===========  ============  ==================
    UNION         kept         kept          ``a or b``
    INTERSECTION  dropped      dropped       ``a and b``
    DIFFERENCE    kept         dropped       ``a and not b``
    ============  ===========  ============  ==================
    """

    UNION = "union"
    INTERSECTION = "intersection"
    DIFFERENCE = "difference"

    @property
    def keeps_left_only(self) -> bool:
        return self is not MergePolicy.INTERSECTION

    @property
    def keeps_right_only(self) -> bool:
        return self is MergePolicy.UNION

    def combine(self, left: bool, right: bool) -> bool:
        """Apply the policy's boolean operator to two leaf values."""
        match self:
            case MergePolicy.UNION:
                return left or right
            case MergePolicy.INTERSECTION:
                return left and right
            case MergePolicy.DIFFERENCE:
                return left and not right


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def split_action(action: str | Sequence[str]) -> tuple[str, ...]:
    """Return the segments of a dotted action path.

    A sequence of segments is accepted as-is.

    Raises
    ------
    TypeError
        If *action* is neither a string nor a sequence of strings.
    """
    if isinstance(action, str):
        return tuple(action.split(SEPARATOR))
    if isinstance(action, Sequence) and all(isinstance(s, str) for s in action):
        return tuple(action)
    raise TypeError(f"action paths must be strings; got {action!r}.")


# ---------------------------------------------------------------------------
# PermissionTree
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PermissionTree:
    """An immutable rooted permission tree.

    Attributes
    ----------
    root:
        The root branch. An empty branch is a tree that grants nothing.
    """

    root: Branch = field(default_factory=Branch)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_structure(
        cls, data: object, max_depth: int = MAX_DEPTH
    ) -> PermissionTree:
        """Parse a nested boolean mapping; see :func:`parse_structure`."""
        return cls(parse_structure(data, max_depth=max_depth))

    @classmethod
    def from_actions(
        cls,
        actions: Iterable[str],
        reference: PermissionTree | None = None,
        max_depth: int = MAX_DEPTH,
    ) -> PermissionTree:
        """Build a tree granting exactly the given dotted actions.

        Parameters
        ----------
        actions:
            Dotted action paths. Each becomes a ``Leaf(True)``; intermediate
            branches are created as needed.
        reference:
            Optional tree whose shape every path must follow.
        max_depth:
            Maximum nesting of the result, root included.

        Raises
        ------
        UnknownActionError
            If a path segment is missing from *reference*.
        ShapeMismatchError
            If a path ends on a reference branch or passes through a
            reference leaf, or if two of the given paths conflict
            (``a`` and ``a.b``).
        InvalidSchemaError
            If a path has empty segments or nests deeper than *max_depth*.
        """
        if isinstance(actions, str):
            raise TypeError(
                "actions must be an iterable of dotted paths, not a single string."
            )
        scratch: dict[str, object] = {}
        for action in sorted(actions):
            _insert_action(scratch, action, reference.root if reference else None)
        return cls(parse_structure(scratch, max_depth=max_depth))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def lookup(self, path: str | Sequence[str]) -> bool | Branch | None:
        """Resolve a path to a leaf value, a sub-branch, or ``None``.

        A missing child, or a leaf with segments left over, resolves to
        ``None``: absence is the "no permission" state at every level.
        """
        node: PermissionNode = self.root
        for segment in split_action(path):
            if not isinstance(node, Branch):
                return None
            child = node.child(segment)
            if child is None:
                return None
            node = child
        if isinstance(node, Leaf):
            return node.granted
        return node

    def flatten(self) -> Iterator[str]:
        """Yield the dotted path of every granted leaf, depth first.

        Denied leaves are never emitted, so explicit denial and absence
        are indistinguishable in the result.
        """
        yield from _flatten(self.root, "")

    def contains_structurally(self, other: PermissionTree) -> bool:
        """Return True if every action granted by *other* is granted here."""
        return all(self.lookup(action) is True for action in other.flatten())

    def conform_to(self, reference: PermissionTree) -> None:
        """Check that this tree follows the shape of *reference*.

        Raises
        ------
        UnknownActionError
            For the first path (in name order) absent from *reference*.
        ShapeMismatchError
            For the first path where the two trees disagree on kind.
        """
        _conform(self.root, reference.root, "")

    # ------------------------------------------------------------------
    # Algebra
    # ------------------------------------------------------------------

    def merge(self, other: PermissionTree, policy: MergePolicy) -> PermissionTree:
        """Combine this tree with *other* node by node under *policy*.

        Raises
        ------
        ShapeMismatchError
            If the trees hold a leaf and a branch under the same path.
        """
        return PermissionTree(_merge_branch(self.root, other.root, policy, ""))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_structure(self) -> dict[str, object]:
        """Return the tree as nested plain dicts, denied leaves included."""
        return self.root.to_structure()


# ---------------------------------------------------------------------------
# Private recursion
# ---------------------------------------------------------------------------


def _insert_action(
    scratch: dict[str, object], action: str, reference: Branch | None
) -> None:
    segments = split_action(action)
    node = scratch
    ref: PermissionNode | None = reference
    for index, segment in enumerate(segments):
        prefix = SEPARATOR.join(segments[: index + 1])
        is_last = index == len(segments) - 1

        if reference is not None:
            ref_child = ref.child(segment) if isinstance(ref, Branch) else None
            if ref_child is None:
                if isinstance(ref, Leaf):
                    raise ShapeMismatchError(
                        prefix,
                        f"Shape mismatch at '{prefix}': "
                        f"'{SEPARATOR.join(segments[:index])}' is an action, not a group.",
                    )
                raise UnknownActionError(action)
            if is_last and isinstance(ref_child, Branch):
                raise ShapeMismatchError(
                    prefix,
                    f"Shape mismatch at '{prefix}': it is a group of actions, not an action.",
                )
            ref = ref_child

        existing = node.get(segment)
        if is_last:
            if isinstance(existing, dict):
                raise ShapeMismatchError(
                    prefix, f"Shape mismatch at '{prefix}': used both as action and group."
                )
            node[segment] = True
        else:
            if existing is True:
                raise ShapeMismatchError(
                    prefix, f"Shape mismatch at '{prefix}': used both as action and group."
                )
            node = node.setdefault(segment, {})  # type: ignore[assignment]


def _flatten(branch: Branch, prefix: str) -> Iterator[str]:
    for name, child in branch.children.items():
        path = join_path(prefix, name)
        match child:
            case Leaf(granted=True):
                yield path
            case Leaf():
                continue
            case Branch():
                yield from _flatten(child, path)


def _conform(node: Branch, reference: Branch, prefix: str) -> None:
    for name, child in node.children.items():
        path = join_path(prefix, name)
        ref_child = reference.child(name)
        if ref_child is None:
            raise UnknownActionError(path)
        match child, ref_child:
            case Branch(), Branch():
                _conform(child, ref_child, path)
            case Leaf(), Leaf():
                continue
            case Leaf(), Branch():
                raise ShapeMismatchError(
                    path,
                    f"Shape mismatch at '{path}': the reference defines a group "
                    "of actions here, not a single action.",
                )
            case _:
                raise ShapeMismatchError(
                    path,
                    f"Shape mismatch at '{path}': the reference defines a single "
                    "action here, not a group.",
                )


def _merge_branch(
    left: Branch, right: Branch, policy: MergePolicy, prefix: str
) -> Branch:
    merged: dict[str, PermissionNode] = {}
    for name in left.children.keys() | right.children.keys():
        left_child = left.child(name)
        right_child = right.child(name)
        if right_child is None:
            if policy.keeps_left_only:
                merged[name] = left_child  # type: ignore[assignment]
        elif left_child is None:
            if policy.keeps_right_only:
                merged[name] = right_child
        else:
            merged[name] = _merge_nodes(
                left_child, right_child, policy, join_path(prefix, name)
            )
    return Branch(merged)


def _merge_nodes(
    left: PermissionNode, right: PermissionNode, policy: MergePolicy, path: str
) -> PermissionNode:
    match left, right:
        case Branch(), Branch():
            return _merge_branch(left, right, policy, path)
        case Leaf(granted=a), Leaf(granted=b):
            return Leaf(policy.combine(a, b))
        case _:
            logger.debug("Cannot %s leaf and branch at %s", policy.value, path)
            raise ShapeMismatchError(path)
