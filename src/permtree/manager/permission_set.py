"""PermissionSet: an immutable, named permission grant.

A PermissionSet wraps one :class:`~permtree.tree.PermissionTree` and is the
value applications hold and combine. Sets are normally derived by a
:class:`~permtree.manager.PermissionManager`, which validates them against
its reference schema and tags them with its ``manager_id``. Sets built
directly with :meth:`PermissionSet.from_structure` or
:meth:`PermissionSet.from_actions` are *unmanaged*.

Algebra operations never mutate either operand; they return a new set.

Example
-------
::

    editor = manager.perm_from_actions({"post.create", "post.edit"})
    viewer = manager.perm_from_actions({"post.view"})

    staff = editor | viewer
    assert staff.contains(viewer)
    assert "post.edit" in staff
    assert (staff - editor).get_actions() == frozenset({"post.view"})
"""
from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Iterable, Iterator

import yaml

from permtree.errors import ManagerMismatchError
from permtree.tree.node import MAX_DEPTH
from permtree.tree.permission_tree import MergePolicy, PermissionTree

logger = logging.getLogger(__name__)


class PermissionSet:
    """A concrete permission grant backed by a PermissionTree.

    Parameters
    ----------
    tree:
        The permission tree. It is not copied; trees are immutable.
    name:
        Optional label (role, user, request...). Not part of equality.
    manager_id:
        Identifier of the manager that derived the set, or ``None`` for
        unmanaged sets.
    """

    __slots__ = ("_tree", "_name", "_manager_id")

    def __init__(
        self,
        tree: PermissionTree,
        name: str | None = None,
        manager_id: uuid.UUID | None = None,
    ) -> None:
        self._tree = tree
        self._name = name
        self._manager_id = manager_id

    @classmethod
    def from_structure(
        cls,
        data: object,
        name: str | None = None,
        max_depth: int = MAX_DEPTH,
    ) -> PermissionSet:
        """Build an unmanaged set from a nested boolean mapping."""
        return cls(PermissionTree.from_structure(data, max_depth=max_depth), name=name)

    @classmethod
    def from_actions(
        cls, actions: Iterable[str], name: str | None = None
    ) -> PermissionSet:
        """Build an unmanaged set granting exactly *actions*."""
        return cls(PermissionTree.from_actions(actions), name=name)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def tree(self) -> PermissionTree:
        """The underlying permission tree."""
        return self._tree

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def manager_id(self) -> uuid.UUID | None:
        return self._manager_id

    def is_managed(self) -> bool:
        """Return True if the set was derived by a PermissionManager."""
        return self._manager_id is not None

    def has_same_manager(self, other: PermissionSet) -> bool:
        """Return True if both sets were derived by the same manager.

        Two unmanaged sets count as having the same (absent) manager.
        """
        return self._manager_id == other._manager_id

    def with_name(self, name: str | None) -> PermissionSet:
        """Return a copy of this set carrying a different name."""
        return PermissionSet(self._tree, name=name, manager_id=self._manager_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def contains_action(self, action: str) -> bool:
        """Return True if *action* resolves to a granted leaf.

        Unknown paths and paths naming a group of actions are not granted.
        """
        return self._tree.lookup(action) is True

    def contains(self, other: PermissionSet) -> bool:
        """Return True if this set grants every action *other* grants.

        Raises
        ------
        ManagerMismatchError
            If the sets were derived by different managers.
        """
        self._check_operand(other, "contains")
        return self._tree.contains_structurally(other._tree)

    def get_actions(self) -> frozenset[str]:
        """Return the dotted paths of every granted action."""
        return frozenset(self._tree.flatten())

    # ------------------------------------------------------------------
    # Algebra
    # ------------------------------------------------------------------

    def union(self, other: PermissionSet) -> PermissionSet:
        """Return a set granting what either operand grants."""
        return self._merge(other, MergePolicy.UNION)

    def intersection(self, other: PermissionSet) -> PermissionSet:
        """Return a set granting what both operands grant."""
        return self._merge(other, MergePolicy.INTERSECTION)

    def difference(self, other: PermissionSet) -> PermissionSet:
        """Return a set granting what this set grants and *other* does not."""
        return self._merge(other, MergePolicy.DIFFERENCE)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_structure(self) -> dict[str, object]:
        """Return the set as nested plain dicts in the reference's shape."""
        return self._tree.to_structure()

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_structure(), indent=indent, sort_keys=True)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_structure(), default_flow_style=False, sort_keys=True)

    # ------------------------------------------------------------------
    # Python protocol
    # ------------------------------------------------------------------

    def __or__(self, other: object) -> PermissionSet:
        if not isinstance(other, PermissionSet):
            return NotImplemented
        return self.union(other)

    def __and__(self, other: object) -> PermissionSet:
        if not isinstance(other, PermissionSet):
            return NotImplemented
        return self.intersection(other)

    def __sub__(self, other: object) -> PermissionSet:
        if not isinstance(other, PermissionSet):
            return NotImplemented
        return self.difference(other)

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, PermissionSet):
            return NotImplemented
        return self.contains(other)

    def __le__(self, other: object) -> bool:
        if not isinstance(other, PermissionSet):
            return NotImplemented
        return other.contains(self)

    def __contains__(self, action: object) -> bool:
        return isinstance(action, str) and self.contains_action(action)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._tree.flatten()))

    def __len__(self) -> int:
        return sum(1 for _ in self._tree.flatten())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PermissionSet):
            return NotImplemented
        return self._manager_id == other._manager_id and self._tree == other._tree

    def __hash__(self) -> int:
        return hash((self._manager_id, self._tree))

    def __repr__(self) -> str:
        label = f"{self._name!r}, " if self._name else ""
        return f"PermissionSet({label}actions={sorted(self._tree.flatten())!r})"

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _check_operand(self, other: PermissionSet, operation: str) -> None:
        if not isinstance(other, PermissionSet):
            raise TypeError(
                f"{operation} expects a PermissionSet; got {type(other).__name__}."
            )
        if not self.has_same_manager(other):
            raise ManagerMismatchError(operation)

    def _merge(self, other: PermissionSet, policy: MergePolicy) -> PermissionSet:
        self._check_operand(other, policy.value)
        merged = self._tree.merge(other._tree, policy)
        logger.debug(
            "Computed %s of %s and %s", policy.value, self._name or "<set>", other._name or "<set>"
        )
        return PermissionSet(merged, manager_id=self._manager_id)
