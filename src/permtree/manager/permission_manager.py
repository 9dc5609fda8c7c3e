"""PermissionManager: the reference schema and validated derivation.

A manager owns one reference :class:`~permtree.tree.PermissionTree`
enumerating every action that may ever be granted. Permission sets derived
through the manager are checked against that tree's shape and tagged with
the manager's id, so sets from unrelated schemas cannot be mixed.

Example
-------
::

    manager = PermissionManager.from_reference({
        "post": {
            "create": True,
            "edit": True,
            "comment": {"delete": True},
        },
    })
    author = manager.perm_from_actions({"post.create"})
    assert author.contains_action("post.create")
    assert not author.contains_action("post.edit")

    moderator = manager.perm_from_structure({"post": {"comment": {"delete": True}}})
    assert manager.validate(author | moderator)
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

from permtree.errors import (
    InvalidSchemaError,
    ShapeMismatchError,
    UnknownActionError,
)
from permtree.manager.permission_set import PermissionSet
from permtree.tree.node import MAX_DEPTH
from permtree.tree.permission_tree import PermissionTree

logger = logging.getLogger(__name__)

UNIVERSE_NAME: str = "universe"


class PermissionManager:
    """Holds a reference schema and derives schema-conformant PermissionSets.

    Use :meth:`from_reference` or :meth:`from_actions` rather than the
    constructor when starting from raw data.

    Parameters
    ----------
    reference:
        The reference tree.
    max_depth:
        Maximum nesting accepted when parsing derived structures.
    """

    def __init__(self, reference: PermissionTree, max_depth: int = MAX_DEPTH) -> None:
        self._reference = reference
        self._max_depth = max_depth
        self._id = uuid.uuid4()

    @classmethod
    def from_reference(
        cls, schema: object, max_depth: int = MAX_DEPTH
    ) -> PermissionManager:
        """Build a manager from a nested boolean mapping.

        Raises
        ------
        InvalidSchemaError
            If *schema* is not a well-formed boolean tree.
        """
        manager = cls(PermissionTree.from_structure(schema, max_depth=max_depth), max_depth)
        manager._log_loaded("Loaded")
        return manager

    @classmethod
    def from_actions(
        cls, actions: Iterable[str], max_depth: int = MAX_DEPTH
    ) -> PermissionManager:
        """Build a manager whose schema is a flat set of dotted actions.

        Raises
        ------
        InvalidSchemaError
            If a path is malformed or two paths conflict.
        """
        try:
            reference = PermissionTree.from_actions(actions, max_depth=max_depth)
        except ShapeMismatchError as exc:
            raise InvalidSchemaError(str(exc), exc.path) from exc
        manager = cls(reference, max_depth)
        manager._log_loaded("Loaded")
        return manager

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def manager_id(self) -> uuid.UUID:
        """Identifier stamped on every set this manager derives."""
        return self._id

    @property
    def reference(self) -> PermissionTree:
        return self._reference

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def actions(self) -> frozenset[str]:
        """Every action the reference schema grants."""
        return frozenset(self._reference.flatten())

    def knows_action(self, action: str) -> bool:
        """Return True if *action* names a leaf of the reference, granted or not."""
        return isinstance(self._reference.lookup(action), bool)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reload(self, schema: object) -> None:
        """Replace the reference schema wholesale.

        The manager id is rotated: sets derived before the reload belong to
        the old schema and will no longer validate or combine with new ones.
        If *schema* is invalid the current reference is kept.

        Raises
        ------
        InvalidSchemaError
            If *schema* is not a well-formed boolean tree.
        """
        reference = PermissionTree.from_structure(schema, max_depth=self._max_depth)
        self._reference = reference
        self._id = uuid.uuid4()
        self._log_loaded("Reloaded")

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def perm_from_structure(
        self, subset: object, name: str | None = None
    ) -> PermissionSet:
        """Derive a PermissionSet from a subset-shaped nested mapping.

        ``False`` leaves are accepted as explicit denials.

        Raises
        ------
        InvalidSchemaError
            If *subset* is not a well-formed boolean tree.
        UnknownActionError
            If a path in *subset* does not exist in the reference.
        ShapeMismatchError
            If *subset* and the reference disagree on branch-vs-leaf kind.
        """
        tree = PermissionTree.from_structure(subset, max_depth=self._max_depth)
        tree.conform_to(self._reference)
        logger.debug("Derived permission set %s from structure", name or "<unnamed>")
        return PermissionSet(tree, name=name, manager_id=self._id)

    def perm_from_actions(
        self, actions: Iterable[str], name: str | None = None
    ) -> PermissionSet:
        """Derive a PermissionSet granting exactly the given dotted actions.

        Raises
        ------
        UnknownActionError
            If any path is absent from, or shape-incompatible with, the
            reference.
        """
        try:
            tree = PermissionTree.from_actions(
                actions, reference=self._reference, max_depth=self._max_depth
            )
        except UnknownActionError:
            raise
        except ShapeMismatchError as exc:
            raise UnknownActionError(exc.path, str(exc)) from exc
        logger.debug(
            "Derived permission set %s from %d actions",
            name or "<unnamed>",
            sum(1 for _ in tree.flatten()),
        )
        return PermissionSet(tree, name=name, manager_id=self._id)

    def get_universe(self) -> PermissionSet:
        """Return the reference schema itself as a managed set."""
        return PermissionSet(self._reference, name=UNIVERSE_NAME, manager_id=self._id)

    def validate(self, perm: PermissionSet) -> bool:
        """Return True if *perm* was derived here and follows the schema's shape."""
        if perm.manager_id != self._id:
            return False
        try:
            perm.tree.conform_to(self._reference)
        except ShapeMismatchError:
            return False
        return True

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _log_loaded(self, verb: str) -> None:
        logger.info(
            "%s reference schema with %d granted actions (manager_id=%s)",
            verb,
            sum(1 for _ in self._reference.flatten()),
            self._id,
        )

    def __repr__(self) -> str:
        return f"PermissionManager(manager_id={self._id}, actions={len(self.actions)})"
