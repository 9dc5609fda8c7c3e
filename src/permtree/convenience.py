"""Convenience API for permtree: 3-line quickstart.

Example
-------
::

    from permtree import PermissionGuard
    guard = PermissionGuard({"post": {"create": True, "edit": True}})
    author = guard.grant({"post.create"})
    print(guard.allows(author, "post.edit"))  # False

"""
from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class PermissionGuard:
    """Schema-backed permission checks for the 80% use case.

    Wraps PermissionManager so callers only deal with dotted action strings.

    Parameters
    ----------
    schema:
        Nested boolean mapping describing every action that exists.
    """

    def __init__(self, schema: dict[str, Any]) -> None:
        from permtree.manager.permission_manager import PermissionManager

        self._manager = PermissionManager.from_reference(schema)

    def grant(self, actions: Iterable[str], name: str | None = None) -> Any:
        """Derive a PermissionSet granting exactly *actions*.

        Example
        -------
        ::

            guard = PermissionGuard({"post": {"view": True}})
            viewer = guard.grant(["post.view"], name="viewer")
            assert viewer.contains_action("post.view")
        """
        return self._manager.perm_from_actions(actions, name=name)

    def allows(self, perm: Any, action: str) -> bool:
        """Return True if *perm* grants *action*."""
        return bool(perm.contains_action(action))

    @property
    def manager(self) -> Any:
        """The underlying PermissionManager instance."""
        return self._manager

    def __repr__(self) -> str:
        return f"PermissionGuard(actions={len(self._manager.actions)})"
