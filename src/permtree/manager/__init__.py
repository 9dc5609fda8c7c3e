"""Schema authority and the public permission-set value type.

Example
-------
::

    from permtree.manager import PermissionManager

    manager = PermissionManager.from_reference({"post": {"create": True, "edit": True}})
    author = manager.perm_from_actions({"post.create"})
    assert author.contains_action("post.create")
"""
from __future__ import annotations

from permtree.manager.permission_manager import PermissionManager
from permtree.manager.permission_set import PermissionSet

__all__ = [
    "PermissionManager",
    "PermissionSet",
]
