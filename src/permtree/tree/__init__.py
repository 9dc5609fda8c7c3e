"""Permission tree representation and traversal primitives.

Example
-------
::

    from permtree.tree import MergePolicy, PermissionTree

    left = PermissionTree.from_structure({"post": {"create": True}})
    right = PermissionTree.from_structure({"post": {"edit": True}})
    merged = left.merge(right, MergePolicy.UNION)
    assert sorted(merged.flatten()) == ["post.create", "post.edit"]
"""
from __future__ import annotations

from permtree.tree.node import (
    MAX_DEPTH,
    SEPARATOR,
    Branch,
    Leaf,
    PermissionNode,
    parse_structure,
)
from permtree.tree.permission_tree import MergePolicy, PermissionTree, split_action

__all__ = [
    # Nodes
    "Branch",
    "Leaf",
    "PermissionNode",
    "parse_structure",
    "MAX_DEPTH",
    "SEPARATOR",
    # Tree
    "MergePolicy",
    "PermissionTree",
    "split_action",
]
