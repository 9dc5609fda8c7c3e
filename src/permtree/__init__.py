"""permtree: hierarchical permission sets with a set algebra.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import permtree
>>> permtree.__version__
'0.1.0'
>>> manager = permtree.PermissionManager.from_reference(
...     {"post": {"create": True, "edit": True}}
... )
>>> author = manager.perm_from_actions({"post.create"})
>>> author.contains_action("post.edit")
False
"""
from __future__ import annotations

__version__: str = "0.1.0"

from permtree.convenience import PermissionGuard

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
from permtree.errors import (
    InvalidSchemaError,
    ManagerMismatchError,
    PermissionTreeError,
    ShapeMismatchError,
    StructureParseError,
    UnknownActionError,
    WorkspaceConfigError,
)

# ---------------------------------------------------------------------------
# Tree
# ---------------------------------------------------------------------------
from permtree.tree.node import Branch, Leaf, PermissionNode
from permtree.tree.permission_tree import MergePolicy, PermissionTree

# ---------------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------------
from permtree.manager.permission_manager import PermissionManager
from permtree.manager.permission_set import PermissionSet

# ---------------------------------------------------------------------------
# Loading & configuration
# ---------------------------------------------------------------------------
from permtree.loader.structure_loader import StructureLoader
from permtree.config.workspace import Workspace, WorkspaceConfig, WorkspaceLoader

__all__ = [
    "__version__",
    "PermissionGuard",
    # Errors
    "InvalidSchemaError",
    "ManagerMismatchError",
    "PermissionTreeError",
    "ShapeMismatchError",
    "StructureParseError",
    "UnknownActionError",
    "WorkspaceConfigError",
    # Tree
    "Branch",
    "Leaf",
    "MergePolicy",
    "PermissionNode",
    "PermissionTree",
    # Manager
    "PermissionManager",
    "PermissionSet",
    # Loading & configuration
    "StructureLoader",
    "Workspace",
    "WorkspaceConfig",
    "WorkspaceLoader",
]
