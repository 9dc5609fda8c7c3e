"""Workspace configuration: a reference schema plus named permission sets.

Exports the workspace loader and its Pydantic models.
"""
from __future__ import annotations

from permtree.config.workspace import (
    DEFAULT_WORKSPACE,
    SetDefinition,
    Workspace,
    WorkspaceConfig,
    WorkspaceLoader,
)

__all__ = [
    "DEFAULT_WORKSPACE",
    "SetDefinition",
    "Workspace",
    "WorkspaceConfig",
    "WorkspaceLoader",
]
