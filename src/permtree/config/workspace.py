"""Workspace configuration loader with Pydantic v2 validation.

A workspace file bundles a reference schema with the named permission sets
derived from it (one per role, user, API key...)::

    version: "1"
    max_depth: 20
    schema:
      post:
        create: true
        edit: true
        view: true
    sets:
      editor:
        structure:
          post: {create: true, edit: true}
      viewer:
        actions: [post.view]

``schema_file`` may replace the inline ``schema``; relative paths are
resolved against the workspace file's directory.

Example
-------
>>> workspace = WorkspaceLoader().load(Path("permtree.yaml"))
>>> workspace.get_set("viewer").contains_action("post.view")
True
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from permtree.errors import PermissionTreeError, WorkspaceConfigError
from permtree.loader.structure_loader import StructureLoader
from permtree.manager.permission_manager import PermissionManager
from permtree.manager.permission_set import PermissionSet
from permtree.tree.node import MAX_DEPTH

logger = logging.getLogger(__name__)

_SUPPORTED_VERSIONS: frozenset[str] = frozenset(["1", "1.0"])

DEFAULT_WORKSPACE = Path("permtree.yaml")


# ---------------------------------------------------------------------------
# Schema models
# ---------------------------------------------------------------------------


class SetDefinition(BaseModel):
    """One named permission set: either a nested structure or a list of actions."""

    model_config = {"extra": "forbid"}

    structure: dict[str, Any] | None = Field(default=None)
    actions: list[str] | None = Field(default=None)
    description: str | None = Field(default=None)

    @model_validator(mode="after")
    def exactly_one_source(self) -> SetDefinition:
        if (self.structure is None) == (self.actions is None):
            raise ValueError("a set needs exactly one of 'structure' or 'actions'")
        return self


class WorkspaceConfig(BaseModel):
    """Top-level workspace configuration schema."""

    model_config = {"extra": "allow", "populate_by_name": True}

    version: str = Field(default="1")
    max_depth: int = Field(default=MAX_DEPTH, ge=1)
    reference: dict[str, Any] | None = Field(default=None, alias="schema")
    reference_file: Path | None = Field(default=None, alias="schema_file")
    sets: dict[str, SetDefinition] = Field(default_factory=dict)

    @field_validator("version", mode="before")
    @classmethod
    def validate_version(cls, value: object) -> str:
        version = str(value)
        if version not in _SUPPORTED_VERSIONS:
            raise ValueError(
                f"Unsupported config version {version!r}. "
                f"Supported: {sorted(_SUPPORTED_VERSIONS)}."
            )
        return version

    @model_validator(mode="after")
    def exactly_one_schema(self) -> WorkspaceConfig:
        if (self.reference is None) == (self.reference_file is None):
            raise ValueError("a workspace needs exactly one of 'schema' or 'schema_file'")
        return self


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


@dataclass
class Workspace:
    """A loaded manager together with its named permission sets."""

    manager: PermissionManager
    sets: dict[str, PermissionSet] = field(default_factory=dict)
    config_path: Path | None = None

    def get_set(self, name: str) -> PermissionSet:
        """Return the set called *name*.

        Raises
        ------
        KeyError
            If no such set is defined.
        """
        try:
            return self.sets[name]
        except KeyError:
            raise KeyError(
                f"Unknown permission set {name!r}. Defined: {sorted(self.sets)}."
            ) from None


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


class WorkspaceLoader:
    """Loads and validates workspace YAML files into :class:`Workspace` objects.

    Parameters
    ----------
    structure_loader:
        Parser used for the workspace file and any ``schema_file``.
    """

    def __init__(self, structure_loader: StructureLoader | None = None) -> None:
        self._structures = structure_loader or StructureLoader()

    def load(self, config_path: str | Path) -> Workspace:
        """Load a workspace file from disk.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        WorkspaceConfigError
            If the file cannot be parsed, fails validation, or defines a
            schema or set that cannot be built.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Workspace config not found: {config_path}")
        text = config_path.read_text(encoding="utf-8")
        workspace = self.load_string(
            text, base_dir=config_path.parent, config_path=str(config_path)
        )
        workspace.config_path = config_path
        return workspace

    def load_string(
        self,
        yaml_content: str,
        base_dir: Path | None = None,
        config_path: str | None = None,
    ) -> Workspace:
        """Load a workspace from YAML text."""
        try:
            raw = self._structures.load_yaml(yaml_content, source=config_path)
        except PermissionTreeError as exc:
            raise WorkspaceConfigError(str(exc), config_path) from exc
        return self.load_from_dict(raw, base_dir=base_dir, config_path=config_path)

    def load_from_dict(
        self,
        raw: dict[str, object],
        base_dir: Path | None = None,
        config_path: str | None = None,
    ) -> Workspace:
        """Validate an already-parsed config dictionary and build it."""
        try:
            config = WorkspaceConfig.model_validate(raw)
        except ValidationError as exc:
            raise WorkspaceConfigError(f"Invalid workspace config: {exc}", config_path) from exc
        return self.build(config, base_dir=base_dir, config_path=config_path)

    def build(
        self,
        config: WorkspaceConfig,
        base_dir: Path | None = None,
        config_path: str | None = None,
    ) -> Workspace:
        """Build the manager and every named set described by *config*."""
        manager = self._build_manager(config, base_dir, config_path)

        sets: dict[str, PermissionSet] = {}
        for name, definition in config.sets.items():
            try:
                if definition.structure is not None:
                    perm = manager.perm_from_structure(definition.structure, name=name)
                else:
                    perm = manager.perm_from_actions(definition.actions or [], name=name)
            except PermissionTreeError as exc:
                raise WorkspaceConfigError(
                    f"Error in permission set {name!r}: {exc}", config_path
                ) from exc
            sets[name] = perm

        logger.info(
            "Loaded workspace %s with %d permission sets",
            config_path or "<dict>",
            len(sets),
        )
        return Workspace(manager=manager, sets=sets)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_manager(
        self,
        config: WorkspaceConfig,
        base_dir: Path | None,
        config_path: str | None,
    ) -> PermissionManager:
        try:
            if config.reference_file is not None:
                schema_path = config.reference_file
                if not schema_path.is_absolute() and base_dir is not None:
                    schema_path = base_dir / schema_path
                schema: object = self._structures.load(schema_path)
            else:
                schema = config.reference
            return PermissionManager.from_reference(schema, max_depth=config.max_depth)
        except FileNotFoundError as exc:
            raise WorkspaceConfigError(str(exc), config_path) from exc
        except PermissionTreeError as exc:
            raise WorkspaceConfigError(f"Error in schema: {exc}", config_path) from exc
