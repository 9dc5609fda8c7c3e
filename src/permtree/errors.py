"""Exception hierarchy for permtree.

Every error raised by the library derives from :class:`PermissionTreeError`,
itself a ``ValueError``, so callers can catch the whole family at once or
pick out a specific failure.

::

    PermissionTreeError
    ├── InvalidSchemaError
    ├── ShapeMismatchError
    │   └── UnknownActionError
    ├── ManagerMismatchError
    ├── StructureParseError
    └── WorkspaceConfigError
"""
from __future__ import annotations


class PermissionTreeError(ValueError):
    """Base class for all permtree errors."""


class InvalidSchemaError(PermissionTreeError):
    """Raised when a permission structure is not a well-formed boolean tree.

    Attributes
    ----------
    path:
        Dotted path of the offending node, or ``""`` for the root.
    """

    def __init__(self, message: str, path: str = "") -> None:
        self.path = path
        location = f" at '{path}'" if path else ""
        super().__init__(f"Invalid permission structure{location}: {message}")


class ShapeMismatchError(PermissionTreeError):
    """Raised when a tree disagrees with the reference on branch-vs-leaf kind.

    Attributes
    ----------
    path:
        Dotted path at which the two shapes disagree.
    """

    def __init__(self, path: str, message: str | None = None) -> None:
        self.path = path
        super().__init__(
            message or f"Shape mismatch at '{path}': branch and leaf disagree."
        )


class UnknownActionError(ShapeMismatchError):
    """Raised when a path does not exist anywhere in the reference schema."""

    def __init__(self, path: str, message: str | None = None) -> None:
        super().__init__(
            path, message or f"Unknown action '{path}': not defined in the reference schema."
        )


class ManagerMismatchError(PermissionTreeError):
    """Raised when permission sets tied to different managers are combined."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Permission sets in '{operation}' operation do not have the same manager."
        )


class StructureParseError(PermissionTreeError):
    """Raised when serialized permission text cannot be parsed.

    Attributes
    ----------
    source:
        The file path or identifier of the text, if known.
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        prefix = f"[{source}] " if source else ""
        super().__init__(f"{prefix}{message}")


class WorkspaceConfigError(PermissionTreeError):
    """Raised when a workspace configuration file is malformed or invalid.

    Attributes
    ----------
    config_path:
        The path to the config file that caused the error, if known.
    """

    def __init__(self, message: str, config_path: str | None = None) -> None:
        self.config_path = config_path
        prefix = f"[{config_path}] " if config_path else ""
        super().__init__(f"{prefix}{message}")
