"""Text loader for serialized permission structures.

StructureLoader turns JSON or YAML text into the nested mappings that
:class:`~permtree.manager.PermissionManager` consumes. It is the parse
layer: syntax errors surface here as :class:`StructureParseError` and never
reach the tree code.

Python dicts cannot hold duplicate keys, so duplicates are caught while
parsing. Both the JSON decoder and the YAML loader first build mappings as
lists of pairs, which are then converted with a duplicate check that
reports the full dotted path.

YAML 1.1 resolves the bare scalars ``yes``, ``no``, ``on`` and ``off`` to
booleans. Values keep that reading (``view: yes`` is a granted leaf), but a
mapping key such as ``on`` stays the string ``"on"`` so it can name an
action. Other non-string keys (``1:``, ``null:``) are rejected.

Nesting is bounded by :data:`MAX_NESTING`. A document too deep for the
JSON or YAML parser itself is reported as a :class:`StructureParseError`.

Example
-------
::

    loader = StructureLoader()
    schema = loader.load_yaml('''
    post:
      create: true
      comment:
        delete: true
    ''')
    manager = PermissionManager.from_reference(schema)
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

import yaml

from permtree.errors import InvalidSchemaError, StructureParseError
from permtree.tree.node import join_path

logger = logging.getLogger(__name__)

_JSON_SUFFIXES: frozenset[str] = frozenset([".json"])

# Mapping and list levels accepted from text, root included. Workspace files
# wrap a schema in extra levels, so this sits well above MAX_DEPTH.
MAX_NESTING: int = 100

_BOOL_TAG = "tag:yaml.org,2002:bool"


class _Pairs(list):  # type: ignore[type-arg]
    """A mapping captured as an ordered list of (key, value) pairs."""


class _PairsLoader(yaml.SafeLoader):
    """SafeLoader variant that keeps duplicate mapping keys visible."""


def _construct_key(loader: yaml.SafeLoader, node: yaml.Node) -> object:
    if isinstance(node, yaml.ScalarNode) and node.tag == _BOOL_TAG:
        return node.value
    return loader.construct_object(node, deep=True)


def _construct_pairs(loader: yaml.SafeLoader, node: yaml.MappingNode) -> _Pairs:
    loader.flatten_mapping(node)
    return _Pairs(
        (
            _construct_key(loader, key_node),
            loader.construct_object(value_node, deep=True),
        )
        for key_node, value_node in node.value
    )


_PairsLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_pairs
)


class StructureLoader:
    """Loads nested permission structures from JSON or YAML.

    Parameters
    ----------
    max_nesting:
        Maximum mapping/list nesting accepted, root included.

    Examples
    --------
    ::

        loader = StructureLoader()
        loader.load_json('{"post": {"create": true}}')
        # {'post': {'create': True}}
    """

    def __init__(self, max_nesting: int = MAX_NESTING) -> None:
        self._max_nesting = max_nesting

    def load(self, path: str | Path) -> dict[str, object]:
        """Load a structure from a file; ``.json`` files are read as JSON,
        anything else as YAML.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        StructureParseError
            If the file content is not valid JSON/YAML.
        InvalidSchemaError
            If a mapping contains duplicate keys, the root is not a mapping,
            or nesting exceeds the loader's bound.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Permission structure not found: {path}")
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in _JSON_SUFFIXES:
            return self.load_json(text, source=str(path))
        return self.load_yaml(text, source=str(path))

    def load_json(self, text: str, source: str | None = None) -> dict[str, object]:
        """Parse a JSON document into a nested structure."""
        try:
            raw = json.loads(text, object_pairs_hook=_Pairs)
        except json.JSONDecodeError as exc:
            raise StructureParseError(f"Failed to parse JSON: {exc}", source) from exc
        except RecursionError as exc:
            raise StructureParseError(
                "Failed to parse JSON: document is nested too deeply.", source
            ) from exc
        return self._finish(raw, source)

    def load_yaml(self, text: str, source: str | None = None) -> dict[str, object]:
        """Parse a YAML document into a nested structure.

        An empty document yields an empty structure.
        """
        try:
            raw = yaml.load(text, Loader=_PairsLoader)  # noqa: S506 - SafeLoader subclass
        except yaml.YAMLError as exc:
            raise StructureParseError(f"Failed to parse YAML: {exc}", source) from exc
        except RecursionError as exc:
            raise StructureParseError(
                "Failed to parse YAML: document is nested too deeply.", source
            ) from exc
        if raw is None:
            raw = _Pairs()
        return self._finish(raw, source)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _finish(self, raw: object, source: str | None) -> dict[str, object]:
        if not isinstance(raw, _Pairs):
            raise InvalidSchemaError(
                f"the root must be a mapping; got {type(raw).__name__}."
            )
        structure = _to_mapping(raw, "", 1, self._max_nesting)
        logger.debug("Parsed permission structure from %s", source or "<string>")
        return structure


def _to_mapping(
    pairs: Iterable[tuple[object, object]], path: str, depth: int, max_nesting: int
) -> dict[str, object]:
    if depth > max_nesting:
        raise InvalidSchemaError(
            f"nesting exceeds the maximum depth of {max_nesting}.", path
        )
    result: dict[str, object] = {}
    for key, value in pairs:
        if not isinstance(key, str):
            raise InvalidSchemaError(
                f"keys must be strings; got {type(key).__name__} {key!r}.", path
            )
        child_path = join_path(path, key)
        if key in result:
            raise InvalidSchemaError("duplicate key.", child_path)
        result[key] = _convert(value, child_path, depth, max_nesting)
    return result


def _convert(value: object, path: str, depth: int, max_nesting: int) -> object:
    if isinstance(value, _Pairs):
        return _to_mapping(value, path, depth + 1, max_nesting)
    if isinstance(value, list):
        if depth + 1 > max_nesting:
            raise InvalidSchemaError(
                f"nesting exceeds the maximum depth of {max_nesting}.", path
            )
        return [_convert(item, path, depth + 1, max_nesting) for item in value]
    return value
