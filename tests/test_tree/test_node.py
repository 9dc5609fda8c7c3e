"""Tests for permission nodes and structure parsing."""
from __future__ import annotations

import pytest

from permtree.errors import InvalidSchemaError
from permtree.tree.node import (
    MAX_DEPTH,
    Branch,
    Leaf,
    join_path,
    parse_structure,
    validate_name,
)


def _nested(depth: int) -> dict[str, object]:
    """Return a structure with *depth* mapping levels, root included."""
    structure: dict[str, object] = {"action": True}
    for _ in range(depth - 1):
        structure = {"group": structure}
    return structure


# ---------------------------------------------------------------------------
# Leaf / Branch
# ---------------------------------------------------------------------------


class TestLeaf:
    def test_to_structure_returns_bool(self) -> None:
        assert Leaf(True).to_structure() is True
        assert Leaf(False).to_structure() is False

    def test_frozen(self) -> None:
        leaf = Leaf(True)
        with pytest.raises((AttributeError, TypeError)):
            leaf.granted = False  # type: ignore[misc]

    def test_equality(self) -> None:
        assert Leaf(True) == Leaf(True)
        assert Leaf(True) != Leaf(False)


class TestBranch:
    def test_children_sorted_by_name(self) -> None:
        branch = Branch({"view": Leaf(True), "create": Leaf(True), "edit": Leaf(False)})
        assert list(branch) == ["create", "edit", "view"]

    def test_children_read_only(self) -> None:
        branch = Branch({"view": Leaf(True)})
        with pytest.raises(TypeError):
            branch.children["edit"] = Leaf(True)  # type: ignore[index]

    def test_source_dict_not_shared(self) -> None:
        source = {"view": Leaf(True)}
        branch = Branch(source)
        source["edit"] = Leaf(True)
        assert branch.child("edit") is None

    def test_equality_ignores_insertion_order(self) -> None:
        a = Branch({"a": Leaf(True), "b": Leaf(False)})
        b = Branch({"b": Leaf(False), "a": Leaf(True)})
        assert a == b
        assert hash(a) == hash(b)

    def test_child_missing_returns_none(self) -> None:
        assert Branch().child("anything") is None

    def test_len(self) -> None:
        assert len(Branch({"a": Leaf(True), "b": Branch()})) == 2

    def test_to_structure_nested(self) -> None:
        branch = Branch({"post": Branch({"edit": Leaf(False), "create": Leaf(True)})})
        assert branch.to_structure() == {"post": {"create": True, "edit": False}}


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


class TestPaths:
    def test_join_path_empty_prefix(self) -> None:
        assert join_path("", "post") == "post"

    def test_join_path_with_prefix(self) -> None:
        assert join_path("post.comment", "delete") == "post.comment.delete"

    def test_validate_name_accepts_plain(self) -> None:
        assert validate_name("delete", "post") == "delete"

    def test_validate_name_rejects_separator(self) -> None:
        with pytest.raises(InvalidSchemaError, match="separator"):
            validate_name("a.b", "")

    def test_validate_name_rejects_empty(self) -> None:
        with pytest.raises(InvalidSchemaError, match="empty"):
            validate_name("", "post")

    def test_validate_name_rejects_non_string(self) -> None:
        with pytest.raises(InvalidSchemaError, match="strings"):
            validate_name(1, "")


# ---------------------------------------------------------------------------
# parse_structure
# ---------------------------------------------------------------------------


class TestParseStructure:
    def test_parses_leaves_and_branches(self) -> None:
        root = parse_structure({"post": {"create": True, "edit": False}, "login": True})
        assert root.child("login") == Leaf(True)
        post = root.child("post")
        assert isinstance(post, Branch)
        assert post.child("edit") == Leaf(False)

    def test_empty_mapping_is_empty_branch(self) -> None:
        assert parse_structure({}) == Branch()

    def test_empty_nested_branch_kept(self) -> None:
        root = parse_structure({"post": {}})
        assert root.child("post") == Branch()

    def test_root_must_be_mapping(self) -> None:
        with pytest.raises(InvalidSchemaError, match="root"):
            parse_structure([{"post": True}])

    def test_root_bool_rejected(self) -> None:
        with pytest.raises(InvalidSchemaError):
            parse_structure(True)

    def test_null_rejected_with_path(self) -> None:
        with pytest.raises(InvalidSchemaError, match="null") as exc_info:
            parse_structure({"post": {"create": None}})
        assert exc_info.value.path == "post.create"

    def test_integer_leaf_rejected(self) -> None:
        with pytest.raises(InvalidSchemaError, match="boolean"):
            parse_structure({"post": 1})

    def test_string_leaf_rejected(self) -> None:
        with pytest.raises(InvalidSchemaError):
            parse_structure({"post": "true"})

    def test_array_rejected(self) -> None:
        with pytest.raises(InvalidSchemaError, match="arrays"):
            parse_structure({"post": ["create"]})

    def test_key_with_separator_rejected(self) -> None:
        with pytest.raises(InvalidSchemaError, match="separator") as exc_info:
            parse_structure({"post": {"comment.delete": True}})
        assert exc_info.value.path == "post"

    def test_max_depth_accepted(self) -> None:
        root = parse_structure(_nested(MAX_DEPTH))
        assert isinstance(root, Branch)

    def test_beyond_max_depth_rejected(self) -> None:
        with pytest.raises(InvalidSchemaError, match="depth"):
            parse_structure(_nested(MAX_DEPTH + 1))

    def test_custom_max_depth(self) -> None:
        parse_structure({"a": {"b": True}}, max_depth=2)
        with pytest.raises(InvalidSchemaError):
            parse_structure({"a": {"b": {"c": True}}}, max_depth=2)
