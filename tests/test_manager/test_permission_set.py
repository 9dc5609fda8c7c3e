"""Tests for the PermissionSet algebra and serialization surface."""
from __future__ import annotations

import json

import pytest
import yaml

from permtree.errors import ManagerMismatchError
from permtree.manager.permission_manager import PermissionManager
from permtree.manager.permission_set import PermissionSet

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

_SCHEMA: dict[str, object] = {
    "building": {
        "create": True,
        "view": True,
        "edit": True,
        "delete": True,
        "meter": {"create": True, "view": True},
    },
    "user": {"create": True, "view": True, "edit": True, "delete": True},
}


@pytest.fixture()
def manager() -> PermissionManager:
    return PermissionManager.from_reference(_SCHEMA)


@pytest.fixture()
def builder(manager: PermissionManager) -> PermissionSet:
    return manager.perm_from_actions(
        {"building.create", "building.view", "building.edit"}, name="builder"
    )


@pytest.fixture()
def demolisher(manager: PermissionManager) -> PermissionSet:
    return manager.perm_from_actions({"building.edit", "building.delete"}, name="demolisher")


@pytest.fixture()
def editor(manager: PermissionManager) -> PermissionSet:
    return manager.perm_from_actions({"building.edit"})


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestContainsAction:
    def test_granted(self, builder: PermissionSet) -> None:
        assert builder.contains_action("building.edit")

    def test_not_granted(self, builder: PermissionSet) -> None:
        assert not builder.contains_action("building.delete")

    def test_unknown_path(self, builder: PermissionSet) -> None:
        assert not builder.contains_action("building.archive")

    def test_branch_path(self, builder: PermissionSet) -> None:
        assert not builder.contains_action("building")

    def test_explicit_denial(self, manager: PermissionManager) -> None:
        perm = manager.perm_from_structure({"user": {"delete": False}})
        assert not perm.contains_action("user.delete")

    def test_in_operator(self, builder: PermissionSet) -> None:
        assert "building.view" in builder
        assert "building.delete" not in builder
        assert 42 not in builder


class TestContains:
    def test_superset(self, builder: PermissionSet, editor: PermissionSet) -> None:
        assert builder.contains(editor)
        assert builder >= editor
        assert editor <= builder

    def test_overlapping_sets(self, builder: PermissionSet, demolisher: PermissionSet) -> None:
        assert not builder.contains(demolisher)

    def test_subset_does_not_contain_superset(
        self, builder: PermissionSet, editor: PermissionSet
    ) -> None:
        assert not editor.contains(builder)

    def test_contains_self(self, builder: PermissionSet) -> None:
        assert builder.contains(builder)


class TestGetActions:
    def test_returns_frozenset(self, builder: PermissionSet) -> None:
        actions = builder.get_actions()
        assert isinstance(actions, frozenset)
        assert actions == frozenset({"building.create", "building.view", "building.edit"})

    def test_len_and_iteration_sorted(self, builder: PermissionSet) -> None:
        assert len(builder) == 3
        assert list(builder) == ["building.create", "building.edit", "building.view"]


# ---------------------------------------------------------------------------
# Algebra
# ---------------------------------------------------------------------------


class TestUnion:
    def test_union(self, builder: PermissionSet, demolisher: PermissionSet) -> None:
        result = builder.union(demolisher)
        assert result.get_actions() == frozenset(
            {"building.create", "building.view", "building.edit", "building.delete"}
        )

    def test_operator(self, builder: PermissionSet, demolisher: PermissionSet) -> None:
        assert (builder | demolisher) == builder.union(demolisher)

    def test_result_is_unnamed_and_managed(
        self, manager: PermissionManager, builder: PermissionSet, demolisher: PermissionSet
    ) -> None:
        result = builder.union(demolisher)
        assert result.name is None
        assert result.manager_id == manager.manager_id

    def test_operands_unchanged(self, builder: PermissionSet, demolisher: PermissionSet) -> None:
        before = (builder.to_structure(), demolisher.to_structure())
        builder.union(demolisher)
        assert (builder.to_structure(), demolisher.to_structure()) == before

    def test_adding_nested_action_to_admin(self, manager: PermissionManager) -> None:
        admin = manager.perm_from_actions({"user.create", "user.delete", "building.view"})
        result = admin.union(manager.perm_from_actions({"building.meter.create"}))
        assert result.get_actions() == admin.get_actions() | {"building.meter.create"}


class TestIntersection:
    def test_intersection(self, builder: PermissionSet, demolisher: PermissionSet) -> None:
        assert builder.intersection(demolisher).get_actions() == frozenset({"building.edit"})

    def test_operator(self, builder: PermissionSet, demolisher: PermissionSet) -> None:
        assert (builder & demolisher) == builder.intersection(demolisher)

    def test_disjoint(self, manager: PermissionManager, builder: PermissionSet) -> None:
        users = manager.perm_from_actions({"user.view"})
        assert builder.intersection(users).get_actions() == frozenset()

    def test_granted_and_denied(self, manager: PermissionManager) -> None:
        granted = manager.perm_from_structure({"user": {"view": True}})
        denied = manager.perm_from_structure({"user": {"view": False}})
        assert not granted.intersection(denied).contains_action("user.view")


class TestDifference:
    def test_difference(self, builder: PermissionSet, demolisher: PermissionSet) -> None:
        assert builder.difference(demolisher).get_actions() == frozenset(
            {"building.create", "building.view"}
        )

    def test_not_commutative(self, builder: PermissionSet, demolisher: PermissionSet) -> None:
        assert demolisher.difference(builder).get_actions() == frozenset({"building.delete"})

    def test_operator(self, builder: PermissionSet, demolisher: PermissionSet) -> None:
        assert (builder - demolisher) == builder.difference(demolisher)

    def test_minus_self_is_empty(self, builder: PermissionSet) -> None:
        assert builder.difference(builder).get_actions() == frozenset()


# ---------------------------------------------------------------------------
# Managers
# ---------------------------------------------------------------------------


class TestManagers:
    def test_is_managed(self, builder: PermissionSet) -> None:
        assert builder.is_managed()
        assert not PermissionSet.from_actions({"view"}).is_managed()

    def test_has_same_manager(self, manager: PermissionManager, builder: PermissionSet) -> None:
        other = PermissionManager.from_reference(_SCHEMA)
        assert builder.has_same_manager(manager.perm_from_actions({"user.view"}))
        assert not builder.has_same_manager(other.perm_from_actions({"user.view"}))
        assert not builder.has_same_manager(PermissionSet.from_actions({"user.view"}))

    def test_mixing_managers_raises(self, builder: PermissionSet) -> None:
        other = PermissionManager.from_reference(_SCHEMA).perm_from_actions({"user.view"})
        with pytest.raises(ManagerMismatchError, match="union"):
            builder.union(other)
        with pytest.raises(ManagerMismatchError, match="contains"):
            builder.contains(other)

    def test_mixing_managed_and_unmanaged_raises(self, builder: PermissionSet) -> None:
        with pytest.raises(ManagerMismatchError):
            builder.difference(PermissionSet.from_actions({"building.view"}))

    def test_unmanaged_sets_combine(self) -> None:
        a = PermissionSet.from_actions({"create", "view"})
        b = PermissionSet.from_structure({"view": True, "edit": True})
        assert (a | b).get_actions() == frozenset({"create", "view", "edit"})
        assert not (a | b).is_managed()

    def test_non_set_operand(self, builder: PermissionSet) -> None:
        with pytest.raises(TypeError):
            builder.union({"building.view"})  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            builder | {"building.view"}  # type: ignore[operator]


# ---------------------------------------------------------------------------
# Equality / naming
# ---------------------------------------------------------------------------


class TestEquality:
    def test_name_not_part_of_equality(self, builder: PermissionSet) -> None:
        assert builder.with_name("other") == builder
        assert builder.with_name("other").name == "other"

    def test_denied_leaf_differs_from_absence(self, manager: PermissionManager) -> None:
        denied = manager.perm_from_structure({"user": {"view": False}})
        empty = manager.perm_from_structure({})
        assert denied != empty
        assert denied.get_actions() == empty.get_actions()

    def test_same_tree_other_manager_not_equal(self, builder: PermissionSet) -> None:
        other = PermissionManager.from_reference(_SCHEMA).perm_from_actions(
            builder.get_actions()
        )
        assert builder != other

    def test_hashable(self, builder: PermissionSet) -> None:
        assert len({builder, builder.with_name("copy")}) == 1

    def test_repr(self, builder: PermissionSet) -> None:
        assert "builder" in repr(builder)
        assert "building.edit" in repr(builder)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


class TestSerialization:
    def test_to_structure(self, builder: PermissionSet) -> None:
        assert builder.to_structure() == {
            "building": {"create": True, "edit": True, "view": True}
        }

    def test_to_json(self, builder: PermissionSet) -> None:
        assert json.loads(builder.to_json()) == builder.to_structure()

    def test_to_json_indent(self, builder: PermissionSet) -> None:
        assert "\n" in builder.to_json(indent=2)

    def test_to_yaml(self, builder: PermissionSet) -> None:
        assert yaml.safe_load(builder.to_yaml()) == builder.to_structure()

    def test_structure_round_trip(
        self, manager: PermissionManager, builder: PermissionSet
    ) -> None:
        assert manager.perm_from_structure(builder.to_structure()) == builder

    def test_explicit_denial_preserved(self, manager: PermissionManager) -> None:
        perm = manager.perm_from_structure({"building": {"meter": {"view": False}}})
        assert perm.to_structure() == {"building": {"meter": {"view": False}}}
