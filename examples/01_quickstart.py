#!/usr/bin/env python3
"""Example: permtree quickstart

Minimal working example: define a reference schema, derive role permission
sets, and combine them.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install permtree
"""
from __future__ import annotations

import permtree


def main() -> None:
    print(f"permtree version: {permtree.__version__}")

    # Step 1: Define every action that exists
    manager = permtree.PermissionManager.from_reference({
        "post": {
            "create": True,
            "view": True,
            "edit": True,
            "comment": {"create": True, "delete": True},
        },
        "user": {"view": True, "ban": True},
    })
    print(f"Schema ready: {len(manager.actions)} actions")

    # Step 2: Derive role permission sets
    author = manager.perm_from_actions({"post.create", "post.view", "post.edit"}, name="author")
    moderator = manager.perm_from_structure(
        {"post": {"view": True, "comment": {"delete": True}}, "user": {"ban": True}},
        name="moderator",
    )

    # Step 3: Combine them
    staff = author | moderator
    print(f"Staff actions:        {sorted(staff.get_actions())}")
    print(f"Shared actions:       {sorted((author & moderator).get_actions())}")
    print(f"Author-only actions:  {sorted((author - moderator).get_actions())}")
    print(f"Staff covers author?  {staff.contains(author)}")
    print(f"Author may ban users? {author.contains_action('user.ban')}")

    # Step 4: Serialize for storage
    print(staff.to_json(indent=2))

    # Step 5: Unknown actions are rejected
    try:
        manager.perm_from_actions({"post.archive"})
    except permtree.UnknownActionError as exc:
        print(f"Rejected: {exc}")


if __name__ == "__main__":
    main()
