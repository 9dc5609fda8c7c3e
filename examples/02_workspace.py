#!/usr/bin/env python3
"""Example: permtree workspace files

Loads a schema and named permission sets from a YAML workspace file, the
same format the ``permtree`` CLI reads.

Usage:
    python examples/02_workspace.py

Requirements:
    pip install permtree
"""
from __future__ import annotations

import tempfile
import textwrap
from pathlib import Path

from permtree import WorkspaceLoader

_WORKSPACE = textwrap.dedent("""\
    version: "1"
    schema:
      building:
        view: true
        edit: true
        meter:
          create: true
      user:
        view: true
        delete: true
    sets:
      operator:
        structure:
          building:
            view: true
            meter:
              create: true
      auditor:
        actions: [building.view, user.view]
""")


def main() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "permtree.yaml"
        path.write_text(_WORKSPACE, encoding="utf-8")
        workspace = WorkspaceLoader().load(path)

    for name, perm in sorted(workspace.sets.items()):
        print(f"{name}: {sorted(perm.get_actions())}")

    operator = workspace.get_set("operator")
    auditor = workspace.get_set("auditor")
    print(f"Common to both: {sorted(operator.intersection(auditor).get_actions())}")
    print(f"Workspace sets valid: {all(workspace.manager.validate(p) for p in workspace.sets.values())}")


if __name__ == "__main__":
    main()
