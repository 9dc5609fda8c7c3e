"""Parse layer: JSON/YAML text to nested permission structures."""
from __future__ import annotations

from permtree.loader.structure_loader import StructureLoader

__all__ = [
    "StructureLoader",
]
