"""Maven pom.xml document tree: loading, navigation and primitive edits."""

from pomhoist.pom.document import PomDocument
from pomhoist.pom.edits import (
    add_managed_dependency,
    add_property,
    apply_edits,
    manage_dependency,
    remove_property,
)
from pomhoist.pom.loader import load_project

__all__ = [
    "PomDocument",
    "add_managed_dependency",
    "add_property",
    "apply_edits",
    "load_project",
    "manage_dependency",
    "remove_property",
]
