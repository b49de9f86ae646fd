"""Primitive, idempotent edit operations on a :class:`PomDocument`.

Every operation returns ``True`` when it changed the tree and ``False``
when the document already satisfied it.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

import structlog

from pomhoist.models import (
    AddManagedDependency,
    AddProperty,
    Edit,
    ManageDependency,
    RemoveProperty,
)
from pomhoist.pom.document import PomDocument, local_name

log = structlog.get_logger("pomhoist.pom")

NO_VERSION_MARKER = "~~(No version provided)~~>"

# Maven's canonical ordering of top-level <project> sections.
_SECTION_ORDER = [
    "modelVersion",
    "parent",
    "groupId",
    "artifactId",
    "version",
    "packaging",
    "name",
    "description",
    "url",
    "inceptionYear",
    "organization",
    "licenses",
    "developers",
    "contributors",
    "mailingLists",
    "prerequisites",
    "modules",
    "scm",
    "issueManagement",
    "ciManagement",
    "distributionManagement",
    "properties",
    "dependencyManagement",
    "dependencies",
    "repositories",
    "pluginRepositories",
    "build",
    "reporting",
    "profiles",
]


# ── whitespace-preserving tree helpers ───────────────────────────────────


def _insert(parent: ET.Element, index: int, child: ET.Element, depth: int, unit: str) -> None:
    """Insert *child* at *index* of *parent*, which sits at *depth*."""
    children = list(parent)
    inner = "\n" + unit * (depth + 1)
    if not children:
        parent.text = inner
        child.tail = "\n" + unit * depth
        parent.append(child)
    elif index >= len(children):
        last = children[-1]
        child.tail = last.tail
        last.tail = inner
        parent.append(child)
    else:
        child.tail = inner
        parent.insert(index, child)


def _remove(parent: ET.Element, child: ET.Element) -> None:
    children = list(parent)
    position = children.index(child)
    if position == len(children) - 1:
        if position == 0:
            parent.text = None
        else:
            children[position - 1].tail = child.tail
    parent.remove(child)


def _new(doc: PomDocument, name: str, text: str | None = None) -> ET.Element:
    element = ET.Element(doc.tag(name))
    element.text = text
    return element


def _section(doc: PomDocument, name: str) -> ET.Element:
    """Return the top-level section *name*, creating it in canonical position."""
    existing = doc.find(name)
    if existing is not None:
        return existing
    rank = _SECTION_ORDER.index(name)
    index = len(list(doc.root))
    for position, child in enumerate(doc.root):
        child_name = local_name(child.tag)
        if child_name in _SECTION_ORDER and _SECTION_ORDER.index(child_name) > rank:
            index = position
            break
    section = _new(doc, name)
    _insert(doc.root, index, section, 0, doc.indent)
    return section


def _child(doc: PomDocument, parent: ET.Element, name: str, depth: int) -> ET.Element:
    existing = parent.find(doc.tag(name))
    if existing is not None:
        return existing
    element = _new(doc, name)
    _insert(parent, len(list(parent)), element, depth, doc.indent)
    return element


def _child_text(doc: PomDocument, element: ET.Element, name: str) -> str:
    found = element.find(doc.tag(name))
    return found.text.strip() if found is not None and found.text else ""


# ── operations ───────────────────────────────────────────────────────────


def add_managed_dependency(
    doc: PomDocument,
    group_id: str,
    artifact_id: str,
    version: str | None,
    scope: str | None = None,
    classifier: str | None = None,
) -> bool:
    """Ensure ``dependencyManagement`` holds an entry for group+artifact.

    An existing entry is never overwritten. New entries are kept in
    ``groupId:artifactId`` order relative to the entries already present.
    """
    if any(gav.ga == (group_id, artifact_id) for gav in doc.managed_dependencies()):
        return False

    management = _section(doc, "dependencyManagement")
    container = _child(doc, management, "dependencies", 1)

    entry = _new(doc, "dependency")
    fields = [("groupId", group_id), ("artifactId", artifact_id), ("version", version)]
    fields += [("scope", scope), ("classifier", classifier)]
    for name, value in fields:
        if value is not None:
            _insert(entry, len(list(entry)), _new(doc, name, value), 3, doc.indent)

    key = (group_id, artifact_id)
    index = len(list(container))
    for position, existing in enumerate(container):
        if local_name(existing.tag) != "dependency":
            continue
        existing_key = (_child_text(doc, existing, "groupId"), _child_text(doc, existing, "artifactId"))
        if existing_key > key:
            index = position
            break
    _insert(container, index, entry, 2, doc.indent)
    log.debug("pom.managed_dependency_added", path=str(doc.path), ga=f"{group_id}:{artifact_id}")
    return True


def add_property(doc: PomDocument, name: str, value: str) -> bool:
    """Ensure property *name* exists; an existing value is kept as is."""
    if name in doc.properties():
        return False
    container = _section(doc, "properties")
    _insert(container, len(list(container)), _new(doc, name, value), 1, doc.indent)
    log.debug("pom.property_added", path=str(doc.path), name=name)
    return True


def remove_property(doc: PomDocument, name: str) -> bool:
    container = doc.find("properties")
    if container is None:
        return False
    element = container.find(doc.tag(name))
    if element is None:
        return False
    _remove(container, element)
    log.debug("pom.property_removed", path=str(doc.path), name=name)
    return True


def _has_marker(container: ET.Element, dependency: ET.Element) -> bool:
    children = list(container)
    position = children.index(dependency)
    if position == 0:
        return False
    previous = children[position - 1]
    return previous.tag is ET.Comment and previous.text == NO_VERSION_MARKER


def manage_dependency(doc: PomDocument, group_id: str, artifact_id: str) -> bool:
    """Strip ``<version>`` from direct declarations of group+artifact.

    When no management entry for the coordinate is visible to this module
    afterwards, a "No version provided" marker comment is placed directly
    in front of the declaration.
    """
    container = doc.find("dependencies")
    if container is None:
        return False
    changed = False
    for dependency in doc.dependency_elements(group_id, artifact_id):
        version = dependency.find(doc.tag("version"))
        if version is not None:
            _remove(dependency, version)
            changed = True
        if doc.managed_version_visible(group_id, artifact_id) or _has_marker(container, dependency):
            continue
        marker = ET.Comment(NO_VERSION_MARKER)
        marker.tail = ""
        container.insert(list(container).index(dependency), marker)
        log.info(
            "pom.no_version_provided",
            path=str(doc.path),
            ga=f"{group_id}:{artifact_id}",
        )
        changed = True
    return changed


def apply_edit(doc: PomDocument, edit: Edit) -> bool:
    if isinstance(edit, AddManagedDependency):
        return add_managed_dependency(
            doc, edit.group_id, edit.artifact_id, edit.version, edit.scope, edit.classifier
        )
    if isinstance(edit, AddProperty):
        return add_property(doc, edit.name, edit.value)
    if isinstance(edit, RemoveProperty):
        return remove_property(doc, edit.name)
    if isinstance(edit, ManageDependency):
        return manage_dependency(doc, edit.group_id, edit.artifact_id)
    raise TypeError(f"unsupported edit: {edit!r}")


def apply_edits(doc: PomDocument, edits: list[Edit]) -> int:
    """Apply *edits* in order; return how many of them changed the document."""
    return sum(1 for edit in edits if apply_edit(doc, edit))
