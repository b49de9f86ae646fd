"""In-memory view of a single pom.xml, backed by ElementTree."""

from __future__ import annotations

import codecs
import re
import xml.etree.ElementTree as ET
from pathlib import Path

from pomhoist.errors import PomParseError
from pomhoist.models import DocumentId, GroupArtifactVersion, new_document_id

POM_NS = "http://maven.apache.org/POM/4.0.0"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"

# Keep the default namespace unprefixed on output.
ET.register_namespace("", POM_NS)
ET.register_namespace("xsi", XSI_NS)

_DEFAULT_INDENT = "    "

_ENCODING_RE = re.compile(rb"""<\?xml[^>]*?encoding\s*=\s*["']([A-Za-z0-9._-]+)["']""")
_SPACED_EMPTY_RE = re.compile(r"\s/>")
_COMPACT_EMPTY_RE = re.compile(r"[^\s?]/>")
_ESCAPED_GT_RE = re.compile(r"(?<!\]\])&gt;")


def local_name(tag: object) -> str:
    """Tag name without its ``{namespace}`` prefix; ``""`` for comments/PIs."""
    if not isinstance(tag, str):
        return ""
    return tag.split("}", 1)[1] if tag.startswith("{") else tag


def _text(element: ET.Element | None) -> str | None:
    if element is None:
        return None
    return element.text.strip() if element.text else None


def _detect_indent(root: ET.Element) -> str:
    """Guess the indentation unit from the whitespace before the first child."""
    ws = root.text or ""
    if "\n" not in ws:
        return _DEFAULT_INDENT
    unit = ws.rsplit("\n", 1)[1]
    return unit if unit and not unit.strip() else _DEFAULT_INDENT


class PomDocument:
    """One module descriptor of a Maven project.

    ``parent`` is only set when the parent pom is part of the loaded project;
    a document whose parent is external (or absent) is a project root.
    """

    def __init__(
        self,
        path: Path,
        root: ET.Element,
        prologue: str = "",
        epilogue: str = "\n",
        encoding: str = "utf-8",
        spaced_empty_tags: bool = False,
    ) -> None:
        self.id: DocumentId = new_document_id()
        self.path = path
        self.root = root
        self.root.tail = None
        self.prologue = prologue
        self.epilogue = epilogue
        self.encoding = encoding
        self.spaced_empty_tags = spaced_empty_tags
        self.namespace = root.tag[1:].split("}", 1)[0] if root.tag.startswith("{") else ""
        self.indent = _detect_indent(root)
        self.parent: PomDocument | None = None
        # Management keys as loaded; descendants consult this, not later edits.
        self.loaded_managed: frozenset[tuple[str, str]] = frozenset(
            gav.ga for gav in self.managed_dependencies()
        )

    # ── construction / serialisation ────────────────────────────────────

    @classmethod
    def from_string(cls, content: str, path: Path, encoding: str = "utf-8") -> PomDocument:
        parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
        try:
            root = ET.fromstring(content, parser=parser)
        except ET.ParseError as e:
            raise PomParseError(path, str(e)) from e
        if local_name(root.tag) != "project":
            raise PomParseError(path, f"root element is <{local_name(root.tag)}>, expected <project>")
        start = content.find("<project")
        prologue = content[:start] if start > 0 else ""
        end = content.rfind("</project>")
        if end >= 0:
            epilogue = content[end + len("</project>"):]
        else:
            epilogue = content[content.find("/>", start) + 2:]
        spaced = _SPACED_EMPTY_RE.search(content) is not None and (
            _COMPACT_EMPTY_RE.search(content) is None
        )
        return cls(path, root, prologue, epilogue, encoding, spaced)

    @classmethod
    def from_bytes(cls, data: bytes, path: Path) -> PomDocument:
        """Decode *data* using its XML declaration (UTF-8 when undeclared)."""
        if data.startswith(codecs.BOM_UTF8):
            encoding = "utf-8-sig"
        else:
            match = _ENCODING_RE.match(data)
            encoding = match.group(1).decode("ascii") if match else "utf-8"
        try:
            content = data.decode(encoding)
        except LookupError as e:
            raise PomParseError(path, f"unknown encoding {encoding!r}") from e
        except UnicodeDecodeError as e:
            raise PomParseError(path, f"not valid {encoding}: {e.reason}") from e
        return cls.from_string(content, path, encoding)

    @classmethod
    def from_file(cls, path: Path) -> PomDocument:
        return cls.from_bytes(path.read_bytes(), path)

    def to_string(self) -> str:
        body = ET.tostring(self.root, encoding="unicode")
        # ElementTree spells empty elements "<a />" and escapes ">"; keep the
        # source spelling so untouched lines stay untouched.
        if not self.spaced_empty_tags:
            body = body.replace(" />", "/>")
        body = _ESCAPED_GT_RE.sub(">", body)
        return f"{self.prologue}{body}{self.epilogue}"

    def write(self) -> None:
        self.path.write_bytes(self.to_string().encode(self.encoding, errors="xmlcharrefreplace"))

    # ── navigation ──────────────────────────────────────────────────────

    def tag(self, name: str) -> str:
        return f"{{{self.namespace}}}{name}" if self.namespace else name

    def find(self, *names: str, start: ET.Element | None = None) -> ET.Element | None:
        """Follow a chain of child element names from *start* (default: root)."""
        element = self.root if start is None else start
        for name in names:
            element = element.find(self.tag(name))
            if element is None:
                return None
        return element

    def findall(self, *names: str) -> list[ET.Element]:
        *head, last = names
        container = self.find(*head) if head else self.root
        if container is None:
            return []
        return container.findall(self.tag(last))

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def ancestors(self) -> list[PomDocument]:
        result: list[PomDocument] = []
        current = self.parent
        while current is not None and current not in result:
            result.append(current)
            current = current.parent
        return result

    # ── coordinates ─────────────────────────────────────────────────────

    @property
    def group_id(self) -> str | None:
        return _text(self.find("groupId")) or _text(self.find("parent", "groupId"))

    @property
    def artifact_id(self) -> str | None:
        return _text(self.find("artifactId"))

    def parent_reference(self) -> tuple[GroupArtifactVersion, str | None] | None:
        """Declared ``<parent>`` coordinates and its ``<relativePath>``.

        The relative path is ``"../pom.xml"`` when not declared and ``None``
        when declared empty (parent must be looked up in a repository).
        """
        parent = self.find("parent")
        if parent is None:
            return None
        gav = GroupArtifactVersion(
            _text(self.find("groupId", start=parent)) or "",
            _text(self.find("artifactId", start=parent)) or "",
            _text(self.find("version", start=parent)),
        )
        relative = self.find("relativePath", start=parent)
        if relative is None:
            return gav, "../pom.xml"
        return gav, _text(relative)

    def module_names(self) -> list[str]:
        names = [_text(el) for el in self.findall("modules", "module")]
        return [name for name in names if name]

    # ── dependencies ────────────────────────────────────────────────────

    def _gavs(self, elements: list[ET.Element]) -> list[GroupArtifactVersion]:
        result: list[GroupArtifactVersion] = []
        for dep in elements:
            group_id = _text(self.find("groupId", start=dep))
            artifact_id = _text(self.find("artifactId", start=dep))
            if not group_id or not artifact_id:
                continue
            result.append(
                GroupArtifactVersion(group_id, artifact_id, _text(self.find("version", start=dep)))
            )
        return result

    def dependencies(self) -> list[GroupArtifactVersion]:
        """Directly declared dependencies, in declaration order."""
        return self._gavs(self.findall("dependencies", "dependency"))

    def dependency_elements(self, group_id: str, artifact_id: str) -> list[ET.Element]:
        return [
            dep
            for dep in self.findall("dependencies", "dependency")
            if _text(self.find("groupId", start=dep)) == group_id
            and _text(self.find("artifactId", start=dep)) == artifact_id
        ]

    def managed_dependencies(self) -> list[GroupArtifactVersion]:
        return self._gavs(self.findall("dependencyManagement", "dependencies", "dependency"))

    def managed_version_visible(self, group_id: str, artifact_id: str) -> bool:
        """Whether a management entry for the coordinate applies to this module.

        The module's own table is read as it is now; ancestors' tables as
        they were loaded.
        """
        ga = (group_id, artifact_id)
        if any(gav.ga == ga for gav in self.managed_dependencies()):
            return True
        return any(ga in ancestor.loaded_managed for ancestor in self.ancestors())

    # ── properties ──────────────────────────────────────────────────────

    def properties(self) -> dict[str, str]:
        """Properties declared in this document, in declaration order."""
        container = self.find("properties")
        if container is None:
            return {}
        props: dict[str, str] = {}
        for child in container:
            name = local_name(child.tag)
            if name:
                props[name] = child.text.strip() if child.text else ""
        return props

    def effective_property(self, name: str) -> str | None:
        """Resolve *name* against this document, then its local ancestors."""
        for document in [self, *self.ancestors()]:
            props = document.properties()
            if name in props:
                return props[name]
        return None

    def __repr__(self) -> str:
        return f"PomDocument({self.path}, {self.group_id}:{self.artifact_id})"
