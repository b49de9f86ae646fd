"""Tests for the version management engine: scan, rewrite and full runs."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import pom

from pomhoist.engines.version_management.coordinates import parse_exemptions
from pomhoist.engines.version_management.rewriter import rewrite
from pomhoist.engines.version_management.runner import run_project
from pomhoist.engines.version_management.scanner import scan
from pomhoist.models import (
    AddManagedDependency,
    AddProperty,
    GroupArtifactVersion,
    ManageDependency,
    RemoveProperty,
)
from pomhoist.pom.loader import load_project


def _run_and_read(tmp_path: Path, **kwargs) -> dict[str, str]:
    run_project(tmp_path, **kwargs)
    return {
        str(p.parent.relative_to(tmp_path)): p.read_text(encoding="utf-8")
        for p in sorted(tmp_path.rglob("pom.xml"))
    }


# ── fixtures ─────────────────────────────────────────────────────────────


PARENT = """
    <project>
        <groupId>foo</groupId>
        <artifactId>bar-parent</artifactId>
        <version>0</version>
        <modules>
            <module>child</module>
        </modules>
    </project>
"""

CHILD = """
    <project>
        <parent>
            <groupId>foo</groupId>
            <artifactId>bar-parent</artifactId>
            <version>0</version>
        </parent>
        <properties>
            <ignore>true</ignore>
            <junit.version>4.13.2</junit.version>
        </properties>
        <dependencies>
            <dependency>
                <groupId>junit</groupId>
                <artifactId>junit</artifactId>
                <version>${junit.version}</version>
            </dependency>
        </dependencies>
    </project>
"""

LITERAL = """
    <project>
        <groupId>foo</groupId>
        <artifactId>bar</artifactId>
        <version>0</version>
        <dependencies>
            <dependency>
                <groupId>junit</groupId>
                <artifactId>junit</artifactId>
                <version>4.13.2</version>
                <scope>test</scope>
            </dependency>
        </dependencies>
    </project>
"""


@pytest.fixture
def multi_module(write_pom, tmp_path):
    write_pom(PARENT)
    write_pom(CHILD, "child")
    return tmp_path


# ── scan ─────────────────────────────────────────────────────────────────


class TestScan:
    def test_records_versioned_direct_dependencies(self, multi_module):
        documents = load_project(multi_module)
        parent, child = documents

        state = scan(documents)

        assert state.dependencies_by_document == {
            parent.id: [],
            child.id: [GroupArtifactVersion("junit", "junit", "${junit.version}")],
        }
        assert state.version_properties == {"junit.version": "4.13.2"}
        assert state.roots == {parent.id}

    @pytest.mark.parametrize("coordinate", ["junit:junit:4.13.2", "junit:junit"])
    def test_exempt_dependency_not_recorded(self, write_pom, tmp_path, coordinate):
        write_pom(LITERAL)
        documents = load_project(tmp_path)
        state = scan(documents, parse_exemptions([coordinate]))
        assert state.all_dependencies() == []

    def test_exemption_for_other_version_does_not_apply(self, write_pom, tmp_path):
        write_pom(LITERAL)
        state = scan(load_project(tmp_path), parse_exemptions(["junit:junit:4.12"]))
        assert state.all_dependencies() == [GroupArtifactVersion("junit", "junit", "4.13.2")]

    def test_unresolved_property_still_records_dependency(self, write_pom, tmp_path):
        write_pom(
            """
            <project>
                <dependencies>
                    <dependency>
                        <groupId>junit</groupId>
                        <artifactId>junit</artifactId>
                        <version>${nowhere}</version>
                    </dependency>
                </dependencies>
            </project>
            """
        )
        state = scan(load_project(tmp_path))
        assert state.all_dependencies() == [GroupArtifactVersion("junit", "junit", "${nowhere}")]
        assert state.version_properties == {}

    def test_every_referenced_property_recorded(self, write_pom, tmp_path):
        write_pom(
            """
            <project>
                <properties>
                    <major>1</major>
                    <minor>2</minor>
                </properties>
                <dependencies>
                    <dependency>
                        <groupId>g</groupId>
                        <artifactId>a</artifactId>
                        <version>${major}.${minor}</version>
                    </dependency>
                </dependencies>
            </project>
            """
        )
        state = scan(load_project(tmp_path))
        assert state.version_properties == {"major": "1", "minor": "2"}

    def test_first_writer_wins(self, write_pom, tmp_path):
        write_pom(
            """
            <project>
                <groupId>foo</groupId>
                <artifactId>bar-parent</artifactId>
                <modules>
                    <module>one</module>
                    <module>two</module>
                </modules>
            </project>
            """
        )
        for name, value in (("one", "1.0"), ("two", "2.0")):
            write_pom(
                f"""
                <project>
                    <parent>
                        <groupId>foo</groupId>
                        <artifactId>bar-parent</artifactId>
                    </parent>
                    <artifactId>{name}</artifactId>
                    <properties>
                        <lib.version>{value}</lib.version>
                    </properties>
                    <dependencies>
                        <dependency>
                            <groupId>g</groupId>
                            <artifactId>lib</artifactId>
                            <version>${{lib.version}}</version>
                        </dependency>
                    </dependencies>
                </project>
                """,
                name,
            )
        state = scan(load_project(tmp_path))
        assert state.version_properties == {"lib.version": "1.0"}

    def test_property_inherited_from_local_parent(self, write_pom, tmp_path):
        write_pom(
            """
            <project>
                <groupId>foo</groupId>
                <artifactId>bar-parent</artifactId>
                <modules>
                    <module>child</module>
                </modules>
                <properties>
                    <junit.version>4.13.2</junit.version>
                </properties>
            </project>
            """
        )
        write_pom(CHILD.replace("<junit.version>4.13.2</junit.version>", ""), "child")
        state = scan(load_project(tmp_path))
        assert state.version_properties == {"junit.version": "4.13.2"}

    def test_scan_does_not_mutate(self, multi_module):
        documents = load_project(multi_module)
        before = [doc.to_string() for doc in documents]
        scan(documents)
        assert [doc.to_string() for doc in documents] == before


# ── rewrite ──────────────────────────────────────────────────────────────


class TestRewrite:
    def test_multi_module_edits(self, multi_module):
        documents = load_project(multi_module)
        parent, child = documents

        edits = rewrite(documents, scan(documents))

        assert edits[parent.id] == [
            AddManagedDependency("junit", "junit", "${junit.version}"),
            AddProperty("junit.version", "4.13.2"),
        ]
        assert edits[child.id] == [
            RemoveProperty("junit.version"),
            ManageDependency("junit", "junit"),
        ]

    def test_root_keeps_its_own_properties(self, write_pom, tmp_path):
        write_pom(CHILD.replace("<parent>", "<!--").replace("</parent>", "-->"))
        documents = load_project(tmp_path)
        (doc,) = documents
        edits = rewrite(documents, scan(documents))
        assert not any(isinstance(e, RemoveProperty) for e in edits[doc.id])
        assert edits[doc.id][-1] == ManageDependency("junit", "junit")

    def test_nothing_recorded_means_no_edits(self, write_pom, tmp_path):
        write_pom(PARENT)
        documents = load_project(tmp_path)
        assert rewrite(documents, scan(documents)) == {documents[0].id: []}


# ── full runs ────────────────────────────────────────────────────────────


class TestRunProject:
    def test_untouched_when_already_managed(self, write_pom, tmp_path):
        text = pom(
            """
            <project>
                <groupId>foo</groupId>
                <artifactId>bar</artifactId>
                <version>0</version>
                <dependencyManagement>
                    <dependencies>
                        <dependency>
                            <groupId>junit</groupId>
                            <artifactId>junit</artifactId>
                            <version>4.13.2</version>
                        </dependency>
                    </dependencies>
                </dependencyManagement>
                <dependencies>
                    <dependency>
                        <groupId>junit</groupId>
                        <artifactId>junit</artifactId>
                        <scope>test</scope>
                    </dependency>
                </dependencies>
            </project>
            """
        )
        path = write_pom(text)
        result = run_project(tmp_path)
        assert result.changed == []
        assert path.read_text() == text

    def test_manage_literal_version(self, write_pom, tmp_path):
        write_pom(LITERAL)
        assert _run_and_read(tmp_path)["."] == pom(
            """
            <project>
                <groupId>foo</groupId>
                <artifactId>bar</artifactId>
                <version>0</version>
                <dependencyManagement>
                    <dependencies>
                        <dependency>
                            <groupId>junit</groupId>
                            <artifactId>junit</artifactId>
                            <version>4.13.2</version>
                        </dependency>
                    </dependencies>
                </dependencyManagement>
                <dependencies>
                    <dependency>
                        <groupId>junit</groupId>
                        <artifactId>junit</artifactId>
                        <scope>test</scope>
                    </dependency>
                </dependencies>
            </project>
            """
        )

    def test_manage_version_with_property(self, write_pom, tmp_path):
        write_pom(
            """
            <project>
                <groupId>foo</groupId>
                <artifactId>bar</artifactId>
                <version>0</version>
                <properties>
                    <the.version>4.13.2</the.version>
                </properties>
                <dependencies>
                    <dependency>
                        <groupId>junit</groupId>
                        <artifactId>junit</artifactId>
                        <version>${the.version}</version>
                        <scope>test</scope>
                    </dependency>
                </dependencies>
            </project>
            """
        )
        assert _run_and_read(tmp_path)["."] == pom(
            """
            <project>
                <groupId>foo</groupId>
                <artifactId>bar</artifactId>
                <version>0</version>
                <properties>
                    <the.version>4.13.2</the.version>
                </properties>
                <dependencyManagement>
                    <dependencies>
                        <dependency>
                            <groupId>junit</groupId>
                            <artifactId>junit</artifactId>
                            <version>${the.version}</version>
                        </dependency>
                    </dependencies>
                </dependencyManagement>
                <dependencies>
                    <dependency>
                        <groupId>junit</groupId>
                        <artifactId>junit</artifactId>
                        <scope>test</scope>
                    </dependency>
                </dependencies>
            </project>
            """
        )

    def test_existing_management_entries_preserved(self, write_pom, tmp_path):
        write_pom(
            """
            <project>
                <groupId>foo</groupId>
                <artifactId>bar</artifactId>
                <version>0</version>
                <dependencyManagement>
                    <dependencies>
                        <dependency>
                            <groupId>org.junit.jupiter</groupId>
                            <artifactId>junit-jupiter-engine</artifactId>
                            <version>5.9.2</version>
                        </dependency>
                    </dependencies>
                </dependencyManagement>
                <dependencies>
                    <dependency>
                        <groupId>junit</groupId>
                        <artifactId>junit</artifactId>
                        <version>4.13.2</version>
                        <scope>test</scope>
                    </dependency>
                </dependencies>
            </project>
            """
        )
        assert _run_and_read(tmp_path)["."] == pom(
            """
            <project>
                <groupId>foo</groupId>
                <artifactId>bar</artifactId>
                <version>0</version>
                <dependencyManagement>
                    <dependencies>
                        <dependency>
                            <groupId>junit</groupId>
                            <artifactId>junit</artifactId>
                            <version>4.13.2</version>
                        </dependency>
                        <dependency>
                            <groupId>org.junit.jupiter</groupId>
                            <artifactId>junit-jupiter-engine</artifactId>
                            <version>5.9.2</version>
                        </dependency>
                    </dependencies>
                </dependencyManagement>
                <dependencies>
                    <dependency>
                        <groupId>junit</groupId>
                        <artifactId>junit</artifactId>
                        <scope>test</scope>
                    </dependency>
                </dependencies>
            </project>
            """
        )

    @pytest.mark.parametrize("coordinate", ["junit:junit:4.13.2", "junit:junit"])
    def test_exempt_versions(self, write_pom, tmp_path, coordinate):
        path = write_pom(LITERAL)
        result = run_project(tmp_path, parse_exemptions([coordinate]))
        assert result.changed == []
        assert path.read_text() == pom(LITERAL)

    def test_multi_module(self, multi_module):
        poms = _run_and_read(multi_module)
        assert poms["."] == pom(
            """
            <project>
                <groupId>foo</groupId>
                <artifactId>bar-parent</artifactId>
                <version>0</version>
                <modules>
                    <module>child</module>
                </modules>
                <properties>
                    <junit.version>4.13.2</junit.version>
                </properties>
                <dependencyManagement>
                    <dependencies>
                        <dependency>
                            <groupId>junit</groupId>
                            <artifactId>junit</artifactId>
                            <version>${junit.version}</version>
                        </dependency>
                    </dependencies>
                </dependencyManagement>
            </project>
            """
        )
        assert poms["child"] == pom(
            """
            <project>
                <parent>
                    <groupId>foo</groupId>
                    <artifactId>bar-parent</artifactId>
                    <version>0</version>
                </parent>
                <properties>
                    <ignore>true</ignore>
                </properties>
                <dependencies>
                    <!--~~(No version provided)~~>--><dependency>
                        <groupId>junit</groupId>
                        <artifactId>junit</artifactId>
                    </dependency>
                </dependencies>
            </project>
            """
        )

    def test_second_run_is_noop(self, multi_module):
        first = _run_and_read(multi_module)
        result = run_project(multi_module)
        assert result.changed == []
        assert sum(result.applied.values()) == 0
        assert _run_and_read(multi_module) == first

    def test_every_root_receives_the_union(self, write_pom, tmp_path):
        write_pom(
            """
            <project>
                <groupId>foo</groupId>
                <artifactId>aggregator</artifactId>
                <modules>
                    <module>lib</module>
                </modules>
                <dependencies>
                    <dependency>
                        <groupId>org.slf4j</groupId>
                        <artifactId>slf4j-api</artifactId>
                        <version>2.0.9</version>
                    </dependency>
                </dependencies>
            </project>
            """
        )
        write_pom(LITERAL, "lib")
        run_project(tmp_path)
        for path in (tmp_path / "pom.xml", tmp_path / "lib" / "pom.xml"):
            managed = {gav.ga for gav in load_project(path)[0].managed_dependencies()}
            assert managed == {("org.slf4j", "slf4j-api"), ("junit", "junit")}

    def test_dry_run_writes_nothing(self, multi_module):
        before = (multi_module / "child" / "pom.xml").read_text()
        result = run_project(multi_module, dry_run=True)
        assert len(result.changed) == 2
        assert (multi_module / "child" / "pom.xml").read_text() == before
        child_diff = result.diffs[(multi_module / "child" / "pom.xml").resolve()]
        assert "-            <version>${junit.version}</version>" in child_diff
        assert "-        <junit.version>4.13.2</junit.version>" in child_diff

    def test_trailing_comment_kept(self, write_pom, tmp_path):
        path = write_pom(LITERAL)
        path.write_text(path.read_text() + "<!-- trailer -->\n")
        run_project(tmp_path)
        assert path.read_text().endswith("</project>\n<!-- trailer -->\n")

    def test_diff_only_touches_edited_lines(self, write_pom, tmp_path):
        path = write_pom(LITERAL)
        path.write_text(
            path.read_text().replace(
                "<version>0</version>",
                "<version>0</version>\n    <description>a -> b</description>",
            )
        )
        result = run_project(tmp_path, dry_run=True)
        diff = result.diffs[path.resolve()]
        removed = [
            line for line in diff.splitlines() if line.startswith("-") and not line.startswith("---")
        ]
        assert removed == ["-            <version>4.13.2</version>"]
