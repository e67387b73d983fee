"""End-to-end tests for CommentRewriter on the sample project."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from tests._fixtures.project_builder import ProjectBuilder
from tsjsdoc.modules import ModuleGraph, ReferenceResolver, ResolutionLoopError
from tsjsdoc.rewrite import CommentRewriter
from tsjsdoc.rewrite.comments import _typedef_names
from tsjsdoc.source_parser import SourceParser


@pytest.fixture
def sample(project_builder: ProjectBuilder):
    src = project_builder.copy_fixture()
    graph = ModuleGraph(SourceParser())
    graph.register_run_files(sorted(src.rglob("*.js")))
    rewriter = CommentRewriter(ReferenceResolver(graph))

    def rewrite(relative: str) -> str:
        source_file = graph.source_file(src / relative)
        rewriter.rewrite(source_file)
        return source_file.render()

    return rewrite


def test_import_expressions_are_resolved(sample) -> None:
    rendered = sample("index.js")

    assert " * @param {module:proj4} proj4 Proj4\n" in rendered
    assert " * @param {module:geojson~Geometry} geometry The geometry.\n" in rendered
    assert " * @return {module:test/sub/NumberStore~NumberStore} A number store.\n" in rendered
    assert "import(" not in rendered


def test_typedef_references_use_inner_delimiter(sample) -> None:
    rendered = sample("sub/NumberStore.js")

    assert " * @param {module:test/sub/NumberStore~Options} options The options.\n" in rendered
    assert " * @typedef {Object} Options\n" in rendered
    assert "@classdesc\n * A test class.\n" in rendered


def test_leading_comments_migrate_onto_exported_class(sample) -> None:
    rendered = sample("sub/LeadingComments.js")

    assert "/*\n  Comment\n*/" in rendered
    assert "/** @ignore */\nexport /** @classdesc\n * Doclet\n */ class LeadingComments {}" in rendered


def test_typescript_syntax_is_normalized(sample) -> None:
    rendered = sample("sub/Shapes.js")

    assert " * @property {{x: number, y: number}} center The center.\n" in rendered
    assert " * @property {Array} [size] The size.\n" in rendered
    assert " * @param {function(): void} callback Callback.\n" in rendered
    assert "@override" not in rendered


def test_local_names_and_typeof_are_qualified(sample) -> None:
    rendered = sample("sub/Shapes.js")

    assert " * @param {module:test/sub/Shapes~ShapeOptions} options Options.\n" in rendered
    assert (
        " * @param {Class<module:test/sub/NumberStore~NumberStore>} storeClass Store constructor.\n"
        in rendered
    )
    assert " * @property {module:test/sub/Shapes~Kind} kind The kind.\n" in rendered
    assert " * @return {module:test/sub/Shapes~Kind} The kind.\n" in rendered
    assert " * @fires module:test/sub/Shapes.Shape#change\n" in rendered


def test_template_parameters_are_left_alone(sample) -> None:
    rendered = sample("sub/Shapes.js")

    assert " * @param {T} value Value.\n" in rendered
    assert " * @template T\n" in rendered


def test_subclass_comment_links_and_extends(sample) -> None:
    rendered = sample("sub/Shapes.js")

    assert " * A circle. See {@link module:test/sub/Shapes.Shape Shape}.\n" in rendered
    assert " * @see {@link module:test/sub/Shapes.Shape Shape}\n" in rendered
    assert " * @extends module:test/sub/Shapes.Shape\n" in rendered
    assert "@extends {Shape<T>}" not in rendered


def test_unresolvable_import_is_left_as_written(project_builder: ProjectBuilder) -> None:
    (path,) = project_builder.write(
        {"a.js": '/** @type {import("./missing.js").Foo} */\nexport const a = 1;\n'}
    )
    graph = ModuleGraph(SourceParser())
    source_file = graph.source_file(path)

    CommentRewriter(ReferenceResolver(graph)).rewrite(source_file)

    assert source_file.comments[0].value == '* @type {import("./missing.js").Foo} '


class LoopingResolver(ReferenceResolver):
    """Resolves every import to itself, so rewriting never makes progress."""

    def resolve_import(self, specifier: str, export_name: Optional[str], current_dir) -> Optional[str]:
        return f'import("{specifier}").{export_name}'


def test_non_converging_rewrite_raises(project_builder: ProjectBuilder) -> None:
    (path,) = project_builder.write(
        {"loop.js": '/** @type {import("./x.js").Foo} */\nexport const a = 1;\n'}
    )
    graph = ModuleGraph(SourceParser())
    rewriter = CommentRewriter(LoopingResolver(graph), retry_limit=5)

    with pytest.raises(ResolutionLoopError) as excinfo:
        rewriter.rewrite(graph.source_file(path))

    assert excinfo.value.file_name == str(Path(path))
    assert excinfo.value.attempts == 6


def test_typedef_name_on_continuation_line_is_collected() -> None:
    assert _typedef_names("*\n * @typedef {Object}\n *   Foo\n ") == ["Foo"]
    assert _typedef_names("* @typedef {Object} Bar ") == ["Bar"]


MULTILINE = """
    /**
     * @module a
     */

    /**
     * @typedef {Object}
     *   Foo
     */

    /** @typedef {Object} Bar */

    /**
     * @param {Foo|
     *   Bar} value Value.
     */
    export function f(value) {}
"""


def test_identifiers_across_comment_lines_are_qualified(project_builder: ProjectBuilder) -> None:
    (path,) = project_builder.write({"a.js": MULTILINE})
    graph = ModuleGraph(SourceParser())
    source_file = graph.source_file(path)

    table = CommentRewriter(ReferenceResolver(graph)).rewrite(source_file)

    assert {"Foo", "Bar"} <= set(table)
    assert " * @param {module:a~Foo|\n *   module:a~Bar} value Value.\n" in source_file.render()


def test_repeated_resolvable_imports_do_not_exhaust_retries(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "b.js": "export class B {}\n",
            "a.js": """
                /**
                 * @param {import("./b.js").B} x X.
                 * @param {import("./b.js").B} y Y.
                 * @param {import("./b.js").B} z Z.
                 */
                export function f(x, y, z) {}
            """,
        }
    )
    graph = ModuleGraph(SourceParser(), module_root=project_builder.path())
    source_file = graph.source_file(project_builder.path() / "a.js")

    CommentRewriter(ReferenceResolver(graph), retry_limit=2).rewrite(source_file)

    assert source_file.render().count("{module:b.B}") == 3
