"""Tests for the tree-sitter backed source parser."""

from __future__ import annotations

from pathlib import Path

from tsjsdoc.models import (
    ClassDeclaration,
    Comment,
    ExportDefault,
    ExportNamed,
    ImportDeclaration,
    OtherDeclaration,
    VariableDeclaration,
)
from tsjsdoc.source_parser import SourceParser

SOURCE = b"""/** @module sample */
// a line comment
import Default, {Named, Other as Alias} from './a.js';

/**
 * @enum {string}
 */
export const Color = {RED: 'red'};

/* plain */
class Base {}

/** Child docs */
export class Child extends Base {}

export function helper() {}

export { Base as Renamed };
export default Base;
"""


def _parse(source: bytes = SOURCE):
    return SourceParser().parse(source, Path("/virtual/sample.js"))


def test_collects_block_comments_in_document_order() -> None:
    source_file = _parse()

    values = [comment.value for comment in source_file.comments]
    assert values == ["* @module sample ", "*\n * @enum {string}\n ", " plain ", "* Child docs "]
    assert all(not comment.synthetic for comment in source_file.comments)


def test_decodes_import_bindings() -> None:
    declaration = _parse().declarations[0]

    assert isinstance(declaration, ImportDeclaration)
    assert declaration.source == "./a.js"
    bindings = [(b.local, b.imported, b.is_default) for b in declaration.bindings]
    assert bindings == [
        ("Default", "default", True),
        ("Named", "Named", False),
        ("Alias", "Other", False),
    ]


def test_decodes_exported_variables_with_leading_comments() -> None:
    declaration = _parse().declarations[1]

    assert isinstance(declaration, VariableDeclaration)
    assert declaration.names == ["Color"]
    assert declaration.exported is True
    assert "@enum" in declaration.comments[-1].value


def test_decodes_classes_and_their_comments() -> None:
    declarations = _parse().declarations
    base, child = (d for d in declarations if isinstance(d, ClassDeclaration))

    assert base.name == "Base"
    assert base.export_kind is None
    assert [c.value for c in base.comments] == [" plain "]

    assert child.name == "Child"
    assert child.superclass == "Base"
    assert child.export_kind == "named"
    assert child.comments == []
    assert [c.value for c in child.wrapper_comments] == ["* Child docs "]


def test_decodes_export_clauses_and_default_exports() -> None:
    declarations = _parse().declarations

    assert isinstance(declarations[4], OtherDeclaration)
    named = declarations[5]
    assert isinstance(named, ExportNamed)
    assert named.specifiers == [("Base", "Renamed")]
    assert declarations[6] == ExportDefault(name="Base")


def test_render_without_changes_round_trips() -> None:
    source_file = _parse()

    assert source_file.render() == SOURCE.decode("utf-8")


def test_render_splices_rewritten_and_synthetic_comments() -> None:
    source = "/** héllo */\n/** second */\nclass A {}\n".encode("utf-8")
    source_file = _parse(source)
    source_file.comments[1].value = "* changed "
    class_start = source.index(b"class")
    source_file.add_comment(Comment(value="* @classdesc ", anchor=class_start))

    assert source_file.render() == "/** héllo */\n/** changed */\n/** @classdesc */ class A {}\n"
