"""Tree-sitter powered JavaScript source parser.

Turns a source buffer into a :class:`~tsjsdoc.models.SourceFile`: every block
comment in document order plus the top-level declarations decoded into the
closed variants of :mod:`tsjsdoc.models`. Nothing downstream inspects raw
tree-sitter nodes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser

from .logging import get_logger
from .models import (
    ClassDeclaration,
    Comment,
    Declaration,
    ExportDefault,
    ExportNamed,
    ImportBinding,
    ImportDeclaration,
    OtherDeclaration,
    SourceFile,
    VariableDeclaration,
)

_CLASS_TYPES = {"class_declaration", "class"}
_VARIABLE_TYPES = {"lexical_declaration", "variable_declaration"}

logger = get_logger("source_parser")


class SourceParser:
    """Parses JavaScript sources with tree-sitter."""

    def __init__(self) -> None:
        self._parser = Parser(Language(tree_sitter_javascript.language()))

    def parse_file(self, path: Path) -> SourceFile:
        return self.parse(path.read_bytes(), path)

    def parse(self, source: bytes, path: Path) -> SourceFile:
        tree = self._parser.parse(source)
        root = tree.root_node
        if root.has_error:
            logger.debug("Syntax errors while parsing %s; continuing with partial tree", path)
        source_file = SourceFile(path=path, source=source)
        comments: Dict[int, Comment] = {}
        for node in _iter_comments(root):
            comment = _comment_from_node(node)
            if comment is None:
                continue
            comments[node.start_byte] = comment
            source_file.add_comment(comment)
        source_file.declarations = _collect_declarations(root, comments)
        return source_file


def _iter_comments(node: Node):  # type: ignore[no-untyped-def]
    for child in node.children:
        if child.type == "comment":
            yield child
        else:
            yield from _iter_comments(child)


def _comment_from_node(node: Node) -> Optional[Comment]:
    text = _node_text(node)
    if not text.startswith("/*") or not text.endswith("*/") or len(text) < 4:
        return None
    return Comment(value=text[2:-2], start=node.start_byte, end=node.end_byte)


def _node_text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def _string_value(node: Optional[Node]) -> str:
    text = _node_text(node)
    if len(text) >= 2 and text[0] in "'\"" and text[-1] == text[0]:
        return text[1:-1]
    return text


def _collect_declarations(root: Node, comments: Dict[int, Comment]) -> List[Declaration]:
    declarations: List[Declaration] = []
    pending: List[Comment] = []
    for child in root.children:
        if child.type == "comment":
            comment = comments.get(child.start_byte)
            if comment is not None:
                pending.append(comment)
            continue
        declarations.extend(_decode_statement(child, pending, comments))
        pending = []
    return declarations


def _inner_comments(node: Node, comments: Dict[int, Comment], before: int) -> List[Comment]:
    found = []
    for child in node.children:
        if child.type == "comment" and child.end_byte <= before:
            comment = comments.get(child.start_byte)
            if comment is not None:
                found.append(comment)
    return found


def _decode_statement(node: Node, leading: List[Comment], comments: Dict[int, Comment]) -> List[Declaration]:
    if node.type == "import_statement":
        return [_decode_import(node)]
    if node.type in _CLASS_TYPES:
        return [_decode_class(node, leading, [], None)]
    if node.type in _VARIABLE_TYPES:
        return [VariableDeclaration(names=_declarator_names(node), comments=list(leading))]
    if node.type == "export_statement":
        return _decode_export(node, leading, comments)
    return [OtherDeclaration(kind=node.type)]


def _decode_import(node: Node) -> ImportDeclaration:
    declaration = ImportDeclaration(source=_string_value(node.child_by_field_name("source")))
    for clause in node.children:
        if clause.type != "import_clause":
            continue
        for part in clause.named_children:
            if part.type == "identifier":
                name = _node_text(part)
                declaration.bindings.append(ImportBinding(local=name, imported="default", is_default=True))
            elif part.type == "named_imports":
                for specifier in part.named_children:
                    if specifier.type != "import_specifier":
                        continue
                    imported = _node_text(specifier.child_by_field_name("name"))
                    alias = specifier.child_by_field_name("alias")
                    local = _node_text(alias) if alias is not None else imported
                    declaration.bindings.append(
                        ImportBinding(local=local, imported=imported, is_default=imported == "default")
                    )
    return declaration


def _decode_class(
    node: Node,
    comments: List[Comment],
    wrapper_comments: List[Comment],
    export_kind: Optional[str],
) -> ClassDeclaration:
    name_node = node.child_by_field_name("name")
    superclass = None
    for child in node.children:
        if child.type == "class_heritage" and child.named_children:
            superclass = _node_text(child.named_children[0]) or None
    return ClassDeclaration(
        name=_node_text(name_node) or None,
        start=node.start_byte,
        superclass=superclass,
        comments=list(comments),
        wrapper_comments=list(wrapper_comments),
        export_kind=export_kind,
    )


def _declarator_names(node: Node) -> List[str]:
    names = []
    for child in node.named_children:
        if child.type == "variable_declarator":
            name_node = child.child_by_field_name("name")
            if name_node is not None and name_node.type == "identifier":
                names.append(_node_text(name_node))
    return names


def _decode_export(node: Node, leading: List[Comment], comments: Dict[int, Comment]) -> List[Declaration]:
    is_default = any(child.type == "default" for child in node.children)
    declaration = node.child_by_field_name("declaration")
    if declaration is not None:
        inner = _inner_comments(node, comments, declaration.start_byte)
        if declaration.type in _CLASS_TYPES:
            kind = "default" if is_default else "named"
            return [_decode_class(declaration, inner, leading, kind)]
        if declaration.type in _VARIABLE_TYPES:
            return [
                VariableDeclaration(
                    names=_declarator_names(declaration),
                    comments=inner or list(leading),
                    exported=True,
                )
            ]
        return [OtherDeclaration(kind=declaration.type)]

    value = node.child_by_field_name("value")
    if value is not None:
        if value.type in _CLASS_TYPES:
            return [_decode_class(value, [], leading, "default")]
        if value.type == "identifier":
            return [ExportDefault(name=_node_text(value))]
        return [OtherDeclaration(kind="export_default")]

    if node.child_by_field_name("source") is not None:
        return [OtherDeclaration(kind="re_export")]
    decoded: List[Declaration] = []
    specifiers: List[Tuple[str, str]] = []
    for child in node.named_children:
        if child.type != "export_clause":
            continue
        for specifier in child.named_children:
            if specifier.type != "export_specifier":
                continue
            local = _node_text(specifier.child_by_field_name("name"))
            alias = specifier.child_by_field_name("alias")
            exported = _string_value(alias) if alias is not None else local
            if exported == "default":
                decoded.append(ExportDefault(name=local))
            else:
                specifiers.append((local, exported))
    decoded.append(ExportNamed(specifiers=specifiers))
    return decoded


__all__ = ["SourceParser"]
