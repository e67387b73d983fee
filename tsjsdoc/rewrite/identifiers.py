"""Per-file table of locally visible names and where they come from."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List

from ..logging import for_source, get_logger
from ..models import (
    ClassDeclaration,
    Comment,
    Declaration,
    IdentifierEntry,
    ImportDeclaration,
    SourceFile,
    VariableDeclaration,
)
from ..modules.resolver import ReferenceResolver

IdentifierTable = Dict[str, IdentifierEntry]

IGNORE_COMMENT = "* @ignore "
EMPTY_DOC_COMMENT = "*\n "

_ENUM_TAG = re.compile(r"@enum\b")
_CLASSDESC_TAG = "@classdesc"
_NON_CLASS_TAGS = re.compile(r"@(typedef|module|type)\b")
_EXTENDS_LINE = re.compile(r"@(extends|augments)\b")
_EXTENDS_INLINE = re.compile(r"[ \t]*@(?:extends|augments)\b[ \t]*(?:\{[^}]*\}|[^\s{}]+)?")


def _is_descriptive(comment: Comment) -> bool:
    return _CLASSDESC_TAG in comment.value or not _NON_CLASS_TAGS.search(comment.value)


class IdentifierTableBuilder:
    """Builds the identifier table and prepares class comments for the generator."""

    def __init__(self, resolver: ReferenceResolver) -> None:
        self.resolver = resolver
        self.logger = get_logger("rewrite.identifiers")

    def build(self, declarations: Iterable[Declaration], current_file_name: str) -> IdentifierTable:
        table: IdentifierTable = {}
        for declaration in declarations:
            if isinstance(declaration, ImportDeclaration):
                for binding in declaration.bindings:
                    table[binding.local] = IdentifierEntry(
                        name=binding.local,
                        is_default_import=binding.is_default,
                        origin_value=declaration.source,
                        imported_name=None if binding.imported == binding.local else binding.imported,
                    )
            elif isinstance(declaration, VariableDeclaration):
                docs = [comment for comment in declaration.comments if comment.is_doc]
                if docs and _ENUM_TAG.search(docs[-1].value):
                    for name in declaration.names:
                        table[name] = _local_entry(name, current_file_name)
            elif isinstance(declaration, ClassDeclaration) and declaration.name:
                table[declaration.name] = _local_entry(declaration.name, current_file_name)
        return table

    def add_typedefs(self, table: IdentifierTable, names: Iterable[str], current_file_name: str) -> None:
        for name in names:
            table[name] = _local_entry(name, current_file_name)

    def apply_class_comments(self, source_file: SourceFile, table: IdentifierTable) -> None:
        """Give every class exactly one descriptive comment and an explicit ``@extends``."""
        for declaration in source_file.declarations:
            if isinstance(declaration, ClassDeclaration):
                self._prepare_class(source_file, declaration, table)

    def _prepare_class(
        self, source_file: SourceFile, declaration: ClassDeclaration, table: IdentifierTable
    ) -> None:
        comments = declaration.comments
        # Only `export class` wrappers; `export default class` keeps its comment.
        if not comments and declaration.export_kind == "named":
            self._migrate_wrapper_comments(source_file, declaration)

        docs = [comment for comment in comments if comment.is_doc]
        if not docs or not _is_descriptive(docs[-1]):
            created = Comment(value=EMPTY_DOC_COMMENT, anchor=declaration.start)
            source_file.add_comment(created)
            comments.append(created)
            docs.append(created)

        comment = docs[-1]
        lines = comment.value.split("\n")
        if _CLASSDESC_TAG not in comment.value:
            head = lines[0].rstrip()
            lines[0] = head + " " + _CLASSDESC_TAG + lines[0][len(head) :]

        if declaration.superclass:
            # Line 0 also holds @classdesc; strip only the tag there.
            lines = [_EXTENDS_INLINE.sub("", lines[0])] + [
                line for line in lines[1:] if not _EXTENDS_LINE.search(line)
            ]
            extends = f" * @extends {self._superclass_reference(source_file, declaration.superclass, table)}"
            if len(lines) > 1 and not lines[-1].strip():
                lines.insert(len(lines) - 1, extends)
            else:
                lines[-1] = lines[-1].rstrip()
                lines.extend([extends, " "])
        comment.value = "\n".join(lines)

    def _migrate_wrapper_comments(self, source_file: SourceFile, declaration: ClassDeclaration) -> None:
        moved: List[Comment] = []
        for comment in declaration.wrapper_comments:
            if not comment.is_doc or not _is_descriptive(comment):
                continue
            moved.append(Comment(value=comment.value, anchor=declaration.start))
            comment.value = IGNORE_COMMENT
        for comment in moved:
            source_file.add_comment(comment)
            declaration.comments.append(comment)

    def _superclass_reference(self, source_file: SourceFile, superclass: str, table: IdentifierTable) -> str:
        entry = table.get(superclass)
        if entry is None:
            return superclass
        reference = self.resolver.resolve_identifier(entry, source_file.directory)
        if reference is None:
            for_source(self.logger, source_file.path).debug("Superclass %s left unresolved", superclass)
            return superclass
        return reference


def _local_entry(name: str, current_file_name: str) -> IdentifierEntry:
    return IdentifierEntry(
        name=name,
        is_default_import=False,
        origin_value=current_file_name,
        declared_locally=True,
    )


__all__ = ["IdentifierTable", "IdentifierTableBuilder", "IGNORE_COMMENT"]
