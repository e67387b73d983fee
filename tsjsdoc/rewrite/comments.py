"""Per-file orchestration of comment rewriting."""

from __future__ import annotations

import re
from typing import Dict, List, Set, Tuple

from ..logging import SourceFileLogger, for_source, get_logger
from ..models import Comment, Replacement, SourceFile
from ..modules.resolver import ReferenceResolver, RetryGuard
from .identifiers import IdentifierTable, IdentifierTableBuilder
from .normalizer import apply_replacements, find_tag_region
from .tags import normalize_tags

_TYPEOF = re.compile(r"typeof ([^,|}>]*)([,|}>])")
_OVERRIDE = re.compile(r"[ \t]*@override\b[ \t]*")
_IMPORT_EXPRESSION = re.compile(
    r"""import\(\s*["']([^"']*)["']\s*\)(?:\.([^\s.|}><,)=#]+))?(?=[\s.|}><,)=#]|$)"""
)
_TYPEDEF_HEAD = re.compile(r"@typedef\b")
_TYPEDEF_NAME = re.compile(r"\s*([^\s*{}]+)")
_TEMPLATE = re.compile(r"@template\s+(?:\{[^}]+\}\s+)?([\w$]+(?:\s*,\s*[\w$]+)*)")
_TYPE_SLOT_TAG = re.compile(r"(?<![^\s*])@\w+[ \t]*(?=\{)")
_LEAD_PUNCTUATION = "{<|,(!?:"
# " * " margins on the continuation lines of a multi-line comment.
_MARGIN = r"(?:\s*\*(?!/))*\s*"
_CONTINUATION_MARGIN = re.compile(r"\n[ \t]*\*(?!/)[ \t]?")


class CommentRewriter:
    """Rewrites every doc comment of a source file in place."""

    def __init__(
        self,
        resolver: ReferenceResolver,
        *,
        retry_limit: int = 100,
        table_builder: IdentifierTableBuilder | None = None,
    ) -> None:
        self.resolver = resolver
        self.retry_limit = retry_limit
        self.table_builder = table_builder or IdentifierTableBuilder(resolver)
        self.logger = get_logger("rewrite.comments")

    def rewrite(self, source_file: SourceFile) -> IdentifierTable:
        """Rewrite ``source_file``'s comments and return its identifier table."""
        log = for_source(self.logger, source_file.path)
        table = self.table_builder.build(source_file.declarations, source_file.name)
        self.table_builder.apply_class_comments(source_file, table)

        doc_comments = [comment for comment in source_file.comments if comment.is_doc]
        typedefs: List[str] = []
        template_parameters: Set[str] = set()
        for comment in doc_comments:
            comment.value = _TYPEOF.sub(r"Class<\1>\2", comment.value)
            comment.value = _strip_override(comment.value)
            comment.value = self._rewrite_imports(source_file, comment, log)
            comment.value = normalize_tags(comment.value)
            typedefs.extend(_typedef_names(comment.value))
            template_parameters.update(_template_names(comment.value))

        self.table_builder.add_typedefs(table, typedefs, source_file.name)

        references = self._resolve_table(source_file, table, template_parameters, log)
        if references:
            for comment in doc_comments:
                comment.value = _substitute_identifiers(comment.value, references)
        log.debug("Rewrote %d comments (%d identifiers)", len(doc_comments), len(references))
        return table

    def _rewrite_imports(self, source_file: SourceFile, comment: Comment, log: SourceFileLogger) -> str:
        text = comment.value
        guard = RetryGuard(self.retry_limit, file_name=str(source_file.path), comment=text)
        position = 0
        while True:
            match = _IMPORT_EXPRESSION.search(text, position)
            if match is None:
                return text
            guard.attempt(match.group(0))
            specifier, export_name = match.group(1), match.group(2)
            replacement = self.resolver.resolve_import(specifier, export_name, source_file.directory)
            if replacement is None:
                log.debug("Leaving %s unresolved", match.group(0))
                position = match.end()
                continue
            rewritten = text[: match.start()] + replacement + text[match.end() :]
            if rewritten != text:
                guard.reset()
            text = rewritten
            # Replacement text has a different length; scan again from the start.
            position = 0

    def _resolve_table(
        self, source_file: SourceFile, table: IdentifierTable, skip: Set[str], log: SourceFileLogger
    ) -> Dict[str, str]:
        references: Dict[str, str] = {}
        for name, entry in table.items():
            if name in skip:
                continue
            reference = self.resolver.resolve_identifier(entry, source_file.directory)
            if reference is None:
                log.debug("Identifier %s left unresolved", name)
                continue
            references[name] = reference
        return references


def _strip_override(text: str) -> str:
    lines = text.split("\n")
    kept = []
    for line in lines:
        if _OVERRIDE.search(line):
            stripped = _OVERRIDE.sub(" ", line).rstrip()
            if stripped.strip(" \t*") == "":
                continue
            line = stripped
        kept.append(line)
    return "\n".join(kept)


def _strip_margins(text: str) -> str:
    return _CONTINUATION_MARGIN.sub("\n", text)


def _typedef_names(text: str) -> List[str]:
    text = _strip_margins(text)
    names = []
    for match in _TYPEDEF_HEAD.finditer(text):
        position = match.end()
        region = find_tag_region(text, position)
        if region is not None and not text[position : region[0]].strip():
            position = region[1] + 1
        name = _TYPEDEF_NAME.match(text, position)
        if name is not None and not name.group(1).startswith("@"):
            names.append(name.group(1))
    return names


def _template_names(text: str) -> List[str]:
    text = _strip_margins(text)
    names = []
    for match in _TEMPLATE.finditer(text):
        names.extend(part.strip() for part in match.group(1).split(","))
    return names


def _type_regions(text: str) -> List[Tuple[int, int]]:
    regions = []
    position = 0
    while True:
        match = _TYPE_SLOT_TAG.search(text, position)
        if match is None:
            return regions
        region = find_tag_region(text, match.end())
        if region is None:
            return regions
        # Inline tags such as {@link ...} are not type expressions.
        if not text.startswith("{@", region[0]):
            regions.append(region)
        position = region[1] + 1


def _substitute_identifiers(text: str, references: Dict[str, str]) -> str:
    for name, reference in references.items():
        text = _substitute_in_type_regions(text, name, reference)
        text = _substitute_events(text, name, reference)
        text = _substitute_links(text, name, reference)
    return text


def _substitute_in_type_regions(text: str, name: str, reference: str) -> str:
    pattern = re.compile(
        r"(?P<lead>[" + re.escape(_LEAD_PUNCTUATION) + r"]" + _MARGIN + r"(?:\.\.\.)?)"
        + re.escape(name)
        + r"(?![\w$])(?!\s*\??:)"
    )
    replacements: List[Replacement] = []
    for open_index, close_index in _type_regions(text):
        for match in pattern.finditer(text, open_index, close_index + 1):
            if match.group("lead")[0] == ":" and text.endswith("module", 0, match.start()):
                continue
            start = match.start() + len(match.group("lead"))
            replacements.append((start, match.end(), reference))
    return apply_replacements(text, replacements)


def _substitute_events(text: str, name: str, reference: str) -> str:
    pattern = re.compile(r"(@(?:event|fires|emits)\s+)" + re.escape(name) + r"(?![\w$])")
    return pattern.sub(lambda match: match.group(1) + reference, text)


def _substitute_links(text: str, name: str, reference: str) -> str:
    member = r"(?P<member>(?:[#.~][\w$:]+)*)"
    link = re.compile(
        r"\{@(?P<tag>link\w*)\s+" + re.escape(name) + member + r"(?P<display>(?:\s*\||\s)[^}]*)?\}"
    )
    see = re.compile(r"(?P<lead>@see\s+)" + re.escape(name) + member + r"(?=\s|$)")

    def _link(match: "re.Match[str]") -> str:
        target = reference + match.group("member")
        display = match.group("display")
        if display is None or not display.strip(" \t|"):
            display = " " + name + match.group("member")
        return "{@" + match.group("tag") + " " + target + display + "}"

    def _see(match: "re.Match[str]") -> str:
        target = reference + match.group("member")
        return f"{match.group('lead')}{{@link {target} {name}{match.group('member')}}}"

    return see.sub(_see, link.sub(_link, text))


__all__ = ["CommentRewriter"]
