"""Core data models shared across tsjsdoc components."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Optional, Tuple, Union

# (start, end, text) against the offsets of one string.
Replacement = Tuple[int, int, str]


@dataclass(eq=False)
class Comment:
    """A block comment whose text can be rewritten in place.

    ``value`` is the text between ``/*`` and ``*/``. Comments synthesized during
    rewriting have no source span and are inserted at ``anchor`` instead.
    """

    value: str
    start: Optional[int] = None
    end: Optional[int] = None
    anchor: Optional[int] = None

    @property
    def is_doc(self) -> bool:
        return self.value.startswith("*")

    @property
    def synthetic(self) -> bool:
        return self.start is None

    def render(self) -> str:
        return f"/*{self.value}*/"


@dataclass
class ImportBinding:
    """One locally bound name introduced by an import statement."""

    local: str
    imported: str
    is_default: bool


@dataclass
class ImportDeclaration:
    source: str
    bindings: List[ImportBinding] = field(default_factory=list)


@dataclass
class ClassDeclaration:
    """A top-level class, possibly wrapped in an ``export`` statement.

    ``comments`` are attached to the class itself; ``wrapper_comments`` belong
    to the enclosing export statement when there is one.
    """

    name: Optional[str]
    start: int
    superclass: Optional[str] = None
    comments: List[Comment] = field(default_factory=list)
    wrapper_comments: List[Comment] = field(default_factory=list)
    export_kind: Optional[str] = None  # "named", "default" or None


@dataclass
class ExportDefault:
    """``export default <identifier>``."""

    name: str


@dataclass
class ExportNamed:
    """``export { A, B as C }`` without a source module, as (local, exported) pairs."""

    specifiers: List[Tuple[str, str]] = field(default_factory=list)


@dataclass
class VariableDeclaration:
    names: List[str] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    exported: bool = False


@dataclass
class OtherDeclaration:
    kind: str


Declaration = Union[
    ImportDeclaration,
    ClassDeclaration,
    ExportDefault,
    ExportNamed,
    VariableDeclaration,
    OtherDeclaration,
]


@dataclass(eq=False)
class SourceFile:
    """A parsed source file: its comments in document order and top-level declarations."""

    path: Path
    source: bytes
    comments: List[Comment] = field(default_factory=list)
    declarations: List[Declaration] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def directory(self) -> Path:
        return self.path.parent

    def add_comment(self, comment: Comment) -> None:
        self.comments.append(comment)

    def render(self) -> str:
        """Return the source text with every comment's current value spliced in."""
        edits: List[Tuple[int, int, bytes]] = []
        for comment in self.comments:
            text = comment.render().encode("utf-8")
            if comment.start is not None and comment.end is not None:
                edits.append((comment.start, comment.end, text))
            elif comment.anchor is not None:
                edits.append((comment.anchor, comment.anchor, text + b" "))
        # Insertions sort before a replacement starting at the same offset.
        edits.sort(key=lambda edit: (edit[0], edit[1]))
        pieces: List[bytes] = []
        position = 0
        for start, end, text in edits:
            pieces.append(self.source[position:start])
            pieces.append(text)
            position = end
        pieces.append(self.source[position:])
        return b"".join(pieces).decode("utf-8")


@dataclass
class IdentifierEntry:
    """Where a locally visible name comes from."""

    name: str
    is_default_import: bool
    origin_value: str
    declared_locally: bool = False
    imported_name: Optional[str] = None


@dataclass(frozen=True)
class ModuleInfo:
    """Documentation identity and export shape of one resolved source file."""

    id: str
    default_export_name: Optional[str] = None
    named_export_class_names: FrozenSet[str] = frozenset()
