"""Comment rewriting: type-expression normalization and identifier substitution."""

from .comments import CommentRewriter
from .identifiers import IdentifierTable, IdentifierTableBuilder
from .normalizer import TagSyntaxError, apply_replacements, find_tag_region, normalize
from .tags import TAG_NAMES, define_tags, normalize_tags, on_tag_text

__all__ = [
    "CommentRewriter",
    "IdentifierTable",
    "IdentifierTableBuilder",
    "TAG_NAMES",
    "TagSyntaxError",
    "apply_replacements",
    "define_tags",
    "find_tag_region",
    "normalize",
    "normalize_tags",
    "on_tag_text",
]
