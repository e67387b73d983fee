"""Tag dictionary hook: which tags get their type expression normalized."""

from __future__ import annotations

import re
from typing import Callable, Dict, List, MutableMapping, Optional

from ..models import Replacement
from .normalizer import apply_replacements, find_tag_region, normalize

TagTextHook = Callable[[str], str]

TAG_NAMES = ("type", "typedef", "property", "return", "param", "template", "default", "member")
# JSDoc synonyms share their tag's definition.
TAG_SYNONYMS = {
    "returns": "return",
    "prop": "property",
    "arg": "param",
    "argument": "param",
    "var": "member",
    "defaultvalue": "default",
}

_BLOCK_TAG = re.compile(r"(?<![^\s*])@(\w+)[ \t]*(?=\{)")


def on_tag_text(text: str) -> str:
    """Rewrite one tag occurrence's raw text; raises ``TagSyntaxError`` when unbalanced."""
    return normalize(text)


def define_tags(dictionary: MutableMapping[str, TagTextHook]) -> MutableMapping[str, TagTextHook]:
    """Register :func:`on_tag_text` for every handled tag name and synonym."""
    for name in TAG_NAMES:
        dictionary[name] = on_tag_text
    for synonym in TAG_SYNONYMS:
        dictionary[synonym] = on_tag_text
    return dictionary


TAG_DICTIONARY: Dict[str, TagTextHook] = dict(define_tags({}))


def normalize_tags(comment_text: str, dictionary: Optional[MutableMapping[str, TagTextHook]] = None) -> str:
    """Run each registered tag hook over its tag's brace region within a comment."""
    hooks = TAG_DICTIONARY if dictionary is None else dictionary
    replacements: List[Replacement] = []
    position = 0
    while True:
        match = _BLOCK_TAG.search(comment_text, position)
        if match is None:
            break
        region = find_tag_region(comment_text, match.end())
        if region is None:
            break
        open_index, close_index = region
        hook = hooks.get(match.group(1))
        if hook is not None:
            segment = comment_text[open_index : close_index + 1]
            rewritten = hook(segment)
            if rewritten != segment:
                replacements.append((open_index, close_index + 1, rewritten))
        position = close_index + 1
    return apply_replacements(comment_text, replacements)


__all__ = [
    "TAG_DICTIONARY",
    "TAG_NAMES",
    "TAG_SYNONYMS",
    "define_tags",
    "normalize_tags",
    "on_tag_text",
]
