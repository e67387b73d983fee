"""Delimiter- and string-aware rewriting of one tag's type expression.

The scanner walks the region between the first unescaped ``{`` and its
matching ``}`` once, tracking brace depth, a parenthesis stack, square
brackets and a single in-string flag. It records replacements instead of
editing as it goes, so every offset stays valid until the batch is applied.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

from ..models import Replacement

MISSING_CLOSING_BRACE = "Missing closing '}'"

_QUOTES = "'\"`"
_SUBJECT_CLOSERS = ")]>"
_SIGNATURE_TAIL = re.compile(r"\s*(?:=>|:)")
_FUNCTION_KEYWORD = re.compile(r"(?<![\w$])function\s*$")
# Whitespace and comment line margins (" * ") before the closing brace.
_CLOSING_BRACE_AHEAD = re.compile(r"(?:\s*\*(?!/))*\s*\}")
_QUOTED_KEY = re.compile(r"""\[(['"])((?:\\.|(?!\1)[^\\])*)\1\]""")
_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")


class TagSyntaxError(ValueError):
    """Raised when a tag's brace region never closes."""

    def __init__(self, text: str) -> None:
        super().__init__(MISSING_CLOSING_BRACE)
        self.text = text

    def __str__(self) -> str:
        return f"{MISSING_CLOSING_BRACE} in {self.text!r}"


def apply_replacements(text: str, replacements: Iterable[Replacement]) -> str:
    """Apply non-overlapping ``(start, end, text)`` edits recorded against ``text``."""
    offset = 0
    for start, end, new_text in sorted(replacements, key=lambda item: (item[0], item[1])):
        text = text[: start + offset] + new_text + text[end + offset :]
        offset += len(new_text) - (end - start)
    return text


def find_tag_region(text: str, start: int = 0) -> Optional[Tuple[int, int]]:
    """Return ``(open, close)`` indices of the first brace region at or after ``start``."""
    open_index = _find_unescaped_brace(text, start)
    if open_index is None:
        return None
    close_index, _ = _scan(text, open_index)
    return open_index, close_index


def normalize(tag_text: str) -> str:
    """Rewrite the type expression in ``tag_text`` into generator-legal syntax.

    Text outside the first brace region is returned untouched. Raises
    :class:`TagSyntaxError` when the region is not closed.
    """
    open_index = _find_unescaped_brace(tag_text, 0)
    if open_index is None:
        return tag_text
    close_index, replacements = _scan(tag_text, open_index)
    region = tag_text[open_index : close_index + 1]
    shifted = [(start - open_index, end - open_index, text) for start, end, text in replacements]
    rewritten = apply_replacements(region, shifted).replace("`", "'")
    return tag_text[:open_index] + rewritten + tag_text[close_index + 1 :]


def _find_unescaped_brace(text: str, start: int) -> Optional[int]:
    index = start
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == "{":
            return index
        index += 1
    return None


def _is_subject(char: str) -> bool:
    return char.isalnum() or char in "_$" or char in _SUBJECT_CLOSERS


def _without_inside(replacements: List[Replacement], start: int, end: int) -> List[Replacement]:
    return [item for item in replacements if not (item[0] >= start and item[1] <= end)]


def _scan(text: str, open_index: int) -> Tuple[int, List[Replacement]]:
    depth = 0
    quote: Optional[str] = None
    parens: List[int] = []
    # (index, is_tuple) for every open square bracket.
    brackets: List[Tuple[int, bool]] = []
    replacements: List[Replacement] = []

    index = open_index
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if quote is not None:
            if char == quote:
                quote = None
            index += 1
            continue

        if char in _QUOTES:
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index, replacements
        elif char == "(":
            parens.append(index)
        elif char == ")" and parens:
            start = parens.pop()
            tail = _SIGNATURE_TAIL.match(text, index + 1)
            if tail is not None:
                end = tail.end()
                if _FUNCTION_KEYWORD.search(text, open_index, start):
                    signature = "():"
                else:
                    signature = "function():"
                replacements = _without_inside(replacements, start, end)
                replacements.append((start, end, signature))
                index = end
                continue
        elif char == "[":
            previous = text[index - 1] if index > open_index else ""
            if previous and _is_subject(previous):
                key = _QUOTED_KEY.match(text, index)
                if key is not None:
                    name = key.group(2)
                    member = name if _IDENTIFIER.fullmatch(name) else f'"{name}"'
                    replacements.append((index, key.end(), f".{member}"))
                    index = key.end()
                    continue
                brackets.append((index, False))
            else:
                brackets.append((index, True))
        elif char == "]" and brackets:
            start, is_tuple = brackets.pop()
            if is_tuple and not any(outer for _, outer in brackets):
                replacements = _without_inside(replacements, start, index + 1)
                replacements.append((start, index + 1, "Array"))
        elif char == ";" and depth >= 1:
            if _CLOSING_BRACE_AHEAD.match(text, index + 1):
                replacements.append((index, index + 1, ""))
            else:
                replacements.append((index, index + 1, ","))
        index += 1

    raise TagSyntaxError(text)


__all__ = [
    "MISSING_CLOSING_BRACE",
    "TagSyntaxError",
    "apply_replacements",
    "find_tag_region",
    "normalize",
]
