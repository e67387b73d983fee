"""Pure helpers for turning import specifiers into files and module ids."""

from __future__ import annotations

import os
import posixpath
from typing import Callable, Iterable, List, Optional, Sequence

Exists = Callable[[str], bool]


def resolve_module_path(
    base_path: str,
    extensions: Sequence[str] = (".js",),
    index_filename: str = "index",
    exists: Exists = os.path.isfile,
) -> Optional[str]:
    """Return the file an import of ``base_path`` refers to, or ``None``.

    Candidates, in order: the path itself, the path with each source extension
    appended, then ``<path>/<index_filename><ext>``.
    """
    base_path = os.path.normpath(base_path)
    candidates: List[str] = [base_path]
    if not base_path.endswith(tuple(extensions)):
        candidates.extend(base_path + ext for ext in extensions)
    candidates.extend(os.path.join(base_path, index_filename + ext) for ext in extensions)
    for candidate in candidates:
        if exists(candidate):
            return candidate
    return None


def common_root(paths: Iterable[str]) -> Optional[str]:
    """Return the nearest directory containing every path, or ``None`` when empty."""
    root: Optional[str] = None
    for path in paths:
        directory = os.path.dirname(os.path.abspath(path))
        root = directory if root is None else _common_prefix(root, directory)
    return root


def _common_prefix(left: str, right: str) -> str:
    try:
        return os.path.commonpath([left, right])
    except ValueError:
        # Different drives on Windows have no common ancestor.
        return os.path.abspath(os.sep)


def module_id_for(path: str, root: str, extensions: Sequence[str] = (".js",)) -> str:
    """Derive a module id: ``path`` relative to ``root``, forward slashes, no extension."""
    relative = os.path.relpath(path, root).replace(os.sep, "/").replace("\\", "/")
    for ext in sorted(extensions, key=len, reverse=True):
        if relative.endswith(ext):
            relative = relative[: -len(ext)]
            break
    segments = relative.split("/")
    while segments and segments[0] in {".", ".."}:
        segments.pop(0)
    return posixpath.join(*segments) if segments else ""


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith(".")


__all__ = ["common_root", "is_relative_specifier", "module_id_for", "resolve_module_path"]
