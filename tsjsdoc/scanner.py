"""Source discovery: expands the requested paths into the files to rewrite."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from .config import TsJsDocConfig

# Dependency, VCS and default output directories.
_SKIPPED_DIRS = frozenset({".git", ".hg", ".svn", "node_modules", "bower_components", "tsjsdoc-out"})


@dataclass(frozen=True)
class ExcludePattern:
    """One gitignore-style pattern: ``dist/``, ``/build``, ``*.min.js``, ``!keep.js``."""

    glob: str
    directory_only: bool = False
    rooted: bool = False
    negated: bool = False

    @classmethod
    def parse(cls, raw: str) -> Optional["ExcludePattern"]:
        text = raw.strip()
        if not text or text.startswith("#"):
            return None
        negated = text.startswith("!")
        text = text.lstrip("!")
        directory_only = text.endswith("/")
        text = text.rstrip("/")
        # A slash anywhere but the end anchors the pattern at the scan root.
        rooted = "/" in text
        text = text.lstrip("/")
        if not text:
            return None
        return cls(glob=text, directory_only=directory_only, rooted=rooted, negated=negated)

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.rooted:
            return fnmatchcase(rel_path, self.glob)
        return fnmatchcase(rel_path.rsplit("/", 1)[-1], self.glob)


class ExcludeMatcher:
    """Ordered patterns; the last matching one decides, as in .gitignore."""

    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns: List[ExcludePattern] = [
            pattern for pattern in map(ExcludePattern.parse, patterns) if pattern is not None
        ]

    @classmethod
    def for_root(cls, root: Path, configured: Iterable[str]) -> "ExcludeMatcher":
        gitignore = root / ".gitignore"
        lines = gitignore.read_text(encoding="utf-8").splitlines() if gitignore.is_file() else []
        return cls([*lines, *configured])

    def excludes(self, rel_path: str, is_dir: bool) -> bool:
        excluded = False
        for pattern in self.patterns:
            if pattern.matches(rel_path, is_dir):
                excluded = not pattern.negated
        return excluded


class SourceScanner:
    """Walks directories for source files, honoring .gitignore and configured excludes."""

    def __init__(self, config: TsJsDocConfig) -> None:
        self.config = config

    def scan(self, paths: Iterable[str | Path]) -> List[Path]:
        """Return de-duplicated absolute source paths; directories expand in sorted order."""
        found: List[Path] = []
        seen = set()
        for raw in paths:
            path = Path(raw).expanduser().resolve()
            if not path.exists():
                raise FileNotFoundError(f"Source path not found: {raw}")
            candidates = [path] if path.is_file() else sorted(self._walk(path))
            for candidate in candidates:
                if candidate not in seen:
                    seen.add(candidate)
                    found.append(candidate)
        return found

    def _walk(self, root: Path) -> Iterator[Path]:
        matcher = ExcludeMatcher.for_root(root, self.config.exclude_paths)
        extensions = tuple(self.config.source_extensions)

        for dirpath, dirnames, filenames in os.walk(root):
            rel_dir = Path(dirpath).relative_to(root).as_posix()
            prefix = "" if rel_dir == "." else rel_dir + "/"
            # Pruning in place keeps os.walk out of excluded trees.
            dirnames[:] = [
                name
                for name in dirnames
                if name not in _SKIPPED_DIRS and not matcher.excludes(prefix + name, True)
            ]
            for filename in filenames:
                if filename.endswith(extensions) and not matcher.excludes(prefix + filename, False):
                    yield Path(dirpath) / filename


__all__ = ["ExcludeMatcher", "ExcludePattern", "SourceScanner"]
