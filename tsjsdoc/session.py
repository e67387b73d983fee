"""One rewriting run: owns the caches and drives files through the rewriter."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .config import TsJsDocConfig
from .logging import for_source, get_logger
from .models import SourceFile
from .modules import ModuleGraph, ReferenceResolver
from .rewrite import CommentRewriter, IdentifierTable
from .source_parser import SourceParser

LinkInherited = Callable[[Sequence[SourceFile]], None]


@dataclass
class RewriteResult:
    """Outcome of rewriting one file."""

    source_file: SourceFile
    original: str
    rewritten: str
    identifiers: IdentifierTable

    @property
    def path(self) -> Path:
        return self.source_file.path

    @property
    def changed(self) -> bool:
        return self.original != self.rewritten


class Session:
    """Explicit context for a run; nothing here outlives the session object.

    Files are processed one at a time, in the order given. The module graph is
    shared by every file in the session, so a file referenced by another one
    is parsed once and reused when it is visited itself.
    """

    def __init__(self, config: TsJsDocConfig, parser: SourceParser | None = None) -> None:
        self.config = config.validate()
        self.graph = ModuleGraph(
            parser or SourceParser(),
            module_root=config.module_root,
            extensions=config.source_extensions,
            index_filename=config.index_filename,
        )
        self.resolver = ReferenceResolver(self.graph)
        self.rewriter = CommentRewriter(self.resolver, retry_limit=config.retry_limit)
        self.logger = get_logger("session")
        self._results: Dict[Path, RewriteResult] = {}
        self._completed = False

    def run(self, paths: Iterable[Path]) -> List[RewriteResult]:
        """Rewrite every file in ``paths``; the set defines the implicit module root."""
        files = [Path(path).resolve() for path in paths]
        self.graph.register_run_files(files)
        self.logger.info("Rewriting %d files", len(files))
        results = [self.process_file(path) for path in files]
        changed = sum(1 for result in results if result.changed)
        self.logger.info("Rewrote %d of %d files", changed, len(results))
        return results

    def process_file(self, path: Path) -> RewriteResult:
        path = Path(path).resolve()
        existing = self._results.get(path)
        if existing is not None:
            return existing
        for_source(self.logger, path).debug("processing")
        source_file = self.graph.source_file(path)
        original = source_file.render()
        identifiers = self.rewriter.rewrite(source_file)
        result = RewriteResult(
            source_file=source_file,
            original=original,
            rewritten=source_file.render(),
            identifiers=identifiers,
        )
        self._results[path] = result
        return result

    @property
    def results(self) -> List[RewriteResult]:
        return list(self._results.values())

    def complete(self, link_inherited: Optional[LinkInherited] = None) -> None:
        """Hand every processed file to the inheritance-linking step, exactly once."""
        if self._completed:
            raise RuntimeError("Session.complete() may only be called once")
        self._completed = True
        if link_inherited is not None:
            link_inherited([result.source_file for result in self._results.values()])


__all__ = ["RewriteResult", "Session"]
