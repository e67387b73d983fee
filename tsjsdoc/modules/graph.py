"""Lazily populated cache of parsed source files and their export shapes."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ..logging import for_source, get_logger
from ..models import (
    ClassDeclaration,
    ExportDefault,
    ExportNamed,
    ModuleInfo,
    SourceFile,
)
from ..source_parser import SourceParser
from .paths import common_root, module_id_for, resolve_module_path

_MODULE_TAG = re.compile(r"@module[ \t]+(?:module:)?([^\s*]+)")


class ModuleGraph:
    """Parses files on first reference and memoizes a :class:`ModuleInfo` per path.

    Every ``SourceFile`` in a session comes from here, so a file that is both
    visited and referenced from another file is parsed exactly once. Keys are
    resolved absolute paths.
    """

    def __init__(
        self,
        parser: SourceParser,
        *,
        module_root: Optional[Path] = None,
        extensions: Sequence[str] = (".js",),
        index_filename: str = "index",
    ) -> None:
        self._parser = parser
        self._module_root = str(module_root) if module_root is not None else None
        self._extensions = tuple(extensions)
        self._index_filename = index_filename
        self._files: Dict[str, SourceFile] = {}
        self._infos: Dict[str, ModuleInfo] = {}
        self._run_files: List[str] = []
        self._implicit_root: Optional[str] = None
        self.logger = get_logger("modules.graph")

    def register_run_files(self, paths: Iterable[Path]) -> None:
        """Record the files processed in this run; they define the implicit root."""
        self._run_files.extend(os.path.abspath(path) for path in paths)
        self._implicit_root = None

    def resolve_path(self, base_path: str) -> Optional[str]:
        return resolve_module_path(
            os.path.abspath(base_path), self._extensions, self._index_filename
        )

    def source_file(self, path: Path | str) -> SourceFile:
        key = os.path.abspath(path)
        cached = self._files.get(key)
        if cached is None:
            self.logger.debug("Parsing %s", key)
            cached = self._parser.parse_file(Path(key))
            self._files[key] = cached
        return cached

    def module_info(self, path: Path | str) -> Optional[ModuleInfo]:
        """Return the memoized module info for ``path``, or ``None`` if no file backs it."""
        resolved = self.resolve_path(str(path))
        if resolved is None:
            return None
        cached = self._infos.get(resolved)
        if cached is not None:
            return cached

        source_file = self.source_file(resolved)
        info = _scan_exports(source_file, self._module_id(resolved, source_file))
        for_source(self.logger, resolved).debug("module id %s", info.id)
        # A nested lookup may already have stored this path.
        return self._infos.setdefault(resolved, info)

    def implicit_root(self) -> Optional[str]:
        if self._implicit_root is None and self._run_files:
            self._implicit_root = common_root(self._run_files)
        return self._implicit_root

    def _module_id(self, path: str, source_file: SourceFile) -> str:
        for comment in source_file.comments:
            if not comment.is_doc:
                continue
            match = _MODULE_TAG.search(comment.value)
            if match:
                return match.group(1)
        root = self._module_root or self.implicit_root() or os.path.dirname(path)
        return module_id_for(path, root, self._extensions)


def _scan_exports(source_file: SourceFile, module_id: str) -> ModuleInfo:
    classes: Set[str] = set()
    default_export: Optional[str] = None
    named: Set[str] = set()
    for declaration in source_file.declarations:
        if isinstance(declaration, ClassDeclaration):
            if declaration.name is None:
                continue
            classes.add(declaration.name)
            if declaration.export_kind == "default":
                default_export = declaration.name
            elif declaration.export_kind == "named":
                named.add(declaration.name)
        elif isinstance(declaration, ExportDefault):
            if declaration.name in classes:
                default_export = declaration.name
        elif isinstance(declaration, ExportNamed):
            named.update(exported for local, exported in declaration.specifiers if local in classes)
    return ModuleInfo(
        id=module_id,
        default_export_name=default_export,
        named_export_class_names=frozenset(named),
    )


__all__ = ["ModuleGraph"]
