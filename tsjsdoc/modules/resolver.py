"""Turns local names and import origins into qualified ``module:`` references."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from ..logging import get_logger
from ..models import IdentifierEntry
from .graph import ModuleGraph
from .paths import is_relative_specifier

DEFAULT_EXPORT = "default"


class ResolutionLoopError(RuntimeError):
    """Raised when the same expression keeps coming back during rewriting."""

    def __init__(self, expression: str, attempts: int, file_name: str, comment: str) -> None:
        super().__init__(
            f"Gave up on {expression!r} after {attempts} attempts in {file_name}:\n{comment}"
        )
        self.expression = expression
        self.attempts = attempts
        self.file_name = file_name
        self.comment = comment


class RetryGuard:
    """Counts consecutive attempts at the same expression within one comment."""

    def __init__(self, limit: int = 100, *, file_name: str = "", comment: str = "") -> None:
        self.limit = limit
        self.file_name = file_name
        self.comment = comment
        self._last: Optional[str] = None
        self._count = 0

    def reset(self) -> None:
        """Forget the streak; called once a rewrite made progress."""
        self._last = None
        self._count = 0

    def attempt(self, expression: str) -> None:
        if expression == self._last:
            self._count += 1
        else:
            self._last = expression
            self._count = 1
        if self._count > self.limit:
            raise ResolutionLoopError(expression, self._count, self.file_name, self.comment)


class ReferenceResolver:
    """Produces fully qualified references using the module graph."""

    def __init__(self, graph: ModuleGraph) -> None:
        self.graph = graph
        self.logger = get_logger("modules.resolver")

    def resolve(
        self,
        origin: str,
        export_name: Optional[str],
        current_dir: Path | str,
        *,
        default: bool = False,
        local: bool = False,
    ) -> Optional[str]:
        """Return ``module:<id><delimiter><export>`` or ``None`` when unresolvable.

        ``origin`` is an import specifier, or a file name in ``current_dir``
        when ``local`` is set. Non-relative specifiers are not looked up on
        disk; the specifier itself becomes the module id.
        """
        if not local and not is_relative_specifier(origin):
            if default or not export_name:
                return f"module:{origin}"
            return f"module:{origin}~{export_name}"

        info = self.graph.module_info(os.path.join(str(current_dir), origin))
        if info is None:
            self.logger.debug("Could not resolve %s from %s", origin, current_dir)
            return None

        name = info.default_export_name if default else export_name
        if not name:
            return f"module:{_forward_slashes(info.id)}"
        if default or name not in info.named_export_class_names:
            delimiter = "~"
        else:
            delimiter = "."
        return f"module:{_forward_slashes(info.id)}{delimiter}{name}"

    def resolve_identifier(self, entry: IdentifierEntry, current_dir: Path | str) -> Optional[str]:
        return self.resolve(
            entry.origin_value,
            entry.imported_name or entry.name,
            current_dir,
            default=entry.is_default_import,
            local=entry.declared_locally,
        )

    def resolve_import(self, specifier: str, export_name: Optional[str], current_dir: Path | str) -> Optional[str]:
        """Resolve ``import("specifier").export_name``; ``default`` means the default export."""
        return self.resolve(
            specifier,
            export_name,
            current_dir,
            default=export_name == DEFAULT_EXPORT,
        )


def _forward_slashes(module_id: str) -> str:
    return module_id.replace("\\", "/")


__all__ = ["ReferenceResolver", "ResolutionLoopError", "RetryGuard"]
