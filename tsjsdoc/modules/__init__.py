"""Module resolution: file lookup, export classification and reference building."""

from .graph import ModuleGraph
from .paths import common_root, module_id_for, resolve_module_path
from .resolver import ReferenceResolver, ResolutionLoopError, RetryGuard

__all__ = [
    "ModuleGraph",
    "ReferenceResolver",
    "ResolutionLoopError",
    "RetryGuard",
    "common_root",
    "module_id_for",
    "resolve_module_path",
]
