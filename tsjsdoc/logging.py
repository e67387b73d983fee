"""Logging for tsjsdoc: one logger per component, records tagged with the source file."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, MutableMapping, Tuple

ROOT_LOGGER = "tsjsdoc"

CONSOLE_FORMAT = "[tsjsdoc] %(levelname)s %(component)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(component: str | None = None) -> logging.Logger:
    """Return the logger for ``component`` (``"modules.graph"``, ``"cli"``, ...)."""
    return logging.getLogger(f"{ROOT_LOGGER}.{component}" if component else ROOT_LOGGER)


class SourceFileLogger(logging.LoggerAdapter):
    """Prefixes messages with the file currently being rewritten."""

    def __init__(self, logger: logging.Logger, path: Path | str) -> None:
        super().__init__(logger, {"source_path": str(path)})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        name = os.path.basename(self.extra["source_path"])  # type: ignore[index]
        return f"{name}: {msg}", kwargs


def for_source(logger: logging.Logger, path: Path | str) -> SourceFileLogger:
    return SourceFileLogger(logger, path)


class _ComponentFilter(logging.Filter):
    """Adds ``record.component``: the logger name below the tsjsdoc root."""

    def filter(self, record: logging.LogRecord) -> bool:
        prefix = ROOT_LOGGER + "."
        record.component = record.name[len(prefix) :] if record.name.startswith(prefix) else "main"
        return True


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """Install console (and optional file) handlers on the tsjsdoc root logger.

    Calling it again replaces the previous handlers, so repeated CLI runs in
    one process do not duplicate output. Debug records (per-file processing,
    resolution misses, module ids) only appear with ``verbose``.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    handlers: list[Tuple[logging.Handler, str]] = [(logging.StreamHandler(), CONSOLE_FORMAT)]
    if log_file is not None:
        handlers.append((logging.FileHandler(log_file, encoding="utf-8"), FILE_FORMAT))
    for handler, fmt in handlers:
        handler.setLevel(level)
        handler.addFilter(_ComponentFilter())
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)
    return root


__all__ = ["ROOT_LOGGER", "SourceFileLogger", "configure_logging", "for_source", "get_logger"]
