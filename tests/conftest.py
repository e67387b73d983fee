from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.project_builder import ProjectBuilder
from tsjsdoc.logging import ROOT_LOGGER
from tsjsdoc.modules import ModuleGraph, ReferenceResolver
from tsjsdoc.source_parser import SourceParser


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop handlers installed by configure_logging; they hold captured streams."""
    yield
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)
    root.propagate = True


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def graph() -> ModuleGraph:
    """A module graph without a configured module root."""
    return ModuleGraph(SourceParser())


@pytest.fixture
def resolver(graph: ModuleGraph) -> ReferenceResolver:
    return ReferenceResolver(graph)
