"""CLI parser and command behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.project_builder import ProjectBuilder
from tsjsdoc.cli import DEFAULT_OUTPUT_DIR, _build_parser, main


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "rewrite", "src"])
    assert args.verbose is True
    assert args.command == "rewrite"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["rewrite", "src", "--verbose"])
    assert args.verbose is True
    assert args.command == "rewrite"


def test_cli_rewrite_defaults() -> None:
    parser = _build_parser()
    args = parser.parse_args(["rewrite", "a.js", "lib"])
    assert args.paths == ["a.js", "lib"]
    assert args.out == DEFAULT_OUTPUT_DIR
    assert args.module_root is None
    assert args.config == "."
    assert args.dry_run is False


def test_cli_rewrite_requires_a_path() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["rewrite"])


def test_rewrite_writes_mirrored_tree(project_builder: ProjectBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    src = project_builder.copy_fixture()
    out = project_builder.path() / "out"

    main(["rewrite", str(src), "--out", str(out), "--config", str(project_builder.path())])

    written = sorted(path.relative_to(out).as_posix() for path in out.rglob("*.js"))
    assert written == ["index.js", "sub/LeadingComments.js", "sub/NumberStore.js", "sub/Shapes.js"]
    assert "{module:proj4}" in (out / "index.js").read_text(encoding="utf-8")
    assert (src / "index.js").read_text(encoding="utf-8").count("import(") == 3
    assert "Rewrote 4 files into" in capsys.readouterr().out


def test_rewrite_dry_run_prints_diff(project_builder: ProjectBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    src = project_builder.copy_fixture()
    out = project_builder.path() / "out"

    main(["rewrite", str(src), "--dry-run", "--out", str(out), "--config", str(project_builder.path())])

    captured = capsys.readouterr().out
    assert "--- a/index.js" in captured
    assert "+ * @param {module:geojson~Geometry} geometry The geometry." in captured
    assert "4 of 4 files would change (dry-run)" in captured
    assert not out.exists()


def test_rewrite_missing_path_exits_with_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["rewrite", str(tmp_path / "missing"), "--config", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "Source path not found" in capsys.readouterr().err


def test_rewrite_reports_unterminated_type(project_builder: ProjectBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    (path,) = project_builder.write({"bad.js": "/** @param {Array<number> values */\nexport function f(values) {}\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(["rewrite", str(path), "--dry-run", "--config", str(project_builder.path())])

    assert excinfo.value.code == 1
    assert "tsjsdoc rewrite failed: Missing closing '}'" in capsys.readouterr().err
