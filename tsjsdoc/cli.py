"""CLI entrypoints for tsjsdoc commands."""

from __future__ import annotations

import argparse
import difflib
import sys
from pathlib import Path
from typing import List, Sequence

from .config import ConfigError, load_config
from .logging import configure_logging, get_logger
from .modules import ResolutionLoopError, common_root
from .rewrite import TagSyntaxError
from .scanner import SourceScanner
from .session import RewriteResult, Session

DEFAULT_OUTPUT_DIR = "tsjsdoc-out"


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tsjsdoc",
        description="Rewrite TypeScript-flavored JSDoc annotations into resolved JSDoc.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    rewrite_parser = subparsers.add_parser(
        "rewrite",
        help="Rewrite doc comments of the given files or directories.",
    )
    _add_verbose_option(rewrite_parser, suppress_default=True)
    rewrite_parser.add_argument(
        "paths",
        nargs="+",
        help="Source files or directories to rewrite.",
    )
    rewrite_parser.add_argument(
        "--out",
        default=DEFAULT_OUTPUT_DIR,
        help=f"Directory receiving rewritten files (defaults to ./{DEFAULT_OUTPUT_DIR}).",
    )
    rewrite_parser.add_argument(
        "--module-root",
        default=None,
        help="Directory module ids are derived from (defaults to the common root of all files).",
    )
    rewrite_parser.add_argument(
        "--config",
        default=".",
        help="Path to .tsjsdoc.yml or the directory containing it.",
    )
    rewrite_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print a diff of the rewritten comments instead of writing files.",
    )
    rewrite_parser.add_argument(
        "--log-file",
        default=None,
        help="Also write detailed logs to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for tsjsdoc commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if getattr(args, "log_file", None) else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    if args.command == "rewrite":
        try:
            results = _run_rewrite(args)
        except (FileNotFoundError, ConfigError) as exc:
            parser.exit(1, f"{exc}\n")
        except (TagSyntaxError, ResolutionLoopError) as exc:
            parser.exit(1, f"tsjsdoc rewrite failed: {exc}\nRun with --verbose for more details.\n")
        _report(results, args)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_rewrite(args: argparse.Namespace) -> List[RewriteResult]:
    config = load_config(Path(args.config), module_root=args.module_root)
    session = Session(config)
    files = SourceScanner(config).scan(args.paths)
    results = session.run(files)
    session.complete()
    return results


def _report(results: Sequence[RewriteResult], args: argparse.Namespace) -> None:
    if not results:
        print("No source files found")
        return
    root = Path(common_root(str(result.path) for result in results) or ".")
    if args.dry_run:
        changed = [result for result in results if result.changed]
        for result in changed:
            relative = result.path.relative_to(root).as_posix()
            diff = difflib.unified_diff(
                result.original.splitlines(keepends=True),
                result.rewritten.splitlines(keepends=True),
                fromfile=f"a/{relative}",
                tofile=f"b/{relative}",
            )
            sys.stdout.writelines(diff)
        print(f"{len(changed)} of {len(results)} files would change (dry-run)")
        return

    out_dir = Path(args.out).expanduser().resolve()
    for result in results:
        target = out_dir / result.path.relative_to(root)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(result.rewritten, encoding="utf-8")
    get_logger("cli").debug("Wrote %d files under %s", len(results), out_dir)
    print(f"Rewrote {len(results)} files into {_relativize(out_dir)}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
