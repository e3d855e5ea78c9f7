from __future__ import annotations

import argparse
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, TextIO

from dotenv import load_dotenv

from dualsync.adapters.registry import TomlModuleRegistry
from dualsync.app import all_dual_life_modules, compare_modules, crosscheck_modules
from dualsync.config import (
    ConfigurationError,
    configure_logging,
    get_registry_config,
    get_storage_config,
)
from dualsync.domain.errors import RegistryIntegrityError, UsageError
from dualsync.domain.reconciliation import CompareOptions

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from types import FrameType

    from dualsync.domain.ports import ModuleRegistry

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="dualsync",
        description="Compare dual-life modules in the core tree with their archive distributions",
    )
    parser.add_argument("modules", nargs="*", metavar="MODULE", help="Modules to process")
    parser.add_argument(
        "-x",
        "--crosscheck",
        action="store_true",
        help="Check recorded distributions against the archive's package index",
    )
    parser.add_argument(
        "-a",
        "--all",
        action="store_true",
        help="Process every dual-life module in the registry",
    )
    parser.add_argument(
        "-c",
        "--cachedir",
        type=Path,
        help="Existing directory for downloaded archives (defaults to a temporary one)",
    )
    parser.add_argument(
        "-d",
        "--diff",
        action="store_true",
        help="Show line diffs of modified files instead of classification lines",
    )
    parser.add_argument(
        "-D",
        "--diffopts",
        type=str,
        metavar="OPTIONS",
        help="Options passed to the diff command (default: -u). Attach the value, as in "
        "--diffopts='-u -w' or -D-w, since it starts with a dash",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Download the package index even if a cached copy exists",
    )
    parser.add_argument("-o", "--output", type=Path, help="Write the report to this file")
    parser.add_argument(
        "-r",
        "--reverse",
        action="store_true",
        help="Diff core tree against archive instead of archive against core tree",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Also list unchanged, excluded and ignored files",
    )
    parser.add_argument("--registry", type=Path, help="Module registry TOML file")
    parser.add_argument("--core-root", type=Path, help="Root of the core source tree")
    return parser.parse_args(list(argv))


def _validate_args(args: argparse.Namespace) -> None:
    if args.all and args.modules:
        raise UsageError("--all cannot be combined with an explicit module list")
    if not args.all and not args.modules:
        raise UsageError("Name at least one module or pass --all")
    if args.crosscheck:
        rejected = [
            flag
            for flag, given in (
                ("--diff", args.diff),
                ("--diffopts", args.diffopts is not None),
                ("--reverse", args.reverse),
                ("--verbose", args.verbose),
            )
            if given
        ]
        if rejected:
            raise UsageError(f"--crosscheck cannot be combined with {', '.join(rejected)}")
    elif args.force:
        raise UsageError("--force only applies to --crosscheck")


@contextmanager
def _open_output(path: Path | None) -> Iterator[TextIO]:
    if path is None:
        yield sys.stdout
        return
    with path.open("w", encoding="utf-8") as handle:
        yield handle


def _load_registry(args: argparse.Namespace) -> tuple[ModuleRegistry, Path]:
    config = get_registry_config(path=args.registry, core_root=args.core_root)
    registry = TomlModuleRegistry.from_path(config.path, core_root=config.core_root)
    return registry, config.core_root


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    try:
        _validate_args(parsed_args)
    except UsageError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        registry, core_root = _load_registry(parsed_args)
        modules = all_dual_life_modules(registry) if parsed_args.all else parsed_args.modules
        storage = get_storage_config(cache_dir=parsed_args.cachedir)
        with _open_output(parsed_args.output) as output:
            if parsed_args.crosscheck:
                crosscheck_modules(
                    modules,
                    registry=registry,
                    output=output,
                    force=parsed_args.force,
                    storage=storage,
                )
            else:
                compare_modules(
                    modules,
                    registry=registry,
                    core_root=core_root,
                    output=output,
                    options=CompareOptions(
                        use_diff=parsed_args.diff,
                        reverse=parsed_args.reverse,
                        verbose=parsed_args.verbose,
                    ),
                    diff_options=parsed_args.diffopts,
                    storage=storage,
                )
    except (ConfigurationError, RegistryIntegrityError) as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
