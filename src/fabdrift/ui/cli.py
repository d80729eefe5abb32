from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from fabdrift import __version__
from fabdrift.app import (
    check_drift,
    compare_fabrics,
    convert_fabric,
    import_fabric,
    wait_for_cluster,
)
from fabdrift.config import ConfigurationError, configure_logging
from fabdrift.domain.model import PersistedLayout
from fabdrift.domain.reconciliation import BackoffPolicy

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

log = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_USAGE = 2


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="fabdrift",
        description="Reconcile fabric topologies against files, manifests and live clusters",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    importer = subparsers.add_parser(
        "import",
        help="Reconstruct a fabric spec from persisted files",
    )
    importer.add_argument("path", type=Path, help="Directory holding FGD files or manifests")

    convert = subparsers.add_parser("convert", help="Re-encode a fabric into another layout")
    convert.add_argument("source", type=Path, help="Directory holding the fabric to convert")
    convert.add_argument("destination", type=Path, help="Fabric directory to write")
    convert.add_argument(
        "--layout",
        choices=[layout.value for layout in PersistedLayout],
        default=PersistedLayout.MANIFEST.value,
        help="Layout to write (default: %(default)s)",
    )
    convert.add_argument(
        "--namespace",
        default="default",
        help="Namespace stamped on manifests (default: %(default)s)",
    )

    diff = subparsers.add_parser("diff", help="Classify differences between two fabrics")
    diff.add_argument("before", type=Path)
    diff.add_argument("after", type=Path)

    drift = subparsers.add_parser(
        "drift",
        help="Compare a fabric with the copy stored under FABDRIFT_FGD_DIR",
    )
    drift.add_argument("fabric_id", help="Stored fabric id")
    drift.add_argument("current", type=Path, help="Directory holding the current topology")
    drift.add_argument(
        "--compare-timestamps",
        action="store_true",
        help="Report a changed generation timestamp as drift",
    )

    wait = subparsers.add_parser(
        "wait",
        help="Poll the cluster until every resource of a fabric exists",
    )
    wait.add_argument("fabric", type=Path, help="Directory holding the expected fabric")
    wait.add_argument("--run-id", required=True, help="Run id scoping namespace and labels")
    wait.add_argument(
        "--max-attempts",
        type=int,
        help="Override the attempt budget (defaults to config)",
    )

    return parser.parse_args(list(argv))


def _run_import(args: argparse.Namespace) -> int:
    result = import_fabric(args.path)
    spec = result.fabric_spec
    patterns = result.provenance.detected_patterns
    log.info(
        f"Fabric {spec.name}: {patterns.topology_type}, spines={patterns.spine_count}, "
        f"leaves={patterns.leaf_count}, leaf classes={len(result.leaf_classes)}"
    )
    for assumption in result.provenance.assumptions:
        log.info(f"Assumption: {assumption}")
    for warning in result.validation.warnings:
        log.warning(warning)
    for error in result.validation.errors:
        log.error(error)
    return 0 if result.validation.is_valid else EXIT_FAILURE


def _run_convert(args: argparse.Namespace) -> int:
    convert_fabric(
        args.source,
        args.destination,
        layout=PersistedLayout(args.layout),
        namespace=args.namespace,
    )
    return 0


def _run_diff(args: argparse.Namespace) -> int:
    result = compare_fabrics(args.before, args.after)
    for warning in result.warnings:
        log.warning(warning)
    for error in result.errors:
        log.error(error)
    return 0 if result.is_valid else EXIT_FAILURE


def _run_drift(args: argparse.Namespace) -> int:
    status = check_drift(
        args.fabric_id,
        args.current,
        ignore_timestamps=not args.compare_timestamps,
    )
    for line in status.summary:
        log.info(line)
    if status.report is not None:
        for change in status.report.changes:
            log.debug(change.description)
    return EXIT_FAILURE if status.has_drift else 0


def _cancel_on_sigint(cancel: asyncio.Event) -> Callable[[int, FrameType | None], None]:
    def handler(_signal_received: int, _frame: FrameType | None) -> None:
        log.info("Canceling cluster wait (Ctrl+C)")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            cancel.set()
        else:
            loop.call_soon_threadsafe(cancel.set)

    return handler


def _run_wait(args: argparse.Namespace) -> int:
    backoff = None
    if args.max_attempts is not None:
        if args.max_attempts < 1:
            raise ConfigurationError("--max-attempts must be at least 1")
        backoff = BackoffPolicy(max_attempts=args.max_attempts)
    cancel = asyncio.Event()
    previous = signal(SIGINT, _cancel_on_sigint(cancel))
    try:
        outcome = wait_for_cluster(
            args.fabric,
            run_id=args.run_id,
            backoff=backoff,
            cancel=cancel,
        )
    finally:
        signal(SIGINT, previous)
    log.info(f"Cluster reconciliation {outcome.state} after {outcome.attempts} attempt(s)")
    if outcome.reason:
        log.info(outcome.reason)
    return 0 if outcome.satisfied else EXIT_FAILURE


_COMMANDS = {
    "import": _run_import,
    "convert": _run_convert,
    "diff": _run_diff,
    "drift": _run_drift,
    "wait": _run_wait,
}


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        exit_code = _COMMANDS[parsed_args.command](parsed_args)
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(EXIT_USAGE)
    except Exception:
        log.exception(f"Fatal error during {parsed_args.command}")
        sys.exit(EXIT_FAILURE)
    sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
