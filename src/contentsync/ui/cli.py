from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, getsignal, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from contentsync.app import (
    apply_content_import,
    import_aliases,
    plan_content_import,
    preview_content_import,
)
from contentsync.config import (
    ConfigurationError,
    ImportConfig,
    configure_logging,
    get_import_config,
    parse_duplicate_policy,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from contentsync.domain.aliases import AliasImportResult
    from contentsync.domain.batch import ImportPreview
    from contentsync.domain.reconciliation import BatchResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import exported content snapshots")
    subparsers = parser.add_subparsers(dest="command", required=True)

    content = subparsers.add_parser("import", help="Import content records, then URL aliases")
    _add_batch_arguments(content)
    content.add_argument(
        "--yes",
        action="store_true",
        help="Apply without asking for confirmation",
    )
    content.add_argument(
        "--fail-fast",
        action="store_true",
        default=None,
        help="Abort and roll back on the first record that fails to apply",
    )

    plan = subparsers.add_parser("plan", help="Show the import plan without writing")
    _add_batch_arguments(plan)

    aliases = subparsers.add_parser("import-aliases", help="Import URL aliases")
    aliases.add_argument(
        "--content-dir",
        type=Path,
        help="Snapshot directory (defaults to CONTENTSYNC_CONTENT_DIR)",
    )

    return parser.parse_args(list(argv))


def _add_batch_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--content-dir",
        type=Path,
        help="Snapshot directory (defaults to CONTENTSYNC_CONTENT_DIR)",
    )
    parser.add_argument(
        "--duplicates",
        type=str,
        help="Duplicate identity handling: strict or lenient (defaults to config)",
    )
    parser.add_argument(
        "--default-owner",
        type=str,
        help="Owner recorded on created/updated records that support ownership",
    )


def _resolve_import_config(args: argparse.Namespace) -> ImportConfig:
    config = get_import_config()
    duplicates = getattr(args, "duplicates", None)
    fail_fast = getattr(args, "fail_fast", None)
    default_owner = getattr(args, "default_owner", None)
    return ImportConfig(
        duplicate_policy=(
            parse_duplicate_policy(duplicates) if duplicates else config.duplicate_policy
        ),
        fail_fast=config.fail_fast if fail_fast is None else fail_fast,
        default_owner=default_owner or config.default_owner,
    )


def _confirm(prompt: str) -> bool:
    try:
        answer = input(prompt)
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


class _CancelFlag:
    """SIGINT handler that requests cancellation instead of exiting."""

    def __init__(self) -> None:
        self.requested = False

    def __call__(self, _signal_received: int, _frame: FrameType | None) -> None:
        if not self.requested:
            log.warning("Cancellation requested; stopping after the current record")
        self.requested = True

    def is_set(self) -> bool:
        return self.requested


def _log_preview(preview: ImportPreview) -> None:
    for decision in preview.decisions:
        log.info(
            "%s %s (type %s): %s",
            decision.action,
            decision.identity,
            decision.type_id,
            decision.reason,
        )
    for component in preview.batch.plan.cycles:
        log.info("Cyclic group: %s", ", ".join(component))


def _log_result(result: BatchResult) -> None:
    log.info(
        "Import result: processed=%s, created=%s, updated=%s, skipped=%s, failed=%s, "
        "missing files created=%s",
        result.processed,
        result.created,
        result.updated,
        result.skipped,
        result.failed,
        result.materialized_dependencies,
    )
    for failure in result.failures:
        log.error("Failed %s: %s", failure.identity, failure.message)
    if result.cancelled:
        log.warning("Import cancelled; committed the records applied so far")


def _log_aliases(result: AliasImportResult) -> None:
    log.info(
        "Alias import finished: imported=%s, skipped=%s",
        result.imported,
        result.skipped,
    )


def _run_import(args: argparse.Namespace, config: ImportConfig) -> BatchResult | None:
    batch = plan_content_import(
        content_dir=args.content_dir,
        duplicate_policy=config.duplicate_policy,
    )
    preview = preview_content_import(
        batch,
        content_dir=args.content_dir,
        default_owner=config.default_owner,
    )
    log.info("%s records will be processed.", preview.result.processed)
    if preview.result.pending_changes == 0:
        log.info("Nothing to do.")
        return None

    if not args.yes and not _confirm(
        f"Apply {preview.result.created} creates, {preview.result.updated} updates and "
        f"{preview.result.materialized_dependencies} missing files? [y/N] "
    ):
        log.info("Import aborted by user")
        return None

    cancel = _CancelFlag()
    previous = getsignal(SIGINT)
    signal(SIGINT, cancel)
    try:
        result = apply_content_import(
            batch,
            content_dir=args.content_dir,
            default_owner=config.default_owner,
            fail_fast=config.fail_fast,
            should_cancel=cancel.is_set,
        )
    finally:
        signal(SIGINT, previous)

    _log_result(result)
    if not result.cancelled:
        _log_aliases(import_aliases(content_dir=args.content_dir))
    return result


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        config = _resolve_import_config(parsed_args)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "import":
            result = _run_import(parsed_args, config)
            if result is not None and result.failed:
                sys.exit(1)
        elif parsed_args.command == "plan":
            batch = plan_content_import(
                content_dir=parsed_args.content_dir,
                duplicate_policy=config.duplicate_policy,
            )
            preview = preview_content_import(
                batch,
                content_dir=parsed_args.content_dir,
                default_owner=config.default_owner,
            )
            _log_preview(preview)
        elif parsed_args.command == "import-aliases":
            _log_aliases(import_aliases(content_dir=parsed_args.content_dir))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during import")
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
