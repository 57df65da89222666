from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from tallypy.app import import_documents, list_projects
from tallypy.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from tallypy.domain.model import DraftRecord
    from tallypy.domain.reconciliation import CommitReport

log = logging.getLogger(__name__)


def _parse_link(value: str) -> tuple[int, int]:
    position, sep, record_id = value.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"Expected POSITION=RECORD_ID, got {value!r}")
    try:
        return int(position), int(record_id)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected integers in {value!r}") from exc


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import budget sheets and project proposals")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    importer = subparsers.add_parser(
        "import",
        help="Extract, reconcile and optionally commit uploaded documents",
    )
    importer.add_argument(
        "--projects",
        type=Path,
        nargs="+",
        default=[],
        help="Project proposal files (PDF or ZIP archives)",
    )
    importer.add_argument(
        "--budgets",
        type=Path,
        nargs="+",
        default=[],
        help="Budget approval sheets (XLSX, CSV or ZIP archives)",
    )
    importer.add_argument(
        "--skip",
        type=int,
        action="append",
        default=[],
        metavar="POSITION",
        help="Delete the draft at this review position before committing",
    )
    importer.add_argument(
        "--link",
        type=_parse_link,
        action="append",
        default=[],
        metavar="POSITION=RECORD_ID",
        help="Link the draft at this review position to an existing record",
    )
    importer.add_argument(
        "--new",
        type=int,
        action="append",
        default=[],
        metavar="POSITION",
        help="Create a new record for the draft at this review position",
    )
    importer.add_argument(
        "--commit",
        action="store_true",
        help="Write the reviewed drafts to the project store",
    )

    projects = subparsers.add_parser("projects", help="List persisted projects")
    projects.add_argument(
        "--missing-files",
        action="store_true",
        help="Only list projects without any attached file",
    )

    args = parser.parse_args(list(argv))
    if args.command == "import" and not (args.projects or args.budgets):
        parser.error("import needs --projects and/or --budgets")
    return args


def _describe(position: int, draft: DraftRecord) -> str:
    fields = draft.fields
    target = f"-> #{draft.linked_record_id}" if draft.linked_record_id is not None else "-> new"
    flag = ""
    if draft.integrity_flag is not None:
        flag = (
            f" [requested: proposal={draft.integrity_flag.requested_by_project_doc}"
            f" budget={draft.integrity_flag.requested_by_budget_doc}]"
        )
    return (
        f"{position:>3}. {draft.status:<10} {target:<8} {fields.project_name or '(no name)'}"
        f" | {fields.organization or '-'} | requested={fields.budget_requested}"
        f" approved={fields.budget_approved} | {draft.note or ''}{flag} ({draft.source_file})"
    )


def _log_commit(report: CommitReport) -> None:
    for outcome in report.failed:
        log.error(
            "Failed %r during %s: %s", outcome.project_name, outcome.failed_stage, outcome.error
        )
    log.info(
        "Commit: created=%s, updated=%s, failed=%s, session_ended=%s",
        report.created,
        report.updated,
        len(report.failed),
        report.session_ended,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "import":
            result = import_documents(
                project_paths=parsed_args.projects,
                budget_paths=parsed_args.budgets,
                skip=parsed_args.skip,
                links=dict(parsed_args.link),
                promote=parsed_args.new,
                commit=parsed_args.commit,
            )
            for upload in result.uploads:
                for failed in upload.failed:
                    log.warning("Skipped %s: %s", failed.file_name, failed.error)
            for position, draft in enumerate(result.drafts, start=1):
                log.info(_describe(position, draft))
            if result.commit is not None:
                _log_commit(result.commit)
                if not result.commit.session_ended:
                    sys.exit(1)
        elif parsed_args.command == "projects":
            records = list_projects(missing_files_only=parsed_args.missing_files)
            for record in records:
                log.info(
                    "#%s %s | %s | files=%d",
                    record.id,
                    record.name,
                    record.organization or "-",
                    len(record.files),
                )
            log.info("%d project(s)", len(records))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)
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
