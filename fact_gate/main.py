"""Command line interface for fact-gate."""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import uvicorn
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .domain.errors import (
    ConfigurationError,
    InvalidTransitionError,
    ReviewCaseNotFoundError,
    TerminalSourceError,
)
from .domain.models.document import ValidationDocument
from .domain.models.fact_check_report import FactCheckReport
from .domain.models.gate import ValidationResult
from .infrastructure.config_loader import configure_logging, load_config, load_environment
from .infrastructure.dependencies import ServiceContainer

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BLOCKED = 1
EXIT_ERROR = 2

console = Console()
err_console = Console(stderr=True)


def load_documents(paths: Sequence[Path]) -> List[ValidationDocument]:
    """Read documents from JSON files holding one document or a list of them.

    Raises:
        ConfigurationError: If a file is unreadable or not a valid document
    """
    documents: List[ValidationDocument] = []
    for path in paths:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Could not read {path}: {e}") from e
        items = raw if isinstance(raw, list) else [raw]
        for item in items:
            if isinstance(item, dict):
                item.setdefault("filePath", str(path))
            try:
                documents.append(ValidationDocument.model_validate(item))
            except ValidationError as e:
                raise ConfigurationError(f"Invalid document in {path}: {e}") from e
    return documents


def _status_label(blocked: bool, review: bool) -> str:
    if blocked:
        return "[bold red]🚫 BLOCKED[/]"
    if review:
        return "[yellow]⚠️ REVIEW[/]"
    return "[green]✅ PASS[/]"


def print_report(report: FactCheckReport) -> None:
    """Human-readable fact-check report."""
    console.rule(f"📋 {report.title or report.file_path or 'Fact check'}")
    score_style = "green" if report.overall_score >= 80 else "yellow" if report.overall_score >= 50 else "red"
    console.print(f"Overall score: [{score_style}]{report.overall_score}%[/]  "
                  + _status_label(report.block_publish, report.needs_human_review))
    console.print(
        f"  critical {report.category_scores.critical}%  "
        f"major {report.category_scores.major}%  minor {report.category_scores.minor}%"
    )
    console.print(
        f"  ✓ {report.claims.verified}/{report.claims.total}  "
        f"✗ {report.claims.false}/{report.claims.total}  "
        f"? {report.claims.unknown}/{report.claims.total}"
    )
    for failing in report.failing_claims():
        console.print(
            f"  [red]✗ [{failing.severity.value}][/] {failing.claimed_value} "
            f"→ {failing.correct_value or '?'}"
        )
    if report.corrections:
        console.print(f"🔧 Corrections ({len(report.corrections)}):")
        for correction in report.corrections:
            marker = "auto" if correction.auto_applicable else "manual"
            console.print(f"  - ({marker}) {correction.original_text}")
            console.print(f"    → {correction.suggested_text}")


def print_validation(result: ValidationResult, verbose: bool = False) -> None:
    """Human-readable gate table for one document."""
    table = Table(title=f"{result.title or result.file_path}")
    table.add_column("Gate")
    table.add_column("Score", justify="right")
    table.add_column("Threshold", justify="right")
    table.add_column("Result")
    table.add_column("Details")
    for gate in result.gates:
        if gate.passed:
            outcome = "[green]pass[/]"
        elif gate.block_on_failure:
            outcome = "[bold red]block[/]"
        else:
            outcome = "[yellow]warn[/]"
        table.add_row(gate.name.value, str(gate.score), str(gate.threshold), outcome, gate.details or "")
    console.print(table)
    console.print(f"State: {result.state.value}  " + _status_label(result.block_publish, result.needs_human_review))
    if result.review_trigger:
        console.print(f"Review trigger: {result.review_trigger.value}"
                      + (f" (case {result.review_case_id})" if result.review_case_id else ""))
    for error in result.errors:
        console.print(f"[red]error:[/] {error}")
    if verbose:
        for warning in result.warnings:
            console.print(f"[yellow]warning:[/] {warning}")
    if result.fact_check_report and verbose:
        print_report(result.fact_check_report)


def _dump(models) -> str:
    return json.dumps(
        [m.model_dump(mode="json", by_alias=True) for m in models],
        ensure_ascii=False,
        indent=2,
    )


def _write_output(text: str, args) -> None:
    if getattr(args, "output", None):
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text, encoding="utf-8")
        err_console.print(f"Saved to {args.output}")


async def cmd_validate(args, container: ServiceContainer) -> int:
    documents = load_documents(args.files)
    service = await container.get_fact_checking_service()
    results = await service.validate_documents(documents, stop_on_block=args.stop_on_block)

    text = _dump(results)
    _write_output(text, args)
    if args.json:
        print(text)
    else:
        for result in results:
            print_validation(result, verbose=args.verbose)
    return EXIT_BLOCKED if any(r.block_publish for r in results) else EXIT_OK


async def cmd_fact_check(args, container: ServiceContainer) -> int:
    documents = load_documents(args.files)
    service = await container.get_fact_checking_service()
    reports = await service.fact_check_documents(documents, stop_on_block=args.stop_on_block)

    text = _dump(reports)
    _write_output(text, args)
    if args.json:
        print(text)
    else:
        for report in reports:
            print_report(report)
    return EXIT_BLOCKED if any(r.block_publish for r in reports) else EXIT_OK


async def cmd_review(args, container: ServiceContainer) -> int:
    queue = container.get_review_queue()

    if args.review_command == "list":
        cases = await queue.list_cases() if args.all else await queue.list_pending()
        if args.json:
            print(_dump(cases))
            return EXIT_OK
        table = Table(title="Human review queue")
        for column in ("ID", "File", "Trigger", "Action", "Score", "Status", "Created"):
            table.add_column(column)
        for case in cases:
            table.add_row(
                case.id, case.file_path, case.trigger.value, case.action.value,
                f"{case.score:.0f}", case.status.value, case.created_at.strftime("%Y-%m-%d %H:%M"),
            )
        console.print(table)
        return EXIT_OK

    if args.review_command == "cleanup":
        removed = await queue.cleanup()
        console.print(f"🧹 Removed {removed} cases")
        return EXIT_OK

    try:
        if args.review_command == "approve":
            case = await queue.approve(args.case_id, args.note)
        else:
            case = await queue.reject(args.case_id, args.note)
    except (ReviewCaseNotFoundError, InvalidTransitionError) as e:
        err_console.print(f"[red]{e}[/]")
        return EXIT_BLOCKED
    console.print(f"{case.id}: {case.status.value}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fact-gate",
        description="Fact verification and publish gating for generated blog posts",
    )
    parser.add_argument("--config", type=Path, default=None,
                        help="Quality gate config (default: $FACT_GATE_CONFIG or config/quality-gates.json)")
    parser.add_argument("--log-level", default=None, help="Logging level (default: $FACT_GATE_LOG_LEVEL or INFO)")

    sub = parser.add_subparsers(dest="command", required=True)

    def add_document_args(p):
        p.add_argument("files", type=Path, nargs="+", help="Document JSON files")
        p.add_argument("--stop-on-block", action="store_true",
                       help="Stop after the first document that blocks publishing")
        p.add_argument("--json", action="store_true", help="Output as JSON")
        p.add_argument("--output", type=Path, default=None, help="Also write JSON results to this file")

    validate_p = sub.add_parser("validate", help="Fact check and gate documents for publishing")
    add_document_args(validate_p)
    validate_p.add_argument("--verbose", "-v", action="store_true", help="Show warnings and full reports")

    fact_check_p = sub.add_parser("fact-check", help="Fact check documents and print reports")
    add_document_args(fact_check_p)

    review_p = sub.add_parser("review", help="Manage the human-review queue")
    review_sub = review_p.add_subparsers(dest="review_command", required=True)
    list_p = review_sub.add_parser("list", help="List pending cases")
    list_p.add_argument("--all", action="store_true", help="Include resolved cases")
    list_p.add_argument("--json", action="store_true", help="Output as JSON")
    for name in ("approve", "reject"):
        decision_p = review_sub.add_parser(name, help=f"{name.title()} a pending case")
        decision_p.add_argument("case_id", help="Review case id")
        decision_p.add_argument("--note", default=None, help="Reviewer note")
    review_sub.add_parser("cleanup", help="Drop resolved cases past retention")

    serve_p = sub.add_parser("serve", help="Run the HTTP API")
    serve_p.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_p.add_argument("--port", type=int, default=8000, help="Port")

    return parser


def serve(args) -> int:
    """Run the FastAPI app under uvicorn."""
    if args.config:
        os.environ["FACT_GATE_CONFIG"] = str(args.config)
    if args.log_level:
        os.environ["FACT_GATE_LOG_LEVEL"] = args.log_level
    uvicorn.run("fact_gate.api.app:app", host=args.host, port=args.port)
    return EXIT_OK


async def _run(args, container: Optional[ServiceContainer]) -> int:
    owns_container = container is None
    if container is None:
        container = ServiceContainer(config=load_config(args.config))

    commands = {
        "validate": cmd_validate,
        "fact-check": cmd_fact_check,
        "review": cmd_review,
    }
    try:
        return await commands[args.command](args, container)
    finally:
        if owns_container:
            await container.shutdown()


def main(argv: Optional[Sequence[str]] = None, container: Optional[ServiceContainer] = None) -> int:
    """Run the CLI and return its exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        return serve(args)

    load_environment()
    configure_logging(args.log_level)

    try:
        return asyncio.run(_run(args, container))
    except ConfigurationError as e:
        logger.error(f"❌ Configuration error: {e}")
        err_console.print(f"[red]Configuration error:[/] {e}")
        return EXIT_ERROR
    except TerminalSourceError as e:
        logger.error(f"❌ Verification source unavailable: {e}")
        err_console.print(f"[red]Verification source unavailable:[/] {e}")
        return EXIT_ERROR


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
