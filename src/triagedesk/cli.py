"""Summary: Command-line interface for triagedesk.

Importance: Provides a local-first entry point for triage workflows.
Alternatives: Build a web UI or desktop client first.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import uvicorn

from triagedesk.api import create_app
from triagedesk.app import AppServices, build_services
from triagedesk.config import AppConfig
from triagedesk.detectors import language_display_name, redact_pii
from triagedesk.models import AnalysisRecord
from triagedesk.response_templates import fill_template, templates_for_category
from triagedesk.services import BatchSizeError
from triagedesk.storage.repositories import RecordNotFoundError
from triagedesk.validation import MessageValidationError


def build_parser() -> argparse.ArgumentParser:
    """Summary: Build the CLI argument parser.

    Importance: Defines supported commands for local operation.
    Alternatives: Use a CLI framework like Typer or Click.
    """

    parser = argparse.ArgumentParser(description="triagedesk CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze one customer message")
    analyze.add_argument("message", type=str)
    analyze.add_argument("--yes", action="store_true", help="Proceed past warnings")
    analyze.add_argument("--no-save", action="store_true", help="Do not record in history")

    bulk = subparsers.add_parser("bulk", help="Analyze one message per line from a file")
    bulk.add_argument("path", type=str, help="Input file, or - for stdin")

    history = subparsers.add_parser("history", help="List analyzed messages, newest first")
    history.add_argument("--category", type=str, default=None)
    history.add_argument("--limit", type=int, default=20)

    delete = subparsers.add_parser("delete", help="Delete a history record")
    delete.add_argument("record_id", type=str)

    clear = subparsers.add_parser("clear-history", help="Delete every history record")
    clear.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    dashboard = subparsers.add_parser("dashboard", help="Show dashboard statistics")
    dashboard.add_argument("--json", action="store_true")

    export = subparsers.add_parser("export", help="Export history as CSV or JSON")
    export.add_argument("--format", choices=("csv", "json"), default="csv")
    export.add_argument("--output", type=str, default=None)

    subparsers.add_parser("settings", help="Print recommendation and routing settings")

    set_template = subparsers.add_parser("set-template", help="Set a category recommendation")
    set_template.add_argument("category", type=str)
    set_template.add_argument("default", type=str)
    set_template.add_argument("--high", type=str, default=None)

    set_routing = subparsers.add_parser("set-routing", help="Set a category routing team")
    set_routing.add_argument("category", type=str)
    set_routing.add_argument("team", type=str)

    subparsers.add_parser("reset-settings", help="Restore default settings")

    templates = subparsers.add_parser("templates", help="Show reply templates for a category")
    templates.add_argument("category", type=str)
    templates.add_argument(
        "--set", dest="values", action="append", default=[], metavar="KEY=VALUE",
        help="Placeholder value to fill in",
    )

    redact = subparsers.add_parser("redact", help="Redact personal data from text")
    redact.add_argument("text", type=str)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default=None)
    serve.add_argument("--port", type=int, default=None)

    return parser


def run_cli(argv: list[str] | None = None) -> None:
    """Summary: Execute CLI commands based on arguments.

    Importance: Drives the triage workflow without a UI.
    Alternatives: Invoke services via the HTTP API.
    """

    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)
    config = AppConfig.from_env()

    if args.command == "serve":
        uvicorn.run(
            create_app(config),
            host=args.host or config.api_host,
            port=args.port or config.api_port,
        )
        return

    if args.command == "redact":
        print(redact_pii(args.text))
        return

    if args.command == "templates":
        values = dict(item.split("=", 1) for item in args.values if "=" in item)
        for template in templates_for_category(args.category):
            filled = fill_template(template, values)
            print(f"== {filled.name} ({filled.subject})")
            print(filled.body)
            print()
        return

    try:
        _dispatch(args, build_services(config))
    except (MessageValidationError, BatchSizeError, RecordNotFoundError, ValueError) as exc:
        parser.exit(1, f"error: {exc}\n")


def _dispatch(args: argparse.Namespace, services: AppServices) -> None:
    if args.command == "analyze":
        warnings = services.triage.preflight(args.message)
        for warning in warnings:
            print(f"warning: {warning}")
        if warnings and not args.yes and not _confirm("Analyze anyway?"):
            print("Cancelled.")
            return
        record = services.triage.analyze(args.message, save=not args.no_save)
        _print_record(record)
        return

    if args.command == "bulk":
        if args.path == "-":
            lines = sys.stdin.read().splitlines()
        else:
            lines = Path(args.path).read_text(encoding="utf-8").splitlines()
        messages = [line.strip() for line in lines if line.strip()]
        for item in services.bulk.analyze_batch(messages):
            if item.record is None:
                print(f"#{item.index}: error: {item.error}")
            else:
                record = item.record
                print(f"#{item.index}: {record.urgency} {record.category} -> {record.routing_destination}")
        return

    if args.command == "history":
        for record in services.history.list_records(category=args.category, limit=args.limit):
            flags = " [escalate]" if record.escalate else ""
            print(f"{record.id} {record.timestamp} {record.urgency} {record.category}{flags}")
            print(f"    {record.message[:80]}")
        return

    if args.command == "delete":
        deleted = services.history.delete(args.record_id)
        print(f"Deleted record {deleted.record.id}.")
        return

    if args.command == "clear-history":
        if not args.yes and not _confirm("Delete all history?"):
            print("Cancelled.")
            return
        print(f"Cleared {services.history.clear()} records.")
        return

    if args.command == "dashboard":
        data = services.dashboard.dashboard()
        if args.json:
            print(json.dumps(data.to_dict(), indent=2))
            return
        for key, value in data.stats.to_dict().items():
            print(f"{key}: {value}")
        for name, count in data.category_data:
            print(f"category {name}: {count}")
        for point in data.weekly_trend:
            print(f"{point.label} {point.date}: {point.count} ({point.high_count} high)")
        return

    if args.command == "export":
        content = services.history.export(args.format)
        if args.output:
            Path(args.output).write_text(content, encoding="utf-8")
            print(f"Exported history to {args.output}.")
        else:
            print(content)
        return

    if args.command == "settings":
        print(json.dumps(services.settings.get().to_dict(), indent=2))
        return

    if args.command == "set-template":
        services.settings.set_template(args.category, args.default, args.high)
        print(f"Updated recommendation for {args.category}.")
        return

    if args.command == "set-routing":
        services.settings.set_routing(args.category, args.team)
        print(f"Routing {args.category} to {args.team}.")
        return

    if args.command == "reset-settings":
        services.settings.reset()
        print("Settings restored to defaults.")
        return


def _confirm(question: str) -> bool:
    try:
        answer = input(f"{question} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _print_record(record: AnalysisRecord) -> None:
    print(f"id: {record.id}")
    print(f"category: {', '.join(record.categories)} ({record.confidence:.0%} confidence)")
    print(f"urgency: {record.urgency} (score {record.urgency_score}, respond within {record.expected_response_time})")
    print(f"sentiment: {record.sentiment}")
    print(f"language: {language_display_name(record.language)}")
    print(f"recommended action: {record.recommended_action}")
    print(f"routing: {record.routing_destination}")
    print(f"escalate: {'yes' if record.escalate else 'no'}")
    print(f"needs review: {'yes' if record.needs_review else 'no'}")
    for finding in record.pii_findings + record.profanity_findings:
        print(f"finding: {finding}")
    print(f"reasoning: {record.reasoning} [{record.model}]")


if __name__ == "__main__":
    run_cli()
