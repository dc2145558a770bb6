"""CLI entry point for BindForms."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from bindforms import __version__, logger
from bindforms.async_runner import run_async
from bindforms.definition import build_form, load_form_data, load_form_definition
from bindforms.dependencies import ensure_http_submit_dependencies
from bindforms.exceptions import PackageError
from bindforms.logging import configure_logging
from bindforms.settings import get_settings
from bindforms.typing.enums import SubmitOutcome, ValidationSeverity
from bindforms.typing.models import TriedToSubmit
from bindforms.validation.display import group_invalid_results_by_severity

if TYPE_CHECKING:
    from bindforms.form import Form
    from bindforms.settings import Settings


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="bindforms")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    check_parser = subparsers.add_parser("check", help="Validate data against a form definition")
    check_parser.add_argument("--definition", required=True, type=Path, dest="definition_path")
    check_parser.add_argument("--data", type=Path, default=None, dest="data_path")
    check_parser.add_argument("--output", type=Path, default=None, dest="output_path")

    submit_parser = subparsers.add_parser("submit", help="Validate and submit data to the form endpoint")
    submit_parser.add_argument("--definition", required=True, type=Path, dest="definition_path")
    submit_parser.add_argument("--data", type=Path, default=None, dest="data_path")
    submit_parser.add_argument("--url", default=None)
    submit_parser.add_argument("--method", default=None)
    submit_parser.add_argument("--confirm-warnings", action="store_true", dest="confirm_warnings")
    submit_parser.add_argument("--output", type=Path, default=None, dest="output_path")

    return parser


def build_report(form: Form) -> dict[str, Any]:
    """Summarize a form's validation state.

    Args:
        form (Form): Form to report on.

    Returns:
        dict[str, Any]: JSON-ready report with per-field and general results.
    """
    state = form.state
    grouped = group_invalid_results_by_severity(state.validation_results.values(), state.general_validation_results)
    return {
        "valid": not grouped[ValidationSeverity.ERROR],
        "errors": len(grouped[ValidationSeverity.ERROR]),
        "warnings": len(grouped[ValidationSeverity.WARNING]),
        "fields": {
            path: result.model_dump(mode="json", by_alias=True)
            for path, result in sorted(state.validation_results.items())
        },
        "general": [result.model_dump(mode="json", by_alias=True) for result in state.general_validation_results],
        "data": form.data,
    }


def _emit(report: dict[str, Any], output_path: Path | None) -> None:
    text = json.dumps(report, indent=2, default=str)
    if output_path is None:
        sys.stdout.write(text + "\n")
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding="utf-8")
    logger.info("Report written", extra={"output_path": str(output_path)})


def _load_data(args: argparse.Namespace) -> dict[str, Any] | None:
    return load_form_data(args.data_path) if args.data_path is not None else None


def run_check(args: argparse.Namespace, settings: Settings) -> int:
    """Validate data as if the user had tried to submit.

    Returns:
        int: 0 when no error-severity result remains, 1 otherwise.
    """
    definition = load_form_definition(args.definition_path)
    form = build_form(definition, data=_load_data(args), settings=settings)
    run_async(form.settle())
    form.store.dispatch(TriedToSubmit())

    report = build_report(form)
    _emit(report, args.output_path)
    logger.info("Check completed", extra={"errors": report["errors"], "warnings": report["warnings"]})
    return 0 if report["valid"] else 1


async def _submit_flow(form: Form, *, confirm_warnings: bool) -> SubmitOutcome:
    outcome = await form.submit()
    if outcome is SubmitOutcome.AWAITING_CONFIRMATION and confirm_warnings:
        outcome = await form.confirm()
    return outcome


def run_submit(args: argparse.Namespace, settings: Settings) -> int:
    """Run the full submission flow against the HTTP endpoint.

    Returns:
        int: 0 when the endpoint accepted the data, 1 otherwise.
    """
    ensure_http_submit_dependencies()
    from bindforms.http_submit import HttpSubmitOperation  # noqa: PLC0415

    definition = load_form_definition(args.definition_path)
    url = args.url or definition.submit_url
    if not url:
        logger.error("No submission URL: pass --url or set submitUrl in the definition")
        return 1

    data = _load_data(args)
    initial = data if data is not None else definition.data
    operation = HttpSubmitOperation(
        url,
        method=args.method or definition.submit_method,
        has_initial_data=bool(initial),
        settings=settings,
    )
    form = build_form(definition, data=data, submit_operation=operation, settings=settings)
    outcome = run_async(_submit_flow(form, confirm_warnings=args.confirm_warnings))

    report = build_report(form)
    report["outcome"] = outcome.to_str()
    _emit(report, args.output_path)
    logger.info("Submit completed", extra={"outcome": outcome.to_str()})
    return 0 if outcome is SubmitOutcome.SUBMITTED else 1


def main() -> int:
    """Run the CLI.

    Returns:
        int: Exit code (0 for success, 1 for error).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args()

    commands = {"check": run_check, "submit": run_submit}
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 0

    try:
        return command(args, settings)
    except PackageError:
        logger.exception("Command failed", extra={"command": args.command})
        return 1
    except KeyboardInterrupt:
        logger.info("Command aborted by user")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
