"""
Command-line interface for CashflowLab.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from cashflowlab import __version__
from cashflowlab.core.changes import SCENARIO_TEMPLATES, scenario_template
from cashflowlab.core.dates import add_days
from cashflowlab.core.document_loader import load_document, load_sandbox, read_mapping
from cashflowlab.core.errors import DocumentValidationError
from cashflowlab.core.overrides import expand_occurrences
from cashflowlab.core.projection import ProjectionResult, compute_projection
from cashflowlab.core.validation import validate_document, validate_sandbox
from cashflowlab.core.whatif import Sandbox, evaluate_scenario

CLI_ERRORS = (OSError, ValueError, DocumentValidationError)


def _save_json(path: str, data: dict) -> None:
    """Save data as JSON to file path."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def _dump(data: dict) -> None:
    json.dump(data, sys.stdout, indent=2)
    sys.stdout.write("\n")


def _summary(result: ProjectionResult) -> dict:
    """Headline figures of a projection (everything except the calendar)."""
    data = result.to_dict()
    data.pop("calendar")
    data["days"] = len(result.calendar)
    return data


def _print_summary(title: str, result: ProjectionResult) -> None:
    print(title)
    print(f"  Days projected:      {len(result.calendar)}")
    print(f"  Total income:        {result.total_income:,.2f}")
    print(f"  Total expenses:      {result.total_expenses:,.2f}")
    print(f"  End balance:         {result.end_balance:,.2f}")
    print(
        f"  Lowest balance:      {result.lowest_balance:,.2f} on {result.lowest_balance_date}"
    )
    print(f"  Peak balance:        {result.peak_balance:,.2f} on {result.peak_balance_date}")
    print(f"  First negative day:  {result.first_negative_date or '-'}")
    print(f"  Negative days:       {result.negative_day_count}")
    print(f"  Weekly income:       {result.projected_weekly_income:,.2f}")


EXAMPLE_SANDBOX = {
    "base": {
        "settings": {
            "startDate": "2025-01-01",
            "endDate": "2025-06-30",
            "startingBalance": 2500.0,
        },
        "incomeStreams": [
            {
                "id": "salary",
                "name": "Salary",
                "category": "Payroll",
                "amount": 3200.0,
                "frequency": "monthly",
                "monthlyMode": "day",
                "dayOfMonth": 1,
                "startDate": "2025-01-01",
                "endDate": "2025-12-31",
                "escalatorPct": 0,
            },
            {
                "id": "market",
                "name": "Farmers market",
                "amount": 180.0,
                "frequency": "weekly",
                "weekdays": ["sat"],
                "startDate": "2025-01-01",
                "endDate": "2025-12-31",
            },
        ],
        "oneOffEntries": [
            {
                "id": "rent",
                "name": "Rent",
                "category": "Housing",
                "type": "expense",
                "amount": 1650.0,
                "recurring": True,
                "frequency": "monthly",
                "dayOfMonth": 31,
                "startDate": "2025-01-01",
                "endDate": "2025-12-31",
                "steps": [{"effectiveFrom": "2025-04-01", "amount": 1725.0}],
            },
            {
                "id": "groceries",
                "name": "Groceries",
                "type": "expense",
                "amount": 140.0,
                "recurring": True,
                "frequency": "biweekly",
                "weekdays": ["wed"],
                "startDate": "2025-01-01",
                "endDate": "2025-12-31",
            },
            {
                "id": "tax-refund",
                "name": "Tax refund",
                "type": "income",
                "amount": 820.0,
                "date": "2025-04-15",
            },
        ],
        "adjustments": [{"date": "2025-03-01", "amount": -75.0, "note": "Bank fee"}],
    },
    "tweaks": {
        "global": {"pct": 0.0, "delta": 0.0},
        "perStream": {"market": {"mode": "weekly", "weeklyTarget": 250.0}},
        "sale": {
            "enabled": True,
            "entries": [
                {
                    "id": "spring",
                    "name": "Spring sale",
                    "startDate": "2025-04-01",
                    "endDate": "2025-04-07",
                    "mode": "topup",
                    "topup": 40.0,
                    "businessDaysOnly": True,
                }
            ],
        },
    },
}


def cmd_example(args) -> int:
    """Print a minimal working document (or sandbox) JSON."""
    example = EXAMPLE_SANDBOX if args.sandbox else EXAMPLE_SANDBOX["base"]
    _dump(example)
    return 0


def cmd_project(args) -> int:
    """Project a base document and print the headline figures."""
    try:
        document = load_document(args.input, strict=args.strict)
        result = compute_projection(document)

        if args.json:
            _dump(_summary(result))
        else:
            settings = document.settings
            _print_summary(f"Projection {settings.start_date} to {settings.end_date}", result)

        if args.output:
            _save_json(args.output, result.to_dict())
            print(f"Results saved to {args.output}", file=sys.stderr)
        return 0

    except CLI_ERRORS as e:
        print(f"Error running projection: {e}", file=sys.stderr)
        return 1


def _with_template(sandbox: Sandbox, name: str) -> Sandbox:
    """Sandbox with a predefined template's changes run ahead of its own."""
    return Sandbox(
        base=sandbox.base,
        tweaks=sandbox.tweaks,
        changes=scenario_template(name) + list(sandbox.changes),
    )


def cmd_whatif(args) -> int:
    """Evaluate a what-if sandbox against its untweaked baseline."""
    try:
        fallback = load_document(args.base) if args.base else None
        sandbox = load_sandbox(args.input, fallback_base=fallback, strict=args.strict)
        if args.template:
            sandbox = _with_template(sandbox, args.template)
        evaluation = evaluate_scenario(sandbox)

        if args.json:
            _dump(
                {
                    "baseline": _summary(evaluation.baseline),
                    "scenario": _summary(evaluation.scenario),
                    "comparison": evaluation.comparison.to_dict(),
                }
            )
        else:
            _print_summary("Baseline", evaluation.baseline)
            _print_summary("Scenario", evaluation.scenario)
            comparison = evaluation.comparison
            first = comparison.first_negative
            print("Difference (scenario - baseline)")
            print(f"  End balance:         {comparison.end_balance:+,.2f}")
            print(f"  Total income:        {comparison.total_income:+,.2f}")
            print(f"  Total expenses:      {comparison.total_expenses:+,.2f}")
            print(f"  Lowest balance:      {comparison.lowest_balance:+,.2f}")
            print(f"  Negative days:       {comparison.negative_days:+d}")
            shift = f" ({first.delta_days:+d} days)" if first.delta_days else ""
            print(f"  First negative day:  {first.status}{shift}")

        if args.output:
            _save_json(
                args.output,
                {
                    "baseline": evaluation.baseline.to_dict(),
                    "scenario": evaluation.scenario.to_dict(),
                    "comparison": evaluation.comparison.to_dict(),
                },
            )
            print(f"Results saved to {args.output}", file=sys.stderr)
        return 0

    except CLI_ERRORS as e:
        print(f"Error evaluating what-if: {e}", file=sys.stderr)
        return 1


def cmd_next(args) -> int:
    """List upcoming occurrences of every entry and income stream, overrides applied."""
    try:
        document = load_document(args.input)
        start = args.start or document.settings.start_date
        if args.days <= 0:
            found = []
        else:
            found = expand_occurrences(document, start, add_days(start, args.days - 1))

        rows = [
            {
                "date": record.date,
                "id": record.parent_id,
                "name": record.label,
                "direction": record.direction,
                "amount": round(record.amount, 2),
                "modified": record.is_modified,
            }
            for record in found
        ]
        if args.json:
            _dump({"from": start, "days": args.days, "occurrences": rows})
        else:
            print(f"Upcoming occurrences from {start} ({args.days} days)")
            for row in rows:
                sign = "+" if row["direction"] == "income" else "-"
                mark = " *" if row["modified"] else ""
                print(f"  {row['date']}  {sign}{row['amount']:>12,.2f}  {row['name']}{mark}")
        return 0

    except CLI_ERRORS as e:
        print(f"Error listing occurrences: {e}", file=sys.stderr)
        return 1


def cmd_validate(args) -> int:
    """Validate a base document or sandbox file."""
    try:
        mapping, _ = read_mapping(args.input)
        if args.sandbox:
            report = validate_sandbox(mapping, strict=True)
        else:
            report = validate_document(mapping, strict=True)

        if args.format == "json":
            json.dump(report.to_dict(), sys.stdout, indent=2)
            sys.stdout.write("\n")
        else:
            print(str(report))

        return report.get_exit_code()

    except CLI_ERRORS as e:
        if args.format == "json":
            error_report = {
                "has_errors": True,
                "has_warnings": False,
                "is_valid": False,
                "exit_code": 1,
                "error": str(e),
            }
            json.dump(error_report, sys.stdout, indent=2)
            sys.stdout.write("\n")
        else:
            print(f"❌ Validation failed: {e}")
        return 1


def cmd_chart(args) -> int:
    """Render the balance chart of a projection (or what-if sandbox) to a file."""
    from cashflowlab.charts import balance_over_time, save_chart, whatif_balance_comparison

    try:
        if args.sandbox:
            fig, _ = whatif_balance_comparison(evaluate_scenario(load_sandbox(args.input)))
        else:
            fig, _ = balance_over_time(compute_projection(load_document(args.input)))
        fmt = args.output.rsplit(".", 1)[-1].lower() if "." in args.output else "html"
        save_chart(fig, args.output, format=fmt)
        print(f"Chart saved to {args.output}")
        return 0

    except (ImportError, *CLI_ERRORS) as e:
        print(f"Error rendering chart: {e}", file=sys.stderr)
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cashflow", description="CashflowLab - Cash-flow projection engine"
    )

    # Version argument
    parser.add_argument("--version", action="version", version=f"CashflowLab {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Log warnings (-v) or debug (-vv)"
    )

    subparsers = parser.add_subparsers(
        dest="cmd", required=True, help="Available commands"
    )

    # Example command
    example_parser = subparsers.add_parser(
        "example", help="Print a minimal working document JSON"
    )
    example_parser.add_argument(
        "--sandbox", action="store_true", help="Print a what-if sandbox instead"
    )
    example_parser.set_defaults(func=cmd_example)

    # Project command
    project_parser = subparsers.add_parser(
        "project", help="Project a base document and print its summary"
    )
    project_parser.add_argument(
        "-i", "--input", required=True, help="Input document (YAML or JSON)"
    )
    project_parser.add_argument("-o", "--output", help="Write the full result as JSON")
    project_parser.add_argument(
        "--strict", action="store_true", help="Fail instead of dropping malformed items"
    )
    project_parser.add_argument("--json", action="store_true", help="Output in JSON format")
    project_parser.set_defaults(func=cmd_project)

    # What-if command
    whatif_parser = subparsers.add_parser(
        "whatif", help="Compare a what-if sandbox with its baseline"
    )
    whatif_parser.add_argument(
        "-i", "--input", required=True, help="Input sandbox (YAML or JSON)"
    )
    whatif_parser.add_argument(
        "--base", help="Base document used when the sandbox has no 'base' section"
    )
    whatif_parser.add_argument(
        "--template",
        choices=sorted(SCENARIO_TEMPLATES),
        help="Apply a predefined scenario template ahead of the sandbox changes",
    )
    whatif_parser.add_argument("-o", "--output", help="Write both results as JSON")
    whatif_parser.add_argument(
        "--strict", action="store_true", help="Fail instead of dropping malformed items"
    )
    whatif_parser.add_argument("--json", action="store_true", help="Output in JSON format")
    whatif_parser.set_defaults(func=cmd_whatif)

    # Next command
    next_parser = subparsers.add_parser("next", help="List upcoming occurrences")
    next_parser.add_argument(
        "-i", "--input", required=True, help="Input document (YAML or JSON)"
    )
    next_parser.add_argument(
        "--start", help="First date (YYYY-MM-DD, default: projection start)"
    )
    next_parser.add_argument(
        "--days", type=int, default=30, help="Number of days to look ahead (default: 30)"
    )
    next_parser.add_argument("--json", action="store_true", help="Output in JSON format")
    next_parser.set_defaults(func=cmd_next)

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate", help="Validate a document or sandbox"
    )
    validate_parser.add_argument(
        "-i", "--input", required=True, help="Input document (YAML or JSON)"
    )
    validate_parser.add_argument(
        "--sandbox", action="store_true", help="Validate as a what-if sandbox"
    )
    validate_parser.add_argument(
        "--format", choices=["human", "json"], default="human", help="Output format"
    )
    validate_parser.set_defaults(func=cmd_validate)

    # Chart command
    chart_parser = subparsers.add_parser("chart", help="Render a balance chart")
    chart_parser.add_argument(
        "-i", "--input", required=True, help="Input document or sandbox"
    )
    chart_parser.add_argument(
        "-o", "--output", required=True, help="Output file (.html, .png, .pdf, .svg)"
    )
    chart_parser.add_argument(
        "--sandbox", action="store_true", help="Chart a what-if comparison"
    )
    chart_parser.set_defaults(func=cmd_chart)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    level = {0: logging.ERROR, 1: logging.WARNING}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
