"""Command line entry point: generate one week's schedule from a JSON request."""
from __future__ import annotations

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from shiftrota.io.export import export_to_csv, export_to_excel
from shiftrota.io.loader import load_request
from shiftrota.solver.staffing import validate_staffing_needs
from shiftrota.utils.logging_setup import get_logger, setup_logging
from shiftrota.utils.structured_logging import bind_context, clear_context, configure_structlog

logger = get_logger("shiftrota.cli")


def _print_summary(schedule) -> None:
    print(f"Week of {schedule.week_start}")
    for k, v in schedule.summary().items():
        if k != "week_start":
            print(f" - {k}: {v}")
    if schedule.conflicts:
        print("Conflicts:")
        for c in schedule.conflicts:
            print(f"  [{c.type.value}] {c.date} {c.message}")
    if schedule.warnings:
        print("Warnings:")
        for w in schedule.warnings:
            print(f"  [{w.type.value}] {w.message}")


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="shiftrota", description="Generate a weekly shift schedule")
    p.add_argument("request", help="Path to the JSON request (weekStart, employees, overrides, ...)")
    p.add_argument("--csv", dest="csv_path", help="Write assignments to this CSV file")
    p.add_argument("--xlsx", dest="xlsx_path", help="Write an Excel workbook to this path")
    p.add_argument("--json", dest="json_out", action="store_true", help="Print the schedule as JSON")
    p.add_argument("--log-level", default="WARNING", help="Console log level (default: WARNING)")
    p.add_argument("--log-file", default=None, help="Also log to this file (rotated)")
    p.add_argument("--check-staffing", action="store_true", help="Report staffing template issues first")
    args = p.parse_args(argv)

    setup_logging(level="DEBUG" if args.log_file else args.log_level,
                  log_file=args.log_file, console_level=args.log_level)
    configure_structlog(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    try:
        request = load_request(args.request)
    except (ValueError, ValidationError, OSError) as e:
        logger.error(f"Cannot load {args.request}: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 2

    bind_context(week_start=request.week_start)
    try:
        if args.check_staffing and request.staffing_needs is not None:
            for issue in validate_staffing_needs(request.staffing_needs):
                print(f"staffing: [{issue.type.value}] {issue.message}", file=sys.stderr)

        schedule = request.run()

        if args.csv_path:
            export_to_csv(schedule, args.csv_path, request.names)
        if args.xlsx_path:
            export_to_excel(schedule, request.employees, args.xlsx_path)
    except OSError as e:
        logger.error(f"Export failed: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 2
    finally:
        clear_context()

    if args.json_out:
        print(json.dumps(schedule.to_dict(), ensure_ascii=False, indent=2))
    else:
        _print_summary(schedule)
    return 0


if __name__ == "__main__":
    sys.exit(main())
