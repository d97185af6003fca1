"""CSV and Excel export of a weekly schedule."""
import io
from datetime import timedelta
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from shiftrota.models.employee import Employee
from shiftrota.models.schedule import WeeklySchedule
from shiftrota.models.shift import ALL_DAYS
from shiftrota.solver.slots import infer_shift_type
from shiftrota.solver.stats import calculate_employee_stats, stats_to_dataframe
from shiftrota.solver.timeutils import format_span, to_date
from shiftrota.utils.logging_setup import get_logger
from shiftrota.utils.structured_logging import get_structured_logger

logger = get_logger("shiftrota.io.export")

# Cell colors by shift bucket
SHIFT_COLORS = {
    "morning": "DDEEFF",
    "mid": "FFF2CC",
    "night": "E6CCFF",
    "OFF": "EEEEEE",
}

THIN = Side(border_style="thin", color="CCCCCC")
BORDER_THIN = Border(top=THIN, bottom=THIN, left=THIN, right=THIN)
HEADER_FILL = PatternFill(start_color="333333", end_color="333333", fill_type="solid")


def _day_columns(schedule: WeeklySchedule) -> List[str]:
    monday = to_date(schedule.week_start)
    return [
        f"{day.short.capitalize()} {(monday + timedelta(days=day.offset)).strftime('%m/%d')}"
        for day in ALL_DAYS
    ]


def build_grid(schedule: WeeklySchedule, employees: Sequence[Employee]) -> pd.DataFrame:
    """Employee × day matrix of shift spans ("OFF" where nothing is assigned)."""
    columns = _day_columns(schedule)
    names = [e.name for e in employees]
    grid = pd.DataFrame("OFF", index=names, columns=columns)

    by_id = {e.id: e.name for e in employees}
    monday = to_date(schedule.week_start)
    for a in schedule.assignments:
        name = by_id.get(a.employee_id)
        if name is None:
            continue
        col = columns[(to_date(a.date) - monday).days]
        label = format_span(a.start_time, a.end_time) if a.start_time and a.end_time else a.shift_id
        current = grid.at[name, col]
        grid.at[name, col] = label if current == "OFF" else f"{current}, {label}"
    return grid


def export_to_csv(
    schedule: WeeklySchedule,
    output: Union[str, Path, io.StringIO],
    names: Optional[Dict[str, str]] = None,
) -> None:
    """Export assignments to CSV (one row per assignment)."""
    df = schedule.to_dataframe(names)
    if isinstance(output, io.StringIO):
        df.to_csv(output, index=False)
    else:
        df.to_csv(str(output), index=False)
        get_structured_logger("shiftrota.io.export").info("export_written", format="csv", path=str(output), rows=len(df))


def _write_header(ws, headers: List[str], row: int = 1) -> None:
    for j, header in enumerate(headers, start=1):
        cell = ws.cell(row=row, column=j, value=header)
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center")


def _write_records(ws, headers: List[str], records: List[dict]) -> None:
    _write_header(ws, headers)
    for i, record in enumerate(records, start=2):
        for j, key in enumerate(headers, start=1):
            ws.cell(row=i, column=j, value=record.get(key, ""))
    for j in range(1, len(headers) + 1):
        ws.column_dimensions[get_column_letter(j)].width = 18 if j < len(headers) else 70
    ws.freeze_panes = "A2"


def export_to_excel(
    schedule: WeeklySchedule,
    employees: Sequence[Employee],
    output: Union[str, Path, io.BytesIO],
) -> None:
    """
    Export a schedule to an Excel workbook.

    Sheets: Schedule (employee × day grid), Hours, Conflicts, Warnings.

    Args:
        schedule: Generated schedule
        employees: Roster, in display order
        output: File path or BytesIO buffer
    """
    wb = Workbook()

    # ========== Schedule Sheet ==========
    ws = wb.active
    ws.title = "Schedule"
    grid = build_grid(schedule, employees)
    buckets = _cell_buckets(schedule, employees)
    _write_header(ws, ["Employee"] + list(grid.columns))

    for r, name in enumerate(grid.index, start=2):
        ws.cell(row=r, column=1, value=name).font = Font(bold=True)
        for c, col in enumerate(grid.columns, start=2):
            value = grid.at[name, col]
            cell = ws.cell(row=r, column=c, value=value)
            color = SHIFT_COLORS.get(buckets.get((name, col), "OFF"))
            if color:
                cell.fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = BORDER_THIN

    ws.column_dimensions["A"].width = 22
    for c in range(2, len(grid.columns) + 2):
        ws.column_dimensions[get_column_letter(c)].width = 16
    ws.freeze_panes = "B2"

    # ========== Hours Sheet ==========
    ws_hours = wb.create_sheet("Hours")
    stats = stats_to_dataframe(calculate_employee_stats(schedule.assignments, employees))
    _write_header(ws_hours, list(stats.columns))
    for i in range(len(stats)):
        for j in range(len(stats.columns)):
            value = stats.iat[i, j]
            ws_hours.cell(row=2 + i, column=1 + j, value=value.item() if hasattr(value, "item") else value)
    for j in range(1, len(stats.columns) + 1):
        ws_hours.column_dimensions[get_column_letter(j)].width = 14
    ws_hours.freeze_panes = "A2"

    # ========== Diagnostics ==========
    _write_records(
        wb.create_sheet("Conflicts"),
        ["type", "date", "shiftId", "employeeId", "startTime", "endTime", "message"],
        [c.to_dict() for c in schedule.conflicts],
    )
    _write_records(
        wb.create_sheet("Warnings"),
        ["type", "date", "employeeId", "message"],
        [w.to_dict() for w in schedule.warnings],
    )

    if isinstance(output, io.BytesIO):
        wb.save(output)
    else:
        wb.save(str(output))
        get_structured_logger("shiftrota.io.export").info(
            "export_written", format="xlsx", path=str(output), assignments=len(schedule.assignments),
        )
    logger.debug(f"Excel export: {len(grid.index)} employees, {len(schedule.conflicts)} conflicts")


def _cell_buckets(schedule: WeeklySchedule, employees: Sequence[Employee]) -> Dict[tuple, str]:
    """(name, day column) → bucket of the first timed assignment in that cell."""
    by_id = {e.id: e.name for e in employees}
    columns = _day_columns(schedule)
    monday = to_date(schedule.week_start)
    buckets: Dict[tuple, str] = {}
    for a in schedule.assignments:
        if a.employee_id in by_id and a.start_time:
            key = (by_id[a.employee_id], columns[(to_date(a.date) - monday).days])
            buckets.setdefault(key, infer_shift_type(a.start_time).value)
    return buckets
