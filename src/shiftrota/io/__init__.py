# shiftrota/io - Input/output handling
from .export import build_grid, export_to_csv, export_to_excel
from .loader import ScheduleRequest, load_request, parse_request

__all__ = ["load_request", "parse_request", "ScheduleRequest", "export_to_csv", "export_to_excel", "build_grid"]
