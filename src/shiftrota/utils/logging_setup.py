"""
Shift Rota: Logging
===================
Stdlib logging for the allocation engine. Everything hangs off the
``shiftrota`` logger; the CLI attaches a console handler on stderr (stdout
carries the schedule) and optionally a rotating file.

Levels:
    TRACE (5): Function entry/exit with arguments, rejected candidates
    DEBUG (10): Seat-by-seat decisions, truncated or dropped shifts
    INFO (20): Stage banners and per-day summaries
    WARNING (30): Unfilled seats, coverage gaps, violated overrides
    ERROR (40): Unexpected exceptions
"""
import functools
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Optional, TextIO

ROOT_LOGGER = "shiftrota"

CONSOLE_FORMAT = "[%(asctime)s] %(levelname)-7s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"

TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)


logging.Logger.trace = trace

_LEVEL_COLORS = {
    TRACE: "\033[90m",
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
_RESET = "\033[0m"


class ColoredFormatter(logging.Formatter):
    """Colors whole lines by level when the target stream is a terminal."""

    def __init__(self, fmt: str, datefmt: Optional[str] = None, stream: TextIO = sys.stderr):
        super().__init__(fmt, datefmt=datefmt)
        self.use_color = hasattr(stream, "isatty") and stream.isatty()

    def format(self, record):
        message = super().format(record)
        color = _LEVEL_COLORS.get(record.levelno)
        return f"{color}{message}{_RESET}" if self.use_color and color else message


def _parse_level(name: Optional[str], default: int = logging.INFO) -> int:
    if not name:
        return default
    if name.upper() == "TRACE":
        return TRACE
    return getattr(logging, name.upper(), default)


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt="%H:%M:%S", stream=handler.stream))
    return handler


def _file_handler(path: Path, level: int, max_bytes: int, backup_count: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = "logs/shiftrota.log",
    console_level: Optional[str] = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """
    Configure the ``shiftrota`` logger. Safe to call repeatedly.

    Args:
        level: Minimum level written to the log file
        log_file: Log file path (None = console only)
        console_level: Console level (defaults to ``level``)
        max_bytes: File size that triggers rotation
        backup_count: Rotated files to keep

    Returns:
        The ``shiftrota`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(TRACE)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    file_level = _parse_level(level)
    cons_level = _parse_level(console_level, file_level)

    logger.addHandler(_console_handler(cons_level))
    if log_file:
        logger.addHandler(_file_handler(Path(log_file), file_level, max_bytes, backup_count))

    logger.info(
        f"Logging initialized: console={logging.getLevelName(cons_level)}, "
        f"file={logging.getLevelName(file_level) if log_file else 'disabled'}"
    )
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, e.g. ``get_logger("shiftrota.solver.engine")``."""
    return logging.getLogger(name)


def _short_repr(value: Any, limit: int) -> str:
    text = repr(value)
    return text if len(text) <= limit else text[:limit - 3] + "..."


def log_function_call(func: Callable) -> Callable:
    """
    Trace entry and exit of a builder function; exceptions are logged and re-raised.

    Usage:
        @log_function_call
        def build_week_shifts(needs, policies):
            ...
    """
    logger = logging.getLogger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        name = func.__name__
        parts = [_short_repr(a, 50) for a in args[:3]]
        parts += [f"{k}={_short_repr(v, 30)}" for k, v in list(kwargs.items())[:3]]
        logger.log(TRACE, f"→ {name}({', '.join(parts)})")
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"✖ {name} raised: {type(e).__name__}: {e}")
            raise
        logger.log(TRACE, f"← {name} returned: {_short_repr(result, 100)}")
        return result

    return wrapper


def log_constraint(
    logger: logging.Logger,
    name: str,
    satisfied: bool,
    details: str = "",
    level: int = logging.DEBUG,
):
    """Log a rule check: ``level`` when it held, WARNING when it did not."""
    msg = f"[{'✓' if satisfied else '✗'}] {name}"
    if details:
        msg += f" ({details})"
    logger.log(level if satisfied else logging.WARNING, msg)


class SolverLogger:
    """
    Stage narration for a generation run.

    ``phase`` prints a banner per engine stage, ``step`` a summary line, and
    ``enter``/``exit`` bracket per-day work with indented DEBUG detail.
    """

    def __init__(self, name: str = "shiftrota.solver"):
        self.logger = logging.getLogger(name)
        self.indent = 0

    def _prefix(self) -> str:
        return "  " * self.indent

    def phase(self, name: str):
        self.logger.info(f"{'=' * 20} {name} {'=' * 20}")

    def step(self, description: str):
        self.logger.info(f"{self._prefix()}▸ {description}")

    def detail(self, key: str, value: Any):
        self.logger.debug(f"{self._prefix()}  {key}: {value}")

    def constraint(self, name: str, satisfied: bool, details: str = ""):
        log_constraint(self.logger, name, satisfied, details)

    def enter(self, context: str):
        self.logger.debug(f"{self._prefix()}┌─ {context}")
        self.indent += 1

    def exit(self, context: str = ""):
        self.indent = max(0, self.indent - 1)
        if context:
            self.logger.debug(f"{self._prefix()}└─ {context}")
