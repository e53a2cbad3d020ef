"""
Logging setup and helpers for the media catalog scanner.

Entrypoints (CLI, HTTP bridge) call configure_logging() once at startup;
library modules only ever use logging.getLogger(__name__).
"""
import logging
import os
import re
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Optional, Union

_logging_configured = False
_run_id: Optional[str] = None

# Marks handlers owned by this module so reconfiguration only replaces ours
_HANDLER_TAG = "_media_catalog_handler"

_LINE = "%(asctime)s | %(levelname)-5s | %(name)s | %(message)s"
_LINE_WITH_RUN = "%(asctime)s | %(levelname)-5s | %(name)s | run=%(run_id)s | %(message)s"
_FILE_LINE = "%(asctime)s | %(levelname)-5s | %(name)s:%(lineno)d | run=%(run_id)s | %(message)s"

_QUIET_LOGGERS = ("uvicorn.access", "httpx", "asyncio")


class RunIdFilter(logging.Filter):
    """Stamp each record with the current scan run id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _run_id or "-"
        return True


def set_run_id(run_id: Optional[str]) -> None:
    global _run_id
    _run_id = run_id


def _install(handler: logging.Handler, fmt: str, datefmt: str) -> None:
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    handler.addFilter(RunIdFilter())
    setattr(handler, _HANDLER_TAG, True)
    logging.getLogger().addHandler(handler)


def configure_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    force: bool = False,
    run_id: Optional[str] = None,
    show_run_id: bool = False,
    stream=None,
    console: bool = True,
) -> None:
    """
    Install console and optional file handlers on the root logger.

    Only the first call takes effect unless ``force`` is set. The LOG_LEVEL
    and LOG_FILE environment variables win over the arguments. File output
    always records DEBUG and the run id.

    Args:
        level: Console threshold (DEBUG, INFO, WARNING, ERROR)
        log_file: Also append records to this file
        force: Replace handlers installed by an earlier call
        run_id: Identifier stamped on every record of this run
        show_run_id: Show the run id on console lines too
        stream: Console stream (default sys.stdout); the CLI passes stderr
        console: Set False for file-only logging
    """
    global _logging_configured

    if run_id:
        set_run_id(run_id)
    if _logging_configured and not force:
        return

    console_level = os.getenv("LOG_LEVEL", level).upper()
    log_file = log_file or os.getenv("LOG_FILE")

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root.removeHandler(handler)
            handler.close()

    if console:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setLevel(getattr(logging, console_level, logging.INFO))
        fmt = _LINE_WITH_RUN if show_run_id or console_level == "DEBUG" else _LINE
        _install(handler, fmt, "%H:%M:%S")

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(logging.DEBUG)
        _install(handler, _FILE_LINE, "%Y-%m-%d %H:%M:%S")

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _logging_configured = True
    logging.getLogger(__name__).debug(
        f"Logging ready (console={console_level}, file={log_file or 'none'}, run={_run_id or '-'})"
    )


def _elapsed_text(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    return f"{int(seconds // 60)}m {seconds % 60:.0f}s"


@contextmanager
def stage_timer(stage_name: str, logger: Optional[logging.Logger] = None):
    """
    Log how long a block took, whether it finished or raised.

        with stage_timer("Album query", logger):
            albums = builder.load_kind(RecordKind.ALBUMS)
        # -> "Album query completed in 12ms"
    """
    logger = logger or logging.getLogger(__name__)
    logger.debug(f"{stage_name} started")
    started = time.perf_counter()
    try:
        yield
    finally:
        logger.info(f"{stage_name} completed in {_elapsed_text(time.perf_counter() - started)}")


_REDACTIONS = [
    (re.compile(r"/storage/emulated/\d+"), "/storage/emulated/***"),
    (re.compile(r"/home/[^/]+"), "/home/***"),
    (re.compile(r"/Users/[^/]+"), "/Users/***"),
    (re.compile(r"C:\\Users\\[^\\]+", re.IGNORECASE), r"C:\\Users\\***"),
]


def redact(value) -> str:
    """
    Scrub user-identifying path components before logging.

    Folder references and source paths routinely embed the user's home
    directory or storage profile; log lines keep the folder structure but
    drop the user part.
    """
    if value is None:
        return "None"
    text = str(value)
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


def format_count(n: int, singular: str, plural: Optional[str] = None) -> str:
    """'1 track', '1,520 tracks'."""
    word = singular if n == 1 else (plural or f"{singular}s")
    return f"{n:,} {word}"


def add_logging_args(parser) -> None:
    """Attach --log-level/--debug/--quiet/--log-file/--show-run-id to a parser."""
    group = parser.add_argument_group("logging")
    group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Console log level (default: INFO)",
    )
    group.add_argument("--debug", action="store_true", help="Same as --log-level DEBUG")
    group.add_argument("--quiet", action="store_true", help="Same as --log-level WARNING")
    group.add_argument("--log-file", metavar="PATH", help="Also write logs to this file")
    group.add_argument(
        "--show-run-id",
        action="store_true",
        help="Show the run id on console lines (log files always carry it)",
    )


def resolve_log_level(args) -> str:
    """--debug beats --quiet, which beats --log-level."""
    if getattr(args, "debug", False):
        return "DEBUG"
    if getattr(args, "quiet", False):
        return "WARNING"
    return getattr(args, "log_level", "INFO")


class ScanSummary:
    """
    One-line summary of a scan operation.

        summary = ScanSummary("Music scan", logger)
        summary.add("tracks", 1520)
        summary.log()
        # -> "Music scan summary: tracks=1520, elapsed=0.42s"
    """

    def __init__(self, operation: str, logger: Optional[logging.Logger] = None):
        self.operation = operation
        self.logger = logger or logging.getLogger(__name__)
        self.fields: Dict[str, Union[int, float, str]] = {}
        self.started = time.perf_counter()

    def add(self, key: str, value: Union[int, float, str]) -> None:
        self.fields[key] = value

    def log(self, level: int = logging.INFO) -> None:
        parts = [
            f"{key.replace('_', ' ')}={value:.2f}" if isinstance(value, float)
            else f"{key.replace('_', ' ')}={value}"
            for key, value in self.fields.items()
        ]
        parts.append(f"elapsed={time.perf_counter() - self.started:.2f}s")
        self.logger.log(level, f"{self.operation} summary: {', '.join(parts)}")
