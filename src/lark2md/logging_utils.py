#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/logging_utils.py
"""Logging setup for the lark2md command line.

Loading and transforming never fail on a malformed, shared or over-deep
block: the block is degraded and a WARNING is logged by ``lark2md.blocks``
or ``lark2md.parsers``. ``collect_degradations`` gathers those warnings so
the CLI can report them even when ``--log-level`` hides them.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

PACKAGE_LOGGER = "lark2md"

_CONSOLE_FORMAT = "%(levelname)s: %(message)s"
_TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
_TRACE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(log_level: int | str) -> int:
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(str(log_level).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Install stderr (and optionally file) handlers on the root logger.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or level name such as "WARNING"
    log_file : str, optional
        Path of a log file that receives the same records
    trace_mode : bool, default False
        Prefix records with a timestamp and the emitting logger

    Returns
    -------
    logging.Logger
        The ``lark2md`` package logger

    """
    level = _resolve_level(log_level)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_error: Optional[OSError] = None
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
        except OSError as e:
            file_error = e
    for handler in handlers:
        handler.setLevel(level)

    logging.basicConfig(
        level=level,
        format=_TRACE_FORMAT if trace_mode else _CONSOLE_FORMAT,
        datefmt=_TRACE_DATE_FORMAT if trace_mode else None,
        handlers=handlers,
        force=True,
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if file_error is not None:
        package_logger.warning(f"Could not open log file {log_file}: {file_error}")
    elif log_file:
        package_logger.info(f"Logging to file: {log_file}")
    return package_logger


class DegradationLog(logging.Handler):
    """Collect WARNING records emitted while a snapshot is converted.

    Attributes
    ----------
    records : list of logging.LogRecord
        Collected records in emission order

    """

    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def __len__(self) -> int:
        return len(self.records)

    def by_stage(self) -> dict[str, int]:
        """Count records per emitting module, e.g. ``{"parsers.lark": 2}``."""
        counts: dict[str, int] = {}
        for record in self.records:
            stage = record.name.removeprefix(f"{PACKAGE_LOGGER}.")
            counts[stage] = counts.get(stage, 0) + 1
        return counts

    def summary(self) -> str:
        """Return e.g. ``"3 warnings (blocks.loader: 1, parsers.lark: 2)"``."""
        if not self.records:
            return "no warnings"
        noun = "warning" if len(self.records) == 1 else "warnings"
        stages = ", ".join(f"{stage}: {count}" for stage, count in sorted(self.by_stage().items()))
        return f"{len(self.records)} {noun} ({stages})"


@contextmanager
def collect_degradations() -> Iterator[DegradationLog]:
    """Attach a ``DegradationLog`` to the package logger for the duration of the block.

    The package logger is lowered to WARNING while collecting so that a
    stricter console level does not suppress the records. Console and file
    handlers keep their own levels.
    """
    handler = DegradationLog()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    previous_level = package_logger.level
    if package_logger.getEffectiveLevel() > logging.WARNING:
        package_logger.setLevel(logging.WARNING)
    package_logger.addHandler(handler)
    try:
        yield handler
    finally:
        package_logger.removeHandler(handler)
        package_logger.setLevel(previous_level)
