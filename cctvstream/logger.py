"""Timestamped per-class logging to the console and an optional log file."""

from __future__ import annotations

import enum
import os
import sys
from datetime import datetime
from typing import IO, Optional, Union

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogLevel(enum.Enum):
    """Severity of a log message."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


def format_message(timestamp: str, level: Union[LogLevel, str], class_name: str, message: str) -> str:
    """Build one log line: ``<timestamp> [<LEVEL>] <class_name>: <message>``."""
    return f"{timestamp} [{LogLevel(level).value}] {class_name}: {message}"


class Logger:
    """Writes messages tagged with a class name to stdout and, if given, a file.

    The log file is opened in append mode.  If it cannot be opened, an error
    is reported on stderr and messages go to the console only.
    """

    def __init__(self, class_name: str, log_file: Optional[Union[str, os.PathLike]] = None) -> None:
        self.class_name = class_name
        self._file: Optional[IO[str]] = None
        if log_file is not None:
            try:
                self._file = open(log_file, "a", encoding="utf-8")
            except OSError:
                print("Error opening log file", file=sys.stderr)

    def debug(self, message: str) -> None:
        self._log(LogLevel.DEBUG, message)

    def info(self, message: str) -> None:
        self._log(LogLevel.INFO, message)

    def warning(self, message: str) -> None:
        self._log(LogLevel.WARNING, message)

    def error(self, message: str) -> None:
        self._log(LogLevel.ERROR, message)

    def close(self) -> None:
        """Close the log file, if one is open."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _log(self, level: LogLevel, message: str) -> None:
        timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
        line = format_message(timestamp, level, self.class_name, message)
        if self._file is not None:
            self._file.write(line + "\n")
            self._file.flush()
        print(line, flush=True)