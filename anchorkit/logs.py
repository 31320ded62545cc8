"""Level-filtered, printf-style logging with fixed-width line formatting."""

from __future__ import annotations

import enum
import inspect
import os
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass, field

__all__ = [
    "Level",
    "TimestampComponents",
    "LogLine",
    "LogSystem",
    "Logger",
    "is_leap_year",
    "timestamp_components",
]

_LEVEL_PREFIX_LENGTH = 6
_FILE_NAME_LENGTH = 32
_TIME_LENGTH_DATETIME = 24
_TIME_LENGTH_UPTIME = 14
_DEFAULT_MAX_MSG_LENGTH = 128

_MS_PER_DAY = 86_400_000
_DAYS_PER_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


class Level(enum.IntEnum):
    """Log levels, in increasing order of severity."""

    DEFAULT = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4

    @property
    def prefix(self) -> str:
        """The fixed-width prefix written before a line of this level."""
        return _LEVEL_PREFIX[self]


_LEVEL_PREFIX = {
    Level.DEFAULT: "????? ",
    Level.DEBUG: "DEBUG ",
    Level.INFO: "INFO  ",
    Level.WARN: "WARN  ",
    Level.ERROR: "ERROR ",
}


@dataclass(frozen=True)
class TimestampComponents:
    """A millisecond timestamp split into clock (and optionally calendar) fields."""

    hour: int
    minute: int
    second: int
    ms: int
    year: int | None = None
    month: int | None = None
    day: int | None = None

    @property
    def has_date(self) -> bool:
        """Whether the calendar fields are filled in."""
        return self.year is not None

    def __str__(self) -> str:
        clock = f"{self.minute:02d}:{self.second:02d}.{self.ms:03d}"
        if self.has_date:
            return (
                f"{self.year:04d}-{self.month:02d}-{self.day:02d} "
                f"{self.hour:02d}:{clock}"
            )
        return f"{self.hour:3d}:{clock}"


def is_leap_year(year: int) -> bool:
    """Return whether year is a Gregorian leap year."""
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def timestamp_components(timestamp: int, use_datetime: bool) -> TimestampComponents:
    """Split a millisecond timestamp into its components.

    With use_datetime the timestamp is taken as milliseconds since the Unix
    epoch and the date is filled in; otherwise it is an uptime and the hour
    field is unbounded.
    """
    if use_datetime:
        timestamp %= 1 << 64
        day_ms = timestamp % _MS_PER_DAY
    else:
        timestamp %= 1 << 32
        day_ms = timestamp

    seconds, ms = divmod(day_ms, 1000)
    minutes, second = divmod(seconds, 60)
    hour, minute = divmod(minutes, 60)
    if not use_datetime:
        return TimestampComponents(hour=hour, minute=minute, second=second, ms=ms)

    days = timestamp // _MS_PER_DAY + 1
    year = 1970
    days_in_year = 365
    while days > days_in_year:
        days -= days_in_year
        year += 1
        days_in_year = 366 if is_leap_year(year) else 365

    month = 0
    for candidate, length in enumerate(_DAYS_PER_MONTH, start=1):
        if candidate == 2 and is_leap_year(year):
            length = 29
        if days <= length:
            month = candidate
            break
        days -= length

    return TimestampComponents(
        hour=hour,
        minute=minute,
        second=second,
        ms=ms,
        year=year,
        month=month,
        day=days,
    )


@dataclass(frozen=True)
class LogLine:
    """Everything captured about one log call, before formatting."""

    level: Level
    file: str
    line: int
    module_prefix: str | None
    timestamp: int
    timestamp_components: TimestampComponents
    fmt: str
    args: tuple = field(default=())

    @property
    def message(self) -> str:
        """The message with its printf-style arguments applied."""
        return self.fmt % self.args


class LogSystem:
    """Collects log lines, filters them by level and hands them to a writer.

    Either a write_function (receiving each fully formatted line) or a custom
    handler (receiving the raw LogLine) must be given. An optional lock, any
    context manager, guards formatting and writing.
    """

    def __init__(
        self,
        default_level: Level,
        write_function: Callable[[str], None] | None = None,
        *,
        handler: Callable[[LogLine], None] | None = None,
        lock: AbstractContextManager | None = None,
        time_ms_function: Callable[[], int] | None = None,
        use_datetime: bool = False,
        max_msg_length: int = _DEFAULT_MAX_MSG_LENGTH,
    ) -> None:
        default_level = Level(default_level)
        if default_level == Level.DEFAULT:
            raise ValueError("default_level must be a concrete level")
        if handler is None and write_function is None:
            raise ValueError("either write_function or handler is required")
        if max_msg_length < 0:
            raise ValueError("max_msg_length must not be negative")
        self.default_level = default_level
        self.write_function = write_function
        self.handler = handler
        self.lock = lock
        self.time_ms_function = time_ms_function
        self.use_datetime = use_datetime
        time_length = _TIME_LENGTH_DATETIME if use_datetime else _TIME_LENGTH_UPTIME
        self._buffer_size = (
            max_msg_length + _LEVEL_PREFIX_LENGTH + time_length + _FILE_NAME_LENGTH + 1
        )

    def log_line(
        self,
        level: Level,
        file: str,
        line: int,
        module_prefix: str | None,
        fmt: str,
        *args: object,
    ) -> None:
        """Log a captured line, dropping it if below the default level."""
        if level < self.default_level:
            return
        self.log(level, file, line, module_prefix, fmt, *args)

    def log(
        self,
        level: Level,
        file: str,
        line: int,
        module_prefix: str | None,
        fmt: str,
        *args: object,
    ) -> None:
        """Log a line unconditionally."""
        timestamp = self.time_ms_function() if self.time_ms_function else 0
        record = LogLine(
            level=Level(level),
            file=file,
            line=line,
            module_prefix=module_prefix,
            timestamp=timestamp,
            timestamp_components=timestamp_components(timestamp, self.use_datetime),
            fmt=fmt,
            args=tuple(args),
        )
        if self.handler is not None:
            self.handler(record)
            return
        with self.lock if self.lock is not None else nullcontext():
            self.write_function(self.format_line(record))

    def format_line(self, log_line: LogLine) -> str:
        """Format a line, truncating the message so the line fits and ends in a newline."""
        parts = []
        if self.time_ms_function is not None or log_line.timestamp:
            components = timestamp_components(log_line.timestamp, self.use_datetime)
            parts.append(f"{components} ")
        parts.append(log_line.level.prefix)
        if log_line.module_prefix:
            parts.append(log_line.module_prefix)
        parts.append(log_line.file)
        parts.append(f":{log_line.line}: ")
        parts.append(log_line.message)

        limit = self._buffer_size - 1
        text = "".join(parts)[:limit]
        if len(text) == limit:
            text = text[:-1]
        return text + "\n"

    def level_is_active(self, logger: Logger, level: Level) -> bool:
        """Return whether level passes the logger's threshold."""
        min_level = self.default_level if logger.level == Level.DEFAULT else logger.level
        return level >= min_level

    def get_logger(
        self, module_name: str | None = None, level: Level = Level.DEFAULT
    ) -> Logger:
        """Create a logger for a module, with its own optional threshold."""
        prefix = f"{module_name}:" if module_name else None
        return Logger(self, Level(level), prefix)


class Logger:
    """A per-module logger which records the caller's file and line."""

    def __init__(
        self, system: LogSystem, level: Level = Level.DEFAULT, module_prefix: str | None = None
    ) -> None:
        self.system = system
        self.level = Level(level)
        self.module_prefix = module_prefix

    def is_active(self, level: Level) -> bool:
        """Return whether a line at level would be logged."""
        return self.system.level_is_active(self, level)

    def debug(self, fmt: str, *args: object) -> None:
        """Log at DEBUG level."""
        self._emit(Level.DEBUG, fmt, args)

    def info(self, fmt: str, *args: object) -> None:
        """Log at INFO level."""
        self._emit(Level.INFO, fmt, args)

    def warn(self, fmt: str, *args: object) -> None:
        """Log at WARN level."""
        self._emit(Level.WARN, fmt, args)

    def error(self, fmt: str, *args: object) -> None:
        """Log at ERROR level."""
        self._emit(Level.ERROR, fmt, args)

    def _emit(self, level: Level, fmt: str, args: tuple) -> None:
        if not self.is_active(level):
            return
        frame = inspect.currentframe()
        caller = frame.f_back.f_back if frame and frame.f_back else None
        try:
            if caller is not None:
                file = os.path.basename(caller.f_code.co_filename)
                line = caller.f_lineno
            else:
                file, line = "?", 0
        finally:
            del frame, caller
        self.system.log(level, file, line, self.module_prefix, fmt, *args)