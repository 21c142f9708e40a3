"""Logging with per-severity configuration and run-time filters.

Messages go to stderr (or a chosen stream) unless a log file is set.
Each line carries the time elapsed since the first message, the severity,
the subsystem and, unless the message ends in a newline, the place it was
issued from.
"""

from __future__ import annotations

import os
import sys
import threading
import time
from dataclasses import dataclass
from enum import IntEnum
from typing import IO, List, Optional, Union

__all__ = [
    "Severity",
    "LogConfig",
    "LogFilter",
    "Log",
    "STRMAX",
    "DEFAULT_CONFIG",
    "GLOBAL_DEFAULT_CONFIG",
]

STRMAX = 128

DISCARD = 0
LOG = 1
PASS = 2

_SELF_FILE = os.path.basename(__file__)
_BUILD_STAMP = time.localtime()
_BUILD_DATE = time.strftime("%b %d %Y", _BUILD_STAMP)
_BUILD_TIME = time.strftime("%H:%M:%S", _BUILD_STAMP)
_REVISION = "<unknown>"


class Severity(IntEnum):
    """Message severities, most severe first."""

    FATAL = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7


_SEV_NUM = len(Severity)


@dataclass(frozen=True)
class LogConfig:
    """Per-severity action: 0 discards, 1 logs, 2 defers to other configs."""

    debug: int = PASS
    info: int = PASS
    notice: int = PASS
    warning: int = PASS
    error: int = PASS
    critical: int = PASS
    alert: int = PASS
    fatal: int = PASS

    @classmethod
    def all(cls, debug, info, notice, warning, error, critical, alert, fatal):
        """Build a config giving the action for every severity."""
        return cls(debug, info, notice, warning, error, critical, alert, fatal)

    def value_for(self, severity) -> int:
        """Return the action configured for ``severity``."""
        try:
            sev = Severity(int(severity))
        except ValueError:
            raise ValueError(f"invalid severity {severity!r}") from None
        return getattr(self, sev.name.lower())


DEFAULT_CONFIG = LogConfig()
GLOBAL_DEFAULT_CONFIG = LogConfig.all(0, 0, 1, 1, 1, 1, 1, 1)


def _clip(value: str) -> str:
    return value[: STRMAX - 1]


@dataclass(frozen=True)
class LogFilter:
    """Selects messages by file, line, function and subsystem.

    Empty strings and negative lines match anything.
    """

    file: str = ""
    line: int = -1
    func: str = ""
    subsystem: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "file", _clip(self.file))
        object.__setattr__(self, "func", _clip(self.func))
        object.__setattr__(self, "subsystem", _clip(self.subsystem))

    def matches(self, file, line, func, subsystem) -> bool:
        """Return whether a message with these attributes is selected."""
        if self.file and (file is None or self.file != file):
            return False
        if self.line >= 0 and self.line != line:
            return False
        if self.func and (func is None or self.func != func):
            return False
        if self.subsystem and (subsystem is None or self.subsystem != subsystem):
            return False
        return True


@dataclass
class _DynConfig:
    handle: int
    log_filter: LogFilter
    config: LogConfig


def _decide(value: int) -> Optional[bool]:
    if value == DISCARD:
        return True
    if value == LOG:
        return False
    return None


class Log:
    """A thread-safe logger writing to a stream or an appended file."""

    def __init__(self, stream: Optional[IO[str]] = None):
        self._lock = threading.RLock()
        self._stream = stream
        self._file: Optional[IO[str]] = None
        self._start: Optional[int] = None
        self._config = GLOBAL_DEFAULT_CONFIG
        self._filters: List[_DynConfig] = []

    # configuration

    def set_config(self, config: LogConfig) -> None:
        """Replace the global config used when no filter decides."""
        if not isinstance(config, LogConfig):
            raise TypeError("config must be a LogConfig")
        with self._lock:
            self._config = config

    def add_filter(self, log_filter: LogFilter, config: LogConfig) -> int:
        """Add a filter and return its handle (always >= 0)."""
        if not isinstance(log_filter, LogFilter):
            raise TypeError("log_filter must be a LogFilter")
        if not isinstance(config, LogConfig):
            raise TypeError("config must be a LogConfig")
        with self._lock:
            handle = self._filters[0].handle + 1 if self._filters else 0
            self._filters.insert(0, _DynConfig(handle, log_filter, config))
            return handle

    def remove_filter(self, handle: int) -> None:
        """Remove the filter with ``handle``; unknown handles are ignored."""
        with self._lock:
            for index, dconf in enumerate(self._filters):
                if dconf.handle == handle:
                    del self._filters[index]
                    return

    def clean_filters(self) -> None:
        """Remove all filters."""
        with self._lock:
            self._filters.clear()

    def omit(self, severity, file=None, line=-1, func=None, config=None,
             subsystem=None) -> bool:
        """Return whether a message with these attributes is discarded."""
        with self._lock:
            return self._omit(severity, file, line, func, config, subsystem)

    def _omit(self, severity, file, line, func, config, subsystem) -> bool:
        sev = int(severity)
        if sev < 0 or sev >= _SEV_NUM:
            return False
        if config is not None:
            decision = _decide(config.value_for(sev))
            if decision is not None:
                return decision
        for dconf in self._filters:
            if dconf.log_filter.matches(file, line, func, subsystem):
                decision = _decide(dconf.config.value_for(sev))
                if decision is not None:
                    return decision
        decision = _decide(self._config.value_for(sev))
        return bool(decision)

    # output target

    def set_file(self, path) -> None:
        """Append messages to ``path``; ``None`` returns to the stream."""
        if path is not None:
            try:
                new = open(path, "a", encoding="utf-8")
            except OSError as exc:
                self.submit(
                    Severity.ERROR,
                    f"cannot change log-file to {path} ({exc.errno}): "
                    f"{exc.strerror}",
                    file=_SELF_FILE, line=0, func="set_file", subsystem="log",
                )
                raise
            name = os.fspath(path)
        else:
            new = None
            name = "<default>"

        old = None
        with self._lock:
            if self._file is not new:
                self._submit(Severity.NOTICE, f"set log-file to {name}",
                             _SELF_FILE, 0, "set_file", None, "log")
                old = self._file
                self._file = new
                new = None
        if new is not None:
            new.close()
        if old is not None:
            old.close()

    def close(self) -> None:
        """Close any log file and return to the stream."""
        with self._lock:
            old, self._file = self._file, None
        if old is not None:
            old.close()

    # submission

    def _elapsed(self):
        now = time.time_ns() // 1000
        if self._start is None:
            self._start = now
            return 0, 0
        return divmod(now - self._start, 1_000_000)

    def _submit(self, severity, message, file, line, func, config, subsystem):
        if self._omit(severity, file, line, func, config, subsystem):
            return
        out = self._file or self._stream or sys.stderr
        sec, usec = self._elapsed()
        parts = [f"[{sec:04d}.{usec:06d}] "]
        sev = int(severity)
        if 0 <= sev < _SEV_NUM:
            parts.append(f"{Severity(sev).name}: ")
        if subsystem is not None:
            parts.append(f"{subsystem}: ")
        parts.append(message)
        if not message.endswith("\n"):
            parts.append(
                f" ({func or '<unknown>'}() in {file or '<unknown>'}:"
                f"{max(line, 0)})\n"
            )
        out.write("".join(parts))
        out.flush()

    def submit(self, severity, message, *, file=None, line=-1, func=None,
               config=None, subsystem=None) -> None:
        """Log ``message`` unless the configs and filters discard it."""
        with self._lock:
            self._submit(severity, message, file, line, func, config,
                         subsystem)

    def print_init(self, appname=None) -> None:
        """Log a start-up notice naming the application and build."""
        if not appname:
            appname = "<unknown>"
        self.submit(
            Severity.NOTICE,
            f"{appname} Revision {_REVISION} {_BUILD_DATE} {_BUILD_TIME}",
            file=_SELF_FILE, line=0, func="print_init",
        )