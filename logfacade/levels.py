from __future__ import annotations

import logging
from enum import Enum, IntEnum, IntFlag
from typing import Union


class Severity(IntEnum):
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5

    @property
    def levelno(self) -> int:
        """Stdlib logging level. TRACE collapses onto DEBUG."""
        return _STDLIB_LEVELS[self]

    @property
    def otel_number(self) -> int:
        return severity_number(self)

    @classmethod
    def parse(cls, value: Union["Severity", int, str]) -> "Severity":
        if isinstance(value, Severity):
            return value
        if isinstance(value, int):
            return cls(value)
        name = str(value).strip().upper()
        resolved = _ALIASES.get(name, name)
        try:
            return cls[resolved]
        except KeyError:
            raise ValueError(f"Unknown log level: {value}") from None


_STDLIB_LEVELS = {
    Severity.TRACE: logging.DEBUG,
    Severity.DEBUG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.FATAL: logging.CRITICAL,
}

_ALIASES = {"WARNING": "WARN", "CRITICAL": "FATAL"}


def severity_number(severity: Severity) -> int:
    """Map a severity to its OpenTelemetry severity_number (1-24)."""

    return 1 + 4 * int(severity)


class CallerContext(IntFlag):
    """Which parts of the call site are attached to a record.

    SOURCE_FILE_PATH wins over SOURCE_FILE_NAME when both are set. The default
    leaves the full path out so records do not expose the build layout.
    """

    NONE = 0
    METHOD_NAME = 0x1
    LINE_NUMBER = 0x2
    SOURCE_FILE_NAME = 0x4
    SOURCE_FILE_PATH = 0x8
    DEFAULT = METHOD_NAME | LINE_NUMBER | SOURCE_FILE_NAME

    @classmethod
    def parse(cls, value: Union["CallerContext", int, str]) -> "CallerContext":
        if isinstance(value, int):
            return cls(value)
        flags = cls.NONE
        for part in str(value).split(","):
            name = part.strip().upper().replace("-", "_")
            if not name:
                continue
            try:
                flags |= cls[name]
            except KeyError:
                raise ValueError(f"Unknown caller context flag: {part.strip()}") from None
        return flags


class ContextScope(Enum):
    GLOBAL = "global"
    THREAD = "thread"
    LOGICAL_FLOW = "logical_flow"
