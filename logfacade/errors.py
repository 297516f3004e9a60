from __future__ import annotations

from typing import Any


class LogFacadeError(Exception):
    """Base class for errors raised by logfacade itself."""


class UnsupportedProviderError(LogFacadeError, ValueError):
    def __init__(self, provider: Any):
        super().__init__(f"Logging provider '{provider}' is currently not supported.")
        self.provider = provider


class BackendEmitError(LogFacadeError, RuntimeError):
    """A backend failed while emitting a record.

    The backend's own exception is chained as ``__cause__``.
    """

    def __init__(self, logger_name: str, severity: Any):
        level = getattr(severity, "name", severity)
        super().__init__(f"Backend for logger '{logger_name}' failed to emit a {level} record.")
        self.logger_name = logger_name
        self.severity = severity
