from __future__ import annotations

import logging
import time
import traceback
from typing import Any, Dict, Mapping, MutableMapping, Optional, Protocol, cast

from .levels import Severity

_RESERVED_RECORD_KEYS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

# Frames from a StdlibBackend emit method up to application code:
# emit <- Logger._dispatch <- Logger._log <- public Logger method <- caller.
FACADE_STACKLEVEL = 5


class Backend(Protocol):
    """What a logger needs from the engine that formats and persists records."""

    def is_level_enabled(self, severity: Severity) -> bool: ...

    def emit(self, severity: Severity, text: str, properties: Mapping[str, str]) -> None: ...

    def emit_error(
        self, severity: Severity, error: BaseException, properties: Mapping[str, str]
    ) -> None: ...

    def emit_with_error(
        self,
        severity: Severity,
        text: str,
        error: BaseException,
        properties: Mapping[str, str],
    ) -> None: ...


def _describe(error: BaseException) -> str:
    name = type(error).__name__
    text = str(error)
    return f"{name}: {text}" if text else name


def _safe_extra(extra: Mapping[str, Any]) -> Dict[str, Any]:
    # LogRecord refuses extras that shadow its own attributes.
    return {(f"ctx.{k}" if k in _RESERVED_RECORD_KEYS else k): v for k, v in extra.items()}


class StdlibBackend(logging.LoggerAdapter[logging.Logger]):
    """Binds the facade to a stdlib :class:`logging.Logger`.

    TRACE has no stdlib level and is written at DEBUG. ``stacklevel`` is
    handed to :meth:`logging.Logger.log` so records carry the source location
    of the code that called the facade, not of this class.
    """

    def __init__(
        self,
        logger: logging.Logger,
        extra: Optional[Mapping[str, Any]] = None,
        stacklevel: int = FACADE_STACKLEVEL,
    ):
        super().__init__(logger, dict(extra or {}))
        self.stacklevel = stacklevel

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]):
        extra: Dict[str, Any] = dict(self.extra) if self.extra else {}
        extra.update(cast(Optional[Dict[str, Any]], kwargs.get("extra")) or {})
        kwargs["extra"] = _safe_extra(extra)
        return msg, kwargs

    def is_level_enabled(self, severity: Severity) -> bool:
        return self.isEnabledFor(severity.levelno)

    def emit(self, severity: Severity, text: str, properties: Mapping[str, str]) -> None:
        self.log(severity.levelno, text, extra=dict(properties), stacklevel=self.stacklevel)

    def emit_error(
        self, severity: Severity, error: BaseException, properties: Mapping[str, str]
    ) -> None:
        self.log(
            severity.levelno,
            _describe(error),
            exc_info=(type(error), error, error.__traceback__),
            extra=dict(properties),
            stacklevel=self.stacklevel,
        )

    def emit_with_error(
        self,
        severity: Severity,
        text: str,
        error: BaseException,
        properties: Mapping[str, str],
    ) -> None:
        self.log(
            severity.levelno,
            text,
            exc_info=(type(error), error, error.__traceback__),
            extra=dict(properties),
            stacklevel=self.stacklevel,
        )


def _exception_attributes(error: BaseException) -> Dict[str, Any]:
    return {
        "exception.type": type(error).__name__,
        "exception.message": str(error),
        "exception.stacktrace": "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        ).strip(),
    }


def _span_context() -> Dict[str, Any]:
    from opentelemetry.trace import get_current_span

    sc = get_current_span().get_span_context()
    if not sc.is_valid:
        return {}
    return {
        "trace_id": f"{sc.trace_id:032x}",
        "span_id": f"{sc.span_id:016x}",
        "trace_sampled": bool(int(sc.trace_flags) & 0x01),
    }


class OTelBackend:
    """Writes records straight to the OpenTelemetry logs API.

    Unlike the stdlib binding, TRACE keeps its own severity number. Which
    exporters receive the records is decided by the application's
    ``LoggerProvider``.
    """

    def __init__(
        self,
        name: str,
        min_severity: Severity = Severity.TRACE,
        extra: Optional[Mapping[str, Any]] = None,
        otel_logger: Any = None,
    ):
        if otel_logger is None:
            try:
                from opentelemetry._logs import get_logger
            except Exception as exc:
                raise RuntimeError(
                    "OpenTelemetry logging requested, but the opentelemetry-api package is not installed."
                ) from exc
            otel_logger = get_logger(name)
        self.name = name
        self.min_severity = min_severity
        self.extra: Dict[str, Any] = dict(extra or {})
        self._logger = otel_logger

    def is_level_enabled(self, severity: Severity) -> bool:
        return severity >= self.min_severity

    def emit(self, severity: Severity, text: str, properties: Mapping[str, str]) -> None:
        self._emit(severity, text, None, properties)

    def emit_error(
        self, severity: Severity, error: BaseException, properties: Mapping[str, str]
    ) -> None:
        self._emit(severity, _describe(error), error, properties)

    def emit_with_error(
        self,
        severity: Severity,
        text: str,
        error: BaseException,
        properties: Mapping[str, str],
    ) -> None:
        self._emit(severity, text, error, properties)

    def _emit(
        self,
        severity: Severity,
        body: str,
        error: Optional[BaseException],
        properties: Mapping[str, str],
    ) -> None:
        from opentelemetry._logs import LogRecord, SeverityNumber

        attributes: Dict[str, Any] = {**self.extra, **properties, **_span_context()}
        if error is not None:
            attributes.update(_exception_attributes(error))
        now = time.time_ns()
        self._logger.emit(
            LogRecord(
                timestamp=now,
                observed_timestamp=now,
                severity_text=severity.name,
                severity_number=SeverityNumber(severity.otel_number),
                body=body,
                attributes=attributes,
            )
        )
