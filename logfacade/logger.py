"""Logger facade.

Every call shape ends in one canonical write::

    log = get_logger(__name__)
    log.info("order placed")                       # text
    log.debug(order)                               # object, via str()
    log.error(exc)                                 # error
    log.error("payment failed", exc)               # text + error
    log.write(Severity.WARN, "retrying", site=CapturedSite("pay", "pay.py", 12))

A disabled severity costs one backend level check and nothing else: no
string conversion, no frame inspection, no context snapshot.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Union, cast

from .backends import FACADE_STACKLEVEL, Backend
from .caller import CapturedSite, capture, project
from .context import ContextStore, Properties, default_store
from .errors import BackendEmitError
from .levels import CallerContext, ContextScope, Severity

# capture() runs in Logger._log, two frames above the backend emit method that
# FACADE_STACKLEVEL counts from: _log <- public method <- application code.
_CAPTURE_STACKLEVEL = FACADE_STACKLEVEL - 2


class Logger:
    def __init__(
        self,
        name: str,
        backend: Backend,
        store: Optional[ContextStore] = None,
        caller_context: CallerContext = CallerContext.DEFAULT,
    ):
        self.name = name
        self.backend = backend
        self.store = store if store is not None else default_store()
        self._caller_context = CallerContext.parse(caller_context)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    @property
    def caller_context(self) -> CallerContext:
        return self._caller_context

    @caller_context.setter
    def caller_context(self, flags: Union[CallerContext, int, str]) -> None:
        self._caller_context = CallerContext.parse(flags)

    def is_enabled(self, severity: Severity) -> bool:
        return self.backend.is_level_enabled(severity)

    def write(
        self,
        severity: Union[Severity, int, str],
        message: Any = None,
        error: Optional[BaseException] = None,
        *,
        site: Optional[CapturedSite] = None,
    ) -> None:
        self._log(Severity.parse(severity), message, error, site)

    def trace(
        self,
        message: Any = None,
        error: Optional[BaseException] = None,
        *,
        site: Optional[CapturedSite] = None,
    ) -> None:
        self._log(Severity.TRACE, message, error, site)

    def debug(
        self,
        message: Any = None,
        error: Optional[BaseException] = None,
        *,
        site: Optional[CapturedSite] = None,
    ) -> None:
        self._log(Severity.DEBUG, message, error, site)

    def info(
        self,
        message: Any = None,
        error: Optional[BaseException] = None,
        *,
        site: Optional[CapturedSite] = None,
    ) -> None:
        self._log(Severity.INFO, message, error, site)

    def warn(
        self,
        message: Any = None,
        error: Optional[BaseException] = None,
        *,
        site: Optional[CapturedSite] = None,
    ) -> None:
        self._log(Severity.WARN, message, error, site)

    warning = warn

    def error(
        self,
        message: Any = None,
        error: Optional[BaseException] = None,
        *,
        site: Optional[CapturedSite] = None,
    ) -> None:
        self._log(Severity.ERROR, message, error, site)

    def fatal(
        self,
        message: Any = None,
        error: Optional[BaseException] = None,
        *,
        site: Optional[CapturedSite] = None,
    ) -> None:
        self._log(Severity.FATAL, message, error, site)

    def set_context(self, scope: ContextScope, key: Any, value: Any) -> None:
        self.store.set_property(scope, key, value)

    def update_context(self, scope: ContextScope, properties: Properties) -> None:
        self.store.update(scope, properties)

    def get_context(self, key: Any, scope: Optional[ContextScope] = None) -> Optional[str]:
        return self.store.get_property(key, scope)

    def _log(
        self,
        severity: Severity,
        message: Any,
        error: Optional[BaseException],
        site: Optional[CapturedSite],
    ) -> None:
        if not self.backend.is_level_enabled(severity):
            return
        if error is None and isinstance(message, BaseException):
            message, error = None, message
        if message is None and error is None:
            return
        text = message if message is None or isinstance(message, str) else str(message)
        if site is None:
            site = capture(_CAPTURE_STACKLEVEL)
        with self.store.caller_site(project(site, self._caller_context)):
            self._dispatch(severity, text, error, self.store.snapshot())

    def _dispatch(
        self,
        severity: Severity,
        text: Optional[str],
        error: Optional[BaseException],
        properties: Dict[str, str],
    ) -> None:
        try:
            if error is None:
                self.backend.emit(severity, cast(str, text), properties)
            elif text is None:
                self.backend.emit_error(severity, error, properties)
            else:
                self.backend.emit_with_error(severity, text, error, properties)
        except Exception as exc:
            raise BackendEmitError(self.name, severity) from exc