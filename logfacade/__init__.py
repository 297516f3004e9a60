"""Top‑level package for logfacade.

Exposes the `Logger` facade, `get_logger` / `configure` provider binding,
the three-scope `ContextStore` with its logical-flow helpers, and the
`Severity` / `CallerContext` / `ContextScope` enums.
See module docstrings for usage examples.
"""

from .backends import Backend, OTelBackend, StdlibBackend
from .caller import CapturedSite, capture, current_file, current_line, current_method
from .config import LogConfig
from .context import ContextStore, bind, default_store, fork, log_context, start_thread, submit
from .errors import BackendEmitError, LogFacadeError, UnsupportedProviderError
from .levels import CallerContext, ContextScope, Severity
from .logger import Logger
from .provider import ProviderKind, configure, get_config, get_logger, register_provider

__all__ = [
    "Backend",
    "StdlibBackend",
    "OTelBackend",
    "CapturedSite",
    "capture",
    "current_method",
    "current_file",
    "current_line",
    "LogConfig",
    "ContextStore",
    "default_store",
    "log_context",
    "fork",
    "bind",
    "start_thread",
    "submit",
    "LogFacadeError",
    "UnsupportedProviderError",
    "BackendEmitError",
    "Severity",
    "CallerContext",
    "ContextScope",
    "Logger",
    "ProviderKind",
    "configure",
    "get_config",
    "get_logger",
    "register_provider",
]
