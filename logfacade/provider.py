"""Provider binding: turns a name or a type into a :class:`Logger`.

The default provider, level and caller-context flags come from one
:class:`LogConfig` installed at startup with :func:`configure`; until then the
defaults of ``LogConfig()`` apply.

    configure(LogConfig(service_name="orders", level="DEBUG"))
    log = get_logger(__name__)
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Optional, Union

from .backends import Backend, OTelBackend, StdlibBackend
from .caller import declaring_type_name, type_name
from .config import LogConfig, resource_attributes
from .context import ContextStore, default_store
from .errors import UnsupportedProviderError
from .levels import CallerContext, ContextScope, Severity
from .logger import Logger

_LOGGER = logging.getLogger("logfacade")
_LOGGER.addHandler(logging.NullHandler())


class ProviderKind(str, Enum):
    STDLIB = "stdlib"
    OTEL = "otel"


BackendFactory = Callable[[str, LogConfig], Backend]


def _stdlib_backend(name: str, cfg: LogConfig) -> Backend:
    return StdlibBackend(logging.getLogger(name), resource_attributes(cfg))


def _otel_backend(name: str, cfg: LogConfig) -> Backend:
    min_severity = Severity.parse(cfg.level) if cfg.level else Severity.TRACE
    return OTelBackend(name, min_severity=min_severity, extra=resource_attributes(cfg))


_PROVIDERS: Dict[str, BackendFactory] = {
    ProviderKind.STDLIB.value: _stdlib_backend,
    ProviderKind.OTEL.value: _otel_backend,
}

_config = LogConfig()


def _provider_key(provider: Union[ProviderKind, str]) -> str:
    key = provider.value if isinstance(provider, ProviderKind) else str(provider).strip().lower()
    if key not in _PROVIDERS:
        raise UnsupportedProviderError(provider)
    return key


def register_provider(kind: Union[ProviderKind, str], factory: BackendFactory) -> None:
    key = kind.value if isinstance(kind, ProviderKind) else str(kind).strip().lower()
    _PROVIDERS[key] = factory
    _LOGGER.debug("registered logging provider %r", key)


def unregister_provider(kind: Union[ProviderKind, str]) -> None:
    _PROVIDERS.pop(_provider_key(kind), None)


def configure(cfg: LogConfig) -> None:
    """Install ``cfg`` as the process-wide default. Call once at startup.

    Calling it again replaces the previous config: Global-scope keys seeded
    from the old ``static`` mapping are removed before the new ones are set.
    """

    global _config
    key = _provider_key(cfg.provider)
    level = Severity.parse(cfg.level) if cfg.level else None
    if level is not None and key == ProviderKind.STDLIB.value:
        logging.getLogger().setLevel(level.levelno)
    static = {**dict.fromkeys(_config.static), **cfg.static}
    if static:
        default_store().update(ContextScope.GLOBAL, static)
    _config = cfg
    _LOGGER.debug("logging provider %r configured for service %r", key, cfg.service_name)


def get_config() -> LogConfig:
    return _config


def resolve_backend(provider: Union[ProviderKind, str], name: str) -> Backend:
    key = _provider_key(provider)
    return _PROVIDERS[key](name, _config)


def get_logger(
    name: Union[str, type, None] = None,
    provider: Union[ProviderKind, str, None] = None,
    *,
    store: Optional[ContextStore] = None,
    caller_context: Optional[CallerContext] = None,
) -> Logger:
    """Return a logger bound to ``provider`` (default: the configured one).

    ``name`` may be a logger name or a type. When omitted, the caller's
    declaring type (or module) is used; that lookup inspects the stack and is
    slower than passing ``__name__``.
    """

    key = _provider_key(provider if provider is not None else _config.provider)
    if isinstance(name, type):
        resolved = type_name(name)
    elif name:
        resolved = name
    else:
        resolved = declaring_type_name(2)
    return Logger(
        resolved,
        resolve_backend(key, resolved),
        store=store,
        caller_context=caller_context if caller_context is not None else _config.caller_context,
    )


def _reset(cfg: Optional[LogConfig] = None) -> None:
    global _config
    _config = cfg if cfg is not None else LogConfig()
