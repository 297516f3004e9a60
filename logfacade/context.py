"""Ambient log properties in three scopes.

``GLOBAL`` is one map for the whole process. ``THREAD`` is one map per
physical thread. ``LOGICAL_FLOW`` follows a chain of work across threads and
tasks: it lives in a :class:`~contextvars.ContextVar`, so a child unit of work
gets a copy of the parent's map at the moment it is spawned and never sees
later parent writes. ``asyncio`` tasks copy the context on creation; threads
and executor jobs need :func:`start_thread`, :func:`submit` or :func:`bind`.

    >>> store = default_store()
    >>> store.set_property(ContextScope.LOGICAL_FLOW, "request_id", "req-1")
    >>> store.get_property("request_id")
    'req-1'
"""

from __future__ import annotations

import functools
import threading
from concurrent.futures import Executor, Future
from contextlib import contextmanager
from contextvars import Context, ContextVar, copy_context
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, TypeVar, Union

from .levels import ContextScope

T = TypeVar("T")

Properties = Union[Mapping[Any, Any], Iterable[Tuple[Any, Any]]]
Change = Tuple[str, Optional[str]]

_EMPTY: Dict[str, str] = {}

# Unscoped lookups check the narrowest scope first.
_PRECEDENCE = (ContextScope.LOGICAL_FLOW, ContextScope.THREAD, ContextScope.GLOBAL)


def _normalize(properties: Properties) -> List[Change]:
    items = properties.items() if isinstance(properties, Mapping) else properties
    return [(str(key), None if value is None else str(value)) for key, value in items]


def _apply(base: Mapping[str, str], changes: List[Change]) -> Dict[str, str]:
    out = dict(base)
    for key, value in changes:
        if value is None:
            out.pop(key, None)
        else:
            out[key] = value
    return out


class ContextStore:
    """Owns the GLOBAL, THREAD and LOGICAL_FLOW property maps.

    Values are stored as strings; writing ``None`` removes the key.
    The GLOBAL and LOGICAL_FLOW maps are never mutated in place: every write
    publishes a new dict, so readers and forks always see a whole map.
    """

    def __init__(self, name: str = "logfacade") -> None:
        self._global: Dict[str, str] = {}
        self._global_lock = threading.Lock()
        self._thread = threading.local()
        self._flow: ContextVar[Dict[str, str]] = ContextVar(f"{name}_flow", default=_EMPTY)

    def set_property(self, scope: ContextScope, key: Any, value: Any) -> None:
        self.update(scope, ((key, value),))

    def update(self, scope: ContextScope, properties: Properties) -> None:
        changes = _normalize(properties)
        if scope is ContextScope.GLOBAL:
            with self._global_lock:
                self._global = _apply(self._global, changes)
        elif scope is ContextScope.THREAD:
            props: Optional[Dict[str, str]] = getattr(self._thread, "props", None)
            if props is None:
                if all(value is None for _, value in changes):
                    return
                props = self._thread.props = {}
            for key, value in changes:
                if value is None:
                    props.pop(key, None)
                else:
                    props[key] = value
        elif scope is ContextScope.LOGICAL_FLOW:
            self._flow.set(_apply(self._flow.get(), changes))
        else:
            raise ValueError(f"Unknown context scope: {scope!r}")

    def get_property(self, key: Any, scope: Optional[ContextScope] = None) -> Optional[str]:
        """Return ``key`` from ``scope``, or from the first scope that has it.

        Without a scope the lookup order is LOGICAL_FLOW, THREAD, GLOBAL.
        """

        key = str(key)
        if scope is not None:
            return self._map(scope).get(key)
        for candidate in _PRECEDENCE:
            value = self._map(candidate).get(key)
            if value is not None:
                return value
        return None

    def properties(self, scope: ContextScope) -> Dict[str, str]:
        return dict(self._map(scope))

    def snapshot(self) -> Dict[str, str]:
        """Merged view; LOGICAL_FLOW overrides THREAD overrides GLOBAL."""

        return {
            **self._global,
            **self._map(ContextScope.THREAD),
            **self._flow.get(),
        }

    def clear(self, scope: Optional[ContextScope] = None) -> None:
        scopes = (scope,) if scope is not None else tuple(ContextScope)
        for current in scopes:
            if current is ContextScope.GLOBAL:
                with self._global_lock:
                    self._global = {}
            elif current is ContextScope.THREAD:
                self._thread.__dict__.pop("props", None)
            else:
                self._flow.set(_EMPTY)

    @contextmanager
    def scoped(self, scope: ContextScope, properties: Properties) -> Iterator[None]:
        """Set ``properties`` for the duration of the block, then restore."""

        changes = _normalize(properties)
        if scope is ContextScope.LOGICAL_FLOW:
            token = self._flow.set(_apply(self._flow.get(), changes))
            try:
                yield
            finally:
                self._flow.reset(token)
            return
        current = self._map(scope)
        previous = [(key, current.get(key)) for key, _ in changes]
        self.update(scope, changes)
        try:
            yield
        finally:
            self.update(scope, previous)

    @contextmanager
    def caller_site(self, fields: Mapping[str, Any]) -> Iterator[None]:
        """Publish call-site fields in THREAD scope for one write only."""

        self.update(ContextScope.THREAD, fields)
        try:
            yield
        finally:
            self.update(ContextScope.THREAD, dict.fromkeys(fields))

    def _map(self, scope: ContextScope) -> Mapping[str, str]:
        if scope is ContextScope.GLOBAL:
            return self._global
        if scope is ContextScope.THREAD:
            return getattr(self._thread, "props", _EMPTY)
        if scope is ContextScope.LOGICAL_FLOW:
            return self._flow.get()
        raise ValueError(f"Unknown context scope: {scope!r}")


_DEFAULT_STORE = ContextStore()


def default_store() -> ContextStore:
    return _DEFAULT_STORE


def log_context(scope: ContextScope = ContextScope.LOGICAL_FLOW, /, **attrs: Any):
    return _DEFAULT_STORE.scoped(scope, attrs)


def fork() -> Context:
    """Snapshot the current logical flow for a child unit of work."""

    return copy_context()


def bind(fn: Callable[..., T]) -> Callable[..., T]:
    """Fork now; run ``fn`` inside that snapshot whenever it is called later."""

    ctx = fork()

    @functools.wraps(fn)
    def run(*args: Any, **kwargs: Any) -> T:
        return ctx.copy().run(fn, *args, **kwargs)

    return run


def start_thread(
    target: Callable[..., Any],
    *args: Any,
    name: Optional[str] = None,
    daemon: Optional[bool] = None,
    **kwargs: Any,
) -> threading.Thread:
    thread = threading.Thread(target=bind(target), args=args, kwargs=kwargs, name=name, daemon=daemon)
    thread.start()
    return thread


def submit(executor: Executor, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Future[T]:
    return executor.submit(bind(fn), *args, **kwargs)
