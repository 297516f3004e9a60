import importlib
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, cast

pytest = cast(Any, importlib.import_module("pytest"))

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import logfacade.provider as logfacade_provider  # noqa: E402
from logfacade import ContextStore, Logger, Severity, default_store  # noqa: E402


@dataclass
class Call:
    method: str
    severity: Severity
    text: Optional[str]
    error: Optional[BaseException]
    properties: Dict[str, str] = field(default_factory=dict)


class RecordingBackend:
    """Backend double that records every emit and can be made to fail."""

    def __init__(self, min_severity: Severity = Severity.TRACE, fail: Optional[BaseException] = None):
        self.min_severity = min_severity
        self.fail = fail
        self.calls: List[Call] = []
        self.level_checks: List[Severity] = []

    def is_level_enabled(self, severity: Severity) -> bool:
        self.level_checks.append(severity)
        return severity >= self.min_severity

    def emit(self, severity: Severity, text: str, properties: Mapping[str, str]) -> None:
        self._record(Call("emit", severity, text, None, dict(properties)))

    def emit_error(self, severity: Severity, error: BaseException, properties: Mapping[str, str]) -> None:
        self._record(Call("emit_error", severity, None, error, dict(properties)))

    def emit_with_error(
        self, severity: Severity, text: str, error: BaseException, properties: Mapping[str, str]
    ) -> None:
        self._record(Call("emit_with_error", severity, text, error, dict(properties)))

    def _record(self, call: Call) -> None:
        self.calls.append(call)
        if self.fail is not None:
            raise self.fail


class ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(logging.NOTSET)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture(autouse=True)
def reset_logging_state() -> Iterator[None]:
    """Ensure each test starts with a clean logging configuration and empty context."""
    logfacade_provider._reset()  # pyright: ignore[reportPrivateUsage]
    default_store().clear()
    root = logging.getLogger()
    root.setLevel(logging.NOTSET)
    yield
    logfacade_provider._reset()  # pyright: ignore[reportPrivateUsage]
    default_store().clear()
    root = logging.getLogger()
    root.setLevel(logging.NOTSET)


@pytest.fixture
def store() -> ContextStore:
    return ContextStore("test")


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def log(backend: RecordingBackend, store: ContextStore) -> Logger:
    return Logger("tests", backend, store=store)


@pytest.fixture
def list_handler() -> Iterator[ListHandler]:
    handler = ListHandler()
    root = logging.getLogger()
    root.addHandler(handler)
    yield handler
    root.removeHandler(handler)
