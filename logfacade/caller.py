from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from types import FrameType
from typing import Any, Dict, Optional

from .levels import CallerContext

METHOD_KEY = "code.function.name"
LINE_KEY = "code.line.number"
FILE_PATH_KEY = "code.file.path"
FILE_NAME_KEY = "code.file.name"


@dataclass(frozen=True)
class CapturedSite:
    method_name: str = ""
    file_path: str = ""
    line_number: int = 0


def _frame(stacklevel: int) -> Optional[FrameType]:
    # Walks up from the function that called _frame.
    frame: Optional[FrameType] = sys._getframe(1)
    for _ in range(stacklevel):
        if frame is None:
            break
        frame = frame.f_back
    return frame


def capture(stacklevel: int = 1) -> CapturedSite:
    """Describe the frame ``stacklevel`` levels above the caller of ``capture``.

    ``stacklevel=1`` is the function that called ``capture``. Frames past the
    top of the stack yield an empty site.
    """

    frame = _frame(stacklevel)
    if frame is None:
        return CapturedSite()
    code = frame.f_code
    return CapturedSite(code.co_name, code.co_filename, frame.f_lineno or 0)


def project(site: CapturedSite, flags: CallerContext) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if flags & CallerContext.METHOD_NAME:
        out[METHOD_KEY] = site.method_name
    if flags & CallerContext.LINE_NUMBER:
        out[LINE_KEY] = site.line_number
    if flags & CallerContext.SOURCE_FILE_PATH:
        out[FILE_PATH_KEY] = site.file_path
    elif flags & CallerContext.SOURCE_FILE_NAME:
        out[FILE_NAME_KEY] = os.path.basename(site.file_path) if site.file_path else site.file_path
    return out


def current_method() -> str:
    return capture(2).method_name


def current_file() -> str:
    return capture(2).file_path


def current_line() -> int:
    return capture(2).line_number


def type_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def declaring_type_name(stacklevel: int = 1) -> str:
    """Name of the type (or module) that owns the frame ``stacklevel`` up.

    Inspects the frame's locals, so it is slower than passing a name.
    Class bodies, methods taking ``self`` or ``cls``, and module level code
    are recognised; anything else falls back to the module name.
    """

    frame = _frame(stacklevel)
    if frame is None:
        return ""
    f_locals = frame.f_locals
    if frame.f_code.co_name != "<module>":
        qualname = f_locals.get("__qualname__")
        module = f_locals.get("__module__")
        if isinstance(qualname, str) and isinstance(module, str):
            return f"{module}.{qualname}"
        owner = f_locals.get("self", f_locals.get("cls"))
        if owner is not None:
            return type_name(owner if isinstance(owner, type) else type(owner))
    return str(frame.f_globals.get("__name__", ""))
