from __future__ import annotations
from typing import Any, Dict, Optional

try:
    from chz import chz, field
except Exception as exc:  # pragma: no cover
    raise ImportError("chz is required: https://github.com/openai/chz") from exc

from .levels import CallerContext


@chz
class LogConfig:
    service_name: str = field(default="app")
    service_version: Optional[str] = field(default=None)
    environment: Optional[str] = field(default=None)
    provider: str = field(default="stdlib")
    level: Optional[str] = field(default="INFO")
    caller_context: CallerContext = field(default=CallerContext.DEFAULT)
    static: Dict[str, Any] = field(default_factory=dict)


def resource_attributes(cfg: LogConfig) -> Dict[str, Any]:
    """Service identity attached by every backend built from ``cfg``."""

    attrs: Dict[str, Any] = {"service.name": cfg.service_name}
    if cfg.service_version:
        attrs["service.version"] = cfg.service_version
    if cfg.environment:
        attrs["deployment.environment"] = cfg.environment
    return attrs
