"""Priority-ordered, domain-scoped hook dispatch for in-process plugins.

Libraries should create and own a ``HookEngine``. Applications that want a
single process-wide engine get one from ``get_default_engine``.
"""

import logging
import threading
from typing import Optional

from .config import EngineConfig, load_engine_config, read_engine_config
from .engine import HookEngine
from .models import (
    EngineDisposedError,
    HandlerRecord,
    HandlerTimeoutError,
    HookKind,
    RunContext,
)
from .priority import Priority, resolve_order
from .registry import HookRegistry

logger = logging.getLogger(__name__)

# Global engine instance
_default_engine: Optional[HookEngine] = None
_default_engine_lock = threading.Lock()


def get_default_engine() -> HookEngine:
    """Return the process-wide engine, building it from the config file on first use."""
    global _default_engine
    with _default_engine_lock:
        if _default_engine is None or _default_engine.is_disposed:
            _default_engine = HookEngine(read_engine_config(), strict_validation=False)
            logger.debug("Created default hook engine")
        return _default_engine


def set_default_engine(engine: Optional[HookEngine]) -> None:
    """Install ``engine`` as the process-wide engine (None drops it)."""
    global _default_engine
    with _default_engine_lock:
        _default_engine = engine


def reset_default_engine() -> None:
    """Dispose the process-wide engine; the next ``get_default_engine`` builds a new one."""
    global _default_engine
    with _default_engine_lock:
        if _default_engine is not None:
            _default_engine.dispose()
        _default_engine = None


__all__ = [
    "HookEngine",
    "HookRegistry",
    "HookKind",
    "HandlerRecord",
    "RunContext",
    "Priority",
    "EngineConfig",
    "HandlerTimeoutError",
    "EngineDisposedError",
    "resolve_order",
    "load_engine_config",
    "get_default_engine",
    "set_default_engine",
    "reset_default_engine",
]
