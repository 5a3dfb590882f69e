"""
Data models for the hook engine.

Defines the handler record stored by the registry, the run context threaded
through every handler of one invocation, and the engine's error types.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

# Keys of a RunContext that are not handler results.
RESERVED_CONTEXT_KEYS = ("hook", "params")

DEFAULT_DOMAIN = "default"


class HookKind(str, Enum):
    """Execution strategy a handler is registered for."""

    ASYNC = "async"
    SYNC = "sync"


class HandlerTimeoutError(asyncio.TimeoutError):
    """Raised into the error side channel when an async handler times out."""

    def __init__(self, handler_id: str, timeout_ms: int):
        super().__init__(f"Handler '{handler_id}' timed out after {timeout_ms}ms")
        self.handler_id = handler_id
        self.timeout_ms = timeout_ms


class EngineDisposedError(RuntimeError):
    """Raised when a disposed HookEngine is used."""


@dataclass(frozen=True)
class HandlerRecord:
    """
    A single registered callback.

    Attributes:
        id: Globally unique handler identifier
        name: Hook name the handler is bound to
        order: Priority; lower values run earlier
        callback: The function invoked as ``callback(*params, context)``
        domain: Namespace used for bulk unregistration
        kind: Whether the handler belongs to the async or sync path
        timeout_ms: Optional time limit for awaitable results (async only)
    """

    id: str
    name: str
    order: int
    callback: Callable[..., Any]
    domain: str = DEFAULT_DOMAIN
    kind: HookKind = HookKind.ASYNC
    timeout_ms: Optional[int] = None

    @property
    def callback_name(self) -> str:
        name = getattr(self.callback, "__qualname__", None) or getattr(
            self.callback, "__name__", None
        )
        return name or type(self.callback).__name__


class RunContext(dict):
    """
    Context threaded through every handler of one ``run``/``run_sync`` call.

    Behaves as a plain dict holding ``hook``, ``params`` and one entry per
    handler that ran, keyed by handler id. Handlers may mutate it freely to
    communicate with later handlers. Failures and timings are kept as
    attributes so they never collide with handler ids.
    """

    def __init__(self, hook: str, params: Sequence[Any] = ()):
        super().__init__(hook=hook, params=list(params))
        self.errors: Dict[str, Exception] = {}
        self.durations_ms: Dict[str, float] = {}
        self.total_duration_ms: float = 0.0

    @property
    def hook(self) -> str:
        return self["hook"]

    @property
    def params(self) -> List[Any]:
        return self["params"]

    @property
    def results(self) -> Dict[str, Any]:
        """Entries written by handlers, excluding ``hook`` and ``params``."""
        return {k: v for k, v in self.items() if k not in RESERVED_CONTEXT_KEYS}

    @property
    def executed_handlers(self) -> int:
        return len(self.durations_ms)

    @property
    def all_successful(self) -> bool:
        return not self.errors

    @property
    def failed_handlers(self) -> List[str]:
        return list(self.errors)

    def __repr__(self) -> str:
        return (
            f"RunContext(hook={self.hook!r}, params={self.params!r}, "
            f"results={self.results!r}, errors={list(self.errors)!r})"
        )
