"""
Main HookEngine orchestration class.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Union

from .config import EngineConfig, load_engine_config_from_dict
from .diagnostics import get_registry_stats
from .models import EngineDisposedError, HandlerRecord, HookKind, RunContext
from .priority import OrderLike
from .registry import HookRegistry
from .sequencer import execute_handlers_sequential, execute_handlers_sync
from .validator import (
    format_validation_report,
    get_config_suggestions,
    validate_engine_config,
)

logger = logging.getLogger(__name__)


class HookEngine:
    """
    Priority-ordered hook dispatcher.

    Coordinates the engine components:
    - Registers handlers into an owned HookRegistry
    - Snapshots and sorts handlers per invocation
    - Runs async handlers with failure isolation and optional timeouts
    - Runs sync handlers fail-fast
    """

    def __init__(
        self,
        config: Union[EngineConfig, Dict[str, Any], None] = None,
        strict_validation: bool = True,
    ):
        self.strict_validation = strict_validation
        self.config = EngineConfig()
        self._registry = HookRegistry()
        self._disposed = False

        if config is not None:
            self.load_config(config)

    def load_config(self, config: Union[EngineConfig, Dict[str, Any]]) -> None:
        settings = config.to_dict() if isinstance(config, EngineConfig) else config
        is_valid, errors = validate_engine_config(settings)
        if not is_valid:
            error_msg = format_validation_report(
                is_valid, errors, get_config_suggestions(settings, errors)
            )
            if self.strict_validation:
                raise ValueError(f"Invalid engine configuration:\n{error_msg}")
            logger.warning(f"Engine configuration has errors, using defaults:\n{error_msg}")
            self.config = EngineConfig()
            return

        if isinstance(config, EngineConfig):
            self.config = config
        else:
            self.config = load_engine_config_from_dict(config)

    # Registration

    def register(
        self,
        name: str,
        callback: Callable[..., Any],
        order: OrderLike = 0,
        handler_id: Optional[str] = None,
        domain: Optional[str] = None,
        *,
        timeout_ms: Optional[int] = None,
    ) -> str:
        """Register an async-path handler and return its id."""
        self._check_not_disposed()
        return self._registry.register(
            name,
            callback,
            order,
            handler_id,
            domain if domain is not None else self.config.default_domain,
            kind=HookKind.ASYNC,
            timeout_ms=timeout_ms,
        )

    def register_sync(
        self,
        name: str,
        callback: Callable[..., Any],
        order: OrderLike = 0,
        handler_id: Optional[str] = None,
        domain: Optional[str] = None,
    ) -> str:
        """Register a sync-path handler and return its id."""
        self._check_not_disposed()
        return self._registry.register_sync(
            name,
            callback,
            order,
            handler_id,
            domain if domain is not None else self.config.default_domain,
        )

    def handler(
        self,
        name: str,
        order: OrderLike = 0,
        handler_id: Optional[str] = None,
        domain: Optional[str] = None,
        sync: bool = False,
        timeout_ms: Optional[int] = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of ``register``/``register_sync``.

        Example:
            @engine.handler("beforeSave", order=Priority.HIGH, domain="audit")
            async def stamp(obj, context):
                obj["saved_by"] = "audit"
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            if sync:
                if timeout_ms is not None:
                    raise ValueError("Timeouts only apply to async handlers")
                self.register_sync(name, func, order, handler_id, domain)
            else:
                self.register(
                    name, func, order, handler_id, domain, timeout_ms=timeout_ms
                )
            return func

        return decorator

    def unregister(self, handler_id: str) -> bool:
        return self._registry.unregister(handler_id)

    def unregister_domain(self, name: str, domain: str) -> int:
        return self._registry.unregister_domain(name, domain)

    def flush(self, name: str, kind: HookKind = HookKind.ASYNC) -> int:
        return self._registry.flush(name, kind)

    def list(self, kind: HookKind = HookKind.ASYNC) -> List[str]:
        return self._registry.list(kind)

    # Dispatch

    async def run(self, name: str, *params: Any) -> RunContext:
        """
        Run every async handler of ``name`` in priority order.

        Each handler is called as ``callback(*params, context)``. A failing
        handler never stops the others and never makes ``run`` raise; its
        exception is recorded in ``context.errors`` and logged.
        """
        self._check_not_disposed()
        start_time = time.perf_counter()
        context = RunContext(name, params)

        records = self._registry.handlers(name, HookKind.ASYNC)
        if records:
            logger.debug(f"Running '{name}': {len(records)} async handler(s)")
            await execute_handlers_sequential(
                records, context.params, context, self.config.default_timeout_ms
            )

        context.total_duration_ms = (time.perf_counter() - start_time) * 1000
        if context.errors and self.config.log_errors:
            self._log_errors(context)
        return context

    def run_sync(self, name: str, *params: Any) -> RunContext:
        """
        Run every sync handler of ``name`` in priority order.

        The first exception raised by a handler propagates unchanged and the
        remaining handlers do not run.
        """
        self._check_not_disposed()
        start_time = time.perf_counter()
        context = RunContext(name, params)

        records = self._registry.handlers(name, HookKind.SYNC)
        if records:
            logger.debug(f"Running '{name}': {len(records)} sync handler(s)")
            execute_handlers_sync(records, context.params, context)

        context.total_duration_ms = (time.perf_counter() - start_time) * 1000
        return context

    def _log_errors(self, context: RunContext) -> None:
        for handler_id, exc in context.errors.items():
            logger.error(
                f"Hook '{context.hook}' handler '{handler_id}' failed: {exc}",
                exc_info=exc,
            )

    # Introspection

    def get_handlers(self, name: str, kind: HookKind = HookKind.ASYNC) -> List[HandlerRecord]:
        return self._registry.handlers(name, kind)

    def count_handlers(
        self, name: Optional[str] = None, kind: Optional[HookKind] = None
    ) -> int:
        return self._registry.count(name, kind)

    def get_stats(self) -> Dict[str, Any]:
        return get_registry_stats(self._registry)

    @property
    def registry(self) -> HookRegistry:
        return self._registry

    # Teardown

    def dispose(self) -> None:
        """Drop every handler. The engine cannot be used afterwards."""
        if self._disposed:
            return
        self._registry.clear()
        self._disposed = True
        logger.debug("Hook engine disposed")

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def _check_not_disposed(self) -> None:
        if self._disposed:
            raise EngineDisposedError("HookEngine has been disposed")

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"{self.count_handlers()} handler(s)"
        return f"<HookEngine {state}>"
