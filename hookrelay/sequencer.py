"""
Sequential handler execution.

Runs handler records one after another against a shared RunContext. The
async runner isolates failures per handler and bounds awaitables with an
optional timeout; the sync runner lets the first exception escape.
"""

import asyncio
import inspect
import logging
import time
from typing import Any, Dict, Iterable, Optional, Sequence

from .models import HandlerRecord, HandlerTimeoutError, RunContext

logger = logging.getLogger(__name__)


def _store_result(context: RunContext, record: HandlerRecord, result: Any) -> None:
    # None means "ran, nothing to report"
    context[record.id] = True if result is None else result


async def invoke_handler(
    record: HandlerRecord,
    params: Sequence[Any],
    context: RunContext,
    default_timeout_ms: Optional[int] = None,
) -> Any:
    """
    Call one handler as ``callback(*params, context)`` and settle its result.

    Plain return values pass straight through. Awaitables are awaited,
    bounded by the handler's own timeout or ``default_timeout_ms``.

    Raises:
        HandlerTimeoutError: the awaitable did not settle in time
        Exception: whatever the handler raised
    """
    result = record.callback(*params, context)
    if not inspect.isawaitable(result):
        return result

    timeout_ms = record.timeout_ms if record.timeout_ms is not None else default_timeout_ms
    if timeout_ms is None:
        return await result

    # asyncio.wait never raises on expiry, so a TimeoutError raised by the
    # handler itself stays distinguishable from ours.
    task = asyncio.ensure_future(result)
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000.0)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task not in done:
        task.cancel()
        await asyncio.wait({task})
        if not task.cancelled():
            task.exception()  # handler outlived the cancel; mark its outcome retrieved
        raise HandlerTimeoutError(record.id, timeout_ms)
    return task.result()


async def execute_handlers_sequential(
    records: Iterable[HandlerRecord],
    params: Sequence[Any],
    context: RunContext,
    default_timeout_ms: Optional[int] = None,
) -> Dict[str, Exception]:
    """
    Run every record in order, never letting one failure stop the rest.

    Failures land in ``context.errors`` keyed by handler id and are also
    returned. Cancellation of the surrounding task is not caught.
    """
    for record in records:
        start_time = time.perf_counter()
        try:
            result = await invoke_handler(record, params, context, default_timeout_ms)
        except Exception as e:
            context.errors[record.id] = e
            logger.debug(f"Handler '{record.id}' on '{record.name}' failed: {e}")
        else:
            _store_result(context, record, result)
        finally:
            context.durations_ms[record.id] = (time.perf_counter() - start_time) * 1000

    return context.errors


def execute_handlers_sync(
    records: Iterable[HandlerRecord],
    params: Sequence[Any],
    context: RunContext,
) -> RunContext:
    """Run every record in order; the first exception propagates unchanged."""
    for record in records:
        start_time = time.perf_counter()
        result = record.callback(*params, context)
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise TypeError(
                f"Sync handler '{record.id}' on '{record.name}' returned an awaitable; "
                "register it as an async handler instead"
            )
        _store_result(context, record, result)
        context.durations_ms[record.id] = (time.perf_counter() - start_time) * 1000

    return context
