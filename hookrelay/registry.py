"""
Registry management for hook handlers.

Owns three structures that always move together:

- the action table ``kind -> hook name -> handler id -> HandlerRecord``,
  whose insertion order is registration order,
- the reverse index ``handler id -> (kind, hook name)`` for O(1) removal,
- the domain index ``hook name -> domain -> handler ids`` for bulk removal.

The action table is the source of truth; domain index membership is always
a subset of it.
"""

import logging
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple

from .models import DEFAULT_DOMAIN, HandlerRecord, HookKind
from .priority import OrderLike, resolve_order
from .validator import validate_registration

logger = logging.getLogger(__name__)


def generate_handler_id() -> str:
    return str(uuid.uuid4())


class HookRegistry:
    """Handler table plus reverse and domain indexes, guarded by one lock."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._actions: Dict[HookKind, Dict[str, Dict[str, HandlerRecord]]] = {
            kind: {} for kind in HookKind
        }
        self._reverse_index: Dict[str, Tuple[HookKind, str]] = {}
        # dict values are unused; dicts act as insertion-ordered sets
        self._domain_index: Dict[str, Dict[str, Dict[str, None]]] = {}

    def register(
        self,
        name: str,
        callback: Callable[..., Any],
        order: OrderLike = 0,
        handler_id: Optional[str] = None,
        domain: str = DEFAULT_DOMAIN,
        kind: HookKind = HookKind.ASYNC,
        timeout_ms: Optional[int] = None,
    ) -> str:
        """
        Add a handler and return its id.

        Registering an id that already exists (under any hook name or kind)
        replaces the earlier registration, which then counts as unregistered.
        The replacement runs after handlers registered before it with the
        same order.
        """
        validate_registration(name, callback, handler_id, domain, timeout_ms)
        kind = HookKind(kind)
        if kind is HookKind.SYNC and timeout_ms is not None:
            raise ValueError("Timeouts only apply to async handlers")

        record = HandlerRecord(
            id=handler_id or generate_handler_id(),
            name=name,
            order=resolve_order(order),
            callback=callback,
            domain=domain,
            kind=kind,
            timeout_ms=timeout_ms,
        )

        with self._lock:
            if record.id in self._reverse_index:
                previous_kind, previous_name = self._reverse_index[record.id]
                if (previous_kind, previous_name) != (kind, name):
                    logger.warning(
                        f"Handler id '{record.id}' reused: removing live handler "
                        f"{previous_kind.value}:{previous_name} in favour of "
                        f"{kind.value}:{name}"
                    )
                else:
                    logger.debug(f"Replacing handler '{record.id}' on '{name}'")
                self._remove(record.id)

            self._actions[kind].setdefault(name, {})[record.id] = record
            self._reverse_index[record.id] = (kind, name)
            self._domain_index.setdefault(name, {}).setdefault(domain, {})[
                record.id
            ] = None

        logger.debug(
            f"Registered {kind.value} handler '{record.id}' on '{name}' "
            f"(order={record.order}, domain={domain})"
        )
        return record.id

    def register_sync(
        self,
        name: str,
        callback: Callable[..., Any],
        order: OrderLike = 0,
        handler_id: Optional[str] = None,
        domain: str = DEFAULT_DOMAIN,
    ) -> str:
        return self.register(
            name, callback, order, handler_id, domain, kind=HookKind.SYNC
        )

    def unregister(self, handler_id: str) -> bool:
        """Remove one handler. Unknown ids are ignored and return False."""
        with self._lock:
            record = self._remove(handler_id)
        if record is None:
            return False
        logger.debug(f"Unregistered handler '{handler_id}' from '{record.name}'")
        return True

    def unregister_domain(self, name: str, domain: str) -> int:
        """
        Remove every handler registered under exactly ``(name, domain)``.

        Handlers of both kinds are removed. The same domain under other hook
        names is untouched.

        Returns:
            Number of handlers removed
        """
        with self._lock:
            bucket = self._domain_index.get(name, {}).get(domain)
            if not bucket:
                return 0
            removed = 0
            for handler_id in list(bucket):
                if self._remove(handler_id) is not None:
                    removed += 1
            self._drop_domain_bucket(name, domain)

        logger.debug(f"Unregistered {removed} handler(s) in domain '{domain}' from '{name}'")
        return removed

    def flush(self, name: str, kind: HookKind = HookKind.ASYNC) -> int:
        """
        Remove every handler of ``kind`` on ``name``, whatever its domain.

        Returns:
            Number of handlers removed
        """
        kind = HookKind(kind)
        with self._lock:
            table = self._actions[kind].pop(name, None)
            if not table:
                return 0
            for handler_id, record in table.items():
                self._reverse_index.pop(handler_id, None)
                self._discard_from_domain(name, record.domain, handler_id)

        logger.debug(f"Flushed {len(table)} {kind.value} handler(s) from '{name}'")
        return len(table)

    def list(self, kind: HookKind = HookKind.ASYNC) -> List[str]:
        """Hook names with at least one handler of ``kind``, sorted."""
        kind = HookKind(kind)
        with self._lock:
            return sorted(name for name, table in self._actions[kind].items() if table)

    def handlers(self, name: str, kind: HookKind = HookKind.ASYNC) -> List[HandlerRecord]:
        """
        Snapshot of the handlers for ``name`` in dispatch order.

        Sorted ascending by order. ``sorted`` is stable, so equal orders keep
        registration order.
        """
        kind = HookKind(kind)
        with self._lock:
            records = list(self._actions[kind].get(name, {}).values())
        return sorted(records, key=lambda record: record.order)

    def get(self, handler_id: str) -> Optional[HandlerRecord]:
        with self._lock:
            location = self._reverse_index.get(handler_id)
            if location is None:
                return None
            kind, name = location
            return self._actions[kind][name][handler_id]

    def domains(self, name: str) -> List[str]:
        with self._lock:
            return sorted(self._domain_index.get(name, {}))

    def domain_handlers(self, name: str, domain: str) -> List[str]:
        with self._lock:
            return list(self._domain_index.get(name, {}).get(domain, {}))

    def count(self, name: Optional[str] = None, kind: Optional[HookKind] = None) -> int:
        kinds = list(HookKind) if kind is None else [HookKind(kind)]
        total = 0
        with self._lock:
            for k in kinds:
                if name is None:
                    total += sum(len(table) for table in self._actions[k].values())
                else:
                    total += len(self._actions[k].get(name, {}))
        return total

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data copy of the action table and domain index (ids only)."""
        with self._lock:
            return {
                "actions": {
                    kind.value: {
                        name: list(table) for name, table in self._actions[kind].items()
                    }
                    for kind in HookKind
                },
                "domains": {
                    name: {domain: list(ids) for domain, ids in buckets.items()}
                    for name, buckets in self._domain_index.items()
                },
            }

    def clear(self) -> None:
        with self._lock:
            for kind in HookKind:
                self._actions[kind].clear()
            self._reverse_index.clear()
            self._domain_index.clear()

    def __contains__(self, handler_id: object) -> bool:
        with self._lock:
            return handler_id in self._reverse_index

    def __len__(self) -> int:
        return self.count()

    # Internal helpers; callers hold the lock.

    def _remove(self, handler_id: str) -> Optional[HandlerRecord]:
        location = self._reverse_index.pop(handler_id, None)
        if location is None:
            return None
        kind, name = location
        table = self._actions[kind].get(name, {})
        record = table.pop(handler_id, None)
        if not table:
            self._actions[kind].pop(name, None)
        if record is not None:
            self._discard_from_domain(name, record.domain, handler_id)
        return record

    def _discard_from_domain(self, name: str, domain: str, handler_id: str) -> None:
        bucket = self._domain_index.get(name, {}).get(domain)
        if bucket is None:
            return
        bucket.pop(handler_id, None)
        if not bucket:
            self._drop_domain_bucket(name, domain)

    def _drop_domain_bucket(self, name: str, domain: str) -> None:
        buckets = self._domain_index.get(name)
        if buckets is None:
            return
        buckets.pop(domain, None)
        if not buckets:
            del self._domain_index[name]
