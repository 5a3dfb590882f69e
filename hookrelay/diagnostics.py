"""
Operator-facing diagnostics: run summaries, registry statistics and a
``rich`` rendering of the handler table.
"""

from typing import Any, Dict, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import HookKind, RunContext
from .priority import band_for
from .registry import HookRegistry


def format_run_summary(context: RunContext) -> str:
    """Plain-text summary of one ``run``/``run_sync`` invocation."""
    total = context.executed_handlers
    if not total:
        return f"No handlers executed for '{context.hook}'"

    failed = len(context.errors)
    summary = [
        f"Hook '{context.hook}': executed {total} handler(s)",
        f"Successful: {total - failed}",
        f"Failed: {failed}",
        f"Total duration: {context.total_duration_ms:.2f}ms",
    ]
    if failed:
        summary.append("\nFailed handlers:")
        for handler_id, exc in context.errors.items():
            summary.append(f"  - {handler_id}")
            summary.append(f"    Error: {type(exc).__name__}: {exc}")
    return "\n".join(summary)


def get_registry_stats(registry: HookRegistry) -> Dict[str, Any]:
    """Get statistics about a registry."""
    snapshot = registry.snapshot()
    stats: Dict[str, Any] = {
        "total_handlers": 0,
        "by_kind": {},
        "by_hook": {},
        "domains": {},
    }

    for kind_value, tables in snapshot["actions"].items():
        count = sum(len(ids) for ids in tables.values())
        stats["by_kind"][kind_value] = count
        stats["total_handlers"] += count
        for name, ids in tables.items():
            stats["by_hook"].setdefault(name, {})[kind_value] = len(ids)

    for name, buckets in snapshot["domains"].items():
        stats["domains"][name] = {domain: len(ids) for domain, ids in buckets.items()}

    return stats


def build_registry_table(
    source: Any,
    kind: Optional[HookKind] = None,
) -> Table:
    """
    Render registered handlers as a ``rich`` table in dispatch order.

    ``source`` is a HookEngine or a HookRegistry. Pass ``kind`` to limit the
    table to one execution path.
    """
    registry: HookRegistry = getattr(source, "registry", source)
    kinds = list(HookKind) if kind is None else [HookKind(kind)]

    table = Table(title="Registered hooks", header_style="bold cyan")
    table.add_column("Hook", style="bold")
    table.add_column("Kind")
    table.add_column("Order", justify="right")
    table.add_column("Band", style="dim")
    table.add_column("Domain", style="magenta")
    table.add_column("Handler id", style="dim")
    table.add_column("Callback")

    for k in kinds:
        for name in registry.list(k):
            for record in registry.handlers(name, k):
                table.add_row(
                    name,
                    Text(k.value, style="green" if k is HookKind.ASYNC else "yellow"),
                    str(record.order),
                    band_for(record.order),
                    record.domain,
                    record.id,
                    record.callback_name,
                )

    return table


def print_registry(
    source: Any,
    console: Optional[Console] = None,
    kind: Optional[HookKind] = None,
) -> None:
    console = console or Console()
    registry: HookRegistry = getattr(source, "registry", source)
    if not registry.count():
        console.print("[dim]No hooks registered[/dim]")
        return
    console.print(build_registry_table(registry, kind))
