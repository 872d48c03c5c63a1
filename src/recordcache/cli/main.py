"""
CLI for the record cache.

Commands:
    recordcache demo - Run the organisation store walkthrough against the in-memory backend
    recordcache config - Show current configuration
    recordcache version - Print version
"""

from __future__ import annotations

import asyncio
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from recordcache import __version__
from recordcache.backends.memory import InMemoryBackend, demo_orgs
from recordcache.cache.store import CacheStore
from recordcache.config import Settings, clear_settings_cache, get_settings
from recordcache.logging import setup_logging
from recordcache.types import CacheOptions

app = typer.Typer(
    name="recordcache",
    help="Record cache - TTL-gated client-side caching over a record backend",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)


def _get_settings_safe() -> Settings | None:
    """Get settings, returning None if configuration is invalid."""
    try:
        clear_settings_cache()
        return get_settings()
    except Exception:
        return None


def _org_uid(org: dict[str, Any]) -> int:
    return org["id"]


def _cache_table(store: CacheStore[dict[str, Any]]) -> Table:
    table = Table(title=f"Cache: {store.name}")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name")
    table.add_column("Last Fetched", style="dim")
    for entry in store.entries:
        table.add_row(
            str(entry.item["id"]),
            entry.item["name"],
            entry.last_fetched.strftime("%H:%M:%S.%f")[:-3],
        )
    return table


async def run_demo(
    backend: InMemoryBackend,
    options: CacheOptions[dict[str, Any]],
) -> CacheStore[dict[str, Any]]:
    """Walk through the organisation store scenario.

    Fetches the collection, reads one org twice (the second read is a cache
    hit), renames it through a binding, re-reads it within the TTL and
    creates a new org.
    """
    store: CacheStore[dict[str, Any]] = CacheStore(backend, options, name="orgs")

    orgs = await store.fetch_all()
    console.print(f"Fetched [bold]{len(orgs or [])}[/bold] orgs")

    first = await store.fetch_one(1)
    again = await store.fetch_one(1)
    console.print(f"fetch_one(1) -> {first}, then {again} (cached)")

    binding = store.bind(1)
    await binding.load()
    if binding.value is not None:
        binding.value = {**binding.value, "name": "Org 1 renamed"}
        await binding.save()
    console.print(f"After save: {await store.fetch_one(1)}")

    created = await store.create({"name": "Org 5", "id": 5})
    console.print(f"Created: {created}")

    return store


@app.command()
def demo(
    latency_ms: Annotated[
        Optional[int],
        typer.Option("--latency-ms", "-l", help="Simulated backend latency in ms"),
    ] = None,
    ttl_ms: Annotated[
        Optional[int],
        typer.Option(
            "--ttl-ms", "-t", help="TTL for both cache windows in ms (defaults to settings)"
        ),
    ] = None,
) -> None:
    """Run the organisation store walkthrough against the in-memory backend."""
    settings = _get_settings_safe()
    if settings is None:
        error_console.print(
            "[red]Error:[/red] Configuration is invalid. "
            "Run 'recordcache config' to see what's wrong."
        )
        raise typer.Exit(1)

    setup_logging(settings.LOG_LEVEL)

    effective_latency = latency_ms if latency_ms is not None else settings.DEMO_LATENCY_MS
    if effective_latency < 0 or (ttl_ms is not None and ttl_ms < 0):
        error_console.print("[red]Error:[/red] latency and TTL must be non-negative")
        raise typer.Exit(1)

    if ttl_ms is None:
        options = settings.cache_options(_org_uid)
    else:
        options = CacheOptions(
            all_items_cache_ms=ttl_ms, single_item_cache_ms=ttl_ms, get_uid=_org_uid
        )

    backend = InMemoryBackend(demo_orgs(), latency_ms=effective_latency)

    console.print()
    console.print(
        Panel(
            f"[bold]Backend:[/bold] in-memory ({effective_latency} ms latency)\n"
            f"[bold]Collection TTL:[/bold] {options.all_items_cache_ms} ms\n"
            f"[bold]Record TTL:[/bold] {options.single_item_cache_ms} ms",
            title="[bold blue]Record Cache Demo[/bold blue]",
            border_style="blue",
        )
    )

    store = asyncio.run(run_demo(backend, options))

    console.print()
    console.print(_cache_table(store))

    calls = Table(title="Backend Calls")
    calls.add_column("Operation", style="cyan")
    calls.add_column("Calls", justify="right")
    for operation in ("fetch_all", "fetch_one", "update", "create"):
        calls.add_row(operation, str(backend.calls[operation]))
    console.print(calls)


@app.command()
def config() -> None:
    """Show current configuration."""
    settings = _get_settings_safe()
    if settings is None:
        error_console.print("[red]Error:[/red] Configuration is invalid.")
        try:
            clear_settings_cache()
            get_settings()
        except Exception as e:
            error_console.print(str(e))
        raise typer.Exit(1)

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in settings.display().items():
        table.add_row(key, "[dim]not set[/dim]" if value is None else str(value))
    console.print(table)


@app.command()
def version() -> None:
    """Print version."""
    console.print(f"recordcache {__version__}")


if __name__ == "__main__":
    app()
