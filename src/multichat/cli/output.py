"""Output formatting helpers using Rich."""

from __future__ import annotations

import json
import sys
from typing import Any

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from multichat.schemas import AggregateResult

# Shared console instances
console = Console()
err_console = Console(stderr=True)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[bold red]Error:[/bold red] {message}")


def print_json(data: Any, *, indent: int | None = 2) -> None:
    """Print data as JSON."""
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json", exclude_none=True)
    print(json.dumps(data, indent=indent, default=str, ensure_ascii=False))


def print_result(result: AggregateResult) -> None:
    """Render one service's batch answer as a panel."""
    if result.error:
        console.print(
            Panel(
                f"[red]{result.error}[/red]",
                title=f"{result.service} [dim]({result.error_type})[/dim]",
                border_style="red",
            )
        )
        return
    console.print(Panel(Markdown(result.response), title=result.service, border_style="blue"))


def print_stream_label(service: str) -> None:
    """Start a new line of output for a service."""
    console.print()
    console.print(f"[bold cyan]{service}:[/bold cyan] ", end="")


def print_streaming_token(token: str) -> None:
    """Print a streaming token without newline."""
    sys.stdout.write(token)
    sys.stdout.flush()


def print_streaming_done() -> None:
    """Print newline after streaming is complete."""
    print()


def print_check_table(rows: list[dict[str, Any]]) -> None:
    """Print per-service check results."""
    table = Table(title="Service check")
    table.add_column("Service", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Time (ms)", justify="right", style="yellow")
    table.add_column("Detail", max_width=60)

    for row in rows:
        status = "[green]ok[/green]" if row["ok"] else f"[red]{row['error_type']}[/red]"
        table.add_row(row["service"], status, str(row["duration_ms"]), row["detail"])

    console.print(table)


def print_bench_table(runs: list[dict[str, Any]]) -> None:
    """Print streaming benchmark runs and their averages."""
    table = Table(title="Streaming benchmark")
    table.add_column("Run", justify="right", style="cyan")
    table.add_column("First chunk (ms)", justify="right", style="yellow")
    table.add_column("Total (ms)", justify="right", style="yellow")
    table.add_column("Chunks", justify="right", style="green")
    table.add_column("Events", justify="right", style="green")
    table.add_column("Bytes", justify="right", style="green")

    for run in runs:
        table.add_row(
            str(run["run"]),
            str(run["first_chunk_ms"]),
            str(run["total_ms"]),
            str(run["chunks"]),
            str(run["events"]),
            str(run["bytes"]),
        )

    if len(runs) > 1:
        table.add_section()
        table.add_row(
            "avg",
            *(
                str(sum(run[key] for run in runs) // len(runs))
                for key in ("first_chunk_ms", "total_ms", "chunks", "events", "bytes")
            ),
        )

    console.print(table)
